"""
In-memory implementations of the source interfaces, for local runs, demos and tests. Each
records how often it was read and can be told to fail or stall.
"""

import asyncio
from collections import Counter
from typing import Dict, Optional

from launchpad_core.common.enums import OrderSide
from launchpad_core.common.model import PoolState, Quote
from launchpad_core.sources.base import ChainStateReader, LiveQuoteService, MetadataStore, PriceOracle


class SourceUnavailableError(ConnectionError):
    """Raised by the in-memory sources when told to fail."""


class _Recording:

    def __init__(self):
        self.calls: Counter = Counter()
        self.failing = False
        self.delay_s = 0.0

    async def _read(self, name: str):
        self.calls[name] += 1
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        if self.failing:
            raise SourceUnavailableError(f"{type(self).__name__}.{name} unavailable")


class InMemoryChainState(_Recording, ChainStateReader):

    def __init__(self):
        super().__init__()
        self.tokens_sold: Dict[str, int] = {}
        self.pools: Dict[str, PoolState] = {}
        self.graduated: Dict[str, bool] = {}

    async def get_tokens_sold(self, mint: str) -> int:
        await self._read("get_tokens_sold")
        return self.tokens_sold[mint]

    async def get_pool_reserves(self, mint: str) -> PoolState:
        await self._read("get_pool_reserves")
        return self.pools[mint]

    async def get_graduation_flag(self, mint: str) -> bool:
        await self._read("get_graduation_flag")
        return self.graduated.get(mint, False)


class InMemoryPriceOracle(_Recording, PriceOracle):

    def __init__(self, sol_usd_price: Optional[float] = None):
        super().__init__()
        self.sol_usd_price = sol_usd_price

    async def get_sol_usd_price(self) -> Optional[float]:
        await self._read("get_sol_usd_price")
        return self.sol_usd_price


class InMemoryMetadataStore(_Recording, MetadataStore):

    def __init__(self):
        super().__init__()
        self.tokens_sold_hints: Dict[str, int] = {}
        self.cached_prices: Dict[str, int] = {}

    async def get_tokens_sold_hint(self, mint: str) -> Optional[int]:
        await self._read("get_tokens_sold_hint")
        return self.tokens_sold_hints.get(mint)

    async def get_cached_price(self, mint: str) -> Optional[int]:
        await self._read("get_cached_price")
        return self.cached_prices.get(mint)


class StaticQuoteService(_Recording, LiveQuoteService):
    """Serves pre-registered quotes keyed by (mint, side, amount)."""

    def __init__(self, available: bool = True):
        super().__init__()
        self.available = available
        self.quotes: Dict[tuple, Quote] = {}

    async def is_available(self) -> bool:
        await self._read("is_available")
        return self.available

    async def get_quote(self, mint: str, side: OrderSide, amount: int) -> Optional[Quote]:
        await self._read("get_quote")
        return self.quotes.get((mint, side, amount))
