"""
Interfaces of the external collaborators the engines read from. All reads are async; the
pricing core itself never awaits.
"""

from abc import ABC, abstractmethod
from typing import Optional

from launchpad_core.common.enums import OrderSide
from launchpad_core.common.model import PoolState, Quote


class ChainStateReader(ABC):
    """Live chain state for a launch, as served by the RPC/indexing layer."""

    @abstractmethod
    async def get_tokens_sold(self, mint: str) -> int:
        """Raw token units minted out of the curve, derived from the mint's circulating supply."""

    @abstractmethod
    async def get_pool_reserves(self, mint: str) -> PoolState:
        """Current AMM pool reserves for a graduated launch."""

    @abstractmethod
    async def get_graduation_flag(self, mint: str) -> bool:
        """The launch account's authoritative graduated flag."""


class PriceOracle(ABC):

    @abstractmethod
    async def get_sol_usd_price(self) -> Optional[float]:
        """SOL/USD, or None when the feed has nothing usable."""


class MetadataStore(ABC):
    """Cached launch records kept off-chain, used as a fast path."""

    @abstractmethod
    async def get_tokens_sold_hint(self, mint: str) -> Optional[int]:
        """Tokens sold as recorded after the last confirmed trade, if known."""

    @abstractmethod
    async def get_cached_price(self, mint: str) -> Optional[int]:
        """Last recorded price in price units, if known."""


class LiveQuoteService(ABC):
    """Off-chain quoting service that simulates trades against the deployed program."""

    @abstractmethod
    async def is_available(self) -> bool:
        pass

    @abstractmethod
    async def get_quote(self, mint: str, side: OrderSide, amount: int) -> Optional[Quote]:
        pass
