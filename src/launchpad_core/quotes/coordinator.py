import asyncio
import time
from collections import defaultdict
from typing import Callable, DefaultDict, Dict, Optional, Tuple

from launchpad_core.common.config import EngineSettings, get_settings
from launchpad_core.common.enums import OrderSide, QuoteError
from launchpad_core.common.model import CurveConfig, QuoteResult
from launchpad_core.quotes.engine import Amount
from launchpad_core.quotes.strategy import QuoteStrategySelector
from launchpad_core.utils.cache import TTLCache
from launchpad_core.utils.logging import get_logger

logger = get_logger(__name__)

RequestKey = Tuple[str, OrderSide, Amount]
Channel = Tuple[str, OrderSide]


class QuoteCoordinator:
    """
    Front door for interactive quoting (one input box per mint and side).

    - Identical (mint, side, amount) requests inside the cache window share one computation:
      a finished result is served from a TTL cache, an unfinished one is awaited by everyone.
    - Each (mint, side) channel has a generation counter. Every request takes a new generation;
      when its result arrives, it is returned only if no newer request or cancel happened on the
      channel meanwhile. Stale results come back as None.
    - cancel() only bumps the generation. The underlying read is shielded, runs to completion and
      still fills the cache.
    - SOURCE_UNAVAILABLE results are handed to waiting callers but never cached.
    """

    def __init__(
        self,
        selector: QuoteStrategySelector,
        settings: Optional[EngineSettings] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.selector = selector
        self.settings = settings or get_settings()
        self._cache: TTLCache[QuoteResult] = TTLCache(self.settings.quote_cache_ttl_s, clock)
        self._in_flight: Dict[RequestKey, asyncio.Future] = {}
        self._generations: DefaultDict[Channel, int] = defaultdict(int)

    def generation(self, mint: str, side: OrderSide) -> int:
        return self._generations[(mint, side)]

    def cancel(self, mint: str, side: OrderSide) -> None:
        self._generations[(mint, side)] += 1

    async def request(
        self, mint: str, side: OrderSide, amount: Amount, config: CurveConfig
    ) -> Optional[QuoteResult]:
        channel = (mint, side)
        self._generations[channel] += 1
        generation = self._generations[channel]

        result = await self._fetch((mint, side, amount), config)

        if generation != self._generations[channel]:
            logger.debug("stale_quote_dropped", mint=mint, side=str(side), generation=generation)
            return None
        return result

    async def _fetch(self, key: RequestKey, config: CurveConfig) -> QuoteResult:
        cached = self._cache.get(key)
        if cached is not None:
            return cached

        task = self._in_flight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._compute(key, config))
            self._in_flight[key] = task
            task.add_done_callback(lambda _, k=key: self._in_flight.pop(k, None))
        return await asyncio.shield(task)

    async def _compute(self, key: RequestKey, config: CurveConfig) -> QuoteResult:
        mint, side, amount = key
        result = await self.selector.quote(mint, side, amount, config)
        # An outage is not a value; the next request reads again.
        if result.error != QuoteError.SOURCE_UNAVAILABLE:
            self._cache.set(key, result)
        return result
