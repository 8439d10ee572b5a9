"""
Market cap tracking.

A snapshot composes three things:
  - the current price (curve price while bonding, pool ratio once graduated, or the metadata
    store's cached price when it has one)
  - the circulating supply (tokens sold, via the SupplyTracker)
  - SOL/USD from the price oracle, cached, with a flagged fallback when the oracle is down
Snapshots are cached per mint for a fixed TTL and appended to a capped per-mint history.
"""

import dataclasses
import math
import time
from collections import deque
from decimal import Decimal
from typing import Callable, Deque, Dict, FrozenSet, List, Optional, Set, Tuple, Union

from launchpad_core.common.config import EngineSettings, get_settings
from launchpad_core.common.enums import DataFlag, GraduationStatus, TimeWindow
from launchpad_core.common.math import PRICE_SCALE, lamports_to_sol, price_units_to_sol_per_token
from launchpad_core.common.model import CurveConfig, MarketCapSnapshot
from launchpad_core.graduation.policy import GraduationPolicy, PoolUnavailableError
from launchpad_core.quotes.engine import QuotationEngine
from launchpad_core.sources.base import MetadataStore, PriceOracle
from launchpad_core.utils.cache import TTLCache
from launchpad_core.utils.logging import get_logger
from launchpad_core.utils.reads import bounded_read

logger = get_logger(__name__)

_SOL_USD_KEY = "SOL/USD"


def _wall_clock_ms() -> int:
    return int(time.time() * 1000)


class MarketCapEngine:

    def __init__(
        self,
        policy: GraduationPolicy,
        oracle: PriceOracle,
        store: Optional[MetadataStore] = None,
        engine: Optional[QuotationEngine] = None,
        settings: Optional[EngineSettings] = None,
        clock: Callable[[], float] = time.monotonic,
        now_ms: Callable[[], int] = _wall_clock_ms,
    ):
        self.policy = policy
        self.oracle = oracle
        self.store = store
        self.engine = engine or QuotationEngine()
        self.settings = settings or get_settings()
        self._now_ms = now_ms
        self._snapshots: TTLCache[MarketCapSnapshot] = TTLCache(self.settings.market_cap_cache_ttl_s, clock)
        self._sol_usd: TTLCache[Decimal] = TTLCache(self.settings.market_cap_cache_ttl_s, clock)
        self._last_good_sol_usd: Optional[Decimal] = None
        self._history: Dict[str, Deque[MarketCapSnapshot]] = {}

    @staticmethod
    def build_snapshot(
        mint: str,
        price: int,
        circulating_supply: int,
        config: CurveConfig,
        sol_usd_price: Decimal,
        status: GraduationStatus,
        timestamp_ms: int,
        flags: FrozenSet[DataFlag] = frozenset(),
    ) -> MarketCapSnapshot:
        """
        Pure composition of a snapshot. Caps are price * supply in lamports, rounded down.
        """
        market_cap = (price * circulating_supply) // PRICE_SCALE
        fully_diluted = (price * config.total_supply) // PRICE_SCALE
        sol_usd = Decimal(sol_usd_price)
        return MarketCapSnapshot(
            mint=mint,
            timestamp_ms=timestamp_ms,
            price=price,
            price_usd=price_units_to_sol_per_token(price, config.decimals) * sol_usd,
            circulating_supply=circulating_supply,
            total_supply=config.total_supply,
            market_cap=market_cap,
            market_cap_usd=lamports_to_sol(market_cap) * sol_usd,
            fully_diluted_market_cap=fully_diluted,
            fully_diluted_market_cap_usd=lamports_to_sol(fully_diluted) * sol_usd,
            sol_usd_price=sol_usd,
            status=status,
            flags=frozenset(flags),
        )

    async def market_cap(self, mint: str, config: CurveConfig) -> MarketCapSnapshot:
        """
        Current snapshot for 'mint', served from cache while younger than the TTL.

        When a graduated mint's pool cannot be read, the newest snapshot in its history is
        returned flagged POOL_UNAVAILABLE; it is neither cached nor appended again, so the next
        call reads the pool. Raises PoolUnavailableError only when there is no history to fall
        back to.
        """
        cached = self._snapshots.get(mint)
        if cached is not None:
            return cached

        try:
            price, circulating, status, flags = await self._resolve_price(mint, config)
        except PoolUnavailableError:
            history = self._history.get(mint)
            if not history:
                raise
            logger.warning("pool_unavailable_serving_last_snapshot", mint=mint)
            latest = history[-1]
            return dataclasses.replace(latest, flags=latest.flags | {DataFlag.POOL_UNAVAILABLE})
        sol_usd, oracle_ok = await self.sol_usd_price()
        if not oracle_ok:
            flags.add(DataFlag.ORACLE_UNAVAILABLE)

        snapshot = self.build_snapshot(
            mint=mint,
            price=price,
            circulating_supply=circulating,
            config=config,
            sol_usd_price=sol_usd,
            status=status,
            timestamp_ms=self._now_ms(),
            flags=frozenset(flags),
        )
        self._snapshots.set(mint, snapshot)
        self._append(snapshot)
        return snapshot

    async def _resolve_price(
        self, mint: str, config: CurveConfig
    ) -> Tuple[int, int, GraduationStatus, Set[DataFlag]]:
        flags: Set[DataFlag] = set()

        cached_price = None
        if self.store is not None:
            ok, cached_price = await bounded_read(
                self.store.get_cached_price(mint), self.settings.read_timeout_s, logger,
                mint=mint, source="cached_price",
            )
            if not ok:
                cached_price = None

        if cached_price is not None and cached_price > 0:
            status = await self.policy.status(mint)
            reading = await self.policy.supply.tokens_sold(mint)
            flags.add(DataFlag.CACHED_PRICE)
            if reading.degraded:
                flags.add(DataFlag.DEGRADED_SUPPLY_DATA)
            return int(cached_price), min(reading.tokens_sold, config.total_supply), status, flags

        snapshot = await self.policy.snapshot(mint, config)
        flags.update(snapshot.flags)
        price = self.engine.spot_price(snapshot, config)

        if snapshot.status == GraduationStatus.BONDING:
            circulating = snapshot.curve_state.tokens_sold
        else:
            reading = await self.policy.supply.tokens_sold(mint)
            if reading.degraded:
                flags.add(DataFlag.DEGRADED_SUPPLY_DATA)
            circulating = min(reading.tokens_sold, config.total_supply)
        return price, circulating, snapshot.status, flags

    async def sol_usd_price(self) -> Tuple[Decimal, bool]:
        """
        Returns (SOL/USD, oracle_ok). When the oracle fails the last good value is used, or the
        configured default if there never was one.
        """
        cached = self._sol_usd.get(_SOL_USD_KEY)
        if cached is not None:
            return cached, True

        ok, value = await bounded_read(
            self.oracle.get_sol_usd_price(), self.settings.read_timeout_s, logger,
            mint="*", source="sol_usd_oracle",
        )
        if ok and value is not None and math.isfinite(value) and value > 0:
            price = Decimal(str(value))
            self._sol_usd.set(_SOL_USD_KEY, price)
            self._last_good_sol_usd = price
            return price, True

        fallback = self._last_good_sol_usd or Decimal(str(self.settings.default_sol_usd_price))
        logger.warning("oracle_unavailable", fallback=str(fallback))
        return fallback, False

    def _append(self, snapshot: MarketCapSnapshot):
        history = self._history.get(snapshot.mint)
        if history is None:
            history = deque(maxlen=self.settings.history_max_points)
            self._history[snapshot.mint] = history
        history.append(snapshot)

    def history(self, mint: str, window: Union[TimeWindow, int] = TimeWindow.ONE_DAY) -> List[MarketCapSnapshot]:
        """
        Snapshots of 'mint' no older than 'window' (a TimeWindow or milliseconds), oldest first.
        """
        window_ms = window.milliseconds if isinstance(window, TimeWindow) else int(window)
        cutoff = self._now_ms() - window_ms
        return [point for point in self._history.get(mint, ()) if point.timestamp_ms >= cutoff]

    def change_pct(self, mint: str, window: Union[TimeWindow, int] = TimeWindow.ONE_DAY) -> Decimal:
        points = self.history(mint, window)
        if len(points) < 2:
            return Decimal("0")

        oldest, newest = points[0], points[-1]
        if oldest.market_cap == 0:
            return Decimal("0")
        return Decimal(newest.market_cap - oldest.market_cap) * 100 / Decimal(oldest.market_cap)

    def clear(self, mint: str):
        self._snapshots.pop(mint)
        self._history.pop(mint, None)
