from decimal import Decimal
from typing import Dict, Optional, Set, Tuple

from launchpad_core.common.config import EngineSettings, get_settings
from launchpad_core.common.enums import DataFlag, GraduationStatus
from launchpad_core.common.model import CurveConfig, PricingSnapshot
from launchpad_core.sources.base import ChainStateReader
from launchpad_core.supply.tracker import SupplyTracker
from launchpad_core.utils.logging import get_logger
from launchpad_core.utils.reads import bounded_read

logger = get_logger(__name__)


class PoolUnavailableError(LookupError):
    """The mint has graduated but its pool reserves could not be read."""

    def __init__(self, mint: str):
        super().__init__(f"Pool reserves unavailable for graduated mint {mint}")
        self.mint = mint


class GraduationPolicy:
    """
    Decides, per mint, whether pricing comes from the bonding curve or the AMM pool.

    BONDING -> GRADUATED is one-way. Once this instance has seen a mint graduate (through the
    chain flag or a reserves event) it keeps answering GRADUATED for that mint. Each pricing
    operation reads the status once via snapshot() and then touches only the matching state,
    so curve and pool prices are never blended.
    """

    def __init__(
        self,
        chain: ChainStateReader,
        supply: SupplyTracker,
        settings: Optional[EngineSettings] = None,
    ):
        self.chain = chain
        self.supply = supply
        self.settings = settings or get_settings()
        self._graduated: Set[str] = set()
        self._last_known: Dict[str, GraduationStatus] = {}

    @property
    def threshold(self) -> int:
        return self.settings.graduation_threshold_lamports

    @staticmethod
    def graduation_status(sol_reserves: int, threshold: int) -> GraduationStatus:
        """GRADUATED once the collected SOL reaches 'threshold' lamports."""
        if sol_reserves >= threshold:
            return GraduationStatus.GRADUATED
        return GraduationStatus.BONDING

    @staticmethod
    def graduation_progress(sol_reserves: int, threshold: int) -> Tuple[Decimal, int]:
        """
        Returns (percent toward 'threshold' capped at 100, lamports still missing).
        """
        if threshold <= 0:
            raise ValueError("threshold must be positive")
        collected = max(0, sol_reserves)
        pct = min(Decimal("100"), Decimal(collected) * 100 / Decimal(threshold))
        return pct, max(0, threshold - collected)

    def status_for_reserves(self, sol_reserves: int) -> GraduationStatus:
        return self.graduation_status(sol_reserves, self.threshold)

    def progress(self, sol_reserves: int) -> Tuple[Decimal, int]:
        return self.graduation_progress(sol_reserves, self.threshold)

    def record_reserves(self, mint: str, sol_reserves: int) -> GraduationStatus:
        """
        Handles a reserves update for 'mint'. Crossing the threshold latches the mint as graduated.
        """
        if self.status_for_reserves(sol_reserves) == GraduationStatus.GRADUATED:
            self._latch(mint)
        return self._current(mint)

    def _latch(self, mint: str):
        if mint not in self._graduated:
            logger.info("launch_graduated", mint=mint)
        self._graduated.add(mint)
        self._last_known[mint] = GraduationStatus.GRADUATED

    def _current(self, mint: str) -> GraduationStatus:
        if mint in self._graduated:
            return GraduationStatus.GRADUATED
        return self._last_known.get(mint, GraduationStatus.BONDING)

    async def status(self, mint: str) -> GraduationStatus:
        if mint in self._graduated:
            return GraduationStatus.GRADUATED

        ok, flag = await bounded_read(
            self.chain.get_graduation_flag(mint),
            self.settings.read_timeout_s,
            logger,
            mint=mint,
            source="graduation_flag",
        )
        if not ok:
            return self._current(mint)

        status = GraduationStatus.from_flag(bool(flag))
        if status == GraduationStatus.GRADUATED:
            self._latch(mint)
        else:
            self._last_known[mint] = status
        return status

    async def snapshot(self, mint: str, config: CurveConfig) -> PricingSnapshot:
        """
        Reads the status once and then only the state that status prices from.
        Raises PoolUnavailableError for a graduated mint whose pool cannot be read; the curve is
        never used as a stand-in for a graduated mint.
        """
        status = await self.status(mint)

        if status == GraduationStatus.GRADUATED:
            ok, pool = await bounded_read(
                self.chain.get_pool_reserves(mint),
                self.settings.read_timeout_s,
                logger,
                mint=mint,
                source="pool_reserves",
            )
            if not ok or pool is None:
                raise PoolUnavailableError(mint)
            return PricingSnapshot(status=status, pool_state=pool)

        reading = await self.supply.tokens_sold(mint)
        degraded = reading.degraded
        tokens_sold = reading.tokens_sold
        if tokens_sold > config.total_supply:
            logger.warning("tokens_sold_exceeds_supply", mint=mint, tokens_sold=tokens_sold)
            tokens_sold = config.total_supply
            degraded = True
        flags = frozenset({DataFlag.DEGRADED_SUPPLY_DATA}) if degraded else frozenset()
        return PricingSnapshot.bonding(tokens_sold, flags)
