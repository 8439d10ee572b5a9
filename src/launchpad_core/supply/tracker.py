from decimal import Decimal
from typing import Optional

from launchpad_core.common.config import EngineSettings, get_settings
from launchpad_core.common.enums import SupplySource
from launchpad_core.common.model import SupplyReading
from launchpad_core.sources.base import ChainStateReader, MetadataStore
from launchpad_core.utils.logging import get_logger
from launchpad_core.utils.reads import bounded_read

logger = get_logger(__name__)


class SupplyTracker:
    """
    Resolves how many tokens a launch has sold.

    Sources are tried in strict priority order and the first satisfied one wins:
      1) the metadata store's ledger value (a non-negative hint recorded after each trade)
      2) the on-chain circulating supply of the mint
      3) 0, as a safe floor
    Anything past the ledger is reported as degraded; nothing here raises into pricing.
    """

    def __init__(
        self,
        chain: ChainStateReader,
        store: Optional[MetadataStore] = None,
        settings: Optional[EngineSettings] = None,
    ):
        self.chain = chain
        self.store = store
        self.settings = settings or get_settings()

    async def tokens_sold(self, mint: str) -> SupplyReading:
        timeout_s = self.settings.read_timeout_s

        if self.store is not None:
            ok, hint = await bounded_read(
                self.store.get_tokens_sold_hint(mint), timeout_s, logger, mint=mint, source="ledger"
            )
            if ok and hint is not None and hint >= 0:
                return SupplyReading(tokens_sold=int(hint), source=SupplySource.LEDGER)

        ok, on_chain = await bounded_read(
            self.chain.get_tokens_sold(mint), timeout_s, logger, mint=mint, source="chain"
        )
        if ok and on_chain is not None and on_chain >= 0:
            return SupplyReading(tokens_sold=int(on_chain), source=SupplySource.CHAIN, degraded=True)

        logger.warning("supply_fallback_to_zero", mint=mint)
        return SupplyReading(tokens_sold=0, source=SupplySource.FALLBACK, degraded=True)

    async def tokens_remaining(self, mint: str, total_supply: int) -> int:
        reading = await self.tokens_sold(mint)
        return max(0, total_supply - reading.tokens_sold)

    async def circulating_pct(self, mint: str, total_supply: int) -> Decimal:
        if total_supply <= 0:
            return Decimal("0")
        reading = await self.tokens_sold(mint)
        return Decimal(reading.tokens_sold) * 100 / Decimal(total_supply)
