import dataclasses
from abc import ABC, abstractmethod
from typing import Optional

from launchpad_core.common.config import EngineSettings, get_settings
from launchpad_core.common.enums import OrderSide, QuoteError, QuoteSource
from launchpad_core.common.model import CurveConfig, QuoteResult
from launchpad_core.graduation.policy import GraduationPolicy, PoolUnavailableError
from launchpad_core.quotes.engine import Amount, QuotationEngine
from launchpad_core.sources.base import LiveQuoteService
from launchpad_core.utils.logging import get_logger
from launchpad_core.utils.reads import bounded_read

logger = get_logger(__name__)


class QuoteStrategy(ABC):
    """
    One way of obtaining a quote. Every strategy returns the same QuoteResult contract and
    rejects a bad amount before doing any I/O.
    """
    source: QuoteSource

    @abstractmethod
    async def quote(self, mint: str, side: OrderSide, amount: Amount, config: CurveConfig) -> QuoteResult:
        pass

    async def buy_quote(self, mint: str, sol_in: Amount, config: CurveConfig) -> QuoteResult:
        return await self.quote(mint, OrderSide.BUY, sol_in, config)

    async def sell_quote(self, mint: str, tokens_in: Amount, config: CurveConfig) -> QuoteResult:
        return await self.quote(mint, OrderSide.SELL, tokens_in, config)


class LocalQuoteStrategy(QuoteStrategy):
    """Deterministic calculator: a policy snapshot fed to the QuotationEngine."""
    source = QuoteSource.LOCAL_CURVE

    def __init__(self, policy: GraduationPolicy, engine: Optional[QuotationEngine] = None, fee_bps: int = 0):
        self.policy = policy
        self.engine = engine or QuotationEngine()
        self.fee_bps = fee_bps

    async def quote(self, mint: str, side: OrderSide, amount: Amount, config: CurveConfig) -> QuoteResult:
        value = QuotationEngine.validate_amount(amount)
        if value is None:
            return QuoteResult.failure(QuoteError.INVALID_AMOUNT)

        try:
            snapshot = await self.policy.snapshot(mint, config)
        except PoolUnavailableError:
            return QuoteResult.failure(QuoteError.SOURCE_UNAVAILABLE)

        if side == OrderSide.BUY:
            return self.engine.buy_quote(value, snapshot, config, fee_bps=self.fee_bps)
        return self.engine.sell_quote(value, snapshot, config, fee_bps=self.fee_bps)


class LiveQuoteStrategy(QuoteStrategy):
    """
    Quotes from the off-chain quoting service. A quote that does not match the request
    (wrong side, wrong amount, empty output) is treated as no quote at all.
    """
    source = QuoteSource.LIVE_SERVICE

    def __init__(self, service: LiveQuoteService, settings: Optional[EngineSettings] = None):
        self.service = service
        self.settings = settings or get_settings()

    async def available(self) -> bool:
        ok, available = await bounded_read(
            self.service.is_available(), self.settings.read_timeout_s, logger, mint="*", source="live_quotes"
        )
        return ok and bool(available)

    async def quote(self, mint: str, side: OrderSide, amount: Amount, config: CurveConfig) -> QuoteResult:
        value = QuotationEngine.validate_amount(amount)
        if value is None:
            return QuoteResult.failure(QuoteError.INVALID_AMOUNT)

        ok, quote = await bounded_read(
            self.service.get_quote(mint, side, value), self.settings.read_timeout_s, logger,
            mint=mint, source="live_quotes",
        )
        if not ok or quote is None:
            return QuoteResult.failure(QuoteError.SOURCE_UNAVAILABLE)
        if quote.direction != side or quote.amount_in != value or quote.amount_out <= 0:
            logger.warning("live_quote_rejected", mint=mint, side=str(side), amount=value)
            return QuoteResult.failure(QuoteError.SOURCE_UNAVAILABLE)
        return QuoteResult.success(dataclasses.replace(quote, source=QuoteSource.LIVE_SERVICE))


class QuoteStrategySelector:
    """
    Picks exactly one strategy per request: the live service when it reports itself available,
    the local calculator otherwise. The chosen strategy's result is returned as is; the two are
    never combined within one quote.
    """

    def __init__(self, local: LocalQuoteStrategy, live: Optional[LiveQuoteStrategy] = None):
        self.local = local
        self.live = live

    async def select(self) -> QuoteStrategy:
        if self.live is not None and await self.live.available():
            return self.live
        return self.local

    async def quote(self, mint: str, side: OrderSide, amount: Amount, config: CurveConfig) -> QuoteResult:
        strategy = await self.select()
        result = await strategy.quote(mint, side, amount, config)
        logger.debug(
            "quote_served",
            mint=mint,
            side=str(side),
            source=str(strategy.source),
            error=str(result.error) if result.error else None,
        )
        return result
