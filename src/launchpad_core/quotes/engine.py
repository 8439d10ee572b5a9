from decimal import Decimal
from typing import Optional, Union

from launchpad_core.common.enums import GraduationStatus, OrderSide, QuoteError, QuoteSource
from launchpad_core.common.math import BPS_DENOMINATOR, PRICE_SCALE, U64_MAX, coerce_amount, impact_bps
from launchpad_core.common.model import CurveConfig, PricingSnapshot, Quote, QuoteResult
from launchpad_core.curves.single.base import CurveModel
from launchpad_core.curves.single.linear import LinearCurveModel
from launchpad_core.curves.utils.amm_curve_helper import ConstantProductHelper as amm

Amount = Union[int, float, Decimal]


class QuotationEngine:
    """
    Exact buy/sell simulation against whichever pricing source the snapshot carries.

    Every call is a pure function of (amount, snapshot, config, fee_bps): integer arithmetic
    only, no clock, no I/O, no mutation. Errors come back as QuoteResult failures; nothing is
    raised for a bad trade amount.

    Bonding phase:
      buy  -> largest Δ with ∫[x, x+Δ] P = sol_in (rounded down), rejected past total supply
      sell -> ∫[x-Δ, x] P rounded down, rejected when Δ exceeds tokens sold
    Graduated phase (constant product, optional explicit fee):
      buy  -> tokens_out = T - S*T/(S + sol_in)
      sell -> sol_out    = S - S*T/(T + tokens_in), rejected when tokens_in exceeds the tokens
              that have left the pool (total_supply - T)
    """

    def __init__(self, curve: Optional[CurveModel] = None):
        self.curve = curve or LinearCurveModel()

    @staticmethod
    def validate_amount(amount: Amount) -> Optional[int]:
        """The amount as an int if it is positive, finite, integral and fits a u64; else None."""
        value = coerce_amount(amount)
        if value is None or value <= 0 or value > U64_MAX:
            return None
        return value

    @staticmethod
    def _validate_fee(fee_bps: int):
        if not 0 <= fee_bps < BPS_DENOMINATOR:
            raise ValueError("Fee must be in [0, 10000) basis points.")

    def spot_price(self, snapshot: PricingSnapshot, config: CurveConfig) -> int:
        """Current price from the snapshot's single pricing source."""
        if snapshot.status == GraduationStatus.GRADUATED:
            pool = snapshot.pool_state
            return amm.spot_price(pool.sol_reserves, pool.token_reserves)
        return self.curve.price(snapshot.curve_state.tokens_sold, config)

    def buy_quote(
        self,
        sol_in: Amount,
        snapshot: PricingSnapshot,
        config: CurveConfig,
        fee_bps: int = 0,
    ) -> QuoteResult:
        """
        Quotes spending 'sol_in' lamports.

        :param sol_in: lamports to spend, positive and integral
        :param snapshot: PricingSnapshot - the status and state read for this operation
        :param config: CurveConfig
        :param fee_bps: explicit pool fee in basis points, graduated phase only
        :return: QuoteResult
        """
        self._validate_fee(fee_bps)
        amount = self.validate_amount(sol_in)
        if amount is None:
            return QuoteResult.failure(QuoteError.INVALID_AMOUNT, snapshot.flags)

        if snapshot.status == GraduationStatus.GRADUATED:
            return self._pool_buy(amount, snapshot, fee_bps)
        return self._curve_buy(amount, snapshot, config)

    def sell_quote(
        self,
        tokens_in: Amount,
        snapshot: PricingSnapshot,
        config: CurveConfig,
        fee_bps: int = 0,
    ) -> QuoteResult:
        """
        Quotes selling 'tokens_in' raw token units.

        :param tokens_in: raw token units to sell, positive and integral
        :param snapshot: PricingSnapshot - the status and state read for this operation
        :param config: CurveConfig
        :param fee_bps: explicit pool fee in basis points, graduated phase only
        :return: QuoteResult
        """
        self._validate_fee(fee_bps)
        amount = self.validate_amount(tokens_in)
        if amount is None:
            return QuoteResult.failure(QuoteError.INVALID_AMOUNT, snapshot.flags)

        if snapshot.status == GraduationStatus.GRADUATED:
            return self._pool_sell(amount, snapshot, config, fee_bps)
        return self._curve_sell(amount, snapshot, config)

    def _curve_buy(self, sol_in: int, snapshot: PricingSnapshot, config: CurveConfig) -> QuoteResult:
        tokens_sold = snapshot.curve_state.tokens_sold
        if tokens_sold > config.total_supply:
            return QuoteResult.failure(QuoteError.INSUFFICIENT_SUPPLY, snapshot.flags)

        tokens_out = self.curve.tokens_for_sol(sol_in, tokens_sold, config)
        if tokens_sold + tokens_out > config.total_supply:
            return QuoteResult.failure(QuoteError.INSUFFICIENT_SUPPLY, snapshot.flags)
        if tokens_out == 0:
            return QuoteResult.failure(QuoteError.INVALID_AMOUNT, snapshot.flags)

        pre_price = self.curve.price(tokens_sold, config)
        post_price = self.curve.price(tokens_sold + tokens_out, config)
        return QuoteResult.success(Quote(
            direction=OrderSide.BUY,
            amount_in=sol_in,
            amount_out=tokens_out,
            pre_trade_price=pre_price,
            post_trade_price=post_price,
            price_impact_bps=impact_bps(pre_price, post_price),
            avg_price=(sol_in * PRICE_SCALE) // tokens_out,
            status=GraduationStatus.BONDING,
            source=QuoteSource.LOCAL_CURVE,
            flags=snapshot.flags,
        ))

    def _curve_sell(self, tokens_in: int, snapshot: PricingSnapshot, config: CurveConfig) -> QuoteResult:
        tokens_sold = snapshot.curve_state.tokens_sold
        if tokens_in > tokens_sold:
            return QuoteResult.failure(QuoteError.INSUFFICIENT_RESERVE, snapshot.flags)

        sol_out = self.curve.sale_return(tokens_sold, tokens_in, config)
        if sol_out == 0:
            return QuoteResult.failure(QuoteError.INVALID_AMOUNT, snapshot.flags)

        pre_price = self.curve.price(tokens_sold, config)
        post_price = self.curve.price(tokens_sold - tokens_in, config)
        return QuoteResult.success(Quote(
            direction=OrderSide.SELL,
            amount_in=tokens_in,
            amount_out=sol_out,
            pre_trade_price=pre_price,
            post_trade_price=post_price,
            price_impact_bps=impact_bps(pre_price, post_price),
            avg_price=(sol_out * PRICE_SCALE) // tokens_in,
            status=GraduationStatus.BONDING,
            source=QuoteSource.LOCAL_CURVE,
            flags=snapshot.flags,
        ))

    @staticmethod
    def _pool_buy(sol_in: int, snapshot: PricingSnapshot, fee_bps: int) -> QuoteResult:
        pool = snapshot.pool_state
        net_in, fee = amm.split_fee(sol_in, fee_bps)
        tokens_out = amm.tokens_out(net_in, pool.sol_reserves, pool.token_reserves)
        if tokens_out == 0:
            return QuoteResult.failure(QuoteError.INVALID_AMOUNT, snapshot.flags)

        pre_price = amm.spot_price(pool.sol_reserves, pool.token_reserves)
        post_price = amm.spot_price(pool.sol_reserves + net_in, pool.token_reserves - tokens_out)
        return QuoteResult.success(Quote(
            direction=OrderSide.BUY,
            amount_in=sol_in,
            amount_out=tokens_out,
            pre_trade_price=pre_price,
            post_trade_price=post_price,
            price_impact_bps=impact_bps(pre_price, post_price),
            avg_price=(sol_in * PRICE_SCALE) // tokens_out,
            status=GraduationStatus.GRADUATED,
            source=QuoteSource.LOCAL_CURVE,
            fee_paid=fee,
            flags=snapshot.flags,
        ))

    @staticmethod
    def _pool_sell(tokens_in: int, snapshot: PricingSnapshot, config: CurveConfig, fee_bps: int) -> QuoteResult:
        pool = snapshot.pool_state
        outside_pool = max(0, config.total_supply - pool.token_reserves)
        if tokens_in > outside_pool:
            return QuoteResult.failure(QuoteError.INSUFFICIENT_RESERVE, snapshot.flags)

        gross_out = amm.sol_out(tokens_in, pool.sol_reserves, pool.token_reserves)
        sol_out, fee = amm.split_fee(gross_out, fee_bps)
        if sol_out == 0:
            return QuoteResult.failure(QuoteError.INVALID_AMOUNT, snapshot.flags)

        pre_price = amm.spot_price(pool.sol_reserves, pool.token_reserves)
        post_price = amm.spot_price(pool.sol_reserves - gross_out, pool.token_reserves + tokens_in)
        return QuoteResult.success(Quote(
            direction=OrderSide.SELL,
            amount_in=tokens_in,
            amount_out=sol_out,
            pre_trade_price=pre_price,
            post_trade_price=post_price,
            price_impact_bps=impact_bps(pre_price, post_price),
            avg_price=(sol_out * PRICE_SCALE) // tokens_in,
            status=GraduationStatus.GRADUATED,
            source=QuoteSource.LOCAL_CURVE,
            fee_paid=fee,
            flags=snapshot.flags,
        ))
