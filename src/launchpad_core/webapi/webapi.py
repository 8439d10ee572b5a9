import time
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field

from flask import jsonify
from flask_openapi3 import Info, Tag
from flask_openapi3 import OpenAPI

from launchpad_core.common.config import get_settings
from launchpad_core.common.enums import GraduationStatus, OrderSide
from launchpad_core.common.math import lamports_to_sol, price_units_to_sol_per_token, raw_to_tokens
from launchpad_core.common.model import CurveConfig, PricingSnapshot
from launchpad_core.curves.single.linear import LinearCurveModel
from launchpad_core.graduation.policy import GraduationPolicy
from launchpad_core.market.market_cap import MarketCapEngine
from launchpad_core.quotes.engine import QuotationEngine
from launchpad_core.utils.logging import get_logger, setup_logging

logger = get_logger(__name__)

info = Info(title="Launchpad Pricing API", version="1.0.0")
app = OpenAPI(__name__, info=info)

curve_model = LinearCurveModel()
engine = QuotationEngine(curve_model)


class CurveTransactionAction(Enum):
    buy = "buy"
    sell = "sell"


class CurvePhase(Enum):
    bonding = "bonding"
    graduated = "graduated"


class CurveParams(BaseModel):
    total_supply: int = Field(description="Total curve supply in raw token units")
    decimals: int = Field(9, description="Token decimals")
    initial_price: Decimal = Field(description="Price at zero tokens sold, SOL per whole token")
    terminal_price: Decimal = Field(description="Price at total supply sold, SOL per whole token")


class CurveQuoteRequest(CurveParams):
    action: CurveTransactionAction = Field(description="API action to perform")
    amount: Decimal = Field(description="Lamports to spend (buy) or raw token units to sell (sell)")
    phase: CurvePhase = Field(CurvePhase.bonding, description="Which pricing source applies")
    tokens_sold: int = Field(0, description="Raw token units sold out of the curve")
    sol_reserves: Optional[int] = Field(None, description="Pool SOL reserves in lamports, graduated only")
    token_reserves: Optional[int] = Field(None, description="Pool token reserves in raw units, graduated only")
    fee_bps: int = Field(0, description="Explicit pool fee in basis points, graduated only")


class CurveStatusRequest(CurveParams):
    tokens_sold: int = Field(0, description="Raw token units sold out of the curve")
    points: int = Field(50, description="Number of (supply, price) samples to return")


class CurveMarketCapRequest(CurveQuoteRequest):
    action: CurveTransactionAction = Field(CurveTransactionAction.buy)
    amount: Decimal = Field(Decimal("0"))
    sol_usd_price: Decimal = Field(description="SOL/USD used for the USD columns")


def _error(message: str, status: int = 400):
    response = jsonify({"error": message})
    response.status_code = status
    return response


def _config(params: CurveParams) -> CurveConfig:
    return CurveConfig(
        total_supply=params.total_supply,
        decimals=params.decimals,
        initial_price=params.initial_price,
        terminal_price=params.terminal_price,
    )


def _snapshot(request: CurveQuoteRequest) -> PricingSnapshot:
    if request.phase == CurvePhase.graduated:
        if request.sol_reserves is None or request.token_reserves is None:
            raise ValueError("Graduated pricing needs both sol_reserves and token_reserves.")
        return PricingSnapshot.graduated(request.sol_reserves, request.token_reserves)
    return PricingSnapshot.bonding(request.tokens_sold)


curve_quote_tag = Tag(
    name="Bonding Curve Quote",
    description="Simulate a buy or sell against the curve or the graduated pool",
)


@app.post("/curve/quote", summary="Curve Quote", tags=[curve_quote_tag])
def quote(body: CurveQuoteRequest):
    """
    Quotes a buy or sell. Nothing is executed; the same inputs always give the same quote.
    """
    try:
        config = _config(body)
        snapshot = _snapshot(body)
    except ValueError as exc:
        return _error(str(exc))

    side = OrderSide.from_str(body.action.value)
    try:
        if side == OrderSide.BUY:
            result = engine.buy_quote(body.amount, snapshot, config, fee_bps=body.fee_bps)
        else:
            result = engine.sell_quote(body.amount, snapshot, config, fee_bps=body.fee_bps)
    except ValueError as exc:
        return _error(str(exc))

    if not result.ok:
        return _error(result.error.value)
    return jsonify(result.quote.to_dict(config.decimals))


curve_status_tag = Tag(
    name="Bonding Curve Status",
    description="Get the shape of a bonding curve for plotting and additional info",
)


@app.get("/curve/status", summary="Curve Status", tags=[curve_status_tag])
def status(query: CurveStatusRequest):
    """
    Return a representation of the curve which can be plotted visually by the caller.
    Return the 'midprice' of the curve based on the tokens sold specified by the caller,
    along with the SOL collected so far and the progress toward graduation.
    """
    try:
        config = _config(query)
    except ValueError as exc:
        return _error(str(exc))
    if not 0 <= query.tokens_sold <= config.total_supply:
        return _error("tokens_sold must be between 0 and total_supply.")
    if query.points < 2:
        return _error("points must be at least 2.")

    decimals = config.decimals
    # The curve's SOL reserve is exactly the integral of the price over the tokens sold.
    collected = curve_model.sale_return(query.tokens_sold, query.tokens_sold, config)
    threshold = get_settings().graduation_threshold_lamports
    progress_pct, remaining = GraduationPolicy.graduation_progress(collected, threshold)

    return jsonify({
        "curve": [
            {"supply": str(raw_to_tokens(x, decimals)), "price": str(price_units_to_sol_per_token(p, decimals))}
            for x, p in curve_model.curve_points(config, count=query.points)
        ],
        "midprice": str(price_units_to_sol_per_token(curve_model.price(query.tokens_sold, config), decimals)),
        "tokens_remaining": str(raw_to_tokens(config.total_supply - query.tokens_sold, decimals)),
        "sol_collected": str(lamports_to_sol(collected)),
        "status": GraduationPolicy.graduation_status(collected, threshold).value,
        "graduation_progress_pct": str(progress_pct),
        "sol_to_graduation": str(lamports_to_sol(remaining)),
    })


curve_market_cap_tag = Tag(
    name="Bonding Curve Market Cap",
    description="Compute market cap and fully diluted value at a given state",
)


@app.post("/curve/market-cap", summary="Curve Market Cap", tags=[curve_market_cap_tag])
def market_cap(body: CurveMarketCapRequest):
    """
    Market cap from the caller-supplied state and SOL/USD price. While bonding the circulating
    supply is the tokens sold; once graduated it is whatever the caller reports as tokens_sold.
    """
    try:
        config = _config(body)
        snapshot = _snapshot(body)
    except ValueError as exc:
        return _error(str(exc))
    if body.sol_usd_price <= 0:
        return _error("sol_usd_price must be positive.")

    result = MarketCapEngine.build_snapshot(
        mint="-",
        price=engine.spot_price(snapshot, config),
        circulating_supply=min(body.tokens_sold, config.total_supply),
        config=config,
        sol_usd_price=body.sol_usd_price,
        status=GraduationStatus.GRADUATED if body.phase == CurvePhase.graduated else GraduationStatus.BONDING,
        timestamp_ms=int(time.time() * 1000),
    )
    return jsonify(result.to_dict(config.decimals))


if __name__ == "__main__":
    setup_logging(get_settings())
    logger.info("webapi_starting")
    app.run(debug=True)
