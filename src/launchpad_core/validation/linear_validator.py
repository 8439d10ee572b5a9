from decimal import Decimal
from typing import Any, Dict, List, Optional

from launchpad_core.common.enums import QuoteError
from launchpad_core.common.math import LAMPORTS_PER_SOL, lamports_to_sol
from launchpad_core.common.model import CurveConfig, PricingSnapshot
from launchpad_core.curves.single.linear import LinearCurveModel
from launchpad_core.quotes.engine import QuotationEngine

# Display prices under one lamport per whole token get rounded away by most wallets.
MIN_DISPLAY_PRICE = Decimal("0.000000001")


class LinearCurveValidator:
    """
    Specialized validator for a linear CurveConfig.
    Performs:
      1) Param checks (price targets, supply, graduation reachability)
      2) Boundary tests (price at 0 and at total supply, zero-size costs, monotonic samples)
      3) Scenario tests (buy then sell the same tokens, overflow past total supply)

    Each step returns a dict with:
      {
        "errors": [str...],
        "warnings": [str...],
        "info": {...}
      }
    and 'run_all_validations' aggregates them into a single result.
    """

    @staticmethod
    def validate_params(config: 'CurveConfig', graduation_threshold: Optional[int] = None) -> Dict[str, Any]:
        """
        A constructed CurveConfig already satisfies the hard rules (positive initial price,
        non-decreasing curve), so this step mostly reports warnings:
          - display prices below one lamport per token
          - a flat curve (terminal == initial)
          - a curve whose full sale raises less than the graduation threshold
        """
        errors: List[str] = []
        warnings: List[str] = []
        info: Dict[str, Any] = {}
        model = LinearCurveModel()

        if config.initial_price < MIN_DISPLAY_PRICE:
            warnings.append(
                f"LinearCurve: 'initial_price' {config.initial_price} SOL is below {MIN_DISPLAY_PRICE} SOL."
            )
        if config.rise == 0:
            warnings.append("LinearCurve: terminal price equals initial price; the curve is flat.")

        full_raise = model.raise_to_complete(0, config)
        if graduation_threshold is not None and full_raise < graduation_threshold:
            errors.append(
                f"LinearCurve: selling the whole supply raises {lamports_to_sol(full_raise)} SOL, "
                f"below the graduation threshold of {lamports_to_sol(graduation_threshold)} SOL."
            )

        info["param_summary"] = {
            "total_supply": str(config.total_supply),
            "decimals": str(config.decimals),
            "initial_price": str(config.initial_price),
            "terminal_price": str(config.terminal_price),
            "base": str(config.base),
            "rise": str(config.rise),
            "full_raise_sol": str(lamports_to_sol(full_raise)),
        }

        return {
            "errors": errors,
            "warnings": warnings,
            "info": info
        }

    @staticmethod
    def boundary_tests(config: 'CurveConfig', model: Optional[LinearCurveModel] = None) -> Dict[str, Any]:
        """
        Calls a few boundary conditions on the curve:
          - price(0) equals the configured base
          - price(total_supply) equals base + rise
          - buy_cost / sale_return of 0 tokens is 0
          - sampled prices never decrease
        """
        errors: List[str] = []
        warnings: List[str] = []
        info: Dict[str, Any] = {}
        model = model or LinearCurveModel()

        if model.initial_price(config) != config.base:
            errors.append("Price at supply=0 does not match the initial price.")
        if model.terminal_price(config) != config.base + config.rise:
            errors.append("Price at total supply does not match the terminal price.")

        if model.buy_cost(0, 0, config) != 0:
            errors.append("Cost to buy 0 tokens is not zero.")
        if model.sale_return(0, 0, config) != 0:
            errors.append("Return for selling 0 tokens is not zero.")

        points = model.curve_points(config, count=101)
        for (x_prev, p_prev), (x_next, p_next) in zip(points, points[1:]):
            if p_next < p_prev:
                errors.append(f"Price decreases between supply {x_prev} and {x_next}.")
                break

        info["boundary_tests_run"] = True
        return {
            "errors": errors,
            "warnings": warnings,
            "info": info
        }

    @staticmethod
    def scenario_tests(config: 'CurveConfig', engine: Optional[QuotationEngine] = None) -> Dict[str, Any]:
        """
        Runs a small scenario from an empty curve:
          1) buy with 1 SOL (or the whole remaining raise if smaller)
          2) sell the received tokens back; the return must be within 1 lamport of the spend
          3) buy one raw token past the total supply; must be rejected
        """
        errors: List[str] = []
        warnings: List[str] = []
        info: Dict[str, Any] = {}
        engine = engine or QuotationEngine()
        model = engine.curve
        start = PricingSnapshot.bonding(0)

        # Step 1: buy
        sol_in = min(LAMPORTS_PER_SOL, model.raise_to_complete(0, config))
        bought = engine.buy_quote(sol_in, start, config)
        if not bought.ok:
            errors.append(f"Buying with {lamports_to_sol(sol_in)} SOL failed: {bought.error}.")
        else:
            tokens = bought.quote.amount_out
            # Step 2: sell back
            sold = engine.sell_quote(tokens, PricingSnapshot.bonding(tokens), config)
            if not sold.ok:
                errors.append(f"Selling {tokens} raw tokens back failed: {sold.error}.")
            else:
                drift = sol_in - sold.quote.amount_out
                info["round_trip_drift_lamports"] = drift
                if drift < 0 or drift > 1:
                    errors.append(f"Buy/sell round trip drifted by {drift} lamports.")

        # Step 3: overflow
        overflow_cost = model.buy_cost(0, config.total_supply + 1, config)
        overflow = engine.buy_quote(overflow_cost, start, config)
        if overflow.error != QuoteError.INSUFFICIENT_SUPPLY:
            errors.append("Buying past the total supply was not rejected.")

        return {
            "errors": errors,
            "warnings": warnings,
            "info": info
        }

    @staticmethod
    def run_all_validations(config: 'CurveConfig', graduation_threshold: Optional[int] = None) -> Dict[str, Any]:
        """
        Aggregates:
          - param check
          - boundary tests
          - scenario tests
        Returns a dict with keys: errors, warnings, info
        """
        if not isinstance(config, CurveConfig):
            raise ValueError("Invalid config type for LinearCurveValidator.")

        results = {
            "errors": [],
            "warnings": [],
            "info": {}
        }

        for step in (
            LinearCurveValidator.validate_params(config, graduation_threshold),
            LinearCurveValidator.boundary_tests(config),
            LinearCurveValidator.scenario_tests(config),
        ):
            results["errors"].extend(step["errors"])
            results["warnings"].extend(step["warnings"])
            results["info"].update(step["info"])

        return results
