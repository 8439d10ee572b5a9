import pytest

from decimal import Decimal
from unittest.mock import patch

from launchpad_core.common.model import CurveConfig, QuoteResult
from launchpad_core.common.enums import QuoteError
from launchpad_core.curves.single.linear import LinearCurveModel
from launchpad_core.quotes.engine import QuotationEngine
from launchpad_core.validation.linear_validator import LinearCurveValidator

TOTAL_SUPPLY = 1_000_000 * 10 ** 9


def _make_config(initial="0.00001", terminal="0.0001") -> CurveConfig:
    return CurveConfig(
        total_supply=TOTAL_SUPPLY,
        decimals=9,
        initial_price=Decimal(initial),
        terminal_price=Decimal(terminal),
    )


@pytest.fixture
def valid_config():
    """
    A curve that raises 55 SOL when sold out, enough to reach a 30 SOL graduation threshold.
    """
    return _make_config()


class TestValidateParams:
    def test_valid(self, valid_config):
        """A sensible curve passes with no errors or warnings."""
        result = LinearCurveValidator.validate_params(valid_config, graduation_threshold=30_000_000_000)
        assert result["errors"] == []
        assert result["warnings"] == []
        assert result["info"]["param_summary"]["base"] == str(10 ** 13)
        assert Decimal(result["info"]["param_summary"]["full_raise_sol"]) == Decimal("55")

    def test_unreachable_graduation(self, valid_config):
        """A curve that cannot raise the graduation threshold is an error."""
        result = LinearCurveValidator.validate_params(valid_config, graduation_threshold=60_000_000_000)
        assert len(result["errors"]) == 1
        assert "graduation threshold" in result["errors"][0]

    def test_flat_curve_warning(self):
        """Equal target prices produce a warning, not an error."""
        result = LinearCurveValidator.validate_params(_make_config(terminal="0.00001"))
        assert result["errors"] == []
        assert any("flat" in w for w in result["warnings"])

    def test_tiny_price_warning(self):
        """A starting price below one lamport per token is flagged."""
        result = LinearCurveValidator.validate_params(_make_config(initial="0.0000000001", terminal="0.000001"))
        assert any("initial_price" in w for w in result["warnings"])


class TestBoundaryTests:
    def test_valid(self, valid_config):
        """The linear model passes its own boundary checks."""
        result = LinearCurveValidator.boundary_tests(valid_config)
        assert result["errors"] == []
        assert result["info"]["boundary_tests_run"] is True

    def test_detects_decreasing_price(self, valid_config):
        """A model whose samples decrease is reported."""
        with patch.object(LinearCurveModel, "curve_points", return_value=[(0, 5), (1, 3)]):
            result = LinearCurveValidator.boundary_tests(valid_config)
        assert any("decreases" in e for e in result["errors"])

    def test_detects_wrong_initial_price(self, valid_config):
        """A model that misprices supply 0 is reported."""
        with patch.object(LinearCurveModel, "initial_price", return_value=1):
            result = LinearCurveValidator.boundary_tests(valid_config)
        assert any("supply=0" in e for e in result["errors"])


class TestScenarioTests:
    def test_valid(self, valid_config):
        """Buying with 1 SOL and selling back drifts by at most one lamport."""
        result = LinearCurveValidator.scenario_tests(valid_config)
        assert result["errors"] == []
        assert result["info"]["round_trip_drift_lamports"] in (0, 1)

    def test_small_curve(self):
        """A curve raising less than 1 SOL in total is bought out instead."""
        config = CurveConfig(
            total_supply=1_000 * 10 ** 9,
            decimals=9,
            initial_price=Decimal("0.0001"),
            terminal_price=Decimal("0.0002"),
        )
        result = LinearCurveValidator.scenario_tests(config)
        assert result["errors"] == []

    def test_failed_buy_reported(self, valid_config):
        """A failing buy is turned into an error entry."""
        failure = QuoteResult.failure(QuoteError.SOURCE_UNAVAILABLE)
        with patch.object(QuotationEngine, "buy_quote", return_value=failure):
            result = LinearCurveValidator.scenario_tests(valid_config)
        assert any("SOURCE_UNAVAILABLE" in e for e in result["errors"])


class TestRunAllValidations:
    def test_aggregates(self, valid_config):
        """All three steps are merged into one report."""
        result = LinearCurveValidator.run_all_validations(valid_config, graduation_threshold=30_000_000_000)
        assert result["errors"] == []
        assert "param_summary" in result["info"]
        assert "boundary_tests_run" in result["info"]
        assert "round_trip_drift_lamports" in result["info"]

    def test_invalid_type(self):
        """Anything but a CurveConfig is rejected."""
        with pytest.raises(ValueError):
            LinearCurveValidator.run_all_validations({"initial_price": 1})
