"""
Tests for snapshot validation and error codes.
"""

import pytest
from pydantic import ValidationError

from portfolio_calculator import (
    Asset,
    ErrorCode,
    FeeConfig,
    PortfolioSnapshot,
    RebalanceRequest,
    ScenarioRequest,
    TargetAsset,
    TargetsRequest,
    errors_from_validation,
)


def _error_type(exc_info):
    return exc_info.value.errors()[0]["type"]


def test_asset_normalization():
    """Tickers are upper-cased, shares quantized to 4 places, sector defaulted."""
    asset = Asset(ticker="  aapl ", buy_price=150, shares=1.234567, sector="  ")

    assert asset.ticker == "AAPL"
    assert asset.shares == 1.2346
    assert asset.sector == "Other"
    assert asset.take_profit_pct is None
    assert asset.invested_value == pytest.approx(150 * 1.2346)


def test_asset_accepts_arithmetic_input():
    asset = Asset(ticker="MSFT", buy_price="300/2", shares="(10 + 2) * 2")

    assert asset.buy_price == 150.0
    assert asset.shares == 24.0


def test_asset_rejects_code_in_expression():
    with pytest.raises(ValidationError) as exc_info:
        Asset(ticker="X", buy_price="__import__('os').getcwd()", shares=1)

    assert _error_type(exc_info) == "INVALID_ASSET"


@pytest.mark.parametrize("fields", [
    {"ticker": "", "buy_price": 10, "shares": 1},
    {"ticker": "X", "buy_price": 0, "shares": 1},
    {"ticker": "X", "buy_price": -5, "shares": 1},
    {"ticker": "X", "buy_price": 10, "shares": -1},
    {"ticker": "X", "buy_price": 10, "shares": 1, "take_profit_pct": -1},
    {"ticker": "X", "buy_price": 10, "shares": 1, "stop_loss_pct": 101},
    {"ticker": "X", "buy_price": 10, "shares": 1, "fee_override": -0.5},
    {"ticker": "X", "buy_price": 10, "shares": 1, "fee_override": 100.5},
])
def test_invalid_asset(fields):
    with pytest.raises(ValidationError) as exc_info:
        Asset(**fields)

    assert _error_type(exc_info) == ErrorCode.INVALID_ASSET.value


def test_target_asset_allows_negative_move():
    """A target price below buy price is a negative derived move."""
    asset = TargetAsset(ticker="X", buy_price=10, shares=1, take_profit_pct=-25)
    assert asset.take_profit_pct == -25

    with pytest.raises(ValidationError):
        TargetAsset(ticker="X", buy_price=10, shares=1, take_profit_pct=-101)


@pytest.mark.parametrize("fields", [
    {"percentage": -1},
    {"percentage": 100.01},
    {"flat": -0.01},
])
def test_invalid_fee_config(fields):
    with pytest.raises(ValidationError) as exc_info:
        FeeConfig(**fields)

    assert _error_type(exc_info) == "INVALID_FEE_CONFIG"


def test_invalid_capital(aapl):
    with pytest.raises(ValidationError) as exc_info:
        PortfolioSnapshot(capital=0, assets=[aapl])

    assert _error_type(exc_info) == "INVALID_CAPITAL"


def test_no_assets():
    with pytest.raises(ValidationError) as exc_info:
        PortfolioSnapshot(capital=1000, assets=[])

    assert _error_type(exc_info) == "NO_ASSETS"


def test_duplicate_tickers_rejected():
    with pytest.raises(ValidationError) as exc_info:
        PortfolioSnapshot(capital=1000, assets=[
            {"ticker": "abc", "buy_price": 1, "shares": 1},
            {"ticker": "ABC", "buy_price": 2, "shares": 1},
        ])

    assert _error_type(exc_info) == "INVALID_ASSET"


def test_snapshot_defaults_to_zero_fees(aapl):
    snapshot = PortfolioSnapshot(capital=1000, assets=[aapl])

    assert snapshot.fees.percentage == 0
    assert snapshot.fees.flat == 0


def test_rebalance_weight_keys_normalized(aapl):
    request = RebalanceRequest(capital=10000, assets=[aapl], target_weights={" aapl": 100})
    assert request.target_weights == {"AAPL": 100}


def test_errors_from_validation_maps_locations():
    """Built-in pydantic errors are classified by the field they occur in."""
    with pytest.raises(ValidationError) as exc_info:
        PortfolioSnapshot(assets=[{"ticker": "X", "buy_price": "abc", "shares": 1}], fees={"flat": "x"})

    errors = errors_from_validation(exc_info.value.errors())
    codes = {e.field: e.code for e in errors}

    assert codes["capital"] == ErrorCode.INVALID_CAPITAL
    assert codes["assets.0.buy_price"] == ErrorCode.INVALID_ASSET
    assert codes["fees.flat"] == ErrorCode.INVALID_FEE_CONFIG


def test_errors_from_validation_uses_model_name():
    with pytest.raises(ValidationError) as exc_info:
        FeeConfig(percentage="lots")

    errors = errors_from_validation(exc_info.value.errors(), model_name="FeeConfig")

    assert errors[0].code == ErrorCode.INVALID_FEE_CONFIG
    assert errors[0].to_dict()["field"] == "percentage"


@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
@pytest.mark.parametrize("field", ["buy_price", "shares", "take_profit_pct", "stop_loss_pct", "fee_override"])
def test_asset_rejects_non_finite_numbers(field, value):
    fields = {"ticker": "X", "buy_price": 10, "shares": 1, field: value}

    with pytest.raises(ValidationError) as exc_info:
        Asset(**fields)

    assert _error_type(exc_info) == "INVALID_ASSET"


@pytest.mark.parametrize("value", [float("nan"), float("inf")])
@pytest.mark.parametrize("field", ["percentage", "flat"])
def test_fee_config_rejects_non_finite_numbers(field, value):
    with pytest.raises(ValidationError) as exc_info:
        FeeConfig(**{field: value})

    assert _error_type(exc_info) == "INVALID_FEE_CONFIG"


@pytest.mark.parametrize("value", [float("nan"), float("inf")])
def test_capital_rejects_non_finite_numbers(aapl, value):
    with pytest.raises(ValidationError) as exc_info:
        PortfolioSnapshot(capital=value, assets=[aapl])

    assert _error_type(exc_info) == "INVALID_CAPITAL"


@pytest.mark.parametrize("value", [float("nan"), float("-inf")])
def test_target_prices_reject_non_finite_numbers(aapl, value):
    with pytest.raises(ValidationError) as exc_info:
        TargetsRequest(capital=10000, assets=[aapl.model_dump()], target_prices={"AAPL": value})

    assert _error_type(exc_info) == "INVALID_ASSET"


@pytest.mark.parametrize("value", [float("nan"), float("inf")])
def test_scenarios_reject_non_finite_numbers(aapl, value):
    with pytest.raises(ValidationError) as exc_info:
        ScenarioRequest(capital=10000, assets=[aapl], scenarios=[10, value])

    assert _error_type(exc_info) == "INVALID_SCENARIO"


def test_scenarios_allow_losses_beyond_total():
    request = ScenarioRequest(capital=100, assets=[{"ticker": "X", "buy_price": 1, "shares": 1}], scenarios=[-150])
    assert request.scenarios == [-150]


@pytest.mark.parametrize("value", [float("nan"), float("inf")])
def test_target_weights_reject_non_finite_numbers(aapl, value):
    with pytest.raises(ValidationError) as exc_info:
        RebalanceRequest(capital=10000, assets=[aapl], target_weights={"AAPL": value})

    assert _error_type(exc_info) == "INVALID_WEIGHTS"
