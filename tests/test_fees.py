"""
Tests for the fee model.
"""

import pytest

from portfolio_calculator import Asset, FeeConfig, asset_fee, fee_breakdown, fee_rate, total_fee


@pytest.fixture
def assets():
    return [
        Asset(ticker="AAA", buy_price=150, shares=10),
        Asset(ticker="BBB", buy_price=100, shares=20, fee_override=0.5),
    ]


def test_fee_rate_uses_override(assets):
    fees = FeeConfig(percentage=1.0)

    assert fee_rate(assets[0], fees) == 1.0
    assert fee_rate(assets[1], fees) == 0.5


def test_zero_override_beats_portfolio_rate():
    asset = Asset(ticker="ZERO", buy_price=10, shares=10, fee_override=0)
    assert fee_rate(asset, FeeConfig(percentage=2)) == 0


def test_asset_fee(assets):
    fees = FeeConfig(percentage=1.0)

    assert asset_fee(assets[0], fees) == pytest.approx(15.0)
    assert asset_fee(assets[1], fees) == pytest.approx(10.0)


def test_total_fee_adds_flat_fee_once(assets):
    fees = FeeConfig(percentage=1.0, flat=5.0)

    assert total_fee(assets, fees) == pytest.approx(30.0)
    assert total_fee(assets[:1], fees) == pytest.approx(20.0)


def test_total_fee_with_only_flat_fee(assets):
    assert total_fee(assets, FeeConfig(flat=7.5)) == pytest.approx(7.5 + 10.0)
    assert total_fee([Asset(ticker="X", buy_price=1, shares=1)], FeeConfig(flat=7.5)) == pytest.approx(7.5)


def test_fee_breakdown_excludes_flat_fee(assets):
    breakdown = fee_breakdown(assets, FeeConfig(percentage=1.0, flat=5.0))

    assert breakdown == {"AAA": pytest.approx(15.0), "BBB": pytest.approx(10.0)}
