"""
Shared fixtures for portfolio calculator tests.
"""

import pytest

from portfolio_calculator import Asset, FeeConfig


@pytest.fixture
def aapl():
    """Single AAPL holding worth $1,500."""
    return Asset(ticker="AAPL", buy_price=150, shares=10)


@pytest.fixture
def no_fees():
    return FeeConfig(percentage=0, flat=0)


@pytest.fixture
def balanced_assets():
    """Two $100 assets worth $4,000 and $6,000."""
    return [
        Asset(ticker="A", buy_price=100, shares=40),
        Asset(ticker="B", buy_price=100, shares=60),
    ]
