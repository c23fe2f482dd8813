"""Trading cost model: a portfolio fee percentage, per-asset overrides and one flat fee"""

from typing import Dict, Iterable

from .models import Asset, FeeConfig


def fee_rate(asset: Asset, fees: FeeConfig) -> float:
    """Fee percentage for an asset, its override winning over the portfolio rate"""
    if asset.fee_override is not None:
        return asset.fee_override
    return fees.percentage


def asset_fee(asset: Asset, fees: FeeConfig) -> float:
    return asset.invested_value * fee_rate(asset, fees) / 100.0


def fee_breakdown(assets: Iterable[Asset], fees: FeeConfig) -> Dict[str, float]:
    """Percentage fee per ticker (the flat fee is portfolio-wide and not included)"""
    return {asset.ticker: asset_fee(asset, fees) for asset in assets}


def total_fee(assets: Iterable[Asset], fees: FeeConfig) -> float:
    """
    Total trading cost for a portfolio.

    The flat fee is charged once per calculation, not per asset. Every
    analyzer subtracts this total once from gross P/L to get net P/L.
    """
    return sum(asset_fee(asset, fees) for asset in assets) + fees.flat
