"""Valuation basis shared by all analyzers"""

import logging
from typing import Dict, Iterable, List, Optional

from .exceptions import InvestedExceedsCapitalError
from .models import Asset, PortfolioMetrics, PortfolioSnapshot, SectorAllocation

logger = logging.getLogger(__name__)


def invested(assets: Iterable[Asset]) -> float:
    return sum(asset.buy_price * asset.shares for asset in assets)


def cash(capital: float, invested_amount: float) -> float:
    """Uninvested capital; negative when holdings cost more than the capital"""
    return capital - invested_amount


def entry_value(capital: float, assets: Iterable[Asset]) -> float:
    """invested + cash, which equals capital by construction"""
    invested_amount = invested(assets)
    return invested_amount + cash(capital, invested_amount)


def round_money(value: float, decimals: int = 2) -> float:
    # Adding 0.0 turns -0.0 into 0.0 so repeated runs serialize identically
    return round(value, decimals) + 0.0


def check_invested(snapshot: PortfolioSnapshot, block: bool = False,
                   log: Optional[logging.Logger] = None) -> List[str]:
    """
    Soft validation of invested <= capital.

    Returns a list of warning messages, or raises InvestedExceedsCapitalError
    when the caller treats overinvestment as blocking.
    """
    log = log or logger
    invested_amount = invested(snapshot.assets)
    if invested_amount <= snapshot.capital:
        return []

    message = (
        f"INVESTED_EXCEEDS_CAPITAL: invested ${invested_amount:,.2f} exceeds "
        f"capital ${snapshot.capital:,.2f} (cash ${cash(snapshot.capital, invested_amount):,.2f})"
    )
    if block:
        log.error(message)
        raise InvestedExceedsCapitalError(message)
    log.warning(message)
    return [message]


def sector_allocation(assets: Iterable[Asset]) -> List[SectorAllocation]:
    """Invested value per sector, in first-seen sector order"""
    totals: Dict[str, float] = {}
    for asset in assets:
        totals[asset.sector] = totals.get(asset.sector, 0.0) + asset.invested_value

    grand_total = sum(totals.values())
    return [
        SectorAllocation(
            sector=sector,
            value=value,
            percentage=(value / grand_total * 100) if grand_total > 0 else 0.0,
        )
        for sector, value in totals.items()
    ]


def portfolio_metrics(assets: Iterable[Asset]) -> PortfolioMetrics:
    assets = list(assets)
    total_value = invested(assets)
    total_shares = sum(asset.shares for asset in assets)
    return PortfolioMetrics(
        total_value=total_value,
        total_shares=total_shares,
        avg_price=total_value / total_shares if total_shares > 0 else 0.0,
        asset_count=len(assets),
    )
