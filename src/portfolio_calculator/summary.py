"""Entry-price portfolio summary: valuation, fees per ticker, sectors and starting target prices"""

import logging
from typing import Optional

from calculator_config import CalculationConfig
from .exits import default_target_price
from .fees import fee_breakdown, total_fee
from .models import PortfolioMetrics, PortfolioSnapshot, PortfolioSummary, SectorAllocation
from .valuation import cash, check_invested, entry_value, invested, portfolio_metrics, round_money, sector_allocation

PERCENT_DECIMALS = 4


class PortfolioAnalyzer:
    """Summarize a snapshot at buy prices without applying any price move"""

    def __init__(self, config: Optional[CalculationConfig] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config or CalculationConfig()
        self.logger = logger or logging.getLogger(__name__)

    def calculate(self, snapshot: PortfolioSnapshot) -> PortfolioSummary:
        decimals = self.config.money_decimals
        warnings = check_invested(snapshot, self.config.block_on_overinvestment, self.logger)

        assets = list(snapshot.assets)
        invested_amount = invested(assets)
        metrics = portfolio_metrics(assets)
        sectors = [
            SectorAllocation(
                sector=allocation.sector,
                value=round_money(allocation.value, decimals),
                percentage=round(allocation.percentage, PERCENT_DECIMALS),
            )
            for allocation in sector_allocation(assets)
        ]

        self.logger.info(
            f"Summary: {metrics.asset_count} assets, invested ${invested_amount:,.2f} "
            f"across {len(sectors)} sectors"
        )

        return PortfolioSummary(
            invested=round_money(invested_amount, decimals),
            cash=round_money(cash(snapshot.capital, invested_amount), decimals),
            total_capital=round_money(entry_value(snapshot.capital, assets), decimals),
            total_fees=round_money(total_fee(assets, snapshot.fees), decimals),
            fee_breakdown={
                ticker: round_money(fee, decimals)
                for ticker, fee in fee_breakdown(assets, snapshot.fees).items()
            },
            sectors=sectors,
            metrics=PortfolioMetrics(
                total_value=round_money(metrics.total_value, decimals),
                total_shares=metrics.total_shares,
                avg_price=round(metrics.avg_price, PERCENT_DECIMALS),
                asset_count=metrics.asset_count,
            ),
            default_target_prices={
                asset.ticker: round_money(default_target_price(asset), decimals) for asset in assets
            },
            warnings=warnings,
        )
