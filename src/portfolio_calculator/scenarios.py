"""Portfolio value projections under uniform market-move scenarios"""

import logging
from typing import List, Optional

from calculator_config import CalculationConfig
from .fees import total_fee
from .models import ScenarioRequest, ScenarioResponse, ScenarioResult
from .valuation import cash, check_invested, invested, round_money


class ScenarioEngine:
    """Project portfolio value across percentage market moves"""

    def __init__(self, config: Optional[CalculationConfig] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config or CalculationConfig()
        self.logger = logger or logging.getLogger(__name__)

    def calculate(self, request: ScenarioRequest) -> ScenarioResponse:
        """
        Compute one ScenarioResult per requested scenario, in request order.

        Scenarios are neither deduplicated, sorted nor clamped: a move below
        -100% is reported as the illustrative loss it implies.
        """
        warnings = check_invested(request, self.config.block_on_overinvestment, self.logger)
        decimals = self.config.money_decimals

        invested_amount = invested(request.assets)
        cash_amount = cash(request.capital, invested_amount)
        fees = total_fee(request.assets, request.fees)

        self.logger.debug(
            f"Scenario basis: invested ${invested_amount:,.2f}, cash ${cash_amount:,.2f}, "
            f"fees ${fees:,.2f}, {len(request.scenarios)} scenarios"
        )

        results: List[ScenarioResult] = []
        for scenario_pct in request.scenarios:
            move = 1 + scenario_pct / 100
            position_value = sum(asset.shares * asset.buy_price * move for asset in request.assets)
            total_value = cash_amount + position_value
            pl = round_money(total_value - request.capital, decimals)
            results.append(ScenarioResult(
                scenario_pct=scenario_pct,
                total_value=round_money(total_value, decimals),
                pl=pl,
                pl_net=round_money(pl - round_money(fees, decimals), decimals),
            ))

        return ScenarioResponse(
            invested=round_money(invested_amount, decimals),
            cash=round_money(cash_amount, decimals),
            total_capital=round_money(invested_amount + cash_amount, decimals),
            total_fees=round_money(fees, decimals),
            results=results,
            warnings=warnings,
        )
