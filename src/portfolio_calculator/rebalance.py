"""Whole-share rebalance order calculation with cash-bounded, priority-funded buys"""

from dataclasses import dataclass
from typing import Dict, List, Optional
import logging
import math

from calculator_config import CalculationConfig
from .exceptions import InvalidWeightsError
from .fees import fee_rate
from .models import (
    Asset,
    Order,
    PortfolioSnapshot,
    RebalanceRequest,
    RebalanceResponse,
    WeightsRequest,
    WeightsResponse,
)
from .valuation import cash, check_invested, invested, round_money

# Absorbs float noise in summed weights so that the documented bounds are inclusive
_WEIGHT_EPSILON = 1e-9
WEIGHT_DECIMALS = 4


@dataclass
class _Candidate:
    asset: Asset
    target_value: float
    current_value: float
    diff: float
    rate: float


class RebalanceSolver:
    """Calculate buy/sell orders moving holdings toward target weights"""

    def __init__(self, config: Optional[CalculationConfig] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config or CalculationConfig()
        self.logger = logger or logging.getLogger(__name__)

    def calculate(self, request: RebalanceRequest) -> RebalanceResponse:
        """
        Calculate rebalance orders for a snapshot.

        Sells are processed first and their fee-net proceeds added to cash.
        Buys are then funded largest underweight first (ticker ascending on
        ties), each reduced to what the remaining cash affords.
        Returns RebalanceResponse with orders, cash summary and warnings.
        """
        warnings = check_invested(request, self.config.block_on_overinvestment, self.logger)
        warnings.extend(self.validate_weights(request.assets, request.target_weights))

        invested_amount = invested(request.assets)
        cash_amount = cash(request.capital, invested_amount)
        total_value = invested_amount + cash_amount

        self.logger.debug(
            f"Rebalance basis: total ${total_value:,.2f}, invested ${invested_amount:,.2f}, "
            f"cash ${cash_amount:,.2f}"
        )

        sells, buys = self._partition_candidates(request, total_value)

        orders: List[Order] = []
        sell_orders, proceeds = self._calculate_sell_orders(sells)
        orders.extend(sell_orders)

        available_cash = cash_amount + proceeds
        buy_orders, spent = self._calculate_buy_orders(buys, available_cash)
        orders.extend(buy_orders)

        remaining_cash = available_cash - spent
        self.logger.info(
            f"Rebalance: {len(sell_orders)} sells (${proceeds:,.2f}), "
            f"{len(buy_orders)} buys (${spent:,.2f}), remaining cash ${remaining_cash:,.2f}"
        )

        decimals = self.config.money_decimals
        return RebalanceResponse(
            orders=orders,
            total_buy_cost=round_money(spent, decimals),
            total_sell_proceeds=round_money(proceeds, decimals),
            net_cash_flow=round_money(proceeds - spent, decimals),
            remaining_cash=round_money(remaining_cash, decimals),
            warnings=warnings,
        )

    def validate_weights(self, assets: List[Asset], target_weights: Dict[str, float]) -> List[str]:
        """
        Check target weights against the snapshot tickers.

        Raises InvalidWeightsError if a ticker has no weight, a weight is
        outside 0-100, or the weights do not sum to 100 within tolerance.
        Returns warnings for weights naming tickers outside the snapshot.
        """
        tickers = [asset.ticker for asset in assets]

        missing = [ticker for ticker in tickers if ticker not in target_weights]
        if missing:
            raise InvalidWeightsError(f"Missing target weights for: {', '.join(missing)}")

        for ticker in tickers:
            weight = target_weights[ticker]
            if not 0 <= weight <= 100:
                raise InvalidWeightsError(
                    f"Target weight for {ticker} must be between 0 and 100, got {weight}",
                    field=f"target_weights.{ticker}",
                )

        total_weight = sum(target_weights[ticker] for ticker in tickers)
        tolerance = self.config.weight_tolerance_percent
        if abs(total_weight - 100) > tolerance + _WEIGHT_EPSILON:
            raise InvalidWeightsError(
                f"Target weights must sum to 100% (±{tolerance}), got {total_weight:.4f}%"
            )

        warnings = []
        extra = sorted(set(target_weights) - set(tickers))
        if extra:
            message = f"Ignoring target weights for tickers not in portfolio: {', '.join(extra)}"
            self.logger.warning(message)
            warnings.append(message)
        return warnings

    def suggest_weights(self, request: WeightsRequest) -> WeightsResponse:
        """
        Starting points for target weights.

        normalized scales the draft weights (or the current weights when no
        draft is given) so they sum to 100.
        """
        current = current_weights(request)
        draft = request.target_weights if request.target_weights is not None else current
        self.logger.debug(f"Suggesting weights for {len(request.assets)} assets")
        return WeightsResponse(
            current=_round_weights(current),
            equal=_round_weights(equal_weights(list(request.assets))),
            normalized=_round_weights(normalize_weights(draft)),
        )

    def _partition_candidates(self, request: RebalanceRequest, total_value: float):
        """Split assets into sell and buy candidates, skipping moves under one share"""
        sells: List[_Candidate] = []
        buys: List[_Candidate] = []

        for asset in request.assets:
            current_value = asset.shares * asset.buy_price
            target_value = total_value * request.target_weights[asset.ticker] / 100
            diff = target_value - current_value

            if abs(diff) < asset.buy_price:
                self.logger.debug(
                    f"Skipping {asset.ticker}: ${abs(diff):,.2f} difference is less than one share "
                    f"(${asset.buy_price:,.2f})"
                )
                continue

            candidate = _Candidate(
                asset=asset,
                target_value=target_value,
                current_value=current_value,
                diff=diff,
                rate=fee_rate(asset, request.fees),
            )
            if diff < 0:
                sells.append(candidate)
            else:
                buys.append(candidate)

        # Largest move first, ticker ascending on ties
        sells.sort(key=lambda c: (c.diff, c.asset.ticker))
        buys.sort(key=lambda c: (-c.diff, c.asset.ticker))
        return sells, buys

    def _calculate_sell_orders(self, sells: List[_Candidate]):
        orders = []
        proceeds = 0.0

        for candidate in sells:
            asset = candidate.asset
            # Only whole held shares can be sold
            qty = min(math.floor(abs(candidate.diff) / asset.buy_price), math.floor(asset.shares))
            if qty <= 0:
                self.logger.debug(f"Skipping sell for {asset.ticker}: no whole shares held")
                continue

            order_proceeds = qty * asset.buy_price * (1 - candidate.rate / 100)
            proceeds += order_proceeds
            self.logger.debug(
                f"Sell {qty} {asset.ticker} @ ${asset.buy_price:,.2f} -> ${order_proceeds:,.2f} "
                f"(target ${candidate.target_value:,.2f}, current ${candidate.current_value:,.2f})"
            )
            orders.append(Order(
                ticker=asset.ticker,
                side="sell",
                qty=qty,
                cost=round_money(order_proceeds, self.config.money_decimals),
                new_shares=round(asset.shares - qty, 4),
            ))

        return orders, proceeds

    def _calculate_buy_orders(self, buys: List[_Candidate], available_cash: float):
        orders = []
        spent = 0.0

        for candidate in buys:
            asset = candidate.asset
            remaining = available_cash - spent
            unit_cost = asset.buy_price * (1 + candidate.rate / 100)
            desired_qty = math.floor(candidate.diff / asset.buy_price)

            qty = desired_qty
            if qty * unit_cost > remaining:
                qty = max(0, math.floor(remaining / unit_cost))
                while qty > 0 and qty * unit_cost > remaining:
                    qty -= 1
                self.logger.info(
                    f"  Cash constraint: {asset.ticker} reduced from {desired_qty} to {qty} shares "
                    f"(${remaining:,.2f} available)"
                )

            if qty <= 0:
                continue

            order_cost = qty * unit_cost
            spent += order_cost
            self.logger.debug(
                f"Buy {qty} {asset.ticker} @ ${asset.buy_price:,.2f} -> ${order_cost:,.2f} "
                f"(target ${candidate.target_value:,.2f}, current ${candidate.current_value:,.2f})"
            )
            orders.append(Order(
                ticker=asset.ticker,
                side="buy",
                qty=qty,
                cost=round_money(order_cost, self.config.money_decimals),
                new_shares=round(asset.shares + qty, 4),
            ))

        return orders, spent


def current_weights(snapshot: PortfolioSnapshot) -> Dict[str, float]:
    """Current holding value per ticker as a percentage of capital"""
    return {
        asset.ticker: asset.invested_value / snapshot.capital * 100
        for asset in snapshot.assets
    }


def equal_weights(assets: List[Asset]) -> Dict[str, float]:
    if not assets:
        return {}
    weight = 100 / len(assets)
    return {asset.ticker: weight for asset in assets}


def normalize_weights(weights: Dict[str, float]) -> Dict[str, float]:
    """Scale weights proportionally so they sum to 100; all-zero weights are returned unchanged"""
    total = sum(weights.values())
    if total == 0:
        return dict(weights)
    return {ticker: weight / total * 100 for ticker, weight in weights.items()}


def _round_weights(weights: Dict[str, float]) -> Dict[str, float]:
    return {ticker: round(weight, WEIGHT_DECIMALS) + 0.0 for ticker, weight in weights.items()}
