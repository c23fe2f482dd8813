"""Exit valuations: everything sold at target prices, or at each asset's own take-profit/stop-loss"""

import logging
from typing import Dict, Iterable, List, Optional

from calculator_config import CalculationConfig
from .fees import total_fee
from .models import (
    Asset,
    BlendedRequest,
    BlendedResponse,
    PortfolioSnapshot,
    TargetAsset,
    TargetsRequest,
    TargetsResponse,
)
from .valuation import check_invested, invested, round_money


def take_profit_price(asset: Asset) -> Optional[float]:
    if asset.take_profit_pct is None:
        return None
    return asset.buy_price * (1 + asset.take_profit_pct / 100)


def stop_loss_price(asset: Asset) -> Optional[float]:
    if asset.stop_loss_pct is None:
        return None
    return asset.buy_price * (1 - asset.stop_loss_pct / 100)


def blended_exit_price(asset: Asset) -> float:
    """Take-profit price, else stop-loss price, else buy price"""
    price = take_profit_price(asset)
    if price is None:
        price = stop_loss_price(asset)
    return asset.buy_price if price is None else price


def target_exit_price(asset: Asset) -> float:
    """Exit at the derived target move; stop-loss is never consulted"""
    price = take_profit_price(asset)
    return asset.buy_price if price is None else price


def default_target_price(asset: Asset) -> float:
    """Starting target price offered for an asset before the caller edits it"""
    return blended_exit_price(asset)


def derive_target_assets(assets: Iterable[Asset], target_prices: Dict[str, float]) -> List[TargetAsset]:
    """
    Annotate assets with take_profit_pct = (target - buy) / buy * 100.

    Assets without a target price keep no take-profit and exit at buy price.
    Stop-loss is cleared since target exits ignore it.
    """
    derived = []
    for asset in assets:
        fields = asset.model_dump()
        target = target_prices.get(asset.ticker)
        fields["take_profit_pct"] = (
            (target - asset.buy_price) / asset.buy_price * 100 if target is not None else None
        )
        fields["stop_loss_pct"] = None
        derived.append(TargetAsset(**fields))
    return derived


class _ExitAnalyzer:

    def __init__(self, config: Optional[CalculationConfig] = None,
                 logger: Optional[logging.Logger] = None):
        self.config = config or CalculationConfig()
        self.logger = logger or logging.getLogger(__name__)

    def _exit_totals(self, snapshot: PortfolioSnapshot, assets: List[Asset], exit_price) -> Dict[str, float]:
        decimals = self.config.money_decimals
        exit_total = 0.0
        for asset in assets:
            price = exit_price(asset)
            self.logger.debug(f"{asset.ticker}: exit {asset.shares:,} shares @ ${price:,.4f}")
            exit_total += asset.shares * price

        pl = round_money(exit_total - invested(assets), decimals)
        fees = round_money(total_fee(assets, snapshot.fees), decimals)
        return {
            "total": round_money(exit_total, decimals),
            "pl": pl,
            "pl_net": round_money(pl - fees, decimals),
            "fees": fees,
        }


class TargetAnalyzer(_ExitAnalyzer):
    """Value the portfolio as if every asset exits at its target price"""

    def calculate(self, request: TargetsRequest) -> TargetsResponse:
        warnings = check_invested(request, self.config.block_on_overinvestment, self.logger)

        assets = list(request.assets)
        if request.target_prices is not None:
            unknown = sorted(set(request.target_prices) - {asset.ticker for asset in assets})
            if unknown:
                message = f"Ignoring target prices for tickers not in portfolio: {', '.join(unknown)}"
                self.logger.warning(message)
                warnings.append(message)
            assets = derive_target_assets(assets, request.target_prices)

        totals = self._exit_totals(request, assets, target_exit_price)
        self.logger.info(f"Targets total ${totals['total']:,.2f}, P/L ${totals['pl']:,.2f}")

        return TargetsResponse(
            targets_total=totals["total"],
            targets_pl=totals["pl"],
            targets_pl_net=totals["pl_net"],
            total_fees=totals["fees"],
            warnings=warnings,
        )


class BlendedAnalyzer(_ExitAnalyzer):
    """Value the portfolio as if every asset hits its own exit plan at once"""

    def calculate(self, request: BlendedRequest) -> BlendedResponse:
        warnings = check_invested(request, self.config.block_on_overinvestment, self.logger)

        totals = self._exit_totals(request, list(request.assets), blended_exit_price)
        self.logger.info(f"Blended total ${totals['total']:,.2f}, P/L ${totals['pl']:,.2f}")

        return BlendedResponse(
            blended_total=totals["total"],
            blended_pl=totals["pl"],
            blended_pl_net=totals["pl_net"],
            total_fees=totals["fees"],
            warnings=warnings,
        )
