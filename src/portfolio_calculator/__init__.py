from .models import (
    Asset,
    TargetAsset,
    FeeConfig,
    PortfolioSnapshot,
    ScenarioRequest,
    TargetsRequest,
    BlendedRequest,
    RebalanceRequest,
    ScenarioResult,
    Order,
    SectorAllocation,
    PortfolioMetrics,
    ScenarioResponse,
    TargetsResponse,
    BlendedResponse,
    RebalanceResponse,
    PortfolioSummary,
    WeightsRequest,
    WeightsResponse,
)
from .exceptions import (
    ErrorCode,
    CalculationError,
    InvalidWeightsError,
    InvestedExceedsCapitalError,
    ExpressionError,
    errors_from_validation,
)
from .fees import fee_rate, asset_fee, total_fee, fee_breakdown
from .valuation import invested, cash, entry_value, sector_allocation, portfolio_metrics, check_invested
from .expressions import evaluate_expression
from .scenarios import ScenarioEngine
from .exits import TargetAnalyzer, BlendedAnalyzer, derive_target_assets, default_target_price
from .summary import PortfolioAnalyzer
from .rebalance import RebalanceSolver, current_weights, equal_weights, normalize_weights

__version__ = "1.0.0"

__all__ = [
    "Asset",
    "TargetAsset",
    "FeeConfig",
    "PortfolioSnapshot",
    "ScenarioRequest",
    "TargetsRequest",
    "BlendedRequest",
    "RebalanceRequest",
    "ScenarioResult",
    "Order",
    "SectorAllocation",
    "PortfolioMetrics",
    "ScenarioResponse",
    "TargetsResponse",
    "BlendedResponse",
    "RebalanceResponse",
    "PortfolioSummary",
    "WeightsRequest",
    "WeightsResponse",
    "ErrorCode",
    "CalculationError",
    "InvalidWeightsError",
    "InvestedExceedsCapitalError",
    "ExpressionError",
    "errors_from_validation",
    "fee_rate",
    "asset_fee",
    "total_fee",
    "fee_breakdown",
    "invested",
    "cash",
    "entry_value",
    "sector_allocation",
    "portfolio_metrics",
    "check_invested",
    "evaluate_expression",
    "ScenarioEngine",
    "TargetAnalyzer",
    "BlendedAnalyzer",
    "derive_target_assets",
    "default_target_price",
    "PortfolioAnalyzer",
    "RebalanceSolver",
    "current_weights",
    "equal_weights",
    "normalize_weights",
    "__version__",
]
