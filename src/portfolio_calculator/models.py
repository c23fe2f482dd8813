import math
from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field, field_validator, model_validator
from pydantic_core import PydanticCustomError

from .exceptions import ErrorCode, ExpressionError
from .expressions import evaluate_expression

SHARE_DECIMALS = 4
DEFAULT_SECTOR = "Other"
DEFAULT_SCENARIOS = [-30.0, -20.0, -10.0, 0.0, 10.0, 20.0, 30.0, 50.0]


def _reject(code: ErrorCode, message: str):
    raise PydanticCustomError(code.value, message)


def _check_percent(value: Optional[float], name: str, code: ErrorCode,
                   low: float = 0.0, high: Optional[float] = 100.0) -> Optional[float]:
    if value is None:
        return None
    if not math.isfinite(value) or value < low or (high is not None and value > high):
        bounds = f"between {low:g} and {high:g}" if high is not None else f"at least {low:g}"
        _reject(code, f"{name} must be {bounds}, got {value}")
    return value


def normalize_ticker(value: str) -> str:
    return value.strip().upper()


# Portfolio inputs
class Asset(BaseModel):
    """A priced holding within a portfolio snapshot"""
    model_config = {"frozen": True}

    ticker: str
    buy_price: float
    shares: float = 0.0
    sector: str = DEFAULT_SECTOR
    take_profit_pct: Optional[float] = None
    stop_loss_pct: Optional[float] = None
    fee_override: Optional[float] = None

    @field_validator("ticker", mode="before")
    @classmethod
    def validate_ticker(cls, v):
        if not isinstance(v, str) or not v.strip():
            _reject(ErrorCode.INVALID_ASSET, "Ticker is required")
        return normalize_ticker(v)

    @field_validator("buy_price", "shares", mode="before")
    @classmethod
    def evaluate_expressions(cls, v, info):
        """Allow arithmetic input such as '1500/12' for prices and quantities"""
        if isinstance(v, str):
            try:
                return evaluate_expression(v)
            except ExpressionError as e:
                _reject(ErrorCode.INVALID_ASSET, f"{info.field_name}: {e.message}")
        return v

    @field_validator("buy_price")
    @classmethod
    def validate_buy_price(cls, v: float) -> float:
        if not math.isfinite(v) or v <= 0:
            _reject(ErrorCode.INVALID_ASSET, f"Buy price must be a finite number greater than 0, got {v}")
        return v

    @field_validator("shares")
    @classmethod
    def validate_shares(cls, v: float) -> float:
        if not math.isfinite(v) or v < 0:
            _reject(ErrorCode.INVALID_ASSET, f"Shares must be a finite number of at least 0, got {v}")
        return round(v, SHARE_DECIMALS)

    @field_validator("sector", mode="before")
    @classmethod
    def default_sector(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return DEFAULT_SECTOR
        return v.strip() if isinstance(v, str) else v

    @field_validator("take_profit_pct")
    @classmethod
    def validate_take_profit(cls, v: Optional[float]) -> Optional[float]:
        return _check_percent(v, "Take profit percentage", ErrorCode.INVALID_ASSET, high=None)

    @field_validator("stop_loss_pct")
    @classmethod
    def validate_stop_loss(cls, v: Optional[float]) -> Optional[float]:
        return _check_percent(v, "Stop loss percentage", ErrorCode.INVALID_ASSET)

    @field_validator("fee_override")
    @classmethod
    def validate_fee_override(cls, v: Optional[float]) -> Optional[float]:
        return _check_percent(v, "Fee override", ErrorCode.INVALID_ASSET)

    @property
    def invested_value(self) -> float:
        return self.buy_price * self.shares


class TargetAsset(Asset):
    """Asset whose take_profit_pct is a derived move to a target price (may be negative)"""

    @field_validator("take_profit_pct")
    @classmethod
    def validate_take_profit(cls, v: Optional[float]) -> Optional[float]:
        return _check_percent(v, "Target move percentage", ErrorCode.INVALID_ASSET, low=-100.0, high=None)


class FeeConfig(BaseModel):
    """Portfolio fee configuration"""
    model_config = {"frozen": True}

    percentage: float = 0.0
    flat: float = 0.0

    @field_validator("percentage")
    @classmethod
    def validate_percentage(cls, v: float) -> float:
        return _check_percent(v, "Fee percentage", ErrorCode.INVALID_FEE_CONFIG)

    @field_validator("flat")
    @classmethod
    def validate_flat(cls, v: float) -> float:
        if not math.isfinite(v) or v < 0:
            _reject(ErrorCode.INVALID_FEE_CONFIG, f"Flat fee must be a finite number of at least 0, got {v}")
        return v


class PortfolioSnapshot(BaseModel):
    """Capital, holdings and fees for a single calculation"""
    model_config = {"frozen": True}

    capital: float
    assets: List[Asset]
    fees: FeeConfig = Field(default_factory=FeeConfig)

    @field_validator("capital")
    @classmethod
    def validate_capital(cls, v: float) -> float:
        if not math.isfinite(v) or v <= 0:
            _reject(ErrorCode.INVALID_CAPITAL, f"Capital must be a finite number greater than 0, got {v}")
        return v

    @field_validator("assets")
    @classmethod
    def validate_assets(cls, v: List[Asset]) -> List[Asset]:
        if not v:
            _reject(ErrorCode.NO_ASSETS, "At least one asset is required")
        seen = set()
        for asset in v:
            if asset.ticker in seen:
                _reject(ErrorCode.INVALID_ASSET, f"Duplicate ticker {asset.ticker}")
            seen.add(asset.ticker)
        return v


# Requests
class ScenarioRequest(PortfolioSnapshot):
    scenarios: List[float] = Field(default_factory=lambda: list(DEFAULT_SCENARIOS))

    @field_validator("scenarios")
    @classmethod
    def validate_scenarios(cls, v: List[float]) -> List[float]:
        """Any finite move is allowed, including losses beyond -100%"""
        for scenario_pct in v:
            if not math.isfinite(scenario_pct):
                _reject(ErrorCode.INVALID_SCENARIO, f"Scenario percentage must be a finite number, got {scenario_pct}")
        return v


class TargetsRequest(PortfolioSnapshot):
    """
    Exit-at-target request.

    Assets carry a derived take_profit_pct per target price. Callers may
    instead send absolute prices in target_prices and let the engine derive
    the percentages.
    """
    assets: List[TargetAsset]
    target_prices: Optional[Dict[str, float]] = None

    @field_validator("target_prices")
    @classmethod
    def validate_target_prices(cls, v: Optional[Dict[str, float]]) -> Optional[Dict[str, float]]:
        if v is None:
            return None
        normalized = {}
        for ticker, price in v.items():
            if not math.isfinite(price) or price <= 0:
                _reject(ErrorCode.INVALID_ASSET, f"Target price for {ticker} must be greater than 0, got {price}")
            normalized[normalize_ticker(ticker)] = price
        return normalized


class BlendedRequest(PortfolioSnapshot):
    pass


def _normalize_weight_keys(weights: Dict[str, float]) -> Dict[str, float]:
    normalized = {}
    for ticker, weight in weights.items():
        key = normalize_ticker(ticker)
        if key in normalized:
            _reject(ErrorCode.INVALID_WEIGHTS, f"Duplicate weight for ticker {key}")
        if not math.isfinite(weight):
            _reject(ErrorCode.INVALID_WEIGHTS, f"Target weight for {key} must be a finite number, got {weight}")
        normalized[key] = weight
    return normalized


class RebalanceRequest(PortfolioSnapshot):
    target_weights: Dict[str, float]

    @field_validator("target_weights")
    @classmethod
    def normalize_weight_keys(cls, v: Dict[str, float]) -> Dict[str, float]:
        return _normalize_weight_keys(v)


class WeightsRequest(PortfolioSnapshot):
    """Snapshot plus optional draft weights to scale to 100"""
    target_weights: Optional[Dict[str, float]] = None

    @field_validator("target_weights")
    @classmethod
    def normalize_weight_keys(cls, v: Optional[Dict[str, float]]) -> Optional[Dict[str, float]]:
        if v is None:
            return None
        for ticker, weight in v.items():
            if weight < 0:
                _reject(ErrorCode.INVALID_WEIGHTS, f"Target weight for {ticker} cannot be negative, got {weight}")
        return _normalize_weight_keys(v)


# Results
class ScenarioResult(BaseModel):
    scenario_pct: float
    total_value: float
    pl: float
    pl_net: float


class Order(BaseModel):
    """Whole-share rebalance instruction"""
    ticker: str
    side: Literal["buy", "sell"]
    qty: int = Field(gt=0)
    cost: float = Field(ge=0)
    new_shares: float = Field(ge=0)


class SectorAllocation(BaseModel):
    sector: str
    value: float
    percentage: float


class PortfolioMetrics(BaseModel):
    total_value: float
    total_shares: float
    avg_price: float
    asset_count: int


# Responses
class ScenarioResponse(BaseModel):
    invested: float
    cash: float
    total_capital: float
    total_fees: float
    results: List[ScenarioResult]
    warnings: List[str] = Field(default_factory=list)


class TargetsResponse(BaseModel):
    targets_total: float
    targets_pl: float
    targets_pl_net: float
    total_fees: float
    warnings: List[str] = Field(default_factory=list)


class BlendedResponse(BaseModel):
    blended_total: float
    blended_pl: float
    blended_pl_net: float
    total_fees: float
    warnings: List[str] = Field(default_factory=list)


class PortfolioSummary(BaseModel):
    """Entry valuation with per-ticker fees, sector split and default target prices"""
    invested: float
    cash: float
    total_capital: float
    total_fees: float
    fee_breakdown: Dict[str, float]
    sectors: List[SectorAllocation]
    metrics: PortfolioMetrics
    default_target_prices: Dict[str, float]
    warnings: List[str] = Field(default_factory=list)


class WeightsResponse(BaseModel):
    """Weight suggestions, each keyed by ticker and in percent"""
    current: Dict[str, float]
    equal: Dict[str, float]
    normalized: Dict[str, float]


class RebalanceResponse(BaseModel):
    orders: List[Order]
    total_buy_cost: float = 0.0
    total_sell_proceeds: float = 0.0
    net_cash_flow: float = 0.0
    remaining_cash: float = 0.0
    warnings: List[str] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_order_tickers_unique(self):
        tickers = [order.ticker for order in self.orders]
        if len(tickers) != len(set(tickers)):
            raise ValueError("At most one order per ticker")
        return self
