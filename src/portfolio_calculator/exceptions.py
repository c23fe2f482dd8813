"""Error taxonomy for portfolio calculations"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """Validation error codes reported to callers"""
    INVALID_CAPITAL = "INVALID_CAPITAL"
    NO_ASSETS = "NO_ASSETS"
    INVESTED_EXCEEDS_CAPITAL = "INVESTED_EXCEEDS_CAPITAL"
    INVALID_ASSET = "INVALID_ASSET"
    INVALID_FEE_CONFIG = "INVALID_FEE_CONFIG"
    INVALID_WEIGHTS = "INVALID_WEIGHTS"
    INVALID_SCENARIO = "INVALID_SCENARIO"
    INVALID_EXPRESSION = "INVALID_EXPRESSION"


class CalculationError(Exception):
    """Raised when calculation input fails validation"""

    def __init__(self, code: ErrorCode, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.code = ErrorCode(code)
        self.message = message
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        return {"code": self.code.value, "field": self.field, "message": self.message}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code.value}, field={self.field!r}, message={self.message!r})"


class InvalidWeightsError(CalculationError):
    """Raised when rebalance target weights are incomplete or do not sum to 100"""

    def __init__(self, message: str, field: Optional[str] = "target_weights"):
        super().__init__(ErrorCode.INVALID_WEIGHTS, message, field)


class InvestedExceedsCapitalError(CalculationError):
    """Raised only when overinvestment is configured as blocking"""

    def __init__(self, message: str):
        super().__init__(ErrorCode.INVESTED_EXCEEDS_CAPITAL, message, "assets")


class ExpressionError(CalculationError):
    """Raised when an arithmetic input expression cannot be evaluated"""

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(ErrorCode.INVALID_EXPRESSION, message, field)


# Top-level request fields and the code their built-in pydantic errors map to
_FIELD_CODES = {
    "capital": ErrorCode.INVALID_CAPITAL,
    "assets": ErrorCode.INVALID_ASSET,
    "target_prices": ErrorCode.INVALID_ASSET,
    "fees": ErrorCode.INVALID_FEE_CONFIG,
    "target_weights": ErrorCode.INVALID_WEIGHTS,
    "scenarios": ErrorCode.INVALID_SCENARIO,
    "expression": ErrorCode.INVALID_EXPRESSION,
}

_MODEL_CODES = {
    "Asset": ErrorCode.INVALID_ASSET,
    "TargetAsset": ErrorCode.INVALID_ASSET,
    "FeeConfig": ErrorCode.INVALID_FEE_CONFIG,
}


def errors_from_validation(errors: List[Dict[str, Any]],
                           model_name: Optional[str] = None) -> List[CalculationError]:
    """
    Convert pydantic error dicts into CalculationErrors.

    Accepts the output of ValidationError.errors() or FastAPI's
    RequestValidationError.errors(). Custom error types raised by the model
    validators already are error codes; built-in pydantic errors (missing
    field, bad number) are classified by their location or by the model name.
    """
    results = []
    for error in errors:
        loc = [part for part in error.get("loc", ()) if part != "body"]
        field = ".".join(str(part) for part in loc) or None
        error_type = error.get("type", "")

        if error_type in ErrorCode.__members__:
            code = ErrorCode(error_type)
        elif loc and loc[0] in _FIELD_CODES:
            code = _FIELD_CODES[loc[0]]
        elif model_name in _MODEL_CODES:
            code = _MODEL_CODES[model_name]
        else:
            code = ErrorCode.INVALID_ASSET

        results.append(CalculationError(code, error.get("msg", "Invalid value"), field))
    return results
