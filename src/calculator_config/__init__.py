"""Application configuration management for the portfolio calculator."""

from .models import (
    AppConfig,
    CalculationConfig,
    ScenarioConfig,
    LoggingConfig,
    ServiceConfig,
)
from .loader import load_config, get_config, use_default_config

__all__ = [
    "AppConfig",
    "CalculationConfig",
    "ScenarioConfig",
    "LoggingConfig",
    "ServiceConfig",
    "load_config",
    "get_config",
    "use_default_config",
]
