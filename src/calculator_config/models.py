"""Pydantic models for calculator configuration with validation."""

from typing import Dict, List, Literal, Optional
from pydantic import BaseModel, Field, FiniteFloat, field_validator


class CalculationConfig(BaseModel):
    """Engine parameters shared by all analyzers."""

    money_decimals: int = Field(
        default=2,
        ge=0,
        le=6,
        description="Decimal places monetary results are rounded to"
    )
    weight_tolerance_percent: float = Field(
        default=0.01,
        ge=0.0,
        le=1.0,
        description="Allowed deviation of summed rebalance target weights from 100%"
    )
    block_on_overinvestment: bool = Field(
        default=False,
        description="Reject snapshots whose invested amount exceeds capital instead of warning"
    )


def _default_presets() -> Dict[str, List[float]]:
    return {
        "Conservative": [-20.0, -10.0, 0.0, 10.0, 20.0],
        "Moderate": [-30.0, -15.0, 0.0, 15.0, 30.0],
        "Aggressive": [-50.0, -25.0, 0.0, 25.0, 50.0],
        "Custom": [-30.0, -20.0, -10.0, 0.0, 10.0, 20.0, 30.0, 50.0],
    }


class ScenarioConfig(BaseModel):
    """Scenario sets offered to callers."""

    default_scenarios: List[FiniteFloat] = Field(
        default_factory=lambda: [-30.0, -20.0, -10.0, 0.0, 10.0, 20.0, 30.0, 50.0],
        description="Scenario percentages used when a request does not name any"
    )
    presets: Dict[str, List[FiniteFloat]] = Field(
        default_factory=_default_presets,
        description="Named scenario sets"
    )

    @field_validator("presets")
    @classmethod
    def validate_presets(cls, v: Dict[str, List[float]]) -> Dict[str, List[float]]:
        """Every preset needs a name and at least one scenario."""
        for name, scenarios in v.items():
            if not name.strip():
                raise ValueError("Scenario preset names cannot be blank")
            if not scenarios:
                raise ValueError(f"Scenario preset '{name}' must contain at least one scenario")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Root log level"
    )
    format: Literal["text", "json"] = Field(
        default="text",
        description="Console and file log line format"
    )
    file_path: Optional[str] = Field(
        default=None,
        description="Optional log file, rotated daily and gzip-compressed"
    )
    backup_count: int = Field(
        default=30,
        ge=1,
        le=365,
        description="Rotated log files to keep"
    )

    @field_validator("level", mode="before")
    @classmethod
    def upper_level(cls, v):
        return v.upper() if isinstance(v, str) else v


class ServiceConfig(BaseModel):
    """HTTP service configuration."""

    host: str = Field(
        default="0.0.0.0",
        description="Interface the service binds to"
    )
    port: int = Field(
        default=8000,
        ge=1024,
        le=65535,
        description="Port the service listens on"
    )
    cors_origins: List[str] = Field(
        default_factory=lambda: ["*"],
        description="Origins allowed to call the service from a browser"
    )


class AppConfig(BaseModel):
    """Root application configuration."""

    calculation: CalculationConfig = Field(
        default_factory=CalculationConfig,
        description="Calculation engine settings"
    )
    scenarios: ScenarioConfig = Field(
        default_factory=ScenarioConfig,
        description="Scenario defaults and presets"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig,
        description="Logging settings"
    )
    service: ServiceConfig = Field(
        default_factory=ServiceConfig,
        description="HTTP service settings"
    )
