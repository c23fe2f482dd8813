"""YAML configuration loading and the process-wide configuration used by the service."""

import logging
import yaml
from pathlib import Path
from typing import Optional
from pydantic import ValidationError

from .models import AppConfig

logger = logging.getLogger(__name__)

_config: Optional[AppConfig] = None


def _format_errors(error: ValidationError) -> str:
    return "; ".join(
        f"{'.'.join(str(part) for part in e['loc']) or '<root>'}: {e['msg']}"
        for e in error.errors()
    )


def load_config(config_path: str | Path) -> AppConfig:
    """
    Read calculator.yaml and make it the active configuration.

    An empty file yields the defaults. Unknown sections are ignored.

    Raises:
        FileNotFoundError: If config file doesn't exist
        ValueError: If the top level is not a mapping or a value is out of range
        yaml.YAMLError: If YAML parsing fails
    """
    global _config

    config_path = Path(config_path)
    if not config_path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    raw_config = yaml.safe_load(config_path.read_text()) or {}
    if not isinstance(raw_config, dict):
        raise ValueError(
            f"Invalid configuration in {config_path}: expected a mapping of sections, "
            f"got {type(raw_config).__name__}"
        )

    try:
        config = AppConfig.model_validate(raw_config)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration in {config_path}: {_format_errors(e)}") from e

    _config = config
    logger.info(
        f"Loaded {config_path}: money decimals {config.calculation.money_decimals}, "
        f"weight tolerance {config.calculation.weight_tolerance_percent}%, "
        f"presets {', '.join(config.scenarios.presets)}"
    )
    return config


def use_default_config() -> AppConfig:
    """Install the built-in defaults when no configuration file is used."""
    global _config
    _config = AppConfig()
    return _config


def get_config() -> AppConfig:
    if _config is None:
        raise RuntimeError("Configuration not loaded; call load_config() or use_default_config() first")
    return _config
