"""
Tests for configuration models and the YAML loader.
"""

import pytest
from pydantic import ValidationError

import calculator_config.loader as loader
from calculator_config import AppConfig, CalculationConfig, get_config, load_config, use_default_config


@pytest.fixture(autouse=True)
def reset_config(monkeypatch):
    monkeypatch.setattr(loader, "_config", None)


def test_defaults():
    config = AppConfig()

    assert config.calculation.money_decimals == 2
    assert config.calculation.weight_tolerance_percent == 0.01
    assert config.calculation.block_on_overinvestment is False
    assert config.scenarios.default_scenarios == [-30, -20, -10, 0, 10, 20, 30, 50]
    assert set(config.scenarios.presets) == {"Conservative", "Moderate", "Aggressive", "Custom"}
    assert config.logging.level == "INFO"
    assert config.service.port == 8000


def test_field_constraints():
    with pytest.raises(ValidationError):
        CalculationConfig(weight_tolerance_percent=5)

    with pytest.raises(ValidationError):
        AppConfig(scenarios={"presets": {"Empty": []}})


def test_load_config(tmp_path):
    path = tmp_path / "calculator.yaml"
    path.write_text(
        "calculation:\n"
        "  weight_tolerance_percent: 0.05\n"
        "  block_on_overinvestment: true\n"
        "logging:\n"
        "  level: debug\n"
        "  format: json\n"
    )

    config = load_config(path)

    assert config.calculation.weight_tolerance_percent == 0.05
    assert config.calculation.block_on_overinvestment is True
    assert config.logging.level == "DEBUG"
    assert config.logging.format == "json"
    assert get_config() is config


def test_empty_file_uses_defaults(tmp_path):
    path = tmp_path / "calculator.yaml"
    path.write_text("")

    assert load_config(path) == AppConfig()


def test_invalid_config_raises_value_error(tmp_path):
    path = tmp_path / "calculator.yaml"
    path.write_text("service:\n  port: 80\n")

    with pytest.raises(ValueError, match="Invalid configuration"):
        load_config(path)


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yaml")


def test_get_config_requires_load():
    with pytest.raises(RuntimeError):
        get_config()

    config = use_default_config()
    assert get_config() is config


def test_invalid_config_names_offending_field(tmp_path):
    path = tmp_path / "calculator.yaml"
    path.write_text("calculation:\n  money_decimals: 9\n")

    with pytest.raises(ValueError, match="calculation.money_decimals"):
        load_config(path)

    with pytest.raises(RuntimeError):
        get_config()


@pytest.mark.parametrize("content", ["- calculation\n- logging\n", "just text\n"])
def test_non_mapping_config_rejected(tmp_path, content):
    path = tmp_path / "calculator.yaml"
    path.write_text(content)

    with pytest.raises(ValueError, match="expected a mapping"):
        load_config(path)


def test_unknown_sections_ignored(tmp_path):
    path = tmp_path / "calculator.yaml"
    path.write_text("brokers:\n  ibkr: {}\nservice:\n  port: 9000\n")

    assert load_config(path).service.port == 9000


def test_configured_scenarios_must_be_finite(tmp_path):
    path = tmp_path / "calculator.yaml"
    path.write_text("scenarios:\n  default_scenarios: [-10, .inf]\n")

    with pytest.raises(ValueError, match="scenarios.default_scenarios.1"):
        load_config(path)
