"""Unit tests for configuration loading and validation."""

from typing import Dict

import pytest
from pydantic import ValidationError

from fairbet.config import settings
from fairbet.config.settings import AppConfig, get_config
from fairbet.fees import NO_FEE, fee_profile_for


@pytest.fixture
def base_env() -> Dict[str, str]:
    """Provide minimal valid environment variables."""
    return {"ENV": "dev"}


@pytest.fixture
def clean_env(monkeypatch) -> None:
    """Clean environment variables before each test."""
    env_vars = [
        "ENV",
        "LOG_LEVEL",
        "MIN_SHARP_BOOKS_HIGH",
        "MIN_SHARP_BOOKS_MEDIUM",
        "MIN_COMMON_BOOKS_HIGH",
        "MIN_COMMON_BOOKS_MEDIUM",
        "CONSENSUS_SPREAD_THRESHOLD",
        "SPREAD_MARKET_SPREAD_THRESHOLD",
        "NORMALIZATION_TOLERANCE",
        "RELIABLE_MIN_BOOKS",
        "EXTRA_SHARP_BOOKS",
        "FEE_OVERRIDES",
    ]
    for var in env_vars:
        monkeypatch.delenv(var, raising=False)


def _set(monkeypatch, env: Dict[str, str]) -> None:
    for key, value in env.items():
        monkeypatch.setenv(key, value)


def test_defaults(clean_env):
    """Test defaults with no environment at all."""
    config = AppConfig()

    assert config.env == "dev"
    assert config.log_level == "INFO"
    assert config.min_sharp_books_high == 2
    assert config.min_sharp_books_medium == 1
    assert config.min_common_books_high == 4
    assert config.min_common_books_medium == 2
    assert config.consensus_spread_threshold == 0.20
    assert config.spread_market_spread_threshold == 0.15
    assert config.normalization_tolerance == 0.001
    assert config.reliable_min_books == 3
    assert config.extra_sharp_books == []
    assert config.fee_overrides == {}


def test_valid_config_all_fields(monkeypatch, clean_env, base_env):
    """Test valid configuration with all fields specified."""
    _set(
        monkeypatch,
        {
            **base_env,
            "LOG_LEVEL": "DEBUG",
            "MIN_SHARP_BOOKS_MEDIUM": "2",
            "MIN_SHARP_BOOKS_HIGH": "3",
            "MIN_COMMON_BOOKS_MEDIUM": "3",
            "MIN_COMMON_BOOKS_HIGH": "5",
            "CONSENSUS_SPREAD_THRESHOLD": "0.25",
            "SPREAD_MARKET_SPREAD_THRESHOLD": "0.10",
            "NORMALIZATION_TOLERANCE": "0.002",
            "RELIABLE_MIN_BOOKS": "4",
            "EXTRA_SHARP_BOOKS": '["bookmaker"]',
            "FEE_OVERRIDES": '{"fanduel": 0.05}',
        },
    )

    config = AppConfig()

    assert config.log_level == "DEBUG"
    assert config.min_sharp_books_high == 3
    assert config.min_common_books_high == 5
    assert config.consensus_spread_threshold == 0.25
    assert config.spread_market_spread_threshold == 0.10
    assert config.reliable_min_books == 4
    assert config.extra_sharp_books == ["bookmaker"]
    assert config.fee_overrides == {"fanduel": 0.05}


def test_invalid_env_value(monkeypatch, clean_env, base_env):
    """Test that invalid ENV value raises validation error."""
    base_env["ENV"] = "production"  # Not in allowed set
    _set(monkeypatch, base_env)

    with pytest.raises(ValidationError) as exc_info:
        AppConfig()

    errors = exc_info.value.errors()
    assert any(
        error["loc"] == ("env",) and "literal_error" in error["type"]
        for error in errors
    )


def test_valid_env_values(monkeypatch, clean_env, base_env):
    """Test all valid ENV values are accepted."""
    for env_value in ["dev", "staging", "prod"]:
        base_env["ENV"] = env_value
        _set(monkeypatch, base_env)

        config = AppConfig()
        assert config.env == env_value


def test_sharp_high_below_medium(monkeypatch, clean_env, base_env):
    """Test that the high sharp-book threshold cannot sit below medium."""
    base_env["MIN_SHARP_BOOKS_MEDIUM"] = "3"
    base_env["MIN_SHARP_BOOKS_HIGH"] = "2"
    _set(monkeypatch, base_env)

    with pytest.raises(ValidationError) as exc_info:
        AppConfig()

    errors = exc_info.value.errors()
    assert any(
        error["loc"] == ("min_sharp_books_high",) and "min_sharp_books_medium" in str(error["ctx"])
        for error in errors
    )


def test_common_high_below_medium(monkeypatch, clean_env, base_env):
    """Test that the high common-book threshold cannot sit below medium."""
    base_env["MIN_COMMON_BOOKS_MEDIUM"] = "5"
    base_env["MIN_COMMON_BOOKS_HIGH"] = "4"
    _set(monkeypatch, base_env)

    with pytest.raises(ValidationError) as exc_info:
        AppConfig()

    errors = exc_info.value.errors()
    assert any(error["loc"] == ("min_common_books_high",) for error in errors)


def test_thresholds_equal_is_valid(monkeypatch, clean_env, base_env):
    """Test that high == medium is valid."""
    base_env["MIN_SHARP_BOOKS_MEDIUM"] = "2"
    base_env["MIN_SHARP_BOOKS_HIGH"] = "2"
    _set(monkeypatch, base_env)

    config = AppConfig()
    assert config.min_sharp_books_high == config.min_sharp_books_medium == 2


def test_spread_threshold_looser_than_general(monkeypatch, clean_env, base_env):
    """Test that spread markets cannot be judged more loosely than others."""
    base_env["SPREAD_MARKET_SPREAD_THRESHOLD"] = "0.30"
    _set(monkeypatch, base_env)

    with pytest.raises(ValidationError) as exc_info:
        AppConfig()

    errors = exc_info.value.errors()
    assert any(error["loc"] == ("spread_market_spread_threshold",) for error in errors)


def test_threshold_below_minimum(monkeypatch, clean_env, base_env):
    """Test that a zero book threshold raises validation error."""
    base_env["RELIABLE_MIN_BOOKS"] = "0"
    _set(monkeypatch, base_env)

    with pytest.raises(ValidationError) as exc_info:
        AppConfig()

    errors = exc_info.value.errors()
    assert any(
        error["loc"] == ("reliable_min_books",) and "greater_than_equal" in error["type"]
        for error in errors
    )


def test_invalid_fee_rate(monkeypatch, clean_env, base_env):
    """Test that fee rates outside [0, 1) are rejected."""
    base_env["FEE_OVERRIDES"] = '{"novig": 1.2}'
    _set(monkeypatch, base_env)

    with pytest.raises(ValidationError) as exc_info:
        AppConfig()

    errors = exc_info.value.errors()
    assert any(error["loc"] == ("fee_overrides",) for error in errors)


def test_extra_env_vars_ignored(monkeypatch, clean_env, base_env):
    """Test that extra/unknown environment variables are ignored."""
    base_env["UNKNOWN_VAR"] = "should-be-ignored"
    _set(monkeypatch, base_env)

    config = AppConfig()
    assert config.env == "dev"
    assert not hasattr(config, "unknown_var")


def test_case_insensitive_env_vars(monkeypatch, clean_env):
    """Test that environment variable names are case-insensitive."""
    monkeypatch.setenv("env", "staging")
    monkeypatch.setenv("reliable_min_books", "5")

    config = AppConfig()
    assert config.env == "staging"
    assert config.reliable_min_books == 5


def test_engine_config_defaults(clean_env):
    """Test that default settings produce the default engine tables."""
    engine = AppConfig().engine_config()

    assert engine.sharp_books_for("nba") == ("pinnacle", "circa", "betcris")
    assert engine.sharp_books_for("NCAAB") == ("pinnacle", "circa")
    assert engine.sharp_books_for("cricket") == ("pinnacle", "circa")
    assert fee_profile_for("novig", engine.fee_profiles).rate == 0.02
    assert engine.min_common_books_high == 4


def test_engine_config_overrides(monkeypatch, clean_env, base_env):
    """Test that extra sharp books and fee overrides reach the engine config."""
    base_env["EXTRA_SHARP_BOOKS"] = '["BookMaker"]'
    base_env["FEE_OVERRIDES"] = '{"fanduel": 0.05, "novig": 0}'
    base_env["RELIABLE_MIN_BOOKS"] = "5"
    _set(monkeypatch, base_env)

    engine = AppConfig().engine_config()

    assert "bookmaker" in engine.sharp_books_for("nba")
    assert "bookmaker" in engine.sharp_books_for("NCAAB")
    assert engine.sharp_books_for("nba")[:3] == ("pinnacle", "circa", "betcris")
    assert fee_profile_for("FanDuel", engine.fee_profiles).rate == 0.05
    assert fee_profile_for("novig", engine.fee_profiles) is NO_FEE
    assert engine.reliable_min_books == 5


def test_engine_config_is_immutable(clean_env):
    """Test that the engine config cannot be mutated in place."""
    engine = AppConfig().engine_config()

    with pytest.raises(AttributeError):
        engine.reliable_min_books = 10
    with pytest.raises(TypeError):
        engine.fee_profiles["fanduel"] = NO_FEE


def test_get_config_singleton(monkeypatch, clean_env):
    """Test that get_config returns one shared instance."""
    monkeypatch.setattr(settings, "_config", None)

    first = get_config()
    assert get_config() is first
