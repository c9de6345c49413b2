"""Tests for configuration validation."""

import pytest
from pydantic import ValidationError

from src.core.config import Constants, Settings


def test_settings_defaults(monkeypatch) -> None:
    """Test Settings falls back to documented defaults."""
    for name in ("LOGFIRE_TOKEN", "SERVICE_NAME", "ENVIRONMENT", "DEFAULT_TREND_DAYS", "HISTORY_WINDOW_DAYS"):
        monkeypatch.delenv(name, raising=False)

    settings = Settings(_env_file=None)

    assert settings.logfire_token is None
    assert settings.service_name == "perfmetrics"
    assert settings.environment == "development"
    assert settings.default_trend_days == 30
    assert settings.history_window_days == 30


def test_settings_read_from_environment(monkeypatch) -> None:
    """Test Settings picks up values from environment variables."""
    monkeypatch.setenv("DEFAULT_TREND_DAYS", "14")
    monkeypatch.setenv("ENVIRONMENT", "production")

    settings = Settings(_env_file=None)

    assert settings.default_trend_days == 14
    assert settings.environment == "production"


def test_trend_days_must_be_positive() -> None:
    """Test Settings rejects a non-positive trend window."""
    with pytest.raises(ValidationError, match=r"default_trend_days"):
        Settings(_env_file=None, default_trend_days=0)


def test_productivity_weights_sum_to_one() -> None:
    """Test the productivity score weights form a complete composite."""
    total = (
        Constants.WEIGHT_COMPLETION_RATE
        + Constants.WEIGHT_ON_TIME_RATE
        + Constants.WEIGHT_SPEED
        + Constants.WEIGHT_UNBLOCKED
    )

    assert total == pytest.approx(1.0)


def test_grade_bounds_descend() -> None:
    """Test grade lower bounds are strictly decreasing."""
    bounds = [Constants.GRADE_A_PLUS, Constants.GRADE_A, Constants.GRADE_B, Constants.GRADE_C, Constants.GRADE_D]

    assert bounds == sorted(bounds, reverse=True)
    assert len(set(bounds)) == len(bounds)
