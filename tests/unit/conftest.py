"""Pytest configuration and fixtures for unit tests."""

from collections.abc import Callable
from datetime import UTC, datetime

import pytest

from src.models.service_models import MetricRecord, ValidationReport, ValidationStats


@pytest.fixture
def make_stats() -> Callable[..., ValidationStats]:
    """Factory for ValidationStats with clean defaults."""

    def _make_stats(**overrides: int) -> ValidationStats:
        values = {
            "total_tasks": 100,
            "missing_due_dates": 0,
            "missing_completed_dates": 0,
            "missing_assigned_dates": 0,
            "invalid_dates": 0,
            "future_completed_dates": 0,
            "tasks_without_ratings": 0,
            "completed_tasks": 50,
            "data_quality_score": 100,
        }
        values.update(overrides)
        return ValidationStats(**values)

    return _make_stats


@pytest.fixture
def make_validation(make_stats) -> Callable[..., ValidationReport]:
    """Factory for ValidationReport built around make_stats."""

    def _make_validation(
        *, warnings: list[str] | None = None, errors: list[str] | None = None, **stats: int
    ) -> ValidationReport:
        errors = errors or []
        return ValidationReport(
            is_valid=not errors,
            warnings=warnings or [],
            errors=errors,
            stats=make_stats(**stats),
        )

    return _make_validation


@pytest.fixture
def make_record() -> Callable[..., MetricRecord]:
    """Factory for stored metric records."""

    def _make_record(metric_type: str, value: float, created_at: datetime, **fields) -> MetricRecord:
        return MetricRecord(
            user_id=fields.pop("user_id", "e1"),
            metric_type=metric_type,
            metric_value=value,
            period_start=fields.pop("period_start", created_at),
            period_end=fields.pop("period_end", created_at),
            created_at=created_at,
            **fields,
        )

    return _make_record


@pytest.fixture
def history_now() -> datetime:
    """Reference time for metric history tests."""
    return datetime(2024, 6, 30, 12, 0, 0, tzinfo=UTC)
