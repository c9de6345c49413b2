"""Metric history: records for historical tracking and trend analysis over them.

Storage is handled by the persistence layer. This module only builds the
records to store and analyses records that have been read back.
"""

import logging
from collections.abc import Iterable, Mapping
from datetime import datetime, timedelta

from src.core.config import Constants, settings
from src.core.dates import ensure_aware, utc_now
from src.core.logging import span
from src.models.service_models import (
    MetricComparison,
    MetricRecord,
    MetricsResult,
    MetricTrend,
    TrendDirection,
)


logger = logging.getLogger(__name__)

# metric_type -> MetricsResult attribute
TRACKED_METRICS: dict[str, str] = {
    "completion_rate": "completion_rate",
    "on_time_rate": "on_time_rate",
    "productivity_score": "productivity_score",
    "quality_score": "quality_score",
    "average_completion_time": "average_completion_time",
    "total_tasks": "total_tasks",
    "completed_tasks": "completed_tasks",
    "blocked_tasks": "blocked_tasks",
    "overdue_tasks": "overdue_tasks",
}

COMPARED_METRICS: tuple[str, ...] = ("completion_rate", "productivity_score", "quality_score", "on_time_rate")


def build_metric_records(
    user_id: str,
    metrics: MetricsResult,
    *,
    period_start: datetime | None = None,
    period_end: datetime | None = None,
    metadata: Mapping[str, object] | None = None,
    now: datetime | None = None,
) -> list[MetricRecord]:
    """Split a metrics result into one record per tracked metric type.

    Args:
        user_id: User the metrics belong to
        metrics: Computed metrics
        period_start: Start of the measured period (default: now)
        period_end: End of the measured period (default: now)
        metadata: Extra metadata merged into every record
        now: Creation time of the records (default: current UTC time)

    Returns:
        List of MetricRecord objects in TRACKED_METRICS order
    """
    now = ensure_aware(now) if now is not None else utc_now()

    record_metadata = {
        **(metadata or {}),
        "calculated_at": now.isoformat(),
        "version": Constants.METRICS_METHODOLOGY_VERSION,
    }
    return [
        MetricRecord(
            user_id=user_id,
            metric_type=metric_type,
            metric_value=float(getattr(metrics, attribute)),
            period_start=period_start or now,
            period_end=period_end or now,
            created_at=now,
            metadata=record_metadata,
        )
        for metric_type, attribute in TRACKED_METRICS.items()
    ]


def latest_metrics(records: Iterable[MetricRecord]) -> dict[str, MetricRecord]:
    """Return the most recent record for each metric type."""
    latest: dict[str, MetricRecord] = {}
    for record in records:
        current = latest.get(record.metric_type)
        if current is None or record.created_at > current.created_at:
            latest[record.metric_type] = record
    return latest


def calculate_metric_trend(
    records: Iterable[MetricRecord],
    metric_type: str,
    days: int = 30,
    *,
    now: datetime | None = None,
) -> MetricTrend:
    """Compare the oldest and newest values of one metric within the look-back window.

    Records whose period started before ``now - days`` are ignored. Fewer than two
    remaining records yield an ``insufficient_data`` trend.
    """
    with span("metrics_history_service.calculate_metric_trend"):
        now = ensure_aware(now) if now is not None else utc_now()
        cutoff = now - timedelta(days=days)

        history = sorted(
            (r for r in records if r.metric_type == metric_type and r.period_start >= cutoff),
            key=lambda r: r.created_at,
        )
        if len(history) < 2:
            return MetricTrend(
                metric_type=metric_type,
                trend=TrendDirection.INSUFFICIENT_DATA,
                data_points=len(history),
            )

        oldest, newest = history[0], history[-1]
        change = newest.metric_value - oldest.metric_value
        percent_change = round(change / oldest.metric_value * 100, 2) if oldest.metric_value != 0 else 0.0

        if change > 0:
            trend = TrendDirection.IMPROVING
        elif change < 0:
            trend = TrendDirection.DECLINING
        else:
            trend = TrendDirection.STABLE

        return MetricTrend(
            metric_type=metric_type,
            trend=trend,
            change=round(change, 2),
            percent_change=percent_change,
            data_points=len(history),
            oldest_value=oldest.metric_value,
            oldest_date=oldest.created_at,
            newest_value=newest.metric_value,
            newest_date=newest.created_at,
            average=sum(r.metric_value for r in history) / len(history),
        )


def compare_with_historical(
    current: MetricsResult,
    records: Iterable[MetricRecord],
    days: int | None = None,
    *,
    now: datetime | None = None,
) -> dict[str, MetricComparison]:
    """Compare current headline metrics with their historical averages."""
    if days is None:
        days = settings.history_window_days
    history = list(records)

    comparisons = {}
    for metric_type in COMPARED_METRICS:
        trend = calculate_metric_trend(history, metric_type, days, now=now)
        comparisons[metric_type] = MetricComparison(
            metric_type=metric_type,
            current=float(getattr(current, TRACKED_METRICS[metric_type])),
            historical=trend.average or 0.0,
            trend=trend.trend,
            change=trend.change,
            percent_change=trend.percent_change,
        )

    logger.debug("Compared %d metrics against %d historical records", len(comparisons), len(history))
    return comparisons
