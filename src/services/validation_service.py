"""Data integrity validation for performance analytics.

This module audits the same task records the metrics engine consumes and reports
on how far the resulting numbers can be trusted:
- validate_analytics_data: counts data-quality defects and integrity violations
- generate_data_integrity_report: classifies overall status and derives recommendations
- assess_decision_readiness: decides whether metrics may inform personnel decisions
- create_metrics_audit_log: assembles an audit record for the persistence layer

Defect taxonomy:
- Type-contract violation: the task collection is not a sequence. Reported as an
  invalid result, never raised.
- Data-quality defect: a missing optional field or an unparsable date. Recorded as
  a warning; computation continues.
- Data-integrity violation: a completion date later than the evaluation time.
  Recorded as one error line per task ("Task <id> has completion date in the
  future") and makes the report invalid. The aggregate count of such tasks is
  reported only as a structured ERR_FUTURE_COMPLETION issue, not as an extra
  error line, so ``len(errors)`` equals the number of offending tasks.

The data quality score deducts one unit per defect from ``total`` and divides by
``total * 5``. A task with several defects is penalised once per defect category,
so overlapping defects can push the raw value below zero; the result is clamped
to the 0-100 range.
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime

from src.core.config import Constants
from src.core.dates import ensure_aware, parse_datetime, round_half_up, utc_now
from src.core.errors import SEVERITY_RANK, DataIssue, ErrorCode, ErrorSeverity, build_issue
from src.core.logging import log_with_context, span
from src.domain.task import Task
from src.domain.user import User
from src.models.service_models import (
    DataIntegrityReport,
    DataQualitySummary,
    DecisionReadiness,
    IntegrityStatus,
    MetricsAuditEntry,
    MetricsResult,
    Recommendation,
    ValidationReport,
    ValidationStats,
)
from src.services.record_loader import coerce_tasks, coerce_users, is_record_sequence


logger = logging.getLogger(__name__)


def _percent(part: int, whole: int) -> int:
    return round_half_up(part / whole * 100) if whole else 0


def _data_quality_score(total: int, defects: int) -> int:
    raw = (total - defects) / max(total * Constants.DATA_QUALITY_PENALTY_SLOTS, 1) * 100
    return max(0, min(100, round_half_up(raw)))


def validate_analytics_data(  # noqa: C901, PLR0912, PLR0915
    tasks: Sequence[Task | Mapping[str, object]],
    users: Sequence[User | Mapping[str, object]] | None = None,
    *,
    now: datetime | None = None,
) -> ValidationReport:
    """Audit analytics input data for quality and integrity problems.

    Args:
        tasks: Task models or raw task mappings
        users: Optional users; when given, tasks assigned to unknown users are reported
        now: Evaluation time for future-date detection (default: current UTC time)

    Returns:
        ValidationReport. ``is_valid`` is False when the input is not a sequence
        (``stats`` is then None) or when any completion date lies in the future.
    """
    with span("validation_service.validate_analytics_data"):
        now = ensure_aware(now) if now is not None else utc_now()

        if not is_record_sequence(tasks):
            message = "Tasks data is not an array"
            logger.error("validate_analytics_data: %s (got %s)", message, type(tasks).__name__)
            return ValidationReport(
                is_valid=False,
                warnings=[],
                errors=[message],
                stats=None,
                issues=[build_issue(ErrorCode.ERR_TASKS_NOT_SEQUENCE, message)],
            )

        loaded = coerce_tasks(tasks)
        task_list = loaded.tasks
        warnings: list[str] = []
        errors: list[str] = []
        issues: list[DataIssue] = []

        missing_due_dates = 0
        missing_completed_dates = 0
        missing_assigned_dates = 0
        invalid_dates = 0
        future_completed_dates = 0
        tasks_without_ratings = 0
        completed_tasks = 0

        for task in task_list:
            if not task.due_date:
                missing_due_dates += 1
            if task.is_completed:
                completed_tasks += 1
                if not task.completed_date:
                    missing_completed_dates += 1
                if not task.rating:
                    tasks_without_ratings += 1
            if not task.assigned_date and not task.created_at:
                missing_assigned_dates += 1

            if task.completed_date:
                completed_at = parse_datetime(task.completed_date)
                if completed_at is None:
                    invalid_dates += 1
                elif completed_at > now:
                    future_completed_dates += 1
                    errors.append(f"Task {task.id} has completion date in the future")

        total_tasks = len(task_list)

        if loaded.rejected:
            message = f"{loaded.rejected} task records failed validation and were excluded"
            warnings.append(message)
            issues.append(build_issue(ErrorCode.ERR_RECORD_REJECTED, message, count=loaded.rejected))

        if total_tasks == 0:
            message = "No tasks found - analytics will show zero values"
            warnings.append(message)
            issues.append(build_issue(ErrorCode.ERR_NO_TASKS, message))

        if missing_due_dates:
            message = (
                f"{missing_due_dates} tasks ({_percent(missing_due_dates, total_tasks)}%) "
                "missing due dates - affects on-time metrics"
            )
            warnings.append(message)
            issues.append(build_issue(ErrorCode.ERR_MISSING_DUE_DATE, message, count=missing_due_dates))

        if missing_completed_dates:
            message = f"{missing_completed_dates} completed tasks missing completion dates - affects timing metrics"
            warnings.append(message)
            issues.append(build_issue(ErrorCode.ERR_MISSING_COMPLETED_DATE, message, count=missing_completed_dates))

        if missing_assigned_dates:
            message = f"{missing_assigned_dates} tasks missing assignment dates - affects duration calculations"
            warnings.append(message)
            issues.append(build_issue(ErrorCode.ERR_MISSING_ASSIGNED_DATE, message, count=missing_assigned_dates))

        if invalid_dates:
            message = f"{invalid_dates} tasks have invalid date formats"
            warnings.append(message)
            issues.append(build_issue(ErrorCode.ERR_INVALID_DATE, message, count=invalid_dates))

        if future_completed_dates:
            issues.append(
                build_issue(
                    ErrorCode.ERR_FUTURE_COMPLETION,
                    f"{future_completed_dates} tasks have completion dates in the future - data integrity issue",
                    count=future_completed_dates,
                )
            )

        if tasks_without_ratings and completed_tasks:
            message = (
                f"{tasks_without_ratings} completed tasks "
                f"({_percent(tasks_without_ratings, completed_tasks)}%) have no quality ratings "
                "- quality score may be inaccurate"
            )
            warnings.append(message)
            issues.append(build_issue(ErrorCode.ERR_MISSING_RATING, message, count=tasks_without_ratings))

        if users:
            known_ids = {user.id for user in coerce_users(users)}
            unknown = sum(1 for task in task_list if task.assigned_to and task.assigned_to not in known_ids)
            if unknown:
                warnings.append(f"{unknown} tasks assigned to unknown users - excluded from team rollups")

        defects = (
            missing_due_dates + missing_completed_dates + missing_assigned_dates + invalid_dates + future_completed_dates
        )
        stats = ValidationStats(
            total_tasks=total_tasks,
            missing_due_dates=missing_due_dates,
            missing_completed_dates=missing_completed_dates,
            missing_assigned_dates=missing_assigned_dates,
            invalid_dates=invalid_dates,
            future_completed_dates=future_completed_dates,
            tasks_without_ratings=tasks_without_ratings,
            completed_tasks=completed_tasks,
            rejected_records=loaded.rejected,
            data_quality_score=_data_quality_score(total_tasks, defects),
        )

        logger.info(
            "Validated analytics data",
            extra={
                "total_tasks": total_tasks,
                "warnings": len(warnings),
                "errors": len(errors),
                "data_quality_score": stats.data_quality_score,
            },
        )

        return ValidationReport(
            is_valid=not errors,
            warnings=warnings,
            errors=errors,
            stats=stats,
            issues=issues,
        )


def generate_data_integrity_report(validation: ValidationReport | None) -> DataIntegrityReport:
    """Summarise a validation result with an overall status and recommendations.

    Status is ``critical`` when errors exist, ``poor`` below a quality score of 70,
    ``warning`` below 90 or when warnings exist, and ``good`` otherwise.
    Recommendations are ordered critical first.
    """
    if validation is None or validation.stats is None:
        return DataIntegrityReport(
            status=IntegrityStatus.ERROR,
            message="Unable to generate report - validation data missing",
        )

    stats = validation.stats
    score = stats.data_quality_score

    if validation.errors:
        status = IntegrityStatus.CRITICAL
    elif score < Constants.INTEGRITY_POOR_BELOW:
        status = IntegrityStatus.POOR
    elif score < Constants.INTEGRITY_WARNING_BELOW or validation.warnings:
        status = IntegrityStatus.WARNING
    else:
        status = IntegrityStatus.GOOD

    recommendations: list[Recommendation] = []
    if stats.missing_due_dates > 0:
        recommendations.append(
            Recommendation(
                priority=ErrorSeverity.HIGH,
                message="Add due dates to all tasks to improve on-time delivery tracking",
                action="Review tasks and set appropriate due dates",
            )
        )
    if stats.tasks_without_ratings > stats.completed_tasks * Constants.UNRATED_SHARE_HIGH_PRIORITY:
        recommendations.append(
            Recommendation(
                priority=ErrorSeverity.HIGH,
                message="More than 50% of completed tasks lack quality ratings",
                action="Implement mandatory quality ratings for completed tasks",
            )
        )
    if stats.missing_completed_dates > 0:
        recommendations.append(
            Recommendation(
                priority=ErrorSeverity.MEDIUM,
                message="Some completed tasks are missing completion timestamps",
                action="Ensure system automatically records completion dates",
            )
        )
    if stats.future_completed_dates > 0:
        recommendations.append(
            Recommendation(
                priority=ErrorSeverity.CRITICAL,
                message="Data integrity issue: Tasks marked complete with future dates",
                action="Review and correct task completion dates immediately",
            )
        )
    recommendations.sort(key=lambda rec: SEVERITY_RANK[rec.priority])

    return DataIntegrityReport(
        status=status,
        data_quality_score=score,
        message=f"Data quality score: {score}/100",
        warnings=list(validation.warnings),
        errors=list(validation.errors),
        recommendations=recommendations,
        stats=stats,
    )


def assess_decision_readiness(validation: ValidationReport | None) -> DecisionReadiness:
    """Decide whether metrics are reliable enough for employment decisions.

    Hard gates (errors, fewer than 10 tasks, data quality below 70) fail first.
    Otherwise confidence starts at the data quality score, is discounted for small
    samples (x0.8 below 30 tasks, else x0.9 below 50) and for low completion
    (x0.7 below 30%), and must reach 75.
    """
    if validation is None or validation.stats is None:
        return DecisionReadiness(ready=False, confidence=0, reason="Insufficient data for assessment")

    stats = validation.stats

    if validation.errors:
        return DecisionReadiness(
            ready=False,
            confidence=0,
            reason="Critical data integrity errors detected",
            blockers=list(validation.errors),
        )

    if stats.total_tasks < Constants.READINESS_MIN_TASKS:
        return DecisionReadiness(
            ready=False,
            confidence=stats.total_tasks * 10,
            reason=f"Insufficient task history (minimum {Constants.READINESS_MIN_TASKS} tasks required)",
            recommendation="Wait for more data before making employment decisions",
        )

    if stats.data_quality_score < Constants.READINESS_MIN_QUALITY:
        return DecisionReadiness(
            ready=False,
            confidence=stats.data_quality_score,
            reason="Data quality score too low for reliable metrics",
            recommendation="Improve data quality by adding missing information",
        )

    confidence = float(stats.data_quality_score)
    if stats.total_tasks < Constants.READINESS_SMALL_SAMPLE:
        confidence *= Constants.READINESS_SMALL_SAMPLE_FACTOR
    elif stats.total_tasks < Constants.READINESS_MEDIUM_SAMPLE:
        confidence *= Constants.READINESS_MEDIUM_SAMPLE_FACTOR

    if stats.completed_tasks / stats.total_tasks < Constants.READINESS_LOW_COMPLETION_RATIO:
        confidence *= Constants.READINESS_LOW_COMPLETION_FACTOR

    ready = confidence >= Constants.READINESS_CONFIDENCE_THRESHOLD
    if ready:
        return DecisionReadiness(
            ready=True,
            confidence=round_half_up(confidence),
            reason="Metrics are sufficiently reliable for consideration",
            recommendation="Ensure metrics are reviewed in context with other performance factors",
        )
    return DecisionReadiness(
        ready=False,
        confidence=round_half_up(confidence),
        reason="Data quality or sample size insufficient",
        recommendation="Collect more data or improve data quality before making decisions",
    )


def create_metrics_audit_log(
    user_id: str,
    metrics: MetricsResult,
    validation: ValidationReport,
    *,
    now: datetime | None = None,
) -> MetricsAuditEntry:
    """Assemble an audit entry for one metrics computation.

    The entry is returned, not stored; persisting it is the caller's job.
    """
    now = ensure_aware(now) if now is not None else utc_now()

    readiness = assess_decision_readiness(validation)
    entry = MetricsAuditEntry(
        user_id=user_id,
        timestamp=now,
        calculated_at=now,
        metrics=metrics,
        data_quality=DataQualitySummary(
            score=validation.stats.data_quality_score if validation.stats else 0,
            warnings=list(validation.warnings),
            errors=list(validation.errors),
        ),
        decision_readiness=readiness,
        version=Constants.METRICS_METHODOLOGY_VERSION,
    )

    log_with_context(
        logger,
        "info",
        "Metrics audit entry created",
        user_id=user_id,
        data_quality_score=entry.data_quality.score,
        decision_ready=readiness.ready,
    )
    return entry
