"""Metrics engine: performance indicators computed from task records.

This module provides pure functions for:
- Aggregating a task set into rates and scores (completion, on-time, speed, quality, workload)
- Building daily trend series for charts
- Rolling tasks up by project, vertical and employee
- Classifying scores into letter grades and building canonical date ranges

Key Concepts:
- Start of work: ``assigned_date``, falling back to ``created_at``. Used for date-range
  filtering and completion time.
- Activity date: ``completed_date``, then ``updated_at``, then ``created_at``. Used to
  bucket tasks into trend days.
- Productivity score: fixed-weight composite of completion rate (40%), on-time rate
  (30%), speed (20%) and share of unblocked tasks (10%).
- Quality score: average rating scaled to 0-100. It is 0 when no task carries a rating;
  ``has_quality_data`` distinguishes that case from a genuine zero.

Every function works on its own argument snapshot and returns fresh results; nothing
is cached between calls.
"""

import logging
from collections import Counter
from collections.abc import Callable, Mapping, Sequence
from datetime import datetime, timedelta

from src.core.config import Constants
from src.core.dates import (
    add_months,
    ceil_days,
    end_of_day,
    ensure_aware,
    last_day_of_month,
    parse_datetime,
    round_half_up,
    start_of_day,
    utc_date_key,
    utc_now,
)
from src.core.logging import span
from src.domain.task import Task, TaskStatus
from src.domain.user import User
from src.models.service_models import (
    DateRange,
    EmployeeMetrics,
    GroupMetrics,
    MetricsResult,
    PerformanceGrade,
    TrendPoint,
)
from src.services.record_loader import coerce_tasks, coerce_users, is_record_sequence


logger = logging.getLogger(__name__)

UNASSIGNED_GROUP = "Unassigned"

TaskInput = Sequence[Task | Mapping[str, object]]

_GRADE_TABLE: tuple[tuple[int, PerformanceGrade], ...] = (
    (Constants.GRADE_A_PLUS, PerformanceGrade(grade="A+", color="#10b981", label="Excellent")),
    (Constants.GRADE_A, PerformanceGrade(grade="A", color="#3b82f6", label="Great")),
    (Constants.GRADE_B, PerformanceGrade(grade="B", color="#8b5cf6", label="Good")),
    (Constants.GRADE_C, PerformanceGrade(grade="C", color="#f59e0b", label="Average")),
    (Constants.GRADE_D, PerformanceGrade(grade="D", color="#f97316", label="Below Average")),
)
_FAILING_GRADE = PerformanceGrade(grade="F", color="#ef4444", label="Needs Improvement")


def _percentage(part: int, whole: int) -> int:
    """Rounded percentage, defined as 0 when whole is 0."""
    if whole <= 0:
        return 0
    return round_half_up(part / whole * 100)


def _clamp_score(value: float) -> int:
    return max(0, min(100, round_half_up(value)))


def _is_on_time(task: Task) -> bool:
    completed = parse_datetime(task.completed_date)
    due = parse_datetime(task.due_date)
    if completed is None or due is None:
        return False
    return completed <= due


def _completion_days(task: Task) -> int | None:
    """Ceil-day duration from start of work to completion, or None if unusable."""
    started = parse_datetime(task.start_of_work)
    completed = parse_datetime(task.completed_date)
    if started is None or completed is None or completed < started:
        return None
    days = ceil_days(started, completed)
    if days > Constants.MAX_COMPLETION_DAYS:
        logger.debug("Ignoring completion time of %d days for task %s", days, task.id)
        return None
    return days


def _has_valid_rating(task: Task) -> bool:
    return task.rating is not None and 0 < task.rating <= Constants.MAX_RATING


def _filter_by_start_of_work(tasks: Sequence[Task], start: datetime, end: datetime) -> list[Task]:
    filtered = []
    for task in tasks:
        started = parse_datetime(task.start_of_work)
        if started is not None and start <= started <= end:
            filtered.append(task)
    return filtered


def _compute_metrics(tasks: Sequence[Task]) -> MetricsResult:
    """Aggregate already-validated tasks into a MetricsResult."""
    total = len(tasks)
    status_counts = Counter(task.status for task in tasks)
    completed_tasks = [task for task in tasks if task.is_completed]
    completed = len(completed_tasks)
    blocked = status_counts[TaskStatus.BLOCKED]

    completion_rate = _percentage(completed, total)

    on_time_completions = sum(1 for task in completed_tasks if _is_on_time(task))
    on_time_rate = _percentage(on_time_completions, completed)

    durations = [days for task in completed_tasks if (days := _completion_days(task)) is not None]
    average_completion_time = round_half_up(sum(durations) / len(durations)) if durations else 0

    blocked_ratio = blocked / total if total else 0.0
    speed_component = max(0, 100 - average_completion_time * Constants.SPEED_PENALTY_PER_DAY)
    unblocked_component = max(0.0, 100 - blocked_ratio * 100)
    productivity_score = _clamp_score(
        completion_rate * Constants.WEIGHT_COMPLETION_RATE
        + on_time_rate * Constants.WEIGHT_ON_TIME_RATE
        + speed_component * Constants.WEIGHT_SPEED
        + unblocked_component * Constants.WEIGHT_UNBLOCKED
    )

    ratings = [task.rating for task in tasks if _has_valid_rating(task)]
    if ratings:
        average_rating = sum(ratings) / len(ratings)
        quality_score = round_half_up(average_rating / Constants.MAX_RATING * 100)
    else:
        quality_score = 0

    if total == 0:
        workload_score = 100
    else:
        workload_score = _clamp_score(
            100 - (total - Constants.WORKLOAD_BASELINE_TASKS) * Constants.WORKLOAD_PENALTY_PER_TASK
        )

    return MetricsResult(
        total_tasks=total,
        completed_tasks=completed,
        in_progress_tasks=status_counts[TaskStatus.IN_PROGRESS],
        not_started_tasks=status_counts[TaskStatus.NOT_STARTED],
        overdue_tasks=status_counts[TaskStatus.OVERDUE],
        blocked_tasks=blocked,
        completion_rate=completion_rate,
        on_time_rate=on_time_rate,
        average_completion_time=average_completion_time,
        productivity_score=productivity_score,
        quality_score=quality_score,
        workload_score=workload_score,
        on_time_completions=on_time_completions,
        tasks_with_ratings=len(ratings),
        has_quality_data=bool(ratings),
    )


def filter_tasks_by_date_range(tasks: TaskInput, start_date: object, end_date: object) -> list[Task]:
    """Return tasks whose start of work falls within [start_date, end_date].

    Both bounds are inclusive. Tasks without a parseable start of work are dropped.
    If either bound is missing or unparsable, all valid tasks are returned.
    """
    loaded = coerce_tasks(tasks).tasks
    start = parse_datetime(start_date)
    end = parse_datetime(end_date)
    if start is None or end is None:
        return loaded
    return _filter_by_start_of_work(loaded, start, end)


def calculate_advanced_metrics(
    tasks: TaskInput,
    start_date: object = None,
    end_date: object = None,
) -> MetricsResult:
    """Calculate aggregate performance indicators for a task set.

    Args:
        tasks: Task models or raw task mappings
        start_date: Optional inclusive lower bound on start of work
        end_date: Optional inclusive upper bound on start of work

    Returns:
        MetricsResult with bucket counts, rates and scores. A non-sequence input
        yields the all-zero default result.
    """
    with span("metrics_service.calculate_advanced_metrics"):
        if not is_record_sequence(tasks):
            logger.error("calculate_advanced_metrics: tasks must be a sequence, got %s", type(tasks).__name__)
            return MetricsResult()

        if start_date is not None and end_date is not None:
            filtered = filter_tasks_by_date_range(tasks, start_date, end_date)
        else:
            filtered = coerce_tasks(tasks).tasks

        result = _compute_metrics(filtered)
        logger.debug(
            "Computed advanced metrics",
            extra={
                "total_tasks": result.total_tasks,
                "completion_rate": result.completion_rate,
                "productivity_score": result.productivity_score,
            },
        )
        return result


def calculate_trend_data(tasks: TaskInput, days: int = 30, *, now: datetime | None = None) -> list[TrendPoint]:
    """Build one activity point per day for the trailing `days` days, ending today.

    ``completed`` and ``in_progress`` count tasks by activity date; ``created`` counts
    tasks by creation date. Dates are UTC calendar days.
    """
    with span("metrics_service.calculate_trend_data"):
        now = ensure_aware(now) if now is not None else utc_now()
        if days <= 0:
            return []

        completed_by_day: Counter[str] = Counter()
        in_progress_by_day: Counter[str] = Counter()
        created_by_day: Counter[str] = Counter()

        for task in coerce_tasks(tasks).tasks:
            activity = parse_datetime(task.activity_date)
            if activity is not None:
                key = utc_date_key(activity)
                if task.status == TaskStatus.COMPLETED:
                    completed_by_day[key] += 1
                elif task.status == TaskStatus.IN_PROGRESS:
                    in_progress_by_day[key] += 1
            created = parse_datetime(task.created_at)
            if created is not None:
                created_by_day[utc_date_key(created)] += 1

        trend = []
        for offset in range(days - 1, -1, -1):
            key = utc_date_key(now - timedelta(days=offset))
            trend.append(
                TrendPoint(
                    date=key,
                    completed=completed_by_day[key],
                    created=created_by_day[key],
                    in_progress=in_progress_by_day[key],
                )
            )
        return trend


def _group_metrics(tasks: TaskInput, key_fn: Callable[[Task], str | None]) -> list[GroupMetrics]:
    """Roll tasks up by a grouping key, preserving first-seen order."""
    groups: dict[str | None, list[Task]] = {}
    for task in coerce_tasks(tasks).tasks:
        groups.setdefault(key_fn(task) or None, []).append(task)

    results = []
    for key, group_tasks in groups.items():
        counts = Counter(task.status for task in group_tasks)
        total = len(group_tasks)
        results.append(
            GroupMetrics(
                name=key if key is not None else UNASSIGNED_GROUP,
                is_unassigned=key is None,
                total=total,
                completed=counts[TaskStatus.COMPLETED],
                in_progress=counts[TaskStatus.IN_PROGRESS],
                blocked=counts[TaskStatus.BLOCKED],
                overdue=counts[TaskStatus.OVERDUE],
                completion_rate=_percentage(counts[TaskStatus.COMPLETED], total),
            )
        )
    return results


def calculate_project_metrics(tasks: TaskInput) -> list[GroupMetrics]:
    """Roll tasks up by project; tasks without a project land in the Unassigned group."""
    with span("metrics_service.calculate_project_metrics"):
        return _group_metrics(tasks, lambda task: task.project)


def calculate_vertical_metrics(tasks: TaskInput) -> list[GroupMetrics]:
    """Roll tasks up by vertical; tasks without a vertical land in the Unassigned group."""
    with span("metrics_service.calculate_vertical_metrics"):
        return _group_metrics(tasks, lambda task: task.vertical)


def calculate_team_metrics(
    employees: Sequence[User | Mapping[str, object]],
    tasks: TaskInput,
) -> list[EmployeeMetrics]:
    """Calculate full metrics per employee, best productivity first.

    Args:
        employees: Users to report on
        tasks: Task set; each employee gets the tasks assigned to them

    Returns:
        List of EmployeeMetrics sorted descending by productivity score. Ties keep
        the input order of employees.
    """
    with span("metrics_service.calculate_team_metrics"):
        loaded = coerce_tasks(tasks).tasks
        tasks_by_assignee: dict[str, list[Task]] = {}
        for task in loaded:
            if task.assigned_to is not None:
                tasks_by_assignee.setdefault(task.assigned_to, []).append(task)

        team_metrics = []
        for employee in coerce_users(employees):
            metrics = _compute_metrics(tasks_by_assignee.get(employee.id, []))
            team_metrics.append(
                EmployeeMetrics(
                    **metrics.model_dump(),
                    id=employee.id,
                    name=employee.name,
                    email=employee.email,
                    department=employee.department,
                )
            )

        team_metrics.sort(key=lambda entry: entry.productivity_score, reverse=True)
        logger.info("Calculated team metrics for %d employees", len(team_metrics))
        return team_metrics


def get_performance_grade(score: float) -> PerformanceGrade:
    """Classify a score into a letter grade (lower bounds inclusive)."""
    for lower_bound, grade in _GRADE_TABLE:
        if score >= lower_bound:
            return grade
    return _FAILING_GRADE


def get_date_range_presets(*, now: datetime | None = None) -> dict[str, DateRange]:
    """Build the named date-range presets anchored to `now`.

    Each range runs from 00:00:00 on its first day to 23:59:59.999999 on its last day.
    """
    now = ensure_aware(now) if now is not None else utc_now()

    today_start = start_of_day(now)
    today_end = end_of_day(now)
    month_start = today_start.replace(day=1)
    quarter_start = today_start.replace(month=(now.month - 1) // 3 * 3 + 1, day=1)

    return {
        "today": DateRange(start=today_start, end=today_end),
        "last7Days": DateRange(start=today_start - timedelta(days=7), end=today_end),
        "last30Days": DateRange(start=today_start - timedelta(days=30), end=today_end),
        "last90Days": DateRange(start=today_start - timedelta(days=90), end=today_end),
        "thisMonth": DateRange(start=month_start, end=end_of_day(last_day_of_month(now))),
        "lastMonth": DateRange(
            start=add_months(month_start, -1),
            end=end_of_day(month_start - timedelta(days=1)),
        ),
        "thisQuarter": DateRange(
            start=quarter_start,
            end=end_of_day(last_day_of_month(add_months(quarter_start, 2))),
        ),
        "thisYear": DateRange(
            start=today_start.replace(month=1, day=1),
            end=end_of_day(now.replace(month=12, day=31)),
        ),
    }
