"""Organisation performance overview: manager, department and health rollups.

Composes the metrics engine and the data integrity validator into the payload the
admin dashboard renders. The two components run independently over the same
input; this module only combines their outputs.
"""

import logging
from collections.abc import Mapping, Sequence
from datetime import datetime

from src.core.config import Constants, settings
from src.core.dates import ensure_aware, utc_now
from src.core.logging import span
from src.domain.task import Task
from src.domain.user import User, UserRole
from src.models.service_models import (
    DepartmentMetrics,
    HealthIndicator,
    HealthStatus,
    ManagerMetrics,
    MetricsResult,
    PerformanceOverview,
)
from src.services import metrics_service, validation_service
from src.services.metrics_service import UNASSIGNED_GROUP
from src.services.record_loader import coerce_tasks, coerce_users


logger = logging.getLogger(__name__)

UserInput = Sequence[User | Mapping[str, object]]
TaskInput = Sequence[Task | Mapping[str, object]]


def _tasks_for_assignees(tasks: Sequence[Task], assignee_ids: set[str]) -> list[Task]:
    return [task for task in tasks if task.assigned_to in assignee_ids]


def _by_productivity(entries: list) -> list:
    return sorted(entries, key=lambda entry: entry.productivity_score, reverse=True)


def calculate_manager_metrics(users: UserInput, tasks: TaskInput) -> list[ManagerMetrics]:
    """Metrics for each manager over the tasks of their direct reports.

    A manager's team is every employee whose ``manager_id`` is the manager's id.
    Results are sorted by productivity score, best first.
    """
    with span("overview_service.calculate_manager_metrics"):
        all_users = coerce_users(users)
        loaded = coerce_tasks(tasks).tasks
        employees = [user for user in all_users if user.role == UserRole.EMPLOYEE]

        results = []
        for manager in (user for user in all_users if user.role == UserRole.MANAGER):
            team_ids = {employee.id for employee in employees if employee.manager_id == manager.id}
            metrics = metrics_service.calculate_advanced_metrics(_tasks_for_assignees(loaded, team_ids))
            results.append(
                ManagerMetrics(
                    **metrics.model_dump(),
                    id=manager.id,
                    name=manager.name,
                    department=manager.department,
                    team_size=len(team_ids),
                )
            )
        return _by_productivity(results)


def calculate_department_metrics(users: UserInput, tasks: TaskInput) -> list[DepartmentMetrics]:
    """Metrics for each department over the tasks of its employees.

    Departments are taken from all users in first-seen order; users without a
    department form the Unassigned group. Results are sorted by productivity score.
    """
    with span("overview_service.calculate_department_metrics"):
        all_users = coerce_users(users)
        loaded = coerce_tasks(tasks).tasks

        departments: dict[str | None, set[str]] = {}
        for user in all_users:
            members = departments.setdefault(user.department or None, set())
            if user.role == UserRole.EMPLOYEE:
                members.add(user.id)

        results = []
        for department, member_ids in departments.items():
            metrics = metrics_service.calculate_advanced_metrics(_tasks_for_assignees(loaded, member_ids))
            results.append(
                DepartmentMetrics(
                    **metrics.model_dump(),
                    name=department if department is not None else UNASSIGNED_GROUP,
                    is_unassigned=department is None,
                    employees=len(member_ids),
                )
            )
        return _by_productivity(results)


def _health_status(value: int, target: int, warning_floor: int) -> HealthStatus:
    if value >= target:
        return HealthStatus.GOOD
    if value >= warning_floor:
        return HealthStatus.WARNING
    return HealthStatus.CRITICAL


def calculate_health_indicators(metrics: MetricsResult) -> list[HealthIndicator]:
    """Compare overall metrics against organisation targets.

    Quality without any rated task is reported as ``no_data`` with no value.
    """
    indicators = []
    for name, value, (target, warning_floor) in (
        ("Completion", metrics.completion_rate, Constants.HEALTH_COMPLETION),
        ("On-Time Delivery", metrics.on_time_rate, Constants.HEALTH_ON_TIME),
        ("Productivity", metrics.productivity_score, Constants.HEALTH_PRODUCTIVITY),
    ):
        indicators.append(
            HealthIndicator(name=name, value=value, target=target, status=_health_status(value, target, warning_floor))
        )

    quality_target, quality_floor = Constants.HEALTH_QUALITY
    if metrics.has_quality_data:
        indicators.append(
            HealthIndicator(
                name="Quality",
                value=metrics.quality_score,
                target=quality_target,
                status=_health_status(metrics.quality_score, quality_target, quality_floor),
            )
        )
    else:
        indicators.append(HealthIndicator(name="Quality", value=None, target=quality_target, status=HealthStatus.NO_DATA))
    return indicators


def build_performance_overview(
    users: UserInput,
    tasks: TaskInput,
    start_date: object = None,
    end_date: object = None,
    *,
    now: datetime | None = None,
) -> PerformanceOverview:
    """Build the organisation-wide overview for an optional date window.

    Rollups use the tasks inside the window; the trend series and the data audit
    cover the full task set.
    """
    with span("overview_service.build_performance_overview"):
        now = ensure_aware(now) if now is not None else utc_now()

        loaded = coerce_tasks(tasks).tasks
        all_users = coerce_users(users)
        if start_date is not None and end_date is not None:
            window = metrics_service.filter_tasks_by_date_range(loaded, start_date, end_date)
        else:
            window = loaded

        overall = metrics_service.calculate_advanced_metrics(window)
        employees = [user for user in all_users if user.role == UserRole.EMPLOYEE]
        validation = validation_service.validate_analytics_data(loaded, all_users, now=now)

        overview = PerformanceOverview(
            overall=overall,
            grade=metrics_service.get_performance_grade(overall.productivity_score),
            employees=metrics_service.calculate_team_metrics(employees, window),
            managers=calculate_manager_metrics(all_users, window),
            departments=calculate_department_metrics(all_users, window),
            health_indicators=calculate_health_indicators(overall),
            trend=metrics_service.calculate_trend_data(loaded, settings.default_trend_days, now=now),
            validation=validation,
            integrity_report=validation_service.generate_data_integrity_report(validation),
            decision_readiness=validation_service.assess_decision_readiness(validation),
        )

        logger.info(
            "Built performance overview",
            extra={
                "users": len(all_users),
                "tasks_in_window": overall.total_tasks,
                "productivity_score": overall.productivity_score,
                "data_quality_score": validation.stats.data_quality_score if validation.stats else None,
            },
        )
        return overview
