"""Pydantic models for service layer return types.

These models are derived, immutable results. They are rebuilt on every call
and serialise with ``model_dump()`` for exporters and dashboards.
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, field_validator

from src.core.dates import ensure_aware
from src.core.errors import DataIssue, ErrorSeverity


class ResultModel(BaseModel):
    """Base class for immutable service results."""

    model_config = ConfigDict(frozen=True)


class MetricsResult(ResultModel):
    """Aggregate performance indicators for a set of tasks."""

    total_tasks: int = 0
    completed_tasks: int = 0
    in_progress_tasks: int = 0
    not_started_tasks: int = 0
    overdue_tasks: int = 0
    blocked_tasks: int = 0
    completion_rate: int = 0
    on_time_rate: int = 0
    average_completion_time: int = 0
    productivity_score: int = 0
    quality_score: int = 0
    workload_score: int = 0
    on_time_completions: int = 0
    tasks_with_ratings: int = 0
    # quality_score is 0 both for "no ratings" and a genuine zero; this flag tells them apart
    has_quality_data: bool = False


class TrendPoint(ResultModel):
    """Activity counts for one calendar day."""

    date: str
    completed: int
    created: int
    in_progress: int


class GroupMetrics(ResultModel):
    """Counts and completion rate for one project or vertical."""

    name: str
    is_unassigned: bool = False
    total: int = 0
    completed: int = 0
    in_progress: int = 0
    blocked: int = 0
    overdue: int = 0
    completion_rate: int = 0


class EmployeeMetrics(MetricsResult):
    """Metrics for one employee with identity fields attached."""

    id: str
    name: str
    email: str | None = None
    department: str | None = None


class ManagerMetrics(MetricsResult):
    """Metrics over the tasks of a manager's direct reports."""

    id: str
    name: str
    department: str | None = None
    team_size: int = 0


class DepartmentMetrics(MetricsResult):
    """Metrics over the tasks of a department's employees."""

    name: str
    is_unassigned: bool = False
    employees: int = 0


class PerformanceGrade(ResultModel):
    """Letter grade classification of a score."""

    grade: str
    color: str
    label: str


class DateRange(ResultModel):
    """Closed date interval."""

    start: datetime
    end: datetime


class ValidationStats(ResultModel):
    """Raw defect counts from a data integrity audit."""

    total_tasks: int
    missing_due_dates: int
    missing_completed_dates: int
    missing_assigned_dates: int
    invalid_dates: int
    future_completed_dates: int
    tasks_without_ratings: int
    completed_tasks: int
    rejected_records: int = 0
    data_quality_score: int


class ValidationReport(ResultModel):
    """Result of validating analytics input data."""

    is_valid: bool
    warnings: list[str]
    errors: list[str]
    stats: ValidationStats | None = None
    issues: list[DataIssue] = []


class IntegrityStatus(StrEnum):
    """Overall data integrity classification."""

    GOOD = "good"
    WARNING = "warning"
    POOR = "poor"
    CRITICAL = "critical"
    ERROR = "error"


class Recommendation(ResultModel):
    """Prioritised remediation step."""

    priority: ErrorSeverity
    message: str
    action: str


class DataIntegrityReport(ResultModel):
    """Display-ready data integrity summary."""

    status: IntegrityStatus
    data_quality_score: int | None = None
    message: str
    warnings: list[str] = []
    errors: list[str] = []
    recommendations: list[Recommendation] = []
    stats: ValidationStats | None = None


class DecisionReadiness(ResultModel):
    """Verdict on whether metrics are reliable enough for people decisions."""

    ready: bool
    confidence: int
    reason: str
    recommendation: str | None = None
    blockers: list[str] | None = None


class DataQualitySummary(ResultModel):
    """Data quality subset of a validation report."""

    score: int
    warnings: list[str]
    errors: list[str]


class MetricsAuditEntry(ResultModel):
    """Timestamped, versioned record of one metrics computation."""

    user_id: str
    timestamp: datetime
    calculated_at: datetime
    metrics: MetricsResult
    data_quality: DataQualitySummary
    decision_readiness: DecisionReadiness
    version: str


class HealthStatus(StrEnum):
    """Status of an organisation health indicator."""

    GOOD = "good"
    WARNING = "warning"
    CRITICAL = "critical"
    NO_DATA = "no_data"


class HealthIndicator(ResultModel):
    """One organisation health indicator against its target."""

    name: str
    value: int | None
    target: int
    status: HealthStatus


class PerformanceOverview(ResultModel):
    """Organisation-wide dashboard payload."""

    overall: MetricsResult
    grade: PerformanceGrade
    employees: list[EmployeeMetrics]
    managers: list[ManagerMetrics]
    departments: list[DepartmentMetrics]
    health_indicators: list[HealthIndicator]
    trend: list[TrendPoint]
    validation: ValidationReport
    integrity_report: DataIntegrityReport
    decision_readiness: DecisionReadiness


class MetricRecord(ResultModel):
    """Single stored metric value for historical tracking."""

    user_id: str
    metric_type: str
    metric_value: float
    period_start: datetime
    period_end: datetime
    created_at: datetime
    metadata: dict[str, object] = {}

    @field_validator("period_start", "period_end", "created_at")
    @classmethod
    def normalise_timezone(cls, v: datetime) -> datetime:
        """Treat naive timestamps as UTC so records compare with aware cut-offs."""
        return ensure_aware(v)


class TrendDirection(StrEnum):
    """Direction of a metric over time."""

    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"
    INSUFFICIENT_DATA = "insufficient_data"


class MetricTrend(ResultModel):
    """Change of one metric type across its history window."""

    metric_type: str
    trend: TrendDirection
    change: float = 0.0
    percent_change: float = 0.0
    data_points: int = 0
    oldest_value: float | None = None
    oldest_date: datetime | None = None
    newest_value: float | None = None
    newest_date: datetime | None = None
    average: float | None = None


class MetricComparison(ResultModel):
    """Current metric value compared with its historical average."""

    metric_type: str
    current: float
    historical: float
    trend: TrendDirection
    change: float
    percent_change: float
