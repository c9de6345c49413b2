"""Issue classification for analytics data audits."""

from enum import Enum

from pydantic import BaseModel


class IssueCategory(Enum):
    """Categories of problems found while auditing analytics input."""

    TYPE_CONTRACT = "type_contract"
    DATA_QUALITY = "data_quality"
    DATA_INTEGRITY = "data_integrity"


class ErrorSeverity(Enum):
    """Severity levels for issues and recommendation priorities."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


SEVERITY_RANK: dict[ErrorSeverity, int] = {
    ErrorSeverity.CRITICAL: 0,
    ErrorSeverity.HIGH: 1,
    ErrorSeverity.MEDIUM: 2,
    ErrorSeverity.LOW: 3,
}


class ErrorCode:
    """Error codes for specific audit conditions."""

    # Input shape
    ERR_TASKS_NOT_SEQUENCE = "ERR_TASKS_NOT_SEQUENCE"
    ERR_RECORD_REJECTED = "ERR_RECORD_REJECTED"

    # Data quality defects
    ERR_NO_TASKS = "ERR_NO_TASKS"
    ERR_MISSING_DUE_DATE = "ERR_MISSING_DUE_DATE"
    ERR_MISSING_COMPLETED_DATE = "ERR_MISSING_COMPLETED_DATE"
    ERR_MISSING_ASSIGNED_DATE = "ERR_MISSING_ASSIGNED_DATE"
    ERR_INVALID_DATE = "ERR_INVALID_DATE"
    ERR_MISSING_RATING = "ERR_MISSING_RATING"

    # Data integrity violations
    ERR_FUTURE_COMPLETION = "ERR_FUTURE_COMPLETION"


class DataIssue(BaseModel):
    """Structured description of one audited defect category."""

    code: str
    category: IssueCategory
    severity: ErrorSeverity
    message: str
    count: int = 0


_ISSUE_CLASSIFICATION: dict[str, tuple[IssueCategory, ErrorSeverity]] = {
    ErrorCode.ERR_TASKS_NOT_SEQUENCE: (IssueCategory.TYPE_CONTRACT, ErrorSeverity.CRITICAL),
    ErrorCode.ERR_RECORD_REJECTED: (IssueCategory.TYPE_CONTRACT, ErrorSeverity.MEDIUM),
    ErrorCode.ERR_NO_TASKS: (IssueCategory.DATA_QUALITY, ErrorSeverity.LOW),
    ErrorCode.ERR_MISSING_DUE_DATE: (IssueCategory.DATA_QUALITY, ErrorSeverity.HIGH),
    ErrorCode.ERR_MISSING_COMPLETED_DATE: (IssueCategory.DATA_QUALITY, ErrorSeverity.MEDIUM),
    ErrorCode.ERR_MISSING_ASSIGNED_DATE: (IssueCategory.DATA_QUALITY, ErrorSeverity.MEDIUM),
    ErrorCode.ERR_INVALID_DATE: (IssueCategory.DATA_QUALITY, ErrorSeverity.MEDIUM),
    ErrorCode.ERR_MISSING_RATING: (IssueCategory.DATA_QUALITY, ErrorSeverity.LOW),
    ErrorCode.ERR_FUTURE_COMPLETION: (IssueCategory.DATA_INTEGRITY, ErrorSeverity.CRITICAL),
}


def classify_issue(code: str) -> tuple[IssueCategory, ErrorSeverity]:
    """Return the category and severity for an issue code.

    Unknown codes are treated as medium-severity data quality issues.
    """
    return _ISSUE_CLASSIFICATION.get(code, (IssueCategory.DATA_QUALITY, ErrorSeverity.MEDIUM))


def build_issue(code: str, message: str, *, count: int = 0) -> DataIssue:
    """Build a DataIssue with category and severity filled in from its code."""
    category, severity = classify_issue(code)
    return DataIssue(code=code, category=category, severity=severity, message=message, count=count)
