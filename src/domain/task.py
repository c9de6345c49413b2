"""Task domain models and enums."""

import math
from datetime import date, datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class TaskStatus(StrEnum):
    """Task lifecycle status."""

    NOT_STARTED = "not_started"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    OVERDUE = "overdue"
    BLOCKED = "blocked"


# Date fields are kept as supplied so malformed values can be audited.
DateValue = str | datetime | date | None


class Task(BaseModel):
    """Task data transfer object.

    Accepts both the camelCase keys used by the task store and snake_case names.
    Only ``status`` is strict; malformed optional fields degrade to ``None`` (or, for
    dates, to their string form) so the record still counts toward metrics.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str | None = Field(default=None, description="Unique task ID; the loader falls back to the record position")
    status: TaskStatus = Field(..., description="Current lifecycle status")
    title: str | None = Field(default=None, description="Task title")
    assigned_date: DateValue = Field(default=None, alias="assignedDate", description="When the task was assigned")
    created_at: DateValue = Field(default=None, alias="createdAt", description="When the task entered the system")
    updated_at: DateValue = Field(default=None, alias="updatedAt", description="Last update timestamp")
    due_date: DateValue = Field(default=None, alias="dueDate", description="Deadline")
    completed_date: DateValue = Field(
        default=None, alias="completedDate", description="Completion timestamp, only for completed tasks"
    )
    rating: float | None = Field(default=None, description="Quality rating from 1 to 5")
    project: str | None = Field(default=None, description="Project grouping key")
    vertical: str | None = Field(default=None, description="Vertical grouping key")
    assigned_to: str | None = Field(default=None, alias="assignedTo", description="Assigned user ID")
    department: str | None = Field(default=None, description="Department of the owning user")
    actual_hours: float | None = Field(default=None, description="Hours logged, reporting only")

    @field_validator("id", "assigned_to", "title", "project", "vertical", "department", mode="before")
    @classmethod
    def coerce_text(cls, v: object) -> str | None:
        """Accept numeric identifiers and labels; anything else non-textual becomes None."""
        if v is None or isinstance(v, str):
            return v
        if isinstance(v, int | float) and not isinstance(v, bool):
            return str(v)
        return None

    @field_validator("assigned_date", "created_at", "updated_at", "due_date", "completed_date", mode="before")
    @classmethod
    def keep_date_auditable(cls, v: object) -> object:
        """Keep date-like values; other values are stringified so they audit as invalid dates."""
        if v is None or isinstance(v, str | date):
            return v
        return str(v)

    @field_validator("rating", "actual_hours", mode="before")
    @classmethod
    def coerce_number(cls, v: object) -> float | None:
        """Parse numeric values leniently; unparsable values become None."""
        if v is None or isinstance(v, bool):
            return None
        try:
            number = float(v)
        except (TypeError, ValueError):
            return None
        return None if math.isnan(number) else number

    @property
    def is_completed(self) -> bool:
        """Whether the task is in the completed bucket."""
        return self.status == TaskStatus.COMPLETED

    @property
    def start_of_work(self) -> DateValue:
        """Canonical start-of-work value: assigned date, falling back to creation time."""
        return self.assigned_date or self.created_at

    @property
    def activity_date(self) -> DateValue:
        """Canonical activity value for trend bucketing."""
        return self.completed_date or self.updated_at or self.created_at
