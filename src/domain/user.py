"""User domain models and enums."""

from enum import StrEnum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class UserRole(StrEnum):
    """User role in the organisation."""

    ADMIN = "admin"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class User(BaseModel):
    """User data transfer object."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore", frozen=True)

    id: str = Field(..., description="Unique user ID")
    name: str = Field(default="", description="Display name")
    email: str | None = Field(default=None, description="Contact email")
    role: UserRole = Field(default=UserRole.EMPLOYEE, description="Role in the organisation")
    department: str | None = Field(default=None, description="Department name")
    manager_id: str | None = Field(default=None, alias="managerId", description="ID of the user's manager")

    @field_validator("id", "manager_id", mode="before")
    @classmethod
    def coerce_identifier(cls, v: object) -> object:
        """Accept numeric identifiers by converting them to strings."""
        if isinstance(v, int) and not isinstance(v, bool):
            return str(v)
        return v
