"""Domain models and DTOs."""

from src.domain.task import Task, TaskStatus
from src.domain.user import User, UserRole


__all__ = [
    "Task",
    "TaskStatus",
    "User",
    "UserRole",
]
