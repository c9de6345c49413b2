"""Conversion of raw task/user records into typed domain models.

Records arrive from the task store as plain mappings. Each one is validated
individually. Only a record that is not a mapping or carries a missing or unknown
status is rejected; it is logged and skipped so that a single bad row never
prevents metrics from being computed for the rest. Tasks without an id are
identified by their position in the input.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from typing import NamedTuple

from pydantic import ValidationError

from src.domain.task import Task
from src.domain.user import User


logger = logging.getLogger(__name__)


class LoadedTasks(NamedTuple):
    """Tasks that passed validation plus the number of rejected records."""

    tasks: list[Task]
    rejected: int


def is_record_sequence(value: object) -> bool:
    """Return True for list-like collections of records (strings and bytes excluded)."""
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def coerce_tasks(records: Iterable[Task | Mapping[str, object]]) -> LoadedTasks:
    """Convert raw records into Task models, skipping invalid ones."""
    tasks: list[Task] = []
    rejected = 0
    for index, record in enumerate(records):
        if isinstance(record, Task):
            tasks.append(record)
            continue
        if not isinstance(record, Mapping):
            logger.warning("Skipping task record %d: expected a mapping, got %s", index, type(record).__name__)
            rejected += 1
            continue
        try:
            task = Task.model_validate(record)
        except ValidationError as e:
            logger.warning("Skipping invalid task record %s: %s", record.get("id", index), e.error_count())
            logger.debug("Task validation errors: %s", e.errors())
            rejected += 1
            continue
        if not task.id:
            task = task.model_copy(update={"id": str(index)})
        tasks.append(task)
    return LoadedTasks(tasks=tasks, rejected=rejected)


def coerce_users(records: Iterable[User | Mapping[str, object]] | None) -> list[User]:
    """Convert raw user records into User models, skipping invalid ones."""
    users: list[User] = []
    for index, record in enumerate(records or []):
        if isinstance(record, User):
            users.append(record)
            continue
        if not isinstance(record, Mapping):
            logger.warning("Skipping user record %d: expected a mapping, got %s", index, type(record).__name__)
            continue
        try:
            users.append(User.model_validate(record))
        except ValidationError as e:
            logger.error("Failed to create User model for record %s: %s", record.get("id", index), e)
    return users
