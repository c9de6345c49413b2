"""Pytest configuration and shared fixtures."""

from collections.abc import Callable
from datetime import UTC, datetime
from typing import Any

import pytest


@pytest.fixture
def fixed_now() -> datetime:
    """Evaluation time used by tests that depend on the current date."""
    return datetime(2024, 3, 15, 12, 0, 0, tzinfo=UTC)


@pytest.fixture
def make_task() -> Callable[..., dict[str, Any]]:
    """Factory for raw task records in the task store's camelCase shape."""
    counter = {"value": 0}

    def _make_task(status: str = "not_started", **fields: Any) -> dict[str, Any]:
        counter["value"] += 1
        return {"id": fields.pop("id", f"task_{counter['value']}"), "status": status, **fields}

    return _make_task


@pytest.fixture
def org_users() -> list[dict[str, Any]]:
    """Small organisation: one admin, two managers, four employees."""
    return [
        {"id": "a1", "name": "Ada", "role": "admin", "department": "Engineering"},
        {"id": "m1", "name": "Mia", "role": "manager", "department": "Engineering"},
        {"id": "m2", "name": "Max", "role": "manager", "department": "Sales"},
        {"id": "e1", "name": "Eve", "role": "employee", "department": "Engineering", "managerId": "m1"},
        {"id": "e2", "name": "Eli", "role": "employee", "department": "Engineering", "managerId": "m1"},
        {"id": "e3", "name": "Sam", "role": "employee", "department": "Sales", "managerId": "m2"},
        {"id": "e4", "name": "Noa", "role": "employee"},
    ]


@pytest.fixture
def org_tasks() -> list[dict[str, Any]]:
    """Tasks for org_users, all assigned on 2024-03-01."""
    on_time = {
        "assignedDate": "2024-03-01T00:00:00Z",
        "completedDate": "2024-03-02T00:00:00Z",
        "dueDate": "2024-03-05T00:00:00Z",
        "createdAt": "2024-03-01T00:00:00Z",
    }
    return [
        {"id": "t1", "status": "completed", "assignedTo": "e1", **on_time},
        {"id": "t2", "status": "not_started", "assignedTo": "e2", "assignedDate": "2024-03-01T00:00:00Z"},
        {"id": "t3", "status": "completed", "assignedTo": "e3", **on_time},
        {"id": "t4", "status": "completed", "assignedTo": "e3", **on_time},
        {"id": "t5", "status": "blocked", "assignedTo": "e4", "assignedDate": "2024-03-01T00:00:00Z"},
    ]
