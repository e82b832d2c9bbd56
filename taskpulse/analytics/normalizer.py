"""Domain normalizer.

Status strings arrive from several tables in different spellings
(``"completed"`` vs ``"Completed"``, ``"cancelled"`` vs ``"Canceled"``).
Every aggregation runs on normalized copies so each status has exactly one
bucket. Values that match no canonical member are passed through untouched
and reported as a data-quality warning.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from enum import StrEnum
from typing import TypeVar

from taskpulse.models.common import (
    EmployeeRole,
    EmployeeStatus,
    Priority,
    ProjectStatus,
    TaskStatus,
)
from taskpulse.models.records import Employee, Project, Snapshot, Task

logger = logging.getLogger(__name__)

R = TypeVar("R")

# Spellings seen in the wild that fold onto a canonical member.
_ALIASES: dict[str, str] = {
    "canceled": "cancelled",
    "complete": "completed",
    "done": "completed",
    "to_do": "todo",
    "inprogress": "in_progress",
    "onhold": "on_hold",
}

_PRIORITY_NAMES: dict[str, int] = {
    "critical": Priority.CRITICAL,
    "urgent": Priority.CRITICAL,
    "high": Priority.HIGH,
    "medium": Priority.MEDIUM,
    "normal": Priority.MEDIUM,
    "low": Priority.LOW,
}

# Display labels used for chart legends and PDF tables.
TASK_STATUS_LABELS: dict[str, str] = {
    TaskStatus.TODO: "To Do",
    TaskStatus.IN_PROGRESS: "In Progress",
    TaskStatus.ON_HOLD: "On Hold",
    TaskStatus.CANCELLED: "Cancelled",
    TaskStatus.COMPLETED: "Completed",
}

PROJECT_STATUS_LABELS: dict[str, str] = {
    ProjectStatus.PLANNED: "Planned",
    ProjectStatus.IN_PROGRESS: "In Progress",
    ProjectStatus.ON_HOLD: "On Hold",
    ProjectStatus.COMPLETED: "Completed",
    ProjectStatus.CANCELLED: "Cancelled",
}

PRIORITY_LABELS: dict[str, str] = {
    str(Priority.CRITICAL.value): "Critical",
    str(Priority.HIGH.value): "High",
    str(Priority.MEDIUM.value): "Medium",
    str(Priority.LOW.value): "Low",
}


def _fold(raw: str) -> str:
    key = raw.strip().lower().replace("-", "_").replace(" ", "_")
    return _ALIASES.get(key, key)


def canonical_value(raw: str | None, enum_cls: type[StrEnum]) -> str | None:
    """Return the canonical member value for ``raw``, or ``raw`` itself if unknown."""
    if raw is None:
        return None
    lookup = {member.value.lower(): member.value for member in enum_cls}
    return lookup.get(_fold(str(raw)), raw)


def is_canonical(value: str | None, enum_cls: type[StrEnum]) -> bool:
    return value is None or value in {member.value for member in enum_cls}


def canonical_priority(raw: int | str | None) -> int | str | None:
    """Coerce numeric strings and level names onto 1..4; pass anything else through."""
    if raw is None or isinstance(raw, bool):
        return raw
    if isinstance(raw, int):
        return raw
    text = str(raw).strip()
    if text.isdigit():
        return int(text)
    return _PRIORITY_NAMES.get(text.lower(), raw)


class _UnknownValues:
    """Collects unknown enum values so each one is reported once per pass."""

    def __init__(self) -> None:
        self._seen: dict[str, set[str]] = {}

    def check(self, field: str, value: object, enum_cls: type[StrEnum]) -> None:
        if not is_canonical(value, enum_cls):  # type: ignore[arg-type]
            self._seen.setdefault(field, set()).add(str(value))

    def check_priority(self, value: object) -> None:
        if value is None:
            return
        if not (isinstance(value, int) and Priority.CRITICAL <= value <= Priority.LOW):
            self._seen.setdefault("task.priority", set()).add(str(value))

    def report(self) -> None:
        for field, values in sorted(self._seen.items()):
            logger.warning(
                "Unknown %s values passed through unchanged: %s",
                field,
                ", ".join(sorted(values)),
            )


def _normalize_one(record: R, unknown: _UnknownValues) -> R:
    if isinstance(record, Task):
        status = canonical_value(record.status, TaskStatus)
        priority = canonical_priority(record.priority)
        unknown.check("task.status", status, TaskStatus)
        unknown.check_priority(priority)
        if status == record.status and priority == record.priority:
            return record
        return record.model_copy(update={"status": status, "priority": priority})

    if isinstance(record, Project):
        status = canonical_value(record.status, ProjectStatus)
        unknown.check("project.status", status, ProjectStatus)
        if status == record.status:
            return record
        return record.model_copy(update={"status": status})

    if isinstance(record, Employee):
        status = canonical_value(record.status, EmployeeStatus)
        role = canonical_value(record.role, EmployeeRole)
        unknown.check("employee.status", status, EmployeeStatus)
        unknown.check("employee.role", role, EmployeeRole)
        if status == record.status and role == record.role:
            return record
        return record.model_copy(update={"status": status, "role": role})

    return record


def normalize(records: Iterable[R]) -> list[R]:
    """Map status, role and priority fields onto canonical values.

    Accepts any mix of Project, Task and Employee records; other record
    types are returned as-is. The input is never modified: changed records
    are copies, unchanged records are shared (they are frozen).
    """
    unknown = _UnknownValues()
    normalized = [_normalize_one(record, unknown) for record in records]
    unknown.report()
    return normalized


def normalize_snapshot(snapshot: Snapshot) -> Snapshot:
    """Normalize every collection in a snapshot."""
    return snapshot.model_copy(
        update={
            "projects": normalize(snapshot.projects),
            "tasks": normalize(snapshot.tasks),
            "employees": normalize(snapshot.employees),
        }
    )
