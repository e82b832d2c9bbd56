"""Snapshot records consumed by the analytics layer.

Records mirror the rows the dashboard fetches from the data store. They are
frozen: the analytics layer reads them and derives new values, it never
writes back. Status fields stay plain strings so values outside the
canonical enums survive normalization as their own distribution bucket.
"""

from pydantic import Field

from taskpulse.models.common import (
    FrozenRecord,
    OptionalDate,
    OptionalTimestamp,
    RecordId,
)


class Team(FrozenRecord):
    """Team a project belongs to."""

    id: RecordId
    name: str = ""


class Project(FrozenRecord):
    """Project row. ``start_date <= due_date`` is enforced upstream."""

    id: RecordId
    name: str = ""
    status: str | None = None
    team_id: RecordId | None = None
    manager_id: RecordId | None = None
    start_date: OptionalDate = None
    due_date: OptionalDate = None
    created_at: OptionalTimestamp = None


class Assignment(FrozenRecord):
    """Task-to-user join row. ``task_id`` is omitted when embedded on a task."""

    task_id: RecordId | None = None
    user_id: RecordId


class Task(FrozenRecord):
    """Task row with its embedded assignments."""

    id: RecordId
    title: str = ""
    status: str | None = None
    priority: int | str | None = None
    project_id: RecordId | None = None
    start_date: OptionalDate = None
    due_date: OptionalDate = None
    created_at: OptionalTimestamp = None
    updated_at: OptionalTimestamp = None
    assignments: list[Assignment] = Field(default_factory=list)

    @property
    def assignee_ids(self) -> list[str]:
        return [str(a.user_id) for a in self.assignments]


class Employee(FrozenRecord):
    """Employee profile."""

    id: RecordId
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    role: str | None = None
    status: str | None = None
    created_at: OptionalTimestamp = None

    @property
    def full_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.email or str(self.id)


class ActivityLogEntry(FrozenRecord):
    """Append-only audit log entry."""

    id: RecordId | None = None
    user_id: RecordId | None = None
    activity_type: str = "unknown"
    activity_details: str = ""
    project_id: RecordId | None = None
    task_id: RecordId | None = None
    created_at: OptionalTimestamp = None


class Snapshot(FrozenRecord):
    """Everything a report is computed from, already authorized for the viewer."""

    projects: list[Project] = Field(default_factory=list)
    tasks: list[Task] = Field(default_factory=list)
    employees: list[Employee] = Field(default_factory=list)
    teams: list[Team] = Field(default_factory=list)
    assignments: list[Assignment] = Field(default_factory=list)
    activity_logs: list[ActivityLogEntry] = Field(default_factory=list)


def attach_assignments(tasks: list[Task], assignments: list[Assignment]) -> list[Task]:
    """Merge standalone assignment rows into their tasks.

    Returns new Task objects; assignments already embedded on a task are
    kept and duplicates (same user on the same task) are dropped.
    """
    if not assignments:
        return list(tasks)

    by_task: dict[str, list[Assignment]] = {}
    for assignment in assignments:
        if assignment.task_id is None:
            continue
        by_task.setdefault(str(assignment.task_id), []).append(assignment)

    merged: list[Task] = []
    for task in tasks:
        extra = by_task.get(str(task.id))
        if not extra:
            merged.append(task)
            continue
        seen = set(task.assignee_ids)
        combined = list(task.assignments)
        for assignment in extra:
            if str(assignment.user_id) in seen:
                continue
            seen.add(str(assignment.user_id))
            combined.append(assignment)
        merged.append(task.model_copy(update={"assignments": combined}))
    return merged
