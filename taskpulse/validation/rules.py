"""Task business rules as pure predicates.

Rules return a ValidationResult instead of raising, so forms and the API
can show the reason next to the offending field.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date

from pydantic import TypeAdapter

from taskpulse.analytics.normalizer import canonical_value
from taskpulse.models.common import OptionalDate, RecordId, TaskPulseBase, TaskStatus
from taskpulse.models.records import Employee, Task

DEFAULT_MAX_ACTIVE_TASKS = 3
UNKNOWN_USER_NAME = "Unknown"

# Statuses that count against an assignee's capacity.
ACTIVE_STATUSES: frozenset[str] = frozenset({TaskStatus.TODO, TaskStatus.IN_PROGRESS})

_date_adapter: TypeAdapter[date | None] = TypeAdapter(OptionalDate)


class ValidationResult(TaskPulseBase):
    valid: bool
    reason: str | None = None

    @classmethod
    def ok(cls) -> ValidationResult:
        return cls(valid=True)

    @classmethod
    def fail(cls, reason: str) -> ValidationResult:
        return cls(valid=False, reason=reason)


def _as_date(value: date | str | None) -> date | None:
    return _date_adapter.validate_python(value)


def validate_task_dates(
    task_start: date | str | None,
    task_due: date | str | None,
    project_start: date | str | None = None,
    project_due: date | str | None = None,
) -> ValidationResult:
    """Task dates must be ordered and fall inside the project's timeline.

    Only calendar dates are compared; missing dates skip the checks that
    need them.
    """
    t_start, t_due = _as_date(task_start), _as_date(task_due)
    p_start, p_due = _as_date(project_start), _as_date(project_due)

    if t_start and t_due and t_start > t_due:
        return ValidationResult.fail("Task start date cannot be later than task due date.")
    if p_start and t_start and t_start < p_start:
        return ValidationResult.fail("Task start date cannot be before project start date.")
    if p_due and t_due and t_due > p_due:
        return ValidationResult.fail("Task due date cannot be after project due date.")
    return ValidationResult.ok()


def count_active_tasks(user_id: RecordId, tasks: Iterable[Task]) -> int:
    """Number of todo / in-progress tasks assigned to ``user_id``."""
    uid = str(user_id)
    return sum(
        1
        for task in tasks
        if uid in task.assignee_ids
        and canonical_value(task.status, TaskStatus) in ACTIVE_STATUSES
    )


def validate_assignee_capacity(
    user_id: RecordId,
    tasks: Iterable[Task],
    *,
    max_active: int = DEFAULT_MAX_ACTIVE_TASKS,
    display_name: str | None = None,
) -> ValidationResult:
    """An assignee already holding ``max_active`` active tasks cannot take another."""
    if count_active_tasks(user_id, tasks) >= max_active:
        name = display_name or UNKNOWN_USER_NAME
        return ValidationResult.fail(
            f'User "{name}" already has {max_active} or more active tasks.'
        )
    return ValidationResult.ok()


def validate_assignees(
    user_ids: Iterable[RecordId],
    tasks: Iterable[Task],
    *,
    max_active: int = DEFAULT_MAX_ACTIVE_TASKS,
    employees: Iterable[Employee] = (),
) -> ValidationResult:
    """Check every selected assignee; report the first one over capacity."""
    task_list = list(tasks)
    names = {str(e.id): e.first_name for e in employees}
    for user_id in user_ids:
        result = validate_assignee_capacity(
            user_id,
            task_list,
            max_active=max_active,
            display_name=names.get(str(user_id)),
        )
        if not result.valid:
            return result
    return ValidationResult.ok()
