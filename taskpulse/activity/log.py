"""Activity log helpers.

The audit log is append-only: entries are built here and handed to the data
store by the caller; nothing in this module edits an existing entry.
Message formatters keep the wording of entries consistent across admin,
manager and employee screens.
"""

from __future__ import annotations

from collections.abc import Iterable
from enum import StrEnum

from taskpulse.analytics.filters import is_unset
from taskpulse.models.common import RecordId, new_uuid7, same_id, utc_now
from taskpulse.models.records import ActivityLogEntry, Employee


class ActivityType(StrEnum):
    """Activity types written to the audit log."""

    ROLE_CHANGED = "role_changed"
    USER_CREATED = "user_created"
    USER_UPDATED = "user_updated"
    USER_DELETED = "user_deleted"
    PROJECT_CREATED = "project_created"
    PROJECT_UPDATED = "project_updated"
    PROJECT_DELETED = "project_deleted"
    TASK_CREATED = "task_created"
    TASK_UPDATED = "task_updated"
    TASK_DELETED = "task_deleted"
    TASK_ASSIGNED = "task_assigned"
    FILE_UPLOADED = "file_uploaded"
    COMMENT_ADDED = "comment_added"


def readable_type(activity_type: str) -> str:
    """``"task_assigned"`` -> ``"task assigned"``."""
    return activity_type.replace("_", " ")


# ---------------------------------------------------------------------------
# Message formatters
# ---------------------------------------------------------------------------


def user_role_change(admin_email: str, user_email: str, old_role: str, new_role: str) -> str:
    return f"User role changed by {admin_email}: {user_email} from {old_role} to {new_role}"


def project_created(user_name: str, project_title: str) -> str:
    return f"{user_name} created project: {project_title}"


def project_updated(user_name: str, project_title: str) -> str:
    return f"{user_name} updated project: {project_title}"


def task_assigned(user_name: str, task_title: str, assignee_name: str) -> str:
    return f'{user_name} assigned task "{task_title}" to {assignee_name}'


def task_status_change(user_name: str, task_title: str, old_status: str, new_status: str) -> str:
    return f'{user_name} changed task "{task_title}" status from {old_status} to {new_status}'


def file_uploaded(user_name: str, file_name: str, project_title: str) -> str:
    return f'{user_name} uploaded file "{file_name}" to project {project_title}'


def new_entry(
    activity_type: ActivityType | str,
    details: str,
    *,
    user_id: RecordId,
    project_id: RecordId | None = None,
    task_id: RecordId | None = None,
) -> ActivityLogEntry:
    """Build a log entry ready to be appended by the data store."""
    return ActivityLogEntry(
        id=str(new_uuid7()),
        user_id=user_id,
        activity_type=str(activity_type),
        activity_details=details,
        project_id=project_id,
        task_id=task_id,
        created_at=utc_now(),
    )


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


def _matches_term(entry: ActivityLogEntry, term: str, author: Employee | None) -> bool:
    if term in entry.activity_details.lower():
        return True
    if author is None:
        return False
    return any(
        term in (value or "").lower()
        for value in (author.first_name, author.last_name, author.email)
    )


def search_activity(
    entries: Iterable[ActivityLogEntry],
    *,
    search: str | None = None,
    activity_type: str | None = None,
    user_id: RecordId | None = None,
    employees: Iterable[Employee] = (),
) -> list[ActivityLogEntry]:
    """Filter log entries the way the change-log screen does.

    ``search`` matches case-insensitively against the entry details and the
    author's first name, last name and email. ``activity_type`` and
    ``user_id`` must match exactly; ``None`` or ``"all"`` disables them.
    """
    authors = {str(e.id): e for e in employees}
    term = (search or "").strip().lower()

    matched: list[ActivityLogEntry] = []
    for entry in entries:
        if term and not _matches_term(entry, term, authors.get(str(entry.user_id))):
            continue
        if not is_unset(activity_type) and entry.activity_type != activity_type:
            continue
        if not is_unset(user_id) and not same_id(entry.user_id, user_id):
            continue
        matched.append(entry)
    return matched


def newest_first(entries: Iterable[ActivityLogEntry]) -> list[ActivityLogEntry]:
    """Entries sorted by ``created_at`` descending; undated entries last."""
    items = list(entries)
    dated = [e for e in items if e.created_at is not None]
    undated = [e for e in items if e.created_at is None]
    dated.sort(key=lambda e: e.created_at, reverse=True)
    return dated + undated
