"""Filter engine.

Narrows a record set by time window, team, project, assignee, priority and
status. Every present constraint must hold (AND); ``None`` or ``"all"``
imposes nothing. A constraint only applies to records that carry the field
it tests: a priority filter narrows tasks and leaves projects alone.

Output keeps input order, so ``filter_records(filter_records(r, s), s)``
equals ``filter_records(r, s)``.
"""

from __future__ import annotations

import calendar
from collections.abc import Iterable
from datetime import date, timedelta
from typing import Any, TypeVar

from taskpulse.analytics.normalizer import canonical_priority
from taskpulse.models.common import WeekStart, as_date, same_id
from taskpulse.models.records import ActivityLogEntry, Employee, Project, Task
from taskpulse.models.report import DateField, DateRange, FilterSpec, TimeFrame

R = TypeVar("R")

_WEEK_START_INDEX: dict[WeekStart, int] = {
    WeekStart.MONDAY: 0,
    WeekStart.SUNDAY: 6,
}

_TIME_FRAME_LABELS: dict[TimeFrame, str] = {
    TimeFrame.ALL: "All Time",
    TimeFrame.WEEK: "This Week",
    TimeFrame.MONTH: "This Month",
    TimeFrame.QUARTER: "This Quarter",
}


# ---------------------------------------------------------------------------
# Calendar windows
# ---------------------------------------------------------------------------


def week_bounds(day: date, week_start: WeekStart = WeekStart.SUNDAY) -> DateRange:
    """Calendar week containing ``day``."""
    offset = (day.weekday() - _WEEK_START_INDEX[week_start]) % 7
    start = day - timedelta(days=offset)
    return DateRange(start=start, end=start + timedelta(days=6))


def month_bounds(day: date) -> DateRange:
    last = calendar.monthrange(day.year, day.month)[1]
    return DateRange(start=day.replace(day=1), end=day.replace(day=last))


def quarter_bounds(day: date) -> DateRange:
    first_month = 3 * ((day.month - 1) // 3) + 1
    last_month = first_month + 2
    last = calendar.monthrange(day.year, last_month)[1]
    return DateRange(
        start=date(day.year, first_month, 1),
        end=date(day.year, last_month, last),
    )


def resolve_window(
    spec: FilterSpec,
    as_of: date | None,
    week_start: WeekStart = WeekStart.SUNDAY,
) -> DateRange | None:
    """Turn the filter's time frame into a concrete date range.

    Preset frames (week, month, quarter) are computed around ``as_of`` and
    take precedence over an explicit ``date_range``. ``all`` and ``custom``
    use ``date_range`` when one is given and impose nothing otherwise.
    A preset with no ``as_of`` to anchor it imposes no window.
    """
    if spec.time_frame in (TimeFrame.ALL, TimeFrame.CUSTOM):
        return spec.date_range
    if as_of is None:
        return None
    if spec.time_frame == TimeFrame.WEEK:
        return week_bounds(as_of, week_start)
    if spec.time_frame == TimeFrame.MONTH:
        return month_bounds(as_of)
    return quarter_bounds(as_of)


def window_label(spec: FilterSpec, window: DateRange | None) -> str:
    if window is not None and spec.time_frame in (TimeFrame.ALL, TimeFrame.CUSTOM):
        return f"{window.start.isoformat()} to {window.end.isoformat()}"
    return _TIME_FRAME_LABELS.get(spec.time_frame, "All Time")


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def is_unset(value: Any) -> bool:
    """``None``, blank and ``"all"`` all mean "no filter"."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip().lower() in ("", "all")
    if isinstance(value, (list, tuple, set)):
        return len(value) == 0
    return False


def record_day(record: Any, date_field: DateField | str) -> date | None:
    """Calendar date of ``record.<date_field>``, or None if absent."""
    return as_date(getattr(record, str(date_field), None))


def _team_of(record: Any, project_teams: dict[str, Any]) -> Any:
    if isinstance(record, Project):
        return record.team_id
    project_id = getattr(record, "project_id", None)
    if project_id is None:
        return None
    return project_teams.get(str(project_id))


def _matches_team(record: Any, team_id: Any, project_teams: dict[str, Any]) -> bool:
    if not isinstance(record, (Project, Task, ActivityLogEntry)):
        return True
    return same_id(_team_of(record, project_teams), team_id)


def _matches_project(record: Any, project_id: Any) -> bool:
    if isinstance(record, Project):
        return same_id(record.id, project_id)
    if isinstance(record, (Task, ActivityLogEntry)):
        return same_id(record.project_id, project_id)
    return True


def _matches_assignee(record: Any, assignee_id: Any) -> bool:
    if isinstance(record, Task):
        return str(assignee_id) in record.assignee_ids
    if isinstance(record, ActivityLogEntry):
        return same_id(record.user_id, assignee_id)
    if isinstance(record, Employee):
        return same_id(record.id, assignee_id)
    if isinstance(record, Project):
        return same_id(record.manager_id, assignee_id)
    return True


def _matches_priority(record: Any, priority: Any) -> bool:
    if not isinstance(record, Task):
        return True
    return canonical_priority(record.priority) == canonical_priority(priority)


def _fold_status(value: Any) -> str:
    return str(value).strip().lower().replace(" ", "_").replace("-", "_")


def _matches_status(record: Any, allowed: set[str]) -> bool:
    if not hasattr(record, "status"):
        return True
    status = getattr(record, "status")
    return status is not None and _fold_status(status) in allowed


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


def filter_records(
    records: Iterable[R],
    spec: FilterSpec | None,
    *,
    date_field: DateField | str,
    as_of: date | None = None,
    projects: Iterable[Project] | None = None,
    week_start: WeekStart = WeekStart.SUNDAY,
) -> list[R]:
    """Return the records matching every constraint in ``spec``.

    ``date_field`` names the record date the window applies to; callers
    pick ``created_at`` for "created in period" views and ``due_date`` for
    "due in period" views. Records lacking that date drop out whenever a
    window applies. ``projects`` lets tasks and log entries resolve their
    team; without it a team constraint matches no task.
    """
    items = list(records)
    if spec is None:
        return items

    window = resolve_window(spec, as_of, week_start)
    if window is not None and window.start > window.end:
        return []

    project_teams: dict[str, Any] = {}
    if not is_unset(spec.team_id) and projects is not None:
        project_teams = {str(p.id): p.team_id for p in projects}

    allowed_statuses: set[str] | None = None
    if not is_unset(spec.status_allowlist):
        allowed_statuses = {_fold_status(s) for s in spec.status_allowlist or []}

    def keep(record: R) -> bool:
        if window is not None:
            day = record_day(record, date_field)
            if day is None or not window.contains(day):
                return False
        if not is_unset(spec.team_id) and not _matches_team(record, spec.team_id, project_teams):
            return False
        if not is_unset(spec.project_id) and not _matches_project(record, spec.project_id):
            return False
        if not is_unset(spec.assignee_id) and not _matches_assignee(record, spec.assignee_id):
            return False
        if not is_unset(spec.priority) and not _matches_priority(record, spec.priority):
            return False
        if allowed_statuses is not None and not _matches_status(record, allowed_statuses):
            return False
        return True

    return [record for record in items if keep(record)]
