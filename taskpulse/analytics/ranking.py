"""Rate and ranking aggregator.

Completion rates, top-N rankings, overdue detection and the at-risk
partition of projects. Rates are fractions in [0, 1]; an entity with no
tasks has rate 0, never NaN.

At-risk is a boolean partition, not a ranking: callers cap the displayed
list to a few entries in input order, which is "any N at-risk projects",
not "the N worst".
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Callable, Iterable, Sequence
from datetime import date
from typing import Any, TypeVar

from taskpulse.analytics.distribution import pct
from taskpulse.analytics.normalizer import canonical_value
from taskpulse.models.common import CLOSED_STATUSES, EmployeeRole, EmployeeStatus, ProjectStatus, TaskStatus
from taskpulse.models.records import ActivityLogEntry, Employee, Project, Task, Team
from taskpulse.models.report import (
    AtRiskProject,
    Direction,
    EmployeePerformance,
    EntityPerformance,
    OverdueTask,
    TeamSummary,
    TimelineEntry,
    WorkloadEntry,
)

E = TypeVar("E")

DEFAULT_AT_RISK_THRESHOLD = 0.30

REASON_OVERDUE = "overdue"
REASON_LOW_COMPLETION = "low_completion"
REASON_ON_HOLD = "on_hold"


# ---------------------------------------------------------------------------
# Record predicates
# ---------------------------------------------------------------------------


def _status(record: Any) -> str | None:
    return canonical_value(getattr(record, "status", None), TaskStatus)


def is_completed(record: Any) -> bool:
    return _status(record) == TaskStatus.COMPLETED


def is_closed(record: Any) -> bool:
    return _status(record) in CLOSED_STATUSES


def is_overdue(record: Any, today: date) -> bool:
    """Due before ``today`` and neither completed nor cancelled."""
    due = getattr(record, "due_date", None)
    if due is None:
        return False
    return due < today and not is_closed(record)


def days_overdue(record: Any, today: date) -> int:
    if not is_overdue(record, today):
        return 0
    return (today - record.due_date).days


def completion_rate(completed: int, total: int) -> float:
    """``completed / total`` in [0, 1]; 0.0 for an empty group."""
    return min(1.0, max(0.0, pct(completed, total)))


# ---------------------------------------------------------------------------
# Ranking
# ---------------------------------------------------------------------------


def _default_sample(entity: Any) -> int:
    return int(getattr(entity, "total", 0))


def rank_by(
    entities: Iterable[E],
    rate_fn: Callable[[E], float],
    *,
    direction: Direction | str = Direction.DESC,
    limit: int | None = None,
    min_sample: int | None = None,
    sample_fn: Callable[[E], int] = _default_sample,
) -> list[E]:
    """Sort entities by ``rate_fn`` and keep the first ``limit``.

    Entities whose ``sample_fn`` is below ``min_sample`` are left out, so a
    single finished task does not top the chart at 100%. Equal rates keep
    their input order.
    """
    candidates = list(entities)
    if min_sample is not None:
        candidates = [e for e in candidates if sample_fn(e) >= min_sample]

    # sorted() is stable with reverse=True as well, so ties keep input order.
    ranked = sorted(candidates, key=rate_fn, reverse=Direction(direction) == Direction.DESC)
    if limit is None:
        return ranked
    return ranked[: max(limit, 0)]


# ---------------------------------------------------------------------------
# Per-entity performance
# ---------------------------------------------------------------------------


def _performance(
    entity_id: Any,
    name: str,
    tasks: Sequence[Task],
    today: date,
    activities: int = 0,
) -> EntityPerformance:
    completed = sum(1 for t in tasks if is_completed(t))
    return EntityPerformance(
        entity_id=str(entity_id),
        name=name,
        total=len(tasks),
        completed=completed,
        overdue=sum(1 for t in tasks if is_overdue(t, today)),
        completion_rate=completion_rate(completed, len(tasks)),
        recent_activities=activities,
    )


def project_performance(
    projects: Iterable[Project],
    tasks: Iterable[Task],
    today: date,
) -> list[EntityPerformance]:
    """Task completion per project, in project order. Projects without tasks get rate 0."""
    by_project: dict[str, list[Task]] = defaultdict(list)
    for task in tasks:
        if task.project_id is not None:
            by_project[str(task.project_id)].append(task)

    return [
        _performance(p.id, p.name, by_project.get(str(p.id), []), today)
        for p in projects
    ]


def employee_performance(
    employees: Iterable[Employee],
    tasks: Iterable[Task],
    today: date,
    activity_logs: Iterable[ActivityLogEntry] = (),
) -> list[EntityPerformance]:
    """Task completion per employee, counting every task they are assigned to."""
    by_user: dict[str, list[Task]] = defaultdict(list)
    for task in tasks:
        for user_id in set(task.assignee_ids):
            by_user[user_id].append(task)

    activity_counts: dict[str, int] = defaultdict(int)
    for entry in activity_logs:
        if entry.user_id is not None:
            activity_counts[str(entry.user_id)] += 1

    return [
        _performance(
            e.id,
            e.full_name,
            by_user.get(str(e.id), []),
            today,
            activities=activity_counts.get(str(e.id), 0),
        )
        for e in employees
    ]


def top_performers(
    performance: Iterable[EntityPerformance],
    *,
    limit: int,
    min_tasks: int = 1,
) -> list[EntityPerformance]:
    """Highest completion rates among entities with at least ``min_tasks`` tasks."""
    return rank_by(
        performance,
        lambda p: p.completion_rate,
        direction=Direction.DESC,
        limit=limit,
        min_sample=max(min_tasks, 1),
    )


def most_overdue(performance: Iterable[EntityPerformance], *, limit: int) -> list[EntityPerformance]:
    """Entities with overdue tasks, most overdue first."""
    return rank_by(
        (p for p in performance if p.overdue > 0),
        lambda p: p.overdue,
        direction=Direction.DESC,
        limit=limit,
    )


def project_health(performance: Iterable[EntityPerformance], *, limit: int) -> list[EntityPerformance]:
    """Projects with tasks, best completion first."""
    return rank_by(
        performance,
        lambda p: p.completion_rate,
        direction=Direction.DESC,
        limit=limit,
        min_sample=1,
    )


# ---------------------------------------------------------------------------
# Overdue tasks
# ---------------------------------------------------------------------------


def overdue_tasks(
    tasks: Iterable[Task],
    projects: Iterable[Project],
    today: date,
    *,
    limit: int | None = None,
) -> list[OverdueTask]:
    """Overdue tasks with their days overdue, longest overdue first."""
    project_names = {str(p.id): p.name for p in projects}
    rows = [
        OverdueTask(
            task_id=str(t.id),
            title=t.title,
            project_name=project_names.get(str(t.project_id), "-"),
            priority=t.priority,
            status=t.status,
            due_date=t.due_date,
            days_overdue=days_overdue(t, today),
        )
        for t in tasks
        if is_overdue(t, today)
    ]
    return rank_by(rows, lambda r: r.days_overdue, direction=Direction.DESC, limit=limit)


# ---------------------------------------------------------------------------
# At-risk projects
# ---------------------------------------------------------------------------


def at_risk_reasons(
    project: Project,
    rate: float,
    today: date,
    threshold: float = DEFAULT_AT_RISK_THRESHOLD,
) -> list[str]:
    """Names of the at-risk rules ``project`` trips, in a fixed order."""
    reasons: list[str] = []
    if is_overdue(project, today):
        reasons.append(REASON_OVERDUE)
    if rate < threshold:
        reasons.append(REASON_LOW_COMPLETION)
    if canonical_value(project.status, ProjectStatus) == ProjectStatus.ON_HOLD:
        reasons.append(REASON_ON_HOLD)
    return reasons


def is_at_risk(
    project: Project,
    rate: float,
    today: date,
    threshold: float = DEFAULT_AT_RISK_THRESHOLD,
) -> bool:
    """Overdue, below the completion threshold, or on hold."""
    return bool(at_risk_reasons(project, rate, today, threshold))


def at_risk_projects(
    projects: Iterable[Project],
    performance: Iterable[EntityPerformance],
    today: date,
    *,
    threshold: float = DEFAULT_AT_RISK_THRESHOLD,
    limit: int | None = None,
) -> list[AtRiskProject]:
    """Open projects that are at risk, in input order, capped at ``limit``.

    Completed and cancelled projects are not evaluated.
    """
    rates = {p.entity_id: p.completion_rate for p in performance}
    flagged: list[AtRiskProject] = []
    for project in projects:
        if limit is not None and len(flagged) >= limit:
            break
        if is_closed(project):
            continue
        rate = rates.get(str(project.id), 0.0)
        reasons = at_risk_reasons(project, rate, today, threshold)
        if not reasons:
            continue
        flagged.append(
            AtRiskProject(
                project_id=str(project.id),
                name=project.name,
                status=project.status,
                due_date=project.due_date,
                completion_rate=rate,
                reasons=reasons,
            )
        )
    return flagged


# ---------------------------------------------------------------------------
# Portfolio views
# ---------------------------------------------------------------------------


def project_timeline(projects: Iterable[Project], today: date) -> list[TimelineEntry]:
    """Elapsed share of each scheduled project's start-to-due span."""
    entries: list[TimelineEntry] = []
    for project in projects:
        if project.start_date is None or project.due_date is None:
            continue
        span = (project.due_date - project.start_date).days
        elapsed = (today - project.start_date).days
        if span <= 0:
            progress = 1.0 if elapsed >= 0 else 0.0
        else:
            progress = min(max(elapsed / span, 0.0), 1.0)
        entries.append(
            TimelineEntry(
                project_id=str(project.id),
                name=project.name,
                status=project.status,
                progress=progress,
                is_behind=is_overdue(project, today),
            )
        )
    return entries


def team_distribution(projects: Iterable[Project], teams: Iterable[Team]) -> list[TeamSummary]:
    """Projects and completed projects per team, busiest team first."""
    counts: dict[str, list[int]] = defaultdict(lambda: [0, 0])
    for project in projects:
        if project.team_id is None:
            continue
        bucket = counts[str(project.team_id)]
        bucket[0] += 1
        if is_completed(project):
            bucket[1] += 1

    summaries = [
        TeamSummary(
            team_id=str(team.id),
            name=team.name,
            projects=counts[str(team.id)][0],
            completed=counts[str(team.id)][1],
            completion_rate=completion_rate(counts[str(team.id)][1], counts[str(team.id)][0]),
        )
        for team in teams
        if str(team.id) in counts
    ]
    return rank_by(summaries, lambda s: s.projects, direction=Direction.DESC)


def workload(performance: Iterable[EntityPerformance]) -> list[WorkloadEntry]:
    """Assigned, completed and overdue task counts for employees with work."""
    entries = [
        WorkloadEntry(
            employee_id=p.entity_id,
            name=p.name,
            tasks=p.total,
            completed=p.completed,
            overdue=p.overdue,
        )
        for p in performance
        if p.total > 0
    ]
    return rank_by(entries, lambda w: w.tasks, direction=Direction.DESC)


def employee_table(
    employees: Iterable[Employee],
    performance: Iterable[EntityPerformance],
) -> list[EmployeePerformance]:
    """Every employee with role and status, highest completion rate first.

    Ties keep employee order. Employees missing from ``performance`` get
    zero counts.
    """
    by_id = {p.entity_id: p for p in performance}
    rows = []
    for employee in employees:
        perf = by_id.get(str(employee.id)) or EntityPerformance(
            entity_id=str(employee.id), name=employee.full_name
        )
        rows.append(
            EmployeePerformance(
                **perf.model_dump(),
                role=employee.role or EmployeeRole.EMPLOYEE,
                status=employee.status or EmployeeStatus.ACTIVE,
            )
        )
    return rank_by(rows, lambda r: r.completion_rate, direction=Direction.DESC)
