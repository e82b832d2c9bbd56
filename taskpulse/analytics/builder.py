"""Report builder: snapshot in, DerivedReport out.

Runs the whole pipeline (normalize, filter, aggregate, assemble) for one
snapshot, one filter spec and one "as of" date. The builder holds only its
configuration, so a single instance can serve any number of requests.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from taskpulse.analytics import ranking
from taskpulse.analytics.assembler import AggregatorOutputs, assemble
from taskpulse.analytics.distribution import distribution, relabel
from taskpulse.analytics.filters import (
    filter_records,
    is_unset,
    resolve_window,
    week_bounds,
    window_label,
)
from taskpulse.analytics.normalizer import (
    PRIORITY_LABELS,
    PROJECT_STATUS_LABELS,
    TASK_STATUS_LABELS,
    normalize_snapshot,
)
from taskpulse.analytics.timeseries import completion_trend
from taskpulse.models.common import (
    PRIORITY_LEVELS,
    EmployeeRole,
    EmployeeStatus,
    ProjectStatus,
    TaskStatus,
    as_date,
    same_id,
)
from taskpulse.models.records import Employee, Snapshot, attach_assignments
from taskpulse.models.report import (
    DateField,
    DerivedReport,
    FilterSpec,
    OnboardingEntry,
    ReportConfig,
    ReportContext,
)

logger = logging.getLogger(__name__)


def _label_for(collection, record_id, attr: str, default: str) -> str:
    if is_unset(record_id):
        return default
    for record in collection:
        if same_id(record.id, record_id):
            value = getattr(record, attr)
            return value or str(record_id)
    return str(record_id)


def recent_onboarding(employees: list[Employee], as_of: date, days: int) -> list[OnboardingEntry]:
    """Employees whose profile was created in the last ``days`` days, newest first."""
    since = as_of - timedelta(days=days)
    recent = [
        e for e in employees
        if e.created_at is not None and since <= as_date(e.created_at) <= as_of
    ]
    recent.sort(key=lambda e: e.created_at, reverse=True)
    return [
        OnboardingEntry(employee_id=str(e.id), name=e.full_name, role=e.role, created_at=e.created_at)
        for e in recent
    ]


class ReportBuilder:
    """Build DerivedReports from snapshots."""

    def __init__(self, config: ReportConfig | None = None) -> None:
        self._config = config or ReportConfig()

    @property
    def config(self) -> ReportConfig:
        return self._config

    def filter_snapshot(self, snapshot: Snapshot, filters: FilterSpec, as_of: date) -> Snapshot:
        """Apply ``filters`` to each collection of a normalized snapshot.

        Tasks and activity entries take the full spec on ``created_at``.
        Projects take the time window, team and project constraints.
        Employees are narrowed only by the assignee constraint.
        """
        week_start = self._config.week_start
        project_spec = filters.model_copy(
            update={"assignee_id": None, "priority": None, "status_allowlist": None}
        )
        employee_spec = FilterSpec(assignee_id=filters.assignee_id)
        activity_spec = filters.model_copy(update={"priority": None, "status_allowlist": None})

        return snapshot.model_copy(
            update={
                "tasks": filter_records(
                    snapshot.tasks, filters, date_field=DateField.CREATED_AT,
                    as_of=as_of, projects=snapshot.projects, week_start=week_start,
                ),
                "projects": filter_records(
                    snapshot.projects, project_spec, date_field=DateField.CREATED_AT,
                    as_of=as_of, week_start=week_start,
                ),
                "employees": filter_records(
                    snapshot.employees, employee_spec, date_field=DateField.CREATED_AT,
                ),
                "activity_logs": filter_records(
                    snapshot.activity_logs, activity_spec, date_field=DateField.CREATED_AT,
                    as_of=as_of, projects=snapshot.projects, week_start=week_start,
                ),
            }
        )

    def aggregate(
        self,
        filtered: Snapshot,
        as_of: date,
        reference: Snapshot | None = None,
    ) -> AggregatorOutputs:
        """Run the distribution, ranking and binning stages.

        ``reference`` is the unfiltered snapshot, used only to look up names
        of projects that the window filtered out.
        """
        cfg = self._config
        tasks = filtered.tasks
        projects = filtered.projects
        employees = filtered.employees

        project_perf = ranking.project_performance(projects, tasks, as_of)
        employee_perf = ranking.employee_performance(employees, tasks, as_of, filtered.activity_logs)
        week = week_bounds(as_of, cfg.week_start)

        return AggregatorOutputs(
            status_distribution=relabel(
                distribution(tasks, lambda t: t.status, categories=list(TaskStatus)),
                TASK_STATUS_LABELS,
            ),
            priority_distribution=relabel(
                distribution(tasks, lambda t: t.priority, categories=PRIORITY_LEVELS),
                PRIORITY_LABELS,
            ),
            project_status_distribution=relabel(
                distribution(projects, lambda p: p.status, categories=list(ProjectStatus)),
                PROJECT_STATUS_LABELS,
            ),
            team_distribution=ranking.team_distribution(projects, filtered.teams),
            role_distribution=distribution(employees, lambda e: e.role or EmployeeRole.EMPLOYEE),
            employee_status_distribution=distribution(
                employees, lambda e: e.status or EmployeeStatus.ACTIVE
            ),
            activity_breakdown=distribution(
                filtered.activity_logs, lambda a: a.activity_type or "unknown"
            ),
            top_performers=ranking.top_performers(
                employee_perf,
                limit=cfg.top_performer_limit,
                min_tasks=cfg.top_performer_min_tasks,
            ),
            most_overdue=ranking.most_overdue(employee_perf, limit=cfg.most_overdue_limit),
            project_health=ranking.project_health(project_perf, limit=cfg.project_health_limit),
            at_risk_projects=ranking.at_risk_projects(
                projects,
                project_perf,
                as_of,
                threshold=cfg.at_risk_completion_threshold,
                limit=cfg.at_risk_display_limit,
            ),
            overdue_tasks=ranking.overdue_tasks(
                tasks, (reference or filtered).projects, as_of, limit=cfg.overdue_task_limit
            ),
            project_timeline=ranking.project_timeline(projects, as_of),
            employee_performance=ranking.employee_table(employees, employee_perf),
            workload=ranking.workload(employee_perf),
            recent_onboarding=recent_onboarding(employees, as_of, cfg.recent_onboarding_days),
            time_series=completion_trend(tasks, week.start, week.end, ranking.is_completed),
        )

    def context(self, snapshot: Snapshot, filters: FilterSpec, as_of: date) -> ReportContext:
        window = resolve_window(filters, as_of, self._config.week_start)
        return ReportContext(
            as_of=as_of,
            filters=filters,
            window=window,
            window_label=window_label(filters, window),
            team_label=_label_for(snapshot.teams, filters.team_id, "name", "All Teams"),
            project_label=_label_for(snapshot.projects, filters.project_id, "name", "All Projects"),
            assignee_label=_label_for(
                snapshot.employees, filters.assignee_id, "full_name", "All Assignees"
            ),
        )

    def build(
        self,
        snapshot: Snapshot,
        filters: FilterSpec | None = None,
        *,
        as_of: date,
    ) -> DerivedReport:
        """Normalize, filter, aggregate and assemble one report."""
        filters = filters or FilterSpec()
        normalized = normalize_snapshot(snapshot)
        normalized = normalized.model_copy(
            update={"tasks": attach_assignments(normalized.tasks, normalized.assignments)}
        )

        filtered = self.filter_snapshot(normalized, filters, as_of)
        outputs = self.aggregate(filtered, as_of, reference=normalized)
        report = assemble(
            filtered,
            outputs,
            self.context(normalized, filters, as_of),
            week=week_bounds(as_of, self._config.week_start),
        )

        logger.info(
            "Built report as of %s: %d tasks, %d projects, %d employees (%s)",
            as_of.isoformat(),
            report.totals.tasks_total,
            report.totals.projects_total,
            report.totals.employees_total,
            report.context.window_label,
        )
        return report
