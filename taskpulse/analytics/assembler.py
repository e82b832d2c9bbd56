"""Report assembler.

Pure composition of aggregator outputs and headline totals into one
DerivedReport. Equal inputs give deep-equal reports, which is what lets the
dashboard and the PDF export share a single set of numbers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date

from taskpulse.analytics.filters import record_day
from taskpulse.analytics.ranking import completion_rate, is_closed, is_completed, is_overdue
from taskpulse.models.common import EmployeeStatus, ProjectStatus, TaskStatus
from taskpulse.models.records import Snapshot
from taskpulse.models.report import (
    AtRiskProject,
    DateField,
    DateRange,
    DerivedReport,
    DistributionItem,
    EmployeePerformance,
    EntityPerformance,
    OnboardingEntry,
    OverdueTask,
    Rankings,
    ReportContext,
    ReportTotals,
    TeamSummary,
    TimelineEntry,
    TrendPoint,
    WorkloadEntry,
)


@dataclass(frozen=True)
class AggregatorOutputs:
    """Everything the distribution, ranking and binning stages produced."""

    status_distribution: list[DistributionItem] = field(default_factory=list)
    priority_distribution: list[DistributionItem] = field(default_factory=list)
    project_status_distribution: list[DistributionItem] = field(default_factory=list)
    team_distribution: list[TeamSummary] = field(default_factory=list)
    role_distribution: list[DistributionItem] = field(default_factory=list)
    employee_status_distribution: list[DistributionItem] = field(default_factory=list)
    activity_breakdown: list[DistributionItem] = field(default_factory=list)
    top_performers: list[EntityPerformance] = field(default_factory=list)
    most_overdue: list[EntityPerformance] = field(default_factory=list)
    project_health: list[EntityPerformance] = field(default_factory=list)
    at_risk_projects: list[AtRiskProject] = field(default_factory=list)
    overdue_tasks: list[OverdueTask] = field(default_factory=list)
    project_timeline: list[TimelineEntry] = field(default_factory=list)
    employee_performance: list[EmployeePerformance] = field(default_factory=list)
    workload: list[WorkloadEntry] = field(default_factory=list)
    recent_onboarding: list[OnboardingEntry] = field(default_factory=list)
    time_series: list[TrendPoint] = field(default_factory=list)


def _count_status(records, status: str) -> int:
    return sum(1 for r in records if r.status == status)


def compute_totals(filtered: Snapshot, today: date, week: DateRange) -> ReportTotals:
    """Headline counts over the filtered snapshot."""
    tasks = filtered.tasks
    projects = filtered.projects
    employees = filtered.employees

    tasks_completed = sum(1 for t in tasks if is_completed(t))
    due_this_week = 0
    for task in tasks:
        day = record_day(task, DateField.DUE_DATE)
        if day is not None and week.contains(day) and not is_closed(task):
            due_this_week += 1

    # Missing status means active, as in the status distribution.
    active = sum(1 for e in employees if (e.status or EmployeeStatus.ACTIVE) == EmployeeStatus.ACTIVE)

    return ReportTotals(
        tasks_total=len(tasks),
        tasks_completed=tasks_completed,
        tasks_in_progress=_count_status(tasks, TaskStatus.IN_PROGRESS),
        tasks_on_hold=_count_status(tasks, TaskStatus.ON_HOLD),
        tasks_overdue=sum(1 for t in tasks if is_overdue(t, today)),
        tasks_due_this_week=due_this_week,
        task_completion_rate=completion_rate(tasks_completed, len(tasks)),
        projects_total=len(projects),
        projects_completed=_count_status(projects, ProjectStatus.COMPLETED),
        projects_in_progress=_count_status(projects, ProjectStatus.IN_PROGRESS),
        projects_overdue=sum(1 for p in projects if is_overdue(p, today)),
        employees_total=len(employees),
        employees_active=active,
        employees_inactive=len(employees) - active,
        activity_count=len(filtered.activity_logs),
    )


def assemble(
    filtered: Snapshot,
    outputs: AggregatorOutputs,
    context: ReportContext,
    *,
    week: DateRange,
) -> DerivedReport:
    """Merge aggregator outputs and totals into a DerivedReport.

    ``week`` is the calendar week used for the due-this-week total. No
    clock is read here; ``context.as_of`` is "today" for every date rule.
    """
    return DerivedReport(
        context=context,
        totals=compute_totals(filtered, context.as_of, week),
        status_distribution=outputs.status_distribution,
        priority_distribution=outputs.priority_distribution,
        project_status_distribution=outputs.project_status_distribution,
        team_distribution=outputs.team_distribution,
        role_distribution=outputs.role_distribution,
        employee_status_distribution=outputs.employee_status_distribution,
        activity_breakdown=outputs.activity_breakdown,
        rankings=Rankings(
            top_performers=outputs.top_performers,
            most_overdue=outputs.most_overdue,
            project_health=outputs.project_health,
        ),
        at_risk_projects=outputs.at_risk_projects,
        overdue_tasks=outputs.overdue_tasks,
        project_timeline=outputs.project_timeline,
        employee_performance=outputs.employee_performance,
        workload=outputs.workload,
        recent_onboarding=outputs.recent_onboarding,
        time_series=outputs.time_series,
    )
