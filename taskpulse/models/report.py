"""Report models: filter inputs, aggregation outputs, and the DerivedReport.

A DerivedReport is rebuilt from scratch whenever inputs change and is never
mutated. Dashboards serialize it to JSON; the PDF exporter reads the same
object, so both show identical numbers.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import StrEnum

from pydantic import ConfigDict, Field

from taskpulse.models.common import EmployeeRole, EmployeeStatus, RecordId, TaskPulseBase, WeekStart


class ReportModel(TaskPulseBase):
    """Immutable report value."""

    model_config = ConfigDict(
        populate_by_name=True,
        protected_namespaces=(),
        frozen=True,
    )


# ---------------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------------


class ReportConfig(ReportModel):
    """Thresholds and display caps applied while building a report."""

    week_start: WeekStart = WeekStart.SUNDAY
    at_risk_completion_threshold: float = Field(default=0.30, ge=0.0, le=1.0)
    at_risk_display_limit: int = Field(default=3, ge=0)
    top_performer_limit: int = Field(default=10, ge=0)
    top_performer_min_tasks: int = Field(default=1, ge=0)
    most_overdue_limit: int = Field(default=10, ge=0)
    project_health_limit: int = Field(default=18, ge=0)
    overdue_task_limit: int = Field(default=20, ge=0)
    recent_onboarding_days: int = Field(default=30, ge=0)


# ---------------------------------------------------------------------------
# Filters
# ---------------------------------------------------------------------------


class TimeFrame(StrEnum):
    """Preset reporting windows."""

    ALL = "all"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    CUSTOM = "custom"


class DateField(StrEnum):
    """Record date a window is applied to."""

    CREATED_AT = "created_at"
    DUE_DATE = "due_date"
    UPDATED_AT = "updated_at"


class Direction(StrEnum):
    """Ranking sort direction."""

    ASC = "asc"
    DESC = "desc"


class DateRange(ReportModel):
    """Inclusive calendar-date window. ``start > end`` selects nothing."""

    start: date
    end: date

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


class FilterSpec(ReportModel):
    """Conjunctive record filter. ``None`` or ``"all"`` means no constraint."""

    time_frame: TimeFrame = TimeFrame.ALL
    date_range: DateRange | None = None
    team_id: RecordId | None = None
    project_id: RecordId | None = None
    assignee_id: RecordId | None = None
    priority: int | str | None = None
    status_allowlist: list[str] | None = None


# ---------------------------------------------------------------------------
# Aggregation outputs
# ---------------------------------------------------------------------------


class DistributionItem(ReportModel):
    """One chart slice: a category and its record count."""

    name: str
    value: int


class DistributionShare(ReportModel):
    """Distribution slice with its fraction of the total."""

    name: str
    value: int
    share: float


class EntityPerformance(ReportModel):
    """Task completion figures for one project or employee."""

    entity_id: str
    name: str
    total: int = 0
    completed: int = 0
    overdue: int = 0
    completion_rate: float = 0.0
    recent_activities: int = 0


class EmployeePerformance(EntityPerformance):
    """Per-employee figures plus the role and status shown beside them."""

    role: str = EmployeeRole.EMPLOYEE
    status: str = EmployeeStatus.ACTIVE


class TeamSummary(ReportModel):
    team_id: str
    name: str
    projects: int
    completed: int
    completion_rate: float


class OverdueTask(ReportModel):
    task_id: str
    title: str
    project_name: str
    priority: int | str | None = None
    status: str | None = None
    due_date: date
    days_overdue: int


class AtRiskProject(ReportModel):
    """Project flagged at risk, with the rules that flagged it."""

    project_id: str
    name: str
    status: str | None = None
    due_date: date | None = None
    completion_rate: float
    reasons: list[str]


class TimelineEntry(ReportModel):
    """Share of a project's scheduled duration that has elapsed."""

    project_id: str
    name: str
    status: str | None = None
    progress: float
    is_behind: bool


class WorkloadEntry(ReportModel):
    employee_id: str
    name: str
    tasks: int
    completed: int
    overdue: int


class OnboardingEntry(ReportModel):
    employee_id: str
    name: str
    role: str | None = None
    created_at: datetime


class TimeBucket(ReportModel):
    """Count of records falling on one day (or in one week)."""

    label: str
    day: date
    count: int


class TrendPoint(ReportModel):
    """Tasks created and completed on one day."""

    label: str
    day: date
    created: int
    completed: int


# ---------------------------------------------------------------------------
# Assembled report
# ---------------------------------------------------------------------------


class ReportTotals(ReportModel):
    """Headline counts shown in dashboard cards and the PDF summary row."""

    tasks_total: int = 0
    tasks_completed: int = 0
    tasks_in_progress: int = 0
    tasks_on_hold: int = 0
    tasks_overdue: int = 0
    tasks_due_this_week: int = 0
    task_completion_rate: float = 0.0
    projects_total: int = 0
    projects_completed: int = 0
    projects_in_progress: int = 0
    projects_overdue: int = 0
    employees_total: int = 0
    employees_active: int = 0
    employees_inactive: int = 0
    activity_count: int = 0


class Rankings(ReportModel):
    top_performers: list[EntityPerformance] = Field(default_factory=list)
    most_overdue: list[EntityPerformance] = Field(default_factory=list)
    project_health: list[EntityPerformance] = Field(default_factory=list)


class ReportContext(ReportModel):
    """What the report was computed for."""

    as_of: date
    filters: FilterSpec = Field(default_factory=FilterSpec)
    window: DateRange | None = None
    window_label: str = "All Time"
    team_label: str = "All Teams"
    project_label: str = "All Projects"
    assignee_label: str = "All Assignees"


class DerivedReport(ReportModel):
    """Single source of truth for every dashboard number and PDF table."""

    context: ReportContext
    totals: ReportTotals = Field(default_factory=ReportTotals)
    status_distribution: list[DistributionItem] = Field(default_factory=list)
    priority_distribution: list[DistributionItem] = Field(default_factory=list)
    project_status_distribution: list[DistributionItem] = Field(default_factory=list)
    team_distribution: list[TeamSummary] = Field(default_factory=list)
    role_distribution: list[DistributionItem] = Field(default_factory=list)
    employee_status_distribution: list[DistributionItem] = Field(default_factory=list)
    activity_breakdown: list[DistributionItem] = Field(default_factory=list)
    rankings: Rankings = Field(default_factory=Rankings)
    at_risk_projects: list[AtRiskProject] = Field(default_factory=list)
    overdue_tasks: list[OverdueTask] = Field(default_factory=list)
    project_timeline: list[TimelineEntry] = Field(default_factory=list)
    employee_performance: list[EmployeePerformance] = Field(default_factory=list)
    workload: list[WorkloadEntry] = Field(default_factory=list)
    recent_onboarding: list[OnboardingEntry] = Field(default_factory=list)
    time_series: list[TrendPoint] = Field(default_factory=list)
