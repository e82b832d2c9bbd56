"""PDF export of a DerivedReport.

Every table is filled from the report object handed in; nothing is
recomputed here, so the PDF always matches the dashboard. Layout: title
block with filter subtitle, summary key-metrics row, one table per section,
and a footer with the generation timestamp and "Page X of Y" on every page.

Uses fpdf2 core fonts (Helvetica), which cover Latin-1 only; other
characters are replaced.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from enum import StrEnum

from fpdf import FPDF
from fpdf.enums import XPos, YPos

from taskpulse.analytics.distribution import non_zero, with_share
from taskpulse.models.common import utc_now
from taskpulse.models.report import DerivedReport, DistributionItem

logger = logging.getLogger(__name__)

# A4 portrait, millimetres.
PAGE_MARGIN_X = 12
PAGE_MARGIN_TOP = 14
PAGE_MARGIN_BOTTOM = 16
ROW_HEIGHT = 7
EMPLOYEE_TABLE_ROWS = 25

_HEAD_FILL = (243, 244, 246)
_ALERT_FILL = (254, 242, 242)
_ALERT_TEXT = (153, 27, 27)
_RULE_COLOR = (30, 64, 175)


class ReportKind(StrEnum):
    """PDF layouts available for a DerivedReport."""

    TASK_ANALYTICS = "task_analytics"
    PROJECT_PORTFOLIO = "project_portfolio"
    EMPLOYEE_ANALYTICS = "employee_analytics"
    WEEKLY = "weekly"


REPORT_TITLES: dict[ReportKind, str] = {
    ReportKind.TASK_ANALYTICS: "Task Analytics Report",
    ReportKind.PROJECT_PORTFOLIO: "Project Portfolio Report",
    ReportKind.EMPLOYEE_ANALYTICS: "Employee Analytics Report",
    ReportKind.WEEKLY: "Weekly Report",
}


def format_percent(rate: float) -> str:
    """0.456 -> ``"46%"``."""
    return f"{round(rate * 100)}%"


def trim_text(text: str | None, limit: int = 40) -> str:
    if not text:
        return ""
    if len(text) <= limit:
        return text
    return f"{text[: limit - 3]}..."


def _latin1(text: str) -> str:
    return text.encode("latin-1", "replace").decode("latin-1")


class _ReportDocument(FPDF):
    """FPDF page template with the shared footer."""

    def __init__(self, generated_at: datetime) -> None:
        super().__init__(orientation="P", unit="mm", format="A4")
        self.generated_at = generated_at
        self.set_margins(PAGE_MARGIN_X, PAGE_MARGIN_TOP, PAGE_MARGIN_X)
        self.set_auto_page_break(auto=True, margin=PAGE_MARGIN_BOTTOM)
        self.set_creation_date(generated_at)

    def footer(self) -> None:
        self.set_y(-12)
        self.set_font("Helvetica", size=8)
        self.set_text_color(100)
        half = self.epw / 2
        stamp = self.generated_at.strftime("%Y-%m-%d %H:%M UTC")
        self.cell(half, 6, f"Generated on {stamp}", align="L")
        self.cell(half, 6, f"Page {self.page_no()} of {{nb}}", align="R")
        self.set_text_color(0)


class PdfReportExporter:
    """Render DerivedReports as paginated PDF documents."""

    def export(
        self,
        report: DerivedReport,
        kind: ReportKind | str = ReportKind.TASK_ANALYTICS,
        *,
        generated_at: datetime | None = None,
    ) -> bytes:
        """Return the PDF bytes for ``report`` in the ``kind`` layout."""
        kind = ReportKind(kind)
        doc = _ReportDocument(generated_at or utc_now())
        doc.set_title(REPORT_TITLES[kind])
        doc.add_page()

        self._title_block(doc, REPORT_TITLES[kind], self._subtitle(report, kind))
        sections: dict[ReportKind, Callable[[_ReportDocument, DerivedReport], None]] = {
            ReportKind.TASK_ANALYTICS: self._task_analytics,
            ReportKind.PROJECT_PORTFOLIO: self._project_portfolio,
            ReportKind.EMPLOYEE_ANALYTICS: self._employee_analytics,
            ReportKind.WEEKLY: self._weekly,
        }
        sections[kind](doc, report)

        content = bytes(doc.output())
        logger.info("Rendered %s PDF: %d pages, %d bytes", kind.value, doc.page_no(), len(content))
        return content

    # ------------------------------------------------------------------
    # Layout primitives
    # ------------------------------------------------------------------

    @staticmethod
    def _subtitle(report: DerivedReport, kind: ReportKind) -> str:
        ctx = report.context
        if kind == ReportKind.EMPLOYEE_ANALYTICS:
            return ctx.window_label
        if kind == ReportKind.PROJECT_PORTFOLIO:
            return f"{ctx.window_label} | {ctx.team_label}"
        return f"{ctx.window_label} | {ctx.team_label} | {ctx.project_label}"

    @staticmethod
    def _title_block(doc: _ReportDocument, title: str, subtitle: str) -> None:
        doc.set_font("Helvetica", "B", 16)
        doc.cell(0, 8, _latin1(title), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        doc.set_draw_color(*_RULE_COLOR)
        doc.set_line_width(0.8)
        doc.line(doc.l_margin, doc.get_y() + 1, doc.w - doc.r_margin, doc.get_y() + 1)
        doc.set_line_width(0.2)
        doc.set_draw_color(0)
        doc.ln(3)
        doc.set_font("Helvetica", size=10)
        doc.set_text_color(100)
        doc.cell(0, 6, _latin1(subtitle), new_x=XPos.LMARGIN, new_y=YPos.NEXT)
        doc.set_text_color(0)
        doc.ln(2)

    @staticmethod
    def _section_title(doc: _ReportDocument, text: str) -> None:
        if doc.get_y() + 3 * ROW_HEIGHT > doc.page_break_trigger:
            doc.add_page()
        doc.ln(3)
        doc.set_font("Helvetica", "B", 12)
        doc.cell(0, 8, _latin1(text), new_x=XPos.LMARGIN, new_y=YPos.NEXT)

    @staticmethod
    def _table(
        doc: _ReportDocument,
        headers: Sequence[str],
        rows: Sequence[Sequence[object]],
        widths: Sequence[float] | None = None,
        *,
        alert: bool = False,
        empty_text: str = "No data for this period.",
    ) -> None:
        widths = list(widths or [doc.epw / len(headers)] * len(headers))

        def draw_header() -> None:
            doc.set_font("Helvetica", "B", 9)
            doc.set_fill_color(*(_ALERT_FILL if alert else _HEAD_FILL))
            if alert:
                doc.set_text_color(*_ALERT_TEXT)
            for header, width in zip(headers, widths):
                doc.cell(width, ROW_HEIGHT, _latin1(header), border=1, fill=True)
            doc.ln(ROW_HEIGHT)
            doc.set_text_color(0)
            doc.set_font("Helvetica", size=9)

        draw_header()
        if not rows:
            doc.set_text_color(100)
            doc.cell(sum(widths), ROW_HEIGHT, empty_text, border=1, new_x=XPos.LMARGIN, new_y=YPos.NEXT)
            doc.set_text_color(0)
            return

        for row in rows:
            if doc.get_y() + ROW_HEIGHT > doc.page_break_trigger:
                doc.add_page()
                draw_header()
            for value, width in zip(row, widths):
                doc.cell(width, ROW_HEIGHT, _latin1(str(value)), border=1)
            doc.ln(ROW_HEIGHT)

    def _summary(self, doc: _ReportDocument, entries: Sequence[tuple[str, object]]) -> None:
        self._section_title(doc, "Summary")
        self._table(doc, [label for label, _ in entries], [[value for _, value in entries]])

    def _distribution(
        self,
        doc: _ReportDocument,
        title: str,
        label: str,
        items: Sequence[DistributionItem],
        *,
        share: bool = False,
    ) -> None:
        self._section_title(doc, title)
        shown = non_zero(items)
        if share:
            rows = [[s.name, s.value, f"{s.share * 100:.1f}%"] for s in with_share(shown)]
            self._table(doc, [label, "Count", "%"], rows)
        else:
            self._table(doc, [label, "Count"], [[i.name, i.value] for i in shown])

    # ------------------------------------------------------------------
    # Layouts
    # ------------------------------------------------------------------

    def _project_rows(self, report: DerivedReport) -> list[list[object]]:
        return [
            [trim_text(p.name, 60), f"{p.completed}/{p.total}", format_percent(p.completion_rate)]
            for p in report.rankings.project_health
        ]

    def _task_analytics(self, doc: _ReportDocument, report: DerivedReport) -> None:
        t = report.totals
        self._summary(doc, [
            ("Total", t.tasks_total),
            ("Completed", t.tasks_completed),
            ("Overdue", t.tasks_overdue),
            ("Due This Week", t.tasks_due_this_week),
        ])
        self._distribution(doc, "Status Distribution", "Status", report.status_distribution)
        self._distribution(doc, "Priority Distribution", "Priority", report.priority_distribution)

        self._section_title(doc, "Project Performance")
        self._table(doc, ["Project", "Completed/Total", "Completion %"], self._project_rows(report), [110, 40, 36])

        self._section_title(doc, "User Performance")
        self._table(
            doc,
            ["Employee", "Completed/Total", "Completion %"],
            [
                [trim_text(p.name, 60), f"{p.completed}/{p.total}", format_percent(p.completion_rate)]
                for p in report.rankings.top_performers
            ],
            [110, 40, 36],
        )

        if report.overdue_tasks:
            self._section_title(doc, "Overdue Tasks")
            self._table(
                doc,
                ["Task", "Project", "Priority", "Due", "Days"],
                [
                    [
                        trim_text(o.title, 45),
                        trim_text(o.project_name, 30),
                        "-" if o.priority is None else o.priority,
                        o.due_date.isoformat(),
                        o.days_overdue,
                    ]
                    for o in report.overdue_tasks
                ],
                [72, 50, 18, 28, 18],
                alert=True,
            )

    def _project_portfolio(self, doc: _ReportDocument, report: DerivedReport) -> None:
        t = report.totals
        self._summary(doc, [
            ("Total", t.projects_total),
            ("Completed", t.projects_completed),
            ("In Progress", t.projects_in_progress),
            ("Overdue", t.projects_overdue),
        ])
        self._distribution(
            doc, "Status Distribution", "Status", report.project_status_distribution, share=True
        )

        self._section_title(doc, "Projects by Team")
        self._table(
            doc,
            ["Team", "Projects", "Completed", "Completion %"],
            [
                [trim_text(s.name, 50), s.projects, s.completed, f"{s.completion_rate * 100:.1f}%"]
                for s in report.team_distribution
            ],
        )

        self._section_title(doc, "Top Projects by Completion")
        self._table(doc, ["Project", "Completed/Total", "Completion %"], self._project_rows(report), [110, 40, 36])

        if report.at_risk_projects:
            self._section_title(doc, "At-Risk Projects")
            self._table(
                doc,
                ["Project", "Due", "Completion %", "Flags"],
                [
                    [
                        trim_text(a.name, 45),
                        a.due_date.isoformat() if a.due_date else "-",
                        format_percent(a.completion_rate),
                        ", ".join(r.replace("_", " ") for r in a.reasons),
                    ]
                    for a in report.at_risk_projects
                ],
                [76, 28, 28, 54],
                alert=True,
            )

    def _employee_analytics(self, doc: _ReportDocument, report: DerivedReport) -> None:
        t = report.totals
        self._summary(doc, [
            ("Employees", t.employees_total),
            ("Active", t.employees_active),
            ("Inactive", t.employees_inactive),
            ("Tasks Completed", t.tasks_completed),
        ])
        self._distribution(doc, "Role Distribution", "Role", report.role_distribution)

        self._section_title(doc, "Employee Performance")
        employees = report.employee_performance
        self._table(
            doc,
            ["Employee", "Role", "Status", "Tasks", "Completed", "Overdue", "Rate", "Activity"],
            [
                [
                    trim_text(e.name, 22),
                    trim_text(e.role.title(), 10),
                    e.status,
                    e.total,
                    e.completed,
                    e.overdue,
                    format_percent(e.completion_rate),
                    e.recent_activities,
                ]
                for e in employees[:EMPLOYEE_TABLE_ROWS]
            ],
            [44, 22, 20, 16, 22, 18, 22, 22],
        )
        if len(employees) > EMPLOYEE_TABLE_ROWS:
            doc.set_font("Helvetica", "I", 8)
            doc.set_text_color(100)
            doc.cell(
                0,
                ROW_HEIGHT,
                f"Showing {EMPLOYEE_TABLE_ROWS} of {len(employees)} employees.",
                new_x=XPos.LMARGIN,
                new_y=YPos.NEXT,
            )
            doc.set_text_color(0)
            doc.set_font("Helvetica", size=9)

        self._section_title(doc, "Top Performers")
        self._table(
            doc,
            ["Employee", "Completed", "Completion %"],
            [
                [trim_text(p.name, 60), p.completed, format_percent(p.completion_rate)]
                for p in report.rankings.top_performers
            ],
            [110, 40, 36],
        )

        self._section_title(doc, "Most Overdue")
        self._table(
            doc,
            ["Employee", "Overdue Tasks"],
            [[trim_text(p.name, 60), p.overdue] for p in report.rankings.most_overdue],
            [120, 66],
            alert=True,
            empty_text="No employees with overdue tasks.",
        )

        self._section_title(doc, "Workload")
        self._table(
            doc,
            ["Employee", "Tasks", "Completed", "Overdue"],
            [[trim_text(w.name, 50), w.tasks, w.completed, w.overdue] for w in report.workload],
        )
        self._distribution(doc, "Activity Breakdown", "Activity", report.activity_breakdown)

    def _weekly(self, doc: _ReportDocument, report: DerivedReport) -> None:
        t = report.totals
        self._summary(doc, [
            ("Total Tasks", t.tasks_total),
            ("Completed", t.tasks_completed),
            ("In Progress", t.tasks_in_progress),
            ("On Hold", t.tasks_on_hold),
        ])
        self._distribution(doc, "Status Distribution", "Status", report.status_distribution)
        self._distribution(doc, "Priority Distribution", "Priority", report.priority_distribution)

        self._section_title(doc, "Daily Trend")
        self._table(
            doc,
            ["Day", "Date", "Created", "Completed"],
            [[p.label, p.day.isoformat(), p.created, p.completed] for p in report.time_series],
        )

        self._section_title(doc, "Top Project Progress")
        self._table(doc, ["Project", "Completed/Total", "Completion %"], self._project_rows(report), [110, 40, 36])
