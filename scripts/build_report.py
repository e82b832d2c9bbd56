"""Build a TaskPulse report from a snapshot JSON file.

Prints the headline totals and rankings, and optionally writes the PDF
rendering or the full DerivedReport JSON.

Usage:
    python -m scripts.build_report snapshot.json
    python -m scripts.build_report snapshot.json --as-of 2024-06-15 \\
        --time-frame week --pdf weekly.pdf --kind weekly
    python -m scripts.build_report snapshot.json --json report.json
"""

from __future__ import annotations

import argparse
import sys
from datetime import date
from pathlib import Path

from pydantic import ValidationError

from taskpulse.analytics.builder import ReportBuilder
from taskpulse.config.settings import get_settings
from taskpulse.export.pdf_export import PdfReportExporter, ReportKind
from taskpulse.models.common import utc_now
from taskpulse.models.records import Snapshot
from taskpulse.models.report import DerivedReport, FilterSpec, TimeFrame


def load_snapshot(path: Path) -> Snapshot:
    """Read and validate a snapshot file."""
    return Snapshot.model_validate_json(path.read_text(encoding="utf-8"))


def _print_summary(report: DerivedReport) -> None:
    """Print headline totals and the top rankings."""
    t = report.totals
    ctx = report.context
    w = 60
    print("=" * w)
    print("  TaskPulse Report")
    print(f"  As of {ctx.as_of.isoformat()} | {ctx.window_label} | {ctx.team_label} | {ctx.project_label}")
    print("=" * w)
    print(f"  Tasks:     {t.tasks_total:>5}  completed {t.tasks_completed}, overdue {t.tasks_overdue}")
    print(f"  Projects:  {t.projects_total:>5}  completed {t.projects_completed}, overdue {t.projects_overdue}")
    print(f"  Employees: {t.employees_total:>5}  active {t.employees_active}")
    print(f"  Completion rate: {t.task_completion_rate:.0%}")

    if report.rankings.top_performers:
        print()
        print(f"  {'Top performer':<35} {'Done':>6} {'Rate':>6}")
        for p in report.rankings.top_performers:
            print(f"  {p.name[:35]:<35} {p.completed:>6} {p.completion_rate:>6.0%}")

    if report.at_risk_projects:
        print()
        print("  At-risk projects:")
        for a in report.at_risk_projects:
            print(f"    ! {a.name} ({', '.join(a.reasons)})")


def main(argv: list[str] | None = None) -> int:
    """Run the report build; returns the process exit status."""
    parser = argparse.ArgumentParser(
        description="Build a TaskPulse analytics report from a snapshot JSON file",
    )
    parser.add_argument("snapshot_path", type=Path, help="Path to snapshot JSON")
    parser.add_argument(
        "--as-of", type=date.fromisoformat, default=None,
        help="Report date (YYYY-MM-DD); defaults to today (UTC)",
    )
    parser.add_argument(
        "--time-frame", choices=[t.value for t in TimeFrame], default=TimeFrame.ALL.value,
    )
    parser.add_argument("--team", default=None, help="Team id filter")
    parser.add_argument("--project", default=None, help="Project id filter")
    parser.add_argument("--assignee", default=None, help="Assignee id filter")
    parser.add_argument(
        "--kind", choices=[k.value for k in ReportKind], default=ReportKind.TASK_ANALYTICS.value,
        help="PDF layout",
    )
    parser.add_argument("--pdf", type=Path, default=None, help="Write the PDF here")
    parser.add_argument("--json", type=Path, default=None, help="Write the report JSON here")
    args = parser.parse_args(argv)

    try:
        snapshot = load_snapshot(args.snapshot_path)
    except OSError as exc:
        print(f"  ERROR: cannot read {args.snapshot_path}: {exc}", file=sys.stderr)
        return 1
    except ValidationError as exc:
        print(f"  ERROR: invalid snapshot {args.snapshot_path}:\n{exc}", file=sys.stderr)
        return 1

    filters = FilterSpec(
        time_frame=TimeFrame(args.time_frame),
        team_id=args.team,
        project_id=args.project,
        assignee_id=args.assignee,
    )
    builder = ReportBuilder(get_settings().report_config())
    report = builder.build(snapshot, filters, as_of=args.as_of or utc_now().date())

    _print_summary(report)

    if args.json:
        args.json.write_text(report.model_dump_json(indent=2), encoding="utf-8")
        print(f"\n  Report JSON written to {args.json}")
    if args.pdf:
        args.pdf.write_bytes(PdfReportExporter().export(report, ReportKind(args.kind)))
        print(f"\n  PDF written to {args.pdf}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
