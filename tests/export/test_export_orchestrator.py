"""Tests for the export orchestrator.

Covers: one report shared by every rendered layout, checksums, file names
and the empty request.
"""

import hashlib
from datetime import date, datetime, timezone

from taskpulse.analytics.builder import ReportBuilder
from taskpulse.export.orchestrator import (
    ExportOrchestrator,
    ExportRecord,
    ExportRequest,
    ExportStatus,
    checksum,
    export_filename,
)
from taskpulse.export.pdf_export import ReportKind
from taskpulse.models.records import Snapshot
from taskpulse.models.report import FilterSpec, ReportConfig

GENERATED_AT = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def _make_request(snapshot: Snapshot, as_of: date, **overrides: object) -> ExportRequest:
    defaults: dict[str, object] = {"snapshot": snapshot, "as_of": as_of}
    defaults.update(overrides)
    return ExportRequest(**defaults)  # type: ignore[arg-type]


class TestHelpers:
    def test_checksum_format(self) -> None:
        assert checksum(b"abc") == "sha256:" + hashlib.sha256(b"abc").hexdigest()

    def test_export_filename(self) -> None:
        assert export_filename(ReportKind.TASK_ANALYTICS, GENERATED_AT) == "Task-Analytics-Report-2024-06-15.pdf"
        assert export_filename("weekly", GENERATED_AT) == "Weekly-Report-2024-06-15.pdf"


class TestExportOrchestrator:
    def test_default_request_renders_task_analytics(self, snapshot: Snapshot, as_of: date) -> None:
        record = ExportOrchestrator().execute(_make_request(snapshot, as_of), generated_at=GENERATED_AT)
        assert isinstance(record, ExportRecord)
        assert record.status == ExportStatus.COMPLETED
        assert list(record.artifacts) == ["task_analytics"]
        assert record.artifacts["task_analytics"].startswith(b"%PDF")

    def test_multiple_kinds(self, snapshot: Snapshot, as_of: date) -> None:
        request = _make_request(
            snapshot, as_of, kinds=[ReportKind.WEEKLY, ReportKind.PROJECT_PORTFOLIO, ReportKind.WEEKLY]
        )
        record = ExportOrchestrator().execute(request, generated_at=GENERATED_AT)
        assert list(record.artifacts) == ["weekly", "project_portfolio"]
        assert record.filenames["project_portfolio"] == "Project-Portfolio-Report-2024-06-15.pdf"

    def test_checksums_match_artifacts(self, snapshot: Snapshot, as_of: date) -> None:
        record = ExportOrchestrator().execute(_make_request(snapshot, as_of))
        for name, data in record.artifacts.items():
            assert record.checksums[name] == checksum(data)

    def test_record_carries_the_rendered_report(self, snapshot: Snapshot, as_of: date) -> None:
        filters = FilterSpec(team_id="T2")
        record = ExportOrchestrator().execute(_make_request(snapshot, as_of, filters=filters))
        assert record.report == ReportBuilder().build(snapshot, filters, as_of=as_of)
        assert record.report.totals.projects_total == 1

    def test_builder_config_is_used(self, snapshot: Snapshot, as_of: date) -> None:
        orchestrator = ExportOrchestrator(builder=ReportBuilder(ReportConfig(at_risk_display_limit=0)))
        record = orchestrator.execute(_make_request(snapshot, as_of))
        assert record.report.at_risk_projects == []

    def test_export_ids_are_unique(self, snapshot: Snapshot, as_of: date) -> None:
        orchestrator = ExportOrchestrator()
        first = orchestrator.execute(_make_request(snapshot, as_of))
        second = orchestrator.execute(_make_request(snapshot, as_of))
        assert first.export_id != second.export_id

    def test_no_kinds_is_empty(self, snapshot: Snapshot, as_of: date) -> None:
        record = ExportOrchestrator().execute(_make_request(snapshot, as_of, kinds=[]))
        assert record.status == ExportStatus.EMPTY
        assert record.artifacts == {}
        assert record.checksums == {}
