"""Export orchestrator.

Coordinate report exports:
1. Build the DerivedReport once for the requested filters
2. Render every requested PDF layout from that same report
3. Compute checksums (SHA-256)
4. Return an ExportRecord with the artifacts and their file names

Each layout reads the shared report, so all artifacts of one export agree.
"""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum
from uuid import UUID

from taskpulse.analytics.builder import ReportBuilder
from taskpulse.export.pdf_export import REPORT_TITLES, PdfReportExporter, ReportKind
from taskpulse.models.common import new_uuid7, utc_now
from taskpulse.models.records import Snapshot
from taskpulse.models.report import DerivedReport, FilterSpec

logger = logging.getLogger(__name__)


class ExportStatus(StrEnum):
    """Export lifecycle status."""

    COMPLETED = "COMPLETED"
    EMPTY = "EMPTY"


@dataclass
class ExportRequest:
    """Request to render one or more PDF layouts."""

    snapshot: Snapshot
    as_of: date
    kinds: list[ReportKind] = field(default_factory=lambda: [ReportKind.TASK_ANALYTICS])
    filters: FilterSpec = field(default_factory=FilterSpec)


@dataclass
class ExportRecord:
    """Record of a completed export."""

    export_id: UUID
    status: ExportStatus
    report: DerivedReport
    generated_at: datetime
    artifacts: dict[str, bytes] = field(default_factory=dict)
    filenames: dict[str, str] = field(default_factory=dict)
    checksums: dict[str, str] = field(default_factory=dict)


def export_filename(kind: ReportKind | str, generated_at: datetime) -> str:
    """``Task-Analytics-Report-2024-06-15.pdf``."""
    title = REPORT_TITLES[ReportKind(kind)].replace(" ", "-")
    return f"{title}-{generated_at.date().isoformat()}.pdf"


def checksum(data: bytes) -> str:
    return f"sha256:{hashlib.sha256(data).hexdigest()}"


class ExportOrchestrator:
    """Coordinate the report export pipeline."""

    def __init__(
        self,
        builder: ReportBuilder | None = None,
        exporter: PdfReportExporter | None = None,
    ) -> None:
        self._builder = builder or ReportBuilder()
        self._pdf = exporter or PdfReportExporter()

    def execute(self, request: ExportRequest, *, generated_at: datetime | None = None) -> ExportRecord:
        """Build the report once and render each requested layout from it."""
        export_id = new_uuid7()
        now = generated_at or utc_now()
        report = self._builder.build(request.snapshot, request.filters, as_of=request.as_of)

        artifacts: dict[str, bytes] = {}
        filenames: dict[str, str] = {}
        for kind in dict.fromkeys(ReportKind(k) for k in request.kinds):
            artifacts[kind.value] = self._pdf.export(report, kind, generated_at=now)
            filenames[kind.value] = export_filename(kind, now)

        checksums = {name: checksum(data) for name, data in artifacts.items()}
        status = ExportStatus.COMPLETED if artifacts else ExportStatus.EMPTY

        logger.info("Export %s %s: %s", export_id, status.value, ", ".join(artifacts) or "no layouts")
        return ExportRecord(
            export_id=export_id,
            status=status,
            report=report,
            generated_at=now,
            artifacts=artifacts,
            filenames=filenames,
            checksums=checksums,
        )
