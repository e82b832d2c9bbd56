"""FastAPI report endpoints.

POST /v1/reports            - DerivedReport JSON for a snapshot + filters
POST /v1/reports/pdf?kind=  - PDF export of the same report

Both endpoints run the same builder, so the dashboard JSON and the PDF show
identical numbers. ``as_of`` defaults to today (UTC).
"""

from datetime import date

from fastapi import APIRouter, Depends, Query, Response
from pydantic import BaseModel, Field

from taskpulse.analytics.builder import ReportBuilder
from taskpulse.api.dependencies import get_export_orchestrator, get_report_builder
from taskpulse.export.orchestrator import ExportOrchestrator, ExportRequest
from taskpulse.export.pdf_export import ReportKind
from taskpulse.models.common import utc_now
from taskpulse.models.records import Snapshot
from taskpulse.models.report import DerivedReport, FilterSpec

router = APIRouter(prefix="/v1/reports", tags=["reports"])


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------


class ReportRequest(BaseModel):
    snapshot: Snapshot = Field(default_factory=Snapshot)
    filters: FilterSpec = Field(default_factory=FilterSpec)
    as_of: date | None = None

    def resolved_as_of(self) -> date:
        return self.as_of or utc_now().date()


# ---------------------------------------------------------------------------
# Endpoints
# ---------------------------------------------------------------------------


@router.post("", response_model=DerivedReport)
async def build_report(
    body: ReportRequest,
    builder: ReportBuilder = Depends(get_report_builder),
) -> DerivedReport:
    """Compute the DerivedReport for the posted snapshot."""
    return builder.build(body.snapshot, body.filters, as_of=body.resolved_as_of())


@router.post("/pdf", response_class=Response)
async def export_report_pdf(
    body: ReportRequest,
    kind: ReportKind = Query(default=ReportKind.TASK_ANALYTICS),
    orchestrator: ExportOrchestrator = Depends(get_export_orchestrator),
) -> Response:
    """Render the report as a PDF attachment.

    Export metadata travels in headers: ``X-Export-Id`` and
    ``X-Checksum`` (``sha256:<hex>``).
    """
    record = orchestrator.execute(
        ExportRequest(
            snapshot=body.snapshot,
            as_of=body.resolved_as_of(),
            kinds=[kind],
            filters=body.filters,
        )
    )
    return Response(
        content=record.artifacts[kind.value],
        media_type="application/pdf",
        headers={
            "Content-Disposition": f'attachment; filename="{record.filenames[kind.value]}"',
            "X-Export-Id": str(record.export_id),
            "X-Checksum": record.checksums[kind.value],
        },
    )
