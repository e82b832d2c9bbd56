"""Tests for FastAPI report endpoints.

Covers: POST /v1/reports (DerivedReport JSON) and POST /v1/reports/pdf
(PDF bytes plus export metadata headers).
"""

import io

import pdfplumber
import pytest
from httpx import AsyncClient

from taskpulse.analytics.builder import ReportBuilder
from taskpulse.api.dependencies import get_report_builder
from taskpulse.export.orchestrator import checksum
from taskpulse.models.report import ReportConfig


def _payload(snapshot_data: dict, **overrides: object) -> dict:
    payload: dict[str, object] = {"snapshot": snapshot_data, "as_of": "2024-06-15"}
    payload.update(overrides)
    return payload


class TestBuildReport:
    @pytest.mark.anyio
    async def test_returns_derived_report(self, client: AsyncClient, snapshot_data: dict) -> None:
        response = await client.post("/v1/reports", json=_payload(snapshot_data))
        assert response.status_code == 200
        data = response.json()
        assert data["context"]["as_of"] == "2024-06-15"
        assert data["totals"]["tasks_total"] == 5
        assert data["totals"]["tasks_overdue"] == 1
        assert [a["name"] for a in data["at_risk_projects"]] == ["Website Redesign", "Data Pipeline"]

    @pytest.mark.anyio
    async def test_filters_are_applied(self, client: AsyncClient, snapshot_data: dict) -> None:
        payload = _payload(snapshot_data, filters={"time_frame": "week", "team_id": "T1"})
        data = (await client.post("/v1/reports", json=payload)).json()
        assert data["totals"]["tasks_total"] == 3
        assert data["context"]["window"] == {"start": "2024-06-09", "end": "2024-06-15"}
        assert data["context"]["team_label"] == "Platform"

    @pytest.mark.anyio
    async def test_empty_body_uses_empty_snapshot(self, client: AsyncClient) -> None:
        response = await client.post("/v1/reports", json={})
        assert response.status_code == 200
        assert response.json()["totals"]["tasks_total"] == 0

    @pytest.mark.anyio
    async def test_invalid_time_frame_is_422(self, client: AsyncClient, snapshot_data: dict) -> None:
        payload = _payload(snapshot_data, filters={"time_frame": "fortnight"})
        response = await client.post("/v1/reports", json=payload)
        assert response.status_code == 422

    @pytest.mark.anyio
    async def test_builder_dependency_override(self, client: AsyncClient, snapshot_data: dict) -> None:
        from taskpulse.api.main import app

        app.dependency_overrides[get_report_builder] = lambda: ReportBuilder(
            ReportConfig(at_risk_display_limit=1)
        )
        data = (await client.post("/v1/reports", json=_payload(snapshot_data))).json()
        assert [a["name"] for a in data["at_risk_projects"]] == ["Website Redesign"]


class TestExportReportPdf:
    @pytest.mark.anyio
    async def test_returns_pdf(self, client: AsyncClient, snapshot_data: dict) -> None:
        response = await client.post("/v1/reports/pdf?kind=weekly", json=_payload(snapshot_data))
        assert response.status_code == 200
        assert response.headers["content-type"] == "application/pdf"
        assert response.content.startswith(b"%PDF")
        assert 'filename="Weekly-Report-' in response.headers["content-disposition"]

    @pytest.mark.anyio
    async def test_metadata_headers(self, client: AsyncClient, snapshot_data: dict) -> None:
        response = await client.post("/v1/reports/pdf", json=_payload(snapshot_data))
        assert response.headers["x-checksum"] == checksum(response.content)
        assert response.headers["x-export-id"]

    @pytest.mark.anyio
    async def test_pdf_matches_json_report(self, client: AsyncClient, snapshot_data: dict) -> None:
        payload = _payload(snapshot_data)
        report = (await client.post("/v1/reports", json=payload)).json()
        pdf = await client.post("/v1/reports/pdf?kind=task_analytics", json=payload)
        with pdfplumber.open(io.BytesIO(pdf.content)) as doc:
            text = "\n".join(page.extract_text() or "" for page in doc.pages)
        assert "Task Analytics Report" in text
        for row in report["overdue_tasks"]:
            assert row["title"] in text

    @pytest.mark.anyio
    async def test_unknown_kind_is_422(self, client: AsyncClient, snapshot_data: dict) -> None:
        response = await client.post("/v1/reports/pdf?kind=quarterly", json=_payload(snapshot_data))
        assert response.status_code == 422
