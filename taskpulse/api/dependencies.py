"""FastAPI dependency factories for the reporting services.

Services are rebuilt from settings per request; they hold no state beyond
their configuration. Tests swap them via ``app.dependency_overrides``.
"""

from fastapi import Depends

from taskpulse.analytics.builder import ReportBuilder
from taskpulse.config.settings import Settings, get_settings
from taskpulse.export.orchestrator import ExportOrchestrator


def get_report_builder(settings: Settings = Depends(get_settings)) -> ReportBuilder:
    return ReportBuilder(settings.report_config())


def get_export_orchestrator(
    builder: ReportBuilder = Depends(get_report_builder),
) -> ExportOrchestrator:
    return ExportOrchestrator(builder=builder)
