"""TaskPulse application settings loaded from environment variables."""

from enum import StrEnum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from taskpulse.models.common import WeekStart
from taskpulse.models.report import ReportConfig


class Environment(StrEnum):
    """Deployment environment."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class LogLevel(StrEnum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Application-wide settings loaded from environment variables / .env file.

    Reporting thresholds and display caps live here so dashboards and PDF
    exports agree on them. Pure analytics code never reads these directly;
    it receives a ReportConfig built by ``report_config()``.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Logging ---
    LOG_LEVEL: LogLevel = Field(
        default=LogLevel.INFO,
        description="Application log level.",
    )

    # --- Environment ---
    ENVIRONMENT: Environment = Field(
        default=Environment.DEV,
        description="Deployment environment (dev/staging/prod).",
    )

    # --- Reporting calendar ---
    WEEK_START: WeekStart = Field(
        default=WeekStart.SUNDAY,
        description="First day of the reporting week for 'week' windows and trends.",
    )

    # --- Rankings / risk ---
    AT_RISK_COMPLETION_THRESHOLD: float = Field(
        default=0.30,
        ge=0.0,
        le=1.0,
        description="Projects below this completion rate are flagged at risk.",
    )
    AT_RISK_DISPLAY_LIMIT: int = Field(default=3, ge=0)
    TOP_PERFORMER_LIMIT: int = Field(default=10, ge=0)
    TOP_PERFORMER_MIN_TASKS: int = Field(
        default=1,
        ge=0,
        description="Employees with fewer assigned tasks are left out of top performers.",
    )
    MOST_OVERDUE_LIMIT: int = Field(default=10, ge=0)
    PROJECT_HEALTH_LIMIT: int = Field(default=18, ge=0)
    OVERDUE_TASK_LIMIT: int = Field(default=20, ge=0)
    RECENT_ONBOARDING_DAYS: int = Field(default=30, ge=0)

    # --- Business rules ---
    MAX_ACTIVE_TASKS_PER_ASSIGNEE: int = Field(
        default=3,
        ge=1,
        description="Assignees already holding this many todo/in-progress tasks cannot take more.",
    )

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.ENVIRONMENT == Environment.PROD

    def report_config(self) -> ReportConfig:
        """Project the reporting subset of settings onto a ReportConfig."""
        return ReportConfig(
            week_start=self.WEEK_START,
            at_risk_completion_threshold=self.AT_RISK_COMPLETION_THRESHOLD,
            at_risk_display_limit=self.AT_RISK_DISPLAY_LIMIT,
            top_performer_limit=self.TOP_PERFORMER_LIMIT,
            top_performer_min_tasks=self.TOP_PERFORMER_MIN_TASKS,
            most_overdue_limit=self.MOST_OVERDUE_LIMIT,
            project_health_limit=self.PROJECT_HEALTH_LIMIT,
            overdue_task_limit=self.OVERDUE_TASK_LIMIT,
            recent_onboarding_days=self.RECENT_ONBOARDING_DAYS,
        )


def get_settings() -> Settings:
    """Factory function for dependency injection via FastAPI Depends."""
    return Settings()
