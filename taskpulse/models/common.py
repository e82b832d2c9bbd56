"""Shared types, enums, and base models used across TaskPulse domain models."""

from datetime import date, datetime, timezone
from enum import IntEnum, StrEnum
from typing import Annotated, Any
from uuid import UUID

from pydantic import BaseModel, BeforeValidator, ConfigDict
from uuid_extensions import uuid7


def utc_now() -> datetime:
    """Return the current UTC timestamp (timezone-aware)."""
    return datetime.now(tz=timezone.utc)


def new_uuid7() -> UUID:
    """Generate a new time-sortable UUID v7."""
    return uuid7()


def _lenient_date(value: Any) -> Any:
    """Treat blank or unparseable date strings as absent instead of failing."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            return date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def _lenient_datetime(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            parsed = datetime.fromisoformat(text.replace("Z", "+00:00"))
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


# --- Reusable annotated types ---

# Identifier as issued by the data store (integer keys or UUID strings).
RecordId = int | str
OptionalDate = Annotated[date | None, BeforeValidator(_lenient_date)]
OptionalTimestamp = Annotated[datetime | None, BeforeValidator(_lenient_datetime)]


def same_id(left: Any, right: Any) -> bool:
    """Compare identifiers by string form so ``"5"`` matches ``5``."""
    if left is None or right is None:
        return False
    return str(left) == str(right)


def as_date(value: date | datetime | None) -> date | None:
    """Truncate a timestamp to its calendar date."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    return value


# --- Shared enums ---


class WeekStart(StrEnum):
    """First day of a reporting week."""

    MONDAY = "monday"
    SUNDAY = "sunday"


class ProjectStatus(StrEnum):
    """Canonical project lifecycle states."""

    PLANNED = "planned"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class TaskStatus(StrEnum):
    """Canonical task lifecycle states."""

    TODO = "todo"
    IN_PROGRESS = "in_progress"
    ON_HOLD = "on_hold"
    CANCELLED = "cancelled"
    COMPLETED = "completed"


class EmployeeRole(StrEnum):
    """Dashboard roles."""

    ADMIN = "admin"
    EXECUTIVE = "executive"
    MANAGER = "manager"
    EMPLOYEE = "employee"


class EmployeeStatus(StrEnum):
    """Employee account status as stored on profiles."""

    ACTIVE = "Active"
    INACTIVE = "Inactive"


class Priority(IntEnum):
    """Task priority levels, 1 is the most urgent."""

    CRITICAL = 1
    HIGH = 2
    MEDIUM = 3
    LOW = 4


PRIORITY_LEVELS: tuple[int, ...] = tuple(int(p) for p in Priority)

# Statuses that end a record's lifecycle; closed records are never overdue.
CLOSED_STATUSES: frozenset[str] = frozenset({TaskStatus.COMPLETED, TaskStatus.CANCELLED})


# --- Base model ---


class TaskPulseBase(BaseModel):
    """Base model with common configuration for all TaskPulse Pydantic models."""

    model_config = ConfigDict(
        populate_by_name=True,
        protected_namespaces=(),
    )


class FrozenRecord(TaskPulseBase):
    """Immutable snapshot record. Unknown columns from the data store are ignored."""

    model_config = ConfigDict(
        populate_by_name=True,
        protected_namespaces=(),
        frozen=True,
        extra="ignore",
    )
