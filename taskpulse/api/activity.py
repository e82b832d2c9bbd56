"""FastAPI activity-log endpoints.

POST /v1/activity/entries  - build a new audit-log entry for the caller to store
POST /v1/activity/search   - change-log search over supplied entries, newest first
"""

from fastapi import APIRouter
from pydantic import BaseModel, Field

from taskpulse.activity.log import ActivityType, new_entry, newest_first, search_activity
from taskpulse.models.common import RecordId
from taskpulse.models.records import ActivityLogEntry, Employee

router = APIRouter(prefix="/v1/activity", tags=["activity"])


class NewEntryRequest(BaseModel):
    activity_type: ActivityType
    details: str
    user_id: RecordId
    project_id: RecordId | None = None
    task_id: RecordId | None = None


class ActivitySearchRequest(BaseModel):
    entries: list[ActivityLogEntry] = Field(default_factory=list)
    employees: list[Employee] = Field(default_factory=list)
    search: str | None = None
    activity_type: str | None = None
    user_id: RecordId | None = None


@router.post("/entries", response_model=ActivityLogEntry, status_code=201)
async def create_entry(body: NewEntryRequest) -> ActivityLogEntry:
    return new_entry(
        body.activity_type,
        body.details,
        user_id=body.user_id,
        project_id=body.project_id,
        task_id=body.task_id,
    )


@router.post("/search", response_model=list[ActivityLogEntry])
async def search_entries(body: ActivitySearchRequest) -> list[ActivityLogEntry]:
    """Entries matching every given criterion, most recent first."""
    return newest_first(
        search_activity(
            body.entries,
            search=body.search,
            activity_type=body.activity_type,
            user_id=body.user_id,
            employees=body.employees,
        )
    )
