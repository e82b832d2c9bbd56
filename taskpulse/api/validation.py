"""FastAPI validation endpoints.

POST /v1/validation/task-dates         - task dates vs. each other and the project
POST /v1/validation/assignee-capacity  - active-task limit for selected assignees

Rule failures are returned as ``{"valid": false, "reason": ...}`` with
status 200; only malformed request bodies produce a 422.
"""

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from taskpulse.config.settings import Settings, get_settings
from taskpulse.models.common import OptionalDate, RecordId
from taskpulse.models.records import Employee, Task
from taskpulse.validation.rules import (
    ValidationResult,
    validate_assignees,
    validate_task_dates,
)

router = APIRouter(prefix="/v1/validation", tags=["validation"])


class TaskDatesRequest(BaseModel):
    task_start: OptionalDate = None
    task_due: OptionalDate = None
    project_start: OptionalDate = None
    project_due: OptionalDate = None


class AssigneeCapacityRequest(BaseModel):
    user_ids: list[RecordId]
    tasks: list[Task] = Field(default_factory=list)
    employees: list[Employee] = Field(default_factory=list)
    max_active: int | None = Field(default=None, ge=1)


@router.post("/task-dates", response_model=ValidationResult)
async def check_task_dates(body: TaskDatesRequest) -> ValidationResult:
    return validate_task_dates(body.task_start, body.task_due, body.project_start, body.project_due)


@router.post("/assignee-capacity", response_model=ValidationResult)
async def check_assignee_capacity(
    body: AssigneeCapacityRequest,
    settings: Settings = Depends(get_settings),
) -> ValidationResult:
    """Reject the first assignee already at the active-task limit.

    The limit defaults to ``MAX_ACTIVE_TASKS_PER_ASSIGNEE``.
    """
    return validate_assignees(
        body.user_ids,
        body.tasks,
        max_active=body.max_active or settings.MAX_ACTIVE_TASKS_PER_ASSIGNEE,
        employees=body.employees,
    )
