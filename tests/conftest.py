"""Shared pytest fixtures for the TaskPulse test suite.

Provides:
- anyio_backend: run async tests on asyncio only
- as_of: the fixed "today" every report in the suite is computed for
- snapshot_data / snapshot: a small organisation with mixed status casing,
  an overdue task, a cancelled task, an on-hold project and one
  standalone assignment row
- client: AsyncClient bound to the FastAPI app
"""

from datetime import date

import pytest
from httpx import ASGITransport, AsyncClient

from taskpulse.models.records import Snapshot

AS_OF = date(2024, 6, 15)  # a Saturday


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def as_of() -> date:
    return AS_OF


@pytest.fixture
def snapshot_data() -> dict:
    return {
        "teams": [
            {"id": "T1", "name": "Platform"},
            {"id": "T2", "name": "Growth"},
        ],
        "projects": [
            {
                "id": "P1", "name": "Website Redesign", "team_id": "T1", "manager_id": "E1",
                "status": "in_progress", "start_date": "2024-05-01", "due_date": "2024-06-10",
                "created_at": "2024-05-01T09:00:00Z",
            },
            {
                "id": "P2", "name": "Mobile App", "team_id": "T2", "manager_id": "E2",
                "status": "Completed", "start_date": "2024-04-01", "due_date": "2024-06-01",
                "created_at": "2024-04-01T09:00:00Z",
            },
            {
                "id": "P3", "name": "Data Pipeline", "team_id": "T1", "manager_id": "E3",
                "status": "on_hold", "start_date": "2024-06-01", "due_date": "2024-07-31",
                "created_at": "2024-06-10T09:00:00Z",
            },
        ],
        "employees": [
            {
                "id": "E1", "first_name": "Ada", "last_name": "Lovelace", "email": "ada@example.com",
                "role": "admin", "status": "Active", "created_at": "2024-06-01T08:00:00Z",
            },
            {
                "id": "E2", "first_name": "Grace", "last_name": "Hopper", "email": "grace@example.com",
                "role": "employee", "status": "Active", "created_at": "2024-01-10T08:00:00Z",
            },
            {
                "id": "E3", "first_name": "Alan", "last_name": "Turing", "email": "alan@example.com",
                "role": "manager", "status": "Inactive", "created_at": "2024-06-12T08:00:00Z",
            },
        ],
        "tasks": [
            {
                "id": "t1", "title": "Design mockups", "project_id": "P1", "status": "completed",
                "priority": 2, "due_date": "2024-06-05", "created_at": "2024-06-03T10:00:00Z",
                "updated_at": "2024-06-11T16:00:00Z", "assignments": [{"user_id": "E1"}],
            },
            {
                "id": "t2", "title": "Build landing page", "project_id": "P1", "status": "in_progress",
                "priority": 1, "due_date": "2024-06-12", "created_at": "2024-06-10T10:00:00Z",
                "updated_at": "2024-06-13T10:00:00Z",
                "assignments": [{"user_id": "E1"}, {"user_id": "E2"}],
            },
            {
                "id": "t3", "title": "Release build", "project_id": "P2", "status": "Completed",
                "priority": "3", "due_date": "2024-05-30", "created_at": "2024-05-15T10:00:00Z",
                "updated_at": "2024-05-30T18:00:00Z", "assignments": [{"user_id": "E2"}],
            },
            {
                "id": "t4", "title": "Schema design", "project_id": "P3", "status": "todo",
                "priority": 4, "due_date": "2024-06-20", "created_at": "2024-06-12T10:00:00Z",
            },
            {
                "id": "t5", "title": "Backfill", "project_id": "P3", "status": "Canceled",
                "due_date": "2024-06-01", "created_at": "2024-06-11T10:00:00Z",
            },
        ],
        "assignments": [
            {"task_id": "t4", "user_id": "E2"},
        ],
        "activity_logs": [
            {
                "id": "a1", "user_id": "E1", "activity_type": "task_created", "project_id": "P1",
                "activity_details": "Ada created task: Build landing page",
                "created_at": "2024-06-10T10:00:00Z",
            },
            {
                "id": "a2", "user_id": "E2", "activity_type": "task_updated", "project_id": "P2",
                "activity_details": "Grace updated task: Release build",
                "created_at": "2024-06-11T12:00:00Z",
            },
            {
                "id": "a3", "user_id": "E1", "activity_type": "project_updated", "project_id": "P3",
                "activity_details": "Ada updated project: Data Pipeline",
                "created_at": "2024-06-14T09:30:00Z",
            },
        ],
    }


@pytest.fixture
def snapshot(snapshot_data: dict) -> Snapshot:
    return Snapshot.model_validate(snapshot_data)


@pytest.fixture
async def client():
    """AsyncClient bound to the FastAPI app; dependency overrides are cleared afterwards."""
    from taskpulse.api.main import app

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://testserver",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()
