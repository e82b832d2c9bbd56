"""Tests for activity log helpers: message formatters, entry creation, search."""

from datetime import datetime, timezone

from taskpulse.activity.log import (
    ActivityType,
    file_uploaded,
    new_entry,
    newest_first,
    project_created,
    project_updated,
    readable_type,
    search_activity,
    task_assigned,
    task_status_change,
    user_role_change,
)
from taskpulse.models.records import ActivityLogEntry, Employee

EMPLOYEES = [
    Employee(id="E1", first_name="Ada", last_name="Lovelace", email="ada@example.com"),
    Employee(id="E2", first_name="Grace", last_name="Hopper", email="grace@example.com"),
]


def _entry(entry_id: str, user_id: str, activity_type: str, details: str, day: int | None) -> ActivityLogEntry:
    created = None if day is None else datetime(2024, 6, day, 12, tzinfo=timezone.utc)
    return ActivityLogEntry(
        id=entry_id,
        user_id=user_id,
        activity_type=activity_type,
        activity_details=details,
        created_at=created,
    )


def _entries() -> list[ActivityLogEntry]:
    return [
        _entry("a1", "E1", "task_created", "Ada created task: Build landing page", 10),
        _entry("a2", "E2", "task_updated", "Grace updated task: Release build", 12),
        _entry("a3", "E1", "project_updated", "Ada updated project: Data Pipeline", 11),
    ]


class TestFormatters:
    def test_role_change(self) -> None:
        assert (
            user_role_change("admin@example.com", "ada@example.com", "employee", "manager")
            == "User role changed by admin@example.com: ada@example.com from employee to manager"
        )

    def test_project_messages(self) -> None:
        assert project_created("Ada", "Website") == "Ada created project: Website"
        assert project_updated("Ada", "Website") == "Ada updated project: Website"

    def test_task_messages(self) -> None:
        assert task_assigned("Ada", "Mockups", "Grace") == 'Ada assigned task "Mockups" to Grace'
        assert (
            task_status_change("Ada", "Mockups", "todo", "completed")
            == 'Ada changed task "Mockups" status from todo to completed'
        )

    def test_file_uploaded(self) -> None:
        assert file_uploaded("Ada", "spec.pdf", "Website") == 'Ada uploaded file "spec.pdf" to project Website'

    def test_readable_type(self) -> None:
        assert readable_type(ActivityType.TASK_ASSIGNED) == "task assigned"


class TestNewEntry:
    def test_entry_fields(self) -> None:
        entry = new_entry(
            ActivityType.PROJECT_CREATED,
            project_created("Ada", "Website"),
            user_id="E1",
            project_id="P1",
        )
        assert entry.activity_type == "project_created"
        assert entry.user_id == "E1"
        assert entry.project_id == "P1"
        assert entry.task_id is None
        assert entry.created_at is not None
        assert entry.id

    def test_ids_are_unique(self) -> None:
        first = new_entry(ActivityType.TASK_CREATED, "x", user_id="E1")
        second = new_entry(ActivityType.TASK_CREATED, "x", user_id="E1")
        assert first.id != second.id


class TestSearch:
    def test_no_criteria_returns_everything(self) -> None:
        assert search_activity(_entries()) == _entries()

    def test_search_details_case_insensitive(self) -> None:
        result = search_activity(_entries(), search="RELEASE")
        assert [e.id for e in result] == ["a2"]

    def test_search_matches_author_name_and_email(self) -> None:
        assert [e.id for e in search_activity(_entries(), search="hopper", employees=EMPLOYEES)] == ["a2"]
        assert [e.id for e in search_activity(_entries(), search="ada@", employees=EMPLOYEES)] == ["a1", "a3"]

    def test_author_fields_need_employees(self) -> None:
        assert search_activity(_entries(), search="ada@") == []

    def test_filter_by_type(self) -> None:
        assert [e.id for e in search_activity(_entries(), activity_type="task_created")] == ["a1"]

    def test_all_disables_filters(self) -> None:
        assert len(search_activity(_entries(), activity_type="all", user_id="all")) == 3

    def test_filter_by_user(self) -> None:
        assert [e.id for e in search_activity(_entries(), user_id="E1")] == ["a1", "a3"]

    def test_criteria_combine(self) -> None:
        result = search_activity(_entries(), search="updated", user_id="E1")
        assert [e.id for e in result] == ["a3"]


class TestNewestFirst:
    def test_sorted_descending_with_undated_last(self) -> None:
        entries = _entries() + [_entry("a4", "E2", "comment_added", "no date", None)]
        assert [e.id for e in newest_first(entries)] == ["a2", "a3", "a1", "a4"]

    def test_accepts_a_generator(self) -> None:
        assert [e.id for e in newest_first(e for e in _entries())] == ["a2", "a3", "a1"]
