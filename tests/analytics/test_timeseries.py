"""Tests for the time-series binner."""

from datetime import date

from taskpulse.analytics.ranking import is_completed
from taskpulse.analytics.timeseries import bin_by_day, bin_by_week, completion_trend, days_between
from taskpulse.models.records import Task
from taskpulse.models.report import DateField

MONDAY = date(2024, 6, 10)
SUNDAY = date(2024, 6, 16)


class TestDaysBetween:
    def test_inclusive(self) -> None:
        assert days_between(MONDAY, SUNDAY)[0] == MONDAY
        assert days_between(MONDAY, SUNDAY)[-1] == SUNDAY
        assert len(days_between(MONDAY, SUNDAY)) == 7

    def test_inverted_interval_is_empty(self) -> None:
        assert days_between(SUNDAY, MONDAY) == []


class TestBinByDay:
    def test_empty_week_gives_seven_zero_buckets(self) -> None:
        buckets = bin_by_day([], MONDAY, SUNDAY, DateField.CREATED_AT)
        assert [b.label for b in buckets] == ["Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"]
        assert all(b.count == 0 for b in buckets)

    def test_counts_by_calendar_day(self) -> None:
        tasks = [
            Task(id=1, created_at="2024-06-10T00:30:00Z"),
            Task(id=2, created_at="2024-06-10T23:30:00Z"),
            Task(id=3, created_at="2024-06-12T12:00:00Z"),
            Task(id=4, created_at="2024-06-20T12:00:00Z"),
            Task(id=5),
        ]
        buckets = bin_by_day(tasks, MONDAY, SUNDAY, DateField.CREATED_AT)
        assert [b.count for b in buckets] == [2, 0, 1, 0, 0, 0, 0]

    def test_predicate(self) -> None:
        tasks = [
            Task(id=1, status="completed", updated_at="2024-06-11T09:00:00Z"),
            Task(id=2, status="todo", updated_at="2024-06-11T09:00:00Z"),
        ]
        buckets = bin_by_day(tasks, MONDAY, SUNDAY, DateField.UPDATED_AT, predicate=is_completed)
        assert buckets[1].count == 1

    def test_buckets_are_chronological(self) -> None:
        buckets = bin_by_day([], date(2024, 2, 27), date(2024, 3, 2), DateField.DUE_DATE)
        assert [b.day for b in buckets] == [
            date(2024, 2, 27), date(2024, 2, 28), date(2024, 2, 29), date(2024, 3, 1), date(2024, 3, 2),
        ]

    def test_long_interval(self) -> None:
        assert len(bin_by_day([], date(2023, 1, 1), date(2024, 12, 31), DateField.CREATED_AT)) == 731


class TestBinByWeek:
    def test_weeks_with_short_tail(self) -> None:
        tasks = [Task(id=1, due_date="2024-06-03"), Task(id=2, due_date="2024-06-12")]
        buckets = bin_by_week(tasks, date(2024, 6, 1), date(2024, 6, 16), DateField.DUE_DATE)
        assert [b.label for b in buckets] == ["Week of Jun 01", "Week of Jun 08", "Week of Jun 15"]
        assert [b.count for b in buckets] == [1, 1, 0]

    def test_inverted_interval(self) -> None:
        assert bin_by_week([], SUNDAY, MONDAY, DateField.DUE_DATE) == []


class TestCompletionTrend:
    def test_created_and_completed_per_day(self) -> None:
        tasks = [
            Task(id=1, status="completed", created_at="2024-06-10T09:00:00Z", updated_at="2024-06-12T09:00:00Z"),
            Task(id=2, status="todo", created_at="2024-06-10T10:00:00Z", updated_at="2024-06-12T10:00:00Z"),
        ]
        trend = completion_trend(tasks, MONDAY, SUNDAY, is_completed)
        assert [(p.label, p.created, p.completed) for p in trend[:3]] == [
            ("Mon", 2, 0),
            ("Tue", 0, 0),
            ("Wed", 0, 1),
        ]
        assert len(trend) == 7

    def test_accepts_a_generator(self) -> None:
        tasks = (Task(id=i, created_at="2024-06-11T09:00:00Z") for i in range(3))
        trend = completion_trend(tasks, MONDAY, SUNDAY, is_completed)
        assert trend[1].created == 3
