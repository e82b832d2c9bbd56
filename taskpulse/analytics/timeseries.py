"""Time-series binner.

Buckets records per calendar day (or week) for trend charts. Every day in
the interval gets a bucket, zero counts included, in chronological order.
The binner puts no upper bound on the interval length.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable, Iterable
from datetime import date, timedelta
from typing import Any, TypeVar

from taskpulse.analytics.filters import record_day
from taskpulse.models.report import DateField, TimeBucket, TrendPoint

R = TypeVar("R")


def days_between(start: date, end: date) -> list[date]:
    """Every calendar day in ``[start, end]``; empty when ``start > end``."""
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def _day_counts(
    records: Iterable[R],
    date_field: DateField | str,
    predicate: Callable[[R], bool] | None,
) -> Counter[date]:
    counts: Counter[date] = Counter()
    for record in records:
        if predicate is not None and not predicate(record):
            continue
        day = record_day(record, date_field)
        if day is not None:
            counts[day] += 1
    return counts


def bin_by_day(
    records: Iterable[R],
    start: date,
    end: date,
    date_field: DateField | str,
    predicate: Callable[[R], bool] | None = None,
) -> list[TimeBucket]:
    """One bucket per day in ``[start, end]``, labeled with the weekday abbreviation.

    A record counts toward the day its ``date_field`` falls on (timestamps
    are truncated to the date). Records without that date, or rejected by
    ``predicate``, are not counted.
    """
    counts = _day_counts(records, date_field, predicate)
    return [
        TimeBucket(label=day.strftime("%a"), day=day, count=counts.get(day, 0))
        for day in days_between(start, end)
    ]


def bin_by_week(
    records: Iterable[R],
    start: date,
    end: date,
    date_field: DateField | str,
    predicate: Callable[[R], bool] | None = None,
) -> list[TimeBucket]:
    """Seven-day buckets starting at ``start``; the last one may be shorter."""
    if start > end:
        return []
    counts = _day_counts(records, date_field, predicate)
    buckets: list[TimeBucket] = []
    week_start = start
    while week_start <= end:
        week_end = min(week_start + timedelta(days=6), end)
        total = sum(counts.get(day, 0) for day in days_between(week_start, week_end))
        buckets.append(
            TimeBucket(label=f"Week of {week_start.strftime('%b %d')}", day=week_start, count=total)
        )
        week_start = week_end + timedelta(days=1)
    return buckets


def completion_trend(
    tasks: Iterable[Any],
    start: date,
    end: date,
    is_completed: Callable[[Any], bool],
) -> list[TrendPoint]:
    """Tasks created (by ``created_at``) and completed (by ``updated_at``) per day."""
    items = list(tasks)
    created = bin_by_day(items, start, end, DateField.CREATED_AT)
    completed = bin_by_day(items, start, end, DateField.UPDATED_AT, predicate=is_completed)
    return [
        TrendPoint(label=c.label, day=c.day, created=c.count, completed=d.count)
        for c, d in zip(created, completed)
    ]
