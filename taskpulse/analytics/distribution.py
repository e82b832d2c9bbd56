"""Distribution aggregator.

Counts records per category for pie and bar charts. Every record lands in
exactly one bucket (unknown values get their own), so the values of a
distribution always sum to the number of records counted.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from typing import Any, TypeVar

from taskpulse.models.report import DistributionItem, DistributionShare

R = TypeVar("R")

# Bucket name for records whose key function returns None.
UNSPECIFIED = "unspecified"


def pct(value: float, total: float) -> float:
    """Fraction ``value / total``; 0.0 when there is nothing to divide by."""
    if total <= 0:
        return 0.0
    return value / total


def distribution(
    records: Iterable[R],
    key_fn: Callable[[R], Any],
    categories: Iterable[Any] | None = None,
) -> list[DistributionItem]:
    """Group records by ``key_fn`` and count each group.

    Buckets appear in first-encountered order. When ``categories`` is
    given, those keys are seeded at zero first so they always appear, in
    the given order, even if no record falls into them.
    """
    counts: dict[str, int] = {}
    for category in categories or ():
        counts.setdefault(str(category), 0)

    for record in records:
        key = key_fn(record)
        name = UNSPECIFIED if key is None else str(key)
        counts[name] = counts.get(name, 0) + 1

    return [DistributionItem(name=name, value=value) for name, value in counts.items()]


def total(items: Iterable[DistributionItem]) -> int:
    return sum(item.value for item in items)


def relabel(items: Iterable[DistributionItem], labels: Mapping[str, str]) -> list[DistributionItem]:
    """Swap canonical keys for display labels; unknown keys keep their name."""
    return [
        DistributionItem(name=labels.get(item.name, item.name), value=item.value)
        for item in items
    ]


def non_zero(items: Iterable[DistributionItem]) -> list[DistributionItem]:
    return [item for item in items if item.value > 0]


def with_share(items: Iterable[DistributionItem]) -> list[DistributionShare]:
    """Attach each bucket's fraction of the distribution total."""
    materialized = list(items)
    grand_total = total(materialized)
    return [
        DistributionShare(name=item.name, value=item.value, share=pct(item.value, grand_total))
        for item in materialized
    ]
