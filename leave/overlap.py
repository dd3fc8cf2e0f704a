"""
Closed-interval overlap checks over an employee's leave records.

Records only need ``id``, ``start_date``, ``end_date`` and ``status``
attributes, so ORM rows and plain objects can both be checked.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional

from .daycount import as_day
from .models import ACTIVE_STATUSES


@dataclass(frozen=True)
class Interval:
    start: date
    end: date

    @classmethod
    def of(cls, record: Any) -> "Interval":
        return cls(as_day(record.start_date), as_day(record.end_date))


@dataclass(frozen=True)
class OverlapResult:
    conflict: bool
    conflicting: Optional[Any] = None


def overlaps(a: Interval, b: Interval) -> bool:
    # touching ends share a whole day, so they overlap too
    return a.start <= b.end and b.start <= a.end


def validate(
    candidate: Interval,
    existing: Iterable[Any],
    *,
    exclude_id: Optional[int] = None,
) -> OverlapResult:
    """Return the first APPROVED/PENDING record in ``existing`` that overlaps ``candidate``."""
    for record in existing:
        if exclude_id is not None and record.id == exclude_id:
            continue
        if record.status not in ACTIVE_STATUSES:
            continue
        if overlaps(candidate, Interval.of(record)):
            return OverlapResult(conflict=True, conflicting=record)
    return OverlapResult(conflict=False)
