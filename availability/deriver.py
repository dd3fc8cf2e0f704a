"""
Pure derivation of an employee's availability snapshot.

``derive_availability`` takes the reference day explicitly and never reads
the clock, so the same ``(today, records)`` always yields the same
snapshot. The orchestrator calls it after every write instead of patching
the cached fields by hand.
"""
from __future__ import annotations
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, Optional

from employee.models import AvailabilityStatus
from leave.daycount import as_day
from leave.models import LeaveStatus, LeaveType

RETURNING_SOON_DAYS = 3


@dataclass(frozen=True)
class CurrentLeave:
    start_date: date
    end_date: date
    type: LeaveType


@dataclass(frozen=True)
class AvailabilitySnapshot:
    status: AvailabilityStatus
    current_leave: Optional[CurrentLeave] = None


AVAILABLE = AvailabilitySnapshot(status=AvailabilityStatus.available)


def covering_leave(today: date, records: Iterable[Any]) -> Optional[Any]:
    """The APPROVED record whose inclusive window contains ``today``, if any."""
    covering = [
        r for r in records
        if r.status == LeaveStatus.APPROVED
        and as_day(r.start_date) <= today <= as_day(r.end_date)
    ]
    if not covering:
        return None
    # more than one only happens if a race got past the overlap check
    covering.sort(key=lambda r: (as_day(r.start_date), r.id if r.id is not None else 0))
    return covering[0]


def derive_availability(today: date, records: Iterable[Any]) -> AvailabilitySnapshot:
    today = as_day(today)
    record = covering_leave(today, records)
    if record is None:
        return AVAILABLE

    end = as_day(record.end_date)
    days_remaining = (end - today).days
    status = (
        AvailabilityStatus.returning_soon
        if days_remaining <= RETURNING_SOON_DAYS
        else AvailabilityStatus.on_leave
    )
    return AvailabilitySnapshot(
        status=status,
        current_leave=CurrentLeave(
            start_date=as_day(record.start_date),
            end_date=end,
            type=LeaveType(record.type),
        ),
    )


def snapshot_of(employee: Any) -> AvailabilitySnapshot:
    """Read the snapshot currently cached on an employee row."""
    if employee.current_status in (None, AvailabilityStatus.available):
        return AVAILABLE
    if employee.current_leave_start is None:
        return AvailabilitySnapshot(status=AvailabilityStatus(employee.current_status))
    return AvailabilitySnapshot(
        status=AvailabilityStatus(employee.current_status),
        current_leave=CurrentLeave(
            start_date=employee.current_leave_start,
            end_date=employee.current_leave_end,
            type=LeaveType(employee.current_leave_type),
        ),
    )
