"""
Leave lifecycle: every write that changes an employee's leave ledger.

Each operation is one unit of work on the session:

1. take the employee write lock,
2. validate (interval, day counts, overlap) before touching anything,
3. write the leave record and flush it,
4. re-derive the employee's availability from what is now in storage,
5. commit both together.

Validation errors leave the session untouched. Storage errors roll the
whole unit back and surface as ``PersistenceFailure``, so a record is never
committed with a stale snapshot next to it.
"""
from __future__ import annotations
import logging
import threading
from contextlib import contextmanager
from datetime import date
from typing import Iterator, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from availability.service import refresh_employee_availability
from core.clock import today as clock_today
from core.errors import (
    InvalidInterval,
    InvalidStatusTransition,
    LeaveConflict,
    NotFound,
    PersistenceFailure,
)
from employee.models import Employee
from . import daycount, overlap
from . import service as store
from .models import ACTIVE_STATUSES, LeaveRecord, LeaveStatus, LeaveType
from .schema import LeaveRecordCreate, LeaveRecordUpdate

logger = logging.getLogger(__name__)

# status -> statuses it may move to through approve/reject
ALLOWED_TRANSITIONS = {
    LeaveStatus.PENDING: {LeaveStatus.APPROVED, LeaveStatus.REJECTED},
    LeaveStatus.APPROVED: {LeaveStatus.REJECTED},
    LeaveStatus.REJECTED: set(),
}


# -------- employee write lock --------

# fixed pool; employees sharing a stripe just queue behind each other
LOCK_STRIPES = 64
_employee_locks: List[threading.Lock] = [threading.Lock() for _ in range(LOCK_STRIPES)]


def _lock_for(employee_id: int) -> threading.Lock:
    return _employee_locks[employee_id % LOCK_STRIPES]


@contextmanager
def employee_write_lock(db: Session, employee_id: int) -> Iterator[Employee]:
    """
    Serialize writers on one employee's ledger.

    The in-process lock covers a single worker; ``SELECT ... FOR UPDATE`` on
    the employee row covers several workers sharing a database that supports
    row locks. Yields the locked employee.
    """
    with _lock_for(employee_id):
        employee = db.scalars(
            select(Employee).where(Employee.id == employee_id).with_for_update()
        ).first()
        if employee is None:
            db.rollback()
            raise NotFound(f"employee {employee_id} not found")
        try:
            yield employee
        finally:
            # release the row lock if the caller bailed out before committing
            if db.in_transaction():
                db.rollback()


# -------- helpers --------

def _validate_window(start: date, end: date) -> None:
    if start >= end:
        raise InvalidInterval(
            "end date must be after start date",
            start_date=start.isoformat(),
            end_date=end.isoformat(),
        )


def _check_day_counts(
    start: date,
    end: date,
    *,
    total_days: Optional[int],
    working_days: Optional[int],
) -> tuple[int, int]:
    total = daycount.total_days(start, end)
    working = daycount.working_days(start, end)
    if total_days is not None and total_days != total:
        raise InvalidInterval(
            f"total_days {total_days} does not match {total} calendar days in the period",
            field="total_days",
            expected=total,
        )
    if working_days is not None and working_days != working:
        raise InvalidInterval(
            f"working_days {working_days} does not match {working} working days in the period",
            field="working_days",
            expected=working,
        )
    return total, working


def _resolve_year(start: date, end: date, year: Optional[int]) -> int:
    if year is None:
        return daycount.year_of(start)
    if year not in (start.year, end.year):
        raise InvalidInterval(
            f"year {year} is outside the leave period",
            field="year",
        )
    return year


def _ensure_no_overlap(
    db: Session,
    employee_id: int,
    start: date,
    end: date,
    *,
    exclude_id: Optional[int] = None,
    message_prefix: str = "Leave dates",
) -> None:
    existing = store.get_active_records(db, employee_id, exclude_id=exclude_id)
    result = overlap.validate(overlap.Interval(start, end), existing, exclude_id=exclude_id)
    if not result.conflict:
        return

    hit = result.conflicting
    hit_status = LeaveStatus(hit.status)
    logger.warning(
        "leave conflict for employee %s: requested %s..%s overlaps record %s (%s..%s, %s)",
        employee_id, start, end, hit.id, hit.start_date, hit.end_date, hit_status.value,
    )
    raise LeaveConflict(
        f"{message_prefix} conflict with existing {hit_status.value.lower()} leave",
        conflicting_leave={
            "id": hit.id,
            "period": daycount.format_period(hit.start_date, hit.end_date),
            "type": LeaveType(hit.type).value,
            "status": hit_status.value,
        },
        requested_period=daycount.format_period(start, end),
    )


def _commit_unit(db: Session, employee: Employee, today: date, action: str) -> None:
    """Flush the record change, re-derive availability from storage and commit both."""
    employee_id = employee.id
    try:
        refresh_employee_availability(db, employee, today)
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("failed to %s leave record for employee %s", action, employee_id)
        raise PersistenceFailure(f"could not {action} leave record")


# -------- mutations --------

def create_leave_record(
    db: Session,
    dto: LeaveRecordCreate,
    *,
    today: Optional[date] = None,
) -> LeaveRecord:
    today = today or clock_today()

    with employee_write_lock(db, dto.employee_id) as employee:
        start, end = daycount.as_day(dto.start_date), daycount.as_day(dto.end_date)
        _validate_window(start, end)
        total, working = _check_day_counts(
            start, end, total_days=dto.total_days, working_days=dto.working_days
        )
        year = _resolve_year(start, end, dto.year)

        if dto.status in ACTIVE_STATUSES:
            _ensure_no_overlap(db, employee.id, start, end)

        row = LeaveRecord(
            employee_id=employee.id,
            start_date=start,
            end_date=end,
            total_days=total,
            working_days=working,
            type=dto.type,
            status=dto.status,
            year=year,
            notes=dto.notes,
            bonus=dto.bonus,
        )
        db.add(row)
        _commit_unit(db, employee, today, "create")

    db.refresh(row)
    logger.info(
        "leave record %s created for employee %s (%s..%s, %s, %s)",
        row.id, row.employee_id, row.start_date, row.end_date, row.type.value, row.status.value,
    )
    return row


def update_leave_record(
    db: Session,
    leave_id: int,
    patch: LeaveRecordUpdate,
    *,
    today: Optional[date] = None,
) -> LeaveRecord:
    today = today or clock_today()

    existing = store.get_leave_record(db, leave_id)
    if not existing:
        raise NotFound(f"leave record {leave_id} not found")

    with employee_write_lock(db, existing.employee_id) as employee:
        # re-read under the lock, another writer may have changed or removed it
        row = db.get(LeaveRecord, leave_id, populate_existing=True)
        if row is None:
            raise NotFound(f"leave record {leave_id} not found")

        data = patch.model_dump(exclude_unset=True)
        # these columns cannot be cleared, a null in the payload means "leave as is"
        for key in ("start_date", "end_date", "type", "status", "year"):
            if data.get(key, ...) is None:
                data.pop(key)

        start = daycount.as_day(data.get("start_date", row.start_date))
        end = daycount.as_day(data.get("end_date", row.end_date))
        dates_changed = start != daycount.as_day(row.start_date) or end != daycount.as_day(row.end_date)
        _validate_window(start, end)

        total, working = _check_day_counts(
            start, end,
            total_days=data.pop("total_days", None),
            working_days=data.pop("working_days", None),
        )

        if "year" in data:
            year = _resolve_year(start, end, data.pop("year"))
        elif dates_changed and row.year not in (start.year, end.year):
            year = _resolve_year(start, end, None)
        else:
            # an accounting year still inside the new period stays put
            year = row.year

        new_status = LeaveStatus(data.get("status", row.status))
        if new_status in ACTIVE_STATUSES:
            _ensure_no_overlap(
                db, employee.id, start, end,
                exclude_id=row.id,
                message_prefix="Updated leave dates",
            )

        data.pop("start_date", None)
        data.pop("end_date", None)
        for k, v in data.items():
            setattr(row, k, v)
        row.start_date = start
        row.end_date = end
        row.total_days = total
        row.working_days = working
        row.year = year

        # re-derive even when only the status changed
        _commit_unit(db, employee, today, "update")

    db.refresh(row)
    logger.info(
        "leave record %s updated (%s..%s, %s, %s)",
        row.id, row.start_date, row.end_date, row.type.value, row.status.value,
    )
    return row


def change_leave_status(
    db: Session,
    leave_id: int,
    new_status: LeaveStatus,
    *,
    today: Optional[date] = None,
) -> LeaveRecord:
    """
    Move a record along PENDING -> APPROVED, PENDING|APPROVED -> REJECTED.
    Asking for the status a record already has is a no-op.
    """
    today = today or clock_today()
    new_status = LeaveStatus(new_status)

    existing = store.get_leave_record(db, leave_id)
    if not existing:
        raise NotFound(f"leave record {leave_id} not found")

    with employee_write_lock(db, existing.employee_id) as employee:
        row = db.get(LeaveRecord, leave_id, populate_existing=True)
        if row is None:
            raise NotFound(f"leave record {leave_id} not found")
        current = LeaveStatus(row.status)
        if current == new_status:
            return row
        if new_status not in ALLOWED_TRANSITIONS[current]:
            raise InvalidStatusTransition(
                f"cannot move leave record from {current.value} to {new_status.value}",
                current_status=current.value,
                requested_status=new_status.value,
            )

        if new_status in ACTIVE_STATUSES:
            _ensure_no_overlap(
                db, employee.id, row.start_date, row.end_date,
                exclude_id=row.id,
                message_prefix="Leave dates",
            )

        row.status = new_status
        _commit_unit(db, employee, today, "change status of")

    db.refresh(row)
    logger.info("leave record %s moved %s -> %s", row.id, current.value, new_status.value)
    return row


def delete_leave_record(
    db: Session,
    leave_id: int,
    *,
    today: Optional[date] = None,
) -> bool:
    """Remove a record and re-derive its owner's availability. False when missing."""
    today = today or clock_today()

    existing = store.get_leave_record(db, leave_id)
    if not existing:
        return False
    employee_id = existing.employee_id

    with employee_write_lock(db, employee_id) as employee:
        row = db.get(LeaveRecord, leave_id, populate_existing=True)
        if row is None:
            return False
        db.delete(row)
        _commit_unit(db, employee, today, "delete")

    logger.info("leave record %s deleted for employee %s", leave_id, employee_id)
    return True
