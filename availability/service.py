from __future__ import annotations
import logging
from datetime import date
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.errors import PersistenceFailure
from employee.models import Employee
from leave.models import LeaveRecord
from .deriver import AvailabilitySnapshot, derive_availability, snapshot_of

logger = logging.getLogger(__name__)


def load_employee_records(db: Session, employee_id: int) -> List[LeaveRecord]:
    stmt = (
        select(LeaveRecord)
        .where(LeaveRecord.employee_id == employee_id)
        .order_by(LeaveRecord.start_date.asc(), LeaveRecord.id.asc())
    )
    return list(db.scalars(stmt))


def apply_snapshot(employee: Employee, snapshot: AvailabilitySnapshot) -> bool:
    """Write ``snapshot`` onto the employee row. Returns True when anything changed."""
    changed = snapshot_of(employee) != snapshot
    employee.current_status = snapshot.status
    if snapshot.current_leave is None:
        employee.current_leave_start = None
        employee.current_leave_end = None
        employee.current_leave_type = None
    else:
        employee.current_leave_start = snapshot.current_leave.start_date
        employee.current_leave_end = snapshot.current_leave.end_date
        employee.current_leave_type = snapshot.current_leave.type
    return changed


def refresh_employee_availability(db: Session, employee: Employee, today: date) -> AvailabilitySnapshot:
    """
    Re-derive the employee's snapshot from the records currently in storage.
    Does not commit; the caller owns the transaction.
    """
    db.flush()
    records = load_employee_records(db, employee.id)
    snapshot = derive_availability(today, records)
    apply_snapshot(employee, snapshot)
    return snapshot


def refresh_all_availability(db: Session, today: date) -> dict:
    """
    Re-derive every employee's snapshot for ``today`` and commit.
    Snapshots go stale as days pass without any leave write, so this is
    meant to run at least once a day.
    """
    employees = list(db.scalars(select(Employee).order_by(Employee.id)))
    changed = 0
    try:
        for employee in employees:
            snapshot = derive_availability(today, load_employee_records(db, employee.id))
            if apply_snapshot(employee, snapshot):
                changed += 1
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception("availability refresh failed for %s", today)
        raise PersistenceFailure("could not refresh employee availability")

    logger.info("availability refreshed for %d employees (%d changed) as of %s", len(employees), changed, today)
    return {"refreshed": len(employees), "changed": changed}
