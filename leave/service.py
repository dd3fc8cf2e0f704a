from __future__ import annotations
from typing import Optional, List

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from .models import ACTIVE_STATUSES, LeaveRecord, LeaveStatus, LeaveType


# -------- queries --------

def get_leave_record(db: Session, leave_id: int) -> LeaveRecord | None:
    """Fetch by id."""
    return db.get(LeaveRecord, leave_id)


def get_leave_records(
    db: Session,
    *,
    employee_id: Optional[int] = None,
    year: Optional[int] = None,
    type: Optional[LeaveType] = None,
    status: Optional[LeaveStatus] = None,
) -> List[LeaveRecord]:
    """List records with optional filters, most recently created first."""
    stmt = select(LeaveRecord).options(selectinload(LeaveRecord.employee))
    if employee_id is not None:
        stmt = stmt.where(LeaveRecord.employee_id == employee_id)
    if year is not None:
        stmt = stmt.where(LeaveRecord.year == year)
    if type is not None:
        stmt = stmt.where(LeaveRecord.type == type)
    if status is not None:
        stmt = stmt.where(LeaveRecord.status == status)

    stmt = stmt.order_by(LeaveRecord.created_at.desc(), LeaveRecord.id.desc())
    return list(db.scalars(stmt))


def get_active_records(
    db: Session,
    employee_id: int,
    *,
    exclude_id: Optional[int] = None,
) -> List[LeaveRecord]:
    """APPROVED/PENDING records of one employee, the universe overlap checks run against."""
    stmt = select(LeaveRecord).where(
        LeaveRecord.employee_id == employee_id,
        LeaveRecord.status.in_(ACTIVE_STATUSES),
    )
    if exclude_id is not None:
        stmt = stmt.where(LeaveRecord.id != exclude_id)
    stmt = stmt.order_by(LeaveRecord.start_date.asc(), LeaveRecord.id.asc())
    return list(db.scalars(stmt))


def used_annual_days(db: Session, employee_id: int, year: int) -> int:
    """Working days of APPROVED ANNUAL leave booked against ``year``."""
    total = db.scalar(
        select(func.coalesce(func.sum(LeaveRecord.working_days), 0)).where(
            LeaveRecord.employee_id == employee_id,
            LeaveRecord.type == LeaveType.ANNUAL,
            LeaveRecord.status == LeaveStatus.APPROVED,
            LeaveRecord.year == year,
        )
    )
    return int(total or 0)
