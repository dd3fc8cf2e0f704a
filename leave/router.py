from __future__ import annotations
from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from core.clock import get_today
from core.database import get_db
from core.errors import NotFound

from .models import LeaveStatus, LeaveType
from .schema import LeaveRecordSchema, LeaveRecordCreate, LeaveRecordUpdate
from . import lifecycle, service

leave_router = APIRouter(prefix="/leave-records", tags=["Leave Records"])

# List leave records, newest first, with optional filters
@leave_router.get("", response_model=list[LeaveRecordSchema])
def list_leave_records(
    employee_id: Optional[int] = Query(None),
    year: Optional[int] = Query(None),
    type: Optional[LeaveType] = Query(None),
    status: Optional[LeaveStatus] = Query(None),
    db: Session = Depends(get_db),
):
    return service.get_leave_records(
        db,
        employee_id=employee_id,
        year=year,
        type=type,
        status=status,
    )

# Get single record by id
@leave_router.get("/{leave_id}", response_model=LeaveRecordSchema)
def get_leave_record(leave_id: int, db: Session = Depends(get_db)):
    obj = service.get_leave_record(db, leave_id)
    if not obj:
        raise NotFound("leave record not found")
    return obj

# Request leave: 400 bad dates, 404 unknown employee, 409 overlapping leave
@leave_router.post("", response_model=LeaveRecordSchema, status_code=status.HTTP_201_CREATED)
def create_leave_record(
    payload: LeaveRecordCreate,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    return lifecycle.create_leave_record(db, payload, today=today)

# Edit dates, type, status or notes (partial)
@leave_router.api_route("/{leave_id}", methods=["PUT", "PATCH"], response_model=LeaveRecordSchema)
def update_leave_record(
    leave_id: int,
    payload: LeaveRecordUpdate,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    return lifecycle.update_leave_record(db, leave_id, payload, today=today)

@leave_router.post("/{leave_id}/approve", response_model=LeaveRecordSchema)
def approve_leave_record(leave_id: int, db: Session = Depends(get_db), today: date = Depends(get_today)):
    return lifecycle.change_leave_status(db, leave_id, LeaveStatus.APPROVED, today=today)

@leave_router.post("/{leave_id}/reject", response_model=LeaveRecordSchema)
def reject_leave_record(leave_id: int, db: Session = Depends(get_db), today: date = Depends(get_today)):
    return lifecycle.change_leave_status(db, leave_id, LeaveStatus.REJECTED, today=today)

# Delete a record; its owner's availability is re-derived
@leave_router.delete("/{leave_id}")
def delete_leave_record(
    leave_id: int,
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    if not lifecycle.delete_leave_record(db, leave_id, today=today):
        raise NotFound("leave record not found")
    return {"message": "leave record deleted"}
