from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.clock import get_today
from core.database import get_db
from core.errors import NotFound
from availability.deriver import derive_availability
from availability.service import refresh_all_availability
from .models import AvailabilityStatus
from .schema import CurrentLeaveSchema, EmployeeSchema, EmployeeDetailSchema, EmployeeCreate, EmployeeUpdate, LeaveBalanceSchema
from . import service

employee_router = APIRouter(prefix="/employees", tags=["Employees"])

# List all employees, optionally by department or current availability.
# current_status here is the stored snapshot: it moves on leave writes and on
# POST /employees/availability/refresh, which has to be scheduled once a day.
@employee_router.get("", response_model=list[EmployeeSchema])
def list_employees(
    department: Optional[str] = Query(None),
    current_status: Optional[AvailabilityStatus] = Query(None),
    db: Session = Depends(get_db),
):
    return service.get_employees(db, department=department, current_status=current_status)

# Re-derive every employee's availability for today
@employee_router.post("/availability/refresh")
def refresh_availability(db: Session = Depends(get_db), today: date = Depends(get_today)):
    return refresh_all_availability(db, today)

# Get employee by id, with leave history and the balance for one year
@employee_router.get("/{employee_id}", response_model=EmployeeDetailSchema)
def employee_detail(
    employee_id: int,
    year: Optional[int] = Query(None, description="Balance year, defaults to the current year"),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    obj = service.get_employee(db, employee_id)
    if not obj:
        raise NotFound("employee not found")
    detail = EmployeeDetailSchema.model_validate(obj)
    # report availability as of today, not as of the last refresh
    snapshot = derive_availability(today, obj.leave_records)
    detail.current_status = snapshot.status
    detail.current_leave = (
        CurrentLeaveSchema.model_validate(snapshot.current_leave, from_attributes=True)
        if snapshot.current_leave else None
    )
    detail.balance = service.get_leave_balance(db, obj, year or today.year)
    return detail

# Annual leave balance for one year
@employee_router.get("/{employee_id}/balance", response_model=LeaveBalanceSchema)
def employee_balance(
    employee_id: int,
    year: Optional[int] = Query(None),
    db: Session = Depends(get_db),
    today: date = Depends(get_today),
):
    obj = service.get_employee(db, employee_id)
    if not obj:
        raise NotFound("employee not found")
    return service.get_leave_balance(db, obj, year or today.year)

# Create employee
@employee_router.post("", response_model=EmployeeSchema, status_code=status.HTTP_201_CREATED)
def employee_post(payload: EmployeeCreate, db: Session = Depends(get_db)):
    try:
        return service.create_employee(db, payload)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="employee with this email already exists")

# Update employee
@employee_router.patch("/{employee_id}", response_model=EmployeeSchema)
def employee_patch(employee_id: int, payload: EmployeeUpdate, db: Session = Depends(get_db)):
    if not service.get_employee(db, employee_id):
        raise NotFound("employee not found")
    try:
        return service.update_employee(db, employee_id, payload)
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="employee with this email already exists")

# Delete employee and their leave records
@employee_router.delete("/{employee_id}")
def employee_delete(employee_id: int, db: Session = Depends(get_db)):
    if not service.get_employee(db, employee_id):
        raise NotFound("employee not found")
    service.delete_employee(db, employee_id)
    return {"message": "employee deleted"}
