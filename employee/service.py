from typing import Optional, List
from sqlalchemy.orm import Session
from sqlalchemy import select
from .models import AvailabilityStatus, Employee
from .schema import EmployeeCreate, EmployeeUpdate, LeaveBalanceSchema
from leave import service as leave_service

def get_employees(
    db: Session,
    *,
    department: Optional[str] = None,
    current_status: Optional[AvailabilityStatus] = None,
) -> List[Employee]:
    statement = select(Employee)
    if department is not None:
        statement = statement.where(Employee.department == department)
    if current_status is not None:
        statement = statement.where(Employee.current_status == current_status)
    statement = statement.order_by(Employee.name.asc(), Employee.id.asc())
    return list(db.scalars(statement))

def get_employee(db: Session, employee_id: int) -> Optional[Employee]:
    return db.get(Employee, employee_id)

def create_employee(db: Session, employee: EmployeeCreate) -> Employee:
    db_employee = Employee(
        name=employee.name,
        department=employee.department,
        role=employee.role,
        email=str(employee.email),
        phone=employee.phone,
        annual_leave_entitlement=employee.annual_leave_entitlement,
        current_status=AvailabilityStatus.available,
    )
    db.add(db_employee)
    db.commit()
    db.refresh(db_employee)
    return db_employee

def update_employee(db: Session, employee_id: int, patch: EmployeeUpdate) -> Optional[Employee]:
    db_employee = db.get(Employee, employee_id)
    if not db_employee:
        return None
    data = patch.model_dump(exclude_unset=True, exclude_none=True)
    if "email" in data:
        data["email"] = str(data["email"])
    for k,v in data.items():
        setattr(db_employee, k, v)
    db.commit()
    db.refresh(db_employee)
    return db_employee

def delete_employee(db: Session, employee_id: int) -> bool:
    """Delete an employee together with their leave records."""
    db_employee = db.get(Employee, employee_id)
    if not db_employee:
        return False
    db.delete(db_employee)
    db.commit()
    return True

def get_leave_balance(db: Session, employee: Employee, year: int) -> LeaveBalanceSchema:
    """Annual leave left for ``year``: entitlement minus APPROVED ANNUAL working days."""
    used = leave_service.used_annual_days(db, employee.id, year)
    return LeaveBalanceSchema(
        employee_id=employee.id,
        year=year,
        entitlement=employee.annual_leave_entitlement,
        used=used,
        remaining=employee.annual_leave_entitlement - used,
    )
