from __future__ import annotations
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, EmailStr, Field

from leave.models import LeaveType
from leave.schema import LeaveRecordSchema
from .models import AvailabilityStatus


class CurrentLeaveSchema(BaseModel):
    start_date: date
    end_date: date
    type: LeaveType
    model_config = ConfigDict(from_attributes=True)


class EmployeeSchema(BaseModel):
    id: int
    name: str
    department: str
    role: str
    email: EmailStr
    phone: Optional[str] = None
    annual_leave_entitlement: int
    current_status: AvailabilityStatus
    current_leave: Optional[CurrentLeaveSchema] = None
    created_at: Optional[datetime] = None
    model_config = ConfigDict(from_attributes=True)


class LeaveBalanceSchema(BaseModel):
    employee_id: int
    year: int
    entitlement: int
    used: int
    remaining: int


class EmployeeDetailSchema(EmployeeSchema):
    leave_records: List[LeaveRecordSchema] = []
    balance: Optional[LeaveBalanceSchema] = None


# PUBLIC payload, what clients send. Availability is derived, never sent.
class EmployeeCreate(BaseModel):
    name: str = Field(..., min_length=1)
    department: str = Field(..., min_length=1)
    role: str = Field(..., min_length=1)
    email: EmailStr
    phone: Optional[str] = None
    annual_leave_entitlement: int = Field(25, ge=0)
    model_config = ConfigDict(extra="forbid")


class EmployeeUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    department: Optional[str] = Field(None, min_length=1)
    role: Optional[str] = Field(None, min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    annual_leave_entitlement: Optional[int] = Field(None, ge=0)
    model_config = ConfigDict(extra="forbid")
