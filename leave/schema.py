from __future__ import annotations
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, ConfigDict, Field

from .models import LeaveStatus, LeaveType


class EmployeeSummary(BaseModel):
    id: int
    name: str
    department: str
    role: str
    model_config = ConfigDict(from_attributes=True)


class LeaveRecordSchema(BaseModel):
    id: int
    employee_id: int
    start_date: date
    end_date: date
    total_days: int
    working_days: int
    type: LeaveType
    status: LeaveStatus
    year: int
    notes: Optional[str] = None
    bonus: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    employee: Optional[EmployeeSummary] = None
    model_config = ConfigDict(from_attributes=True)


# What clients send. Day counts are optional; when present they are checked
# against the dates, never stored as given.
class LeaveRecordCreate(BaseModel):
    employee_id: int
    start_date: date = Field(..., description="First day of leave (inclusive)")
    end_date: date = Field(..., description="Last day of leave (inclusive), after start_date")
    type: LeaveType
    status: LeaveStatus = LeaveStatus.APPROVED
    notes: Optional[str] = None
    bonus: Optional[int] = Field(None, ge=0)
    year: Optional[int] = Field(None, description="Accounting year, defaults to the start date's year")
    total_days: Optional[int] = Field(None, ge=1)
    working_days: Optional[int] = Field(None, ge=0)
    model_config = ConfigDict(extra="forbid")


class LeaveRecordUpdate(BaseModel):
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    type: Optional[LeaveType] = None
    status: Optional[LeaveStatus] = None
    notes: Optional[str] = None
    bonus: Optional[int] = Field(None, ge=0)
    year: Optional[int] = None
    total_days: Optional[int] = Field(None, ge=1)
    working_days: Optional[int] = Field(None, ge=0)
    model_config = ConfigDict(extra="forbid")
