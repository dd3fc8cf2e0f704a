from __future__ import annotations
from datetime import date, datetime
from enum import Enum
from sqlalchemy import Date, DateTime, Enum as SAEnum, ForeignKey, Index, Integer, Text, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from core.database import Base


class LeaveType(str, Enum):
    ANNUAL = "ANNUAL"
    SICK = "SICK"
    PERSONAL = "PERSONAL"
    MATERNITY = "MATERNITY"
    PATERNITY = "PATERNITY"


class LeaveStatus(str, Enum):
    APPROVED = "APPROVED"
    PENDING = "PENDING"
    REJECTED = "REJECTED"


# statuses that hold on to their dates; REJECTED frees them
ACTIVE_STATUSES = (LeaveStatus.APPROVED, LeaveStatus.PENDING)


class LeaveRecord(Base):
    __tablename__ = "leave_records"

    id: Mapped[int] = mapped_column(primary_key=True)
    employee_id: Mapped[int] = mapped_column(
        ForeignKey("employees.id", ondelete="CASCADE"), index=True, nullable=False
    )

    start_date: Mapped[date] = mapped_column(Date(), nullable=False)
    end_date:   Mapped[date] = mapped_column(Date(), nullable=False)
    total_days:   Mapped[int] = mapped_column(Integer, nullable=False)
    working_days: Mapped[int] = mapped_column(Integer, nullable=False)

    type: Mapped[LeaveType] = mapped_column(SAEnum(LeaveType, name="leave_type"), nullable=False)
    status: Mapped[LeaveStatus] = mapped_column(
        SAEnum(LeaveStatus, name="leave_status"),
        default=LeaveStatus.APPROVED,
        nullable=False,
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False, index=True)

    notes: Mapped[str | None] = mapped_column(Text(), nullable=True)
    bonus: Mapped[int | None] = mapped_column(Integer, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    employee = relationship("Employee", back_populates="leave_records")

    __table_args__ = (
        Index("ix_leave_emp_start", "employee_id", "start_date"),
        CheckConstraint("start_date < end_date", name="ck_leave_window"),
    )
