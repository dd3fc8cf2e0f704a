from __future__ import annotations
from datetime import date, datetime
from enum import Enum
from sqlalchemy import Date, DateTime, Enum as SAEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship
from sqlalchemy.sql import func
from core.database import Base
from leave.models import LeaveRecord, LeaveType


class AvailabilityStatus(str, Enum):
    available = "available"
    on_leave = "on_leave"
    returning_soon = "returning_soon"


class Employee(Base):
    __tablename__ = "employees"

    id: Mapped[int] = mapped_column(primary_key=True)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    department: Mapped[str] = mapped_column(String(128), nullable=False, index=True)
    role: Mapped[str] = mapped_column(String(128), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    annual_leave_entitlement: Mapped[int] = mapped_column(Integer, nullable=False, default=25)

    # cached availability, written only by the leave lifecycle / availability refresh
    current_status: Mapped[AvailabilityStatus] = mapped_column(
        SAEnum(AvailabilityStatus, name="availability_status"),
        default=AvailabilityStatus.available,
        nullable=False,
    )
    current_leave_start: Mapped[date | None] = mapped_column(Date(), nullable=True)
    current_leave_end:   Mapped[date | None] = mapped_column(Date(), nullable=True)
    current_leave_type:  Mapped[LeaveType | None] = mapped_column(
        SAEnum(LeaveType, name="leave_type"), nullable=True
    )

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )

    # relationships
    leave_records = relationship(
        LeaveRecord,
        back_populates="employee",
        cascade="all, delete-orphan",
        order_by=[LeaveRecord.created_at.desc(), LeaveRecord.id.desc()],
    )

    @property
    def current_leave(self) -> dict | None:
        if self.current_status == AvailabilityStatus.available or self.current_leave_start is None:
            return None
        return {
            "start_date": self.current_leave_start,
            "end_date": self.current_leave_end,
            "type": self.current_leave_type,
        }
