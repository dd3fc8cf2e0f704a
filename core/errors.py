"""
Error taxonomy for the leave engine.

Every error is an ``HTTPException`` so services can raise it directly and
FastAPI renders it with the usual ``{"detail": ...}`` envelope. ``detail``
is always an object carrying a stable ``error`` code and a human readable
``message``.
"""
from __future__ import annotations
from typing import Any, Optional

from fastapi import HTTPException, status


class LeaveEngineError(HTTPException):
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "error"

    def __init__(self, message: str, **extra: Any):
        self.message = message
        detail = {"error": self.code, "message": message}
        detail.update(extra)
        super().__init__(status_code=self.status_code, detail=detail)


class NotFound(LeaveEngineError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"


class InvalidInterval(LeaveEngineError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_interval"


class InvalidStatusTransition(LeaveEngineError):
    status_code = status.HTTP_400_BAD_REQUEST
    code = "invalid_transition"


class LeaveConflict(LeaveEngineError):
    status_code = status.HTTP_409_CONFLICT
    code = "leave_conflict"

    def __init__(
        self,
        message: str,
        *,
        conflicting_leave: dict,
        requested_period: Optional[str] = None,
    ):
        self.conflicting_leave = conflicting_leave
        super().__init__(
            message,
            conflicting_leave=conflicting_leave,
            requested_period=requested_period,
        )


class PersistenceFailure(LeaveEngineError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "persistence_failure"
