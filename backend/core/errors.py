"""Error kinds raised by the scheduling engine.

Domain failures derive from ``SchedulingError`` so the transport layer can return them as
they are. Storage failures use ``StorageUnavailableError`` which sits outside that family.
Both render as ``{"code": ..., "detail": ...}`` through ``error_response_handler``.
"""

from fastapi import HTTPException, Request, status
from fastapi.responses import JSONResponse


class SchedulingError(HTTPException):
    code = "scheduling_error"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, detail: str):
        super().__init__(status_code=self.status_code, detail=detail)

    def to_dict(self) -> dict:
        return {"code": self.code, "detail": self.detail}


class ValidationError(SchedulingError):
    code = "validation_error"
    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundError(SchedulingError):
    code = "not_found"
    status_code = status.HTTP_404_NOT_FOUND


class ForbiddenError(SchedulingError):
    code = "forbidden"
    status_code = status.HTTP_403_FORBIDDEN


class ConflictError(SchedulingError):
    code = "conflict"
    status_code = status.HTTP_409_CONFLICT


class InvalidTransitionError(SchedulingError):
    code = "invalid_transition"
    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, current_status: str, requested_status: str):
        self.current_status = current_status
        self.requested_status = requested_status
        super().__init__(f"Cannot change status from {current_status} to {requested_status}.")

    def to_dict(self) -> dict:
        body = super().to_dict()
        body["current_status"] = self.current_status
        body["requested_status"] = self.requested_status
        return body


class PastDateError(SchedulingError):
    code = "past_date"
    status_code = status.HTTP_400_BAD_REQUEST


class StorageUnavailableError(HTTPException):
    code = "storage_unavailable"

    def __init__(self, detail: str = "Database unavailable. Verify DATABASE_URL and database credentials."):
        super().__init__(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=detail)

    def to_dict(self) -> dict:
        return {"code": self.code, "detail": self.detail}


async def error_response_handler(request: Request, exc: SchedulingError | StorageUnavailableError) -> JSONResponse:
    """Render a scheduling or storage error with its stable code."""
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)
