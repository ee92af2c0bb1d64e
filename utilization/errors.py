"""Error taxonomy for the analytics engine."""

from __future__ import annotations

from typing import Dict, Optional


class AnalyticsError(Exception):
    """Base class for errors surfaced to callers of the analytics engine."""

    status_code: int = 400
    code: Optional[str] = None

    def __init__(self, message: str, status_code: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if code is not None:
            self.code = code


class ValidationError(AnalyticsError):
    """Malformed date, inverted range or unknown interval."""

    status_code = 400
    code = "VALIDATION_ERROR"


class DataAccessError(AnalyticsError):
    """The underlying store was unreachable or returned an error."""

    status_code = 500
    code = "DATABASE_ERROR"

    def __init__(self, message: str = "Failed to read analytics data"):
        super().__init__(message)


class NotFoundError(AnalyticsError):
    """Requested technician is not present in the roster."""

    status_code = 404
    code = "NOT_FOUND"

    def __init__(self, message: str = "Technician not found"):
        super().__init__(message)


def to_error_payload(exc: BaseException) -> Dict[str, object]:
    """Convert an exception into a ``{message, status_code, code}`` dict."""
    if isinstance(exc, AnalyticsError):
        return {"message": exc.message, "status_code": exc.status_code, "code": exc.code}
    return {"message": str(exc) or exc.__class__.__name__, "status_code": 500, "code": None}
