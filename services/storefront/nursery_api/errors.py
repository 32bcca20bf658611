"""
Error taxonomy for the Nursery Storefront API.

Every error raised on purpose by a handler is a ``NurseryAPIError``; the
exception handlers registered in ``main`` turn it into a JSON body of the form
``{"success": false, "error": ..., "code": ...}``.
"""
from typing import Any, Dict


class NurseryAPIError(Exception):
    """Base class for errors that map onto an HTTP response."""
    status_code = 500
    code = "INTERNAL_ERROR"

    def __init__(self, message: str = "Internal server error"):
        super().__init__(message)
        self.message = message

    def to_body(self) -> Dict[str, Any]:
        return {"success": False, "error": self.message, "code": self.code}


class ValidationError(NurseryAPIError):
    """Missing or malformed request input."""
    status_code = 400
    code = "VALIDATION_ERROR"


class NotFoundError(NurseryAPIError):
    """The requested inventory row does not exist."""
    status_code = 404
    code = "NOT_FOUND"


class RateLimitError(NurseryAPIError):
    """The caller exhausted its request budget for the current window."""
    status_code = 429
    code = "RATE_LIMITED"

    def __init__(self, message: str = "Too many requests"):
        super().__init__(message)


class UpstreamStoreError(NurseryAPIError):
    """The database call failed."""
    status_code = 500
    code = "DATABASE_ERROR"


class InternalError(NurseryAPIError):
    """Unexpected failure inside a handler."""
    status_code = 500
    code = "INTERNAL_ERROR"
