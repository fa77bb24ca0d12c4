"""
Application errors.

Every error carries the HTTP status it maps to at the handler boundary.
The JSON body is always ``{"error": ...}`` plus optional ``message``
(upstream detail) or ``details`` (validation errors).
"""

from typing import Any, Optional


class AppError(Exception):
    """Base class for errors surfaced to API callers."""

    status_code = 500
    default_error = "Internal server error"

    def __init__(
        self,
        error: Optional[str] = None,
        message: Optional[str] = None,
        details: Any = None,
    ):
        self.error = error or self.default_error
        self.message = message
        self.details = details
        super().__init__(self.error)

    def to_dict(self) -> dict:
        body: dict[str, Any] = {"error": self.error}
        if self.message:
            body["message"] = self.message
        if self.details is not None:
            body["details"] = self.details
        return body


class BadRequest(AppError):
    status_code = 400
    default_error = "Invalid request"


class Unauthenticated(AppError):
    status_code = 401
    default_error = "Unauthorized"


class Forbidden(AppError):
    status_code = 403
    default_error = "Forbidden"


class NotFound(AppError):
    status_code = 404
    default_error = "Not found"


class UpstreamFailure(AppError):
    """A database, LLM, CAPTCHA or e-mail call failed."""

    status_code = 500
    default_error = "Upstream service failed"
