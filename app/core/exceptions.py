"""
Application errors.

Services raise these; the handlers registered in app.main translate them
into the standard error envelope from app.utils.response.
"""
from typing import Any, Dict, Optional


class ContestHubError(Exception):
    """Base class for all errors surfaced to API callers"""

    status_code: int = 500
    default_message: str = "Something went wrong"

    def __init__(self, message: Optional[str] = None, **extra: Any):
        self.message = message or self.default_message
        self.extra: Dict[str, Any] = extra
        super().__init__(self.message)


class Unauthorized(ContestHubError):
    """Missing or invalid credential"""
    status_code = 401
    default_message = "Unauthorized Access!"


class Forbidden(ContestHubError):
    """Role mismatch or ownership violation"""
    status_code = 403
    default_message = "Forbidden Access!"


class InvalidInput(ContestHubError):
    """Malformed id, disallowed value or missing field"""
    status_code = 400
    default_message = "Invalid input"


class NotFound(ContestHubError):
    status_code = 404
    default_message = "Resource not found"


class Conflict(ContestHubError):
    status_code = 409
    default_message = "Resource already exists"


class InvalidState(ContestHubError):
    """Lifecycle precondition unmet"""
    status_code = 400
    default_message = "Operation not allowed in the current state"


class UpstreamFailure(ContestHubError):
    """Payment or identity provider error"""
    status_code = 502
    default_message = "Upstream service failed"


class PaymentProcessingFailed(ContestHubError):
    status_code = 500
    default_message = "Payment processing failed."


class InternalError(ContestHubError):
    """Unexpected failure not covered by a more specific error"""
    status_code = 500
    default_message = "Internal server error"
