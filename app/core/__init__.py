"""
Core module for application infrastructure.
"""
from app.core.log_config import setup_logging
from app.core.exceptions import (
    ContestHubError,
    Unauthorized,
    Forbidden,
    InvalidInput,
    NotFound,
    Conflict,
    InvalidState,
    UpstreamFailure,
    PaymentProcessingFailed,
    InternalError
)

__all__ = [
    "setup_logging",
    "ContestHubError",
    "Unauthorized",
    "Forbidden",
    "InvalidInput",
    "NotFound",
    "Conflict",
    "InvalidState",
    "UpstreamFailure",
    "PaymentProcessingFailed",
    "InternalError"
]
