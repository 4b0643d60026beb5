from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "DOMAIN_ERROR"


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""

    code = "NOT_FOUND"


class DuplicateCheckInError(DomainError):
    """Raised when the person already has an attendance record for the day."""

    code = "DUPLICATE_CHECKIN"


class GatewayError(Exception):
    """Raised by client gateways when the backend call fails.

    ``message`` is the server-provided reason when one was returned.
    """

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
