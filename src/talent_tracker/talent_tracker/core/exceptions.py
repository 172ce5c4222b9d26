from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    def __init__(self, message: str, *, code: str = "validation-error", details: Optional[Any] = None):
        super().__init__(message)
        self.code = code
        self.details = details


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced record does not exist."""


class ConcurrencyError(DomainError):
    """Raised when a timecard was changed by someone else since it was loaded."""


class PersistenceError(Exception):
    """Raised when a database round-trip fails."""


class AuditLogError(Exception):
    """Raised when audit entries cannot be written or read."""

    def __init__(self, message: str, *, timecard_id: str):
        super().__init__(message)
        self.timecard_id = timecard_id
