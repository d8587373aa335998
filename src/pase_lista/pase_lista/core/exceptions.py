from __future__ import annotations


class DomainError(Exception):
    """Base exception for business rule violations."""

    code = "DOMAIN_ERROR"

    def __init__(self, message: str = "", *, code: str | None = None):
        super().__init__(message)
        if code:
            self.code = code


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""

    code = "VALIDATION_ERROR"


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""

    code = "INVALID_CREDENTIALS"


class AccountLockedError(AuthenticationError):
    """Raised while an admin account is locked after repeated failures."""

    code = "ACCOUNT_LOCKED"


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""

    code = "FORBIDDEN"


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""

    code = "NOT_FOUND"


class ConflictError(DomainError):
    """Raised when an operation collides with existing data."""

    code = "CONFLICT"


class StorageError(DomainError):
    """Raised when a CSV file or the database cannot be read or written."""

    code = "STORAGE_ERROR"
