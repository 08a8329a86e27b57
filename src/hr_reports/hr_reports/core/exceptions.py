from __future__ import annotations


class DomainError(Exception):
    """Base exception for report engine failures."""


class ValidationError(DomainError):
    """Raised when report parameters are malformed."""


class InvalidDimension(ValidationError):
    """Raised when a group-by value names no known dimension."""

    def __init__(self, value: str, allowed):
        self.value = value
        self.allowed = tuple(allowed)
        super().__init__(f"Unsupported groupBy '{value}' (expected one of: {', '.join(self.allowed)})")


class StoreUnavailable(DomainError):
    """Raised when a record store read fails (timeout, lost connection, ...)."""

    def __init__(self, message: str = "Record store unavailable", *, detail: str | None = None):
        self.detail = detail or message
        super().__init__(message)


class AuthorizationError(DomainError):
    """Raised when a request carries no authenticated tenant."""
