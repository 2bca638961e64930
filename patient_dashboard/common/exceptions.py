"""
Common Exception Classes

This module defines the error taxonomy shared by every resource. Each class
carries the HTTP status it renders as and a short ``error`` label; the API
layer turns them into the standard response envelope.
"""

from typing import Any, Dict, List, Optional


class DashboardError(Exception):
    """Base class for all custom exceptions."""

    status_code: int = 500
    error: str = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        original_exception: Optional[Exception] = None,
        status_code: Optional[int] = None,
    ):
        """
        Initialize the exception.

        Args:
            message: Error message shown to the caller
            original_exception: Original exception that caused this error
            status_code: Override for the class status code
        """
        self.message = message or self.error
        self.original_exception = original_exception
        if status_code is not None:
            self.status_code = status_code
        super().__init__(self.message)


class UnauthenticatedError(DashboardError):
    """Missing, invalid or expired credentials."""

    status_code = 401
    error = "Unauthorized"


class ForbiddenError(DashboardError):
    """Authenticated, but not allowed."""

    status_code = 403
    error = "Forbidden"


class NotFoundError(DashboardError):
    """Exception raised when a resource is not found."""

    status_code = 404
    error = "Not found"

    def __init__(self, resource_type: str, resource_id: Any = None):
        """
        Initialize the not found error.

        Args:
            resource_type: Human-readable type of the missing resource
            resource_id: ID of the resource that wasn't found
        """
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(f"{resource_type} not found")


class ConflictError(DashboardError):
    """Exception raised when a natural key is already taken."""

    status_code = 409
    error = "Conflict"


class ValidationFailedError(DashboardError):
    """Exception raised for validation errors."""

    status_code = 400
    error = "Validation failed"

    def __init__(self, message: str, errors: Optional[List[Dict[str, str]]] = None):
        """
        Initialize the validation error.

        Args:
            message: Error message
            errors: Per-field errors as ``{"field": ..., "message": ...}`` items
        """
        super().__init__(message)
        self.errors = errors or []


class RateLimitExceededError(DashboardError):
    """Too many requests from one client within the window."""

    status_code = 429
    error = "Too many requests"

    def __init__(self, retry_after: int):
        self.retry_after = retry_after
        super().__init__(f"Rate limit exceeded. Try again in {retry_after} seconds.")


class InternalError(DashboardError):
    """Unexpected fault. The message shown to callers never carries detail."""


class DatabaseError(InternalError):
    """Exception raised for database-related errors."""


class DatabaseConnectionError(DatabaseError):
    """The store could not be reached after all retry attempts."""

