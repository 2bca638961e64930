"""
Authentication Exceptions

This module defines custom exception classes for authentication and authorization errors.
Every 401 kind carries its own ``error`` label so clients can tell "refresh your
token" apart from "log in again".
"""

from patient_dashboard.common.exceptions import ForbiddenError, UnauthenticatedError


class AuthError(UnauthenticatedError):
    """Base exception for authentication errors."""

    error = "Authentication error"

    def __init__(self, message: str = "Authentication error"):
        super().__init__(message)


class MissingTokenError(AuthError):
    """Exception raised when a required token is missing."""

    error = "Access token required"

    def __init__(self, message: str = "Please provide a valid access token in the Authorization header"):
        super().__init__(message)


class InvalidTokenError(AuthError):
    """Exception raised when a token is invalid."""

    error = "Invalid token"

    def __init__(self, message: str = "The provided token is invalid or malformed"):
        super().__init__(message)


class ExpiredTokenError(AuthError):
    """Exception raised when a token has expired."""

    error = "Token expired"

    def __init__(self, message: str = "The provided token has expired"):
        super().__init__(message)


class InvalidCredentialsError(AuthError):
    """Exception raised when credentials are invalid."""

    error = "Invalid credentials"

    def __init__(self, message: str = "Invalid email or password"):
        super().__init__(message)


class IdentityNotFoundError(AuthError):
    """Exception raised when the token's identity no longer exists."""

    error = "User not found"

    def __init__(self, message: str = "The user associated with this token no longer exists"):
        super().__init__(message)


class InsufficientPermissionsError(ForbiddenError):
    """Exception raised when a user does not have sufficient permissions."""

    error = "Insufficient permissions"

    def __init__(self, message: str = "You do not have permission to perform this action"):
        super().__init__(message)
