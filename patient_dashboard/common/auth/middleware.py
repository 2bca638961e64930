"""
Authentication Middleware

This module provides the authentication gate for API requests: bearer token
extraction, token validation, identity re-resolution and the FastAPI
dependencies that protect routes.
"""

import contextvars
from typing import Awaitable, Callable, Optional, Protocol, Union

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from patient_dashboard.common.auth.exceptions import IdentityNotFoundError, InvalidTokenError, MissingTokenError
from patient_dashboard.common.auth.jwt import TokenService, TokenType
from patient_dashboard.common.auth.policies import check_role
from patient_dashboard.common.auth.user import AuthenticatedUser, IdentityId, UserRole
from patient_dashboard.common.db.session import get_session
from patient_dashboard.common.logger import get_logger

logger = get_logger(__name__)

# Identity attached to the request currently being handled
_current_user: contextvars.ContextVar[Optional[AuthenticatedUser]] = contextvars.ContextVar(
    "current_user", default=None
)


class IdentityLookup(Protocol):
    """Anything that can re-resolve an identity by id."""

    async def find_identity(self, user_id: IdentityId) -> Optional[AuthenticatedUser]:
        ...


def get_current_user() -> Optional[AuthenticatedUser]:
    """
    Get the authenticated user for the current request context.

    Returns:
        The authenticated user or None if not authenticated
    """
    return _current_user.get()


def set_current_user(user: Optional[AuthenticatedUser]) -> contextvars.Token:
    """
    Set the authenticated user for the current request context.

    Args:
        user: The authenticated user to set

    Returns:
        Token that can restore the previous value
    """
    return _current_user.set(user)


def extract_token_from_header(auth_header: Optional[str]) -> Optional[str]:
    """
    Extract a JWT token from an Authorization header.

    Args:
        auth_header: The Authorization header value

    Returns:
        The JWT token, or None when the header is absent or blank

    Raises:
        InvalidTokenError: If a header is present but is not ``Bearer <token>``
    """
    if not auth_header or not auth_header.strip():
        return None

    parts = auth_header.split()

    if len(parts) != 2 or parts[0].lower() != 'bearer':
        raise InvalidTokenError("Authorization header must be in the format: Bearer <token>")

    return parts[1]


async def authenticate(
    auth_header: Optional[str],
    token_service: TokenService,
    users: IdentityLookup,
) -> AuthenticatedUser:
    """
    Authenticate a request using the Authorization header.

    The token's claims are not trusted on their own: the identity is read
    back from the store so deleted identities and role changes take effect
    immediately.

    Args:
        auth_header: The Authorization header value
        token_service: Service used to verify the token
        users: Store the identity is re-resolved from

    Returns:
        An authenticated user object

    Raises:
        MissingTokenError: If no Authorization header is provided
        InvalidTokenError: If the header is malformed or the token is invalid
        ExpiredTokenError: If the token has expired
        IdentityNotFoundError: If the identity no longer exists
    """
    token = extract_token_from_header(auth_header)

    if not token:
        raise MissingTokenError()

    claim = token_service.verify(token, TokenType.ACCESS)

    user = await users.find_identity(claim.user_id)
    if user is None:
        logger.info(f"Token presented for missing identity {claim.user_id}")
        raise IdentityNotFoundError()

    return user


def get_token_service(request: Request) -> TokenService:
    """Get the application's token service."""
    return request.app.state.token_service


async def require_auth(
    request: Request,
    session: AsyncSession = Depends(get_session),
    token_service: TokenService = Depends(get_token_service),
) -> AuthenticatedUser:
    """
    Dependency that requires an authenticated caller.

    Usage:
        @router.get("/protected")
        async def protected_route(user: AuthenticatedUser = Depends(require_auth)):
            return {"user_id": user.id}
    """
    # Imported here since the users package depends on this module
    from patient_dashboard.users.repository import UserRepository

    user = await authenticate(
        request.headers.get("Authorization"),
        token_service,
        UserRepository(session),
    )
    request.state.user = user
    set_current_user(user)
    return user


def require_role(
    *roles: Union[UserRole, str],
) -> Callable[..., Awaitable[AuthenticatedUser]]:
    """
    Build a dependency that requires one of the given roles.

    Args:
        *roles: The roles to allow

    Returns:
        A FastAPI dependency resolving to the authenticated user
    """
    allowed = {UserRole(role) for role in roles}

    async def dependency(user: AuthenticatedUser = Depends(require_auth)) -> AuthenticatedUser:
        check_role(user, allowed)
        return user

    return dependency
