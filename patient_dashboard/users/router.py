"""
Authentication Router

Public endpoints for registration, login and token refresh, and
authenticated endpoints for logout and the caller's profile.
"""

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from patient_dashboard.api import respond
from patient_dashboard.common.auth.middleware import get_token_service, require_auth
from patient_dashboard.common.auth.user import AuthenticatedUser
from patient_dashboard.common.db.session import get_session
from patient_dashboard.common.logger import get_logger
from patient_dashboard.users.repository import UserRepository
from patient_dashboard.users.schemas import LoginRequest, RefreshRequest, RegisterRequest
from patient_dashboard.users.service import AuthService

# Set up logger
logger = get_logger(__name__)

# Create router
router = APIRouter()


def get_auth_service(
    request: Request,
    session: AsyncSession = Depends(get_session),
) -> AuthService:
    """Build the auth service for one request."""
    return AuthService(
        users=UserRepository(session),
        token_service=get_token_service(request),
        hasher=request.app.state.password_hasher,
        allow_role_self_assignment=request.app.state.settings.ALLOW_ROLE_SELF_ASSIGNMENT,
    )


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(body: RegisterRequest, service: AuthService = Depends(get_auth_service)):
    result = await service.register(body)
    return respond(result.to_dict(), "User registered successfully", status.HTTP_201_CREATED)


@router.post("/login")
async def login(body: LoginRequest, service: AuthService = Depends(get_auth_service)):
    result = await service.login(body)
    return respond(result.to_dict(), "Login successful")


@router.post("/refresh")
async def refresh(body: RefreshRequest, service: AuthService = Depends(get_auth_service)):
    result = await service.refresh(body.refresh_token)
    return respond(result.to_dict(), "Token refreshed successfully")


@router.post("/logout")
async def logout(user: AuthenticatedUser = Depends(require_auth)):
    # Tokens stay valid until they expire; there is no revocation store
    logger.info(f"User {user.id} logged out")
    return respond(message="Logged out successfully")


@router.get("/me")
async def me(
    user: AuthenticatedUser = Depends(require_auth),
    service: AuthService = Depends(get_auth_service),
):
    profile = await service.profile(user)
    return respond(profile.to_public_dict(), "User profile retrieved successfully")
