"""
Authentication Service

Registration, login, token refresh and profile lookup. Every token pair is
issued from the stored identity, so role changes take effect at the next
refresh.
"""

from dataclasses import dataclass
from typing import Any, Dict

from patient_dashboard.common.auth.exceptions import (
    IdentityNotFoundError,
    InvalidCredentialsError
)
from patient_dashboard.common.auth.jwt import TokenPair, TokenService, TokenType
from patient_dashboard.common.auth.password import PasswordHasher
from patient_dashboard.common.auth.user import AuthenticatedUser, UserRole
from patient_dashboard.common.logger import get_logger
from patient_dashboard.common.utils import isoformat
from patient_dashboard.users.models import User
from patient_dashboard.users.repository import UserRepository
from patient_dashboard.users.schemas import LoginRequest, RegisterRequest

logger = get_logger(__name__)


@dataclass(frozen=True)
class AuthResult:
    """A user together with a freshly issued token pair."""

    user: User
    tokens: TokenPair

    def to_dict(self) -> Dict[str, Any]:
        return {
            "user": self.user.to_public_dict(),
            "token": self.tokens.access_token,
            "refreshToken": self.tokens.refresh_token,
            "expiresIn": isoformat(self.tokens.expires_at),
        }


class AuthService:
    """Service for account and session operations."""

    def __init__(
        self,
        users: UserRepository,
        token_service: TokenService,
        hasher: PasswordHasher,
        allow_role_self_assignment: bool = False,
    ):
        """
        Initialize the service.

        Args:
            users: Credential store
            token_service: Issues and verifies tokens
            hasher: Password hasher
            allow_role_self_assignment: Honor a client-supplied role at registration
        """
        self.users = users
        self.token_service = token_service
        self.hasher = hasher
        self.allow_role_self_assignment = allow_role_self_assignment

    def _issue(self, user: User) -> AuthResult:
        return AuthResult(user=user, tokens=self.token_service.issue_token_pair(user.to_identity()))

    async def register(self, request: RegisterRequest) -> AuthResult:
        """
        Create an identity and sign it in.

        Raises:
            ConflictError: If the email is already registered
        """
        role = UserRole.USER
        if request.role is not None:
            if self.allow_role_self_assignment:
                role = request.role
            elif request.role != UserRole.USER:
                logger.warning(f"Ignoring self-assigned role '{request.role.value}' at registration")

        password_hash = await self.hasher.hash_async(request.password)
        user = await self.users.create(
            email=request.email,
            password_hash=password_hash,
            name=request.name,
            date_of_birth=request.date_of_birth,
            role=role,
        )
        return self._issue(user)

    async def login(self, request: LoginRequest) -> AuthResult:
        """
        Verify credentials and sign in.

        Unknown email and wrong password produce the same error.

        Raises:
            InvalidCredentialsError: If the credentials do not match
        """
        user = await self.users.find_by_email(request.email)
        if user is None:
            raise InvalidCredentialsError()

        if not await self.hasher.verify_async(request.password, user.password_hash):
            logger.info(f"Failed login for user {user.id}")
            raise InvalidCredentialsError()

        logger.info(f"User {user.id} logged in")
        return self._issue(user)

    async def refresh(self, refresh_token: str) -> AuthResult:
        """
        Rotate a token pair.

        Raises:
            InvalidTokenError: If the refresh token is invalid or not a refresh token
            ExpiredTokenError: If the refresh token has expired
            IdentityNotFoundError: If the identity no longer exists
        """
        claim = self.token_service.verify(refresh_token, TokenType.REFRESH)

        user = await self.users.find_by_id(claim.user_id)
        if user is None:
            raise IdentityNotFoundError()

        return self._issue(user)

    async def profile(self, identity: AuthenticatedUser) -> User:
        """
        Load the caller's stored profile.

        Raises:
            IdentityNotFoundError: If the identity was removed mid-request
        """
        user = await self.users.find_by_id(identity.id)
        if user is None:
            raise IdentityNotFoundError()
        return user
