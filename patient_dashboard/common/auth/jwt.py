"""
JWT Authentication Module

This module provides utilities for JWT-based authentication, including token creation,
validation, and decoding. It supports access and refresh tokens with configurable
lifetimes and signing algorithms. Lifetimes use the compact ``<n><s|m|h|d>`` form
(``"1h"``, ``"7d"``) so they can be set straight from the environment.
"""

import datetime
import enum
import re
import uuid
from dataclasses import dataclass
from typing import Callable

# Using PyJWT for JWT operations
import jwt

from patient_dashboard.common.auth.exceptions import ExpiredTokenError, InvalidTokenError
from patient_dashboard.common.auth.user import AuthenticatedUser, IdentityId, UserRole, to_identity_id
from patient_dashboard.common.logger import get_logger
from patient_dashboard.common.utils import utcnow

logger = get_logger(__name__)

_DURATION_PATTERN = re.compile(r"^(\d+)([smhd])$")
_DURATION_UNITS = {
    "s": "seconds",
    "m": "minutes",
    "h": "hours",
    "d": "days",
}


def parse_duration(value: str) -> datetime.timedelta:
    """
    Parse a compact duration such as ``"15m"`` or ``"7d"``.

    Args:
        value: Positive integer followed by one of s, m, h, d

    Returns:
        The duration as a timedelta

    Raises:
        ValueError: If the value is malformed or zero
    """
    match = _DURATION_PATTERN.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid duration: {value!r}. Expected e.g. '15m', '1h' or '7d'")
    amount = int(match.group(1))
    if amount <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return datetime.timedelta(**{_DURATION_UNITS[match.group(2)]: amount})


class TokenType(enum.Enum):
    """Types of JWT tokens supported by the system."""

    ACCESS = "access"
    REFRESH = "refresh"


@dataclass
class JWTConfig:
    """
    Configuration for JWT tokens.

    Attributes:
        secret_key: Secret key used for signing tokens
        algorithm: Algorithm used for signing tokens
        access_token_expires: Access token lifetime, e.g. "1h"
        refresh_token_expires: Refresh token lifetime, e.g. "7d"
        token_issuer: Issuer of the tokens
    """
    secret_key: str
    algorithm: str = "HS256"
    access_token_expires: str = "1h"
    refresh_token_expires: str = "7d"
    token_issuer: str = "patient-dashboard"

    @property
    def access_token_lifetime(self) -> datetime.timedelta:
        return parse_duration(self.access_token_expires)

    @property
    def refresh_token_lifetime(self) -> datetime.timedelta:
        return parse_duration(self.refresh_token_expires)


@dataclass(frozen=True)
class SessionClaim:
    """
    Verified contents of a token.

    Attributes:
        user_id: Identity the token was issued to
        email: Email at issue time
        role: Role at issue time; authorization re-reads the stored role
        token_type: Access or refresh
        issued_at: When the token was issued
        expires_at: When the token stops being accepted
        token_id: Unique id of this token
    """
    user_id: IdentityId
    email: str
    role: UserRole
    token_type: TokenType
    issued_at: datetime.datetime
    expires_at: datetime.datetime
    token_id: str


@dataclass(frozen=True)
class TokenPair:
    """An access token and the refresh token issued with it."""

    access_token: str
    refresh_token: str
    expires_at: datetime.datetime  # access token expiry, naive UTC


class TokenService:
    """
    Issues and verifies signed session tokens.

    Examples:
        service = TokenService(JWTConfig(secret_key="..."))
        pair = service.issue_token_pair(identity)
        claim = service.verify(pair.access_token)
    """

    def __init__(self, config: JWTConfig, clock: Callable[[], datetime.datetime] = utcnow):
        """
        Initialize the service.

        Args:
            config: Signing configuration
            clock: Returns the current naive UTC time; replaceable in tests

        Raises:
            ValueError: If the secret is empty or a lifetime is malformed
        """
        if not config.secret_key:
            raise ValueError("JWT secret key must not be empty")
        # Fail fast on bad lifetimes rather than on first issue
        config.access_token_lifetime
        config.refresh_token_lifetime
        self.config = config
        self._clock = clock

    def _issue(
        self,
        token_type: TokenType,
        lifetime: datetime.timedelta,
        identity: AuthenticatedUser,
        now: datetime.datetime,
    ) -> str:
        payload = {
            "sub": str(identity.id),
            "email": identity.email,
            "role": UserRole(identity.role).value,
            "type": token_type.value,
            "iat": now.replace(tzinfo=datetime.timezone.utc),
            "exp": (now + lifetime).replace(tzinfo=datetime.timezone.utc),
            "iss": self.config.token_issuer,
            "jti": str(uuid.uuid4()),
        }
        return jwt.encode(payload, self.config.secret_key, algorithm=self.config.algorithm)

    def _now(self) -> datetime.datetime:
        # JWT time claims have whole-second precision
        return self._clock().replace(microsecond=0)

    def issue_access_token(self, identity: AuthenticatedUser) -> str:
        """
        Create a new access token.

        Args:
            identity: Identity the token is issued to

        Returns:
            The signed access token
        """
        return self._issue(TokenType.ACCESS, self.config.access_token_lifetime, identity, self._now())

    def issue_refresh_token(self, identity: AuthenticatedUser) -> str:
        """Create a new refresh token."""
        return self._issue(TokenType.REFRESH, self.config.refresh_token_lifetime, identity, self._now())

    def issue_token_pair(self, identity: AuthenticatedUser) -> TokenPair:
        """Create an access token and a refresh token for the same identity."""
        now = self._now()
        access_lifetime = self.config.access_token_lifetime
        return TokenPair(
            access_token=self._issue(TokenType.ACCESS, access_lifetime, identity, now),
            refresh_token=self._issue(TokenType.REFRESH, self.config.refresh_token_lifetime, identity, now),
            expires_at=now + access_lifetime,
        )

    def verify(self, token: str, expected_type: TokenType = TokenType.ACCESS) -> SessionClaim:
        """
        Validate a token and return its claims.

        Args:
            token: The token to validate
            expected_type: The token type the caller requires

        Returns:
            The verified claims

        Raises:
            InvalidTokenError: If the token is malformed, tampered with, issued
                by someone else or of the wrong type
            ExpiredTokenError: If the token has expired
        """
        now = self._clock().replace(tzinfo=datetime.timezone.utc)
        try:
            # Expiry is checked against the injected clock below
            payload = jwt.decode(
                token,
                self.config.secret_key,
                algorithms=[self.config.algorithm],
                issuer=self.config.token_issuer,
                options={
                    "verify_signature": True,
                    "verify_exp": False,
                    "verify_iat": False,
                    "require": ["exp", "iat", "sub", "type", "iss"],
                },
            )
        except jwt.PyJWTError as e:
            logger.info(f"Rejected token: {e}")
            raise InvalidTokenError()

        try:
            expires_at = datetime.datetime.fromtimestamp(int(payload["exp"]), tz=datetime.timezone.utc)
            issued_at = datetime.datetime.fromtimestamp(int(payload["iat"]), tz=datetime.timezone.utc)
        except (TypeError, ValueError, OverflowError):
            raise InvalidTokenError("Invalid token: malformed time claims")

        if now > expires_at:
            raise ExpiredTokenError("Token has expired")

        token_type = payload.get("type")
        if token_type != expected_type.value:
            raise InvalidTokenError(
                f"Invalid token type: expected {expected_type.value}, got {token_type}"
            )

        try:
            user_id = to_identity_id(payload["sub"])
            role = UserRole(payload.get("role", UserRole.USER.value))
        except ValueError:
            raise InvalidTokenError("Invalid token: malformed subject")

        return SessionClaim(
            user_id=user_id,
            email=str(payload.get("email", "")),
            role=role,
            token_type=expected_type,
            issued_at=issued_at.replace(tzinfo=None),
            expires_at=expires_at.replace(tzinfo=None),
            token_id=str(payload.get("jti", "")),
        )

