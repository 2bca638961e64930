"""
Authentication Framework

This package provides the authentication framework for the application,
supporting JWT-based authentication and authorization with role-based access
control and per-record ownership.
"""

from patient_dashboard.common.auth.jwt import (
    JWTConfig,
    SessionClaim,
    TokenPair,
    TokenService,
    TokenType,
    parse_duration
)

from patient_dashboard.common.auth.user import (
    AuthenticatedUser,
    IdentityId,
    UserRole,
    to_identity_id
)

from patient_dashboard.common.auth.password import (
    PasswordHasher,
    hash_password,
    verify_password
)

from patient_dashboard.common.auth.policies import (
    check_ownership,
    check_role,
    owner_scope
)

from patient_dashboard.common.auth.middleware import (
    authenticate,
    extract_token_from_header,
    get_current_user,
    require_auth,
    require_role
)

from patient_dashboard.common.auth.exceptions import (
    AuthError,
    ExpiredTokenError,
    IdentityNotFoundError,
    InsufficientPermissionsError,
    InvalidCredentialsError,
    InvalidTokenError,
    MissingTokenError
)

# Public API
__all__ = [
    # JWT tokens
    'JWTConfig',
    'SessionClaim',
    'TokenPair',
    'TokenService',
    'TokenType',
    'parse_duration',

    # Identity
    'AuthenticatedUser',
    'IdentityId',
    'UserRole',
    'to_identity_id',

    # Password utilities
    'PasswordHasher',
    'hash_password',
    'verify_password',

    # Authorization
    'check_ownership',
    'check_role',
    'owner_scope',

    # Authentication middleware
    'authenticate',
    'extract_token_from_header',
    'get_current_user',
    'require_auth',
    'require_role',

    # Exceptions
    'AuthError',
    'ExpiredTokenError',
    'IdentityNotFoundError',
    'InsufficientPermissionsError',
    'InvalidCredentialsError',
    'InvalidTokenError',
    'MissingTokenError',
]
