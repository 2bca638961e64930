"""
Tests for the authentication gate and authorization policies.

The identity store is replaced with an in-memory lookup so the gate can be
tested without a database.
"""

import datetime
import uuid

import pytest

from patient_dashboard.common.auth.exceptions import (
    ExpiredTokenError,
    IdentityNotFoundError,
    InsufficientPermissionsError,
    InvalidTokenError,
    MissingTokenError
)
from patient_dashboard.common.auth.jwt import JWTConfig, TokenService
from patient_dashboard.common.auth.middleware import authenticate, extract_token_from_header
from patient_dashboard.common.auth.policies import check_ownership, check_role, owner_scope
from patient_dashboard.common.auth.user import AuthenticatedUser, UserRole, to_identity_id

SECRET = "unit-test-secret-key-with-enough-bytes-123"


class InMemoryIdentities:
    def __init__(self, *users):
        self.users = {user.id: user for user in users}
        self.lookups = []

    async def find_identity(self, user_id):
        self.lookups.append(user_id)
        return self.users.get(user_id)


def make_user(role=UserRole.USER):
    return AuthenticatedUser(
        id=to_identity_id(str(uuid.uuid4())),
        email=f"{role.value}@example.com",
        role=role,
    )


@pytest.fixture
def token_service():
    return TokenService(JWTConfig(secret_key=SECRET))


@pytest.mark.parametrize("header, expected", [
    ("Bearer abc.def.ghi", "abc.def.ghi"),
    ("bearer abc.def.ghi", "abc.def.ghi"),
    ("BEARER abc", "abc"),
    (None, None),
    ("", None),
    ("   ", None),
])
def test_extract_token_from_header(header, expected):
    assert extract_token_from_header(header) == expected


@pytest.mark.parametrize("header", [
    "Bearer",
    "Basic dXNlcjpwYXNz",
    "Bearer a b",
    "Bearer abc.def.ghi junk",
])
def test_extract_token_rejects_malformed_header(header):
    with pytest.raises(InvalidTokenError):
        extract_token_from_header(header)


@pytest.mark.asyncio
async def test_authenticate_resolves_identity_from_store(token_service):
    user = make_user()
    store = InMemoryIdentities(user)
    token = token_service.issue_access_token(user)

    result = await authenticate(f"Bearer {token}", token_service, store)

    assert result == user
    assert store.lookups == [user.id]


@pytest.mark.asyncio
async def test_authenticate_uses_stored_role_not_token_role(token_service):
    user = make_user(UserRole.USER)
    token = token_service.issue_access_token(user)
    promoted = AuthenticatedUser(id=user.id, email=user.email, role=UserRole.ADMIN)

    result = await authenticate(f"Bearer {token}", token_service, InMemoryIdentities(promoted))

    assert result.role == UserRole.ADMIN


@pytest.mark.asyncio
@pytest.mark.parametrize("header", [None, ""])
async def test_authenticate_without_token(token_service, header):
    with pytest.raises(MissingTokenError):
        await authenticate(header, token_service, InMemoryIdentities())


@pytest.mark.asyncio
async def test_authenticate_with_invalid_token(token_service):
    with pytest.raises(InvalidTokenError):
        await authenticate("Bearer not-a-token", token_service, InMemoryIdentities())


@pytest.mark.asyncio
async def test_authenticate_with_credential_in_wrong_shape(token_service):
    token = token_service.issue_access_token(make_user())

    with pytest.raises(InvalidTokenError):
        await authenticate(f"Bearer {token} junk", token_service, InMemoryIdentities())


@pytest.mark.asyncio
async def test_authenticate_with_expired_token():
    user = make_user()
    issued = TokenService(
        JWTConfig(secret_key=SECRET, access_token_expires="1m"),
        clock=lambda: datetime.datetime(2024, 1, 1, 12, 0, 0),
    ).issue_access_token(user)
    later = TokenService(
        JWTConfig(secret_key=SECRET, access_token_expires="1m"),
        clock=lambda: datetime.datetime(2024, 1, 1, 12, 5, 0),
    )

    with pytest.raises(ExpiredTokenError):
        await authenticate(f"Bearer {issued}", later, InMemoryIdentities(user))


@pytest.mark.asyncio
async def test_authenticate_rejects_refresh_token(token_service):
    user = make_user()
    pair = token_service.issue_token_pair(user)

    with pytest.raises(InvalidTokenError):
        await authenticate(f"Bearer {pair.refresh_token}", token_service, InMemoryIdentities(user))


@pytest.mark.asyncio
async def test_authenticate_deleted_identity(token_service):
    user = make_user()
    token = token_service.issue_access_token(user)

    with pytest.raises(IdentityNotFoundError):
        await authenticate(f"Bearer {token}", token_service, InMemoryIdentities())


def test_check_role_allows_listed_role():
    check_role(make_user(UserRole.MODERATOR), [UserRole.MODERATOR, "admin"])


def test_check_role_has_no_admin_bypass():
    with pytest.raises(InsufficientPermissionsError):
        check_role(make_user(UserRole.ADMIN), [UserRole.USER])


def test_check_ownership():
    owner = make_user()
    stranger = make_user()
    admin = make_user(UserRole.ADMIN)

    check_ownership(owner, owner.id)
    check_ownership(owner, str(owner.id).upper())
    check_ownership(admin, owner.id)
    with pytest.raises(InsufficientPermissionsError):
        check_ownership(stranger, owner.id)
    with pytest.raises(InsufficientPermissionsError):
        check_ownership(stranger, "not-an-id")


def test_owner_scope():
    user = make_user()

    assert owner_scope(user) == user.id
    assert owner_scope(make_user(UserRole.ADMIN)) is None
