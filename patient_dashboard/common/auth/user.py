"""
Authentication User Models

This module defines the identity types used once a request has been
authenticated: roles, the canonical identity id, and the minimal identity
view attached to the request context.
"""

import datetime
import enum
from dataclasses import dataclass
from typing import Any, NewType, Optional

from patient_dashboard.common.utils import normalize_id


class UserRole(str, enum.Enum):
    """User roles for authorization."""

    ADMIN = "admin"
    USER = "user"
    MODERATOR = "moderator"


# Canonical identity id. Built once at the authentication boundary; every
# ownership comparison downstream works on this representation.
IdentityId = NewType("IdentityId", str)


def to_identity_id(value: Any) -> IdentityId:
    """
    Convert a raw id (token claim, stored value) into an IdentityId.

    Raises:
        ValueError: If the value is not a well-formed identifier
    """
    return IdentityId(normalize_id(value))


@dataclass(frozen=True)
class AuthenticatedUser:
    """
    Minimal identity view attached to an authenticated request.

    The password hash is deliberately not part of this type.

    Attributes:
        id: Canonical identity id
        email: Normalized email address
        role: Current role, re-read from the store on every request
        created_at: When the identity was created
        updated_at: When the identity was last updated
    """
    id: IdentityId
    email: str
    role: UserRole
    created_at: Optional[datetime.datetime] = None
    updated_at: Optional[datetime.datetime] = None

    @property
    def is_admin(self) -> bool:
        """Check if the user has admin role."""
        return self.role == UserRole.ADMIN
