"""
Authorization Policies

Role and ownership checks applied after authentication. Admins bypass the
ownership check; the role check has no implicit bypass.
"""

from typing import Any, Iterable, Optional, Union

from patient_dashboard.common.auth.exceptions import InsufficientPermissionsError
from patient_dashboard.common.auth.user import AuthenticatedUser, IdentityId, UserRole, to_identity_id
from patient_dashboard.common.logger import get_logger

logger = get_logger(__name__)


def check_role(user: AuthenticatedUser, allowed_roles: Iterable[Union[UserRole, str]]) -> None:
    """
    Require the user's role to be in the allowed set.

    Raises:
        InsufficientPermissionsError: If the role is not allowed
    """
    allowed = {UserRole(role) for role in allowed_roles}
    if user.role not in allowed:
        logger.info(f"Role {user.role.value} denied for user {user.id}")
        raise InsufficientPermissionsError()


def check_ownership(user: AuthenticatedUser, owner_id: Any) -> None:
    """
    Require the user to own the resource, or to be an admin.

    Args:
        user: The authenticated user
        owner_id: Owning identity id of the resource

    Raises:
        InsufficientPermissionsError: If the user neither owns the resource nor is an admin
    """
    if user.is_admin:
        return
    try:
        owner = to_identity_id(owner_id)
    except ValueError:
        raise InsufficientPermissionsError()
    if owner != user.id:
        raise InsufficientPermissionsError()


def owner_scope(user: AuthenticatedUser) -> Optional[IdentityId]:
    """
    Owner filter for resource queries.

    Returns:
        The caller's id, or None for admins who see every owner's records
    """
    return None if user.is_admin else user.id
