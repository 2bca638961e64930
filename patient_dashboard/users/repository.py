"""
User Repository

Credential store access. Emails are trimmed and lower-cased before every
write and lookup so uniqueness is case-insensitive.
"""

import datetime
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from patient_dashboard.common.auth.user import AuthenticatedUser, IdentityId, UserRole
from patient_dashboard.common.exceptions import ConflictError, DatabaseError
from patient_dashboard.common.logger import get_logger
from patient_dashboard.common.utils import normalize_id
from patient_dashboard.users.models import User

logger = get_logger(__name__)


def normalize_email(email: str) -> str:
    """Canonical form of an email address for storage and lookup."""
    return email.strip().lower()


class UserRepository:
    """Repository for identity records."""

    def __init__(self, session: AsyncSession):
        """
        Initialize the repository.

        Args:
            session: Session bound to the current request
        """
        self.session = session

    async def find_by_id(self, user_id: str) -> Optional[User]:
        """Get a user by id, or None if missing or malformed."""
        try:
            user_id = normalize_id(user_id)
        except ValueError:
            return None
        try:
            return await self.session.get(User, user_id)
        except SQLAlchemyError as e:
            logger.error(f"Error loading user {user_id}: {e}")
            raise DatabaseError(original_exception=e)

    async def find_by_email(self, email: str) -> Optional[User]:
        """Get a user by email, or None."""
        stmt = select(User).where(User.email == normalize_email(email))
        try:
            return (await self.session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"Error looking up user by email: {e}")
            raise DatabaseError(original_exception=e)

    async def find_identity(self, user_id: IdentityId) -> Optional[AuthenticatedUser]:
        """Re-resolve an identity for the authentication gate."""
        user = await self.find_by_id(user_id)
        return user.to_identity() if user is not None else None

    async def create(
        self,
        email: str,
        password_hash: str,
        name: str,
        date_of_birth: datetime.date,
        role: UserRole = UserRole.USER,
    ) -> User:
        """
        Create a new user.

        Raises:
            ConflictError: If the email is already registered
        """
        email = normalize_email(email)
        if await self.find_by_email(email) is not None:
            raise ConflictError("User already exists with this email")

        user = User(
            email=email,
            password_hash=password_hash,
            name=name.strip(),
            date_of_birth=date_of_birth,
            role=UserRole(role).value,
        )
        try:
            self.session.add(user)
            await self.session.commit()
            await self.session.refresh(user)
        except IntegrityError as e:
            # Lost a race with a concurrent registration for the same email
            await self.session.rollback()
            raise ConflictError("User already exists with this email", original_exception=e)
        except SQLAlchemyError as e:
            await self.session.rollback()
            logger.error(f"Error creating user: {e}")
            raise DatabaseError(original_exception=e)

        logger.info(f"Registered user {user.id} with role {user.role}")
        return user
