"""
User Database Models

The identity record. The password hash lives only on this model and is never
part of any dictionary rendered to a client.
"""

import datetime
from typing import Any, Dict, Tuple

from sqlalchemy import Date, String
from sqlalchemy.orm import Mapped, mapped_column

from patient_dashboard.common.auth.user import AuthenticatedUser, UserRole, to_identity_id
from patient_dashboard.common.utils import isoformat
from patient_dashboard.database.base import ModelBase


class User(ModelBase):
    """Registered identity."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    date_of_birth: Mapped[datetime.date] = mapped_column(Date(), nullable=False)
    role: Mapped[str] = mapped_column(String(20), nullable=False, default=UserRole.USER.value)

    def __repr__(self) -> str:
        return f"<User(id='{self.id}', email='{self.email}', role='{self.role}')>"

    @property
    def name_parts(self) -> Tuple[str, str]:
        """First name and the remainder of the full name."""
        parts = self.name.split(" ")
        return parts[0] or self.name, " ".join(parts[1:])

    def to_identity(self) -> AuthenticatedUser:
        """Minimal identity view for the request context."""
        return AuthenticatedUser(
            id=to_identity_id(self.id),
            email=self.email,
            role=UserRole(self.role),
            created_at=self.created_at,
            updated_at=self.updated_at,
        )

    def to_public_dict(self) -> Dict[str, Any]:
        """Client-facing profile."""
        first_name, last_name = self.name_parts
        return {
            "id": self.id,
            "email": self.email,
            "firstName": first_name,
            "lastName": last_name,
            "dateOfBirth": self.date_of_birth.isoformat(),
            "enrollmentDate": self.created_at.date().isoformat() if self.created_at else None,
            "role": self.role,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
