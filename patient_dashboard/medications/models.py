"""
Medication Database Models
"""

import datetime
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from patient_dashboard.common.utils import isoformat, utcnow
from patient_dashboard.database.base import ModelBase


class Medication(ModelBase):
    """A medication a user takes, optionally with a planned end date."""

    __tablename__ = "medications"
    __table_args__ = (
        Index("ix_medications_user_id_start_date", "user_id", "start_date"),
    )

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    dosage: Mapped[str] = mapped_column(String(100), nullable=False)
    frequency: Mapped[str] = mapped_column(String(100), nullable=False)
    start_date: Mapped[datetime.datetime] = mapped_column(DateTime(), nullable=False)
    end_date: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(), nullable=True)

    def __repr__(self) -> str:
        return f"<Medication(id='{self.id}', user_id='{self.user_id}', name='{self.name}')>"

    def is_active(self, now: datetime.datetime) -> bool:
        """Same rule as the ``active`` list filter."""
        return self.end_date is None or self.end_date > now

    def to_public_dict(self, now: Optional[datetime.datetime] = None) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "dosage": self.dosage,
            "frequency": self.frequency,
            "startDate": isoformat(self.start_date),
            "endDate": isoformat(self.end_date) if self.end_date else None,
            "isActive": self.is_active(now or utcnow()),
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
