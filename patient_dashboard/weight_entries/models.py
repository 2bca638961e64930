"""
Weight Entry Database Models
"""

import datetime
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, Float, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from patient_dashboard.common.utils import isoformat
from patient_dashboard.database.base import ModelBase


class WeightEntry(ModelBase):
    """One weight measurement. A user records at most one entry per timestamp."""

    __tablename__ = "weight_entries"
    __table_args__ = (
        UniqueConstraint("user_id", "recorded_at", name="uq_weight_entries_user_id_recorded_at"),
    )

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    weight: Mapped[float] = mapped_column(Float(), nullable=False)
    recorded_at: Mapped[datetime.datetime] = mapped_column(DateTime(), nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    def __repr__(self) -> str:
        return f"<WeightEntry(id='{self.id}', user_id='{self.user_id}', weight={self.weight})>"

    def to_public_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "weight": self.weight,
            "recordedAt": isoformat(self.recorded_at),
            "notes": self.notes,
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
