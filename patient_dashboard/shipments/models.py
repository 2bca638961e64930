"""
Shipment Database Models
"""

import datetime
import enum
from typing import Any, Dict, List, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column

from patient_dashboard.common.utils import isoformat
from patient_dashboard.database.base import ModelBase


class ShipmentStatus(str, enum.Enum):
    """Shipment status values."""

    PENDING = "pending"
    SHIPPED = "shipped"
    DELAYED = "delayed"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class Shipment(ModelBase):
    """A shipment of one or more items to a user."""

    __tablename__ = "shipments"
    __table_args__ = (
        Index("ix_shipments_user_id_created_at", "user_id", "created_at"),
        Index("ix_shipments_user_id_status", "user_id", "status"),
    )

    user_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    # List of {"name", "quantity", "price"} objects
    items: Mapped[List[Dict[str, Any]]] = mapped_column(JSON(), nullable=False)
    status: Mapped[str] = mapped_column(
        String(20), nullable=False, default=ShipmentStatus.PENDING.value
    )
    tracking_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True, index=True)
    shipped_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(), nullable=True)
    delivered_at: Mapped[Optional[datetime.datetime]] = mapped_column(DateTime(), nullable=True)

    def __repr__(self) -> str:
        return f"<Shipment(id='{self.id}', user_id='{self.user_id}', status='{self.status}')>"

    def to_public_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "items": list(self.items or []),
            "status": self.status,
            "trackingNumber": self.tracking_number,
            "shippedAt": isoformat(self.shipped_at),
            "deliveredAt": isoformat(self.delivered_at),
            "createdAt": isoformat(self.created_at),
            "updatedAt": isoformat(self.updated_at),
        }
