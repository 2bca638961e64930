"""
Shipment Repository
"""

from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import Select

from patient_dashboard.common.db.repository import OwnedRepository
from patient_dashboard.common.exceptions import ValidationFailedError
from patient_dashboard.common.pagination import DateRange
from patient_dashboard.shipments.models import Shipment, ShipmentStatus


@dataclass(frozen=True)
class ShipmentFilters:
    """List filters for shipments."""

    status: Optional[ShipmentStatus] = None
    created: DateRange = field(default_factory=DateRange)


class ShipmentRepository(OwnedRepository[Shipment]):
    """Repository for shipments."""

    model = Shipment
    resource_name = "Shipment"
    sort_fields = {
        "createdAt": "created_at",
        "shippedAt": "shipped_at",
        "deliveredAt": "delivered_at",
        "status": "status",
    }

    def apply_filters(self, stmt: Select, filters: ShipmentFilters) -> Select:
        if filters.status is not None:
            stmt = stmt.where(Shipment.status == filters.status.value)
        if filters.created.start is not None:
            stmt = stmt.where(Shipment.created_at >= filters.created.start)
        if filters.created.end is not None:
            stmt = stmt.where(Shipment.created_at <= filters.created.end)
        return stmt

    def validate_record(self, record: Shipment) -> None:
        if (
            record.shipped_at is not None
            and record.delivered_at is not None
            and record.delivered_at < record.shipped_at
        ):
            message = "Delivered date cannot be before shipped date"
            raise ValidationFailedError(message, errors=[{"field": "deliveredAt", "message": message}])
