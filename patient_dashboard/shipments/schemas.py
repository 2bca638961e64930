"""
Shipment Request Models
"""

import datetime
from typing import Annotated, List, Optional

from pydantic import BeforeValidator, Field, field_validator, model_validator

from patient_dashboard.common.validation import (
    PATTERNS,
    BaseValidationModel,
    parse_iso_datetime,
    validate_pattern
)
from patient_dashboard.shipments.models import ShipmentStatus

OptionalIsoDateTime = Annotated[Optional[datetime.datetime], BeforeValidator(parse_iso_datetime)]

MAX_ITEM_QUANTITY = 1000
MAX_ITEM_PRICE = 100000

_validate_item_name = validate_pattern(
    PATTERNS["item_name"],
    "Item name",
    "Item name can only contain letters, numbers, spaces, hyphens, parentheses, commas, periods, and ampersands",
)
_validate_tracking_number = validate_pattern(
    PATTERNS["tracking_number"],
    "Tracking number",
    "Tracking number can only contain letters, numbers, and hyphens",
)


class ShipmentItem(BaseValidationModel):
    name: str = Field(..., min_length=2, max_length=200)
    quantity: int = Field(..., ge=1, le=MAX_ITEM_QUANTITY)
    price: Optional[float] = Field(None, ge=0, le=MAX_ITEM_PRICE)

    @field_validator("name", mode="before")
    @classmethod
    def strip_name(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return _validate_item_name(v)


class _ShipmentFields(BaseValidationModel):
    """Field rules shared by create and update."""

    @field_validator("tracking_number", mode="before", check_fields=False)
    @classmethod
    def strip_tracking_number(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("tracking_number", check_fields=False)
    @classmethod
    def check_tracking_number(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _validate_tracking_number(v)


def _check_delivery_order(shipped_at, delivered_at) -> None:
    if shipped_at is not None and delivered_at is not None and delivered_at < shipped_at:
        raise ValueError("Delivered date cannot be before shipped date")


class ShipmentCreate(_ShipmentFields):
    items: List[ShipmentItem] = Field(..., min_length=1)
    status: ShipmentStatus = ShipmentStatus.PENDING
    tracking_number: Optional[str] = Field(None, min_length=5, max_length=50)
    shipped_at: OptionalIsoDateTime = None
    delivered_at: OptionalIsoDateTime = None

    @model_validator(mode="after")
    def check_dates(self):
        _check_delivery_order(self.shipped_at, self.delivered_at)
        return self

    def to_values(self) -> dict:
        values = self.model_dump()
        values["status"] = self.status.value
        return values


class ShipmentUpdate(_ShipmentFields):
    """
    Partial update. Timestamps and the tracking number may be cleared with
    null; items and status may not.
    """

    items: Optional[List[ShipmentItem]] = Field(None, min_length=1)
    status: Optional[ShipmentStatus] = None
    tracking_number: Optional[str] = Field(None, min_length=5, max_length=50)
    shipped_at: OptionalIsoDateTime = None
    delivered_at: OptionalIsoDateTime = None

    @field_validator("items", "status")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Value cannot be null")
        return v

    def to_values(self) -> dict:
        values = self.changes()
        # Items are replaced whole, so store them in the same shape as on create
        if "items" in values:
            values["items"] = [item.model_dump() for item in self.items]
        if "status" in values:
            values["status"] = self.status.value
        return values
