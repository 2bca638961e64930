"""
Weight Entry Request Models
"""

import datetime
from typing import Annotated, Optional

from pydantic import BeforeValidator, Field, field_validator

from patient_dashboard.common.validation import (
    BaseValidationModel,
    parse_iso_datetime,
    validate_not_future
)

MIN_WEIGHT = 0.1
MAX_WEIGHT = 1000

RecordedAt = Annotated[Optional[datetime.datetime], BeforeValidator(parse_iso_datetime)]

_validate_recorded_at = validate_not_future("Recorded date")


class WeightEntryCreate(BaseValidationModel):
    weight: float = Field(..., ge=MIN_WEIGHT, le=MAX_WEIGHT)
    recorded_at: RecordedAt = None
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("recorded_at")
    @classmethod
    def check_recorded_at(cls, v: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
        return _validate_recorded_at(v)


class WeightEntryUpdate(BaseValidationModel):
    weight: Optional[float] = Field(None, ge=MIN_WEIGHT, le=MAX_WEIGHT)
    recorded_at: RecordedAt = None
    notes: Optional[str] = Field(None, max_length=500)

    @field_validator("weight", "recorded_at")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Value cannot be null")
        return v

    @field_validator("recorded_at")
    @classmethod
    def check_recorded_at(cls, v: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
        return _validate_recorded_at(v)
