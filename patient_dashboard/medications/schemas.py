"""
Medication Request Models
"""

import datetime
from typing import Annotated, Optional

from pydantic import BeforeValidator, Field, field_validator, model_validator

from patient_dashboard.common.validation import (
    PATTERNS,
    BaseValidationModel,
    parse_iso_datetime,
    validate_not_future,
    validate_pattern
)

IsoDateTime = Annotated[datetime.datetime, BeforeValidator(parse_iso_datetime)]
OptionalIsoDateTime = Annotated[Optional[datetime.datetime], BeforeValidator(parse_iso_datetime)]

_validate_name = validate_pattern(
    PATTERNS["medication_name"],
    "Medication name",
    "Medication name can only contain letters, numbers, spaces, hyphens, parentheses, commas, and periods",
)
_validate_dosage = validate_pattern(
    PATTERNS["dosage"],
    "Dosage",
    "Dosage can only contain letters, numbers, spaces, hyphens, parentheses, commas, periods, and forward slashes",
)
_validate_frequency = validate_pattern(
    PATTERNS["dosage"],
    "Frequency",
    "Frequency can only contain letters, numbers, spaces, hyphens, parentheses, commas, periods, and forward slashes",
)
_validate_start_date = validate_not_future("Start date")


def _strip(value):
    return value.strip() if isinstance(value, str) else value


class _MedicationFields(BaseValidationModel):
    """Field rules shared by create and update."""

    @field_validator("name", "dosage", "frequency", mode="before", check_fields=False)
    @classmethod
    def strip_text(cls, v):
        return _strip(v)

    @field_validator("name", check_fields=False)
    @classmethod
    def check_name(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _validate_name(v)

    @field_validator("dosage", check_fields=False)
    @classmethod
    def check_dosage(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _validate_dosage(v)

    @field_validator("frequency", check_fields=False)
    @classmethod
    def check_frequency(cls, v: Optional[str]) -> Optional[str]:
        return v if v is None else _validate_frequency(v)

    @field_validator("start_date", check_fields=False)
    @classmethod
    def check_start_date(cls, v: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
        return _validate_start_date(v)


class MedicationCreate(_MedicationFields):
    name: str = Field(..., min_length=2, max_length=200)
    dosage: str = Field(..., min_length=1, max_length=100)
    frequency: str = Field(..., min_length=1, max_length=100)
    start_date: IsoDateTime
    end_date: OptionalIsoDateTime = None

    @model_validator(mode="after")
    def check_period(self):
        if self.end_date is not None and self.end_date <= self.start_date:
            raise ValueError("End date must be after start date")
        return self


class MedicationUpdate(_MedicationFields):
    """
    Partial update. ``endDate: null`` clears the end date; the other fields
    cannot be cleared. The period is re-checked against the stored record.
    """

    name: Optional[str] = Field(None, min_length=2, max_length=200)
    dosage: Optional[str] = Field(None, min_length=1, max_length=100)
    frequency: Optional[str] = Field(None, min_length=1, max_length=100)
    start_date: OptionalIsoDateTime = None
    end_date: OptionalIsoDateTime = None

    @field_validator("name", "dosage", "frequency", "start_date")
    @classmethod
    def not_null(cls, v):
        if v is None:
            raise ValueError("Value cannot be null")
        return v
