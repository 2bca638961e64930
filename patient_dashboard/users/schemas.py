"""
Authentication Request Models
"""

import datetime
from typing import Optional

from pydantic import AliasChoices, Field, field_validator

from patient_dashboard.common.auth.user import UserRole
from patient_dashboard.common.validation import (
    BaseValidationModel,
    validate_date_of_birth,
    validate_email,
    validate_length,
    validate_name,
    validate_password
)

_validate_email_length = validate_length(5, 255, "Email")
_validate_name_length = validate_length(2, 100, "Name")


class RegisterRequest(BaseValidationModel):
    email: str
    password: str = Field(..., max_length=128)
    name: str
    date_of_birth: datetime.date = Field(..., validation_alias=AliasChoices("dob", "dateOfBirth"))
    role: Optional[UserRole] = None

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return validate_email(_validate_email_length(v.strip().lower()))

    @field_validator("password")
    @classmethod
    def check_password(cls, v: str) -> str:
        return validate_password(v)

    @field_validator("name")
    @classmethod
    def check_name(cls, v: str) -> str:
        return validate_name(_validate_name_length(v.strip()))

    @field_validator("date_of_birth")
    @classmethod
    def check_date_of_birth(cls, v: datetime.date) -> datetime.date:
        return validate_date_of_birth(v)


class LoginRequest(BaseValidationModel):
    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.strip().lower()


class RefreshRequest(BaseValidationModel):
    refresh_token: str = Field(..., min_length=1)
