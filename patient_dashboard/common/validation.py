"""
Data Validation Utilities

This module provides the request validation building blocks shared by every
resource:
1. Regex patterns for common fields
2. Reusable validator functions for pydantic field validators
3. The base request model with camelCase aliases
"""

import datetime
import re
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from patient_dashboard.common.utils import parse_datetime, utcnow

# Regex patterns for common validation
PATTERNS = {
    "email": r"^[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+$",
    "password": r"^(?=.*[a-z])(?=.*[A-Z])(?=.*\d).{8,128}$",
    "name": r"^[a-zA-Z\s'-]+$",
    "medication_name": r"^[a-zA-Z0-9\s\-(),.]+$",
    "dosage": r"^[a-zA-Z0-9\s\-(),./]+$",
    "item_name": r"^[a-zA-Z0-9\s\-(),.&]+$",
    "tracking_number": r"^[a-zA-Z0-9-]+$",
}

MIN_AGE_YEARS = 13
MAX_AGE_YEARS = 120


def validate_pattern(pattern: str, description: str = "value", message: Optional[str] = None):
    """
    Create a validator function for pattern validation.

    Args:
        pattern: Regex pattern to validate against
        description: Description of the value for error messages
        message: Full error message overriding the default

    Returns:
        Validator function
    """
    compiled_pattern = re.compile(pattern)

    def validator_func(value: str) -> str:
        if not isinstance(value, str):
            raise ValueError(f"{description} must be a string")

        if not compiled_pattern.match(value):
            raise ValueError(message or f"{description} has invalid format")

        return value

    return validator_func


def validate_length(min_length: Optional[int] = None, max_length: Optional[int] = None, description: str = "value"):
    """
    Create a validator function for length validation.

    Args:
        min_length: Minimum length
        max_length: Maximum length
        description: Description of the value for error messages

    Returns:
        Validator function
    """
    def validator_func(value: str) -> str:
        length = len(value)

        if min_length is not None and length < min_length:
            raise ValueError(f"{description} must be at least {min_length} characters")

        if max_length is not None and length > max_length:
            raise ValueError(f"{description} must be at most {max_length} characters")

        return value

    return validator_func


def validate_not_future(description: str = "Date"):
    """
    Create a validator rejecting timestamps later than now.

    Args:
        description: Description of the value for error messages

    Returns:
        Validator function
    """
    def validator_func(value: Optional[datetime.datetime]) -> Optional[datetime.datetime]:
        if value is not None and value > utcnow():
            raise ValueError(f"{description} cannot be in the future")
        return value

    return validator_func


def parse_iso_datetime(value: Any) -> Any:
    """Before-validator accepting ISO-8601 dates and datetimes."""
    return parse_datetime(value)


def age_on(date_of_birth: datetime.date, today: datetime.date) -> int:
    """Whole years between a birth date and a reference date."""
    years = today.year - date_of_birth.year
    if (today.month, today.day) < (date_of_birth.month, date_of_birth.day):
        years -= 1
    return years


def validate_date_of_birth(value: Union[datetime.date, datetime.datetime]) -> datetime.date:
    """Require an age between the supported bounds."""
    if isinstance(value, datetime.datetime):
        value = value.date()
    age = age_on(value, utcnow().date())
    if age < MIN_AGE_YEARS:
        raise ValueError(f"User must be at least {MIN_AGE_YEARS} years old")
    if age > MAX_AGE_YEARS:
        raise ValueError("Invalid date of birth")
    return value


# Predefined validators for common patterns
validate_email = validate_pattern(PATTERNS["email"], "Email", "Please provide a valid email address")
validate_password = validate_pattern(
    PATTERNS["password"],
    "Password",
    "Password must be 8-128 characters and contain an uppercase letter, a lowercase letter and a number",
)
validate_name = validate_pattern(
    PATTERNS["name"],
    "Name",
    "Name can only contain letters, spaces, hyphens, and apostrophes",
)


class BaseValidationModel(BaseModel):
    """
    Base model for request bodies.

    Fields are declared in snake_case and accepted in camelCase. Unknown
    fields are dropped, so a client-supplied owner id never reaches a model.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )

    def changes(self) -> dict:
        """Fields the client actually sent, by attribute name."""
        return self.model_dump(exclude_unset=True)
