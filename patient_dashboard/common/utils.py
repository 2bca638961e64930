"""
Common utility functions for the patient dashboard backend.

Timestamps are stored as naive UTC datetimes; these helpers are the only place
that converts between client-supplied ISO-8601 strings and that representation.
"""

import datetime
import uuid
from typing import Any, Optional


def utcnow() -> datetime.datetime:
    """Current UTC time as a naive datetime."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)


def to_naive_utc(value: datetime.datetime) -> datetime.datetime:
    """
    Normalize a datetime to naive UTC.

    Aware datetimes are converted to UTC first; naive ones are assumed to
    already be UTC.
    """
    if value.tzinfo is not None:
        value = value.astimezone(datetime.timezone.utc).replace(tzinfo=None)
    return value


def parse_datetime(value: Any) -> Any:
    """
    Parse an ISO-8601 date or datetime into a naive UTC datetime.

    Accepts ``2024-01-01``, ``2024-01-01T08:30:00`` and offsets including a
    trailing ``Z``. Values that are not strings or dates are returned as-is so
    pydantic can report the type error.

    Raises:
        ValueError: If the string is not a valid ISO-8601 value
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime.datetime):
        return to_naive_utc(value)
    if isinstance(value, datetime.date):
        return datetime.datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        try:
            parsed = datetime.datetime.fromisoformat(text)
        except ValueError:
            raise ValueError(f"Invalid ISO 8601 date: {value}")
        return to_naive_utc(parsed)
    return value


def isoformat(value: Optional[datetime.datetime]) -> Optional[str]:
    """Render a stored naive UTC datetime as ISO-8601 with a ``Z`` suffix."""
    if value is None:
        return None
    return to_naive_utc(value).isoformat(timespec="milliseconds") + "Z"


def new_id() -> str:
    """Generate a store identifier."""
    return str(uuid.uuid4())


def normalize_id(value: Any) -> str:
    """
    Return the canonical string form of a store identifier.

    Raises:
        ValueError: If the value is not a well-formed identifier
    """
    if isinstance(value, uuid.UUID):
        return str(value)
    if not isinstance(value, str):
        raise ValueError(f"Invalid identifier: {value!r}")
    return str(uuid.UUID(value))
