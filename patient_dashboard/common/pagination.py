"""
Pagination, Sorting and Date-Range Parameters

Query parameter types shared by every list endpoint, and the pagination
metadata returned alongside list results.
"""

import datetime
import math
from dataclasses import dataclass
from typing import Any, Dict, Optional, Sequence

from fastapi import Query

from patient_dashboard.common.exceptions import ValidationFailedError
from patient_dashboard.common.utils import parse_datetime

DEFAULT_PAGE = 1
DEFAULT_LIMIT = 50
MAX_LIMIT = 100

SORT_ASC = "asc"
SORT_DESC = "desc"


def _field_error(field: str, message: str) -> ValidationFailedError:
    return ValidationFailedError(message, errors=[{"field": field, "message": message}])


@dataclass(frozen=True)
class PageParams:
    """1-based page number and page size."""

    page: int = DEFAULT_PAGE
    limit: int = DEFAULT_LIMIT

    def __post_init__(self):
        if self.page < 1:
            raise _field_error("page", "Page must be a positive integer")
        if not 1 <= self.limit <= MAX_LIMIT:
            raise _field_error("limit", f"Limit must be between 1 and {MAX_LIMIT}")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(frozen=True)
class SortParams:
    """
    Sort field and direction.

    Attributes:
        field: Public (camelCase) field name, checked against an allow-list
        order: "asc" or "desc"
    """
    field: str
    order: str = SORT_DESC

    @classmethod
    def parse(
        cls,
        field: Optional[str],
        order: Optional[str],
        allowed: Sequence[str],
    ) -> "SortParams":
        """
        Build sort parameters, defaulting to the first allowed field.

        Raises:
            ValidationFailedError: If the field is not allowed or the order is unknown
        """
        field = field or allowed[0]
        if field not in allowed:
            raise _field_error("sortBy", f"Sort field must be one of: {', '.join(allowed)}")
        order = (order or SORT_DESC).lower()
        if order not in (SORT_ASC, SORT_DESC):
            raise _field_error("sortOrder", "Sort order must be 'asc' or 'desc'")
        return cls(field=field, order=order)

    @property
    def descending(self) -> bool:
        return self.order == SORT_DESC


@dataclass(frozen=True)
class DateRange:
    """Inclusive start and end bounds; either may be open."""

    start: Optional[datetime.datetime] = None
    end: Optional[datetime.datetime] = None

    def __post_init__(self):
        if self.start is not None and self.end is not None and self.end < self.start:
            raise _field_error("endDate", "End date must not be before start date")

    @property
    def is_open(self) -> bool:
        return self.start is None and self.end is None


@dataclass(frozen=True)
class PaginationMeta:
    """Pagination metadata computed from the total count."""

    page: int
    limit: int
    total: int

    @classmethod
    def build(cls, params: PageParams, total: int) -> "PaginationMeta":
        return cls(page=params.page, limit=params.limit, total=total)

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.total else 0

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_prev(self) -> bool:
        return self.page > 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "page": self.page,
            "limit": self.limit,
            "total": self.total,
            "totalPages": self.total_pages,
            "hasNext": self.has_next,
            "hasPrev": self.has_prev,
        }


def get_page_params(
    page: int = Query(DEFAULT_PAGE, ge=1, description="1-based page number"),
    limit: int = Query(DEFAULT_LIMIT, ge=1, le=MAX_LIMIT, description="Page size"),
) -> PageParams:
    """FastAPI dependency reading ``page`` and ``limit``."""
    return PageParams(page=page, limit=limit)


def _parse_bound(field: str, value: Optional[str], end_of_day: bool) -> Optional[datetime.datetime]:
    if value is None or not value.strip():
        return None
    try:
        parsed = parse_datetime(value)
    except ValueError:
        raise _field_error(field, f"{field} must be a valid ISO 8601 date")
    # A bare date as the upper bound covers that whole day
    if end_of_day and len(value.strip()) == 10:
        parsed = parsed + datetime.timedelta(days=1) - datetime.timedelta(microseconds=1)
    return parsed


def parse_date_range(start: Optional[str], end: Optional[str]) -> DateRange:
    """
    Build an inclusive date range from ``startDate``/``endDate`` query values.

    Raises:
        ValidationFailedError: If a bound is malformed or the range is inverted
    """
    return DateRange(
        start=_parse_bound("startDate", start, end_of_day=False),
        end=_parse_bound("endDate", end, end_of_day=True),
    )
