"""
Medication Repository
"""

from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import Select, or_

from patient_dashboard.common.db.repository import OwnedRepository
from patient_dashboard.common.exceptions import ValidationFailedError
from patient_dashboard.common.pagination import DateRange
from patient_dashboard.common.utils import utcnow
from patient_dashboard.medications.models import Medication


@dataclass(frozen=True)
class MedicationFilters:
    """List filters for medications."""

    started: DateRange = field(default_factory=DateRange)
    active: Optional[bool] = None
    search: Optional[str] = None


def _escape_like(term: str) -> str:
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


class MedicationRepository(OwnedRepository[Medication]):
    """Repository for medications."""

    model = Medication
    resource_name = "Medication"
    sort_fields = {
        "startDate": "start_date",
        "name": "name",
        "endDate": "end_date",
        "createdAt": "created_at",
    }

    def apply_filters(self, stmt: Select, filters: MedicationFilters) -> Select:
        if filters.started.start is not None:
            stmt = stmt.where(Medication.start_date >= filters.started.start)
        if filters.started.end is not None:
            stmt = stmt.where(Medication.start_date <= filters.started.end)

        if filters.active is not None:
            now = utcnow()
            if filters.active:
                stmt = stmt.where(or_(Medication.end_date.is_(None), Medication.end_date > now))
            else:
                stmt = stmt.where(Medication.end_date.is_not(None), Medication.end_date <= now)

        if filters.search:
            pattern = f"%{_escape_like(filters.search)}%"
            stmt = stmt.where(Medication.name.ilike(pattern, escape="\\"))

        return stmt

    def validate_record(self, record: Medication) -> None:
        if record.end_date is not None and record.end_date <= record.start_date:
            message = "End date must be after start date"
            raise ValidationFailedError(message, errors=[{"field": "endDate", "message": message}])
