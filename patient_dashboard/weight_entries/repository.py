"""
Weight Entry Repository
"""

import datetime
from dataclasses import dataclass, field
from typing import List, Optional

from sqlalchemy import Select, select

from patient_dashboard.common.auth.user import IdentityId
from patient_dashboard.common.db.repository import OwnedRepository
from patient_dashboard.common.exceptions import ValidationFailedError
from patient_dashboard.common.pagination import DateRange
from patient_dashboard.weight_entries.models import WeightEntry


@dataclass(frozen=True)
class WeightEntryFilters:
    """List filters for weight entries."""

    recorded: DateRange = field(default_factory=DateRange)
    min_weight: Optional[float] = None
    max_weight: Optional[float] = None

    def __post_init__(self):
        if (
            self.min_weight is not None
            and self.max_weight is not None
            and self.max_weight < self.min_weight
        ):
            message = "maxWeight must not be less than minWeight"
            raise ValidationFailedError(message, errors=[{"field": "maxWeight", "message": message}])


class WeightEntryRepository(OwnedRepository[WeightEntry]):
    """Repository for weight entries."""

    model = WeightEntry
    resource_name = "Weight entry"
    sort_fields = {
        "recordedAt": "recorded_at",
        "weight": "weight",
        "createdAt": "created_at",
    }
    conflict_message = "Weight entry already exists for this date"

    def apply_filters(self, stmt: Select, filters: WeightEntryFilters) -> Select:
        if filters.recorded.start is not None:
            stmt = stmt.where(WeightEntry.recorded_at >= filters.recorded.start)
        if filters.recorded.end is not None:
            stmt = stmt.where(WeightEntry.recorded_at <= filters.recorded.end)
        if filters.min_weight is not None:
            stmt = stmt.where(WeightEntry.weight >= filters.min_weight)
        if filters.max_weight is not None:
            stmt = stmt.where(WeightEntry.weight <= filters.max_weight)
        return stmt

    async def exists_for_date(self, owner_id: IdentityId, recorded_at: datetime.datetime) -> bool:
        """Check whether the owner already has an entry at this timestamp."""
        stmt = select(WeightEntry.id).where(
            WeightEntry.user_id == owner_id,
            WeightEntry.recorded_at == recorded_at,
        )
        with self._translate_errors("lookup"):
            return (await self.session.execute(stmt)).first() is not None

    async def entries_between(
        self,
        owner_id: IdentityId,
        start: datetime.datetime,
        end: datetime.datetime,
    ) -> List[WeightEntry]:
        """All of the owner's entries in [start, end], oldest first."""
        stmt = (
            select(WeightEntry)
            .where(
                WeightEntry.user_id == owner_id,
                WeightEntry.recorded_at >= start,
                WeightEntry.recorded_at <= end,
            )
            .order_by(WeightEntry.recorded_at.asc(), WeightEntry.id.asc())
        )
        with self._translate_errors("summary"):
            return list((await self.session.execute(stmt)).scalars().all())
