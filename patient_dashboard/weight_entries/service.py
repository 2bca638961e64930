"""
Weight Entry Service

Owner-scoped weight entry operations and the period summary.
"""

import datetime
import enum
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from patient_dashboard.common.auth.policies import owner_scope
from patient_dashboard.common.auth.user import AuthenticatedUser
from patient_dashboard.common.db.repository import Page
from patient_dashboard.common.exceptions import ConflictError
from patient_dashboard.common.logger import get_logger, log_execution_time
from patient_dashboard.common.pagination import PageParams, SortParams
from patient_dashboard.common.utils import utcnow
from patient_dashboard.weight_entries.models import WeightEntry
from patient_dashboard.weight_entries.repository import WeightEntryFilters, WeightEntryRepository
from patient_dashboard.weight_entries.schemas import WeightEntryCreate, WeightEntryUpdate

logger = get_logger(__name__)


class SummaryPeriod(str, enum.Enum):
    """Look-back windows for the weight summary."""

    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    YEAR = "year"

    def start(self, now: datetime.datetime) -> datetime.datetime:
        """
        Start boundary of the period ending at ``now``.

        Week is a rolling seven days; the others start at the beginning of
        the current calendar month, quarter or year.
        """
        if self is SummaryPeriod.WEEK:
            return now - datetime.timedelta(days=7)
        if self is SummaryPeriod.MONTH:
            return datetime.datetime(now.year, now.month, 1)
        if self is SummaryPeriod.QUARTER:
            return datetime.datetime(now.year, (now.month - 1) // 3 * 3 + 1, 1)
        return datetime.datetime(now.year, 1, 1)


def _round(value: float) -> float:
    return round(value, 2)


@dataclass
class WeightSummary:
    """Aggregate view of the entries in one period."""

    period: SummaryPeriod
    start: datetime.datetime
    entries: List[WeightEntry] = field(default_factory=list)

    @property
    def total_entries(self) -> int:
        return len(self.entries)

    @property
    def average_weight(self) -> float:
        if not self.entries:
            return 0.0
        return _round(sum(entry.weight for entry in self.entries) / len(self.entries))

    @property
    def weight_change(self) -> float:
        if not self.entries:
            return 0.0
        return _round(self.entries[-1].weight - self.entries[0].weight)

    @property
    def weight_change_percentage(self) -> float:
        if not self.entries or self.entries[0].weight <= 0:
            return 0.0
        change = self.entries[-1].weight - self.entries[0].weight
        return _round(change / self.entries[0].weight * 100)

    def to_dict(self) -> Dict[str, Any]:
        summary: Dict[str, Any] = {
            "period": self.period.value,
            "totalEntries": self.total_entries,
            "averageWeight": self.average_weight,
            "weightChange": self.weight_change,
            "weightChangePercentage": self.weight_change_percentage,
            "entries": [entry.to_public_dict() for entry in self.entries],
        }
        if self.entries:
            summary["firstEntry"] = self.entries[0].to_public_dict()
            summary["lastEntry"] = self.entries[-1].to_public_dict()
        return summary


class WeightEntryService:
    """Service for weight entry operations."""

    def __init__(
        self,
        repository: WeightEntryRepository,
        clock: Callable[[], datetime.datetime] = utcnow,
    ):
        """
        Initialize the service.

        Args:
            repository: Weight entry repository for this request
            clock: Returns the current naive UTC time; replaceable in tests
        """
        self.repository = repository
        self._clock = clock

    async def list_entries(
        self,
        user: AuthenticatedUser,
        page: PageParams,
        sort: SortParams,
        filters: WeightEntryFilters,
    ) -> Page[WeightEntry]:
        return await self.repository.list(owner_scope(user), page, sort, filters)

    async def get_entry(self, user: AuthenticatedUser, entry_id: str) -> WeightEntry:
        return await self.repository.get(entry_id, owner_scope(user))

    async def create_entry(self, user: AuthenticatedUser, data: WeightEntryCreate) -> WeightEntry:
        """
        Record a weight for the caller.

        A missing ``recordedAt`` means now.

        Raises:
            ConflictError: If the caller already has an entry at that timestamp
        """
        values = data.model_dump()
        if values.get("recorded_at") is None:
            values["recorded_at"] = self._clock()

        if await self.repository.exists_for_date(user.id, values["recorded_at"]):
            raise ConflictError(WeightEntryRepository.conflict_message)

        entry = await self.repository.create(user.id, values)
        logger.info(f"User {user.id} recorded weight entry {entry.id}")
        return entry

    async def update_entry(
        self,
        user: AuthenticatedUser,
        entry_id: str,
        data: WeightEntryUpdate,
    ) -> WeightEntry:
        return await self.repository.update(entry_id, owner_scope(user), data.changes())

    async def delete_entry(self, user: AuthenticatedUser, entry_id: str) -> None:
        await self.repository.delete(entry_id, owner_scope(user))

    @log_execution_time(logger)
    async def summary(
        self,
        user: AuthenticatedUser,
        period: SummaryPeriod = SummaryPeriod.MONTH,
        now: Optional[datetime.datetime] = None,
    ) -> WeightSummary:
        """
        Summarize the caller's own entries for the period.

        Args:
            user: The caller; admins get their own summary too
            period: Look-back window
            now: End of the window, defaults to the current time

        Returns:
            The summary, zeroed when the period has no entries
        """
        now = now or self._clock()
        start = period.start(now)
        entries = await self.repository.entries_between(user.id, start, now)
        return WeightSummary(period=period, start=start, entries=entries)
