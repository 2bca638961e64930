"""
Tests for the weight summary periods and aggregates.
"""

import datetime
import uuid

import pytest

from patient_dashboard.common.auth.user import AuthenticatedUser, UserRole, to_identity_id
from patient_dashboard.weight_entries.models import WeightEntry
from patient_dashboard.weight_entries.service import SummaryPeriod, WeightEntryService, WeightSummary

NOW = datetime.datetime(2024, 5, 20, 15, 30, 0)


@pytest.mark.parametrize("period, expected", [
    (SummaryPeriod.WEEK, datetime.datetime(2024, 5, 13, 15, 30, 0)),
    (SummaryPeriod.MONTH, datetime.datetime(2024, 5, 1)),
    (SummaryPeriod.QUARTER, datetime.datetime(2024, 4, 1)),
    (SummaryPeriod.YEAR, datetime.datetime(2024, 1, 1)),
])
def test_period_start(period, expected):
    assert period.start(NOW) == expected


@pytest.mark.parametrize("month, quarter_start", [(1, 1), (3, 1), (4, 4), (6, 4), (9, 7), (10, 10), (12, 10)])
def test_quarter_boundaries(month, quarter_start):
    assert SummaryPeriod.QUARTER.start(datetime.datetime(2024, month, 15)).month == quarter_start


def entry(weight, day):
    return WeightEntry(
        id=str(uuid.uuid4()),
        user_id=str(uuid.uuid4()),
        weight=weight,
        recorded_at=datetime.datetime(2024, 5, day),
        created_at=NOW,
        updated_at=NOW,
    )


def test_aggregates_are_rounded():
    summary = WeightSummary(
        period=SummaryPeriod.MONTH,
        start=datetime.datetime(2024, 5, 1),
        entries=[entry(81.333, 2), entry(80.0, 9), entry(79.111, 16)],
    )

    assert summary.total_entries == 3
    assert summary.average_weight == 80.15
    assert summary.weight_change == -2.22
    assert summary.weight_change_percentage == -2.73
    assert summary.to_dict()["firstEntry"]["weight"] == 81.333


def test_empty_summary_is_zeroed():
    data = WeightSummary(period=SummaryPeriod.YEAR, start=datetime.datetime(2024, 1, 1)).to_dict()

    assert data["totalEntries"] == 0
    assert data["averageWeight"] == 0
    assert data["weightChange"] == 0
    assert data["weightChangePercentage"] == 0
    assert "firstEntry" not in data


class RecordingRepository:
    def __init__(self, entries):
        self.entries = entries
        self.calls = []

    async def entries_between(self, owner_id, start, end):
        self.calls.append((owner_id, start, end))
        return self.entries


@pytest.mark.asyncio
async def test_summary_always_uses_callers_own_entries():
    admin = AuthenticatedUser(id=to_identity_id(str(uuid.uuid4())), email="admin@example.com", role=UserRole.ADMIN)
    repository = RecordingRepository([entry(90, 10)])
    service = WeightEntryService(repository, clock=lambda: NOW)

    summary = await service.summary(admin, SummaryPeriod.MONTH)

    assert repository.calls == [(admin.id, datetime.datetime(2024, 5, 1), NOW)]
    assert summary.total_entries == 1
