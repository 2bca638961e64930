"""
Weight Entry Router

CRUD endpoints for the caller's weight entries and the period summary.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from patient_dashboard.api import respond
from patient_dashboard.common.auth.middleware import require_auth
from patient_dashboard.common.auth.user import AuthenticatedUser
from patient_dashboard.common.db.session import get_session
from patient_dashboard.common.exceptions import ValidationFailedError
from patient_dashboard.common.pagination import PageParams, SortParams, get_page_params, parse_date_range
from patient_dashboard.weight_entries.repository import WeightEntryFilters, WeightEntryRepository
from patient_dashboard.weight_entries.schemas import WeightEntryCreate, WeightEntryUpdate
from patient_dashboard.weight_entries.service import SummaryPeriod, WeightEntryService

router = APIRouter()


def get_weight_entry_service(session: AsyncSession = Depends(get_session)) -> WeightEntryService:
    return WeightEntryService(WeightEntryRepository(session))


@router.get("")
async def list_weight_entries(
    page: PageParams = Depends(get_page_params),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    min_weight: Optional[float] = Query(None, alias="minWeight", ge=0),
    max_weight: Optional[float] = Query(None, alias="maxWeight", ge=0),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    user: AuthenticatedUser = Depends(require_auth),
    service: WeightEntryService = Depends(get_weight_entry_service),
):
    sort = SortParams.parse(sort_by, sort_order, WeightEntryRepository.allowed_sort_fields())
    filters = WeightEntryFilters(
        recorded=parse_date_range(start_date, end_date),
        min_weight=min_weight,
        max_weight=max_weight,
    )
    result = await service.list_entries(user, page, sort, filters)
    return respond(
        [entry.to_public_dict() for entry in result.items],
        "Weight entries retrieved successfully",
        pagination=result.meta,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_weight_entry(
    body: WeightEntryCreate,
    user: AuthenticatedUser = Depends(require_auth),
    service: WeightEntryService = Depends(get_weight_entry_service),
):
    entry = await service.create_entry(user, body)
    return respond(entry.to_public_dict(), "Weight entry created successfully", status.HTTP_201_CREATED)


# Declared before "/{entry_id}" so "stats" is not taken for an id
@router.get("/stats/summary")
async def weight_summary(
    period: str = Query(SummaryPeriod.MONTH.value),
    user: AuthenticatedUser = Depends(require_auth),
    service: WeightEntryService = Depends(get_weight_entry_service),
):
    try:
        summary_period = SummaryPeriod(period.lower())
    except ValueError:
        allowed = ", ".join(p.value for p in SummaryPeriod)
        message = f"Period must be one of: {allowed}"
        raise ValidationFailedError(message, errors=[{"field": "period", "message": message}])

    summary = await service.summary(user, summary_period)
    if summary.total_entries == 0:
        return respond(summary.to_dict(), "No weight entries found for the specified period")
    return respond(summary.to_dict(), "Weight statistics retrieved successfully")


@router.get("/{entry_id}")
async def get_weight_entry(
    entry_id: str,
    user: AuthenticatedUser = Depends(require_auth),
    service: WeightEntryService = Depends(get_weight_entry_service),
):
    entry = await service.get_entry(user, entry_id)
    return respond(entry.to_public_dict(), "Weight entry retrieved successfully")


@router.put("/{entry_id}")
async def update_weight_entry(
    entry_id: str,
    body: WeightEntryUpdate,
    user: AuthenticatedUser = Depends(require_auth),
    service: WeightEntryService = Depends(get_weight_entry_service),
):
    entry = await service.update_entry(user, entry_id, body)
    return respond(entry.to_public_dict(), "Weight entry updated successfully")


@router.delete("/{entry_id}")
async def delete_weight_entry(
    entry_id: str,
    user: AuthenticatedUser = Depends(require_auth),
    service: WeightEntryService = Depends(get_weight_entry_service),
):
    await service.delete_entry(user, entry_id)
    return respond(message="Weight entry deleted successfully")
