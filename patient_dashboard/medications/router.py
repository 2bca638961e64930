"""
Medication Router
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from patient_dashboard.api import respond
from patient_dashboard.common.auth.middleware import require_auth
from patient_dashboard.common.auth.user import AuthenticatedUser
from patient_dashboard.common.db.session import get_session
from patient_dashboard.common.pagination import PageParams, SortParams, get_page_params, parse_date_range
from patient_dashboard.medications.repository import MedicationFilters, MedicationRepository
from patient_dashboard.medications.schemas import MedicationCreate, MedicationUpdate
from patient_dashboard.medications.service import MedicationService

router = APIRouter()


def get_medication_service(session: AsyncSession = Depends(get_session)) -> MedicationService:
    return MedicationService(MedicationRepository(session))


@router.get("")
async def list_medications(
    page: PageParams = Depends(get_page_params),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    active: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    user: AuthenticatedUser = Depends(require_auth),
    service: MedicationService = Depends(get_medication_service),
):
    sort = SortParams.parse(sort_by, sort_order, MedicationRepository.allowed_sort_fields())
    filters = MedicationFilters(
        started=parse_date_range(start_date, end_date),
        active=active,
        search=search.strip() if search else None,
    )
    result = await service.list_medications(user, page, sort, filters)
    return respond(
        [medication.to_public_dict() for medication in result.items],
        "Medications retrieved successfully",
        pagination=result.meta,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_medication(
    body: MedicationCreate,
    user: AuthenticatedUser = Depends(require_auth),
    service: MedicationService = Depends(get_medication_service),
):
    medication = await service.create_medication(user, body)
    return respond(medication.to_public_dict(), "Medication created successfully", status.HTTP_201_CREATED)


@router.get("/{medication_id}")
async def get_medication(
    medication_id: str,
    user: AuthenticatedUser = Depends(require_auth),
    service: MedicationService = Depends(get_medication_service),
):
    medication = await service.get_medication(user, medication_id)
    return respond(medication.to_public_dict(), "Medication retrieved successfully")


@router.put("/{medication_id}")
async def update_medication(
    medication_id: str,
    body: MedicationUpdate,
    user: AuthenticatedUser = Depends(require_auth),
    service: MedicationService = Depends(get_medication_service),
):
    medication = await service.update_medication(user, medication_id, body)
    return respond(medication.to_public_dict(), "Medication updated successfully")


@router.delete("/{medication_id}")
async def delete_medication(
    medication_id: str,
    user: AuthenticatedUser = Depends(require_auth),
    service: MedicationService = Depends(get_medication_service),
):
    await service.delete_medication(user, medication_id)
    return respond(message="Medication deleted successfully")
