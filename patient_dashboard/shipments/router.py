"""
Shipment Router

When SHIPMENTS_ADMIN_ONLY is set every endpoint requires the admin role.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from patient_dashboard.api import respond
from patient_dashboard.common.auth.middleware import require_auth
from patient_dashboard.common.auth.policies import check_role
from patient_dashboard.common.auth.user import AuthenticatedUser, UserRole
from patient_dashboard.common.db.session import get_session
from patient_dashboard.common.pagination import PageParams, SortParams, get_page_params, parse_date_range
from patient_dashboard.shipments.models import ShipmentStatus
from patient_dashboard.shipments.repository import ShipmentFilters, ShipmentRepository
from patient_dashboard.shipments.schemas import ShipmentCreate, ShipmentUpdate
from patient_dashboard.shipments.service import ShipmentService

router = APIRouter()


async def require_shipment_access(
    request: Request,
    user: AuthenticatedUser = Depends(require_auth),
) -> AuthenticatedUser:
    """Authenticated caller, restricted to admins when configured."""
    if request.app.state.settings.SHIPMENTS_ADMIN_ONLY:
        check_role(user, {UserRole.ADMIN})
    return user


def get_shipment_service(session: AsyncSession = Depends(get_session)) -> ShipmentService:
    return ShipmentService(ShipmentRepository(session))


@router.get("")
async def list_shipments(
    page: PageParams = Depends(get_page_params),
    shipment_status: Optional[ShipmentStatus] = Query(None, alias="status"),
    start_date: Optional[str] = Query(None, alias="startDate"),
    end_date: Optional[str] = Query(None, alias="endDate"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    user: AuthenticatedUser = Depends(require_shipment_access),
    service: ShipmentService = Depends(get_shipment_service),
):
    sort = SortParams.parse(sort_by, sort_order, ShipmentRepository.allowed_sort_fields())
    filters = ShipmentFilters(
        status=shipment_status,
        created=parse_date_range(start_date, end_date),
    )
    result = await service.list_shipments(user, page, sort, filters)
    return respond(
        [shipment.to_public_dict() for shipment in result.items],
        "Shipments retrieved successfully",
        pagination=result.meta,
    )


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_shipment(
    body: ShipmentCreate,
    user: AuthenticatedUser = Depends(require_shipment_access),
    service: ShipmentService = Depends(get_shipment_service),
):
    shipment = await service.create_shipment(user, body)
    return respond(shipment.to_public_dict(), "Shipment created successfully", status.HTTP_201_CREATED)


@router.get("/{shipment_id}")
async def get_shipment(
    shipment_id: str,
    user: AuthenticatedUser = Depends(require_shipment_access),
    service: ShipmentService = Depends(get_shipment_service),
):
    shipment = await service.get_shipment(user, shipment_id)
    return respond(shipment.to_public_dict(), "Shipment retrieved successfully")


@router.put("/{shipment_id}")
async def update_shipment(
    shipment_id: str,
    body: ShipmentUpdate,
    user: AuthenticatedUser = Depends(require_shipment_access),
    service: ShipmentService = Depends(get_shipment_service),
):
    shipment = await service.update_shipment(user, shipment_id, body)
    return respond(shipment.to_public_dict(), "Shipment updated successfully")


@router.delete("/{shipment_id}")
async def delete_shipment(
    shipment_id: str,
    user: AuthenticatedUser = Depends(require_shipment_access),
    service: ShipmentService = Depends(get_shipment_service),
):
    await service.delete_shipment(user, shipment_id)
    return respond(message="Shipment deleted successfully")
