"""
Shipment Service
"""

from patient_dashboard.common.auth.policies import owner_scope
from patient_dashboard.common.auth.user import AuthenticatedUser
from patient_dashboard.common.db.repository import Page
from patient_dashboard.common.logger import get_logger
from patient_dashboard.common.pagination import PageParams, SortParams
from patient_dashboard.shipments.models import Shipment
from patient_dashboard.shipments.repository import ShipmentFilters, ShipmentRepository
from patient_dashboard.shipments.schemas import ShipmentCreate, ShipmentUpdate

logger = get_logger(__name__)


class ShipmentService:
    """Owner-scoped shipment operations. Admins act on every owner's records."""

    def __init__(self, repository: ShipmentRepository):
        self.repository = repository

    async def list_shipments(
        self,
        user: AuthenticatedUser,
        page: PageParams,
        sort: SortParams,
        filters: ShipmentFilters,
    ) -> Page[Shipment]:
        return await self.repository.list(owner_scope(user), page, sort, filters)

    async def get_shipment(self, user: AuthenticatedUser, shipment_id: str) -> Shipment:
        return await self.repository.get(shipment_id, owner_scope(user))

    async def create_shipment(self, user: AuthenticatedUser, data: ShipmentCreate) -> Shipment:
        shipment = await self.repository.create(user.id, data.to_values())
        logger.info(f"User {user.id} created shipment {shipment.id} with {len(shipment.items)} items")
        return shipment

    async def update_shipment(
        self,
        user: AuthenticatedUser,
        shipment_id: str,
        data: ShipmentUpdate,
    ) -> Shipment:
        shipment = await self.repository.update(shipment_id, owner_scope(user), data.to_values())
        if data.status is not None:
            logger.info(f"Shipment {shipment.id} status set to {shipment.status} by {user.id}")
        return shipment

    async def delete_shipment(self, user: AuthenticatedUser, shipment_id: str) -> None:
        await self.repository.delete(shipment_id, owner_scope(user))
