"""
Medication Service
"""

from patient_dashboard.common.auth.policies import owner_scope
from patient_dashboard.common.auth.user import AuthenticatedUser
from patient_dashboard.common.db.repository import Page
from patient_dashboard.common.logger import get_logger
from patient_dashboard.common.pagination import PageParams, SortParams
from patient_dashboard.medications.models import Medication
from patient_dashboard.medications.repository import MedicationFilters, MedicationRepository
from patient_dashboard.medications.schemas import MedicationCreate, MedicationUpdate

logger = get_logger(__name__)


class MedicationService:
    """Owner-scoped medication operations. Admins act on every owner's records."""

    def __init__(self, repository: MedicationRepository):
        self.repository = repository

    async def list_medications(
        self,
        user: AuthenticatedUser,
        page: PageParams,
        sort: SortParams,
        filters: MedicationFilters,
    ) -> Page[Medication]:
        return await self.repository.list(owner_scope(user), page, sort, filters)

    async def get_medication(self, user: AuthenticatedUser, medication_id: str) -> Medication:
        return await self.repository.get(medication_id, owner_scope(user))

    async def create_medication(self, user: AuthenticatedUser, data: MedicationCreate) -> Medication:
        medication = await self.repository.create(user.id, data.model_dump())
        logger.info(f"User {user.id} added medication {medication.id}")
        return medication

    async def update_medication(
        self,
        user: AuthenticatedUser,
        medication_id: str,
        data: MedicationUpdate,
    ) -> Medication:
        return await self.repository.update(medication_id, owner_scope(user), data.changes())

    async def delete_medication(self, user: AuthenticatedUser, medication_id: str) -> None:
        await self.repository.delete(medication_id, owner_scope(user))
