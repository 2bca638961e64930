"""
Repository Base Module

This module provides the owner-scoped repository base shared by every
per-user resource. The record id and the owner id are always applied in the
same filter, so a record belonging to someone else is indistinguishable from
one that does not exist.
"""

import contextlib
from dataclasses import dataclass
from typing import Any, Dict, Generic, Iterator, List, Optional, Type, TypeVar

from sqlalchemy import Select, asc, desc, func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from patient_dashboard.common.auth.user import IdentityId
from patient_dashboard.common.exceptions import (
    ConflictError,
    DatabaseError,
    NotFoundError,
    ValidationFailedError
)
from patient_dashboard.common.logger import app_logger
from patient_dashboard.common.pagination import PageParams, PaginationMeta, SortParams
from patient_dashboard.common.utils import normalize_id
from patient_dashboard.database.base import ModelBase

# Set up logging
logger = app_logger.getChild("db.repository")

# Type variable for model classes
ModelT = TypeVar("ModelT", bound=ModelBase)


@dataclass
class Page(Generic[ModelT]):
    """One page of records plus its pagination metadata."""

    items: List[ModelT]
    meta: PaginationMeta


class OwnedRepository(Generic[ModelT]):
    """
    Base repository for records that belong to a single identity.

    Subclasses set ``model``, ``resource_name`` and ``sort_fields`` and may
    override ``apply_filters`` and ``validate_record``. An ``owner_id`` of
    None means the caller is an admin and sees every owner's records.
    """

    model: Type[ModelT]
    resource_name: str = "Resource"
    # Public sort field -> model attribute; the first entry is the default
    sort_fields: Dict[str, str] = {"createdAt": "created_at"}
    conflict_message: str = "Resource already exists"

    def __init__(self, session: AsyncSession):
        """
        Initialize the repository.

        Args:
            session: Session bound to the current request
        """
        self.session = session

    @classmethod
    def allowed_sort_fields(cls) -> List[str]:
        return list(cls.sort_fields)

    @contextlib.contextmanager
    def _translate_errors(self, action: str) -> Iterator[None]:
        """Map driver errors onto the application's error taxonomy."""
        try:
            yield
        except IntegrityError as e:
            logger.info(f"Integrity error during {self.resource_name} {action}: {e.orig}")
            raise ConflictError(self.conflict_message, original_exception=e)
        except SQLAlchemyError as e:
            logger.error(f"Database error during {self.resource_name} {action}: {e}")
            raise DatabaseError(original_exception=e)

    def _record_id(self, record_id: Any) -> str:
        try:
            return normalize_id(record_id)
        except ValueError:
            message = f"Invalid {self.resource_name.lower()} id"
            raise ValidationFailedError(message, errors=[{"field": "id", "message": message}])

    def _scoped(self, stmt: Select, owner_id: Optional[IdentityId]) -> Select:
        if owner_id is not None:
            stmt = stmt.where(self.model.user_id == owner_id)
        return stmt

    def apply_filters(self, stmt: Select, filters: Any) -> Select:
        """Apply resource-specific filters. All filters combine with AND."""
        return stmt

    def validate_record(self, record: ModelT) -> None:
        """
        Check cross-field invariants on a complete record.

        Raises:
            ValidationFailedError: If an invariant does not hold
        """

    def _order_by(self, stmt: Select, sort: SortParams) -> Select:
        column = getattr(self.model, self.sort_fields[sort.field])
        direction = desc if sort.descending else asc
        # Id tiebreaker keeps paging stable when sort values repeat
        return stmt.order_by(direction(column), direction(self.model.id))

    async def list(
        self,
        owner_id: Optional[IdentityId],
        page: PageParams,
        sort: SortParams,
        filters: Any = None,
    ) -> Page[ModelT]:
        """
        List records visible to the owner.

        Args:
            owner_id: Owner to scope to, or None for every owner
            page: Page number and size
            sort: Sort field and direction
            filters: Resource-specific filter object

        Returns:
            The requested page and its metadata
        """
        stmt = self._scoped(select(self.model), owner_id)
        if filters is not None:
            stmt = self.apply_filters(stmt, filters)

        with self._translate_errors("list"):
            count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
            total = (await self.session.execute(count_stmt)).scalar_one()

            page_stmt = self._order_by(stmt, sort).offset(page.offset).limit(page.limit)
            items = list((await self.session.execute(page_stmt)).scalars().all())

        return Page(items=items, meta=PaginationMeta.build(page, total))

    async def find(self, record_id: Any, owner_id: Optional[IdentityId]) -> Optional[ModelT]:
        """Get a record by id within the owner scope, or None."""
        stmt = self._scoped(
            select(self.model).where(self.model.id == self._record_id(record_id)), owner_id
        )
        with self._translate_errors("lookup"):
            return (await self.session.execute(stmt)).scalar_one_or_none()

    async def get(self, record_id: Any, owner_id: Optional[IdentityId]) -> ModelT:
        """
        Get a record by id within the owner scope.

        Raises:
            ValidationFailedError: If the id is malformed
            NotFoundError: If the record is missing or belongs to someone else
        """
        record = await self.find(record_id, owner_id)
        if record is None:
            raise NotFoundError(self.resource_name, record_id)
        return record

    async def create(self, owner_id: IdentityId, values: Dict[str, Any]) -> ModelT:
        """
        Create a record owned by the given identity.

        Any owner supplied in ``values`` is ignored.

        Raises:
            ValidationFailedError: If a cross-field invariant fails
            ConflictError: If a unique constraint is violated
        """
        values = {key: value for key, value in values.items() if key != "user_id"}
        record = self.model(user_id=owner_id, **values)
        self.validate_record(record)

        with self._translate_errors("create"):
            self.session.add(record)
            await self.session.commit()
            await self.session.refresh(record)

        logger.debug(f"Created {self.resource_name} {record.id} for user {owner_id}")
        return record

    async def update(
        self,
        record_id: Any,
        owner_id: Optional[IdentityId],
        changes: Dict[str, Any],
    ) -> ModelT:
        """
        Apply a partial update and re-check invariants on the merged record.

        Raises:
            NotFoundError: If the record is missing or belongs to someone else
            ValidationFailedError: If the merged record breaks an invariant
            ConflictError: If a unique constraint is violated
        """
        record = await self.get(record_id, owner_id)
        changes = {key: value for key, value in changes.items() if key not in ("id", "user_id")}
        record.update(changes)

        try:
            self.validate_record(record)
        except ValidationFailedError:
            await self.session.rollback()
            raise

        with self._translate_errors("update"):
            await self.session.commit()
            await self.session.refresh(record)

        return record

    async def delete(self, record_id: Any, owner_id: Optional[IdentityId]) -> None:
        """
        Physically remove a record.

        Raises:
            NotFoundError: If the record is missing or belongs to someone else
        """
        record = await self.get(record_id, owner_id)
        with self._translate_errors("delete"):
            await self.session.delete(record)
            await self.session.commit()

        logger.debug(f"Deleted {self.resource_name} {record.id}")
