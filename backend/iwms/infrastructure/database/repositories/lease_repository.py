"""Concrete repository implementation for Lease backed by SQLAlchemy."""

import logging
from datetime import date

from pydantic import TypeAdapter
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from iwms.application.interfaces import LeaseRepository
from iwms.domain.entities import AuditEntry, Lease, LeaseStatus, LeaseTerms
from iwms.domain.exceptions import EntityNotFoundError, VersionConflictError
from iwms.infrastructure.cache import EntityCache
from iwms.infrastructure.cache.keys import LEASE_ACTIVE_KEY, lease_key, lease_property_key
from iwms.infrastructure.database.models import LeaseModel
from iwms.infrastructure.database.session import transaction

logger = logging.getLogger(__name__)

_terms_adapter = TypeAdapter(LeaseTerms)
_audit_adapter = TypeAdapter(list[AuditEntry])


class SQLAlchemyLeaseRepository(LeaseRepository):
    """Implements the LeaseRepository port with a look-aside cache."""

    def __init__(self, session: AsyncSession, cache: EntityCache[Lease]):
        self._session = session
        self._cache = cache

    def _to_entity(self, model: LeaseModel) -> Lease:
        return Lease(
            id=model.id,
            property_id=model.property_id,
            tenant_id=model.tenant_id,
            start_date=model.start_date,
            end_date=model.end_date,
            monthly_rent=model.monthly_rent,
            terms=_terms_adapter.validate_python(model.terms),
            status=model.status,
            audit_trail=_audit_adapter.validate_python(model.audit_trail),
            version=model.version,
            created_by=model.created_by,
            updated_by=model.updated_by,
            is_deleted=model.is_deleted,
            deleted_at=model.deleted_at,
            deleted_by=model.deleted_by,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _apply(self, model: LeaseModel, entity: Lease) -> None:
        """Copy mutable entity state onto the ORM model."""
        model.status = entity.status
        model.start_date = entity.start_date
        model.end_date = entity.end_date
        model.monthly_rent = entity.monthly_rent
        model.terms = _terms_adapter.dump_python(entity.terms, mode="json")
        model.audit_trail = _audit_adapter.dump_python(entity.audit_trail, mode="json")
        model.updated_by = entity.updated_by
        model.updated_at = entity.updated_at
        model.is_deleted = entity.is_deleted
        model.deleted_at = entity.deleted_at
        model.deleted_by = entity.deleted_by

    async def _invalidate(self, lease_id: str | None, property_id: str) -> None:
        keys = [lease_property_key(property_id), LEASE_ACTIVE_KEY]
        if lease_id is not None:
            keys.append(lease_key(lease_id))
        await self._cache.invalidate(*keys)

    async def _cached_list(self, key: str, stmt) -> list[Lease]:
        cached = await self._cache.get_list(key)
        if cached is not None:
            return cached
        result = await self._session.execute(stmt)
        leases = [self._to_entity(row) for row in result.scalars().all()]
        await self._cache.put_list(key, leases)
        return leases

    async def get_by_id(self, lease_id: str) -> Lease | None:
        key = lease_key(lease_id)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        model = await self._session.get(LeaseModel, lease_id)
        if model is None:
            return None
        lease = self._to_entity(model)
        await self._cache.put(key, lease)
        return lease

    async def list_by_property(self, property_id: str) -> list[Lease]:
        stmt = (
            select(LeaseModel)
            .where(LeaseModel.property_id == property_id, LeaseModel.is_deleted.is_(False))
            .order_by(LeaseModel.start_date.desc())
        )
        return await self._cached_list(lease_property_key(property_id), stmt)

    async def list_active(self) -> list[Lease]:
        stmt = (
            select(LeaseModel)
            .where(LeaseModel.status == LeaseStatus.ACTIVE, LeaseModel.is_deleted.is_(False))
            .order_by(LeaseModel.end_date.asc())
        )
        return await self._cached_list(LEASE_ACTIVE_KEY, stmt)

    async def list_expiring(self, on_or_before: date) -> list[Lease]:
        stmt = (
            select(LeaseModel)
            .where(
                LeaseModel.status == LeaseStatus.ACTIVE,
                LeaseModel.is_deleted.is_(False),
                LeaseModel.end_date <= on_or_before,
            )
            .order_by(LeaseModel.end_date.asc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def create(self, lease: Lease) -> Lease:
        model = LeaseModel(
            id=lease.id,
            property_id=lease.property_id,
            tenant_id=lease.tenant_id,
            created_by=lease.created_by,
            created_at=lease.created_at,
        )
        self._apply(model, lease)
        async with transaction(self._session):
            self._session.add(model)
        await self._invalidate(None, model.property_id)
        logger.info("Created lease %s for property %s", model.id, model.property_id)
        return self._to_entity(model)

    async def update(self, lease: Lease, expected_version: int) -> Lease:
        try:
            async with transaction(self._session):
                model = await self._session.get(LeaseModel, lease.id, populate_existing=True)
                if model is None:
                    raise EntityNotFoundError("Lease", lease.id)
                if model.version != expected_version:
                    raise VersionConflictError("Lease", lease.id, expected_version, model.version)
                self._apply(model, lease)
        except StaleDataError as exc:
            raise VersionConflictError("Lease", lease.id, expected_version) from exc
        await self._invalidate(model.id, model.property_id)
        return self._to_entity(model)

    async def soft_delete(self, lease_id: str, actor: str) -> bool:
        async with transaction(self._session):
            model = await self._session.get(LeaseModel, lease_id, populate_existing=True)
            if model is None:
                return False
            if not model.is_deleted:
                lease = self._to_entity(model)
                lease.mark_deleted(actor)
                self._apply(model, lease)
        await self._invalidate(model.id, model.property_id)
        logger.info("Soft-deleted lease %s", lease_id)
        return True
