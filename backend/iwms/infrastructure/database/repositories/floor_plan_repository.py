"""Concrete repository implementation for FloorPlan backed by SQLAlchemy."""

import logging
from dataclasses import asdict
from datetime import datetime, timezone

from pydantic import TypeAdapter
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from iwms.application.interfaces import FloorPlanRepository
from iwms.domain.entities import FloorPlan, FloorPlanMetadata, FloorPlanStatus, VersionInfo
from iwms.domain.exceptions import EntityNotFoundError, VersionConflictError
from iwms.infrastructure.cache import EntityCache
from iwms.infrastructure.cache.keys import (
    floor_plan_key,
    floor_plan_page_key,
    floor_plan_pages_pattern,
)
from iwms.infrastructure.database.models import FloorPlanModel
from iwms.infrastructure.database.session import transaction

logger = logging.getLogger(__name__)

_metadata_adapter = TypeAdapter(FloorPlanMetadata)
_version_info_adapter = TypeAdapter(VersionInfo)


class SQLAlchemyFloorPlanRepository(FloorPlanRepository):
    """Implements the FloorPlanRepository port with a look-aside cache."""

    def __init__(self, session: AsyncSession, cache: EntityCache[FloorPlan]):
        self._session = session
        self._cache = cache

    def _to_entity(self, model: FloorPlanModel) -> FloorPlan:
        """Map ORM model → domain entity."""
        return FloorPlan(
            id=model.id,
            property_id=model.property_id,
            metadata=_metadata_adapter.validate_python(model.metadata_),
            status=model.status,
            version_info=_version_info_adapter.validate_python(model.version_info),
            version=model.version,
            created_by=model.created_by,
            updated_by=model.updated_by,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _to_model(self, entity: FloorPlan) -> FloorPlanModel:
        """Map domain entity → ORM model (for creation)."""
        return FloorPlanModel(
            id=entity.id,
            property_id=entity.property_id,
            status=entity.status,
            metadata_=asdict(entity.metadata),
            version_info=asdict(entity.version_info),
            created_by=entity.created_by,
            updated_by=entity.updated_by,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
        )

    async def _load_for_update(self, entity: FloorPlan, expected_version: int) -> FloorPlanModel:
        model = await self._session.get(FloorPlanModel, entity.id, populate_existing=True)
        if model is None:
            raise EntityNotFoundError("FloorPlan", entity.id)
        if model.version != expected_version:
            raise VersionConflictError("FloorPlan", entity.id, expected_version, model.version)
        model.status = entity.status
        model.metadata_ = asdict(entity.metadata)
        model.version_info = asdict(entity.version_info)
        model.updated_by = entity.updated_by
        model.updated_at = entity.updated_at
        return model

    async def _invalidate(self, floor_plan_id: str | None, property_id: str) -> None:
        if floor_plan_id is not None:
            await self._cache.invalidate(floor_plan_key(floor_plan_id))
        await self._cache.invalidate_pattern(floor_plan_pages_pattern(property_id))

    async def get_by_id(self, floor_plan_id: str) -> FloorPlan | None:
        key = floor_plan_key(floor_plan_id)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        model = await self._session.get(FloorPlanModel, floor_plan_id)
        if model is None:
            return None
        floor_plan = self._to_entity(model)
        await self._cache.put(key, floor_plan)
        return floor_plan

    async def list_by_property(
        self, property_id: str, page: int = 1, limit: int = 10
    ) -> tuple[list[FloorPlan], int]:
        key = floor_plan_page_key(property_id, page, limit)
        cached = await self._cache.get_page(key)
        if cached is not None:
            return cached

        conditions = (
            FloorPlanModel.property_id == property_id,
            FloorPlanModel.status != FloorPlanStatus.ARCHIVED,
        )
        total = await self._session.scalar(
            select(func.count()).select_from(FloorPlanModel).where(*conditions)
        )
        stmt = (
            select(FloorPlanModel)
            .where(*conditions)
            .order_by(FloorPlanModel.created_at.desc())
            .offset((page - 1) * limit)
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        items = [self._to_entity(row) for row in result.scalars().all()]
        await self._cache.put_page(key, items, total or 0)
        return items, total or 0

    async def create(self, floor_plan: FloorPlan) -> FloorPlan:
        model = self._to_model(floor_plan)
        async with transaction(self._session):
            self._session.add(model)
        await self._invalidate(None, model.property_id)
        logger.info("Created floor plan %s for property %s", model.id, model.property_id)
        return self._to_entity(model)

    async def update(self, floor_plan: FloorPlan, expected_version: int) -> FloorPlan:
        try:
            async with transaction(self._session):
                model = await self._load_for_update(floor_plan, expected_version)
        except StaleDataError as exc:
            raise VersionConflictError("FloorPlan", floor_plan.id, expected_version) from exc
        await self._invalidate(model.id, model.property_id)
        return self._to_entity(model)

    async def soft_delete(self, floor_plan_id: str, actor: str) -> bool:
        async with transaction(self._session):
            model = await self._session.get(FloorPlanModel, floor_plan_id, populate_existing=True)
            if model is None:
                return False
            model.status = FloorPlanStatus.ARCHIVED
            model.updated_by = actor
            model.updated_at = datetime.now(timezone.utc)
        await self._invalidate(model.id, model.property_id)
        logger.info("Archived floor plan %s", floor_plan_id)
        return True

    async def bulk_create(self, floor_plans: list[FloorPlan]) -> list[FloorPlan]:
        models = [self._to_model(fp) for fp in floor_plans]
        async with transaction(self._session):
            self._session.add_all(models)
        for property_id in {m.property_id for m in models}:
            await self._invalidate(None, property_id)
        logger.info("Bulk-created %d floor plans", len(models))
        return [self._to_entity(m) for m in models]

    async def bulk_update(
        self, updates: list[tuple[FloorPlan, int]]
    ) -> list[FloorPlan]:
        models: list[FloorPlanModel] = []
        current: FloorPlan | None = None
        expected = 0
        try:
            async with transaction(self._session):
                for current, expected in updates:
                    models.append(await self._load_for_update(current, expected))
        except StaleDataError as exc:
            # StaleDataError does not name the row; report the last one loaded.
            raise VersionConflictError("FloorPlan", current.id, expected) from exc
        for model in models:
            await self._invalidate(model.id, model.property_id)
        return [self._to_entity(m) for m in models]
