"""Concrete repository implementation for occupancy readings."""

from datetime import datetime

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from iwms.application.interfaces import OccupancyRepository
from iwms.domain.entities import OccupancyData
from iwms.domain.exceptions import DuplicateEntityError
from iwms.infrastructure.cache import EntityCache
from iwms.infrastructure.cache.keys import occupancy_key
from iwms.infrastructure.database.models import OccupancyDataModel
from iwms.infrastructure.database.session import transaction


class SQLAlchemyOccupancyRepository(OccupancyRepository):
    """Append-only store; the latest reading per space is cached briefly."""

    def __init__(self, session: AsyncSession, cache: EntityCache[OccupancyData]):
        self._session = session
        self._cache = cache

    def _to_entity(self, model: OccupancyDataModel) -> OccupancyData:
        return OccupancyData(
            id=model.id,
            space_id=model.space_id,
            timestamp=model.timestamp,
            occupant_count=model.occupant_count,
            capacity=model.capacity,
            data_source=model.data_source,
            sensor_metadata=dict(model.sensor_metadata),
            is_validated=model.is_validated,
            created_at=model.created_at,
        )

    async def get_latest(self, space_id: str) -> OccupancyData | None:
        key = occupancy_key(space_id)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        stmt = (
            select(OccupancyDataModel)
            .where(OccupancyDataModel.space_id == space_id)
            .order_by(OccupancyDataModel.timestamp.desc())
            .limit(1)
        )
        model = (await self._session.execute(stmt)).scalar_one_or_none()
        if model is None:
            return None
        data = self._to_entity(model)
        await self._cache.put(key, data)
        return data

    async def get_range(
        self, space_id: str, start: datetime, end: datetime
    ) -> list[OccupancyData]:
        stmt = (
            select(OccupancyDataModel)
            .where(
                OccupancyDataModel.space_id == space_id,
                OccupancyDataModel.timestamp >= start,
                OccupancyDataModel.timestamp < end,
            )
            .order_by(OccupancyDataModel.timestamp.asc())
        )
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def add(self, data: OccupancyData) -> OccupancyData:
        model = OccupancyDataModel(
            id=data.id,
            space_id=data.space_id,
            timestamp=data.timestamp,
            occupant_count=data.occupant_count,
            capacity=data.capacity,
            utilization_rate=data.utilization_rate,
            data_source=data.data_source,
            sensor_metadata=dict(data.sensor_metadata),
            is_validated=data.is_validated,
            created_at=data.created_at,
        )
        try:
            async with transaction(self._session):
                self._session.add(model)
        except IntegrityError as exc:
            raise DuplicateEntityError(
                "OccupancyData", "timestamp", data.timestamp.isoformat()
            ) from exc
        await self._cache.invalidate(occupancy_key(data.space_id))
        return self._to_entity(model)
