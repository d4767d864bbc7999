"""Abstract interface (port) for occupancy time-series persistence."""

from abc import ABC, abstractmethod
from datetime import datetime

from iwms.domain.entities import OccupancyData


class OccupancyRepository(ABC):
    """Port for the append-only occupancy store."""

    @abstractmethod
    async def get_latest(self, space_id: str) -> OccupancyData | None:
        """Most recent reading for a space."""
        ...

    @abstractmethod
    async def get_range(
        self, space_id: str, start: datetime, end: datetime
    ) -> list[OccupancyData]:
        """Readings with ``start <= timestamp < end``, oldest first."""
        ...

    @abstractmethod
    async def add(self, data: OccupancyData) -> OccupancyData:
        ...
