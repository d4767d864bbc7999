"""Abstract interface (port) for FloorPlan persistence."""

from abc import ABC, abstractmethod

from iwms.domain.entities import FloorPlan


class FloorPlanRepository(ABC):
    """Port that any floor plan storage adapter must implement.

    Every write commits its own transaction and invalidates the cached
    copies it affects before returning.
    """

    @abstractmethod
    async def get_by_id(self, floor_plan_id: str) -> FloorPlan | None:
        ...

    @abstractmethod
    async def list_by_property(
        self, property_id: str, page: int = 1, limit: int = 10
    ) -> tuple[list[FloorPlan], int]:
        """Return one page of a property's floor plans and the total count."""
        ...

    @abstractmethod
    async def create(self, floor_plan: FloorPlan) -> FloorPlan:
        ...

    @abstractmethod
    async def update(self, floor_plan: FloorPlan, expected_version: int) -> FloorPlan:
        """Persist changes if the stored version still equals ``expected_version``."""
        ...

    @abstractmethod
    async def soft_delete(self, floor_plan_id: str, actor: str) -> bool:
        """Archive a floor plan. Returns False if it does not exist."""
        ...

    @abstractmethod
    async def bulk_create(self, floor_plans: list[FloorPlan]) -> list[FloorPlan]:
        """Insert all floor plans in one transaction."""
        ...

    @abstractmethod
    async def bulk_update(
        self, updates: list[tuple[FloorPlan, int]]
    ) -> list[FloorPlan]:
        """Apply ``(floor_plan, expected_version)`` pairs in one transaction."""
        ...
