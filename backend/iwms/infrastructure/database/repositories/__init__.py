from .floor_plan_repository import SQLAlchemyFloorPlanRepository
from .lease_repository import SQLAlchemyLeaseRepository
from .user_repository import SQLAlchemyUserRepository
from .occupancy_repository import SQLAlchemyOccupancyRepository

__all__ = [
    "SQLAlchemyFloorPlanRepository",
    "SQLAlchemyLeaseRepository",
    "SQLAlchemyUserRepository",
    "SQLAlchemyOccupancyRepository",
]
