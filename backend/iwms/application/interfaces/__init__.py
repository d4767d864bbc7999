from .cache_backend import CacheBackend
from .floor_plan_repository import FloorPlanRepository
from .lease_repository import LeaseRepository
from .user_repository import UserRepository
from .occupancy_repository import OccupancyRepository

__all__ = [
    "CacheBackend",
    "FloorPlanRepository",
    "LeaseRepository",
    "UserRepository",
    "OccupancyRepository",
]
