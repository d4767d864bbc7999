from .floor_plan_service import FloorPlanService
from .lease_service import LeaseService
from .user_service import UserService
from .occupancy_service import OccupancyService
from .sse_manager import SSEManager

__all__ = [
    "FloorPlanService",
    "LeaseService",
    "UserService",
    "OccupancyService",
    "SSEManager",
]
