from .floor_plan import FloorPlanModel
from .lease import LeaseModel
from .user import UserModel
from .occupancy import OccupancyDataModel

__all__ = [
    "FloorPlanModel",
    "LeaseModel",
    "UserModel",
    "OccupancyDataModel",
]
