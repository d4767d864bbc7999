from .base import Base
from .session import engine, async_session_factory, get_db_session, transaction
from .models import FloorPlanModel, LeaseModel, OccupancyDataModel, UserModel

__all__ = [
    "Base",
    "engine",
    "async_session_factory",
    "get_db_session",
    "transaction",
    "FloorPlanModel",
    "LeaseModel",
    "OccupancyDataModel",
    "UserModel",
]
