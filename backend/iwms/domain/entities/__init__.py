from .floor_plan import (
    BMSConfig,
    FloorPlan,
    FloorPlanDimensions,
    FloorPlanMetadata,
    FloorPlanStatus,
    VersionInfo,
)
from .lease import (
    ALLOWED_TRANSITIONS,
    AuditEntry,
    EscalationType,
    Lease,
    LeaseStatus,
    LeaseTerms,
)
from .user import SecurityPreferences, User, UserRole, UserStatus
from .occupancy import (
    BatchUpdateResult,
    DataQuality,
    DataSource,
    OccupancyData,
    OccupancyTrend,
    TrendPoint,
    calculate_utilization,
)

__all__ = [
    "BMSConfig",
    "FloorPlan",
    "FloorPlanDimensions",
    "FloorPlanMetadata",
    "FloorPlanStatus",
    "VersionInfo",
    "ALLOWED_TRANSITIONS",
    "AuditEntry",
    "EscalationType",
    "Lease",
    "LeaseStatus",
    "LeaseTerms",
    "SecurityPreferences",
    "User",
    "UserRole",
    "UserStatus",
    "BatchUpdateResult",
    "DataQuality",
    "DataSource",
    "OccupancyData",
    "OccupancyTrend",
    "TrendPoint",
    "calculate_utilization",
]
