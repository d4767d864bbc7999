from .common import (
    ApiResponse,
    ErrorDetail,
    ErrorResponse,
    FieldErrorSchema,
    Page,
    ValidationResultSchema,
)
from .floor_plan import (
    BMSConfigSchema,
    DimensionsSchema,
    FloorPlanBulkCreate,
    FloorPlanBulkUpdate,
    FloorPlanBulkUpdateItem,
    FloorPlanCreate,
    FloorPlanMetadataSchema,
    FloorPlanResponse,
    FloorPlanUpdate,
)
from .lease import (
    LeaseCreate,
    LeaseResponse,
    LeaseStatusUpdate,
    LeaseTermsSchema,
    LeaseUpdate,
    RenewalCheckResponse,
)
from .user import (
    UserBulkCreate,
    UserCreate,
    UserResponse,
    UserSecurityUpdate,
    UserUpdate,
)
from .occupancy import (
    BatchUpdateResultResponse,
    OccupancyBatchRequest,
    OccupancyResponse,
    OccupancyTrendResponse,
    OccupancyUpdate,
)

__all__ = [
    "ApiResponse",
    "ErrorDetail",
    "ErrorResponse",
    "FieldErrorSchema",
    "Page",
    "ValidationResultSchema",
    "BMSConfigSchema",
    "DimensionsSchema",
    "FloorPlanBulkCreate",
    "FloorPlanBulkUpdate",
    "FloorPlanBulkUpdateItem",
    "FloorPlanCreate",
    "FloorPlanMetadataSchema",
    "FloorPlanResponse",
    "FloorPlanUpdate",
    "LeaseCreate",
    "LeaseResponse",
    "LeaseStatusUpdate",
    "LeaseTermsSchema",
    "LeaseUpdate",
    "RenewalCheckResponse",
    "UserBulkCreate",
    "UserCreate",
    "UserResponse",
    "UserSecurityUpdate",
    "UserUpdate",
    "BatchUpdateResultResponse",
    "OccupancyBatchRequest",
    "OccupancyResponse",
    "OccupancyTrendResponse",
    "OccupancyUpdate",
]
