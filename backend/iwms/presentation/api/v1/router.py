"""V1 API router, aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from iwms.presentation.api.v1.endpoints.health import router as health_router
from iwms.presentation.api.v1.endpoints.floor_plans import router as floor_plans_router
from iwms.presentation.api.v1.endpoints.leases import router as leases_router
from iwms.presentation.api.v1.endpoints.users import router as users_router
from iwms.presentation.api.v1.endpoints.occupancy import router as occupancy_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(floor_plans_router)
router.include_router(leases_router)
router.include_router(users_router)
router.include_router(occupancy_router)
