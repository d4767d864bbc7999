"""Floor plan endpoints."""

import math

from fastapi import APIRouter, Depends, Header, Query, Response, status

from iwms.application.schemas import (
    ApiResponse,
    FloorPlanBulkCreate,
    FloorPlanBulkUpdate,
    FloorPlanCreate,
    FloorPlanResponse,
    FloorPlanUpdate,
    Page,
    ValidationResultSchema,
)
from iwms.application.services import FloorPlanService
from iwms.domain.entities import FloorPlan
from iwms.infrastructure.dependencies import get_actor_id, get_floor_plan_service
from iwms.presentation.api import http_cache

router = APIRouter(prefix="/floor-plans", tags=["Floor Plans"])


def _to_response(floor_plan: FloorPlan) -> FloorPlanResponse:
    return FloorPlanResponse.model_validate(floor_plan, from_attributes=True)


@router.post(
    "",
    response_model=ApiResponse[FloorPlanResponse],
    status_code=status.HTTP_201_CREATED,
)
async def create_floor_plan(
    data: FloorPlanCreate,
    response: Response,
    actor: str = Depends(get_actor_id),
    service: FloorPlanService = Depends(get_floor_plan_service),
) -> ApiResponse[FloorPlanResponse]:
    """Create a floor plan; it starts as DRAFT unless a status is given."""
    floor_plan = await service.create_floor_plan(data, actor)
    response.headers["Cache-Control"] = http_cache.CREATED
    response.headers["ETag"] = http_cache.etag_for(floor_plan.version)
    return ApiResponse(data=_to_response(floor_plan))


@router.post(
    "/bulk",
    response_model=ApiResponse[list[FloorPlanResponse]],
    status_code=status.HTTP_201_CREATED,
)
async def bulk_create_floor_plans(
    data: FloorPlanBulkCreate,
    response: Response,
    actor: str = Depends(get_actor_id),
    service: FloorPlanService = Depends(get_floor_plan_service),
) -> ApiResponse[list[FloorPlanResponse]]:
    """Create up to the bulk limit of floor plans in one transaction."""
    floor_plans = await service.bulk_create(data.items, actor)
    response.headers["Cache-Control"] = http_cache.CREATED
    return ApiResponse(data=[_to_response(fp) for fp in floor_plans])


@router.post("/validate", response_model=ApiResponse[ValidationResultSchema])
async def validate_floor_plan(
    data: FloorPlanCreate,
    response: Response,
    actor: str = Depends(get_actor_id),
    service: FloorPlanService = Depends(get_floor_plan_service),
) -> ApiResponse[ValidationResultSchema]:
    """Dry-run the business rules without saving anything."""
    floor_plan = FloorPlan(
        property_id=data.property_id,
        metadata=data.metadata.to_domain(),
        created_by=actor,
        updated_by=actor,
    )
    result = service.validate_floor_plan(floor_plan)
    response.headers["Cache-Control"] = http_cache.NO_STORE
    return ApiResponse(data=ValidationResultSchema.model_validate(result, from_attributes=True))


@router.put("/bulk", response_model=ApiResponse[list[FloorPlanResponse]])
async def bulk_update_floor_plans(
    data: FloorPlanBulkUpdate,
    response: Response,
    actor: str = Depends(get_actor_id),
    service: FloorPlanService = Depends(get_floor_plan_service),
) -> ApiResponse[list[FloorPlanResponse]]:
    """Apply several versioned updates atomically."""
    floor_plans = await service.bulk_update(data.items, actor)
    response.headers["Cache-Control"] = http_cache.NO_STORE
    return ApiResponse(data=[_to_response(fp) for fp in floor_plans])


@router.get(
    "/property/{property_id}",
    response_model=ApiResponse[Page[FloorPlanResponse]],
)
async def list_floor_plans_by_property(
    property_id: str,
    response: Response,
    page: int = Query(1, ge=1),
    limit: int = Query(10, ge=1, le=100),
    service: FloorPlanService = Depends(get_floor_plan_service),
) -> ApiResponse[Page[FloorPlanResponse]]:
    """Page through a property's floor plans, newest first."""
    items, total = await service.list_floor_plans(property_id, page=page, limit=limit)
    response.headers["Cache-Control"] = http_cache.private_max_age()
    return ApiResponse(
        data=Page(
            items=[_to_response(fp) for fp in items],
            total=total,
            page=page,
            limit=limit,
            total_pages=math.ceil(total / limit),
        )
    )


@router.get("/{floor_plan_id}", response_model=ApiResponse[FloorPlanResponse])
async def get_floor_plan(
    floor_plan_id: str,
    response: Response,
    if_none_match: str | None = Header(None),
    service: FloorPlanService = Depends(get_floor_plan_service),
):
    """Retrieve a floor plan; honours ``If-None-Match`` with a 304."""
    floor_plan = await service.get_floor_plan(floor_plan_id)
    etag = http_cache.etag_for(floor_plan.version)
    headers = {"Cache-Control": http_cache.private_max_age(), "ETag": etag}
    if http_cache.etag_matches(if_none_match, etag):
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers=headers)
    response.headers.update(headers)
    return ApiResponse(data=_to_response(floor_plan))


@router.put("/{floor_plan_id}", response_model=ApiResponse[FloorPlanResponse])
async def update_floor_plan(
    floor_plan_id: str,
    data: FloorPlanUpdate,
    response: Response,
    actor: str = Depends(get_actor_id),
    service: FloorPlanService = Depends(get_floor_plan_service),
) -> ApiResponse[FloorPlanResponse]:
    """Partially update a floor plan; ``version`` must be current."""
    floor_plan = await service.update_floor_plan(floor_plan_id, data, actor)
    response.headers["Cache-Control"] = http_cache.NO_STORE
    response.headers["ETag"] = http_cache.etag_for(floor_plan.version)
    return ApiResponse(data=_to_response(floor_plan))


@router.delete("/{floor_plan_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_floor_plan(
    floor_plan_id: str,
    response: Response,
    actor: str = Depends(get_actor_id),
    service: FloorPlanService = Depends(get_floor_plan_service),
) -> None:
    """Archive a floor plan; the row is kept."""
    await service.delete_floor_plan(floor_plan_id, actor)
    response.headers["Cache-Control"] = http_cache.NO_STORE
