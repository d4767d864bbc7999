"""Occupancy endpoints: readings, trends and the live SSE stream."""

from datetime import datetime
from typing import Literal

from fastapi import APIRouter, Depends, Query, Response
from fastapi.responses import StreamingResponse

from iwms.application.schemas import (
    ApiResponse,
    BatchUpdateResultResponse,
    OccupancyBatchRequest,
    OccupancyResponse,
    OccupancyTrendResponse,
    OccupancyUpdate,
)
from iwms.application.services import OccupancyService, SSEManager
from iwms.infrastructure.dependencies import get_occupancy_service, get_sse_manager
from iwms.presentation.api import http_cache

router = APIRouter(prefix="/occupancy", tags=["Occupancy"])


# ── SSE Stream ───────────────────────────────────────────────────────


@router.get("/stream")
async def occupancy_stream(
    sse: SSEManager = Depends(get_sse_manager),
) -> StreamingResponse:
    """SSE endpoint for live occupancy updates.

    Clients connect via EventSource and receive 'occupancy_update' events
    whenever a reading is stored, plus periodic keep-alive comments.
    """
    return StreamingResponse(
        sse.subscribe(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


# ── Writes ───────────────────────────────────────────────────────────


@router.post("/update", response_model=ApiResponse[OccupancyResponse])
async def update_occupancy(
    data: OccupancyUpdate,
    response: Response,
    service: OccupancyService = Depends(get_occupancy_service),
) -> ApiResponse[OccupancyResponse]:
    """Store one reading and push it to live subscribers."""
    reading = await service.record_occupancy(data)
    response.headers["Cache-Control"] = http_cache.NO_STORE
    return ApiResponse(data=OccupancyResponse.model_validate(reading, from_attributes=True))


@router.post("/batch", response_model=ApiResponse[BatchUpdateResultResponse])
async def batch_update_occupancy(
    data: OccupancyBatchRequest,
    response: Response,
    service: OccupancyService = Depends(get_occupancy_service),
) -> ApiResponse[BatchUpdateResultResponse]:
    result = await service.batch_update(data.items, continue_on_error=data.continue_on_error)
    response.headers["Cache-Control"] = http_cache.NO_STORE
    return ApiResponse(
        data=BatchUpdateResultResponse.model_validate(result, from_attributes=True)
    )


# ── Reads ────────────────────────────────────────────────────────────


@router.get("/{space_id}", response_model=ApiResponse[OccupancyResponse])
async def get_current_occupancy(
    space_id: str,
    response: Response,
    service: OccupancyService = Depends(get_occupancy_service),
) -> ApiResponse[OccupancyResponse]:
    """Latest reading for a space."""
    reading = await service.get_current_occupancy(space_id)
    response.headers["Cache-Control"] = http_cache.OCCUPANCY_CURRENT
    return ApiResponse(data=OccupancyResponse.model_validate(reading, from_attributes=True))


@router.get("/{space_id}/trends", response_model=ApiResponse[OccupancyTrendResponse])
async def get_occupancy_trends(
    space_id: str,
    response: Response,
    start: datetime = Query(..., description="Window start (inclusive)"),
    end: datetime = Query(..., description="Window end (exclusive)"),
    interval: Literal["hourly", "daily"] = Query("hourly"),
    service: OccupancyService = Depends(get_occupancy_service),
) -> ApiResponse[OccupancyTrendResponse]:
    trend = await service.get_trends(space_id, start, end, interval=interval)
    response.headers["Cache-Control"] = http_cache.OCCUPANCY_TRENDS
    return ApiResponse(
        data=OccupancyTrendResponse.model_validate(trend, from_attributes=True)
    )


@router.get("/{space_id}/history", response_model=ApiResponse[list[OccupancyResponse]])
async def get_occupancy_history(
    space_id: str,
    response: Response,
    start: datetime = Query(...),
    end: datetime = Query(...),
    service: OccupancyService = Depends(get_occupancy_service),
) -> ApiResponse[list[OccupancyResponse]]:
    readings = await service.get_history(space_id, start, end)
    response.headers["Cache-Control"] = http_cache.OCCUPANCY_TRENDS
    return ApiResponse(
        data=[OccupancyResponse.model_validate(r, from_attributes=True) for r in readings]
    )
