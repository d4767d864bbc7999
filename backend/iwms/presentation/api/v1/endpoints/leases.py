"""Lease endpoints."""

from datetime import date

from fastapi import APIRouter, Depends, Header, Query, Response, status

from iwms.application.schemas import (
    ApiResponse,
    LeaseCreate,
    LeaseResponse,
    LeaseStatusUpdate,
    LeaseUpdate,
    RenewalCheckResponse,
)
from iwms.application.services import LeaseService
from iwms.domain.entities import Lease
from iwms.infrastructure.dependencies import get_actor_id, get_lease_service
from iwms.presentation.api import http_cache

router = APIRouter(prefix="/leases", tags=["Leases"])


def _to_response(lease: Lease) -> LeaseResponse:
    return LeaseResponse.model_validate(lease, from_attributes=True)


# ── Collection ───────────────────────────────────────────────────────


@router.post("", response_model=ApiResponse[LeaseResponse], status_code=status.HTTP_201_CREATED)
async def create_lease(
    data: LeaseCreate,
    response: Response,
    actor: str = Depends(get_actor_id),
    service: LeaseService = Depends(get_lease_service),
) -> ApiResponse[LeaseResponse]:
    """Create a lease in DRAFT status."""
    lease = await service.create_lease(data, actor)
    response.headers["Cache-Control"] = http_cache.CREATED
    response.headers["ETag"] = http_cache.etag_for(lease.version)
    return ApiResponse(data=_to_response(lease))


@router.get("/active", response_model=ApiResponse[list[LeaseResponse]])
async def list_active_leases(
    response: Response,
    service: LeaseService = Depends(get_lease_service),
) -> ApiResponse[list[LeaseResponse]]:
    leases = await service.list_active_leases()
    response.headers["Cache-Control"] = http_cache.private_max_age()
    return ApiResponse(data=[_to_response(lease) for lease in leases])


@router.get("/expiring", response_model=ApiResponse[list[LeaseResponse]])
async def list_expiring_leases(
    response: Response,
    within_days: int | None = Query(None, ge=0, le=3650),
    service: LeaseService = Depends(get_lease_service),
) -> ApiResponse[list[LeaseResponse]]:
    """Active leases ending within ``within_days`` (default: renewal notice window)."""
    leases = await service.find_expiring_leases(within_days=within_days)
    response.headers["Cache-Control"] = http_cache.NO_STORE
    return ApiResponse(data=[_to_response(lease) for lease in leases])


@router.post("/renewals/check", response_model=ApiResponse[RenewalCheckResponse])
async def check_renewals(
    response: Response,
    as_of: date | None = Query(None, description="Evaluate as of this day (default today)"),
    service: LeaseService = Depends(get_lease_service),
) -> ApiResponse[RenewalCheckResponse]:
    """Flag active leases inside the renewal notice window as PENDING_RENEWAL."""
    flagged = await service.flag_renewals(today=as_of)
    response.headers["Cache-Control"] = http_cache.NO_STORE
    return ApiResponse(
        data=RenewalCheckResponse(
            flagged=len(flagged), lease_ids=[lease.id for lease in flagged]
        )
    )


@router.get("/property/{property_id}", response_model=ApiResponse[list[LeaseResponse]])
async def list_leases_by_property(
    property_id: str,
    response: Response,
    service: LeaseService = Depends(get_lease_service),
) -> ApiResponse[list[LeaseResponse]]:
    leases = await service.list_leases_by_property(property_id)
    response.headers["Cache-Control"] = http_cache.private_max_age()
    return ApiResponse(data=[_to_response(lease) for lease in leases])


# ── Single lease ─────────────────────────────────────────────────────


@router.get("/{lease_id}", response_model=ApiResponse[LeaseResponse])
async def get_lease(
    lease_id: str,
    response: Response,
    if_none_match: str | None = Header(None),
    service: LeaseService = Depends(get_lease_service),
):
    lease = await service.get_lease(lease_id)
    etag = http_cache.etag_for(lease.version)
    headers = {"Cache-Control": http_cache.private_max_age(), "ETag": etag}
    if http_cache.etag_matches(if_none_match, etag):
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers=headers)
    response.headers.update(headers)
    return ApiResponse(data=_to_response(lease))


@router.put("/{lease_id}", response_model=ApiResponse[LeaseResponse])
async def update_lease(
    lease_id: str,
    data: LeaseUpdate,
    response: Response,
    actor: str = Depends(get_actor_id),
    service: LeaseService = Depends(get_lease_service),
) -> ApiResponse[LeaseResponse]:
    lease = await service.update_lease(lease_id, data, actor)
    response.headers["Cache-Control"] = http_cache.NO_STORE
    response.headers["ETag"] = http_cache.etag_for(lease.version)
    return ApiResponse(data=_to_response(lease))


@router.put("/{lease_id}/status", response_model=ApiResponse[LeaseResponse])
async def update_lease_status(
    lease_id: str,
    data: LeaseStatusUpdate,
    response: Response,
    actor: str = Depends(get_actor_id),
    service: LeaseService = Depends(get_lease_service),
) -> ApiResponse[LeaseResponse]:
    """Move a lease along its status workflow."""
    lease = await service.update_status(lease_id, data.status, data.version, actor)
    response.headers["Cache-Control"] = http_cache.NO_STORE
    response.headers["ETag"] = http_cache.etag_for(lease.version)
    return ApiResponse(data=_to_response(lease))


@router.delete("/{lease_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_lease(
    lease_id: str,
    response: Response,
    actor: str = Depends(get_actor_id),
    service: LeaseService = Depends(get_lease_service),
) -> None:
    """Soft-delete a lease: it is terminated and flagged, not removed."""
    await service.delete_lease(lease_id, actor)
    response.headers["Cache-Control"] = http_cache.NO_STORE
