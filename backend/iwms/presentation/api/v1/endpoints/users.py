"""User endpoints."""

from fastapi import APIRouter, Depends, Header, Query, Response, status

from iwms.application.schemas import (
    ApiResponse,
    UserBulkCreate,
    UserCreate,
    UserResponse,
    UserSecurityUpdate,
    UserUpdate,
)
from iwms.application.services import UserService
from iwms.domain.entities import User, UserRole, UserStatus
from iwms.infrastructure.dependencies import get_actor_id, get_user_service
from iwms.presentation.api import http_cache

router = APIRouter(prefix="/users", tags=["Users"])


def _to_response(user: User) -> UserResponse:
    return UserResponse.model_validate(user, from_attributes=True)


def _write_headers(response: Response, user: User) -> None:
    response.headers["Cache-Control"] = http_cache.NO_STORE
    response.headers["ETag"] = http_cache.etag_for(user.version)


@router.post("", response_model=ApiResponse[UserResponse], status_code=status.HTTP_201_CREATED)
async def create_user(
    data: UserCreate,
    response: Response,
    actor: str = Depends(get_actor_id),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    """Register a user; the account starts as PENDING_ACTIVATION."""
    user = await service.create_user(data, actor)
    response.headers["Cache-Control"] = http_cache.CREATED
    response.headers["ETag"] = http_cache.etag_for(user.version)
    return ApiResponse(data=_to_response(user))


@router.post(
    "/bulk",
    response_model=ApiResponse[list[UserResponse]],
    status_code=status.HTTP_201_CREATED,
)
async def bulk_create_users(
    data: UserBulkCreate,
    response: Response,
    actor: str = Depends(get_actor_id),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[list[UserResponse]]:
    users = await service.bulk_create(data.items, actor)
    response.headers["Cache-Control"] = http_cache.CREATED
    return ApiResponse(data=[_to_response(u) for u in users])


@router.get("", response_model=ApiResponse[list[UserResponse]])
async def list_users(
    response: Response,
    business_unit: str | None = Query(None, description="Filter by business unit"),
    role: UserRole | None = Query(None),
    user_status: UserStatus | None = Query(None, alias="status"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=500),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[list[UserResponse]]:
    """List active accounts, newest first."""
    users = await service.list_users(
        business_unit=business_unit,
        role=role,
        status=user_status,
        skip=skip,
        limit=limit,
    )
    response.headers["Cache-Control"] = http_cache.NO_STORE
    return ApiResponse(data=[_to_response(u) for u in users])


@router.get("/by-email", response_model=ApiResponse[UserResponse])
async def get_user_by_email(
    response: Response,
    email: str = Query(..., min_length=3, max_length=255),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    user = await service.get_user_by_email(email.strip())
    response.headers["Cache-Control"] = http_cache.private_max_age()
    return ApiResponse(data=_to_response(user))


@router.get("/{user_id}", response_model=ApiResponse[UserResponse])
async def get_user(
    user_id: str,
    response: Response,
    if_none_match: str | None = Header(None),
    service: UserService = Depends(get_user_service),
):
    user = await service.get_user(user_id)
    etag = http_cache.etag_for(user.version)
    headers = {"Cache-Control": http_cache.private_max_age(), "ETag": etag}
    if http_cache.etag_matches(if_none_match, etag):
        return Response(status_code=status.HTTP_304_NOT_MODIFIED, headers=headers)
    response.headers.update(headers)
    return ApiResponse(data=_to_response(user))


@router.put("/{user_id}", response_model=ApiResponse[UserResponse])
async def update_user(
    user_id: str,
    data: UserUpdate,
    response: Response,
    actor: str = Depends(get_actor_id),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    user = await service.update_user(user_id, data, actor)
    _write_headers(response, user)
    return ApiResponse(data=_to_response(user))


@router.put("/{user_id}/security", response_model=ApiResponse[UserResponse])
async def update_user_security(
    user_id: str,
    data: UserSecurityUpdate,
    response: Response,
    actor: str = Depends(get_actor_id),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    """Change MFA, password expiry, IP allow-list or account status."""
    user = await service.update_security(user_id, data, actor)
    _write_headers(response, user)
    return ApiResponse(data=_to_response(user))


@router.post("/{user_id}/failed-login", response_model=ApiResponse[UserResponse])
async def record_failed_login(
    user_id: str,
    response: Response,
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    """Count a failed login; the account locks at the configured limit."""
    user = await service.record_failed_login(user_id)
    _write_headers(response, user)
    return ApiResponse(data=_to_response(user))


@router.post("/{user_id}/security/reset", response_model=ApiResponse[UserResponse])
async def reset_user_security(
    user_id: str,
    response: Response,
    actor: str = Depends(get_actor_id),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    user = await service.reset_security_status(user_id, actor)
    _write_headers(response, user)
    return ApiResponse(data=_to_response(user))


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: str,
    response: Response,
    actor: str = Depends(get_actor_id),
    service: UserService = Depends(get_user_service),
) -> None:
    """Deactivate a user; the row is kept."""
    await service.delete_user(user_id, actor)
    response.headers["Cache-Control"] = http_cache.NO_STORE
