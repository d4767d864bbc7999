"""Maps domain and infrastructure errors to the JSON error envelope."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from iwms.application.schemas.common import ErrorDetail, ErrorResponse, FieldErrorSchema
from iwms.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    InvalidStatusTransitionError,
    ValidationError,
    VersionConflictError,
)

logger = logging.getLogger(__name__)


def _error_response(
    status_code: int,
    code: str,
    message: str,
    details: list[FieldErrorSchema] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=ErrorDetail(code=code, message=message, details=details or []),
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers={"Cache-Control": "no-cache, no-store, must-revalidate"},
    )


def _location(loc: tuple) -> str:
    # Drop the leading "body" / "query" marker
    parts = [str(p) for p in loc[1:]] if len(loc) > 1 else [str(p) for p in loc]
    return ".".join(parts)


def setup_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(EntityNotFoundError)
    async def not_found_handler(request: Request, exc: EntityNotFoundError):
        return _error_response(status.HTTP_404_NOT_FOUND, "NOT_FOUND", str(exc))

    @app.exception_handler(ValidationError)
    async def validation_handler(request: Request, exc: ValidationError):
        details = [FieldErrorSchema.model_validate(e) for e in exc.errors]
        return _error_response(
            status.HTTP_400_BAD_REQUEST, "VALIDATION_ERROR", str(exc), details
        )

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        details = [
            FieldErrorSchema(field=_location(tuple(err["loc"])), message=err["msg"], code=err["type"])
            for err in exc.errors()
        ]
        return _error_response(
            status.HTTP_400_BAD_REQUEST,
            "VALIDATION_ERROR",
            "Request validation failed",
            details,
        )

    @app.exception_handler(DuplicateEntityError)
    async def duplicate_handler(request: Request, exc: DuplicateEntityError):
        return _error_response(status.HTTP_409_CONFLICT, "DUPLICATE_ENTITY", str(exc))

    @app.exception_handler(VersionConflictError)
    async def version_conflict_handler(request: Request, exc: VersionConflictError):
        return _error_response(status.HTTP_409_CONFLICT, "VERSION_CONFLICT", str(exc))

    @app.exception_handler(InvalidStatusTransitionError)
    async def transition_handler(request: Request, exc: InvalidStatusTransitionError):
        return _error_response(
            status.HTTP_409_CONFLICT, "INVALID_STATUS_TRANSITION", str(exc)
        )

    @app.exception_handler(SQLAlchemyError)
    async def database_error_handler(request: Request, exc: SQLAlchemyError):
        logger.exception("Database error on %s %s", request.method, request.url.path)
        return _error_response(
            status.HTTP_500_INTERNAL_SERVER_ERROR,
            "DATABASE_ERROR",
            "A database error occurred",
        )
