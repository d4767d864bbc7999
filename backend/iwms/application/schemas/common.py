"""Response envelopes shared by every resource."""

from datetime import datetime, timezone
from typing import Generic, TypeVar

from pydantic import BaseModel, Field

T = TypeVar("T")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ApiResponse(BaseModel, Generic[T]):
    """Successful response: ``{success, data, timestamp}``."""

    success: bool = True
    data: T
    timestamp: datetime = Field(default_factory=_utcnow)


class Page(BaseModel, Generic[T]):
    items: list[T]
    total: int
    page: int
    limit: int
    total_pages: int


class FieldErrorSchema(BaseModel):
    field: str
    message: str
    code: str

    model_config = {"from_attributes": True}


class ErrorDetail(BaseModel):
    code: str
    message: str
    details: list[FieldErrorSchema] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Failed response: ``{success: false, error, timestamp}``."""

    success: bool = False
    error: ErrorDetail
    timestamp: datetime = Field(default_factory=_utcnow)


class ValidationResultSchema(BaseModel):
    is_valid: bool
    errors: list[FieldErrorSchema]
    warnings: list[str]

    model_config = {"from_attributes": True}
