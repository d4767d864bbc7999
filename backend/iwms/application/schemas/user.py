"""Pydantic DTOs for the User feature."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from iwms.domain.entities import UserRole, UserStatus

_EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+\.[^@\s]+$"
_PHONE_PATTERN = r"^\+?[1-9]\d{1,14}$"
_LANGUAGE_PATTERN = r"^[a-z]{2}(-[A-Z]{2})?$"


class UserCreate(BaseModel):
    email: str = Field(..., max_length=255, pattern=_EMAIL_PATTERN, examples=["jane@example.com"])
    first_name: str = Field(..., min_length=1, max_length=100)
    last_name: str = Field(..., min_length=1, max_length=100)
    role: UserRole
    business_unit: str = Field(..., min_length=1, max_length=100)
    department: str = Field("", max_length=100)
    employee_id: str | None = Field(None, max_length=50)
    phone_number: str | None = Field(None, pattern=_PHONE_PATTERN)
    permissions: list[str] = Field(default_factory=list)
    preferred_language: str = Field("en", pattern=_LANGUAGE_PATTERN)
    timezone: str = Field("UTC", max_length=64)
    metadata: dict[str, Any] = Field(default_factory=dict)


class UserBulkCreate(BaseModel):
    items: list[UserCreate] = Field(..., min_length=1)


class UserUpdate(BaseModel):
    """Partial profile update, all fields optional except ``version``.

    Account status is changed through ``UserSecurityUpdate`` only.
    """

    version: int = Field(..., ge=1)
    first_name: str | None = Field(None, min_length=1, max_length=100)
    last_name: str | None = Field(None, min_length=1, max_length=100)
    role: UserRole | None = None
    business_unit: str | None = Field(None, min_length=1, max_length=100)
    department: str | None = Field(None, max_length=100)
    phone_number: str | None = Field(None, pattern=_PHONE_PATTERN)
    permissions: list[str] | None = None
    preferred_language: str | None = Field(None, pattern=_LANGUAGE_PATTERN)
    timezone: str | None = Field(None, max_length=64)
    metadata: dict[str, Any] | None = None


class UserSecurityUpdate(BaseModel):
    version: int = Field(..., ge=1)
    mfa_enabled: bool | None = None
    password_expiry_days: int | None = Field(None, ge=1, le=365)
    login_notifications: bool | None = None
    allowed_ips: list[str] | None = None
    status: UserStatus | None = None


class SecurityPreferencesSchema(BaseModel):
    mfa_enabled: bool
    password_expiry_days: int
    login_notifications: bool
    allowed_ips: list[str]

    model_config = {"from_attributes": True}


class UserResponse(BaseModel):
    id: str
    email: str
    first_name: str
    last_name: str
    full_name: str
    role: UserRole
    status: UserStatus
    business_unit: str
    department: str
    employee_id: str | None
    phone_number: str | None
    permissions: list[str]
    is_active: bool
    preferred_language: str
    timezone: str
    security_preferences: SecurityPreferencesSchema
    failed_login_attempts: int
    last_login_at: datetime | None
    metadata: dict[str, Any]
    version: int
    created_by: str
    updated_by: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
