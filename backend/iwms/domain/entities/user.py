"""User entity: platform accounts scoped to a business unit."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4


class UserRole(str, Enum):
    SYSTEM_ADMIN = "SYSTEM_ADMIN"
    FACILITY_MANAGER = "FACILITY_MANAGER"
    SPACE_PLANNER = "SPACE_PLANNER"
    BU_ADMIN = "BU_ADMIN"
    TENANT_USER = "TENANT_USER"
    READONLY_USER = "READONLY_USER"


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    PENDING_ACTIVATION = "PENDING_ACTIVATION"
    LOCKED = "LOCKED"


@dataclass
class SecurityPreferences:
    mfa_enabled: bool = False
    password_expiry_days: int = 90
    login_notifications: bool = True
    allowed_ips: list[str] = field(default_factory=list)


@dataclass
class User:
    """A platform user."""

    email: str
    first_name: str
    last_name: str
    role: UserRole
    business_unit: str
    department: str = ""
    employee_id: str | None = None
    phone_number: str | None = None
    permissions: list[str] = field(default_factory=list)
    status: UserStatus = UserStatus.PENDING_ACTIVATION
    is_active: bool = True
    preferred_language: str = "en"
    timezone: str = "UTC"
    security_preferences: SecurityPreferences = field(default_factory=SecurityPreferences)
    failed_login_attempts: int = 0
    last_login_at: datetime | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    version: int = 1
    created_by: str = "system"
    updated_by: str = "system"
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        self.email = self.email.strip().lower()

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def update(self, *, actor: str, **changes: Any) -> None:
        """Apply the given field changes and refresh audit fields."""
        for name, value in changes.items():
            if value is None:
                continue
            if not hasattr(self, name):
                raise AttributeError(f"User has no field '{name}'")
            setattr(self, name, value)
        if changes.get("status") is not None:
            self.is_active = self.status != UserStatus.INACTIVE
        self.updated_by = actor
        self.updated_at = datetime.now(timezone.utc)

    def register_failed_login(self, max_attempts: int) -> None:
        """Count a failed login and lock the account at ``max_attempts``."""
        self.failed_login_attempts += 1
        if self.failed_login_attempts >= max_attempts:
            self.status = UserStatus.LOCKED
        self.updated_at = datetime.now(timezone.utc)

    def reset_security_status(self, actor: str) -> None:
        self.failed_login_attempts = 0
        if self.status == UserStatus.LOCKED:
            self.status = UserStatus.ACTIVE
        self.updated_by = actor
        self.updated_at = datetime.now(timezone.utc)
