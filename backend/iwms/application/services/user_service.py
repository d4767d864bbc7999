"""Application service for User use cases."""

import ipaddress
import logging

from iwms.application.interfaces import UserRepository
from iwms.application.schemas.user import UserCreate, UserSecurityUpdate, UserUpdate
from iwms.domain.entities import User, UserRole, UserStatus
from iwms.domain.exceptions import (
    BulkLimitExceededError,
    DuplicateEntityError,
    EntityNotFoundError,
    FieldError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class UserService:
    """Orchestrates user lifecycle and account security rules."""

    def __init__(
        self,
        repository: UserRepository,
        max_login_attempts: int = 5,
        bulk_limit: int = 100,
    ):
        self._repository = repository
        self._max_login_attempts = max_login_attempts
        self._bulk_limit = bulk_limit

    def _build(self, data: UserCreate, actor: str) -> User:
        return User(**data.model_dump(), created_by=actor, updated_by=actor)

    async def get_user(self, user_id: str) -> User:
        user = await self._repository.get_by_id(user_id)
        if user is None:
            raise EntityNotFoundError("User", user_id)
        return user

    async def get_user_by_email(self, email: str) -> User:
        user = await self._repository.get_by_email(email)
        if user is None:
            raise EntityNotFoundError("User", email)
        return user

    async def list_users(
        self,
        *,
        business_unit: str | None = None,
        role: UserRole | None = None,
        status: UserStatus | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[User]:
        return await self._repository.list_users(
            business_unit=business_unit,
            role=role,
            status=status,
            skip=skip,
            limit=limit,
        )

    async def create_user(self, data: UserCreate, actor: str) -> User:
        user = self._build(data, actor)
        if await self._repository.get_by_email(user.email) is not None:
            raise DuplicateEntityError("User", "email", user.email)
        return await self._repository.create(user)

    async def bulk_create(self, items: list[UserCreate], actor: str) -> list[User]:
        if len(items) > self._bulk_limit:
            raise BulkLimitExceededError("User", len(items), self._bulk_limit)

        users = [self._build(item, actor) for item in items]
        seen: set[str] = set()
        errors: list[FieldError] = []
        for index, user in enumerate(users):
            if user.email in seen:
                errors.append(
                    FieldError(
                        field=f"items[{index}].email",
                        message=f"Duplicate e-mail '{user.email}' in batch",
                        code="DUPLICATE_VALUE",
                    )
                )
            seen.add(user.email)
        if errors:
            raise ValidationError("User", errors)

        for user in users:
            if await self._repository.get_by_email(user.email) is not None:
                raise DuplicateEntityError("User", "email", user.email)
        return await self._repository.bulk_create(users)

    async def update_user(self, user_id: str, data: UserUpdate, actor: str) -> User:
        user = await self.get_user(user_id)
        user.update(actor=actor, **data.model_dump(exclude={"version"}, exclude_unset=True))
        return await self._repository.update(user, data.version)

    async def update_security(
        self, user_id: str, data: UserSecurityUpdate, actor: str
    ) -> User:
        """Change security preferences and, optionally, the account status."""
        if data.allowed_ips is not None:
            _validate_ip_list(data.allowed_ips)

        user = await self.get_user(user_id)
        preferences = user.security_preferences
        changes = data.model_dump(exclude={"version", "status"}, exclude_none=True)
        for name, value in changes.items():
            setattr(preferences, name, value)
        if data.status == UserStatus.ACTIVE:
            user.failed_login_attempts = 0
        user.update(actor=actor, status=data.status)
        updated = await self._repository.update(user, data.version)
        logger.info("Security settings of user %s changed by %s", user_id, actor)
        return updated

    async def record_failed_login(self, user_id: str) -> User:
        user = await self.get_user(user_id)
        user.register_failed_login(self._max_login_attempts)
        updated = await self._repository.update(user, user.version)
        if updated.status == UserStatus.LOCKED:
            logger.warning(
                "User %s locked after %d failed logins",
                user_id,
                updated.failed_login_attempts,
            )
        return updated

    async def reset_security_status(self, user_id: str, actor: str) -> User:
        user = await self.get_user(user_id)
        user.reset_security_status(actor)
        return await self._repository.update(user, user.version)

    async def delete_user(self, user_id: str, actor: str) -> None:
        if not await self._repository.soft_delete(user_id, actor):
            raise EntityNotFoundError("User", user_id)


def _validate_ip_list(addresses: list[str]) -> None:
    errors = []
    for index, address in enumerate(addresses):
        try:
            ipaddress.ip_network(address, strict=False)
        except ValueError:
            errors.append(
                FieldError(
                    field=f"allowed_ips[{index}]",
                    message=f"'{address}' is not a valid IP address or network",
                    code="INVALID_IP",
                )
            )
    if errors:
        raise ValidationError("User", errors)
