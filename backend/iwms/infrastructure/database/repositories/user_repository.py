"""Concrete repository implementation for User backed by SQLAlchemy."""

import logging
from dataclasses import asdict
from datetime import datetime, timezone

from pydantic import TypeAdapter
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm.exc import StaleDataError

from iwms.application.interfaces import UserRepository
from iwms.domain.entities import SecurityPreferences, User, UserRole, UserStatus
from iwms.domain.exceptions import (
    DuplicateEntityError,
    EntityNotFoundError,
    VersionConflictError,
)
from iwms.infrastructure.cache import EntityCache
from iwms.infrastructure.cache.keys import normalize_email, user_email_key, user_key
from iwms.infrastructure.database.models import UserModel
from iwms.infrastructure.database.session import transaction

logger = logging.getLogger(__name__)

_security_adapter = TypeAdapter(SecurityPreferences)


class SQLAlchemyUserRepository(UserRepository):
    """Implements the UserRepository port with a look-aside cache."""

    def __init__(self, session: AsyncSession, cache: EntityCache[User]):
        self._session = session
        self._cache = cache

    def _to_entity(self, model: UserModel) -> User:
        return User(
            id=model.id,
            email=model.email,
            first_name=model.first_name,
            last_name=model.last_name,
            role=model.role,
            status=model.status,
            business_unit=model.business_unit,
            department=model.department,
            employee_id=model.employee_id,
            phone_number=model.phone_number,
            permissions=list(model.permissions),
            is_active=model.is_active,
            preferred_language=model.preferred_language,
            timezone=model.timezone,
            security_preferences=_security_adapter.validate_python(model.security_preferences),
            failed_login_attempts=model.failed_login_attempts,
            last_login_at=model.last_login_at,
            metadata=dict(model.metadata_),
            version=model.version,
            created_by=model.created_by,
            updated_by=model.updated_by,
            created_at=model.created_at,
            updated_at=model.updated_at,
        )

    def _apply(self, model: UserModel, entity: User) -> None:
        model.first_name = entity.first_name
        model.last_name = entity.last_name
        model.role = entity.role
        model.status = entity.status
        model.business_unit = entity.business_unit
        model.department = entity.department
        model.employee_id = entity.employee_id
        model.phone_number = entity.phone_number
        model.permissions = list(entity.permissions)
        model.is_active = entity.is_active
        model.preferred_language = entity.preferred_language
        model.timezone = entity.timezone
        model.security_preferences = asdict(entity.security_preferences)
        model.failed_login_attempts = entity.failed_login_attempts
        model.last_login_at = entity.last_login_at
        model.metadata_ = dict(entity.metadata)
        model.updated_by = entity.updated_by
        model.updated_at = entity.updated_at

    def _to_model(self, entity: User) -> UserModel:
        model = UserModel(
            id=entity.id,
            email=entity.email,
            created_by=entity.created_by,
            created_at=entity.created_at,
        )
        self._apply(model, entity)
        return model

    async def _invalidate(self, user: UserModel) -> None:
        await self._cache.invalidate(user_key(user.id), user_email_key(user.email))

    async def get_by_id(self, user_id: str) -> User | None:
        key = user_key(user_id)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        model = await self._session.get(UserModel, user_id)
        if model is None:
            return None
        user = self._to_entity(model)
        await self._cache.put(key, user)
        return user

    async def get_by_email(self, email: str) -> User | None:
        email = normalize_email(email)
        key = user_email_key(email)
        cached = await self._cache.get(key)
        if cached is not None:
            return cached

        result = await self._session.execute(select(UserModel).where(UserModel.email == email))
        model = result.scalar_one_or_none()
        if model is None:
            return None
        user = self._to_entity(model)
        await self._cache.put(key, user)
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
        stmt = select(UserModel).where(UserModel.is_active.is_(True))

        if business_unit is not None:
            stmt = stmt.where(UserModel.business_unit == business_unit)
        if role is not None:
            stmt = stmt.where(UserModel.role == role)
        if status is not None:
            stmt = stmt.where(UserModel.status == status)

        stmt = stmt.offset(skip).limit(limit).order_by(UserModel.created_at.desc())
        result = await self._session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    async def create(self, user: User) -> User:
        model = self._to_model(user)
        try:
            async with transaction(self._session):
                self._session.add(model)
        except IntegrityError as exc:
            raise DuplicateEntityError("User", "email", user.email) from exc
        await self._invalidate(model)
        logger.info("Created user %s", model.id)
        return self._to_entity(model)

    async def bulk_create(self, users: list[User]) -> list[User]:
        models = [self._to_model(u) for u in users]
        try:
            async with transaction(self._session):
                self._session.add_all(models)
        except IntegrityError as exc:
            raise DuplicateEntityError(
                "User", "email", ", ".join(u.email for u in users)
            ) from exc
        for model in models:
            await self._invalidate(model)
        logger.info("Bulk-created %d users", len(models))
        return [self._to_entity(m) for m in models]

    async def update(self, user: User, expected_version: int) -> User:
        try:
            async with transaction(self._session):
                model = await self._session.get(UserModel, user.id, populate_existing=True)
                if model is None:
                    raise EntityNotFoundError("User", user.id)
                if model.version != expected_version:
                    raise VersionConflictError("User", user.id, expected_version, model.version)
                self._apply(model, user)
        except StaleDataError as exc:
            raise VersionConflictError("User", user.id, expected_version) from exc
        await self._invalidate(model)
        return self._to_entity(model)

    async def soft_delete(self, user_id: str, actor: str) -> bool:
        async with transaction(self._session):
            model = await self._session.get(UserModel, user_id, populate_existing=True)
            if model is None:
                return False
            model.is_active = False
            model.status = UserStatus.INACTIVE
            model.updated_by = actor
            model.updated_at = datetime.now(timezone.utc)
        await self._invalidate(model)
        logger.info("Deactivated user %s", user_id)
        return True
