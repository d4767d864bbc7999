"""Abstract interface (port) for User persistence."""

from abc import ABC, abstractmethod

from iwms.domain.entities import User, UserRole, UserStatus


class UserRepository(ABC):
    """Port that any user storage adapter must implement."""

    @abstractmethod
    async def get_by_id(self, user_id: str) -> User | None:
        ...

    @abstractmethod
    async def get_by_email(self, email: str) -> User | None:
        ...

    @abstractmethod
    async def list_users(
        self,
        *,
        business_unit: str | None = None,
        role: UserRole | None = None,
        status: UserStatus | None = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[User]:
        ...

    @abstractmethod
    async def create(self, user: User) -> User:
        """Insert a user. Raises DuplicateEntityError on a taken e-mail."""
        ...

    @abstractmethod
    async def bulk_create(self, users: list[User]) -> list[User]:
        ...

    @abstractmethod
    async def update(self, user: User, expected_version: int) -> User:
        ...

    @abstractmethod
    async def soft_delete(self, user_id: str, actor: str) -> bool:
        ...
