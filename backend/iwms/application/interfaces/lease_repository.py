"""Abstract interface (port) for Lease persistence."""

from abc import ABC, abstractmethod
from datetime import date

from iwms.domain.entities import Lease


class LeaseRepository(ABC):
    """Port that any lease storage adapter must implement.

    Soft-deleted leases are never returned by the listing methods.
    """

    @abstractmethod
    async def get_by_id(self, lease_id: str) -> Lease | None:
        ...

    @abstractmethod
    async def list_by_property(self, property_id: str) -> list[Lease]:
        ...

    @abstractmethod
    async def list_active(self) -> list[Lease]:
        ...

    @abstractmethod
    async def list_expiring(self, on_or_before: date) -> list[Lease]:
        """Active leases whose end date falls on or before the given day."""
        ...

    @abstractmethod
    async def create(self, lease: Lease) -> Lease:
        ...

    @abstractmethod
    async def update(self, lease: Lease, expected_version: int) -> Lease:
        ...

    @abstractmethod
    async def soft_delete(self, lease_id: str, actor: str) -> bool:
        ...
