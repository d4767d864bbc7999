"""Unit tests for the LeaseService."""

import copy
from datetime import date
from decimal import Decimal

import pytest

from iwms.application.interfaces import LeaseRepository
from iwms.application.schemas import LeaseCreate, LeaseTermsSchema, LeaseUpdate
from iwms.application.services import LeaseService
from iwms.domain.entities import EscalationType, Lease, LeaseStatus, LeaseTerms
from iwms.domain.exceptions import (
    EntityNotFoundError,
    InvalidStatusTransitionError,
    ValidationError,
    VersionConflictError,
)


class FakeLeaseRepository(LeaseRepository):
    """In-memory fake repository for unit testing."""

    def __init__(self):
        self._items: dict[str, Lease] = {}

    async def get_by_id(self, lease_id: str) -> Lease | None:
        stored = self._items.get(lease_id)
        return copy.deepcopy(stored) if stored else None

    async def list_by_property(self, property_id: str) -> list[Lease]:
        return [
            copy.deepcopy(item)
            for item in self._items.values()
            if item.property_id == property_id and not item.is_deleted
        ]

    async def list_active(self) -> list[Lease]:
        return [
            copy.deepcopy(item)
            for item in self._items.values()
            if item.status == LeaseStatus.ACTIVE and not item.is_deleted
        ]

    async def list_expiring(self, on_or_before: date) -> list[Lease]:
        return [item for item in await self.list_active() if item.end_date <= on_or_before]

    async def create(self, lease: Lease) -> Lease:
        self._items[lease.id] = copy.deepcopy(lease)
        return lease

    async def update(self, lease: Lease, expected_version: int) -> Lease:
        stored = self._items[lease.id]
        if stored.version != expected_version:
            raise VersionConflictError("Lease", lease.id, expected_version, stored.version)
        lease.version = stored.version + 1
        self._items[lease.id] = copy.deepcopy(lease)
        return lease

    async def soft_delete(self, lease_id: str, actor: str) -> bool:
        stored = self._items.get(lease_id)
        if stored is None:
            return False
        if not stored.is_deleted:
            stored.mark_deleted(actor)
            stored.version += 1
        return True


def _lease_data(**overrides) -> LeaseCreate:
    values = {
        "property_id": "prop-1",
        "tenant_id": "tenant-1",
        "start_date": date(2024, 1, 1),
        "end_date": date(2026, 12, 31),
        "monthly_rent": Decimal("2500.00"),
    }
    values.update(overrides)
    return LeaseCreate(**values)


@pytest.fixture
def repository() -> FakeLeaseRepository:
    return FakeLeaseRepository()


@pytest.fixture
def service(repository) -> LeaseService:
    return LeaseService(repository, renewal_notice_days=90)


async def _activate(service: LeaseService, lease: Lease) -> Lease:
    return await service.update_status(lease.id, LeaseStatus.ACTIVE, lease.version, "alice")


@pytest.mark.asyncio
async def test_create_lease_starts_as_draft_with_audit_entry(service: LeaseService):
    lease = await service.create_lease(_lease_data(), actor="alice")
    assert lease.status == LeaseStatus.DRAFT
    assert lease.term_days == 1095
    assert len(lease.audit_trail) == 1
    assert lease.audit_trail[0].field == "creation"
    assert lease.audit_trail[0].user_id == "alice"


@pytest.mark.asyncio
async def test_create_rejects_end_before_start(service: LeaseService):
    data = _lease_data(start_date=date(2025, 1, 1), end_date=date(2024, 1, 1))
    with pytest.raises(ValidationError) as exc_info:
        await service.create_lease(data, actor="alice")
    assert exc_info.value.errors[0].code == "INVALID_DATE_RANGE"


@pytest.mark.asyncio
async def test_create_rejects_term_over_99_years(service: LeaseService):
    data = _lease_data(start_date=date(2024, 2, 29), end_date=date(2123, 3, 1))
    with pytest.raises(ValidationError) as exc_info:
        await service.create_lease(data, actor="alice")
    assert exc_info.value.errors[0].code == "INVALID_TERM"


@pytest.mark.asyncio
async def test_percentage_escalation_needs_rate(service: LeaseService):
    data = _lease_data(terms=LeaseTermsSchema(escalation_type=EscalationType.PERCENTAGE))
    with pytest.raises(ValidationError) as exc_info:
        await service.create_lease(data, actor="alice")
    assert exc_info.value.errors[0].field == "terms.escalation_rate"


def test_validate_lease_rejects_negative_amounts(service: LeaseService):
    lease = Lease(
        property_id="prop-1",
        tenant_id="tenant-1",
        start_date=date(2024, 1, 1),
        end_date=date(2025, 1, 1),
        monthly_rent=Decimal("-1"),
        terms=LeaseTerms(security_deposit=Decimal("-5")),
    )
    result = service.validate_lease(lease)

    assert [(e.field, e.code) for e in result.errors] == [
        ("monthly_rent", "NEGATIVE_AMOUNT"),
        ("terms.security_deposit", "NEGATIVE_AMOUNT"),
    ]
    with pytest.raises(ValidationError) as exc_info:
        result.raise_if_invalid("Lease")
    assert exc_info.value.errors[0].code == "NEGATIVE_AMOUNT"


@pytest.mark.asyncio
async def test_status_workflow(service: LeaseService):
    lease = await service.create_lease(_lease_data(), actor="alice")
    active = await _activate(service, lease)
    assert active.status == LeaseStatus.ACTIVE
    assert active.version == 2
    assert active.audit_trail[-1].field == "status"
    assert active.audit_trail[-1].old_value == "DRAFT"
    assert active.audit_trail[-1].new_value == "ACTIVE"

    with pytest.raises(InvalidStatusTransitionError):
        await service.update_status(lease.id, LeaseStatus.DRAFT, active.version, "alice")


@pytest.mark.asyncio
async def test_update_with_stale_version_conflicts(service: LeaseService):
    lease = await service.create_lease(_lease_data(), actor="alice")
    await service.update_lease(
        lease.id, LeaseUpdate(version=1, monthly_rent=Decimal("2600.00")), actor="bob"
    )
    with pytest.raises(VersionConflictError):
        await service.update_lease(
            lease.id, LeaseUpdate(version=1, monthly_rent=Decimal("2700.00")), actor="carol"
        )


@pytest.mark.asyncio
async def test_update_audits_changed_fields(service: LeaseService):
    lease = await service.create_lease(_lease_data(), actor="alice")
    updated = await service.update_lease(
        lease.id,
        LeaseUpdate(version=1, monthly_rent=Decimal("3000.00"), end_date=date(2026, 12, 31)),
        actor="bob",
    )
    changed = [entry.field for entry in updated.audit_trail[1:]]
    assert changed == ["monthly_rent"]
    assert updated.audit_trail[-1].old_value == "2500.00"


@pytest.mark.asyncio
async def test_deleted_lease_is_terminated_and_read_only(service: LeaseService):
    lease = await service.create_lease(_lease_data(), actor="alice")
    await service.delete_lease(lease.id, actor="alice")

    deleted = await service.get_lease(lease.id)
    assert deleted.is_deleted
    assert deleted.status == LeaseStatus.TERMINATED
    assert deleted.deleted_by == "alice"
    assert await service.list_leases_by_property("prop-1") == []
    with pytest.raises(EntityNotFoundError):
        await service.update_lease(lease.id, LeaseUpdate(version=deleted.version), actor="bob")


@pytest.mark.asyncio
async def test_delete_unknown_lease(service: LeaseService):
    with pytest.raises(EntityNotFoundError):
        await service.delete_lease("missing", actor="alice")


@pytest.mark.asyncio
async def test_find_expiring_leases_uses_notice_window(service: LeaseService):
    soon = await _activate(
        service, await service.create_lease(_lease_data(end_date=date(2025, 3, 1)), "alice")
    )
    await _activate(
        service, await service.create_lease(_lease_data(end_date=date(2027, 1, 1)), "alice")
    )

    expiring = await service.find_expiring_leases(today=date(2025, 1, 1))
    assert [item.id for item in expiring] == [soon.id]
    assert await service.find_expiring_leases(within_days=10, today=date(2025, 1, 1)) == []


@pytest.mark.asyncio
async def test_flag_renewals_moves_leases_to_pending_renewal(service: LeaseService):
    lease = await _activate(
        service, await service.create_lease(_lease_data(end_date=date(2025, 3, 1)), "alice")
    )
    flagged = await service.flag_renewals(today=date(2025, 1, 1))

    assert [item.id for item in flagged] == [lease.id]
    stored = await service.get_lease(lease.id)
    assert stored.status == LeaseStatus.PENDING_RENEWAL
    assert stored.updated_by == "system"
    assert await service.flag_renewals(today=date(2025, 1, 1)) == []
