"""Integration tests for the SQLAlchemy repositories on SQLite."""

from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

import pytest

from iwms.domain.entities import (
    FloorPlan,
    FloorPlanDimensions,
    FloorPlanMetadata,
    FloorPlanStatus,
    Lease,
    LeaseStatus,
    OccupancyData,
    User,
    UserRole,
    UserStatus,
)
from iwms.domain.exceptions import DuplicateEntityError, VersionConflictError
from iwms.infrastructure.cache import EntityCache
from iwms.infrastructure.cache.keys import (
    LEASE_ACTIVE_KEY,
    floor_plan_key,
    floor_plan_page_key,
    occupancy_key,
    user_email_key,
    user_key,
)
from iwms.infrastructure.database.repositories import (
    SQLAlchemyFloorPlanRepository,
    SQLAlchemyLeaseRepository,
    SQLAlchemyOccupancyRepository,
    SQLAlchemyUserRepository,
)


def _floor_plan(name: str = "Level 1", property_id: str = "prop-1") -> FloorPlan:
    return FloorPlan(
        property_id=property_id,
        metadata=FloorPlanMetadata(
            name=name,
            dimensions=FloorPlanDimensions(width=40, height=30),
            total_area=1200,
            usable_area=1000,
        ),
        created_by="alice",
        updated_by="alice",
    )


def _lease(**overrides) -> Lease:
    values = {
        "property_id": "prop-1",
        "tenant_id": "tenant-1",
        "start_date": date(2024, 1, 1),
        "end_date": date(2026, 1, 1),
        "monthly_rent": Decimal("1500.00"),
    }
    values.update(overrides)
    return Lease(**values)


def _user(email: str = "jane@example.com") -> User:
    return User(
        email=email,
        first_name="Jane",
        last_name="Doe",
        role=UserRole.SPACE_PLANNER,
        business_unit="bu-1",
    )


# ── Floor plans ──────────────────────────────────────────────────────


@pytest.fixture
def floor_plans(db_session, cache_backend) -> SQLAlchemyFloorPlanRepository:
    return SQLAlchemyFloorPlanRepository(db_session, EntityCache(cache_backend, FloorPlan, 60))


@pytest.mark.asyncio
async def test_floor_plan_create_and_cached_read(floor_plans, cache_backend):
    created = await floor_plans.create(_floor_plan())
    assert created.version == 1

    fetched = await floor_plans.get_by_id(created.id)
    assert fetched.metadata.name == "Level 1"
    assert floor_plan_key(created.id) in cache_backend.keys()


@pytest.mark.asyncio
async def test_floor_plan_update_bumps_version_and_invalidates(floor_plans, cache_backend):
    created = await floor_plans.create(_floor_plan())
    await floor_plans.get_by_id(created.id)
    await floor_plans.list_by_property("prop-1", page=1, limit=10)
    assert floor_plan_page_key("prop-1", 1, 10) in cache_backend.keys()

    created.status = FloorPlanStatus.PUBLISHED
    updated = await floor_plans.update(created, expected_version=1)

    assert updated.version == 2
    assert updated.status == FloorPlanStatus.PUBLISHED
    assert cache_backend.keys() == []


@pytest.mark.asyncio
async def test_floor_plan_stale_update_is_rejected(floor_plans):
    created = await floor_plans.create(_floor_plan())
    created.update(actor="bob")
    await floor_plans.update(created, expected_version=1)

    created.update(actor="carol")
    with pytest.raises(VersionConflictError) as exc_info:
        await floor_plans.update(created, expected_version=1)
    assert exc_info.value.actual_version == 2


@pytest.mark.asyncio
async def test_floor_plan_listing_pages_and_skips_archived(floor_plans):
    first = await floor_plans.create(_floor_plan("A"))
    await floor_plans.bulk_create([_floor_plan("B"), _floor_plan("C"), _floor_plan("X", "prop-2")])
    assert await floor_plans.soft_delete(first.id, "alice") is True

    items, total = await floor_plans.list_by_property("prop-1", page=1, limit=1)
    assert total == 2
    assert len(items) == 1
    archived = await floor_plans.get_by_id(first.id)
    assert archived.status == FloorPlanStatus.ARCHIVED
    assert await floor_plans.soft_delete("missing", "alice") is False


@pytest.mark.asyncio
async def test_floor_plan_bulk_update_is_atomic(floor_plans):
    first = await floor_plans.create(_floor_plan("A"))
    second = await floor_plans.create(_floor_plan("B"))
    first.metadata.name = "A2"
    second.metadata.name = "B2"

    with pytest.raises(VersionConflictError):
        await floor_plans.bulk_update([(first, 1), (second, 5)])

    assert (await floor_plans.get_by_id(first.id)).metadata.name == "A"


# ── Leases ───────────────────────────────────────────────────────────


@pytest.fixture
def leases(db_session, cache_backend) -> SQLAlchemyLeaseRepository:
    return SQLAlchemyLeaseRepository(db_session, EntityCache(cache_backend, Lease, 60))


@pytest.mark.asyncio
async def test_lease_round_trip_keeps_money_and_audit(leases):
    lease = _lease()
    lease.record_change("alice", "creation", None, "Lease created")
    created = await leases.create(lease)

    fetched = await leases.get_by_id(created.id)
    assert fetched.monthly_rent == Decimal("1500.00")
    assert fetched.audit_trail[0].field == "creation"
    assert fetched.created_at.tzinfo is not None


@pytest.mark.asyncio
async def test_active_list_is_cached_and_invalidated(leases, cache_backend):
    created = await leases.create(_lease(status=LeaseStatus.ACTIVE))
    assert [lease.id for lease in await leases.list_active()] == [created.id]
    assert LEASE_ACTIVE_KEY in cache_backend.keys()

    created.change_status(LeaseStatus.PENDING_TERMINATION, "alice")
    await leases.update(created, expected_version=1)
    assert LEASE_ACTIVE_KEY not in cache_backend.keys()
    assert await leases.list_active() == []


@pytest.mark.asyncio
async def test_lease_soft_delete(leases):
    created = await leases.create(_lease(status=LeaseStatus.ACTIVE))
    assert await leases.soft_delete(created.id, "bob") is True

    deleted = await leases.get_by_id(created.id)
    assert deleted.is_deleted
    assert deleted.status == LeaseStatus.TERMINATED
    assert deleted.deleted_by == "bob"
    assert await leases.list_by_property("prop-1") == []


@pytest.mark.asyncio
async def test_list_expiring_only_returns_active(leases):
    soon = await leases.create(_lease(status=LeaseStatus.ACTIVE, end_date=date(2025, 2, 1)))
    await leases.create(_lease(status=LeaseStatus.DRAFT, end_date=date(2025, 2, 1)))
    await leases.create(_lease(status=LeaseStatus.ACTIVE, end_date=date(2030, 1, 1)))

    expiring = await leases.list_expiring(date(2025, 3, 1))
    assert [lease.id for lease in expiring] == [soon.id]


# ── Users ────────────────────────────────────────────────────────────


@pytest.fixture
def users(db_session, cache_backend) -> SQLAlchemyUserRepository:
    return SQLAlchemyUserRepository(db_session, EntityCache(cache_backend, User, 60))


@pytest.mark.asyncio
async def test_user_email_is_unique(users):
    await users.create(_user())
    with pytest.raises(DuplicateEntityError):
        await users.create(_user("JANE@example.com"))
    assert (await users.get_by_email("jane@example.com")).first_name == "Jane"


@pytest.mark.asyncio
async def test_user_update_invalidates_both_keys(users, cache_backend):
    created = await users.create(_user())
    await users.get_by_id(created.id)
    await users.get_by_email(created.email)
    assert {user_key(created.id), user_email_key(created.email)} <= set(cache_backend.keys())

    created.security_preferences.mfa_enabled = True
    updated = await users.update(created, expected_version=1)

    assert updated.security_preferences.mfa_enabled is True
    assert cache_backend.keys() == []


@pytest.mark.asyncio
async def test_user_filters_and_soft_delete(users):
    kept = await users.create(_user("a@example.com"))
    removed = await users.create(_user("b@example.com"))
    await users.soft_delete(removed.id, "admin")

    listed = await users.list_users(business_unit="bu-1", role=UserRole.SPACE_PLANNER)
    assert [u.id for u in listed] == [kept.id]
    assert (await users.get_by_id(removed.id)).status == UserStatus.INACTIVE


@pytest.mark.asyncio
async def test_padded_email_lookup_is_invalidated_on_write(users, cache_backend):
    created = await users.create(_user())
    assert (await users.get_by_email(" jane@example.com ")).id == created.id
    assert cache_backend.keys() == [user_email_key("jane@example.com")]

    await users.soft_delete(created.id, "admin")

    assert cache_backend.keys() == []
    assert (await users.get_by_email(" jane@example.com ")).status == UserStatus.INACTIVE


# ── Occupancy ────────────────────────────────────────────────────────


@pytest.fixture
def occupancy(db_session, cache_backend) -> SQLAlchemyOccupancyRepository:
    return SQLAlchemyOccupancyRepository(db_session, EntityCache(cache_backend, OccupancyData, 60))


@pytest.mark.asyncio
async def test_occupancy_latest_and_range(occupancy, cache_backend):
    base = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)
    for minutes, count in [(0, 2), (30, 5), (90, 7)]:
        await occupancy.add(
            OccupancyData(
                space_id="space-1",
                occupant_count=count,
                capacity=10,
                timestamp=base + timedelta(minutes=minutes),
            )
        )

    latest = await occupancy.get_latest("space-1")
    assert latest.occupant_count == 7
    assert latest.utilization_rate == 70.0
    assert occupancy_key("space-1") in cache_backend.keys()

    in_window = await occupancy.get_range("space-1", base, base + timedelta(hours=1))
    assert [r.occupant_count for r in in_window] == [2, 5]


@pytest.mark.asyncio
async def test_duplicate_reading_is_rejected(occupancy):
    timestamp = datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc)
    await occupancy.add(OccupancyData(space_id="s", occupant_count=1, capacity=5, timestamp=timestamp))
    with pytest.raises(DuplicateEntityError):
        await occupancy.add(
            OccupancyData(space_id="s", occupant_count=2, capacity=5, timestamp=timestamp)
        )
    assert (await occupancy.get_latest("s")).occupant_count == 1
