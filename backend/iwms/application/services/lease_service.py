"""Application service for Lease use cases."""

import logging
from datetime import date, datetime, timedelta, timezone

from iwms.application.interfaces import LeaseRepository
from iwms.application.schemas.lease import LeaseCreate, LeaseUpdate
from iwms.domain.entities import EscalationType, Lease, LeaseStatus
from iwms.domain.exceptions import (
    EntityNotFoundError,
    InvalidStatusTransitionError,
    VersionConflictError,
)
from iwms.domain.validation import ValidationResult

logger = logging.getLogger(__name__)

MAX_TERM_YEARS = 99
RENEWAL_ACTOR = "system"


def _add_years(day: date, years: int) -> date:
    try:
        return day.replace(year=day.year + years)
    except ValueError:
        # 29 February in a non-leap target year
        return day.replace(year=day.year + years, day=28)


class LeaseService:
    """Orchestrates lease validation, status workflow and persistence."""

    def __init__(self, repository: LeaseRepository, renewal_notice_days: int = 90):
        self._repository = repository
        self._renewal_notice_days = renewal_notice_days

    def validate_lease(self, lease: Lease) -> ValidationResult:
        result = ValidationResult()

        if not lease.property_id:
            result.add_error("property_id", "Property ID is required", "REQUIRED_FIELD")
        if not lease.tenant_id:
            result.add_error("tenant_id", "Tenant ID is required", "REQUIRED_FIELD")

        if lease.end_date <= lease.start_date:
            result.add_error("end_date", "End date must be after start date", "INVALID_DATE_RANGE")
        elif lease.end_date > _add_years(lease.start_date, MAX_TERM_YEARS):
            result.add_error(
                "end_date",
                f"Lease term cannot exceed {MAX_TERM_YEARS} years",
                "INVALID_TERM",
            )

        if lease.monthly_rent < 0:
            result.add_error("monthly_rent", "Monthly rent cannot be negative", "NEGATIVE_AMOUNT")

        terms = lease.terms
        if terms.security_deposit < 0:
            result.add_error(
                "terms.security_deposit",
                "Security deposit cannot be negative",
                "NEGATIVE_AMOUNT",
            )
        if terms.escalation_type == EscalationType.PERCENTAGE and terms.escalation_rate is None:
            result.add_error(
                "terms.escalation_rate",
                "Percentage escalation requires an escalation rate",
                "REQUIRED_FIELD",
            )
        if terms.escalation_rate is not None and not 0 <= terms.escalation_rate <= 100:
            result.add_error(
                "terms.escalation_rate",
                "Escalation rate must be between 0 and 100",
                "INVALID_VALUE",
            )
        if not 1 <= terms.payment_due_day <= 31:
            result.add_error(
                "terms.payment_due_day",
                "Payment due day must be between 1 and 31",
                "INVALID_VALUE",
            )
        return result

    async def get_lease(self, lease_id: str) -> Lease:
        lease = await self._repository.get_by_id(lease_id)
        if lease is None:
            raise EntityNotFoundError("Lease", lease_id)
        return lease

    async def _get_live_lease(self, lease_id: str) -> Lease:
        lease = await self.get_lease(lease_id)
        if lease.is_deleted:
            raise EntityNotFoundError("Lease", lease_id)
        return lease

    async def list_leases_by_property(self, property_id: str) -> list[Lease]:
        return await self._repository.list_by_property(property_id)

    async def list_active_leases(self) -> list[Lease]:
        return await self._repository.list_active()

    async def create_lease(self, data: LeaseCreate, actor: str) -> Lease:
        lease = Lease(
            property_id=data.property_id,
            tenant_id=data.tenant_id,
            start_date=data.start_date,
            end_date=data.end_date,
            monthly_rent=data.monthly_rent,
            terms=data.terms.to_domain(),
            created_by=actor,
            updated_by=actor,
        )
        lease.record_change(actor, "creation", None, "Lease created")
        self.validate_lease(lease).raise_if_invalid("Lease")
        return await self._repository.create(lease)

    async def update_lease(self, lease_id: str, data: LeaseUpdate, actor: str) -> Lease:
        lease = await self._get_live_lease(lease_id)
        lease.update(
            actor=actor,
            start_date=data.start_date,
            end_date=data.end_date,
            monthly_rent=data.monthly_rent,
            terms=data.terms.to_domain() if data.terms else None,
        )
        self.validate_lease(lease).raise_if_invalid("Lease")
        return await self._repository.update(lease, data.version)

    async def update_status(
        self, lease_id: str, status: LeaseStatus, version: int, actor: str
    ) -> Lease:
        lease = await self._get_live_lease(lease_id)
        lease.change_status(status, actor)
        updated = await self._repository.update(lease, version)
        logger.info("Lease %s moved to %s by %s", lease_id, status.value, actor)
        return updated

    async def delete_lease(self, lease_id: str, actor: str) -> None:
        if not await self._repository.soft_delete(lease_id, actor):
            raise EntityNotFoundError("Lease", lease_id)

    async def find_expiring_leases(
        self, within_days: int | None = None, today: date | None = None
    ) -> list[Lease]:
        """Active leases ending within the notice window."""
        today = today or datetime.now(timezone.utc).date()
        window = self._renewal_notice_days if within_days is None else within_days
        return await self._repository.list_expiring(today + timedelta(days=window))

    async def flag_renewals(self, today: date | None = None) -> list[Lease]:
        """Move active leases inside the notice window to PENDING_RENEWAL.

        A lease changed concurrently is skipped and picked up on the next run.
        """
        flagged: list[Lease] = []
        for lease in await self.find_expiring_leases(today=today):
            try:
                lease.change_status(LeaseStatus.PENDING_RENEWAL, RENEWAL_ACTOR)
                flagged.append(await self._repository.update(lease, lease.version))
            except (VersionConflictError, InvalidStatusTransitionError) as exc:
                logger.warning("Skipped renewal flag for lease %s: %s", lease.id, exc)
        logger.info("Flagged %d leases for renewal", len(flagged))
        return flagged
