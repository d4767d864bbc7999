"""Lease entity with its status workflow and audit trail."""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import Any
from uuid import uuid4

from iwms.domain.exceptions import InvalidStatusTransitionError


class LeaseStatus(str, Enum):
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    ACTIVE = "ACTIVE"
    PENDING_RENEWAL = "PENDING_RENEWAL"
    IN_RENEWAL_NEGOTIATION = "IN_RENEWAL_NEGOTIATION"
    RENEWED = "RENEWED"
    PENDING_TERMINATION = "PENDING_TERMINATION"
    TERMINATED = "TERMINATED"
    EXPIRED = "EXPIRED"
    IN_DISPUTE = "IN_DISPUTE"
    ON_HOLD = "ON_HOLD"


class EscalationType(str, Enum):
    FIXED = "FIXED"
    PERCENTAGE = "PERCENTAGE"
    CPI = "CPI"
    MARKET_RATE = "MARKET_RATE"
    STEPPED = "STEPPED"
    HYBRID = "HYBRID"
    INDEXED = "INDEXED"
    NONE = "NONE"


ALLOWED_TRANSITIONS: dict[LeaseStatus, frozenset[LeaseStatus]] = {
    LeaseStatus.DRAFT: frozenset({LeaseStatus.PENDING_APPROVAL, LeaseStatus.ACTIVE}),
    LeaseStatus.PENDING_APPROVAL: frozenset({LeaseStatus.ACTIVE, LeaseStatus.DRAFT}),
    LeaseStatus.ACTIVE: frozenset({
        LeaseStatus.PENDING_RENEWAL,
        LeaseStatus.PENDING_TERMINATION,
        LeaseStatus.IN_DISPUTE,
        LeaseStatus.ON_HOLD,
        LeaseStatus.EXPIRED,
    }),
    LeaseStatus.PENDING_RENEWAL: frozenset({
        LeaseStatus.ACTIVE,
        LeaseStatus.IN_RENEWAL_NEGOTIATION,
        LeaseStatus.RENEWED,
    }),
    LeaseStatus.IN_RENEWAL_NEGOTIATION: frozenset({
        LeaseStatus.RENEWED,
        LeaseStatus.ACTIVE,
        LeaseStatus.PENDING_TERMINATION,
    }),
    LeaseStatus.RENEWED: frozenset({LeaseStatus.ACTIVE}),
    LeaseStatus.PENDING_TERMINATION: frozenset({LeaseStatus.TERMINATED}),
    LeaseStatus.TERMINATED: frozenset(),
    LeaseStatus.EXPIRED: frozenset(),
    LeaseStatus.IN_DISPUTE: frozenset({LeaseStatus.ACTIVE, LeaseStatus.TERMINATED}),
    LeaseStatus.ON_HOLD: frozenset({LeaseStatus.ACTIVE, LeaseStatus.TERMINATED}),
}


@dataclass
class LeaseTerms:
    """Financial terms stored as a JSON blob next to the lease row."""

    security_deposit: Decimal = Decimal("0")
    escalation_type: EscalationType = EscalationType.NONE
    escalation_rate: Decimal | None = None
    payment_due_day: int = 1
    conditions: dict[str, Any] = field(default_factory=dict)


@dataclass
class AuditEntry:
    timestamp: datetime
    user_id: str
    field: str
    old_value: Any = None
    new_value: Any = None


def _audit_value(value: Any) -> Any:
    """Reduce a field value to something JSON can hold."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Decimal):
        return str(value)
    return value


@dataclass
class Lease:
    """A lease between a property owner and a tenant."""

    property_id: str
    tenant_id: str
    start_date: date
    end_date: date
    monthly_rent: Decimal
    terms: LeaseTerms = field(default_factory=LeaseTerms)
    status: LeaseStatus = LeaseStatus.DRAFT
    audit_trail: list[AuditEntry] = field(default_factory=list)
    version: int = 1
    created_by: str = "system"
    updated_by: str = "system"
    is_deleted: bool = False
    deleted_at: datetime | None = None
    deleted_by: str | None = None
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def term_days(self) -> int:
        return (self.end_date - self.start_date).days

    def record_change(self, actor: str, field_name: str, old_value: Any, new_value: Any) -> None:
        """Append an entry to the audit trail."""
        self.audit_trail.append(
            AuditEntry(
                timestamp=datetime.now(timezone.utc),
                user_id=actor,
                field=field_name,
                old_value=_audit_value(old_value),
                new_value=_audit_value(new_value),
            )
        )

    def can_transition_to(self, status: LeaseStatus) -> bool:
        return status in ALLOWED_TRANSITIONS.get(self.status, frozenset())

    def change_status(self, status: LeaseStatus, actor: str) -> None:
        """Move to ``status`` if the workflow allows it."""
        if not self.can_transition_to(status):
            raise InvalidStatusTransitionError("Lease", self.status.value, status.value)
        self.record_change(actor, "status", self.status, status)
        self.status = status
        self.updated_by = actor
        self.updated_at = datetime.now(timezone.utc)

    def mark_deleted(self, actor: str) -> None:
        """Soft delete: terminate and flag the lease, keeping the row."""
        now = datetime.now(timezone.utc)
        if self.status != LeaseStatus.TERMINATED:
            self.record_change(actor, "status", self.status, LeaseStatus.TERMINATED)
            self.status = LeaseStatus.TERMINATED
        self.is_deleted = True
        self.deleted_at = now
        self.deleted_by = actor
        self.updated_by = actor
        self.updated_at = now

    def update(
        self,
        *,
        actor: str,
        start_date: date | None = None,
        end_date: date | None = None,
        monthly_rent: Decimal | None = None,
        terms: LeaseTerms | None = None,
    ) -> None:
        """Apply a partial update, auditing every field that changes."""
        changes = {
            "start_date": start_date,
            "end_date": end_date,
            "monthly_rent": monthly_rent,
            "terms": terms,
        }
        for name, value in changes.items():
            if value is None:
                continue
            current = getattr(self, name)
            if current == value:
                continue
            if name == "terms":
                self.record_change(actor, name, None, "Terms updated")
            else:
                self.record_change(actor, name, current, value)
            setattr(self, name, value)
        self.updated_by = actor
        self.updated_at = datetime.now(timezone.utc)
