"""Pydantic DTOs for the Lease feature."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field, TypeAdapter

from iwms.domain.entities import EscalationType, LeaseStatus, LeaseTerms

_terms_adapter = TypeAdapter(LeaseTerms)


class LeaseTermsSchema(BaseModel):
    security_deposit: Decimal = Field(Decimal("0"), ge=0, max_digits=14, decimal_places=2)
    escalation_type: EscalationType = EscalationType.NONE
    escalation_rate: Decimal | None = Field(None, ge=0, le=100)
    payment_due_day: int = Field(1, ge=1, le=31)
    conditions: dict[str, Any] = Field(default_factory=dict)

    model_config = {"from_attributes": True}

    def to_domain(self) -> LeaseTerms:
        return _terms_adapter.validate_python(self.model_dump())


class LeaseCreate(BaseModel):
    """Schema for creating a lease; it always starts as DRAFT."""

    property_id: str = Field(..., min_length=1, max_length=36)
    tenant_id: str = Field(..., min_length=1, max_length=36)
    start_date: date
    end_date: date
    monthly_rent: Decimal = Field(..., ge=0, max_digits=12, decimal_places=2)
    terms: LeaseTermsSchema = Field(default_factory=LeaseTermsSchema)


class LeaseUpdate(BaseModel):
    version: int = Field(..., ge=1)
    start_date: date | None = None
    end_date: date | None = None
    monthly_rent: Decimal | None = Field(None, ge=0, max_digits=12, decimal_places=2)
    terms: LeaseTermsSchema | None = None


class LeaseStatusUpdate(BaseModel):
    status: LeaseStatus
    version: int = Field(..., ge=1)


class AuditEntrySchema(BaseModel):
    timestamp: datetime
    user_id: str
    field: str
    old_value: Any = None
    new_value: Any = None

    model_config = {"from_attributes": True}


class LeaseResponse(BaseModel):
    id: str
    property_id: str
    tenant_id: str
    status: LeaseStatus
    start_date: date
    end_date: date
    term_days: int
    monthly_rent: Decimal
    terms: LeaseTermsSchema
    audit_trail: list[AuditEntrySchema]
    version: int
    created_by: str
    updated_by: str
    is_deleted: bool
    deleted_at: datetime | None
    deleted_by: str | None
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}


class RenewalCheckResponse(BaseModel):
    flagged: int
    lease_ids: list[str]
