"""SQLAlchemy ORM model for the Lease entity."""

from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import Boolean, CheckConstraint, Date, Enum, Index, Integer, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from iwms.domain.entities import LeaseStatus
from iwms.infrastructure.database.base import Base, JSONType, UTCDateTime


class LeaseModel(Base):
    """ORM model, maps to the 'leases' table."""

    __tablename__ = "leases"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    property_id: Mapped[str] = mapped_column(String(36), nullable=False)
    tenant_id: Mapped[str] = mapped_column(String(36), nullable=False)
    status: Mapped[LeaseStatus] = mapped_column(
        Enum(
            LeaseStatus,
            name="lease_status",
            native_enum=False,
            create_constraint=True,
            length=32,
        ),
        nullable=False,
        default=LeaseStatus.DRAFT,
    )
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    monthly_rent: Mapped[Decimal] = mapped_column(Numeric(12, 2), nullable=False)
    terms: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    audit_trail: Mapped[list] = mapped_column(JSONType, nullable=False, default=list)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    updated_by: Mapped[str] = mapped_column(String(255), nullable=False)
    is_deleted: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    deleted_at: Mapped[datetime | None] = mapped_column(UTCDateTime, nullable=True)
    deleted_by: Mapped[str | None] = mapped_column(String(255), nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        Index("ix_leases_property_status", "property_id", "status"),
        Index("ix_leases_tenant", "tenant_id"),
        Index("ix_leases_status_end_date", "status", "end_date"),
        CheckConstraint("end_date > start_date", name="ck_leases_valid_dates"),
        CheckConstraint("monthly_rent >= 0", name="ck_leases_non_negative_rent"),
        CheckConstraint("version > 0", name="ck_leases_version_positive"),
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return (
            f"<LeaseModel(id={self.id}, property='{self.property_id}', "
            f"tenant='{self.tenant_id}', status={self.status})>"
        )
