"""SQLAlchemy ORM model for the FloorPlan entity."""

from datetime import datetime, timezone

from sqlalchemy import CheckConstraint, Enum, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from iwms.domain.entities import FloorPlanStatus
from iwms.infrastructure.database.base import Base, JSONType, UTCDateTime


class FloorPlanModel(Base):
    """ORM model, maps to the 'floor_plans' table."""

    __tablename__ = "floor_plans"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    property_id: Mapped[str] = mapped_column(String(36), nullable=False)
    status: Mapped[FloorPlanStatus] = mapped_column(
        Enum(
            FloorPlanStatus,
            name="floor_plan_status",
            native_enum=False,
            create_constraint=True,
            length=32,
        ),
        nullable=False,
        default=FloorPlanStatus.DRAFT,
    )
    metadata_: Mapped[dict] = mapped_column("metadata", JSONType, nullable=False)
    version_info: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    created_by: Mapped[str] = mapped_column(String(255), nullable=False)
    updated_by: Mapped[str] = mapped_column(String(255), nullable=False)
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
        Index("ix_floor_plans_property_created", "property_id", "created_at"),
        Index("ix_floor_plans_status", "status"),
        CheckConstraint("version > 0", name="ck_floor_plans_version_positive"),
    )

    __mapper_args__ = {"version_id_col": version}

    def __repr__(self) -> str:
        return (
            f"<FloorPlanModel(id={self.id}, property='{self.property_id}', "
            f"status={self.status}, version={self.version})>"
        )
