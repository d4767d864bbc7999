"""SQLAlchemy ORM model for occupancy readings."""

from datetime import datetime, timezone

from sqlalchemy import Boolean, CheckConstraint, Enum, Float, Index, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from iwms.domain.entities import DataSource
from iwms.infrastructure.database.base import Base, JSONType, UTCDateTime


class OccupancyDataModel(Base):
    """ORM model, maps to the time-indexed 'occupancy_data' table."""

    __tablename__ = "occupancy_data"

    id: Mapped[str] = mapped_column(String(36), primary_key=True)
    space_id: Mapped[str] = mapped_column(String(36), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(UTCDateTime, nullable=False)
    occupant_count: Mapped[int] = mapped_column(Integer, nullable=False)
    capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    utilization_rate: Mapped[float] = mapped_column(Float, nullable=False)
    data_source: Mapped[DataSource] = mapped_column(
        Enum(
            DataSource,
            name="occupancy_data_source",
            native_enum=False,
            create_constraint=True,
            length=16,
            values_callable=lambda members: [m.value for m in members],
        ),
        nullable=False,
    )
    sensor_metadata: Mapped[dict] = mapped_column(JSONType, nullable=False, default=dict)
    is_validated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        UTCDateTime,
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    __table_args__ = (
        UniqueConstraint("space_id", "timestamp", name="uq_occupancy_space_timestamp"),
        Index("ix_occupancy_space_timestamp", "space_id", "timestamp"),
        CheckConstraint("occupant_count >= 0", name="ck_occupancy_count"),
        CheckConstraint("capacity > 0", name="ck_occupancy_capacity"),
        CheckConstraint(
            "utilization_rate >= 0 AND utilization_rate <= 100",
            name="ck_occupancy_utilization",
        ),
    )

    def __repr__(self) -> str:
        return (
            f"<OccupancyDataModel(space='{self.space_id}', "
            f"at={self.timestamp}, count={self.occupant_count})>"
        )
