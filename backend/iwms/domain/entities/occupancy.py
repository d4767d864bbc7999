"""Occupancy time-series entities."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4


class DataSource(str, Enum):
    SENSOR = "sensor"
    MANUAL = "manual"
    SYSTEM = "system"


class DataQuality(str, Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def calculate_utilization(occupant_count: int, capacity: int) -> float:
    """Utilization as a percentage, clamped to [0, 100] with two decimals."""
    if capacity <= 0:
        return 0.0
    rate = occupant_count / capacity * 100
    return round(min(max(rate, 0.0), 100.0), 2)


@dataclass
class OccupancyData:
    """One occupancy reading for a space."""

    space_id: str
    occupant_count: int
    capacity: int
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    data_source: DataSource = DataSource.SENSOR
    sensor_metadata: dict[str, Any] = field(default_factory=dict)
    is_validated: bool = False
    utilization_rate: float = 0.0
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self) -> None:
        self.utilization_rate = calculate_utilization(self.occupant_count, self.capacity)


@dataclass
class TrendPoint:
    bucket_start: datetime
    average_occupancy: float
    average_utilization: float
    peak_occupancy: int
    sample_count: int


@dataclass
class OccupancyTrend:
    """Aggregated occupancy over a window, bucketed by ``interval``."""

    space_id: str
    start: datetime
    end: datetime
    interval: str
    average_utilization: float
    peak_occupancy: int
    data_quality: DataQuality
    data_points: list[TrendPoint] = field(default_factory=list)
    anomalies: list[dict[str, Any]] = field(default_factory=list)


@dataclass
class BatchUpdateResult:
    success_count: int = 0
    failure_count: int = 0
    errors: list[dict[str, Any]] = field(default_factory=list)
