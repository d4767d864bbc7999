"""Pydantic DTOs for occupancy readings and trends."""

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

from iwms.domain.entities import DataQuality, DataSource


class OccupancyUpdate(BaseModel):
    """A single reading pushed by a sensor, an operator or the system."""

    space_id: str = Field(..., min_length=1, max_length=36)
    occupant_count: int = Field(..., ge=0, le=10000)
    capacity: int = Field(..., ge=1, le=10000)
    timestamp: datetime | None = None
    data_source: DataSource = DataSource.SENSOR
    sensor_metadata: dict[str, Any] = Field(default_factory=dict)
    is_validated: bool = False

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, value: datetime | None) -> datetime | None:
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class OccupancyBatchRequest(BaseModel):
    items: list[OccupancyUpdate] = Field(..., min_length=1)
    continue_on_error: bool = True


class OccupancyResponse(BaseModel):
    id: str
    space_id: str
    timestamp: datetime
    occupant_count: int
    capacity: int
    utilization_rate: float
    data_source: DataSource
    sensor_metadata: dict[str, Any]
    is_validated: bool

    model_config = {"from_attributes": True}


class TrendPointSchema(BaseModel):
    bucket_start: datetime
    average_occupancy: float
    average_utilization: float
    peak_occupancy: int
    sample_count: int

    model_config = {"from_attributes": True}


class OccupancyTrendResponse(BaseModel):
    space_id: str
    start: datetime
    end: datetime
    interval: Literal["hourly", "daily"]
    average_utilization: float
    peak_occupancy: int
    data_quality: DataQuality
    data_points: list[TrendPointSchema]
    anomalies: list[dict[str, Any]]

    model_config = {"from_attributes": True}


class BatchUpdateResultResponse(BaseModel):
    success_count: int
    failure_count: int
    errors: list[dict[str, Any]]

    model_config = {"from_attributes": True}
