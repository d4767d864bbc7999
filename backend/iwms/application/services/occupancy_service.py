"""Application service for occupancy readings, trends and live updates."""

import logging
from collections import defaultdict
from datetime import datetime, timedelta, timezone
from typing import Any

from iwms.application.interfaces import OccupancyRepository
from iwms.application.schemas.occupancy import OccupancyUpdate
from iwms.application.services.sse_manager import SSEManager
from iwms.domain.entities import (
    BatchUpdateResult,
    DataQuality,
    OccupancyData,
    OccupancyTrend,
    TrendPoint,
)
from iwms.domain.exceptions import (
    BulkLimitExceededError,
    DuplicateEntityError,
    EntityNotFoundError,
    ValidationError,
)
from iwms.domain.validation import ValidationResult

logger = logging.getLogger(__name__)

OCCUPANCY_EVENT = "occupancy_update"
MAX_OCCUPANTS = 10000
CLOCK_SKEW = timedelta(minutes=5)
HIGH_QUALITY_SAMPLES = 50
MEDIUM_QUALITY_SAMPLES = 25
INTERVALS = ("hourly", "daily")


def _bucket_start(timestamp: datetime, interval: str) -> datetime:
    bucket = timestamp.replace(minute=0, second=0, microsecond=0)
    if interval == "daily":
        bucket = bucket.replace(hour=0)
    return bucket


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _grade(average_samples: float) -> DataQuality:
    if average_samples >= HIGH_QUALITY_SAMPLES:
        return DataQuality.HIGH
    if average_samples >= MEDIUM_QUALITY_SAMPLES:
        return DataQuality.MEDIUM
    return DataQuality.LOW


class OccupancyService:
    """Records occupancy readings and derives utilization trends."""

    def __init__(
        self,
        repository: OccupancyRepository,
        sse_manager: SSEManager | None = None,
        batch_limit: int = 1000,
    ):
        self._repository = repository
        self._sse = sse_manager
        self._batch_limit = batch_limit

    def validate_reading(self, reading: OccupancyData) -> ValidationResult:
        result = ValidationResult()
        if not reading.space_id:
            result.add_error("space_id", "Space ID is required", "REQUIRED_FIELD")
        if not 0 <= reading.occupant_count <= MAX_OCCUPANTS:
            result.add_error(
                "occupant_count",
                f"Occupant count must be between 0 and {MAX_OCCUPANTS}",
                "INVALID_VALUE",
            )
        if not 1 <= reading.capacity <= MAX_OCCUPANTS:
            result.add_error(
                "capacity",
                f"Capacity must be between 1 and {MAX_OCCUPANTS}",
                "INVALID_VALUE",
            )
        if reading.timestamp > datetime.now(timezone.utc) + CLOCK_SKEW:
            result.add_error("timestamp", "Timestamp cannot be in the future", "FUTURE_TIMESTAMP")
        if reading.occupant_count > reading.capacity:
            result.warnings.append(
                f"Space {reading.space_id} is over capacity "
                f"({reading.occupant_count}/{reading.capacity})"
            )
        return result

    @staticmethod
    def _window(start: datetime, end: datetime) -> tuple[datetime, datetime]:
        """Normalize a query window to UTC and check its order."""
        start, end = _as_utc(start), _as_utc(end)
        if end <= start:
            result = ValidationResult()
            result.add_error("end", "End time must be after start time", "INVALID_DATE_RANGE")
            result.raise_if_invalid("OccupancyData")
        return start, end

    async def record_occupancy(self, data: OccupancyUpdate) -> OccupancyData:
        """Validate, store and broadcast one reading."""
        reading = OccupancyData(
            space_id=data.space_id,
            occupant_count=data.occupant_count,
            capacity=data.capacity,
            timestamp=data.timestamp or datetime.now(timezone.utc),
            data_source=data.data_source,
            sensor_metadata=data.sensor_metadata,
            is_validated=data.is_validated,
        )
        validation = self.validate_reading(reading)
        validation.raise_if_invalid("OccupancyData")
        for warning in validation.warnings:
            logger.warning(warning)

        saved = await self._repository.add(reading)
        if self._sse is not None:
            await self._sse.broadcast(OCCUPANCY_EVENT, _event_payload(saved))
        return saved

    async def get_current_occupancy(self, space_id: str) -> OccupancyData:
        current = await self._repository.get_latest(space_id)
        if current is None:
            raise EntityNotFoundError("OccupancyData", space_id)
        return current

    async def get_history(
        self, space_id: str, start: datetime, end: datetime
    ) -> list[OccupancyData]:
        start, end = self._window(start, end)
        return await self._repository.get_range(space_id, start, end)

    async def get_trends(
        self,
        space_id: str,
        start: datetime,
        end: datetime,
        interval: str = "hourly",
    ) -> OccupancyTrend:
        """Bucket readings by hour or day and summarize utilization."""
        start, end = self._window(start, end)
        if interval not in INTERVALS:
            result = ValidationResult()
            result.add_error("interval", f"Interval must be one of {', '.join(INTERVALS)}")
            result.raise_if_invalid("OccupancyData")

        readings = await self._repository.get_range(space_id, start, end)
        buckets: dict[datetime, list[OccupancyData]] = defaultdict(list)
        for reading in readings:
            buckets[_bucket_start(reading.timestamp, interval)].append(reading)

        points = [
            TrendPoint(
                bucket_start=bucket,
                average_occupancy=round(
                    sum(r.occupant_count for r in samples) / len(samples), 2
                ),
                average_utilization=round(
                    sum(r.utilization_rate for r in samples) / len(samples), 2
                ),
                peak_occupancy=max(r.occupant_count for r in samples),
                sample_count=len(samples),
            )
            for bucket, samples in sorted(buckets.items())
        ]

        if readings:
            average_utilization = round(
                sum(r.utilization_rate for r in readings) / len(readings), 2
            )
            peak = max(r.occupant_count for r in readings)
            quality = _grade(len(readings) / len(points))
        else:
            average_utilization, peak, quality = 0.0, 0, DataQuality.LOW

        anomalies = [
            {
                "timestamp": r.timestamp.isoformat(),
                "type": "over_capacity",
                "occupant_count": r.occupant_count,
                "capacity": r.capacity,
            }
            for r in readings
            if r.occupant_count > r.capacity
        ]

        return OccupancyTrend(
            space_id=space_id,
            start=start,
            end=end,
            interval=interval,
            average_utilization=average_utilization,
            peak_occupancy=peak,
            data_quality=quality,
            data_points=points,
            anomalies=anomalies,
        )

    async def batch_update(
        self, items: list[OccupancyUpdate], continue_on_error: bool = True
    ) -> BatchUpdateResult:
        """Record many readings; each one commits on its own.

        With ``continue_on_error`` false the batch stops at the first
        rejected reading; readings already stored stay stored.
        """
        if len(items) > self._batch_limit:
            raise BulkLimitExceededError("OccupancyData", len(items), self._batch_limit)

        result = BatchUpdateResult()
        for index, item in enumerate(items):
            try:
                await self.record_occupancy(item)
            except (ValidationError, DuplicateEntityError) as exc:
                result.failure_count += 1
                result.errors.append(
                    {"index": index, "space_id": item.space_id, "error": str(exc)}
                )
                if not continue_on_error:
                    break
            else:
                result.success_count += 1
        logger.info(
            "Occupancy batch: %d stored, %d rejected",
            result.success_count,
            result.failure_count,
        )
        return result


def _event_payload(reading: OccupancyData) -> dict[str, Any]:
    return {
        "space_id": reading.space_id,
        "timestamp": reading.timestamp.isoformat(),
        "occupant_count": reading.occupant_count,
        "capacity": reading.capacity,
        "utilization_rate": reading.utilization_rate,
    }
