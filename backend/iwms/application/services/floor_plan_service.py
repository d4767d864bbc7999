"""Application service for FloorPlan use cases."""

import logging

from iwms.application.interfaces import FloorPlanRepository
from iwms.application.schemas.floor_plan import (
    FloorPlanBulkUpdateItem,
    FloorPlanCreate,
    FloorPlanUpdate,
)
from iwms.domain.entities import FloorPlan, FloorPlanStatus
from iwms.domain.exceptions import (
    BulkLimitExceededError,
    EntityNotFoundError,
    FieldError,
    ValidationError,
)
from iwms.domain.validation import ValidationResult

logger = logging.getLogger(__name__)

MAX_DIMENSION = 10000
MIN_SCALE, MAX_SCALE = 0.1, 10.0
# Outside these bounds a plan is accepted but flagged
ASPECT_RATIO_WARN_RANGE = (0.2, 5.0)
SCALE_WARN_RANGE = (0.2, 5.0)


class FloorPlanService:
    """Orchestrates floor plan validation, enrichment and persistence."""

    def __init__(self, repository: FloorPlanRepository, bulk_limit: int = 100):
        self._repository = repository
        self._bulk_limit = bulk_limit

    def validate_floor_plan(self, floor_plan: FloorPlan) -> ValidationResult:
        """Check business rules; errors block a save, warnings do not."""
        result = ValidationResult()
        metadata = floor_plan.metadata
        dimensions = metadata.dimensions

        if not floor_plan.property_id:
            result.add_error("property_id", "Property ID is required", "REQUIRED_FIELD")
        if not metadata.name or not metadata.name.strip():
            result.add_error("metadata.name", "Floor plan name is required", "REQUIRED_FIELD")

        if dimensions.width <= 0 or dimensions.height <= 0:
            result.add_error(
                "metadata.dimensions",
                "Width and height must be positive numbers",
                "INVALID_DIMENSIONS",
            )
        elif dimensions.width > MAX_DIMENSION or dimensions.height > MAX_DIMENSION:
            result.add_error(
                "metadata.dimensions",
                f"Width and height must not exceed {MAX_DIMENSION}",
                "INVALID_DIMENSIONS",
            )
        if not MIN_SCALE <= dimensions.scale <= MAX_SCALE:
            result.add_error(
                "metadata.dimensions.scale",
                f"Scale must be between {MIN_SCALE} and {MAX_SCALE}",
                "INVALID_SCALE",
            )

        if metadata.total_area <= 0:
            result.add_error("metadata.total_area", "Total area must be positive", "INVALID_AREA")
        elif metadata.usable_area > metadata.total_area:
            result.add_error(
                "metadata.usable_area",
                "Usable area cannot exceed total area",
                "INVALID_AREA",
            )

        bms = metadata.bms_config
        if bms is not None and bms.enabled and not (bms.system_id and bms.endpoint):
            result.add_error(
                "metadata.bms_config",
                "An enabled BMS integration needs a system ID and an endpoint",
                "INVALID_BMS_CONFIG",
            )

        if result.is_valid:
            aspect_ratio = dimensions.width / dimensions.height
            low, high = ASPECT_RATIO_WARN_RANGE
            if not low <= aspect_ratio <= high:
                result.warnings.append(f"Unusual aspect ratio {aspect_ratio:.2f}")
            low, high = SCALE_WARN_RANGE
            if not low <= dimensions.scale <= high:
                result.warnings.append(f"Unusual scale {dimensions.scale}")
        return result

    def _check_bulk_size(self, size: int) -> None:
        if size > self._bulk_limit:
            raise BulkLimitExceededError("FloorPlan", size, self._bulk_limit)

    def _build(self, data: FloorPlanCreate, actor: str) -> FloorPlan:
        return FloorPlan(
            property_id=data.property_id,
            metadata=data.metadata.to_domain(),
            status=data.status or FloorPlanStatus.DRAFT,
            created_by=actor,
            updated_by=actor,
        )

    async def get_floor_plan(self, floor_plan_id: str) -> FloorPlan:
        floor_plan = await self._repository.get_by_id(floor_plan_id)
        if floor_plan is None:
            raise EntityNotFoundError("FloorPlan", floor_plan_id)
        return floor_plan

    async def list_floor_plans(
        self, property_id: str, page: int = 1, limit: int = 10
    ) -> tuple[list[FloorPlan], int]:
        return await self._repository.list_by_property(property_id, page=page, limit=limit)

    async def create_floor_plan(self, data: FloorPlanCreate, actor: str) -> FloorPlan:
        floor_plan = self._build(data, actor)
        self.validate_floor_plan(floor_plan).raise_if_invalid("FloorPlan")
        return await self._repository.create(floor_plan)

    async def update_floor_plan(
        self, floor_plan_id: str, data: FloorPlanUpdate, actor: str
    ) -> FloorPlan:
        floor_plan = await self.get_floor_plan(floor_plan_id)
        floor_plan.update(
            actor=actor,
            metadata=data.metadata.to_domain() if data.metadata else None,
            status=data.status,
            changelog=data.changelog,
        )
        self.validate_floor_plan(floor_plan).raise_if_invalid("FloorPlan")
        return await self._repository.update(floor_plan, data.version)

    async def delete_floor_plan(self, floor_plan_id: str, actor: str) -> None:
        if not await self._repository.soft_delete(floor_plan_id, actor):
            raise EntityNotFoundError("FloorPlan", floor_plan_id)

    async def bulk_create(self, items: list[FloorPlanCreate], actor: str) -> list[FloorPlan]:
        """Validate every item first, then insert them all in one transaction."""
        self._check_bulk_size(len(items))
        floor_plans = [self._build(item, actor) for item in items]
        errors: list[FieldError] = []
        for index, floor_plan in enumerate(floor_plans):
            errors.extend(
                _prefixed(index, self.validate_floor_plan(floor_plan).errors)
            )
        if errors:
            raise ValidationError("FloorPlan", errors)
        created = await self._repository.bulk_create(floor_plans)
        logger.info("Bulk-created %d floor plans by %s", len(created), actor)
        return created

    async def bulk_update(
        self, items: list[FloorPlanBulkUpdateItem], actor: str
    ) -> list[FloorPlan]:
        self._check_bulk_size(len(items))
        updates: list[tuple[FloorPlan, int]] = []
        errors: list[FieldError] = []
        for index, item in enumerate(items):
            floor_plan = await self.get_floor_plan(item.id)
            floor_plan.update(
                actor=actor,
                metadata=item.metadata.to_domain() if item.metadata else None,
                status=item.status,
                changelog=item.changelog,
            )
            errors.extend(_prefixed(index, self.validate_floor_plan(floor_plan).errors))
            updates.append((floor_plan, item.version))
        if errors:
            raise ValidationError("FloorPlan", errors)
        return await self._repository.bulk_update(updates)


def _prefixed(index: int, errors: list[FieldError]) -> list[FieldError]:
    return [
        FieldError(field=f"items[{index}].{e.field}", message=e.message, code=e.code)
        for e in errors
    ]
