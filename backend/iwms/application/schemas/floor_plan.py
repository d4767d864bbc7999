"""Pydantic DTOs for the FloorPlan feature."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, Field, TypeAdapter

from iwms.domain.entities import FloorPlanMetadata, FloorPlanStatus

MAX_FILE_SIZE_BYTES = 50 * 1024 * 1024

_metadata_adapter = TypeAdapter(FloorPlanMetadata)


class DimensionsSchema(BaseModel):
    width: float = Field(..., gt=0, le=10000, examples=[120.5])
    height: float = Field(..., gt=0, le=10000, examples=[80.0])
    scale: float = Field(1.0, ge=0.1, le=10)
    units: Literal["meters", "feet"] = "meters"

    model_config = {"from_attributes": True}


class BMSConfigSchema(BaseModel):
    system_id: str = Field("", max_length=100)
    endpoint: str = Field("", max_length=2048)
    enabled: bool = False
    refresh_interval: int = Field(300, ge=60, le=86400)

    model_config = {"from_attributes": True}


class FloorPlanMetadataSchema(BaseModel):
    """Descriptive metadata of a floor plan drawing."""

    name: str = Field(..., min_length=1, max_length=255, examples=["Level 3"])
    level: int = Field(0, ge=-20, le=300)
    total_area: float = Field(..., gt=0)
    usable_area: float = Field(0.0, ge=0)
    dimensions: DimensionsSchema
    file_url: str | None = Field(None, max_length=2048)
    file_hash: str | None = Field(None, pattern=r"^[A-Fa-f0-9]{64}$")
    file_format: Literal[".dwg", ".dxf", ".pdf"] | None = None
    file_size: int | None = Field(None, gt=0, le=MAX_FILE_SIZE_BYTES)
    bms_config: BMSConfigSchema | None = None
    custom_attributes: dict[str, Any] = Field(default_factory=dict, max_length=50)

    model_config = {"from_attributes": True}

    def to_domain(self) -> FloorPlanMetadata:
        return _metadata_adapter.validate_python(self.model_dump())


class FloorPlanCreate(BaseModel):
    """Schema for creating a new floor plan."""

    property_id: str = Field(..., min_length=1, max_length=36)
    metadata: FloorPlanMetadataSchema
    status: FloorPlanStatus | None = None


class FloorPlanUpdate(BaseModel):
    """Partial update; ``version`` must match the stored version."""

    version: int = Field(..., ge=1)
    metadata: FloorPlanMetadataSchema | None = None
    status: FloorPlanStatus | None = None
    changelog: str | None = Field(None, max_length=500)


class FloorPlanBulkUpdateItem(FloorPlanUpdate):
    id: str = Field(..., min_length=1, max_length=36)


class FloorPlanBulkCreate(BaseModel):
    items: list[FloorPlanCreate] = Field(..., min_length=1)


class FloorPlanBulkUpdate(BaseModel):
    items: list[FloorPlanBulkUpdateItem] = Field(..., min_length=1)


class VersionInfoSchema(BaseModel):
    major: int
    minor: int
    revision: int
    changelog: str
    is_latest: bool
    label: str

    model_config = {"from_attributes": True}


class FloorPlanResponse(BaseModel):
    """Schema returned to the client."""

    id: str
    property_id: str
    status: FloorPlanStatus
    metadata: FloorPlanMetadataSchema
    version_info: VersionInfoSchema
    version: int
    created_by: str
    updated_by: str
    created_at: datetime
    updated_at: datetime

    model_config = {"from_attributes": True}
