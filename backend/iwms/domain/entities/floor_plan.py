"""Floor plan entity: a versioned drawing of one level of a property."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any
from uuid import uuid4


class FloorPlanStatus(str, Enum):
    """Lifecycle states of a floor plan."""

    DRAFT = "DRAFT"
    PUBLISHED = "PUBLISHED"
    ARCHIVED = "ARCHIVED"
    PENDING_REVIEW = "PENDING_REVIEW"
    REJECTED = "REJECTED"
    DEPRECATED = "DEPRECATED"


@dataclass
class FloorPlanDimensions:
    width: float
    height: float
    scale: float = 1.0
    units: str = "meters"


@dataclass
class BMSConfig:
    """Building management system link for a floor."""

    system_id: str = ""
    endpoint: str = ""
    enabled: bool = False
    refresh_interval: int = 300


@dataclass
class FloorPlanMetadata:
    """JSON-valued description of the drawing and its source file."""

    name: str
    dimensions: FloorPlanDimensions
    total_area: float
    level: int = 0
    usable_area: float = 0.0
    file_url: str | None = None
    file_hash: str | None = None
    file_format: str | None = None
    file_size: int | None = None
    bms_config: BMSConfig | None = None
    custom_attributes: dict[str, Any] = field(default_factory=dict)


@dataclass
class VersionInfo:
    """Human-facing revision history of a floor plan."""

    major: int = 1
    minor: int = 0
    revision: int = 0
    changelog: str = "Initial version"
    is_latest: bool = True

    @property
    def label(self) -> str:
        return f"{self.major}.{self.minor}.{self.revision}"


@dataclass
class FloorPlan:
    """A floor plan belonging to a property.

    ``version`` is the optimistic-lock counter and doubles as the ETag;
    ``version_info`` is the revision history shown to users.
    """

    property_id: str
    metadata: FloorPlanMetadata
    status: FloorPlanStatus = FloorPlanStatus.DRAFT
    version_info: VersionInfo = field(default_factory=VersionInfo)
    version: int = 1
    created_by: str = "system"
    updated_by: str = "system"
    id: str = field(default_factory=lambda: str(uuid4()))
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    updated_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def update(
        self,
        *,
        actor: str,
        metadata: FloorPlanMetadata | None = None,
        status: FloorPlanStatus | None = None,
        changelog: str | None = None,
    ) -> None:
        """Apply a partial update and record a new revision."""
        if metadata is not None:
            self.metadata = metadata
        if status is not None:
            self.status = status
        self.version_info.revision += 1
        self.version_info.changelog = changelog or "Updated"
        self.updated_by = actor
        self.updated_at = datetime.now(timezone.utc)
