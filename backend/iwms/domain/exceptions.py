"""Domain-specific exceptions, framework-independent."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FieldError:
    """A single field-level validation failure."""

    field: str
    message: str
    code: str = "INVALID_VALUE"


class EntityNotFoundError(Exception):
    """Raised when a requested entity does not exist."""

    def __init__(self, entity_type: str, entity_id: int | str):
        self.entity_type = entity_type
        self.entity_id = entity_id
        super().__init__(f"{entity_type} with id '{entity_id}' not found")


class DuplicateEntityError(Exception):
    """Raised when attempting to create a duplicate entity."""

    def __init__(self, entity_type: str, field: str, value: str):
        self.entity_type = entity_type
        self.field = field
        self.value = value
        super().__init__(f"{entity_type} with {field}='{value}' already exists")


class ValidationError(Exception):
    """Raised when business rules reject an entity.

    Carries one ``FieldError`` per offending field so callers can report
    every problem at once.
    """

    def __init__(self, entity_type: str, errors: list[FieldError]):
        self.entity_type = entity_type
        self.errors = errors
        summary = "; ".join(f"{e.field}: {e.message}" for e in errors)
        super().__init__(f"{entity_type} validation failed: {summary}")


class BulkLimitExceededError(ValidationError):
    """Raised when a bulk request carries more items than allowed."""

    def __init__(self, entity_type: str, size: int, limit: int):
        self.size = size
        self.limit = limit
        super().__init__(
            entity_type,
            [
                FieldError(
                    field="items",
                    message=f"Bulk operation limit exceeded: {size} > {limit}",
                    code="BULK_LIMIT_EXCEEDED",
                )
            ],
        )


class VersionConflictError(Exception):
    """Raised when an optimistic-lock version check fails."""

    def __init__(
        self,
        entity_type: str,
        entity_id: str,
        expected_version: int,
        actual_version: int | None = None,
    ):
        self.entity_type = entity_type
        self.entity_id = entity_id
        self.expected_version = expected_version
        self.actual_version = actual_version
        detail = f"expected version {expected_version}"
        if actual_version is not None:
            detail += f", found {actual_version}"
        super().__init__(
            f"{entity_type} '{entity_id}' was modified concurrently ({detail})"
        )


class InvalidStatusTransitionError(Exception):
    """Raised when a status change is not allowed from the current status."""

    def __init__(self, entity_type: str, current: str, requested: str):
        self.entity_type = entity_type
        self.current = current
        self.requested = requested
        super().__init__(
            f"Invalid {entity_type} status transition from {current} to {requested}"
        )
