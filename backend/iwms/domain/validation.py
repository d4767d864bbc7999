"""Outcome of a business-rule check, shared by all services."""

from dataclasses import dataclass, field

from iwms.domain.exceptions import FieldError, ValidationError


@dataclass
class ValidationResult:
    errors: list[FieldError] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, field_name: str, message: str, code: str = "INVALID_VALUE") -> None:
        self.errors.append(FieldError(field=field_name, message=message, code=code))

    def raise_if_invalid(self, entity_type: str) -> None:
        if self.errors:
            raise ValidationError(entity_type, self.errors)
