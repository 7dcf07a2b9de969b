# payplatform/core/validation.py

"""
Typed validation results.

Validators run before an engine is invoked and report problems as data
instead of raising; ``ValidationResult.unwrap`` converts a failed result into
``InvalidInputError`` for callers that prefer exceptions.
"""

from dataclasses import dataclass, field
from typing import Any, Generic, List, Mapping, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from .error_schemas import ErrorDetail
from .exceptions import InvalidInputError

T = TypeVar("T")
M = TypeVar("M", bound=BaseModel)


@dataclass
class ValidationResult(Generic[T]):
    value: Optional[T] = None
    errors: List[ErrorDetail] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, field_name: Optional[str], message: str, code: Optional[str] = None) -> None:
        self.errors.append(ErrorDetail(field=field_name, message=message, code=code))

    def unwrap(self, message: str = "Invalid input") -> T:
        """Return the validated value or raise InvalidInputError."""
        if not self.is_valid:
            raise InvalidInputError(message, details=list(self.errors))
        return self.value


def errors_from_pydantic(exc: ValidationError) -> List[ErrorDetail]:
    details = []
    for err in exc.errors():
        location = ".".join(str(part) for part in err.get("loc", ()))
        details.append(
            ErrorDetail(field=location or None, message=err["msg"], code=err["type"])
        )
    return details


def validate_model(model_cls: Type[M], data: Any) -> ValidationResult[M]:
    """Validate raw data (mapping or model instance) against a pydantic model."""
    if isinstance(data, model_cls):
        data = data.model_dump(exclude_unset=True)
    elif not isinstance(data, Mapping):
        result: ValidationResult[M] = ValidationResult()
        result.add_error(None, f"Expected a mapping for {model_cls.__name__}", "type_error")
        return result

    try:
        return ValidationResult(value=model_cls.model_validate(data))
    except ValidationError as exc:
        return ValidationResult(errors=errors_from_pydantic(exc))
