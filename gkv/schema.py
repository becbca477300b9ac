"""Pluggable value validation.

A validator accepts an arbitrary JSON value and reports either the
(possibly normalized) value or a list of issues. The store only depends on
the ``ValueValidator`` protocol; adapters exist for pydantic models/types
and for plain callables.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Protocol

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from gkv.exceptions import ValidationError


@dataclass(frozen=True)
class Issue:
    message: str
    path: tuple[str | int, ...] = ()

    def as_dict(self) -> dict[str, Any]:
        return {"message": self.message, "path": list(self.path)}


@dataclass(frozen=True)
class ValidationResult:
    value: Any = None
    issues: list[Issue] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


class ValueValidator(Protocol):
    def validate(self, value: Any) -> ValidationResult:
        ...


class PydanticValidator:
    """Validate values against a pydantic model or any type pydantic understands.

    The validated value is dumped back in JSON mode so the stored blob holds
    the normalized form (coerced numbers, defaults filled in).
    """

    def __init__(self, schema: Any) -> None:
        self.schema = schema
        self._adapter: TypeAdapter[Any] = TypeAdapter(schema)

    def validate(self, value: Any) -> ValidationResult:
        try:
            validated = self._adapter.validate_python(value)
        except PydanticValidationError as exc:
            issues = [
                Issue(message=error["msg"], path=tuple(error.get("loc", ())))
                for error in exc.errors()
            ]
            return ValidationResult(issues=issues)
        return ValidationResult(value=self._adapter.dump_python(validated, mode="json"))


class CallableValidator:
    """Wrap a function that returns the accepted value or raises ``ValueError``."""

    def __init__(self, func: Callable[[Any], Any]) -> None:
        self.func = func

    def validate(self, value: Any) -> ValidationResult:
        try:
            return ValidationResult(value=self.func(value))
        except (ValueError, TypeError) as exc:
            return ValidationResult(issues=[Issue(message=str(exc))])


def ensure_valid(validator: ValueValidator | None, value: Any) -> Any:
    """Return the validated value or raise ``ValidationError`` listing the issues."""
    if validator is None:
        return value
    result = validator.validate(value)
    if result.issues:
        issues = [issue.as_dict() for issue in result.issues]
        summary = "; ".join(issue.message for issue in result.issues)
        raise ValidationError(f"Value failed validation: {summary}", issues=issues)
    return result.value


__all__ = [
    "Issue",
    "ValidationResult",
    "ValueValidator",
    "PydanticValidator",
    "CallableValidator",
    "ensure_valid",
]
