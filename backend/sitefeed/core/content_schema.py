"""Content Schema Validator — checks CMS records against their pydantic content models.

Invariants:
    - collect_violations() is pure: same payload + model -> same violations, in field order
    - validate_record() returns the payload itself (unchanged in value) or raises
      ContentValidationError; the parsed model instance is discarded
    - Every pydantic error becomes exactly one Violation with one ViolationReason
    - None where a value is required is reported as NULL, not WRONG_TYPE
"""

from dataclasses import dataclass
from typing import Any

from pydantic import BaseModel, ValidationError

from sitefeed.core.domain_types import ViolationReason
from sitefeed.core.errors import ContentValidationError
from sitefeed.core.sanitize import SLUG_PATTERN

_REASONS: dict[str, ViolationReason] = {
    "missing": ViolationReason.MISSING,
    "string_too_short": ViolationReason.TOO_SHORT,
    "too_short": ViolationReason.TOO_SHORT,
    "string_too_long": ViolationReason.TOO_LONG,
    "too_long": ViolationReason.TOO_LONG,
    "string_pattern_mismatch": ViolationReason.PATTERN_MISMATCH,
    "greater_than": ViolationReason.BELOW_MINIMUM,
    "greater_than_equal": ViolationReason.BELOW_MINIMUM,
    "less_than": ViolationReason.ABOVE_MAXIMUM,
    "less_than_equal": ViolationReason.ABOVE_MAXIMUM,
    "literal_error": ViolationReason.NOT_IN_CHOICES,
    "enum": ViolationReason.NOT_IN_CHOICES,
    "email_invalid": ViolationReason.INVALID_EMAIL,
    "url_invalid": ViolationReason.INVALID_URL,
    "datetime_parsing": ViolationReason.INVALID_DATETIME,
    "datetime_from_date_parsing": ViolationReason.INVALID_DATETIME,
    "datetime_object_invalid": ViolationReason.INVALID_DATETIME,
}

_TYPE_ERRORS = frozenset({
    "string_type", "int_type", "float_type", "bool_type", "list_type",
    "dict_type", "model_type", "model_attributes_type", "datetime_type",
})


@dataclass(frozen=True)
class Violation:
    """A single failed constraint, located by dotted/indexed path."""
    path: str
    reason: ViolationReason
    detail: str

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "reason": self.reason.value,
            "detail": self.detail,
        }


# ─── Public API ─────────────────────────────────────────────────

def collect_violations(
    payload: Any, shape: type[BaseModel], path: str = "",
) -> list[Violation]:
    """Check payload against shape. Empty list means valid."""
    if not isinstance(payload, dict):
        return [Violation(
            path or "$", ViolationReason.NOT_AN_OBJECT,
            f"{_shape_name(shape)} must be an object, got {type(payload).__name__}",
        )]
    try:
        shape.model_validate(payload)
    except ValidationError as e:
        return [_to_violation(err, path) for err in e.errors(include_url=False)]
    return []


def validate_record(
    payload: Any, shape: type[BaseModel], resource: str | None = None,
) -> dict:
    """Return payload unchanged if it conforms to shape, else raise."""
    violations = collect_violations(payload, shape)
    if violations:
        raise ContentValidationError(resource or _shape_name(shape), violations)
    return payload


def validate_collection(
    records: list[Any], shape: type[BaseModel], resource: str | None = None,
) -> list[dict]:
    """Validate every record. Any failing record fails the whole collection."""
    for index, record in enumerate(records):
        violations = collect_violations(record, shape, f"[{index}]")
        if violations:
            raise ContentValidationError(resource or _shape_name(shape), violations)
    return records


# ─── pydantic error mapping ─────────────────────────────────────

def _to_violation(error: dict, prefix: str) -> Violation:
    return Violation(_join_path(prefix, error["loc"]), _reason(error), error["msg"])


def _reason(error: dict) -> ViolationReason:
    error_type = error["type"]
    if error_type in _TYPE_ERRORS:
        if error.get("input", ...) is None:
            return ViolationReason.NULL
        return ViolationReason.WRONG_TYPE
    if error_type == "string_pattern_mismatch":
        if (error.get("ctx") or {}).get("pattern") == SLUG_PATTERN:
            return ViolationReason.INVALID_SLUG
    return _REASONS.get(error_type, ViolationReason.WRONG_TYPE)


def _join_path(prefix: str, loc: tuple) -> str:
    path = prefix
    for part in loc:
        if isinstance(part, int):
            path += f"[{part}]"
        else:
            path = f"{path}.{part}" if path else str(part)
    return path or "$"


def _shape_name(shape: type[BaseModel]) -> str:
    return shape.__name__.lower()
