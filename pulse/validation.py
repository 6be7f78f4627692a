"""
Input validation for check-ins and risks.

Everything here runs before any write. Out-of-range values are rejected,
never clamped.
"""

import math
from typing import Any

from pulse.models import CHECKIN_FIELDS, CheckInKind, RiskSeverity

# (min, max) inclusive bounds per numeric check-in field
FIELD_BOUNDS: dict[str, tuple[int, int]] = {
    "progress": (0, 100),
    "confidence": (1, 5),
    "satisfaction": (1, 5),
    "communication": (1, 5),
}

TEXT_FIELDS = {"blockers", "comments"}


class ValidationError(ValueError):
    """Rejected input, with the offending field and a specific reason."""

    def __init__(self, field: str, reason: str):
        super().__init__(f"{field}: {reason}")
        self.field = field
        self.reason = reason

    def to_dict(self) -> dict[str, str]:
        return {"field": self.field, "reason": self.reason}


def parse_kind(kind: Any) -> CheckInKind:
    try:
        return CheckInKind(kind)
    except ValueError:
        allowed = ", ".join(k.value for k in CheckInKind)
        raise ValidationError("type", f"unknown check-in type {kind!r}; expected one of {allowed}") from None


def _check_number(name: str, value: Any) -> float:
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValidationError(name, f"must be a number, got {type(value).__name__}")
    if math.isnan(value) or math.isinf(value):
        raise ValidationError(name, "must be a finite number")
    low, high = FIELD_BOUNDS[name]
    if not low <= value <= high:
        raise ValidationError(name, f"must be between {low} and {high}, got {value}")
    return value


def validate_checkin_fields(kind: Any, fields: dict[str, Any]) -> tuple[CheckInKind, dict[str, Any]]:
    """
    Validate a check-in payload against its variant.

    Returns the parsed kind and the cleaned payload (only the variant's own
    fields, None for absent ones). Fields belonging to the other variant are
    rejected.
    """
    parsed = parse_kind(kind)
    own = CHECKIN_FIELDS[parsed]

    for name, value in fields.items():
        if value is None:
            continue
        if name not in own:
            if any(name in names for names in CHECKIN_FIELDS.values()):
                raise ValidationError(name, f"not allowed on a {parsed.value} check-in")
            raise ValidationError(name, "unexpected field")

    cleaned: dict[str, Any] = {}
    for name in own:
        value = fields.get(name)
        if value is None:
            cleaned[name] = None
        elif name in TEXT_FIELDS:
            if not isinstance(value, str):
                raise ValidationError(name, "must be text")
            cleaned[name] = value.strip() or None
        else:
            cleaned[name] = _check_number(name, value)
    return parsed, cleaned


def require_text(name: str, value: Any) -> str:
    """Non-empty (after strip) string or ValidationError."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(name, "is required")
    return value.strip()


def parse_severity(value: Any) -> RiskSeverity:
    """Severity defaults to MEDIUM when unspecified."""
    if value is None or (isinstance(value, str) and not value.strip()):
        return RiskSeverity.MEDIUM
    try:
        return RiskSeverity.parse(value)
    except ValueError:
        allowed = ", ".join(s.value for s in RiskSeverity)
        raise ValidationError("severity", f"unknown severity {value!r}; expected one of {allowed}") from None
