"""Instance value validation keyed by routine item type."""

from __future__ import annotations

import re
from typing import Any, Callable, Dict, List

from checkkit.core.errors import ValidationError
from checkkit.models import ITEM_TYPES, REPEAT_PATTERNS

_DEADLINE_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _boolean_value(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise ValidationError("boolean routines accept true/false values only")


def _number_value(value: Any) -> int | float:
    # 日本語: bool は int のサブクラスなので除外 / English: bool is an int subclass, reject it explicitly
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError("number routines accept numeric values only")
    if value != value or value in (float("inf"), float("-inf")):
        raise ValidationError("number routines accept finite values only")
    return value


def _text_value(value: Any) -> str:
    if not isinstance(value, str):
        raise ValidationError("text routines accept string values only")
    return value


def _photo_value(value: Any) -> None:
    raise ValidationError("photo routines store images in photos, not value")


_VALUE_VALIDATORS: Dict[str, Callable[[Any], Any]] = {
    "boolean": _boolean_value,
    "number": _number_value,
    "text": _text_value,
    "photo": _photo_value,
}


def validate_instance_value(item_type: str, value: Any) -> Any:
    """Check ``value`` against the routine's item type. ``None`` always clears."""
    if value is None:
        return None
    validator = _VALUE_VALIDATORS.get(item_type)
    if validator is None:
        raise ValidationError(f"unknown item type: {item_type!r}")
    return validator(value)


def normalize_repeat_days(pattern: str, days: Any) -> List[int] | None:
    if pattern == "daily":
        return None
    if days is None:
        return []
    if not isinstance(days, (list, tuple, set)):
        raise ValidationError("repeat_days must be a list of integers")

    low, high = (0, 6) if pattern == "weekly" else (1, 31)
    normalized = []
    for day in days:
        if isinstance(day, bool) or not isinstance(day, int):
            raise ValidationError("repeat_days must be a list of integers")
        if day < low or day > high:
            raise ValidationError(f"repeat_days for {pattern} must be within {low}-{high}")
        if day not in normalized:
            normalized.append(day)
    return sorted(normalized)


def validate_routine_fields(fields: Dict[str, Any]) -> Dict[str, Any]:
    """Validate and normalize a complete set of routine fields."""
    name = fields.get("name")
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("routine name must be a non-empty string")
    if len(name.strip()) > 100:
        raise ValidationError("routine name must be at most 100 characters")

    pattern = fields.get("repeat_pattern", "daily")
    if pattern not in REPEAT_PATTERNS:
        raise ValidationError(f"repeat_pattern must be one of {', '.join(REPEAT_PATTERNS)}")

    item_type = fields.get("item_type", "boolean")
    if item_type not in ITEM_TYPES:
        raise ValidationError(f"item_type must be one of {', '.join(ITEM_TYPES)}")

    deadline = fields.get("deadline")
    if deadline in ("", None):
        deadline = None
    elif not isinstance(deadline, str) or not _DEADLINE_PATTERN.match(deadline):
        raise ValidationError("deadline must use HH:MM format")

    description = fields.get("description")
    if description is not None and not isinstance(description, str):
        raise ValidationError("description must be a string")

    normalized = dict(fields)
    normalized.update(
        {
            "name": name.strip(),
            "repeat_pattern": pattern,
            "repeat_days": normalize_repeat_days(pattern, fields.get("repeat_days")),
            "item_type": item_type,
            "deadline": deadline,
            "description": description,
        }
    )
    return normalized


__all__ = [
    "validate_instance_value",
    "validate_routine_fields",
    "normalize_repeat_days",
]
