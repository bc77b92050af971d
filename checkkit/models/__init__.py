"""SQLModel exports for CheckKit."""

from .routine_models import (
    ITEM_TYPES,
    REPEAT_PATTERNS,
    AppSettings,
    Routine,
    RoutineInstance,
    UTCDateTime,
    as_utc,
    utcnow,
)

__all__ = [
    "Routine",
    "RoutineInstance",
    "AppSettings",
    "REPEAT_PATTERNS",
    "ITEM_TYPES",
    "UTCDateTime",
    "as_utc",
    "utcnow",
]
