"""Recurrence rules for routines."""

from __future__ import annotations

import datetime
from typing import Iterable

from checkkit.models import Routine


def _coerce_date(value) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    return datetime.datetime.strptime(str(value).strip(), "%Y-%m-%d").date()


def weekday_index(date_value) -> int:
    """Weekday index with 0=Sunday ... 6=Saturday."""
    return _coerce_date(date_value).isoweekday() % 7


def _contains(days: Iterable[int] | None, target: int) -> bool:
    if not days:
        return False
    return target in set(days)


def should_instantiate(routine: Routine, date_value) -> bool:
    """Return True when ``routine`` has an occurrence on ``date_value``.

    Weekly and monthly routines without explicit days never match. Unknown
    patterns return False so a bad row can never break materialization.
    """
    pattern = getattr(routine, "repeat_pattern", None)
    if pattern == "daily":
        return True

    date_obj = _coerce_date(date_value)
    if pattern == "weekly":
        return _contains(routine.repeat_days, weekday_index(date_obj))
    if pattern == "monthly":
        return _contains(routine.repeat_days, date_obj.day)
    return False


__all__ = ["should_instantiate", "weekday_index"]
