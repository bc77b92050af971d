"""Routine CRUD service."""

from __future__ import annotations

import datetime
import logging
import threading
from typing import Any, Dict, List

from sqlmodel import Session, select

from checkkit.core.config import get_duplicate_routine_window_seconds
from checkkit.core.db import commit_or_rollback
from checkkit.core.errors import NotFoundError, ValidationError
from checkkit.models import Routine, as_utc, utcnow
from checkkit.services.value_service import validate_routine_fields

logger = logging.getLogger(__name__)

ROUTINE_EDITABLE_FIELDS = (
    "name",
    "description",
    "repeat_pattern",
    "repeat_days",
    "deadline",
    "item_type",
    "is_active",
)

# 日本語: 同名チェックと挿入を直列化 / English: Serialize the same-name check with the insert
_create_lock = threading.Lock()


def _reject_unknown_fields(data: Dict[str, Any]) -> None:
    unknown = sorted(set(data) - set(ROUTINE_EDITABLE_FIELDS))
    if unknown:
        raise ValidationError(f"unknown routine fields: {', '.join(unknown)}")


def _find_recent_duplicate(
    db: Session, name: str, now: datetime.datetime, window_seconds: float
) -> Routine | None:
    if window_seconds <= 0:
        return None
    threshold = now - datetime.timedelta(seconds=window_seconds)
    candidates = db.exec(
        select(Routine).where(Routine.name == name, Routine.is_active == True)  # noqa: E712
    ).all()
    for routine in candidates:
        if routine.created_at and routine.created_at > threshold:
            return routine
    return None


def create_routine(db: Session, data: Dict[str, Any], *, now: datetime.datetime | None = None) -> int:
    """Create a routine and return its id.

    A second create with the same name shortly after the first (see
    ``CHECKKIT_DUPLICATE_WINDOW_SECONDS``) returns the existing active routine's
    id instead of inserting a new row.
    """
    _reject_unknown_fields(data)
    fields = validate_routine_fields(data)
    fields.pop("is_active", None)

    with _create_lock:
        now = as_utc(now) if now else utcnow()
        duplicate = _find_recent_duplicate(
            db, fields["name"], now, get_duplicate_routine_window_seconds()
        )
        if duplicate is not None:
            logger.info("Routine %r created again within the guard window; reusing id=%s", fields["name"], duplicate.id)
            return duplicate.id

        routine = Routine(**fields, is_active=True, created_at=now, updated_at=now)
        db.add(routine)
        commit_or_rollback(db)
        db.refresh(routine)
        return routine.id


def get_routines(db: Session, *, include_inactive: bool = False) -> List[Routine]:
    statement = select(Routine)
    if not include_inactive:
        statement = statement.where(Routine.is_active == True)  # noqa: E712
    return list(db.exec(statement.order_by(Routine.id)).all())


def get_routines_by_name(db: Session, name: str, *, active_only: bool = True) -> List[Routine]:
    statement = select(Routine).where(Routine.name == name)
    if active_only:
        statement = statement.where(Routine.is_active == True)  # noqa: E712
    return list(db.exec(statement.order_by(Routine.id)).all())


def get_routine(db: Session, routine_id: int) -> Routine:
    routine = db.get(Routine, routine_id)
    if routine is None:
        raise NotFoundError("Routine", routine_id)
    return routine


def update_routine(db: Session, routine_id: int, updates: Dict[str, Any]) -> Routine:
    _reject_unknown_fields(updates)
    routine = get_routine(db, routine_id)

    # 日本語: 既存値に部分更新をマージしてから全体を検証 / English: Merge partial updates over current values, then validate the whole
    merged = {field: getattr(routine, field) for field in ROUTINE_EDITABLE_FIELDS}
    merged.update(updates)
    fields = validate_routine_fields(merged)
    if not isinstance(fields.get("is_active"), bool):
        raise ValidationError("is_active must be a boolean")

    for field in ROUTINE_EDITABLE_FIELDS:
        setattr(routine, field, fields[field])
    routine.updated_at = utcnow()
    db.add(routine)
    commit_or_rollback(db)
    db.refresh(routine)
    return routine


def delete_routine(db: Session, routine_id: int) -> Routine:
    """Soft delete. Instances keep referencing the routine."""
    routine = get_routine(db, routine_id)
    routine.is_active = False
    routine.updated_at = utcnow()
    db.add(routine)
    commit_or_rollback(db)
    db.refresh(routine)
    return routine


def serialize_routine(routine: Routine) -> Dict[str, Any]:
    return {
        "id": routine.id,
        "name": routine.name,
        "description": routine.description,
        "repeat_pattern": routine.repeat_pattern,
        "repeat_days": list(routine.repeat_days or []),
        "deadline": routine.deadline,
        "item_type": routine.item_type,
        "is_active": routine.is_active,
        "created_at": routine.created_at.isoformat() if routine.created_at else None,
        "updated_at": routine.updated_at.isoformat() if routine.updated_at else None,
    }


__all__ = [
    "create_routine",
    "get_routines",
    "get_routines_by_name",
    "get_routine",
    "update_routine",
    "delete_routine",
    "serialize_routine",
]
