"""Routine instance materialization, reconciliation and updates."""

from __future__ import annotations

import datetime
import logging
import threading
from typing import Any, Dict, List

from sqlalchemy import delete
from sqlmodel import Session, select

from checkkit.core.db import commit_or_rollback
from checkkit.core.errors import NotFoundError, ValidationError
from checkkit.models import Routine, RoutineInstance, as_utc, utcnow
from checkkit.services.encryption_service import EncryptionService, get_encryption_service
from checkkit.services.recurrence_service import should_instantiate
from checkkit.services.routine_service import get_routines
from checkkit.services.value_service import validate_instance_value

logger = logging.getLogger(__name__)

INSTANCE_EDITABLE_FIELDS = ("completed", "value", "notes", "completed_at")

# 日本語: 同時に走る生成処理を直列化 / English: Serialize overlapping materialization runs
_materialize_lock = threading.Lock()


def parse_date(value) -> datetime.date:
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    try:
        return datetime.datetime.strptime(str(value).strip(), "%Y-%m-%d").date()
    except ValueError as exc:
        raise ValidationError(f"invalid date {value!r}; expected YYYY-MM-DD") from exc


def get_instances_for_date(db: Session, date_value) -> List[RoutineInstance]:
    date_obj = parse_date(date_value)
    statement = (
        select(RoutineInstance).where(RoutineInstance.date == date_obj).order_by(RoutineInstance.id)
    )
    return list(db.exec(statement).all())


def get_instances_for_date_range(db: Session, start, end) -> List[RoutineInstance]:
    """Instances with ``start <= date <= end``."""
    start_date = parse_date(start)
    end_date = parse_date(end)
    if end_date < start_date:
        raise ValidationError("end date must not be before start date")
    statement = (
        select(RoutineInstance)
        .where(RoutineInstance.date >= start_date, RoutineInstance.date <= end_date)
        .order_by(RoutineInstance.date, RoutineInstance.id)
    )
    return list(db.exec(statement).all())


def _instance_exists(db: Session, routine_id: int, date_obj: datetime.date) -> bool:
    statement = select(RoutineInstance.id).where(
        RoutineInstance.date == date_obj, RoutineInstance.routine_id == routine_id
    )
    return db.exec(statement).first() is not None


def materialize_day(db: Session, date_value) -> List[RoutineInstance]:
    """Ensure one instance per due active routine on ``date_value``.

    Safe to call any number of times. Returns only the instances created by
    this call.
    """
    date_obj = parse_date(date_value)
    created: List[RoutineInstance] = []

    with _materialize_lock:
        routines = get_routines(db)
        existing_ids = {instance.routine_id for instance in get_instances_for_date(db, date_obj)}

        for routine in routines:
            if routine.id in existing_ids or not should_instantiate(routine, date_obj):
                continue
            # 日本語: 一括読み込みから書き込みまでの間に作られていないか再確認 / English: Re-check right before the write
            if _instance_exists(db, routine.id, date_obj):
                continue

            instance = RoutineInstance(routine_id=routine.id, date=date_obj, completed=False)
            db.add(instance)
            commit_or_rollback(db)
            db.refresh(instance)
            created.append(instance)

    if created:
        logger.info("Materialized %d instance(s) for %s", len(created), date_obj.isoformat())
    return created


def reconcile_day(db: Session, date_value) -> List[RoutineInstance]:
    """Collapse duplicate (routine, date) instances, keeping the first by id."""
    date_obj = parse_date(date_value)
    kept: Dict[int, RoutineInstance] = {}
    duplicate_ids: List[int] = []

    for instance in get_instances_for_date(db, date_obj):
        if instance.routine_id in kept:
            duplicate_ids.append(instance.id)
        else:
            kept[instance.routine_id] = instance

    if duplicate_ids:
        # 日本語: 既に削除済みの id は 0 件一致で済む / English: Ids already removed elsewhere simply match zero rows
        db.exec(delete(RoutineInstance).where(RoutineInstance.id.in_(duplicate_ids)))
        commit_or_rollback(db)
        logger.warning(
            "Removed %d duplicate instance(s) for %s: %s",
            len(duplicate_ids),
            date_obj.isoformat(),
            duplicate_ids,
        )
    return list(kept.values())


def get_day_instances(db: Session, date_value) -> List[RoutineInstance]:
    """Materialize then reconcile; the read path screens use for a day."""
    date_obj = parse_date(date_value)
    materialize_day(db, date_obj)
    return reconcile_day(db, date_obj)


def get_today_instances(db: Session, today: datetime.date | None = None) -> List[RoutineInstance]:
    return get_day_instances(db, today or datetime.date.today())


def get_instance(db: Session, instance_id: int) -> RoutineInstance:
    instance = db.get(RoutineInstance, instance_id)
    if instance is None:
        raise NotFoundError("RoutineInstance", instance_id)
    return instance


def _routine_for(db: Session, instance: RoutineInstance) -> Routine:
    routine = db.get(Routine, instance.routine_id)
    if routine is None:
        raise NotFoundError("Routine", instance.routine_id)
    return routine


def update_instance(db: Session, instance_id: int, updates: Dict[str, Any]) -> RoutineInstance:
    unknown = sorted(set(updates) - set(INSTANCE_EDITABLE_FIELDS))
    if unknown:
        raise ValidationError(f"unknown instance fields: {', '.join(unknown)}")

    instance = get_instance(db, instance_id)
    cleaned = dict(updates)

    if "completed" in cleaned:
        if not isinstance(cleaned["completed"], bool):
            raise ValidationError("completed must be a boolean")
        if cleaned["completed"]:
            cleaned.setdefault("completed_at", instance.completed_at or utcnow())
        else:
            cleaned["completed_at"] = None
    if "completed_at" in cleaned and isinstance(cleaned["completed_at"], str):
        try:
            cleaned["completed_at"] = as_utc(datetime.datetime.fromisoformat(cleaned["completed_at"]))
        except ValueError as exc:
            raise ValidationError("completed_at must be an ISO timestamp") from exc
    elif cleaned.get("completed_at") is not None and not isinstance(cleaned["completed_at"], datetime.datetime):
        raise ValidationError("completed_at must be an ISO timestamp")
    if "notes" in cleaned and cleaned["notes"] is not None and not isinstance(cleaned["notes"], str):
        raise ValidationError("notes must be a string")
    if "value" in cleaned:
        cleaned["value"] = validate_instance_value(_routine_for(db, instance).item_type, cleaned["value"])

    for field, value in cleaned.items():
        setattr(instance, field, value)
    db.add(instance)
    commit_or_rollback(db)
    db.refresh(instance)
    return instance


def toggle_instance(db: Session, instance_id: int) -> RoutineInstance:
    instance = get_instance(db, instance_id)
    return update_instance(db, instance_id, {"completed": not instance.completed})


def set_instance_photos(
    db: Session,
    instance_id: int,
    photos: List[str],
    encryption: EncryptionService | None = None,
) -> RoutineInstance:
    """Store base64 photos encrypted with the device key."""
    instance = get_instance(db, instance_id)
    if _routine_for(db, instance).item_type != "photo":
        raise ValidationError("photos can only be attached to photo routines")
    if not isinstance(photos, list) or not all(isinstance(photo, str) and photo for photo in photos):
        raise ValidationError("photos must be a list of non-empty base64 strings")

    encryption = encryption or get_encryption_service()
    instance.photos = [encryption.encrypt(photo) for photo in photos]
    db.add(instance)
    commit_or_rollback(db)
    db.refresh(instance)
    return instance


def get_instance_photos(
    db: Session, instance_id: int, encryption: EncryptionService | None = None
) -> List[str]:
    instance = get_instance(db, instance_id)
    encryption = encryption or get_encryption_service()
    return [encryption.decrypt(photo) for photo in instance.photos or []]


def delete_instance(db: Session, instance_id: int) -> None:
    """Hard delete. A row that is already gone counts as deleted."""
    db.exec(delete(RoutineInstance).where(RoutineInstance.id == instance_id))
    commit_or_rollback(db)


def serialize_instance(instance: RoutineInstance) -> Dict[str, Any]:
    return {
        "id": instance.id,
        "routine_id": instance.routine_id,
        "date": instance.date.isoformat(),
        "completed": instance.completed,
        "value": instance.value,
        "has_photos": bool(instance.photos),
        "notes": instance.notes,
        "completed_at": instance.completed_at.isoformat() if instance.completed_at else None,
        "created_at": instance.created_at.isoformat() if instance.created_at else None,
    }


__all__ = [
    "parse_date",
    "materialize_day",
    "reconcile_day",
    "get_day_instances",
    "get_today_instances",
    "get_instance",
    "get_instances_for_date",
    "get_instances_for_date_range",
    "update_instance",
    "toggle_instance",
    "set_instance_photos",
    "get_instance_photos",
    "delete_instance",
    "serialize_instance",
]
