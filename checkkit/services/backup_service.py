"""Encrypted backup export and restore."""

from __future__ import annotations

import datetime
import logging
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, SQLModel, select

from checkkit.core.config import APP_VERSION, BACKUP_SCHEMA_VERSION
from checkkit.core.db import commit_or_rollback
from checkkit.core.errors import DecryptionError, InvalidBackupError, StorageError, ValidationError
from checkkit.models import AppSettings, Routine, RoutineInstance, utcnow
from checkkit.services.encryption_service import EncryptionService, get_encryption_service
from checkkit.services.routine_service import ROUTINE_EDITABLE_FIELDS
from checkkit.services.settings_service import get_settings
from checkkit.services.value_service import validate_instance_value, validate_routine_fields

logger = logging.getLogger(__name__)


# 日本語: バックアップ内のレコード形式 / English: Record shapes inside a backup payload
class RoutineRecord(SQLModel):
    id: int
    name: str
    description: Optional[str] = None
    repeat_pattern: str
    repeat_days: Optional[List[int]] = None
    deadline: Optional[str] = None
    item_type: str
    is_active: bool
    created_at: datetime.datetime
    updated_at: datetime.datetime


class InstanceRecord(SQLModel):
    id: int
    routine_id: int
    date: datetime.date
    completed: bool
    value: Any = None
    photos: Optional[List[str]] = None
    notes: Optional[str] = None
    completed_at: Optional[datetime.datetime] = None
    created_at: datetime.datetime


class SettingsRecord(SQLModel):
    pin_enabled: bool = False
    pin_hash: Optional[str] = None
    biometric_enabled: bool = False
    notifications_enabled: bool = True
    encryption_key: str = ""
    last_backup: Optional[datetime.datetime] = None
    version: str = APP_VERSION


class BackupPayload(SQLModel):
    schema_version: int
    app_version: str
    exported_at: datetime.datetime
    routines: List[RoutineRecord]
    instances: List[InstanceRecord]
    settings: Optional[SettingsRecord] = None


def build_snapshot(db: Session, encryption: EncryptionService | None = None) -> BackupPayload:
    # 日本語: 設定行の初回作成はコミットを伴うため先に取得 / English: Settings may be created (and committed) on first access, so load them first
    settings = get_settings(db, encryption)
    routines = db.exec(select(Routine).order_by(Routine.id)).all()
    instances = db.exec(select(RoutineInstance).order_by(RoutineInstance.id)).all()

    return BackupPayload(
        schema_version=BACKUP_SCHEMA_VERSION,
        app_version=APP_VERSION,
        exported_at=utcnow(),
        routines=[RoutineRecord.model_validate(row.model_dump()) for row in routines],
        instances=[InstanceRecord.model_validate(row.model_dump()) for row in instances],
        settings=SettingsRecord.model_validate(settings.model_dump(exclude={"id"})),
    )


def export_data(
    db: Session,
    encryption: EncryptionService | None = None,
    *,
    record_backup: bool = True,
) -> str:
    """Return every routine, instance and the settings row as one encrypted blob."""
    encryption = encryption or get_encryption_service()
    payload = build_snapshot(db, encryption)
    blob = encryption.encrypt_object(payload.model_dump(mode="json"))

    if record_backup:
        settings = get_settings(db, encryption)
        settings.last_backup = payload.exported_at
        db.add(settings)
        commit_or_rollback(db)

    logger.info(
        "Exported backup with %d routine(s) and %d instance(s)",
        len(payload.routines),
        len(payload.instances),
    )
    return blob


def _check_records(payload: BackupPayload) -> None:
    # 日本語: 作成時と同じ規則で復元レコードを検証 / English: Restored records follow the same rules as created ones
    item_types = {}
    for record in payload.routines:
        try:
            fields = validate_routine_fields(record.model_dump(include=set(ROUTINE_EDITABLE_FIELDS)))
        except ValidationError as exc:
            raise InvalidBackupError(f"routine {record.id} is invalid: {exc}") from exc
        for field in ROUTINE_EDITABLE_FIELDS:
            setattr(record, field, fields[field])
        item_types[record.id] = record.item_type

    for record in payload.instances:
        item_type = item_types.get(record.routine_id)
        if item_type is None:
            continue
        try:
            record.value = validate_instance_value(item_type, record.value)
        except ValidationError as exc:
            raise InvalidBackupError(f"instance {record.id} is invalid: {exc}") from exc


def decode_backup(blob: str, encryption: EncryptionService | None = None) -> BackupPayload:
    """Decrypt and validate a backup blob without touching the store."""
    encryption = encryption or get_encryption_service()
    try:
        data = encryption.decrypt_object(blob)
    except DecryptionError as exc:
        raise InvalidBackupError("invalid backup file or wrong key") from exc

    if not isinstance(data, dict):
        raise InvalidBackupError("backup payload is not an object")
    try:
        payload = BackupPayload.model_validate(data)
    except PydanticValidationError as exc:
        raise InvalidBackupError(f"backup payload has an unexpected shape: {exc.error_count()} error(s)") from exc

    if payload.schema_version != BACKUP_SCHEMA_VERSION:
        raise InvalidBackupError(f"unsupported backup schema version {payload.schema_version}")
    _check_records(payload)
    return payload


def import_data(db: Session, blob: str, encryption: EncryptionService | None = None) -> Dict[str, Any]:
    """Replace all routines, instances and settings with the backup contents.

    Decryption and validation happen before any write; the replace itself is
    one transaction, so a failure leaves the previous data in place.
    """
    encryption = encryption or get_encryption_service()
    payload = decode_backup(blob, encryption)

    settings_record = payload.settings or SettingsRecord()
    settings_data = settings_record.model_dump()
    # 日本語: 鍵のミラーはこの端末の鍵に合わせる / English: The key mirror always follows this device's key
    settings_data["encryption_key"] = encryption.get_key()

    try:
        db.expunge_all()
        db.exec(delete(RoutineInstance))
        db.exec(delete(Routine))
        db.exec(delete(AppSettings))
        db.add_all([Routine(**record.model_dump()) for record in payload.routines])
        db.add_all([RoutineInstance(**record.model_dump()) for record in payload.instances])
        db.add(AppSettings(**settings_data))
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Backup restore failed; previous data kept")
        raise StorageError(f"backup restore failed: {exc}") from exc

    logger.info(
        "Restored backup from %s: %d routine(s), %d instance(s)",
        payload.exported_at.isoformat(),
        len(payload.routines),
        len(payload.instances),
    )
    return {
        "routines": len(payload.routines),
        "instances": len(payload.instances),
        "exported_at": payload.exported_at.isoformat(),
        "schema_version": payload.schema_version,
    }


__all__ = [
    "BackupPayload",
    "build_snapshot",
    "export_data",
    "decode_backup",
    "import_data",
]
