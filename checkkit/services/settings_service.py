"""Settings accessor and data reset."""

from __future__ import annotations

import datetime
import logging
import threading
from typing import Any, Dict

from sqlalchemy import delete
from sqlmodel import Session, select

from checkkit.core.config import APP_VERSION
from checkkit.core.db import commit_or_rollback
from checkkit.core.errors import ValidationError
from checkkit.models import AppSettings, Routine, RoutineInstance, as_utc
from checkkit.services.encryption_service import EncryptionService, get_encryption_service

logger = logging.getLogger(__name__)

_BOOLEAN_SETTINGS = ("pin_enabled", "biometric_enabled", "notifications_enabled")
SETTINGS_EDITABLE_FIELDS = _BOOLEAN_SETTINGS + ("pin_hash", "last_backup")

_settings_lock = threading.Lock()


def get_settings(db: Session, encryption: EncryptionService | None = None) -> AppSettings:
    """Return the single settings row, creating it with defaults on first access."""
    settings = db.exec(select(AppSettings).order_by(AppSettings.id)).first()
    if settings is not None:
        return settings

    encryption = encryption or get_encryption_service()
    with _settings_lock:
        # 日本語: ロック取得後に再確認 / English: Re-check after acquiring the lock
        settings = db.exec(select(AppSettings).order_by(AppSettings.id)).first()
        if settings is not None:
            return settings
        settings = AppSettings(
            pin_enabled=False,
            biometric_enabled=False,
            notifications_enabled=True,
            encryption_key=encryption.get_key(),
            version=APP_VERSION,
        )
        db.add(settings)
        commit_or_rollback(db)
        db.refresh(settings)
        logger.info("Created default settings record id=%s", settings.id)
        return settings


def _validate_settings_updates(updates: Dict[str, Any]) -> Dict[str, Any]:
    unknown = sorted(set(updates) - set(SETTINGS_EDITABLE_FIELDS))
    if unknown:
        raise ValidationError(f"unknown settings fields: {', '.join(unknown)}")

    cleaned = dict(updates)
    for field in _BOOLEAN_SETTINGS:
        if field in cleaned and not isinstance(cleaned[field], bool):
            raise ValidationError(f"{field} must be a boolean")
    if "pin_hash" in cleaned and cleaned["pin_hash"] is not None and not isinstance(cleaned["pin_hash"], str):
        raise ValidationError("pin_hash must be a string")
    if "last_backup" in cleaned:
        value = cleaned["last_backup"]
        if isinstance(value, str):
            try:
                cleaned["last_backup"] = as_utc(datetime.datetime.fromisoformat(value))
            except ValueError as exc:
                raise ValidationError("last_backup must be an ISO timestamp") from exc
        elif value is not None and not isinstance(value, datetime.datetime):
            raise ValidationError("last_backup must be an ISO timestamp")
    return cleaned


def update_settings(
    db: Session, updates: Dict[str, Any], encryption: EncryptionService | None = None
) -> AppSettings:
    cleaned = _validate_settings_updates(updates)
    settings = get_settings(db, encryption)
    for field, value in cleaned.items():
        setattr(settings, field, value)
    db.add(settings)
    commit_or_rollback(db)
    db.refresh(settings)
    return settings


def clear_all_data(db: Session, encryption: EncryptionService | None = None) -> AppSettings:
    """Delete every routine and instance; keep the settings row but reset last_backup."""
    settings = get_settings(db, encryption)
    db.exec(delete(RoutineInstance))
    db.exec(delete(Routine))
    settings.last_backup = None
    db.add(settings)
    commit_or_rollback(db)
    db.refresh(settings)
    logger.info("Cleared all routines and instances")
    return settings


def serialize_settings(settings: AppSettings) -> Dict[str, Any]:
    # 日本語: 鍵のミラーは外部に出さない / English: Never expose the key mirror over the API
    return {
        "pin_enabled": settings.pin_enabled,
        "biometric_enabled": settings.biometric_enabled,
        "notifications_enabled": settings.notifications_enabled,
        "has_pin": bool(settings.pin_hash),
        "last_backup": settings.last_backup.isoformat() if settings.last_backup else None,
        "version": settings.version,
    }


__all__ = [
    "get_settings",
    "update_settings",
    "clear_all_data",
    "serialize_settings",
]
