"""HTTP handler implementations used by the routers."""

from __future__ import annotations

import datetime
from contextlib import contextmanager
from typing import Any, Dict, Iterator

from fastapi import HTTPException, Request
from sqlmodel import Session

from checkkit.core.errors import (
    CheckKitError,
    DecryptionError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from checkkit.services import backup_service, instance_service, report_service, routine_service, settings_service
from checkkit.services.encryption_service import EncryptionService


@contextmanager
def translate_errors() -> Iterator[None]:
    # 日本語: コア例外を HTTP ステータスへ変換 / English: Map core errors onto HTTP status codes
    try:
        yield
    except NotFoundError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    except (ValidationError, DecryptionError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except StorageError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc
    except CheckKitError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


async def _json_object(request: Request) -> Dict[str, Any]:
    try:
        payload = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body must be JSON")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object")
    return payload


def api_routines(db: Session, *, include_inactive: bool = False):
    routines = routine_service.get_routines(db, include_inactive=include_inactive)
    return {"routines": [routine_service.serialize_routine(routine) for routine in routines]}


async def create_routine(request: Request, db: Session):
    payload = await _json_object(request)
    with translate_errors():
        routine_id = routine_service.create_routine(db, payload)
        routine = routine_service.get_routine(db, routine_id)
    return {"routine": routine_service.serialize_routine(routine)}


def get_routine(routine_id: int, db: Session):
    with translate_errors():
        routine = routine_service.get_routine(db, routine_id)
    return {"routine": routine_service.serialize_routine(routine)}


async def update_routine(request: Request, routine_id: int, db: Session):
    payload = await _json_object(request)
    with translate_errors():
        routine = routine_service.update_routine(db, routine_id, payload)
    return {"routine": routine_service.serialize_routine(routine)}


def delete_routine(routine_id: int, db: Session):
    with translate_errors():
        routine_service.delete_routine(db, routine_id)
    return {"status": "deleted", "id": routine_id}


def _day_payload(date_obj: datetime.date, db: Session):
    instances = instance_service.get_day_instances(db, date_obj)
    return {
        "date": date_obj.isoformat(),
        "instances": [instance_service.serialize_instance(instance) for instance in instances],
    }


def api_today(db: Session):
    with translate_errors():
        return _day_payload(datetime.date.today(), db)


def api_day_view(date_str: str, db: Session):
    with translate_errors():
        date_obj = instance_service.parse_date(date_str)
        return _day_payload(date_obj, db)


def api_instances(start: str, end: str, db: Session):
    with translate_errors():
        instances = instance_service.get_instances_for_date_range(db, start, end)
    return {"instances": [instance_service.serialize_instance(instance) for instance in instances]}


async def update_instance(request: Request, instance_id: int, db: Session):
    payload = await _json_object(request)
    with translate_errors():
        instance = instance_service.update_instance(db, instance_id, payload)
    return {"instance": instance_service.serialize_instance(instance)}


def toggle_instance(instance_id: int, db: Session):
    with translate_errors():
        instance = instance_service.toggle_instance(db, instance_id)
    return {"instance": instance_service.serialize_instance(instance)}


def api_report(start: str, end: str, db: Session):
    with translate_errors():
        return report_service.build_completion_report(db, start, end)


def api_deadlines(date_str: str, db: Session):
    with translate_errors():
        return {"deadlines": report_service.get_pending_deadlines(db, date_str)}


def api_settings(db: Session, encryption: EncryptionService):
    with translate_errors():
        settings = settings_service.get_settings(db, encryption)
    return {"settings": settings_service.serialize_settings(settings)}


async def update_settings(request: Request, db: Session, encryption: EncryptionService):
    payload = await _json_object(request)
    with translate_errors():
        settings = settings_service.update_settings(db, payload, encryption)
    return {"settings": settings_service.serialize_settings(settings)}


def clear_data(db: Session, encryption: EncryptionService):
    with translate_errors():
        settings_service.clear_all_data(db, encryption)
    return {"status": "cleared"}


def export_backup(db: Session, encryption: EncryptionService):
    with translate_errors():
        blob = backup_service.export_data(db, encryption)
    return {"backup": blob}


async def import_backup(request: Request, db: Session, encryption: EncryptionService):
    payload = await _json_object(request)
    blob = payload.get("backup")
    if not isinstance(blob, str) or not blob.strip():
        raise HTTPException(status_code=400, detail="backup must be a non-empty string")
    with translate_errors():
        summary = backup_service.import_data(db, blob, encryption)
    return {"status": "restored", **summary}
