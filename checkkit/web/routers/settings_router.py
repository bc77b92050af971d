"""Settings routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from checkkit.core.db import get_db
from checkkit.services.encryption_service import EncryptionService
from checkkit.web import handlers as web_handlers
from checkkit.web.dependencies import get_encryption

router = APIRouter()


@router.get("/api/settings", name="api_settings")
def api_settings(db: Session = Depends(get_db), encryption: EncryptionService = Depends(get_encryption)):
    return web_handlers.api_settings(db, encryption)


@router.patch("/api/settings", name="update_settings")
async def update_settings(
    request: Request,
    db: Session = Depends(get_db),
    encryption: EncryptionService = Depends(get_encryption),
):
    return await web_handlers.update_settings(request, db, encryption)


@router.post("/api/data/clear", name="clear_data")
def clear_data(db: Session = Depends(get_db), encryption: EncryptionService = Depends(get_encryption)):
    # 日本語: ルーチンと実績を全削除（設定行は残す） / English: Wipe routines and instances, keep the settings row
    return web_handlers.clear_data(db, encryption)
