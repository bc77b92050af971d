"""Backup export/import routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from checkkit.core.db import get_db
from checkkit.services.encryption_service import EncryptionService
from checkkit.web import handlers as web_handlers
from checkkit.web.dependencies import get_encryption

router = APIRouter()


@router.get("/api/backup/export", name="export_backup")
def export_backup(db: Session = Depends(get_db), encryption: EncryptionService = Depends(get_encryption)):
    return web_handlers.export_backup(db, encryption)


@router.post("/api/backup/import", name="import_backup")
async def import_backup(
    request: Request,
    db: Session = Depends(get_db),
    encryption: EncryptionService = Depends(get_encryption),
):
    return await web_handlers.import_backup(request, db, encryption)
