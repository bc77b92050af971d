"""Report and deadline routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlmodel import Session

from checkkit.core.db import get_db
from checkkit.web import handlers as web_handlers

router = APIRouter()


@router.get("/api/reports", name="api_report")
def api_report(start: str, end: str, db: Session = Depends(get_db)):
    return web_handlers.api_report(start, end, db)


@router.get("/api/deadlines/{date_str}", name="api_deadlines")
def api_deadlines(date_str: str, db: Session = Depends(get_db)):
    # 日本語: 通知スケジューラ向けの読み取り専用API / English: Read-only query for the notification scheduler
    return web_handlers.api_deadlines(date_str, db)
