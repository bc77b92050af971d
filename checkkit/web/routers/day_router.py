"""Day and instance API routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from checkkit.core.db import get_db
from checkkit.web import handlers as web_handlers

router = APIRouter()


@router.get("/api/today", name="api_today")
def api_today(db: Session = Depends(get_db)):
    # 日本語: 生成と重複解消を行ってから返す / English: Materialize and reconcile before returning
    return web_handlers.api_today(db)


@router.get("/api/day/{date_str}", name="api_day_view")
def api_day_view(date_str: str, db: Session = Depends(get_db)):
    return web_handlers.api_day_view(date_str, db)


@router.get("/api/instances", name="api_instances")
def api_instances(start: str, end: str, db: Session = Depends(get_db)):
    return web_handlers.api_instances(start, end, db)


@router.patch("/api/instances/{instance_id}", name="update_instance")
async def update_instance(request: Request, instance_id: int, db: Session = Depends(get_db)):
    return await web_handlers.update_instance(request, instance_id, db)


@router.post("/api/instances/{instance_id}/toggle", name="toggle_instance")
def toggle_instance(instance_id: int, db: Session = Depends(get_db)):
    return web_handlers.toggle_instance(instance_id, db)
