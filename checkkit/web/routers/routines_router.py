"""Routine CRUD routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from sqlmodel import Session

from checkkit.core.db import get_db
from checkkit.web import handlers as web_handlers

router = APIRouter()


@router.get("/api/routines", name="api_routines")
def api_routines(include_inactive: bool = False, db: Session = Depends(get_db)):
    return web_handlers.api_routines(db, include_inactive=include_inactive)


@router.post("/api/routines", name="create_routine")
async def create_routine(request: Request, db: Session = Depends(get_db)):
    return await web_handlers.create_routine(request, db)


@router.get("/api/routines/{routine_id}", name="get_routine")
def get_routine(routine_id: int, db: Session = Depends(get_db)):
    return web_handlers.get_routine(routine_id, db)


@router.patch("/api/routines/{routine_id}", name="update_routine")
async def update_routine(request: Request, routine_id: int, db: Session = Depends(get_db)):
    return await web_handlers.update_routine(request, routine_id, db)


@router.delete("/api/routines/{routine_id}", name="delete_routine")
def delete_routine(routine_id: int, db: Session = Depends(get_db)):
    return web_handlers.delete_routine(routine_id, db)
