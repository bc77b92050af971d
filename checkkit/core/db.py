"""Database engine and session helpers."""

from __future__ import annotations

import logging
import os
import threading
from typing import Iterator

from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, create_engine

from checkkit.core.config import DATABASE_URL
from checkkit.core.errors import StorageError
from checkkit.core.migrations import upgrade_to_head

logger = logging.getLogger(__name__)


def _normalize_database_url(database_url: str) -> str:
    # 日本語: 端末ローカル保存のため SQLite のみ許可 / English: Only SQLite is accepted for on-device storage
    normalized_url = database_url or ""
    if not normalized_url.startswith("sqlite"):
        raise ValueError("DATABASE_URL must be SQLite (sqlite:///path/to/checkkit.db).")
    return normalized_url


def _ensure_parent_dir(database_url: str) -> None:
    prefix = "sqlite:///"
    if not database_url.startswith(prefix):
        return
    path = database_url[len(prefix):]
    if not path or path == ":memory:":
        return
    os.makedirs(os.path.dirname(os.path.abspath(path)), exist_ok=True)


def _build_engine(database_url: str):
    # 日本語: URL検証後にエンジン生成 / English: Build engine after URL validation
    normalized_url = _normalize_database_url(database_url)
    _ensure_parent_dir(normalized_url)
    return create_engine(normalized_url, connect_args={"check_same_thread": False})


# 日本語: モジュール初期化時点の接続情報とエンジン / English: Module-level current URL and engine
_current_database_url = _normalize_database_url(DATABASE_URL)
engine = _build_engine(_current_database_url)
_db_initialized = False
_db_init_lock = threading.Lock()


def _ensure_db_initialized() -> None:
    global _db_initialized
    if _db_initialized:
        return
    # 日本語: マイグレーションはプロセス内で一度だけ実行 / English: Run migrations once per process with lock protection
    with _db_init_lock:
        if _db_initialized:
            return
        upgrade_to_head(_current_database_url)
        logger.info("Database schema is up to date (%s)", _current_database_url)
        _db_initialized = True


def _init_db() -> None:
    _ensure_db_initialized()


def create_session() -> Session:
    # 日本語: 明示的セッション生成（CLI等で利用） / English: Explicit session factory (used by the CLI, etc.)
    _ensure_db_initialized()
    return Session(engine)


def get_db() -> Iterator[Session]:
    # 日本語: FastAPI Depends 用のセッション供給器 / English: Dependency provider for FastAPI routes
    _ensure_db_initialized()
    with Session(engine) as db:
        yield db


def commit_or_rollback(db: Session) -> None:
    """Commit the session; on failure roll back and raise StorageError."""
    try:
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Commit failed; transaction rolled back")
        raise StorageError(f"storage write failed: {exc}") from exc
