"""Core package exports."""

from .config import (
    APP_VERSION,
    BACKUP_SCHEMA_VERSION,
    INSTANCE_DIR,
    MIGRATIONS_DIR,
    DATABASE_URL,
    KEY_PATH,
    PROXY_PREFIX,
    get_duplicate_routine_window_seconds,
)
from .db import Session, commit_or_rollback, create_session, engine, get_db
from .errors import (
    CheckKitError,
    DecryptionError,
    InvalidBackupError,
    NotFoundError,
    StorageError,
    ValidationError,
)

__all__ = [
    "APP_VERSION",
    "BACKUP_SCHEMA_VERSION",
    "INSTANCE_DIR",
    "MIGRATIONS_DIR",
    "DATABASE_URL",
    "KEY_PATH",
    "PROXY_PREFIX",
    "get_duplicate_routine_window_seconds",
    "engine",
    "Session",
    "create_session",
    "get_db",
    "commit_or_rollback",
    "CheckKitError",
    "ValidationError",
    "NotFoundError",
    "DecryptionError",
    "InvalidBackupError",
    "StorageError",
]
