"""Core configuration for CheckKit."""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# 日本語: ルート直下の secrets.env を起動時に読み込む / English: Load root-level secrets.env on startup
load_dotenv("secrets.env")

# 日本語: パッケージ基準パス（インストール後も有効） / English: Package directory, valid for installed copies too
PACKAGE_DIR = Path(__file__).resolve().parents[1]

# 日本語: パッケージ同梱の Alembic スクリプト / English: Alembic scripts shipped inside the package
MIGRATIONS_DIR = PACKAGE_DIR / "migrations"

# 日本語: 端末ローカルのデータ置き場 / English: Device-local data directory
INSTANCE_DIR = Path(os.getenv("CHECKKIT_INSTANCE_DIR", str(Path.home() / ".checkkit")))

# 日本語: SQLite 接続先の既定値 / English: Default SQLite connection URL
DATABASE_URL = os.getenv("DATABASE_URL", f"sqlite:///{INSTANCE_DIR / 'checkkit.db'}")

# 日本語: 暗号鍵はDBの外に置く / English: Encryption key lives outside the database
KEY_PATH = Path(os.getenv("CHECKKIT_KEY_PATH", str(INSTANCE_DIR / "checkkit.key")))

# 日本語: 逆プロキシ配下向けプレフィックス / English: Prefix for reverse-proxy deployments
PROXY_PREFIX = os.getenv("PROXY_PREFIX", "")

APP_VERSION = "1.0.0"

# 日本語: バックアップ形式のバージョン / English: Backup payload schema version
BACKUP_SCHEMA_VERSION = 1

DEFAULT_DUPLICATE_WINDOW_SECONDS = 2.0


def get_duplicate_routine_window_seconds() -> float:
    """Window in which a same-name routine create returns the existing row."""
    # 日本語: 不正値や負値は既定値/0に丸める / English: Fall back to default on bad input, clamp to 0-60
    raw_value = os.getenv("CHECKKIT_DUPLICATE_WINDOW_SECONDS", str(DEFAULT_DUPLICATE_WINDOW_SECONDS))
    try:
        parsed = float(raw_value)
    except (TypeError, ValueError):
        parsed = DEFAULT_DUPLICATE_WINDOW_SECONDS
    return max(0.0, min(parsed, 60.0))
