"""Alembic migration helpers."""

from __future__ import annotations

from checkkit.core.config import MIGRATIONS_DIR


def _build_alembic_config(database_url: str):
    try:
        from alembic.config import Config
    except ModuleNotFoundError as exc:  # pragma: no cover - dependency error path
        raise RuntimeError("Alembic is required. Install dependencies and retry.") from exc

    # 日本語: インストール後も動くよう ini ではなくパッケージ内のスクリプトを直接指定 / English: Point at the packaged scripts directly so installed copies need no alembic.ini
    config = Config()
    config.set_main_option("script_location", str(MIGRATIONS_DIR))
    config.set_main_option("sqlalchemy.url", database_url)
    return config


def upgrade_to_head(database_url: str) -> None:
    """Apply migrations to the latest revision."""
    try:
        from alembic import command
    except ModuleNotFoundError as exc:  # pragma: no cover - dependency error path
        raise RuntimeError("Alembic is required. Install dependencies and retry.") from exc

    command.upgrade(_build_alembic_config(database_url), "head")
