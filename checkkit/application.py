"""FastAPI application assembly."""

from __future__ import annotations

import os

from fastapi import FastAPI

from checkkit import __version__
from checkkit.core.config import PROXY_PREFIX
from checkkit.core.db import _init_db
from checkkit.web.routers import (
    backup_router,
    day_router,
    report_router,
    routines_router,
    settings_router,
)


def create_app(*, init_db: bool = True) -> FastAPI:
    # 日本語: 逆プロキシ配下運用を想定して root_path を環境変数から解決 / English: Resolve root_path from env for reverse-proxy deployments
    proxy_prefix = os.getenv("PROXY_PREFIX", PROXY_PREFIX)

    app = FastAPI(title="CheckKit", version=__version__, root_path=proxy_prefix)

    # 日本語: 機能別ルーターを順次登録 / English: Register feature routers
    app.include_router(routines_router)
    app.include_router(day_router)
    app.include_router(report_router)
    app.include_router(settings_router)
    app.include_router(backup_router)

    if init_db:

        @app.on_event("startup")
        def _startup_init_db() -> None:
            # 日本語: 起動時にマイグレーション適用を保証 / English: Ensure migrations are applied on startup
            _init_db()

    return app


# 日本語: import 時点で既定アプリを構築 / English: Build default app instance at import time
app = create_app()
