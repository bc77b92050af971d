"""Router exports."""

# 日本語: 各機能ルーターを集約して application.py から一括 import 可能にする / English: Re-export feature routers for centralized app wiring
from .backup_router import router as backup_router
from .day_router import router as day_router
from .report_router import router as report_router
from .routines_router import router as routines_router
from .settings_router import router as settings_router

__all__ = [
    "routines_router",
    "day_router",
    "report_router",
    "settings_router",
    "backup_router",
]
