"""Service-layer exports."""

from .backup_service import decode_backup, export_data, import_data
from .encryption_service import EncryptionService, get_encryption_service
from .instance_service import (
    get_day_instances,
    get_instances_for_date_range,
    get_today_instances,
    materialize_day,
    reconcile_day,
    toggle_instance,
    update_instance,
)
from .recurrence_service import should_instantiate
from .report_service import build_completion_report, get_pending_deadlines
from .routine_service import (
    create_routine,
    delete_routine,
    get_routine,
    get_routines,
    get_routines_by_name,
    update_routine,
)
from .settings_service import clear_all_data, get_settings, update_settings

__all__ = [
    "should_instantiate",
    "materialize_day",
    "reconcile_day",
    "get_day_instances",
    "get_today_instances",
    "get_instances_for_date_range",
    "update_instance",
    "toggle_instance",
    "create_routine",
    "get_routines",
    "get_routines_by_name",
    "get_routine",
    "update_routine",
    "delete_routine",
    "get_settings",
    "update_settings",
    "clear_all_data",
    "EncryptionService",
    "get_encryption_service",
    "export_data",
    "import_data",
    "decode_backup",
    "build_completion_report",
    "get_pending_deadlines",
]
