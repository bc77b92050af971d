"""Completion statistics and deadline queries."""

from __future__ import annotations

import datetime
from typing import Any, Dict, List

from sqlmodel import Session, select

from checkkit.models import Routine
from checkkit.services.instance_service import (
    get_instances_for_date,
    get_instances_for_date_range,
    parse_date,
)
from checkkit.services.routine_service import serialize_routine


def _rate(completed: int, total: int) -> int:
    if total <= 0:
        return 0
    # 日本語: 0.5 は切り上げ / English: Round half up
    return int(completed * 100 / total + 0.5)


def build_completion_report(db: Session, start, end) -> Dict[str, Any]:
    """Overall, per-routine and per-day completion between ``start`` and ``end``."""
    start_date = parse_date(start)
    end_date = parse_date(end)
    instances = get_instances_for_date_range(db, start_date, end_date)
    # 日本語: 非アクティブでも履歴として解決する / English: Resolve inactive routines too, history keeps them
    routine_map = {routine.id: routine for routine in db.exec(select(Routine)).all()}

    per_routine: Dict[int, Dict[str, int]] = {}
    per_day: Dict[str, Dict[str, int]] = {}
    current = start_date
    while current <= end_date:
        per_day[current.isoformat()] = {"total": 0, "completed": 0}
        current += datetime.timedelta(days=1)

    completed_total = 0
    for instance in instances:
        done = 1 if instance.completed else 0
        completed_total += done

        routine_stats = per_routine.setdefault(instance.routine_id, {"total": 0, "completed": 0})
        routine_stats["total"] += 1
        routine_stats["completed"] += done

        day_stats = per_day[instance.date.isoformat()]
        day_stats["total"] += 1
        day_stats["completed"] += done

    routine_rows = []
    for routine_id, stats in per_routine.items():
        routine = routine_map.get(routine_id)
        if routine is None:
            continue
        routine_rows.append(
            {
                "routine": serialize_routine(routine),
                "total": stats["total"],
                "completed": stats["completed"],
                "rate": _rate(stats["completed"], stats["total"]),
            }
        )
    routine_rows.sort(key=lambda row: (-row["rate"], row["routine"]["id"]))

    daily_rows = [
        {
            "date": date_key,
            "total": stats["total"],
            "completed": stats["completed"],
            "rate": _rate(stats["completed"], stats["total"]),
        }
        for date_key, stats in per_day.items()
    ]

    return {
        "start": start_date.isoformat(),
        "end": end_date.isoformat(),
        "total": len(instances),
        "completed": completed_total,
        "completion_rate": _rate(completed_total, len(instances)),
        "routine_stats": routine_rows,
        "daily_stats": daily_rows,
    }


def get_pending_deadlines(db: Session, date_value) -> List[Dict[str, Any]]:
    """Incomplete instances on a date whose routine has a deadline, earliest first."""
    date_obj = parse_date(date_value)
    pending = []
    seen_routines = set()
    for instance in get_instances_for_date(db, date_obj):
        if instance.routine_id in seen_routines:
            continue
        seen_routines.add(instance.routine_id)
        if instance.completed:
            continue
        routine = db.get(Routine, instance.routine_id)
        if routine is None or not routine.is_active or not routine.deadline:
            continue
        pending.append(
            {
                "instance_id": instance.id,
                "routine_id": routine.id,
                "routine_name": routine.name,
                "deadline": routine.deadline,
                "date": date_obj.isoformat(),
            }
        )
    pending.sort(key=lambda item: item["deadline"])
    return pending


__all__ = ["build_completion_report", "get_pending_deadlines"]
