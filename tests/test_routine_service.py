import datetime

import pytest
from sqlmodel import Session, select

from checkkit.core.errors import NotFoundError, ValidationError
from checkkit.models import Routine, RoutineInstance
from checkkit.services import routine_service
from checkkit.services.instance_service import materialize_day


def _count_routines(db):
    return len(db.exec(select(Routine)).all())


def test_create_routine_sets_defaults_and_timestamps(db):
    routine_id = routine_service.create_routine(
        db,
        {"name": "  Stretch ", "repeat_pattern": "weekly", "repeat_days": [5, 1, 3, 1], "deadline": "07:30"},
    )
    routine = routine_service.get_routine(db, routine_id)

    assert routine.name == "Stretch"
    assert routine.repeat_days == [1, 3, 5]
    assert routine.item_type == "boolean"
    assert routine.is_active is True
    assert routine.created_at == routine.updated_at


@pytest.mark.parametrize(
    "payload",
    [
        {"name": ""},
        {"name": "   "},
        {"name": "x", "repeat_pattern": "yearly"},
        {"name": "x", "item_type": "audio"},
        {"name": "x", "repeat_pattern": "weekly", "repeat_days": [7]},
        {"name": "x", "repeat_pattern": "monthly", "repeat_days": [0]},
        {"name": "x", "repeat_pattern": "weekly", "repeat_days": "1,2"},
        {"name": "x", "deadline": "25:00"},
        {"name": "x", "is_deleted": True},
    ],
)
def test_create_routine_rejects_invalid_input_before_writing(db, payload):
    with pytest.raises(ValidationError):
        routine_service.create_routine(db, payload)
    assert _count_routines(db) == 0


def test_same_name_within_window_returns_existing_id(db):
    first = routine_service.create_routine(db, {"name": "Read"})
    second = routine_service.create_routine(db, {"name": "Read"})

    assert first == second
    assert _count_routines(db) == 1


def test_same_name_outside_window_creates_new_row(db):
    old = datetime.datetime.now(datetime.timezone.utc) - datetime.timedelta(minutes=5)
    first = routine_service.create_routine(db, {"name": "Read"}, now=old)
    second = routine_service.create_routine(db, {"name": "Read"})

    assert first != second
    assert _count_routines(db) == 2


def test_guard_ignores_inactive_routines(db):
    first = routine_service.create_routine(db, {"name": "Read"})
    routine_service.delete_routine(db, first)
    second = routine_service.create_routine(db, {"name": "Read"})

    assert first != second


def test_guard_window_can_be_disabled(db, monkeypatch):
    monkeypatch.setenv("CHECKKIT_DUPLICATE_WINDOW_SECONDS", "0")
    first = routine_service.create_routine(db, {"name": "Read"})
    second = routine_service.create_routine(db, {"name": "Read"})

    assert first != second


def test_update_routine_merges_and_refreshes_updated_at(db):
    routine_id = routine_service.create_routine(
        db, {"name": "Walk", "description": "outside"}, now=datetime.datetime(2024, 1, 1, 8, 0)
    )
    updated = routine_service.update_routine(db, routine_id, {"repeat_pattern": "monthly", "repeat_days": [15, 1]})

    assert updated.name == "Walk"
    assert updated.description == "outside"
    assert updated.repeat_days == [1, 15]
    assert updated.updated_at > updated.created_at


def test_update_routine_validates_merged_fields(db):
    routine_id = routine_service.create_routine(db, {"name": "Walk"})
    with pytest.raises(ValidationError):
        routine_service.update_routine(db, routine_id, {"name": ""})
    assert routine_service.get_routine(db, routine_id).name == "Walk"


def test_update_and_delete_unknown_id_raise_not_found(db):
    with pytest.raises(NotFoundError):
        routine_service.update_routine(db, 999, {"name": "x"})
    with pytest.raises(NotFoundError):
        routine_service.delete_routine(db, 999)


def test_soft_delete_hides_routine_but_keeps_history(db):
    routine_id = routine_service.create_routine(db, {"name": "Meditate"})
    materialize_day(db, "2024-01-01")

    routine_service.delete_routine(db, routine_id)

    assert routine_service.get_routines(db) == []
    assert [r.id for r in routine_service.get_routines(db, include_inactive=True)] == [routine_id]
    instance = db.exec(select(RoutineInstance)).one()
    assert instance.routine_id == routine_id
    assert routine_service.get_routine(db, routine_id).is_active is False


def test_get_routines_by_name(db):
    routine_id = routine_service.create_routine(db, {"name": "Journal"})
    routine_service.create_routine(db, {"name": "Other"})

    assert [r.id for r in routine_service.get_routines_by_name(db, "Journal")] == [routine_id]
    routine_service.delete_routine(db, routine_id)
    assert routine_service.get_routines_by_name(db, "Journal") == []
    assert len(routine_service.get_routines_by_name(db, "Journal", active_only=False)) == 1


def test_timestamps_are_utc_aware_after_reload(engine, db):
    local = datetime.datetime(2024, 1, 1, 9, 0, tzinfo=datetime.timezone(datetime.timedelta(hours=9)))
    routine_id = routine_service.create_routine(db, {"name": "Walk"}, now=local)

    with Session(engine) as session:
        routine = routine_service.get_routine(session, routine_id)
        assert routine.created_at == datetime.datetime(2024, 1, 1, 0, 0, tzinfo=datetime.timezone.utc)
        assert routine.created_at.tzinfo is not None
