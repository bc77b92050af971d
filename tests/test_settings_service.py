import datetime

import pytest
from sqlmodel import select

from checkkit.core.errors import ValidationError
from checkkit.models import AppSettings, Routine, RoutineInstance
from checkkit.services.instance_service import materialize_day
from checkkit.services.settings_service import clear_all_data, get_settings, serialize_settings, update_settings


def test_settings_are_created_lazily_once(db, encryption):
    assert db.exec(select(AppSettings)).all() == []

    first = get_settings(db, encryption)
    second = get_settings(db, encryption)

    assert first.id == second.id
    assert len(db.exec(select(AppSettings)).all()) == 1
    assert first.pin_enabled is False
    assert first.biometric_enabled is False
    assert first.notifications_enabled is True
    assert first.encryption_key == encryption.get_key()
    assert first.version == "1.0.0"


def test_update_settings_merges_fields(db, encryption):
    update_settings(db, {"pin_enabled": True, "pin_hash": "hash"}, encryption)
    settings = update_settings(db, {"last_backup": "2024-02-01T10:00:00"}, encryption)

    assert settings.pin_enabled is True
    assert settings.pin_hash == "hash"
    assert settings.last_backup == datetime.datetime(2024, 2, 1, 10, 0, tzinfo=datetime.timezone.utc)


@pytest.mark.parametrize(
    "updates",
    [
        {"pin_enabled": "yes"},
        {"notifications_enabled": 1},
        {"encryption_key": "mine"},
        {"last_backup": "yesterday"},
        {"pin_hash": 123},
    ],
)
def test_update_settings_rejects_bad_input(db, encryption, updates):
    with pytest.raises(ValidationError):
        update_settings(db, updates, encryption)


def test_clear_all_data_keeps_settings_row(db, encryption, make_routine):
    make_routine("Daily")
    materialize_day(db, "2024-01-01")
    update_settings(db, {"pin_enabled": True, "last_backup": "2024-02-01T10:00:00"}, encryption)

    settings = clear_all_data(db, encryption)

    assert db.exec(select(Routine)).all() == []
    assert db.exec(select(RoutineInstance)).all() == []
    assert settings.last_backup is None
    assert settings.pin_enabled is True
    assert len(db.exec(select(AppSettings)).all()) == 1


def test_serialized_settings_hide_secrets(db, encryption):
    update_settings(db, {"pin_hash": "hash"}, encryption)
    payload = serialize_settings(get_settings(db, encryption))

    assert payload["has_pin"] is True
    assert "pin_hash" not in payload
    assert "encryption_key" not in payload
