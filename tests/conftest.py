import os
import sys
import tempfile
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# 日本語: パッケージ import 前に端末ローカル設定を隔離 / English: Isolate device-local config before importing the package
_TEST_HOME = tempfile.mkdtemp(prefix="checkkit-tests-")
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["CHECKKIT_INSTANCE_DIR"] = _TEST_HOME
os.environ["CHECKKIT_KEY_PATH"] = os.path.join(_TEST_HOME, "default.key")

from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402

from checkkit import models as _models  # noqa: E402,F401
from checkkit.services.encryption_service import EncryptionService  # noqa: E402
from checkkit.services.routine_service import create_routine  # noqa: E402


@pytest.fixture()
def engine():
    test_engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(test_engine)
    yield test_engine
    test_engine.dispose()


@pytest.fixture()
def db(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture()
def encryption(tmp_path):
    return EncryptionService(tmp_path / "device.key")


@pytest.fixture()
def make_routine(db):
    def _make(name="Drink water", **fields):
        data = {"name": name, "repeat_pattern": "daily", "item_type": "boolean"}
        data.update(fields)
        return create_routine(db, data)

    return _make
