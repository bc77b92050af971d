"""Routine tracking SQLModel models."""

import datetime
from typing import Any, List, Optional

from sqlalchemy import JSON, Column, DateTime, Index, Text
from sqlalchemy.types import TypeDecorator
from sqlmodel import Field, SQLModel

REPEAT_PATTERNS = ("daily", "weekly", "monthly")
ITEM_TYPES = ("boolean", "number", "text", "photo")


def utcnow() -> datetime.datetime:
    return datetime.datetime.now(datetime.timezone.utc)


def as_utc(value: datetime.datetime) -> datetime.datetime:
    """Attach UTC to naive values and convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=datetime.timezone.utc)
    return value.astimezone(datetime.timezone.utc)


# 日本語: SQLite はタイムゾーンを保持しないため UTC で保存し読込時に付与 / English: SQLite drops offsets, so store UTC and reattach it on load
class UTCDateTime(TypeDecorator):
    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return as_utc(value).replace(tzinfo=None)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return as_utc(value)


# 日本語: 繰り返し習慣の定義 / English: Recurring routine definition
class Routine(SQLModel, table=True):
    __tablename__ = "routine"

    # 日本語: weekly は曜日(0=日 ... 6=土)、monthly は日付(1-31) / English: weekly uses weekdays (0=Sun ... 6=Sat), monthly uses days of month (1-31)
    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=100, index=True)
    description: str | None = Field(default=None, max_length=200)
    repeat_pattern: str = Field(default="daily", max_length=20)
    repeat_days: Optional[List[int]] = Field(default=None, sa_column=Column(JSON))
    deadline: str | None = Field(default=None, max_length=5)
    item_type: str = Field(default="boolean", max_length=20)
    # 日本語: 論理削除フラグ。行は物理削除しない / English: Soft-delete flag; rows are never physically removed
    is_active: bool = Field(default=True, index=True)
    created_at: datetime.datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)
    updated_at: datetime.datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


# 日本語: ある日付のルーチン実績。routine_id は所有しない参照 / English: One dated occurrence; routine_id is a non-owning reference
class RoutineInstance(SQLModel, table=True):
    __tablename__ = "routine_instance"
    __table_args__ = (Index("ix_routine_instance_date_routine", "date", "routine_id"),)

    id: int | None = Field(default=None, primary_key=True)
    routine_id: int = Field(index=True)
    date: datetime.date
    completed: bool = Field(default=False)
    value: Any = Field(default=None, sa_column=Column(JSON))
    photos: Optional[List[str]] = Field(default=None, sa_column=Column(JSON))
    notes: str | None = Field(default=None, sa_column=Column(Text))
    completed_at: datetime.datetime | None = Field(default=None, sa_type=UTCDateTime)
    created_at: datetime.datetime = Field(default_factory=utcnow, sa_type=UTCDateTime)


# 日本語: 端末全体の設定（1行のみ） / English: Device-wide settings, exactly one row
class AppSettings(SQLModel, table=True):
    __tablename__ = "app_settings"

    id: int | None = Field(default=None, primary_key=True)
    pin_enabled: bool = Field(default=False)
    pin_hash: str | None = Field(default=None, max_length=200)
    biometric_enabled: bool = Field(default=False)
    notifications_enabled: bool = Field(default=True)
    encryption_key: str = Field(default="", max_length=200)
    last_backup: datetime.datetime | None = Field(default=None, sa_type=UTCDateTime)
    version: str = Field(default="1.0.0", max_length=20)
