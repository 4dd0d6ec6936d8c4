"""Database layer - engine, base classes and column types."""

from rentroll_kernel.db.base import Base, TimestampedBase
from rentroll_kernel.db.engine import (
    build_engine,
    create_tables,
    drop_tables,
    get_engine,
    get_session,
    get_session_factory,
    init_engine_from_url,
    reset_engine,
    session_scope,
)
from rentroll_kernel.db.types import IsoTimestamp, UUIDString, to_iso_timestamp, to_money

__all__ = [
    "build_engine",
    "init_engine_from_url",
    "get_engine",
    "get_session",
    "get_session_factory",
    "session_scope",
    "create_tables",
    "drop_tables",
    "reset_engine",
    "Base",
    "TimestampedBase",
    "UUIDString",
    "IsoTimestamp",
    "to_iso_timestamp",
    "to_money",
]
