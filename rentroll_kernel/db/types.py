"""
Module: rentroll_kernel.db.types
Responsibility: Column types shared by every model.  Centralizes money
    precision and the canonical timestamp representation used at the storage
    boundary.
Architecture position: Kernel > DB.  May be imported by models/ and by the
    ingestion normalizers.  MUST NOT import from models/.

Invariants enforced:
    - Canonical timestamps: every date-like column round-trips as a UTC
      ISO-8601 string ("2024-01-01T00:00:00+00:00").  Natural keys that
      contain a date (contract start date, invoice due date) therefore compare
      with plain string equality on both sides of the storage boundary.
    - Money values are quantized to cents by to_money().
    - Ids are stored as 36-character text so the same schema runs on
      PostgreSQL and on the SQLite test store.

Failure modes:
    - ValueError from process_bind_param when a non-ISO string is bound.
"""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID

from sqlalchemy import DateTime, String
from sqlalchemy.types import TypeDecorator

MONEY_QUANT = Decimal("0.01")


def to_money(value: Decimal) -> Decimal:
    """Quantize a Decimal to cents (ROUND_HALF_UP)."""
    return value.quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def to_iso_timestamp(value: datetime) -> str:
    """Render a datetime as a canonical UTC ISO-8601 string.

    Naive values are taken to be UTC already.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc).isoformat()


class IsoTimestamp(TypeDecorator):
    """
    Timestamp column exposed to Python as a canonical ISO-8601 string.

    Guarantees:
        - process_bind_param: ISO string or datetime -> aware UTC datetime.
        - process_result_value: datetime -> canonical UTC ISO string.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, str):
            value = datetime.fromisoformat(value)
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if isinstance(value, str):
            value = datetime.fromisoformat(value)
        return to_iso_timestamp(value)


class UUIDString(TypeDecorator):
    """uuid.UUID in Python, String(36) in the database."""

    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return None if value is None else str(value)

    def process_result_value(self, value, dialect):
        return None if value is None else UUID(value)
