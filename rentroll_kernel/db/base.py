"""
Module: rentroll_kernel.db.base
Responsibility: The declarative base every rent-roll table derives from.
Architecture position: Kernel > DB.  Imported by every model file.  MUST NOT
    import from models/ or from the ingestion layer.

Invariants enforced:
    - Surrogate keys are uuid4 values generated client side, so a reconciler
      knows a new row's id as soon as it is flushed and never depends on a
      database sequence.
    - Python Decimal annotations become Numeric(12, 2): rents, invoice amounts
      and balances are exact cents, never floats.
    - created_at / updated_at come from the database clock, not the importer's.
"""

from datetime import datetime
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import DateTime, Numeric, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from rentroll_kernel.db.types import UUIDString


class Base(DeclarativeBase):
    """Root of the ORM registry."""

    type_annotation_map = {
        Decimal: Numeric(12, 2),
        datetime: DateTime(timezone=True),
        UUID: UUIDString(),
    }

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)


class TimestampedBase(Base):
    """Adds created_at and updated_at, both filled by the database."""

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
    )
