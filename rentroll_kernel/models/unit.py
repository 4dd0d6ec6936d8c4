"""
Module: rentroll_kernel.models.unit
Responsibility: ORM persistence for rentable storage units.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - (number, facility_id) is unique (uq_unit_number_facility).
    - number is stored normalized (no spreadsheet ".0" suffix).
"""

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import Float, ForeignKey, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentroll_kernel.db.base import TimestampedBase

if TYPE_CHECKING:
    from rentroll_kernel.models.facility import Facility


class Unit(TimestampedBase):
    """A storage unit, exclusively owned by one facility."""

    __tablename__ = "unit"
    __table_args__ = (
        UniqueConstraint("number", "facility_id", name="uq_unit_number_facility"),
    )

    facility_id: Mapped[UUID] = mapped_column(
        ForeignKey("facility.id"), nullable=False, index=True
    )
    number: Mapped[str] = mapped_column(String(20), nullable=False)
    unit_width: Mapped[float] = mapped_column(Float, nullable=False)
    unit_length: Mapped[float] = mapped_column(Float, nullable=False)
    unit_height: Mapped[float] = mapped_column(Float, nullable=False)
    unit_type: Mapped[str] = mapped_column(String(20), nullable=False, default="")
    monthly_rent: Mapped[Decimal | None] = mapped_column(nullable=True)

    facility: Mapped["Facility"] = relationship(back_populates="units")

    def __repr__(self) -> str:
        return f"<Unit {self.number!r} facility={self.facility_id}>"
