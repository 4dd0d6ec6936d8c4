"""
Module: rentroll_kernel.models.facility
Responsibility: ORM persistence for storage facilities.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - name is non-empty and globally unique (uq_facility_name).  The unique
      constraint is the backstop when two writers create the same facility.

Failure modes:
    - IntegrityError on duplicate name.
"""

from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentroll_kernel.db.base import TimestampedBase

if TYPE_CHECKING:
    from rentroll_kernel.models.unit import Unit


class Facility(TimestampedBase):
    """A storage facility. Owns nothing upward; units point at it."""

    __tablename__ = "facility"
    __table_args__ = (
        UniqueConstraint("name", name="uq_facility_name"),
        CheckConstraint("length(name) > 0", name="ck_facility_name_not_empty"),
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    units: Mapped[list["Unit"]] = relationship(back_populates="facility")

    def __repr__(self) -> str:
        return f"<Facility {self.name!r}>"
