"""
Module: rentroll_kernel.models.rental_contract
Responsibility: ORM persistence for rental contracts linking one unit and
    one tenant.
Architecture position: Kernel > Models.  May import from db/ only.

Invariants enforced:
    - current_amount_owed equals the sum of the contract's invoice balances
      after every invoice-touching import run.  The ingestion balance
      aggregator maintains this; the table does not.
    - Deleting a contract deletes its invoices (ORM cascade + ON DELETE
      CASCADE on rental_invoice.rental_contract_id).
    - start_date / end_date are canonical UTC ISO-8601 strings
      (see db/types.IsoTimestamp).
"""

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, Index
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentroll_kernel.db.base import TimestampedBase
from rentroll_kernel.db.types import IsoTimestamp

if TYPE_CHECKING:
    from rentroll_kernel.models.rental_invoice import RentalInvoice
    from rentroll_kernel.models.tenant import Tenant
    from rentroll_kernel.models.unit import Unit


class RentalContract(TimestampedBase):
    """A tenancy of one unit by one tenant starting on start_date."""

    __tablename__ = "rental_contract"
    __table_args__ = (
        Index("idx_contract_natural_key", "unit_id", "tenant_id", "start_date"),
    )

    unit_id: Mapped[UUID] = mapped_column(
        ForeignKey("unit.id"), nullable=False
    )
    tenant_id: Mapped[UUID] = mapped_column(
        ForeignKey("tenant.id"), nullable=False, index=True
    )
    start_date: Mapped[str] = mapped_column(IsoTimestamp(), nullable=False)
    end_date: Mapped[str | None] = mapped_column(IsoTimestamp(), nullable=True)
    current_amount_owed: Mapped[Decimal] = mapped_column(
        nullable=False, default=Decimal("0")
    )

    unit: Mapped["Unit"] = relationship()
    tenant: Mapped["Tenant"] = relationship(back_populates="rental_contracts")
    invoices: Mapped[list["RentalInvoice"]] = relationship(
        back_populates="rental_contract",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    def __repr__(self) -> str:
        return f"<RentalContract unit={self.unit_id} tenant={self.tenant_id} start={self.start_date}>"
