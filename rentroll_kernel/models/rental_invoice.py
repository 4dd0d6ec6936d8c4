"""
Module: rentroll_kernel.models.rental_invoice
Responsibility: ORM persistence for the open rent invoice of a contract.

Invariants enforced:
    - (rental_contract_id, invoice_due_date) is unique
      (uq_invoice_contract_due_date).
    - Exclusively owned by one contract; removed with it (ON DELETE CASCADE).
"""

from decimal import Decimal
from typing import TYPE_CHECKING
from uuid import UUID

from sqlalchemy import ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from rentroll_kernel.db.base import TimestampedBase
from rentroll_kernel.db.types import IsoTimestamp

if TYPE_CHECKING:
    from rentroll_kernel.models.rental_contract import RentalContract


class RentalInvoice(TimestampedBase):
    """An invoice for one due date of one contract."""

    __tablename__ = "rental_invoice"
    __table_args__ = (
        UniqueConstraint(
            "rental_contract_id", "invoice_due_date", name="uq_invoice_contract_due_date"
        ),
    )

    rental_contract_id: Mapped[UUID] = mapped_column(
        ForeignKey("rental_contract.id", ondelete="CASCADE"), nullable=False
    )
    invoice_due_date: Mapped[str] = mapped_column(IsoTimestamp(), nullable=False)
    invoice_amount: Mapped[Decimal] = mapped_column(nullable=False)
    invoice_balance: Mapped[Decimal] = mapped_column(nullable=False)

    rental_contract: Mapped["RentalContract"] = relationship(back_populates="invoices")

    def __repr__(self) -> str:
        return f"<RentalInvoice contract={self.rental_contract_id} due={self.invoice_due_date}>"
