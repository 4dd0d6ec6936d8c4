"""
Contract balance aggregation.

Invariant: after a row touches a contract, current_amount_owed equals the sum
of invoice_balance over every invoice of that contract, read back from the
store. A stored balance that is not numeric counts as zero.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.orm import Session

from rentroll_kernel.db.types import to_money
from rentroll_kernel.logging_config import get_logger
from rentroll_kernel.models.rental_contract import RentalContract
from rentroll_kernel.models.rental_invoice import RentalInvoice

from rentroll_ingestion.domain.normalizers import parse_amount

logger = get_logger("ingestion.reconcilers.balance")


class BalanceAggregator:
    """Recomputes a contract's amount owed from its invoices."""

    def recompute(self, session: Session, contract: RentalContract) -> Decimal:
        """Set and persist contract.current_amount_owed. Returns the new total."""
        balances = session.scalars(
            select(RentalInvoice.invoice_balance).where(
                RentalInvoice.rental_contract_id == contract.id
            )
        ).all()
        total = to_money(sum((parse_amount(b) for b in balances), Decimal("0")))
        if contract.current_amount_owed != total:
            logger.debug(
                "contract_balance_recomputed",
                extra={
                    "rental_contract_id": str(contract.id),
                    "previous": contract.current_amount_owed,
                    "total": total,
                    "invoice_count": len(balances),
                },
            )
        contract.current_amount_owed = total
        session.flush()
        return total
