"""
Rental invoice reconciliation keyed by (contract, due date).

Only rows with a positive amount owed and a parseable due date produce an
invoice. A new invoice carries the row's monthly rent as its amount and the
amount owed as its balance.
"""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.orm import Session

from rentroll_kernel.logging_config import get_logger
from rentroll_kernel.models.rental_contract import RentalContract
from rentroll_kernel.models.rental_invoice import RentalInvoice

from rentroll_ingestion.domain.keys import InvoiceKey
from rentroll_ingestion.reconcilers.base import UpsertResult, upsert

logger = get_logger("ingestion.reconcilers.invoice")


class InvoiceReconciler:
    """Upsert a contract's invoice for one due date. Entity type: rental_invoice."""

    entity_type: str = "rental_invoice"

    @staticmethod
    def applies(current_amount_owed: Decimal, due_date: str | None) -> bool:
        return current_amount_owed > 0 and due_date is not None

    def find(self, contract: RentalContract, key: InvoiceKey) -> RentalInvoice | None:
        """Match among the contract's invoices (loaded through the relationship)."""
        for invoice in contract.invoices:
            if invoice.invoice_due_date == key.due_date:
                return invoice
        return None

    def reconcile(
        self,
        session: Session,
        contract: RentalContract,
        due_date: str,
        invoice_amount: Decimal,
        invoice_balance: Decimal,
    ) -> UpsertResult[RentalInvoice]:
        key = InvoiceKey(rental_contract_id=contract.id, due_date=due_date)
        result = upsert(
            session,
            self.find(contract, key),
            create=lambda: RentalInvoice(
                rental_contract=contract,
                invoice_due_date=due_date,
                invoice_amount=invoice_amount,
                invoice_balance=invoice_balance,
            ),
            changes=lambda invoice: {
                "invoice_amount": invoice_amount,
                "invoice_balance": invoice_balance,
            },
        )
        if result.created:
            logger.info(
                "rental_invoice_created",
                extra={
                    "rental_contract_id": str(contract.id),
                    "invoice_due_date": due_date,
                    "invoice_balance": invoice_balance,
                },
            )
        elif result.updated:
            logger.info(
                "rental_invoice_updated",
                extra={
                    "rental_contract_id": str(contract.id),
                    "invoice_due_date": due_date,
                    "changed_fields": list(result.changed_fields),
                },
            )
        return result
