"""
Rental contract reconciliation keyed by (unit, tenant, start date).

The start date must match exactly; a rent roll that shifts a tenancy's start
date produces a new contract rather than updating the old one.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any

from sqlalchemy.orm import Session

from rentroll_kernel.logging_config import get_logger
from rentroll_kernel.models.rental_contract import RentalContract
from rentroll_kernel.models.tenant import Tenant
from rentroll_kernel.models.unit import Unit

from rentroll_ingestion.domain.keys import ContractKey
from rentroll_ingestion.reconcilers.base import UpsertResult, find_one, upsert

logger = get_logger("ingestion.reconcilers.contract")


def contract_key(unit: Unit, tenant: Tenant, start_date: str) -> ContractKey:
    return ContractKey(unit_id=unit.id, tenant_id=tenant.id, start_date=start_date)


class ContractReconciler:
    """Upsert rental contracts. Entity type: rental_contract."""

    entity_type: str = "rental_contract"

    def find(self, session: Session, key: ContractKey) -> RentalContract | None:
        return find_one(
            session,
            RentalContract,
            RentalContract.unit_id == key.unit_id,
            RentalContract.tenant_id == key.tenant_id,
            RentalContract.start_date == key.start_date,
        )

    def reconcile(
        self,
        session: Session,
        key: ContractKey,
        existing: RentalContract | None,
        *,
        unit: Unit,
        tenant: Tenant,
        end_date: str | None,
        current_amount_owed: Decimal,
    ) -> UpsertResult[RentalContract]:
        """
        Create the contract, or refresh end date (when supplied) and amount owed.

        `existing` is the result of find() for the same key; callers look it
        up first so they can compare the prior amount owed afterwards.
        """
        changes: dict[str, Any] = {"current_amount_owed": current_amount_owed}
        if end_date is not None:
            changes["end_date"] = end_date

        result = upsert(
            session,
            existing,
            create=lambda: RentalContract(
                unit=unit,
                tenant=tenant,
                start_date=key.start_date,
                end_date=end_date,
                current_amount_owed=current_amount_owed,
            ),
            changes=lambda contract: changes,
        )
        if result.created:
            logger.info(
                "rental_contract_created",
                extra={
                    "rental_contract_id": str(result.instance.id),
                    "unit_number": unit.number,
                    "start_date": key.start_date,
                },
            )
        return result
