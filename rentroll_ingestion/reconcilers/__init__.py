"""Entity reconcilers: natural-key upserts for each rent-roll entity."""

from rentroll_ingestion.reconcilers.balance import BalanceAggregator
from rentroll_ingestion.reconcilers.base import (
    EntityReconciler,
    UpsertOutcome,
    UpsertResult,
    apply_changes,
    find_one,
    upsert,
)
from rentroll_ingestion.reconcilers.contract import ContractReconciler, contract_key
from rentroll_ingestion.reconcilers.facility_unit import (
    FacilityReconciler,
    FacilityUnitReconciler,
    UnitReconciler,
    UnitRowOutcome,
)
from rentroll_ingestion.reconcilers.invoice import InvoiceReconciler
from rentroll_ingestion.reconcilers.tenant import TenantResolver

__all__ = [
    "BalanceAggregator",
    "ContractReconciler",
    "EntityReconciler",
    "FacilityReconciler",
    "FacilityUnitReconciler",
    "InvoiceReconciler",
    "TenantResolver",
    "UnitReconciler",
    "UnitRowOutcome",
    "UpsertOutcome",
    "UpsertResult",
    "apply_changes",
    "contract_key",
    "find_one",
    "upsert",
]
