"""
rentroll_ingestion.domain.keys -- Natural keys for each reconciled entity.

ZERO I/O. Keys are built from already-normalized values so two source rows
that mean the same record always produce equal keys.

    Facility        name (trimmed, case-sensitive)
    Unit            (normalized unit number, facility id)
    Unit (lookup)   (normalized unit number, lowercased facility name)
    Tenant          email when present, else (first, last[, phone])
    RentalContract  (unit id, tenant id, start date)
    RentalInvoice   (contract id, due date)
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from rentroll_ingestion.domain.normalizers import (
    clean_str,
    normalize_facility_name,
    normalize_unit_number,
    optional_str,
)


@dataclass(frozen=True)
class FacilityKey:
    name: str


@dataclass(frozen=True)
class UnitKey:
    number: str
    facility_id: UUID


@dataclass(frozen=True)
class UnitLookupKey:
    """Rent-roll side unit reference; facility matched case-insensitively."""

    number: str
    facility_name: str


@dataclass(frozen=True)
class TenantKey:
    first_name: str
    last_name: str
    email: str | None = None
    phone: str | None = None


@dataclass(frozen=True)
class ContractKey:
    unit_id: UUID
    tenant_id: UUID
    start_date: str  # Canonical ISO-8601


@dataclass(frozen=True)
class InvoiceKey:
    rental_contract_id: UUID
    due_date: str  # Canonical ISO-8601


def facility_key(raw_name: str | None) -> FacilityKey:
    return FacilityKey(name=clean_str(raw_name))


def unit_key(raw_number: str | None, facility_id: UUID) -> UnitKey:
    return UnitKey(number=normalize_unit_number(raw_number), facility_id=facility_id)


def unit_lookup_key(raw_number: str | None, raw_facility_name: str | None) -> UnitLookupKey:
    return UnitLookupKey(
        number=normalize_unit_number(raw_number),
        facility_name=normalize_facility_name(raw_facility_name),
    )


def tenant_key(
    first_name: str | None,
    last_name: str | None,
    email: str | None = None,
    phone: str | None = None,
) -> TenantKey:
    return TenantKey(
        first_name=clean_str(first_name),
        last_name=clean_str(last_name),
        email=optional_str(email),
        phone=optional_str(phone),
    )
