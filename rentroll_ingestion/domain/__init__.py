"""Pure domain types for rent-roll ingestion (ZERO I/O)."""

from rentroll_ingestion.domain.keys import (
    ContractKey,
    FacilityKey,
    InvoiceKey,
    TenantKey,
    UnitKey,
    UnitLookupKey,
    facility_key,
    tenant_key,
    unit_key,
    unit_lookup_key,
)
from rentroll_ingestion.domain.normalizers import (
    clean_str,
    normalize_facility_name,
    normalize_unit_number,
    optional_str,
    parse_amount,
    parse_date,
    parse_unit_size,
)
from rentroll_ingestion.domain.types import (
    FullImportResult,
    ImportResult,
    ImportTally,
    RentRollRow,
    UnitRow,
)

__all__ = [
    "ContractKey",
    "FacilityKey",
    "FullImportResult",
    "ImportResult",
    "ImportTally",
    "InvoiceKey",
    "RentRollRow",
    "TenantKey",
    "UnitKey",
    "UnitLookupKey",
    "UnitRow",
    "clean_str",
    "facility_key",
    "normalize_facility_name",
    "normalize_unit_number",
    "optional_str",
    "parse_amount",
    "parse_date",
    "parse_unit_size",
    "tenant_key",
    "unit_key",
    "unit_lookup_key",
]
