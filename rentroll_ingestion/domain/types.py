"""
rentroll_ingestion.domain.types -- Row DTOs and import result types.

ZERO I/O. Source rows are parsed into frozen dataclasses of trimmed strings;
typed parsing (sizes, dates, money) happens in the reconcilers so the raw
text is still available for rejection messages.

Counters for one file live in an ImportTally owned by that call and are
frozen into an ImportResult when the file commits.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Mapping

from rentroll_ingestion.domain.normalizers import clean_str

# Entity type names used as counter keys
FACILITY = "facility"
UNIT = "unit"
TENANT = "tenant"
RENTAL_CONTRACT = "rental_contract"
RENTAL_INVOICE = "rental_invoice"


@dataclass(frozen=True)
class UnitRow:
    """One unit inventory record."""

    facility_name: str
    unit_number: str
    unit_size: str
    unit_type: str

    REQUIRED = ("facilityName", "unitNumber", "unitSize")

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "UnitRow":
        return cls(
            facility_name=clean_str(raw.get("facilityName")),
            unit_number=clean_str(raw.get("unitNumber")),
            unit_size=clean_str(raw.get("unitSize")),
            unit_type=clean_str(raw.get("unitType")),
        )

    def missing_fields(self) -> tuple[str, ...]:
        values = {
            "facilityName": self.facility_name,
            "unitNumber": self.unit_number,
            "unitSize": self.unit_size,
        }
        return tuple(name for name in self.REQUIRED if not values[name])


@dataclass(frozen=True)
class RentRollRow:
    """One rent-roll record: a tenant's occupancy of a unit."""

    facility_name: str
    unit_number: str
    first_name: str
    last_name: str
    phone: str
    email: str
    rent_start_date: str
    rent_end_date: str
    monthly_rent: str
    current_rent_owed: str
    current_rent_owed_due_date: str

    REQUIRED = ("unitNumber", "firstName", "lastName")

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "RentRollRow":
        return cls(
            facility_name=clean_str(raw.get("facilityName")),
            unit_number=clean_str(raw.get("unitNumber")),
            first_name=clean_str(raw.get("firstName")),
            last_name=clean_str(raw.get("lastName")),
            phone=clean_str(raw.get("phone")),
            email=clean_str(raw.get("email")),
            rent_start_date=clean_str(raw.get("rentStartDate")),
            rent_end_date=clean_str(raw.get("rentEndDate")),
            monthly_rent=clean_str(raw.get("monthlyRent")),
            current_rent_owed=clean_str(raw.get("currentRentOwed")),
            current_rent_owed_due_date=clean_str(raw.get("currentRentOwedDueDate")),
        )

    def missing_fields(self) -> tuple[str, ...]:
        values = {
            "unitNumber": self.unit_number,
            "firstName": self.first_name,
            "lastName": self.last_name,
        }
        return tuple(name for name in self.REQUIRED if not values[name])


@dataclass(frozen=True)
class ImportResult:
    """Immutable outcome of one committed source file."""

    source: str
    rows_processed: int = 0
    rows_skipped: int = 0
    created: Mapping[str, int] = field(default_factory=dict)
    updated: Mapping[str, int] = field(default_factory=dict)

    def created_count(self, entity_type: str) -> int:
        return self.created.get(entity_type, 0)

    def updated_count(self, entity_type: str) -> int:
        return self.updated.get(entity_type, 0)

    def summary(self) -> str:
        created = ", ".join(f"{k}={v}" for k, v in sorted(self.created.items())) or "none"
        updated = ", ".join(f"{k}={v}" for k, v in sorted(self.updated.items())) or "none"
        return (
            f"{self.source}: {self.rows_processed} rows, {self.rows_skipped} skipped; "
            f"created {created}; updated {updated}"
        )


@dataclass(frozen=True)
class FullImportResult:
    """Outcome of a full run: unit file then rent-roll file."""

    correlation_id: str
    units: ImportResult
    rent_roll: ImportResult


@dataclass
class ImportTally:
    """Mutable per-call counters for a single file pass."""

    source: str
    rows_processed: int = 0
    rows_skipped: int = 0
    created: Counter = field(default_factory=Counter)
    updated: Counter = field(default_factory=Counter)

    def freeze(self) -> ImportResult:
        return ImportResult(
            source=self.source,
            rows_processed=self.rows_processed,
            rows_skipped=self.rows_skipped,
            created=dict(self.created),
            updated=dict(self.updated),
        )
