"""
Facility and unit reconciliation for the unit inventory file.

Each inventory row resolves its facility by exact (case-sensitive) trimmed
name through a per-call cache, then upserts the unit keyed by
(normalized unit number, facility). A row writes at most one facility and
one unit.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from sqlalchemy import func
from sqlalchemy.orm import Session

from rentroll_kernel.exceptions import InvalidUnitSizeError, MissingFieldError
from rentroll_kernel.logging_config import get_logger
from rentroll_kernel.models.facility import Facility
from rentroll_kernel.models.unit import Unit

from rentroll_ingestion.domain.keys import (
    FacilityKey,
    UnitKey,
    UnitLookupKey,
    facility_key,
    unit_key,
)
from rentroll_ingestion.domain.normalizers import parse_unit_size
from rentroll_ingestion.domain.types import UnitRow
from rentroll_ingestion.reconcilers.base import (
    UpsertOutcome,
    UpsertResult,
    find_one,
    upsert,
)

logger = get_logger("ingestion.reconcilers.facility_unit")


@dataclass(frozen=True)
class UnitRowOutcome:
    """Facility and unit results for one inventory row."""

    facility: UpsertResult[Facility]
    unit: UpsertResult[Unit]


class FacilityReconciler:
    """Find-or-create facilities by exact name. Entity type: facility."""

    entity_type: str = "facility"

    def find(self, session: Session, key: FacilityKey) -> Facility | None:
        return find_one(session, Facility, Facility.name == key.name)

    def reconcile(
        self,
        session: Session,
        key: FacilityKey,
        cache: dict[str, Facility],
    ) -> UpsertResult[Facility]:
        cached = cache.get(key.name)
        if cached is not None:
            return UpsertResult(instance=cached, outcome=UpsertOutcome.UNCHANGED)

        result = upsert(
            session,
            self.find(session, key),
            create=lambda: Facility(name=key.name),
            changes=lambda facility: {},
        )
        if result.created:
            logger.info(
                "facility_created",
                extra={"facility_name": key.name, "facility_id": str(result.instance.id)},
            )
        cache[key.name] = result.instance
        return result


class UnitReconciler:
    """Upsert units by (normalized number, facility). Entity type: unit."""

    entity_type: str = "unit"

    def find(self, session: Session, key: UnitKey) -> Unit | None:
        return find_one(
            session,
            Unit,
            Unit.number == key.number,
            Unit.facility_id == key.facility_id,
        )

    def find_by_facility_name(self, session: Session, key: UnitLookupKey) -> Unit | None:
        """Rent-roll lookup: facility name compared case-insensitively."""
        return find_one(
            session,
            Unit,
            Unit.number == key.number,
            Unit.facility.has(func.lower(Facility.name) == key.facility_name),
        )

    def reconcile(
        self,
        session: Session,
        key: UnitKey,
        facility: Facility,
        size: tuple[float, float, float],
        unit_type: str,
    ) -> UpsertResult[Unit]:
        width, length, height = size
        fields: dict[str, Any] = {
            "unit_width": width,
            "unit_length": length,
            "unit_height": height,
            "unit_type": unit_type,
        }
        result = upsert(
            session,
            self.find(session, key),
            create=lambda: Unit(number=key.number, facility=facility, **fields),
            changes=lambda unit: fields,
        )
        if result.created:
            logger.info(
                "unit_created",
                extra={"unit_number": key.number, "facility_name": facility.name},
            )
        elif result.updated:
            logger.info(
                "unit_updated",
                extra={
                    "unit_number": key.number,
                    "facility_name": facility.name,
                    "changed_fields": list(result.changed_fields),
                },
            )
        return result

    def refresh_monthly_rent(self, session: Session, unit: Unit, monthly_rent: Decimal) -> bool:
        """Store the rent-roll monthly rent on the unit when positive and different."""
        if monthly_rent <= 0 or unit.monthly_rent == monthly_rent:
            return False
        unit.monthly_rent = monthly_rent
        session.flush()
        logger.info(
            "unit_monthly_rent_updated",
            extra={"unit_number": unit.number, "monthly_rent": monthly_rent},
        )
        return True


class FacilityUnitReconciler:
    """Validates one inventory row and reconciles its facility and unit."""

    def __init__(
        self,
        facilities: FacilityReconciler | None = None,
        units: UnitReconciler | None = None,
    ) -> None:
        self.facilities = facilities or FacilityReconciler()
        self.units = units or UnitReconciler()

    def validate(self, row: UnitRow, raw: dict[str, Any]) -> tuple[float, float, float]:
        """Reject the row before any write. Returns the parsed size."""
        missing = row.missing_fields()
        if missing:
            raise MissingFieldError(missing, raw)
        size = parse_unit_size(row.unit_size)
        if size is None:
            raise InvalidUnitSizeError(row.unit_size, raw)
        return size

    def reconcile_row(
        self,
        session: Session,
        row: UnitRow,
        raw: dict[str, Any],
        facility_cache: dict[str, Facility],
    ) -> UnitRowOutcome:
        size = self.validate(row, raw)
        facility_result = self.facilities.reconcile(
            session, facility_key(row.facility_name), facility_cache
        )
        facility = facility_result.instance
        unit_result = self.units.reconcile(
            session,
            unit_key(row.unit_number, facility.id),
            facility,
            size,
            row.unit_type,
        )
        return UnitRowOutcome(facility=facility_result, unit=unit_result)
