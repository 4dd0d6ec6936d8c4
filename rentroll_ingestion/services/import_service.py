"""
Import service: unit inventory file, then rent-roll file.

Each file is read through a SourceAdapter, then reconciled row by row inside
one FileTransaction. Rows that fail validation are skipped and logged; any
other failure rolls the file back and propagates. Uses structured logging
(LogContext, get_logger("ingestion.*")).

Rent-roll row pipeline (validation completes before the first write):
    required fields -> unit lookup -> start date
    -> unit monthly rent -> tenant -> contract -> invoice -> contract balance
"""

from __future__ import annotations

from decimal import Decimal
from pathlib import Path
from typing import Any, Callable
from uuid import uuid4

from sqlalchemy.orm import Session

from rentroll_config.schema import ImportSettings
from rentroll_kernel.domain.clock import Clock, SystemClock
from rentroll_kernel.exceptions import (
    InvalidStartDateError,
    MissingFieldError,
    RowRejectedError,
    SourceFileMissingError,
    UnitNotFoundError,
)
from rentroll_kernel.logging_config import LogContext, get_logger
from rentroll_kernel.models.facility import Facility
from rentroll_kernel.models.rental_contract import RentalContract
from rentroll_kernel.models.unit import Unit

from rentroll_ingestion.adapters import SourceAdapter, adapter_for, default_adapters
from rentroll_ingestion.domain.keys import tenant_key, unit_lookup_key
from rentroll_ingestion.domain.normalizers import (
    normalize_facility_name,
    parse_amount,
    parse_date,
)
from rentroll_ingestion.domain.types import (
    FACILITY,
    RENTAL_CONTRACT,
    RENTAL_INVOICE,
    TENANT,
    UNIT,
    FullImportResult,
    ImportResult,
    ImportTally,
    RentRollRow,
    UnitRow,
)
from rentroll_ingestion.reconcilers.balance import BalanceAggregator
from rentroll_ingestion.reconcilers.base import UpsertOutcome, UpsertResult
from rentroll_ingestion.reconcilers.contract import ContractReconciler, contract_key
from rentroll_ingestion.reconcilers.facility_unit import FacilityUnitReconciler
from rentroll_ingestion.reconcilers.invoice import InvoiceReconciler
from rentroll_ingestion.reconcilers.tenant import TenantResolver
from rentroll_ingestion.services.error_log import MigrationErrorLog
from rentroll_ingestion.services.transaction import FileTransaction

logger = get_logger("ingestion.import_service")


def _count(tally: ImportTally, entity_type: str, outcome: UpsertOutcome) -> None:
    if outcome is UpsertOutcome.CREATED:
        tally.created[entity_type] += 1
    elif outcome is UpsertOutcome.UPDATED:
        tally.updated[entity_type] += 1


def _log_completed(result: ImportResult) -> None:
    # LogRecord reserves "created"
    logger.info(
        "import_completed",
        extra={
            "rows_processed": result.rows_processed,
            "rows_skipped": result.rows_skipped,
            "created_counts": dict(result.created),
            "updated_counts": dict(result.updated),
        },
    )


def _net_contract_outcome(
    result: UpsertResult[RentalContract],
    owed_before: Decimal | None,
    owed_after: Decimal,
) -> UpsertOutcome:
    """An update that only touched the amount owed and was undone by the balance
    recompute left the contract as it was."""
    if (
        result.updated
        and result.changed_fields == ("current_amount_owed",)
        and owed_before == owed_after
    ):
        return UpsertOutcome.UNCHANGED
    return result.outcome


class ImportService:
    """
    Reconcile unit and rent-roll source files into the store.

    Takes a session factory rather than a session: every file gets its own
    session and transaction. Counters are returned, never kept on the service.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session],
        settings: ImportSettings | None = None,
        clock: Clock | None = None,
        error_log: MigrationErrorLog | None = None,
        adapters: dict[str, SourceAdapter] | None = None,
    ) -> None:
        self._session_factory = session_factory
        self._settings = settings or ImportSettings()
        self._clock = clock or SystemClock()
        self._error_log = error_log or MigrationErrorLog(
            self._settings.error_log_path, clock=self._clock
        )
        self._adapters = adapters if adapters is not None else default_adapters()
        self._facility_units = FacilityUnitReconciler()
        self._tenants = TenantResolver()
        self._contracts = ContractReconciler()
        self._invoices = InvoiceReconciler()
        self._balances = BalanceAggregator()

    @property
    def error_log(self) -> MigrationErrorLog:
        return self._error_log

    # ------------------------------------------------------------------
    # Source reading
    # ------------------------------------------------------------------

    def _read_rows(self, source_path: Path) -> list[dict[str, Any]]:
        """Read the whole file before any transaction opens."""
        if not source_path.is_file():
            logger.error("source_file_missing", extra={"source_path": str(source_path)})
            raise SourceFileMissingError(str(source_path))
        adapter = adapter_for(source_path, self._adapters)
        return list(adapter.read(source_path, dict(self._settings.source_options)))

    def _skip(self, tally: ImportTally, exc: RowRejectedError, raw: dict[str, Any], source_row: int) -> None:
        tally.rows_skipped += 1
        self._error_log.record_skip(tally.source, exc.reason, raw, source_row=source_row)

    # ------------------------------------------------------------------
    # Unit inventory
    # ------------------------------------------------------------------

    def import_units(self, source_path: Path | str | None = None) -> ImportResult:
        """Reconcile the unit inventory file (facilities and units)."""
        path = Path(source_path) if source_path is not None else self._settings.unit_path
        source = path.name
        with LogContext.bind(producer="ingestion", source=source):
            rows = self._read_rows(path)
            logger.info(
                "unit_import_started",
                extra={"source_path": str(path), "row_count": len(rows)},
            )
            tally = ImportTally(source=source)
            facility_cache: dict[str, Facility] = {}

            with FileTransaction(self._session_factory, source, self._error_log) as session:
                for source_row, raw in enumerate(rows, start=1):
                    tally.rows_processed += 1
                    with LogContext.bind(source_row=str(source_row)):
                        try:
                            outcome = self._facility_units.reconcile_row(
                                session, UnitRow.from_raw(raw), raw, facility_cache
                            )
                        except RowRejectedError as exc:
                            self._skip(tally, exc, raw, source_row)
                            continue
                    _count(tally, FACILITY, outcome.facility.outcome)
                    _count(tally, UNIT, outcome.unit.outcome)

            result = tally.freeze()
            _log_completed(result)
            return result

    # ------------------------------------------------------------------
    # Rent roll
    # ------------------------------------------------------------------

    def import_rent_roll(self, source_path: Path | str | None = None) -> ImportResult:
        """Reconcile the rent-roll file (tenants, contracts, invoices, balances)."""
        path = Path(source_path) if source_path is not None else self._settings.rent_roll_path
        source = path.name
        with LogContext.bind(producer="ingestion", source=source):
            rows = self._read_rows(path)
            logger.info(
                "rent_roll_import_started",
                extra={"source_path": str(path), "row_count": len(rows)},
            )
            tally = ImportTally(source=source)

            with FileTransaction(self._session_factory, source, self._error_log) as session:
                for source_row, raw in enumerate(rows, start=1):
                    tally.rows_processed += 1
                    with LogContext.bind(source_row=str(source_row)):
                        try:
                            self._reconcile_rent_roll_row(session, raw, tally)
                        except RowRejectedError as exc:
                            self._skip(tally, exc, raw, source_row)

            result = tally.freeze()
            _log_completed(result)
            return result

    def _validate_rent_roll_row(self, session: Session, row: RentRollRow, raw: dict[str, Any]) -> tuple[Unit, str]:
        """Reject the row before any write. Returns (unit, start date)."""
        missing = row.missing_fields()
        if missing:
            raise MissingFieldError(missing, raw)

        unit = self._facility_units.units.find_by_facility_name(
            session, unit_lookup_key(row.unit_number, row.facility_name)
        )
        if unit is None:
            raise UnitNotFoundError(row.unit_number, row.facility_name, raw)

        start_date = parse_date(row.rent_start_date, self._settings.date_formats)
        if start_date is None:
            raise InvalidStartDateError(row.rent_start_date, raw)
        return unit, start_date

    def _reconcile_rent_roll_row(self, session: Session, raw: dict[str, Any], tally: ImportTally) -> None:
        row = RentRollRow.from_raw(raw)
        unit, start_date = self._validate_rent_roll_row(session, row, raw)
        date_formats = self._settings.date_formats

        # The lookup compares with SQL lower(), which can disagree with str.lower()
        # outside ASCII; the unit found is authoritative either way
        if normalize_facility_name(unit.facility.name) != normalize_facility_name(row.facility_name):
            logger.warning(
                "facility_name_mismatch",
                extra={
                    "unit_number": unit.number,
                    "row_facility_name": row.facility_name,
                    "unit_facility_name": unit.facility.name,
                },
            )

        monthly_rent = parse_amount(row.monthly_rent)
        if self._facility_units.units.refresh_monthly_rent(session, unit, monthly_rent):
            tally.updated[UNIT] += 1

        tenant_result = self._tenants.resolve(
            session, tenant_key(row.first_name, row.last_name, row.email, row.phone)
        )
        _count(tally, TENANT, tenant_result.outcome)
        tenant = tenant_result.instance

        owed = parse_amount(row.current_rent_owed)
        key = contract_key(unit, tenant, start_date)
        existing = self._contracts.find(session, key)
        owed_before = existing.current_amount_owed if existing is not None else None
        contract_result = self._contracts.reconcile(
            session,
            key,
            existing,
            unit=unit,
            tenant=tenant,
            end_date=parse_date(row.rent_end_date, date_formats),
            current_amount_owed=owed,
        )
        contract = contract_result.instance

        due_date = parse_date(row.current_rent_owed_due_date, date_formats)
        if self._invoices.applies(owed, due_date):
            invoice_result = self._invoices.reconcile(
                session, contract, due_date, invoice_amount=monthly_rent, invoice_balance=owed
            )
            _count(tally, RENTAL_INVOICE, invoice_result.outcome)

        owed_after = self._balances.recompute(session, contract)
        _count(tally, RENTAL_CONTRACT, _net_contract_outcome(contract_result, owed_before, owed_after))

    # ------------------------------------------------------------------
    # Full run
    # ------------------------------------------------------------------

    def run_full_import(self) -> FullImportResult:
        """Units first, then the rent roll; each file commits on its own."""
        correlation_id = str(uuid4())
        with LogContext.bind(correlation_id=correlation_id):
            logger.info(
                "full_import_started",
                extra={"data_folder": str(self._settings.data_folder)},
            )
            units = self.import_units()
            rent_roll = self.import_rent_roll()
            logger.info("full_import_completed")
        return FullImportResult(correlation_id=correlation_id, units=units, rent_roll=rent_roll)


def run_full_import(
    session_factory: Callable[[], Session],
    settings: ImportSettings | None = None,
    clock: Clock | None = None,
    error_log: MigrationErrorLog | None = None,
) -> FullImportResult:
    """Run both imports with a fresh ImportService."""
    service = ImportService(session_factory, settings=settings, clock=clock, error_log=error_log)
    return service.run_full_import()
