"""JSON log lines, run context propagation and logger setup."""

import json
import logging
from decimal import Decimal
from io import StringIO
from uuid import uuid4

import pytest

from rentroll_kernel.exceptions import MissingFieldError, UnitNotFoundError
from rentroll_kernel.logging_config import (
    CONTEXT_FIELDS,
    LogContext,
    StructuredFormatter,
    configure_logging,
    get_logger,
    reset_logging,
)


@pytest.fixture(autouse=True)
def _fresh_logging():
    reset_logging()
    LogContext.clear()
    yield
    LogContext.clear()
    reset_logging()


@pytest.fixture
def stream() -> StringIO:
    return StringIO()


@pytest.fixture
def log_lines(stream):
    """Configure JSON logging into `stream`; calling the fixture value parses every line."""
    handler = logging.StreamHandler(stream)
    configure_logging(handler=handler, level="DEBUG")

    def _lines() -> list[dict]:
        return [json.loads(line) for line in stream.getvalue().splitlines() if line]

    return _lines


class TestLineShape:

    def test_core_keys(self, log_lines):
        get_logger("ingestion").info("unit_import_started")

        [line] = log_lines()
        assert line["message"] == "unit_import_started"
        assert line["level"] == "INFO"
        assert line["logger"] == "rentroll_kernel.ingestion"
        assert line["ts"].endswith("+00:00")

    def test_extra_fields_are_top_level(self, log_lines):
        get_logger("reconcilers").info(
            "unit_created", extra={"unit_number": "1000", "facility_name": "North Storage"}
        )

        [line] = log_lines()
        assert line["unit_number"] == "1000"
        assert line["facility_name"] == "North Storage"

    def test_uuid_and_decimal_render_as_strings(self, log_lines):
        contract_id = uuid4()
        get_logger("reconcilers").info(
            "balance_recomputed", extra={"contract_id": contract_id, "owed": Decimal("150.00")}
        )

        [line] = log_lines()
        assert line["contract_id"] == str(contract_id)
        assert line["owed"] == "150.00"

    def test_every_line_is_json(self, log_lines):
        log = get_logger("ingestion")
        log.debug("a")
        log.info("b")
        log.warning("c", extra={"reason": "orphaned unit"})

        assert [line["message"] for line in log_lines()] == ["a", "b", "c"]


class TestExceptionFields:

    def test_plain_exception(self, log_lines):
        try:
            raise ValueError("boom")
        except ValueError:
            get_logger("ingestion").error("migration_failed", exc_info=True)

        [line] = log_lines()
        assert line["exc_type"] == "ValueError"
        assert line["exc_message"] == "boom"
        assert "exc_code" not in line
        assert "Traceback" in line["traceback"]

    def test_code_and_attributes_of_reconciler_errors(self, log_lines):
        try:
            raise UnitNotFoundError("1000", "North Storage")
        except UnitNotFoundError:
            get_logger("ingestion").warning("row_skipped", exc_info=True)

        [line] = log_lines()
        assert line["exc_code"] == "UNIT_NOT_FOUND"
        assert line["exc_unit_number"] == "1000"
        assert line["exc_facility_name"] == "North Storage"

    def test_raw_source_row_is_not_logged(self, log_lines):
        row = {"facilityName": "", "email": "jane@example.com"}
        try:
            raise MissingFieldError(("facilityName",), row)
        except MissingFieldError:
            get_logger("ingestion").warning("row_skipped", exc_info=True)

        [line] = log_lines()
        assert "exc_row" not in line
        assert line["exc_fields"] == ["facilityName"]
        assert "jane@example.com" not in json.dumps({k: v for k, v in line.items() if k != "traceback"})


class TestLogContext:

    def test_context_is_merged_into_lines(self, log_lines):
        LogContext.set(correlation_id="run-1", source="rentRoll.csv")
        get_logger("ingestion").info("rent_roll_import_started")

        [line] = log_lines()
        assert line["correlation_id"] == "run-1"
        assert line["source"] == "rentRoll.csv"
        assert "source_row" not in line

    def test_unset_fields_are_absent(self):
        assert LogContext.get_all() == {}

    def test_set_ignores_none(self):
        LogContext.set(producer="ingestion", source=None)
        assert LogContext.get_all() == {"producer": "ingestion"}

    def test_clear(self):
        LogContext.set(**{name: name.upper() for name in CONTEXT_FIELDS})
        assert len(LogContext.get_all()) == len(CONTEXT_FIELDS)
        LogContext.clear()
        assert LogContext.get_all() == {}

    def test_bind_nests_and_restores(self):
        with LogContext.bind(source="unit.csv"):
            with LogContext.bind(source_row="2"):
                assert LogContext.get_all() == {"source": "unit.csv", "source_row": "2"}
            with LogContext.bind(source_row="3"):
                assert LogContext.get_all()["source_row"] == "3"
            assert LogContext.get_all() == {"source": "unit.csv"}
        assert LogContext.get_all() == {}

    def test_bind_restores_after_exception(self):
        LogContext.set(source="unit.csv")
        with pytest.raises(RuntimeError):
            with LogContext.bind(source="rentRoll.csv"):
                raise RuntimeError("row failed")
        assert LogContext.get_all() == {"source": "unit.csv"}

    def test_unknown_field_rejected(self):
        with pytest.raises(ValueError, match="tenant"):
            LogContext.set(tenant="jane")


class TestConfigureLogging:

    def test_second_call_is_a_no_op(self):
        first = logging.StreamHandler(StringIO())
        second = logging.StreamHandler(StringIO())
        configure_logging(handler=first)
        configure_logging(handler=second)

        handlers = logging.getLogger("rentroll_kernel").handlers
        assert first in handlers
        assert second not in handlers
        assert [h for h in handlers if isinstance(h.formatter, StructuredFormatter)] == [first]

    def test_handler_gets_json_formatter(self):
        handler = logging.StreamHandler(StringIO())
        configure_logging(handler=handler)
        assert isinstance(handler.formatter, StructuredFormatter)

    def test_level_by_name(self, stream):
        configure_logging(stream=stream, level="WARNING")
        log = get_logger("ingestion")
        log.info("dropped")
        log.warning("kept")

        messages = [json.loads(line)["message"] for line in stream.getvalue().splitlines()]
        assert messages == ["kept"]

    def test_reset_detaches_handlers(self):
        handler = logging.StreamHandler(StringIO())
        configure_logging(handler=handler)
        reset_logging()
        assert handler not in logging.getLogger("rentroll_kernel").handlers

    def test_child_logger_names(self):
        assert get_logger("db.engine").name == "rentroll_kernel.db.engine"
