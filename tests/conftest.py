"""
Pytest fixtures for the rent-roll reconciler test suite.

Provides:
- A fresh in-memory SQLite store per test (tables created from the models)
- A session factory shaped like the production one (expire_on_commit=False)
- Deterministic clock, temporary data folder and settings pointing at it
- Writers for unit and rent-roll CSV files
- captured_logs for asserting on structured log events
"""

import csv
import json
import logging
from io import StringIO
from pathlib import Path

import pytest
from sqlalchemy.orm import sessionmaker

from rentroll_config.schema import ImportSettings
from rentroll_ingestion.services import ImportService, MigrationErrorLog
from rentroll_kernel.db.engine import build_engine, create_tables
from rentroll_kernel.domain.clock import DeterministicClock
from rentroll_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)

UNIT_COLUMNS = ("facilityName", "unitNumber", "unitSize", "unitType")
RENT_ROLL_COLUMNS = (
    "facilityName",
    "unitNumber",
    "firstName",
    "lastName",
    "phone",
    "email",
    "rentStartDate",
    "rentEndDate",
    "monthlyRent",
    "currentRentOwed",
    "currentRentOwedDueDate",
)


# =============================================================================
# Logging fixtures
# =============================================================================


@pytest.fixture(autouse=True, scope="session")
def _configure_test_logging():
    """Configure structured logging for the test suite."""
    reset_logging()
    configure_logging(level=logging.DEBUG)
    yield
    reset_logging()


@pytest.fixture(autouse=True)
def _clear_log_context():
    """Clear LogContext between tests to prevent cross-test contamination."""
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def captured_logs():
    """
    Capture rentroll_kernel logs as parsed JSON dicts.

    Usage::

        def test_something(captured_logs, import_service):
            import_service.import_units()
            logs = captured_logs()
            assert any(r["message"] == "import_completed" for r in logs)
    """
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    root = logging.getLogger("rentroll_kernel")
    previous_level = root.level
    root.setLevel(logging.DEBUG)
    root.addHandler(handler)

    def _get_records() -> list[dict]:
        lines = stream.getvalue().strip().split("\n")
        return [json.loads(line) for line in lines if line]

    yield _get_records

    root.removeHandler(handler)
    root.setLevel(previous_level)


# =============================================================================
# Database
# =============================================================================


@pytest.fixture
def engine():
    """In-memory SQLite with all tables; discarded after the test."""
    engine = build_engine("sqlite://")
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, expire_on_commit=False)


@pytest.fixture
def session(session_factory):
    """A session for arranging and inspecting state outside an import."""
    session = session_factory()
    yield session
    session.close()


# =============================================================================
# Clock, settings, source files
# =============================================================================


@pytest.fixture
def deterministic_clock():
    return DeterministicClock()


@pytest.fixture
def settings(tmp_path) -> ImportSettings:
    return ImportSettings(
        database_url="sqlite://",
        data_root=str(tmp_path / "data"),
        data_folder_name="client1_health",
        error_log_path=str(tmp_path / "logs" / "migration-errors.log"),
    )


@pytest.fixture
def data_folder(settings) -> Path:
    folder = settings.data_folder
    folder.mkdir(parents=True, exist_ok=True)
    return folder


def _write_csv(path: Path, columns: tuple[str, ...], rows: list[dict]) -> Path:
    with path.open("w", encoding="utf-8", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=columns)
        writer.writeheader()
        for row in rows:
            writer.writerow({c: row.get(c, "") for c in columns})
    return path


@pytest.fixture
def write_units(settings, data_folder):
    """Write the unit inventory file; missing columns are left empty."""

    def _write(rows: list[dict]) -> Path:
        return _write_csv(settings.unit_path, UNIT_COLUMNS, rows)

    return _write


@pytest.fixture
def write_rent_roll(settings, data_folder):
    """Write the rent-roll file; missing columns are left empty."""

    def _write(rows: list[dict]) -> Path:
        return _write_csv(settings.rent_roll_path, RENT_ROLL_COLUMNS, rows)

    return _write


@pytest.fixture
def error_log(settings, deterministic_clock) -> MigrationErrorLog:
    return MigrationErrorLog(settings.error_log_path, clock=deterministic_clock)


@pytest.fixture
def import_service(session_factory, settings, deterministic_clock, error_log) -> ImportService:
    return ImportService(
        session_factory,
        settings=settings,
        clock=deterministic_clock,
        error_log=error_log,
    )
