#!/usr/bin/env python3
"""
Run the rent-roll migration: unit inventory file, then rent-roll file.

Settings come from a YAML file (--config, or RENTROLL_CONFIG) plus environment
overrides (DATABASE_URL or DB_HOST/DB_PORT/DB_USER/DB_PASS/DB_NAME, DATA_ROOT,
DATA_FOLDER_NAME, MIGRATION_ERROR_LOG, LOG_LEVEL). Skipped rows and failed files are
appended to the migration error log.

Usage:
    python3 scripts/run_import.py [options]

Examples:
    # Import data/client1_health/unit.csv and rentRoll.csv
    python3 scripts/run_import.py

    # Another client folder, creating tables first
    python3 scripts/run_import.py --data-folder client2_storage --create-tables

    # Probe a source file (row count, columns, sample) without touching the database
    python3 scripts/run_import.py --probe data/client1_health/rentRoll.csv
"""

from __future__ import annotations

import argparse
import sys
from dataclasses import replace
from pathlib import Path

# Project root on sys.path
ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT))


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Reconcile unit inventory and rent-roll files into the database.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML settings file (default: RENTROLL_CONFIG env, else built-in defaults).",
    )
    parser.add_argument(
        "--data-folder",
        default=None,
        help="Client folder under the data root (default: client1_health).",
    )
    parser.add_argument(
        "--db-url",
        default=None,
        help="Database URL (overrides settings and environment).",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before importing.",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Structured log level on stderr (default: settings, else INFO).",
    )
    parser.add_argument(
        "--probe",
        type=Path,
        default=None,
        metavar="FILE",
        help="Probe a source file (row count, columns, sample rows) and exit. No DB access.",
    )
    return parser.parse_args(argv)


def _required_columns(file_name: str, settings) -> tuple[str, ...]:
    from rentroll_ingestion.domain.types import RentRollRow, UnitRow

    if file_name == settings.rent_roll_file:
        return RentRollRow.REQUIRED
    if file_name == settings.unit_file:
        return UnitRow.REQUIRED
    return ()


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)

    # Lazy imports so we fail fast on args first
    from rentroll_config import load_settings
    from rentroll_kernel.exceptions import RentRollError

    try:
        settings = load_settings(args.config)
    except RentRollError as e:
        print(f"ERROR: Failed to load config: {e}", file=sys.stderr)
        return 1
    if args.data_folder:
        settings = replace(settings, data_folder_name=args.data_folder)
    if args.db_url:
        settings = replace(settings, database_url=args.db_url)
    if args.log_level:
        settings = replace(settings, log_level=args.log_level)

    if args.probe is not None:
        from rentroll_ingestion.adapters import adapter_for

        source_path = args.probe.resolve()
        if not source_path.is_file():
            print(f"ERROR: File not found: {source_path}", file=sys.stderr)
            return 1
        try:
            probe = adapter_for(source_path).probe(source_path, dict(settings.source_options))
        except RentRollError as e:
            print(f"ERROR: {e}", file=sys.stderr)
            return 1
        print(f"Rows: {probe.row_count}")
        print(f"Columns: {list(probe.columns)}")
        required = _required_columns(source_path.name, settings)
        missing = probe.missing_columns(required)
        if missing:
            print(f"Missing required columns: {list(missing)}")
        print("Sample (first 3):")
        for i, row in enumerate(probe.sample_rows[:3], 1):
            print(f"  {i}: {row}")
        return 0

    from rentroll_ingestion.services import run_full_import
    from rentroll_kernel.db.engine import (
        create_tables,
        get_session_factory,
        init_engine_from_url,
    )
    from rentroll_kernel.logging_config import configure_logging

    configure_logging(level=settings.log_level)

    try:
        init_engine_from_url(settings.database_url)
        if args.create_tables:
            create_tables()
    except Exception as e:
        print(f"ERROR: Database init failed: {e}", file=sys.stderr)
        return 1

    print(f"Importing from {settings.data_folder}...")
    try:
        result = run_full_import(get_session_factory(), settings)
    except Exception as e:
        print(f"ERROR: Migration failed: {e}", file=sys.stderr)
        print(f"See {settings.error_log_path} for details.", file=sys.stderr)
        return 1

    print(f"  {result.units.summary()}")
    print(f"  {result.rent_roll.summary()}")
    print("Migration completed successfully.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
