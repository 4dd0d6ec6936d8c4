"""Ingestion services: import pipeline, per-file transactions, error log."""

from rentroll_ingestion.services.error_log import MigrationErrorLog
from rentroll_ingestion.services.import_service import ImportService, run_full_import
from rentroll_ingestion.services.transaction import FileTransaction, TransactionState

__all__ = [
    "FileTransaction",
    "ImportService",
    "MigrationErrorLog",
    "TransactionState",
    "run_full_import",
]
