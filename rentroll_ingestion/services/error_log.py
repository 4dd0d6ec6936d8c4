"""
Migration error log: append-only text file of skipped rows and failures.

Line formats:
    [<ts>] <source> <reason>: <JSON of the offending row>
    [<ts>] <source> migration error: <message>

Writing never raises; an unwritable log is reported on the structured logger
and the import carries on.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping

from rentroll_kernel.domain.clock import Clock, SystemClock
from rentroll_kernel.logging_config import get_logger

logger = get_logger("ingestion.error_log")

DEFAULT_ERROR_LOG_PATH = Path("logs") / "migration-errors.log"


class MigrationErrorLog:
    """Appends one line per skipped row or failed file."""

    def __init__(self, path: Path | str = DEFAULT_ERROR_LOG_PATH, clock: Clock | None = None) -> None:
        self._path = Path(path)
        self._clock = clock or SystemClock()

    @property
    def path(self) -> Path:
        return self._path

    def record_skip(
        self,
        source: str,
        reason: str,
        row: Mapping[str, Any],
        source_row: int | None = None,
    ) -> None:
        """Log a skipped source row (structured WARNING plus one file line)."""
        logger.warning(
            "row_skipped",
            extra={"source_file": source, "reason": reason, "source_row": source_row},
        )
        payload = json.dumps(dict(row), default=str, sort_keys=True)
        self._append(f"[{self._timestamp()}] {source} {reason}: {payload}")

    def record_failure(self, source: str, message: str) -> None:
        """Log a failure that aborted a whole file."""
        self._append(f"[{self._timestamp()}] {source} migration error: {message}")

    def _timestamp(self) -> str:
        return self._clock.isoformat()

    def _append(self, line: str) -> None:
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except OSError:
            logger.error(
                "error_log_write_failed",
                extra={"error_log_path": str(self._path)},
                exc_info=True,
            )
