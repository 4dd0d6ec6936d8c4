"""
What every source file reader provides.

An adapter turns one file on disk into a stream of ``{column: text}`` dicts,
one per data row, and can summarize a file for the CLI ``--probe`` without
reading it into the store. Adapters never touch the database.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Iterator, Protocol, runtime_checkable


@runtime_checkable
class SourceAdapter(Protocol):
    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        ...

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        ...


@dataclass(frozen=True)
class SourceProbe:
    """Row count, header and the first few rows of a source file."""

    row_count: int
    columns: tuple[str, ...]
    sample_rows: tuple[dict[str, Any], ...]
    encoding: str | None = None
    delimiter: str | None = None

    def missing_columns(self, required: Iterable[str]) -> tuple[str, ...]:
        """Required column names absent from the header, in the order given."""
        present = set(self.columns)
        return tuple(name for name in required if name not in present)
