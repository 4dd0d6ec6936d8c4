"""
XLSX source adapter for spreadsheet exports of the unit and rent-roll files.

The first row after ``skip_rows`` is the header. Every cell comes back as
trimmed text (empty cell -> ""), so a numeric unit number such as 1000.0
goes through the same normalization as CSV input; date cells become
ISO-8601 text. Fully blank rows are dropped.

Options: ``sheet`` (0-based index or sheet name, default the active sheet)
and ``skip_rows`` (default 0).
"""

from __future__ import annotations

from contextlib import contextmanager
from datetime import date, datetime
from pathlib import Path
from typing import Any, Iterator

import openpyxl

from rentroll_ingestion.adapters.base import SourceProbe

_SAMPLE_SIZE = 5


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    return str(value).strip()


def _column_names(header: tuple[Any, ...]) -> list[str]:
    """Header cells as names; blanks become Column_<n>, repeats get _1, _2 ..."""
    names: list[str] = []
    for position, cell in enumerate(header, start=1):
        name = _cell_text(cell) or f"Column_{position}"
        candidate, suffix = name, 0
        while candidate in names:
            suffix += 1
            candidate = f"{name}_{suffix}"
        names.append(candidate)
    return names


@contextmanager
def _open_sheet(source_path: Path, options: dict[str, Any]) -> Iterator[Any]:
    workbook = openpyxl.load_workbook(source_path, read_only=True, data_only=True)
    try:
        sheet = options.get("sheet")
        if sheet is None:
            yield workbook.active
        elif isinstance(sheet, int):
            yield workbook.worksheets[sheet]
        else:
            yield workbook[sheet]
    finally:
        workbook.close()


def _records(sheet: Any, skip_rows: int) -> tuple[list[str], Iterator[dict[str, str]]]:
    rows = sheet.iter_rows(min_row=1 + skip_rows, values_only=True)
    header = next(rows, None)
    if header is None:
        return [], iter(())
    columns = _column_names(header)

    def _generate() -> Iterator[dict[str, str]]:
        for row in rows:
            cells = [_cell_text(value) for value in row[: len(columns)]]
            if not any(cells):
                continue
            cells += [""] * (len(columns) - len(cells))
            yield dict(zip(columns, cells))

    return columns, _generate()


class XlsxSourceAdapter:
    """One dict per non-blank sheet row, keyed by the header row."""

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        with _open_sheet(source_path, options) as sheet:
            _, records = _records(sheet, int(options.get("skip_rows", 0)))
            yield from records

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        sample: list[dict[str, Any]] = []
        row_count = 0
        with _open_sheet(source_path, options) as sheet:
            columns, records = _records(sheet, int(options.get("skip_rows", 0)))
            for record in records:
                row_count += 1
                if len(sample) < _SAMPLE_SIZE:
                    sample.append(record)
        return SourceProbe(row_count=row_count, columns=tuple(columns), sample_rows=tuple(sample))
