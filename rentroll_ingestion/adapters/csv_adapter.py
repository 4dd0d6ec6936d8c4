"""
CSV source adapter.

Options: delimiter (","), encoding ("utf-8", read as utf-8-sig so a leading
BOM never leaks into the first header), quoting ("minimal"), skip_rows (0)
and trim (True). With trim on, " facilityName " and "facilityName" name the
same column and cell values lose surrounding whitespace.
"""

from __future__ import annotations

import csv
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator

from rentroll_ingestion.adapters.base import SourceProbe

_QUOTING = {
    "minimal": csv.QUOTE_MINIMAL,
    "all": csv.QUOTE_ALL,
    "nonnumeric": csv.QUOTE_NONNUMERIC,
    "none": csv.QUOTE_NONE,
}

_SAMPLE_SIZE = 5


@dataclass(frozen=True)
class _CsvOptions:
    encoding: str
    delimiter: str
    quoting: int
    skip_rows: int
    trim: bool

    @classmethod
    def from_mapping(cls, options: dict[str, Any]) -> _CsvOptions:
        encoding = str(options.get("encoding", "utf-8"))
        if encoding.lower().replace("_", "-") == "utf-8":
            encoding = "utf-8-sig"
        quoting = options.get("quoting", "minimal")
        if not isinstance(quoting, int):
            quoting = _QUOTING.get(str(quoting).lower(), csv.QUOTE_MINIMAL)
        return cls(
            encoding=encoding,
            delimiter=str(options.get("delimiter", ",")),
            quoting=quoting,
            skip_rows=int(options.get("skip_rows", 0)),
            trim=bool(options.get("trim", True)),
        )


def _clean_row(row: dict[str | None, Any], trim: bool) -> dict[str, Any]:
    # DictReader files surplus cells under a None key; they have no column
    if not trim:
        return {key: value for key, value in row.items() if key is not None}
    return {
        key.strip(): value.strip() if isinstance(value, str) else value
        for key, value in row.items()
        if key is not None
    }


@contextmanager
def _open_reader(source_path: Path, opts: _CsvOptions) -> Iterator[csv.DictReader]:
    with source_path.open("r", encoding=opts.encoding, newline="") as handle:
        for _ in range(opts.skip_rows):
            if next(handle, None) is None:
                break
        yield csv.DictReader(handle, delimiter=opts.delimiter, quoting=opts.quoting)


class CsvSourceAdapter:
    """One dict per data row, streamed from disk."""

    def read(self, source_path: Path, options: dict[str, Any]) -> Iterator[dict[str, Any]]:
        opts = _CsvOptions.from_mapping(options)
        with _open_reader(source_path, opts) as reader:
            for row in reader:
                yield _clean_row(row, opts.trim)

    def probe(self, source_path: Path, options: dict[str, Any]) -> SourceProbe:
        opts = _CsvOptions.from_mapping(options)
        sample: list[dict[str, Any]] = []
        row_count = 0
        with _open_reader(source_path, opts) as reader:
            header = reader.fieldnames or ()
            for row in reader:
                row_count += 1
                if len(sample) < _SAMPLE_SIZE:
                    sample.append(_clean_row(row, trim=True))

        return SourceProbe(
            row_count=row_count,
            columns=tuple(name.strip() for name in header),
            sample_rows=tuple(sample),
            encoding=opts.encoding,
            delimiter=opts.delimiter,
        )
