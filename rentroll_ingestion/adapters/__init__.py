"""Source adapters for rent-roll ingestion (file I/O only, no DB)."""

from pathlib import Path

from rentroll_ingestion.adapters.base import SourceAdapter, SourceProbe
from rentroll_ingestion.adapters.csv_adapter import CsvSourceAdapter
from rentroll_ingestion.adapters.xlsx_adapter import XlsxSourceAdapter
from rentroll_kernel.exceptions import UnsupportedSourceFormatError


def default_adapters() -> dict[str, SourceAdapter]:
    """Suffix -> adapter registry used when none is injected."""
    return {
        ".csv": CsvSourceAdapter(),
        ".xlsx": XlsxSourceAdapter(),
    }


def adapter_for(path: Path, adapters: dict[str, SourceAdapter] | None = None) -> SourceAdapter:
    """Pick the adapter for a file by its suffix."""
    registry = adapters if adapters is not None else default_adapters()
    suffix = path.suffix.lower()
    adapter = registry.get(suffix)
    if adapter is None:
        raise UnsupportedSourceFormatError(str(path), suffix)
    return adapter


__all__ = [
    "SourceAdapter",
    "SourceProbe",
    "CsvSourceAdapter",
    "XlsxSourceAdapter",
    "adapter_for",
    "default_adapters",
]
