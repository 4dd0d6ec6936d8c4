"""Tests for source adapters (CSV, XLSX) and suffix-based selection."""

import tempfile
from datetime import datetime
from pathlib import Path

import openpyxl
import pytest

from rentroll_ingestion.adapters import (
    CsvSourceAdapter,
    SourceAdapter,
    XlsxSourceAdapter,
    adapter_for,
)
from rentroll_ingestion.domain.normalizers import normalize_unit_number
from rentroll_kernel.exceptions import UnsupportedSourceFormatError


class TestCsvSourceAdapter:
    """CSV adapter: trimming, BOM, delimiter, skip_rows, probe."""

    def test_read_yields_trimmed_dicts(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".csv", delete=False, newline="") as f:
            f.write(" facilityName , unitNumber \n North Storage , 1000.0 \n")
            path = Path(f.name)
        try:
            rows = list(CsvSourceAdapter().read(path, {}))
            assert rows == [{"facilityName": "North Storage", "unitNumber": "1000.0"}]
        finally:
            path.unlink()

    def test_trim_can_be_disabled(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".csv", delete=False, newline="") as f:
            f.write("a,b\n 1 ,2\n")
            path = Path(f.name)
        try:
            rows = list(CsvSourceAdapter().read(path, {"trim": False}))
            assert rows == [{"a": " 1 ", "b": "2"}]
        finally:
            path.unlink()

    def test_bom_is_stripped(self):
        with tempfile.NamedTemporaryFile(mode="wb", suffix=".csv", delete=False) as f:
            f.write("\ufefffacilityName,unitNumber\nNorth,1\n".encode("utf-8"))
            path = Path(f.name)
        try:
            rows = list(CsvSourceAdapter().read(path, {}))
            assert rows == [{"facilityName": "North", "unitNumber": "1"}]
        finally:
            path.unlink()

    def test_short_rows_yield_none_for_missing_columns(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".csv", delete=False, newline="") as f:
            f.write("a,b,c\n1,2\n")
            path = Path(f.name)
        try:
            rows = list(CsvSourceAdapter().read(path, {}))
            assert rows == [{"a": "1", "b": "2", "c": None}]
        finally:
            path.unlink()

    def test_skip_rows_and_delimiter(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".csv", delete=False, newline="") as f:
            f.write("exported 2024-01-01\nh1;h2\n1;2\n")
            path = Path(f.name)
        try:
            rows = list(CsvSourceAdapter().read(path, {"skip_rows": 1, "delimiter": ";"}))
            assert rows == [{"h1": "1", "h2": "2"}]
        finally:
            path.unlink()

    def test_probe_returns_row_count_and_columns(self):
        with tempfile.NamedTemporaryFile(mode="w", suffix=".csv", delete=False, newline="") as f:
            f.write("x,y\n" + "".join(f"{i},{i}\n" for i in range(8)))
            path = Path(f.name)
        try:
            probe = CsvSourceAdapter().probe(path, {})
            assert probe.row_count == 8
            assert probe.columns == ("x", "y")
            assert len(probe.sample_rows) == 5
            assert probe.delimiter == ","
            assert probe.missing_columns(("y", "z", "x")) == ("z",)
        finally:
            path.unlink()


class TestXlsxSourceAdapter:
    """XLSX adapter: header row, cells as text, blank rows skipped."""

    @pytest.fixture
    def workbook_path(self, tmp_path) -> Path:
        wb = openpyxl.Workbook()
        ws = wb.active
        ws.append(["facilityName", "unitNumber", "rentStartDate", "monthlyRent"])
        ws.append(["North Storage", 1000.0, datetime(2024, 1, 1), 100])
        ws.append([None, None, None, None])
        ws.append([" South ", "B-2", "2024-02-01", None])
        path = tmp_path / "rentRoll.xlsx"
        wb.save(path)
        return path

    def test_read_renders_cells_as_text(self, workbook_path):
        rows = list(XlsxSourceAdapter().read(workbook_path, {}))
        assert normalize_unit_number(rows[0].pop("unitNumber")) == "1000"
        assert rows == [
            {
                "facilityName": "North Storage",
                "rentStartDate": "2024-01-01T00:00:00",
                "monthlyRent": "100",
            },
            {
                "facilityName": "South",
                "unitNumber": "B-2",
                "rentStartDate": "2024-02-01",
                "monthlyRent": "",
            },
        ]

    def test_probe(self, workbook_path):
        probe = XlsxSourceAdapter().probe(workbook_path, {})
        assert probe.row_count == 2
        assert probe.columns == ("facilityName", "unitNumber", "rentStartDate", "monthlyRent")
        assert probe.sample_rows[0]["facilityName"] == "North Storage"


class TestAdapterSelection:

    def test_adapters_satisfy_protocol(self):
        assert isinstance(CsvSourceAdapter(), SourceAdapter)
        assert isinstance(XlsxSourceAdapter(), SourceAdapter)

    def test_selects_by_suffix(self):
        assert isinstance(adapter_for(Path("unit.csv")), CsvSourceAdapter)
        assert isinstance(adapter_for(Path("rentRoll.XLSX")), XlsxSourceAdapter)

    def test_unknown_suffix_raises(self):
        with pytest.raises(UnsupportedSourceFormatError) as exc_info:
            adapter_for(Path("unit.json"))
        assert exc_info.value.suffix == ".json"
        assert exc_info.value.code == "UNSUPPORTED_SOURCE_FORMAT"
