"""
rentroll_ingestion.domain.normalizers -- Pure field normalization.

ZERO I/O. Every function is total: malformed input yields a sentinel
(None, "" or Decimal("0")) rather than raising, and the caller decides
whether the row is rejected.

Conventions:
    - Unit numbers: "1000.0" and "1000" are the same unit (spreadsheet float
      artifacts are stripped).
    - Facility names: trimmed and lowercased for rent-roll lookups only.
    - Dates: strict format whitelist; naive values are UTC; output is the
      canonical ISO-8601 string used as a natural-key component.
    - Money: Decimal quantized to cents.
"""

from __future__ import annotations

import math
import re
from datetime import datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Iterable

from rentroll_config.schema import DEFAULT_DATE_FORMATS
from rentroll_kernel.db.types import to_iso_timestamp, to_money

_WHITESPACE = re.compile(r"\s+")
_TRAILING_ZERO_FRACTION = re.compile(r"\.0+$")

ZERO = Decimal("0")


def clean_str(raw: Any) -> str:
    """Trimmed text for any raw cell value; None becomes ""."""
    if raw is None:
        return ""
    return str(raw).strip()


def optional_str(raw: Any) -> str | None:
    """Trimmed text, or None when the value is missing or blank."""
    s = clean_str(raw)
    return s or None


def parse_unit_size(raw: Any) -> tuple[float, float, float] | None:
    """
    Parse "WxLxH" into (width, length, height).

    Case-insensitive and whitespace-tolerant ("10 X 20 x 8"). Returns None
    unless there are exactly three finite numeric parts.
    """
    compact = _WHITESPACE.sub("", clean_str(raw)).lower()
    if not compact:
        return None
    parts = compact.split("x")
    if len(parts) != 3:
        return None
    try:
        width, length, height = (float(p) for p in parts)
    except ValueError:
        return None
    if not all(math.isfinite(v) for v in (width, length, height)):
        return None
    return width, length, height


def normalize_unit_number(raw: Any) -> str:
    """Trim and drop a trailing ".0", ".00", ... ("1000.0" -> "1000")."""
    return _TRAILING_ZERO_FRACTION.sub("", clean_str(raw))


def normalize_facility_name(raw: Any) -> str:
    return clean_str(raw).lower()


def parse_date(raw: Any, formats: Iterable[str] = DEFAULT_DATE_FORMATS) -> str | None:
    """
    Parse a date against the accepted formats, first match wins.

    Returns the canonical UTC ISO-8601 string, or None for empty or
    unrecognized input.
    """
    if isinstance(raw, datetime):
        return to_iso_timestamp(raw)
    s = clean_str(raw)
    if not s:
        return None
    for fmt in formats:
        try:
            parsed = datetime.strptime(s, fmt)
        except ValueError:
            continue
        return to_iso_timestamp(parsed)
    return None


def parse_amount(raw: Any) -> Decimal:
    """
    Parse a money value; anything non-numeric is Decimal("0").

    Tolerates a leading "$" and thousands separators ("$1,250.00").
    """
    if isinstance(raw, Decimal):
        candidate = raw
    elif isinstance(raw, (int, float)) and not isinstance(raw, bool):
        candidate = Decimal(str(raw))
    else:
        s = clean_str(raw).replace(",", "")
        if s.startswith("$"):
            s = s[1:].strip()
        if not s:
            return to_money(ZERO)
        try:
            candidate = Decimal(s)
        except InvalidOperation:
            return to_money(ZERO)
    if not candidate.is_finite():
        return to_money(ZERO)
    try:
        return to_money(candidate)
    except InvalidOperation:
        return to_money(ZERO)
