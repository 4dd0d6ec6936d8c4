"""
Typed exception hierarchy for the rent-roll reconciler.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

All exceptions inherit from RentRollError:

    RentRollError (base)
    |
    +-- RowRejectedError            recovered locally: skip the row, log, go on
    |   +-- MissingFieldError
    |   +-- InvalidUnitSizeError
    |   +-- InvalidStartDateError
    |   +-- UnitNotFoundError
    |
    +-- SourceError                 fatal before any transaction opens
    |   +-- SourceFileMissingError
    |   +-- UnsupportedSourceFormatError
    |
    +-- ConfigurationError

Anything that is NOT a RowRejectedError and escapes the row loop (store
failures, constraint violations, unexpected exceptions) rolls back the whole
file's transaction and is re-raised unchanged.

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Row             | MISSING_FIELD               | Required source column empty
                | INVALID_UNIT_SIZE           | unitSize is not "WxLxH"
                | INVALID_START_DATE          | rentStartDate missing/unparsable
                | UNIT_NOT_FOUND              | No unit for (number, facility)
----------------|-----------------------------|-----------------------------------------
Source          | SOURCE_FILE_MISSING         | Input file does not exist
                | UNSUPPORTED_SOURCE_FORMAT   | No adapter for the file suffix
----------------|-----------------------------|-----------------------------------------
Config          | CONFIGURATION_ERROR         | Settings file malformed
"""

from typing import Any


class RentRollError(Exception):
    """
    Base exception for all rent-roll reconciler errors.

    All subclasses carry a static `code` class attribute for
    machine-readable identification.
    """

    code: str = "RENTROLL_ERROR"


# Row-level rejections


class RowRejectedError(RentRollError):
    """
    A source row cannot be reconciled and is skipped.

    `reason` is the short human-readable phrase written to the migration
    error log (e.g. "missing required field").
    """

    code: str = "ROW_REJECTED"
    reason: str = "rejected"

    def __init__(self, message: str, row: dict[str, Any] | None = None):
        self.row = dict(row or {})
        super().__init__(message)


class MissingFieldError(RowRejectedError):
    """One or more required columns are empty."""

    code: str = "MISSING_FIELD"
    reason: str = "missing required field"

    def __init__(self, fields: tuple[str, ...], row: dict[str, Any] | None = None):
        self.fields = fields
        super().__init__(f"Missing required field(s): {', '.join(fields)}", row)


class InvalidUnitSizeError(RowRejectedError):
    """Unit size is not three 'x'-separated numbers."""

    code: str = "INVALID_UNIT_SIZE"
    reason: str = "invalid size format"

    def __init__(self, unit_size: str, row: dict[str, Any] | None = None):
        self.unit_size = unit_size
        super().__init__(f"Invalid unit size: {unit_size!r}", row)


class InvalidStartDateError(RowRejectedError):
    """Rent start date is empty or outside the accepted formats."""

    code: str = "INVALID_START_DATE"
    reason: str = "invalid rentStartDate"

    def __init__(self, raw_value: str, row: dict[str, Any] | None = None):
        self.raw_value = raw_value
        super().__init__(f"Invalid rentStartDate: {raw_value!r}", row)


class UnitNotFoundError(RowRejectedError):
    """Rent-roll row references a unit that does not exist."""

    code: str = "UNIT_NOT_FOUND"
    reason: str = "orphaned unit"

    def __init__(self, unit_number: str, facility_name: str, row: dict[str, Any] | None = None):
        self.unit_number = unit_number
        self.facility_name = facility_name
        super().__init__(
            f"Unit not found: {unit_number!r} at facility {facility_name!r}", row
        )


# Source-level errors


class SourceError(RentRollError):
    """Base exception for source file errors."""

    code: str = "SOURCE_ERROR"


class SourceFileMissingError(SourceError):
    """Source file does not exist."""

    code: str = "SOURCE_FILE_MISSING"

    def __init__(self, path: str):
        self.path = path
        super().__init__(f"Missing file: {path}")


class UnsupportedSourceFormatError(SourceError):
    """No source adapter is registered for the file suffix."""

    code: str = "UNSUPPORTED_SOURCE_FORMAT"

    def __init__(self, path: str, suffix: str):
        self.path = path
        self.suffix = suffix
        super().__init__(f"No source adapter for {suffix!r} files: {path}")


# Configuration


class ConfigurationError(RentRollError):
    """Settings could not be loaded."""

    code: str = "CONFIGURATION_ERROR"

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)
