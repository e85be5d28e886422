"""Exceptions raised across the careplan package."""
from typing import Optional


class CarePlanError(Exception):
    """Base class for careplan errors."""


class HolidayProviderError(CarePlanError):
    """The holiday calendar for a year could not be obtained.

    Results computed without the holiday calendar are not authoritative,
    so callers must not fall back to "no holidays".
    """

    def __init__(self, year: int, message: str = ""):
        self.year = year
        super().__init__(message or f"Holiday calendar unavailable for {year}")


class RecordValidationError(CarePlanError):
    """A raw record from the data store failed boundary validation."""

    def __init__(self, record_id: Optional[str], message: str):
        self.record_id = record_id
        prefix = f"Record {record_id}: " if record_id else ""
        super().__init__(f"{prefix}{message}")
