from __future__ import annotations

from dataclasses import dataclass
from datetime import date

ERR_DATE_EMPTY_MESSAGE = "date is empty"


class DateError(ValueError):
    """Base class for date normalization failures."""


class EmptyDateError(DateError):
    """Raised for an empty date field ("" or "//")."""

    def __init__(self, message: str = ERR_DATE_EMPTY_MESSAGE) -> None:
        super().__init__(message)


class MalformedDateError(DateError):
    """Raised when the input does not have the day/month/year shape."""


class DateOutOfRangeError(MalformedDateError):
    """Raised when the normalized date cannot be represented."""


@dataclass(frozen=True)
class ParserConfig:
    """Immutable parser settings.

    expiry_reference_date is stored for callers that need an anchor for
    partial dates; parsing does not consult it yet.
    """

    expiry_reference_date: date | None = None
