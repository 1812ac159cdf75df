from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from datetime import date, datetime, timedelta
from types import MappingProxyType
from typing import Callable

from .types import DateOutOfRangeError, EmptyDateError, MalformedDateError, ParserConfig

NON_DIGIT_RE = re.compile(r"[^0-9]")

ENGLISH_MONTHS = MappingProxyType(
    {
        "jan": 1,
        "feb": 2,
        "mar": 3,
        "apr": 4,
        "may": 5,
        "jun": 6,
        "jul": 7,
        "aug": 8,
        "sep": 9,
        "oct": 10,
        "nov": 11,
        "dec": 12,
    }
)

SPANISH_MONTHS = MappingProxyType(
    {
        "ene": 1,
        "feb": 2,
        "mar": 3,
        "abr": 4,
        "may": 5,
        "jun": 6,
        "jul": 7,
        "ago": 8,
        "sep": 9,
        "oct": 10,
        "nov": 11,
        "dic": 12,
        "enero": 1,
        "febrero": 2,
        "marzo": 3,
        "abril": 4,
        "mayo": 5,
        "junio": 6,
        "julio": 7,
        "agosto": 8,
        "septiembre": 9,
        "octubre": 10,
        "noviembre": 11,
        "diciembre": 12,
    }
)

Option = Callable[[ParserConfig], ParserConfig]


def with_expiry_reference_date(d: date) -> Option:
    def apply(cfg: ParserConfig) -> ParserConfig:
        return replace(cfg, expiry_reference_date=d)

    return apply


def remove_non_digits(s: str) -> str:
    return NON_DIGIT_RE.sub("", s)


def _digits_to_int(s: str) -> int | None:
    digits = remove_non_digits(s)
    if not digits:
        return None
    try:
        return int(digits)
    except ValueError as e:
        # digit run past the int conversion limit
        raise DateOutOfRangeError(f"number too long: {len(digits)} digits") from e


def _english_month(tok: str) -> int | None:
    # Whole token, three ASCII letters, any case ("Jun", "JUN", "jun").
    if len(tok) != 3 or not tok.isascii():
        return None
    return ENGLISH_MONTHS.get(tok.lower())


def month_token_to_int(tok: str) -> int:
    """Resolve a month segment to 1-12, or 0 when nothing matches.

    Digits win (``"o6"`` -> 6). Otherwise the raw token is tried as an
    English abbreviation, then as a Spanish name or abbreviation.
    """

    num = _digits_to_int(tok)
    if num is not None:
        return num
    en = _english_month(tok)
    if en is not None:
        return en
    return SPANISH_MONTHS.get(tok.strip().lower(), 0)


def normalize_year(year: int) -> int:
    if year < 100:
        return year + 2000
    return year


def local_midnight(year: int, month: int, day: int) -> datetime:
    """Build local midnight for (year, month, day), rolling over out-of-range parts.

    Month 13 is January of the next year, month 0 is December of the previous
    one, and the day is counted from the first of the month (day 0 is the last
    day of the previous month).
    """

    y = year + (month - 1) // 12
    m = (month - 1) % 12 + 1
    try:
        d = date(y, m, 1) + timedelta(days=day - 1)
        return datetime(d.year, d.month, d.day).astimezone()
    except (ValueError, OverflowError, OSError) as e:
        raise DateOutOfRangeError(f"date out of range: year={year} month={month} day={day}") from e


@dataclass(frozen=True)
class DateParser:
    """Parser for the DD/MM/YY[YY] date fields returned by the OCR service.

    Segments are read leniently: stray characters are dropped and a segment
    with no digits counts as zero, so only an empty field is an error.
    """

    config: ParserConfig = field(default_factory=ParserConfig)

    @classmethod
    def with_reference(cls, expiry_reference_date: date | None = None) -> "DateParser":
        return cls(config=ParserConfig(expiry_reference_date=expiry_reference_date))

    @property
    def expiry_reference_date(self) -> date | None:
        return self.config.expiry_reference_date

    def parse(self, date_str: str) -> datetime:
        if date_str == "" or date_str == "//":
            raise EmptyDateError()

        parts = date_str.split("/")
        if len(parts) < 3:
            raise MalformedDateError(f"expected day/month/year, got {date_str!r}")
        day_str, month_str, year_str = parts[0], parts[1], parts[2]

        day = _digits_to_int(day_str) or 0
        month = month_token_to_int(month_str)
        year = normalize_year(_digits_to_int(year_str) or 0)

        return local_midnight(year, month, day)


def new_date_parser(*options: Option) -> DateParser:
    cfg = ParserConfig()
    for option in options:
        cfg = option(cfg)
    return DateParser(config=cfg)
