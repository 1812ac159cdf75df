"""Date normalization for OCR date fields.

Fields arrive as day/month/year tokens with OCR noise ("24/ene/o.20",
"23/03/25AC"). Parsing is deliberately lenient; see DateParser.parse.
"""

from .parsers import (
    SPANISH_MONTHS,
    DateParser,
    month_token_to_int,
    new_date_parser,
    with_expiry_reference_date,
)
from .types import (
    ERR_DATE_EMPTY_MESSAGE,
    DateError,
    DateOutOfRangeError,
    EmptyDateError,
    MalformedDateError,
    ParserConfig,
)
