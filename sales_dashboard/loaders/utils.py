"""
Shared cell coercion for data ingestion: numbers, identifiers, names,
free text and dates.

Every helper is total: a malformed cell degrades to a default value and
never raises, so one bad row cannot abort a workbook load.
"""

import logging
import math
import re
from typing import Any

import pandas as pd

logger = logging.getLogger(__name__)

# Quote characters and thousands separators are dropped before parsing
_NUMBER_NOISE = re.compile(r"[\"',]")
# Leading floating-point literal; trailing text is ignored ("12 h" -> 12)
_FLOAT_PREFIX = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _finite_or_zero(num: float) -> float:
    return num if math.isfinite(num) else 0.0


def parse_number(val: Any) -> float:
    """Coerce a cell value to a finite float, returning 0.0 on failure.

    - None and "" give 0.0.
    - Numbers are returned as floats; NaN and infinities give 0.0.
    - Strings lose quote characters and commas, are trimmed, and the
      leading numeric literal is parsed ("1,234" -> 1234.0,
      "$500" -> 0.0, "abc" -> 0.0).
    - Anything else goes through float(), defaulting to 0.0.
    """
    if val is None:
        return 0.0
    if isinstance(val, str):
        cleaned = _NUMBER_NOISE.sub("", val).strip()
        match = _FLOAT_PREFIX.match(cleaned)
        if match is None:
            return 0.0
        return _finite_or_zero(float(match.group()))
    try:
        return _finite_or_zero(float(val))
    except (TypeError, ValueError, OverflowError):
        return 0.0


def to_identifier(val: Any) -> str | None:
    """String form of an identifier cell.

    Integral floats lose their ".0" so that 12345, 12345.0 and "12345"
    all join to the same key.
    """
    if val is None:
        return None
    if isinstance(val, float) and val.is_integer():
        val = int(val)
    return str(val)


def to_text(val: Any) -> str | None:
    """String form of a free-text cell, None when absent."""
    if val is None:
        return None
    return val if isinstance(val, str) else str(val)


def clean_name(val: Any) -> str | None:
    """Trimmed person name used as a group-by key."""
    if val is None:
        return None
    return str(val).strip()


def normalise_date(val: Any) -> pd.Timestamp | None:
    """Convert Excel serial number, datetime or date string to pd.Timestamp.

    Excel serial numbers use the 1899-12-30 epoch. Native datetime objects
    are cast directly. Returns None for unparseable values.
    """
    if val is None or isinstance(val, bool):
        return None
    if isinstance(val, pd.Timestamp):
        return None if pd.isna(val) else val
    if isinstance(val, (int, float)):
        try:
            ts = pd.Timestamp("1899-12-30") + pd.Timedelta(days=float(val))
        except (ValueError, OverflowError):
            logger.debug("Could not convert serial number %s to date", val)
            return None
    else:
        try:
            ts = pd.Timestamp(val)
        except (ValueError, TypeError, OverflowError):
            logger.debug("Could not parse date value: %s", val)
            return None
    if pd.isna(ts):
        return None
    return ts
