"""
Data normalization utilities.
Single responsibility: canonicalize cell values and column names so that
two cells compare equal exactly when they mean the same thing.
"""

import re
from datetime import date, datetime
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping

import pandas as pd


_WHITESPACE_RE = re.compile(r"\s+")
_PLACEHOLDER_RE = re.compile(r"^unnamed(?:[:_ ]|$)|^$")
_NUMBER_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")

MAX_EXPONENT = 100


def normalize_column_name(col: Any) -> str:
    """
    Normalize column names for comparison.

    Trims, lowercases and turns every internal whitespace run into one
    underscore, so ``" Order  Date"`` and ``"order date"`` become the same
    key.

    Args:
        col: Column name to normalize

    Returns:
        Normalized column name
    """
    return _WHITESPACE_RE.sub("_", str(col).strip().lower())


def _is_missing(val: Any) -> bool:
    if val is None:
        return True
    if not pd.api.types.is_scalar(val):
        return False
    return bool(pd.isna(val))


def _format_number(text: str) -> str:
    """
    Render numeric text through a numeric round trip.

    Returns the input unchanged when it is not a plain decimal number.
    """
    if not _NUMBER_RE.match(text):
        return text

    try:
        number = Decimal(text)
    except InvalidOperation:
        return text

    # Absurd exponents stay as text instead of expanding to huge strings
    if abs(number.adjusted()) > MAX_EXPONENT:
        return text

    if number == number.to_integral_value():
        return str(int(number))

    # Shortest plain decimal form, no exponent, no trailing zeros
    rendered = format(number.normalize(), "f")
    if "." in rendered:
        rendered = rendered.rstrip("0").rstrip(".")
    return rendered


def normalize_value(val: Any) -> str:
    """
    Canonicalize a single cell value.

    Args:
        val: Raw value (string, number, date, None, NaN, ...)

    Returns:
        Comparison-safe string. Missing values become ``""``, dates become
        ``YYYY-MM-DD``, numeric text goes through a numeric round trip
        (``"007"`` and ``"7.0"`` both become ``"7"``), everything is
        lowercased.

    Examples:
        >>> normalize_value(" 007 ")
        '7'
        >>> normalize_value(datetime(2024, 3, 1, 15, 30))
        '2024-03-01'
    """
    if _is_missing(val):
        return ""

    if isinstance(val, (datetime, date)):
        return val.strftime("%Y-%m-%d")

    if isinstance(val, bool):
        return "true" if val else "false"

    text = str(val).strip()
    if text:
        text = _format_number(text)
    return text.lower()


def is_placeholder_column(col: Any) -> bool:
    """
    Whether a header is an unnamed/placeholder marker.

    pandas names header-less columns ``"Unnamed: 3"``; blank headers are
    treated the same way.
    """
    if _is_missing(col):
        return True
    return bool(_PLACEHOLDER_RE.match(str(col).strip().lower()))


def normalize_row(row: Mapping[Any, Any]) -> Dict[str, str]:
    """
    Normalize one raw row: placeholder columns dropped, names and values
    canonicalized, source order kept.

    Args:
        row: Raw column -> value mapping

    Returns:
        Normalized column -> value dictionary
    """
    normalized: Dict[str, str] = {}
    for col, val in row.items():
        if is_placeholder_column(col):
            continue
        normalized[normalize_column_name(col)] = normalize_value(val)
    return normalized
