"""Shared utilities for cleaning raw transaction exports.

This module provides the value parsers used when a raw CSV is coerced into
the typed fact table: text normalization, exact decimal parsing, and date /
time parsing.

Key utilities:
- Text normalization: strip invisible characters, remove accents, snake_case
- Number parsing: US / EU separators and currency symbols, into Decimal
- Date and time parsing: multiple format support

Examples:
    >>> from retail_core.sales.cleaning_utils import to_decimal, to_time, to_snake
    >>> to_decimal("1,234.56")
    Decimal('1234.56')
    >>> to_time("13:08")
    datetime.time(13, 8)
    >>> to_snake("Invoice ID")
    'invoice_id'
"""

from __future__ import annotations

import re
import unicodedata
from datetime import datetime, time
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

import numpy as np
import pandas as pd

# Unicode characters that should be stripped from text
NBSP = "\u00a0"  # Non-breaking space
NNBSP = "\u202f"  # Narrow non-breaking space
ZW = "".join(chr(c) for c in (0x200B, 0x200C, 0x200D, 0xFEFF))  # Zero-width characters

# Plain or scientific notation, as produced by str(Decimal)
_PLAIN_NUMBER_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")

# Regex to strip currency symbols while preserving number separators
_CURRENCY_RE = re.compile(r"[^\d,.\-\(\)\s]")

# Date formats tried in order; US month-first before day-first
DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%d/%m/%Y", "%d-%m-%Y", "%Y/%m/%d")

# Time formats tried after ISO parsing fails
TIME_FORMATS = ("%H:%M:%S", "%H:%M", "%I:%M:%S %p", "%I:%M %p", "%H.%M.%S", "%H.%M")


def is_missing(x: Any) -> bool:
    """Return True for None, NaN/NaT/NA scalars and blank strings."""
    if x is None:
        return True
    if isinstance(x, str):
        return not x.strip()
    try:
        return bool(pd.isna(x))
    except (TypeError, ValueError):
        return False


def strip_invisibles(x: Any) -> Optional[str]:
    """Remove invisible and problematic whitespace characters from text.

    Args:
        x: Value to clean (string, number, or None).

    Returns:
        Cleaned string or None if input is None/NaN.

    Examples:
        >>> strip_invisibles("  Yangon  ")
        'Yangon'
        >>> strip_invisibles(None) is None
        True
    """
    if x is None or (isinstance(x, float) and pd.isna(x)):
        return None
    s = str(x)
    s = s.replace("\r", "").replace("\t", " ").replace(NBSP, " ").replace(NNBSP, " ")
    s = re.sub(r"[%s]" % re.escape(ZW), "", s)  # zero-width
    s = re.sub(r"\s+", " ", s).strip()
    return s


def to_text(x: Any) -> Optional[str]:
    """Normalize a text cell, mapping blanks to None."""
    if is_missing(x):
        return None
    return strip_invisibles(x) or None


def to_decimal(x: Any) -> Optional[Decimal]:
    """Robustly parse numbers in various formats into an exact Decimal.

    Handles:
    - US format: '1,234.56' (comma thousands, dot decimal)
    - EU format: '1.234,56' (dot thousands, comma decimal)
    - Negative in parentheses: '(1,234.56)'
    - Scientific notation as written by str(Decimal): '0E-9', '1E+2'
    - Currency symbols: '$ 1 234,56'
    - Native numbers: floats go through ``str`` so 0.1 stays Decimal('0.1')

    Args:
        x: Value to parse (string, number, Decimal, or None).

    Returns:
        Parsed Decimal or None if the value is missing or unparseable.

    Examples:
        >>> to_decimal("1.234,56")
        Decimal('1234.56')
        >>> to_decimal(548.9715)
        Decimal('548.9715')
    """
    if isinstance(x, Decimal):
        return None if x.is_nan() else x
    if is_missing(x):
        return None
    if isinstance(x, (bool, np.bool_)):
        return None
    if isinstance(x, (int, np.integer)):
        return Decimal(int(x))
    if isinstance(x, (float, np.floating)):
        if np.isinf(x):
            return None
        return Decimal(str(float(x)))

    s = str(x).strip()
    if _PLAIN_NUMBER_RE.fullmatch(s):
        return Decimal(s)

    neg = False
    if s.startswith("(") and s.endswith(")"):
        neg, s = True, s[1:-1].strip()

    s = _CURRENCY_RE.sub("", s)
    s = re.sub(r"\s+", "", s)
    if not s:
        return None

    has_dot = "." in s
    has_com = "," in s

    def _finalize(num_str: str, negative: bool) -> Optional[Decimal]:
        try:
            v = Decimal(num_str)
        except InvalidOperation:
            return None
        return -v if negative else v

    # 1.234,56 (EU)
    if re.fullmatch(r"\d{1,3}(?:\.\d{3})+,\d{1,4}", s):
        return _finalize(s.replace(".", "").replace(",", "."), neg)

    # 1,234.56 (US)
    if re.fullmatch(r"\d{1,3}(?:,\d{3})+\.\d+", s):
        return _finalize(s.replace(",", ""), neg)

    if has_com and not has_dot:
        # 1,234,567 -> thousands, otherwise the comma is the decimal mark
        if re.fullmatch(r"\d{1,3}(?:,\d{3})+", s):
            return _finalize(s.replace(",", ""), neg)
        return _finalize(s.replace(",", "."), neg)

    if has_dot and not has_com:
        if s.count(".") == 1:
            return _finalize(s, neg)
        if re.fullmatch(r"\d{1,3}(?:\.\d{3})+", s):
            return _finalize(s.replace(".", ""), neg)
        return None

    return _finalize(s, neg)


def plain_decimal(x: Any) -> Any:
    """Render a Decimal in plain notation; other values pass through.

    ``str(Decimal)`` switches to exponent form for small values, which
    spreadsheet tools and most CSV readers misread.

    Examples:
        >>> plain_decimal(Decimal("0E-9"))
        '0.000000000'
        >>> plain_decimal(Decimal("1E-7"))
        '0.0000001'
    """
    if isinstance(x, Decimal) and x.is_finite():
        return format(x, "f")
    return x


def to_int(val: Any) -> Optional[int]:
    """Convert value to integer via exact decimal parsing, rounding half-up.

    Examples:
        >>> to_int("7")
        7
        >>> to_int("6.5")
        7
    """
    d = to_decimal(val)
    if d is None:
        return None
    return int(d.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def to_date(val: Any, fmt: str | None = None) -> pd.Timestamp:
    """Parse a calendar date from various formats.

    Attempts, in order: an explicit ``fmt`` if given, then DATE_FORMATS,
    then pandas auto-detection. Any time-of-day component is dropped.

    Args:
        val: Value to parse (string, Timestamp, datetime, or None).
        fmt: Optional strptime format to try first.

    Returns:
        Normalized Timestamp (midnight) or pd.NaT if parsing fails.

    Examples:
        >>> to_date("1/5/2019")
        Timestamp('2019-01-05 00:00:00')
    """
    if is_missing(val):
        return pd.NaT
    if isinstance(val, (pd.Timestamp, np.datetime64, datetime)):
        ts = pd.to_datetime(val, errors="coerce")
        return ts.normalize() if not pd.isna(ts) else pd.NaT
    s = strip_invisibles(val)
    formats = ((fmt,) if fmt else ()) + DATE_FORMATS
    for f in formats:
        try:
            return pd.to_datetime(s, format=f, errors="raise").normalize()
        except (ValueError, TypeError):
            pass
    ts = pd.to_datetime(s, errors="coerce")
    return ts.normalize() if not pd.isna(ts) else pd.NaT


def to_time(val: Any) -> Optional[time]:
    """Parse a time of day.

    Accepts ``datetime.time`` values, timestamps (their time part), ISO strings
    such as '13:08' or '13:08:00', and 12-hour strings such as '1:08 PM'.

    Returns:
        ``datetime.time`` or None if the value is missing or unparseable.

    Examples:
        >>> to_time("16:00:01")
        datetime.time(16, 0, 1)
        >>> to_time("1:08 PM")
        datetime.time(13, 8)
    """
    if isinstance(val, time):
        return val
    if is_missing(val):
        return None
    if isinstance(val, (pd.Timestamp, datetime)):
        return val.time()
    if isinstance(val, pd.Timedelta):
        if val < pd.Timedelta(0) or val >= pd.Timedelta(days=1):
            return None
        return (pd.Timestamp(0) + val).time()
    s = strip_invisibles(val) or ""
    try:
        return time.fromisoformat(s)
    except ValueError:
        pass
    for f in TIME_FORMATS:
        try:
            return datetime.strptime(s.upper(), f).time()
        except ValueError:
            pass
    return None


def remove_accents(s: str) -> str:
    """Remove accents and diacritics from string.

    Examples:
        >>> remove_accents("Mandalay Café")
        'Mandalay Cafe'
    """
    return "".join(c for c in unicodedata.normalize("NFD", s) if unicodedata.category(c) != "Mn")


def to_snake(s: str) -> str:
    """Convert a header to snake_case.

    Examples:
        >>> to_snake("Invoice ID")
        'invoice_id'
        >>> to_snake("Tax 5%")
        'tax_5'
    """
    s0 = strip_invisibles(s) or ""
    s1 = remove_accents(s0).lower()
    s1 = re.sub(r"[^\w\s]", " ", s1)
    s1 = re.sub(r"\s+", "_", s1).strip("_")
    return s1
