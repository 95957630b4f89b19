"""Derived attributes of a sales transaction.

Scalar rules plus their column-wise forms used by enrichment and reports:

- time_period: Morning / Afternoon / Evening from transaction_time
- day_of_week, month_name: full English names from transaction_date
- quarter: calendar quarter 1-4 from transaction_date (report time only)
- rating_bin: 0-2 ... 8-10 / Unknown from customer_rating (report time only)

Names come from fixed tables rather than strftime or calendar, which follow
the process locale.

Examples:
    >>> from datetime import time
    >>> classify_time_period(time(12, 0))
    'Morning'
    >>> classify_time_period(time(12, 0, 30))
    'Afternoon'
"""

from __future__ import annotations

from datetime import date, time
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

import pandas as pd

from retail_core.exceptions import DataError
from retail_core.sales.cleaning_utils import is_missing, to_decimal

MORNING = "Morning"
AFTERNOON = "Afternoon"
EVENING = "Evening"
TIME_PERIODS = (MORNING, AFTERNOON, EVENING)

# Inclusive upper bounds. Afternoon starts right after MORNING_END, so the
# 12:00:01-12:00:59 minute is Afternoon.
MORNING_END = time(12, 0, 0)
AFTERNOON_END = time(16, 0, 0)

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

MONTH_NAMES = (
    "January",
    "February",
    "March",
    "April",
    "May",
    "June",
    "July",
    "August",
    "September",
    "October",
    "November",
    "December",
)

RATING_MIN = Decimal("0")
RATING_MAX = Decimal("10")
# Ratings are stored to one decimal place; bins compare the stored value
RATING_PLACES = Decimal("0.1")

# (inclusive upper bound, label); the first bin also includes 0
RATING_BINS: tuple[tuple[Decimal, str], ...] = (
    (Decimal("2"), "0-2"),
    (Decimal("4"), "2-4"),
    (Decimal("6"), "4-6"),
    (Decimal("8"), "6-8"),
    (Decimal("10"), "8-10"),
)
UNKNOWN_BIN = "Unknown"
RATING_BIN_LABELS = tuple(label for _, label in RATING_BINS) + (UNKNOWN_BIN,)


def classify_time_period(t: time) -> str:
    """Bucket a time of day.

    Raises:
        DataError: If ``t`` is missing.
    """
    if is_missing(t):
        raise DataError("transaction_time is null; time_period is undefined")
    if t <= MORNING_END:
        return MORNING
    if t <= AFTERNOON_END:
        return AFTERNOON
    return EVENING


def weekday_name(d: date) -> str:
    """Full English weekday name of a date."""
    if is_missing(d):
        raise DataError("transaction_date is null; day_of_week is undefined")
    return WEEKDAY_NAMES[d.weekday()]


def month_name(d: date) -> str:
    """Full English month name of a date."""
    if is_missing(d):
        raise DataError("transaction_date is null; month_name is undefined")
    return MONTH_NAMES[d.month - 1]


def quarter_of(d: date) -> int:
    """Calendar quarter (1-4) of a date."""
    if is_missing(d):
        raise DataError("transaction_date is null; quarter is undefined")
    return (d.month - 1) // 3 + 1


def rating_bin(rating: Any) -> str:
    """Bucket a customer rating.

    The rating is first rounded half-up to one decimal place, the precision
    ratings are recorded at, so 2.04 counts as 2.0 and 2.05 as 2.1. Bins are
    then closed on the right: 0 <= r <= 2 is "0-2", 2 < r <= 4 is "2-4", and
    so on up to "8-10". A missing rating is "Unknown".

    Raises:
        DataError: If the rating is outside [0, 10] or not a number.

    Examples:
        >>> rating_bin(Decimal("2.1"))
        '2-4'
        >>> rating_bin(Decimal("2.04"))
        '0-2'
        >>> rating_bin(None)
        'Unknown'
    """
    if is_missing(rating):
        return UNKNOWN_BIN
    value = to_decimal(rating)
    if value is None:
        raise DataError(f"customer_rating {rating!r} is not a number")
    if value < RATING_MIN or value > RATING_MAX:
        raise DataError(f"customer_rating {value} is outside [{RATING_MIN}, {RATING_MAX}]")
    value = value.quantize(RATING_PLACES, rounding=ROUND_HALF_UP)
    for upper, label in RATING_BINS:
        if value <= upper:
            return label
    return UNKNOWN_BIN


def derive_time_periods(times: pd.Series) -> pd.Series:
    """Column-wise classify_time_period."""
    return pd.Series([classify_time_period(t) for t in times], index=times.index, dtype=object)


def derive_weekday_names(dates: pd.Series) -> pd.Series:
    """Column-wise weekday_name for a datetime64 column."""
    if dates.isna().any():
        raise DataError("transaction_date is null; day_of_week is undefined")
    names = dates.dt.dayofweek.map(dict(enumerate(WEEKDAY_NAMES)))
    return names.astype(object)


def derive_month_names(dates: pd.Series) -> pd.Series:
    """Column-wise month_name for a datetime64 column."""
    if dates.isna().any():
        raise DataError("transaction_date is null; month_name is undefined")
    names = dates.dt.month.map(dict(enumerate(MONTH_NAMES, start=1)))
    return names.astype(object)


def derive_quarters(dates: pd.Series) -> pd.Series:
    """Column-wise quarter_of for a datetime64 column."""
    if dates.isna().any():
        raise DataError("transaction_date is null; quarter is undefined")
    return dates.dt.quarter.astype(int)


def derive_rating_bins(ratings: pd.Series) -> pd.Series:
    """Column-wise rating_bin."""
    return pd.Series([rating_bin(r) for r in ratings], index=ratings.index, dtype=object)
