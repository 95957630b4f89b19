"""Public API for sales data quality checks.

This module provides an in-memory API for checking a typed transactions
DataFrame against the fact-table rules without reading or writing files.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import Decimal

import pandas as pd

from retail_core.exceptions import DataError
from retail_core.sales.cleaning_utils import is_missing
from retail_core.sales.derive import RATING_MAX, RATING_MIN
from retail_core.sales.schema import (
    KEY_COLUMN,
    MONEY_COLUMNS,
    RATING_COLUMN,
    REQUIRED_COLUMNS,
    require_columns,
)

logger = logging.getLogger(__name__)


@dataclass
class SalesQAResult:
    """Result of the sales QA checks.

    Attributes:
        summary: Dictionary with counts and flags.
        null_counts: Nulls per required column (only columns with nulls).
        duplicate_ids: Rows whose invoice_id appears more than once, or None.
        negative_values: Rows with a negative money column, or None.
        rating_out_of_range: Rows with customer_rating outside [0, 10], or None.
    """

    summary: dict
    null_counts: dict[str, int]
    duplicate_ids: pd.DataFrame | None
    negative_values: pd.DataFrame | None
    rating_out_of_range: pd.DataFrame | None

    @property
    def ok(self) -> bool:
        """True when no check found a problem."""
        return not self.summary["errors"]


def _null_mask(series: pd.Series) -> pd.Series:
    return series.map(is_missing).astype(bool)


def run_sales_qa(df: pd.DataFrame) -> SalesQAResult:
    """Run the fact-table checks in memory.

    This function:
    - does NOT read or write any files,
    - does NOT raise on bad data (see validate_transactions),
    - MAY log progress via the logging module.

    Args:
        df: Typed transactions, as returned by ``schema.coerce_transactions``.

    Returns:
        SalesQAResult with a summary and the offending rows of each check.

    Raises:
        SchemaError: If required columns are missing.
    """
    require_columns(df, REQUIRED_COLUMNS + [RATING_COLUMN])

    logger.debug("Running sales QA for %d rows", len(df))

    null_counts: dict[str, int] = {}
    for col in REQUIRED_COLUMNS:
        n = int(_null_mask(df[col]).sum())
        if n:
            null_counts[col] = n

    dup_mask = df[KEY_COLUMN].duplicated(keep=False) & ~_null_mask(df[KEY_COLUMN])
    duplicate_ids = df.loc[dup_mask] if dup_mask.any() else None

    neg_mask = pd.Series(False, index=df.index)
    for col in MONEY_COLUMNS:
        neg_mask |= df[col].map(lambda v: not is_missing(v) and Decimal(v) < 0).astype(bool)
    negative_values = df.loc[neg_mask] if neg_mask.any() else None

    rating_mask = df[RATING_COLUMN].map(
        lambda v: not is_missing(v) and not (RATING_MIN <= Decimal(v) <= RATING_MAX)
    ).astype(bool)
    rating_out_of_range = df.loc[rating_mask] if rating_mask.any() else None

    errors = [f"{col}: {n} nulls" for col, n in null_counts.items()]
    if duplicate_ids is not None:
        ids = sorted(duplicate_ids[KEY_COLUMN].unique())
        errors.append(f"{KEY_COLUMN}: {len(ids)} duplicated, e.g. {ids[:5]}")
    if negative_values is not None:
        errors.append(f"money columns: {len(negative_values)} rows with negative values")
    if rating_out_of_range is not None:
        errors.append(
            f"{RATING_COLUMN}: {len(rating_out_of_range)} values outside "
            f"[{RATING_MIN}, {RATING_MAX}]"
        )

    summary = {
        "total_rows": len(df),
        "total_branches": df["branch_code"].nunique(),
        "total_cities": df["city_name"].nunique(),
        "min_date": df["transaction_date"].min().date().isoformat()
        if df["transaction_date"].notna().any()
        else None,
        "max_date": df["transaction_date"].max().date().isoformat()
        if df["transaction_date"].notna().any()
        else None,
        "null_count": sum(null_counts.values()),
        "duplicate_id_count": len(duplicate_ids) if duplicate_ids is not None else 0,
        "negative_value_count": len(negative_values) if negative_values is not None else 0,
        "rating_out_of_range_count": len(rating_out_of_range)
        if rating_out_of_range is not None
        else 0,
        "errors": errors,
    }

    if errors:
        logger.warning("Sales QA found %d problem(s): %s", len(errors), "; ".join(errors))
    else:
        logger.info("Sales QA passed for %d rows", len(df))

    return SalesQAResult(
        summary=summary,
        null_counts=null_counts,
        duplicate_ids=duplicate_ids,
        negative_values=negative_values,
        rating_out_of_range=rating_out_of_range,
    )


def validate_transactions(df: pd.DataFrame) -> SalesQAResult:
    """Run the QA checks and raise if any failed.

    Raises:
        DataError: Listing every problem found, if any.
        SchemaError: If required columns are missing.
    """
    result = run_sales_qa(df)
    if not result.ok:
        raise DataError("Invalid transactions: " + "; ".join(result.summary["errors"]))
    return result
