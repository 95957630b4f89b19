"""Column definitions and type coercion for fact_sales_transaction.

The fact table is one row per point-of-sale transaction. Base columns are
supplied by the external loader; derived columns are written once by the
enrichment stage (see ``retail_core.sales.transform``).

Column kinds map to in-memory representations:

- text:    object column of ``str`` (None when missing)
- decimal: object column of ``decimal.Decimal`` (None when missing)
- int:     pandas nullable ``Int64``
- date:    ``datetime64[ns]`` normalized to midnight
- time:    object column of ``datetime.time`` (None when missing)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

import pandas as pd

from retail_core.exceptions import DataError, SchemaError
from retail_core.sales.cleaning_utils import (
    is_missing,
    plain_decimal,
    to_date,
    to_decimal,
    to_int,
    to_snake,
    to_text,
    to_time,
)

logger = logging.getLogger(__name__)

TEXT = "text"
DECIMAL = "decimal"
INT = "int"
DATE = "date"
TIME = "time"

# Bumped whenever the derived columns or their rules change; stored in the
# silver-layer metadata and checked before any report runs.
SCHEMA_VERSION = "enrich_v1"

FACT_TABLE = "fact_sales_transaction"


@dataclass(frozen=True)
class Column:
    """One column of the fact table."""

    name: str
    kind: str
    nullable: bool = False


FACT_COLUMNS: tuple[Column, ...] = (
    Column("invoice_id", TEXT),
    Column("branch_code", TEXT),
    Column("city_name", TEXT),
    Column("customer_category", TEXT),
    Column("gender", TEXT),
    Column("product_category", TEXT),
    Column("unit_cost", DECIMAL),
    Column("quantity_sold", INT),
    Column("tax_rate", DECIMAL),
    Column("total_sales", DECIMAL),
    Column("transaction_date", DATE),
    Column("transaction_time", TIME),
    Column("payment_method", TEXT),
    Column("cost_of_goods", DECIMAL),
    Column("gross_margin", DECIMAL, nullable=True),
    Column("gross_profit", DECIMAL, nullable=True),
    Column("customer_rating", DECIMAL, nullable=True),
)

BASE_COLUMNS: list[str] = [c.name for c in FACT_COLUMNS]
REQUIRED_COLUMNS: list[str] = [c.name for c in FACT_COLUMNS if not c.nullable]
DERIVED_COLUMNS: list[str] = ["time_period", "day_of_week", "month_name"]
MONEY_COLUMNS: list[str] = ["unit_cost", "tax_rate", "total_sales", "cost_of_goods"]
KEY_COLUMN = "invoice_id"
RATING_COLUMN = "customer_rating"

# Headers of the public "supermarket sales" export, after to_snake()
HEADER_ALIASES: dict[str, str] = {
    "branch": "branch_code",
    "city": "city_name",
    "customer_type": "customer_category",
    "product_line": "product_category",
    "unit_price": "unit_cost",
    "quantity": "quantity_sold",
    "tax_5": "tax_rate",
    "tax": "tax_rate",
    "total": "total_sales",
    "date": "transaction_date",
    "time": "transaction_time",
    "payment": "payment_method",
    "cogs": "cost_of_goods",
    "gross_margin_percentage": "gross_margin",
    "gross_income": "gross_profit",
    "rating": "customer_rating",
}


def normalize_headers(df: pd.DataFrame) -> pd.DataFrame:
    """Rename columns to snake_case fact-table names.

    Known export headers are mapped through HEADER_ALIASES; anything else is
    only snake_cased. A header that would collide with a column already
    present is left alone.

    Examples:
        >>> normalize_headers(pd.DataFrame(columns=["Invoice ID", "Product line"])).columns
        Index(['invoice_id', 'product_category'], dtype='object')
    """
    renames: dict[Any, str] = {}
    taken = set(df.columns)
    for col in df.columns:
        snake = to_snake(str(col))
        target = HEADER_ALIASES.get(snake, snake)
        if target != col and target not in taken:
            renames[col] = target
            taken.add(target)
    if renames:
        logger.debug("Renaming columns: %s", renames)
    return df.rename(columns=renames)


def require_columns(df: pd.DataFrame, columns: list[str], context: str = FACT_TABLE) -> None:
    """Raise SchemaError if any of ``columns`` is absent from ``df``."""
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise SchemaError(
            f"Missing required columns in {context}: {missing}. "
            f"Available: {list(df.columns)}"
        )


def check_derived_columns(df: pd.DataFrame) -> None:
    """Verify that derived columns, where present, hold text.

    An existing derived column is compatible when it is an object or string
    column whose non-null values are all ``str``. Numeric, datetime or boolean
    columns, or object columns carrying other values, raise SchemaError.
    """
    for col in DERIVED_COLUMNS:
        if col not in df.columns:
            continue
        series = df[col]
        if not (pd.api.types.is_object_dtype(series) or pd.api.types.is_string_dtype(series)):
            raise SchemaError(
                f"Derived column '{col}' already exists with incompatible type {series.dtype}"
            )
        bad = [v for v in series if not is_missing(v) and not isinstance(v, str)]
        if bad:
            raise SchemaError(
                f"Derived column '{col}' holds non-text values, e.g. {bad[0]!r}"
            )


def _parse_column(
    series: pd.Series,
    parser: Callable[[Any], Any],
    name: str,
    keys: pd.Series | None,
) -> list[Any]:
    values = [parser(v) for v in series]
    failed = [
        i for i, (raw, parsed) in enumerate(zip(series, values))
        if not is_missing(raw) and is_missing(parsed)
    ]
    if failed:
        sample = [series.iloc[i] for i in failed[:5]]
        where = ""
        if keys is not None:
            where = f" (invoice_id {[keys.iloc[i] for i in failed[:5]]})"
        raise DataError(
            f"Column '{name}': {len(failed)} unparseable value(s), e.g. {sample}{where}"
        )
    return values


def coerce_transactions(df: pd.DataFrame, date_format: str | None = None) -> pd.DataFrame:
    """Coerce a transactions frame into the typed fact-table representation.

    Headers are normalized, every base column is parsed into its kind, and
    derived columns (if present) are normalized as text. Extra columns are
    kept untouched after the base columns. Missing values stay missing; null
    checks belong to ``retail_core.qa``.

    Coercion is idempotent: an already-typed frame comes back unchanged.

    Args:
        df: Raw or already-typed transactions.
        date_format: Optional strptime format tried first for transaction_date.

    Returns:
        New DataFrame with base columns first, in FACT_COLUMNS order.

    Raises:
        SchemaError: If a base column is missing or a derived column is not text.
        DataError: If a non-empty value cannot be parsed into its column type.
    """
    df = normalize_headers(df)
    require_columns(df, BASE_COLUMNS)
    check_derived_columns(df)

    df = df.reset_index(drop=True)
    keys = df[KEY_COLUMN].map(to_text)
    out = pd.DataFrame(index=df.index)

    for column in FACT_COLUMNS:
        series = df[column.name]
        if column.kind == TEXT:
            out[column.name] = pd.Series(
                _parse_column(series, to_text, column.name, keys), index=df.index, dtype=object
            )
        elif column.kind == DECIMAL:
            out[column.name] = pd.Series(
                _parse_column(series, to_decimal, column.name, keys), index=df.index, dtype=object
            )
        elif column.kind == INT:
            out[column.name] = pd.array(
                _parse_column(series, to_int, column.name, keys), dtype="Int64"
            )
        elif column.kind == DATE:
            parsed = _parse_column(
                series, lambda v: to_date(v, date_format), column.name, keys
            )
            out[column.name] = pd.to_datetime(pd.Series(parsed, index=df.index, dtype=object))
        elif column.kind == TIME:
            out[column.name] = pd.Series(
                _parse_column(series, to_time, column.name, keys), index=df.index, dtype=object
            )

    extras = [c for c in df.columns if c not in BASE_COLUMNS]
    for col in extras:
        if col in DERIVED_COLUMNS:
            out[col] = pd.Series([to_text(v) for v in df[col]], index=df.index, dtype=object)
        else:
            out[col] = df[col]

    return out


def decimals_as_text(df: pd.DataFrame) -> pd.DataFrame:
    """Copy of ``df`` with every Decimal cell in plain notation, ready for to_csv."""
    out = df.copy()
    for col in out.columns:
        if pd.api.types.is_object_dtype(out[col]):
            out[col] = out[col].map(plain_decimal)
    return out


def empty_transactions() -> pd.DataFrame:
    """Return an empty, typed fact table with the base columns."""
    return coerce_transactions(pd.DataFrame({c: pd.Series([], dtype=object) for c in BASE_COLUMNS}))
