"""Gold layer: the catalog of aggregate sales reports.

Each report is a pure function from the enriched fact table to an ordered
DataFrame of (grouping key(s), aggregate) rows; ``unique_cities`` returns a
plain int.

Conventions shared by all grouped reports:

- SUM and AVG run on exact ``Decimal`` values, never binary floats.
- AVG skips missing inputs and is rounded half-up to 2 decimal places
  (4.255 -> 4.26). A group with no inputs averages to None and sorts last.
- "desc" ordering sorts by the aggregate descending and breaks ties by the
  grouping key(s) ascending, so output never depends on input row order.
- An empty fact table gives an empty frame (with the report's columns);
  ``unique_cities`` gives 0.

Example:
    >>> from retail_core.sales.reports import run_report
    >>> run_report("category_revenue", fact_df).head()
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Callable, Union

import pandas as pd

from retail_core.exceptions import ConfigError
from retail_core.sales.cleaning_utils import is_missing
from retail_core.sales.derive import derive_quarters, derive_rating_bins
from retail_core.sales.schema import DERIVED_COLUMNS, require_columns

logger = logging.getLogger(__name__)

ReportResult = Union[pd.DataFrame, int]

TWO_PLACES = Decimal("0.01")


def round_half_up(value: Decimal, places: Decimal = TWO_PLACES) -> Decimal:
    """Round a Decimal half-up.

    Examples:
        >>> round_half_up(Decimal("4.255"))
        Decimal('4.26')
    """
    return value.quantize(places, rounding=ROUND_HALF_UP)


# ---------- aggregate functions (one group's values -> value) ----------


def _present(values: pd.Series) -> list[Any]:
    return [v for v in values if not is_missing(v)]


def decimal_sum(values: pd.Series) -> Decimal:
    """SUM over exact decimals, skipping missing values."""
    return sum((Decimal(v) for v in _present(values)), Decimal(0))


def int_sum(values: pd.Series) -> int:
    """SUM over integers, skipping missing values."""
    return sum(int(v) for v in _present(values))


def decimal_avg(values: pd.Series) -> Decimal | None:
    """AVG over exact decimals, rounded half-up to 2 places; None if no inputs."""
    present = _present(values)
    if not present:
        return None
    total = sum((Decimal(v) for v in present), Decimal(0))
    return round_half_up(total / len(present))


# ---------- grouping helpers ----------


def _grouped(
    df: pd.DataFrame,
    keys: list[str],
    value_col: str,
    agg: Callable[[pd.Series], Any] | None,
    source: str | None = None,
) -> pd.DataFrame:
    """Aggregate ``source`` per group of ``keys`` into column ``value_col``.

    With ``agg=None`` the aggregate is COUNT(*).
    """
    require_columns(df, keys + ([source] if source else []))
    columns = keys + [value_col]
    if df.empty:
        return pd.DataFrame({c: pd.Series([], dtype=object) for c in columns})

    rows = []
    for key, group in df.groupby(keys, dropna=False, sort=False):
        key = key if isinstance(key, tuple) else (key,)
        value = len(group) if agg is None else agg(group[source])
        rows.append((*key, value))
    return pd.DataFrame.from_records(rows, columns=columns)


def _sort_desc(out: pd.DataFrame, value_col: str, keys: list[str]) -> pd.DataFrame:
    """Sort by value descending, ties broken by keys ascending."""
    out = out.sort_values(keys, kind="mergesort")
    out = out.sort_values(value_col, ascending=False, kind="mergesort", na_position="last")
    return out.reset_index(drop=True)


def _sort_asc(out: pd.DataFrame, keys: list[str]) -> pd.DataFrame:
    return out.sort_values(keys, kind="mergesort").reset_index(drop=True)


def _ranked(
    df: pd.DataFrame,
    key: str,
    value_col: str,
    agg: Callable[[pd.Series], Any] | None,
    source: str | None = None,
) -> pd.DataFrame:
    return _sort_desc(_grouped(df, [key], value_col, agg, source), value_col, [key])


# ---------- basic analysis ----------


def unique_cities(df: pd.DataFrame) -> int:
    """COUNT(DISTINCT city_name)."""
    require_columns(df, ["city_name"])
    return int(df["city_name"].nunique())


def branch_city_list(df: pd.DataFrame) -> pd.DataFrame:
    """Distinct (branch_code, city_name) pairs."""
    keys = ["branch_code", "city_name"]
    require_columns(df, keys)
    return _sort_asc(df[keys].drop_duplicates(), keys)


def product_categories(df: pd.DataFrame) -> pd.DataFrame:
    """Distinct product categories."""
    require_columns(df, ["product_category"])
    return _sort_asc(df[["product_category"]].drop_duplicates(), ["product_category"])


# ---------- product performance ----------


def top_categories_by_qty(df: pd.DataFrame) -> pd.DataFrame:
    """Units sold per product category."""
    return _ranked(df, "product_category", "total_quantity", int_sum, "quantity_sold")


def monthly_revenue(df: pd.DataFrame) -> pd.DataFrame:
    """Revenue per month name."""
    return _ranked(df, "month_name", "monthly_revenue", decimal_sum, "total_sales")


def category_revenue(df: pd.DataFrame) -> pd.DataFrame:
    """Revenue per product category."""
    return _ranked(df, "product_category", "category_revenue", decimal_sum, "total_sales")


# ---------- customer insights ----------


def revenue_by_customer_type(df: pd.DataFrame) -> pd.DataFrame:
    """Revenue per customer category."""
    return _ranked(df, "customer_category", "customer_revenue", decimal_sum, "total_sales")


def gender_distribution(df: pd.DataFrame) -> pd.DataFrame:
    """Transactions per gender within each branch.

    Ordered by branch ascending, then count descending, then gender.
    """
    keys = ["branch_code", "gender"]
    out = _grouped(df, keys, "gender_count", None)
    out = out.sort_values("gender", kind="mergesort")
    out = out.sort_values("gender_count", ascending=False, kind="mergesort")
    out = out.sort_values("branch_code", kind="mergesort")
    return out.reset_index(drop=True)


def gender_product_preference(df: pd.DataFrame) -> pd.DataFrame:
    """Transactions per (gender, product category)."""
    keys = ["gender", "product_category"]
    return _sort_desc(_grouped(df, keys, "product_preference", None), "product_preference", keys)


# ---------- store performance ----------


def city_revenue(df: pd.DataFrame) -> pd.DataFrame:
    return _ranked(df, "city_name", "city_revenue", decimal_sum, "total_sales")


def branch_revenue(df: pd.DataFrame) -> pd.DataFrame:
    return _ranked(df, "branch_code", "branch_revenue", decimal_sum, "total_sales")


# ---------- customer behavior ----------


def revenue_by_period(df: pd.DataFrame) -> pd.DataFrame:
    return _ranked(df, "time_period", "revenue_by_period", decimal_sum, "total_sales")


def avg_rating_by_period(df: pd.DataFrame) -> pd.DataFrame:
    return _ranked(df, "time_period", "avg_rating", decimal_avg, "customer_rating")


def avg_rating_by_day(df: pd.DataFrame) -> pd.DataFrame:
    return _ranked(df, "day_of_week", "avg_rating", decimal_avg, "customer_rating")


# ---------- tax and revenue ----------


def avg_tax_by_city(df: pd.DataFrame) -> pd.DataFrame:
    return _ranked(df, "city_name", "avg_tax_rate", decimal_avg, "tax_rate")


def avg_tax_by_customer_type(df: pd.DataFrame) -> pd.DataFrame:
    return _ranked(df, "customer_category", "avg_tax_rate", decimal_avg, "tax_rate")


def quarterly_revenue(df: pd.DataFrame) -> pd.DataFrame:
    """Revenue per calendar quarter, quarters ascending."""
    require_columns(df, ["transaction_date"])
    with_quarter = df.assign(quarter=derive_quarters(df["transaction_date"]))
    out = _grouped(with_quarter, ["quarter"], "total_revenue", decimal_sum, "total_sales")
    return _sort_asc(out, ["quarter"])


def rating_histogram(df: pd.DataFrame) -> pd.DataFrame:
    """Transactions per rating bin, bin labels ascending."""
    require_columns(df, ["customer_rating"])
    with_bin = df.assign(rating_bin=derive_rating_bins(df["customer_rating"]))
    out = _grouped(with_bin, ["rating_bin"], "total_count", None)
    return _sort_asc(out, ["rating_bin"])


# ---------- catalog ----------


@dataclass(frozen=True)
class ReportSpec:
    """A named report in the catalog."""

    name: str
    description: str
    func: Callable[[pd.DataFrame], ReportResult]


REPORTS: dict[str, ReportSpec] = {
    spec.name: spec
    for spec in (
        ReportSpec("unique_cities", "Number of distinct cities", unique_cities),
        ReportSpec("branch_city_list", "Branches and their cities", branch_city_list),
        ReportSpec("product_categories", "Distinct product categories", product_categories),
        ReportSpec(
            "top_categories_by_qty", "Best-selling categories by quantity", top_categories_by_qty
        ),
        ReportSpec("monthly_revenue", "Revenue per month", monthly_revenue),
        ReportSpec("category_revenue", "Revenue per product category", category_revenue),
        ReportSpec(
            "revenue_by_customer_type", "Revenue per customer type", revenue_by_customer_type
        ),
        ReportSpec("gender_distribution", "Gender split per branch", gender_distribution),
        ReportSpec(
            "gender_product_preference",
            "Popular product categories by gender",
            gender_product_preference,
        ),
        ReportSpec("city_revenue", "Revenue per city", city_revenue),
        ReportSpec("branch_revenue", "Revenue per branch", branch_revenue),
        ReportSpec("revenue_by_period", "Revenue per time of day", revenue_by_period),
        ReportSpec("avg_rating_by_period", "Average rating per time of day", avg_rating_by_period),
        ReportSpec("avg_rating_by_day", "Average rating per weekday", avg_rating_by_day),
        ReportSpec("avg_tax_by_city", "Average tax rate per city", avg_tax_by_city),
        ReportSpec(
            "avg_tax_by_customer_type",
            "Average tax rate per customer type",
            avg_tax_by_customer_type,
        ),
        ReportSpec("quarterly_revenue", "Revenue per quarter", quarterly_revenue),
        ReportSpec("rating_histogram", "Transactions per rating bin", rating_histogram),
    )
}


def list_reports() -> list[str]:
    """Names of all reports, in catalog order."""
    return list(REPORTS)


def get_report_spec(name: str) -> ReportSpec:
    """Look up a report by name.

    Raises:
        ConfigError: If the name is not in the catalog.
    """
    try:
        return REPORTS[name]
    except KeyError:
        raise ConfigError(
            f"Unknown report '{name}'. Available: {', '.join(REPORTS)}"
        ) from None


def run_report(name: str, df: pd.DataFrame) -> ReportResult:
    """Run a named report over the enriched fact table.

    Raises:
        ConfigError: If the name is not in the catalog.
        SchemaError: If the frame has not been enriched.
        DataError: If a rating is outside [0, 10] (rating_histogram).
    """
    spec = get_report_spec(name)
    require_columns(df, DERIVED_COLUMNS, context="enriched fact table")
    logger.debug("Running report %s over %d rows", name, len(df))
    return spec.func(df)
