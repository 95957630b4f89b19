"""Silver layer: enrich raw transactions into fact_sales_transaction.

Enrichment backfills three derived columns onto every row:

- time_period   (Morning / Afternoon / Evening)
- day_of_week   (Monday ... Sunday)
- month_name    (January ... December)

The batch is all-or-nothing: rows are validated first, the fact CSV is
written to a temporary file and swapped in with a single replace, and only
then is the stage metadata marked "ok".
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from retail_core.config import DataPaths

from retail_core.qa.api import validate_transactions
from retail_core.sales.derive import (
    derive_month_names,
    derive_time_periods,
    derive_weekday_names,
)
from retail_core.sales.metadata import StageMetadata, write_metadata
from retail_core.sales.raw import load as load_raw
from retail_core.sales.schema import (
    DERIVED_COLUMNS,
    SCHEMA_VERSION,
    coerce_transactions,
    decimals_as_text,
)

logger = logging.getLogger(__name__)

ENRICH_STAGE = "enrich"


def enrich_transactions(df: pd.DataFrame) -> pd.DataFrame:
    """Attach time_period, day_of_week and month_name to every transaction.

    Pure: the input frame is not modified. Re-enriching an enriched frame
    yields an identical frame; existing derived text columns are recomputed
    and replaced, never duplicated.

    Args:
        df: Transactions, typed or raw (they are coerced first).

    Returns:
        New DataFrame with the derived columns appended after the others.

    Raises:
        SchemaError: If a base column is missing or a derived column exists
            with an incompatible type.
        DataError: If transaction_date/transaction_time is null or any other
            fact-table check fails.
    """
    typed = coerce_transactions(df)
    validate_transactions(typed)

    out = typed.drop(columns=[c for c in DERIVED_COLUMNS if c in typed.columns])
    out["time_period"] = derive_time_periods(out["transaction_time"])
    out["day_of_week"] = derive_weekday_names(out["transaction_date"])
    out["month_name"] = derive_month_names(out["transaction_date"])

    logger.debug("Enriched %d transaction(s)", len(out))
    return out


def write_fact(paths: DataPaths, df: pd.DataFrame) -> None:
    """Write the fact table via a temporary file and an atomic replace.

    Decimals are written in plain notation so they parse back exactly.
    """
    target = paths.fact_sales
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_name(target.name + ".tmp")
    decimals_as_text(df).to_csv(tmp, index=False, encoding="utf-8")
    tmp.replace(target)
    logger.info("Wrote %s (%d rows)", target, len(df))


def enrich_sales(paths: DataPaths, date_format: str | None = None) -> pd.DataFrame:
    """Run enrichment over the bronze layer and persist the silver fact table.

    Args:
        paths: DataPaths configuration.
        date_format: Optional strptime format tried first for transaction_date.

    Returns:
        The enriched fact table.
    """
    paths.ensure_dirs()

    logger.info("Enriching sales from %s", paths.raw_sales)

    try:
        enriched = enrich_transactions(load_raw(paths, date_format=date_format))
        write_fact(paths, enriched)

        metadata = StageMetadata(
            stage=ENRICH_STAGE,
            version=SCHEMA_VERSION,
            last_run=datetime.now().isoformat(),
            status="ok",
            row_count=len(enriched),
        )
        write_metadata(paths.clean_sales, metadata)
        return enriched

    except Exception as e:
        logger.error("Error enriching sales: %s", e)
        metadata = StageMetadata(
            stage=ENRICH_STAGE,
            version=SCHEMA_VERSION,
            last_run=datetime.now().isoformat(),
            status="failed",
        )
        write_metadata(paths.clean_sales, metadata)
        raise
