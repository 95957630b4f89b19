"""Silver layer: Core sales fact table (fact_sales_transaction).

This module provides fetch/load functions for the enriched fact table at
transaction grain. Loading performs the schema-version check once, up front:
reports only ever see a fact table enriched by the current rules.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from retail_core.config import DataPaths

from retail_core.exceptions import ConfigError, SchemaError
from retail_core.sales.metadata import read_metadata, should_run_stage
from retail_core.sales.schema import (
    DERIVED_COLUMNS,
    SCHEMA_VERSION,
    coerce_transactions,
    require_columns,
)
from retail_core.sales.transform import ENRICH_STAGE, enrich_sales

logger = logging.getLogger(__name__)

MODES = ("missing", "force")


def check_mode(mode: str) -> None:
    """Raise ConfigError unless mode is "missing" or "force"."""
    if mode not in MODES:
        raise ConfigError(f"Invalid mode '{mode}'. Must be 'missing' or 'force'.")


def fetch(paths: DataPaths, *, mode: str = "missing") -> pd.DataFrame:
    """Ensure fact_sales_transaction is enriched, then return it.

    Runs enrichment as needed (depending on mode), then returns the core fact.

    Args:
        paths: DataPaths configuration.
        mode: Processing mode - "missing" (default) or "force".

    Returns:
        Enriched DataFrame, one row per transaction.

    Raises:
        ConfigError: If mode is not "missing" or "force".
    """
    check_mode(mode)

    paths.ensure_dirs()

    if mode == "force" or should_run_stage(paths.clean_sales, ENRICH_STAGE, SCHEMA_VERSION):
        logger.info("Running enrichment (mode=%s)", mode)
        return enrich_sales(paths)

    logger.debug("Enriched fact table already exists at %s", paths.fact_sales)
    return load(paths)


def load(paths: DataPaths) -> pd.DataFrame:
    """Load fact_sales_transaction from disk without running enrichment.

    Raises:
        SchemaError: If the fact table was not enriched successfully with the
            current schema version.
        FileNotFoundError: If the metadata exists but the fact CSV is gone.
    """
    meta = read_metadata(paths.clean_sales, ENRICH_STAGE)
    if meta is None or meta.status != "ok":
        raise SchemaError(
            f"Enriched fact table not found in {paths.clean_sales}. "
            f"Run enrichment first (sales.core.fetch() or `retail-core enrich`)."
        )
    if meta.version != SCHEMA_VERSION:
        raise SchemaError(
            f"Fact table was enriched with schema {meta.version!r}, "
            f"expected {SCHEMA_VERSION!r}. Re-run enrichment."
        )

    return _load_fact(paths)


def _load_fact(paths: DataPaths) -> pd.DataFrame:
    """Load fact_sales_transaction from the clean CSV."""
    if not paths.fact_sales.exists():
        raise FileNotFoundError(f"Fact table CSV not found: {paths.fact_sales}")

    df = pd.read_csv(
        paths.fact_sales, dtype=str, keep_default_na=False, na_values=[""], encoding="utf-8"
    )
    df = coerce_transactions(df)
    require_columns(df, DERIVED_COLUMNS, context=str(paths.fact_sales))
    return df
