"""Gold layer: Report marts (persisted report outputs).

Each report in the catalog is written to ``c_processed/sales/<name>.csv``
with its own stage metadata.
"""

from __future__ import annotations

import logging
from datetime import datetime
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from retail_core.config import DataPaths

from retail_core.sales.core import fetch as fetch_core
from retail_core.sales.metadata import StageMetadata, read_metadata, write_metadata
from retail_core.sales.reports import ReportResult, get_report_spec, run_report
from retail_core.sales.schema import SCHEMA_VERSION, decimals_as_text

logger = logging.getLogger(__name__)


def as_frame(name: str, result: ReportResult) -> pd.DataFrame:
    """Return a report result as a DataFrame (scalar reports become one row)."""
    if isinstance(result, pd.DataFrame):
        return result
    return pd.DataFrame({name: [result]})


def fetch_report(paths: DataPaths, name: str, *, mode: str = "missing") -> ReportResult:
    """Ensure the fact table is enriched, run a report and persist its mart.

    This function:
    1. Ensures the core fact exists (enriches/re-enriches based on mode)
    2. Runs the named report over it
    3. Writes the report CSV and its metadata

    Args:
        paths: DataPaths configuration.
        name: Report name from the catalog.
        mode: Enrichment mode - "missing" (default) or "force".

    Returns:
        The report result (DataFrame, or int for scalar reports).

    Raises:
        ConfigError: If the report name or mode is invalid.
    """
    get_report_spec(name)

    fact = fetch_core(paths, mode=mode)

    logger.info("Building report %s over %d transaction(s)", name, len(fact))
    result = run_report(name, fact)

    out_path = paths.report_path(name)
    frame = as_frame(name, result)
    decimals_as_text(frame).to_csv(out_path, index=False, encoding="utf-8")

    write_metadata(
        paths.mart_sales,
        StageMetadata(
            stage=name,
            version=SCHEMA_VERSION,
            last_run=datetime.now().isoformat(),
            status="ok",
            row_count=len(frame),
        ),
    )
    logger.info("Wrote %s (%d rows)", out_path, len(frame))
    return result


def load_report(paths: DataPaths, name: str) -> pd.DataFrame:
    """Load a previously written report mart from disk without running anything.

    Values come back as text, as written.

    Raises:
        ConfigError: If the report name is invalid.
        FileNotFoundError: If the report mart is missing.
    """
    get_report_spec(name)

    mart_path = paths.report_path(name)
    meta = read_metadata(paths.mart_sales, name)

    if not mart_path.exists() or meta is None or meta.status != "ok":
        raise FileNotFoundError(
            f"Report mart '{name}' not found in {paths.mart_sales}. "
            f"Use sales.marts.fetch_report() to build it."
        )

    return pd.read_csv(mart_path, dtype=str, keep_default_na=False)
