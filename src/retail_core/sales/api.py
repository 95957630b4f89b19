"""Public API for sales analytics.

This module provides the two invocable operations: run enrichment, and run
a report.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

import pandas as pd

if TYPE_CHECKING:
    from retail_core.config import DataPaths
    from retail_core.sales.reports import ReportResult

logger = logging.getLogger(__name__)


def enrich(paths: DataPaths, force: bool = False) -> pd.DataFrame:
    """Enrich the fact table if needed and return it.

    Args:
        paths: DataPaths configuration with data directories.
        force: If True, re-run enrichment even when the fact table is current.

    Returns:
        The enriched fact table.

    Examples:
        >>> from retail_core import DataPaths
        >>> paths = DataPaths.from_root("data")
        >>> fact = enrich(paths)
    """
    # Import internal modules here to avoid circular imports
    from retail_core.sales.core import fetch

    return fetch(paths, mode="force" if force else "missing")


def get_report(paths: DataPaths, name: str, refresh: bool = False) -> ReportResult:
    """Run a named report, enriching first when needed.

    Args:
        paths: DataPaths configuration with data directories.
        name: Report name (see ``retail_core.sales.reports.list_reports``).
        refresh: If True, re-run enrichment before reporting. Default False
            reuses the enriched fact table when its schema version is current.

    Returns:
        DataFrame of report rows, or an int for scalar reports.

    Raises:
        ConfigError: If the report name is unknown.

    Examples:
        >>> from retail_core import DataPaths
        >>> paths = DataPaths.from_root("data")
        >>> df = get_report(paths, "branch_revenue")
        >>> n = get_report(paths, "unique_cities")
    """
    from retail_core.sales.marts import fetch_report
    from retail_core.sales.reports import get_report_spec

    get_report_spec(name)

    if refresh:
        logger.info("Refresh=True: re-running enrichment before report %s", name)

    return fetch_report(paths, name, mode="force" if refresh else "missing")
