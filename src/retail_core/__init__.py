"""Retail Core - point-of-sale transaction enrichment and reporting.

This package turns a flat table of retail sales transactions into a fixed
battery of aggregate reports across three layers:

- **Bronze (raw)**: transaction CSV exports dropped by the loader
- **Silver (core fact)**: fact_sales_transaction, enriched with derived
  time_period, day_of_week and month_name
- **Gold (marts)**: one CSV per report (revenue by product, branch, city,
  customer type, time of day, weekday, quarter, rating bin)

Module Structure:
    retail_core.sales: Sales fact table and reports (sales.raw, sales.core,
        sales.reports, sales.marts)
    retail_core.qa: Data quality checks
    retail_core.config: DataPaths configuration
    retail_core.cli: ``retail-core`` command line

Quick Start:
    >>> from retail_core import DataPaths, enrich, get_report
    >>>
    >>> paths = DataPaths.from_root("data")
    >>> fact = enrich(paths)
    >>> get_report(paths, "category_revenue").head()
    >>> get_report(paths, "unique_cities")
    3
"""

__version__ = "0.1.0"

from retail_core.config import DataPaths
from retail_core.exceptions import ConfigError, DataError, RetailCoreError, SchemaError
from retail_core.sales.api import enrich, get_report
from retail_core.sales.reports import list_reports, run_report

__all__ = [
    "ConfigError",
    "DataError",
    "DataPaths",
    "RetailCoreError",
    "SchemaError",
    "__version__",
    "enrich",
    "get_report",
    "list_reports",
    "run_report",
]
