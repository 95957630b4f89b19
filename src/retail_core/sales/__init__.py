"""Sales domain module.

This module provides the sales fact table and its reports at each layer:

- **bronze** (``sales.raw``): raw transaction CSVs from the external loader.
- **silver** (``sales.core``): fact_sales_transaction, one row per sale,
  enriched with time_period, day_of_week and month_name.
- **gold** (``sales.marts``): one persisted CSV per report in the catalog
  (``sales.reports``).

Example:
    >>> from retail_core import DataPaths
    >>> from retail_core.sales import enrich, get_report
    >>>
    >>> paths = DataPaths.from_root("data")
    >>> fact_df = enrich(paths)
    >>> revenue = get_report(paths, "city_revenue")
"""

from retail_core.sales.api import enrich, get_report

__all__ = ["enrich", "get_report"]
