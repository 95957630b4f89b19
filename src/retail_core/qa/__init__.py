"""Data quality checks for the sales fact table.

Example:
    >>> from retail_core.qa import run_sales_qa
    >>> result = run_sales_qa(transactions_df)
    >>> result.summary["errors"]
    []
"""

from retail_core.qa.api import SalesQAResult, run_sales_qa, validate_transactions

__all__ = ["SalesQAResult", "run_sales_qa", "validate_transactions"]
