"""Tests for the sales QA checks."""

import pandas as pd
import pytest

from retail_core.exceptions import DataError, SchemaError
from retail_core.qa import SalesQAResult, run_sales_qa, validate_transactions
from retail_core.sales.schema import coerce_transactions
from tests.test_utils import make_transactions, sample_raw


def test_qa_imports() -> None:
    """Test that QA API can be imported."""
    assert SalesQAResult is not None
    assert callable(run_sales_qa)


def test_run_sales_qa_clean_data() -> None:
    result = run_sales_qa(coerce_transactions(sample_raw()))

    assert isinstance(result, SalesQAResult)
    assert result.ok
    assert result.summary["total_rows"] == 6
    assert result.summary["total_branches"] == 3
    assert result.summary["total_cities"] == 3
    assert result.summary["min_date"] == "2019-01-05"
    assert result.summary["max_date"] == "2019-04-02"
    assert result.summary["errors"] == []
    assert result.duplicate_ids is None


def test_run_sales_qa_reports_every_problem() -> None:
    df = coerce_transactions(
        make_transactions(
            {"invoice_id": "X-1"},
            {"invoice_id": "X-1", "total_sales": "-1.00"},
            {"customer_rating": "11"},
            {"payment_method": None},
        )
    )

    result = run_sales_qa(df)

    assert not result.ok
    assert result.null_counts == {"payment_method": 1}
    assert result.summary["duplicate_id_count"] == 2
    assert result.summary["negative_value_count"] == 1
    assert result.summary["rating_out_of_range_count"] == 1
    assert len(result.summary["errors"]) == 4
    assert list(result.duplicate_ids["invoice_id"]) == ["X-1", "X-1"]


def test_run_sales_qa_does_not_raise_on_bad_data() -> None:
    df = coerce_transactions(make_transactions({"transaction_time": None}))
    result = run_sales_qa(df)
    assert result.null_counts == {"transaction_time": 1}


def test_run_sales_qa_missing_columns() -> None:
    with pytest.raises(SchemaError):
        run_sales_qa(pd.DataFrame({"invoice_id": ["a"]}))


def test_validate_transactions_raises_with_details() -> None:
    df = coerce_transactions(make_transactions({"invoice_id": "X-1"}, {"invoice_id": "X-1"}))
    with pytest.raises(DataError, match="invoice_id: 1 duplicated"):
        validate_transactions(df)


def test_run_sales_qa_empty() -> None:
    result = run_sales_qa(coerce_transactions(make_transactions()))
    assert result.ok
    assert result.summary["total_rows"] == 0
    assert result.summary["min_date"] is None
