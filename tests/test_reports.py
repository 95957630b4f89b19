"""Tests for the report catalog (gold layer)."""

from decimal import Decimal

import pandas as pd
import pytest

from retail_core.exceptions import ConfigError, SchemaError
from retail_core.sales import reports
from retail_core.sales.reports import (
    REPORTS,
    decimal_avg,
    list_reports,
    round_half_up,
    run_report,
)
from retail_core.sales.transform import enrich_transactions
from tests.test_utils import make_transactions, sample_enriched


@pytest.fixture(scope="module")
def fact() -> pd.DataFrame:
    """The six-row sample fact table, enriched."""
    return sample_enriched()


def rows(df: pd.DataFrame) -> list[tuple]:
    return [tuple(r) for r in df.itertuples(index=False)]


class TestCatalog:
    def test_catalog_names(self) -> None:
        assert list_reports() == [
            "unique_cities",
            "branch_city_list",
            "product_categories",
            "top_categories_by_qty",
            "monthly_revenue",
            "category_revenue",
            "revenue_by_customer_type",
            "gender_distribution",
            "gender_product_preference",
            "city_revenue",
            "branch_revenue",
            "revenue_by_period",
            "avg_rating_by_period",
            "avg_rating_by_day",
            "avg_tax_by_city",
            "avg_tax_by_customer_type",
            "quarterly_revenue",
            "rating_histogram",
        ]

    def test_every_report_has_a_description(self) -> None:
        for name, spec in REPORTS.items():
            assert spec.name == name
            assert spec.description

    def test_unknown_report_raises(self, fact: pd.DataFrame) -> None:
        with pytest.raises(ConfigError, match="no_such_report"):
            run_report("no_such_report", fact)

    def test_unenriched_frame_raises(self) -> None:
        raw = make_transactions({})
        with pytest.raises(SchemaError, match="time_period"):
            run_report("revenue_by_period", raw)

    def test_every_report_runs(self, fact: pd.DataFrame) -> None:
        for name in list_reports():
            result = run_report(name, fact)
            assert isinstance(result, (pd.DataFrame, int))


class TestBasicAnalysis:
    def test_unique_cities(self, fact: pd.DataFrame) -> None:
        assert run_report("unique_cities", fact) == 3

    def test_unique_cities_ignores_row_order(self, fact: pd.DataFrame) -> None:
        shuffled = fact.sample(frac=1, random_state=7).reset_index(drop=True)
        assert run_report("unique_cities", shuffled) == run_report("unique_cities", fact)

    def test_branch_city_list(self, fact: pd.DataFrame) -> None:
        assert rows(run_report("branch_city_list", fact)) == [
            ("A", "Yangon"),
            ("B", "Mandalay"),
            ("C", "Naypyitaw"),
        ]

    def test_product_categories(self, fact: pd.DataFrame) -> None:
        assert list(run_report("product_categories", fact)["product_category"]) == [
            "Electronic accessories",
            "Health and beauty",
            "Home and lifestyle",
            "Sports and travel",
        ]


class TestRevenueReports:
    def test_category_revenue(self, fact: pd.DataFrame) -> None:
        out = run_report("category_revenue", fact)
        assert list(out.columns) == ["product_category", "category_revenue"]
        assert rows(out) == [
            ("Health and beauty", Decimal("1038.0195")),
            ("Electronic accessories", Decimal("707.8365")),
            ("Sports and travel", Decimal("634.3785")),
            ("Home and lifestyle", Decimal("340.5255")),
        ]

    @pytest.mark.parametrize(
        "name,value_col",
        [
            ("category_revenue", "category_revenue"),
            ("city_revenue", "city_revenue"),
            ("branch_revenue", "branch_revenue"),
            ("revenue_by_period", "revenue_by_period"),
            ("revenue_by_customer_type", "customer_revenue"),
            ("monthly_revenue", "monthly_revenue"),
            ("quarterly_revenue", "total_revenue"),
        ],
    )
    def test_revenue_partitions_total(self, fact: pd.DataFrame, name: str, value_col: str) -> None:
        total = sum(fact["total_sales"], Decimal(0))
        assert sum(run_report(name, fact)[value_col], Decimal(0)) == total

    def test_city_revenue(self, fact: pd.DataFrame) -> None:
        assert rows(run_report("city_revenue", fact)) == [
            ("Yangon", Decimal("1378.5450")),
            ("Naypyitaw", Decimal("707.8365")),
            ("Mandalay", Decimal("634.3785")),
        ]

    def test_branch_revenue(self, fact: pd.DataFrame) -> None:
        assert list(run_report("branch_revenue", fact)["branch_code"]) == ["A", "C", "B"]

    def test_revenue_by_customer_type(self, fact: pd.DataFrame) -> None:
        assert rows(run_report("revenue_by_customer_type", fact)) == [
            ("Normal", Decimal("1682.7405")),
            ("Member", Decimal("1038.0195")),
        ]

    def test_revenue_by_period(self, fact: pd.DataFrame) -> None:
        assert rows(run_report("revenue_by_period", fact)) == [
            ("Evening", Decimal("1116.6645")),
            ("Afternoon", Decimal("889.4970")),
            ("Morning", Decimal("714.5985")),
        ]

    def test_monthly_revenue(self, fact: pd.DataFrame) -> None:
        assert rows(run_report("monthly_revenue", fact)) == [
            ("January", Decimal("1038.0195")),
            ("February", Decimal("634.3785")),
            ("April", Decimal("627.6165")),
            ("March", Decimal("420.7455")),
        ]

    def test_quarterly_revenue_is_ordered_by_quarter(self, fact: pd.DataFrame) -> None:
        out = run_report("quarterly_revenue", fact)
        assert list(out.columns) == ["quarter", "total_revenue"]
        assert rows(out) == [(1, Decimal("2093.1435")), (2, Decimal("627.6165"))]

    def test_top_categories_by_qty_breaks_ties_by_name(self, fact: pd.DataFrame) -> None:
        assert rows(run_report("top_categories_by_qty", fact)) == [
            ("Electronic accessories", 15),
            ("Health and beauty", 15),
            ("Home and lifestyle", 7),
            ("Sports and travel", 7),
        ]

    def test_output_does_not_depend_on_row_order(self, fact: pd.DataFrame) -> None:
        shuffled = fact.iloc[::-1].reset_index(drop=True)
        for name in list_reports():
            expected = run_report(name, fact)
            got = run_report(name, shuffled)
            if isinstance(expected, pd.DataFrame):
                pd.testing.assert_frame_equal(got, expected)
            else:
                assert got == expected


class TestCustomerReports:
    def test_gender_distribution_ordering(self, fact: pd.DataFrame) -> None:
        out = run_report("gender_distribution", fact)
        assert list(out.columns) == ["branch_code", "gender", "gender_count"]
        assert rows(out) == [
            ("A", "Male", 2),
            ("A", "Female", 1),
            ("B", "Male", 1),
            ("C", "Female", 1),
            ("C", "Male", 1),
        ]

    def test_gender_product_preference(self, fact: pd.DataFrame) -> None:
        out = run_report("gender_product_preference", fact)
        assert list(out.columns) == ["gender", "product_category", "product_preference"]
        assert len(out) == 6
        assert rows(out)[0] == ("Female", "Electronic accessories", 1)
        assert out["product_preference"].sum() == len(fact)


class TestAverageReports:
    def test_avg_rating_by_period(self, fact: pd.DataFrame) -> None:
        # the Evening null rating is skipped, not counted as zero
        assert rows(run_report("avg_rating_by_period", fact)) == [
            ("Evening", Decimal("8.40")),
            ("Afternoon", Decimal("8.25")),
            ("Morning", Decimal("7.45")),
        ]

    def test_avg_rating_by_day_sorts_empty_group_last(self, fact: pd.DataFrame) -> None:
        out = run_report("avg_rating_by_day", fact)
        assert list(out["day_of_week"]) == ["Saturday", "Sunday", "Friday", "Tuesday"]
        assert list(out["avg_rating"][:3]) == [Decimal("9.10"), Decimal("7.90"), Decimal("7.45")]
        assert pd.isna(out["avg_rating"].iloc[3])

    def test_avg_tax_by_city(self, fact: pd.DataFrame) -> None:
        assert rows(run_report("avg_tax_by_city", fact)) == [
            ("Mandalay", Decimal("30.21")),
            ("Yangon", Decimal("21.88")),
            ("Naypyitaw", Decimal("16.85")),
        ]

    def test_avg_tax_by_customer_type(self, fact: pd.DataFrame) -> None:
        assert rows(run_report("avg_tax_by_customer_type", fact)) == [
            ("Member", Decimal("24.71")),
            ("Normal", Decimal("20.03")),
        ]

    def test_average_rounds_half_up(self) -> None:
        fact = enrich_transactions(
            make_transactions(
                {"transaction_time": "09:00:00", "customer_rating": "4.25"},
                {"transaction_time": "09:30:00", "customer_rating": "4.26"},
            )
        )
        assert rows(run_report("avg_rating_by_period", fact)) == [("Morning", Decimal("4.26"))]

    def test_decimal_avg(self) -> None:
        values = pd.Series([Decimal("4.0"), Decimal("4.5"), Decimal("4.3"), None], dtype=object)
        assert decimal_avg(values) == Decimal("4.27")
        assert decimal_avg(pd.Series([None, None], dtype=object)) is None

    def test_round_half_up(self) -> None:
        assert round_half_up(Decimal("4.255")) == Decimal("4.26")
        assert round_half_up(Decimal("4.245")) == Decimal("4.25")
        assert round_half_up(Decimal("2.5"), Decimal("1")) == Decimal("3")


class TestRatingHistogram:
    def test_sample(self, fact: pd.DataFrame) -> None:
        out = run_report("rating_histogram", fact)
        assert list(out.columns) == ["rating_bin", "total_count"]
        assert rows(out) == [("4-6", 1), ("6-8", 1), ("8-10", 3), ("Unknown", 1)]

    def test_bins_with_null_rating(self) -> None:
        fact = enrich_transactions(
            make_transactions(
                {"customer_rating": "1.5"},
                {"customer_rating": "3.0"},
                {"customer_rating": "9.9"},
                {"customer_rating": None},
            )
        )
        out = run_report("rating_histogram", fact)
        assert dict(zip(out["rating_bin"], out["total_count"])) == {
            "0-2": 1,
            "2-4": 1,
            "8-10": 1,
            "Unknown": 1,
        }


class TestEmptyInput:
    @pytest.fixture
    def empty_fact(self) -> pd.DataFrame:
        return enrich_transactions(make_transactions())

    def test_unique_cities_is_zero(self, empty_fact: pd.DataFrame) -> None:
        assert run_report("unique_cities", empty_fact) == 0

    @pytest.mark.parametrize(
        "name,columns",
        [
            ("category_revenue", ["product_category", "category_revenue"]),
            ("avg_rating_by_day", ["day_of_week", "avg_rating"]),
            ("gender_distribution", ["branch_code", "gender", "gender_count"]),
            ("quarterly_revenue", ["quarter", "total_revenue"]),
            ("rating_histogram", ["rating_bin", "total_count"]),
        ],
    )
    def test_grouped_reports_are_empty(
        self, empty_fact: pd.DataFrame, name: str, columns: list[str]
    ) -> None:
        out = run_report(name, empty_fact)
        assert out.empty
        assert list(out.columns) == columns


def test_report_functions_are_pure(fact: pd.DataFrame) -> None:
    before = fact.copy()
    reports.quarterly_revenue(fact)
    reports.rating_histogram(fact)
    pd.testing.assert_frame_equal(fact, before)
