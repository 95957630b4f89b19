"""Tests for the raw-value parsers in retail_core.sales.cleaning_utils."""

from datetime import datetime, time
from decimal import Decimal

import numpy as np
import pandas as pd
import pytest

from retail_core.sales.cleaning_utils import (
    is_missing,
    plain_decimal,
    remove_accents,
    to_date,
    to_decimal,
    to_int,
    to_snake,
    to_text,
    to_time,
)


@pytest.mark.parametrize(
    "value,expected",
    [
        (None, True),
        ("", True),
        ("   ", True),
        (float("nan"), True),
        (pd.NaT, True),
        (pd.NA, True),
        ("x", False),
        (0, False),
        (Decimal("0"), False),
        (time(0, 0), False),
    ],
)
def test_is_missing(value: object, expected: bool) -> None:
    assert is_missing(value) is expected


def test_to_text_strips_invisibles() -> None:
    assert to_text("\u00a0Yangon\u200b ") == "Yangon"
    assert to_text("") is None
    assert to_text(None) is None


class TestToDecimal:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("548.9715", Decimal("548.9715")),
            ("1,234.56", Decimal("1234.56")),
            ("1.234,56", Decimal("1234.56")),
            ("$74.69", Decimal("74.69")),
            ("(3.50)", Decimal("-3.50")),
            ("-2", Decimal("-2")),
            (7, Decimal("7")),
            (4.26, Decimal("4.26")),
            (np.int64(5), Decimal("5")),
            (Decimal("9.1"), Decimal("9.1")),
        ],
    )
    def test_parses(self, value: object, expected: Decimal) -> None:
        assert to_decimal(value) == expected

    @pytest.mark.parametrize("value", [None, "", "abc", float("inf"), True, Decimal("NaN")])
    def test_unparseable_is_none(self, value: object) -> None:
        assert to_decimal(value) is None

    def test_float_goes_through_repr(self) -> None:
        # 0.1 must not carry its binary expansion into the Decimal
        assert to_decimal(0.1) == Decimal("0.1")

    @pytest.mark.parametrize(
        "value,expected",
        [
            ("0E-9", Decimal("0")),
            ("1E-7", Decimal("0.0000001")),
            ("1E+2", Decimal("100")),
            ("-2.5e3", Decimal("-2500")),
        ],
    )
    def test_exponent_notation(self, value: str, expected: Decimal) -> None:
        assert to_decimal(value) == expected


def test_plain_decimal() -> None:
    assert plain_decimal(Decimal("0E-9")) == "0.000000000"
    assert plain_decimal(Decimal("1E-7")) == "0.0000001"
    assert plain_decimal(Decimal("1E+2")) == "100"
    assert plain_decimal("x") == "x"
    assert plain_decimal(None) is None


def test_to_int_rounds_half_up() -> None:
    assert to_int("7") == 7
    assert to_int("7.5") == 8
    assert to_int(None) is None


class TestToDate:
    def test_iso(self) -> None:
        assert to_date("2019-01-05") == pd.Timestamp("2019-01-05")

    def test_us_month_first(self) -> None:
        assert to_date("1/5/2019") == pd.Timestamp("2019-01-05")

    def test_explicit_format_wins(self) -> None:
        assert to_date("1/5/2019", "%d/%m/%Y") == pd.Timestamp("2019-05-01")

    def test_drops_time_of_day(self) -> None:
        assert to_date(datetime(2019, 3, 8, 10, 29)) == pd.Timestamp("2019-03-08")

    def test_unparseable_is_nat(self) -> None:
        assert pd.isna(to_date("not a date"))
        assert pd.isna(to_date(None))


class TestToTime:
    @pytest.mark.parametrize(
        "value,expected",
        [
            ("13:08", time(13, 8)),
            ("13:08:00", time(13, 8)),
            ("16:00:01", time(16, 0, 1)),
            ("1:08 PM", time(13, 8)),
            ("10:29:00 am", time(10, 29)),
            (time(12, 0), time(12, 0)),
            (pd.Timestamp("2019-01-05 20:33:00"), time(20, 33)),
            (pd.Timedelta(hours=18, minutes=30), time(18, 30)),
        ],
    )
    def test_parses(self, value: object, expected: time) -> None:
        assert to_time(value) == expected

    @pytest.mark.parametrize("value", [None, "", "25:99", "noon", pd.Timedelta(days=1)])
    def test_unparseable_is_none(self, value: object) -> None:
        assert to_time(value) is None


def test_to_snake() -> None:
    assert to_snake("Invoice ID") == "invoice_id"
    assert to_snake("Tax 5%") == "tax_5"
    assert to_snake("gross margin percentage") == "gross_margin_percentage"
    assert to_snake("Product line") == "product_line"


def test_remove_accents() -> None:
    assert remove_accents("Mandalay Café") == "Mandalay Cafe"
