"""Tests for free-text and numeric age parsing."""

import math

import numpy as np
import pandas as pd
import pytest

from cnchildbp.preprocessing.age_parser import (
    AgeFormat,
    AgeParser,
    BareNumberPolicy,
    age_key,
    parse_age,
)


class TestUnitForms:
    def test_chinese_years_and_months(self):
        assert parse_age("3岁6月") == pytest.approx(3.5)

    def test_chinese_years_and_months_with_ge(self):
        assert parse_age("3岁6个月") == pytest.approx(3.5)

    def test_latin_years_and_months(self):
        assert parse_age("6y3m") == pytest.approx(6.25)

    def test_long_units_with_spaces(self):
        assert parse_age(" 2 years 6 months ") == pytest.approx(2.5)

    def test_units_case_insensitive(self):
        assert parse_age("6Y3M") == pytest.approx(6.25)
        assert parse_age("75Months") == pytest.approx(6.25)

    def test_years_only(self):
        assert parse_age("6岁") == 6.0
        assert parse_age("6.5yrs") == 6.5
        assert parse_age("10周岁") == 10.0

    def test_months_only(self):
        assert parse_age("75月") == pytest.approx(6.25)
        assert parse_age("75months") == pytest.approx(6.25)
        assert parse_age("18mo") == pytest.approx(1.5)

    def test_format_tags(self):
        parser = AgeParser()
        assert parser.parse("3岁5月").format is AgeFormat.YEARS_AND_MONTHS
        assert parser.parse("3岁").format is AgeFormat.YEARS
        assert parser.parse("40月").format is AgeFormat.MONTHS
        assert parser.parse("12").format is AgeFormat.BARE_NUMBER
        assert parser.parse("abc").format is AgeFormat.UNPARSEABLE


class TestBareNumbers:
    def test_small_numbers_are_years(self):
        assert parse_age("6.25") == 6.25
        assert parse_age(10) == 10.0
        assert parse_age(18) == 18.0

    def test_large_numbers_are_months(self):
        assert parse_age("120") == pytest.approx(10.0)
        assert parse_age(75) == pytest.approx(6.25)

    def test_default_policy_always_months(self):
        assert parse_age("20") == pytest.approx(20 / 12)
        assert parse_age("30") == pytest.approx(2.5)

    def test_strict_policy_keeps_years_outside_coverage(self):
        assert parse_age("20", BareNumberPolicy.STRICT) == 20.0
        assert parse_age("30", BareNumberPolicy.STRICT) == 30.0
        assert parse_age("19.5", BareNumberPolicy.STRICT) == 19.5

    def test_strict_policy_months_inside_coverage(self):
        assert parse_age("75", BareNumberPolicy.STRICT) == pytest.approx(6.25)
        assert parse_age("215", BareNumberPolicy.STRICT) == pytest.approx(215 / 12)

    def test_policy_accepts_string_value(self):
        assert AgeParser("strict").policy is BareNumberPolicy.STRICT


class TestUnparseable:
    @pytest.mark.parametrize("value", [None, "", "   ", "abc", "NA", "ten", "-3", float("nan"), "inf"])
    def test_returns_none(self, value):
        assert parse_age(value) is None

    def test_bool_is_unparseable(self):
        assert parse_age(True) is None

    def test_pandas_missing(self):
        assert parse_age(pd.NA) is None
        assert parse_age(np.nan) is None


class TestAgeKey:
    def test_floor(self):
        assert age_key(6.99) == 6
        assert age_key(6.0) == 6

    def test_none(self):
        assert age_key(None) is None
        assert age_key(math.nan) is None

    def test_equivalent_forms_share_key(self):
        forms = ["75months", "6.25", "6y3m", "6岁3月", 75]
        assert {age_key(parse_age(f)) for f in forms} == {6}

    def test_fractional_age_floors(self):
        assert AgeParser().parse("10.9").age_key == 10


class TestParseSeries:
    def test_mixed_column(self):
        ages = pd.Series(["3岁5月", 10, "75月", None, "abc"], index=[5, 6, 7, 8, 9])
        parsed = AgeParser().parse_series(ages)
        assert list(parsed.index) == [5, 6, 7, 8, 9]
        assert parsed.dtype == float
        assert parsed.iloc[0] == pytest.approx(3 + 5 / 12)
        assert parsed.iloc[1] == 10.0
        assert parsed.iloc[2] == pytest.approx(6.25)
        assert parsed.iloc[3:].isna().all()
