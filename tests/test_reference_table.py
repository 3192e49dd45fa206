"""Tests for the bundled reference table and its loader."""

import logging

import pandas as pd
import pytest

from cnchildbp.core.reference_table import (
    REQUIRED_COLUMNS,
    ReferenceTable,
    Sex,
    get_reference_table,
    load_reference_table,
)


class TestBundledTable:
    def test_loaded_once(self):
        assert get_reference_table() is get_reference_table()

    def test_not_empty(self, table):
        assert len(table) > 0

    def test_age_coverage(self, table):
        assert table.age_range == (3, 17)
        for sex in Sex:
            for age in range(3, 18):
                assert table.strata(sex, age), f"no strata for {sex.value} age {age}"

    def test_columns(self, table):
        assert list(table.frame.columns) == REQUIRED_COLUMNS

    def test_percentiles_ordered(self, table):
        for row in table.rows():
            assert row.sbp_p90 <= row.sbp_p95 <= row.sbp_p99
            assert row.dbp_p90 <= row.dbp_p95 <= row.dbp_p99

    def test_height_intervals_contiguous(self, table):
        for sex in Sex:
            for age in range(3, 18):
                rows = table.strata(sex, age)
                for prev, nxt in zip(rows, rows[1:]):
                    assert nxt.height_lower == prev.height_upper + 1

    def test_frame_is_a_copy(self, table):
        frame = table.frame
        frame.loc[0, "sbp_p90"] = -1
        assert table.frame.loc[0, "sbp_p90"] != -1

    def test_summary(self, table):
        text = table.summary()
        assert "male: ages 3-17" in text
        assert "female: ages 3-17" in text


class TestLookup:
    def test_exact_bounds_inclusive(self, table):
        row = table.strata(Sex.MALE, 10)[2]
        assert table.lookup(Sex.MALE, 10, row.height_lower) == row
        assert table.lookup(Sex.MALE, 10, row.height_upper) == row

    def test_outside_height_coverage(self, table):
        low, high = table.height_range(Sex.FEMALE, 8)
        assert table.lookup(Sex.FEMALE, 8, low - 1) is None
        assert table.lookup(Sex.FEMALE, 8, high + 1) is None

    def test_outside_age_coverage(self, table):
        assert table.lookup(Sex.MALE, 2, 90) is None
        assert table.lookup(Sex.MALE, 18, 170) is None

    def test_missing_keys(self, table):
        assert table.lookup(None, 10, 140) is None
        assert table.lookup(Sex.MALE, None, 140) is None
        assert table.lookup(Sex.MALE, 10, None) is None

    def test_height_range_unknown(self, table):
        assert table.height_range(Sex.MALE, 30) is None


class TestLoadReferenceTable:
    def _write(self, tmp_path, frame):
        path = tmp_path / "standards.csv"
        frame.to_csv(path, index=False, encoding="utf-8")
        return path

    def _frame(self, **overrides):
        data = {
            "sex": ["male", "女"],
            "age": [5, 5],
            "height_lower": [100, 100],
            "height_upper": [110, 110],
            "sbp_p90": [105, 104],
            "sbp_p95": [109, 108],
            "sbp_p99": [116, 115],
            "dbp_p90": [68, 67],
            "dbp_p95": [71, 70],
            "dbp_p99": [77, 76],
        }
        data.update(overrides)
        return pd.DataFrame(data)

    def test_custom_csv(self, tmp_path):
        table = load_reference_table(self._write(tmp_path, self._frame()))
        assert isinstance(table, ReferenceTable)
        assert len(table) == 2
        assert table.lookup(Sex.FEMALE, 5, 105).sbp_p90 == 104

    def test_missing_column(self, tmp_path):
        path = self._write(tmp_path, self._frame().drop(columns=["dbp_p99"]))
        with pytest.raises(ValueError, match="missing columns: dbp_p99"):
            load_reference_table(path)

    def test_unknown_sex(self, tmp_path):
        path = self._write(tmp_path, self._frame(sex=["male", "x"]))
        with pytest.raises(ValueError, match="unknown sex values"):
            load_reference_table(path)

    def test_inverted_interval(self, tmp_path):
        path = self._write(tmp_path, self._frame(height_lower=[120, 100]))
        with pytest.raises(ValueError, match="inverted height intervals"):
            load_reference_table(path)

    def test_non_monotonic_percentiles(self, tmp_path):
        path = self._write(tmp_path, self._frame(sbp_p95=[100, 108]))
        with pytest.raises(ValueError, match="non-monotonic SBP"):
            load_reference_table(path)

    def test_file_not_found(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_reference_table(tmp_path / "nope.csv")


class TestPlaceholderWarning:
    def test_bundled_table_warns(self, caplog):
        with caplog.at_level(logging.WARNING, logger="cnchildbp.core.reference_table"):
            load_reference_table()
        assert "placeholder values" in caplog.text

    def test_custom_table_does_not_warn(self, tmp_path, table, caplog):
        path = tmp_path / "published.csv"
        table.frame.to_csv(path, index=False, encoding="utf-8")
        with caplog.at_level(logging.WARNING, logger="cnchildbp.core.reference_table"):
            loaded = load_reference_table(path)
        assert len(loaded) == len(table)
        assert "placeholder" not in caplog.text
