"""Shared fixtures for cnchildbp tests."""

import pandas as pd
import pytest

from cnchildbp.core.reference_table import ReferenceRow, Sex, get_reference_table

CHINESE_COLUMNS = ["性别", "年龄", "身高", "收缩压", "舒张压"]
ENGLISH_COLUMNS = ["sex", "age", "height", "sbp", "dbp"]


def mid_height(row: ReferenceRow) -> int:
    """An integer height inside the row's interval."""
    return (row.height_lower + row.height_upper) // 2


def sex_token(row: ReferenceRow, chinese: bool = True) -> str:
    if chinese:
        return "男" if row.sex is Sex.MALE else "女"
    return row.sex.value


@pytest.fixture(scope="session")
def table():
    return get_reference_table()


@pytest.fixture
def first_row(table):
    return table.rows()[0]


@pytest.fixture
def cap_row(table):
    """A stratum whose own P90 values lie above 120/80."""
    rows = [r for r in table.rows() if r.sbp_p90 > 120 and r.dbp_p90 > 80]
    if not rows:
        pytest.skip("No reference row with P90 above 120/80")
    return rows[0]


@pytest.fixture
def make_records():
    """Build a one-or-more row DataFrame from (row, age, height, sbp, dbp) tuples."""

    def _make(entries, columns=CHINESE_COLUMNS, chinese_sex=True):
        data = [
            [sex_token(row, chinese_sex), age, height, sbp, dbp]
            for row, age, height, sbp, dbp in entries
        ]
        return pd.DataFrame(data, columns=columns)

    return _make
