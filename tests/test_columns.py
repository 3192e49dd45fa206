"""Tests for input column resolution."""

import pytest

from cnchildbp.core.labels import Language
from cnchildbp.preprocessing.columns import (
    ColumnMapping,
    DEFAULT_COLUMNS,
    MissingColumnsError,
    require_columns,
    resolve_columns,
)

from conftest import CHINESE_COLUMNS, ENGLISH_COLUMNS


class TestDefaults:
    def test_chinese_defaults(self):
        assert DEFAULT_COLUMNS[Language.CHINESE].as_list() == CHINESE_COLUMNS

    def test_english_defaults(self):
        assert DEFAULT_COLUMNS[Language.ENGLISH].as_list() == ENGLISH_COLUMNS


class TestResolveColumns:
    def test_preferred_defaults(self):
        resolution = resolve_columns(CHINESE_COLUMNS, "chinese")
        assert resolution.resolved
        assert not resolution.used_fallback
        assert resolution.mapping == DEFAULT_COLUMNS[Language.CHINESE]

    def test_fallback_to_english(self):
        resolution = resolve_columns(ENGLISH_COLUMNS, "chinese")
        assert resolution.used_fallback
        assert resolution.fallback_language is Language.ENGLISH
        assert resolution.mapping == DEFAULT_COLUMNS[Language.ENGLISH]

    def test_fallback_to_chinese(self):
        resolution = resolve_columns(CHINESE_COLUMNS + ["other"], "english")
        assert resolution.used_fallback
        assert resolution.mapping == DEFAULT_COLUMNS[Language.CHINESE]

    def test_explicit_overrides_field_by_field(self):
        columns = ["性别", "age_text", "身高", "收缩压", "舒张压"]
        resolution = resolve_columns(columns, "chinese", {"age": "age_text"})
        assert resolution.mapping.age == "age_text"
        assert resolution.mapping.sex == "性别"

    def test_explicit_disables_fallback(self):
        columns = ENGLISH_COLUMNS + ["ht"]
        resolution = resolve_columns(columns, "chinese", {"height": "ht"})
        assert not resolution.resolved
        assert resolution.missing == ["性别", "年龄", "收缩压", "舒张压"]

    def test_none_values_are_not_explicit(self):
        explicit = {"sex": None, "age": None, "height": None, "sbp": None, "dbp": None}
        resolution = resolve_columns(ENGLISH_COLUMNS, "chinese", explicit)
        assert resolution.used_fallback

    def test_neither_set_present(self):
        resolution = resolve_columns(["sex", "age", "身高"], "english")
        assert not resolution.resolved
        assert resolution.missing == ["height", "sbp", "dbp"]

    def test_unknown_field(self):
        with pytest.raises(ValueError, match="Unknown column mapping fields"):
            resolve_columns(ENGLISH_COLUMNS, "english", {"weight": "w"})


class TestRequireColumns:
    def test_error_lists_missing_columns_in_chinese(self):
        with pytest.raises(MissingColumnsError) as exc_info:
            require_columns(["a"], "chinese")
        err = exc_info.value
        assert err.missing_columns == CHINESE_COLUMNS
        assert "数据中缺少以下列" in str(err)
        assert "性别" in str(err)

    def test_error_in_english(self):
        with pytest.raises(MissingColumnsError, match="Missing required columns in data: sbp, dbp"):
            require_columns(["sex", "age", "height"], "english")

    def test_is_value_error(self):
        assert issubclass(MissingColumnsError, ValueError)

    def test_mapping_missing_from(self):
        mapping = ColumnMapping("s", "a", "h", "sb", "db")
        assert mapping.missing_from(["s", "a", "h"]) == ["sb", "db"]
