"""
CNChildBP: Label Vocabulary and Messages

This module holds the fixed, language-keyed vocabulary used to render
evaluation results:
- Output languages (Chinese is the default, local language)
- Blood pressure categories and their severity order
- Rendered label strings for each language
- Error and notice message templates for each language

All tables are constructed once at import and never mutated. Callers pass
the LabelSet/MessageSet they need explicitly.

Author: CNChildBP Project
Version: 1.0.0
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Union


# =============================================================================
# Enumerations
# =============================================================================

class Language(Enum):
    """Output languages for labels and messages."""
    CHINESE = "chinese"     # Local language (default)
    ENGLISH = "english"

    @classmethod
    def parse(cls, value: Union[str, "Language"]) -> "Language":
        """
        Resolve a user-supplied language name.

        Args:
            value: Language member or one of its aliases
                ("chinese", "local", "zh", "cn", "english", "en")

        Returns:
            Language member

        Raises:
            ValueError: If the name is not recognised
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            raise ValueError(
                f"language must be a string, got {type(value).__name__}"
            )

        key = value.strip().lower()
        if key not in _LANGUAGE_ALIASES:
            available = ", ".join(sorted(_LANGUAGE_ALIASES))
            raise ValueError(
                f"Unknown language: '{value}'. Available languages: {available}"
            )
        return _LANGUAGE_ALIASES[key]

    @property
    def other(self) -> "Language":
        """The language whose default column names are tried as fallback."""
        return Language.ENGLISH if self is Language.CHINESE else Language.CHINESE


_LANGUAGE_ALIASES: Dict[str, Language] = {
    "chinese": Language.CHINESE,
    "local": Language.CHINESE,
    "zh": Language.CHINESE,
    "cn": Language.CHINESE,
    "english": Language.ENGLISH,
    "en": Language.ENGLISH,
}


class BPCategory(Enum):
    """
    Blood pressure evaluation categories.

    OUT_OF_RANGE is not part of the severity order: it replaces the whole
    evaluation when no reference stratum matches.
    """
    NORMAL = "normal"
    HIGH_NORMAL = "high_normal"
    STAGE1 = "stage1"
    STAGE2 = "stage2"
    MISSING = "missing"
    OUT_OF_RANGE = "out_of_range"


# Severity used to combine systolic and diastolic results (higher wins)
SEVERITY: Dict[BPCategory, int] = {
    BPCategory.NORMAL: 0,
    BPCategory.MISSING: 1,
    BPCategory.HIGH_NORMAL: 2,
    BPCategory.STAGE1: 3,
    BPCategory.STAGE2: 4,
}

CATEGORY_BY_SEVERITY: Dict[int, BPCategory] = {v: k for k, v in SEVERITY.items()}

# Report order for summaries
CATEGORY_ORDER = [
    BPCategory.NORMAL,
    BPCategory.HIGH_NORMAL,
    BPCategory.STAGE1,
    BPCategory.STAGE2,
    BPCategory.MISSING,
    BPCategory.OUT_OF_RANGE,
]


# =============================================================================
# Rendered vocabulary
# =============================================================================

@dataclass(frozen=True)
class LabelSet:
    """Rendered label strings for one language."""
    normal: str
    high_normal: str
    stage1: str
    stage2: str
    missing: str
    out_of_range: str

    def render(self, category: BPCategory) -> str:
        """Return the display string for a category."""
        return getattr(self, category.value)

    def as_dict(self) -> Dict[BPCategory, str]:
        return {category: self.render(category) for category in BPCategory}


@dataclass(frozen=True)
class MessageSet:
    """Error and notice templates for one language."""
    missing_columns: str
    mapping_fallback: str
    invalid_quiet: str
    output_column_taken: str
    name_chinese: str
    name_english: str

    def language_name(self, language: Language) -> str:
        return self.name_chinese if language is Language.CHINESE else self.name_english

    def format_missing_columns(self, columns) -> str:
        return self.missing_columns.format(columns=", ".join(columns))

    def format_invalid_quiet(self, value) -> str:
        return self.invalid_quiet.format(type=type(value).__name__)

    def format_output_column_taken(self, column: str, used: str) -> str:
        return self.output_column_taken.format(column=column, used=used)

    def format_fallback(self, requested: str, used: str, columns) -> str:
        return self.mapping_fallback.format(
            requested=requested, used=used, columns=", ".join(columns)
        )


LABELS: Dict[Language, LabelSet] = {
    Language.CHINESE: LabelSet(
        normal="正常",
        high_normal="正常高值",
        stage1="1期高血压",
        stage2="2期高血压",
        missing="缺少",
        out_of_range="无法评价(年龄/身高超出范围)",
    ),
    Language.ENGLISH: LabelSet(
        normal="Normal",
        high_normal="High-normal",
        stage1="Stage 1",
        stage2="Stage 2",
        missing="Missing",
        out_of_range="N/A",
    ),
}

MESSAGES: Dict[Language, MessageSet] = {
    Language.CHINESE: MessageSet(
        missing_columns="数据中缺少以下列: {columns}",
        mapping_fallback=(
            "列名映射回退 (Column mapping fallback): 未找到{requested}默认列名，"
            "已改用{used}列名: {columns}"
        ),
        invalid_quiet="quiet 参数必须为 True 或 False，实际类型为 {type}",
        output_column_taken="输出列 {column} 已存在，结果写入 {used} 列",
        name_chinese="中文",
        name_english="英文",
    ),
    Language.ENGLISH: MessageSet(
        missing_columns="Missing required columns in data: {columns}",
        mapping_fallback=(
            "Column mapping fallback: default {requested} column names not found, "
            "using {used} column names instead: {columns}"
        ),
        invalid_quiet="quiet must be True or False, got {type}",
        output_column_taken="Output column {column} already exists, writing results to {used}",
        name_chinese="Chinese",
        name_english="English",
    ),
}


def get_labels(language: Union[str, Language]) -> LabelSet:
    """Convenience function to get the label set for a language."""
    return LABELS[Language.parse(language)]


def get_messages(language: Union[str, Language]) -> MessageSet:
    """Convenience function to get the message set for a language."""
    return MESSAGES[Language.parse(language)]
