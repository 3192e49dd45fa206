"""
CNChildBP Core Module

Reference table and label vocabulary shared by preprocessing and evaluation.
"""

from .reference_table import (
    Sex,
    ReferenceRow,
    ReferenceTable,
    load_reference_table,
    get_reference_table,
    MIN_AGE,
    MAX_AGE,
)

from .labels import (
    Language,
    BPCategory,
    LabelSet,
    MessageSet,
    SEVERITY,
    CATEGORY_ORDER,
    LABELS,
    MESSAGES,
    get_labels,
    get_messages,
)

__all__ = [
    # Reference Table
    "Sex",
    "ReferenceRow",
    "ReferenceTable",
    "load_reference_table",
    "get_reference_table",
    "MIN_AGE",
    "MAX_AGE",
    # Labels
    "Language",
    "BPCategory",
    "LabelSet",
    "MessageSet",
    "SEVERITY",
    "CATEGORY_ORDER",
    "LABELS",
    "MESSAGES",
    "get_labels",
    "get_messages",
]
