"""This module provides record preprocessing components:
- Age parsing (free text and numbers into years)
- Field normalization (sex, height and pressure join keys)
- Column resolution (language defaults and fallback)
"""

from .age_parser import (
    AgeParser,
    AgeFormat,
    BareNumberPolicy,
    ParsedAge,
    parse_age,
    age_key,
)

from .columns import (
    ColumnMapping,
    ColumnResolution,
    MissingColumnsError,
    DEFAULT_COLUMNS,
    resolve_columns,
    require_columns,
)

from .normalizer import (
    NormalizedRecord,
    normalize_sex,
    height_key,
    coerce_pressure,
    normalize_record,
    normalize_frame,
)

__all__ = [
    # Age
    "AgeParser",
    "AgeFormat",
    "BareNumberPolicy",
    "ParsedAge",
    "parse_age",
    "age_key",
    # Columns
    "ColumnMapping",
    "ColumnResolution",
    "MissingColumnsError",
    "DEFAULT_COLUMNS",
    "resolve_columns",
    "require_columns",
    # Normalizer
    "NormalizedRecord",
    "normalize_sex",
    "height_key",
    "coerce_pressure",
    "normalize_record",
    "normalize_frame",
]
