"""
CNChildBP: Column Resolution

Resolves which input columns hold sex, age, height, SBP and DBP.

Resolution is two-stage:
1. Preferred mapping: the default column names for the requested language,
   overridden field by field by any explicit names from the caller.
2. Fallback mapping: only when the caller gave no explicit names, the other
   language's default set is tried.

The result is either a resolved mapping (flagging whether the fallback was
used) or the list of column names that are missing from the preferred set.
"""

from dataclasses import dataclass, field, fields
from typing import Dict, Iterable, List, Optional, Union

from ..core.labels import Language, get_messages


@dataclass(frozen=True)
class ColumnMapping:
    """Names of the five logical input columns."""
    sex: str
    age: str
    height: str
    sbp: str
    dbp: str

    def as_list(self) -> List[str]:
        return [self.sex, self.age, self.height, self.sbp, self.dbp]

    def missing_from(self, columns: Iterable) -> List[str]:
        """Mapped names not present in ``columns`` (in field order)."""
        available = set(columns)
        return [name for name in self.as_list() if name not in available]


DEFAULT_COLUMNS: Dict[Language, ColumnMapping] = {
    Language.CHINESE: ColumnMapping(
        sex="性别",
        age="年龄",
        height="身高",
        sbp="收缩压",
        dbp="舒张压",
    ),
    Language.ENGLISH: ColumnMapping(
        sex="sex",
        age="age",
        height="height",
        sbp="sbp",
        dbp="dbp",
    ),
}

FIELD_NAMES = [f.name for f in fields(ColumnMapping)]


class MissingColumnsError(ValueError):
    """Required input columns could not be resolved."""

    def __init__(self, missing_columns: List[str], language: Language = Language.CHINESE):
        self.missing_columns = list(missing_columns)
        self.language = language
        super().__init__(get_messages(language).format_missing_columns(self.missing_columns))


@dataclass
class ColumnResolution:
    """Outcome of column resolution."""
    mapping: Optional[ColumnMapping]
    used_fallback: bool = False
    fallback_language: Optional[Language] = None
    missing: List[str] = field(default_factory=list)

    @property
    def resolved(self) -> bool:
        return self.mapping is not None


def resolve_columns(
    columns: Iterable,
    language: Union[str, Language] = Language.CHINESE,
    explicit: Optional[Dict[str, Optional[str]]] = None,
) -> ColumnResolution:
    """
    Resolve input column names.

    Args:
        columns: Column names available in the input table
        language: Language whose default names are preferred
        explicit: Caller-supplied names keyed by field
            ("sex", "age", "height", "sbp", "dbp"); None values are ignored

    Returns:
        ColumnResolution with either ``mapping`` set or ``missing`` listing
        the unresolved names of the preferred mapping

    Raises:
        ValueError: If ``explicit`` contains an unknown field
    """
    language = Language.parse(language)
    columns = list(columns)

    overrides = {k: v for k, v in (explicit or {}).items() if v is not None}
    unknown = sorted(set(overrides) - set(FIELD_NAMES))
    if unknown:
        raise ValueError(
            f"Unknown column mapping fields: {unknown}. Expected: {FIELD_NAMES}"
        )

    defaults = DEFAULT_COLUMNS[language]
    preferred = ColumnMapping(**{name: overrides.get(name, getattr(defaults, name))
                                 for name in FIELD_NAMES})

    missing = preferred.missing_from(columns)
    if not missing:
        return ColumnResolution(mapping=preferred)

    if not overrides:
        fallback = DEFAULT_COLUMNS[language.other]
        if not fallback.missing_from(columns):
            return ColumnResolution(
                mapping=fallback,
                used_fallback=True,
                fallback_language=language.other,
            )

    return ColumnResolution(mapping=None, missing=missing)


def require_columns(
    columns: Iterable,
    language: Union[str, Language] = Language.CHINESE,
    explicit: Optional[Dict[str, Optional[str]]] = None,
) -> ColumnResolution:
    """Like resolve_columns, but raise MissingColumnsError when unresolved."""
    resolution = resolve_columns(columns, language, explicit)
    if not resolution.resolved:
        raise MissingColumnsError(resolution.missing, Language.parse(language))
    return resolution
