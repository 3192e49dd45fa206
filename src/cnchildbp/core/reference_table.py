"""
Reference Table for CNChildBP

Loader and lookup for sex-, age- and height-specific blood pressure
reference values for Chinese children and adolescents aged 3-17 years,
laid out like the 2017 standard.

Each row (stratum) covers:
- Sex
- Whole-year age (3..17)
- An inclusive integer height interval in cm
- P90/P95/P99 thresholds for systolic and diastolic pressure (mmHg)

For a fixed (sex, age) the height intervals are expected to partition a
contiguous range. This is assumed, not validated.

The bundled CSV is a placeholder: it follows the published table's layout
(seven height strata per sex and age) but its values are NOT the published
thresholds. Loading it logs a warning. Pass the published table to
load_reference_table(path) before using results for screening.

Reference:
    Fan H, Yan YK, Mi J. Updating blood pressure references for Chinese
    children aged 3-17 years. Chinese Journal of Hypertension, 2017,
    25(5): 428-435.
"""

from dataclasses import dataclass
from enum import Enum
from importlib import resources
from pathlib import Path
from typing import Dict, List, Optional, Tuple, Union
import logging

import numpy as np
import pandas as pd

logger = logging.getLogger(__name__)


class Sex(Enum):
    """Sex key used for reference table joins."""
    MALE = "male"
    FEMALE = "female"


# Tokens accepted in the sex column of a reference CSV
_CSV_SEX_VALUES: Dict[str, Sex] = {
    "male": Sex.MALE,
    "m": Sex.MALE,
    "男": Sex.MALE,
    "female": Sex.FEMALE,
    "f": Sex.FEMALE,
    "女": Sex.FEMALE,
}

KEY_COLUMNS = ["sex", "age", "height_lower", "height_upper"]
THRESHOLD_COLUMNS = [
    "sbp_p90", "sbp_p95", "sbp_p99",
    "dbp_p90", "dbp_p95", "dbp_p99",
]
REQUIRED_COLUMNS = KEY_COLUMNS + THRESHOLD_COLUMNS

MIN_AGE = 3
MAX_AGE = 17

_DATA_PACKAGE = "cnchildbp.data"
_DATA_FILE = "bp_reference_placeholder.csv"

_PLACEHOLDER_WARNING = (
    "Bundled reference table {source} holds placeholder values, not the "
    "published 2017 thresholds; load the published table with "
    "load_reference_table(path) for screening use"
)


@dataclass(frozen=True)
class ReferenceRow:
    """One stratum of the reference table."""
    sex: Sex
    age_years: int
    height_lower: int
    height_upper: int
    sbp_p90: float
    sbp_p95: float
    sbp_p99: float
    dbp_p90: float
    dbp_p95: float
    dbp_p99: float

    def contains_height(self, height_key: int) -> bool:
        """Whether a rounded height falls inside this stratum (inclusive)."""
        return self.height_lower <= height_key <= self.height_upper

    def to_dict(self) -> Dict:
        """Convert to dictionary for serialization."""
        return {
            'sex': self.sex.value,
            'age': self.age_years,
            'height_lower': self.height_lower,
            'height_upper': self.height_upper,
            'sbp_p90': self.sbp_p90,
            'sbp_p95': self.sbp_p95,
            'sbp_p99': self.sbp_p99,
            'dbp_p90': self.dbp_p90,
            'dbp_p95': self.dbp_p95,
            'dbp_p99': self.dbp_p99,
        }


# =============================================================================
# Table Class
# =============================================================================

class ReferenceTable:
    """
    Read-only reference table with stratum lookup.

    Usage:
        table = get_reference_table()
        row = table.lookup(Sex.MALE, 10, 141)
        print(row.sbp_p95)
    """

    def __init__(self, frame: pd.DataFrame):
        self._frame = frame.reset_index(drop=True)
        self._index: Dict[Tuple[Sex, int], List[ReferenceRow]] = {}

        for record in self._frame.itertuples(index=False):
            row = ReferenceRow(
                sex=Sex(record.sex),
                age_years=int(record.age),
                height_lower=int(record.height_lower),
                height_upper=int(record.height_upper),
                sbp_p90=float(record.sbp_p90),
                sbp_p95=float(record.sbp_p95),
                sbp_p99=float(record.sbp_p99),
                dbp_p90=float(record.dbp_p90),
                dbp_p95=float(record.dbp_p95),
                dbp_p99=float(record.dbp_p99),
            )
            self._index.setdefault((row.sex, row.age_years), []).append(row)

        for rows in self._index.values():
            rows.sort(key=lambda r: r.height_lower)

    def __len__(self) -> int:
        return len(self._frame)

    @property
    def frame(self) -> pd.DataFrame:
        """Copy of the underlying DataFrame (canonical columns)."""
        return self._frame.copy()

    @property
    def age_range(self) -> Tuple[int, int]:
        """Smallest and largest whole-year age covered."""
        return int(self._frame['age'].min()), int(self._frame['age'].max())

    def rows(self) -> List[ReferenceRow]:
        """All strata, ordered by sex, age and height."""
        return [row for key in sorted(self._index, key=lambda k: (k[0].value, k[1]))
                for row in self._index[key]]

    def strata(self, sex: Sex, age_years: int) -> List[ReferenceRow]:
        """Height strata for one sex and age (empty if not covered)."""
        return list(self._index.get((sex, int(age_years)), []))

    def height_range(self, sex: Sex, age_years: int) -> Optional[Tuple[int, int]]:
        """Covered height span for one sex and age, or None."""
        rows = self._index.get((sex, int(age_years)))
        if not rows:
            return None
        return rows[0].height_lower, rows[-1].height_upper

    def lookup(
        self,
        sex: Optional[Sex],
        age_key: Optional[int],
        height_key: Optional[int],
    ) -> Optional[ReferenceRow]:
        """
        Find the stratum for a normalized record.

        Args:
            sex: Normalized sex, or None if unrecognised
            age_key: Whole-year age (floor of parsed age)
            height_key: Rounded height in cm

        Returns:
            Matching ReferenceRow, or None if outside table coverage
        """
        if sex is None or age_key is None or height_key is None:
            return None

        for row in self._index.get((sex, int(age_key)), []):
            if row.contains_height(int(height_key)):
                return row
        return None

    def summary(self) -> str:
        """Get a summary of table coverage."""
        lines = ["Blood Pressure Reference Table:", "=" * 50]
        for sex in Sex:
            ages = sorted(age for (s, age) in self._index if s is sex)
            if not ages:
                continue
            n_rows = sum(len(self._index[(sex, age)]) for age in ages)
            lines.append(
                f"  {sex.value}: ages {ages[0]}-{ages[-1]}, {n_rows} strata"
            )
        return "\n".join(lines)


# =============================================================================
# Loading
# =============================================================================

def _prepare_frame(raw: pd.DataFrame, source: str) -> pd.DataFrame:
    """Validate and canonicalize a raw reference DataFrame."""
    frame = raw.copy()
    frame.columns = [str(c).strip().lower() for c in frame.columns]

    missing = [c for c in REQUIRED_COLUMNS if c not in frame.columns]
    if missing:
        raise ValueError(
            f"Reference table {source} is missing columns: {', '.join(missing)}"
        )

    frame = frame[REQUIRED_COLUMNS].copy()

    sex = frame['sex'].astype(str).str.strip().str.lower().map(
        {token: s.value for token, s in _CSV_SEX_VALUES.items()}
    )
    if sex.isna().any():
        bad = sorted(frame.loc[sex.isna(), 'sex'].astype(str).unique())
        raise ValueError(f"Reference table {source} has unknown sex values: {bad}")
    frame['sex'] = sex

    numeric = frame[KEY_COLUMNS[1:] + THRESHOLD_COLUMNS].apply(pd.to_numeric, errors='coerce')
    if numeric.isna().any().any():
        raise ValueError(f"Reference table {source} has non-numeric or empty cells")
    frame[KEY_COLUMNS[1:]] = numeric[KEY_COLUMNS[1:]].astype(int)
    frame[THRESHOLD_COLUMNS] = numeric[THRESHOLD_COLUMNS].astype(float)

    if (frame['height_lower'] > frame['height_upper']).any():
        raise ValueError(f"Reference table {source} has inverted height intervals")

    for prefix in ("sbp", "dbp"):
        p90, p95, p99 = (frame[f"{prefix}_p{p}"].to_numpy() for p in (90, 95, 99))
        if np.any(p90 > p95) or np.any(p95 > p99):
            raise ValueError(
                f"Reference table {source} has non-monotonic {prefix.upper()} percentiles"
            )

    return frame.sort_values(['sex', 'age', 'height_lower']).reset_index(drop=True)


def load_reference_table(path: Optional[Union[str, Path]] = None) -> ReferenceTable:
    """
    Load a reference table from CSV.

    Args:
        path: CSV file with the canonical columns. If None, loads the
            placeholder table bundled with the package and logs a warning.

    Returns:
        ReferenceTable

    Raises:
        FileNotFoundError: If the CSV does not exist
        ValueError: If columns are missing or values are invalid
    """
    if path is None:
        source = f"{_DATA_PACKAGE}/{_DATA_FILE}"
        with resources.files(_DATA_PACKAGE).joinpath(_DATA_FILE).open("r", encoding="utf-8") as f:
            raw = pd.read_csv(f, dtype={'sex': str})
        logger.warning(_PLACEHOLDER_WARNING.format(source=source))
    else:
        source = str(path)
        raw = pd.read_csv(path, dtype={'sex': str}, encoding="utf-8")

    table = ReferenceTable(_prepare_frame(raw, source))
    logger.debug(f"Loaded {len(table)} reference strata from {source}")
    return table


# Global table instance, loaded on first use
_table: Optional[ReferenceTable] = None


def get_reference_table() -> ReferenceTable:
    """Get the process-wide bundled (placeholder) reference table."""
    global _table
    if _table is None:
        _table = load_reference_table()
    return _table


if __name__ == "__main__":
    print(get_reference_table().summary())
