"""
CNChildBP: Field Normalizer

Turns raw record fields into reference table join keys:
- Sex labels (Chinese or English) -> Sex enum
- Age entries -> continuous years and whole-year key (via AgeParser)
- Height in cm -> round-half-up integer key
- Blood pressure readings -> float or None (missing)

Anything that cannot be normalized becomes None; such records later fall
outside table coverage (or count as Missing for pressures) instead of
raising.

Author: CNChildBP Project
Version: 1.0.0
"""

from dataclasses import dataclass
from typing import Any, Dict, Optional
import math

import numpy as np
import pandas as pd

from ..core.reference_table import Sex
from .age_parser import AgeParser, age_key
from .columns import ColumnMapping


SEX_TOKENS: Dict[str, Sex] = {
    # Male
    "male": Sex.MALE,
    "m": Sex.MALE,
    "boy": Sex.MALE,
    "man": Sex.MALE,
    "男": Sex.MALE,
    "男性": Sex.MALE,
    "男孩": Sex.MALE,
    # Female
    "female": Sex.FEMALE,
    "f": Sex.FEMALE,
    "girl": Sex.FEMALE,
    "woman": Sex.FEMALE,
    "女": Sex.FEMALE,
    "女性": Sex.FEMALE,
    "女孩": Sex.FEMALE,
}

# Internal working columns produced by normalize_frame
SEX_KEY = "sex_key"
AGE_PARSED = "age_parsed"
AGE_KEY = "age_key"
HEIGHT_KEY = "height_key"
SBP_VALUE = "sbp_value"
DBP_VALUE = "dbp_value"


@dataclass
class NormalizedRecord:
    """Join keys and readings derived from one input record."""
    sex: Optional[Sex]
    age_parsed: Optional[float]
    age_key: Optional[int]
    height_key: Optional[int]
    sbp: Optional[float]
    dbp: Optional[float]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sex': self.sex.value if self.sex else None,
            'age_parsed': self.age_parsed,
            'age_key': self.age_key,
            'height_key': self.height_key,
            'sbp': self.sbp,
            'dbp': self.dbp,
        }


def normalize_sex(value: Any) -> Optional[Sex]:
    """Map a raw sex label to Sex; unrecognised labels give None."""
    if isinstance(value, Sex):
        return value
    if value is None or (isinstance(value, float) and math.isnan(value)):
        return None
    return SEX_TOKENS.get(str(value).strip().lower())


def _to_float(value: Any) -> Optional[float]:
    if value is None or isinstance(value, (bool, np.bool_)):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


def height_key(value: Any) -> Optional[int]:
    """Round a height in cm half-up (floor(h + 0.5)); invalid gives None."""
    height = _to_float(value)
    if height is None or height < 0:
        return None
    return int(math.floor(height + 0.5))


def coerce_pressure(value: Any) -> Optional[float]:
    """Return a blood pressure reading as float, or None when missing."""
    return _to_float(value)


def normalize_record(
    sex: Any,
    age: Any,
    height: Any,
    sbp: Any,
    dbp: Any,
    parser: Optional[AgeParser] = None,
) -> NormalizedRecord:
    """Normalize the five logical fields of one record."""
    parser = parser or AgeParser()
    years = parser(age)
    return NormalizedRecord(
        sex=normalize_sex(sex),
        age_parsed=years,
        age_key=age_key(years),
        height_key=height_key(height),
        sbp=coerce_pressure(sbp),
        dbp=coerce_pressure(dbp),
    )


def normalize_frame(
    data: pd.DataFrame,
    mapping: ColumnMapping,
    parser: Optional[AgeParser] = None,
) -> pd.DataFrame:
    """
    Vectorized normalization of a record table.

    Parameters
    ----------
    data : pd.DataFrame
        Input records containing the mapped columns.
    mapping : ColumnMapping
        Resolved column names.
    parser : AgeParser, optional
        Age parser (default policy if None).

    Returns
    -------
    pd.DataFrame
        Same index as ``data`` with columns sex_key (str or None),
        age_parsed, age_key, height_key, sbp_value, dbp_value. Keys that
        cannot be derived are NaN/None.
    """
    parser = parser or AgeParser()

    sex = data[mapping.sex].map(normalize_sex).map(
        lambda s: s.value if s is not None else None
    )
    ages = parser.parse_series(data[mapping.age])

    heights = pd.to_numeric(data[mapping.height], errors='coerce').astype(float)
    heights = heights.where(heights >= 0)

    sbp = pd.to_numeric(data[mapping.sbp], errors='coerce').astype(float)
    dbp = pd.to_numeric(data[mapping.dbp], errors='coerce').astype(float)

    return pd.DataFrame(
        {
            SEX_KEY: sex.to_numpy(dtype=object),
            AGE_PARSED: ages.to_numpy(),
            AGE_KEY: np.floor(ages.to_numpy()),
            HEIGHT_KEY: np.floor(heights.to_numpy() + 0.5),
            SBP_VALUE: sbp.where(np.isfinite(sbp)).to_numpy(),
            DBP_VALUE: dbp.where(np.isfinite(dbp)).to_numpy(),
        },
        index=data.index,
    )
