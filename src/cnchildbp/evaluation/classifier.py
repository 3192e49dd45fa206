"""
CNChildBP: Blood Pressure Classifier

Applies the percentile decision rule of the 2017 standard to one matched
reference stratum.

Per measurement (systolic and diastolic separately):
    missing                    -> Missing
    value >= P99 + 5 mmHg      -> Stage 2
    value >= P95               -> Stage 1
    value >= P90 or >= cap     -> High-normal   (cap: 120 SBP / 80 DBP)
    otherwise                  -> Normal

Combined result: the more severe of the two, with
Stage 2 > Stage 1 > High-normal > Missing > Normal.

No matching stratum -> Out of range, and the rule is not applied.

Author: CNChildBP Project
Version: 1.0.0
"""

from dataclasses import dataclass
from typing import Optional, Union
import math

import numpy as np

from ..core.labels import BPCategory, SEVERITY, CATEGORY_BY_SEVERITY
from ..core.reference_table import ReferenceRow


SBP_CAP = 120.0         # mmHg, systolic value that is at least High-normal
DBP_CAP = 80.0          # mmHg, diastolic value that is at least High-normal
STAGE2_MARGIN = 5.0     # mmHg above P99 for Stage 2

Number = Union[int, float]


@dataclass(frozen=True)
class DecisionRule:
    """Fixed thresholds of the decision rule."""
    sbp_cap: float = SBP_CAP
    dbp_cap: float = DBP_CAP
    stage2_margin: float = STAGE2_MARGIN


@dataclass(frozen=True)
class Classification:
    """Per-measurement statuses and combined category for one record."""
    sbp_status: Optional[BPCategory]
    dbp_status: Optional[BPCategory]
    category: BPCategory
    reference_row: Optional[ReferenceRow] = None

    @property
    def is_out_of_range(self) -> bool:
        return self.category is BPCategory.OUT_OF_RANGE


def _is_missing(value: Optional[Number]) -> bool:
    if value is None:
        return True
    try:
        return math.isnan(float(value))
    except (TypeError, ValueError):
        return True


def classify_measurement(
    value: Optional[Number],
    p90: float,
    p95: float,
    p99: float,
    cap: float,
    stage2_margin: float = STAGE2_MARGIN,
) -> BPCategory:
    """
    Classify one systolic or diastolic reading.

    Args:
        value: Reading in mmHg (None/NaN for missing)
        p90, p95, p99: Stratum percentiles for this measurement
        cap: Absolute High-normal threshold (120 SBP / 80 DBP)
        stage2_margin: mmHg above P99 for Stage 2

    Returns:
        BPCategory (never OUT_OF_RANGE)
    """
    if _is_missing(value):
        return BPCategory.MISSING

    value = float(value)
    if value >= p99 + stage2_margin:
        return BPCategory.STAGE2
    elif value >= p95:
        return BPCategory.STAGE1
    elif value >= p90 or value >= cap:
        return BPCategory.HIGH_NORMAL
    return BPCategory.NORMAL


def combine_categories(sbp_status: BPCategory, dbp_status: BPCategory) -> BPCategory:
    """Return the more severe of the two per-measurement statuses."""
    return max(sbp_status, dbp_status, key=lambda c: SEVERITY[c])


def classify(
    reference_row: Optional[ReferenceRow],
    sbp: Optional[Number],
    dbp: Optional[Number],
    rule: Optional[DecisionRule] = None,
) -> Classification:
    """
    Classify one record against its matched stratum.

    Args:
        reference_row: Matched stratum, or None if the record is outside
            table coverage
        sbp: Systolic reading in mmHg
        dbp: Diastolic reading in mmHg
        rule: Thresholds (defaults to the 2017 standard)

    Returns:
        Classification
    """
    if reference_row is None:
        return Classification(None, None, BPCategory.OUT_OF_RANGE)

    rule = rule or DecisionRule()
    sbp_status = classify_measurement(
        sbp, reference_row.sbp_p90, reference_row.sbp_p95, reference_row.sbp_p99,
        rule.sbp_cap, rule.stage2_margin,
    )
    dbp_status = classify_measurement(
        dbp, reference_row.dbp_p90, reference_row.dbp_p95, reference_row.dbp_p99,
        rule.dbp_cap, rule.stage2_margin,
    )
    return Classification(
        sbp_status=sbp_status,
        dbp_status=dbp_status,
        category=combine_categories(sbp_status, dbp_status),
        reference_row=reference_row,
    )


# =============================================================================
# Vectorized rule
# =============================================================================

def classify_arrays(
    values: np.ndarray,
    p90: np.ndarray,
    p95: np.ndarray,
    p99: np.ndarray,
    cap: float,
    stage2_margin: float = STAGE2_MARGIN,
) -> np.ndarray:
    """
    Vectorized classify_measurement.

    Parameters
    ----------
    values : np.ndarray
        Readings in mmHg, NaN for missing.
    p90, p95, p99 : np.ndarray
        Percentiles of each record's stratum (same shape as values).
    cap : float
        Absolute High-normal threshold.
    stage2_margin : float, default=5.0
        mmHg above P99 for Stage 2.

    Returns
    -------
    np.ndarray
        Integer severity codes (see core.labels.SEVERITY).
    """
    values = np.asarray(values, dtype=float)
    p90 = np.asarray(p90, dtype=float)
    p95 = np.asarray(p95, dtype=float)
    p99 = np.asarray(p99, dtype=float)

    missing = np.isnan(values)
    with np.errstate(invalid='ignore'):
        conditions = [
            missing,
            values >= p99 + stage2_margin,
            values >= p95,
            (values >= p90) | (values >= cap),
        ]
    choices = [
        SEVERITY[BPCategory.MISSING],
        SEVERITY[BPCategory.STAGE2],
        SEVERITY[BPCategory.STAGE1],
        SEVERITY[BPCategory.HIGH_NORMAL],
    ]
    return np.select(conditions, choices, default=SEVERITY[BPCategory.NORMAL])


def combine_arrays(sbp_codes: np.ndarray, dbp_codes: np.ndarray) -> np.ndarray:
    """Vectorized combine_categories on severity codes."""
    return np.maximum(sbp_codes, dbp_codes)


def category_from_code(code: int) -> BPCategory:
    """Map a severity code back to its BPCategory."""
    return CATEGORY_BY_SEVERITY[int(code)]
