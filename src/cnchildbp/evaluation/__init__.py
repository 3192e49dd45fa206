"""
CNChildBP Evaluation Module

Percentile decision rule and the table-level evaluation pipeline.
"""

from .classifier import (
    DecisionRule,
    Classification,
    classify,
    classify_measurement,
    combine_categories,
    classify_arrays,
    combine_arrays,
    SBP_CAP,
    DBP_CAP,
    STAGE2_MARGIN,
)
from .pipeline import (
    BPEvaluator,
    EvaluationConfig,
    RecordEvaluation,
    evaluate_bp,
    summarize,
    DEFAULT_OUTPUT_COLUMN,
)

__all__ = [
    # Classifier
    "DecisionRule",
    "Classification",
    "classify",
    "classify_measurement",
    "combine_categories",
    "classify_arrays",
    "combine_arrays",
    "SBP_CAP",
    "DBP_CAP",
    "STAGE2_MARGIN",
    # Pipeline
    "BPEvaluator",
    "EvaluationConfig",
    "RecordEvaluation",
    "evaluate_bp",
    "summarize",
    "DEFAULT_OUTPUT_COLUMN",
]
