"""
CNChildBP

Evaluation of blood pressure in Chinese children and adolescents aged 3-17
years against sex-, age- and height-specific percentile thresholds laid out
like the 2017 reference standard. The bundled table holds placeholder values;
load the published table with load_reference_table(path).

Usage:
    from cnchildbp import evaluate_bp
    result = evaluate_bp(df, language="english")
"""

from .core import (
    Sex,
    Language,
    BPCategory,
    ReferenceRow,
    ReferenceTable,
    load_reference_table,
    get_reference_table,
)
from .preprocessing import (
    AgeParser,
    BareNumberPolicy,
    ColumnMapping,
    MissingColumnsError,
    parse_age,
)
from .evaluation import (
    BPEvaluator,
    EvaluationConfig,
    evaluate_bp,
    summarize,
)

__version__ = "1.0.0"

__all__ = [
    "Sex",
    "Language",
    "BPCategory",
    "ReferenceRow",
    "ReferenceTable",
    "load_reference_table",
    "get_reference_table",
    "AgeParser",
    "BareNumberPolicy",
    "ColumnMapping",
    "MissingColumnsError",
    "parse_age",
    "BPEvaluator",
    "EvaluationConfig",
    "evaluate_bp",
    "summarize",
]
