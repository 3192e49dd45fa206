"""
CNChildBP: Evaluation Pipeline

This module integrates all steps of the blood pressure evaluation:
1. Column resolution (language defaults, explicit names, fallback)
2. Field normalization (sex, age parsing, height rounding, readings)
3. Reference table join on sex + whole-year age + height interval
4. Percentile decision rule for SBP and DBP, combined to one label
5. Merge back onto the original records (unmatched rows: out of range)

Rows are independent; N input rows give N output rows in input order with
the original columns and index untouched and one label column appended.

Author: CNChildBP Project
Version: 1.0.0
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Mapping, Optional, Union
import logging

import numpy as np
import pandas as pd

from ..core.labels import (
    BPCategory, CATEGORY_ORDER, Language, LabelSet, MessageSet, LABELS, MESSAGES,
)
from ..core.reference_table import ReferenceTable, get_reference_table
from ..preprocessing.age_parser import AgeParser, BareNumberPolicy
from ..preprocessing.columns import ColumnMapping, require_columns
from ..preprocessing.normalizer import (
    NormalizedRecord, normalize_frame, normalize_record,
    SEX_KEY, AGE_PARSED, AGE_KEY, HEIGHT_KEY, SBP_VALUE, DBP_VALUE,
)
from .classifier import (
    Classification, DecisionRule, classify, classify_arrays, combine_arrays,
    category_from_code, SBP_CAP, DBP_CAP, STAGE2_MARGIN,
)

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_COLUMN = "BP_Evaluation"

_ROW_ID = "_row_id"


@dataclass
class EvaluationConfig:
    """Configuration for the evaluation pipeline."""

    # Output language for labels and messages
    language: Union[str, Language] = Language.CHINESE

    # Suppress the column mapping fallback notice
    quiet: bool = False

    # Appended label column
    output_column: str = DEFAULT_OUTPUT_COLUMN

    # Also append per-measurement statuses and join keys
    include_details: bool = False

    # Reading of unit-less ages above 18
    age_policy: Union[str, BareNumberPolicy] = BareNumberPolicy.MONTHS_ABOVE_18

    # Decision rule thresholds (mmHg)
    sbp_cap: float = SBP_CAP
    dbp_cap: float = DBP_CAP
    stage2_margin: float = STAGE2_MARGIN

    def __post_init__(self):
        """Validate configuration."""
        self.language = Language.parse(self.language)
        if not isinstance(self.quiet, (bool, np.bool_)):
            raise TypeError(self.messages.format_invalid_quiet(self.quiet))
        self.quiet = bool(self.quiet)
        self.age_policy = BareNumberPolicy(self.age_policy)
        if not self.output_column:
            raise ValueError("output_column must be a non-empty string")

    @property
    def labels(self) -> LabelSet:
        return LABELS[self.language]

    @property
    def messages(self) -> MessageSet:
        return MESSAGES[self.language]

    @property
    def rule(self) -> DecisionRule:
        return DecisionRule(
            sbp_cap=self.sbp_cap,
            dbp_cap=self.dbp_cap,
            stage2_margin=self.stage2_margin,
        )


@dataclass
class RecordEvaluation:
    """Evaluation of a single record."""
    normalized: NormalizedRecord
    classification: Classification
    label: str

    @property
    def category(self) -> BPCategory:
        return self.classification.category

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.normalized.to_dict(),
            'sbp_status': (self.classification.sbp_status.value
                           if self.classification.sbp_status else None),
            'dbp_status': (self.classification.dbp_status.value
                           if self.classification.dbp_status else None),
            'category': self.category.value,
            'label': self.label,
        }


class BPEvaluator:
    """
    Blood pressure evaluator for tables of child health records.

    Parameters
    ----------
    config : EvaluationConfig, optional
        Pipeline configuration. If None, uses defaults.
    reference_table : ReferenceTable, optional
        Reference strata. If None, uses the bundled placeholder table.

    Example
    -------
    >>> evaluator = BPEvaluator(EvaluationConfig(language="english"))
    >>> result = evaluator.evaluate(df)
    >>> result["BP_Evaluation"].value_counts()
    """

    def __init__(
        self,
        config: Optional[EvaluationConfig] = None,
        reference_table: Optional[ReferenceTable] = None,
    ):
        self.config = config or EvaluationConfig()
        self.reference_table = (reference_table if reference_table is not None
                                else get_reference_table())
        self.age_parser = AgeParser(self.config.age_policy)

    def resolve(self, data: pd.DataFrame, columns: Optional[Mapping[str, Optional[str]]] = None) -> ColumnMapping:
        """
        Resolve column names, logging the fallback notice if used.

        The notice is an INFO record on the ``cnchildbp.evaluation.pipeline``
        logger. Callers only see it once logging is configured at INFO
        (the CLI does this); ``quiet=True`` drops it either way.
        """
        explicit = asdict(columns) if isinstance(columns, ColumnMapping) else columns
        resolution = require_columns(data.columns, self.config.language, explicit)

        if resolution.used_fallback and not self.config.quiet:
            messages = self.config.messages
            logger.info(messages.format_fallback(
                requested=messages.language_name(self.config.language),
                used=messages.language_name(resolution.fallback_language),
                columns=resolution.mapping.as_list(),
            ))
        return resolution.mapping

    def evaluate(
        self,
        records: Any,
        columns: Optional[Mapping[str, Optional[str]]] = None,
    ) -> pd.DataFrame:
        """
        Evaluate every record of a table.

        Parameters
        ----------
        records : pd.DataFrame or DataFrame-like
            Input records (anything ``pd.DataFrame`` accepts).
        columns : dict or ColumnMapping, optional
            Explicit column names keyed by "sex", "age", "height", "sbp",
            "dbp". Any explicit name disables the fallback mapping.

        Returns
        -------
        pd.DataFrame
            Copy of the input with the label column appended. If the input
            already has a column of that name, the new one is suffixed
            (``BP_Evaluation_1``, ...) and a warning is logged.

        Raises
        ------
        MissingColumnsError
            If the required columns cannot be resolved.
        """
        data = records if isinstance(records, pd.DataFrame) else pd.DataFrame(records)
        mapping = self.resolve(data, columns)

        work = normalize_frame(data, mapping, self.age_parser)
        work = work.reset_index(drop=True)
        work[_ROW_ID] = np.arange(len(work))

        matched = self._match(work)
        codes = self._classify(matched)

        labels = self.config.labels
        n = len(work)
        evaluation = np.full(n, labels.out_of_range, dtype=object)
        evaluation[matched[_ROW_ID].to_numpy()] = [
            labels.render(category_from_code(c)) for c in codes['combined']
        ]

        output_column = self._output_column(data.columns)
        result = data.copy()
        result[output_column] = evaluation

        if self.config.include_details:
            self._add_details(result, output_column, work, matched, codes)

        n_out = int(n - len(matched))
        if n_out:
            logger.debug(f"{n_out}/{n} records outside reference table coverage")
        return result

    def _output_column(self, columns) -> str:
        """Label column name; a numeric suffix is added if the input already has it."""
        name = self.config.output_column
        if name not in columns:
            return name

        suffix = 1
        while f"{name}_{suffix}" in columns:
            suffix += 1
        used = f"{name}_{suffix}"
        logger.warning(self.config.messages.format_output_column_taken(name, used))
        return used

    def _match(self, work: pd.DataFrame) -> pd.DataFrame:
        """Join normalized records with their reference strata."""
        age_min, age_max = self.reference_table.age_range
        candidates = work.dropna(subset=[SEX_KEY, AGE_KEY, HEIGHT_KEY])
        candidates = candidates[candidates[AGE_KEY].between(age_min, age_max)].copy()
        candidates[AGE_KEY] = candidates[AGE_KEY].astype(int)

        standards = self.reference_table.frame.rename(
            columns={'sex': SEX_KEY, 'age': AGE_KEY}
        )
        merged = candidates.merge(standards, on=[SEX_KEY, AGE_KEY], how='inner')
        in_interval = ((merged[HEIGHT_KEY] >= merged['height_lower'])
                       & (merged[HEIGHT_KEY] <= merged['height_upper']))
        merged = merged[in_interval]

        return merged.drop_duplicates(subset=_ROW_ID, keep='first').sort_values(_ROW_ID)

    def _classify(self, matched: pd.DataFrame) -> Dict[str, np.ndarray]:
        """Apply the decision rule to matched records."""
        rule = self.config.rule
        sbp = classify_arrays(
            matched[SBP_VALUE].to_numpy(), matched['sbp_p90'].to_numpy(),
            matched['sbp_p95'].to_numpy(), matched['sbp_p99'].to_numpy(),
            rule.sbp_cap, rule.stage2_margin,
        )
        dbp = classify_arrays(
            matched[DBP_VALUE].to_numpy(), matched['dbp_p90'].to_numpy(),
            matched['dbp_p95'].to_numpy(), matched['dbp_p99'].to_numpy(),
            rule.dbp_cap, rule.stage2_margin,
        )
        return {'sbp': sbp, 'dbp': dbp, 'combined': combine_arrays(sbp, dbp)}

    def _add_details(
        self,
        result: pd.DataFrame,
        prefix: str,
        work: pd.DataFrame,
        matched: pd.DataFrame,
        codes: Dict[str, np.ndarray],
    ) -> None:
        """Append per-measurement statuses and join keys."""
        labels = self.config.labels
        rows = matched[_ROW_ID].to_numpy()

        for key in ('sbp', 'dbp'):
            status = np.full(len(work), None, dtype=object)
            status[rows] = [labels.render(category_from_code(c)) for c in codes[key]]
            result[f"{prefix}_{key.upper()}"] = status

        result[f"{prefix}_age_years"] = work[AGE_PARSED].to_numpy()
        result[f"{prefix}_age_key"] = work[AGE_KEY].to_numpy()
        result[f"{prefix}_height_key"] = work[HEIGHT_KEY].to_numpy()

    def evaluate_record(
        self,
        sex: Any,
        age: Any,
        height: Any,
        sbp: Any,
        dbp: Any,
    ) -> RecordEvaluation:
        """Evaluate one record given its five raw fields."""
        normalized = normalize_record(sex, age, height, sbp, dbp, self.age_parser)
        row = self.reference_table.lookup(
            normalized.sex, normalized.age_key, normalized.height_key
        )
        classification = classify(row, normalized.sbp, normalized.dbp, self.config.rule)
        return RecordEvaluation(
            normalized=normalized,
            classification=classification,
            label=self.config.labels.render(classification.category),
        )


# =============================================================================
# Convenience functions
# =============================================================================

def evaluate_bp(
    data: Any,
    sex_col: Optional[str] = None,
    age_col: Optional[str] = None,
    height_col: Optional[str] = None,
    sbp_col: Optional[str] = None,
    dbp_col: Optional[str] = None,
    language: Union[str, Language] = Language.CHINESE,
    quiet: bool = False,
    reference_table: Optional[ReferenceTable] = None,
    **config_kwargs,
) -> pd.DataFrame:
    """
    Evaluate child blood pressure records against a sex-, age- and
    height-specific reference table.

    Without ``reference_table`` the bundled placeholder values are used;
    load the published 2017 values with ``load_reference_table(path)``
    for real screening.

    Parameters
    ----------
    data : pd.DataFrame or DataFrame-like
        Records with sex, age, height (cm), SBP and DBP (mmHg).
    sex_col, age_col, height_col, sbp_col, dbp_col : str, optional
        Explicit column names. When none is given the defaults for
        ``language`` are used, then the other language's defaults.
    language : {"chinese", "english"}, default="chinese"
        Label and message language.
    quiet : bool, default=False
        Suppress the column mapping fallback notice. The notice is
        logged at INFO and is only visible when logging is configured.
    reference_table : ReferenceTable, optional
        Alternative reference strata.
    **config_kwargs
        Further EvaluationConfig fields (output_column, include_details,
        age_policy, sbp_cap, dbp_cap, stage2_margin).

    Returns
    -------
    pd.DataFrame
        Copy of ``data`` with the label column appended (``BP_Evaluation``,
        suffixed when ``data`` already has a column of that name).

    Examples
    --------
    >>> df = pd.DataFrame({
    ...     "性别": ["男", "女"], "年龄": [10, 12], "身高": [140, 150],
    ...     "收缩压": [110, 130], "舒张压": [70, 85],
    ... })
    >>> evaluate_bp(df)["BP_Evaluation"].tolist()
    """
    config = EvaluationConfig(language=language, quiet=quiet, **config_kwargs)
    columns = {
        'sex': sex_col,
        'age': age_col,
        'height': height_col,
        'sbp': sbp_col,
        'dbp': dbp_col,
    }
    evaluator = BPEvaluator(config, reference_table)
    return evaluator.evaluate(data, columns)


def summarize(
    result: pd.DataFrame,
    language: Union[str, Language] = Language.CHINESE,
    column: str = DEFAULT_OUTPUT_COLUMN,
) -> pd.Series:
    """
    Count records per evaluation label.

    Returns
    -------
    pd.Series
        Counts indexed by rendered label, in category order (zeros kept).
    """
    labels = LABELS[Language.parse(language)]
    order = [labels.render(c) for c in CATEGORY_ORDER]
    counts = result[column].value_counts()
    return counts.reindex(order, fill_value=0).astype(int).rename("count")
