"""
CNChildBP: Command Line Evaluation

Usage:
    cnchildbp-evaluate records.csv
    cnchildbp-evaluate records.xlsx --language english --output results.csv
    cnchildbp-evaluate records.csv --sex-col sex --age-col age --height-col ht \
        --sbp-col sbp --dbp-col dbp --summary
    cnchildbp-evaluate records.csv --reference standards_2017.csv

Without --reference the bundled placeholder table is used, which is not
the published 2017 standard.

Output:
    [input]_bp_evaluation.csv (UTF-8 with BOM so spreadsheet tools keep
    Chinese labels intact), unless --output is given.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

import pandas as pd

from .core.labels import Language
from .core.reference_table import load_reference_table
from .evaluation.pipeline import BPEvaluator, EvaluationConfig, summarize
from .preprocessing.age_parser import BareNumberPolicy
from .preprocessing.columns import MissingColumnsError

logger = logging.getLogger(__name__)

_EXCEL_SUFFIXES = {'.xlsx', '.xls'}


def read_records(path: Path) -> pd.DataFrame:
    """Read a CSV or Excel file of records."""
    if path.suffix.lower() in _EXCEL_SUFFIXES:
        return pd.read_excel(path)
    return pd.read_csv(path, encoding='utf-8-sig')


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description=('Evaluate child blood pressure (3-17 years) with sex-, age- and '
                     'height-specific percentile thresholds. The bundled table holds '
                     'placeholder values; pass the published 2017 table with --reference.')
    )
    parser.add_argument('input', type=Path, help='CSV or Excel file with one record per row')
    parser.add_argument('--output', '-o', type=Path,
                        help='Output CSV (default: <input>_bp_evaluation.csv)')
    parser.add_argument('--language', '-l', default=Language.CHINESE.value,
                        choices=[lang.value for lang in Language],
                        help='Label and message language')
    parser.add_argument('--reference', type=Path,
                        help='Reference table CSV (default: bundled placeholder table)')
    parser.add_argument('--sex-col')
    parser.add_argument('--age-col')
    parser.add_argument('--height-col')
    parser.add_argument('--sbp-col')
    parser.add_argument('--dbp-col')
    parser.add_argument('--age-policy', default=BareNumberPolicy.MONTHS_ABOVE_18.value,
                        choices=[p.value for p in BareNumberPolicy],
                        help='How to read unit-less ages above 18')
    parser.add_argument('--details', action='store_true',
                        help='Also write per-measurement statuses and join keys')
    parser.add_argument('--summary', action='store_true',
                        help='Print counts per label')
    parser.add_argument('--quiet', '-q', action='store_true',
                        help='Suppress the column mapping fallback notice')
    parser.add_argument('--verbose', '-v', action='store_true')
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format='%(asctime)s - %(levelname)s - %(message)s',
    )

    if not args.input.exists():
        logger.error(f"Input file not found: {args.input}")
        return 1

    records = read_records(args.input)
    logger.info(f"Loaded {len(records)} records from {args.input}")

    config = EvaluationConfig(
        language=args.language,
        quiet=args.quiet,
        include_details=args.details,
        age_policy=args.age_policy,
    )
    columns = {
        'sex': args.sex_col,
        'age': args.age_col,
        'height': args.height_col,
        'sbp': args.sbp_col,
        'dbp': args.dbp_col,
    }

    reference_table = None
    if args.reference is not None:
        if not args.reference.exists():
            logger.error(f"Reference table not found: {args.reference}")
            return 1
        try:
            reference_table = load_reference_table(args.reference)
        except ValueError as e:
            logger.error(str(e))
            return 1

    try:
        result = BPEvaluator(config, reference_table).evaluate(records, columns)
    except MissingColumnsError as e:
        logger.error(str(e))
        return 2

    output = args.output or args.input.with_name(f"{args.input.stem}_bp_evaluation.csv")
    result.to_csv(output, index=False, encoding='utf-8-sig')
    logger.info(f"Saved evaluation results to: {output}")

    if args.summary:
        # First appended column; suffixed if the input already had the name
        label_column = result.columns[len(records.columns)]
        print(summarize(result, config.language, label_column).to_string())

    return 0


if __name__ == "__main__":
    sys.exit(main())
