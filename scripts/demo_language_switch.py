#!/usr/bin/env python3
"""
CNChildBP: Language switching demo

Evaluates the same records with Chinese and English labels and saves the
Chinese-labelled result as UTF-8 CSV.

Usage:
    python scripts/demo_language_switch.py [--output demo_output_cn.csv]
"""

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd

sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from cnchildbp import evaluate_bp, summarize

logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(levelname)s - %(message)s')
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description='Demo: Chinese and English evaluation labels')
    parser.add_argument('--output', type=Path, default=Path('demo_output_cn.csv'))
    args = parser.parse_args()

    # English column names with explicit mapping
    df = pd.DataFrame({
        'sex': ['男', '女', '男', '女'],
        'age': [10, 12, '3岁5月', '75月'],
        'height': [140, 150, 98, 120.5],
        'sbp': [110, 130, 90, None],
        'dbp': [70, 85, 60, 62],
    })
    columns = dict(sex_col='sex', age_col='age', height_col='height',
                   sbp_col='sbp', dbp_col='dbp')

    res_cn = evaluate_bp(df, language='chinese', **columns)
    print(res_cn['BP_Evaluation'].tolist())

    res_en = evaluate_bp(df, language='english', **columns)
    print(res_en['BP_Evaluation'].tolist())
    print(summarize(res_en, language='english').to_string())

    res_cn.to_csv(args.output, index=False, encoding='utf-8-sig')
    logger.info(f"Saved Chinese-labeled results to: {args.output}")


if __name__ == "__main__":
    main()
