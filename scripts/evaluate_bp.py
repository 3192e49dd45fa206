#!/usr/bin/env python3
"""
CNChildBP: Evaluate a table of child blood pressure records.

Usage:
    python scripts/evaluate_bp.py data/records.csv --language english --summary

Same options as the installed ``cnchildbp-evaluate`` command.
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from cnchildbp.cli import main

if __name__ == "__main__":
    sys.exit(main())
