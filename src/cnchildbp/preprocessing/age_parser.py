"""
CNChildBP: Age Parser

Converts heterogeneous age entries into a continuous age in years:
- Mixed units: "3岁5月", "6y3m", "2 years 6 months" -> years + months/12
- Years only: "6岁", "6.5yrs" -> years
- Months only: "75月", "75 months" -> months/12
- Bare numbers: "6.25", 10, "120" -> years, or months when above 18

Rules are applied in that order and the first match wins. Unit tokens are
matched case-insensitively and must directly follow a number once all
whitespace has been removed.

The reference table ends at 17 whole years, so a bare number above 18 is
read as a month count. The STRICT policy only does so when the month
reading lands inside table coverage and otherwise keeps the value as years
(which then fails the table lookup).

Author: CNChildBP Project
Version: 1.0.0
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional
import math
import re

import numpy as np
import pandas as pd

from ..core.reference_table import MIN_AGE, MAX_AGE


class AgeFormat(Enum):
    """How an age entry was interpreted."""
    YEARS_AND_MONTHS = "years_and_months"
    YEARS = "years"
    MONTHS = "months"
    BARE_NUMBER = "bare_number"
    UNPARSEABLE = "unparseable"


class BareNumberPolicy(Enum):
    """Interpretation of unit-less numbers above BARE_NUMBER_LIMIT."""
    MONTHS_ABOVE_18 = "months_above_18"   # Always months
    STRICT = "strict"                     # Months only if the result is in table coverage


BARE_NUMBER_LIMIT = 18.0

_NUMBER = r"(\d+(?:\.\d+)?)"
_YEAR_PATTERN = re.compile(_NUMBER + r"(?:years|year|yrs|yr|y|周岁|岁)", re.IGNORECASE)
_MONTH_PATTERN = re.compile(_NUMBER + r"(?:months|month|mos|mo|m|个月|月)", re.IGNORECASE)
_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class ParsedAge:
    """
    Tagged result of age parsing.

    Attributes
    ----------
    years : float or None
        Continuous age in years, None when unparseable.
    format : AgeFormat
        Which rule produced the value.
    raw : Any
        The original input.
    """
    years: Optional[float]
    format: AgeFormat
    raw: Any = None

    @property
    def is_parsed(self) -> bool:
        return self.years is not None

    @property
    def age_key(self) -> Optional[int]:
        """Whole-year age used for table lookup."""
        return age_key(self.years)


def age_key(years: Optional[float]) -> Optional[int]:
    """Floor a continuous age to whole years (None passes through)."""
    if years is None or not math.isfinite(years):
        return None
    return int(math.floor(years))


def _is_missing(value: Any) -> bool:
    if value is None or value is pd.NA or value is pd.NaT:
        return True
    if isinstance(value, (float, np.floating)):
        return bool(np.isnan(value))
    return False


class AgeParser:
    """
    Parses free-text or numeric ages into years.

    Parameters
    ----------
    policy : BareNumberPolicy, default=BareNumberPolicy.MONTHS_ABOVE_18
        How to read unit-less numbers above 18.

    Example
    -------
    >>> parser = AgeParser()
    >>> parser("3岁6月")
    3.5
    >>> parser("75months")
    6.25
    >>> parser.parse("abc").format
    <AgeFormat.UNPARSEABLE: 'unparseable'>
    """

    def __init__(self, policy: BareNumberPolicy = BareNumberPolicy.MONTHS_ABOVE_18):
        self.policy = BareNumberPolicy(policy)

    def __call__(self, value: Any) -> Optional[float]:
        return self.parse(value).years

    def parse(self, value: Any) -> ParsedAge:
        """
        Parse a single age entry.

        Parameters
        ----------
        value : str, int, float or None
            Raw age entry.

        Returns
        -------
        ParsedAge
            Tagged result; ``years`` is None when the entry is unparseable.
        """
        if _is_missing(value) or isinstance(value, (bool, np.bool_)):
            return ParsedAge(None, AgeFormat.UNPARSEABLE, value)

        if isinstance(value, (int, float, np.integer, np.floating)):
            return self._parse_bare(float(value), value)

        text = _WHITESPACE.sub("", str(value))
        if not text:
            return ParsedAge(None, AgeFormat.UNPARSEABLE, value)

        year_match = _YEAR_PATTERN.search(text)
        month_match = _MONTH_PATTERN.search(text)

        if year_match and month_match:
            years = float(year_match.group(1)) + float(month_match.group(1)) / 12
            return ParsedAge(years, AgeFormat.YEARS_AND_MONTHS, value)
        if year_match:
            return ParsedAge(float(year_match.group(1)), AgeFormat.YEARS, value)
        if month_match:
            return ParsedAge(float(month_match.group(1)) / 12, AgeFormat.MONTHS, value)

        try:
            number = float(text)
        except ValueError:
            return ParsedAge(None, AgeFormat.UNPARSEABLE, value)
        return self._parse_bare(number, value)

    def _parse_bare(self, number: float, raw: Any) -> ParsedAge:
        """Apply the bare-number rule."""
        if not math.isfinite(number) or number < 0:
            return ParsedAge(None, AgeFormat.UNPARSEABLE, raw)

        if number <= BARE_NUMBER_LIMIT:
            return ParsedAge(number, AgeFormat.BARE_NUMBER, raw)

        months_as_years = number / 12
        if self.policy is BareNumberPolicy.STRICT:
            if not MIN_AGE <= math.floor(months_as_years) <= MAX_AGE:
                return ParsedAge(number, AgeFormat.BARE_NUMBER, raw)
        return ParsedAge(months_as_years, AgeFormat.BARE_NUMBER, raw)

    def parse_series(self, ages: pd.Series) -> pd.Series:
        """
        Parse a column of ages.

        Returns
        -------
        pd.Series
            Float ages in years (NaN where unparseable), same index.
        """
        parsed = ages.map(self)
        return pd.to_numeric(parsed, errors='coerce').astype(float)


def parse_age(
    value: Any,
    policy: BareNumberPolicy = BareNumberPolicy.MONTHS_ABOVE_18,
) -> Optional[float]:
    """Convenience function to parse one age entry into years."""
    return AgeParser(policy)(value)
