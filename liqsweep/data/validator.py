"""
LiqSweep Data Validator
Validation and cleaning of OHLC frames before they reach the detectors.

Checks:
- Required columns
- Finite prices
- High/low consistency
- Chronological, duplicate-free index
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List

import numpy as np
import pandas as pd

from .bars import OHLC_COLUMNS
from ..exceptions import DataValidationError

logger = logging.getLogger(__name__)


class ValidationErrorType(Enum):
    """Types of validation errors."""
    MISSING_FIELD = "missing_field"
    PRICE_INVALID = "price_invalid"
    DUPLICATE = "duplicate"
    TIMESTAMP_INVALID = "timestamp_invalid"


@dataclass
class ValidationIssue:
    """One problem found in a frame."""
    error_type: ValidationErrorType
    field: str
    message: str
    rows: int = 0
    severity: str = "error"  # error, warning


@dataclass
class ValidationReport:
    """Result of validating a frame."""
    issues: List[ValidationIssue] = field(default_factory=list)

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == "error"]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.severity == "warning"]

    @property
    def is_valid(self) -> bool:
        return not self.errors


def normalize_columns(data: pd.DataFrame) -> pd.DataFrame:
    """Lower-case and strip column names."""
    frame = data.copy()
    frame.columns = [str(c).strip().lower() for c in frame.columns]
    return frame


def check_ohlc_frame(data: pd.DataFrame) -> ValidationReport:
    """Inspect a frame and report every issue without raising."""
    report = ValidationReport()
    frame = normalize_columns(data)

    missing = [col for col in OHLC_COLUMNS if col not in frame.columns]
    if missing:
        report.issues.append(ValidationIssue(
            ValidationErrorType.MISSING_FIELD,
            ",".join(missing),
            f"Missing required columns: {missing}"
        ))
        return report

    prices = frame[OHLC_COLUMNS].apply(pd.to_numeric, errors='coerce')
    bad = ~np.isfinite(prices.to_numpy(dtype=float)).all(axis=1)
    if bad.any():
        report.issues.append(ValidationIssue(
            ValidationErrorType.PRICE_INVALID,
            "ohlc",
            "Prices must be finite numbers",
            rows=int(bad.sum())
        ))

    inverted = prices['high'] < prices['low']
    if inverted.any():
        report.issues.append(ValidationIssue(
            ValidationErrorType.PRICE_INVALID,
            "high",
            "High must be >= low",
            rows=int(inverted.sum())
        ))

    # Open/close outside the range is only a warning
    outside = (prices[['open', 'close']].max(axis=1) > prices['high']) | \
              (prices[['open', 'close']].min(axis=1) < prices['low'])
    if outside.any():
        report.issues.append(ValidationIssue(
            ValidationErrorType.PRICE_INVALID,
            "open/close",
            "Open or close outside the high-low range",
            rows=int(outside.sum()),
            severity="warning"
        ))

    duplicated = frame.index.duplicated()
    if duplicated.any():
        report.issues.append(ValidationIssue(
            ValidationErrorType.DUPLICATE,
            "index",
            "Duplicate timestamps",
            rows=int(duplicated.sum())
        ))

    if not frame.index.is_monotonic_increasing:
        report.issues.append(ValidationIssue(
            ValidationErrorType.TIMESTAMP_INVALID,
            "index",
            "Bars are not in chronological order",
            severity="warning"
        ))

    return report


def validate_ohlc_frame(data: pd.DataFrame, sort: bool = True) -> pd.DataFrame:
    """
    Validate and clean an OHLC frame.

    Args:
        data: Raw frame
        sort: Sort by index when bars are out of order

    Returns:
        Cleaned frame with lower-case float columns

    Raises:
        DataValidationError: on any error-level issue
    """
    report = check_ohlc_frame(data)
    if not report.is_valid:
        details = "; ".join(i.message for i in report.errors)
        raise DataValidationError(f"Invalid OHLC data: {details}")

    for issue in report.warnings:
        logger.warning(f"OHLC data: {issue.message} ({issue.rows} rows)")

    frame = normalize_columns(data)
    frame[OHLC_COLUMNS] = frame[OHLC_COLUMNS].astype(float)
    if 'volume' in frame.columns:
        frame['volume'] = pd.to_numeric(frame['volume'], errors='coerce').fillna(0.0)

    if sort and not frame.index.is_monotonic_increasing:
        frame = frame.sort_index()

    return frame


__all__ = [
    'ValidationErrorType',
    'ValidationIssue',
    'ValidationReport',
    'normalize_columns',
    'check_ohlc_frame',
    'validate_ohlc_frame'
]
