"""
LiqSweep Data Module
====================
Bar model, CSV import and OHLC validation.
"""

from .bars import OHLC_COLUMNS, Bar, coerce_bar, bars_to_frame, frame_to_bars
from .validator import (
    ValidationErrorType,
    ValidationIssue,
    ValidationReport,
    check_ohlc_frame,
    validate_ohlc_frame
)
from .importer import load_ohlc_csv, parse_timestamps

__all__ = [
    'OHLC_COLUMNS', 'Bar', 'coerce_bar', 'bars_to_frame', 'frame_to_bars',
    'ValidationErrorType', 'ValidationIssue', 'ValidationReport',
    'check_ohlc_frame', 'validate_ohlc_frame',
    'load_ohlc_csv', 'parse_timestamps'
]
