"""
LiqSweep Technical Indicators Module
====================================
Rolling extrema, swing pivots and ATR.
"""

from .technical import (
    # Types
    PivotKind, Pivot, IndicatorResult,
    # Extrema
    rolling_extreme, rolling_extreme_series,
    # Pivots
    confirmed_pivot, pivot_points, last_confirmed_pivot_series, latest_pivot,
    # Volatility
    true_range, atr, atr_value
)

__all__ = [
    'PivotKind', 'Pivot', 'IndicatorResult',
    'rolling_extreme', 'rolling_extreme_series',
    'confirmed_pivot', 'pivot_points', 'last_confirmed_pivot_series', 'latest_pivot',
    'true_range', 'atr', 'atr_value'
]
