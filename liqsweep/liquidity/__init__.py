"""
LiqSweep Liquidity Detection Module
===================================
Detects liquidity sweeps of prior lows/highs and swing pivots.
"""

from .liquidity_sweeps import (
    SweepDirection,
    SweepEvent,
    SweepResult,
    detect_bullish_sweep,
    detect_bearish_sweep,
    detect_lookback_sweep,
    detect_pivot_based_sweep,
    detect_sweeps,
    sweep_frame,
    LiquiditySweepDetector
)

__all__ = [
    'SweepDirection',
    'SweepEvent',
    'SweepResult',
    'detect_bullish_sweep',
    'detect_bearish_sweep',
    'detect_lookback_sweep',
    'detect_pivot_based_sweep',
    'detect_sweeps',
    'sweep_frame',
    'LiquiditySweepDetector'
]
