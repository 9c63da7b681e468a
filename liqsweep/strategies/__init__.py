"""
LiqSweep Strategies Module
==========================
Strategy framework, the liquidity sweep strategy and the chart indicator.
"""

from .base_strategy import (
    SignalType,
    Signal,
    Position,
    Trade,
    BacktestResult,
    BaseStrategy
)
from .sweep_strategy import LiquiditySweepStrategy
from .sweep_indicator import SweepIndicator

__all__ = [
    'SignalType',
    'Signal',
    'Position',
    'Trade',
    'BacktestResult',
    'BaseStrategy',
    'LiquiditySweepStrategy',
    'SweepIndicator'
]
