"""
LiqSweep
========
Liquidity sweep detection and trade sequencing toolkit.

Modules:
    indicators: Rolling extrema, swing pivots and ATR
    liquidity: Sweep detection (lookback and pivot methods, streaming detector)
    risk: Stop-loss, take-profit and trailing-stop levels
    engine: Signal sequencer state machine
    strategies: Strategy framework, sweep strategy and chart indicator
    config: Run configuration and environment settings
    data: Bar model, CSV import and validation

Example Usage:
    >>> from liqsweep import SweepConfig, LiquiditySweepStrategy, load_ohlc_csv
    >>>
    >>> data = load_ohlc_csv("btcusdt_4h.csv")
    >>> strategy = LiquiditySweepStrategy(SweepConfig(detection_method="lookback"))
    >>> result = strategy.backtest(data)
    >>> print(f"Return: {result.total_return:.2%}")

Author: LiqSweep Team
Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "LiqSweep Team"

from .exceptions import (
    LiquiditySweepError, InsufficientHistory, InvalidConfiguration, DataValidationError
)

from .config import (
    DetectionMethod, AtrMethod, SweepConfig, BacktestSettings, RunConfig,
    LoggingSettings, ApplicationSettings, get_settings
)

from .data import Bar, load_ohlc_csv, validate_ohlc_frame

from .indicators import (
    PivotKind, Pivot, rolling_extreme, confirmed_pivot, latest_pivot, pivot_points,
    true_range, atr, atr_value
)

from .liquidity import (
    SweepDirection, SweepEvent, SweepResult,
    detect_bullish_sweep, detect_bearish_sweep, detect_pivot_based_sweep,
    detect_sweeps, sweep_frame, LiquiditySweepDetector
)

from .risk import RiskLevels, stop_loss, take_profit, risk_reward, trailing_stop, compute_risk_levels

from .engine import TradeState, SequencerAction, SequencerDecision, SignalSequencer

from .strategies import (
    SignalType, Signal, Position, Trade, BacktestResult, BaseStrategy,
    LiquiditySweepStrategy, SweepIndicator
)

from .utils import setup_logging

__all__ = [
    # Errors
    'LiquiditySweepError', 'InsufficientHistory', 'InvalidConfiguration', 'DataValidationError',

    # Config
    'DetectionMethod', 'AtrMethod', 'SweepConfig', 'BacktestSettings', 'RunConfig',
    'LoggingSettings', 'ApplicationSettings', 'get_settings',

    # Data
    'Bar', 'load_ohlc_csv', 'validate_ohlc_frame',

    # Indicators
    'PivotKind', 'Pivot', 'rolling_extreme', 'confirmed_pivot', 'latest_pivot', 'pivot_points',
    'true_range', 'atr', 'atr_value',

    # Detection
    'SweepDirection', 'SweepEvent', 'SweepResult',
    'detect_bullish_sweep', 'detect_bearish_sweep', 'detect_pivot_based_sweep',
    'detect_sweeps', 'sweep_frame', 'LiquiditySweepDetector',

    # Risk
    'RiskLevels', 'stop_loss', 'take_profit', 'risk_reward', 'trailing_stop', 'compute_risk_levels',

    # Engine
    'TradeState', 'SequencerAction', 'SequencerDecision', 'SignalSequencer',

    # Strategies
    'SignalType', 'Signal', 'Position', 'Trade', 'BacktestResult', 'BaseStrategy',
    'LiquiditySweepStrategy', 'SweepIndicator',

    'setup_logging',
]
