"""
LiqSweep Liquidity Sweep Detection Module
=========================================
Detects liquidity sweeps: a prior swing level pierced intrabar and closed
back across on the same bar.

Two methods are available:
    - lookback: the level is the lowest low / highest high of the previous
      `lookback` bars
    - pivot_based: the level is the most recent confirmed swing pivot, and
      the breach must exceed it by a fractional threshold

Missing history never raises out of this module; it is reported as
"no sweep on this bar".

Author: LiqSweep Team
Version: 1.0.0
"""

import pandas as pd
import numpy as np
from typing import Dict, Any, Optional, List, Tuple
from dataclasses import dataclass, replace
from collections import deque
from enum import Enum
import logging

from ..config.sweep_config import SweepConfig, DetectionMethod
from ..data.bars import Bar, BarLike, coerce_bar, bars_to_frame
from ..exceptions import InsufficientHistory, InvalidConfiguration
from ..indicators.technical import (
    PivotKind, Pivot, atr, atr_value, confirmed_pivot, latest_pivot,
    last_confirmed_pivot_series, rolling_extreme, rolling_extreme_series
)

logger = logging.getLogger(__name__)


class SweepDirection(Enum):
    """Direction of the expected reversal."""
    BULLISH = "bullish"
    BEARISH = "bearish"


@dataclass(frozen=True)
class SweepEvent:
    """A sweep observed on one bar."""
    bar_index: int
    direction: SweepDirection
    swept_level: float
    confirmed: bool = False
    timestamp: Any = None

    @property
    def is_bullish(self) -> bool:
        return self.direction is SweepDirection.BULLISH


@dataclass(frozen=True)
class SweepResult:
    """
    Detector output for one bar.

    bullish_level / bearish_level are the reference levels in force on the
    bar (prior low / prior high, or the latest pivots); sweep_level is the
    level that was actually swept, bullish first when both fire.
    """
    bullish_sweep: bool = False
    bearish_sweep: bool = False
    sweep_level: Optional[float] = None
    bullish_level: Optional[float] = None
    bearish_level: Optional[float] = None

    @property
    def any(self) -> bool:
        return self.bullish_sweep or self.bearish_sweep

    def events(self, bar_index: int, timestamp: Any = None) -> List[SweepEvent]:
        """Split the result into one event per direction that fired."""
        events = []
        if self.bullish_sweep:
            events.append(SweepEvent(bar_index, SweepDirection.BULLISH, self.bullish_level,
                                     timestamp=timestamp))
        if self.bearish_sweep:
            events.append(SweepEvent(bar_index, SweepDirection.BEARISH, self.bearish_level,
                                     timestamp=timestamp))
        return events

    def to_dict(self) -> Dict[str, Any]:
        return {
            'bullish_sweep': self.bullish_sweep,
            'bearish_sweep': self.bearish_sweep,
            'sweep_level': self.sweep_level,
            'bullish_level': self.bullish_level,
            'bearish_level': self.bearish_level
        }


def _build_result(bullish: bool, bearish: bool,
                  bullish_level: Optional[float],
                  bearish_level: Optional[float]) -> SweepResult:
    if bullish:
        level = bullish_level
    elif bearish:
        level = bearish_level
    else:
        level = None
    return SweepResult(bool(bullish), bool(bearish), level, bullish_level, bearish_level)


def _check_lookback_args(lookback: int, atr_multiplier: float, atr_length: int) -> None:
    if int(lookback) != lookback or lookback < 1:
        raise InvalidConfiguration('lookback', f"must be an integer >= 1, got {lookback!r}")
    if atr_multiplier <= 0:
        raise InvalidConfiguration('atr_multiplier', f"must be > 0, got {atr_multiplier!r}")
    if int(atr_length) != atr_length or atr_length < 1:
        raise InvalidConfiguration('atr_length', f"must be an integer >= 1, got {atr_length!r}")


def _prior_extreme(data: pd.DataFrame, lookback: int, kind: PivotKind) -> Optional[float]:
    """Extreme of the `lookback` bars before the current one."""
    try:
        return rolling_extreme(data.iloc[:-1], lookback, kind)
    except InsufficientHistory:
        return None


# ============================================================================
# LOOKBACK METHOD
# ============================================================================

def detect_bullish_sweep(data: pd.DataFrame,
                         lookback: int = 20,
                         atr_multiplier: float = 0.5,
                         atr_length: int = 14) -> Tuple[bool, Optional[float]]:
    """
    Bullish sweep of the prior lookback low on the last bar.

    The current bar must trade below the lowest low of the previous
    `lookback` bars and close back above it. The ATR arguments are validated
    for the risk calculator downstream but do not enter the condition.

    Args:
        data: OHLC DataFrame, last row is the current bar
        lookback: Bars before the current one that define the prior low
        atr_multiplier: Detection ATR multiplier
        atr_length: ATR period

    Returns:
        Tuple of (is_sweep, sweep_price); sweep_price is the prior low,
        None while history is insufficient
    """
    _check_lookback_args(lookback, atr_multiplier, atr_length)

    prior_low = _prior_extreme(data, lookback, PivotKind.LOW)
    if prior_low is None:
        return False, None

    bar = data.iloc[-1]
    is_sweep = bar['low'] < prior_low and bar['close'] > prior_low
    return bool(is_sweep), prior_low


def detect_bearish_sweep(data: pd.DataFrame,
                         lookback: int = 20,
                         atr_multiplier: float = 0.5,
                         atr_length: int = 14) -> Tuple[bool, Optional[float]]:
    """
    Bearish sweep of the prior lookback high on the last bar.

    Mirror of detect_bullish_sweep: the bar trades above the highest high of
    the previous `lookback` bars and closes back below it.
    """
    _check_lookback_args(lookback, atr_multiplier, atr_length)

    prior_high = _prior_extreme(data, lookback, PivotKind.HIGH)
    if prior_high is None:
        return False, None

    bar = data.iloc[-1]
    is_sweep = bar['high'] > prior_high and bar['close'] < prior_high
    return bool(is_sweep), prior_high


def detect_lookback_sweep(data: pd.DataFrame,
                          lookback: int = 20,
                          atr_multiplier: float = 0.5,
                          atr_length: int = 14) -> SweepResult:
    """Both lookback directions on the last bar."""
    bullish, prior_low = detect_bullish_sweep(data, lookback, atr_multiplier, atr_length)
    bearish, prior_high = detect_bearish_sweep(data, lookback, atr_multiplier, atr_length)
    return _build_result(bullish, bearish, prior_low, prior_high)


# ============================================================================
# PIVOT METHOD
# ============================================================================

def detect_pivot_based_sweep(data: pd.DataFrame,
                             left_bars: int = 10,
                             right_bars: int = 5,
                             sweep_threshold: float = 0.001) -> SweepResult:
    """
    Sweep of the most recent confirmed pivot on the last bar.

    Pivots are taken from the bars before the current one. A bullish sweep
    needs low < pivot_low * (1 - sweep_threshold) and close > pivot_low; a
    bearish sweep needs high > pivot_high * (1 + sweep_threshold) and
    close < pivot_high. The two reference different pivots, so both may fire.

    Args:
        data: OHLC DataFrame, last row is the current bar
        left_bars: Bars left of a pivot
        right_bars: Bars right of a pivot (confirmation lag)
        sweep_threshold: Fractional breach required, e.g. 0.001 = 0.1%

    Returns:
        SweepResult; all False with no levels before the first pivot
    """
    if not 0 <= sweep_threshold < 1:
        raise InvalidConfiguration('sweep_threshold', f"must be in [0, 1), got {sweep_threshold!r}")

    if len(data) < 2:
        return SweepResult()

    history = data.iloc[:-1]
    pivot_low = latest_pivot(history, left_bars, right_bars, PivotKind.LOW)
    pivot_high = latest_pivot(history, left_bars, right_bars, PivotKind.HIGH)

    bar = data.iloc[-1]
    bullish = False
    bearish = False

    if pivot_low is not None:
        bullish = bar['low'] < pivot_low.price * (1 - sweep_threshold) and bar['close'] > pivot_low.price
    if pivot_high is not None:
        bearish = bar['high'] > pivot_high.price * (1 + sweep_threshold) and bar['close'] < pivot_high.price

    return _build_result(
        bullish, bearish,
        pivot_low.price if pivot_low else None,
        pivot_high.price if pivot_high else None
    )


def detect_sweeps(data: pd.DataFrame, config: Optional[SweepConfig] = None) -> SweepResult:
    """Run the configured detection method on the last bar."""
    config = config or SweepConfig()

    if config.detection_method is DetectionMethod.LOOKBACK:
        return detect_lookback_sweep(
            data, config.lookback, config.detection_atr_multiplier, config.atr_length
        )
    return detect_pivot_based_sweep(
        data, config.left_bars, config.right_bars, config.sweep_threshold
    )


def sweep_frame(data: pd.DataFrame, config: Optional[SweepConfig] = None) -> pd.DataFrame:
    """
    Vectorised detection over a whole history.

    Row t holds what detect_sweeps would report given only rows 0..t, so the
    frame can be replayed bar by bar without lookahead.

    Returns:
        DataFrame with bullish_sweep, bearish_sweep, sweep_level,
        bullish_level, bearish_level and atr columns
    """
    config = config or SweepConfig()

    if config.detection_method is DetectionMethod.LOOKBACK:
        bullish_level = rolling_extreme_series(data, config.lookback, PivotKind.LOW).values.shift(1)
        bearish_level = rolling_extreme_series(data, config.lookback, PivotKind.HIGH).values.shift(1)
        bullish = (data['low'] < bullish_level) & (data['close'] > bullish_level)
        bearish = (data['high'] > bearish_level) & (data['close'] < bearish_level)
    else:
        threshold = config.sweep_threshold
        bullish_level = last_confirmed_pivot_series(
            data, config.left_bars, config.right_bars, PivotKind.LOW).shift(1)
        bearish_level = last_confirmed_pivot_series(
            data, config.left_bars, config.right_bars, PivotKind.HIGH).shift(1)
        bullish = (data['low'] < bullish_level * (1 - threshold)) & (data['close'] > bullish_level)
        bearish = (data['high'] > bearish_level * (1 + threshold)) & (data['close'] < bearish_level)

    sweep_level = pd.Series(np.nan, index=data.index)
    sweep_level = sweep_level.where(~bearish, bearish_level)
    sweep_level = sweep_level.where(~bullish, bullish_level)

    return pd.DataFrame({
        'bullish_sweep': bullish.astype(bool),
        'bearish_sweep': bearish.astype(bool),
        'sweep_level': sweep_level,
        'bullish_level': bullish_level,
        'bearish_level': bearish_level,
        'atr': atr(data, config.atr_length, config.atr_method.value).values
    }, index=data.index)


# ============================================================================
# STREAMING DETECTOR
# ============================================================================

class LiquiditySweepDetector:
    """
    Bar-by-bar sweep detector for live feeds.

    Keeps a bounded buffer of recent bars and tracks the latest confirmed
    pivots incrementally, so a pivot stays in force after its bars have
    left the buffer. Each update only sees bars up to the one supplied.
    """

    def __init__(self,
                 config: Optional[SweepConfig] = None,
                 max_bars: int = 1000,
                 history_size: int = 100):
        """
        Initialize detector.

        Args:
            config: Detection parameters
            max_bars: Size of the bar buffer
            history_size: Sweep events kept in sweeps_history
        """
        self.config = config or SweepConfig()
        needed = max(self.config.lookback + 1,
                     self.config.left_bars + self.config.right_bars + 1,
                     self.config.atr_length + 1)
        self.max_bars = max(max_bars, needed)

        self.bars: deque = deque(maxlen=self.max_bars)
        self.bars_seen = 0
        self.last_pivot_low: Optional[Pivot] = None
        self.last_pivot_high: Optional[Pivot] = None
        self.last_atr: float = np.nan
        self.last_result = SweepResult()
        self.sweeps_history: deque = deque(maxlen=history_size)

    def frame(self) -> pd.DataFrame:
        """Buffered bars as an OHLCV frame."""
        return bars_to_frame(self.bars)

    def _lookback_result(self, history: pd.DataFrame, bar: Bar) -> SweepResult:
        lookback = self.config.lookback
        if len(history) < lookback:
            return SweepResult()
        prior_low = rolling_extreme(history, lookback, PivotKind.LOW)
        prior_high = rolling_extreme(history, lookback, PivotKind.HIGH)
        bullish = bar.low < prior_low and bar.close > prior_low
        bearish = bar.high > prior_high and bar.close < prior_high
        return _build_result(bullish, bearish, prior_low, prior_high)

    def _pivot_result(self, bar: Bar) -> SweepResult:
        threshold = self.config.sweep_threshold
        pl = self.last_pivot_low
        ph = self.last_pivot_high
        bullish = pl is not None and bar.low < pl.price * (1 - threshold) and bar.close > pl.price
        bearish = ph is not None and bar.high > ph.price * (1 + threshold) and bar.close < ph.price
        return _build_result(bullish, bearish,
                             pl.price if pl else None,
                             ph.price if ph else None)

    def _confirm_pivots(self, frame: pd.DataFrame) -> None:
        """Confirm the candidate right_bars behind the newest bar."""
        left, right = self.config.left_bars, self.config.right_bars
        offset = self.bars_seen - len(frame)

        for kind in (PivotKind.LOW, PivotKind.HIGH):
            pivot = confirmed_pivot(frame, -1 - right, left, right, kind)
            if pivot is None:
                continue
            pivot = replace(pivot, index=pivot.index + offset)
            if kind is PivotKind.LOW:
                self.last_pivot_low = pivot
            else:
                self.last_pivot_high = pivot
            logger.debug(f"Pivot {kind.value} confirmed at bar {pivot.index} @ {pivot.price}")

    def update(self, bar: BarLike) -> SweepResult:
        """
        Feed the next bar and return the sweep result for it.

        Args:
            bar: Bar, mapping or pandas row with open/high/low/close

        Returns:
            SweepResult for this bar
        """
        bar = coerce_bar(bar)
        bar_index = self.bars_seen

        if self.config.detection_method is DetectionMethod.LOOKBACK:
            result = self._lookback_result(self.frame(), bar)
        else:
            result = self._pivot_result(bar)

        self.bars.append(bar)
        self.bars_seen += 1

        frame = self.frame()
        self._confirm_pivots(frame)
        try:
            self.last_atr = atr_value(frame, self.config.atr_length, self.config.atr_method.value)
        except InsufficientHistory:
            self.last_atr = np.nan

        for event in result.events(bar_index, bar.timestamp):
            self.sweeps_history.append(event)
            logger.info(f"{event.direction.value} sweep of {event.swept_level} at bar {bar_index}")

        self.last_result = result
        return result

    def reset(self) -> None:
        """Forget all bars, pivots and sweeps."""
        self.bars.clear()
        self.bars_seen = 0
        self.last_pivot_low = None
        self.last_pivot_high = None
        self.last_atr = np.nan
        self.last_result = SweepResult()
        self.sweeps_history.clear()


# Export all classes
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
