"""
LiqSweep Technical Indicators Module
====================================
Rolling extrema, confirmed swing pivots and Average True Range.
Implements the indicators using pandas and numpy.

Every indicator comes in two shapes:
    - a vectorised form over a whole OHLC frame, returning NaN (or False)
      until enough history exists
    - a point form evaluated at the last row of the frame, raising
      InsufficientHistory until enough history exists

Author: LiqSweep Team
Version: 1.0.0
"""

import pandas as pd
import numpy as np
from typing import Optional, Dict, Any, Union
from dataclasses import dataclass
from enum import Enum
import logging

from ..exceptions import InsufficientHistory, InvalidConfiguration

logger = logging.getLogger(__name__)


class PivotKind(Enum):
    """Which side of the bar a pivot or extreme is measured on."""
    HIGH = "high"
    LOW = "low"


@dataclass
class IndicatorResult:
    """Container for indicator results with metadata."""
    values: pd.Series
    name: str
    params: Dict[str, Any]
    timestamp: pd.Index

    def __post_init__(self):
        if len(self.values) != len(self.timestamp):
            raise ValueError("Values and timestamp must have same length")

    def latest(self) -> float:
        """Get latest indicator value."""
        return float(self.values.iloc[-1]) if len(self.values) > 0 else np.nan


@dataclass(frozen=True)
class Pivot:
    """A bar confirmed as a local extreme, right_bars after it printed."""
    index: int
    price: float
    kind: PivotKind
    timestamp: Any = None


def _as_kind(kind: Union[PivotKind, str]) -> PivotKind:
    if isinstance(kind, PivotKind):
        return kind
    try:
        return PivotKind(str(kind).lower())
    except ValueError:
        raise InvalidConfiguration('kind', f"expected 'high' or 'low', got {kind!r}")


def _require_length(value: int, name: str, minimum: int = 1) -> None:
    if int(value) != value or value < minimum:
        raise InvalidConfiguration(name, f"must be an integer >= {minimum}, got {value!r}")


def _price_column(data: pd.DataFrame, kind: PivotKind) -> pd.Series:
    return data['low'] if kind is PivotKind.LOW else data['high']


# ============================================================================
# ROLLING EXTREMA
# ============================================================================

def rolling_extreme(data: pd.DataFrame,
                    window: int,
                    kind: Union[PivotKind, str]) -> float:
    """
    Lowest low or highest high of the last `window` bars, current bar included.

    Args:
        data: DataFrame with 'high' and 'low' columns
        window: Number of bars
        kind: PivotKind.LOW for the lowest low, PivotKind.HIGH for the highest high

    Returns:
        The extreme price

    Raises:
        InsufficientHistory: if fewer than `window` bars exist
    """
    _require_length(window, 'window')
    kind = _as_kind(kind)

    if len(data) < window:
        raise InsufficientHistory(window, len(data), "rolling_extreme")

    tail = _price_column(data, kind).iloc[-window:]
    return float(tail.min() if kind is PivotKind.LOW else tail.max())


def rolling_extreme_series(data: pd.DataFrame,
                           window: int,
                           kind: Union[PivotKind, str]) -> IndicatorResult:
    """
    Vectorised rolling_extreme; NaN for the first window-1 rows.
    """
    _require_length(window, 'window')
    kind = _as_kind(kind)

    rolling = _price_column(data, kind).rolling(window=window, min_periods=window)
    values = rolling.min() if kind is PivotKind.LOW else rolling.max()

    return IndicatorResult(
        values=values,
        name=f"{'LOWEST' if kind is PivotKind.LOW else 'HIGHEST'}_{window}",
        params={'window': window, 'kind': kind.value},
        timestamp=data.index
    )


# ============================================================================
# SWING PIVOTS
# ============================================================================

def confirmed_pivot(data: pd.DataFrame,
                    index: int,
                    left_bars: int,
                    right_bars: int,
                    kind: Union[PivotKind, str]) -> Optional[Pivot]:
    """
    Check whether the bar at `index` is a confirmed pivot.

    A pivot-low's low is <= every low in [index-left_bars, index+right_bars];
    a pivot-high is symmetric on highs. A bar that ties the window extreme
    still qualifies.

    Args:
        data: DataFrame with 'high' and 'low' columns
        index: Positional index of the candidate bar (negative counts from the end)
        left_bars: Bars required before the candidate
        right_bars: Bars required after the candidate (confirmation lag)
        kind: PivotKind.LOW or PivotKind.HIGH

    Returns:
        Pivot if confirmed, None otherwise (including when the neighbourhood
        is not complete yet)
    """
    _require_length(left_bars, 'left_bars', minimum=0)
    _require_length(right_bars, 'right_bars', minimum=0)
    kind = _as_kind(kind)

    n = len(data)
    if index < 0:
        index += n
    if index < 0 or index >= n:
        return None
    if index - left_bars < 0 or index + right_bars > n - 1:
        return None

    column = _price_column(data, kind).to_numpy(dtype=float)
    value = column[index]
    neighbourhood = column[index - left_bars:index + right_bars + 1]
    if np.isnan(neighbourhood).any():
        return None

    extreme = neighbourhood.min() if kind is PivotKind.LOW else neighbourhood.max()
    if value != extreme:
        return None

    return Pivot(index=index, price=float(value), kind=kind, timestamp=data.index[index])


def pivot_points(data: pd.DataFrame,
                 left_bars: int,
                 right_bars: int,
                 kind: Union[PivotKind, str]) -> pd.Series:
    """
    Flag every confirmed pivot bar (retroactive view, flag sits on the pivot bar).

    Returns:
        Boolean series aligned with `data`
    """
    _require_length(left_bars, 'left_bars', minimum=0)
    _require_length(right_bars, 'right_bars', minimum=0)
    kind = _as_kind(kind)

    column = _price_column(data, kind)
    span = left_bars + right_bars + 1
    rolling = column.rolling(window=span, min_periods=span)
    # Rolling value at i+right covers [i-left, i+right]; shift it back onto bar i
    extreme = (rolling.min() if kind is PivotKind.LOW else rolling.max()).shift(-right_bars)

    return (column == extreme).astype(bool)


def last_confirmed_pivot_series(data: pd.DataFrame,
                                left_bars: int,
                                right_bars: int,
                                kind: Union[PivotKind, str]) -> pd.Series:
    """
    Price of the most recent pivot known at each bar (causal view).

    A pivot printed at bar i becomes visible at bar i+right_bars and stays
    in force until the next pivot is confirmed. NaN before the first one.
    """
    kind = _as_kind(kind)
    flags = pivot_points(data, left_bars, right_bars, kind)
    prices = _price_column(data, kind).where(flags)
    return prices.shift(right_bars).ffill()


def latest_pivot(data: pd.DataFrame,
                 left_bars: int,
                 right_bars: int,
                 kind: Union[PivotKind, str]) -> Optional[Pivot]:
    """
    Most recent pivot that the rows of `data` are able to confirm.
    """
    kind = _as_kind(kind)
    flags = pivot_points(data, left_bars, right_bars, kind).to_numpy()
    hits = np.flatnonzero(flags)
    if len(hits) == 0:
        return None

    i = int(hits[-1])
    return Pivot(
        index=i,
        price=float(_price_column(data, kind).iloc[i]),
        kind=kind,
        timestamp=data.index[i]
    )


# ============================================================================
# VOLATILITY INDICATORS
# ============================================================================

def true_range(data: pd.DataFrame) -> pd.Series:
    """
    Per-bar true range. The first bar has no previous close and uses high-low.
    """
    high_low = data['high'] - data['low']
    high_close = np.abs(data['high'] - data['close'].shift())
    low_close = np.abs(data['low'] - data['close'].shift())

    return pd.concat([high_low, high_close, low_close], axis=1).max(axis=1)


def atr(data: pd.DataFrame, period: int = 14, method: str = "sma") -> IndicatorResult:
    """
    Average True Range (ATR).

    Args:
        data: DataFrame with 'high', 'low', 'close' columns
        period: Lookback period
        method: 'sma' for a simple average of true range, 'rma' for Wilder smoothing

    Returns:
        IndicatorResult with ATR values, NaN for the first period-1 rows
    """
    _require_length(period, 'period')
    tr = true_range(data)

    if method == "sma":
        values = tr.rolling(window=period, min_periods=period).mean()
    elif method == "rma":
        values = tr.ewm(alpha=1 / period, min_periods=period).mean()
    else:
        raise InvalidConfiguration('atr_method', f"expected 'sma' or 'rma', got {method!r}")

    return IndicatorResult(
        values=values,
        name=f"ATR_{period}",
        params={'period': period, 'method': method},
        timestamp=data.index
    )


def atr_value(data: pd.DataFrame, period: int = 14, method: str = "sma") -> float:
    """
    ATR at the last bar.

    Raises:
        InsufficientHistory: if fewer than `period` bars exist
    """
    _require_length(period, 'period')
    if len(data) < period:
        raise InsufficientHistory(period, len(data), "atr")

    # A simple average only needs the window plus one previous close
    frame = data.iloc[-(period + 1):] if method == "sma" else data
    return atr(frame, period, method).latest()


__all__ = [
    'PivotKind', 'Pivot', 'IndicatorResult',
    'rolling_extreme', 'rolling_extreme_series',
    'confirmed_pivot', 'pivot_points', 'last_confirmed_pivot_series', 'latest_pivot',
    'true_range', 'atr', 'atr_value'
]
