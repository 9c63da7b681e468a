"""
LiqSweep Bar Model
==================
Immutable OHLC bar record and conversions to and from pandas frames.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Iterable, List, Mapping, Union
import pandas as pd

from ..exceptions import DataValidationError

OHLC_COLUMNS = ['open', 'high', 'low', 'close']


@dataclass(frozen=True)
class Bar:
    """One OHLC bar."""
    timestamp: Any
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


BarLike = Union[Bar, Mapping[str, Any], pd.Series]


def coerce_bar(bar: BarLike, timestamp: Any = None) -> Bar:
    """
    Build a Bar from a Bar, a mapping or a pandas row.

    A pandas row without a 'timestamp' field uses its name (the frame index).
    """
    if isinstance(bar, Bar):
        return bar

    if isinstance(bar, pd.Series):
        fields = bar.to_dict()
        if timestamp is None:
            timestamp = fields.get('timestamp', bar.name)
    elif isinstance(bar, Mapping):
        fields = dict(bar)
        if timestamp is None:
            timestamp = fields.get('timestamp')
    else:
        raise DataValidationError(f"Cannot build a bar from {type(bar).__name__}")

    missing = [col for col in OHLC_COLUMNS if col not in fields]
    if missing:
        raise DataValidationError(f"Bar is missing fields: {missing}")

    return Bar(
        timestamp=timestamp,
        open=float(fields['open']),
        high=float(fields['high']),
        low=float(fields['low']),
        close=float(fields['close']),
        volume=float(fields.get('volume', 0.0) or 0.0)
    )


def bars_to_frame(bars: Iterable[BarLike]) -> pd.DataFrame:
    """Chronological OHLCV frame indexed by bar timestamp."""
    rows = [coerce_bar(b).to_dict() for b in bars]
    if not rows:
        return pd.DataFrame(columns=OHLC_COLUMNS + ['volume'])
    frame = pd.DataFrame(rows)
    return frame.set_index('timestamp')


def frame_to_bars(data: pd.DataFrame) -> List[Bar]:
    """Bars in frame order, timestamps taken from the index."""
    return [coerce_bar(row, timestamp=ts) for ts, row in data.iterrows()]


__all__ = ['OHLC_COLUMNS', 'Bar', 'BarLike', 'coerce_bar', 'bars_to_frame', 'frame_to_bars']
