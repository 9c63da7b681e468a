"""
LiqSweep Indicator Adapter
==========================
Chart annotation and alert output for liquidity sweeps.
"""

from typing import Any, Dict, List, Optional
import pandas as pd
import numpy as np
import logging

from ..config.sweep_config import SweepConfig
from ..data.validator import validate_ohlc_frame
from ..indicators.technical import PivotKind, pivot_points
from ..liquidity.liquidity_sweeps import sweep_frame

logger = logging.getLogger(__name__)


class SweepIndicator:
    """
    Annotates an OHLC history with sweeps, pivots, ATR and the risk levels
    a trade entered at each sweep bar's close would use.

    pivot_low / pivot_high mark the pivot bars themselves, so they only
    appear right_bars after the fact on a live chart. The sweep columns are
    causal.
    """

    def __init__(self, config: Optional[SweepConfig] = None):
        self.config = config or SweepConfig()

    def compute(self, data: pd.DataFrame) -> pd.DataFrame:
        """
        Build the annotation frame.

        Args:
            data: OHLC DataFrame

        Returns:
            DataFrame aligned with `data` with sweep flags and levels,
            direction, pivot_low, pivot_high, atr, stop_loss and take_profit
        """
        data = validate_ohlc_frame(data)
        config = self.config
        frame = sweep_frame(data, config)

        left, right = config.left_bars, config.right_bars
        frame['pivot_low'] = data['low'].where(pivot_points(data, left, right, PivotKind.LOW))
        frame['pivot_high'] = data['high'].where(pivot_points(data, left, right, PivotKind.HIGH))

        bullish = frame['bullish_sweep']
        bearish = frame['bearish_sweep'] & ~bullish
        frame['direction'] = np.where(bullish, 'bullish', np.where(bearish, 'bearish', ''))

        offset = config.stop_atr_multiplier * frame['atr']
        stop = pd.Series(np.nan, index=data.index)
        stop = stop.where(~bullish, frame['sweep_level'] - offset)
        stop = stop.where(~bearish, frame['sweep_level'] + offset)
        frame['stop_loss'] = stop
        # Target keeps the sign of the entry-to-stop distance
        frame['take_profit'] = data['close'] + (data['close'] - stop) * config.risk_reward_ratio

        logger.debug(
            f"Annotated {len(frame)} bars: {int(bullish.sum())} bullish, "
            f"{int(frame['bearish_sweep'].sum())} bearish sweeps"
        )
        return frame

    def alerts(self, data: pd.DataFrame) -> List[Dict[str, Any]]:
        """One alert dict per sweep bar, oldest first."""
        frame = self.compute(data)
        alerts = []

        for timestamp, row in frame[frame['bullish_sweep'] | frame['bearish_sweep']].iterrows():
            for direction in ('bullish', 'bearish'):
                if not row[f'{direction}_sweep']:
                    continue
                alerts.append({
                    'timestamp': timestamp,
                    'direction': direction,
                    'level': float(row[f'{direction}_level']),
                    'close': float(data.loc[timestamp, 'close']),
                    'atr': None if pd.isna(row['atr']) else float(row['atr']),
                    'stop_loss': None if row['direction'] != direction or pd.isna(row['stop_loss'])
                    else float(row['stop_loss']),
                    'take_profit': None if row['direction'] != direction or pd.isna(row['take_profit'])
                    else float(row['take_profit']),
                    'message': f"{direction.capitalize()} liquidity sweep of {row[f'{direction}_level']:.5f}"
                })

        return alerts


__all__ = ['SweepIndicator']
