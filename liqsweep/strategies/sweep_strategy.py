"""
LiqSweep Strategy Adapter
=========================
Liquidity sweep reversal strategy on top of BaseStrategy.

Sweep detection feeds the SignalSequencer; sequencer decisions become
BUY / SELL / CLOSE / MODIFY signals for the execution layer.

Author: LiqSweep Team
Version: 1.0.0
"""

from typing import Dict, Any, Optional, List
import pandas as pd
import numpy as np
import logging

from .base_strategy import BaseStrategy, Signal, SignalType
from ..config.sweep_config import SweepConfig, BacktestSettings
from ..data.bars import Bar
from ..engine.signal_sequencer import SignalSequencer, SequencerAction, SequencerDecision
from ..liquidity.liquidity_sweeps import LiquiditySweepDetector, SweepResult, sweep_frame

logger = logging.getLogger(__name__)

_SIGNAL_TYPES = {
    SequencerAction.ENTER_LONG: SignalType.BUY,
    SequencerAction.ENTER_SHORT: SignalType.SELL,
    SequencerAction.EXIT: SignalType.CLOSE,
    SequencerAction.UPDATE_STOP: SignalType.MODIFY,
}


def _optional_float(value: Any) -> Optional[float]:
    if value is None or pd.isna(value):
        return None
    return float(value)


class LiquiditySweepStrategy(BaseStrategy):
    """
    Trading strategy based on liquidity sweeps.

    Enters on a sweep of a prior low (long) or high (short), optionally
    after a one-bar confirmation, with an ATR stop beyond the swept level
    and a take-profit at a fixed risk:reward.

    During backtest() detection is precomputed with sweep_frame and replayed
    bar by bar; live on_bar() calls use the streaming detector. Both paths
    produce the same sweeps for the same bars. Replayed bars are fed to the
    detector as well, so live bars after a backtest continue from its history.
    """

    def __init__(self,
                 config: Optional[SweepConfig] = None,
                 settings: Optional[BacktestSettings] = None,
                 name: str = "Liquidity_Sweep"):
        self.config = config or SweepConfig()
        super().__init__(name, self.config.to_dict(), settings)

        self.detector = LiquiditySweepDetector(self.config)
        self.sequencer = SignalSequencer(self.config)
        self.decisions: List[SequencerDecision] = []

        self._precomputed: Optional[pd.DataFrame] = None
        self._replay_index = 0

    def _precompute_indicators(self, data: pd.DataFrame) -> None:
        """Precompute sweeps and ATR for replay."""
        self._precomputed = sweep_frame(data, self.config)
        self._replay_index = 0
        sweeps = int(self._precomputed['bullish_sweep'].sum() + self._precomputed['bearish_sweep'].sum())
        logger.info(f"Precomputed {sweeps} sweeps over {len(data)} bars for {self.name}")

    def _next_detection(self, bar: Bar):
        frame = self._precomputed
        if frame is not None and self._replay_index < len(frame):
            row = frame.iloc[self._replay_index]
            self._replay_index += 1
            self.detector.update(bar)
            if self._replay_index == len(frame):
                self._precomputed = None
            result = SweepResult(
                bullish_sweep=bool(row['bullish_sweep']),
                bearish_sweep=bool(row['bearish_sweep']),
                sweep_level=_optional_float(row['sweep_level']),
                bullish_level=_optional_float(row['bullish_level']),
                bearish_level=_optional_float(row['bearish_level'])
            )
            return result, row['atr']

        result = self.detector.update(bar)
        return result, self.detector.last_atr

    def generate_signals(self, bar: Bar) -> List[Signal]:
        """Run detection and the sequencer on the bar, translating decisions."""
        result, atr_val = self._next_detection(bar)
        decisions = self.sequencer.on_bar(bar, result, atr_val)
        self.decisions.extend(decisions)
        return [self._to_signal(d, atr_val) for d in decisions]

    def _to_signal(self, decision: SequencerDecision, atr_val: float) -> Signal:
        if decision.is_entry:
            trade = self.sequencer.trade
            confidence = 0.85 if trade.sweep.confirmed else 0.7
            sweep_level = trade.sweep.swept_level
        else:
            confidence = 1.0
            sweep_level = None

        return Signal(
            timestamp=decision.timestamp,
            symbol=self.settings.symbol,
            signal_type=_SIGNAL_TYPES[decision.action],
            price=decision.price,
            confidence=confidence,
            strategy_name=self.name,
            timeframe=self.settings.timeframe,
            metadata={
                'direction': decision.direction.value,
                'reason': decision.reason,
                'sweep_level': sweep_level,
                'atr': None if atr_val is None or np.isnan(atr_val) else float(atr_val),
                'stop_loss': decision.stop_loss,
                'take_profit': decision.take_profit,
                'bar_index': decision.bar_index,
                'state': decision.state.value
            }
        )

    def close_open_position(self, bar: Bar, reason: str) -> Signal:
        decision = self.sequencer.force_exit(bar, reason)
        if decision is not None:
            self.decisions.append(decision)
        return super().close_open_position(bar, reason)

    def get_stats(self) -> Dict[str, Any]:
        stats = super().get_stats()
        stats.update({
            'state': self.sequencer.state.value,
            'bars_seen': self.sequencer.bar_index + 1,
            'decisions': len(self.decisions)
        })
        return stats

    def reset(self) -> None:
        """Reset strategy, detector and sequencer."""
        super().reset()
        self.detector.reset()
        self.sequencer.reset()
        self.decisions = []
        self._precomputed = None
        self._replay_index = 0


__all__ = ['LiquiditySweepStrategy']
