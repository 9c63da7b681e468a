"""
LiqSweep Signal Sequencer
=========================
Turns per-bar sweep results into entry, exit and stop-update decisions.

One trade at a time moves through:

    IDLE -> SWEEP_DETECTED -> [AWAITING_CONFIRMATION] -> ENTERED
         -> [TRAILING_ACTIVE] -> CLOSED

and the next bar starts again from IDLE. Exits are checked in a fixed
order on every bar after the entry bar: stop-loss, take-profit, then an
opposing sweep. An opposing sweep that closes a trade may open the reverse
trade on the same bar.

Author: LiqSweep Team
Version: 1.0.0
"""

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
import math
import logging

from ..config.sweep_config import SweepConfig
from ..data.bars import Bar, BarLike, coerce_bar
from ..exceptions import InsufficientHistory
from ..liquidity.liquidity_sweeps import SweepDirection, SweepEvent, SweepResult
from ..risk.levels import RiskLevels, compute_risk_levels, trailing_stop

logger = logging.getLogger(__name__)


class TradeState(Enum):
    """Lifecycle of one trade."""
    IDLE = "idle"
    SWEEP_DETECTED = "sweep_detected"
    AWAITING_CONFIRMATION = "awaiting_confirmation"
    ENTERED = "entered"
    TRAILING_ACTIVE = "trailing_active"
    CLOSED = "closed"


class SequencerAction(Enum):
    """Decisions handed to the execution adapter."""
    ENTER_LONG = "enter_long"
    ENTER_SHORT = "enter_short"
    EXIT = "exit"
    UPDATE_STOP = "update_stop"


@dataclass(frozen=True)
class SequencerDecision:
    """One instruction produced on a bar."""
    action: SequencerAction
    bar_index: int
    timestamp: Any
    price: float
    direction: SweepDirection
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    reason: str = ""
    state: TradeState = TradeState.IDLE

    @property
    def is_entry(self) -> bool:
        return self.action in (SequencerAction.ENTER_LONG, SequencerAction.ENTER_SHORT)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'action': self.action.value,
            'bar_index': self.bar_index,
            'timestamp': self.timestamp,
            'price': self.price,
            'direction': self.direction.value,
            'stop_loss': self.stop_loss,
            'take_profit': self.take_profit,
            'reason': self.reason,
            'state': self.state.value
        }


@dataclass
class ActiveTrade:
    """The trade currently owned by the sequencer."""
    sweep: SweepEvent
    entry_index: int
    entry_time: Any
    entry_price: float
    levels: RiskLevels
    initial_stop: float = field(init=False)

    def __post_init__(self):
        self.initial_stop = self.levels.stop_loss

    @property
    def is_long(self) -> bool:
        return self.sweep.is_bullish


class SignalSequencer:
    """
    Per-trade state machine driven one bar at a time.

    The sequencer only reads the bar it is given, the detector result for
    that bar and the ATR known at that bar; it never looks ahead.
    """

    def __init__(self, config: Optional[SweepConfig] = None):
        self.config = config or SweepConfig()
        self.state = TradeState.IDLE
        self.trade: Optional[ActiveTrade] = None
        self.pending: Optional[SweepEvent] = None
        self.pending_close: Optional[float] = None
        self.bar_index = -1
        self.transitions: List[Tuple[int, TradeState, TradeState]] = []

    @property
    def is_flat(self) -> bool:
        return self.trade is None

    def _transition(self, new_state: TradeState) -> None:
        if new_state is self.state:
            return
        self.transitions.append((self.bar_index, self.state, new_state))
        logger.debug(f"Bar {self.bar_index}: {self.state.value} -> {new_state.value}")
        self.state = new_state

    def on_bar(self,
               bar: BarLike,
               sweep: SweepResult,
               atr_value: Optional[float]) -> List[SequencerDecision]:
        """
        Advance the state machine by one bar.

        Args:
            bar: The bar just closed
            sweep: Detector result for this bar
            atr_value: ATR at this bar, None or NaN while warming up

        Returns:
            Decisions in the order they apply on this bar
        """
        bar = coerce_bar(bar)
        self.bar_index += 1
        decisions: List[SequencerDecision] = []

        if self.state is TradeState.CLOSED:
            self._transition(TradeState.IDLE)

        events = sweep.events(self.bar_index, bar.timestamp)

        if self.trade is not None:
            exit_decision = self._check_exits(bar, events)
            if exit_decision is not None:
                decisions.append(exit_decision)
            elif self.config.use_trailing_stop:
                update = self._trail(bar, atr_value)
                if update is not None:
                    decisions.append(update)

        if self.state is TradeState.AWAITING_CONFIRMATION:
            entry = self._confirm(bar, atr_value)
            if entry is not None:
                decisions.append(entry)
                return decisions

        if self.trade is None and events:
            entry = self._on_sweep(bar, events, atr_value)
            if entry is not None:
                decisions.append(entry)

        return decisions

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def _on_sweep(self,
                  bar: Bar,
                  events: List[SweepEvent],
                  atr_value: Optional[float]) -> Optional[SequencerDecision]:
        if len(events) > 1:
            logger.info(f"Bar {self.bar_index}: bullish and bearish sweeps together, no entry")
            return None

        if self.state is TradeState.CLOSED:
            self._transition(TradeState.IDLE)

        event = events[0]
        self._transition(TradeState.SWEEP_DETECTED)

        if self.config.use_confirmation:
            self.pending = event
            self.pending_close = bar.close
            self._transition(TradeState.AWAITING_CONFIRMATION)
            return None

        return self._enter(event, bar, atr_value, reason="sweep")

    def _confirm(self, bar: Bar, atr_value: Optional[float]) -> Optional[SequencerDecision]:
        """Enter if this bar closes in the reversal direction, else drop the sweep."""
        event = self.pending
        sweep_close = self.pending_close
        self.pending = None
        self.pending_close = None

        if event.is_bullish:
            confirmed = bar.close > bar.open and bar.close > sweep_close
        else:
            confirmed = bar.close < bar.open and bar.close < sweep_close

        if not confirmed:
            logger.info(f"Bar {self.bar_index}: {event.direction.value} sweep not confirmed")
            self._transition(TradeState.IDLE)
            return None

        return self._enter(replace(event, confirmed=True), bar, atr_value, reason="confirmed_sweep")

    def _enter(self,
               event: SweepEvent,
               bar: Bar,
               atr_value: Optional[float],
               reason: str) -> Optional[SequencerDecision]:
        entry_price = bar.close
        try:
            levels = compute_risk_levels(
                sweep_price=event.swept_level,
                entry_price=entry_price,
                is_bullish=event.is_bullish,
                atr_multiplier=self.config.stop_atr_multiplier,
                atr_value=atr_value,
                risk_reward_ratio=self.config.risk_reward_ratio
            )
        except InsufficientHistory:
            logger.debug(f"Bar {self.bar_index}: ATR not ready, sweep skipped")
            self._transition(TradeState.IDLE)
            return None

        # Entry must sit on the profit side of its stop
        if (event.is_bullish and entry_price <= levels.stop_loss) or \
                (not event.is_bullish and entry_price >= levels.stop_loss):
            logger.info(
                f"Bar {self.bar_index}: entry {entry_price} beyond stop {levels.stop_loss}, skipped"
            )
            self._transition(TradeState.IDLE)
            return None

        self.trade = ActiveTrade(
            sweep=event,
            entry_index=self.bar_index,
            entry_time=bar.timestamp,
            entry_price=entry_price,
            levels=levels
        )
        self._transition(TradeState.ENTERED)

        action = SequencerAction.ENTER_LONG if event.is_bullish else SequencerAction.ENTER_SHORT
        logger.info(
            f"Bar {self.bar_index}: {action.value} @ {entry_price} "
            f"SL={levels.stop_loss:.5f} TP={levels.take_profit:.5f}"
        )
        return SequencerDecision(
            action=action,
            bar_index=self.bar_index,
            timestamp=bar.timestamp,
            price=entry_price,
            direction=event.direction,
            stop_loss=levels.stop_loss,
            take_profit=levels.take_profit,
            reason=reason,
            state=self.state
        )

    # ------------------------------------------------------------------
    # Open trade management
    # ------------------------------------------------------------------

    def _check_exits(self, bar: Bar, events: List[SweepEvent]) -> Optional[SequencerDecision]:
        trade = self.trade
        stop = trade.levels.stop_loss
        target = trade.levels.take_profit

        if trade.is_long:
            if bar.low <= stop:
                return self._close(bar, min(stop, bar.open), "stop_loss")
            if bar.high >= target:
                return self._close(bar, max(target, bar.open), "take_profit")
        else:
            if bar.high >= stop:
                return self._close(bar, max(stop, bar.open), "stop_loss")
            if bar.low <= target:
                return self._close(bar, min(target, bar.open), "take_profit")

        if any(e.direction is not trade.sweep.direction for e in events):
            return self._close(bar, bar.close, "opposing_sweep")

        return None

    def _trail(self, bar: Bar, atr_value: Optional[float]) -> Optional[SequencerDecision]:
        trade = self.trade
        if atr_value is None or math.isnan(float(atr_value)):
            return None

        old_stop = trade.levels.stop_loss
        new_stop = trailing_stop(
            old_stop, bar.close, trade.is_long,
            self.config.trailing_atr_multiplier, atr_value
        )
        if new_stop == old_stop:
            return None

        trade.levels = replace(trade.levels, stop_loss=new_stop)
        self._transition(TradeState.TRAILING_ACTIVE)
        logger.debug(f"Bar {self.bar_index}: stop trailed {old_stop:.5f} -> {new_stop:.5f}")

        return SequencerDecision(
            action=SequencerAction.UPDATE_STOP,
            bar_index=self.bar_index,
            timestamp=bar.timestamp,
            price=bar.close,
            direction=trade.sweep.direction,
            stop_loss=new_stop,
            take_profit=trade.levels.take_profit,
            reason="trailing_stop",
            state=self.state
        )

    def _close(self, bar: Bar, price: float, reason: str) -> SequencerDecision:
        trade = self.trade
        self.trade = None
        self._transition(TradeState.CLOSED)
        logger.info(f"Bar {self.bar_index}: exit @ {price} ({reason})")

        return SequencerDecision(
            action=SequencerAction.EXIT,
            bar_index=self.bar_index,
            timestamp=bar.timestamp,
            price=price,
            direction=trade.sweep.direction,
            stop_loss=trade.levels.stop_loss,
            take_profit=trade.levels.take_profit,
            reason=reason,
            state=self.state
        )

    def force_exit(self, bar: BarLike, reason: str = "end_of_data") -> Optional[SequencerDecision]:
        """Close the open trade at the bar's close, e.g. at the end of a backtest."""
        if self.trade is None:
            return None
        bar = coerce_bar(bar)
        return self._close(bar, bar.close, reason)

    def reset(self) -> None:
        """Back to IDLE with no trade, pending sweep or history."""
        self.state = TradeState.IDLE
        self.trade = None
        self.pending = None
        self.pending_close = None
        self.bar_index = -1
        self.transitions = []


__all__ = [
    'TradeState',
    'SequencerAction',
    'SequencerDecision',
    'ActiveTrade',
    'SignalSequencer'
]
