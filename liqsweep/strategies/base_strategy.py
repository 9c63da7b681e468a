"""
LiqSweep Strategy Engine - Base Strategy Module
===============================================
Abstract base class for bar-driven strategies.
Provides the signal, position and trade records plus a causal backtest
loop shared by live streaming and historical replay.

Position sizing is out of scope: every entry trades the fixed quantity
from BacktestSettings.

Author: LiqSweep Team
Version: 1.0.0
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Callable, Any
from collections import deque
import pandas as pd
import numpy as np
import logging

from ..config.sweep_config import BacktestSettings
from ..data.bars import Bar, BarLike, coerce_bar
from ..data.validator import validate_ohlc_frame

logger = logging.getLogger(__name__)


class SignalType(Enum):
    """Trade signal types."""
    BUY = 1
    SELL = -1
    HOLD = 0
    CLOSE = 2
    MODIFY = 3


@dataclass
class Signal:
    """Trade signal data structure."""
    timestamp: Any
    symbol: str
    signal_type: SignalType
    price: float
    confidence: float = 0.5
    metadata: Dict[str, Any] = field(default_factory=dict)
    strategy_name: str = ""
    timeframe: str = "4h"

    def __post_init__(self):
        if not 0 <= self.confidence <= 1:
            raise ValueError("Confidence must be between 0 and 1")

    def is_valid(self) -> bool:
        """Check if signal is actionable."""
        return self.signal_type != SignalType.HOLD and self.confidence > 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert signal to dictionary."""
        return {
            'timestamp': self.timestamp,
            'symbol': self.symbol,
            'signal_type': self.signal_type.name,
            'price': self.price,
            'confidence': self.confidence,
            'metadata': self.metadata,
            'strategy_name': self.strategy_name,
            'timeframe': self.timeframe
        }


@dataclass
class Position:
    """Position tracking data structure."""
    symbol: str
    side: SignalType  # BUY (long) or SELL (short)
    entry_price: float
    size: float
    entry_time: Any
    stop_loss: Optional[float] = None
    take_profit: Optional[float] = None
    unrealized_pnl: float = 0.0
    realized_pnl: float = 0.0
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def is_long(self) -> bool:
        return self.side == SignalType.BUY

    @property
    def is_short(self) -> bool:
        return self.side == SignalType.SELL

    def update_unrealized_pnl(self, current_price: float) -> float:
        """Update and return unrealized PnL."""
        if self.is_long:
            self.unrealized_pnl = (current_price - self.entry_price) * self.size
        else:
            self.unrealized_pnl = (self.entry_price - current_price) * self.size
        return self.unrealized_pnl

    def close_position(self, exit_price: float) -> float:
        """Close position and return realized PnL."""
        pnl = self.update_unrealized_pnl(exit_price)
        self.realized_pnl = pnl
        return pnl


def _hours_between(start: Any, end: Any) -> float:
    try:
        return (pd.Timestamp(end) - pd.Timestamp(start)).total_seconds() / 3600
    except (TypeError, ValueError):
        return 0.0


@dataclass
class Trade:
    """Completed trade record."""
    entry_signal: Signal
    exit_signal: Signal
    position: Position
    pnl: float
    pnl_pct: float
    duration: float  # in hours
    exit_reason: str = ""
    commission: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            'entry_time': self.entry_signal.timestamp,
            'exit_time': self.exit_signal.timestamp,
            'symbol': self.position.symbol,
            'side': self.position.side.name,
            'entry_price': self.position.entry_price,
            'exit_price': self.exit_signal.price,
            'size': self.position.size,
            'stop_loss': self.position.stop_loss,
            'take_profit': self.position.take_profit,
            'pnl': self.pnl,
            'pnl_pct': self.pnl_pct,
            'commission': self.commission,
            'duration_hours': self.duration,
            'exit_reason': self.exit_reason
        }


@dataclass
class BacktestResult:
    """Backtest results container."""
    strategy_name: str
    trades: List[Trade] = field(default_factory=list)
    equity_curve: pd.Series = field(default_factory=lambda: pd.Series(dtype=float))
    signals: List[Signal] = field(default_factory=list)
    periods_per_year: int = 252

    # Performance metrics
    total_return: float = 0.0
    sharpe_ratio: float = 0.0
    max_drawdown: float = 0.0
    win_rate: float = 0.0
    profit_factor: float = 0.0
    avg_trade: float = 0.0
    total_trades: int = 0
    winning_trades: int = 0
    losing_trades: int = 0

    def calculate_metrics(self) -> Dict[str, float]:
        """Calculate all performance metrics."""
        if len(self.equity_curve) > 1:
            returns = self.equity_curve.pct_change().dropna()
            std = returns.std()
            self.sharpe_ratio = float(np.sqrt(self.periods_per_year) * returns.mean() / std) \
                if std > 0 else 0.0

            cummax = self.equity_curve.cummax()
            drawdown = (self.equity_curve - cummax) / cummax
            self.max_drawdown = float(drawdown.min())

            first = self.equity_curve.iloc[0]
            self.total_return = float(self.equity_curve.iloc[-1] / first - 1) if first > 0 else 0.0

        if not self.trades:
            return self.metrics()

        self.total_trades = len(self.trades)
        pnls = [t.pnl for t in self.trades]

        self.winning_trades = sum(1 for p in pnls if p > 0)
        self.losing_trades = sum(1 for p in pnls if p < 0)
        self.win_rate = self.winning_trades / self.total_trades

        gross_profit = sum(p for p in pnls if p > 0)
        gross_loss = abs(sum(p for p in pnls if p < 0))
        self.profit_factor = gross_profit / gross_loss if gross_loss > 0 else float('inf')

        self.avg_trade = float(np.mean(pnls))

        return self.metrics()

    def metrics(self) -> Dict[str, float]:
        return {
            'total_return': self.total_return,
            'sharpe_ratio': self.sharpe_ratio,
            'max_drawdown': self.max_drawdown,
            'win_rate': self.win_rate,
            'profit_factor': self.profit_factor,
            'avg_trade': self.avg_trade,
            'total_trades': self.total_trades,
            'winning_trades': self.winning_trades,
            'losing_trades': self.losing_trades
        }

    def to_dataframe(self) -> pd.DataFrame:
        """Convert trades to DataFrame."""
        if not self.trades:
            return pd.DataFrame()
        return pd.DataFrame([t.to_dict() for t in self.trades])


class BaseStrategy(ABC):
    """
    Abstract base class for bar-driven strategies.

    Subclasses turn each bar into signals; this class executes them against
    a single position, keeps the trade log and runs backtests. Live feeds
    call on_bar directly; backtest() replays a frame through the same path.
    """

    def __init__(self,
                 name: str,
                 params: Optional[Dict[str, Any]] = None,
                 settings: Optional[BacktestSettings] = None):
        """
        Initialize strategy.

        Args:
            name: Strategy identifier
            params: Strategy parameters dictionary
            settings: Symbol, quantity, capital and cost settings
        """
        self.name = name
        self.params = params or {}
        self.settings = settings or BacktestSettings()

        # State tracking
        self.is_initialized = False
        self.current_position: Optional[Position] = None
        self.entry_signal: Optional[Signal] = None
        self.signals_history: List[Signal] = []
        self.trades_history: List[Trade] = []
        self.data_buffer: deque = deque(maxlen=1000)
        self.slippage = self.settings.slippage

        self.initial_capital: float = self.settings.initial_capital
        self.equity: float = self.initial_capital

        # Callbacks
        self.on_signal_callbacks: List[Callable[[Signal], None]] = []
        self.on_trade_callbacks: List[Callable[[Trade], None]] = []

        logger.info(f"Strategy '{name}' initialized")

    def initialize(self, data: pd.DataFrame) -> pd.DataFrame:
        """Validate historical data and precompute indicators on it."""
        data = validate_ohlc_frame(data)
        self._precompute_indicators(data)
        self.is_initialized = True
        logger.info(f"Strategy '{self.name}' initialized with {len(data)} data points")
        return data

    @abstractmethod
    def _precompute_indicators(self, data: pd.DataFrame) -> None:
        """Precompute indicators for a backtest. Override in subclass."""
        pass

    @abstractmethod
    def generate_signals(self, bar: Bar) -> List[Signal]:
        """
        Generate signals for the bar just closed.

        Args:
            bar: Latest bar; earlier bars were passed on previous calls

        Returns:
            Signals in execution order, possibly empty
        """
        pass

    def on_bar(self, bar: BarLike) -> List[Signal]:
        """
        Process new bar data.

        Args:
            bar: Single bar of OHLC data

        Returns:
            Signals that were executed on this bar
        """
        bar = coerce_bar(bar)
        self.data_buffer.append(bar)

        executed = []
        for signal in self.generate_signals(bar):
            if not signal.is_valid():
                continue
            self._execute(signal)
            self.signals_history.append(signal)
            self._notify_signal(signal)
            executed.append(signal)

        return executed

    def add_signal_callback(self, callback: Callable[[Signal], None]) -> None:
        """Add callback for signal events."""
        self.on_signal_callbacks.append(callback)

    def add_trade_callback(self, callback: Callable[[Trade], None]) -> None:
        """Add callback for trade events."""
        self.on_trade_callbacks.append(callback)

    def _notify_signal(self, signal: Signal) -> None:
        """Notify signal callbacks."""
        for callback in self.on_signal_callbacks:
            try:
                callback(signal)
            except Exception as e:
                logger.error(f"Signal callback error: {e}")

    def _notify_trade(self, trade: Trade) -> None:
        """Notify trade callbacks."""
        for callback in self.on_trade_callbacks:
            try:
                callback(trade)
            except Exception as e:
                logger.error(f"Trade callback error: {e}")

    def _execute(self, signal: Signal) -> None:
        if signal.signal_type in (SignalType.BUY, SignalType.SELL):
            if self.current_position is not None:
                logger.warning(f"Entry ignored, position already open: {signal.to_dict()}")
                return
            self.enter_position(signal)
        elif signal.signal_type == SignalType.CLOSE:
            self.exit_position(signal, signal.metadata.get('reason', 'signal'))
        elif signal.signal_type == SignalType.MODIFY and self.current_position is not None:
            self.current_position.stop_loss = signal.metadata.get(
                'stop_loss', self.current_position.stop_loss
            )

    def enter_position(self, signal: Signal, size: Optional[float] = None) -> Position:
        """
        Enter a new position.

        Args:
            signal: Entry signal
            size: Position size (settings quantity if None)

        Returns:
            Position object
        """
        if size is None:
            size = self.settings.quantity

        price = signal.price
        if self.slippage:
            price *= (1 + self.slippage) if signal.signal_type == SignalType.BUY else (1 - self.slippage)

        position = Position(
            symbol=signal.symbol,
            side=signal.signal_type,
            entry_price=price,
            size=size,
            entry_time=signal.timestamp,
            stop_loss=signal.metadata.get('stop_loss'),
            take_profit=signal.metadata.get('take_profit'),
            metadata=signal.metadata
        )

        self.current_position = position
        self.entry_signal = signal
        logger.info(f"Entered {signal.signal_type.name} position: {size} @ {price}")

        return position

    def exit_position(self,
                      signal: Signal,
                      reason: str = "signal") -> Optional[Trade]:
        """
        Exit current position.

        Args:
            signal: Exit signal
            reason: Exit reason

        Returns:
            Trade record if position existed, None otherwise
        """
        if self.current_position is None:
            return None

        position = self.current_position
        exit_price = signal.price
        if self.slippage:
            exit_price *= (1 - self.slippage) if position.is_long else (1 + self.slippage)

        pnl = position.close_position(exit_price)
        commission = (position.entry_price + exit_price) * position.size * self.settings.commission
        pnl -= commission

        invested = position.entry_price * position.size
        pnl_pct = (pnl / invested) * 100 if invested > 0 else 0

        trade = Trade(
            entry_signal=self.entry_signal or signal,
            exit_signal=signal,
            position=position,
            pnl=pnl,
            pnl_pct=pnl_pct,
            duration=_hours_between(position.entry_time, signal.timestamp),
            exit_reason=reason,
            commission=commission
        )

        self.trades_history.append(trade)
        self.equity += pnl
        self.current_position = None
        self.entry_signal = None

        self._notify_trade(trade)
        logger.info(f"Exited position: PnL={pnl:.2f} ({pnl_pct:.2f}%), Reason={reason}")

        return trade

    def close_open_position(self, bar: Bar, reason: str) -> Signal:
        """Flatten at the bar's close outside the signal flow."""
        signal = Signal(
            timestamp=bar.timestamp,
            symbol=self.settings.symbol,
            signal_type=SignalType.CLOSE,
            price=bar.close,
            confidence=1.0,
            metadata={'reason': reason},
            strategy_name=self.name,
            timeframe=self.settings.timeframe
        )
        self.exit_position(signal, reason)
        return signal

    def backtest(self,
                 data: pd.DataFrame,
                 periods_per_year: int = 252) -> BacktestResult:
        """
        Run backtest on historical data.

        Bars are replayed in order through on_bar, so the backtest sees
        exactly what a live feed would.

        Args:
            data: OHLC DataFrame with a chronological index
            periods_per_year: Bars per year for Sharpe annualisation

        Returns:
            BacktestResult with performance metrics
        """
        self.reset()
        data = self.initialize(data)

        result = BacktestResult(strategy_name=self.name, periods_per_year=periods_per_year)
        equity_curve = []

        for timestamp, row in data.iterrows():
            bar = coerce_bar(row, timestamp=timestamp)
            result.signals.extend(self.on_bar(bar))

            current_equity = self.equity
            if self.current_position is not None:
                current_equity += self.current_position.update_unrealized_pnl(bar.close)
            equity_curve.append(current_equity)

        if self.current_position is not None and len(data) > 0:
            last = coerce_bar(data.iloc[-1], timestamp=data.index[-1])
            final_signal = self.close_open_position(last, "end_of_data")
            result.signals.append(final_signal)
            equity_curve[-1] = self.equity

        result.trades = list(self.trades_history)
        result.equity_curve = pd.Series(equity_curve, index=data.index, dtype=float)
        result.calculate_metrics()

        logger.info(f"Backtest complete: {result.total_trades} trades, Return: {result.total_return:.2%}")

        return result

    def get_stats(self) -> Dict[str, Any]:
        """Get strategy statistics."""
        return {
            'name': self.name,
            'total_signals': len(self.signals_history),
            'total_trades': len(self.trades_history),
            'current_position': self.current_position is not None,
            'equity': self.equity,
            'is_initialized': self.is_initialized
        }

    def reset(self) -> None:
        """Reset strategy state."""
        self.is_initialized = False
        self.current_position = None
        self.entry_signal = None
        self.signals_history = []
        self.trades_history = []
        self.data_buffer.clear()
        self.equity = self.initial_capital
        logger.info(f"Strategy '{self.name}' reset")

    def to_dict(self) -> Dict[str, Any]:
        """Serialize strategy to dictionary."""
        return {
            'name': self.name,
            'params': self.params,
            'stats': self.get_stats()
        }


# Export all classes
__all__ = [
    'SignalType', 'Signal', 'Position', 'Trade', 'BacktestResult', 'BaseStrategy'
]
