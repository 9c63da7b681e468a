import numpy as np
import pytest

from liqsweep.config import BacktestSettings, SweepConfig
from liqsweep.engine import TradeState
from liqsweep.strategies import LiquiditySweepStrategy, SignalType, SweepIndicator

ATR_AT_SWEEP = (2 + 2 + 2.5) / 3
STOP = 99 - ATR_AT_SWEEP
TARGET = 100.2 + 2 * (100.2 - STOP)


def _config(**overrides):
    params = dict(
        detection_method="lookback",
        lookback=5,
        atr_length=3,
        stop_atr_multiplier=1.0,
        risk_reward_ratio=2.0,
    )
    params.update(overrides)
    return SweepConfig(**params)


def _strategy(config=None, commission=0.0, slippage=0.0):
    settings = BacktestSettings(symbol="TEST", commission=commission, slippage=slippage)
    return LiquiditySweepStrategy(config or _config(), settings)


def test_backtest_trades_constructed_sweep(sweep_series):
    strategy = _strategy()
    result = strategy.backtest(sweep_series)

    assert [s.signal_type for s in result.signals] == [SignalType.BUY, SignalType.CLOSE]
    assert result.total_trades == 1

    trade = result.trades[0]
    assert trade.position.is_long
    assert trade.position.entry_price == pytest.approx(100.2)
    assert trade.position.stop_loss == pytest.approx(STOP)
    assert trade.exit_signal.price == pytest.approx(TARGET)
    assert trade.exit_reason == "take_profit"
    assert trade.pnl == pytest.approx(TARGET - 100.2)
    assert trade.duration == pytest.approx(8.0)

    assert len(result.equity_curve) == len(sweep_series)
    assert result.equity_curve.iloc[-1] == pytest.approx(100000 + trade.pnl)
    assert result.win_rate == 1.0
    assert result.total_return > 0
    assert strategy.sequencer.state is TradeState.IDLE
    assert strategy.to_dict()["params"]["lookback"] == 5


def test_signal_metadata_carries_levels(sweep_series):
    result = _strategy().backtest(sweep_series)
    entry = result.signals[0]

    assert entry.symbol == "TEST"
    assert entry.timestamp == sweep_series.index[10]
    assert entry.metadata["direction"] == "bullish"
    assert entry.metadata["sweep_level"] == 99
    assert entry.metadata["atr"] == pytest.approx(ATR_AT_SWEEP)
    assert entry.metadata["take_profit"] == pytest.approx(TARGET)


def test_commission_reduces_pnl(sweep_series):
    result = _strategy(commission=0.001).backtest(sweep_series)
    trade = result.trades[0]
    expected_commission = (100.2 + TARGET) * 0.001
    assert trade.commission == pytest.approx(expected_commission)
    assert trade.pnl == pytest.approx(TARGET - 100.2 - expected_commission)


def test_trailing_stop_updates_position(sweep_series):
    strategy = _strategy(_config(use_trailing_stop=True, trailing_atr_multiplier=1.0))
    result = strategy.backtest(sweep_series)

    assert [s.signal_type for s in result.signals] == [
        SignalType.BUY, SignalType.MODIFY, SignalType.CLOSE
    ]
    # ATR of bars 9-11 is 2.5, so the stop trails to 102.5 - 2.5
    assert result.signals[1].metadata["stop_loss"] == pytest.approx(100.0)
    assert result.trades[0].position.stop_loss == pytest.approx(100.0)
    assert result.trades[0].exit_reason == "take_profit"


def test_streaming_matches_backtest(sweep_series):
    backtest = _strategy().backtest(sweep_series)

    live = _strategy()
    trades = []
    live.add_trade_callback(trades.append)
    signals = []
    for _, bar in sweep_series.iterrows():
        signals.extend(live.on_bar(bar))

    assert [s.signal_type for s in signals] == [s.signal_type for s in backtest.signals]
    assert [s.price for s in signals] == pytest.approx([s.price for s in backtest.signals])
    assert len(trades) == 1
    assert trades[0].pnl == pytest.approx(backtest.trades[0].pnl)
    assert live.get_stats()["total_trades"] == 1


def test_live_bars_apply_slippage(sweep_series):
    live = _strategy(slippage=0.01)
    trades = []
    live.add_trade_callback(trades.append)
    for _, bar in sweep_series.iterrows():
        live.on_bar(bar)

    assert len(trades) == 1
    assert trades[0].position.entry_price == pytest.approx(100.2 * 1.01)
    assert trades[0].pnl == pytest.approx(TARGET * 0.99 - 100.2 * 1.01)

    backtest = _strategy(slippage=0.01).backtest(sweep_series)
    assert backtest.trades[0].pnl == pytest.approx(trades[0].pnl)


def test_live_bars_continue_after_backtest(sweep_series):
    full = _strategy().backtest(sweep_series)

    strategy = _strategy()
    warmup = strategy.backtest(sweep_series.iloc[:10])
    assert warmup.total_trades == 0

    signals = []
    for _, bar in sweep_series.iloc[10:].iterrows():
        signals.extend(strategy.on_bar(bar))

    assert [s.signal_type for s in signals] == [s.signal_type for s in full.signals]
    assert [s.price for s in signals] == pytest.approx([s.price for s in full.signals])
    assert signals[0].metadata["sweep_level"] == 99
    assert signals[0].metadata["bar_index"] == 10
    assert strategy.sequencer.bar_index == len(sweep_series) - 1


def test_no_pivots_means_no_trades(sweep_series):
    strategy = LiquiditySweepStrategy(settings=BacktestSettings(commission=0.0))
    result = strategy.backtest(sweep_series)

    assert result.total_trades == 0
    assert result.total_return == 0.0
    assert result.sharpe_ratio == 0.0
    assert result.to_dataframe().empty


def test_open_position_closed_at_end_of_data(sweep_series):
    data = sweep_series.iloc[:12]
    strategy = _strategy()
    result = strategy.backtest(data)

    assert result.total_trades == 1
    assert result.trades[0].exit_reason == "end_of_data"
    assert result.trades[0].exit_signal.price == pytest.approx(102.5)
    assert strategy.current_position is None
    assert strategy.sequencer.is_flat


def test_indicator_annotates_sweep_bar(sweep_series):
    frame = SweepIndicator(_config(left_bars=2, right_bars=2)).compute(sweep_series)

    row = frame.iloc[10]
    assert row["bullish_sweep"]
    assert row["direction"] == "bullish"
    assert row["sweep_level"] == 99
    assert row["stop_loss"] == pytest.approx(STOP)
    assert row["take_profit"] == pytest.approx(TARGET)
    assert row["pivot_low"] == 98

    others = frame.drop(frame.index[10])
    assert not others["bullish_sweep"].any()
    assert others["stop_loss"].isna().all()
    assert (others["direction"] == "").all()


def test_indicator_alerts(sweep_series):
    alerts = SweepIndicator(_config()).alerts(sweep_series)

    assert len(alerts) == 1
    alert = alerts[0]
    assert alert["timestamp"] == sweep_series.index[10]
    assert alert["direction"] == "bullish"
    assert alert["level"] == 99
    assert alert["close"] == pytest.approx(100.2)
    assert alert["stop_loss"] == pytest.approx(STOP)
    assert not np.isnan(alert["atr"])
