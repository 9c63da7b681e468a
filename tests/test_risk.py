import math

import pytest

from liqsweep.exceptions import InsufficientHistory
from liqsweep.risk import (
    compute_risk_levels,
    risk_reward,
    stop_loss,
    take_profit,
    trailing_stop,
)


def test_stop_loss_beyond_swept_level():
    assert stop_loss(100, True, 1.5, 2.0) == pytest.approx(97.0)
    assert stop_loss(100, False, 1.5, 2.0) == pytest.approx(103.0)


@pytest.mark.parametrize("sweep_price,multiplier,atr_value", [
    (8.0, 0.5, 0.1),
    (100.0, 1.5, 2.0),
    (25000.0, 3.0, 450.0),
])
def test_stop_strictly_beyond_sweep_price(sweep_price, multiplier, atr_value):
    assert stop_loss(sweep_price, True, multiplier, atr_value) < sweep_price
    assert stop_loss(sweep_price, False, multiplier, atr_value) > sweep_price


def test_stop_loss_requires_atr():
    with pytest.raises(InsufficientHistory):
        stop_loss(100, True, 1.5, None)
    with pytest.raises(InsufficientHistory):
        stop_loss(100, True, 1.5, float("nan"))


def test_take_profit_infers_direction_from_stop():
    assert take_profit(100, 95, 2.0) == pytest.approx(110.0)
    assert take_profit(100, 105, 2.0) == pytest.approx(90.0)


@pytest.mark.parametrize("entry,stop,ratio", [
    (100, 95, 2.0),
    (100, 105, 2.0),
    (1.0842, 1.0791, 3.5),
    (42000, 42650, 1.25),
])
def test_take_profit_round_trips_risk_reward(entry, stop, ratio):
    target = take_profit(entry, stop, ratio)
    assert risk_reward(entry, stop, target) == pytest.approx(ratio)


def test_risk_reward_without_risk_is_nan():
    assert math.isnan(risk_reward(100, 100, 110))


def test_trailing_stop_never_loosens_on_rising_prices():
    stop = 95.0
    stops = []
    for price in [100, 101, 103, 102.5, 104, 107, 106, 110]:
        stop = trailing_stop(stop, price, True, 2.0, 1.5)
        stops.append(stop)

    assert all(b >= a for a, b in zip(stops, stops[1:]))
    assert stops[-1] == pytest.approx(107.0)


def test_trailing_stop_short_only_moves_down():
    stop = 105.0
    for price in [100, 98, 99, 95]:
        new_stop = trailing_stop(stop, price, False, 2.0, 1.0)
        assert new_stop <= stop
        stop = new_stop
    assert stop == pytest.approx(97.0)


def test_compute_risk_levels():
    levels = compute_risk_levels(
        sweep_price=8.0,
        entry_price=9.5,
        is_bullish=True,
        atr_multiplier=1.5,
        atr_value=1.0,
        risk_reward_ratio=2.0,
    )
    assert levels.stop_loss == pytest.approx(6.5)
    assert levels.take_profit == pytest.approx(15.5)
    assert levels.is_long()
