"""
LiqSweep Risk Levels
====================
Stop-loss, take-profit and trailing-stop levels derived from the swept
price and ATR.

take_profit infers the trade direction from the sign of
entry_price - stop_loss: a stop below the entry is a long, a stop above
the entry is a short. Callers never pass the direction explicitly.
"""

from dataclasses import dataclass
from typing import Optional
import math
import logging

from ..exceptions import InsufficientHistory

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RiskLevels:
    """Protective stop and profit target for one trade."""
    stop_loss: float
    take_profit: float

    def is_long(self) -> bool:
        return self.take_profit > self.stop_loss


def _require_atr(atr_value: Optional[float]) -> float:
    value = float('nan') if atr_value is None else float(atr_value)
    if math.isnan(value):
        raise InsufficientHistory(1, 0, "atr")
    return value


def stop_loss(sweep_price: float,
              is_bullish: bool,
              atr_multiplier: float,
              atr_value: Optional[float]) -> float:
    """
    Stop beyond the swept level by atr_multiplier * ATR.

    Bullish sweeps put the stop below the swept low, bearish sweeps above
    the swept high. No clamping is applied.

    Raises:
        InsufficientHistory: if ATR is not available yet
    """
    offset = atr_multiplier * _require_atr(atr_value)
    return sweep_price - offset if is_bullish else sweep_price + offset


def take_profit(entry_price: float, stop_loss: float, risk_reward_ratio: float) -> float:
    """
    Target at risk_reward_ratio times the entry-to-stop distance.

    A stop below the entry means a long (target above entry), anything else
    is treated as a short (target below entry).
    """
    risk = abs(entry_price - stop_loss)
    if entry_price > stop_loss:
        return entry_price + risk_reward_ratio * risk
    return entry_price - risk_reward_ratio * risk


def risk_reward(entry_price: float, stop_loss: float, target: float) -> float:
    """Reward-to-risk ratio of a planned trade; NaN when there is no risk."""
    risk = entry_price - stop_loss
    if risk == 0:
        return float('nan')
    return (target - entry_price) / risk


def trailing_stop(current_stop: float,
                  price: float,
                  is_long: bool,
                  atr_multiplier: float,
                  atr_value: Optional[float]) -> float:
    """
    Ratchet the stop toward price; it never loosens.

    Longs trail atr_multiplier * ATR below price and keep the higher of the
    old and new stop. Shorts mirror above price and keep the lower one.
    """
    distance = atr_multiplier * _require_atr(atr_value)
    if is_long:
        return max(current_stop, price - distance)
    return min(current_stop, price + distance)


def compute_risk_levels(sweep_price: float,
                        entry_price: float,
                        is_bullish: bool,
                        atr_multiplier: float,
                        atr_value: Optional[float],
                        risk_reward_ratio: float) -> RiskLevels:
    """Stop from the swept level, target from the entry and that stop."""
    stop = stop_loss(sweep_price, is_bullish, atr_multiplier, atr_value)
    target = take_profit(entry_price, stop, risk_reward_ratio)
    return RiskLevels(stop_loss=stop, take_profit=target)


__all__ = [
    'RiskLevels',
    'stop_loss',
    'take_profit',
    'risk_reward',
    'trailing_stop',
    'compute_risk_levels'
]
