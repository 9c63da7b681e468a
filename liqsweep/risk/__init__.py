"""
LiqSweep Risk Module
====================
ATR-based stop-loss, take-profit and trailing-stop levels.
"""

from .levels import (
    RiskLevels,
    stop_loss,
    take_profit,
    risk_reward,
    trailing_stop,
    compute_risk_levels
)

__all__ = [
    'RiskLevels',
    'stop_loss',
    'take_profit',
    'risk_reward',
    'trailing_stop',
    'compute_risk_levels'
]
