"""
LiqSweep Configuration Module
=============================
Run configuration schemas and environment settings.
"""

from .sweep_config import (
    DetectionMethod,
    AtrMethod,
    SweepConfig,
    BacktestSettings,
    RunConfig
)
from .settings import (
    LoggingSettings,
    ApplicationSettings,
    get_settings
)

__all__ = [
    'DetectionMethod',
    'AtrMethod',
    'SweepConfig',
    'BacktestSettings',
    'RunConfig',
    'LoggingSettings',
    'ApplicationSettings',
    'get_settings'
]
