"""
LiqSweep Exceptions
===================
Error taxonomy shared by the detection core, configuration and data layers.
"""

from typing import Optional


class LiquiditySweepError(Exception):
    """Base exception for liqsweep errors."""
    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.error_code = error_code


class InsufficientHistory(LiquiditySweepError):
    """Not enough bars yet for a rolling computation."""
    def __init__(self, required: int, available: int, what: str = "window"):
        super().__init__(
            f"{what} needs {required} bars, only {available} available",
            "INSUFFICIENT_HISTORY"
        )
        self.required = required
        self.available = available


class InvalidConfiguration(LiquiditySweepError):
    """Configuration rejected before any bar is processed."""
    def __init__(self, field: str, message: str):
        super().__init__(f"{field}: {message}", "INVALID_CONFIGURATION")
        self.field = field


class DataValidationError(LiquiditySweepError):
    """OHLC input is malformed."""
    pass


__all__ = [
    'LiquiditySweepError',
    'InsufficientHistory',
    'InvalidConfiguration',
    'DataValidationError'
]
