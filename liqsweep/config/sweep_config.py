"""
LiqSweep Strategy Configuration Module
======================================
Configuration schemas and validation for sweep detection and backtests.

Configurations are validated when they are built, so a bad value is
rejected before a single bar is processed.

Author: LiqSweep Team
Version: 1.0.0
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional
from enum import Enum
import json
import math
import numbers
import yaml
from pathlib import Path
import logging

from ..exceptions import InvalidConfiguration

logger = logging.getLogger(__name__)


class DetectionMethod(Enum):
    """Sweep detection algorithms."""
    LOOKBACK = "lookback"
    PIVOT_BASED = "pivot_based"


class AtrMethod(Enum):
    """Averaging applied to true range."""
    SMA = "sma"
    RMA = "rma"


def _check_int(name: str, value: Any, minimum: int) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value < minimum:
        raise InvalidConfiguration(name, f"must be an integer >= {minimum}, got {value!r}")


def _check_positive(name: str, value: Any) -> None:
    if isinstance(value, bool) or not isinstance(value, numbers.Real) \
            or not math.isfinite(value) or value <= 0:
        raise InvalidConfiguration(name, f"must be a finite number > 0, got {value!r}")


_INT_FIELDS = ('lookback', 'left_bars', 'right_bars', 'atr_length')
_FLOAT_FIELDS = (
    'detection_atr_multiplier', 'sweep_threshold', 'stop_atr_multiplier',
    'risk_reward_ratio', 'trailing_atr_multiplier'
)


@dataclass
class SweepConfig:
    """Detection, risk and sequencing parameters."""
    detection_method: DetectionMethod = DetectionMethod.PIVOT_BASED

    # Lookback method
    lookback: int = 20
    detection_atr_multiplier: float = 0.5

    # Pivot method
    left_bars: int = 10
    right_bars: int = 5
    sweep_threshold: float = 0.001

    # Volatility
    atr_length: int = 14
    atr_method: AtrMethod = AtrMethod.SMA

    # Risk levels
    stop_atr_multiplier: float = 1.5
    risk_reward_ratio: float = 2.0
    trailing_atr_multiplier: float = 2.0

    # Sequencing
    use_confirmation: bool = False
    use_trailing_stop: bool = False

    def __post_init__(self):
        if isinstance(self.detection_method, str):
            try:
                self.detection_method = DetectionMethod(self.detection_method)
            except ValueError:
                raise InvalidConfiguration(
                    'detection_method', f"unknown method {self.detection_method!r}"
                )
        if isinstance(self.atr_method, str):
            try:
                self.atr_method = AtrMethod(self.atr_method)
            except ValueError:
                raise InvalidConfiguration('atr_method', f"unknown method {self.atr_method!r}")
        self.validate()

        # numpy scalars from parameter grids become plain Python numbers
        for name in _INT_FIELDS:
            setattr(self, name, int(getattr(self, name)))
        for name in _FLOAT_FIELDS:
            setattr(self, name, float(getattr(self, name)))

    def validate(self) -> None:
        """Raise InvalidConfiguration on the first structural error."""
        _check_int('lookback', self.lookback, 1)
        _check_int('left_bars', self.left_bars, 1)
        _check_int('right_bars', self.right_bars, 1)
        _check_int('atr_length', self.atr_length, 1)

        _check_positive('detection_atr_multiplier', self.detection_atr_multiplier)
        _check_positive('stop_atr_multiplier', self.stop_atr_multiplier)
        _check_positive('trailing_atr_multiplier', self.trailing_atr_multiplier)
        _check_positive('risk_reward_ratio', self.risk_reward_ratio)

        threshold = self.sweep_threshold
        if isinstance(threshold, bool) or not isinstance(threshold, numbers.Real) \
                or not 0 <= threshold < 1:
            raise InvalidConfiguration('sweep_threshold', f"must be in [0, 1), got {threshold!r}")

        for flag in ('use_confirmation', 'use_trailing_stop'):
            if not isinstance(getattr(self, flag), bool):
                raise InvalidConfiguration(flag, "must be a boolean")

    @property
    def min_bars(self) -> int:
        """Bars needed before the selected method can fire."""
        if self.detection_method is DetectionMethod.LOOKBACK:
            return self.lookback + 1
        return self.left_bars + self.right_bars + 2

    def to_dict(self) -> Dict[str, Any]:
        return {
            'detection_method': self.detection_method.value,
            'lookback': self.lookback,
            'detection_atr_multiplier': self.detection_atr_multiplier,
            'left_bars': self.left_bars,
            'right_bars': self.right_bars,
            'sweep_threshold': self.sweep_threshold,
            'atr_length': self.atr_length,
            'atr_method': self.atr_method.value,
            'stop_atr_multiplier': self.stop_atr_multiplier,
            'risk_reward_ratio': self.risk_reward_ratio,
            'trailing_atr_multiplier': self.trailing_atr_multiplier,
            'use_confirmation': self.use_confirmation,
            'use_trailing_stop': self.use_trailing_stop
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SweepConfig':
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise InvalidConfiguration(sorted(unknown)[0], "unknown option")
        return cls(**data)


@dataclass
class BacktestSettings:
    """Backtest adapter settings. Quantity is fixed; there is no sizing model."""
    symbol: str = "UNKNOWN"
    timeframe: str = "4h"
    initial_capital: float = 100000.0
    quantity: float = 1.0
    commission: float = 0.001
    slippage: float = 0.0

    def __post_init__(self):
        self.validate()
        for name in ('initial_capital', 'quantity', 'commission', 'slippage'):
            setattr(self, name, float(getattr(self, name)))

    def validate(self) -> None:
        _check_positive('initial_capital', self.initial_capital)
        _check_positive('quantity', self.quantity)
        for name in ('commission', 'slippage'):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, numbers.Real) or not 0 <= value < 1:
                raise InvalidConfiguration(name, f"must be in [0, 1), got {value!r}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            'symbol': self.symbol,
            'timeframe': self.timeframe,
            'initial_capital': self.initial_capital,
            'quantity': self.quantity,
            'commission': self.commission,
            'slippage': self.slippage
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'BacktestSettings':
        unknown = set(data) - set(cls.__dataclass_fields__)
        if unknown:
            raise InvalidConfiguration(sorted(unknown)[0], "unknown option")
        return cls(**data)


@dataclass
class RunConfig:
    """Complete run configuration: detection parameters plus backtest settings."""
    sweep: SweepConfig = field(default_factory=SweepConfig)
    backtest: BacktestSettings = field(default_factory=BacktestSettings)

    def __post_init__(self):
        if isinstance(self.sweep, dict):
            self.sweep = SweepConfig.from_dict(self.sweep)
        if isinstance(self.backtest, dict):
            self.backtest = BacktestSettings.from_dict(self.backtest)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'sweep': self.sweep.to_dict(),
            'backtest': self.backtest.to_dict()
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> 'RunConfig':
        if data is not None and not isinstance(data, dict):
            raise InvalidConfiguration('config', f"expected a mapping, got {type(data).__name__}")
        data = dict(data or {})
        unknown = set(data) - {'sweep', 'backtest'}
        if unknown:
            raise InvalidConfiguration(sorted(unknown)[0], "unknown section")
        return cls(
            sweep=SweepConfig.from_dict(data.get('sweep') or {}),
            backtest=BacktestSettings.from_dict(data.get('backtest') or {})
        )

    def to_json(self, filepath: Optional[str] = None) -> str:
        """Export to JSON string or file."""
        json_str = json.dumps(self.to_dict(), indent=2)

        if filepath:
            Path(filepath).parent.mkdir(parents=True, exist_ok=True)
            with open(filepath, 'w') as f:
                f.write(json_str)
            logger.info(f"Run config saved to {filepath}")

        return json_str

    def to_yaml(self, filepath: Optional[str] = None) -> str:
        """Export to YAML string or file."""
        yaml_str = yaml.dump(self.to_dict(), default_flow_style=False, sort_keys=False)

        if filepath:
            Path(filepath).parent.mkdir(parents=True, exist_ok=True)
            with open(filepath, 'w') as f:
                f.write(yaml_str)
            logger.info(f"Run config saved to {filepath}")

        return yaml_str

    @classmethod
    def from_json(cls, filepath: str) -> 'RunConfig':
        """Load from JSON file."""
        try:
            with open(filepath, 'r') as f:
                data = json.load(f)
        except OSError as e:
            raise InvalidConfiguration('config', f"cannot read {filepath}: {e.strerror or e}")
        except json.JSONDecodeError as e:
            raise InvalidConfiguration('config', f"malformed JSON in {filepath}: {e}")

        logger.info(f"Run config loaded from {filepath}")
        return cls.from_dict(data)

    @classmethod
    def from_yaml(cls, filepath: str) -> 'RunConfig':
        """Load from YAML file."""
        try:
            with open(filepath, 'r') as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise InvalidConfiguration('config', f"cannot read {filepath}: {e.strerror or e}")
        except yaml.YAMLError as e:
            raise InvalidConfiguration('config', f"malformed YAML in {filepath}: {e}")

        logger.info(f"Run config loaded from {filepath}")
        return cls.from_dict(data)

    @classmethod
    def load(cls, filepath: str) -> 'RunConfig':
        """Load from a .json, .yaml or .yml file."""
        suffix = Path(filepath).suffix.lower()
        if suffix == '.json':
            return cls.from_json(filepath)
        if suffix in ('.yaml', '.yml'):
            return cls.from_yaml(filepath)
        raise InvalidConfiguration('config', f"unsupported file type {suffix!r}")


__all__ = [
    'DetectionMethod',
    'AtrMethod',
    'SweepConfig',
    'BacktestSettings',
    'RunConfig'
]
