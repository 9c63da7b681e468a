import numpy as np
import pytest

from liqsweep.config import (
    AtrMethod,
    BacktestSettings,
    DetectionMethod,
    LoggingSettings,
    RunConfig,
    SweepConfig,
)
from liqsweep.exceptions import InvalidConfiguration, LiquiditySweepError


def test_defaults():
    config = SweepConfig()
    assert config.detection_method is DetectionMethod.PIVOT_BASED
    assert config.lookback == 20
    assert config.detection_atr_multiplier == 0.5
    assert config.stop_atr_multiplier == 1.5
    assert config.trailing_atr_multiplier == 2.0
    assert config.atr_length == 14
    assert config.atr_method is AtrMethod.SMA
    assert (config.left_bars, config.right_bars) == (10, 5)
    assert config.sweep_threshold == 0.001
    assert config.risk_reward_ratio == 2.0
    assert config.use_confirmation is False
    assert config.use_trailing_stop is False


def test_method_names_are_coerced():
    config = SweepConfig(detection_method="lookback", atr_method="rma")
    assert config.detection_method is DetectionMethod.LOOKBACK
    assert config.atr_method is AtrMethod.RMA
    assert config.min_bars == 21
    assert SweepConfig(left_bars=3, right_bars=2).min_bars == 7


@pytest.mark.parametrize("field,value", [
    ("lookback", 0),
    ("left_bars", -1),
    ("right_bars", 0),
    ("atr_length", 2.5),
    ("detection_atr_multiplier", 0),
    ("stop_atr_multiplier", -1.5),
    ("trailing_atr_multiplier", float("inf")),
    ("risk_reward_ratio", 0),
    ("sweep_threshold", 1.0),
    ("sweep_threshold", -0.01),
    ("detection_method", "fractal"),
    ("atr_method", "ema"),
    ("use_confirmation", "yes"),
])
def test_invalid_values_rejected(field, value):
    with pytest.raises(InvalidConfiguration) as exc:
        SweepConfig(**{field: value})
    assert exc.value.field == field
    assert exc.value.error_code == "INVALID_CONFIGURATION"
    assert isinstance(exc.value, LiquiditySweepError)


def test_backtest_settings_validation():
    with pytest.raises(InvalidConfiguration):
        BacktestSettings(quantity=0)
    with pytest.raises(InvalidConfiguration):
        BacktestSettings(commission=1.5)


def test_unknown_option_rejected():
    with pytest.raises(InvalidConfiguration) as exc:
        SweepConfig.from_dict({"lookback": 10, "lookbak": 12})
    assert exc.value.field == "lookbak"

    with pytest.raises(InvalidConfiguration):
        RunConfig.from_dict({"risk": {}})


def _run_config():
    return RunConfig(
        sweep=SweepConfig(
            detection_method="lookback",
            lookback=30,
            atr_method="rma",
            use_confirmation=True,
        ),
        backtest=BacktestSettings(symbol="BTCUSDT", timeframe="1h", commission=0.0005),
    )


def test_yaml_round_trip(tmp_path):
    original = _run_config()
    path = tmp_path / "configs" / "run.yaml"
    original.to_yaml(str(path))

    loaded = RunConfig.load(str(path))
    assert loaded.to_dict() == original.to_dict()
    assert loaded.sweep.detection_method is DetectionMethod.LOOKBACK


def test_json_round_trip(tmp_path):
    original = _run_config()
    path = tmp_path / "run.json"
    original.to_json(str(path))
    assert RunConfig.load(str(path)).to_dict() == original.to_dict()


def test_partial_yaml_uses_defaults(tmp_path):
    path = tmp_path / "run.yml"
    path.write_text("sweep:\n  right_bars: 3\n")
    config = RunConfig.load(str(path))
    assert config.sweep.right_bars == 3
    assert config.sweep.left_bars == 10
    assert config.backtest.quantity == 1.0


def test_invalid_yaml_value_rejected_at_load(tmp_path):
    path = tmp_path / "run.yaml"
    path.write_text("sweep:\n  sweep_threshold: 2\n")
    with pytest.raises(InvalidConfiguration):
        RunConfig.load(str(path))


def test_unsupported_config_file(tmp_path):
    with pytest.raises(InvalidConfiguration):
        RunConfig.load(str(tmp_path / "run.toml"))


def test_missing_config_file(tmp_path):
    with pytest.raises(InvalidConfiguration) as exc:
        RunConfig.load(str(tmp_path / "nope.yaml"))
    assert exc.value.field == "config"


@pytest.mark.parametrize("name,text", [
    ("run.yaml", "sweep: [1, 2\n"),
    ("run.json", "{\"sweep\": "),
    ("run.yaml", "- lookback\n- 10\n"),
])
def test_malformed_config_file(tmp_path, name, text):
    path = tmp_path / name
    path.write_text(text)
    with pytest.raises(InvalidConfiguration) as exc:
        RunConfig.load(str(path))
    assert exc.value.field == "config"


def test_numpy_scalars_accepted(tmp_path):
    config = SweepConfig(
        lookback=np.int64(20),
        atr_length=np.int32(7),
        stop_atr_multiplier=np.float64(1.25),
        sweep_threshold=np.float32(0.0),
    )
    assert config.lookback == 20
    assert type(config.lookback) is int
    assert type(config.stop_atr_multiplier) is float

    settings = BacktestSettings(quantity=np.float64(2.0), commission=np.float64(0.0005))
    assert type(settings.quantity) is float

    path = tmp_path / "grid.yaml"
    RunConfig(sweep=config, backtest=settings).to_yaml(str(path))
    assert RunConfig.load(str(path)).sweep.atr_length == 7

    with pytest.raises(InvalidConfiguration):
        SweepConfig(lookback=np.int64(0))
    with pytest.raises(InvalidConfiguration):
        SweepConfig(left_bars=np.float64(3.0))


def test_logging_settings_from_env(monkeypatch):
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("LOG_JSON_FORMAT", "true")
    settings = LoggingSettings()
    assert settings.level == "DEBUG"
    assert settings.json_format is True


def test_logging_settings_reject_unknown_level():
    with pytest.raises(ValueError):
        LoggingSettings(level="loud")
