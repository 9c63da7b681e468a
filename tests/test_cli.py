import json
import logging

import pandas as pd
import pytest
import structlog

from liqsweep.cli import build_parser, main
from liqsweep.config import RunConfig, SweepConfig


@pytest.fixture
def bars_csv(tmp_path, sweep_series):
    path = tmp_path / "bars.csv"
    frame = sweep_series.copy()
    frame.index.name = "timestamp"
    frame.to_csv(path)
    return path


@pytest.fixture
def run_yaml(tmp_path):
    path = tmp_path / "run.yaml"
    RunConfig(sweep=SweepConfig(
        detection_method="lookback",
        lookback=5,
        atr_length=3,
        stop_atr_multiplier=1.0,
    )).to_yaml(str(path))
    return path


@pytest.fixture(autouse=True)
def _restore_logging():
    yield
    logging.basicConfig(force=True, handlers=[logging.NullHandler()], level=logging.WARNING)
    structlog.reset_defaults()


def _run(argv):
    args = build_parser().parse_args(argv)
    return args.func(args)


def test_backtest_command(bars_csv, run_yaml, tmp_path, capsys):
    trades_path = tmp_path / "trades.csv"
    code = _run([
        "backtest", "--data", str(bars_csv), "--config", str(run_yaml), "--trades", str(trades_path)
    ])

    assert code == 0
    assert '"total_trades": 1' in capsys.readouterr().out
    trades = pd.read_csv(trades_path)
    assert len(trades) == 1
    assert trades["exit_reason"].iloc[0] == "take_profit"


def test_annotate_command_writes_csv(bars_csv, run_yaml, tmp_path):
    output = tmp_path / "annotated.csv"
    code = _run(["annotate", "--data", str(bars_csv), "--config", str(run_yaml), "--output", str(output)])

    assert code == 0
    frame = pd.read_csv(output)
    assert len(frame) == 15
    assert frame["bullish_sweep"].sum() == 1


def test_annotate_alerts(bars_csv, run_yaml, tmp_path):
    alerts_path = tmp_path / "alerts.json"
    args = build_parser().parse_args(
        ["annotate", "--data", str(bars_csv), "--config", str(run_yaml), "--alerts",
         "--output", str(alerts_path)]
    )
    assert args.alerts is True
    assert args.func(args) == 0
    alerts = json.loads(alerts_path.read_text())
    assert [a["direction"] for a in alerts] == ["bullish"]


def test_subcommand_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args([])


def test_main_runs_with_log_level(bars_csv, run_yaml, tmp_path):
    output = tmp_path / "annotated.csv"
    code = main([
        "--log-level", "debug", "annotate", "--data", str(bars_csv),
        "--config", str(run_yaml), "--output", str(output)
    ])
    assert code == 0
    assert output.exists()


def test_unknown_log_level_exits_with_error(bars_csv):
    assert main(["--log-level", "verbose", "annotate", "--data", str(bars_csv)]) == 1


def test_missing_config_exits_with_error(bars_csv, tmp_path):
    code = main(["backtest", "--data", str(bars_csv), "--config", str(tmp_path / "nope.yaml")])
    assert code == 1


def test_malformed_config_exits_with_error(bars_csv, tmp_path):
    bad = tmp_path / "bad.yaml"
    bad.write_text("sweep: [1, 2\n")
    assert main(["backtest", "--data", str(bars_csv), "--config", str(bad)]) == 1


def test_missing_data_exits_with_error(tmp_path):
    assert main(["annotate", "--data", str(tmp_path / "missing.csv")]) == 1
