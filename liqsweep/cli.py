"""
LiqSweep Command Line Interface
===============================

    liqsweep backtest --data bars.csv [--config run.yaml] [--trades trades.csv]
    liqsweep annotate --data bars.csv [--config run.yaml] [--output out.csv] [--alerts]
"""

import argparse
import json
import sys
from typing import List, Optional

import structlog
from pydantic import ValidationError

from . import __version__
from .config.settings import LoggingSettings, get_settings
from .config.sweep_config import RunConfig
from .data.importer import load_ohlc_csv
from .exceptions import InvalidConfiguration, LiquiditySweepError
from .strategies.sweep_indicator import SweepIndicator
from .strategies.sweep_strategy import LiquiditySweepStrategy
from .utils.log_setup import setup_logging

logger = structlog.get_logger("liqsweep.cli")


def _load_run_config(path: Optional[str]) -> RunConfig:
    path = path or get_settings().default_config_path
    if not path:
        return RunConfig()
    return RunConfig.load(path)


def cmd_backtest(args: argparse.Namespace) -> int:
    run_config = _load_run_config(args.config)
    data = load_ohlc_csv(args.data, tail=args.tail)

    strategy = LiquiditySweepStrategy(run_config.sweep, run_config.backtest)
    result = strategy.backtest(data, periods_per_year=args.periods_per_year)

    logger.info(
        "Backtest finished",
        bars=len(data),
        trades=result.total_trades,
        total_return=round(result.total_return, 6),
    )

    if args.trades:
        result.to_dataframe().to_csv(args.trades, index=False)
        logger.info("Trades written", path=args.trades)

    print(json.dumps(result.metrics(), indent=2, default=str))
    return 0


def cmd_annotate(args: argparse.Namespace) -> int:
    run_config = _load_run_config(args.config)
    data = load_ohlc_csv(args.data, tail=args.tail)
    indicator = SweepIndicator(run_config.sweep)

    if args.alerts:
        alerts = indicator.alerts(data)
        logger.info("Alerts generated", count=len(alerts))
        text = json.dumps(alerts, indent=2, default=str)
        if args.output:
            with open(args.output, 'w') as f:
                f.write(text)
        else:
            print(text)
        return 0

    frame = indicator.compute(data)
    if args.output:
        frame.to_csv(args.output)
        logger.info("Annotations written", path=args.output, rows=len(frame))
    else:
        frame.to_csv(sys.stdout)
    return 0


def _logging_settings(level: Optional[str]) -> LoggingSettings:
    settings = get_settings().logging
    if not level:
        return settings
    try:
        return LoggingSettings(**{**settings.model_dump(), "level": level})
    except ValidationError:
        raise InvalidConfiguration("log_level", f"unknown log level {level!r}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="liqsweep",
        description="Liquidity sweep detection and backtesting"
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    subparsers = parser.add_subparsers(dest="command", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--data", required=True, help="OHLC CSV file")
    common.add_argument("--config", default=None, help="Run config (.yaml, .yml or .json)")
    common.add_argument("--tail", type=int, default=None, help="Use only the last N bars")

    backtest = subparsers.add_parser("backtest", parents=[common], help="Backtest the sweep strategy")
    backtest.add_argument("--trades", default=None, help="Write the trade log to this CSV")
    backtest.add_argument("--periods-per-year", type=int, default=252,
                          help="Bars per year for Sharpe annualisation")
    backtest.set_defaults(func=cmd_backtest)

    annotate = subparsers.add_parser("annotate", parents=[common], help="Annotate bars with sweeps")
    annotate.add_argument("--output", default=None, help="Output file (stdout if omitted)")
    annotate.add_argument("--alerts", action="store_true", help="Emit sweep alerts as JSON instead of annotations")
    annotate.set_defaults(func=cmd_annotate)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        setup_logging(_logging_settings(args.log_level))
        return args.func(args)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 1
    except LiquiditySweepError as e:
        logger.error("Run failed", error=str(e), error_code=e.error_code)
        return 1


if __name__ == "__main__":
    sys.exit(main())
