"""
Application entry point.

This module defines a simple command-line interface for backtesting the
default slope strategy over CSV data.  It leverages the modules of the
package to load configuration, build bounded bar series, run the
strategy through the trading record and generate reports.
"""

from __future__ import annotations

import argparse
import logging
from typing import List, Optional

from .config.schema import load_config
from .data.csv_data import CSVDataLoader
from .execution.backtest_exec import build_engine
from .execution.models import OrderType
from .reporting.report import generate_backtest_report
from .strategy.strategy import build_slope_strategy


def _setup_logging(verbose: bool) -> None:
    """Configure logging for the application."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s [%(levelname)s] %(name)s: %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S',
    )


def main(argv: Optional[List[str]] = None) -> None:
    """Parse command-line arguments and run the backtest."""
    parser = argparse.ArgumentParser(description="Indicator and trading record backtester")
    parser.add_argument('mode', choices=['backtest'], help="Operating mode")
    parser.add_argument('--config', default='config.yaml', help="Path to configuration YAML file")
    parser.add_argument('--out', default='results', help="Directory receiving the reports")
    parser.add_argument('-v', '--verbose', action='store_true', help="Enable debug logging")
    args = parser.parse_args(argv)

    _setup_logging(args.verbose)

    config = load_config(args.config)
    loader = CSVDataLoader(config.data.csv_dir, config.data.timezone, config.series.maximum_bar_count)
    starting_type = OrderType(config.strategy.starting_type)

    logging.info("Running backtest on %d symbol(s)...", len(config.symbols))
    for symbol in config.symbols:
        series = loader.load(symbol)
        engine = build_engine(config, series)
        strategy = build_slope_strategy(series, config.strategy)
        record = engine.run(strategy, starting_type, config.strategy.amount)
        metrics = generate_backtest_report(series, record, out_dir=args.out, prefix=f"{symbol}_")
        logging.info("%s: %d trades, total profit %.4f", symbol, metrics['num_trades'], metrics['total_profit'])
    logging.info("Backtest complete. Results saved to the '%s' directory.", args.out)


if __name__ == '__main__':
    main()
