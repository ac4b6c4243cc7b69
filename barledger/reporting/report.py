"""
Report generation utilities.

This module turns a trading record into human-readable artefacts: a
CSV file of the closed trades, a JSON summary of performance metrics
and a PNG chart of the cumulative net profit.
"""

from __future__ import annotations

import os
import json
import logging
from typing import Any, Dict, Optional
import pandas as pd
import matplotlib

# Use non-interactive backend for environments without display
matplotlib.use("Agg")
import matplotlib.pyplot as plt

from ..data.series import SeriesHandle
from ..execution.record import TradingRecord
from .metrics import compute_metrics


logger = logging.getLogger(__name__)


def trades_frame(trading_record: TradingRecord) -> pd.DataFrame:
    """One row per closed trade, with gross figures, costs and net profit."""
    rows = []
    for t in trading_record.trades:
        rows.append({
            'side': 'long' if t.entry.is_buy else 'short',
            'entry_index': t.entry.index,
            'exit_index': t.exit.index,
            'entry': float(t.entry.price_per_asset),
            'exit': float(t.exit.price_per_asset),
            'amount': float(t.entry.amount),
            'costs': float(t.trade_cost()),
            'pnl': float(t.get_profit()),
        })
    columns = ['side', 'entry_index', 'exit_index', 'entry', 'exit', 'amount', 'costs', 'pnl']
    df = pd.DataFrame(rows, columns=columns)
    df['cum_pnl'] = df['pnl'].cumsum()
    return df


def generate_backtest_report(
    series: Optional[SeriesHandle],
    trading_record: TradingRecord,
    out_dir: str = "results",
    prefix: str = "",
) -> Dict[str, Any]:
    """Generate report files for a backtest run.

    Creates the output directory if it does not exist and writes the
    following files (each name optionally preceded by `prefix`):

    - `trades.csv` – detailed list of closed trades
    - `summary.json` – performance metrics
    - `equity_curve.png` – cumulative net profit after each trade

    Returns the metrics dictionary.
    """
    os.makedirs(out_dir, exist_ok=True)

    df_trades = trades_frame(trading_record)
    trades_path = os.path.join(out_dir, f'{prefix}trades.csv')
    df_trades.to_csv(trades_path, index=False)

    metrics = compute_metrics(series, trading_record)
    summary_path = os.path.join(out_dir, f'{prefix}summary.json')
    with open(summary_path, 'w', encoding='utf-8') as fh:
        json.dump(metrics, fh, indent=2, ensure_ascii=False)

    fig, ax = plt.subplots(figsize=(10, 4))
    if not df_trades.empty:
        ax.plot(df_trades['exit_index'], df_trades['cum_pnl'], linewidth=1.5)
        ax.set_title('Cumulative net profit')
        ax.set_xlabel('Bar index')
        ax.set_ylabel('Profit')
    fig.tight_layout()
    plot_path = os.path.join(out_dir, f'{prefix}equity_curve.png')
    fig.savefig(plot_path)
    plt.close(fig)

    logger.info("Report written to %s (%d trades)", out_dir, len(df_trades))
    return metrics
