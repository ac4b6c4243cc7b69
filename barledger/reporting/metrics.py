"""
Performance metrics and analysis criteria.

A criterion scores a single trade or a whole trading record, and knows
whether a higher or a lower score is better so that it can pick the
best of several strategies.  `compute_metrics()` bundles the common
criteria into the summary written by the report.

Only closed trades are scored; a position still open at the end of a
run does not count.
"""

from __future__ import annotations

import abc
import logging
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Sequence

from ..data.series import SeriesHandle
from ..execution.models import Trade
from ..execution.record import TradingRecord
from ..utils.numeric import is_nan

if TYPE_CHECKING:
    from ..execution.backtest_exec import BacktestEngine
    from ..strategy.strategy import Strategy


logger = logging.getLogger(__name__)


class AnalysisCriterion(abc.ABC):
    """Scores trades and trading records."""

    @abc.abstractmethod
    def calculate_trade(self, series: Optional[SeriesHandle], trade: Trade) -> Any:
        """Criterion value of a single trade."""

    @abc.abstractmethod
    def calculate(self, series: Optional[SeriesHandle], trading_record: TradingRecord) -> Any:
        """Criterion value of all closed trades of a record."""

    @abc.abstractmethod
    def better_than(self, value1: Any, value2: Any) -> bool:
        """`True` if `value1` is a better score than `value2`."""

    def choose_best(self, engine: "BacktestEngine", strategies: Sequence["Strategy"]) -> "Strategy":
        """Run each strategy with `engine` and return the best one.

        Ties keep the earliest strategy.
        """
        if not strategies:
            raise ValueError("At least one strategy is needed")
        best = strategies[0]
        best_value = self.calculate(engine.series, engine.run(best))
        for strategy in strategies[1:]:
            value = self.calculate(engine.series, engine.run(strategy))
            if self.better_than(value, best_value):
                best, best_value = strategy, value
        logger.info("%s picked %r (%s)", self.__class__.__name__, best, best_value)
        return best

    def __repr__(self) -> str:
        return self.__class__.__name__


class TotalProfitCriterion(AnalysisCriterion):
    """Sum of the net profits of the closed trades."""

    def calculate_trade(self, series: Optional[SeriesHandle], trade: Trade) -> Any:
        if not trade.is_closed:
            return 0.0
        return trade.get_profit()

    def calculate(self, series: Optional[SeriesHandle], trading_record: TradingRecord) -> Any:
        total = 0
        for trade in trading_record.trades:
            total = total + trade.get_profit()
        return total

    def better_than(self, value1: Any, value2: Any) -> bool:
        return value1 > value2


class NumberOfTradesCriterion(AnalysisCriterion):
    """Number of closed trades; fewer trades is considered better."""

    def calculate_trade(self, series: Optional[SeriesHandle], trade: Trade) -> Any:
        return 1

    def calculate(self, series: Optional[SeriesHandle], trading_record: TradingRecord) -> Any:
        return trading_record.trade_count

    def better_than(self, value1: Any, value2: Any) -> bool:
        return value1 < value2


class WinningTradesRatioCriterion(AnalysisCriterion):
    """Share of closed trades with a strictly positive net profit."""

    def calculate_trade(self, series: Optional[SeriesHandle], trade: Trade) -> Any:
        return 1.0 if trade.is_closed and trade.get_profit() > 0 else 0.0

    def calculate(self, series: Optional[SeriesHandle], trading_record: TradingRecord) -> Any:
        trades = trading_record.trades
        if not trades:
            return 0.0
        wins = sum(1 for t in trades if t.get_profit() > 0)
        return wins / len(trades)

    def better_than(self, value1: Any, value2: Any) -> bool:
        return value1 > value2


class ProfitFactorCriterion(AnalysisCriterion):
    """Gross winnings divided by gross losses (0 when nothing was lost)."""

    def calculate_trade(self, series: Optional[SeriesHandle], trade: Trade) -> Any:
        return self._factor([trade] if trade.is_closed else [])

    def calculate(self, series: Optional[SeriesHandle], trading_record: TradingRecord) -> Any:
        return self._factor(list(trading_record.trades))

    @staticmethod
    def _factor(trades: List[Trade]) -> Any:
        profits = [t.get_profit() for t in trades]
        gross_profit = sum(p for p in profits if p > 0)
        gross_loss = -sum(p for p in profits if p < 0)
        return gross_profit / gross_loss if gross_loss > 0 else 0.0

    def better_than(self, value1: Any, value2: Any) -> bool:
        return value1 > value2


def compute_metrics(series: Optional[SeriesHandle], trading_record: TradingRecord) -> Dict[str, Any]:
    """Compute a set of summary statistics for a backtest.

    Parameters
    ----------
    series : SeriesHandle or None
        Series the record was produced on.
    trading_record : TradingRecord
        Record of the run.

    Returns
    -------
    dict
        Dictionary of performance metrics.  Numbers are converted to
        `float` so the dictionary can be dumped to JSON.
    """
    trades = trading_record.trades
    profits = [float(t.get_profit()) for t in trades]
    costs = [float(t.trade_cost()) for t in trades]
    valid = [p for p in profits if not is_nan(p)]

    max_drawdown = 0.0
    equity = 0.0
    peak = 0.0
    for profit in valid:
        equity += profit
        peak = max(peak, equity)
        max_drawdown = max(max_drawdown, peak - equity)

    return {
        'total_profit': float(TotalProfitCriterion().calculate(series, trading_record)),
        'num_trades': NumberOfTradesCriterion().calculate(series, trading_record),
        'win_rate': float(WinningTradesRatioCriterion().calculate(series, trading_record)),
        'profit_factor': float(ProfitFactorCriterion().calculate(series, trading_record)),
        'avg_trade': sum(valid) / len(valid) if valid else 0.0,
        'total_costs': sum(costs),
        'max_drawdown': max_drawdown,
        'open_position': not trading_record.is_closed,
    }
