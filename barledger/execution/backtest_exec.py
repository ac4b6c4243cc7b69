"""
Backtest execution engine.

This module contains the `BacktestEngine` class which walks a bar
series from start to end, asks a strategy at each bar whether the
trading record should be operated, and fills orders at the bar's close
price.  Costs are applied by the cost models the engine hands to the
trading record, so the resulting record carries everything needed to
compute net profits.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

from ..config.schema import Config
from ..data.series import BarSeries
from ..strategy.strategy import Strategy
from .costs import CostModel, LinearBorrowingCostModel, LinearTransactionCostModel, ZeroCostModel
from .models import OrderType
from .record import TradingRecord


logger = logging.getLogger(__name__)


class BacktestEngine:
    """Run strategies over one bar series.

    Parameters
    ----------
    series : BarSeries
        The bars to trade.
    transaction_cost_model : CostModel, optional
        Cost charged on each order.  Defaults to no cost.
    holding_cost_model : CostModel, optional
        Cost of holding a position.  Defaults to no cost.
    """

    def __init__(
        self,
        series: BarSeries,
        transaction_cost_model: Optional[CostModel] = None,
        holding_cost_model: Optional[CostModel] = None,
    ) -> None:
        self.series = series
        self.transaction_cost_model = transaction_cost_model if transaction_cost_model is not None else ZeroCostModel()
        self.holding_cost_model = holding_cost_model if holding_cost_model is not None else ZeroCostModel()

    def run(
        self,
        strategy: Strategy,
        starting_type: OrderType = OrderType.BUY,
        amount: Any = 1,
        start: Optional[int] = None,
        end: Optional[int] = None,
    ) -> TradingRecord:
        """Execute `strategy` between bar `start` and bar `end` (inclusive).

        Parameters
        ----------
        strategy : Strategy
            Entry and exit rules.
        starting_type : OrderType
            ``BUY`` for long trades, ``SELL`` for short ones.
        amount : number
            Number of assets per order.
        start, end : int, optional
            Bar range; defaults to the retained bars of the series.

        Returns
        -------
        TradingRecord
            The record of the run.  A trade still open on the last bar
            is left open.
        """
        start = self.series.begin_index if start is None else max(start, self.series.begin_index)
        end = self.series.end_index if end is None else min(end, self.series.end_index)

        record = TradingRecord(starting_type, self.transaction_cost_model, self.holding_cost_model)
        if self.series.is_empty:
            logger.warning("Series %r is empty, nothing to backtest", self.series.name)
            return record

        logger.info("Running %r on %s from bar %d to bar %d", strategy, self.series.name or "series", start, end)
        for index in range(start, end + 1):
            if strategy.should_operate(index, record):
                price = self.series.get_bar(index).close
                order = record.operate(index, price, amount)
                logger.debug("Operated %s", order)

        logger.info("%r on %s: %d closed trades", strategy, self.series.name or "series", record.trade_count)
        return record


def build_engine(config: Config, series: BarSeries) -> BacktestEngine:
    """Create an engine with the cost models described by `config`."""
    transaction = (LinearTransactionCostModel(config.costs.fee_per_trade)
                   if config.costs.fee_per_trade else ZeroCostModel())
    holding = (LinearBorrowingCostModel(config.costs.fee_per_period)
               if config.costs.fee_per_period else ZeroCostModel())
    return BacktestEngine(series, transaction, holding)
