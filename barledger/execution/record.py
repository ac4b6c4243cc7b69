"""
Trading record.

The `TradingRecord` is the journal of one backtest run.  It always owns
exactly one trade that is not closed yet (`current_trade`); operating
the record executes the next order of that trade, files the order by
side and by role, and as soon as the trade closes archives it and
starts a new one.

Strategies query the record (is a position open? what was the last
entry?) while criteria read the closed trades afterwards.
"""

from __future__ import annotations

import logging
from typing import Any, Iterable, List, Optional, Tuple

from ..exceptions import TradeStateError
from ..utils.numeric import NaN
from .costs import CostModel, ZeroCostModel
from .models import Order, OrderType, Trade


logger = logging.getLogger(__name__)


class TradingRecord:
    """History of the orders and trades of a trading session.

    Parameters
    ----------
    starting_type : OrderType
        Side of every entry order (``BUY`` trades long, ``SELL`` short).
    transaction_cost_model : CostModel, optional
        Cost model applied to each order.
    holding_cost_model : CostModel, optional
        Cost model applied to the holding period of each trade.
    """

    def __init__(
        self,
        starting_type: OrderType = OrderType.BUY,
        transaction_cost_model: Optional[CostModel] = None,
        holding_cost_model: Optional[CostModel] = None,
    ) -> None:
        if starting_type is None:
            raise ValueError("Starting type must not be None")
        self._starting_type = starting_type
        self._transaction_cost_model = transaction_cost_model if transaction_cost_model is not None else ZeroCostModel()
        self._holding_cost_model = holding_cost_model if holding_cost_model is not None else ZeroCostModel()

        self._orders: List[Order] = []
        self._buy_orders: List[Order] = []
        self._sell_orders: List[Order] = []
        self._entry_orders: List[Order] = []
        self._exit_orders: List[Order] = []
        self._trades: List[Trade] = []
        self._current_trade = self._new_trade(starting_type)

    @classmethod
    def from_orders(
        cls,
        orders: Iterable[Order],
        transaction_cost_model: Optional[CostModel] = None,
        holding_cost_model: Optional[CostModel] = None,
    ) -> "TradingRecord":
        """Rebuild a record by replaying existing orders.

        The side of the first order becomes the starting type.  Orders
        need not alternate strictly: when a new trade would begin with
        the other side (e.g. ``BUY, SELL, SELL, BUY``), that trade is
        started as a reversal with the order's own side.
        """
        orders = list(orders)
        if not orders:
            raise ValueError("At least one order is needed to build a trading record")

        record = cls(orders[0].type, transaction_cost_model, holding_cost_model)
        for order in orders:
            is_entry = record._current_trade.is_new
            if is_entry and order.type is not record._starting_type:
                record._current_trade = record._new_trade(order.type)
            new_order = record._current_trade.operate(order.index, order.price_per_asset, order.amount)
            record._record_order(new_order, is_entry)
        return record

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def operate(self, index: int, price: Any = NaN, amount: Any = NaN) -> Order:
        """Execute the next order (entry or exit) of the current trade."""
        if self._current_trade.is_closed:
            # Cannot happen while the record archives closed trades itself
            raise TradeStateError("Current trade should not be closed")
        is_entry = self._current_trade.is_new
        order = self._current_trade.operate(index, price, amount)
        self._record_order(order, is_entry)
        return order

    def enter(self, index: int, price: Any = NaN, amount: Any = NaN) -> bool:
        """Open a position, if none is open.  Returns `True` on success."""
        if self._current_trade.is_new:
            self.operate(index, price, amount)
            return True
        return False

    def exit(self, index: int, price: Any = NaN, amount: Any = NaN) -> bool:
        """Close the open position, if any.  Returns `True` on success."""
        if self._current_trade.is_opened:
            self.operate(index, price, amount)
            return True
        return False

    def _new_trade(self, starting_type: OrderType) -> Trade:
        return Trade(starting_type, self._transaction_cost_model, self._holding_cost_model)

    def _record_order(self, order: Order, is_entry: bool) -> None:
        if order is None:
            raise ValueError("Order should not be None")

        if is_entry:
            self._entry_orders.append(order)
        else:
            self._exit_orders.append(order)

        self._orders.append(order)
        if order.is_buy:
            self._buy_orders.append(order)
        else:
            self._sell_orders.append(order)
        logger.debug("Recorded %s order at index %d (%s)", order.type.value, order.index,
                     "entry" if is_entry else "exit")

        if self._current_trade.is_closed:
            closed, self._current_trade = self._current_trade, self._new_trade(self._starting_type)
            self._trades.append(closed)
            logger.debug("Archived trade #%d: %r", len(self._trades), closed)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def starting_type(self) -> OrderType:
        return self._starting_type

    @property
    def current_trade(self) -> Trade:
        """The trade that is new or opened; never closed, never `None`."""
        return self._current_trade

    @property
    def is_closed(self) -> bool:
        """`True` when no position is open."""
        return not self._current_trade.is_opened

    @property
    def trades(self) -> Tuple[Trade, ...]:
        """Closed trades, oldest first."""
        return tuple(self._trades)

    @property
    def trade_count(self) -> int:
        return len(self._trades)

    @property
    def last_trade(self) -> Optional[Trade]:
        return self._trades[-1] if self._trades else None

    @property
    def orders(self) -> Tuple[Order, ...]:
        return tuple(self._orders)

    @property
    def buy_orders(self) -> Tuple[Order, ...]:
        return tuple(self._buy_orders)

    @property
    def sell_orders(self) -> Tuple[Order, ...]:
        return tuple(self._sell_orders)

    @property
    def entry_orders(self) -> Tuple[Order, ...]:
        return tuple(self._entry_orders)

    @property
    def exit_orders(self) -> Tuple[Order, ...]:
        return tuple(self._exit_orders)

    @property
    def last_order(self) -> Optional[Order]:
        return self._orders[-1] if self._orders else None

    def last_order_of(self, order_type: OrderType) -> Optional[Order]:
        """Last recorded order of the given side."""
        if order_type is OrderType.BUY:
            orders = self._buy_orders
        elif order_type is OrderType.SELL:
            orders = self._sell_orders
        else:
            return None
        return orders[-1] if orders else None

    @property
    def last_entry(self) -> Optional[Order]:
        return self._entry_orders[-1] if self._entry_orders else None

    @property
    def last_exit(self) -> Optional[Order]:
        return self._exit_orders[-1] if self._exit_orders else None

    def __str__(self) -> str:
        lines = ["TradingRecord:"]
        lines.extend(str(order) for order in self._orders)
        return "\n".join(lines)
