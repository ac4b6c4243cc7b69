"""
Order and trade models.

An `Order` is one executed buy or sell instruction.  A `Trade` pairs an
entry order with the exit order of the opposite side and walks through
three states::

    NEW (no order) -> OPENED (entry only) -> CLOSED (entry and exit)

A closed trade is final; the next position needs a new `Trade`.  The
trading record takes care of that.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from typing import Any, Optional

from ..exceptions import TradeStateError
from ..utils.numeric import NaN, is_nan, num_like, zero_like
from .costs import CostModel, ZeroCostModel


class OrderType(enum.Enum):
    """Side of an order."""
    BUY = "BUY"
    SELL = "SELL"

    def complement(self) -> "OrderType":
        return OrderType.SELL if self is OrderType.BUY else OrderType.BUY


@dataclass(frozen=True)
class Order:
    """An executed order.

    Attributes
    ----------
    index : int
        Bar index at which the order was executed.
    type : OrderType
        Buy or sell.
    price_per_asset : number
        Execution price, NaN when unknown.
    amount : number
        Number of assets traded, NaN when unknown.
    cost_model : CostModel
        Transaction cost model used to price the order.  Not part of
        order equality.
    """
    index: int
    type: OrderType
    price_per_asset: Any = NaN
    amount: Any = NaN
    cost_model: CostModel = field(default_factory=ZeroCostModel, compare=False)

    @classmethod
    def buy_at(cls, index: int, price: Any = NaN, amount: Any = NaN,
               cost_model: Optional[CostModel] = None) -> "Order":
        return cls(index, OrderType.BUY, price, amount, cost_model if cost_model is not None else ZeroCostModel())

    @classmethod
    def sell_at(cls, index: int, price: Any = NaN, amount: Any = NaN,
                cost_model: Optional[CostModel] = None) -> "Order":
        return cls(index, OrderType.SELL, price, amount, cost_model if cost_model is not None else ZeroCostModel())

    @property
    def is_buy(self) -> bool:
        return self.type is OrderType.BUY

    @property
    def is_sell(self) -> bool:
        return self.type is OrderType.SELL

    @property
    def value(self) -> Any:
        """Traded value, `price_per_asset * amount`."""
        return self.price_per_asset * self.amount

    @property
    def cost(self) -> Any:
        """Transaction cost of this order under its cost model."""
        return self.cost_model.calculate_amount(self.price_per_asset, self.amount)

    @property
    def net_price(self) -> Any:
        """Price per asset including the transaction cost.

        Buying makes the asset more expensive, selling yields less.
        """
        if is_nan(self.amount) or self.amount == 0:
            return self.price_per_asset
        cost_per_asset = self.cost / self.amount
        if self.is_buy:
            return self.price_per_asset + cost_per_asset
        return self.price_per_asset - cost_per_asset

    def __str__(self) -> str:
        return f"Order type: {self.type.value}, index: {self.index}, price: {self.price_per_asset}, amount: {self.amount}"


class Trade:
    """A pair of entry and exit orders.

    Parameters
    ----------
    starting_type : OrderType
        Side of the entry order (``BUY`` for long, ``SELL`` for short).
    transaction_cost_model : CostModel, optional
        Model pricing each order.  Defaults to `ZeroCostModel`.
    holding_cost_model : CostModel, optional
        Model pricing the time the position is held (e.g. borrowing).
        Defaults to `ZeroCostModel`.
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
        self._entry: Optional[Order] = None
        self._exit: Optional[Order] = None

    @classmethod
    def from_orders(
        cls,
        entry: Order,
        exit: Order,
        transaction_cost_model: Optional[CostModel] = None,
        holding_cost_model: Optional[CostModel] = None,
    ) -> "Trade":
        """Build a closed trade from two existing orders.

        The orders must be of opposite sides and priced with the trade's
        transaction cost model (the entry's model when none is given).
        """
        if entry.type is exit.type:
            raise ValueError("Both orders must have different types")
        if exit.index < entry.index:
            raise ValueError("The exit order cannot precede the entry order")
        if transaction_cost_model is None:
            transaction_cost_model = entry.cost_model
        if entry.cost_model != transaction_cost_model or exit.cost_model != transaction_cost_model:
            raise ValueError("Orders and the trade must incorporate the same trading cost model")

        trade = cls(entry.type, transaction_cost_model, holding_cost_model)
        trade._entry = entry
        trade._exit = exit
        return trade

    @property
    def entry(self) -> Optional[Order]:
        return self._entry

    @property
    def exit(self) -> Optional[Order]:
        return self._exit

    @property
    def starting_type(self) -> OrderType:
        return self._starting_type

    @property
    def transaction_cost_model(self) -> CostModel:
        return self._transaction_cost_model

    @property
    def holding_cost_model(self) -> CostModel:
        return self._holding_cost_model

    @property
    def is_new(self) -> bool:
        return self._entry is None and self._exit is None

    @property
    def is_opened(self) -> bool:
        return self._entry is not None and self._exit is None

    @property
    def is_closed(self) -> bool:
        return self._entry is not None and self._exit is not None

    def operate(self, index: int, price: Any = NaN, amount: Any = NaN) -> Order:
        """Execute the next order of this trade at bar `index`.

        A new trade gets its entry order, an opened trade gets its exit
        order.  Operating a closed trade, or exiting before the entry,
        raises `TradeStateError`.
        """
        if self.is_new:
            self._entry = Order(index, self._starting_type, price, amount, self._transaction_cost_model)
            return self._entry
        if self.is_opened:
            if index < self._entry.index:
                raise TradeStateError(
                    f"The index {index} is less than the entry order index {self._entry.index}"
                )
            self._exit = Order(index, self._starting_type.complement(), price, amount,
                               self._transaction_cost_model)
            return self._exit
        raise TradeStateError("Cannot operate a closed trade")

    def get_profit(self, final_index: Optional[int] = None, final_price: Any = None) -> Any:
        """Net profit of the trade.

        Without arguments this is the realised profit of a closed trade
        (zero while the trade is still open).  With `final_index` and
        `final_price` an open trade is marked to that bar, costs
        included.
        """
        if (final_index is None) != (final_price is None):
            raise ValueError("final_index and final_price must be given together")
        if self.is_new:
            return NaN
        if final_index is None:
            if self.is_opened:
                return zero_like(self._entry.price_per_asset)
            return self._gross_profit(self._exit.price_per_asset) - self.trade_cost()
        return self._gross_profit(final_price) - self.trade_cost(final_index)

    def _gross_profit(self, final_price: Any) -> Any:
        if self.is_opened:
            gross = self._entry.amount * final_price - self._entry.value
        else:
            gross = self._exit.value - self._entry.value
        # Profits of a long position are losses of a short one
        if self._entry.is_sell:
            gross = -gross
        return gross

    def gross_return(self, final_price: Any = None) -> Any:
        """Ratio of exit to entry price, inverted around 1 for shorts.

        ``1.1`` means a 10 % gain before costs.  Open trades need
        `final_price`.
        """
        if self.is_new:
            return NaN
        if self.is_closed:
            exit_price = self._exit.price_per_asset
        elif final_price is None:
            raise TradeStateError("Trade is not closed. A final price needs to be provided.")
        else:
            exit_price = final_price
        ratio = exit_price / self._entry.price_per_asset
        if self._entry.is_buy:
            return ratio
        one = num_like(ratio, 1)
        return one + (one - ratio)

    def trade_cost(self, final_index: Optional[int] = None) -> Any:
        """Transaction plus holding cost, up to `final_index` for open trades."""
        transaction_cost = self._transaction_cost_model.calculate(self, final_index)
        return transaction_cost + self.holding_cost(final_index)

    def holding_cost(self, final_index: Optional[int] = None) -> Any:
        return self._holding_cost_model.calculate(self, final_index)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Trade):
            return NotImplemented
        return self._entry == other._entry and self._exit == other._exit

    __hash__ = None

    def __repr__(self) -> str:
        return f"Trade(entry={self._entry}, exit={self._exit})"
