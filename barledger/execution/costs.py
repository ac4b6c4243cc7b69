"""
Pluggable cost models.

A cost model turns a trade (or a price and an amount) into a monetary
cost.  Two families exist:

* transaction costs, charged when an order is executed
  (`LinearTransactionCostModel`);
* holding costs, accrued for every period a position stays open
  (`LinearBorrowingCostModel`, which only charges short positions).

Models are immutable frozen dataclasses.  Two models are equal when
they are the same kind of model with the same coefficient; a trade
uses this to check that its orders were priced with its own model.
"""

from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from ..exceptions import TradeStateError
from ..utils.numeric import NaN, num_like, zero_like

if TYPE_CHECKING:
    from .models import Trade


class CostModel(abc.ABC):
    """Interface shared by all cost models."""

    @abc.abstractmethod
    def calculate(self, trade: "Trade", final_index: Optional[int] = None) -> Any:
        """Cost of `trade`.

        Parameters
        ----------
        trade : Trade
            The trade to price.
        final_index : int, optional
            Last bar to consider while the trade is still open.  Closed
            trades use their exit index.

        Returns
        -------
        number
            The absolute cost, or NaN if the trade has no entry yet.
        """

    @abc.abstractmethod
    def calculate_amount(self, price: Any, amount: Any) -> Any:
        """Cost of trading `amount` assets at `price`."""


@dataclass(frozen=True)
class ZeroCostModel(CostModel):
    """No cost at all; the default for trades and trading records."""

    def calculate(self, trade: "Trade", final_index: Optional[int] = None) -> Any:
        if trade.entry is None:
            return NaN
        return zero_like(trade.entry.price_per_asset)

    def calculate_amount(self, price: Any, amount: Any) -> Any:
        return zero_like(price)


@dataclass(frozen=True)
class LinearTransactionCostModel(CostModel):
    """Fee proportional to the traded value of each order.

    Attributes
    ----------
    fee_per_trade : float
        Fraction of the order value charged per order (e.g. ``0.005``
        for 0.5 %).
    """

    fee_per_trade: float

    def calculate(self, trade: "Trade", final_index: Optional[int] = None) -> Any:
        # The fee is paid when orders execute; the observation index is irrelevant.
        entry = trade.entry
        if entry is None:
            return NaN
        total = entry.cost
        if trade.exit is not None:
            total = total + trade.exit.cost
        return total

    def calculate_amount(self, price: Any, amount: Any) -> Any:
        return num_like(price, self.fee_per_trade) * price * amount


@dataclass(frozen=True)
class LinearBorrowingCostModel(CostModel):
    """Borrowing fee for short positions, linear in the holding period.

    Attributes
    ----------
    fee_per_period : float
        Fraction of the entry value charged per bar held (e.g.
        ``0.0001`` for 1 bp per period).
    """

    fee_per_period: float

    def calculate(self, trade: "Trade", final_index: Optional[int] = None) -> Any:
        entry = trade.entry
        if entry is None:
            return NaN
        if final_index is None and trade.is_opened:
            raise TradeStateError("Trade is not closed. Final index of observation needs to be provided.")
        if not entry.is_sell:
            return zero_like(entry.value)

        if trade.is_closed:
            periods = trade.exit.index - entry.index
        else:
            periods = final_index - entry.index
        return self._holding_cost_for_periods(periods, entry.value)

    def calculate_amount(self, price: Any, amount: Any) -> Any:
        # borrowing costs depend on the borrowed period, not on a single order
        return zero_like(price)

    def _holding_cost_for_periods(self, periods: int, traded_value: Any) -> Any:
        return traded_value * (num_like(traded_value, periods) * num_like(traded_value, self.fee_per_period))
