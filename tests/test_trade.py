import math
import os
import sys
from decimal import Decimal

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from barledger.exceptions import TradeStateError
from barledger.execution.costs import LinearTransactionCostModel, ZeroCostModel
from barledger.execution.models import Order, OrderType, Trade

import unittest


class TestOrder(unittest.TestCase):
    def test_value_and_zero_cost(self) -> None:
        order = Order.buy_at(3, 10.0, 2.0)
        self.assertEqual(order.value, 20.0)
        self.assertEqual(order.cost, 0.0)
        self.assertEqual(order.net_price, 10.0)

    def test_net_price_includes_transaction_cost(self) -> None:
        model = LinearTransactionCostModel(0.01)
        buy = Order.buy_at(0, 100.0, 1.0, model)
        sell = Order.sell_at(1, 100.0, 1.0, model)
        self.assertAlmostEqual(buy.net_price, 101.0)
        self.assertAlmostEqual(sell.net_price, 99.0)

    def test_net_price_without_amount(self) -> None:
        order = Order.sell_at(0, 50.0)
        self.assertEqual(order.net_price, 50.0)

    def test_equality_ignores_cost_model(self) -> None:
        self.assertEqual(Order.buy_at(1, 5.0, 1.0), Order.buy_at(1, 5.0, 1.0, LinearTransactionCostModel(0.1)))
        self.assertNotEqual(Order.buy_at(1, 5.0, 1.0), Order.sell_at(1, 5.0, 1.0))

    def test_complement(self) -> None:
        self.assertIs(OrderType.BUY.complement(), OrderType.SELL)
        self.assertIs(OrderType.SELL.complement(), OrderType.BUY)


class TestTrade(unittest.TestCase):
    def test_state_progression(self) -> None:
        trade = Trade()
        self.assertTrue(trade.is_new)
        entry = trade.operate(0, 10.0, 1.0)
        self.assertTrue(trade.is_opened)
        self.assertIs(entry.type, OrderType.BUY)
        exit_order = trade.operate(3, 15.0, 1.0)
        self.assertTrue(trade.is_closed)
        self.assertIs(exit_order.type, OrderType.SELL)
        self.assertIs(trade.entry, entry)
        self.assertIs(trade.exit, exit_order)

    def test_operating_closed_trade_raises(self) -> None:
        trade = Trade()
        trade.operate(0, 10.0, 1.0)
        trade.operate(1, 11.0, 1.0)
        with self.assertRaises(TradeStateError):
            trade.operate(2, 12.0, 1.0)

    def test_exit_before_entry_raises(self) -> None:
        trade = Trade(OrderType.SELL)
        trade.operate(5, 10.0, 1.0)
        with self.assertRaises(TradeStateError):
            trade.operate(4, 9.0, 1.0)
        self.assertTrue(trade.is_opened)

    def test_exit_on_entry_bar_is_allowed(self) -> None:
        trade = Trade()
        trade.operate(5, 10.0, 1.0)
        trade.operate(5, 10.0, 1.0)
        self.assertTrue(trade.is_closed)

    def test_missing_starting_type(self) -> None:
        with self.assertRaises(ValueError):
            Trade(None)

    def test_from_orders_validation(self) -> None:
        with self.assertRaises(ValueError):
            Trade.from_orders(Order.buy_at(0, 1.0, 1.0), Order.buy_at(1, 1.0, 1.0))
        with self.assertRaises(ValueError):
            Trade.from_orders(Order.buy_at(3, 1.0, 1.0), Order.sell_at(1, 1.0, 1.0))
        model = LinearTransactionCostModel(0.01)
        with self.assertRaises(ValueError):
            Trade.from_orders(Order.buy_at(0, 1.0, 1.0, model), Order.sell_at(1, 1.0, 1.0))
        with self.assertRaises(ValueError):
            Trade.from_orders(Order.buy_at(0, 1.0, 1.0), Order.sell_at(1, 1.0, 1.0), model)

    def test_from_orders_uses_entry_cost_model(self) -> None:
        model = LinearTransactionCostModel(0.01)
        trade = Trade.from_orders(Order.buy_at(0, 100.0, 1.0, model), Order.sell_at(1, 110.0, 1.0, model))
        self.assertTrue(trade.is_closed)
        self.assertEqual(trade.transaction_cost_model, model)
        self.assertAlmostEqual(trade.get_profit(), 10.0 - 1.0 - 1.1)

    def test_long_and_short_profit(self) -> None:
        long_trade = Trade(OrderType.BUY)
        long_trade.operate(0, 10.0, 1.0)
        long_trade.operate(1, 15.0, 1.0)
        self.assertEqual(long_trade.get_profit(), 5.0)

        short_trade = Trade(OrderType.SELL)
        short_trade.operate(0, 10.0, 1.0)
        short_trade.operate(1, 15.0, 1.0)
        self.assertEqual(short_trade.get_profit(), -5.0)

    def test_profit_of_new_and_open_trades(self) -> None:
        trade = Trade()
        self.assertTrue(math.isnan(trade.get_profit()))
        trade.operate(0, 10.0, 2.0)
        self.assertEqual(trade.get_profit(), 0.0)
        self.assertEqual(trade.get_profit(4, 12.0), 4.0)
        with self.assertRaises(ValueError):
            trade.get_profit(4)

    def test_decimal_prices_keep_their_type(self) -> None:
        model = LinearTransactionCostModel(0.01)
        trade = Trade(OrderType.BUY, model)
        trade.operate(0, Decimal("100"), Decimal("2"))
        trade.operate(2, Decimal("105"), Decimal("2"))
        profit = trade.get_profit()
        self.assertIsInstance(profit, Decimal)
        self.assertEqual(profit, Decimal("10") - Decimal("2.00") - Decimal("2.10"))

    def test_gross_return(self) -> None:
        long_trade = Trade.from_orders(Order.buy_at(0, 100.0, 1.0), Order.sell_at(1, 110.0, 1.0))
        self.assertAlmostEqual(long_trade.gross_return(), 1.1)

        short_trade = Trade.from_orders(Order.sell_at(0, 100.0, 1.0), Order.buy_at(1, 90.0, 1.0))
        self.assertAlmostEqual(short_trade.gross_return(), 1.1)

        open_trade = Trade()
        open_trade.operate(0, 100.0, 1.0)
        with self.assertRaises(TradeStateError):
            open_trade.gross_return()
        self.assertAlmostEqual(open_trade.gross_return(95.0), 0.95)

    def test_equality_by_orders(self) -> None:
        first = Trade.from_orders(Order.buy_at(0, 1.0, 1.0), Order.sell_at(2, 2.0, 1.0))
        second = Trade()
        second.operate(0, 1.0, 1.0)
        second.operate(2, 2.0, 1.0)
        self.assertEqual(first, second)
        self.assertNotEqual(first, Trade())

    def test_zero_cost_defaults(self) -> None:
        trade = Trade()
        self.assertEqual(trade.transaction_cost_model, ZeroCostModel())
        self.assertEqual(trade.holding_cost_model, ZeroCostModel())


if __name__ == '__main__':
    unittest.main()
