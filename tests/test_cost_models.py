import math
import os
import sys

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from barledger.exceptions import TradeStateError
from barledger.execution.costs import (
    LinearBorrowingCostModel,
    LinearTransactionCostModel,
    ZeroCostModel,
)
from barledger.execution.models import OrderType, Trade

import unittest


class TestLinearTransactionCostModel(unittest.TestCase):
    def test_cost_of_closed_trade(self) -> None:
        model = LinearTransactionCostModel(0.01)
        trade = Trade(OrderType.BUY, model)
        trade.operate(0, 100.0, 1.0)
        trade.operate(1, 100.0, 1.0)
        self.assertAlmostEqual(model.calculate(trade), 2.0)
        self.assertAlmostEqual(trade.get_profit(), -2.0)

    def test_cost_of_open_trade_counts_entry_only(self) -> None:
        model = LinearTransactionCostModel(0.01)
        trade = Trade(OrderType.BUY, model)
        trade.operate(0, 100.0, 2.0)
        self.assertAlmostEqual(model.calculate(trade, 5), 2.0)

    def test_trade_without_entry_is_undefined(self) -> None:
        self.assertTrue(math.isnan(LinearTransactionCostModel(0.01).calculate(Trade())))

    def test_calculate_amount(self) -> None:
        self.assertAlmostEqual(LinearTransactionCostModel(0.005).calculate_amount(200.0, 10.0), 10.0)


class TestLinearBorrowingCostModel(unittest.TestCase):
    def test_long_positions_are_free(self) -> None:
        model = LinearBorrowingCostModel(0.001)
        trade = Trade(OrderType.BUY, holding_cost_model=model)
        trade.operate(0, 100.0, 10.0)
        trade.operate(10, 110.0, 10.0)
        self.assertEqual(model.calculate(trade), 0.0)

    def test_short_position_pays_per_period(self) -> None:
        model = LinearBorrowingCostModel(0.001)
        trade = Trade(OrderType.SELL, holding_cost_model=model)
        trade.operate(0, 100.0, 10.0)
        trade.operate(10, 100.0, 10.0)
        self.assertAlmostEqual(model.calculate(trade), 10.0)
        self.assertAlmostEqual(trade.get_profit(), -10.0)

    def test_open_short_position_needs_final_index(self) -> None:
        model = LinearBorrowingCostModel(0.001)
        trade = Trade(OrderType.SELL, holding_cost_model=model)
        trade.operate(2, 100.0, 10.0)
        with self.assertRaises(TradeStateError):
            model.calculate(trade)
        self.assertAlmostEqual(model.calculate(trade, 7), 5.0)
        self.assertAlmostEqual(trade.get_profit(7, 100.0), -5.0)

    def test_trade_without_entry_is_undefined(self) -> None:
        self.assertTrue(math.isnan(LinearBorrowingCostModel(0.001).calculate(Trade())))

    def test_orders_carry_no_borrowing_cost(self) -> None:
        self.assertEqual(LinearBorrowingCostModel(0.001).calculate_amount(100.0, 5.0), 0.0)


class TestCostModelEquality(unittest.TestCase):
    def test_equal_by_kind_and_coefficient(self) -> None:
        self.assertEqual(LinearTransactionCostModel(0.01), LinearTransactionCostModel(0.01))
        self.assertNotEqual(LinearTransactionCostModel(0.01), LinearTransactionCostModel(0.02))
        self.assertNotEqual(LinearTransactionCostModel(0.01), LinearBorrowingCostModel(0.01))
        self.assertEqual(ZeroCostModel(), ZeroCostModel())
        self.assertEqual(hash(LinearBorrowingCostModel(0.01)), hash(LinearBorrowingCostModel(0.01)))

    def test_zero_cost_model(self) -> None:
        trade = Trade()
        self.assertTrue(math.isnan(ZeroCostModel().calculate(trade)))
        self.assertTrue(math.isnan(trade.trade_cost()))
        trade.operate(0, 10.0, 1.0)
        self.assertEqual(ZeroCostModel().calculate(trade, 3), 0.0)
        self.assertEqual(ZeroCostModel().calculate_amount(10.0, 1.0), 0.0)


if __name__ == '__main__':
    unittest.main()
