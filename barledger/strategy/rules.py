"""
Trading rules.

A rule answers one yes/no question at a bar index, usually by reading
indicator values and optionally the trading record.  Rules combine with
`and_`, `or_` and `negation` into the entry and exit conditions of a
`Strategy`.
"""

from __future__ import annotations

import abc
import logging
from typing import Any, Optional

from ..execution.record import TradingRecord
from ..indicators.cached import Indicator
from ..indicators.helpers import DifferenceIndicator, PreviousValueIndicator
from ..utils.numeric import NaN, is_nan


logger = logging.getLogger(__name__)


class Rule(abc.ABC):
    """Base class of all rules."""

    @abc.abstractmethod
    def is_satisfied(self, index: int, trading_record: Optional[TradingRecord] = None) -> bool:
        """Return `True` if the rule holds at bar `index`."""

    def and_(self, rule: "Rule") -> "Rule":
        return AndRule(self, rule)

    def or_(self, rule: "Rule") -> "Rule":
        return OrRule(self, rule)

    def negation(self) -> "Rule":
        return NotRule(self)

    def _trace(self, index: int, satisfied: bool) -> None:
        logger.debug("%s#is_satisfied(%d): %s", self.__class__.__name__, index, satisfied)


class AndRule(Rule):

    def __init__(self, rule1: Rule, rule2: Rule) -> None:
        self.rule1 = rule1
        self.rule2 = rule2

    def is_satisfied(self, index: int, trading_record: Optional[TradingRecord] = None) -> bool:
        satisfied = (self.rule1.is_satisfied(index, trading_record)
                     and self.rule2.is_satisfied(index, trading_record))
        self._trace(index, satisfied)
        return satisfied


class OrRule(Rule):

    def __init__(self, rule1: Rule, rule2: Rule) -> None:
        self.rule1 = rule1
        self.rule2 = rule2

    def is_satisfied(self, index: int, trading_record: Optional[TradingRecord] = None) -> bool:
        satisfied = (self.rule1.is_satisfied(index, trading_record)
                     or self.rule2.is_satisfied(index, trading_record))
        self._trace(index, satisfied)
        return satisfied


class NotRule(Rule):

    def __init__(self, rule: Rule) -> None:
        self.rule = rule

    def is_satisfied(self, index: int, trading_record: Optional[TradingRecord] = None) -> bool:
        satisfied = not self.rule.is_satisfied(index, trading_record)
        self._trace(index, satisfied)
        return satisfied


class InSlopeRule(Rule):
    """Indicator-in-slope rule.

    Satisfied when the difference between the indicator value and its
    n-th previous value lies between `min_slope` and `max_slope`.  A NaN
    bound is ignored; with both bounds NaN the rule never holds.

    Parameters
    ----------
    ref : Indicator
        The reference indicator.
    min_slope, max_slope : number
        Inclusive bounds of the slope.
    nth_previous : int
        How many bars back the previous value is taken.
    """

    def __init__(self, ref: Indicator, min_slope: Any = NaN, max_slope: Any = NaN,
                 nth_previous: int = 1) -> None:
        self.ref = ref
        self.prev = PreviousValueIndicator(ref, nth_previous)
        self.diff = DifferenceIndicator(ref, self.prev)
        self.min_slope = min_slope
        self.max_slope = max_slope

    def is_satisfied(self, index: int, trading_record: Optional[TradingRecord] = None) -> bool:
        val = self.diff.get_value(index)
        min_ok = is_nan(self.min_slope) or val >= self.min_slope
        max_ok = is_nan(self.max_slope) or val <= self.max_slope
        unbounded = is_nan(self.min_slope) and is_nan(self.max_slope)

        satisfied = min_ok and max_ok and not unbounded
        self._trace(index, satisfied)
        return satisfied


class _DirectionRule(Rule):
    """Share of strict moves in one direction over the last `bar_count` bars."""

    def __init__(self, ref: Indicator, bar_count: int, min_strength: float = 1.0) -> None:
        if bar_count < 1:
            raise ValueError("bar_count must be a positive number, but was: %s" % bar_count)
        self.ref = ref
        self.bar_count = bar_count
        self.min_strength = 0.99 if min_strength >= 1 else min_strength

    @abc.abstractmethod
    def _moved(self, current: Any, previous: Any) -> bool:
        ...

    def is_satisfied(self, index: int, trading_record: Optional[TradingRecord] = None) -> bool:
        count = 0
        for i in range(max(0, index - self.bar_count + 1), index + 1):
            if self._moved(self.ref.get_value(i), self.ref.get_value(max(0, i - 1))):
                count += 1

        satisfied = count / self.bar_count >= self.min_strength
        self._trace(index, satisfied)
        return satisfied


class IsFallingRule(_DirectionRule):
    """Satisfied when the indicator decreases within the last `bar_count` bars.

    `min_strength` is the required share of falling steps, between 0 and
    1 (``1`` for a strictly falling indicator).
    """

    def _moved(self, current: Any, previous: Any) -> bool:
        return current < previous


class IsRisingRule(_DirectionRule):
    """Satisfied when the indicator increases within the last `bar_count` bars."""

    def _moved(self, current: Any, previous: Any) -> bool:
        return current > previous
