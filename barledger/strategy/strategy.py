"""
Strategy: an entry rule paired with an exit rule.

The backtest engine asks the strategy at every bar whether the trading
record should be operated.  When no position is open the entry rule is
consulted, otherwise the exit rule.
"""

from __future__ import annotations

import logging
from typing import Optional

from ..config.schema import StrategyConfig
from ..data.series import SeriesHandle
from ..execution.record import TradingRecord
from ..indicators.helpers import ClosePriceIndicator
from .rules import InSlopeRule, IsFallingRule, IsRisingRule, Rule


logger = logging.getLogger(__name__)


class Strategy:
    """Pair of entry and exit rules.

    Parameters
    ----------
    entry_rule : Rule
        Rule that opens a position.
    exit_rule : Rule
        Rule that closes it.
    unstable_period : int
        Number of leading bars during which indicators are not reliable
        yet; no signal is emitted before that index.
    name : str
        Label used in logs and reports.
    """

    def __init__(self, entry_rule: Rule, exit_rule: Rule, unstable_period: int = 0, name: str = "") -> None:
        if entry_rule is None or exit_rule is None:
            raise ValueError("Entry and exit rules must not be None")
        if unstable_period < 0:
            raise ValueError("Unstable period must be positive or 0")
        self.entry_rule = entry_rule
        self.exit_rule = exit_rule
        self.unstable_period = unstable_period
        self.name = name or self.__class__.__name__

    def is_unstable_at(self, index: int) -> bool:
        return index < self.unstable_period

    def should_enter(self, index: int, trading_record: Optional[TradingRecord] = None) -> bool:
        enter = not self.is_unstable_at(index) and self.entry_rule.is_satisfied(index, trading_record)
        logger.debug("%s: should_enter(%d) = %s", self.name, index, enter)
        return enter

    def should_exit(self, index: int, trading_record: Optional[TradingRecord] = None) -> bool:
        exit_ = not self.is_unstable_at(index) and self.exit_rule.is_satisfied(index, trading_record)
        logger.debug("%s: should_exit(%d) = %s", self.name, index, exit_)
        return exit_

    def should_operate(self, index: int, trading_record: TradingRecord) -> bool:
        """Whether the record should be operated at `index`."""
        trade = trading_record.current_trade
        if trade.is_new:
            return self.should_enter(index, trading_record)
        if trade.is_opened:
            return self.should_exit(index, trading_record)
        return False

    def __repr__(self) -> str:
        return f"Strategy({self.name!r})"


def build_slope_strategy(series: SeriesHandle, config: StrategyConfig) -> Strategy:
    """Default strategy driven by the slope of the close price.

    Long (``BUY``): enter when the close is not below the close
    `slope_bar_count` bars ago, exit when it fell over the last
    `falling_bar_count` bars.  Short (``SELL``) mirrors both rules.
    """
    close = ClosePriceIndicator(series)
    if config.starting_type == "SELL":
        entry = InSlopeRule(close, max_slope=0, nth_previous=config.slope_bar_count)
        exit_ = IsRisingRule(close, config.falling_bar_count)
    else:
        entry = InSlopeRule(close, min_slope=0, nth_previous=config.slope_bar_count)
        exit_ = IsFallingRule(close, config.falling_bar_count)
    return Strategy(entry, exit_, unstable_period=config.unstable_period,
                    name=f"slope-{config.starting_type.lower()}")
