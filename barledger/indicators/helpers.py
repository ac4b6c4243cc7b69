"""
Building-block indicators.

These are the small indicators every strategy ends up needing: bar
prices, fixed values, the n-th previous value of another indicator and
the difference between two indicators.  Real formulas (moving averages,
oscillators) are composed from them or written as further subclasses of
`CachedIndicator`.
"""

from __future__ import annotations

from typing import Any, List, Optional

from ..data.series import SeriesHandle
from .cached import CachedIndicator, Indicator


class ClosePriceIndicator(CachedIndicator):
    """Close price of each bar."""

    def calculate(self, index: int) -> Any:
        return self._series.get_bar(index).close


class ConstantIndicator(Indicator):
    """Same value at every index."""

    def __init__(self, series: Optional[SeriesHandle], value: Any) -> None:
        super().__init__(series)
        self._value = value

    def get_value(self, index: int) -> Any:
        return self._value

    def __repr__(self) -> str:
        return f"ConstantIndicator({self._value!r})"


class FixedIndicator(Indicator):
    """Indicator returning predefined values, mostly useful in tests."""

    def __init__(self, series: Optional[SeriesHandle], *values: Any) -> None:
        super().__init__(series)
        self._values: List[Any] = list(values)

    def add_value(self, value: Any) -> None:
        self._values.append(value)

    def get_value(self, index: int) -> Any:
        return self._values[index]


class PreviousValueIndicator(CachedIndicator):
    """Value of `indicator` `n` bars earlier.

    Near the start of the series, where no bar lies `n` positions back,
    the first value is repeated.
    """

    def __init__(self, indicator: Indicator, n: int = 1) -> None:
        if n < 1:
            raise ValueError("n must be a positive number, but was: %s" % n)
        super().__init__(indicator.series)
        self._indicator = indicator
        self._n = n

    def calculate(self, index: int) -> Any:
        return self._indicator.get_value(max(0, index - self._n))

    def __repr__(self) -> str:
        return f"PreviousValueIndicator({self._indicator!r}, n={self._n})"


class DifferenceIndicator(CachedIndicator):
    """`first - second` at each index."""

    def __init__(self, first: Indicator, second: Indicator) -> None:
        super().__init__(first.series)
        self._first = first
        self._second = second

    def calculate(self, index: int) -> Any:
        return self._first.get_value(index) - self._second.get_value(index)
