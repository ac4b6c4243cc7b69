"""
Indicator base classes and the incremental result cache.

Many indicators are recursive (an exponential moving average needs the
previous average) or read several earlier values of another indicator.
Recomputing them for every rule evaluation would be quadratic, so every
indicator built on `CachedIndicator` memoizes its results per bar index.

The cache is a sliding window that follows the series:

* results are stored in a deque whose last slot always holds the value
  of `highest_result_index`, the greatest index computed so far;
* the deque never holds more than the series' maximum bar count, so the
  memory used by an indicator is bounded like the series itself;
* the value of the last bar of the series is never stored, because the
  last bar may still change (a live bar being updated in place);
* an index that the series has already evicted is answered with the
  oldest value still in the cache.  This is an approximation, not the
  true value.

Each indicator instance owns its cache.  Two indicators over the same
series compute independently.
"""

from __future__ import annotations

import abc
import logging
from collections import deque
from typing import Any, Deque, Optional

from ..data.series import SeriesHandle


logger = logging.getLogger(__name__)

# Marks a slot whose value has not been computed yet.  Distinct from NaN,
# which is a perfectly valid computed value.
_EMPTY = object()


class Indicator(abc.ABC):
    """Something that yields a value for each bar index of a series."""

    def __init__(self, series: Optional[SeriesHandle]) -> None:
        self._series = series

    @property
    def series(self) -> Optional[SeriesHandle]:
        return self._series

    @abc.abstractmethod
    def get_value(self, index: int) -> Any:
        """Return the indicator value at bar `index`."""

    def __repr__(self) -> str:
        return self.__class__.__name__


class CachedIndicator(Indicator):
    """Indicator whose results are memoized per bar index.

    Subclasses implement `calculate(index)`, a pure function of the
    series and of other indicators' values at indices ``<= index``.
    Callers always go through `get_value`.
    """

    def __init__(self, series: Optional[SeriesHandle]) -> None:
        super().__init__(series)
        self._results: Deque[Any] = deque()
        self._highest_result_index = -1

    @abc.abstractmethod
    def calculate(self, index: int) -> Any:
        """Compute the value at bar `index` without any caching."""

    @property
    def highest_result_index(self) -> int:
        """Greatest index whose value has been stored, ``-1`` if none."""
        return self._highest_result_index

    @property
    def cache_size(self) -> int:
        """Number of slots currently held by the cache (computed or not)."""
        return len(self._results)

    def get_value(self, index: int) -> Any:
        series = self._series
        if series is None:
            # Synthetic indicator without a series: nothing to cache against
            return self.calculate(index)

        removed_bars_count = series.removed_bars_count
        max_length = series.maximum_bar_count or None
        # The bound may have been lowered since the last call
        self._remove_exceeding_results(max_length)

        if index < removed_bars_count:
            # Lossy fallback: the bar is gone, answer with the oldest cached value.
            logger.debug("%s: result from bar %d already removed from cache, use %d-th instead",
                         self, index, removed_bars_count)
            self._increase_length_to(removed_bars_count, max_length)
            self._highest_result_index = max(self._highest_result_index, removed_bars_count)
            result = self._results[0]
            if result is _EMPTY:
                # Index 0 resolves to the oldest retained bar of the series
                result = self.calculate(0)
                self._results[0] = result
            return result

        if index == series.end_index:
            # The last bar may still be updated; never cache it.
            return self.calculate(index)

        self._increase_length_to(index, max_length)
        if index > self._highest_result_index:
            self._highest_result_index = index
            result = self.calculate(index)
            self._results[-1] = result
            return result

        slot = self._slot_for(index)
        if slot < 0:
            # Only a handle whose bound and removed count disagree gets here
            return self.calculate(index)
        result = self._results[slot]
        if result is _EMPTY:
            result = self.calculate(index)
            self._results[slot] = result
        return result

    def _slot_for(self, index: int) -> int:
        """Map a bar index to its position in the result deque."""
        return len(self._results) - 1 - (self._highest_result_index - index)

    def _increase_length_to(self, index: int, max_length: Optional[int]) -> None:
        """Grow the deque so that its last slot can hold `index`.

        Parameters
        ----------
        index : int
            Bar index the deque must reach.
        max_length : int or None
            Maximum number of slots to keep, ``None`` for no limit.
        """
        if self._highest_result_index > -1:
            new_results_count = index - self._highest_result_index
            if max_length is not None:
                new_results_count = min(new_results_count, max_length)
            if new_results_count == max_length:
                # The whole window is stale
                self._results = deque([_EMPTY] * max_length)
            elif new_results_count > 0:
                self._results.extend([_EMPTY] * new_results_count)
                self._remove_exceeding_results(max_length)
        else:
            assert not self._results, "Cache results should be empty"
            count = index + 1 if max_length is None else min(index + 1, max_length)
            self._results.extend([_EMPTY] * count)

    def _remove_exceeding_results(self, max_length: Optional[int]) -> None:
        if max_length is None:
            return
        while len(self._results) > max_length:
            self._results.popleft()
