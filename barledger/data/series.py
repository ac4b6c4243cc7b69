"""
Bar series with a retention bound.

A `BarSeries` is an append-only sequence of OHLCV bars addressed by a
global index.  When a maximum bar count is set, the oldest bars are
evicted as new ones arrive; the global index of a bar never changes,
so the first retained bar sits at `removed_bars_count`.

Indicators only depend on the small `SeriesHandle` protocol, which
means any object exposing the same four members can stand in for a
`BarSeries` (tests use this to build synthetic series).
"""

from __future__ import annotations

import logging
from typing import Any, List, NamedTuple, Protocol
import pandas as pd


logger = logging.getLogger(__name__)

BAR_COLUMNS = ["open", "high", "low", "close", "volume"]


class SeriesHandle(Protocol):
    """Read-only view of a series needed by the indicator cache."""

    @property
    def end_index(self) -> int: ...

    @property
    def removed_bars_count(self) -> int: ...

    @property
    def maximum_bar_count(self) -> int: ...

    def get_bar(self, index: int) -> "Bar": ...


class Bar(NamedTuple):
    """A single OHLCV sample."""
    timestamp: Any
    open: Any
    high: Any
    low: Any
    close: Any
    volume: Any = 0.0


class BarSeries:
    """In-memory bar series.

    Parameters
    ----------
    name : str
        Label of the series, usually the instrument symbol.
    maximum_bar_count : int
        Retention bound.  ``0`` keeps every bar.
    """

    def __init__(self, name: str = "", maximum_bar_count: int = 0) -> None:
        if maximum_bar_count < 0:
            raise ValueError("Maximum bar count must be positive or 0 (unbounded)")
        self.name = name
        self._bars: List[Bar] = []
        self._removed_bars_count = 0
        self._maximum_bar_count = maximum_bar_count

    @classmethod
    def from_frame(cls, df: pd.DataFrame, name: str = "", maximum_bar_count: int = 0) -> "BarSeries":
        """Build a series from a DataFrame indexed by timestamp.

        The frame needs `open`, `high`, `low` and `close` columns; a
        missing `volume` column is filled with zeros.
        """
        missing = [c for c in BAR_COLUMNS[:4] if c not in df.columns]
        if missing:
            raise ValueError(f"Missing columns for bar series {name!r}: {missing}")
        series = cls(name=name, maximum_bar_count=maximum_bar_count)
        volumes = df["volume"] if "volume" in df.columns else pd.Series(0.0, index=df.index)
        for ts, o, h, l, c, v in zip(df.index, df["open"], df["high"], df["low"], df["close"], volumes):
            series.add_bar(ts, o, h, l, c, v)
        return series

    # ------------------------------------------------------------------
    # SeriesHandle
    # ------------------------------------------------------------------

    @property
    def begin_index(self) -> int:
        return -1 if not self._bars else self._removed_bars_count

    @property
    def end_index(self) -> int:
        return -1 if not self._bars else self._removed_bars_count + len(self._bars) - 1

    @property
    def removed_bars_count(self) -> int:
        return self._removed_bars_count

    @property
    def maximum_bar_count(self) -> int:
        return self._maximum_bar_count

    def get_bar(self, index: int) -> Bar:
        """Return the bar at global position `index`.

        Bars that have already been evicted are no longer available; the
        oldest retained bar is returned in their place.
        """
        if not self._bars:
            raise IndexError(f"Bar series {self.name!r} is empty")
        if index > self.end_index:
            raise IndexError(f"Bar index {index} is beyond end index {self.end_index}")
        inner = index - self._removed_bars_count
        if inner < 0:
            logger.debug("%s: bar %d already removed, using bar %d instead",
                         self.name, index, self._removed_bars_count)
            inner = 0
        return self._bars[inner]

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    @property
    def bar_count(self) -> int:
        """Number of bars currently retained."""
        return len(self._bars)

    @property
    def is_empty(self) -> bool:
        return not self._bars

    def add_bar(self, timestamp: Any, open: Any, high: Any, low: Any, close: Any,
                volume: Any = 0.0, replace: bool = False) -> None:
        """Append a bar, or overwrite the last one when `replace` is set.

        Timestamps must be strictly increasing.  Replacing the last bar
        is how a live, still-forming bar gets updated.
        """
        bar = Bar(timestamp, open, high, low, close, volume)
        if replace:
            if not self._bars:
                raise IndexError(f"Bar series {self.name!r} is empty, nothing to replace")
            self._bars[-1] = bar
            return
        if self._bars and not timestamp > self._bars[-1].timestamp:
            raise ValueError(
                f"Cannot add a bar at {timestamp}: it does not follow the last bar "
                f"at {self._bars[-1].timestamp}"
            )
        self._bars.append(bar)
        self._remove_exceeding_bars()

    def set_maximum_bar_count(self, maximum_bar_count: int) -> None:
        """Bound the series to its `maximum_bar_count` most recent bars."""
        if maximum_bar_count <= 0:
            raise ValueError("Maximum bar count must be strictly positive")
        self._maximum_bar_count = maximum_bar_count
        self._remove_exceeding_bars()

    def _remove_exceeding_bars(self) -> None:
        if self._maximum_bar_count and len(self._bars) > self._maximum_bar_count:
            excess = len(self._bars) - self._maximum_bar_count
            del self._bars[:excess]
            self._removed_bars_count += excess

    def to_frame(self) -> pd.DataFrame:
        """Return the retained bars as a DataFrame indexed by global bar position."""
        df = pd.DataFrame([b._asdict() for b in self._bars], columns=["timestamp"] + BAR_COLUMNS)
        df.index = pd.RangeIndex(self._removed_bars_count, self._removed_bars_count + len(df))
        return df

    def __len__(self) -> int:
        return len(self._bars)

    def __repr__(self) -> str:
        return (f"BarSeries(name={self.name!r}, bars={len(self._bars)}, "
                f"removed={self._removed_bars_count}, maximum={self._maximum_bar_count})")
