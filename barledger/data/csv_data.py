"""
CSV data loader.

This module provides a class to load historical OHLCV data from CSV
files into a `BarSeries`.  The expected schema for each CSV is:

```
time,open,high,low,close,volume
```

Only the `time`, `open`, `high`, `low` and `close` columns are
required.  Additional columns are ignored.  Tab-separated MetaTrader
exports (`<DATE>`, `<TIME>`, `<OPEN>`, ...) are recognised as well.
Timestamps are localised to the timezone given in the configuration.
"""

from __future__ import annotations

import logging
from pathlib import Path
import pandas as pd

from .series import BarSeries


logger = logging.getLogger(__name__)

MT5_COLUMNS = ["<DATE>", "<TIME>", "<OPEN>", "<HIGH>", "<LOW>", "<CLOSE>"]


class CSVDataLoader:
    """Load OHLCV data from CSV files for backtesting.

    Parameters
    ----------
    csv_dir : str
        Directory where the CSV files are located.  Each symbol's file
        must be named `{SYMBOL}.csv`.
    timezone : str
        IANA timezone name used to localise timestamps.
    maximum_bar_count : int
        Retention bound applied to the returned series (``0`` keeps
        every bar).
    """

    def __init__(self, csv_dir: str, timezone: str, maximum_bar_count: int = 0) -> None:
        self.csv_dir = Path(csv_dir)
        self.timezone = timezone
        self.maximum_bar_count = maximum_bar_count

    def load(self, symbol: str) -> BarSeries:
        """Read `{csv_dir}/{symbol}.csv` and return it as a bar series."""
        df = self.load_frame(symbol)
        series = BarSeries.from_frame(df, name=symbol, maximum_bar_count=self.maximum_bar_count)
        logger.info("Loaded %d bars for %s (%d retained)", len(df), symbol, series.bar_count)
        return series

    def load_frame(self, symbol: str) -> pd.DataFrame:
        file_path = self.csv_dir / f"{symbol}.csv"
        if not file_path.exists():
            raise FileNotFoundError(f"CSV file not found for symbol {symbol}: {file_path}")

        with file_path.open("r", encoding="utf-8") as fh:
            header = fh.readline()

        if "<DATE>" in header:
            df = self._read_mt5(file_path, symbol)
        else:
            df = self._read_standard(file_path, symbol)

        if df.index.tz is None:
            df.index = df.index.tz_localize(self.timezone)
        else:
            df.index = df.index.tz_convert(self.timezone)
        return df

    def _read_standard(self, file_path: Path, symbol: str) -> pd.DataFrame:
        df = pd.read_csv(file_path)
        df.columns = [c.strip().lower() for c in df.columns]
        if "time" not in df.columns:
            raise ValueError(
                f"Unrecognized CSV format for {symbol}: no 'time' column. "
                f"Found columns: {list(df.columns)}"
            )
        df["time"] = pd.to_datetime(df["time"], errors="raise")
        return df.set_index("time").sort_index()

    def _read_mt5(self, file_path: Path, symbol: str) -> pd.DataFrame:
        df = pd.read_csv(file_path, sep="\t", engine="python")
        df.columns = [c.strip() for c in df.columns]

        missing = [c for c in MT5_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(
                f"Unrecognized CSV format for {symbol}. Missing columns: {missing}. "
                f"Found columns: {list(df.columns)}"
            )

        dt = df["<DATE>"].astype(str).str.strip() + " " + df["<TIME>"].astype(str).str.strip()
        ts = pd.to_datetime(dt, format="%Y.%m.%d %H:%M:%S", errors="coerce")
        if ts.isna().any():
            # fallback if format differs
            ts = pd.to_datetime(dt, errors="coerce")
        if ts.isna().any():
            bad = dt[ts.isna()].head(5).tolist()
            raise ValueError(f"Could not parse MT5 DATE/TIME for {symbol}. Examples: {bad}")

        volume = df["<TICKVOL>"] if "<TICKVOL>" in df.columns else pd.Series(0.0, index=df.index)
        return pd.DataFrame(
            {
                "open": df["<OPEN>"].astype(float).to_numpy(),
                "high": df["<HIGH>"].astype(float).to_numpy(),
                "low": df["<LOW>"].astype(float).to_numpy(),
                "close": df["<CLOSE>"].astype(float).to_numpy(),
                "volume": volume.astype(float).to_numpy(),
            },
            index=pd.DatetimeIndex(ts),
        ).sort_index()
