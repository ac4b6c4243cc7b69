import os
import sys
import tempfile
import pandas as pd

CURRENT_DIR = os.path.dirname(__file__)
PROJECT_ROOT = os.path.abspath(os.path.join(CURRENT_DIR, os.pardir))
if PROJECT_ROOT not in sys.path:
    sys.path.insert(0, PROJECT_ROOT)

from barledger.data.csv_data import CSVDataLoader
from barledger.data.series import BarSeries

import unittest


START = pd.Timestamp("2024-01-01", tz="UTC")


class TestBarSeries(unittest.TestCase):
    def _series(self, count, maximum_bar_count=0):
        series = BarSeries("TEST", maximum_bar_count=maximum_bar_count)
        for i in range(count):
            series.add_bar(START + pd.Timedelta(hours=i), i, i + 1, i - 1, i + 0.5, 10)
        return series

    def test_empty_series(self) -> None:
        series = BarSeries("EMPTY")
        self.assertTrue(series.is_empty)
        self.assertEqual(series.begin_index, -1)
        self.assertEqual(series.end_index, -1)
        with self.assertRaises(IndexError):
            series.get_bar(0)

    def test_unbounded_series_keeps_every_bar(self) -> None:
        series = self._series(10)
        self.assertEqual(series.bar_count, 10)
        self.assertEqual(series.begin_index, 0)
        self.assertEqual(series.end_index, 9)
        self.assertEqual(series.removed_bars_count, 0)
        self.assertEqual(series.get_bar(4).close, 4.5)

    def test_bounded_series_evicts_oldest_bars(self) -> None:
        series = self._series(10, maximum_bar_count=4)
        self.assertEqual(series.bar_count, 4)
        self.assertEqual(series.removed_bars_count, 6)
        self.assertEqual(series.begin_index, 6)
        self.assertEqual(series.end_index, 9)
        self.assertEqual(series.get_bar(7).open, 7)

    def test_evicted_bar_falls_back_to_oldest_retained(self) -> None:
        series = self._series(10, maximum_bar_count=4)
        self.assertEqual(series.get_bar(2), series.get_bar(6))

    def test_index_beyond_end_raises(self) -> None:
        series = self._series(3)
        with self.assertRaises(IndexError):
            series.get_bar(3)

    def test_set_maximum_bar_count_evicts_immediately(self) -> None:
        series = self._series(10)
        series.set_maximum_bar_count(3)
        self.assertEqual(series.removed_bars_count, 7)
        self.assertEqual(series.begin_index, 7)
        with self.assertRaises(ValueError):
            series.set_maximum_bar_count(0)

    def test_timestamps_must_increase(self) -> None:
        series = self._series(2)
        with self.assertRaises(ValueError):
            series.add_bar(START, 1, 1, 1, 1)

    def test_replace_last_bar(self) -> None:
        series = self._series(3)
        series.add_bar(START + pd.Timedelta(hours=2), 5, 6, 4, 5.5, replace=True)
        self.assertEqual(series.bar_count, 3)
        self.assertEqual(series.get_bar(2).close, 5.5)

    def test_frame_round_trip_keeps_global_index(self) -> None:
        series = self._series(6, maximum_bar_count=4)
        df = series.to_frame()
        self.assertEqual(list(df.index), [2, 3, 4, 5])
        rebuilt = BarSeries.from_frame(df.set_index("timestamp"), name="COPY")
        self.assertEqual(rebuilt.bar_count, 4)
        self.assertEqual(rebuilt.get_bar(0).close, series.get_bar(2).close)

    def test_from_frame_requires_ohlc(self) -> None:
        df = pd.DataFrame({"open": [1.0], "close": [1.0]}, index=[START])
        with self.assertRaises(ValueError):
            BarSeries.from_frame(df)


class TestCSVDataLoader(unittest.TestCase):
    def test_load_standard_csv(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "EURUSD.csv")
            with open(path, "w", encoding="utf-8") as fh:
                fh.write("time,open,high,low,close\n")
                fh.write("2024-01-01 10:00,1.10,1.12,1.09,1.11\n")
                fh.write("2024-01-01 09:00,1.08,1.10,1.07,1.10\n")
                fh.write("2024-01-01 11:00,1.11,1.13,1.10,1.12\n")
            series = CSVDataLoader(tmp, "Europe/Brussels", maximum_bar_count=2).load("EURUSD")
        self.assertEqual(series.name, "EURUSD")
        self.assertEqual(series.bar_count, 2)
        self.assertEqual(series.removed_bars_count, 1)
        self.assertAlmostEqual(series.get_bar(2).close, 1.12)
        self.assertEqual(str(series.get_bar(2).timestamp.tz), "Europe/Brussels")
        self.assertEqual(series.get_bar(2).volume, 0.0)

    def test_load_mt5_export(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            path = os.path.join(tmp, "GBPUSD.csv")
            with open(path, "w", encoding="utf-8") as fh:
                fh.write("<DATE>\t<TIME>\t<OPEN>\t<HIGH>\t<LOW>\t<CLOSE>\t<TICKVOL>\n")
                fh.write("2024.01.02\t00:00:00\t1.27\t1.28\t1.26\t1.275\t120\n")
                fh.write("2024.01.02\t01:00:00\t1.275\t1.29\t1.27\t1.285\t90\n")
            series = CSVDataLoader(tmp, "UTC").load("GBPUSD")
        self.assertEqual(series.bar_count, 2)
        self.assertAlmostEqual(series.get_bar(1).close, 1.285)
        self.assertEqual(series.get_bar(0).volume, 120)

    def test_missing_file(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            with self.assertRaises(FileNotFoundError):
                CSVDataLoader(tmp, "UTC").load("NOPE")


if __name__ == '__main__':
    unittest.main()
