"""
Configuration schema and loader.

This module defines dataclasses that mirror the expected structure of
the YAML configuration file (`config.yaml`).  A helper function
`load_config()` reads a YAML file from disk and returns an instance
of `Config` populated with defaults for any missing fields.

When extending the configuration, add new fields to the appropriate
dataclass; `load_config()` builds its defaults from the dataclasses
themselves.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List
import yaml

from ..exceptions import ConfigError


@dataclass
class SeriesConfig:
    """Retention of the bar series.

    Attributes
    ----------
    maximum_bar_count : int
        Number of most recent bars kept in memory.  Indicator caches are
        bounded by the same number.  ``0`` keeps everything.
    """

    maximum_bar_count: int = 0


@dataclass
class CostsConfig:
    """Models trading costs.

    Attributes
    ----------
    fee_per_trade : float
        Fraction of the order value paid on every order (``0.001`` is
        10 bp).
    fee_per_period : float
        Borrowing fee of short positions, as a fraction of the entry
        value per bar held.
    """

    fee_per_trade: float = 0.0
    fee_per_period: float = 0.0


@dataclass
class DataConfig:
    """Data source configuration.

    Attributes
    ----------
    csv_dir : str
        Directory containing one `{SYMBOL}.csv` file per symbol.
    timezone : str
        IANA timezone name used to interpret timestamps.
    """

    csv_dir: str = "data"
    timezone: str = "UTC"


@dataclass
class StrategyConfig:
    """Parameters of the default slope strategy.

    Attributes
    ----------
    starting_type : str
        ``BUY`` to trade long, ``SELL`` to trade short.
    amount : float
        Number of assets per order.
    slope_bar_count : int
        Look-back of the entry slope (close versus close n bars ago).
    falling_bar_count : int
        Window of the exit rule.
    unstable_period : int
        Leading bars during which no order is placed.
    """

    starting_type: str = "BUY"
    amount: float = 1.0
    slope_bar_count: int = 1
    falling_bar_count: int = 3
    unstable_period: int = 0


@dataclass
class Config:
    """Root configuration.

    Attributes
    ----------
    symbols : List[str]
        Symbols to backtest; each needs a CSV file in `data.csv_dir`.
    series : SeriesConfig
        Bar retention.
    costs : CostsConfig
        Transaction and holding costs.
    data : DataConfig
        Data source configuration.
    strategy : StrategyConfig
        Default strategy parameters.
    """

    symbols: List[str] = field(default_factory=lambda: ["EURUSD"])
    series: SeriesConfig = field(default_factory=SeriesConfig)
    costs: CostsConfig = field(default_factory=CostsConfig)
    data: DataConfig = field(default_factory=DataConfig)
    strategy: StrategyConfig = field(default_factory=StrategyConfig)


def _merge_dict(defaults: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge two dictionaries.

    The values in `override` take precedence over those in `defaults`.
    This helper is used when loading YAML into nested dataclasses.
    """
    result: Dict[str, Any] = defaults.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _merge_dict(result[key], value)
        else:
            result[key] = value
    return result


def validate_config(cfg: Config) -> Config:
    """Reject values the engine cannot work with.

    Raises
    ------
    ConfigError
        If a value is out of range.
    """
    if cfg.series.maximum_bar_count < 0:
        raise ConfigError("series.maximum_bar_count must be positive or 0 (unbounded)")
    if cfg.costs.fee_per_trade < 0 or cfg.costs.fee_per_period < 0:
        raise ConfigError("costs must not be negative")
    if cfg.strategy.starting_type not in ("BUY", "SELL"):
        raise ConfigError(f"strategy.starting_type must be BUY or SELL, got {cfg.strategy.starting_type!r}")
    if cfg.strategy.amount <= 0:
        raise ConfigError("strategy.amount must be strictly positive")
    if cfg.strategy.slope_bar_count < 1 or cfg.strategy.falling_bar_count < 1:
        raise ConfigError("strategy bar counts must be at least 1")
    if cfg.strategy.unstable_period < 0:
        raise ConfigError("strategy.unstable_period must be positive or 0")
    return cfg


def load_config(path: str) -> Config:
    """Load a configuration file from the given YAML path.

    Parameters
    ----------
    path : str
        Path to the YAML file.

    Returns
    -------
    Config
        A populated configuration object.  Missing fields are filled with
        the defaults defined in the dataclasses.

    Raises
    ------
    ConfigError
        If a section holds unknown keys, a value has the wrong type or
        is out of range.  Unknown top-level sections are ignored.
    """
    with open(path, "r", encoding="utf-8") as fh:
        raw: Dict[str, Any] = yaml.safe_load(fh) or {}
    if not isinstance(raw, dict):
        raise ConfigError(f"Configuration root must be a mapping: {path}")

    merged = _merge_dict(asdict(Config()), raw)

    try:
        cfg = Config(
            symbols=[str(s) for s in merged['symbols']],
            series=SeriesConfig(**merged['series']),
            costs=CostsConfig(**merged['costs']),
            data=DataConfig(**merged['data']),
            strategy=StrategyConfig(**merged['strategy']),
        )
        cfg.series.maximum_bar_count = int(cfg.series.maximum_bar_count)
        cfg.costs.fee_per_trade = float(cfg.costs.fee_per_trade)
        cfg.costs.fee_per_period = float(cfg.costs.fee_per_period)
        cfg.strategy.starting_type = str(cfg.strategy.starting_type).upper()
        cfg.strategy.amount = float(cfg.strategy.amount)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid configuration in {path}: {exc}") from exc

    return validate_config(cfg)
