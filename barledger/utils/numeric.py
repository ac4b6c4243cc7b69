"""
Numeric helpers.

The library does not impose a number type: bar prices, amounts and
indicator values can be `float`, `int` or `decimal.Decimal`.  The only
requirement is the usual arithmetic and ordering.  The undefined value
is `NaN`: comparisons with it are always false and arithmetic with it
yields `NaN` again, which is exactly what a not-yet-known price or an
undefined cost should do.
"""

from __future__ import annotations

from decimal import Decimal
from typing import Any
import pandas as pd


NaN = float("nan")


def is_nan(value: Any) -> bool:
    """Return `True` if `value` is undefined (`None` or any flavour of NaN)."""
    if isinstance(value, Decimal):
        return value.is_nan()
    return bool(pd.isna(value))


def num_like(reference: Any, value: Any) -> Any:
    """Convert a plain number into the numeric type of `reference`.

    Fee coefficients are configured as floats while a series may hold
    `Decimal` prices; mixing the two raises a `TypeError`, so the
    coefficient is converted first.  An undefined reference leaves
    `value` untouched.
    """
    if isinstance(reference, Decimal) and not isinstance(value, Decimal):
        return Decimal(str(value))
    if isinstance(reference, float) and isinstance(value, int):
        return float(value)
    return value


def zero_like(reference: Any) -> Any:
    """Return zero in the numeric type of `reference`."""
    return num_like(reference, 0)
