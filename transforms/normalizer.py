"""Numeric precision reduction for JSON-like value trees.

Non-integral floats are rounded half-up to 3 decimal places; integral
floats are written as integers, the way a JSON encoder without a float
type would emit them. Everything else keeps its value. The pass is
idempotent: a value already on the 1/1000 grid maps to itself.
"""

import math
from collections.abc import Mapping
from typing import Any

PRECISION = 3
_SCALE = 10**PRECISION

# Beyond 2**53 an integral float is not an exact integer; keep it a float.
_MAX_EXACT_INT = 2**53


def round_number(value: float) -> "float | int":
    """Round a float half-up to :data:`PRECISION` decimals."""
    if not math.isfinite(value):
        return value
    if value.is_integer():
        return int(value) if abs(value) <= _MAX_EXACT_INT else value
    rounded = math.floor(value * _SCALE + 0.5) / _SCALE
    if rounded.is_integer() and abs(rounded) <= _MAX_EXACT_INT:
        return int(rounded)
    return rounded


def normalize(value: Any) -> Any:
    """Return a new tree with every float rounded.

    Lists and tuples come back as lists, mappings as dicts with the same
    key order. The input is never modified.
    """
    if isinstance(value, bool) or value is None or isinstance(value, (int, str)):
        return value
    if isinstance(value, float):
        return round_number(value)
    if isinstance(value, Mapping):
        return {key: normalize(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [normalize(item) for item in value]
    return value
