"""Safe numeric coercion for heterogeneous cell values."""

from __future__ import annotations

import math
import numbers
from typing import Any, Optional

import pandas as pd


def is_absent(value: Any) -> bool:
    """Return True for ``None``, pandas missing markers and blank strings."""
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    try:
        return bool(pd.isna(value))
    except (TypeError, ValueError):
        # Array-likes have no single missing state
        return False


def parse_number(value: Any) -> Optional[float]:
    """Coerce a cell value to a finite float.

    Numbers pass through, strings are trimmed and converted. Anything absent,
    unparseable or non-finite (NaN, +/-inf) yields ``None``; this function
    never raises for malformed input.
    """
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, numbers.Real):
        number = float(value)
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None

    if not math.isfinite(number):
        return None
    return number
