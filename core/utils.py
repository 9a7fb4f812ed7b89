from __future__ import annotations

import math
from typing import Any

import numpy as np


def percent_to_ratio(value: float) -> float:
    """Whole-number percent (5 means 5%) to a multiplier (0.05)."""
    return value / 100


def to_number(value: Any, default: float = 0.0) -> float:
    """
    Coerce a raw form/JSON value to a finite float.
    Accepts numbers and numeric strings (comma or dot decimal); anything else -> default.
    """
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float, np.integer, np.floating)):
        out = float(value)
    elif isinstance(value, str):
        text = value.strip().replace(" ", "")
        if not text:
            return default
        if "," in text:
            text = text.replace(".", "").replace(",", ".")
        try:
            out = float(text)
        except ValueError:
            return default
    else:
        return default
    if not math.isfinite(out):
        return default
    return out


def compound_monthly_rate(total_return_percent: float, months: int) -> float:
    """
    Monthly rate that compounds to ``total_return_percent`` over ``months``:
    ((1 + R)^(1/n) - 1) * 100. A negative base yields NaN instead of raising.
    """
    with np.errstate(invalid="ignore"):
        base = np.float64(1.0 + total_return_percent / 100)
        return float((np.power(base, 1.0 / months) - 1.0) * 100)
