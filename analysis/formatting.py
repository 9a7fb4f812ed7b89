"""
Brazilian number formatting for display: R$ 1.234,56 and 12,34%.
Two decimals everywhere; the engine never rounds, so this is the only place that does.
"""

from __future__ import annotations

import math
import re

from core.utils import to_number

_NON_NUMERIC = re.compile(r"[^0-9,\-]+")


def _group_br(value: float) -> str:
    # 1234567.891 -> "1.234.567,89"
    text = f"{abs(value):,.2f}"
    return text.replace(",", "_").replace(".", ",").replace("_", ".")


def format_currency(value: float) -> str:
    if value is None or not math.isfinite(value):
        return "R$ -"
    sign = "-" if value < 0 and round(abs(value), 2) != 0 else ""
    return f"{sign}R$ {_group_br(value)}"


def format_percent(value: float) -> str:
    """``value`` is a whole-number percent (12.3456 -> "12,35%")."""
    if value is None or not math.isfinite(value):
        return "-"
    sign = "-" if value < 0 and round(abs(value), 2) != 0 else ""
    return f"{sign}{_group_br(value)}%"


def parse_currency(text: str) -> float:
    """Inverse of format_currency: "R$ 1.234,56" -> 1234.56. Unparseable -> 0."""
    cleaned = _NON_NUMERIC.sub("", text or "")
    return to_number(cleaned.replace(",", ".", 1))
