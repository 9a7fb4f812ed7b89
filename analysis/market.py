"""
Market research: summary statistics over comparable listings.

Only strictly positive prices count; empty slots in the research form carry price 0.
The average is what the research view offers as the deal's resale value.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional

import numpy as np
import pandas as pd
from pydantic import BaseModel


class MarketComparable(BaseModel):
    """One comparable listing found during market research."""
    id: int
    price: float = 0.0
    link: str = ""
    description: str = ""


@dataclass(frozen=True)
class MarketStats:
    average: float
    median: float
    min: float
    max: float
    n_samples: int

    def to_dataframe(self) -> pd.DataFrame:
        return pd.DataFrame([
            {"Metric": "Média", "Value": self.average},
            {"Metric": "Mediana", "Value": self.median},
            {"Metric": "Mínimo", "Value": self.min},
            {"Metric": "Máximo", "Value": self.max},
        ])


def empty_comparables(n: int = 5) -> List[MarketComparable]:
    """Blank research slots, ids starting at 1."""
    return [MarketComparable(id=i) for i in range(1, n + 1)]


def summarize_comparables(items: Iterable[MarketComparable]) -> Optional[MarketStats]:
    """Average/median/min/max over positive prices, or None when there are none."""
    prices = np.array([c.price for c in items if c.price > 0], dtype=float)
    if prices.size == 0:
        return None
    return MarketStats(
        average=float(np.mean(prices)),
        median=float(np.median(prices)),
        min=float(np.min(prices)),
        max=float(np.max(prices)),
        n_samples=int(prices.size),
    )
