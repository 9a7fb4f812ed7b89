"""
Simulation configuration.
Holding periods and bid-table shape are fixed by configuration, never by user input.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class SimulationConfig:
    # ascending holding periods, in months (all >= 1)
    holding_months: Tuple[int, ...] = (1, 3, 4, 6, 7, 9, 10, 12)

    # bid-sensitivity table
    bid_table_rows: int = 10
    default_bid_increment: float = 1000.0  # used when the deal's increment is zero

    # flat capital-gains rate applied to positive taxable gain
    income_tax_rate: float = 0.15

    def __post_init__(self) -> None:
        months = tuple(self.holding_months)
        if not months:
            raise ValueError("holding_months must not be empty.")
        if any(m < 1 for m in months):
            raise ValueError(f"holding_months must all be >= 1, got {months}")
        if list(months) != sorted(set(months)):
            raise ValueError(f"holding_months must be strictly ascending, got {months}")
        if self.bid_table_rows < 1:
            raise ValueError("bid_table_rows must be >= 1.")
        object.__setattr__(self, "holding_months", months)

    @property
    def longest_horizon(self) -> int:
        return self.holding_months[-1]


DEFAULT_SIMULATION_CONFIG = SimulationConfig()
