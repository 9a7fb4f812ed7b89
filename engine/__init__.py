"""
Deal simulation engine: scenario calculator + projection builder.
"""

from .scenario import MonthlyResult, compute_scenario
from .projection import (
    BidMonthResult,
    BidTableRow,
    SimulationResult,
    build_bid_table,
    build_timeline,
    run_simulation,
)

__all__ = [
    "MonthlyResult",
    "compute_scenario",
    "BidMonthResult",
    "BidTableRow",
    "SimulationResult",
    "build_bid_table",
    "build_timeline",
    "run_simulation",
]
