"""
Projection builder: runs the scenario calculator across holding periods and bids.

Two outputs, both recomputed wholesale on every parameter change:
  1. Timeline:  one MonthlyResult per configured holding period (ascending)
  2. Bid table: fixed number of rows, bid stepping up from the base bid,
                each row carrying (month, profit, roi) for every holding period

Each cell is an independent calculator call; no period reuses another's result.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from core.config import DEFAULT_SIMULATION_CONFIG, SimulationConfig
from core.schema import DealParameters

from .scenario import MonthlyResult, compute_scenario

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BidMonthResult:
    month: int
    profit: float
    roi: float


@dataclass(frozen=True)
class BidTableRow:
    bid_value: float
    results_by_month: Tuple[BidMonthResult, ...]

    def result_for(self, month: int) -> BidMonthResult:
        for r in self.results_by_month:
            if r.month == month:
                return r
        raise KeyError(f"No result for month {month}. Available: {[r.month for r in self.results_by_month]}")


@dataclass(frozen=True)
class SimulationResult:
    """Everything the views need after one recompute."""
    timeline: Tuple[MonthlyResult, ...]
    bid_table: Tuple[BidTableRow, ...]

    def timeline_by_month(self) -> Dict[int, MonthlyResult]:
        return {r.month: r for r in self.timeline}


def bid_step(params: DealParameters, config: Optional[SimulationConfig] = None) -> float:
    """Increment between bid-table rows; a zero increment falls back to the configured default."""
    cfg = config or DEFAULT_SIMULATION_CONFIG
    return params.bid_increment or cfg.default_bid_increment


def build_timeline(
    params: DealParameters,
    *,
    config: Optional[SimulationConfig] = None,
) -> List[MonthlyResult]:
    cfg = config or DEFAULT_SIMULATION_CONFIG
    return [compute_scenario(params, m, config=cfg) for m in cfg.holding_months]


def build_bid_table(
    params: DealParameters,
    *,
    config: Optional[SimulationConfig] = None,
) -> List[BidTableRow]:
    """
    Bid-sensitivity table: row i simulates bid = bid_value + i * step.

    The row count is fixed by config (10 by default) regardless of input.
    """
    cfg = config or DEFAULT_SIMULATION_CONFIG
    step = bid_step(params, cfg)

    rows: List[BidTableRow] = []
    for i in range(cfg.bid_table_rows):
        sim_bid = params.bid_value + step * i
        cells = []
        for m in cfg.holding_months:
            result = compute_scenario(params, m, sim_bid, config=cfg)
            cells.append(BidMonthResult(month=m, profit=result.net_profit, roi=result.roi_percent))
        rows.append(BidTableRow(bid_value=sim_bid, results_by_month=tuple(cells)))
    return rows


def run_simulation(
    params: DealParameters,
    *,
    config: Optional[SimulationConfig] = None,
) -> SimulationResult:
    """
    Recompute timeline and bid table for a deal.

    This is the single explicit call a caller makes after each committed edit.
    """
    cfg = config or DEFAULT_SIMULATION_CONFIG
    timeline = build_timeline(params, config=cfg)
    bid_table = build_bid_table(params, config=cfg)
    logger.debug(
        "Recomputed deal: bid=%s, %d periods, %d bid rows",
        params.bid_value, len(timeline), len(bid_table),
    )
    return SimulationResult(timeline=tuple(timeline), bid_table=tuple(bid_table))
