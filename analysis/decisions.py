"""
Deal decision support: ROI bands, headline numbers, and warning flags.

Translates the simulation into answers a bidder can act on:
  Q1: "Does this deal clear my minimum profit?"   -> ROI band at the longest horizon
  Q2: "When does it start paying off?"            -> first profitable holding period
  Q3: "How high can I bid?"                       -> highest simulated bid still on target
  Q4: "How much cash do I need on day one?"       -> initial outlay
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

import pandas as pd

from core.schema import DealParameters
from engine.projection import SimulationResult

from .formatting import format_currency, format_percent


class RoiBand(str, Enum):
    SUCCESS = "success"  # at or above the minimum profit
    WARNING = "warning"  # profitable, below the minimum
    DANGER = "danger"  # break-even or loss


def classify_roi(roi_percent: float, min_profit_percent: float) -> RoiBand:
    """Band used to color ROI cells: green / yellow / red."""
    if roi_percent >= min_profit_percent:
        return RoiBand.SUCCESS
    if roi_percent > 0:
        return RoiBand.WARNING
    return RoiBand.DANGER


@dataclass
class DealReport:
    """Structured decision output for one deal."""
    deal_name: str
    bid_value: float
    min_profit_percent: float
    initial_outlay: float

    # Longest holding period
    horizon_months: int
    horizon_profit: float
    horizon_roi: float
    horizon_band: RoiBand

    # Best holding period by ROI and by monthly-equivalent rate
    best_roi_month: int
    best_roi: float
    best_monthly_month: int
    best_monthly_roi: float

    first_profitable_month: Optional[int]
    max_bid_on_target: Optional[float]  # highest table bid meeting min profit at horizon

    flags: List[str] = field(default_factory=list)

    def to_dataframe(self) -> pd.DataFrame:
        """Convert to a display-friendly table."""
        rows = [
            {"Metric": "Imóvel", "Value": self.deal_name},
            {"Metric": "Lance", "Value": format_currency(self.bid_value)},
            {"Metric": "Desembolso Inicial", "Value": format_currency(self.initial_outlay)},
            {"Metric": "Lucro Mínimo", "Value": format_percent(self.min_profit_percent)},
            {"Metric": f"Resultado {self.horizon_months} meses", "Value": format_currency(self.horizon_profit)},
            {"Metric": f"Lucro {self.horizon_months} meses", "Value": format_percent(self.horizon_roi)},
            {"Metric": "Melhor Lucro (%)", "Value": f"{format_percent(self.best_roi)} ({self.best_roi_month} meses)"},
            {
                "Metric": "Melhor Taxa Mensal",
                "Value": f"{format_percent(self.best_monthly_roi)} ({self.best_monthly_month} meses)",
            },
            {
                "Metric": "Primeiro Mês Lucrativo",
                "Value": str(self.first_profitable_month) if self.first_profitable_month is not None else "N/A",
            },
            {
                "Metric": "Lance Máximo no Alvo",
                "Value": format_currency(self.max_bid_on_target) if self.max_bid_on_target is not None else "N/A",
            },
        ]
        if self.flags:
            rows.append({"Metric": "FLAGS", "Value": " | ".join(self.flags)})
        return pd.DataFrame(rows)


def generate_deal_report(
    params: DealParameters,
    result: SimulationResult,
    *,
    deal_name: str = "Imóvel sem nome",
) -> DealReport:
    """
    Summarize a simulation for the report view.

    Parameters
    ----------
    params : DealParameters
        The deal that produced ``result``; supplies the minimum profit policy.
    result : SimulationResult
        Output of engine.run_simulation().
    deal_name : str
        Label for the report header.
    """
    timeline = sorted(result.timeline, key=lambda r: r.month)
    if not timeline:
        raise ValueError("Simulation result has an empty timeline.")

    target = params.min_profit_percent
    horizon = timeline[-1]
    best_roi = max(timeline, key=lambda r: r.roi_percent)
    best_monthly = max(timeline, key=lambda r: r.monthly_roi)
    first_profitable = next((r.month for r in timeline if r.net_profit > 0), None)

    on_target = [
        row.bid_value for row in result.bid_table
        if row.result_for(horizon.month).roi >= target
    ]
    max_bid = max(on_target) if on_target else None

    band = classify_roi(horizon.roi_percent, target)

    flags = []
    if band is RoiBand.DANGER:
        flags.append(f"LOSS: no profit after {horizon.month} months")
    elif band is RoiBand.WARNING:
        flags.append(f"BELOW_TARGET: {horizon.month}-month ROI under {target:g}%")
    if result.bid_table and len(on_target) == len(result.bid_table):
        flags.append("TABLE_CEILING: every simulated bid meets the target")
    if params.payment_method.is_financed:
        flags.append("FINANCING_NOT_MODELED: interest on financed bids is not included")
    if params.debts > 0:
        flags.append("ASSUMED_DEBTS: buyer assumes pre-existing debts")

    return DealReport(
        deal_name=deal_name,
        bid_value=params.bid_value,
        min_profit_percent=target,
        initial_outlay=horizon.initial_outlay,
        horizon_months=horizon.month,
        horizon_profit=horizon.net_profit,
        horizon_roi=horizon.roi_percent,
        horizon_band=band,
        best_roi_month=best_roi.month,
        best_roi=best_roi.roi_percent,
        best_monthly_month=best_monthly.month,
        best_monthly_roi=best_monthly.monthly_roi,
        first_profitable_month=first_profitable,
        max_bid_on_target=max_bid,
        flags=flags,
    )
