"""
Scenario calculator: full cost/revenue breakdown for one holding period and one bid.

Key design principles:
  1. Pure function of (deal, months, bid): no I/O, no shared state, same input -> same floats
  2. Acquisition fees (auctioneer, ITBI, deed, registry) are proportional to the BID
  3. Broker fee is proportional to the SALE PRICE
  4. Condo, IPTU and rent accrue linearly with months; periods are never cumulative
  5. Income tax is a flat rate on positive taxable gain (tax mode does not branch it)
  6. No rounding here; rounding/formatting belongs to the consumers
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Dict, Optional

from core.config import DEFAULT_SIMULATION_CONFIG, SimulationConfig
from core.schema import DealParameters
from core.utils import compound_monthly_rate, percent_to_ratio


@dataclass(frozen=True)
class MonthlyResult:
    """Outcome of buying at ``effective_bid`` and reselling after ``month`` months."""

    month: int
    effective_bid: float
    sale_value: float
    total_revenue: float  # sale + accrued rent

    # Cost breakdown
    auctioneer_fee: float
    itbi: float
    reforms: float
    vacation: float
    debts: float
    advisory: float
    deed: float
    registry: float
    condo_total: float
    iptu_total: float
    opportunity_cost: float  # placeholder, always 0
    financing_interest: float  # placeholder, always 0 (financing is not amortized)
    income_tax: float
    broker_fee: float

    pre_tax_cost: float
    taxable_gain: float
    initial_outlay: float  # cash needed up front
    total_cost: float

    net_profit: float
    roi_percent: float  # net profit / total cost, x100
    monthly_roi: float  # compounded monthly-equivalent rate, x100

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def compute_scenario(
    params: DealParameters,
    months: int,
    bid_override: Optional[float] = None,
    *,
    config: Optional[SimulationConfig] = None,
) -> MonthlyResult:
    """
    Compute the financial outcome of one deal for one holding period.

    Parameters
    ----------
    params : DealParameters
        Deal inputs, already normalized (missing/invalid numbers coerced to 0 upstream).
    months : int
        Holding period, must be >= 1.
    bid_override : float, optional
        Bid to simulate instead of ``params.bid_value``. A zero override counts as not given.
    config : SimulationConfig, optional
        Supplies the flat income tax rate. Defaults to DEFAULT_SIMULATION_CONFIG.
    """
    if isinstance(months, bool) or int(months) != months or months < 1:
        raise ValueError(f"months must be an integer >= 1, got {months!r}")
    months = int(months)
    cfg = config or DEFAULT_SIMULATION_CONFIG

    bid = bid_override if bid_override else params.bid_value

    # Revenue
    sale_price = params.market_value * (1 - percent_to_ratio(params.sale_discount_percent))
    total_rent = params.rent_revenue * months
    total_revenue = sale_price + total_rent

    # Acquisition costs, on the bid
    auctioneer_fee = bid * percent_to_ratio(params.auctioneer_fee_percent)
    itbi = bid * percent_to_ratio(params.itbi_percent)
    deed = bid * percent_to_ratio(params.deed_percent)
    registry = bid * percent_to_ratio(params.registry_percent)

    # Holding costs
    condo_total = params.condo_monthly * months
    iptu_total = params.iptu_monthly * months

    # One-time costs
    reforms = params.reforms
    vacation = params.vacation_cost
    debts = params.debts
    advisory = params.advisory_fee

    # Sale cost, on the sale price
    broker_fee = sale_price * percent_to_ratio(params.broker_fee_percent)

    opportunity_cost = 0.0
    financing_interest = 0.0

    pre_tax_cost = (
        bid + auctioneer_fee + itbi + reforms + vacation + debts + advisory
        + deed + registry + condo_total + iptu_total + broker_fee
    )

    taxable_gain = total_revenue - pre_tax_cost
    income_tax = taxable_gain * cfg.income_tax_rate if taxable_gain > 0 else 0.0

    total_cost = pre_tax_cost + income_tax
    net_profit = total_revenue - total_cost

    roi_percent = net_profit / total_cost * 100 if total_cost > 0 else 0.0
    monthly_roi = compound_monthly_rate(roi_percent, months)

    initial_outlay = bid + auctioneer_fee + itbi + reforms + vacation + debts + advisory + deed + registry
    if params.payment_method.has_cash_discount:
        initial_outlay -= bid * percent_to_ratio(params.cash_discount_percent)

    return MonthlyResult(
        month=months,
        effective_bid=bid,
        sale_value=sale_price,
        total_revenue=total_revenue,
        auctioneer_fee=auctioneer_fee,
        itbi=itbi,
        reforms=reforms,
        vacation=vacation,
        debts=debts,
        advisory=advisory,
        deed=deed,
        registry=registry,
        condo_total=condo_total,
        iptu_total=iptu_total,
        opportunity_cost=opportunity_cost,
        financing_interest=financing_interest,
        income_tax=income_tax,
        broker_fee=broker_fee,
        pre_tax_cost=pre_tax_cost,
        taxable_gain=taxable_gain,
        initial_outlay=initial_outlay,
        total_cost=total_cost,
        net_profit=net_profit,
        roi_percent=roi_percent,
        monthly_roi=monthly_roi,
    )
