"""
Core package: deal schema, simulation configuration, and shared numeric helpers.
No business logic lives here.
"""

from .schema import AuctionType, DealParameters, IncomeTaxMode, PaymentMethod
from .config import DEFAULT_SIMULATION_CONFIG, SimulationConfig
from .utils import compound_monthly_rate, percent_to_ratio, to_number

__all__ = [
    "AuctionType",
    "DealParameters",
    "IncomeTaxMode",
    "PaymentMethod",
    "DEFAULT_SIMULATION_CONFIG",
    "SimulationConfig",
    "compound_monthly_rate",
    "percent_to_ratio",
    "to_number",
]
