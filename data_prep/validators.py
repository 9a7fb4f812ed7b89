"""
Sanity checks for a deal before it is shown or saved.

The engine accepts any numbers; these checks flag the ones that make the output
meaningless:
- Negative amounts
- Percentages that look like ratios or exceed 100
- Resale value that cannot cover the bid
- Fields captured but ignored by the flat-rate model
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List

from core.schema import MONEY_FIELDS, PERCENT_FIELDS, DealParameters, IncomeTaxMode


@dataclass
class ValidationResult:
    """Collects all validation warnings/errors for a deal."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def summary(self) -> str:
        lines = []
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  ✗ {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  ⚠ {w}")
        if not lines:
            lines.append("✓ All checks passed.")
        return "\n".join(lines)


def validate_deal(params: DealParameters) -> ValidationResult:
    """
    Run all checks on a deal.
    Returns a ValidationResult with errors (blocking) and warnings (informational).
    """
    result = ValidationResult()

    # --- Amounts ---
    for name in MONEY_FIELDS:
        if getattr(params, name) < 0:
            result.errors.append(f"{name} is negative ({getattr(params, name)}).")

    if params.bid_value <= 0:
        result.errors.append("bid_value must be greater than zero.")

    # --- Percentages ---
    for name in PERCENT_FIELDS:
        value = getattr(params, name)
        if value < 0:
            result.errors.append(f"{name} is negative ({value}).")
        elif value > 100:
            result.warnings.append(f"{name} = {value} exceeds 100%, check units.")

    # --- Resale ---
    if params.market_value <= 0:
        result.warnings.append("market_value is zero, every scenario will show a loss.")
    elif params.market_value < params.bid_value:
        result.warnings.append(
            f"market_value ({params.market_value:,.2f}) is below bid_value "
            f"({params.bid_value:,.2f})."
        )

    # --- Payment terms ---
    if params.payment_method.is_financed:
        if params.financing_months <= 0:
            result.warnings.append(
                f"{params.payment_method.value} selected but financing_months is {params.financing_months}."
            )
        result.warnings.append(
            "Financing interest is not modeled; results assume the full bid is paid up front."
        )

    # --- Tax ---
    if params.income_tax_mode is IncomeTaxMode.CORPORATE:
        result.warnings.append("Corporate (PJ) mode uses the same flat 15% rate as PF.")
    if params.income_tax_rate not in (0, 15):
        result.warnings.append(
            f"income_tax_rate = {params.income_tax_rate} is stored but the model applies a flat 15%."
        )

    return result
