"""
Normalize raw deal input (form state, persisted JSON) into DealParameters.

The engine does not re-validate: every numeric field that is missing, non-numeric,
NaN or infinite becomes 0 here, at the boundary.
"""

from __future__ import annotations

from typing import Any, Dict, Mapping

from core.schema import DEAL_FIELDS, ENUM_FIELDS, DealParameters, IncomeTaxMode, PaymentMethod
from core.utils import to_number


# camelCase keys as stored by the original form state
_KEY_ALIASES: Dict[str, str] = {
    "bidValue": "bid_value",
    "bidIncrement": "bid_increment",
    "auctioneerFeePercent": "auctioneer_fee_percent",
    "itbiPercent": "itbi_percent",
    "deedPercent": "deed_percent",
    "registryPercent": "registry_percent",
    "condoMonthly": "condo_monthly",
    "iptuMonthly": "iptu_monthly",
    "vacationCost": "vacation_cost",
    "advisoryFee": "advisory_fee",
    "paymentMethod": "payment_method",
    "cashDiscountPercent": "cash_discount_percent",
    "financingEntryPercent": "financing_entry_percent",
    "financingRateMonthly": "financing_rate_monthly",
    "financingMonths": "financing_months",
    "marketValue": "market_value",
    "saleDiscountPercent": "sale_discount_percent",
    "brokerFeePercent": "broker_fee_percent",
    "rentRevenue": "rent_revenue",
    "minProfitPercent": "min_profit_percent",
    "incomeTaxMode": "income_tax_mode",
    "incomeTaxRate": "income_tax_rate",
}

_ENUM_DEFAULTS: Dict[str, Any] = {
    "payment_method": PaymentMethod.CASH,
    "income_tax_mode": IncomeTaxMode.INDIVIDUAL,
}


def canonicalize_keys(raw: Mapping[str, Any]) -> Dict[str, Any]:
    """Return a dict with camelCase aliases renamed to snake_case; unknown keys dropped."""
    out: Dict[str, Any] = {}
    for key, value in raw.items():
        name = _KEY_ALIASES.get(key, key)
        if name in DEAL_FIELDS:
            out[name] = value
    return out


def is_deal_key(key: str) -> bool:
    """True when ``key`` names a deal field in either key style."""
    return _KEY_ALIASES.get(key, key) in DEAL_FIELDS


def _coerce_enum(enum_cls: type, value: Any, default: Any) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        pass
    if isinstance(value, str):
        by_name = value.strip().upper()
        if by_name in enum_cls.__members__:
            return enum_cls.__members__[by_name]
    return default


def normalize_deal_input(raw: Mapping[str, Any]) -> DealParameters:
    """
    Build DealParameters from loosely typed input.

    Accepts either key style. Numeric fields are coerced with ``to_number`` (missing -> 0);
    unrecognized payment methods / tax modes fall back to cash / individual.
    """
    data = canonicalize_keys(raw)
    kwargs: Dict[str, Any] = {}
    for name in DEAL_FIELDS:
        value = data.get(name)
        if name in ENUM_FIELDS:
            kwargs[name] = _coerce_enum(ENUM_FIELDS[name], value, _ENUM_DEFAULTS[name])
        elif name == "financing_months":
            kwargs[name] = int(to_number(value))
        else:
            kwargs[name] = to_number(value)
    return DealParameters(**kwargs)
