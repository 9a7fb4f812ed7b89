from __future__ import annotations

from dataclasses import asdict, dataclass, fields, replace as dc_replace
from enum import Enum
from typing import Any, Dict, Tuple


class PaymentMethod(str, Enum):
    """How the bid is paid. Values are the labels persisted with each deal."""

    CASH = "À Vista"
    CASH_WITH_DISCOUNT = "À Vista com Desconto"
    JUDICIAL_INSTALLMENT = "Parcelamento Judicial"
    FINANCING_CAIXA = "Financiamento - Caixa"
    FINANCING_BB = "Financiamento - BB"
    FINANCING_ITAU = "Financiamento - Itaú"
    FINANCING_SANTANDER = "Financiamento - Santander"
    FINANCING_BRADESCO = "Financiamento - Bradesco"
    FGTS = "FGTS"
    CONSORTIUM = "Consórcio Contemplado"
    CREDIT_LETTER = "Carta de Crédito"

    @property
    def has_cash_discount(self) -> bool:
        return self is PaymentMethod.CASH_WITH_DISCOUNT

    @property
    def is_financed(self) -> bool:
        return self not in (PaymentMethod.CASH, PaymentMethod.CASH_WITH_DISCOUNT)


class AuctionType(str, Enum):
    JUDICIAL_FIRST = "Judicial - 1º Leilão"
    JUDICIAL_SECOND = "Judicial - 2º Leilão"
    EXTRAJUDICIAL_LAW_9514 = "Extrajudicial - Lei 9.514"
    EXTRAJUDICIAL_BANKS = "Extrajudicial - Bancos"
    BANK_DIRECT_SALE = "Venda Direta Bancos"
    POST_AUCTION_DIRECT_SALE = "Venda Direta Pós-Leilão"
    PUBLIC_AGENCY = "Leilão Órgãos Públicos"


class IncomeTaxMode(str, Enum):
    INDIVIDUAL = "PF"
    CORPORATE = "PJ"


# Whole-number percentages (5 means 5%). Divide by 100 before use.
PERCENT_FIELDS: Tuple[str, ...] = (
    "auctioneer_fee_percent",
    "itbi_percent",
    "deed_percent",
    "registry_percent",
    "cash_discount_percent",
    "financing_entry_percent",
    "financing_rate_monthly",
    "sale_discount_percent",
    "broker_fee_percent",
    "min_profit_percent",
    "income_tax_rate",
)

# Amounts in the deal's currency unit.
MONEY_FIELDS: Tuple[str, ...] = (
    "bid_value",
    "bid_increment",
    "condo_monthly",
    "iptu_monthly",
    "reforms",
    "vacation_cost",
    "debts",
    "advisory_fee",
    "market_value",
    "rent_revenue",
)

ENUM_FIELDS: Dict[str, type] = {
    "payment_method": PaymentMethod,
    "income_tax_mode": IncomeTaxMode,
}


@dataclass(frozen=True)
class DealParameters:
    """
    Everything the calculator needs to know about one auctioned property.

    Defaults mirror a typical bank-owned apartment bought at auction and resold
    within a year. Instances are never edited in place: use ``replace``.
    """

    # Acquisition
    bid_value: float = 110000.0
    bid_increment: float = 3000.0
    auctioneer_fee_percent: float = 5.0
    itbi_percent: float = 2.0
    deed_percent: float = 1.5
    registry_percent: float = 1.0

    # Holding costs
    condo_monthly: float = 0.0
    iptu_monthly: float = 0.0
    reforms: float = 30000.0
    vacation_cost: float = 5000.0
    debts: float = 0.0
    advisory_fee: float = 0.0

    # Payment terms (financing fields are stored, not amortized)
    payment_method: PaymentMethod = PaymentMethod.CASH
    cash_discount_percent: float = 10.0
    financing_entry_percent: float = 25.0
    financing_rate_monthly: float = 1.0
    financing_months: int = 36

    # Disposition
    market_value: float = 260000.0
    sale_discount_percent: float = 0.0
    broker_fee_percent: float = 6.0
    rent_revenue: float = 0.0

    # Policy / tax
    min_profit_percent: float = 30.0
    income_tax_mode: IncomeTaxMode = IncomeTaxMode.INDIVIDUAL
    income_tax_rate: float = 15.0

    def replace(self, **changes: Any) -> "DealParameters":
        return dc_replace(self, **changes)

    def to_dict(self) -> Dict[str, Any]:
        out = asdict(self)
        for name in ENUM_FIELDS:
            out[name] = getattr(self, name).value
        return out

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DealParameters":
        """Strict constructor for already-clean snake_case dicts (see data_prep for raw input)."""
        known = {f.name for f in fields(cls)}
        kwargs = {k: v for k, v in data.items() if k in known}
        for name, enum_cls in ENUM_FIELDS.items():
            if name in kwargs and not isinstance(kwargs[name], enum_cls):
                kwargs[name] = enum_cls(kwargs[name])
        return cls(**kwargs)


DEAL_FIELDS: Tuple[str, ...] = tuple(f.name for f in fields(DealParameters))
