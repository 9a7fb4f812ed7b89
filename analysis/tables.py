"""
Tabular views of engine output.

Three shapes are consumed downstream:
  - timeline_to_dataframe: one row per holding period, every breakdown field as a column
  - breakdown_table:       line items as rows, holding periods as columns (the results sheet)
  - bid_table_to_dataframe: bids as rows, holding periods as columns (profit or ROI)
"""

from __future__ import annotations

from typing import Literal, Sequence, Tuple

import pandas as pd

from engine.projection import BidTableRow
from engine.scenario import MonthlyResult


# (label, MonthlyResult attribute) in display order
BREAKDOWN_LINES: Tuple[Tuple[str, str], ...] = (
    ("Valor de Venda", "sale_value"),
    ("Receita Total", "total_revenue"),
    ("Lance", "effective_bid"),
    ("Comissão Leiloeiro", "auctioneer_fee"),
    ("ITBI", "itbi"),
    ("Escritura", "deed"),
    ("Registro", "registry"),
    ("Reformas", "reforms"),
    ("Desocupação", "vacation"),
    ("Débitos", "debts"),
    ("Assessoria", "advisory"),
    ("Condomínio", "condo_total"),
    ("IPTU", "iptu_total"),
    ("Corretagem", "broker_fee"),
    ("Juros Financiamento", "financing_interest"),
    ("Custo de Oportunidade", "opportunity_cost"),
    ("Imposto de Renda", "income_tax"),
    ("Desembolso Inicial", "initial_outlay"),
    ("Custo Total", "total_cost"),
    ("Resultado Líquido", "net_profit"),
    ("Lucro (%)", "roi_percent"),
    ("Taxa Equiv. Mensal (%)", "monthly_roi"),
)


def timeline_to_dataframe(timeline: Sequence[MonthlyResult]) -> pd.DataFrame:
    """One row per holding period, ascending by month."""
    if not timeline:
        return pd.DataFrame(columns=["month"])
    df = pd.DataFrame([r.to_dict() for r in timeline])
    return df.sort_values("month").reset_index(drop=True)


def breakdown_table(timeline: Sequence[MonthlyResult]) -> pd.DataFrame:
    """Line items as rows, one column per holding period (column name = month)."""
    data = {
        r.month: [getattr(r, attr) for _, attr in BREAKDOWN_LINES]
        for r in sorted(timeline, key=lambda r: r.month)
    }
    index = pd.Index([label for label, _ in BREAKDOWN_LINES], name="Item")
    return pd.DataFrame(data, index=index)


def bid_table_to_dataframe(
    bid_table: Sequence[BidTableRow],
    *,
    value: Literal["profit", "roi"] = "profit",
) -> pd.DataFrame:
    """Bids as rows (ascending), months as columns; cells hold net profit or ROI%."""
    if value not in ("profit", "roi"):
        raise ValueError(f"value must be 'profit' or 'roi', got {value!r}")
    records = []
    for row in bid_table:
        for cell in row.results_by_month:
            records.append({"bid_value": row.bid_value, "month": cell.month, value: getattr(cell, value)})
    if not records:
        return pd.DataFrame()
    long = pd.DataFrame(records)
    wide = long.pivot(index="bid_value", columns="month", values=value).sort_index()
    wide.columns.name = "month"
    return wide
