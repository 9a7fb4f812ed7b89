import pathlib
import sys
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import pytest

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from core.schema import DealParameters  # noqa: E402


@pytest.fixture()
def reference_deal() -> DealParameters:
    """The worked example: R$110k bid, R$260k resale, 6% broker, no holding costs."""
    return DealParameters(
        bid_value=110000,
        auctioneer_fee_percent=5,
        itbi_percent=2,
        deed_percent=1.5,
        registry_percent=1.0,
        reforms=30000,
        vacation_cost=5000,
        debts=0,
        advisory_fee=0,
        condo_monthly=0,
        iptu_monthly=0,
        market_value=260000,
        sale_discount_percent=0,
        broker_fee_percent=6,
        rent_revenue=0,
    )


@pytest.fixture()
def holding_deal(reference_deal: DealParameters) -> DealParameters:
    """Same deal with monthly condo, IPTU and rent so month-dependence is visible."""
    return reference_deal.replace(condo_monthly=650, iptu_monthly=120, rent_revenue=1800)


# ---------------------------------------------------------------------------
# Minimal stand-in for the supabase-py query builder
# ---------------------------------------------------------------------------
@dataclass
class FakeResponse:
    data: List[Dict[str, Any]]


@dataclass
class FakeQuery:
    client: "FakeSupabaseClient"
    table: str
    op: str = "select"
    payload: Optional[Dict[str, Any]] = None
    filters: Dict[str, Any] = field(default_factory=dict)

    def select(self, *_cols: str) -> "FakeQuery":
        self.op = "select"
        return self

    def upsert(self, row: Dict[str, Any]) -> "FakeQuery":
        self.op, self.payload = "upsert", row
        return self

    def delete(self) -> "FakeQuery":
        self.op = "delete"
        return self

    def eq(self, column: str, value: Any) -> "FakeQuery":
        self.filters[column] = value
        return self

    def limit(self, _n: int) -> "FakeQuery":
        return self

    def execute(self) -> FakeResponse:
        if self.client.error is not None:
            raise self.client.error
        rows = self.client.tables.setdefault(self.table, {})
        if self.op == "upsert":
            rows[self.payload["id"]] = self.payload
            return FakeResponse([self.payload])
        matched = [r for r in rows.values() if all(r.get(k) == v for k, v in self.filters.items())]
        if self.op == "delete":
            for r in matched:
                del rows[r["id"]]
        return FakeResponse(matched)


class FakeSupabaseClient:
    def __init__(self) -> None:
        self.tables: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.error: Optional[Exception] = None

    def table(self, name: str) -> FakeQuery:
        return FakeQuery(client=self, table=name)


@pytest.fixture()
def fake_supabase() -> FakeSupabaseClient:
    return FakeSupabaseClient()
