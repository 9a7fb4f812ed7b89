from __future__ import annotations

import pytest

from core.config import DEFAULT_SIMULATION_CONFIG, SimulationConfig
from core.schema import DealParameters
from engine.projection import build_bid_table, build_timeline, run_simulation
from engine.scenario import compute_scenario

HOLDING_MONTHS = [1, 3, 4, 6, 7, 9, 10, 12]


def test_default_config_months() -> None:
    assert list(DEFAULT_SIMULATION_CONFIG.holding_months) == HOLDING_MONTHS
    assert DEFAULT_SIMULATION_CONFIG.bid_table_rows == 10
    assert DEFAULT_SIMULATION_CONFIG.longest_horizon == 12


def test_timeline_shape(holding_deal: DealParameters) -> None:
    timeline = build_timeline(holding_deal)
    assert [r.month for r in timeline] == HOLDING_MONTHS
    assert all(r.effective_bid == holding_deal.bid_value for r in timeline)


def test_timeline_entries_are_independent(holding_deal: DealParameters) -> None:
    timeline = build_timeline(holding_deal)
    for r in timeline:
        assert r == compute_scenario(holding_deal, r.month)
    # a 12-month entry is not the 6-month entry doubled
    by_month = {r.month: r for r in timeline}
    assert by_month[12].condo_total == 2 * by_month[6].condo_total
    assert by_month[12].itbi == by_month[6].itbi


def test_bid_table_shape(reference_deal: DealParameters) -> None:
    rows = build_bid_table(reference_deal)
    assert len(rows) == 10
    assert [row.bid_value for row in rows] == [110000 + 3000 * i for i in range(10)]
    for row in rows:
        assert [c.month for c in row.results_by_month] == HOLDING_MONTHS


def test_bid_table_cells_match_calculator(holding_deal: DealParameters) -> None:
    rows = build_bid_table(holding_deal)
    row = rows[4]
    for cell in row.results_by_month:
        expected = compute_scenario(holding_deal, cell.month, row.bid_value)
        assert cell.profit == expected.net_profit
        assert cell.roi == expected.roi_percent


def test_bid_table_profit_falls_as_bid_rises(reference_deal: DealParameters) -> None:
    rows = build_bid_table(reference_deal)
    profits = [row.result_for(12).profit for row in rows]
    assert profits == sorted(profits, reverse=True)


def test_zero_increment_falls_back_to_1000(reference_deal: DealParameters) -> None:
    rows = build_bid_table(reference_deal.replace(bid_increment=0))
    assert [row.bid_value for row in rows] == [110000 + 1000 * i for i in range(10)]


def test_row_count_fixed_regardless_of_input() -> None:
    rows = build_bid_table(DealParameters(bid_value=0, bid_increment=0, market_value=0))
    assert len(rows) == 10
    assert rows[0].bid_value == 0
    assert rows[-1].bid_value == 9000


def test_result_for_unknown_month(reference_deal: DealParameters) -> None:
    row = build_bid_table(reference_deal)[0]
    with pytest.raises(KeyError):
        row.result_for(5)


def test_run_simulation_bundles_both(holding_deal: DealParameters) -> None:
    result = run_simulation(holding_deal)
    assert list(result.timeline) == build_timeline(holding_deal)
    assert list(result.bid_table) == build_bid_table(holding_deal)
    assert set(result.timeline_by_month()) == set(HOLDING_MONTHS)


def test_run_simulation_is_repeatable(holding_deal: DealParameters) -> None:
    assert run_simulation(holding_deal) == run_simulation(holding_deal)


def test_custom_config(reference_deal: DealParameters) -> None:
    cfg = SimulationConfig(holding_months=(2, 5, 18), bid_table_rows=3, default_bid_increment=2500)
    result = run_simulation(reference_deal.replace(bid_increment=0), config=cfg)
    assert [r.month for r in result.timeline] == [2, 5, 18]
    assert [row.bid_value for row in result.bid_table] == [110000, 112500, 115000]


@pytest.mark.parametrize("kwargs", [
    {"holding_months": ()},
    {"holding_months": (0, 3)},
    {"holding_months": (6, 3)},
    {"holding_months": (3, 3)},
    {"bid_table_rows": 0},
])
def test_invalid_config_rejected(kwargs) -> None:
    with pytest.raises(ValueError):
        SimulationConfig(**kwargs)
