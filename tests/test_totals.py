"""Unit tests for facility_budget.totals.

The tests build report forests from the canonical template, set a handful of
leaf values and check the roll-ups, cumulative balances and cross-section
formulas.
"""

from __future__ import annotations

import copy

from facility_budget.budget_tree import QUARTERS, BudgetRow, find_row, iter_rows, update_row
from facility_budget.template import build_empty_template
from facility_budget.totals import compute_totals


def _report(**values) -> list:
    """Template with ``values`` set, e.g. ``_report(a1={'q1': 10})``."""
    forest = build_empty_template()
    for row_id, changes in values.items():
        forest = update_row(forest, row_id.replace("_", "-"), **changes)
    return forest


def _row(forest, row_id: str) -> BudgetRow:
    row = find_row(forest, row_id)
    assert row is not None, row_id
    return row


def test_receipts_roll_up_scenario() -> None:
    result = compute_totals(_report(a1={"q1": 1000}, a2={"q1": 500}))
    receipts = _row(result, "a")
    assert receipts.q1 == 1500
    assert receipts.q2 is None and receipts.q3 is None and receipts.q4 is None
    assert receipts.cumulative_balance == 1500


def test_deficit_clamps_cumulative_balance_to_zero() -> None:
    result = compute_totals(_report(a1={"q1": 1000}, a2={"q1": 500}, b01_1={"q1": 2000}))
    surplus = _row(result, "c")
    assert _row(result, "b").cumulative_balance == 2000
    assert surplus.q1 == -500
    assert surplus.cumulative_balance == 0
    assert surplus.cumulative_balance is not None


def test_empty_report_gives_zero_surplus() -> None:
    result = compute_totals(build_empty_template())
    for section in ("a", "b"):
        row = _row(result, section)
        assert all(getattr(row, q) is None for q in QUARTERS)
        assert row.cumulative_balance is None
    surplus = _row(result, "c")
    assert [getattr(surplus, q) for q in QUARTERS] == [0, 0, 0, 0]
    assert surplus.cumulative_balance == 0


def test_closing_balance_scenario() -> None:
    result = compute_totals(_report(g1={"q1": 100}, g2={"q1": 50}, a1={"q1": 30}))
    closing = _row(result, "g")
    period = _row(result, "g3")
    assert _row(result, "c").q1 == 30
    assert period.q1 == 30
    assert period.cumulative_balance == 30
    assert closing.q1 == 180
    assert closing.q2 == 0 and closing.q3 == 0 and closing.q4 == 0
    assert closing.cumulative_balance == 180


def test_closing_balance_is_not_clamped() -> None:
    result = compute_totals(_report(b04_2={"q3": 200}))
    closing = _row(result, "g")
    assert _row(result, "c").q3 == -200
    assert _row(result, "c").cumulative_balance == 0
    assert _row(result, "g3").q3 == -200
    assert _row(result, "g3").cumulative_balance == 0
    assert closing.q3 == -200
    assert closing.cumulative_balance == -200


def test_surplus_formula_per_quarter() -> None:
    result = compute_totals(_report(
        a1={"q1": 400, "q2": 100, "q4": 50},
        b02_1={"q1": 150, "q3": 75},
        b05_1={"q2": 100},
    ))
    receipts, expenditures, surplus = (_row(result, rid) for rid in "abc")
    for quarter in QUARTERS:
        expected = (getattr(receipts, quarter) or 0) - (getattr(expenditures, quarter) or 0)
        assert getattr(surplus, quarter) == expected
    assert surplus.cumulative_balance == 250 + 0 - 75 + 50


def test_net_financial_assets() -> None:
    result = compute_totals(_report(d1={"q2": 300}, d2={"q2": 20}, e1={"q2": 100}))
    net = _row(result, "f")
    assert net.q1 == 0
    assert net.q2 == 220
    assert net.cumulative_balance == 220

    negative = compute_totals(_report(e3={"q1": 80}))
    assert _row(negative, "f").q1 == -80
    assert _row(negative, "f").cumulative_balance == 0


def test_nested_category_roll_up() -> None:
    result = compute_totals(_report(b01_1={"q1": 10}, b01_2={"q1": 5}, b02_1={"q3": 7}))
    assert _row(result, "b01").q1 == 15
    assert _row(result, "b01").q3 is None
    assert _row(result, "b02").q3 == 7
    expenditures = _row(result, "b")
    assert expenditures.q1 == 15
    assert expenditures.q3 == 7
    assert expenditures.cumulative_balance == 22


def test_roll_up_matches_children_everywhere() -> None:
    result = compute_totals(_report(
        a1={"q1": 12.5}, b01_1={"q2": 3}, b03_3={"q2": 4, "q4": 9}, d4={"q3": 1}, e5={"q1": 2},
    ))
    for row, _ in iter_rows(result):
        if not (row.is_category and row.children) or row.id == "g":
            continue
        for quarter in QUARTERS:
            total = sum(getattr(child, quarter) or 0 for child in row.children)
            assert getattr(row, quarter) == (total if total != 0 else None)


def test_zero_sum_category_is_absent() -> None:
    result = compute_totals(_report(a1={"q1": 100}, a2={"q1": -100}))
    receipts = _row(result, "a")
    assert receipts.q1 is None
    assert receipts.cumulative_balance is None
    assert _row(result, "a2").cumulative_balance is None


def test_cumulative_balance_identity() -> None:
    result = compute_totals(_report(a1={"q1": 10, "q2": 20, "q3": 30, "q4": 40}, d3={"q4": 5}))
    for row, _ in iter_rows(result):
        if row.id in {"c", "f", "g", "g3"}:
            continue
        total = sum(getattr(row, q) or 0 for q in QUARTERS)
        if total > 0:
            assert row.cumulative_balance == total
        else:
            assert row.cumulative_balance is None


def test_incoming_derived_values_are_ignored() -> None:
    forest = _report(a1={"q1": 10, "cumulative_balance": 999}, a={"q1": 12345})
    result = compute_totals(forest)
    assert _row(result, "a1").cumulative_balance == 10
    assert _row(result, "a").q1 == 10


def test_input_forest_is_not_mutated() -> None:
    forest = _report(a1={"q1": 10}, g1={"q2": 5})
    snapshot = copy.deepcopy(forest)
    result = compute_totals(forest)
    assert forest == snapshot
    assert _row(result, "a") is not _row(forest, "a")


def test_compute_totals_is_idempotent() -> None:
    first = compute_totals(_report(a1={"q1": 700}, b01_2={"q1": 300, "q2": 900}, g2={"q4": -40}, d1={"q3": 60}))
    second = compute_totals(first)
    assert second == first


def test_missing_anchors_are_skipped() -> None:
    surplus_only = compute_totals([BudgetRow(id="c", title="C", is_category=True, is_editable=False)])
    assert [getattr(surplus_only[0], q) for q in QUARTERS] == [0, 0, 0, 0]
    assert surplus_only[0].cumulative_balance == 0

    receipts_only = compute_totals([
        BudgetRow(id="a", title="A", is_category=True, children=[BudgetRow(id="a1", title="x", q2=5)]),
    ])
    assert receipts_only[0].q2 == 5
    assert receipts_only[0].cumulative_balance == 5


def test_closing_balance_without_surplus_section() -> None:
    forest = [
        BudgetRow(id="g", title="G", is_category=True, is_editable=False, children=[
            BudgetRow(id="g1", title="Accumulated", q1=40),
            BudgetRow(id="g3", title="Period", q1=5, is_editable=False),
        ]),
    ]
    closing = compute_totals(forest)[0]
    assert closing.q1 == 45
    assert closing.cumulative_balance == 45
    assert closing.children[1].q1 == 5


def test_non_category_parent_keeps_its_values() -> None:
    forest = [
        BudgetRow(id="x", title="Group", q1=3, children=[BudgetRow(id="x1", title="child", q1=100)]),
    ]
    result = compute_totals(forest)
    assert result[0].q1 == 3
    assert result[0].cumulative_balance == 3
    assert result[0].children[0].cumulative_balance == 100


def test_comments_are_preserved() -> None:
    result = compute_totals(_report(b04_4={"q1": 12, "comments": "Bank statement attached"}))
    assert _row(result, "b04-4").comments == "Bank statement attached"
