from __future__ import annotations

import pytest

from facility_budget.budget_tree import (
    BudgetRow,
    ClosingBalanceId,
    SectionId,
    clamp_non_positive_to_zero,
    find_row,
    find_top_level,
    forest_from_records,
    forest_to_records,
    iter_rows,
    non_positive_to_absent,
    quarter_sum,
    row_from_dict,
    row_to_dict,
    update_row,
    zero_to_absent,
)


def _forest():
    return [
        BudgetRow(id="a", title="A. Receipts", is_category=True, children=[
            BudgetRow(id="a1", title="Other Incomes", q1=10.0),
            BudgetRow(id="a2", title="Transfers", q3=0.0),
        ]),
        BudgetRow(id="c", title="C. SURPLUS / DEFICIT", is_category=True, is_editable=False),
    ]


def test_zero_policies() -> None:
    assert zero_to_absent(0) is None
    assert zero_to_absent(-3) == -3
    assert zero_to_absent(12.5) == 12.5

    assert non_positive_to_absent(0) is None
    assert non_positive_to_absent(-1) is None
    assert non_positive_to_absent(4) == 4

    assert clamp_non_positive_to_zero(-5) == 0
    assert clamp_non_positive_to_zero(0) == 0
    assert clamp_non_positive_to_zero(3) == 3


def test_reserved_ids() -> None:
    assert [section.value for section in SectionId] == list("abcdefg")
    assert [member.value for member in ClosingBalanceId] == ["g1", "g2", "g3"]


def test_quarter_sum_treats_missing_as_zero() -> None:
    assert quarter_sum(BudgetRow(id="x", title="x", q1=1, q4=2.5)) == 3.5
    assert quarter_sum(BudgetRow(id="x", title="x")) == 0


def test_iter_rows_and_lookup() -> None:
    forest = _forest()
    assert [(row.id, depth) for row, depth in iter_rows(forest)] == [("a", 0), ("a1", 1), ("a2", 1), ("c", 0)]
    assert find_row(forest, "a2").title == "Transfers"
    assert find_row(forest, "zz") is None
    assert find_top_level(forest, "a1") is None
    assert find_top_level(forest, "c").id == "c"


def test_update_row_returns_new_forest() -> None:
    forest = _forest()
    updated = update_row(forest, "a1", q2=7.0)
    assert find_row(updated, "a1").q2 == 7.0
    assert find_row(forest, "a1").q2 is None

    with pytest.raises(KeyError):
        update_row(forest, "missing", q1=1.0)


def test_row_to_dict_omits_absent_values() -> None:
    payload = row_to_dict(_forest()[0])
    assert payload["isCategory"] is True
    first, second = payload["children"]
    assert first == {"id": "a1", "title": "Other Incomes", "q1": 10.0, "isCategory": False, "isEditable": True}
    # A literal zero survives; absent quarters are simply missing
    assert second["q3"] == 0.0
    assert "q1" not in second


def test_row_from_dict_defaults() -> None:
    row = row_from_dict({"id": "g1", "title": "Accumulated Surplus/Deficit", "q1": "150", "q2": None})
    assert row.q1 == 150.0
    assert row.q2 is None
    assert row.is_editable is True
    assert row.is_category is False
    assert row.children == []


def test_row_from_dict_only_false_locks_a_row() -> None:
    assert row_from_dict({"id": "a1", "title": "x", "isEditable": None}).is_editable is True
    assert row_from_dict({"id": "a1", "title": "x", "isEditable": False}).is_editable is False


def test_records_round_trip() -> None:
    forest = _forest()
    assert forest_from_records(forest_to_records(forest)) == forest
