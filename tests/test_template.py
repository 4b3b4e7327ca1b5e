from __future__ import annotations

from facility_budget.budget_tree import QUARTERS, find_row, iter_rows
from facility_budget.template import EXPENDITURE_SUBSECTIONS, build_empty_template


def test_top_level_sections() -> None:
    forest = build_empty_template()
    assert [row.id for row in forest] == list("abcdefg")
    assert all(row.is_category for row in forest)


def test_ids_are_unique_and_values_absent() -> None:
    rows = [row for row, _ in iter_rows(build_empty_template())]
    ids = [row.id for row in rows]
    assert len(ids) == len(set(ids))
    for row in rows:
        assert all(getattr(row, q) is None for q in QUARTERS)
        assert row.cumulative_balance is None


def test_expenditure_skeleton() -> None:
    expenditures = find_row(build_empty_template(), "b")
    assert [child.id for child in expenditures.children] == ["b01", "b02", "b03", "b04", "b05"]
    overheads = find_row(build_empty_template(), "b04")
    assert [child.id for child in overheads.children] == ["b04-1", "b04-2", "b04-3", "b04-4"]
    assert overheads.children[3].title == "Bank charges"
    assert len(EXPENDITURE_SUBSECTIONS) == 5


def test_calculated_sections() -> None:
    forest = build_empty_template()
    for section_id in ("c", "f"):
        row = find_row(forest, section_id)
        assert row.is_editable is False
        assert row.children == []

    closing = find_row(forest, "g")
    assert closing.is_editable is False
    assert [(child.id, child.is_editable) for child in closing.children] == [
        ("g1", True),
        ("g2", True),
        ("g3", False),
    ]


def test_each_call_returns_fresh_rows() -> None:
    first = build_empty_template()
    second = build_empty_template()
    find_row(first, "a1").q1 = 100
    assert find_row(second, "a1").q1 is None
