from __future__ import annotations

import plotly.graph_objects as go

from facility_budget import planning
from facility_budget import visualization as viz
from facility_budget.budget_tree import update_row
from facility_budget.template import build_empty_template
from facility_budget.totals import compute_totals


def _forest():
    forest = update_row(build_empty_template(), "a1", q1=900.0)
    return compute_totals(update_row(forest, "b02-2", q1=400.0))


def test_section_quarters_frame() -> None:
    frame = viz.section_quarters_frame(_forest())
    assert len(frame) == 7 * 4
    receipts_q1 = frame[(frame["Section"] == "A. Receipts") & (frame["Quarter"] == "Q1")]
    assert receipts_q1["Amount"].item() == 900
    surplus_q1 = frame[(frame["Section"] == "C. SURPLUS / DEFICIT") & (frame["Quarter"] == "Q1")]
    assert surplus_q1["Amount"].item() == 500


def test_charts_return_figures() -> None:
    assert isinstance(viz.create_section_quarter_chart(_forest()), go.Figure)
    fig = viz.create_receipts_vs_expenditures_chart(_forest())
    assert fig.layout.title.text == "Receipts vs expenditures"
    assert len(fig.data) == 3


def test_empty_inputs_render_placeholder() -> None:
    assert viz.create_section_quarter_chart([]).layout.title.text == "No data to display"
    empty_totals = planning.category_totals([])
    assert viz.create_plan_category_chart(empty_totals).layout.title.text == "No data to display"


def test_plan_category_chart() -> None:
    activities = [planning.Activity("Overheads", "Office supplies", frequency=1, unit_cost=20, count_q2=5)]
    fig = viz.create_plan_category_chart(planning.category_totals(activities))
    assert list(fig.data[0].x) == ["Overheads"]
    assert list(fig.data[0].y) == [100]
