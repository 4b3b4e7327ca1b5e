"""Plotly visualisation helpers for the financial report and activity plan.

Each function accepts the data objects produced by :mod:`totals`,
:mod:`normalization` or :mod:`planning` and returns a
`plotly.graph_objects.Figure` that Streamlit renders via
``st.plotly_chart``.
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd
import plotly.express as px
import plotly.graph_objects as go

from .budget_tree import QUARTERS, BudgetRow, SectionId

QUARTER_LABELS = {"q1": "Q1", "q2": "Q2", "q3": "Q3", "q4": "Q4"}


def _empty_figure() -> go.Figure:
    fig = go.Figure()
    fig.update_layout(title="No data to display")
    return fig


def section_quarters_frame(forest: Sequence[BudgetRow]) -> pd.DataFrame:
    """Long-form frame of top-level section values per quarter.

    Absent values are reported as 0 so every section has four bars.
    """
    section_ids = {section.value for section in SectionId}
    records = [
        {
            "Section": row.title,
            "Quarter": QUARTER_LABELS[quarter],
            "Amount": float(getattr(row, quarter) or 0),
        }
        for row in forest
        if row.id in section_ids
        for quarter in QUARTERS
    ]
    return pd.DataFrame.from_records(records, columns=["Section", "Quarter", "Amount"])


def create_section_quarter_chart(forest: Sequence[BudgetRow], title: str | None = None) -> go.Figure:
    """Grouped bar chart of each report section by quarter.

    Parameters
    ----------
    forest : sequence of BudgetRow
        Report rows after :func:`compute_totals`.
    title : str, optional
        Chart title.

    Returns
    -------
    plotly.graph_objects.Figure
        Grouped bar chart, one group per section.
    """
    df = section_quarters_frame(forest)
    if df.empty:
        return _empty_figure()
    fig = px.bar(df, x="Section", y="Amount", color="Quarter", barmode="group")
    fig.update_layout(
        title=title or "Quarterly totals by section",
        xaxis_title="Section",
        yaxis_title="Amount",
    )
    return fig


def create_receipts_vs_expenditures_chart(forest: Sequence[BudgetRow], title: str | None = None) -> go.Figure:
    """Line chart of receipts, expenditures and surplus across quarters."""
    df = section_quarters_frame(forest)
    wanted = {
        row.title
        for row in forest
        if row.id in {SectionId.RECEIPTS.value, SectionId.EXPENDITURES.value, SectionId.SURPLUS_DEFICIT.value}
    }
    df = df[df["Section"].isin(wanted)]
    if df.empty:
        return _empty_figure()
    fig = px.line(df, x="Quarter", y="Amount", color="Section", markers=True)
    fig.update_layout(
        title=title or "Receipts vs expenditures",
        xaxis_title="Quarter",
        yaxis_title="Amount",
    )
    return fig


def create_plan_category_chart(totals: pd.DataFrame, title: str | None = None) -> go.Figure:
    """Bar chart of planned total budget per activity category.

    Parameters
    ----------
    totals : pandas.DataFrame
        Output of :func:`planning.category_totals`.
    title : str, optional
        Chart title.
    """
    if totals.empty or "total_budget" not in totals.columns:
        return _empty_figure()
    df = totals["total_budget"].reset_index()
    df.columns = ["Category", "Total Budget"]
    fig = px.bar(df, x="Category", y="Total Budget")
    fig.update_layout(
        title=title or "Planned budget by category",
        xaxis_title="Category",
        yaxis_title="Total Budget",
    )
    return fig
