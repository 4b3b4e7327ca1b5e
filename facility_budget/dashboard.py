"""Streamlit app for the facility budget workspace.

The sidebar selects the hospital, health facility, project and reporting
period.  The main area holds two tabs: the quarterly financial report
(editable table, recomputed after every edit batch) and the activity plan.

To run the dashboard from the command line::

    streamlit run facility_budget/dashboard.py
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any, Dict, List

import streamlit as st

if __package__:
    from . import constants, planning, presentation
    from . import visualization as viz
    from .budget_tree import SectionId, find_row
    from .config import configure_logging
    from .formatting import format_amount, format_currency
    from .report_storage import ReportStorage
    from .template import build_empty_template
    from .totals import compute_totals
else:
    # Executed via ``streamlit run facility_budget/dashboard.py``
    CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
    PARENT_DIR = os.path.dirname(CURRENT_DIR)
    if PARENT_DIR not in sys.path:
        sys.path.insert(0, PARENT_DIR)
    from facility_budget import constants, planning, presentation  # type: ignore
    from facility_budget import visualization as viz  # type: ignore
    from facility_budget.budget_tree import SectionId, find_row  # type: ignore
    from facility_budget.config import configure_logging  # type: ignore
    from facility_budget.formatting import format_amount, format_currency  # type: ignore
    from facility_budget.report_storage import ReportStorage  # type: ignore
    from facility_budget.template import build_empty_template  # type: ignore
    from facility_budget.totals import compute_totals  # type: ignore

logger = logging.getLogger(__name__)

QUARTER_COLUMNS = ["q1", "q2", "q3", "q4"]
SUMMARY_SECTIONS = {
    SectionId.SURPLUS_DEFICIT.value: "Surplus / Deficit",
    SectionId.NET_FINANCIAL_ASSETS.value: "Net Financial Assets",
    SectionId.CLOSING_BALANCE.value: "Closing Balance",
}


def render_sidebar() -> Dict[str, str]:
    """Render report selectors and return the report metadata."""
    st.sidebar.header("Report")
    project = st.sidebar.selectbox("Project", options=list(constants.PROJECTS))
    program = constants.PROJECT_PROGRAMS[project]
    hospitals = constants.get_hospitals_by_program(program)
    hospital = st.sidebar.selectbox("Hospital", options=hospitals)
    centers = constants.get_facilities(hospital, program)
    facility = st.sidebar.selectbox("Health facility", options=[hospital] + centers)
    period = st.sidebar.selectbox("Reporting period", options=list(constants.REPORTING_PERIODS))
    fiscal_year = period.rsplit("/", 1)[-1].strip()
    return {
        "facility": facility,
        "hospital": hospital,
        "district": constants.get_district(hospital),
        "project": project,
        "reportingPeriod": period,
        "fiscalYear": fiscal_year,
    }


def _load_report(storage: ReportStorage, metadata: Dict[str, str]):
    try:
        _, forest = storage.load(metadata["facility"], metadata["project"], metadata["reportingPeriod"])
    except FileNotFoundError:
        forest = compute_totals(build_empty_template())
    return forest


def render_report_tab(storage: ReportStorage, metadata: Dict[str, str]) -> None:
    key = (metadata["facility"], metadata["project"], metadata["reportingPeriod"])
    if st.session_state.get("report_key") != key:
        st.session_state.report_key = key
        st.session_state.report_rows = _load_report(storage, metadata)
    forest = st.session_state.report_rows

    end_date = constants.period_end_date(metadata["reportingPeriod"])
    st.subheader(f"{metadata['facility']} · {metadata['project']}")
    st.caption(f"District: {metadata['district'] or '-'} · Period ending {end_date or '-'}")

    expanded = st.session_state.setdefault("expanded_rows", presentation.category_ids(forest))
    with st.expander("Rows shown"):
        for row_id in sorted(presentation.category_ids(forest)):
            shown = st.checkbox(f"Expand {row_id}", value=row_id in expanded, key=f"expand_{row_id}")
            if shown != (row_id in expanded):
                expanded = presentation.toggle_expanded(expanded, row_id)
        st.session_state.expanded_rows = expanded

    original = presentation.rows_dataframe(forest, expanded)
    display = original.copy()
    display["title"] = [("    " * depth) + title for depth, title in zip(display["depth"], display["title"])]
    revision = st.session_state.setdefault("report_revision", 0)
    for notice in st.session_state.pop("report_notices", []):
        st.warning(notice)
    edited = st.data_editor(
        display,
        column_order=["title", *QUARTER_COLUMNS, "cumulative_balance", "comments"],
        disabled=["id", "title", "depth", "cumulative_balance", "is_category", "is_editable", "is_input"],
        hide_index=True,
        use_container_width=True,
        key=f"report_editor_{'_'.join(key)}_{revision}",
    )

    locked = presentation.locked_amount_edits(original, edited)
    edits = presentation.edits_from_dataframe(original, edited)
    if edits or locked:
        notices = []
        if locked:
            notices.append(f"Amounts on {', '.join(locked)} are calculated; your changes were reset")
        if edits:
            try:
                st.session_state.report_rows = presentation.apply_edits(forest, edits)
            except (KeyError, ValueError) as exc:
                notices.append(f"Some edits were ignored: {exc}")
        st.session_state.report_notices = notices
        # A new editor key drops the widget's pending cell values
        st.session_state.report_revision = revision + 1
        st.rerun()

    summary = st.columns(3)
    for column, (section_id, label) in zip(summary, SUMMARY_SECTIONS.items()):
        row = find_row(forest, section_id)
        column.metric(label, format_amount(row.cumulative_balance if row else None, blank="-"))

    st.plotly_chart(viz.create_section_quarter_chart(forest), use_container_width=True)
    st.plotly_chart(viz.create_receipts_vs_expenditures_chart(forest), use_container_width=True)

    if st.button("💾 Save report", type="primary"):
        try:
            path = storage.save(metadata, st.session_state.report_rows)
        except (ValueError, OSError) as exc:
            logger.exception("Saving report %s failed", key)
            st.error(f"Failed to save report: {exc}")
        else:
            st.success(f"Saved {path.name}")


def render_plan_tab(metadata: Dict[str, str]) -> None:
    plan_key = (metadata["facility"], metadata["project"])
    if st.session_state.get("plan_key") != plan_key:
        st.session_state.plan_key = plan_key
        st.session_state.plan_activities = planning.load_plan(*plan_key)
    activities: List[planning.Activity] = st.session_state.plan_activities

    frame = planning.activities_dataframe(activities)
    edited = st.data_editor(
        frame,
        disabled=[*planning.AMOUNT_COLUMNS, "total_budget", "activity_category", "type_of_activity"],
        hide_index=True,
        use_container_width=True,
        key=f"plan_editor_{'_'.join(plan_key)}",
    )
    records: List[Dict[str, Any]] = edited.to_dict(orient="records")
    activities = [planning.with_amounts(planning.Activity(**record)) for record in records]
    st.session_state.plan_activities = activities

    totals = planning.general_totals(activities)
    columns = st.columns(5)
    for column, (label, value) in zip(columns, totals.items()):
        column.metric(label.replace("_", " ").title(), format_currency(value))

    st.dataframe(planning.category_totals(activities), use_container_width=True)
    st.plotly_chart(viz.create_plan_category_chart(planning.category_totals(activities)), use_container_width=True)

    for warning in planning.plan_warnings(activities):
        st.warning(warning)

    if st.button("💾 Save plan"):
        path = planning.save_plan(metadata["facility"], metadata["project"], activities)
        st.success(f"Saved {path.name}")


def main() -> None:
    """Entry point for the Streamlit app."""
    configure_logging()
    st.set_page_config(page_title="Facility Budget", layout="wide", initial_sidebar_state="expanded")
    st.title("Facility Budget Workspace")

    metadata = render_sidebar()
    storage = ReportStorage()

    report_tab, plan_tab = st.tabs(["📑 Financial report", "🗓 Activity plan"])
    with report_tab:
        render_report_tab(storage, metadata)
    with plan_tab:
        render_plan_tab(metadata)


if __name__ == "__main__":  # pragma: no cover
    main()
