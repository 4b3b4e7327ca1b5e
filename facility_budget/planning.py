"""Quarterly activity planning.

A plan is a list of activities grouped by category.  Each quarter's amount
is ``frequency * unit_cost * count``; category and general totals are
computed with pandas.
"""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import pandas as pd

from .config import PLANS_DIR
from .formatting import safe_filename
from .template import EXPENDITURE_SUBSECTIONS

logger = logging.getLogger(__name__)

QUARTER_NUMBERS = (1, 2, 3, 4)
AMOUNT_COLUMNS = [f"amount_q{n}" for n in QUARTER_NUMBERS]


@dataclass
class Activity:
    activity_category: str
    type_of_activity: str
    activity: str = ""
    frequency: float = 0
    unit_cost: float = 0
    count_q1: float = 0
    count_q2: float = 0
    count_q3: float = 0
    count_q4: float = 0
    amount_q1: float = 0
    amount_q2: float = 0
    amount_q3: float = 0
    amount_q4: float = 0
    total_budget: float = 0
    comment: str = ""


def _default_catalog() -> Dict[str, List[Tuple[str, str]]]:
    catalog: Dict[str, List[Tuple[str, str]]] = {}
    for title, items in EXPENDITURE_SUBSECTIONS.values():
        category = title.split(". ", 1)[-1]
        catalog[category] = [(item, "") for item in items]
    return catalog


# category -> [(type of activity, activity description)]
DEFAULT_ACTIVITY_CATALOG = _default_catalog()


def calculate_quarter_amount(frequency: float, unit_cost: float, count: float) -> float:
    return frequency * unit_cost * count


def quarter_amounts(activity: Activity) -> List[float]:
    return [
        calculate_quarter_amount(activity.frequency, activity.unit_cost, getattr(activity, f"count_q{n}") or 0)
        for n in QUARTER_NUMBERS
    ]


def calculate_total_budget(activity: Activity) -> float:
    """Total budget of an activity across the four quarters."""
    return sum(quarter_amounts(activity))


def with_amounts(activity: Activity) -> Activity:
    """Return a copy with ``amount_q*`` and ``total_budget`` filled in."""
    amounts = quarter_amounts(activity)
    return replace(
        activity,
        total_budget=sum(amounts),
        **{f"amount_q{n}": amount for n, amount in zip(QUARTER_NUMBERS, amounts)},
    )


def create_empty_activity(activity_category: str, type_of_activity: str, activity: str = "") -> Activity:
    return Activity(
        activity_category=activity_category,
        type_of_activity=type_of_activity,
        activity=activity or "",
    )


def generate_default_activities(
    catalog: Optional[Mapping[str, Sequence[Tuple[str, str]]]] = None,
) -> List[Activity]:
    """One empty activity per catalog entry, in catalog order."""
    source = DEFAULT_ACTIVITY_CATALOG if catalog is None else catalog
    return [
        create_empty_activity(category, type_of_activity, activity)
        for category, entries in source.items()
        for type_of_activity, activity in entries
    ]


def _at_least_one(value: Optional[float]) -> bool:
    # NaN compares False, so cleared editor cells fail too
    return value is not None and value >= 1


def validate_activity(activity: Activity) -> List[str]:
    errors = []
    if not _at_least_one(activity.frequency):
        errors.append("Frequency is required")
    if not _at_least_one(activity.unit_cost):
        errors.append("Unit cost is required")
    return errors


def plan_warnings(activities: Sequence[Activity]) -> List[str]:
    """One message per budgeted activity that fails validation, by row number."""
    warnings = []
    for index, activity in enumerate(activities, start=1):
        errors = validate_activity(activity) if activity.total_budget else []
        if errors:
            warnings.append(f"Row {index} ({activity.type_of_activity}): {', '.join(errors)}")
    return warnings


def activities_dataframe(activities: Iterable[Activity]) -> pd.DataFrame:
    columns = [f.name for f in fields(Activity)]
    records = [asdict(with_amounts(activity)) for activity in activities]
    return pd.DataFrame.from_records(records, columns=columns)


def category_totals(activities: Iterable[Activity]) -> pd.DataFrame:
    """Quarter amounts and total budget per activity category.

    Returns:
        DataFrame indexed by ``activity_category`` (first-seen order) with
        ``amount_q1``..``amount_q4`` and ``total_budget`` columns
    """
    frame = activities_dataframe(activities)
    value_columns = [*AMOUNT_COLUMNS, "total_budget"]
    if frame.empty:
        return pd.DataFrame(columns=value_columns, dtype=float)
    return frame.groupby("activity_category", sort=False)[value_columns].sum().astype(float)


def general_totals(activities: Iterable[Activity]) -> Dict[str, float]:
    frame = activities_dataframe(activities)
    totals = {column: float(frame[column].sum()) if not frame.empty else 0.0 for column in AMOUNT_COLUMNS}
    totals["total_budget"] = sum(totals[column] for column in AMOUNT_COLUMNS)
    return totals


# ---------------------------------------------------------------------------
# Persistence
# ---------------------------------------------------------------------------


def plan_path(facility: str, project: str, plans_dir: Path | None = None) -> Path:
    return (plans_dir or PLANS_DIR) / f"{safe_filename(facility, project, default='plan')}.json"


def load_plan(facility: str, project: str, plans_dir: Path | None = None) -> List[Activity]:
    """Load a stored plan; a missing or unreadable file yields the default plan."""
    target = plan_path(facility, project, plans_dir)
    if not target.exists():
        return generate_default_activities()
    try:
        with target.open('r', encoding='utf-8') as handle:
            data = json.load(handle)
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Could not read plan %s: %s", target, e)
        return generate_default_activities()
    if not isinstance(data, dict):
        return generate_default_activities()

    known = {f.name for f in fields(Activity)}
    activities: List[Activity] = []
    for entry in data.get('activities') or []:
        if not isinstance(entry, dict):
            continue
        try:
            activities.append(with_amounts(Activity(**{k: v for k, v in entry.items() if k in known})))
        except TypeError:
            continue
    return activities


def save_plan(facility: str, project: str, activities: Iterable[Activity], plans_dir: Path | None = None) -> Path:
    target = plan_path(facility, project, plans_dir)
    target.parent.mkdir(parents=True, exist_ok=True)
    computed = [with_amounts(activity) for activity in activities]
    payload: Dict[str, Any] = {
        'facility': facility,
        'project': project,
        'activities': [asdict(activity) for activity in computed],
        'generalTotalBudget': sum(activity.total_budget for activity in computed),
    }
    with target.open('w', encoding='utf-8') as handle:
        json.dump(payload, handle, indent=2, sort_keys=True)
    return target
