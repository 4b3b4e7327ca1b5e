"""Budget row model shared by the template builder and the totals engine.

A financial report is a forest of :class:`BudgetRow` nodes.  Leaf rows hold
user-entered quarterly values; category rows hold values computed from their
children.  A handful of top-level ids are reserved as section anchors and are
consumed by the cross-row formulas in :mod:`facility_budget.totals`.
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

QUARTERS: Tuple[str, ...] = ("q1", "q2", "q3", "q4")


class SectionId(str, Enum):
    """Top-level section anchors of the financial report."""

    RECEIPTS = "a"
    EXPENDITURES = "b"
    SURPLUS_DEFICIT = "c"
    FINANCIAL_ASSETS = "d"
    FINANCIAL_LIABILITIES = "e"
    NET_FINANCIAL_ASSETS = "f"
    CLOSING_BALANCE = "g"


class ClosingBalanceId(str, Enum):
    """Reserved children of the closing balance section."""

    ACCUMULATED_SURPLUS = "g1"
    PRIOR_YEAR_ADJUSTMENT = "g2"
    PERIOD_SURPLUS = "g3"


# Sections whose values are always produced by a formula.
CALCULATED_SECTIONS = frozenset({
    SectionId.SURPLUS_DEFICIT.value,
    SectionId.NET_FINANCIAL_ASSETS.value,
    SectionId.CLOSING_BALANCE.value,
})


@dataclass
class BudgetRow:
    """A single line of the financial report."""

    id: str
    title: str
    q1: Optional[float] = None
    q2: Optional[float] = None
    q3: Optional[float] = None
    q4: Optional[float] = None
    cumulative_balance: Optional[float] = None
    is_category: bool = False
    is_editable: bool = True
    children: List['BudgetRow'] = field(default_factory=list)
    comments: Optional[str] = None

    def quarter_values(self) -> Tuple[Optional[float], ...]:
        return tuple(getattr(self, quarter) for quarter in QUARTERS)


# ---------------------------------------------------------------------------
# Zero policies
# ---------------------------------------------------------------------------


def zero_to_absent(value: float) -> Optional[float]:
    """Return ``None`` for an exact zero, otherwise the value unchanged.

    Used for category roll-ups: a category whose children carry no data
    shows no value rather than ``0``.
    """
    return value if value != 0 else None


def non_positive_to_absent(value: float) -> Optional[float]:
    """Return ``None`` when ``value <= 0``.

    This is the cumulative balance rule for ordinary rows.
    """
    return value if value > 0 else None


def clamp_non_positive_to_zero(value: float) -> float:
    """Return literal ``0`` when ``value <= 0``.

    Applied to the Surplus/Deficit and Net Financial Assets cumulative
    balances, which always display a number.
    """
    return value if value > 0 else 0


def quarter_sum(row: BudgetRow) -> float:
    """Sum ``q1..q4`` of a row, treating missing values as 0."""
    return sum(value or 0 for value in row.quarter_values())


# ---------------------------------------------------------------------------
# Traversal and lookup
# ---------------------------------------------------------------------------


def iter_rows(forest: Sequence[BudgetRow], depth: int = 0) -> Iterator[Tuple[BudgetRow, int]]:
    """Yield ``(row, depth)`` pairs in depth-first pre-order."""
    for row in forest:
        yield row, depth
        if row.children:
            yield from iter_rows(row.children, depth + 1)


def find_row(forest: Sequence[BudgetRow], row_id: str) -> Optional[BudgetRow]:
    """Find a row anywhere in the forest by id."""
    for row, _ in iter_rows(forest):
        if row.id == row_id:
            return row
    return None


def find_top_level(forest: Sequence[BudgetRow], row_id: str) -> Optional[BudgetRow]:
    """Find a top-level row by id (anchors are never nested)."""
    return next((row for row in forest if row.id == row_id), None)


def find_child(row: Optional[BudgetRow], child_id: str) -> Optional[BudgetRow]:
    if row is None:
        return None
    return next((child for child in row.children if child.id == child_id), None)


def update_row(forest: Sequence[BudgetRow], row_id: str, **changes: Any) -> List[BudgetRow]:
    """Return a new forest where the row ``row_id`` has ``changes`` applied.

    Raises:
        KeyError: If no row with ``row_id`` exists
    """
    found = False

    def _update(rows: Sequence[BudgetRow]) -> List[BudgetRow]:
        nonlocal found
        updated: List[BudgetRow] = []
        for row in rows:
            children = _update(row.children)
            if row.id == row_id:
                found = True
                updated.append(replace(row, children=children, **changes))
            else:
                updated.append(replace(row, children=children))
        return updated

    result = _update(forest)
    if not found:
        raise KeyError(row_id)
    return result


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------

_FIELD_KEYS = {
    "q1": "q1",
    "q2": "q2",
    "q3": "q3",
    "q4": "q4",
    "cumulative_balance": "cumulativeBalance",
    "comments": "comments",
}


def _to_number(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    return float(value)


def row_to_dict(row: BudgetRow) -> Dict[str, Any]:
    """Serialize a row to the JSON shape used by storage and transport.

    Absent values are omitted rather than written as ``0``.
    """
    payload: Dict[str, Any] = {"id": row.id, "title": row.title}
    for attr, key in _FIELD_KEYS.items():
        value = getattr(row, attr)
        if value is not None:
            payload[key] = value
    payload["isCategory"] = row.is_category
    payload["isEditable"] = row.is_editable
    if row.children:
        payload["children"] = [row_to_dict(child) for child in row.children]
    return payload


def row_from_dict(data: Mapping[str, Any]) -> BudgetRow:
    """Build a row (and its subtree) from the JSON shape."""
    children = data.get("children") or []
    return BudgetRow(
        id=str(data["id"]),
        title=str(data.get("title", "")),
        q1=_to_number(data.get("q1")),
        q2=_to_number(data.get("q2")),
        q3=_to_number(data.get("q3")),
        q4=_to_number(data.get("q4")),
        cumulative_balance=_to_number(data.get("cumulativeBalance")),
        is_category=bool(data.get("isCategory", False)),
        is_editable=data.get("isEditable") is not False,
        children=[row_from_dict(child) for child in children],
        comments=data.get("comments"),
    )


def forest_to_records(forest: Sequence[BudgetRow]) -> List[Dict[str, Any]]:
    return [row_to_dict(row) for row in forest]


def forest_from_records(records: Sequence[Mapping[str, Any]]) -> List[BudgetRow]:
    return [row_from_dict(record) for record in records]
