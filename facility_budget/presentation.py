"""Presentation helpers for the financial report table.

The dashboard shows the report forest as a flat table with indentation and
expand/collapse state.  User edits come back as partial row updates, which
are applied to a copy of the forest before it is re-run through the totals
engine.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterable, Iterator, List, Mapping, NamedTuple, Optional, Sequence, Set, Tuple

import numpy as np
import pandas as pd

from .budget_tree import QUARTERS, BudgetRow, find_row, iter_rows, update_row
from .totals import compute_totals

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(QUARTERS) | {"comments"}

FRAME_COLUMNS = [
    "id",
    "title",
    "depth",
    *QUARTERS,
    "cumulative_balance",
    "comments",
    "is_category",
    "is_editable",
    "is_input",
]


class FlatRow(NamedTuple):
    row: BudgetRow
    depth: int


def accepts_input(row: BudgetRow) -> bool:
    """Whether a person may type quarterly values into ``row``."""
    return row.is_editable and not row.is_category


def category_ids(forest: Sequence[BudgetRow]) -> Set[str]:
    """Ids of every row with children (the fully expanded state)."""
    return {row.id for row, _ in iter_rows(forest) if row.children}


def toggle_expanded(expanded_ids: Iterable[str], row_id: str) -> Set[str]:
    expanded = set(expanded_ids)
    if row_id in expanded:
        expanded.discard(row_id)
    else:
        expanded.add(row_id)
    return expanded


def flatten_rows(forest: Sequence[BudgetRow], expanded_ids: Optional[Iterable[str]] = None) -> List[FlatRow]:
    """Flatten the forest in display order.

    Args:
        forest: Report rows
        expanded_ids: Ids whose children are shown. ``None`` shows every row.

    Returns:
        List of ``(row, depth)`` pairs in depth-first pre-order
    """
    expanded = None if expanded_ids is None else set(expanded_ids)
    flattened: List[FlatRow] = []

    def _flatten(rows: Sequence[BudgetRow], depth: int) -> None:
        for row in rows:
            flattened.append(FlatRow(row, depth))
            if row.children and (expanded is None or row.id in expanded):
                _flatten(row.children, depth + 1)

    _flatten(forest, 0)
    return flattened


def rows_dataframe(forest: Sequence[BudgetRow], expanded_ids: Optional[Iterable[str]] = None) -> pd.DataFrame:
    """Build the display table; absent amounts become ``NaN``."""
    records = []
    for row, depth in flatten_rows(forest, expanded_ids):
        record: Dict[str, Any] = {
            "id": row.id,
            "title": row.title,
            "depth": depth,
            "cumulative_balance": np.nan if row.cumulative_balance is None else row.cumulative_balance,
            "comments": row.comments or "",
            "is_category": row.is_category,
            "is_editable": row.is_editable,
            "is_input": accepts_input(row),
        }
        for quarter in QUARTERS:
            value = getattr(row, quarter)
            record[quarter] = np.nan if value is None else value
        records.append(record)

    frame = pd.DataFrame.from_records(records, columns=FRAME_COLUMNS)
    for column in [*QUARTERS, "cumulative_balance"]:
        frame[column] = frame[column].astype(float)
    return frame


def _cell(value: Any) -> Any:
    if value is None:
        return None
    if isinstance(value, float) and np.isnan(value):
        return None
    return value


def apply_edits(forest: Sequence[BudgetRow], edits: Mapping[str, Mapping[str, Any]]) -> List[BudgetRow]:
    """Apply a batch of partial row updates and recompute totals.

    Args:
        forest: Current report rows (left untouched)
        edits: Mapping of row id to field updates (``q1``..``q4``, ``comments``)

    Returns:
        New forest with the edits applied and every derived value refreshed

    Raises:
        KeyError: If an edit references an unknown row id
        ValueError: If an edit targets an unknown field or a computed row
    """
    updated: List[BudgetRow] = list(forest)
    for row_id, changes in edits.items():
        row = find_row(updated, row_id)
        if row is None:
            raise KeyError(row_id)

        unknown = set(changes) - EDITABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot edit fields {sorted(unknown)} on row '{row_id}'")

        touches_amounts = any(field in QUARTERS for field in changes)
        if touches_amounts and not accepts_input(row):
            raise ValueError(f"Row '{row_id}' is calculated and cannot be edited")

        values = {}
        for field, value in changes.items():
            value = _cell(value)
            if field in QUARTERS and value is not None:
                value = float(value)
            values[field] = value
        updated = update_row(updated, row_id, **values)

    logger.debug("Applied edits to %d rows", len(edits))
    return compute_totals(updated)


def _amount_changes(old: pd.Series, new: pd.Series) -> Dict[str, Optional[float]]:
    changes: Dict[str, Optional[float]] = {}
    for quarter in QUARTERS:
        old_value, new_value = _cell(old[quarter]), _cell(new[quarter])
        if old_value != new_value:
            changes[quarter] = None if new_value is None else float(new_value)
    return changes


def _paired_rows(original: pd.DataFrame, edited: pd.DataFrame) -> Iterator[Tuple[str, pd.Series, pd.Series]]:
    before = original.set_index("id")
    after = edited.set_index("id")
    for row_id in after.index.intersection(before.index):
        yield str(row_id), before.loc[row_id], after.loc[row_id]


def edits_from_dataframe(original: pd.DataFrame, edited: pd.DataFrame) -> Dict[str, Dict[str, Any]]:
    """Diff an edited display table against the original one.

    Only rows flagged ``is_input`` contribute amount changes; comment changes
    are taken from any row.  Use :func:`locked_amount_edits` to find the
    amount changes left out.
    """
    edits: Dict[str, Dict[str, Any]] = {}
    for row_id, old, new in _paired_rows(original, edited):
        changes: Dict[str, Any] = _amount_changes(old, new) if bool(old["is_input"]) else {}

        old_comment = old.get("comments") or ""
        new_comment = new.get("comments") or ""
        if old_comment != new_comment:
            changes["comments"] = new_comment or None

        if changes:
            edits[row_id] = changes
    return edits


def locked_amount_edits(original: pd.DataFrame, edited: pd.DataFrame) -> List[str]:
    """Ids of category or calculated rows whose amounts were typed over."""
    return [
        row_id
        for row_id, old, new in _paired_rows(original, edited)
        if not bool(old["is_input"]) and _amount_changes(old, new)
    ]
