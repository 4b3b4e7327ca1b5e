"""Hierarchical totals engine for the facility financial report.

The engine works in two passes over a forest of :class:`BudgetRow`:

1. A bottom-up roll-up: category rows receive the per-quarter sum of their
   children and every row receives its cumulative balance.
2. Cross-row formulas on the top-level section anchors:

   * ``C = A - B``          (Surplus / Deficit)
   * ``F = D - E``          (Net Financial Assets)
   * ``G = G1 + G2 + G3``   (Closing Balance, with ``G3`` mirrored from ``C``)

The input forest is never mutated; a new forest is returned.  Missing anchors
are not errors, their contribution is treated as 0.  The forest must be
acyclic.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Dict, List, Optional, Sequence

from .budget_tree import (
    QUARTERS,
    BudgetRow,
    ClosingBalanceId,
    SectionId,
    clamp_non_positive_to_zero,
    find_child,
    find_top_level,
    non_positive_to_absent,
    quarter_sum,
    zero_to_absent,
)

logger = logging.getLogger(__name__)


def _value(row: Optional[BudgetRow], quarter: str) -> float:
    if row is None:
        return 0
    return getattr(row, quarter) or 0


def _roll_up(row: BudgetRow) -> BudgetRow:
    children = [_roll_up(child) for child in row.children]
    quarters: Dict[str, Optional[float]] = {q: getattr(row, q) for q in QUARTERS}

    if children and row.is_category:
        for quarter in QUARTERS:
            total = sum(_value(child, quarter) for child in children)
            quarters[quarter] = zero_to_absent(total)

    updated = replace(row, children=children, **quarters)
    updated.cumulative_balance = non_positive_to_absent(quarter_sum(updated))
    return updated


def _difference(target: BudgetRow, plus: Optional[BudgetRow], minus: Optional[BudgetRow]) -> BudgetRow:
    quarters = {q: _value(plus, q) - _value(minus, q) for q in QUARTERS}
    updated = replace(target, **quarters)
    updated.cumulative_balance = clamp_non_positive_to_zero(quarter_sum(updated))
    return updated


def _closing_balance(closing: BudgetRow, surplus: Optional[BudgetRow]) -> BudgetRow:
    children: List[BudgetRow] = []
    for child in closing.children:
        if child.id == ClosingBalanceId.PERIOD_SURPLUS.value and surplus is not None:
            child = replace(
                child,
                cumulative_balance=surplus.cumulative_balance,
                **{q: getattr(surplus, q) for q in QUARTERS},
            )
        children.append(child)

    closing = replace(closing, children=children)
    parts = [find_child(closing, member.value) for member in ClosingBalanceId]
    for quarter in QUARTERS:
        setattr(closing, quarter, sum(_value(part, quarter) for part in parts))
    # Closing balances may be negative (accumulated deficit); no clamp here.
    closing.cumulative_balance = quarter_sum(closing)
    return closing


def compute_totals(forest: Sequence[BudgetRow]) -> List[BudgetRow]:
    """Recompute every derived value of a financial report forest.

    Args:
        forest: Ordered top-level rows of the report

    Returns:
        A new forest with category quarters, cumulative balances and the
        Surplus/Deficit, Net Financial Assets and Closing Balance sections
        freshly computed

    Example:
        >>> rows = compute_totals(build_empty_template())
        >>> find_top_level(rows, 'c').cumulative_balance
        0
    """
    rows = [_roll_up(row) for row in forest]
    index: Dict[str, int] = {}
    for position, row in enumerate(rows):
        index.setdefault(row.id, position)

    def anchor(section: SectionId) -> Optional[BudgetRow]:
        return find_top_level(rows, section.value)

    surplus = anchor(SectionId.SURPLUS_DEFICIT)
    if surplus is not None:
        surplus = _difference(surplus, anchor(SectionId.RECEIPTS), anchor(SectionId.EXPENDITURES))
        rows[index[surplus.id]] = surplus

    net_assets = anchor(SectionId.NET_FINANCIAL_ASSETS)
    if net_assets is not None:
        net_assets = _difference(
            net_assets,
            anchor(SectionId.FINANCIAL_ASSETS),
            anchor(SectionId.FINANCIAL_LIABILITIES),
        )
        rows[index[net_assets.id]] = net_assets

    closing = anchor(SectionId.CLOSING_BALANCE)
    if closing is not None:
        closing = _closing_balance(closing, surplus)
        rows[index[closing.id]] = closing

    logger.debug(
        "Computed totals for %d sections (surplus=%s, net assets=%s, closing=%s)",
        len(rows),
        surplus.cumulative_balance if surplus else None,
        net_assets.cumulative_balance if net_assets else None,
        closing.cumulative_balance if closing else None,
    )
    return rows
