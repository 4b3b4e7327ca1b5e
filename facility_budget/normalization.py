"""Flat report form used for exports and API transport.

:func:`normalize_report` turns the nested report forest into a list of items
with section metadata plus a per-section totals block.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Mapping, Optional, Sequence

import pandas as pd

from .budget_tree import CALCULATED_SECTIONS, QUARTERS, BudgetRow, SectionId
from .totals import compute_totals

REPORT_VERSION = "1.0.0"

SECTION_NAMES: Dict[str, str] = {
    SectionId.RECEIPTS.value: "receipts",
    SectionId.EXPENDITURES.value: "expenditures",
    SectionId.SURPLUS_DEFICIT.value: "surplus_deficit",
    SectionId.FINANCIAL_ASSETS.value: "financial_assets",
    SectionId.FINANCIAL_LIABILITIES.value: "financial_liabilities",
    SectionId.NET_FINANCIAL_ASSETS.value: "net_assets",
    SectionId.CLOSING_BALANCE.value: "closing_balances",
}

# Keys of the totals block, in section order
TOTALS_KEYS: Dict[str, str] = {
    "receipts": "receipts",
    "expenditures": "expenditures",
    "surplus_deficit": "surplusDeficit",
    "financial_assets": "financialAssets",
    "financial_liabilities": "financialLiabilities",
    "net_assets": "netAssets",
    "closing_balances": "closingBalances",
}

SUBSECTION_NAMES: Dict[str, str] = {
    "b01": "human_resources",
    "b02": "monitoring_evaluation",
    "b03": "living_support",
    "b04": "overheads",
    "b05": "transfers",
}


def section_for_id(row_id: str) -> Optional[str]:
    if not row_id:
        return None
    return SECTION_NAMES.get(row_id[0])


def subsection_for_id(row_id: str) -> Optional[str]:
    if len(row_id) <= 1:
        return None
    return SUBSECTION_NAMES.get(row_id[:3])


def sort_order_for_id(row_id: str) -> int:
    """Stable ordering key: ``a`` -> 0, ``b`` -> 1000, ``b01-2`` -> 1012."""
    base = (ord(row_id[0]) - ord("a")) * 1000
    if len(row_id) == 1:
        return base
    digits = re.sub(r"\D", "", row_id[1:])
    return base + (int(digits) if digits else 0)


def _empty_totals() -> Dict[str, Dict[str, float]]:
    return {
        key: {**{q: 0.0 for q in QUARTERS}, "cumulativeBalance": 0.0}
        for key in TOTALS_KEYS.values()
    }


def _item(row: BudgetRow, level: int, parent_id: Optional[str]) -> Dict[str, Any]:
    values: Dict[str, Any] = {q: getattr(row, q) for q in QUARTERS}
    values["cumulativeBalance"] = row.cumulative_balance
    values["comments"] = row.comments
    return {
        "id": row.id,
        "code": row.id,
        "title": row.title,
        "type": "category" if row.is_category else "line_item",
        "level": level,
        "parentId": parent_id,
        "isEditable": row.is_editable,
        "isCalculated": row.id in CALCULATED_SECTIONS,
        "values": values,
        "metadata": {
            "category": section_for_id(row.id),
            "subCategory": subsection_for_id(row.id),
            "sortOrder": sort_order_for_id(row.id),
        },
    }


def normalize_report(forest: Sequence[BudgetRow], metadata: Optional[Mapping[str, Any]] = None) -> Dict[str, Any]:
    """Build the flat report representation.

    Args:
        forest: Report rows; derived values are recomputed first
        metadata: Report header (``facility``, ``district``, ``project``,
            ``reportingPeriod``, ``fiscalYear``)

    Returns:
        Dictionary with ``version``, ``fiscalYear``, ``reportingPeriod``,
        ``status``, ``metadata``, ``items`` and ``totals``
    """
    metadata = dict(metadata or {})
    rows = compute_totals(forest)
    items: List[Dict[str, Any]] = []

    def _collect(children: Sequence[BudgetRow], level: int, parent_id: Optional[str]) -> None:
        for row in children:
            items.append(_item(row, level, parent_id))
            _collect(row.children, level + 1, row.id)

    _collect(rows, 1, None)

    totals = _empty_totals()
    for row in rows:
        section = section_for_id(row.id)
        if section is None or len(row.id) != 1:
            continue
        target = totals[TOTALS_KEYS[section]]
        for quarter in QUARTERS:
            target[quarter] += getattr(row, quarter) or 0
        target["cumulativeBalance"] += row.cumulative_balance or 0

    facility = metadata.get("facility") or ""
    project = metadata.get("project")
    return {
        "version": REPORT_VERSION,
        "fiscalYear": metadata.get("fiscalYear"),
        "reportingPeriod": metadata.get("reportingPeriod"),
        "status": "draft",
        "metadata": {
            "facility": {
                "name": facility,
                "district": metadata.get("district", ""),
                "code": facility.upper().replace(" ", "_"),
            },
            "project": {
                "name": project,
                "code": project.upper().replace(" ", "_"),
            } if project else None,
        },
        "items": items,
        "totals": totals,
    }


def items_dataframe(report: Mapping[str, Any]) -> pd.DataFrame:
    """Tabular view of normalized report items, one row per item in report order."""
    records = []
    for item in report.get("items", []):
        record = {
            "id": item["id"],
            "title": item["title"],
            "type": item["type"],
            "level": item["level"],
            "parent_id": item["parentId"],
            "category": item["metadata"]["category"],
            "sub_category": item["metadata"]["subCategory"],
            "sort_order": item["metadata"]["sortOrder"],
        }
        for quarter in QUARTERS:
            record[quarter] = item["values"][quarter]
        record["cumulative_balance"] = item["values"]["cumulativeBalance"]
        records.append(record)
    return pd.DataFrame.from_records(records)
