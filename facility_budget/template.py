"""Canonical empty financial report template.

The template fixes the section/sub-section skeleton of the quarterly
financial report and the reserved anchor ids consumed by
:func:`facility_budget.totals.compute_totals`.
"""

from __future__ import annotations

from typing import Dict, List, Sequence, Tuple

from .budget_tree import BudgetRow, ClosingBalanceId, SectionId

# Expenditure sub-sections: id suffix -> (title, line items)
EXPENDITURE_SUBSECTIONS: Dict[str, Tuple[str, Tuple[str, ...]]] = {
    "01": ("01. Human Resources + BONUS", (
        "Laboratory Technician",
        "Nurse",
    )),
    "02": ("02. Monitoring & Evaluation", (
        "Supervision CHWs",
        "Support group meetings",
    )),
    "03": ("03. Living Support to Clients/Target Populations", (
        "Sample transport",
        "Home visit lost to follow up",
        "Transport and travel for survey/surveillance",
    )),
    "04": ("04. Overheads (22 - Use of goods & services)", (
        "Infrastructure support",
        "Office supplies",
        "Transport and travel (M-Health)",
        "Bank charges",
    )),
    "05": ("05. Transfer to other reporting entities", (
        "Transfer to RBC",
    )),
}

RECEIPT_ITEMS = ("Other Incomes", "Transfers from SPIU/RBC")
FINANCIAL_ASSET_ITEMS = ("Cash at bank", "Petty cash", "Receivables (VAT refund)", "Other Receivables")
FINANCIAL_LIABILITY_ITEMS = (
    "Salaries on borrowed funds (BONUS)",
    "Payable - Maintenance & Repairs",
    "Payable - Office suppliers",
    "Payable - Transportation fees",
    "VAT refund to RBC",
)


def _line_items(prefix: str, titles: Sequence[str], separator: str = "") -> List[BudgetRow]:
    return [
        BudgetRow(id=f"{prefix}{separator}{position}", title=title)
        for position, title in enumerate(titles, start=1)
    ]


def _section(section: SectionId, title: str, children: List[BudgetRow] | None = None, **flags) -> BudgetRow:
    return BudgetRow(
        id=section.value,
        title=title,
        is_category=True,
        children=children or [],
        **flags,
    )


def build_empty_template() -> List[BudgetRow]:
    """Return a fresh report forest with every quarterly value absent."""
    expenditures = [
        BudgetRow(
            id=f"{SectionId.EXPENDITURES.value}{code}",
            title=title,
            is_category=True,
            children=_line_items(f"{SectionId.EXPENDITURES.value}{code}", items, separator="-"),
        )
        for code, (title, items) in EXPENDITURE_SUBSECTIONS.items()
    ]

    closing_children = [
        BudgetRow(id=ClosingBalanceId.ACCUMULATED_SURPLUS.value, title="Accumulated Surplus/Deficit"),
        BudgetRow(id=ClosingBalanceId.PRIOR_YEAR_ADJUSTMENT.value, title="Prior Year Adjustment"),
        BudgetRow(
            id=ClosingBalanceId.PERIOD_SURPLUS.value,
            title="Surplus/Deficit of the Period",
            is_editable=False,
        ),
    ]

    return [
        _section(SectionId.RECEIPTS, "A. Receipts", _line_items("a", RECEIPT_ITEMS)),
        _section(SectionId.EXPENDITURES, "B. Expenditures", expenditures),
        _section(SectionId.SURPLUS_DEFICIT, "C. SURPLUS / DEFICIT", is_editable=False),
        _section(SectionId.FINANCIAL_ASSETS, "D. Financial Assets", _line_items("d", FINANCIAL_ASSET_ITEMS)),
        _section(SectionId.FINANCIAL_LIABILITIES, "E. Financial Liabilities", _line_items("e", FINANCIAL_LIABILITY_ITEMS)),
        _section(SectionId.NET_FINANCIAL_ASSETS, "F. Net Financial Assets", is_editable=False),
        _section(SectionId.CLOSING_BALANCE, "G. Closing Balance", closing_children, is_editable=False),
    ]
