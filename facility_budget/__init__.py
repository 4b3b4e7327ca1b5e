"""Top-level package for the Facility Budget workspace.

This file makes the directory a Python package and exposes
convenient names.  The primary modules are:

* ``totals`` – the hierarchical financial totals engine
* ``template`` – the canonical empty financial report
* ``presentation`` – table flattening and edit batches
* ``planning`` – quarterly activity plans
* ``dashboard`` – a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run facility_budget/dashboard.py
```
"""

from . import budget_tree  # noqa: F401  # re-exported for convenience
from . import template  # noqa: F401  # re-exported for convenience
from . import totals  # noqa: F401  # re-exported for convenience
from .budget_tree import BudgetRow, ClosingBalanceId, SectionId  # noqa: F401
from .template import build_empty_template  # noqa: F401
from .totals import compute_totals  # noqa: F401

# Streamlit may not be installed in all environments (e.g. during unit
# testing); the dashboard is then unavailable.
try:
    from . import dashboard  # type: ignore  # noqa: F401
except ModuleNotFoundError:
    dashboard = None  # type: ignore


__all__ = [
    "budget_tree",
    "template",
    "totals",
    "dashboard",
    "BudgetRow",
    "ClosingBalanceId",
    "SectionId",
    "build_empty_template",
    "compute_totals",
]
