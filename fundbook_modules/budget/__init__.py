"""
Budget Module (``fundbook_modules.budget``).

Budgets per expense account, optionally scoped to one project, with live
spend tracking and a budget-vs-actual report.
"""

from fundbook_modules.budget.models import (
    Budget,
    BudgetLine,
    BudgetStatus,
    BudgetVsActualReport,
    BudgetVsActualRow,
)
from fundbook_modules.budget.service import BudgetService

__all__ = [
    "Budget",
    "BudgetLine",
    "BudgetService",
    "BudgetStatus",
    "BudgetVsActualReport",
    "BudgetVsActualRow",
]
