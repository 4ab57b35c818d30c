"""
Budget Domain Models (``fundbook_modules.budget.models``).

``Budget`` and ``BudgetLine`` live in the kernel domain so the
budget-performance engine can read them; they are re-exported here next
to the report models this module produces.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from fundbook_kernel.domain.accounts import EntityId
from fundbook_kernel.domain.budgets import Budget, BudgetLine
from fundbook_kernel.domain.integrity import IntegrityReport
from fundbook_kernel.domain.values import ZERO

__all__ = [
    "Budget",
    "BudgetLine",
    "BudgetStatus",
    "BudgetVsActualReport",
    "BudgetVsActualRow",
]


class BudgetStatus(str, Enum):
    """Headline state of a budget or line."""

    UNUSED = "unused"
    WITHIN = "within"
    OVER = "over"


@dataclass(frozen=True)
class BudgetVsActualRow:
    account_id: EntityId
    label: str  # "Name (code)", or "N/A" for an account not in the chart
    budgeted: Decimal
    actual: Decimal

    @property
    def variance(self) -> Decimal:
        return self.budgeted - self.actual


@dataclass(frozen=True)
class BudgetVsActualReport:
    budget_id: EntityId
    title: str
    start: date | None
    end: date | None
    rows: tuple[BudgetVsActualRow, ...]
    integrity: IntegrityReport = field(default_factory=IntegrityReport)

    @property
    def total_budgeted(self) -> Decimal:
        return sum((r.budgeted for r in self.rows), ZERO)

    @property
    def total_actual(self) -> Decimal:
        return sum((r.actual for r in self.rows), ZERO)

    @property
    def total_variance(self) -> Decimal:
        return sum((r.variance for r in self.rows), ZERO)
