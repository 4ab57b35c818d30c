"""
Budget Module Service (``fundbook_modules.budget.service``).

Responsibility
--------------
Budget editing and reporting on top of the budget-performance engine:
wholesale line replacement on save, cloning, live performance with the
configured over-budget threshold, and the budget-vs-actual report for a
date range.

Architecture position
---------------------
**Modules layer** -- thin glue over
``fundbook_engines.budget_performance``. No I/O.

Invariants enforced
-------------------
* Performance is recomputed from postings on every call.
* Saving replaces every line; rows without an account or with a negative
  amount never reach the saved budget.

Failure modes
-------------
* Unparseable amount in a saved row  -> ``InvalidAmountError``.
* Unknown accounts are reported in the result's integrity report, not
  raised.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from datetime import date
from typing import Any

from fundbook_config.schema import BudgetSettings
from fundbook_engines.budget_performance import (
    BudgetPerformance,
    BudgetPerformanceCalculator,
    LinePerformance,
)
from fundbook_kernel.domain.accounts import Account, EntityId
from fundbook_kernel.domain.postings import Posting
from fundbook_kernel.domain.values import ZERO
from fundbook_kernel.logging_config import get_logger
from fundbook_modules.budget.models import (
    Budget,
    BudgetLine,
    BudgetStatus,
    BudgetVsActualReport,
    BudgetVsActualRow,
)

logger = get_logger("modules.budget.service")


class BudgetService:
    """
    Budget editing and reporting.

    Contract:
        Budgets are immutable; editing methods return new instances for
        the caller to persist.
    Non-goals:
        - No encumbrances, versions or approval workflow.
    """

    def __init__(self, settings: BudgetSettings | None = None):
        self.settings = settings or BudgetSettings()
        self._calculator = BudgetPerformanceCalculator()

    def save_lines(self, budget: Budget, items: Iterable[BudgetLine | Mapping[str, Any]]) -> Budget:
        items = list(items)
        updated = budget.replace_lines(items)
        logger.info(
            "budget_lines_replaced",
            extra={
                "budget_id": str(budget.id),
                "submitted": len(items),
                "kept": len(updated.lines),
                "total_budgeted": str(updated.total_budgeted),
            },
        )
        return updated

    def clone(self, budget: Budget, new_id: EntityId) -> Budget:
        copy = budget.clone(new_id)
        logger.info("budget_cloned", extra={"source_id": str(budget.id), "budget_id": str(new_id)})
        return copy

    def line_performance(
        self,
        line: BudgetLine,
        postings: Iterable[Posting],
        project_scope: EntityId | None = None,
    ) -> LinePerformance:
        return self._calculator.compute_line_performance(line, postings, project_scope)

    def performance(
        self,
        budget: Budget,
        postings: Iterable[Posting],
        accounts: Iterable[Account] | None = None,
    ) -> BudgetPerformance:
        return self._calculator.compute_budget_performance(budget, postings, accounts)

    def status(self, performance: BudgetPerformance | LinePerformance) -> BudgetStatus:
        if performance.is_over_budget(self.settings.over_budget_threshold_percent):
            return BudgetStatus.OVER
        if performance.spent == ZERO:
            return BudgetStatus.UNUSED
        return BudgetStatus.WITHIN

    def is_over_budget(self, performance: BudgetPerformance | LinePerformance) -> bool:
        return performance.is_over_budget(self.settings.over_budget_threshold_percent)

    def budget_vs_actual(
        self,
        budget: Budget,
        accounts: Iterable[Account],
        postings: Iterable[Posting],
        start: date | None = None,
        end: date | None = None,
    ) -> BudgetVsActualReport:
        """Budgeted against actual expense per line within ``[start, end]``."""
        accounts = tuple(accounts)
        by_id = {a.id: a for a in accounts}
        result = self._calculator.compute_budget_performance(
            budget, postings, accounts, start=start, end=end,
        )

        rows = []
        for line in result.lines:
            account = by_id.get(line.account_id)
            if account is None:
                label = "N/A"
            elif account.code:
                label = f"{account.name} ({account.code})"
            else:
                label = account.name
            rows.append(
                BudgetVsActualRow(
                    account_id=line.account_id,
                    label=label,
                    budgeted=line.budgeted,
                    actual=line.spent,
                )
            )

        return BudgetVsActualReport(
            budget_id=budget.id,
            title=f"Budget vs. Actuals: {budget.name}",
            start=start,
            end=end,
            rows=tuple(rows),
            integrity=result.integrity,
        )
