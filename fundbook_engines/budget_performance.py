"""
fundbook_engines.budget_performance -- Budget versus actual spend.

Responsibility:
    Computes, per budget line and per budget, how much of the planned
    amount has been spent by expense postings on the line's account.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumed by ``fundbook_modules.budget.service.BudgetService``.

Invariants enforced:
    - ``remaining = budgeted - spent`` exactly; it goes negative when over.
    - ``percent_used = spent / budgeted * 100``, and 0 when nothing was
      budgeted (no division by zero).
    - Budget totals are sums of line results, never recomputed separately.
    - Only EXPENSE-kind postings count as spend. Without a date range every
      date counts.

Failure modes:
    - None raised. Lines pointing at accounts missing from a supplied chart
      are still computed and flagged in the integrity report.

Audit relevance:
    Results are recomputed on every call; there is no cache to go stale
    when a posting changes.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from fundbook_engines.tracer import traced_engine
from fundbook_kernel.domain.accounts import Account, EntityId
from fundbook_kernel.domain.budgets import Budget, BudgetLine
from fundbook_kernel.domain.integrity import IntegrityIssue, IntegrityReport
from fundbook_kernel.domain.postings import Posting, PostingKind
from fundbook_kernel.domain.values import HUNDRED, ZERO
from fundbook_kernel.logging_config import get_logger

logger = get_logger("engines.budget_performance")


def _percent(spent: Decimal, budgeted: Decimal) -> Decimal:
    if budgeted > ZERO:
        return spent / budgeted * HUNDRED
    return ZERO


@dataclass(frozen=True)
class LinePerformance:
    """Spend against one budget line."""

    account_id: EntityId
    budgeted: Decimal
    spent: Decimal

    @property
    def remaining(self) -> Decimal:
        return self.budgeted - self.spent

    @property
    def percent_used(self) -> Decimal:
        return _percent(self.spent, self.budgeted)

    @property
    def bar_percent(self) -> Decimal:
        """``percent_used`` capped at 100 for progress displays."""
        return min(self.percent_used, HUNDRED)

    def is_over_budget(self, threshold_percent: Decimal = HUNDRED) -> bool:
        return self.percent_used > threshold_percent


@dataclass(frozen=True)
class BudgetPerformance:
    """Line results for a budget and their totals."""

    budget_id: EntityId
    lines: tuple[LinePerformance, ...]
    integrity: IntegrityReport = field(default_factory=IntegrityReport)

    @property
    def budgeted(self) -> Decimal:
        return sum((line.budgeted for line in self.lines), ZERO)

    @property
    def spent(self) -> Decimal:
        return sum((line.spent for line in self.lines), ZERO)

    @property
    def remaining(self) -> Decimal:
        return sum((line.remaining for line in self.lines), ZERO)

    @property
    def percent_used(self) -> Decimal:
        return _percent(self.spent, self.budgeted)

    def is_over_budget(self, threshold_percent: Decimal = HUNDRED) -> bool:
        return self.percent_used > threshold_percent

    def over_budget_lines(self, threshold_percent: Decimal = HUNDRED) -> tuple[LinePerformance, ...]:
        return tuple(line for line in self.lines if line.is_over_budget(threshold_percent))


class BudgetPerformanceCalculator:
    """
    Pure budget-versus-actual calculator.

    Contract:
        Postings are scanned in full for each line; callers pass whatever
        subset of the ledger they consider relevant.
    Guarantees:
        - Scoping by project keeps only postings tagged with that project.
        - Date bounds, when given, are inclusive.
    Non-goals:
        - Does not roll spend up from child accounts to a parent line.
    """

    @staticmethod
    def _spent(
        account_id: EntityId,
        postings: Sequence[Posting],
        project_scope: EntityId | None,
        start: date | None,
        end: date | None,
    ) -> Decimal:
        spent = ZERO
        for posting in postings:
            if posting.kind is not PostingKind.EXPENSE or posting.account_id != account_id:
                continue
            if project_scope is not None and posting.project_id != project_scope:
                continue
            if start is not None and posting.date < start:
                continue
            if end is not None and posting.date > end:
                continue
            spent += posting.amount
        return spent

    @traced_engine(
        "budget_line_performance",
        "1.0",
        fingerprint_fields=("line", "postings", "project_scope", "start", "end"),
    )
    def compute_line_performance(
        self,
        line: BudgetLine,
        postings: Iterable[Posting],
        project_scope: EntityId | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> LinePerformance:
        spent = self._spent(line.account_id, tuple(postings), project_scope, start, end)
        return LinePerformance(account_id=line.account_id, budgeted=line.amount, spent=spent)

    @traced_engine(
        "budget_performance",
        "1.0",
        fingerprint_fields=("budget", "postings", "accounts", "start", "end"),
    )
    def compute_budget_performance(
        self,
        budget: Budget,
        postings: Iterable[Posting],
        accounts: Iterable[Account] | None = None,
        start: date | None = None,
        end: date | None = None,
    ) -> BudgetPerformance:
        t0 = time.monotonic()
        postings = tuple(postings)
        lines = tuple(
            LinePerformance(
                account_id=line.account_id,
                budgeted=line.amount,
                spent=self._spent(line.account_id, postings, budget.project_id, start, end),
            )
            for line in budget.lines
        )

        issues: list[IntegrityIssue] = []
        if accounts is not None:
            known = {a.id for a in accounts}
            for index, line in enumerate(budget.lines):
                if line.account_id not in known:
                    issues.append(
                        IntegrityIssue(
                            record_kind="budget_line",
                            record_id=f"{budget.id}:{index}",
                            reference_kind="account",
                            reference_id=str(line.account_id),
                            skipped=False,
                        )
                    )

        result = BudgetPerformance(
            budget_id=budget.id, lines=lines, integrity=IntegrityReport.of(issues),
        )
        logger.info(
            "budget_performance_computed",
            extra={
                "budget_id": str(budget.id),
                "project_scope": str(budget.project_id) if budget.project_id is not None else None,
                "line_count": len(lines),
                "budgeted": str(result.budgeted),
                "spent": str(result.spent),
                "unknown_accounts": len(result.integrity.unknown_account_ids),
                "duration_ms": round((time.monotonic() - t0) * 1000, 2),
            },
        )
        return result
