"""
fundbook_engines.ledger -- Account balances and ledger-derived reports.

Responsibility:
    Derives per-account balances from postings as of a date, and the
    reports built on the same arithmetic: category totals, parent rollups,
    statement of activities, fund balances and project summaries.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fundbook_kernel (domain values, records, logging).

Invariants enforced:
    - Debit-positive balances, sides decided only by
      ``fundbook_kernel.domain.postings.posting_side``.
    - Every supplied account appears in the result, zero when untouched.
    - Input collections are never mutated; identical inputs give identical
      outputs.

Failure modes:
    - None raised for dangling references: a posting against an unknown
      account (or fund, or project) is skipped and recorded in the
      ``IntegrityReport`` returned alongside the figures.

Audit relevance:
    The integrity report lets a caller show "N transactions reference
    deleted accounts" next to a balance instead of a silently short total.
"""

from __future__ import annotations

import time
from collections import defaultdict
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal

from fundbook_engines.tracer import traced_engine
from fundbook_kernel.domain.accounts import (
    Account,
    AccountCategory,
    AccountTree,
    EntityId,
    NormalBalance,
)
from fundbook_kernel.domain.integrity import (
    IntegrityIssue,
    IntegrityReport,
    unknown_account,
    unknown_project,
)
from fundbook_kernel.domain.postings import Posting, PostingKind, signed_amount
from fundbook_kernel.domain.projects import Fund, Project
from fundbook_kernel.domain.values import ZERO
from fundbook_kernel.logging_config import get_logger

logger = get_logger("engines.ledger")


def _in_range(on: date, start: date | None, end: date | None) -> bool:
    if start is not None and on < start:
        return False
    if end is not None and on > end:
        return False
    return True


@dataclass(frozen=True)
class BalanceResult:
    """Balances as of a date plus the postings that could not be applied."""

    as_of: date
    balances: Mapping[EntityId, Decimal]
    integrity: IntegrityReport = field(default_factory=IntegrityReport)

    def balance_of(self, account_id: EntityId) -> Decimal:
        return self.balances.get(account_id, ZERO)

    @property
    def skipped_count(self) -> int:
        return self.integrity.skipped_count


@dataclass(frozen=True)
class ActivitiesStatement:
    """Revenue and expense activity within a date range."""

    start: date | None
    end: date | None
    revenue_by_account: Mapping[EntityId, Decimal]
    expenses_by_account: Mapping[EntityId, Decimal]
    integrity: IntegrityReport = field(default_factory=IntegrityReport)

    @property
    def total_revenue(self) -> Decimal:
        return sum(self.revenue_by_account.values(), ZERO)

    @property
    def total_expenses(self) -> Decimal:
        return sum(self.expenses_by_account.values(), ZERO)

    @property
    def change_in_net_assets(self) -> Decimal:
        return self.total_revenue - self.total_expenses


@dataclass(frozen=True)
class FundBalance:
    fund_id: EntityId
    name: str
    opening: Decimal
    inflows: Decimal
    outflows: Decimal

    @property
    def closing(self) -> Decimal:
        return self.opening + self.inflows - self.outflows


@dataclass(frozen=True)
class ProjectSummary:
    project_id: EntityId
    name: str
    revenue: Decimal
    expenses: Decimal

    @property
    def net(self) -> Decimal:
        return self.revenue - self.expenses


class LedgerCalculator:
    """
    Pure calculator for ledger balances and ledger reports.

    Contract:
        Accounts, postings, funds and projects are caller-supplied
        collections; nothing is cached between calls.
    Guarantees:
        - ``compute_balances`` returns an entry for every account.
        - Postings dated after ``as_of`` are excluded; report date ranges
          are inclusive at both ends.
        - Reference misses are reported, never raised.
    Non-goals:
        - Does not persist balances or update ``Account.balance``.
        - Does not validate that postings pair up into balanced entries.
    """

    @traced_engine("ledger_balances", "1.0", fingerprint_fields=("accounts", "postings", "as_of"))
    def compute_balances(
        self,
        accounts: Iterable[Account],
        postings: Iterable[Posting],
        as_of: date,
    ) -> BalanceResult:
        t0 = time.monotonic()
        by_id = {a.id: a for a in accounts}
        balances: dict[EntityId, Decimal] = {account_id: ZERO for account_id in by_id}
        issues: list[IntegrityIssue] = []
        applied = 0

        for posting in postings:
            if posting.date > as_of:
                continue
            account = by_id.get(posting.account_id)
            if account is None:
                issues.append(unknown_account("posting", posting.id, posting.account_id))
                continue
            balances[account.id] += signed_amount(posting, account.category)
            applied += 1

        integrity = IntegrityReport.of(issues)
        if not integrity.is_clean:
            logger.warning(
                "postings_reference_unknown_accounts",
                extra={
                    "skipped_count": integrity.skipped_count,
                    "unknown_account_ids": sorted(integrity.unknown_account_ids),
                },
            )
        logger.info(
            "balances_computed",
            extra={
                "as_of": as_of.isoformat(),
                "account_count": len(balances),
                "applied_postings": applied,
                "skipped_postings": integrity.skipped_count,
                "duration_ms": round((time.monotonic() - t0) * 1000, 2),
            },
        )
        return BalanceResult(as_of=as_of, balances=balances, integrity=integrity)

    @staticmethod
    def natural_balance(account: Account, balance: Decimal) -> Decimal:
        """Re-express a debit-positive balance in the account's normal direction."""
        if account.normal_balance is NormalBalance.CREDIT:
            return -balance
        return balance

    def category_totals(
        self,
        accounts: Iterable[Account],
        balances: Mapping[EntityId, Decimal],
    ) -> dict[AccountCategory, Decimal]:
        """Natural-signed totals per category over leaf and parent accounts alike."""
        totals: dict[AccountCategory, Decimal] = {category: ZERO for category in AccountCategory}
        for account in accounts:
            totals[account.category] += self.natural_balance(
                account, balances.get(account.id, ZERO),
            )
        return totals

    def rollup_balances(
        self,
        tree: AccountTree,
        balances: Mapping[EntityId, Decimal],
    ) -> dict[EntityId, Decimal]:
        """Each account's own balance plus all of its descendants' balances."""
        rolled: dict[EntityId, Decimal] = {}
        for account in tree:
            total = balances.get(account.id, ZERO)
            for child in tree.descendants(account.id):
                total += balances.get(child.id, ZERO)
            rolled[account.id] = total
        return rolled

    @traced_engine(
        "statement_of_activities", "1.0", fingerprint_fields=("accounts", "postings", "start", "end"),
    )
    def statement_of_activities(
        self,
        accounts: Iterable[Account],
        postings: Iterable[Posting],
        start: date | None = None,
        end: date | None = None,
    ) -> ActivitiesStatement:
        """
        Revenue and expense activity per account within ``[start, end]``.

        Amounts are natural-signed: revenue positive when credited, expense
        positive when debited. Postings on balance-sheet accounts are
        ignored.
        """
        by_id = {a.id: a for a in accounts}
        revenue: dict[EntityId, Decimal] = {
            a.id: ZERO for a in by_id.values() if a.category is AccountCategory.REVENUE
        }
        expenses: dict[EntityId, Decimal] = {
            a.id: ZERO for a in by_id.values() if a.category is AccountCategory.EXPENSE
        }
        issues: list[IntegrityIssue] = []

        for posting in postings:
            if not _in_range(posting.date, start, end):
                continue
            account = by_id.get(posting.account_id)
            if account is None:
                issues.append(unknown_account("posting", posting.id, posting.account_id))
                continue
            movement = self.natural_balance(account, signed_amount(posting, account.category))
            if account.category is AccountCategory.REVENUE:
                revenue[account.id] += movement
            elif account.category is AccountCategory.EXPENSE:
                expenses[account.id] += movement

        return ActivitiesStatement(
            start=start,
            end=end,
            revenue_by_account=revenue,
            expenses_by_account=expenses,
            integrity=IntegrityReport.of(issues),
        )

    @traced_engine("fund_balances", "1.0", fingerprint_fields=("funds", "postings", "start", "end"))
    def fund_balances(
        self,
        funds: Iterable[Fund],
        postings: Iterable[Posting],
        start: date | None = None,
        end: date | None = None,
    ) -> tuple[dict[EntityId, FundBalance], IntegrityReport]:
        """
        Opening balance plus in-range inflows minus outflows, per fund.

        A posting's flow is its cash effect (income in, expense out).
        Untagged postings are ignored; a tag naming an unknown fund is
        reported.
        """
        known = {f.id: f for f in funds}
        inflows: dict[EntityId, Decimal] = defaultdict(lambda: ZERO)
        outflows: dict[EntityId, Decimal] = defaultdict(lambda: ZERO)
        issues: list[IntegrityIssue] = []

        for posting in postings:
            if posting.fund_id is None or not _in_range(posting.date, start, end):
                continue
            if posting.fund_id not in known:
                issues.append(
                    IntegrityIssue(
                        record_kind="posting",
                        record_id=str(posting.id),
                        reference_kind="fund",
                        reference_id=str(posting.fund_id),
                    )
                )
                continue
            effect = posting.cash_effect
            if effect >= ZERO:
                inflows[posting.fund_id] += effect
            else:
                outflows[posting.fund_id] -= effect

        result = {
            fund.id: FundBalance(
                fund_id=fund.id,
                name=fund.name,
                opening=fund.opening_balance,
                inflows=inflows[fund.id],
                outflows=outflows[fund.id],
            )
            for fund in known.values()
        }
        return result, IntegrityReport.of(issues)

    @traced_engine(
        "project_summary", "1.0", fingerprint_fields=("projects", "postings", "start", "end"),
    )
    def project_summary(
        self,
        projects: Iterable[Project],
        postings: Iterable[Posting],
        start: date | None = None,
        end: date | None = None,
    ) -> tuple[dict[EntityId, ProjectSummary], IntegrityReport]:
        """Income and expense totals per project within ``[start, end]``."""
        known = {p.id: p for p in projects}
        revenue: dict[EntityId, Decimal] = defaultdict(lambda: ZERO)
        expenses: dict[EntityId, Decimal] = defaultdict(lambda: ZERO)
        issues: list[IntegrityIssue] = []

        for posting in postings:
            if posting.project_id is None or not _in_range(posting.date, start, end):
                continue
            if posting.project_id not in known:
                issues.append(unknown_project("posting", posting.id, posting.project_id))
                continue
            if posting.kind is PostingKind.INCOME:
                revenue[posting.project_id] += posting.amount
            elif posting.kind is PostingKind.EXPENSE:
                expenses[posting.project_id] += posting.amount

        result = {
            project.id: ProjectSummary(
                project_id=project.id,
                name=project.name,
                revenue=revenue[project.id],
                expenses=expenses[project.id],
            )
            for project in known.values()
        }
        return result, IntegrityReport.of(issues)
