"""
Pure domain layer.

Immutable records and value parsing with NO dependencies on:
- Persistence
- Time/clock
- I/O

Every object here is a frozen dataclass or an enum; money is Decimal.
"""

from fundbook_kernel.domain.accounts import (
    Account,
    AccountCategory,
    AccountTree,
    EntityId,
    NormalBalance,
)
from fundbook_kernel.domain.budgets import Budget, BudgetLine
from fundbook_kernel.domain.integrity import IntegrityIssue, IntegrityReport
from fundbook_kernel.domain.journal import JournalEntry, JournalLine, LineSide
from fundbook_kernel.domain.postings import (
    Posting,
    PostingKind,
    TransferDirection,
    posting_side,
    signed_amount,
    split_transfer,
)
from fundbook_kernel.domain.projects import Fund, Project
from fundbook_kernel.domain.reconciliation import BankStatementRow, MatchedPair
from fundbook_kernel.domain.values import (
    CENT,
    HUNDRED,
    ONE,
    ZERO,
    parse_amount,
    parse_date,
    parse_rate,
    quantize_cents,
    within,
)

__all__ = [
    "Account",
    "AccountCategory",
    "AccountTree",
    "BankStatementRow",
    "Budget",
    "BudgetLine",
    "CENT",
    "EntityId",
    "Fund",
    "HUNDRED",
    "IntegrityIssue",
    "IntegrityReport",
    "JournalEntry",
    "JournalLine",
    "LineSide",
    "MatchedPair",
    "NormalBalance",
    "ONE",
    "Posting",
    "PostingKind",
    "Project",
    "TransferDirection",
    "ZERO",
    "parse_amount",
    "parse_date",
    "parse_rate",
    "posting_side",
    "quantize_cents",
    "signed_amount",
    "split_transfer",
    "within",
]
