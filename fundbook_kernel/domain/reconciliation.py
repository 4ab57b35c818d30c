"""
Reconciliation value objects -- statement rows and matched pairs.

Bank statement rows are ephemeral: they live for one reconciliation session
and are never persisted by the core. A MatchedPair ties one book posting to
one statement row.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal

from fundbook_kernel.domain.accounts import EntityId
from fundbook_kernel.domain.postings import Posting
from fundbook_kernel.domain.values import parse_amount


@dataclass(frozen=True)
class BankStatementRow:
    """One row of an uploaded bank statement. Positive = deposit."""

    row_id: str
    date: date
    amount: Decimal
    description: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", parse_amount(self.amount))


@dataclass(frozen=True)
class MatchedPair:
    """A book posting paired with a statement row."""

    posting: Posting
    row: BankStatementRow

    @property
    def posting_id(self) -> EntityId:
        return self.posting.id

    @property
    def row_id(self) -> str:
        return self.row.row_id

    @property
    def book_amount(self) -> Decimal:
        """Signed cash effect of the book side."""
        return self.posting.cash_effect

    @property
    def amount_difference(self) -> Decimal:
        return self.row.amount - self.book_amount

    @property
    def days_apart(self) -> int:
        return abs((self.row.date - self.posting.date).days)
