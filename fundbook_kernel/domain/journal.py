"""
Journal -- Double-entry journal lines and entries.

Responsibility:
    Value objects for a manual or generated journal entry: an ordered list
    of single-sided debit/credit lines against accounts.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Balance checking lives in ``fundbook_engines.journal_validator``.

Invariants enforced:
    - A line is single-sided: at most one of debit/credit is non-zero.
    - Line amounts are non-negative Decimals.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from enum import Enum

from fundbook_kernel.domain.accounts import EntityId
from fundbook_kernel.domain.values import ZERO, parse_amount
from fundbook_kernel.exceptions import MalformedJournalLineError


class LineSide(str, Enum):
    """Which side of the ledger a movement lands on."""

    DEBIT = "debit"
    CREDIT = "credit"

    @property
    def sign(self) -> int:
        """Debit-positive sign: +1 for debits, -1 for credits."""
        return 1 if self is LineSide.DEBIT else -1


@dataclass(frozen=True)
class JournalLine:
    """
    One line of a journal entry.

    Guarantees:
        - ``debit`` and ``credit`` are Decimals >= 0.
        - At most one of them is non-zero.
    """

    account_id: EntityId
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    memo: str | None = None

    def __post_init__(self) -> None:
        for name in ("debit", "credit"):
            object.__setattr__(self, name, parse_amount(getattr(self, name), name, optional=True))

        if self.debit < ZERO or self.credit < ZERO:
            raise MalformedJournalLineError(
                str(self.account_id), self.debit, self.credit, "negative amount",
            )
        if self.debit != ZERO and self.credit != ZERO:
            raise MalformedJournalLineError(
                str(self.account_id), self.debit, self.credit,
                "debit and credit both set",
            )

    @classmethod
    def debit_of(cls, account_id: EntityId, amount: Decimal, memo: str | None = None) -> JournalLine:
        return cls(account_id=account_id, debit=amount, memo=memo)

    @classmethod
    def credit_of(cls, account_id: EntityId, amount: Decimal, memo: str | None = None) -> JournalLine:
        return cls(account_id=account_id, credit=amount, memo=memo)

    @property
    def is_zero(self) -> bool:
        return self.debit == ZERO and self.credit == ZERO

    @property
    def side(self) -> LineSide | None:
        if self.debit > ZERO:
            return LineSide.DEBIT
        if self.credit > ZERO:
            return LineSide.CREDIT
        return None

    @property
    def amount(self) -> Decimal:
        return self.debit if self.debit > ZERO else self.credit


@dataclass(frozen=True)
class JournalEntry:
    """A journal entry: header plus ordered lines."""

    id: EntityId
    date: date
    reference: str = ""
    memo: str = ""
    project_id: EntityId | None = None
    lines: tuple[JournalLine, ...] = field(default_factory=tuple)

    @property
    def total_debit(self) -> Decimal:
        return sum((line.debit for line in self.lines), ZERO)

    @property
    def total_credit(self) -> Decimal:
        return sum((line.credit for line in self.lines), ZERO)

    @property
    def account_ids(self) -> frozenset[EntityId]:
        return frozenset(line.account_id for line in self.lines)
