"""
Postings -- Single-account money movements and the sign convention.

Responsibility:
    Defines the Posting record (one dated movement against one account) and
    the ONE rule that turns a posting's kind into a ledger side. Every
    balance, report and reconciliation amount in the core goes through
    ``posting_side`` so the convention cannot drift between components.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Sign convention:
    Balances are debit-positive (debit = +, credit = -). The side of a
    posting depends on its kind and the category of the account it touches:

        INCOME     DEBIT if the account is an ASSET (cash came in), else CREDIT
        EXPENSE    CREDIT if the account is an ASSET (cash went out), else DEBIT
        ASSET      DEBIT
        LIABILITY  CREDIT
        TRANSFER   DEBIT if INBOUND, CREDIT if OUTBOUND

Invariants enforced:
    - ``amount`` is stored unsigned; direction comes only from the rule above.
    - A TRANSFER always carries a direction; other kinds never do.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from enum import Enum

from fundbook_kernel.domain.accounts import AccountCategory, EntityId
from fundbook_kernel.domain.journal import LineSide
from fundbook_kernel.domain.values import ZERO, parse_amount
from fundbook_kernel.exceptions import InvalidAmountError, InvalidFieldError, MissingFieldError


class PostingKind(str, Enum):
    """The kind tag carried by a transaction."""

    INCOME = "Income"
    EXPENSE = "Expense"
    ASSET = "Asset"
    LIABILITY = "Liability"
    TRANSFER = "Transfer"

    @classmethod
    def parse(cls, text: str | PostingKind) -> PostingKind:
        if isinstance(text, PostingKind):
            return text
        normalized = str(text).strip().lower()
        for kind in cls:
            if kind.value.lower() == normalized:
                return kind
        raise InvalidFieldError("kind", text, tuple(k.value for k in cls))


class TransferDirection(str, Enum):
    """Direction of a transfer relative to the posting's account."""

    INBOUND = "inbound"
    OUTBOUND = "outbound"

    @classmethod
    def parse(cls, text: str | TransferDirection) -> TransferDirection:
        if isinstance(text, TransferDirection):
            return text
        normalized = str(text).strip().lower()
        for direction in cls:
            if direction.value == normalized:
                return direction
        raise InvalidFieldError("direction", text, tuple(d.value for d in cls))


@dataclass(frozen=True)
class Posting:
    """A single dated movement of money against one account."""

    id: EntityId
    date: date
    account_id: EntityId
    kind: PostingKind
    amount: Decimal
    description: str = ""
    project_id: EntityId | None = None
    fund_id: EntityId | None = None
    notes: str | None = None
    direction: TransferDirection | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", parse_amount(self.amount))
        if self.amount < ZERO:
            raise InvalidAmountError("amount", self.amount)
        if self.kind is PostingKind.TRANSFER and self.direction is None:
            raise MissingFieldError("direction", "transfer posting")
        if self.kind is not PostingKind.TRANSFER and self.direction is not None:
            raise InvalidFieldError("direction", self.direction)

    @property
    def cash_effect(self) -> Decimal:
        """Signed amount as seen by a bank (asset) account: deposits positive."""
        return signed_amount(self, AccountCategory.ASSET)


def posting_side(posting: Posting, category: AccountCategory) -> LineSide:
    """Ledger side of ``posting`` on an account of ``category``."""
    kind = posting.kind
    if kind is PostingKind.INCOME:
        return LineSide.DEBIT if category is AccountCategory.ASSET else LineSide.CREDIT
    if kind is PostingKind.EXPENSE:
        return LineSide.CREDIT if category is AccountCategory.ASSET else LineSide.DEBIT
    if kind is PostingKind.ASSET:
        return LineSide.DEBIT
    if kind is PostingKind.LIABILITY:
        return LineSide.CREDIT
    return LineSide.DEBIT if posting.direction is TransferDirection.INBOUND else LineSide.CREDIT


def signed_amount(posting: Posting, category: AccountCategory) -> Decimal:
    """Debit-positive signed amount of ``posting`` on a ``category`` account."""
    return posting.amount * posting_side(posting, category).sign


def split_transfer(
    transfer_id: EntityId,
    on: date,
    from_account_id: EntityId,
    to_account_id: EntityId,
    amount: Decimal,
    description: str = "",
) -> tuple[Posting, Posting]:
    """
    Expand a transfer between two accounts into its two postings.

    Returns ``(outbound, inbound)``; the outbound leg sits on the source
    account, the inbound leg on the destination.

    Raises:
        ValueError: same source and destination, or a non-positive amount.
    """
    if from_account_id == to_account_id:
        raise ValueError("Source and destination accounts must be different.")
    amount = parse_amount(amount)
    if amount <= ZERO:
        raise ValueError("Transfer amount must be greater than zero.")

    common = dict(date=on, kind=PostingKind.TRANSFER, amount=amount, description=description)
    outbound = Posting(
        id=f"{transfer_id}-out",
        account_id=from_account_id,
        direction=TransferDirection.OUTBOUND,
        **common,
    )
    inbound = Posting(
        id=f"{transfer_id}-in",
        account_id=to_account_id,
        direction=TransferDirection.INBOUND,
        **common,
    )
    return outbound, inbound
