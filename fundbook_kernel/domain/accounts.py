"""
Accounts -- Chart of accounts value objects and hierarchy.

Responsibility:
    Defines the Account record, the five nonprofit account categories with
    their normal balance, and ``AccountTree``, a read-only index over a flat
    account list that answers hierarchy questions (children, placeholders,
    category consistency).

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Every account has exactly one category.
    - A child whose category differs from its parent's is *reported*
      (``category_mismatches``), never rejected.
"""

from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from uuid import UUID

from fundbook_kernel.domain.values import ZERO
from fundbook_kernel.exceptions import InvalidFieldError

EntityId = str | int | UUID


class NormalBalance(str, Enum):
    """Normal balance side for an account category."""

    DEBIT = "debit"
    CREDIT = "credit"


class AccountCategory(str, Enum):
    """Top-level classification of an account."""

    ASSET = "Asset"
    LIABILITY = "Liability"
    NET_ASSET = "NetAsset"
    REVENUE = "Revenue"
    EXPENSE = "Expense"

    @property
    def normal_balance(self) -> NormalBalance:
        if self in (AccountCategory.ASSET, AccountCategory.EXPENSE):
            return NormalBalance.DEBIT
        return NormalBalance.CREDIT

    @classmethod
    def parse(cls, text: str | AccountCategory) -> AccountCategory:
        """Accept enum values and the plural labels used by the UI."""
        if isinstance(text, AccountCategory):
            return text
        key = "".join(str(text).split()).lower()
        try:
            return _CATEGORY_ALIASES[key]
        except KeyError:
            raise InvalidFieldError("category", text, tuple(c.value for c in cls)) from None


_CATEGORY_ALIASES: dict[str, AccountCategory] = {
    "asset": AccountCategory.ASSET,
    "assets": AccountCategory.ASSET,
    "liability": AccountCategory.LIABILITY,
    "liabilities": AccountCategory.LIABILITY,
    "netasset": AccountCategory.NET_ASSET,
    "netassets": AccountCategory.NET_ASSET,
    "equity": AccountCategory.NET_ASSET,
    "revenue": AccountCategory.REVENUE,
    "revenues": AccountCategory.REVENUE,
    "income": AccountCategory.REVENUE,
    "expense": AccountCategory.EXPENSE,
    "expenses": AccountCategory.EXPENSE,
}


@dataclass(frozen=True)
class Account:
    """A chart-of-accounts entry."""

    id: EntityId
    name: str
    category: AccountCategory
    code: str | None = None
    account_type: str = ""
    parent_id: EntityId | None = None
    balance: Decimal = ZERO

    @property
    def normal_balance(self) -> NormalBalance:
        return self.category.normal_balance

    @property
    def sort_key(self) -> tuple[str, str]:
        return (self.code or "", self.name)


class AccountTree:
    """
    Read-only hierarchy index over a flat list of accounts.

    Contract:
        Built once from an account sequence; never mutates the accounts.
        Accounts whose ``parent_id`` is unknown are treated as roots, the
        same way the chart-of-accounts screen renders them.
    """

    def __init__(self, accounts: Iterable[Account]):
        self._by_id: dict[EntityId, Account] = {}
        for account in accounts:
            self._by_id[account.id] = account

        self._children: dict[EntityId, list[EntityId]] = defaultdict(list)
        self._roots: list[EntityId] = []
        for account in sorted(self._by_id.values(), key=lambda a: a.sort_key):
            if account.parent_id is not None and account.parent_id in self._by_id:
                self._children[account.parent_id].append(account.id)
            else:
                self._roots.append(account.id)

    def __contains__(self, account_id: object) -> bool:
        return account_id in self._by_id

    def __iter__(self) -> Iterator[Account]:
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def get(self, account_id: EntityId) -> Account | None:
        return self._by_id.get(account_id)

    def by_code(self) -> dict[str, Account]:
        return {a.code: a for a in self._by_id.values() if a.code}

    def children(self, account_id: EntityId) -> tuple[Account, ...]:
        return tuple(self._by_id[c] for c in self._children.get(account_id, ()))

    def descendants(self, account_id: EntityId) -> tuple[Account, ...]:
        """All accounts below ``account_id``, depth first."""
        found: list[Account] = []
        stack = list(reversed(self._children.get(account_id, ())))
        seen: set[EntityId] = {account_id}
        while stack:
            child_id = stack.pop()
            if child_id in seen:
                continue
            seen.add(child_id)
            found.append(self._by_id[child_id])
            stack.extend(reversed(self._children.get(child_id, ())))
        return tuple(found)

    def is_placeholder(self, account_id: EntityId) -> bool:
        """A parent account; should not receive postings directly."""
        return bool(self._children.get(account_id))

    def roots(self) -> tuple[Account, ...]:
        return tuple(self._by_id[r] for r in self._roots)

    def roots_by_category(self) -> dict[AccountCategory, tuple[Account, ...]]:
        grouped: dict[AccountCategory, list[Account]] = defaultdict(list)
        for account in self.roots():
            grouped[account.category].append(account)
        return {category: tuple(accounts) for category, accounts in grouped.items()}

    def category_mismatches(self) -> tuple[tuple[Account, Account], ...]:
        """(child, parent) pairs whose categories differ."""
        pairs: list[tuple[Account, Account]] = []
        for parent_id, child_ids in self._children.items():
            parent = self._by_id[parent_id]
            for child_id in child_ids:
                child = self._by_id[child_id]
                if child.category != parent.category:
                    pairs.append((child, parent))
        return tuple(pairs)
