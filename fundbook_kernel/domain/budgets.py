"""
Budgets -- A named plan of amounts per expense account.

A Budget owns its lines outright: saving a budget replaces every line at
once (``replace_lines``), there is no per-line update.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any

from fundbook_kernel.domain.accounts import EntityId
from fundbook_kernel.domain.values import ZERO, parse_amount
from fundbook_kernel.exceptions import InvalidAmountError


@dataclass(frozen=True)
class BudgetLine:
    """Planned spend for one account. ``amount`` is never negative."""

    account_id: EntityId
    amount: Decimal
    budget_id: EntityId | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "amount", parse_amount(self.amount))
        if self.amount < ZERO:
            raise InvalidAmountError("amount", self.amount)


@dataclass(frozen=True)
class Budget:
    id: EntityId
    name: str
    fiscal_year: int | None = None
    project_id: EntityId | None = None
    lines: tuple[BudgetLine, ...] = field(default_factory=tuple)

    @property
    def total_budgeted(self) -> Decimal:
        return sum((line.amount for line in self.lines), ZERO)

    def replace_lines(self, items: Iterable[BudgetLine | Mapping[str, Any]]) -> Budget:
        """
        New budget whose lines are exactly ``items``.

        Form rows (mappings with ``account_id`` and ``amount``) missing an
        account or amount, or carrying a negative amount, are dropped the
        way the budget form drops them.
        """
        lines: list[BudgetLine] = []
        for item in items:
            if isinstance(item, BudgetLine):
                lines.append(replace(item, budget_id=self.id))
                continue
            account_id = item.get("account_id")
            raw_amount = item.get("amount")
            if not account_id or raw_amount is None or str(raw_amount).strip() == "":
                continue
            amount = parse_amount(raw_amount)
            if amount < ZERO:
                continue
            lines.append(BudgetLine(account_id=account_id, amount=amount, budget_id=self.id))
        return replace(self, lines=tuple(lines))

    def clone(self, new_id: EntityId) -> Budget:
        """Copy with fresh id and a ``(Copy)`` suffix."""
        copy = replace(self, id=new_id, name=f"{self.name} (Copy)")
        return copy.replace_lines(self.lines)
