"""Projects and funds -- the two optional tags a posting can carry."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from fundbook_kernel.domain.accounts import EntityId
from fundbook_kernel.domain.values import ZERO


@dataclass(frozen=True)
class Project:
    id: EntityId
    name: str
    budget: Decimal = ZERO


@dataclass(frozen=True)
class Fund:
    """A restricted or unrestricted fund with its opening balance."""

    id: EntityId
    name: str
    opening_balance: Decimal = ZERO
    description: str = ""
