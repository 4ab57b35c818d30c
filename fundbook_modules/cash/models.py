"""
fundbook_modules.cash.models
============================

Responsibility:
    Frozen value objects produced by a bank reconciliation session.

Invariants enforced:
    - All monetary fields use ``Decimal`` -- never ``float``.
    - All DTOs are frozen (immutable after construction).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum

from fundbook_kernel.domain.accounts import EntityId
from fundbook_kernel.domain.reconciliation import MatchedPair


class ReconciliationStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    BALANCED = "balanced"
    COMPLETED = "completed"


@dataclass(frozen=True)
class ReconciliationSummary:
    """What a finished reconciliation hands back for the caller to store."""

    account_id: EntityId
    statement_ending_balance: Decimal
    cleared_balance: Decimal
    matches: tuple[MatchedPair, ...]
    unreconciled_book_count: int
    unreconciled_statement_count: int
    status: ReconciliationStatus = ReconciliationStatus.COMPLETED

    @property
    def difference(self) -> Decimal:
        return self.statement_ending_balance - self.cleared_balance

    @property
    def matched_count(self) -> int:
        return len(self.matches)
