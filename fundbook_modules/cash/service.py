"""
fundbook_modules.cash.service
=============================

Responsibility:
    ``ReconciliationSession`` -- one sitting of reconciling a bank account
    against an uploaded statement: auto-match suggestions, manual match
    and unmatch, the running cleared balance and difference, and the
    finish gate.

Architecture:
    Module layer. Matching itself is delegated to
    ``fundbook_engines.matching.ReconciliationMatcher``; the session only
    keeps the match set. No I/O: statement rows arrive already parsed.

Invariants enforced:
    - Sessions are immutable; every operation returns a new session.
    - A posting or statement row appears in at most one match.
    - ``difference = statement_ending_balance - cleared_balance`` where the
      cleared balance sums the book side of the matches.
    - ``finish`` succeeds only when ``|difference| < amount_epsilon``.

Failure modes:
    - AlreadyMatchedError -- manual match of an item already matched.
    - MatchNotFoundError -- unknown posting/row id, or unmatch of an
      unmatched posting.
    - ReconciliationNotBalancedError -- finish with a difference.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from decimal import Decimal
from uuid import uuid4

from fundbook_config.schema import ReconciliationSettings
from fundbook_engines.matching import MatchStrategy, ReconciliationMatcher
from fundbook_kernel.domain.accounts import EntityId
from fundbook_kernel.domain.postings import Posting
from fundbook_kernel.domain.reconciliation import BankStatementRow, MatchedPair
from fundbook_kernel.domain.values import ZERO, parse_amount
from fundbook_kernel.exceptions import (
    AlreadyMatchedError,
    MatchNotFoundError,
    ReconciliationNotBalancedError,
)
from fundbook_kernel.logging_config import LogContext, get_logger
from fundbook_modules.cash.models import ReconciliationStatus, ReconciliationSummary

logger = get_logger("modules.cash.service")


@dataclass(frozen=True)
class ReconciliationSession:
    """
    Immutable reconciliation state for one bank account.

    Contract:
        ``book_postings`` are the postings on ``account_id``; ``open``
        filters a wider ledger down to them.
    Guarantees:
        - Every log line from the session carries its ``session_id``.
        - ``auto_match`` only adds pairs; existing (manual or earlier
          automatic) pairs are kept.
    Non-goals:
        - Does not persist matches or mark postings as cleared.
    """

    account_id: EntityId
    statement_ending_balance: Decimal
    book_postings: tuple[Posting, ...] = ()
    statement_rows: tuple[BankStatementRow, ...] = ()
    matches: tuple[MatchedPair, ...] = ()
    settings: ReconciliationSettings = field(default_factory=ReconciliationSettings)
    session_id: str = ""

    @classmethod
    def open(
        cls,
        account_id: EntityId,
        postings: Iterable[Posting],
        statement_rows: Iterable[BankStatementRow] = (),
        statement_ending_balance: Decimal | str | int = ZERO,
        settings: ReconciliationSettings | None = None,
        session_id: str | None = None,
    ) -> ReconciliationSession:
        book = tuple(p for p in postings if p.account_id == account_id)
        session = cls(
            account_id=account_id,
            statement_ending_balance=parse_amount(
                statement_ending_balance, "statement_ending_balance", optional=True,
            ),
            book_postings=book,
            statement_rows=tuple(statement_rows),
            settings=settings or ReconciliationSettings(),
            session_id=session_id or str(uuid4()),
        )
        with session._log_context():
            logger.info(
                "reconciliation_opened",
                extra={
                    "account_id": str(account_id),
                    "book_count": len(book),
                    "statement_count": len(session.statement_rows),
                    "statement_ending_balance": str(session.statement_ending_balance),
                },
            )
        return session

    def _log_context(self):
        return LogContext.bind(session_id=self.session_id or None)

    @property
    def _matcher(self) -> ReconciliationMatcher:
        return ReconciliationMatcher(
            window_days=self.settings.window_days,
            amount_epsilon=self.settings.amount_epsilon,
            strategy=MatchStrategy(self.settings.strategy),
        )

    def with_statement(
        self,
        statement_rows: Iterable[BankStatementRow],
    ) -> ReconciliationSession:
        """Load a new statement; matches against the old one are dropped."""
        return replace(self, statement_rows=tuple(statement_rows), matches=())

    def with_ending_balance(self, balance: Decimal | str | int) -> ReconciliationSession:
        return replace(
            self,
            statement_ending_balance=parse_amount(balance, "statement_ending_balance", optional=True),
        )

    # Match set

    def auto_match(self) -> ReconciliationSession:
        with self._log_context():
            new = self._matcher.auto_match(self.book_postings, self.statement_rows, self.matches)
            logger.info(
                "reconciliation_auto_matched",
                extra={"account_id": str(self.account_id), "new_matches": len(new)},
            )
        return replace(self, matches=self.matches + tuple(new))

    def new_matches_since(self, earlier: ReconciliationSession) -> tuple[MatchedPair, ...]:
        known = {(m.posting_id, m.row_id) for m in earlier.matches}
        return tuple(m for m in self.matches if (m.posting_id, m.row_id) not in known)

    def match(self, posting_id: EntityId, row_id: str) -> ReconciliationSession:
        """Pair a posting with a statement row by hand (no tolerance check)."""
        posting = next((p for p in self.book_postings if p.id == posting_id), None)
        if posting is None:
            raise MatchNotFoundError("posting", str(posting_id))
        row = next((r for r in self.statement_rows if r.row_id == row_id), None)
        if row is None:
            raise MatchNotFoundError("statement_row", row_id)
        if any(m.posting_id == posting_id for m in self.matches):
            raise AlreadyMatchedError("posting", str(posting_id))
        if any(m.row_id == row_id for m in self.matches):
            raise AlreadyMatchedError("statement_row", row_id)
        with self._log_context():
            logger.info(
                "reconciliation_manual_match",
                extra={"posting_id": str(posting_id), "row_id": row_id},
            )
        return replace(self, matches=self.matches + (MatchedPair(posting=posting, row=row),))

    def unmatch(self, posting_id: EntityId) -> ReconciliationSession:
        remaining = tuple(m for m in self.matches if m.posting_id != posting_id)
        if len(remaining) == len(self.matches):
            raise MatchNotFoundError("match", str(posting_id))
        with self._log_context():
            logger.info("reconciliation_unmatched", extra={"posting_id": str(posting_id)})
        return replace(self, matches=remaining)

    # Position

    @property
    def unreconciled_postings(self) -> tuple[Posting, ...]:
        matched = {m.posting_id for m in self.matches}
        return tuple(p for p in self.book_postings if p.id not in matched)

    @property
    def unreconciled_rows(self) -> tuple[BankStatementRow, ...]:
        matched = {m.row_id for m in self.matches}
        return tuple(r for r in self.statement_rows if r.row_id not in matched)

    @property
    def cleared_balance(self) -> Decimal:
        return ReconciliationMatcher.cleared_balance(self.matches)

    @property
    def difference(self) -> Decimal:
        return self.statement_ending_balance - self.cleared_balance

    @property
    def is_balanced(self) -> bool:
        return self._matcher.is_reconciled(self.statement_ending_balance, self.matches)

    @property
    def status(self) -> ReconciliationStatus:
        return ReconciliationStatus.BALANCED if self.is_balanced else ReconciliationStatus.IN_PROGRESS

    def finish(self) -> ReconciliationSummary:
        """
        Close the session.

        Raises:
            ReconciliationNotBalancedError: the matches do not explain the
                statement ending balance.
        """
        with self._log_context():
            if not self.is_balanced:
                logger.warning(
                    "reconciliation_finish_rejected",
                    extra={
                        "account_id": str(self.account_id),
                        "statement_ending_balance": str(self.statement_ending_balance),
                        "cleared_balance": str(self.cleared_balance),
                    },
                )
                raise ReconciliationNotBalancedError(self.statement_ending_balance, self.cleared_balance)

            summary = ReconciliationSummary(
                account_id=self.account_id,
                statement_ending_balance=self.statement_ending_balance,
                cleared_balance=self.cleared_balance,
                matches=self.matches,
                unreconciled_book_count=len(self.unreconciled_postings),
                unreconciled_statement_count=len(self.unreconciled_rows),
            )
            logger.info(
                "reconciliation_completed",
                extra={
                    "account_id": str(self.account_id),
                    "matched_count": summary.matched_count,
                    "cleared_balance": str(summary.cleared_balance),
                },
            )
        return summary
