"""
fundbook_engines.matching -- Book-to-bank reconciliation matcher.

Responsibility:
    Suggests pairs between book postings on a bank account and rows of an
    uploaded bank statement, and decides whether a set of matches explains
    the statement's ending balance.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    Consumed by ``fundbook_modules.cash.service.ReconciliationSession``.

Invariants enforced:
    - A statement row is paired with at most one posting, a posting with at
      most one row; items already matched are never offered again.
    - Only new pairs are returned, so feeding a result back in as
      ``already_matched`` yields no further pairs.
    - Amount tolerance is strict (``|d| < epsilon``); the date window is
      inclusive (``|days| <= window``).

Failure modes:
    - None raised. A poor match is a quality issue for the human reviewing
      the session, who can unmatch and re-match.

Audit relevance:
    The default strategy is a greedy single pass in the caller's list
    order, so the same inputs in the same order always pair the same way.
    ``GREEDY_SORTED`` trades that for order independence.
"""

from __future__ import annotations

import time
from collections.abc import Iterable, Sequence
from decimal import Decimal
from enum import Enum

from fundbook_engines.tracer import traced_engine
from fundbook_kernel.domain.postings import Posting
from fundbook_kernel.domain.reconciliation import BankStatementRow, MatchedPair
from fundbook_kernel.domain.values import ZERO
from fundbook_kernel.logging_config import get_logger

logger = get_logger("engines.matching")

DEFAULT_WINDOW_DAYS = 3
DEFAULT_AMOUNT_EPSILON = Decimal("0.01")


class MatchStrategy(str, Enum):
    """Order in which candidates are considered."""

    GREEDY_BY_LIST_ORDER = "greedy_by_list_order"
    GREEDY_SORTED = "greedy_sorted"  # both pools by (date, amount) first


class ReconciliationMatcher:
    """
    Greedy amount-and-date matcher.

    Contract:
        Book amounts are the posting's cash effect on the bank account
        (income positive, expense negative), compared with the signed
        statement amount.
    Guarantees:
        - For each unmatched posting in order, the FIRST available row within
          tolerance is taken.
        - Inputs are not mutated.
    Non-goals:
        - No description or reference similarity scoring.
        - No one-to-many or many-to-many grouping.
        - No global optimisation; a greedy pick can block a better later pair.
    """

    def __init__(
        self,
        window_days: int = DEFAULT_WINDOW_DAYS,
        amount_epsilon: Decimal = DEFAULT_AMOUNT_EPSILON,
        strategy: MatchStrategy = MatchStrategy.GREEDY_BY_LIST_ORDER,
    ):
        self.window_days = window_days
        self.amount_epsilon = amount_epsilon
        self.strategy = strategy

    def is_candidate(
        self,
        posting: Posting,
        row: BankStatementRow,
        window_days: int | None = None,
        amount_epsilon: Decimal | None = None,
    ) -> bool:
        window = self.window_days if window_days is None else window_days
        eps = self.amount_epsilon if amount_epsilon is None else amount_epsilon
        if abs(row.amount - posting.cash_effect) >= eps:
            return False
        return abs((row.date - posting.date).days) <= window

    @traced_engine(
        "reconciliation_matcher",
        "1.0",
        fingerprint_fields=(
            "book_postings",
            "statement_rows",
            "already_matched",
            "window_days",
            "amount_epsilon",
            "strategy",
        ),
    )
    def auto_match(
        self,
        book_postings: Sequence[Posting],
        statement_rows: Sequence[BankStatementRow],
        already_matched: Iterable[MatchedPair] = (),
        window_days: int | None = None,
        amount_epsilon: Decimal | None = None,
        strategy: MatchStrategy | None = None,
    ) -> list[MatchedPair]:
        t0 = time.monotonic()
        window = self.window_days if window_days is None else window_days
        eps = self.amount_epsilon if amount_epsilon is None else amount_epsilon
        order = self.strategy if strategy is None else strategy

        used_postings = set()
        used_rows = set()
        for pair in already_matched:
            used_postings.add(pair.posting_id)
            used_rows.add(pair.row_id)

        books = list(book_postings)
        rows = list(statement_rows)
        if order is MatchStrategy.GREEDY_SORTED:
            books.sort(key=lambda p: (p.date, p.cash_effect, str(p.id)))
            rows.sort(key=lambda r: (r.date, r.amount, r.row_id))

        matches: list[MatchedPair] = []
        for posting in books:
            if posting.id in used_postings:
                continue
            for row in rows:
                if row.row_id in used_rows:
                    continue
                if self.is_candidate(posting, row, window, eps):
                    matches.append(MatchedPair(posting=posting, row=row))
                    used_postings.add(posting.id)
                    used_rows.add(row.row_id)
                    break

        logger.info(
            "auto_match_completed",
            extra={
                "strategy": order.value,
                "window_days": window,
                "amount_epsilon": str(eps),
                "book_count": len(books),
                "statement_count": len(rows),
                "new_matches": len(matches),
                "duration_ms": round((time.monotonic() - t0) * 1000, 2),
            },
        )
        return matches

    @staticmethod
    def cleared_balance(matched: Iterable[MatchedPair]) -> Decimal:
        """Sum of the book side of ``matched``."""
        return sum((pair.book_amount for pair in matched), ZERO)

    def is_reconciled(
        self,
        statement_ending_balance: Decimal,
        matched: Iterable[MatchedPair],
        epsilon: Decimal | None = None,
    ) -> bool:
        """True when the matched book amounts explain the ending balance."""
        eps = self.amount_epsilon if epsilon is None else epsilon
        return abs(statement_ending_balance - self.cleared_balance(matched)) < eps
