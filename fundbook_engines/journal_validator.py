"""
fundbook_engines.journal_validator -- Double-entry balance check.

Responsibility:
    Totals the debit and credit sides of a set of journal lines and decides
    whether they form a postable entry.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    ``fundbook_modules.gl.service.JournalService.post`` and the payroll batch
    call ``require_balanced`` before anything reaches a writer.

Invariants enforced:
    - Balanced iff ``|total_debit - total_credit| < epsilon`` AND
      ``total_debit > 0``. An all-zero entry is not balanced.
    - Lines are single-sided; ``JournalLine`` rejects double-sided lines at
      construction, so a malformed line can never be summed here.

Failure modes:
    - ``validate`` never raises; problems are listed in ``errors``.
    - ``require_balanced`` raises EmptyJournalEntryError or
      UnbalancedEntryError.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from decimal import Decimal

from fundbook_engines.tracer import traced_engine
from fundbook_kernel.domain.journal import JournalLine
from fundbook_kernel.domain.values import ZERO
from fundbook_kernel.exceptions import EmptyJournalEntryError, UnbalancedEntryError
from fundbook_kernel.logging_config import get_logger

logger = get_logger("engines.journal_validator")

DEFAULT_BALANCE_EPSILON = Decimal("0.005")


@dataclass(frozen=True)
class JournalValidation:
    """Outcome of a balance check."""

    is_balanced: bool
    total_debit: Decimal
    total_credit: Decimal
    line_count: int
    errors: tuple[str, ...] = ()

    @property
    def difference(self) -> Decimal:
        return self.total_debit - self.total_credit


class JournalValidator:
    """
    Balance gate for journal entries.

    Contract:
        Accepts any iterable of ``JournalLine``; reads it once.
    Guarantees:
        - Totals are exact Decimal sums (no rounding).
        - ``validate`` is total: it always returns a result.
    Non-goals:
        - Does not check that accounts exist or are postable; that is the
          journal service's job.
    """

    def __init__(self, epsilon: Decimal = DEFAULT_BALANCE_EPSILON):
        self.epsilon = epsilon

    @traced_engine("journal_validator", "1.0", fingerprint_fields=("lines", "epsilon"))
    def validate(
        self,
        lines: Iterable[JournalLine],
        epsilon: Decimal | None = None,
    ) -> JournalValidation:
        eps = self.epsilon if epsilon is None else epsilon
        total_debit = ZERO
        total_credit = ZERO
        count = 0
        for line in lines:
            total_debit += line.debit
            total_credit += line.credit
            count += 1

        errors: list[str] = []
        if total_debit <= ZERO:
            errors.append("Entry has no non-zero amounts")
        if abs(total_debit - total_credit) >= eps:
            errors.append(
                f"Entries must balance: debit total ${total_debit:,.2f}, "
                f"credit total ${total_credit:,.2f}"
            )

        return JournalValidation(
            is_balanced=not errors,
            total_debit=total_debit,
            total_credit=total_credit,
            line_count=count,
            errors=tuple(errors),
        )

    def require_balanced(
        self,
        lines: Iterable[JournalLine],
        epsilon: Decimal | None = None,
    ) -> JournalValidation:
        """
        Validate and raise unless the lines form a postable entry.

        Raises:
            EmptyJournalEntryError: no lines, or every line is zero.
            UnbalancedEntryError: debit and credit totals differ.
        """
        lines = tuple(lines)
        result = self.validate(lines, epsilon)
        if result.is_balanced:
            return result

        logger.warning(
            "journal_entry_rejected",
            extra={
                "total_debit": str(result.total_debit),
                "total_credit": str(result.total_credit),
                "line_count": result.line_count,
                "errors": list(result.errors),
            },
        )
        if result.total_debit <= ZERO and result.total_credit <= ZERO:
            raise EmptyJournalEntryError(result.line_count)
        raise UnbalancedEntryError(result.total_debit, result.total_credit)
