"""
General Ledger Service (``fundbook_modules.gl.service``).

Responsibility
--------------
Builds manual journal entries from form rows and is the hard gate in
front of the caller's entry writer: an entry that does not balance never
reaches persistence.

Architecture position
---------------------
**Modules layer** -- thin glue over ``fundbook_engines.journal_validator``.
Persistence is the caller's, reached only through the ``writer`` callable
handed to ``post``.

Invariants enforced
-------------------
* Rows without an account, and rows with neither debit nor credit, are
  dropped when building an entry.
* With a chart supplied, lines may only target known, non-placeholder
  accounts.
* ``post`` calls the writer only after ``require_balanced`` passes.

Failure modes
-------------
* Row with debit and credit both set  -> ``MalformedJournalLineError``.
* Unknown account  -> ``AccountNotFoundError``.
* Parent account  -> ``PlaceholderAccountError``.
* Unbalanced or empty entry  -> ``UnbalancedEntryError`` /
  ``EmptyJournalEntryError`` (writer not called).
"""

from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from datetime import date
from typing import Any

from fundbook_config.schema import JournalSettings
from fundbook_engines.journal_validator import JournalValidation, JournalValidator
from fundbook_kernel.domain.accounts import Account, AccountTree, EntityId
from fundbook_kernel.domain.journal import JournalEntry, JournalLine
from fundbook_kernel.domain.records import journal_line_from_record
from fundbook_kernel.exceptions import AccountNotFoundError, PlaceholderAccountError
from fundbook_kernel.logging_config import LogContext, get_logger

logger = get_logger("modules.gl.service")


class JournalService:
    """
    Manual journal entries.

    Contract:
        ``accounts`` is optional; without it account checks are skipped
        and only the balance gate applies.
    """

    def __init__(
        self,
        settings: JournalSettings | None = None,
        accounts: AccountTree | Iterable[Account] | None = None,
    ):
        self.settings = settings or JournalSettings()
        self._validator = JournalValidator(epsilon=self.settings.balance_epsilon)
        if accounts is None or isinstance(accounts, AccountTree):
            self._tree = accounts
        else:
            self._tree = AccountTree(accounts)

    def validate(self, lines: Iterable[JournalLine]) -> JournalValidation:
        return self._validator.validate(lines)

    def _check_account(self, account_id: EntityId) -> None:
        if self._tree is None:
            return
        if account_id not in self._tree:
            raise AccountNotFoundError(str(account_id))
        if self._tree.is_placeholder(account_id):
            raise PlaceholderAccountError(str(account_id))

    def build_entry(
        self,
        entry_id: EntityId,
        on: date,
        rows: Iterable[JournalLine | Mapping[str, Any]],
        reference: str = "",
        memo: str = "",
        project_id: EntityId | None = None,
    ) -> JournalEntry:
        lines: list[JournalLine] = []
        for row in rows:
            if not isinstance(row, JournalLine):
                if row.get("account_id") in (None, ""):
                    continue
                row = journal_line_from_record(row)
            if row.is_zero:
                continue
            self._check_account(row.account_id)
            lines.append(row)

        return JournalEntry(
            id=entry_id,
            date=on,
            reference=reference,
            memo=memo,
            project_id=project_id,
            lines=tuple(lines),
        )

    def post(
        self,
        entry: JournalEntry,
        writer: Callable[[JournalEntry], object],
    ) -> JournalValidation:
        """
        Validate ``entry`` and hand it to ``writer``.

        The writer is never called for an entry that fails validation;
        writer exceptions propagate.
        """
        with LogContext.bind(entry_id=entry.id):
            for line in entry.lines:
                self._check_account(line.account_id)
            validation = self._validator.require_balanced(entry.lines)
            writer(entry)
            logger.info(
                "journal_entry_posted",
                extra={
                    "date": entry.date.isoformat(),
                    "line_count": validation.line_count,
                    "total_debit": str(validation.total_debit),
                },
            )
        return validation
