"""
Records -- The boundary between loosely typed records and domain objects.

Responsibility:
    Converts mappings as they arrive from a form, a parsed CSV file or a
    JSON payload into frozen domain records, and resolves the code/name
    references used by the import files (``parent_code``, ``account_code``,
    ``project_name``) into ids.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O. Parsing the CSV text
    itself is the caller's job; this module receives the row mappings.

Invariants enforced:
    - Every amount goes through ``parse_amount`` (no float coercion).
    - A dangling account reference never aborts an import: the row is
      skipped and reported in an ``IntegrityReport``.

Failure modes:
    - MissingFieldError when a required field is absent or blank.
    - InvalidAmountError / InvalidDateError from the value parsers.
    - InvalidFieldError for an unknown posting kind, account category or
      transfer direction; it aborts ``resolve_posting_references``.
    - UnknownParentAccountError when a chart import names a parent code
      that is not in the file.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from typing import Any

from fundbook_kernel.domain.accounts import Account, AccountCategory, EntityId
from fundbook_kernel.domain.integrity import (
    IntegrityReport,
    unknown_account,
    unknown_project,
)
from fundbook_kernel.domain.journal import JournalLine
from fundbook_kernel.domain.postings import Posting, PostingKind, TransferDirection
from fundbook_kernel.domain.reconciliation import BankStatementRow
from fundbook_kernel.domain.values import parse_amount, parse_date
from fundbook_kernel.exceptions import MissingFieldError, UnknownParentAccountError
from fundbook_kernel.logging_config import get_logger

logger = get_logger("kernel.records")

Record = Mapping[str, Any]


def _field(record: Record, *names: str) -> Any:
    """First non-blank value among ``names`` (header aliases)."""
    for name in names:
        value = record.get(name)
        if value is None:
            continue
        if isinstance(value, str) and not value.strip():
            continue
        return value
    return None


def _required(record: Record, record_kind: str, *names: str) -> Any:
    value = _field(record, *names)
    if value is None:
        raise MissingFieldError(names[0], record_kind)
    return value


def _optional_text(record: Record, *names: str) -> str | None:
    value = _field(record, *names)
    return str(value).strip() if value is not None else None


def account_from_record(record: Record) -> Account:
    """Build an Account from a chart-of-accounts row."""
    code = _optional_text(record, "code")
    return Account(
        id=_field(record, "id") or code or _required(record, "account", "name"),
        name=str(_required(record, "account", "name")).strip(),
        category=AccountCategory.parse(_required(record, "account", "category")),
        code=code,
        account_type=_optional_text(record, "type", "account_type") or "",
        parent_id=_field(record, "parent_id"),
        balance=parse_amount(_field(record, "balance"), "balance", optional=True),
    )


def posting_from_record(record: Record) -> Posting:
    """Build a Posting from a transaction row (``type`` or ``kind`` header)."""
    kind = PostingKind.parse(_required(record, "posting", "kind", "type"))
    direction = _field(record, "direction")
    return Posting(
        id=_required(record, "posting", "id"),
        date=parse_date(_required(record, "posting", "date")),
        account_id=_required(record, "posting", "account_id"),
        kind=kind,
        amount=parse_amount(_required(record, "posting", "amount")),
        description=_optional_text(record, "description") or "",
        project_id=_field(record, "project_id"),
        fund_id=_field(record, "fund_id"),
        notes=_optional_text(record, "notes"),
        direction=TransferDirection.parse(direction) if direction is not None else None,
    )


def journal_line_from_record(record: Record) -> JournalLine:
    """Build a JournalLine; blank debit/credit cells count as zero."""
    return JournalLine(
        account_id=_required(record, "journal_line", "account_id"),
        debit=parse_amount(_field(record, "debit"), "debit", optional=True),
        credit=parse_amount(_field(record, "credit"), "credit", optional=True),
        memo=_optional_text(record, "memo", "description"),
    )


def statement_rows_from_records(rows: Iterable[Record]) -> list[BankStatementRow]:
    """
    Build statement rows from parsed bank CSV rows.

    Headers may be capitalized or not (``Date``/``date``, ...). Row ids are
    ``bank-{index}`` in file order.
    """
    result: list[BankStatementRow] = []
    for index, row in enumerate(rows):
        result.append(
            BankStatementRow(
                row_id=f"bank-{index}",
                date=parse_date(_required(row, "statement_row", "Date", "date"), "Date"),
                amount=parse_amount(_required(row, "statement_row", "Amount", "amount"), "Amount"),
                description=_optional_text(row, "Description", "description") or "",
            )
        )
    return result


def link_account_parents(rows: Sequence[Record]) -> list[Account]:
    """
    Build accounts from an imported chart, resolving ``parent_code``.

    Every row's ``id`` defaults to its code so that parents and children in
    the same file can reference each other.

    Raises:
        UnknownParentAccountError: a ``parent_code`` matches no row's code.
    """
    accounts = [account_from_record(row) for row in rows]
    by_code: dict[str, Account] = {a.code: a for a in accounts if a.code}

    linked: list[Account] = []
    for row, account in zip(rows, accounts):
        parent_code = _optional_text(row, "parent_code")
        if parent_code is None:
            linked.append(account)
            continue
        parent = by_code.get(parent_code)
        if parent is None:
            raise UnknownParentAccountError(account.code or account.name, parent_code)
        linked.append(
            Account(
                id=account.id,
                name=account.name,
                category=account.category,
                code=account.code,
                account_type=account.account_type,
                parent_id=parent.id,
                balance=account.balance,
            )
        )
    return linked


def resolve_posting_references(
    rows: Iterable[Record],
    accounts: Iterable[Account],
    projects: Mapping[str, EntityId] | None = None,
) -> tuple[list[Posting], IntegrityReport]:
    """
    Turn transaction import rows into postings.

    ``account_code`` is resolved against the chart; an unknown code skips
    the row. ``project_name`` is resolved against ``projects`` (name to id);
    an unknown name keeps the row unscoped and is reported without counting
    the row as skipped. Rows without an ``id`` get ``import-{index}``.
    """
    code_map = {a.code: a.id for a in accounts if a.code}
    project_map = projects or {}

    postings: list[Posting] = []
    issues = []
    for index, row in enumerate(rows):
        row_id = _field(row, "id") or f"import-{index}"
        code = _optional_text(row, "account_code")
        account_id = code_map.get(code) if code is not None else None
        if account_id is None:
            issues.append(unknown_account("import_row", row_id, code or ""))
            continue

        project_id = None
        project_name = _optional_text(row, "project_name")
        if project_name is not None:
            project_id = project_map.get(project_name)
            if project_id is None:
                issues.append(unknown_project("import_row", row_id, project_name, skipped=False))

        postings.append(
            posting_from_record(
                {
                    **row,
                    "id": row_id,
                    "account_id": account_id,
                    "project_id": project_id,
                }
            )
        )

    report = IntegrityReport.of(issues)
    if not report.is_clean:
        logger.warning(
            "import_references_unresolved",
            extra={
                "skipped_count": report.skipped_count,
                "unknown_account_codes": sorted(report.unknown_account_ids),
                "unknown_project_names": sorted(report.unknown_project_ids),
            },
        )
    return postings, report
