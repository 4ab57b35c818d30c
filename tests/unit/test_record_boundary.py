"""Tests for the record boundary (fundbook_kernel/domain/records.py)."""

from datetime import date
from decimal import Decimal

import pytest

from fundbook_kernel.domain.accounts import Account, AccountCategory
from fundbook_kernel.domain.postings import PostingKind, TransferDirection
from fundbook_kernel.domain.records import (
    account_from_record,
    journal_line_from_record,
    link_account_parents,
    posting_from_record,
    resolve_posting_references,
    statement_rows_from_records,
)
from fundbook_kernel.exceptions import (
    FundbookError,
    InvalidAmountError,
    InvalidDateError,
    InvalidFieldError,
    MissingFieldError,
    RecordError,
    UnknownParentAccountError,
)


class TestAccountFromRecord:

    def test_id_defaults_to_code(self):
        account = account_from_record({"code": "1000", "name": "Cash", "category": "Assets"})
        assert account.id == "1000"
        assert account.category is AccountCategory.ASSET

    def test_missing_name(self):
        with pytest.raises(MissingFieldError) as exc_info:
            account_from_record({"code": "1000", "category": "Assets"})
        assert exc_info.value.field == "name"

    def test_opening_balance_optional(self):
        account = account_from_record({"code": "1000", "name": "Cash", "category": "Asset"})
        assert account.balance == Decimal("0")

    def test_unknown_category_rejected(self):
        with pytest.raises(InvalidFieldError) as exc_info:
            account_from_record({"code": "1000", "name": "Cash", "category": "Goodwill"})
        assert exc_info.value.field == "category"


class TestPostingFromRecord:

    def test_type_header_alias(self):
        posting = posting_from_record(
            {
                "id": "t1",
                "date": "2024-03-01",
                "account_id": "1000",
                "type": "Expense",
                "amount": "150.00",
                "description": "Office supplies",
            }
        )
        assert posting.kind is PostingKind.EXPENSE
        assert posting.amount == Decimal("150.00")
        assert posting.date == date(2024, 3, 1)

    def test_transfer_direction(self):
        posting = posting_from_record(
            {
                "id": "t2",
                "date": "2024-03-01",
                "account_id": "1100",
                "kind": "Transfer",
                "amount": "20",
                "direction": "inbound",
            }
        )
        assert posting.direction is TransferDirection.INBOUND

    def test_float_amount_rejected(self):
        with pytest.raises(InvalidAmountError):
            posting_from_record(
                {"id": "t3", "date": "2024-03-01", "account_id": "1000", "kind": "Income", "amount": 10.5}
            )

    def test_bad_date_rejected(self):
        with pytest.raises(InvalidDateError):
            posting_from_record(
                {"id": "t4", "date": "yesterday", "account_id": "1000", "kind": "Income", "amount": "1"}
            )

    def test_unknown_kind_rejected(self):
        with pytest.raises(InvalidFieldError) as exc_info:
            posting_from_record(
                {"id": "t5", "date": "2024-03-01", "account_id": "1000", "kind": "Donation", "amount": "1"}
            )
        assert exc_info.value.code == "INVALID_FIELD"
        assert exc_info.value.field == "kind"

    def test_unknown_direction_rejected(self):
        with pytest.raises(InvalidFieldError) as exc_info:
            posting_from_record(
                {
                    "id": "t6",
                    "date": "2024-03-01",
                    "account_id": "1100",
                    "kind": "Transfer",
                    "amount": "20",
                    "direction": "sideways",
                }
            )
        assert exc_info.value.field == "direction"

    def test_blank_direction_on_transfer_is_missing(self):
        with pytest.raises(MissingFieldError):
            posting_from_record(
                {
                    "id": "t7",
                    "date": "2024-03-01",
                    "account_id": "1100",
                    "kind": "Transfer",
                    "amount": "20",
                    "direction": "  ",
                }
            )


class TestJournalLineFromRecord:

    def test_blank_cells_are_zero(self):
        line = journal_line_from_record({"account_id": "5000", "debit": "40", "credit": ""})
        assert line.debit == Decimal("40")
        assert line.credit == Decimal("0")

    def test_missing_account(self):
        with pytest.raises(MissingFieldError):
            journal_line_from_record({"debit": "1"})


class TestStatementRows:

    def test_capitalized_headers_and_ids(self):
        rows = statement_rows_from_records(
            [
                {"Date": "2024-03-02", "Amount": "-150.00", "Description": "CHQ 101"},
                {"date": "2024-03-04", "amount": "75", "description": "Deposit"},
            ]
        )
        assert [r.row_id for r in rows] == ["bank-0", "bank-1"]
        assert rows[0].amount == Decimal("-150.00")
        assert rows[1].description == "Deposit"


class TestLinkAccountParents:

    def test_parent_code_resolved(self):
        accounts = link_account_parents(
            [
                {"code": "5000", "name": "Program", "category": "Expense"},
                {"code": "5100", "name": "Salaries", "category": "Expense", "parent_code": "5000"},
            ]
        )
        assert accounts[1].parent_id == "5000"
        assert accounts[0].parent_id is None

    def test_unknown_parent_code(self):
        with pytest.raises(UnknownParentAccountError) as exc_info:
            link_account_parents(
                [{"code": "5100", "name": "Salaries", "category": "Expense", "parent_code": "9000"}]
            )
        assert exc_info.value.parent_code == "9000"


class TestResolvePostingReferences:

    def setup_method(self):
        self.accounts = [
            Account(id="acc-cash", code="1000", name="Cash", category=AccountCategory.ASSET),
            Account(id="acc-rent", code="5200", name="Rent", category=AccountCategory.EXPENSE),
        ]
        self.projects = {"Clean Water": "proj-1"}

    def _row(self, **overrides):
        row = {"date": "2024-03-01", "type": "Expense", "amount": "100", "account_code": "5200"}
        row.update(overrides)
        return row

    def test_resolves_codes_and_project_names(self):
        postings, report = resolve_posting_references(
            [self._row(project_name="Clean Water")], self.accounts, self.projects,
        )
        assert report.is_clean
        assert postings[0].account_id == "acc-rent"
        assert postings[0].project_id == "proj-1"
        assert postings[0].id == "import-0"

    def test_unknown_account_code_skips_row(self):
        postings, report = resolve_posting_references(
            [self._row(), self._row(account_code="9999")], self.accounts, self.projects,
        )
        assert len(postings) == 1
        assert report.skipped_count == 1
        assert report.unknown_account_ids == frozenset({"9999"})

    def test_unknown_project_keeps_row_unscoped(self):
        postings, report = resolve_posting_references(
            [self._row(project_name="Nonexistent")], self.accounts, self.projects,
        )
        assert len(postings) == 1
        assert postings[0].project_id is None
        assert report.skipped_count == 0
        assert report.unknown_project_ids == frozenset({"Nonexistent"})

    def test_unresolved_references_logged(self, log_stream):
        resolve_posting_references([self._row(account_code="9999")], self.accounts)
        records = [r for r in log_stream.records() if r["message"] == "import_references_unresolved"]
        assert len(records) == 1
        assert records[0]["unknown_account_codes"] == ["9999"]

    def test_unknown_kind_is_a_structured_rejection(self):
        with pytest.raises(RecordError) as exc_info:
            resolve_posting_references([self._row(type="Donation")], self.accounts, self.projects)
        assert isinstance(exc_info.value, FundbookError)
        assert exc_info.value.code == "INVALID_FIELD"
        assert exc_info.value.value == "'Donation'"
