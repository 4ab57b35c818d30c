"""Tests for manual journal entries (fundbook_modules/gl/service.py)."""

from datetime import date
from decimal import Decimal

import pytest

from fundbook_config.schema import JournalSettings
from fundbook_kernel.domain.journal import JournalLine
from fundbook_kernel.exceptions import (
    AccountNotFoundError,
    EmptyJournalEntryError,
    MalformedJournalLineError,
    PlaceholderAccountError,
    UnbalancedEntryError,
)
from fundbook_modules.gl import JournalService

ON = date(2024, 5, 15)


class TestBuildEntry:

    def setup_method(self):
        self.rows = [
            {"account_id": "5200", "debit": "750.00", "credit": "", "memo": "May rent"},
            {"account_id": "1000", "debit": "", "credit": "750.00"},
            {"account_id": "", "debit": "", "credit": ""},
            {"account_id": "5100", "debit": "0", "credit": "0"},
        ]

    def test_blank_and_zero_rows_dropped(self, chart):
        entry = JournalService(accounts=chart).build_entry("je-1", ON, self.rows, reference="JE-0001")
        assert [line.account_id for line in entry.lines] == ["5200", "1000"]
        assert entry.lines[0].memo == "May rent"
        assert entry.reference == "JE-0001"

    def test_unknown_account(self, chart):
        with pytest.raises(AccountNotFoundError):
            JournalService(accounts=chart).build_entry(
                "je-1", ON, [{"account_id": "9999", "debit": "1"}],
            )

    def test_placeholder_account(self, chart):
        with pytest.raises(PlaceholderAccountError):
            JournalService(accounts=chart).build_entry(
                "je-1", ON, [JournalLine.debit_of("5000", Decimal("1"))],
            )

    def test_no_chart_skips_account_checks(self):
        entry = JournalService().build_entry("je-1", ON, [{"account_id": "anything", "debit": "5"}])
        assert entry.lines[0].account_id == "anything"

    def test_malformed_row(self, chart):
        with pytest.raises(MalformedJournalLineError):
            JournalService(accounts=chart).build_entry(
                "je-1", ON, [{"account_id": "5200", "debit": "5", "credit": "5"}],
            )


class TestPost:

    def setup_method(self):
        self.written = []

    def test_balanced_entry_written(self, chart, log_stream):
        service = JournalService(accounts=chart)
        entry = service.build_entry(
            "je-1", ON,
            [JournalLine.debit_of("5200", Decimal("750")), JournalLine.credit_of("1000", Decimal("750"))],
        )
        validation = service.post(entry, self.written.append)
        assert validation.is_balanced
        assert self.written == [entry]
        record = next(r for r in log_stream.records() if r["message"] == "journal_entry_posted")
        assert record["entry_id"] == "je-1"
        assert record["total_debit"] == "750"
        trace = next(r for r in log_stream.records() if r["message"] == "FUNDBOOK_ENGINE_TRACE")
        assert trace["entry_id"] == "je-1"

    def test_unbalanced_never_written(self, chart):
        service = JournalService(accounts=chart)
        entry = service.build_entry(
            "je-1", ON,
            [JournalLine.debit_of("5200", Decimal("750")), JournalLine.credit_of("1000", Decimal("700"))],
        )
        with pytest.raises(UnbalancedEntryError):
            service.post(entry, self.written.append)
        assert self.written == []

    def test_empty_never_written(self, chart):
        service = JournalService(accounts=chart)
        entry = service.build_entry("je-1", ON, [])
        with pytest.raises(EmptyJournalEntryError):
            service.post(entry, self.written.append)
        assert self.written == []

    def test_epsilon_from_settings(self):
        service = JournalService(JournalSettings(balance_epsilon=Decimal("0.05")))
        lines = [JournalLine.debit_of("5200", Decimal("10.02")), JournalLine.credit_of("1000", Decimal("10"))]
        assert service.validate(lines).is_balanced
        assert not JournalService().validate(lines).is_balanced
