"""Tests for JournalLine / JournalEntry value objects."""

from datetime import date
from decimal import Decimal

import pytest

from fundbook_kernel.domain.journal import JournalEntry, JournalLine, LineSide
from fundbook_kernel.exceptions import MalformedJournalLineError


class TestJournalLine:

    def test_debit_line(self):
        line = JournalLine.debit_of("5000", Decimal("100"))
        assert line.side is LineSide.DEBIT
        assert line.amount == Decimal("100")
        assert line.credit == Decimal("0")

    def test_credit_line(self):
        line = JournalLine.credit_of("1000", Decimal("100"))
        assert line.side is LineSide.CREDIT

    def test_both_sides_rejected(self):
        with pytest.raises(MalformedJournalLineError) as exc_info:
            JournalLine(account_id="1000", debit=Decimal("10"), credit=Decimal("10"))
        assert exc_info.value.code == "MALFORMED_JOURNAL_LINE"
        assert exc_info.value.reason == "debit and credit both set"

    def test_negative_rejected(self):
        with pytest.raises(MalformedJournalLineError):
            JournalLine(account_id="1000", debit=Decimal("-5"))

    def test_string_amounts_parsed(self):
        line = JournalLine(account_id="1000", debit="25.50", credit="")
        assert line.debit == Decimal("25.50")
        assert line.credit == Decimal("0")

    def test_zero_line(self):
        line = JournalLine(account_id="1000")
        assert line.is_zero
        assert line.side is None

    def test_side_signs(self):
        assert LineSide.DEBIT.sign == 1
        assert LineSide.CREDIT.sign == -1


class TestJournalEntry:

    def test_totals(self):
        entry = JournalEntry(
            id="je-1",
            date=date(2024, 1, 31),
            lines=(
                JournalLine.debit_of("5000", Decimal("60")),
                JournalLine.debit_of("5200", Decimal("40")),
                JournalLine.credit_of("1000", Decimal("100")),
            ),
        )
        assert entry.total_debit == Decimal("100")
        assert entry.total_credit == Decimal("100")
        assert entry.account_ids == frozenset({"5000", "5200", "1000"})
