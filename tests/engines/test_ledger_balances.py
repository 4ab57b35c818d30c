"""
Tests for LedgerCalculator (fundbook_engines/ledger.py).

Balances are debit-positive: an asset receiving income goes up, a
revenue account receiving income goes negative.
"""

from datetime import date, timedelta
from decimal import Decimal

from fundbook_engines.ledger import LedgerCalculator
from fundbook_kernel.domain.accounts import AccountCategory, AccountTree
from fundbook_kernel.domain.postings import PostingKind, split_transfer
from fundbook_kernel.domain.projects import Fund, Project
from tests.factories import D0, make_posting


class TestComputeBalances:

    def setup_method(self):
        self.calc = LedgerCalculator()

    def test_every_account_present(self, chart):
        result = self.calc.compute_balances(chart, [], D0)
        assert set(result.balances) == {a.id for a in chart}
        assert all(v == Decimal("0") for v in result.balances.values())

    def test_debit_positive_signs(self, chart):
        postings = [
            make_posting("p1", "1000", PostingKind.INCOME, "500"),
            make_posting("p2", "4000", PostingKind.INCOME, "500"),
            make_posting("p3", "1000", PostingKind.EXPENSE, "120"),
            make_posting("p4", "5200", PostingKind.EXPENSE, "120"),
            make_posting("p5", "2000", PostingKind.LIABILITY, "80"),
        ]
        result = self.calc.compute_balances(chart, postings, D0)
        assert result.balance_of("1000") == Decimal("380")
        assert result.balance_of("4000") == Decimal("-500")
        assert result.balance_of("5200") == Decimal("120")
        assert result.balance_of("2000") == Decimal("-80")

    def test_transfer_legs_move_cash_between_accounts(self, chart):
        out_leg, in_leg = split_transfer("t1", D0, "1000", "1100", Decimal("250"))
        result = self.calc.compute_balances(chart, [out_leg, in_leg], D0)
        assert result.balance_of("1000") == Decimal("-250")
        assert result.balance_of("1100") == Decimal("250")

    def test_as_of_inclusive(self, chart):
        postings = [
            make_posting("p1", "1000", PostingKind.INCOME, "10", on=D0),
            make_posting("p2", "1000", PostingKind.INCOME, "20", on=D0 + timedelta(days=1)),
        ]
        assert self.calc.compute_balances(chart, postings, D0).balance_of("1000") == Decimal("10")
        assert self.calc.compute_balances(
            chart, postings, D0 + timedelta(days=1)
        ).balance_of("1000") == Decimal("30")

    def test_unknown_account_skipped_and_reported(self, chart, log_stream):
        postings = [
            make_posting("p1", "1000", PostingKind.INCOME, "10"),
            make_posting("p2", "9999", PostingKind.INCOME, "10"),
        ]
        result = self.calc.compute_balances(chart, postings, D0)
        assert result.balance_of("1000") == Decimal("10")
        assert "9999" not in result.balances
        assert result.skipped_count == 1
        assert result.integrity.unknown_account_ids == frozenset({"9999"})
        assert "postings_reference_unknown_accounts" in log_stream.messages()

    def test_idempotent(self, chart):
        postings = [
            make_posting("p1", "1000", PostingKind.INCOME, "10"),
            make_posting("p2", "5200", PostingKind.EXPENSE, "3.50"),
        ]
        first = self.calc.compute_balances(chart, postings, D0)
        second = self.calc.compute_balances(chart, postings, D0)
        assert dict(first.balances) == dict(second.balances)

    def test_inputs_not_mutated(self, chart):
        postings = [make_posting("p1", "1000", PostingKind.INCOME, "10")]
        before = list(postings)
        self.calc.compute_balances(chart, postings, D0)
        assert postings == before
        assert all(a.balance == Decimal("0") for a in chart)


class TestRollupAndTotals:

    def setup_method(self):
        self.calc = LedgerCalculator()

    def test_parent_includes_children(self, chart):
        balances = {"5000": Decimal("5"), "5100": Decimal("100")}
        rolled = self.calc.rollup_balances(AccountTree(chart), balances)
        assert rolled["5000"] == Decimal("105")
        assert rolled["5100"] == Decimal("100")

    def test_category_totals_natural_sign(self, chart):
        balances = {"1000": Decimal("380"), "4000": Decimal("-500"), "5200": Decimal("120")}
        totals = self.calc.category_totals(chart, balances)
        assert totals[AccountCategory.ASSET] == Decimal("380")
        assert totals[AccountCategory.REVENUE] == Decimal("500")
        assert totals[AccountCategory.EXPENSE] == Decimal("120")
        assert totals[AccountCategory.LIABILITY] == Decimal("0")


class TestStatementOfActivities:

    def test_range_and_natural_sign(self, chart):
        postings = [
            make_posting("p1", "4000", PostingKind.INCOME, "1000", on=date(2024, 3, 5)),
            make_posting("p2", "5200", PostingKind.EXPENSE, "400", on=date(2024, 3, 10)),
            make_posting("p3", "5200", PostingKind.EXPENSE, "99", on=date(2024, 4, 1)),
            make_posting("p4", "1000", PostingKind.INCOME, "1000", on=date(2024, 3, 5)),
        ]
        stmt = LedgerCalculator().statement_of_activities(
            chart, postings, date(2024, 3, 1), date(2024, 3, 31),
        )
        assert stmt.total_revenue == Decimal("1000")
        assert stmt.total_expenses == Decimal("400")
        assert stmt.change_in_net_assets == Decimal("600")
        assert "1000" not in stmt.revenue_by_account


class TestFundBalances:

    def test_opening_plus_flows(self):
        funds = [Fund(id="f1", name="Scholarship", opening_balance=Decimal("1000"))]
        postings = [
            make_posting("p1", "1000", PostingKind.INCOME, "300", fund_id="f1"),
            make_posting("p2", "1000", PostingKind.EXPENSE, "120", fund_id="f1"),
            make_posting("p3", "1000", PostingKind.EXPENSE, "50"),
            make_posting("p4", "1000", PostingKind.EXPENSE, "50", fund_id="ghost"),
        ]
        balances, report = LedgerCalculator().fund_balances(funds, postings)
        assert balances["f1"].inflows == Decimal("300")
        assert balances["f1"].outflows == Decimal("120")
        assert balances["f1"].closing == Decimal("1180")
        assert report.skipped_count == 1


class TestProjectSummary:

    def test_income_and_expense_per_project(self):
        projects = [Project(id="proj-1", name="Clean Water"), Project(id="proj-2", name="Literacy")]
        postings = [
            make_posting("p1", "4100", PostingKind.INCOME, "5000", project_id="proj-1"),
            make_posting("p2", "5100", PostingKind.EXPENSE, "1200", project_id="proj-1"),
            make_posting("p3", "5100", PostingKind.EXPENSE, "1", project_id="proj-x"),
        ]
        summary, report = LedgerCalculator().project_summary(projects, postings)
        assert summary["proj-1"].net == Decimal("3800")
        assert summary["proj-2"].revenue == Decimal("0")
        assert report.unknown_project_ids == frozenset({"proj-x"})
