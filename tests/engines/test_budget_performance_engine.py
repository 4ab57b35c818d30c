"""Tests for BudgetPerformanceCalculator (fundbook_engines/budget_performance.py)."""

from datetime import date
from decimal import Decimal

from fundbook_engines.budget_performance import BudgetPerformanceCalculator, LinePerformance
from fundbook_kernel.domain.budgets import Budget, BudgetLine
from fundbook_kernel.domain.postings import PostingKind
from tests.factories import make_posting


class TestLinePerformance:
    """Spend is the sum of Expense postings on the line's account."""

    def setup_method(self):
        self.calc = BudgetPerformanceCalculator()
        self.line = BudgetLine(account_id="5200", amount=Decimal("1000"))

    def test_sums_expenses_on_account(self):
        postings = [
            make_posting("p1", "5200", PostingKind.EXPENSE, "300"),
            make_posting("p2", "5200", PostingKind.EXPENSE, "200"),
            make_posting("p3", "5100", PostingKind.EXPENSE, "999"),
            make_posting("p4", "5200", PostingKind.INCOME, "50"),
        ]
        perf = self.calc.compute_line_performance(self.line, postings)
        assert perf.spent == Decimal("500")
        assert perf.remaining == Decimal("500")
        assert perf.percent_used == Decimal("50")

    def test_all_dates_by_default(self):
        postings = [
            make_posting("p1", "5200", PostingKind.EXPENSE, "100", on=date(2019, 1, 1)),
            make_posting("p2", "5200", PostingKind.EXPENSE, "100", on=date(2031, 1, 1)),
        ]
        assert self.calc.compute_line_performance(self.line, postings).spent == Decimal("200")

    def test_date_bounds_inclusive(self):
        postings = [
            make_posting("p1", "5200", PostingKind.EXPENSE, "100", on=date(2024, 1, 1)),
            make_posting("p2", "5200", PostingKind.EXPENSE, "100", on=date(2024, 12, 31)),
            make_posting("p3", "5200", PostingKind.EXPENSE, "100", on=date(2025, 1, 1)),
        ]
        perf = self.calc.compute_line_performance(
            self.line, postings, start=date(2024, 1, 1), end=date(2024, 12, 31),
        )
        assert perf.spent == Decimal("200")

    def test_project_scope(self):
        postings = [
            make_posting("p1", "5200", PostingKind.EXPENSE, "100", project_id="proj-1"),
            make_posting("p2", "5200", PostingKind.EXPENSE, "40", project_id="proj-2"),
            make_posting("p3", "5200", PostingKind.EXPENSE, "7"),
        ]
        scoped = self.calc.compute_line_performance(self.line, postings, project_scope="proj-1")
        unscoped = self.calc.compute_line_performance(self.line, postings)
        assert scoped.spent == Decimal("100")
        assert unscoped.spent == Decimal("147")

    def test_overspend_gives_negative_remaining(self):
        postings = [make_posting("p1", "5200", PostingKind.EXPENSE, "1250")]
        perf = self.calc.compute_line_performance(self.line, postings)
        assert perf.remaining == Decimal("-250")
        assert perf.percent_used == Decimal("125")
        assert perf.bar_percent == Decimal("100")
        assert perf.is_over_budget()

    def test_zero_budget_percent_is_zero(self):
        perf = LinePerformance(account_id="5200", budgeted=Decimal("0"), spent=Decimal("80"))
        assert perf.percent_used == Decimal("0")
        assert perf.remaining == Decimal("-80")
        assert not perf.is_over_budget()

    def test_exactly_on_budget_is_not_over(self):
        perf = LinePerformance(account_id="5200", budgeted=Decimal("100"), spent=Decimal("100"))
        assert not perf.is_over_budget()
        assert perf.is_over_budget(Decimal("90"))


class TestBudgetPerformance:

    def setup_method(self):
        self.calc = BudgetPerformanceCalculator()
        self.postings = [
            make_posting("p1", "5100", PostingKind.EXPENSE, "3000", project_id="proj-1"),
            make_posting("p2", "5200", PostingKind.EXPENSE, "1500", project_id="proj-1"),
            make_posting("p3", "5200", PostingKind.EXPENSE, "500"),
        ]

    def test_totals(self):
        budget = Budget(
            id="b-1",
            name="Operating",
            lines=(
                BudgetLine(account_id="5100", amount=Decimal("4000")),
                BudgetLine(account_id="5200", amount=Decimal("1000")),
            ),
        )
        perf = self.calc.compute_budget_performance(budget, self.postings)
        assert perf.budgeted == Decimal("5000")
        assert perf.spent == Decimal("5000")
        assert perf.remaining == Decimal("0")
        assert [line.account_id for line in perf.over_budget_lines()] == ["5200"]
        assert not perf.is_over_budget()

    def test_project_budget_scopes_postings(self):
        budget = Budget(
            id="b-2",
            name="Clean Water",
            project_id="proj-1",
            lines=(BudgetLine(account_id="5200", amount=Decimal("2000")),),
        )
        perf = self.calc.compute_budget_performance(budget, self.postings)
        assert perf.spent == Decimal("1500")
        assert perf.percent_used == Decimal("75")

    def test_unknown_account_flagged_not_skipped(self, chart):
        budget = Budget(
            id="b-3",
            name="Odd",
            lines=(BudgetLine(account_id="7777", amount=Decimal("10")),),
        )
        perf = self.calc.compute_budget_performance(budget, self.postings, accounts=chart)
        assert len(perf.lines) == 1
        assert perf.integrity.unknown_account_ids == frozenset({"7777"})
        assert perf.integrity.skipped_count == 0

    def test_empty_budget(self):
        perf = self.calc.compute_budget_performance(Budget(id="b-4", name="Empty"), self.postings)
        assert perf.lines == ()
        assert perf.percent_used == Decimal("0")

    def test_logs_completion(self, log_stream):
        budget = Budget(id="b-5", name="Logged", lines=(BudgetLine(account_id="5200", amount=Decimal("10")),))
        self.calc.compute_budget_performance(budget, self.postings)
        record = next(r for r in log_stream.records() if r["message"] == "budget_performance_computed")
        assert record["budget_id"] == "b-5"
        assert record["spent"] == "2000"
