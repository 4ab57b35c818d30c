"""
Payroll Module Service (``fundbook_modules.payroll.service``).

Responsibility
--------------
Orchestrates a payroll batch: checks the account map and each employee's
project funding, computes every employee's figures through ``helpers``,
assembles ONE balanced journal entry for the whole batch, and derives
the project cost allocation postings that ride alongside it.

Architecture position
---------------------
**Modules layer** -- thin glue. ``PayrollService`` is the sole public
entry point for payroll operations. It composes the pure helpers with the
``JournalValidator`` engine. Persistence belongs to the caller, reached
only through the writer callables passed to ``commit_run``.

Invariants enforced
-------------------
* Every precondition (account map, project fractions, non-negative net
  pay) is checked before any output is produced.
* The entry handed back has passed ``JournalValidator.require_balanced``.
* Allocation postings are advisory: a failure writing them never undoes
  the journal entry.

Failure modes
-------------
* Unconfigured account role  -> ``MissingPayrollAccountError``.
* Project fractions off 100% in strict mode  -> ``ProjectRateSumError``.
* Deductions above gross for an employee  -> ``NegativeNetPayError``.
* No employees, or everything zero  -> ``EmptyJournalEntryError``.
* Entry writer failure  -> propagates unchanged from ``commit_run``.

Audit relevance
---------------
Every log line of a run, engine traces included, carries ``run_id`` (the
batch journal entry id). Events at batch start and completion add the
employee count and column totals; allocation write failures are logged
per posting and returned in ``PayrollCommitOutcome.allocation_errors``.

Usage::

    service = PayrollService(settings.payroll)
    run = service.run_payroll_batch(employees, date(2024, 6, 30), account_map)
    outcome = service.commit_run(run, entry_writer=repo.save_entry,
                                 posting_writer=repo.save_posting)
"""

from __future__ import annotations

import time
from collections.abc import Callable, Iterable, Sequence
from datetime import date
from uuid import uuid4

from fundbook_config.schema import JournalSettings, PayrollSettings
from fundbook_engines.journal_validator import JournalValidator
from fundbook_kernel.domain.accounts import EntityId
from fundbook_kernel.domain.journal import JournalEntry, JournalLine
from fundbook_kernel.domain.postings import Posting
from fundbook_kernel.domain.values import ZERO
from fundbook_kernel.exceptions import NegativeNetPayError, ProjectRateSumError
from fundbook_kernel.logging_config import LogContext, get_logger
from fundbook_modules.payroll.config import PayrollAccountMap
from fundbook_modules.payroll.helpers import (
    allocation_postings,
    compute_payroll,
    project_rates_valid,
    validate_project_rates,
)
from fundbook_modules.payroll.models import (
    AllocationFailure,
    EmployeeCompensation,
    PayrollCommitOutcome,
    PayrollResult,
    PayrollRun,
    PayrollSummary,
)

logger = get_logger("modules.payroll.service")


class PayrollService:
    """
    Payroll batch orchestration.

    Contract:
        Stateless apart from its settings; safe to share.
    Guarantees:
        - ``run_payroll_batch`` either raises or returns a run whose entry
          balances.
        - Employees are processed in the order given.
    Non-goals:
        - Does not apply ``exemption_rate``.
        - Does not persist anything itself.
    """

    def __init__(
        self,
        settings: PayrollSettings | None = None,
        journal_settings: JournalSettings | None = None,
    ):
        self.settings = settings or PayrollSettings()
        journal_settings = journal_settings or JournalSettings()
        self._validator = JournalValidator(epsilon=journal_settings.balance_epsilon)

    def compute(self, employee: EmployeeCompensation) -> PayrollResult:
        result = compute_payroll(employee)
        logger.debug(
            "gross_to_net_calculated",
            extra={
                "employee_id": str(employee.id),
                "gross_pay": str(result.gross_pay),
                "total_deductions": str(result.total_deductions),
                "net_pay": str(result.net_pay),
            },
        )
        return result

    def summarize(self, employees: Iterable[EmployeeCompensation]) -> PayrollSummary:
        """Column totals for a payroll preview."""
        return PayrollSummary.of(compute_payroll(e) for e in employees)

    def check_project_rates(self, employees: Iterable[EmployeeCompensation]) -> tuple[str, ...]:
        """
        Validate every employee's project fractions.

        Strict mode raises on the first failure; otherwise the failures are
        returned as warning messages.
        """
        tolerance = self.settings.rate_sum_tolerance
        warnings: list[str] = []
        for employee in employees:
            if self.settings.strict_project_rates:
                validate_project_rates(employee.id, employee.project_rates, tolerance)
            elif not project_rates_valid(employee.project_rates, tolerance):
                message = str(
                    ProjectRateSumError(str(employee.id), employee.project_rate_total, tolerance)
                )
                logger.warning(
                    "project_rates_off_total",
                    extra={
                        "employee_id": str(employee.id),
                        "total": str(employee.project_rate_total),
                    },
                )
                warnings.append(message)
        return tuple(warnings)

    @staticmethod
    def build_lines(summary: PayrollSummary, accounts: PayrollAccountMap) -> tuple[JournalLine, ...]:
        """Batch journal lines; all-zero lines are left out."""
        lines = [
            JournalLine.debit_of(accounts.payroll_expense, summary.gross_pay, "Gross salaries"),
            JournalLine.debit_of(accounts.payroll_expense, summary.employer_pension, "Employer pension"),
            JournalLine.debit_of(accounts.payroll_expense, summary.other_taxes, "Employer taxes"),
            JournalLine.credit_of(accounts.cash, summary.net_pay, "Net pay"),
            JournalLine.credit_of(accounts.paye_liability, summary.paye, "PAYE withheld"),
            JournalLine.credit_of(
                accounts.pension_liability,
                summary.pension + summary.employer_pension,
                "Pension contributions",
            ),
            JournalLine.credit_of(
                accounts.other_deductions_liability,
                summary.other_deductions + summary.other_taxes,
                "Other deductions and taxes",
            ),
        ]
        if summary.advance_loan > ZERO:
            lines.append(
                JournalLine.credit_of(
                    accounts.advances_account, summary.advance_loan, "Advances and loans recovered",
                )
            )
        return tuple(line for line in lines if not line.is_zero)

    def run_payroll_batch(
        self,
        employees: Sequence[EmployeeCompensation],
        run_date: date,
        account_map: PayrollAccountMap,
        entry_id: EntityId | None = None,
        reference: str | None = None,
    ) -> PayrollRun:
        """
        Produce the journal entry and allocation postings for a batch.

        Raises:
            MissingPayrollAccountError: a mandatory account role is unset.
            ProjectRateSumError: strict mode and fractions off 100%.
            NegativeNetPayError: an employee's deductions exceed gross.
            EmptyJournalEntryError: nothing to post.
        """
        entry_id = entry_id if entry_id is not None else str(uuid4())
        with LogContext.bind(run_id=entry_id):
            t0 = time.monotonic()
            account_map.validate()
            warnings = self.check_project_rates(employees)

            results = tuple(compute_payroll(e) for e in employees)
            for result in results:
                if result.net_pay < ZERO:
                    raise NegativeNetPayError(str(result.employee_id), result.net_pay)

            summary = PayrollSummary.of(results)
            logger.info(
                "payroll_batch_started",
                extra={
                    "entry_id": str(entry_id),
                    "run_date": run_date.isoformat(),
                    "employee_count": summary.employee_count,
                    "gross_pay": str(summary.gross_pay),
                },
            )

            lines = self.build_lines(summary, account_map)
            validation = self._validator.require_balanced(lines)
            entry = JournalEntry(
                id=entry_id,
                date=run_date,
                reference=reference or f"PAYROLL-{run_date:%Y%m%d}",
                memo=f"Payroll for period ending {run_date.isoformat()}",
                lines=lines,
            )

            allocations: list[Posting] = []
            for index, employee in enumerate(employees):
                allocations.extend(
                    allocation_postings(
                        employee,
                        account_map.payroll_expense,
                        run_date,
                        id_prefix=f"{entry_id}-alloc-{index + 1}",
                    )
                )

            logger.info(
                "payroll_batch_completed",
                extra={
                    "entry_id": str(entry_id),
                    "line_count": len(lines),
                    "total_debit": str(validation.total_debit),
                    "total_credit": str(validation.total_credit),
                    "net_pay": str(summary.net_pay),
                    "allocation_count": len(allocations),
                    "rate_warnings": len(warnings),
                    "duration_ms": round((time.monotonic() - t0) * 1000, 2),
                },
            )
            return PayrollRun(
                entry=entry,
                results=results,
                summary=summary,
                validation=validation,
                allocation_postings=tuple(allocations),
                rate_warnings=warnings,
            )

    def commit_run(
        self,
        run: PayrollRun,
        entry_writer: Callable[[JournalEntry], object],
        posting_writer: Callable[[Posting], object],
    ) -> PayrollCommitOutcome:
        """
        Hand a run to the caller's writers.

        The entry is written first and any failure propagates. Each
        allocation posting is then written on its own; failures are logged
        and collected, and never undo the entry.
        """
        with LogContext.bind(run_id=run.entry.id):
            self._validator.require_balanced(run.entry.lines)
            entry_writer(run.entry)
            logger.info("payroll_entry_committed", extra={"entry_id": str(run.entry.id)})

            written = 0
            failures: list[AllocationFailure] = []
            for posting in run.allocation_postings:
                try:
                    posting_writer(posting)
                except Exception as exc:
                    logger.warning(
                        "payroll_allocation_write_failed",
                        extra={
                            "entry_id": str(run.entry.id),
                            "posting_id": str(posting.id),
                            "project_id": str(posting.project_id),
                            "error": str(exc),
                        },
                        exc_info=True,
                    )
                    failures.append(
                        AllocationFailure(
                            posting_id=posting.id, project_id=posting.project_id, error=str(exc),
                        )
                    )
                else:
                    written += 1

        return PayrollCommitOutcome(
            entry_id=run.entry.id,
            allocations_written=written,
            allocation_errors=tuple(failures),
        )
