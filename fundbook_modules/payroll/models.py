"""
Payroll Domain Models (``fundbook_modules.payroll.models``).

Responsibility
--------------
Frozen dataclass value objects for payroll: an employee's compensation
terms, the per-employee computation, batch totals, and the outcome of a
payroll run.

Architecture position
---------------------
**Modules layer** -- pure data definitions with ZERO I/O. Consumed by
``PayrollService`` and returned to callers.

Invariants enforced
-------------------
* All models are ``frozen=True`` (immutable after construction).
* All monetary fields use ``Decimal`` -- NEVER ``float``.
* Compensation rates lie in [0, 1]; gross pay and advances are >= 0.

Failure modes
-------------
* Out-of-range rate  -> ``InvalidPayrollRateError``.
* Negative gross pay or advance  -> ``InvalidAmountError``.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from decimal import Decimal

from fundbook_engines.journal_validator import JournalValidation
from fundbook_kernel.domain.accounts import EntityId
from fundbook_kernel.domain.journal import JournalEntry
from fundbook_kernel.domain.postings import Posting
from fundbook_kernel.domain.values import ONE, ZERO, parse_amount
from fundbook_kernel.exceptions import InvalidAmountError, InvalidPayrollRateError
from fundbook_kernel.logging_config import get_logger

logger = get_logger("modules.payroll.models")

RATE_FIELDS = (
    "exemption_rate",
    "employee_pension_rate",
    "employer_pension_rate",
    "other_deduction_rate",
    "paye_rate",
    "other_taxes_rate",
)


@dataclass(frozen=True)
class ProjectRate:
    """Share of an employee's salary funded by one project."""

    project_id: EntityId
    fraction: Decimal

    def __post_init__(self) -> None:
        object.__setattr__(self, "fraction", parse_amount(self.fraction, "fraction"))


@dataclass(frozen=True)
class EmployeeCompensation:
    """
    Compensation terms for one employee.

    ``exemption_rate`` is recorded with the employee but not applied by
    ``compute_payroll``; PAYE is charged on full gross pay.
    """

    id: EntityId
    name: str
    gross_pay: Decimal
    exemption_rate: Decimal = ZERO
    employee_pension_rate: Decimal = ZERO
    employer_pension_rate: Decimal = ZERO
    other_deduction_rate: Decimal = ZERO
    paye_rate: Decimal = ZERO
    other_taxes_rate: Decimal = ZERO
    advance_loan: Decimal = ZERO
    project_rates: tuple[ProjectRate, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        for name in ("gross_pay", "advance_loan"):
            value = parse_amount(getattr(self, name), name, optional=True)
            object.__setattr__(self, name, value)
            if value < ZERO:
                raise InvalidAmountError(name, value)

        for name in RATE_FIELDS:
            value = parse_amount(getattr(self, name), name, optional=True)
            object.__setattr__(self, name, value)
            if value < ZERO or value > ONE:
                raise InvalidPayrollRateError(str(self.id), name, value)

        for rate in self.project_rates:
            if rate.fraction < ZERO or rate.fraction > ONE:
                raise InvalidPayrollRateError(
                    str(self.id), f"project_rates[{rate.project_id}]", rate.fraction,
                )

    @property
    def project_rate_total(self) -> Decimal:
        return sum((r.fraction for r in self.project_rates), ZERO)


@dataclass(frozen=True)
class PayrollResult:
    """One employee's payroll figures, every component rounded to cents."""

    employee_id: EntityId
    name: str
    gross_pay: Decimal
    paye: Decimal
    pension: Decimal
    other_deductions: Decimal
    advance_loan: Decimal
    employer_pension: Decimal
    other_taxes: Decimal

    @property
    def total_deductions(self) -> Decimal:
        return self.paye + self.pension + self.other_deductions + self.advance_loan

    @property
    def net_pay(self) -> Decimal:
        return self.gross_pay - self.total_deductions

    @property
    def total_employer_cost(self) -> Decimal:
        return self.gross_pay + self.employer_pension + self.other_taxes


@dataclass(frozen=True)
class PayrollSummary:
    """Column totals across a set of ``PayrollResult``."""

    employee_count: int = 0
    gross_pay: Decimal = ZERO
    paye: Decimal = ZERO
    pension: Decimal = ZERO
    other_deductions: Decimal = ZERO
    advance_loan: Decimal = ZERO
    employer_pension: Decimal = ZERO
    other_taxes: Decimal = ZERO

    @property
    def total_deductions(self) -> Decimal:
        return self.paye + self.pension + self.other_deductions + self.advance_loan

    @property
    def net_pay(self) -> Decimal:
        return self.gross_pay - self.total_deductions

    @property
    def total_employer_cost(self) -> Decimal:
        return self.gross_pay + self.employer_pension + self.other_taxes

    @classmethod
    def of(cls, results: Iterable[PayrollResult]) -> PayrollSummary:
        results = tuple(results)
        return cls(
            employee_count=len(results),
            gross_pay=sum((r.gross_pay for r in results), ZERO),
            paye=sum((r.paye for r in results), ZERO),
            pension=sum((r.pension for r in results), ZERO),
            other_deductions=sum((r.other_deductions for r in results), ZERO),
            advance_loan=sum((r.advance_loan for r in results), ZERO),
            employer_pension=sum((r.employer_pension for r in results), ZERO),
            other_taxes=sum((r.other_taxes for r in results), ZERO),
        )


@dataclass(frozen=True)
class PayrollRun:
    """
    Everything a payroll batch produces, ready for the caller to persist.

    ``allocation_postings`` sit outside ``entry``: they tag payroll cost
    with projects and are written separately from the journal entry.
    """

    entry: JournalEntry
    results: tuple[PayrollResult, ...]
    summary: PayrollSummary
    validation: JournalValidation
    allocation_postings: tuple[Posting, ...] = ()
    rate_warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class AllocationFailure:
    posting_id: EntityId
    project_id: EntityId | None
    error: str


@dataclass(frozen=True)
class PayrollCommitOutcome:
    """Result of handing a ``PayrollRun`` to the caller's writers."""

    entry_id: EntityId
    allocations_written: int
    allocation_errors: tuple[AllocationFailure, ...] = ()

    @property
    def fully_committed(self) -> bool:
        return not self.allocation_errors
