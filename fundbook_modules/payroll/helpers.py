"""
Payroll Helpers (``fundbook_modules.payroll.helpers``).

Responsibility
--------------
Pure calculation functions for flat-rate payroll: per-employee gross to
net, project funding checks, project cost allocation postings and the
record boundary for employee rows.

Architecture position
---------------------
**Modules layer** -- pure helper functions. No I/O, no clock. Called by
``PayrollService`` or from tests.

Invariants enforced
-------------------
* All numeric inputs and outputs use ``Decimal`` -- NEVER ``float``.
* Every component is quantized to cents (half up) before totals are
  formed, so totals derived from components always agree with each other.
* Project funding fractions must total 1.0 within the tolerance
  (inclusive); an empty list of fractions is valid.

Failure modes
-------------
* Project fractions off by more than the tolerance  -> ``ProjectRateSumError``.
* Employee row without a name or gross pay  -> ``MissingFieldError``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from datetime import date
from decimal import Decimal
from typing import Any

from fundbook_kernel.domain.accounts import EntityId
from fundbook_kernel.domain.postings import Posting, PostingKind
from fundbook_kernel.domain.values import HUNDRED, ONE, ZERO, parse_amount, parse_rate, quantize_cents
from fundbook_kernel.exceptions import MissingFieldError, ProjectRateSumError
from fundbook_modules.payroll.models import (
    RATE_FIELDS,
    EmployeeCompensation,
    PayrollResult,
    ProjectRate,
)

DEFAULT_RATE_SUM_TOLERANCE = Decimal("0.001")


def compute_payroll(employee: EmployeeCompensation) -> PayrollResult:
    """
    Gross-to-net for one employee.

    Formulas (each product rounded to cents)::

        paye             = gross * paye_rate
        pension          = gross * employee_pension_rate
        other_deductions = gross * other_deduction_rate
        employer_pension = gross * employer_pension_rate
        other_taxes      = gross * other_taxes_rate

    ``total_deductions``, ``net_pay`` and ``total_employer_cost`` are
    properties of the result. ``exemption_rate`` does not enter any
    formula. ``net_pay`` may be negative when the advance is large.
    """
    gross = employee.gross_pay
    return PayrollResult(
        employee_id=employee.id,
        name=employee.name,
        gross_pay=gross,
        paye=quantize_cents(gross * employee.paye_rate),
        pension=quantize_cents(gross * employee.employee_pension_rate),
        other_deductions=quantize_cents(gross * employee.other_deduction_rate),
        advance_loan=employee.advance_loan,
        employer_pension=quantize_cents(gross * employee.employer_pension_rate),
        other_taxes=quantize_cents(gross * employee.other_taxes_rate),
    )


def project_rates_valid(
    rates: Sequence[ProjectRate],
    tolerance: Decimal = DEFAULT_RATE_SUM_TOLERANCE,
) -> bool:
    if not rates:
        return True
    total = sum((r.fraction for r in rates), ZERO)
    return abs(total - ONE) <= tolerance


def validate_project_rates(
    employee_id: EntityId,
    rates: Sequence[ProjectRate],
    tolerance: Decimal = DEFAULT_RATE_SUM_TOLERANCE,
) -> Decimal:
    """
    Check that project fractions total 100%.

    Returns the total. Raises ``ProjectRateSumError`` when it is off by
    more than ``tolerance``.
    """
    total = sum((r.fraction for r in rates), ZERO)
    if not project_rates_valid(rates, tolerance):
        raise ProjectRateSumError(str(employee_id), total, tolerance)
    return total


def allocation_postings(
    employee: EmployeeCompensation,
    payroll_expense_account: EntityId,
    run_date: date,
    id_prefix: str,
) -> list[Posting]:
    """
    EXPENSE postings tagging ``gross * fraction`` with each funding project.

    Zero-cost shares produce no posting. Ids are ``{id_prefix}-{n}``.
    """
    postings: list[Posting] = []
    for rate in employee.project_rates:
        cost = quantize_cents(employee.gross_pay * rate.fraction)
        if cost <= ZERO:
            continue
        percent = (rate.fraction * HUNDRED).normalize()
        postings.append(
            Posting(
                id=f"{id_prefix}-{len(postings) + 1}",
                date=run_date,
                account_id=payroll_expense_account,
                kind=PostingKind.EXPENSE,
                amount=cost,
                description=f"Payroll Cost Allocation for {employee.name}",
                project_id=rate.project_id,
                notes=f"Project cost allocation for {percent:f}% of salary",
            )
        )
    return postings


def employee_from_record(
    record: Mapping[str, Any],
    defaults: Mapping[str, Decimal] | None = None,
) -> EmployeeCompensation:
    """
    Build ``EmployeeCompensation`` from a form or import row.

    Blank rates take the value in ``defaults`` (see
    ``config.default_compensation_rates``) and otherwise zero. Project
    rates come from ``project_rates``: a list of mappings with
    ``project_id`` and ``rate``; entries without a project are ignored.
    """
    defaults = defaults or {}
    name = record.get("name")
    if name is None or not str(name).strip():
        raise MissingFieldError("name", "employee")
    gross = record.get("gross_pay")
    if gross is None or (isinstance(gross, str) and not gross.strip()):
        raise MissingFieldError("gross_pay", "employee")

    rates: dict[str, Decimal] = {}
    for rate_field in RATE_FIELDS:
        raw = record.get(rate_field)
        if raw is None or (isinstance(raw, str) and not raw.strip()):
            rates[rate_field] = defaults.get(rate_field, ZERO)
        else:
            rates[rate_field] = parse_rate(raw, rate_field)

    project_rates = tuple(
        ProjectRate(project_id=item["project_id"], fraction=parse_rate(item.get("rate"), "rate"))
        for item in record.get("project_rates") or ()
        if item.get("project_id") not in (None, "")
    )

    return EmployeeCompensation(
        id=record.get("id") or str(name).strip(),
        name=str(name).strip(),
        gross_pay=parse_amount(gross, "gross_pay"),
        advance_loan=parse_amount(record.get("advance_loan"), "advance_loan", optional=True),
        project_rates=project_rates,
        **rates,
    )
