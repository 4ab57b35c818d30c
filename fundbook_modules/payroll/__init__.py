"""
Payroll Module (``fundbook_modules.payroll``).

Responsibility
--------------
Flat-rate payroll for a small organization: per-employee gross to net,
one balanced journal entry per batch, and project cost allocation
postings for employees funded by projects.

Architecture position
---------------------
**Modules layer** -- models, account map configuration, pure helpers and
a service facade that gates its entry through ``JournalValidator``.

Failure modes
-------------
* ``MissingPayrollAccountError`` -- account map incomplete.
* ``ProjectRateSumError`` -- project fractions off 100% in strict mode.
* ``NegativeNetPayError`` -- an advance larger than net pay.
"""

from fundbook_modules.payroll.config import PayrollAccountMap, default_compensation_rates
from fundbook_modules.payroll.helpers import (
    allocation_postings,
    compute_payroll,
    employee_from_record,
    validate_project_rates,
)
from fundbook_modules.payroll.models import (
    AllocationFailure,
    EmployeeCompensation,
    PayrollCommitOutcome,
    PayrollResult,
    PayrollRun,
    PayrollSummary,
    ProjectRate,
)
from fundbook_modules.payroll.service import PayrollService

__all__ = [
    "AllocationFailure",
    "EmployeeCompensation",
    "PayrollAccountMap",
    "PayrollCommitOutcome",
    "PayrollResult",
    "PayrollRun",
    "PayrollService",
    "PayrollSummary",
    "ProjectRate",
    "allocation_postings",
    "compute_payroll",
    "default_compensation_rates",
    "employee_from_record",
    "validate_project_rates",
]
