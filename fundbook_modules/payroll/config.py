"""
Payroll Configuration (``fundbook_modules.payroll.config``).

Maps the accounting roles a payroll run needs onto chart-of-accounts ids.
Five roles are mandatory; ``advances`` is optional and falls back to the
cash account.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from decimal import Decimal

from fundbook_config.schema import PAYROLL_ACCOUNT_ROLES, PayrollRateDefaults, PayrollSettings
from fundbook_kernel.domain.accounts import EntityId
from fundbook_kernel.exceptions import MissingPayrollAccountError
from fundbook_kernel.logging_config import get_logger

logger = get_logger("modules.payroll.config")


@dataclass(frozen=True)
class PayrollAccountMap:
    """Account id per payroll role. ``None`` means not configured."""

    cash: EntityId | None = None
    paye_liability: EntityId | None = None
    pension_liability: EntityId | None = None
    other_deductions_liability: EntityId | None = None
    payroll_expense: EntityId | None = None
    advances: EntityId | None = None

    def missing_roles(self) -> tuple[str, ...]:
        return tuple(role for role in PAYROLL_ACCOUNT_ROLES if getattr(self, role) in (None, ""))

    def validate(self) -> None:
        """
        Raises:
            MissingPayrollAccountError: any mandatory role is unset.
        """
        missing = self.missing_roles()
        if missing:
            logger.warning("payroll_accounts_missing", extra={"missing_roles": list(missing)})
            raise MissingPayrollAccountError(missing)

    @property
    def advances_account(self) -> EntityId | None:
        return self.cash if self.advances in (None, "") else self.advances

    @classmethod
    def from_mapping(cls, data: Mapping[str, EntityId | None]) -> PayrollAccountMap:
        return cls(**{role: data.get(role) for role in (*PAYROLL_ACCOUNT_ROLES, "advances")})

    @classmethod
    def from_settings(cls, settings: PayrollSettings) -> PayrollAccountMap:
        return cls.from_mapping(settings.accounts)


def default_compensation_rates(defaults: PayrollRateDefaults | None = None) -> dict[str, Decimal]:
    """Rates to pre-fill for a new employee, keyed by compensation field."""
    defaults = defaults or PayrollRateDefaults()
    return {
        "exemption_rate": defaults.exemption_rate,
        "employee_pension_rate": defaults.employee_pension_rate,
        "employer_pension_rate": defaults.employer_pension_rate,
        "other_deduction_rate": defaults.other_deduction_rate,
        "paye_rate": defaults.paye_rate,
        "other_taxes_rate": defaults.other_taxes_rate,
    }
