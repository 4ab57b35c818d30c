"""
Settings schema (``fundbook_config.schema``).

Frozen dataclasses describing every tunable of the core. Instances are
produced by ``fundbook_config.loader`` from YAML; the dataclass defaults
mirror ``defaults.yaml`` so that services constructed without settings
behave exactly like services given the packaged file.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal

VALID_MATCH_STRATEGIES = frozenset({"greedy_by_list_order", "greedy_sorted"})
VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})

PAYROLL_ACCOUNT_ROLES = (
    "cash",
    "paye_liability",
    "pension_liability",
    "other_deductions_liability",
    "payroll_expense",
)
OPTIONAL_PAYROLL_ACCOUNT_ROLES = ("advances",)


@dataclass(frozen=True)
class JournalSettings:
    balance_epsilon: Decimal = Decimal("0.005")


@dataclass(frozen=True)
class ReconciliationSettings:
    window_days: int = 3
    amount_epsilon: Decimal = Decimal("0.01")
    strategy: str = "greedy_by_list_order"


@dataclass(frozen=True)
class PayrollRateDefaults:
    """Rates pre-filled for a new employee."""

    exemption_rate: Decimal = Decimal("0.15")
    employee_pension_rate: Decimal = Decimal("0.05")
    employer_pension_rate: Decimal = Decimal("0.05")
    other_deduction_rate: Decimal = Decimal("0.02")
    paye_rate: Decimal = Decimal("0.20")
    other_taxes_rate: Decimal = Decimal("0.01")


@dataclass(frozen=True)
class PayrollSettings:
    rate_sum_tolerance: Decimal = Decimal("0.001")
    strict_project_rates: bool = True
    default_rates: PayrollRateDefaults = field(default_factory=PayrollRateDefaults)
    # role -> account id; None means "not configured"
    accounts: dict[str, str | None] = field(default_factory=dict)


@dataclass(frozen=True)
class BudgetSettings:
    over_budget_threshold_percent: Decimal = Decimal("100")


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"


@dataclass(frozen=True)
class FundbookSettings:
    """Complete settings tree plus the checksum of its source."""

    journal: JournalSettings = field(default_factory=JournalSettings)
    reconciliation: ReconciliationSettings = field(default_factory=ReconciliationSettings)
    payroll: PayrollSettings = field(default_factory=PayrollSettings)
    budget: BudgetSettings = field(default_factory=BudgetSettings)
    logging: LoggingSettings = field(default_factory=LoggingSettings)
    checksum: str = ""
    source: str = "<defaults>"
