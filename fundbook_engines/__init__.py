"""
Module: fundbook_engines
Responsibility:
    Package entrypoint re-exporting the pure calculation engines. This is
    the import surface for ``fundbook_modules``.

Architecture position:
    Engines -- pure calculation layer, zero I/O.
    May only import fundbook_kernel (and sibling engine modules).
    MUST NOT import fundbook_modules or fundbook_config.

Invariants enforced:
    - Purity: engines never read the clock; dates are explicit parameters.
    - Decimal-only arithmetic.
    - Determinism: identical inputs always produce identical outputs.

Audit relevance:
    Every engine entry point is wrapped in ``@traced_engine`` and emits a
    FUNDBOOK_ENGINE_TRACE record with an input fingerprint and duration.

Usage:
    from fundbook_engines import LedgerCalculator, ReconciliationMatcher
"""

from fundbook_engines.budget_performance import (
    BudgetPerformance,
    BudgetPerformanceCalculator,
    LinePerformance,
)
from fundbook_engines.journal_validator import (
    DEFAULT_BALANCE_EPSILON,
    JournalValidation,
    JournalValidator,
)
from fundbook_engines.ledger import (
    ActivitiesStatement,
    BalanceResult,
    FundBalance,
    LedgerCalculator,
    ProjectSummary,
)
from fundbook_engines.matching import (
    DEFAULT_AMOUNT_EPSILON,
    DEFAULT_WINDOW_DAYS,
    MatchStrategy,
    ReconciliationMatcher,
)
from fundbook_engines.tracer import compute_input_fingerprint, traced_engine

__all__ = [
    "ActivitiesStatement",
    "BalanceResult",
    "BudgetPerformance",
    "BudgetPerformanceCalculator",
    "DEFAULT_AMOUNT_EPSILON",
    "DEFAULT_BALANCE_EPSILON",
    "DEFAULT_WINDOW_DAYS",
    "FundBalance",
    "JournalValidation",
    "JournalValidator",
    "LedgerCalculator",
    "LinePerformance",
    "MatchStrategy",
    "ProjectSummary",
    "ReconciliationMatcher",
    "compute_input_fingerprint",
    "traced_engine",
]
