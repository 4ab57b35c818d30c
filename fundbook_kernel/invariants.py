"""
Core Invariants Contract.

These invariants hold for every computation in the core. No setting in
``fundbook_config`` may switch them off; configuration only tunes tolerances.

This module declares the invariants explicitly. Enforcement is distributed
across JournalValidator, BudgetPerformanceCalculator, ReconciliationMatcher
and the payroll helpers.
"""

from enum import Enum, unique


@unique
class CoreInvariant(str, Enum):
    """Non-configurable invariants enforced by the core."""

    DOUBLE_ENTRY_BALANCE = "double_entry_balance"
    """Debits equal credits (within the cent epsilon) and are non-zero in
    every accepted journal entry. Enforced by JournalValidator."""

    SINGLE_SIDED_LINES = "single_sided_lines"
    """A journal line carries a debit or a credit, never both. Enforced at
    JournalLine construction."""

    MATCH_UNIQUENESS = "match_uniqueness"
    """A posting and a statement row each appear in at most one matched
    pair. Enforced by ReconciliationMatcher and ReconciliationSession."""

    BUDGET_ARITHMETIC = "budget_arithmetic"
    """remaining == budgeted - spent exactly; percent_used is 0 when
    budgeted is 0. Enforced by BudgetPerformanceCalculator."""

    PROJECT_RATE_TOTAL = "project_rate_total"
    """Project funding fractions total 1.0 within tolerance. Enforced by
    payroll helpers before a strict payroll run."""

    INPUT_IMMUTABILITY = "input_immutability"
    """Computations never mutate caller-supplied records. Records are frozen
    dataclasses; engines return fresh collections."""


ALL_CORE_INVARIANTS: frozenset[CoreInvariant] = frozenset(CoreInvariant)

# The kernel package may not import from these packages.
# Enforced by tests/architecture/test_layer_boundaries.py.
FORBIDDEN_KERNEL_IMPORTS: tuple[str, ...] = (
    "fundbook_engines",
    "fundbook_modules",
    "fundbook_config",
)
