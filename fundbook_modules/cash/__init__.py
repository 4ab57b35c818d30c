"""
Cash Module (``fundbook_modules.cash``).

Bank reconciliation sessions over the reconciliation matcher engine.
"""

from fundbook_modules.cash.models import ReconciliationStatus, ReconciliationSummary
from fundbook_modules.cash.service import ReconciliationSession

__all__ = [
    "ReconciliationSession",
    "ReconciliationStatus",
    "ReconciliationSummary",
]
