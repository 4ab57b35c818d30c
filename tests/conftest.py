"""
Pytest fixtures for the fundbook test suite.

Provides:
- A small nonprofit chart of accounts
- Payroll account map
- A JSON log capture for asserting structured log events

Everything here is in-memory; no database or network is involved.
"""

import json
import logging
from io import StringIO

import pytest

from fundbook_kernel.domain.accounts import Account, AccountCategory
from fundbook_kernel.logging_config import (
    LogContext,
    StructuredFormatter,
    configure_logging,
    reset_logging,
)
from fundbook_modules.payroll.config import PayrollAccountMap


@pytest.fixture(autouse=True)
def _clean_log_context():
    LogContext.clear()
    yield
    LogContext.clear()


@pytest.fixture
def log_stream():
    """Capture fundbook log records as parsed JSON dicts via ``records()``."""
    reset_logging()
    stream = StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(StructuredFormatter())
    configure_logging(level=logging.DEBUG, handler=handler)

    class _Capture:
        def records(self) -> list[dict]:
            return [json.loads(line) for line in stream.getvalue().splitlines() if line]

        def messages(self) -> list[str]:
            return [r["message"] for r in self.records()]

    yield _Capture()
    reset_logging()


# ---------------------------------------------------------------------------
# Chart of accounts
# ---------------------------------------------------------------------------


@pytest.fixture
def chart() -> list[Account]:
    return [
        Account(id="1000", code="1000", name="Operating Cash", category=AccountCategory.ASSET, account_type="Cash"),
        Account(id="1100", code="1100", name="Savings", category=AccountCategory.ASSET, account_type="Cash"),
        Account(id="2000", code="2000", name="PAYE Payable", category=AccountCategory.LIABILITY),
        Account(id="2100", code="2100", name="Pension Payable", category=AccountCategory.LIABILITY),
        Account(id="2200", code="2200", name="Other Deductions Payable", category=AccountCategory.LIABILITY),
        Account(id="3000", code="3000", name="Unrestricted Net Assets", category=AccountCategory.NET_ASSET),
        Account(id="4000", code="4000", name="Donations", category=AccountCategory.REVENUE),
        Account(id="4100", code="4100", name="Grants", category=AccountCategory.REVENUE),
        Account(id="5000", code="5000", name="Program Expenses", category=AccountCategory.EXPENSE),
        Account(id="5100", code="5100", name="Salaries", category=AccountCategory.EXPENSE, parent_id="5000"),
        Account(id="5200", code="5200", name="Rent", category=AccountCategory.EXPENSE),
    ]


@pytest.fixture
def payroll_accounts() -> PayrollAccountMap:
    return PayrollAccountMap(
        cash="1000",
        paye_liability="2000",
        pension_liability="2100",
        other_deductions_liability="2200",
        payroll_expense="5100",
    )
