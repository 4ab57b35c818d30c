"""
Typed Exception Hierarchy for the Fundbook core.

===============================================================================
WHY TYPED EXCEPTIONS
===============================================================================

Callers of this core (a web form, an import job, a payroll run) must be able
to tell *which* constraint failed without parsing message text:

    try:
        service.post(entry, writer)
    except UnbalancedEntryError as e:
        show_error(f"Debits {e.total_debit} / credits {e.total_credit}")

Every exception therefore has:
  1. A TYPED class (catch by type, not message)
  2. A CODE class attribute (machine-readable, API-safe)
  3. Structured DATA attributes (not just a message string)

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    FundbookError (base)
    |
    +-- RecordError
    |   +-- InvalidAmountError
    |   +-- InvalidRateError
    |   +-- InvalidDateError
    |   +-- MissingFieldError
    |   +-- InvalidFieldError
    |
    +-- PostingError
    |   +-- MalformedJournalLineError
    |   +-- UnbalancedEntryError
    |   +-- EmptyJournalEntryError
    |   +-- PlaceholderAccountError
    |
    +-- AccountError
    |   +-- AccountNotFoundError
    |   +-- UnknownParentAccountError
    |
    +-- PayrollError
    |   +-- ProjectRateSumError
    |   +-- MissingPayrollAccountError
    |   +-- InvalidPayrollRateError
    |   +-- NegativeNetPayError
    |
    +-- ReconciliationError
    |   +-- ReconciliationNotBalancedError
    |   +-- AlreadyMatchedError
    |   +-- MatchNotFoundError
    |
    +-- ConfigError

===============================================================================
ERROR CODES - QUICK REFERENCE
===============================================================================

Category        | Code                        | When Raised
----------------|-----------------------------|-----------------------------------------
Record          | INVALID_AMOUNT              | Amount text/float not a clean Decimal
                | INVALID_RATE                | Rate outside [0, 1] or unparseable
                | INVALID_DATE                | Date not ISO-8601
                | MISSING_FIELD               | Required record field absent
                | INVALID_FIELD               | Unknown kind, category or direction
----------------|-----------------------------|-----------------------------------------
Posting         | MALFORMED_JOURNAL_LINE      | Debit and credit both set, or negative
                | UNBALANCED_ENTRY            | Debits != Credits
                | EMPTY_JOURNAL_ENTRY         | Entry totals zero
                | PLACEHOLDER_ACCOUNT         | Posting to a parent account
----------------|-----------------------------|-----------------------------------------
Account         | ACCOUNT_NOT_FOUND           | Account id/code doesn't exist
                | UNKNOWN_PARENT_ACCOUNT      | Import row names a missing parent code
----------------|-----------------------------|-----------------------------------------
Payroll         | PROJECT_RATE_SUM            | Project fractions don't total 1.0
                | MISSING_PAYROLL_ACCOUNT     | Payroll account map incomplete
                | INVALID_PAYROLL_RATE        | Compensation rate outside [0, 1]
                | NEGATIVE_NET_PAY            | Deductions exceed gross in a payroll run
----------------|-----------------------------|-----------------------------------------
Reconciliation  | RECONCILIATION_NOT_BALANCED | Finish attempted with a difference
                | ALREADY_MATCHED             | Manual match of a matched item
                | MATCH_NOT_FOUND             | Unmatch of an item that isn't matched
----------------|-----------------------------|-----------------------------------------
Config          | CONFIG_ERROR                | Settings file invalid

Reference problems inside computations (a posting pointing at an unknown
account) are NOT raised: they are counted in
``fundbook_kernel.domain.integrity.IntegrityReport``.

===============================================================================
"""

from decimal import Decimal


class FundbookError(Exception):
    """
    Base exception for all fundbook errors.

    All subclasses must have a ``code`` class attribute for machine-readable
    error identification.
    """

    code: str = "FUNDBOOK_ERROR"


# Record boundary exceptions


class RecordError(FundbookError):
    """Base exception for record parsing errors."""

    code: str = "RECORD_ERROR"


class InvalidAmountError(RecordError):
    """A monetary value could not be parsed into a Decimal."""

    code: str = "INVALID_AMOUNT"

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = repr(value)
        super().__init__(f"Invalid amount for {field}: {value!r}")


class InvalidRateError(RecordError):
    """A rate could not be parsed or lies outside [0, 1]."""

    code: str = "INVALID_RATE"

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = repr(value)
        super().__init__(f"Invalid rate for {field}: {value!r} (expected 0..1)")


class InvalidDateError(RecordError):
    """A date could not be parsed."""

    code: str = "INVALID_DATE"

    def __init__(self, field: str, value: object):
        self.field = field
        self.value = repr(value)
        super().__init__(f"Invalid date for {field}: {value!r}")


class MissingFieldError(RecordError):
    """A required record field was absent or blank."""

    code: str = "MISSING_FIELD"

    def __init__(self, field: str, record_kind: str):
        self.field = field
        self.record_kind = record_kind
        super().__init__(f"Missing required field {field!r} on {record_kind}")


class InvalidFieldError(RecordError):
    """A field holds a value outside its closed set (kind, category, direction)."""

    code: str = "INVALID_FIELD"

    def __init__(self, field: str, value: object, allowed: tuple[str, ...] = ()):
        self.field = field
        self.value = repr(value)
        self.allowed = allowed
        expected = f" (expected one of {', '.join(allowed)})" if allowed else ""
        super().__init__(f"Invalid value for {field}: {value!r}{expected}")


# Posting-related exceptions


class PostingError(FundbookError):
    """Base exception for journal/posting errors."""

    code: str = "POSTING_ERROR"


class MalformedJournalLineError(PostingError):
    """A journal line carries both a debit and a credit, or a negative side."""

    code: str = "MALFORMED_JOURNAL_LINE"

    def __init__(self, account_id: str, debit: Decimal, credit: Decimal, reason: str):
        self.account_id = account_id
        self.debit = str(debit)
        self.credit = str(credit)
        self.reason = reason
        super().__init__(
            f"Malformed journal line for account {account_id}: {reason} "
            f"(debit={debit}, credit={credit})"
        )


class UnbalancedEntryError(PostingError):
    """Journal entry debits do not equal credits."""

    code: str = "UNBALANCED_ENTRY"

    def __init__(self, total_debit: Decimal, total_credit: Decimal):
        self.total_debit = str(total_debit)
        self.total_credit = str(total_credit)
        self.difference = str(total_debit - total_credit)
        super().__init__(
            f"Entries must balance: debit total ${total_debit:,.2f}, "
            f"credit total ${total_credit:,.2f}"
        )


class EmptyJournalEntryError(PostingError):
    """Journal entry has no non-zero amounts."""

    code: str = "EMPTY_JOURNAL_ENTRY"

    def __init__(self, line_count: int):
        self.line_count = line_count
        super().__init__(
            f"Journal entry is empty: {line_count} line(s) total zero"
        )


class PlaceholderAccountError(PostingError):
    """A posting targets a parent (placeholder) account."""

    code: str = "PLACEHOLDER_ACCOUNT"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(
            f"Account {account_id} has sub-accounts and cannot receive postings"
        )


# Account-related exceptions


class AccountError(FundbookError):
    """Base exception for account-related errors."""

    code: str = "ACCOUNT_ERROR"


class AccountNotFoundError(AccountError):
    """Account was not found."""

    code: str = "ACCOUNT_NOT_FOUND"

    def __init__(self, account_id: str):
        self.account_id = account_id
        super().__init__(f"Account not found: {account_id}")


class UnknownParentAccountError(AccountError):
    """A chart-of-accounts row names a parent code that does not exist."""

    code: str = "UNKNOWN_PARENT_ACCOUNT"

    def __init__(self, account_code: str, parent_code: str):
        self.account_code = account_code
        self.parent_code = parent_code
        super().__init__(
            f'Parent account with code "{parent_code}" not found '
            f'for child account "{account_code}".'
        )


# Payroll exceptions


class PayrollError(FundbookError):
    """Base exception for payroll errors."""

    code: str = "PAYROLL_ERROR"


class ProjectRateSumError(PayrollError):
    """Project funding fractions do not total 100%."""

    code: str = "PROJECT_RATE_SUM"

    def __init__(self, employee_id: str, total: Decimal, tolerance: Decimal):
        self.employee_id = employee_id
        self.total = str(total)
        self.tolerance = str(tolerance)
        super().__init__(
            f"Total project contribution rates must equal 100% for employee "
            f"{employee_id}. Current total is {total * 100:.2f}%."
        )


class MissingPayrollAccountError(PayrollError):
    """One or more required payroll accounts are not configured."""

    code: str = "MISSING_PAYROLL_ACCOUNT"

    def __init__(self, missing_roles: tuple[str, ...]):
        self.missing_roles = missing_roles
        super().__init__(
            "Payroll accounts not configured: " + ", ".join(missing_roles)
        )


class InvalidPayrollRateError(PayrollError):
    """A compensation rate lies outside [0, 1]."""

    code: str = "INVALID_PAYROLL_RATE"

    def __init__(self, employee_id: str, field: str, value: Decimal):
        self.employee_id = employee_id
        self.field = field
        self.value = str(value)
        super().__init__(
            f"Rate {field}={value} for employee {employee_id} must be between 0 and 1"
        )


class NegativeNetPayError(PayrollError):
    """Deductions (including advances) exceed an employee's gross pay."""

    code: str = "NEGATIVE_NET_PAY"

    def __init__(self, employee_id: str, net_pay: Decimal):
        self.employee_id = employee_id
        self.net_pay = str(net_pay)
        super().__init__(
            f"Net pay for employee {employee_id} would be {net_pay}; "
            f"deductions cannot exceed gross pay in a payroll run"
        )


# Reconciliation exceptions


class ReconciliationError(FundbookError):
    """Base exception for reconciliation errors."""

    code: str = "RECONCILIATION_ERROR"


class ReconciliationNotBalancedError(ReconciliationError):
    """Finish attempted while statement and cleared balances differ."""

    code: str = "RECONCILIATION_NOT_BALANCED"

    def __init__(self, statement_balance: Decimal, cleared_balance: Decimal):
        self.statement_balance = str(statement_balance)
        self.cleared_balance = str(cleared_balance)
        self.difference = str(statement_balance - cleared_balance)
        super().__init__(
            f"Reconciliation does not balance: statement {statement_balance}, "
            f"cleared {cleared_balance}, difference {statement_balance - cleared_balance}"
        )


class AlreadyMatchedError(ReconciliationError):
    """Manual match of a posting or statement row that is already matched."""

    code: str = "ALREADY_MATCHED"

    def __init__(self, item_kind: str, item_id: str):
        self.item_kind = item_kind
        self.item_id = item_id
        super().__init__(f"{item_kind} {item_id} is already matched")


class MatchNotFoundError(ReconciliationError):
    """Reference to a posting/row that is not part of the session or match set."""

    code: str = "MATCH_NOT_FOUND"

    def __init__(self, item_kind: str, item_id: str):
        self.item_kind = item_kind
        self.item_id = item_id
        super().__init__(f"No {item_kind} {item_id} in this reconciliation")


# Configuration exceptions


class ConfigError(FundbookError):
    """Settings file is structurally invalid."""

    code: str = "CONFIG_ERROR"

    def __init__(self, path: str, reason: str):
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid configuration at {path}: {reason}")
