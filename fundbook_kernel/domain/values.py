"""
Values -- Strict conversion of loosely typed record fields.

Responsibility:
    Turns amounts, rates and dates arriving from an external collaborator
    (form fields, parsed CSV cells, JSON numbers) into ``Decimal`` and
    ``date`` values before they reach any computation.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.
    Imported by record constructors and the records boundary module.

Invariants enforced:
    - Money is ``Decimal`` only. ``float`` input is rejected, never coerced,
      so binary rounding noise cannot leak into sums.
    - Rates are fractions in [0, 1].
    - Blank / ``None`` becomes zero only when the caller says the field is
      optional.

Failure modes:
    - InvalidAmountError for unparseable or float amounts.
    - InvalidRateError for unparseable or out-of-range rates.
    - InvalidDateError for non-ISO dates.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from fundbook_kernel.exceptions import (
    InvalidAmountError,
    InvalidDateError,
    InvalidRateError,
)

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")
CENT = Decimal("0.01")

AmountInput = Decimal | int | str | None


def _is_blank(value: object) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_amount(
    value: AmountInput,
    field: str = "amount",
    *,
    optional: bool = False,
) -> Decimal:
    """
    Parse a monetary value into a Decimal.

    Accepts ``Decimal``, ``int`` and numeric strings (surrounding whitespace,
    thousands separators and a leading ``$`` are tolerated). ``float`` is
    rejected: callers must hand over the original text.

    Raises:
        InvalidAmountError: value is a float, bool, non-finite, or unparseable,
            or is blank while ``optional`` is False.
    """
    if _is_blank(value):
        if optional:
            return ZERO
        raise InvalidAmountError(field, value)
    if isinstance(value, bool) or isinstance(value, float):
        raise InvalidAmountError(field, value)
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, int):
        result = Decimal(value)
    elif isinstance(value, str):
        text = value.strip().replace(",", "")
        if text.startswith("$"):
            text = text[1:]
        elif text.startswith("-$"):
            text = "-" + text[2:]
        try:
            result = Decimal(text)
        except InvalidOperation as e:
            raise InvalidAmountError(field, value) from e
    else:
        raise InvalidAmountError(field, value)

    if not result.is_finite():
        raise InvalidAmountError(field, value)
    return result


def parse_rate(
    value: AmountInput,
    field: str = "rate",
    *,
    optional: bool = True,
) -> Decimal:
    """
    Parse a fraction in [0, 1].

    Blank rates default to zero (entry forms treat an empty rate as
    "not applied").

    Raises:
        InvalidRateError: unparseable, or outside [0, 1].
    """
    try:
        rate = parse_amount(value, field, optional=optional)
    except InvalidAmountError as e:
        raise InvalidRateError(field, value) from e
    if rate < ZERO or rate > ONE:
        raise InvalidRateError(field, value)
    return rate


def parse_date(value: date | str | None, field: str = "date") -> date:
    """
    Parse an ISO-8601 date.

    ``datetime`` values and ISO timestamps are truncated to their date.

    Raises:
        InvalidDateError: blank or not ISO-8601.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        text = value.strip()
        try:
            return date.fromisoformat(text[:10])
        except ValueError as e:
            raise InvalidDateError(field, value) from e
    raise InvalidDateError(field, value)


def quantize_cents(amount: Decimal) -> Decimal:
    """Round to cents, half up."""
    return amount.quantize(CENT, rounding=ROUND_HALF_UP)


def within(a: Decimal, b: Decimal, epsilon: Decimal) -> bool:
    """True when ``|a - b| < epsilon``."""
    return abs(a - b) < epsilon
