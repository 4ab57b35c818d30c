"""
Settings loader (``fundbook_config.loader``).

Responsibility
--------------
Reads a YAML settings file and parses it into the frozen dataclasses of
``fundbook_config.schema``. Runtime callers go through
``fundbook_config.get_active_config()``; this module is its machinery.

Invariants enforced
-------------------
* Every parsed object is a frozen dataclass from ``schema.py``.
* Keys absent from the file keep their packaged default; unknown keys are
  rejected so a typo cannot silently fall back to a default.
* Numeric tolerances and rates become ``Decimal`` via their text form.
* ``compute_checksum`` is a deterministic SHA-256 over canonical JSON.

Failure modes
-------------
* Missing file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Wrong shape, unknown key or out-of-range value  -> ``ConfigError``
  naming the dotted path of the offending key.
"""

from __future__ import annotations

import hashlib
import json
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any

import yaml

from fundbook_config.schema import (
    OPTIONAL_PAYROLL_ACCOUNT_ROLES,
    PAYROLL_ACCOUNT_ROLES,
    VALID_LOG_LEVELS,
    VALID_MATCH_STRATEGIES,
    BudgetSettings,
    FundbookSettings,
    JournalSettings,
    LoggingSettings,
    PayrollRateDefaults,
    PayrollSettings,
    ReconciliationSettings,
)
from fundbook_kernel.exceptions import ConfigError


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path) as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """SHA-256 of the canonical JSON serialization of ``data``."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode()).hexdigest()


def _section(
    data: dict[str, Any],
    key: str,
    allowed: set[str],
    parent: str = "",
) -> dict[str, Any]:
    path = f"{parent}.{key}" if parent else key
    section = data.get(key) or {}
    if not isinstance(section, dict):
        raise ConfigError(path, "expected a mapping")
    unknown = set(section) - allowed
    if unknown:
        raise ConfigError(f"{path}.{sorted(unknown)[0]}", "unknown setting")
    return section


def _decimal(value: Any, path: str, *, minimum: Decimal = Decimal("0")) -> Decimal:
    if isinstance(value, bool):
        raise ConfigError(path, f"expected a number, got {value!r}")
    try:
        result = Decimal(str(value).strip())
    except InvalidOperation:
        raise ConfigError(path, f"expected a number, got {value!r}") from None
    if not result.is_finite() or result < minimum:
        raise ConfigError(path, f"must be a finite number >= {minimum}")
    return result


def _rate(value: Any, path: str) -> Decimal:
    rate = _decimal(value, path)
    if rate > Decimal("1"):
        raise ConfigError(path, "rates are fractions between 0 and 1")
    return rate


def parse_journal(data: dict[str, Any]) -> JournalSettings:
    section = _section(data, "journal", {"balance_epsilon"})
    defaults = JournalSettings()
    return JournalSettings(
        balance_epsilon=_decimal(
            section.get("balance_epsilon", defaults.balance_epsilon),
            "journal.balance_epsilon",
        ),
    )


def parse_reconciliation(data: dict[str, Any]) -> ReconciliationSettings:
    section = _section(data, "reconciliation", {"window_days", "amount_epsilon", "strategy"})
    defaults = ReconciliationSettings()

    window = section.get("window_days", defaults.window_days)
    if isinstance(window, bool) or not isinstance(window, int) or window < 0:
        raise ConfigError("reconciliation.window_days", "must be a non-negative integer")

    strategy = str(section.get("strategy", defaults.strategy))
    if strategy not in VALID_MATCH_STRATEGIES:
        raise ConfigError(
            "reconciliation.strategy",
            f"must be one of {sorted(VALID_MATCH_STRATEGIES)}, got {strategy!r}",
        )

    return ReconciliationSettings(
        window_days=window,
        amount_epsilon=_decimal(
            section.get("amount_epsilon", defaults.amount_epsilon),
            "reconciliation.amount_epsilon",
        ),
        strategy=strategy,
    )


def parse_payroll(data: dict[str, Any]) -> PayrollSettings:
    section = _section(
        data,
        "payroll",
        {"rate_sum_tolerance", "strict_project_rates", "default_rates", "accounts"},
    )
    defaults = PayrollSettings()

    rate_fields = set(PayrollRateDefaults.__dataclass_fields__)
    rates_section = _section(section, "default_rates", rate_fields, parent="payroll")
    default_rates = PayrollRateDefaults(
        **{
            name: _rate(rates_section[name], f"payroll.default_rates.{name}")
            for name in rate_fields
            if name in rates_section
        }
    )

    roles = set(PAYROLL_ACCOUNT_ROLES) | set(OPTIONAL_PAYROLL_ACCOUNT_ROLES)
    accounts_section = _section(section, "accounts", roles, parent="payroll")
    accounts = {
        role: (str(value) if value is not None else None)
        for role, value in accounts_section.items()
    }

    strict = section.get("strict_project_rates", defaults.strict_project_rates)
    if not isinstance(strict, bool):
        raise ConfigError("payroll.strict_project_rates", "must be true or false")

    return PayrollSettings(
        rate_sum_tolerance=_decimal(
            section.get("rate_sum_tolerance", defaults.rate_sum_tolerance),
            "payroll.rate_sum_tolerance",
        ),
        strict_project_rates=strict,
        default_rates=default_rates,
        accounts=accounts,
    )


def parse_budget(data: dict[str, Any]) -> BudgetSettings:
    section = _section(data, "budget", {"over_budget_threshold_percent"})
    defaults = BudgetSettings()
    return BudgetSettings(
        over_budget_threshold_percent=_decimal(
            section.get("over_budget_threshold_percent", defaults.over_budget_threshold_percent),
            "budget.over_budget_threshold_percent",
        ),
    )


def parse_logging(data: dict[str, Any]) -> LoggingSettings:
    section = _section(data, "logging", {"level"})
    level = str(section.get("level", LoggingSettings().level)).upper()
    if level not in VALID_LOG_LEVELS:
        raise ConfigError("logging.level", f"must be one of {sorted(VALID_LOG_LEVELS)}")
    return LoggingSettings(level=level)


def parse_settings(data: dict[str, Any], source: str = "<memory>") -> FundbookSettings:
    """Parse a full settings mapping."""
    if not isinstance(data, dict):
        raise ConfigError("<root>", "expected a mapping")
    known = {"journal", "reconciliation", "payroll", "budget", "logging"}
    unknown = set(data) - known
    if unknown:
        raise ConfigError(sorted(unknown)[0], "unknown section")

    return FundbookSettings(
        journal=parse_journal(data),
        reconciliation=parse_reconciliation(data),
        payroll=parse_payroll(data),
        budget=parse_budget(data),
        logging=parse_logging(data),
        checksum=compute_checksum(data),
        source=source,
    )


def load_settings(path: Path) -> FundbookSettings:
    """Load and parse the settings file at ``path``."""
    return parse_settings(load_yaml_file(path), source=str(path))
