"""
fundbook_config -- single public entrypoint for settings.

Responsibility:
    ``get_active_config()`` is the ONLY way services obtain settings. It
    reads the packaged ``defaults.yaml`` (or a caller-supplied file),
    parses it into frozen dataclasses and emits a FUNDBOOK_CONFIG_TRACE
    record.

Architecture position:
    Configuration -- sits above ``fundbook_kernel`` and below
    ``fundbook_modules``. The kernel and engines never import from here;
    modules receive settings objects as constructor arguments.

Invariants enforced:
    - Same file contents always produce the same checksum.
    - Settings objects are immutable.

Failure modes:
    - FileNotFoundError for a missing override file.
    - yaml.YAMLError for malformed YAML.
    - ConfigError for wrong shapes, unknown keys or out-of-range values.

Audit relevance:
    The FUNDBOOK_CONFIG_TRACE record carries the source path and checksum,
    tying every computed result back to the settings that governed it.
"""

from __future__ import annotations

from pathlib import Path

from fundbook_config.loader import compute_checksum, load_settings, parse_settings
from fundbook_config.schema import (
    PAYROLL_ACCOUNT_ROLES,
    BudgetSettings,
    FundbookSettings,
    JournalSettings,
    LoggingSettings,
    PayrollRateDefaults,
    PayrollSettings,
    ReconciliationSettings,
)
from fundbook_kernel.logging_config import get_logger

_logger = get_logger("config")

DEFAULTS_PATH = Path(__file__).parent / "defaults.yaml"


def get_active_config(path: Path | str | None = None) -> FundbookSettings:
    """The ONLY public settings entrypoint.

    Args:
        path: Override settings file. Defaults to the packaged
            ``defaults.yaml``.

    Raises:
        FileNotFoundError: If ``path`` does not exist.
        ConfigError: If the file fails validation.
    """
    settings = load_settings(Path(path) if path is not None else DEFAULTS_PATH)

    _logger.info(
        "FUNDBOOK_CONFIG_TRACE",
        extra={
            "trace_type": "FUNDBOOK_CONFIG_TRACE",
            "source": settings.source,
            "checksum": settings.checksum,
            "match_strategy": settings.reconciliation.strategy,
            "strict_project_rates": settings.payroll.strict_project_rates,
            "configured_payroll_accounts": sorted(
                role for role, account in settings.payroll.accounts.items() if account
            ),
        },
    )
    return settings


__all__ = [
    "DEFAULTS_PATH",
    "PAYROLL_ACCOUNT_ROLES",
    "BudgetSettings",
    "FundbookSettings",
    "JournalSettings",
    "LoggingSettings",
    "PayrollRateDefaults",
    "PayrollSettings",
    "ReconciliationSettings",
    "compute_checksum",
    "get_active_config",
    "load_settings",
    "parse_settings",
]
