"""
Integrity -- Counting records skipped for dangling references.

A posting or budget line that points at an account or project the caller
did not supply is not a crash: its contribution is skipped and recorded
here so the caller can show "N records reference unknown accounts" next to
the computed total instead of a silently wrong number.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

from fundbook_kernel.domain.accounts import EntityId


@dataclass(frozen=True)
class IntegrityIssue:
    """One skipped record."""

    record_kind: str  # "posting" | "budget_line" | "import_row"
    record_id: str
    reference_kind: str  # "account" | "project"
    reference_id: str
    skipped: bool = True  # False: record kept, reference dropped


@dataclass(frozen=True)
class IntegrityReport:
    """Immutable collection of skipped-record issues."""

    issues: tuple[IntegrityIssue, ...] = ()

    @property
    def skipped_count(self) -> int:
        return len({(i.record_kind, i.record_id) for i in self.issues if i.skipped})

    @property
    def is_clean(self) -> bool:
        return not self.issues

    @property
    def unknown_account_ids(self) -> frozenset[str]:
        return frozenset(i.reference_id for i in self.issues if i.reference_kind == "account")

    @property
    def unknown_project_ids(self) -> frozenset[str]:
        return frozenset(i.reference_id for i in self.issues if i.reference_kind == "project")

    def merge(self, other: IntegrityReport) -> IntegrityReport:
        return IntegrityReport(issues=self.issues + other.issues)

    def summary(self) -> str:
        if self.is_clean:
            return "no skipped records"
        if not self.skipped_count:
            return f"{len(self.unknown_project_ids)} unknown project reference(s) dropped"
        return (
            f"{self.skipped_count} record(s) skipped: "
            f"{len(self.unknown_account_ids)} unknown account(s), "
            f"{len(self.unknown_project_ids)} unknown project(s)"
        )

    @classmethod
    def of(cls, issues: Iterable[IntegrityIssue]) -> IntegrityReport:
        return cls(issues=tuple(issues))


def unknown_account(record_kind: str, record_id: EntityId, account_id: EntityId) -> IntegrityIssue:
    return IntegrityIssue(
        record_kind=record_kind,
        record_id=str(record_id),
        reference_kind="account",
        reference_id=str(account_id),
    )


def unknown_project(
    record_kind: str,
    record_id: EntityId,
    project_ref: object,
    *,
    skipped: bool = True,
) -> IntegrityIssue:
    return IntegrityIssue(
        record_kind=record_kind,
        record_id=str(record_id),
        reference_kind="project",
        reference_id=str(project_ref),
        skipped=skipped,
    )
