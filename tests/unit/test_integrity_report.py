"""Tests for IntegrityReport bookkeeping of skipped records."""

from fundbook_kernel.domain.integrity import (
    IntegrityReport,
    unknown_account,
    unknown_project,
)


class TestIntegrityReport:

    def test_empty_report_is_clean(self):
        report = IntegrityReport()
        assert report.is_clean
        assert report.skipped_count == 0
        assert report.summary() == "no skipped records"

    def test_skipped_count_is_per_record(self):
        report = IntegrityReport.of(
            [
                unknown_account("posting", "p1", "9999"),
                unknown_project("posting", "p1", "ghost"),
                unknown_account("posting", "p2", "9999"),
            ]
        )
        assert report.skipped_count == 2
        assert report.unknown_account_ids == frozenset({"9999"})
        assert report.unknown_project_ids == frozenset({"ghost"})

    def test_kept_records_not_counted(self):
        report = IntegrityReport.of([unknown_project("import_row", "r1", "ghost", skipped=False)])
        assert not report.is_clean
        assert report.skipped_count == 0
        assert report.summary() == "1 unknown project reference(s) dropped"

    def test_merge(self):
        a = IntegrityReport.of([unknown_account("posting", "p1", "x")])
        b = IntegrityReport.of([unknown_account("budget_line", "b1", "y")])
        merged = a.merge(b)
        assert merged.skipped_count == 2
        assert "2 record(s) skipped" in merged.summary()
