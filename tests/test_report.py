"""
Tests for polars validation reports.
"""

import polars as pl
import pytest

from reflex_user_table.report import REPORT_SCHEMA, error_counts, validation_report, write_report
from reflex_user_table.validation import INVALID_CITY, INVALID_EMAIL, INVALID_NAME

from conftest import make_user, make_users


@pytest.fixture
def records():
    users = make_users(6)
    users[1] = make_user(1, name="999")
    users[3] = make_user(3, name=None, email="nope", address={})
    users[4] = make_user(4, email="also-bad")
    return users


class TestValidationReport:
    def test_one_row_per_problem(self, records):
        report = validation_report(records)
        assert dict(report.schema) == REPORT_SCHEMA
        assert report.rows() == [
            (1, "999", "user1@example.com", INVALID_NAME),
            (3, "N/A", "nope", INVALID_NAME),
            (3, "N/A", "nope", INVALID_EMAIL),
            (3, "N/A", "nope", INVALID_CITY),
            (4, "User 4", "also-bad", INVALID_EMAIL),
        ]

    def test_clean_records_give_empty_report(self):
        report = validation_report(make_users(3))
        assert report.height == 0
        assert report.columns == ["index", "name", "email", "error"]

    def test_error_counts(self, records):
        counts = error_counts(validation_report(records))
        assert counts.rows() == [
            (INVALID_EMAIL, 2),
            (INVALID_NAME, 2),
            (INVALID_CITY, 1),
        ]


class TestWriteReport:
    def test_csv(self, records, tmp_path):
        path = write_report(validation_report(records), tmp_path / "report.csv")
        assert pl.read_csv(path).height == 5

    def test_parquet(self, records, tmp_path):
        report = validation_report(records)
        path = write_report(report, tmp_path / "report.parquet")
        assert pl.read_parquet(path).equals(report)

    def test_unknown_extension(self, records, tmp_path):
        with pytest.raises(ValueError, match="Unsupported"):
            write_report(validation_report(records), tmp_path / "report.xlsx")
