"""
Tests for LocalCsvSource.
"""

import pytest

from sprint_tracker.venues.google_sheets_client import SheetClientError, SheetNotFoundError
from sprint_tracker.venues.local_csv_source import LocalCsvSource


def test_fetch_table_reads_file(tmp_path):
    (tmp_path / "MEMBERS.csv").write_text("id,name\navi,Avi\n", encoding="utf-8")

    source = LocalCsvSource(tmp_path)

    assert source.fetch_table("MEMBERS") == "id,name\navi,Avi\n"
    assert source.path_for("MEMBERS") == tmp_path / "MEMBERS.csv"


def test_fetch_table_strips_byte_order_mark(tmp_path):
    (tmp_path / "TASKS.csv").write_text("\ufeffid,title\n", encoding="utf-8")

    assert LocalCsvSource(tmp_path).fetch_table("TASKS") == "id,title\n"


def test_fetch_table_missing_file(tmp_path):
    with pytest.raises(SheetNotFoundError, match="MILESTONES"):
        LocalCsvSource(tmp_path).fetch_table("MILESTONES")


def test_fetch_table_undecodable_file(tmp_path):
    (tmp_path / "TASKS.csv").write_bytes(b"\xff\xfe\xfa broken")

    with pytest.raises(SheetClientError):
        LocalCsvSource(tmp_path).fetch_table("TASKS")


def test_sample_directory_has_all_tables(sample_data_dir):
    source = LocalCsvSource(sample_data_dir)

    for table in ("SPRINT_CONFIG", "MEMBERS", "TASKS", "MILESTONES"):
        assert source.fetch_table(table).strip()
