"""
Unit tests for the backup writer
"""

import json
from datetime import datetime, timezone

import pytest
from core.exceptions import PersistenceError
from ingestion.loaders.backup_writer import BackupWriter, run_timestamp
from ingestion.transformers.projector import TableProjector
from schemas.table import Table


class TestBackupWriter:
    """Test raw and tabular artifact writing"""

    def test_run_timestamp_format(self):
        """Test the filesystem-safe ISO-8601 stamp"""
        stamp = run_timestamp(datetime(2024, 1, 15, 10, 30, 5, tzinfo=timezone.utc))

        assert stamp == "20240115T103005Z"

    def test_write_raw_round_trip(self, tmp_path, sample_pages):
        """Test that the raw artifact re-parses into the same records"""
        writer = BackupWriter(tmp_path, timestamp="20240115T103005Z")

        path = writer.write_raw("users", sample_pages)

        assert path.name == "20240115T103005Z-users.json"
        assert writer.read_raw(path) == sample_pages
        assert list(json.loads(path.read_text(encoding="utf-8"))[0]) == list(sample_pages[0])

    def test_write_raw_keeps_unicode(self, tmp_path, page_factory):
        """Test that non-ASCII text is written as UTF-8, not escaped"""
        writer = BackupWriter(tmp_path, timestamp="t")

        path = writer.write_raw("users", [page_factory("r1", name="Анна")])

        assert "Анна" in path.read_text(encoding="utf-8")

    def test_write_table(self, tmp_path):
        """Test tab-separated header and rows"""
        writer = BackupWriter(tmp_path, timestamp="t")
        table = Table(header=["Name", "Email", "id", "url"], rows=[["Ann", "", "r1", "u1"], ["Bob", "b@x", "r2", "u2"]])

        path = writer.write_table("users", table)

        assert path.name == "t-users.tsv"
        assert path.read_bytes().decode("utf-8") == "Name\tEmail\tid\turl\nAnn\t\tr1\tu1\nBob\tb@x\tr2\tu2\n"

    def test_tsv_lines_align_with_header(self, tmp_path, sample_pages):
        """Test that every TSV line splits into as many fields as the header"""
        writer = BackupWriter(tmp_path, timestamp="t")
        sample_pages[1]["properties"]["Name"]["title"][0]["plain_text"] = "multi\nline\ttext"

        path = writer.write_table("users", TableProjector().project(sample_pages))

        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 4
        assert {len(line.split("\t")) for line in lines} == {4}

    def test_never_overwrites(self, tmp_path, sample_pages):
        """Test that writing the same artifact twice fails instead of overwriting"""
        writer = BackupWriter(tmp_path, timestamp="t")
        path = writer.write_raw("users", sample_pages)

        with pytest.raises(PersistenceError) as exc_info:
            writer.write_raw("users", [])

        assert exc_info.value.context["path"] == str(path)
        assert writer.read_raw(path) == sample_pages

    def test_write_to_missing_directory(self, tmp_path):
        """Test that I/O failures become PersistenceError"""
        writer = BackupWriter(tmp_path / "missing", timestamp="t")

        with pytest.raises(PersistenceError) as exc_info:
            writer.write_raw("users", [])

        assert exc_info.value.context["collection"] == "users"

    def test_prepare_directories(self, tmp_path):
        """Test that data and log directories are created idempotently"""
        writer = BackupWriter(tmp_path / "data", timestamp="t", logs_dir=tmp_path / "logs")

        writer.prepare_directories()
        writer.prepare_directories()

        assert (tmp_path / "data").is_dir()
        assert (tmp_path / "logs").is_dir()
        assert writer.log_path() == tmp_path / "logs" / "t.log"

    def test_read_raw_rejects_non_list(self, tmp_path):
        """Test that a raw artifact must hold a list"""
        path = tmp_path / "bad.json"
        path.write_text('{"results": []}', encoding="utf-8")

        with pytest.raises(PersistenceError):
            BackupWriter.read_raw(path)

    def test_read_raw_missing_file(self, tmp_path):
        with pytest.raises(PersistenceError):
            BackupWriter.read_raw(tmp_path / "nope.json")

    def test_tsv_header_with_awkward_property_names(self, tmp_path, page_factory):
        """Test that a property name containing a tab keeps the header's field count"""
        page = page_factory("r1", **{"Due\tDate": {"type": "date", "date": {"start": "2024-01-15"}}})
        writer = BackupWriter(tmp_path, timestamp="t")

        path = writer.write_table("users", TableProjector().project([page]))

        lines = path.read_text(encoding="utf-8").splitlines()
        assert len(lines) == 2
        assert [len(line.split("\t")) for line in lines] == [5, 5]
        assert lines[0].split("\t")[2] == "Due\\tDate"
