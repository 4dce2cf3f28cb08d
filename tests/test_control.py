"""Tests for the per-table control document."""

import json

import pytest

from jsonfile_db.control import ControlFile
from jsonfile_db.errors import CorruptDataError


class TestControlFile:
    def test_missing_file_reads_default_without_writing(self, tmp_path):
        control = ControlFile(tmp_path, "ghost")
        doc = control.read()
        assert doc["auto_increment"] == 1
        assert doc["records_count"] == 0
        assert doc["structure"] == {}
        assert not control.path.exists()

    def test_path_is_sibling_of_table_directory(self, tmp_path):
        control = ControlFile(tmp_path, "users")
        assert control.path == tmp_path / "users.control.json"

    def test_merge_keeps_other_fields(self, tmp_path):
        control = ControlFile(tmp_path, "users")
        control.write({"auto_increment": 7, "records_count": 3, "structure": {"a": "string"}})
        merged = control.merge({"records_count": 4})
        assert merged == {"auto_increment": 7, "records_count": 4, "structure": {"a": "string"}}
        assert json.loads(control.path.read_text(encoding="utf-8")) == merged

    def test_next_auto_increment_persists_following_id(self, tmp_path):
        control = ControlFile(tmp_path, "users")
        assert control.next_auto_increment() == 1
        assert control.next_auto_increment() == 2
        assert control.read()["auto_increment"] == 3

    def test_decrement_is_floored_at_zero(self, tmp_path):
        control = ControlFile(tmp_path, "users")
        control.decrement_records()
        assert control.records_count() == 0
        control.increment_records()
        control.increment_records()
        control.decrement_records()
        assert control.records_count() == 1

    def test_reset_counters_keeps_structure(self, tmp_path):
        control = ControlFile(tmp_path, "users")
        control.write({"auto_increment": 9, "records_count": 8, "structure": {"a": "string"}})
        control.reset_counters()
        doc = control.read()
        assert doc["auto_increment"] == 1
        assert doc["records_count"] == 0
        assert doc["structure"] == {"a": "string"}

    def test_corrupt_file_raises(self, tmp_path):
        control = ControlFile(tmp_path, "users")
        control.path.write_text("{not json", encoding="utf-8")
        with pytest.raises(CorruptDataError):
            control.read()

    def test_non_object_json_is_corrupt(self, tmp_path):
        control = ControlFile(tmp_path, "users")
        control.path.write_text("[1, 2]", encoding="utf-8")
        with pytest.raises(CorruptDataError):
            control.read()
