"""Tests for the record mutation path."""

import json

import pytest

from jsonfile_db.errors import (
    CorruptDataError,
    InvalidRecordIdError,
    MissingFieldError,
    RecordIdMismatchError,
    RecordNotFoundError,
    TypeMismatchError,
)


def _alice():
    return {"name": "Alice", "age": 30, "email": "alice@example.com"}


class TestInsert:
    def test_insert_auto_sequential_ids(self, users):
        ids = [users.insert_auto({"name": f"u{i}", "age": i, "email": None}) for i in range(5)]
        assert ids == ["1", "2", "3", "4", "5"]
        assert users.records_count() == 5

    def test_record_file_layout(self, users):
        users.insert_auto(_alice())
        stored = json.loads((users.directory / "1.json").read_text(encoding="utf-8"))
        assert stored["id"] == "1"
        assert stored["name"] == "Alice"
        assert set(stored["_metadata"]) == {"created_at", "updated_at"}

    def test_insert_existing_id_returns_false(self, users):
        assert users.insert("x1", _alice()) is True
        assert users.insert("x1", _alice()) is False
        assert users.records_count() == 1

    def test_missing_field_writes_nothing(self, users):
        with pytest.raises(MissingFieldError):
            users.insert("1", {"name": "Alice", "age": 30})
        assert not users.exists_by_id("1")
        assert users.records_count() == 0

    def test_type_mismatch(self, users):
        with pytest.raises(TypeMismatchError):
            users.insert_auto({"name": "Alice", "age": "30", "email": None})

    def test_invalid_id(self, users):
        with pytest.raises(InvalidRecordIdError):
            users.insert("../x", _alice())


class TestFind:
    def test_find_by_id(self, users):
        users.insert_auto(_alice())
        assert users.find_by_id("1")["name"] == "Alice"
        assert users.find_by_id(1)["name"] == "Alice"
        assert users.find_by_id("2") is None

    def test_id_mismatch(self, users):
        users.insert_auto(_alice())
        path = users.directory / "1.json"
        record = json.loads(path.read_text(encoding="utf-8"))
        record["id"] = "7"
        path.write_text(json.dumps(record), encoding="utf-8")
        with pytest.raises(RecordIdMismatchError):
            users.find_by_id("1")

    def test_corrupt_record(self, users):
        (users.directory / "3.json").write_text("{", encoding="utf-8")
        with pytest.raises(CorruptDataError):
            users.find_by_id("3")


class TestUpdate:
    def test_update_merges_and_keeps_created_at(self, users):
        users.insert_auto(_alice())
        before = users.find_by_id("1")
        assert users.update_by_id("1", {"age": 31}) is True
        after = users.find_by_id("1")
        assert after["age"] == 31
        assert after["name"] == "Alice"
        assert after["_metadata"]["created_at"] == before["_metadata"]["created_at"]

    def test_update_missing_record(self, users):
        with pytest.raises(RecordNotFoundError):
            users.update_by_id("9", {"age": 1})

    def test_update_validates_types(self, users):
        users.insert_auto(_alice())
        with pytest.raises(TypeMismatchError):
            users.update_by_id("1", {"age": "old"})
        assert users.find_by_id("1")["age"] == 30


class TestDelete:
    def test_delete_decrements_count(self, users):
        users.insert_auto(_alice())
        users.insert_auto(_alice())
        assert users.delete_by_id("1") is True
        assert users.records_count() == 1
        assert not users.exists_by_id("1")
        assert users.find_by_id("1") is None

    def test_delete_missing_is_noop(self, users):
        users.insert_auto(_alice())
        assert users.delete_by_id("5") is False
        assert users.records_count() == 1

    def test_ids_are_not_reused(self, users):
        users.insert_auto(_alice())
        users.insert_auto(_alice())
        users.delete_by_id("2")
        assert users.insert_auto(_alice()) == "3"
