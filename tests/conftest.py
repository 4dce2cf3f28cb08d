from __future__ import annotations

import pytest

from jsonfile_db import JsonDB


@pytest.fixture
def db(tmp_path):
    return JsonDB(tmp_path / "db")


@pytest.fixture
def users(db):
    return db.create_table("users", {"name": "string", "age": "integer", "email": "string|null"})


@pytest.fixture
def orders(db):
    table = db.create_table("orders", {"status": "string", "amount": "number"})
    table.insert_auto({"status": "A", "amount": 10})
    table.insert_auto({"status": "A", "amount": 5})
    table.insert_auto({"status": "B", "amount": 2})
    return table
