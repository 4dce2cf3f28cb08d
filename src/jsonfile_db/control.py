"""Per-table control document: schema, id sequence and record counter."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .storage import control_path, read_json_object, write_json
from .utils import now_timestamp


def default_control() -> dict[str, Any]:
    ts = now_timestamp()
    return {
        "auto_increment": 1,
        "records_count": 0,
        "structure": {},
        "created_at": ts,
        "updated_at": ts,
    }


@dataclass(frozen=True)
class ControlFile:
    """Reads and writes <base>/<table>.control.json.

    A missing file reads as the default document, which is only persisted
    by the next write. Every write replaces the whole document.
    """

    base: Path
    table: str

    @property
    def path(self) -> Path:
        return control_path(self.base, self.table)

    def exists(self) -> bool:
        return self.path.exists()

    def read(self) -> dict[str, Any]:
        doc = read_json_object(self.path)
        if doc is None:
            return default_control()
        return doc

    def write(self, doc: dict[str, Any]) -> None:
        write_json(self.path, doc)

    def merge(self, partial: dict[str, Any]) -> dict[str, Any]:
        """Shallow-merges `partial` over the stored document and writes the result back.
"""
        doc = self.read()
        doc.update(partial)
        self.write(doc)
        return doc

    def structure(self) -> dict[str, str]:
        return dict(self.read().get("structure") or {})

    def records_count(self) -> int:
        return int(self.read().get("records_count", 0))

    def next_auto_increment(self) -> int:
        """Returns the id to use now and persists the following one."""
        next_id = int(self.read().get("auto_increment", 1))
        self.merge({"auto_increment": next_id + 1})
        return next_id

    def increment_records(self) -> None:
        self.merge({"records_count": self.records_count() + 1})

    def decrement_records(self) -> None:
        self.merge({"records_count": max(0, self.records_count() - 1)})

    def reset_counters(self) -> None:
        self.merge({"auto_increment": 1, "records_count": 0})
