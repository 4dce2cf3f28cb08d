from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any, Optional, Sequence, Union

from .constants import ID_FIELD, METADATA_KEY
from .control import ControlFile
from .decorators import log_command
from .errors import InvalidRecordIdError, RecordIdMismatchError, RecordNotFoundError, TableNotFoundError
from .schema import StructureValidator
from .storage import encode_record, list_record_files, load_records, read_json_object, record_path, remove_file, table_dir, write_json
from .utils import is_valid_record_id, now_timestamp

if TYPE_CHECKING:
    from .query import Query

RecordId = Union[str, int]


@dataclass
class Table:
    """Handle to one table: record files plus the control document.

    Mutations go straight to disk through the structure validator and the
    control file; reads through `query()` build an in-memory pipeline.
    """

    base: Path
    name: str
    log_path: Optional[Path] = field(default=None, repr=False)

    @property
    def control(self) -> ControlFile:
        return ControlFile(self.base, self.name)

    @property
    def directory(self) -> Path:
        return table_dir(self.base, self.name)

    def structure(self) -> dict[str, str]:
        return self.control.structure()

    def control_document(self) -> dict[str, Any]:
        return self.control.read()

    def records_count(self) -> int:
        """Persisted record counter (not a directory scan).
"""
        return self.control.records_count()

    def validator(self) -> StructureValidator:
        return StructureValidator(self.structure())

    def query(self) -> "Query":
        from .query import Query

        return Query(self)

    def where(self, criteria: Sequence[Any] = ()) -> "Query":
        return self.query().where(criteria)

    def all_records(self) -> list[dict[str, Any]]:
        self._ensure_exists()
        return load_records(self.directory)

    def _ensure_exists(self) -> None:
        if not self.directory.is_dir():
            raise TableNotFoundError(f"Table not found: {self.name!r}")

    def _path(self, record_id: RecordId) -> Path:
        record_id = str(record_id)
        if not is_valid_record_id(record_id):
            raise InvalidRecordIdError(f"Invalid record id: {record_id!r}")
        return record_path(self.base, self.name, record_id)

    # --- reads -------------------------------------------------------------

    def exists_by_id(self, record_id: RecordId) -> bool:
        return self._path(record_id).exists()

    def find_by_id(self, record_id: RecordId) -> Optional[dict[str, Any]]:
        record = read_json_object(self._path(record_id))
        if record is None:
            return None
        if ID_FIELD in record and record[ID_FIELD] != str(record_id):
            raise RecordIdMismatchError(
                f"Record id {record[ID_FIELD]!r} does not match requested id {str(record_id)!r}"
            )
        return record

    # --- writes ------------------------------------------------------------

    @log_command
    def insert_auto(self, data: dict[str, Any]) -> Union[str, bool]:
        """Inserts with the next auto-increment id; returns the id or False.
"""
        self._ensure_exists()
        self.validator().validate(data, is_insert=True)
        record_id = str(self.control.next_auto_increment())
        if self._insert(record_id, data):
            return record_id
        return False

    @log_command
    def insert(
        self,
        record_id: RecordId,
        data: dict[str, Any],
        metadata: Optional[dict[str, Any]] = None,
    ) -> bool:
        """Writes a new record file. Returns False if the id is already taken.

        `metadata` restores stored timestamps (used by import).
        """
        return self._insert(str(record_id), data, metadata)

    def _insert(
        self,
        record_id: str,
        data: dict[str, Any],
        metadata: Optional[dict[str, Any]] = None,
    ) -> bool:
        self._ensure_exists()
        self.validator().validate(data, is_insert=True)
        path = self._path(record_id)
        if path.exists():
            return False

        ts = now_timestamp()
        meta = metadata if isinstance(metadata, dict) else {}
        record = encode_record(
            record_id,
            data,
            created_at=meta.get("created_at", ts),
            updated_at=meta.get("updated_at", ts),
        )
        write_json(path, record)
        self.control.increment_records()
        return True

    @log_command
    def update_by_id(self, record_id: RecordId, data: dict[str, Any]) -> bool:
        """Shallow-merges `data` over the stored record.

        Only supplied fields are validated; `created_at` is kept and
        `updated_at` refreshed.
        """
        path = self._path(record_id)
        if not path.exists():
            raise RecordNotFoundError(f"Record not found: {str(record_id)!r}")

        existing = self.find_by_id(record_id) or {}
        self.validator().validate(data, is_insert=False)

        merged = {**existing, **data}
        metadata = dict(existing.get(METADATA_KEY) or {})
        metadata["updated_at"] = now_timestamp()
        merged[ID_FIELD] = str(record_id)
        merged[METADATA_KEY] = metadata
        write_json(path, merged)
        return True

    @log_command
    def delete_by_id(self, record_id: RecordId) -> bool:
        path = self._path(record_id)
        if not path.exists():
            return False
        removed = remove_file(path)
        if removed:
            self.control.decrement_records()
        return removed

    @log_command
    def truncate(self) -> bool:
        """Removes every record and resets the counters; structure is kept.

        Stops at the first file that cannot be removed and returns False,
        files removed before that stay removed.
        """
        self._ensure_exists()
        for path in list_record_files(self.directory):
            if not remove_file(path):
                return False
        self.control.reset_counters()
        return True
