from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Mapping, Optional, Union

from .constants import ID_FIELD, METADATA_KEY
from .control import ControlFile
from .decorators import log_command
from .errors import InvalidTableNameError, StorageError, TableAlreadyExistsError, TableNotFoundError
from .schema import validate_structure_declaration
from .storage import ensure_dir, list_record_files, remove_file, table_dir, write_json
from .table import Table
from .utils import is_identifier, now_timestamp


class JsonDB:
    """File-based document store: one directory per table, one JSON file per record.
"""
    def __init__(self, directory: Union[str, Path], log_path: Optional[Path] = None):
        self.log_path = log_path
        self.current_table: Optional[Table] = None
        self._set_directory(Path(directory))

    def _set_directory(self, directory: Path) -> None:
        ensure_dir(directory)
        self.directory = directory

    def _table(self, name: str) -> Table:
        return Table(self.directory, name, log_path=self.log_path)

    # --- tables --------------------------------------------------------------

    def list_tables(self) -> list[str]:
        """Names of every sub-directory of the base directory.
"""
        return sorted(p.name for p in self.directory.iterdir() if p.is_dir())

    def tables_info(self) -> dict[str, dict[str, Any]]:
        return {name: self._table(name).control_document() for name in self.list_tables()}

    def table_exists(self, name: str) -> bool:
        return table_dir(self.directory, name).exists()

    def select_table(self, name: str) -> Table:
        if not is_identifier(name) or not table_dir(self.directory, name).is_dir():
            raise TableNotFoundError(f"Table not found: {name!r}")
        self.current_table = self._table(name)
        return self.current_table

    @log_command
    def create_table(self, name: str, structure: Mapping[str, Any]) -> Table:
        if not is_identifier(name):
            raise InvalidTableNameError(f"Invalid table name: {name!r}")
        if self.table_exists(name):
            raise TableAlreadyExistsError(f"Table already exists: {name!r}")
        cooked = validate_structure_declaration(structure)

        ensure_dir(table_dir(self.directory, name))
        ts = now_timestamp()
        ControlFile(self.directory, name).merge(
            {
                "auto_increment": 1,
                "records_count": 0,
                "structure": cooked,
                "created_at": ts,
                "updated_at": ts,
            }
        )
        return self.select_table(name)

    @log_command
    def drop_table(self, name: str) -> bool:
        """Removes the table; False if it is missing or a file could not be removed.

        Not atomic: a failure leaves the files removed so far removed.
        """
        if not is_identifier(name) or not self.table_exists(name):
            return False
        directory = table_dir(self.directory, name)
        for path in list_record_files(directory):
            if not remove_file(path):
                return False
        try:
            directory.rmdir()
        except OSError:
            return False

        control = ControlFile(self.directory, name)
        if control.exists() and not remove_file(control.path):
            return False
        if self.current_table is not None and self.current_table.name == name:
            self.current_table = None
        return True

    # --- import / export ---------------------------------------------------

    @log_command
    def export_database(self, path: Union[str, Path]) -> bool:
        tables: dict[str, Any] = {}
        for name in self.list_tables():
            table = self._table(name)
            tables[name] = {
                "control": table.control_document(),
                "records": table.all_records(),
            }
        write_json(Path(path), {"tables": tables, "base_directory": str(self.directory)})
        return True

    @log_command
    def import_database(self, path: Union[str, Path], adopt_base_directory: bool = False) -> bool:
        """
        Restores tables written by `export_database`.

        Returns False when the file is missing or is not a JSON object.
        Table names, structures and records are all checked first, and an
        existing table raises TableAlreadyExistsError; nothing is written
        (and the base directory is not switched) until every check passes.
        `records_count` is rebuilt from the replayed inserts instead of taken
        from the file.
        """
        source = Path(path)
        if not source.is_file():
            return False
        try:
            data = json.loads(source.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            return False
        if not isinstance(data, dict):
            return False

        tables = data.get("tables")
        if tables is None:
            tables = {}
        if not isinstance(tables, dict):
            raise StorageError(f"Malformed 'tables' section in {source}")

        # Everything is checked before the first write.
        prepared = {name: self._prepare_table(name, table_data) for name, table_data in tables.items()}

        directory = self.directory
        if adopt_base_directory and data.get("base_directory"):
            directory = Path(data["base_directory"])
        for name in prepared:
            if table_dir(directory, name).exists():
                raise TableAlreadyExistsError(f"Table already exists: {name!r}")

        if directory != self.directory:
            self._set_directory(directory)
            self.current_table = None

        for name, (control_doc, structure, records) in prepared.items():
            self._import_table(name, control_doc, structure, records)
        return True

    @staticmethod
    def _prepare_table(
        name: Any, table_data: Any
    ) -> tuple[Optional[dict[str, Any]], dict[str, str], list[dict[str, Any]]]:
        """Validates one exported table and returns (control, structure, records).
"""
        if not isinstance(name, str) or not is_identifier(name):
            raise InvalidTableNameError(f"Invalid table name: {name!r}")
        if not isinstance(table_data, dict):
            raise StorageError(f"Malformed table {name!r}: expected an object")

        control_doc = table_data.get("control")
        if control_doc is not None and not isinstance(control_doc, dict):
            raise StorageError(f"Malformed control document of table {name!r}")
        structure = validate_structure_declaration((control_doc or {}).get("structure") or {})

        records = table_data.get("records") or []
        if isinstance(records, dict):
            records = list(records.values())
        if not isinstance(records, list):
            raise StorageError(f"Malformed records of table {name!r}")
        for record in records:
            if not isinstance(record, dict) or ID_FIELD not in record:
                raise StorageError(f"Malformed record in table {name!r}: {record!r}")
            metadata = record.get(METADATA_KEY)
            if metadata is not None and not isinstance(metadata, dict):
                raise StorageError(f"Malformed {METADATA_KEY} of record {record[ID_FIELD]!r} in table {name!r}")
        return control_doc, structure, records

    def _import_table(
        self,
        name: str,
        control_doc: Optional[dict[str, Any]],
        structure: dict[str, str],
        records: list[dict[str, Any]],
    ) -> None:
        table = self.create_table(name, structure)

        if control_doc is not None:
            restored = dict(control_doc)
            restored["records_count"] = 0
            table.control.write(restored)

        for record in records:
            payload = {k: v for k, v in record.items() if k not in (ID_FIELD, METADATA_KEY)}
            table.insert(str(record[ID_FIELD]), payload, metadata=record.get(METADATA_KEY))
