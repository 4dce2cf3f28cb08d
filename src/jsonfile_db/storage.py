from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

from .constants import CONTROL_FILE_SUFFIX, ID_FIELD, METADATA_KEY, RECORD_SUFFIX
from .errors import CorruptDataError, DirectoryCreationError, StorageError


def read_json(path: Path, *, default: Any) -> Any:
    if not path.exists():
        return default
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        raise CorruptDataError(f"Invalid JSON in {path}: {exc.msg}") from exc
    except (OSError, UnicodeDecodeError) as exc:
        raise StorageError(f"Could not read JSON: {path}") from exc


def read_json_object(path: Path) -> Optional[dict[str, Any]]:
    """Reads a JSON file that must hold an object; None if the file is missing.
"""
    data = read_json(path, default=None)
    if data is None:
        return None
    if not isinstance(data, dict):
        raise CorruptDataError(f"Expected a JSON object in {path}")
    return data


def write_json(path: Path, payload: Any) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(path.suffix + ".tmp")
        tmp.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
        tmp.replace(path)
    except OSError as exc:
        raise StorageError(f"Could not write JSON: {path}") from exc


def ensure_dir(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise DirectoryCreationError(f"Could not create directory: {path}") from exc


def remove_file(path: Path) -> bool:
    """Unlinks a file and reports success instead of raising.
"""
    try:
        path.unlink()
    except OSError:
        return False
    return True


def table_dir(base: Path, table: str) -> Path:
    return base / table


def control_path(base: Path, table: str) -> Path:
    """Control file lives next to the table directory: <base>/<table>.control.json.
"""
    return base / f"{table}{CONTROL_FILE_SUFFIX}"


def record_path(base: Path, table: str, record_id: str) -> Path:
    return table_dir(base, table) / f"{record_id}{RECORD_SUFFIX}"


def _id_sort_key(path: Path) -> tuple[int, int, str]:
    stem = path.name[: -len(RECORD_SUFFIX)]
    if stem.isdigit():
        return (0, int(stem), stem)
    return (1, 0, stem)


def list_record_files(directory: Path) -> list[Path]:
    """Record files of a table in scan order: numeric ids first, then the rest.
"""
    if not directory.is_dir():
        return []
    files = [p for p in directory.iterdir() if p.is_file() and p.name.endswith(RECORD_SUFFIX)]
    return sorted(files, key=_id_sort_key)


def encode_record(record_id: str, data: dict[str, Any], created_at: str, updated_at: str) -> dict[str, Any]:
    """Builds the stored document: payload fields plus id and _metadata."""
    record = dict(data)
    record[ID_FIELD] = record_id
    record[METADATA_KEY] = {"created_at": created_at, "updated_at": updated_at}
    return record


def load_records(directory: Path) -> list[dict[str, Any]]:
    """Reads every record of a table directory in scan order.
"""
    records: list[dict[str, Any]] = []
    for path in list_record_files(directory):
        record = read_json_object(path)
        if record is not None:
            records.append(record)
    return records
