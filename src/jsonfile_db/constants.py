from __future__ import annotations

from pathlib import Path

APP_NAME = "jsonfile-db"

# Runtime artifacts (must be ignored in git)
DB_DIRNAME = "db"
LOG_DIRNAME = "logs"
LOG_FILENAME = "commands.log"

RECORD_SUFFIX = ".json"
CONTROL_FILE_SUFFIX = ".control.json"
METADATA_KEY = "_metadata"
ID_FIELD = "id"

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

OPERATOR_EQUAL = "=="
OPERATOR_NOT_EQUAL = "!="
OPERATOR_GREATER_EQUAL = ">="
OPERATOR_LESS_EQUAL = "<="
OPERATOR_LIKE = "LIKE"
OPERATOR_IN = "IN"

ALLOWED_OPERATORS: tuple[str, ...] = (
    OPERATOR_EQUAL,
    OPERATOR_NOT_EQUAL,
    OPERATOR_GREATER_EQUAL,
    OPERATOR_LESS_EQUAL,
    OPERATOR_LIKE,
    OPERATOR_IN,
)

AGGREGATE_FUNCTIONS: tuple[str, ...] = ("sum", "avg", "min", "max")

ORDER_DESC = "DESC"
ORDER_ASC = "ASC"

# Canonical type tags of JSON values.
SUPPORTED_TYPES: tuple[str, ...] = (
    "string",
    "integer",
    "float",
    "number",
    "boolean",
    "array",
    "object",
    "null",
)

TYPE_ALIASES: dict[str, str] = {
    "str": "string",
    "int": "integer",
    "double": "float",
    "bool": "boolean",
    "list": "array",
    "dict": "object",
    "NULL": "null",
    "none": "null",
}

RESERVED_FIELDS = frozenset({ID_FIELD, METADATA_KEY})


def default_db_root() -> Path:
    """Directory relative to which the database and logs live.
"""
    return Path.cwd()


def db_dir(root: Path) -> Path:
    """Base directory of the database (db/).
"""
    return root / DB_DIRNAME


def log_dir(root: Path) -> Path:
    return root / LOG_DIRNAME


def log_path(root: Path) -> Path:
    """Path to the command log (logs/commands.log).
"""
    return log_dir(root) / LOG_FILENAME
