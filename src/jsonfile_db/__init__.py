"""JSON file database: tables as directories, records as JSON files."""

from .core import JsonDB
from .errors import (
    CorruptDataError,
    DBError,
    DirectoryCreationError,
    InvalidCriterionError,
    InvalidRecordIdError,
    InvalidTableNameError,
    MissingFieldError,
    QueryError,
    RecordIdMismatchError,
    RecordNotFoundError,
    StorageError,
    StructureError,
    TableAlreadyExistsError,
    TableNotFoundError,
    TypeMismatchError,
    UnknownFieldError,
    UnsupportedAggregateError,
    UnsupportedOperatorError,
)
from .query import Query
from .table import Table

__all__ = [
    "JsonDB",
    "Table",
    "Query",
    "DBError",
    "CorruptDataError",
    "DirectoryCreationError",
    "InvalidCriterionError",
    "InvalidRecordIdError",
    "InvalidTableNameError",
    "MissingFieldError",
    "QueryError",
    "RecordIdMismatchError",
    "RecordNotFoundError",
    "StorageError",
    "StructureError",
    "TableAlreadyExistsError",
    "TableNotFoundError",
    "TypeMismatchError",
    "UnknownFieldError",
    "UnsupportedAggregateError",
    "UnsupportedOperatorError",
]
