"""Domain exceptions of the JSON file database."""

from __future__ import annotations


class DBError(Exception):
    """Base class for all domain errors."""


class DirectoryCreationError(DBError):
    """Base or table directory could not be created.
"""


class TableAlreadyExistsError(DBError):
    """Table already exists.
"""


class TableNotFoundError(DBError):
    """Table not found.
"""


class RecordNotFoundError(DBError):
    """Record not found.
"""


class RecordIdMismatchError(DBError):
    """The id stored inside a record file disagrees with its file name."""


class StructureError(DBError):
    """Invalid table structure declaration.
"""


class MissingFieldError(StructureError):
    pass


class UnknownFieldError(StructureError):
    pass


class TypeMismatchError(StructureError):
    pass


class QueryError(DBError):
    """Invalid query pipeline call.
"""


class InvalidCriterionError(QueryError):
    pass


class UnsupportedOperatorError(QueryError):
    pass


class UnsupportedAggregateError(QueryError):
    pass


class StorageError(DBError):
    """Failed to read or write the file storage.
"""


class CorruptDataError(StorageError):
    """A file exists but does not hold valid JSON of the expected shape."""


class InvalidTableNameError(DBError):
    pass


class InvalidRecordIdError(DBError):
    """Record id cannot be used as a file name.
"""


class ParseError(DBError):
    """Failed to parse a command line argument.
"""
