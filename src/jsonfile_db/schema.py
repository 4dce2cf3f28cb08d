from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from .constants import RESERVED_FIELDS, SUPPORTED_TYPES, TYPE_ALIASES
from .errors import MissingFieldError, StructureError, TypeMismatchError, UnknownFieldError
from .utils import is_identifier


def type_tag(value: Any) -> str:
    """Returns the type tag of a decoded JSON value.
"""
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int):
        return "integer"
    if isinstance(value, float):
        return "float"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def canonical_type(name: str) -> str:
    name = name.strip()
    return TYPE_ALIASES.get(name, TYPE_ALIASES.get(name.lower(), name.lower()))


def split_type_spec(spec: str) -> list[str]:
    """'integer|null' -> ['integer', 'null'] (declared spelling kept)."""
    return [part.strip() for part in spec.split("|") if part.strip()]


def tag_matches(declared: str, actual: str) -> bool:
    expected = canonical_type(declared)
    if expected == actual:
        return True
    return expected == "number" and actual in {"integer", "float"}


def validate_structure_declaration(structure: Mapping[str, Any]) -> dict[str, str]:
    """Checks a structure given to create_table and returns it as a plain dict.
"""
    if not isinstance(structure, Mapping):
        raise StructureError("Structure must be a mapping of field -> type")
    cooked: dict[str, str] = {}
    for field, spec in structure.items():
        if not isinstance(field, str) or not is_identifier(field):
            raise StructureError(f"Invalid field name: {field!r}")
        if field in RESERVED_FIELDS:
            raise StructureError(f"Field {field!r} is reserved")
        if not isinstance(spec, str) or not split_type_spec(spec):
            raise StructureError(f"Type of field {field!r} must be a non-empty string")
        for alternative in split_type_spec(spec):
            if canonical_type(alternative) not in SUPPORTED_TYPES:
                raise StructureError(f"Unsupported type for field {field!r}: {alternative!r}")
        cooked[field] = spec
    return cooked


@dataclass(frozen=True)
class StructureValidator:
    """Checks record payloads against a table structure.
"""
    structure: dict[str, str]

    def validate(self, data: Mapping[str, Any], is_insert: bool = False) -> None:
        if is_insert:
            for field in self.structure:
                if field not in data:
                    raise MissingFieldError(f"Missing required property: {field!r}")

        for field, value in data.items():
            if field not in self.structure:
                raise UnknownFieldError(f"{field!r} does not exist in the table")

            alternatives = split_type_spec(self.structure[field])
            actual = type_tag(value)
            if not any(tag_matches(alt, actual) for alt in alternatives):
                expected = "', '".join(alternatives)
                raise TypeMismatchError(
                    f"Invalid data type for {field!r}. Expected one of: '{expected}' and received '{actual}'"
                )
