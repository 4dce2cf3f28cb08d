from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable, Sequence

from .constants import (
    ALLOWED_OPERATORS,
    ID_FIELD,
    OPERATOR_EQUAL,
    OPERATOR_GREATER_EQUAL,
    OPERATOR_IN,
    OPERATOR_LESS_EQUAL,
    OPERATOR_LIKE,
    OPERATOR_NOT_EQUAL,
)
from .errors import InvalidCriterionError, UnsupportedOperatorError
from .utils import is_number


@dataclass(frozen=True)
class Criterion:
    """One (field, operator, value) condition.
"""
    field: str
    op: str
    value: Any


@dataclass(frozen=True)
class CompiledWhere:
    criteria: tuple[Criterion, ...]
    fn: Callable[[dict[str, Any]], bool]


def _kind(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if is_number(value):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, dict):
        return "object"
    return "other"


def _equals(left: Any, right: Any) -> bool:
    if _kind(left) != _kind(right):
        return False
    if isinstance(left, tuple) or isinstance(right, tuple):
        return list(left) == list(right)
    return left == right


def compare(left: Any, op: str, right: Any) -> bool:
    """Typed comparison of a stored value with a criterion operand.

    Operands of different kinds never match, for any operator.
    Arrays and objects only support equality checks.
    """
    if op == OPERATOR_LIKE:
        if not isinstance(left, str) or not isinstance(right, str):
            return False
        return right.casefold() in left.casefold()

    if op == OPERATOR_IN:
        return any(_equals(left, candidate) for candidate in right)

    kind = _kind(left)
    if kind != _kind(right) or kind == "other":
        return False

    if op == OPERATOR_EQUAL:
        return _equals(left, right)
    if op == OPERATOR_NOT_EQUAL:
        return not _equals(left, right)
    if kind in {"array", "object"}:
        return False
    if op == OPERATOR_GREATER_EQUAL:
        return left >= right
    if op == OPERATOR_LESS_EQUAL:
        return left <= right
    raise UnsupportedOperatorError(f"Unsupported operator: {op!r}")


def _compile_one(raw: Any, known_fields: Iterable[str]) -> Criterion:
    if not isinstance(raw, (list, tuple)):
        raise InvalidCriterionError("Each criterion must be a list")
    if len(raw) != 3:
        raise InvalidCriterionError(
            "Each criterion must be a list with 3 elements: [field, operator, value]"
        )
    field, op, value = raw

    if not isinstance(field, str):
        raise InvalidCriterionError(f"Field name must be a string, got {field!r}")
    if field != ID_FIELD and field not in known_fields:
        raise InvalidCriterionError(f"Field {field!r} does not exist in the table structure")

    if op not in ALLOWED_OPERATORS:
        raise UnsupportedOperatorError(
            f"Unsupported operator: {op!r}. Allowed operators: {', '.join(ALLOWED_OPERATORS)}"
        )
    if op == OPERATOR_LIKE and not isinstance(value, str):
        raise InvalidCriterionError(f"LIKE expects a string operand, got {value!r}")
    if op == OPERATOR_IN and not isinstance(value, (list, tuple)):
        raise InvalidCriterionError(f"IN expects a list operand, got {value!r}")

    return Criterion(field=field, op=op, value=value)


def compile_where(criteria: Sequence[Any], known_fields: Iterable[str]) -> CompiledWhere:
    """
    Validates criteria up front and builds a record predicate.

    A record matches only if every criterion matches (logical AND).
    A record without the field, or holding null in it, never matches.
    """
    known = set(known_fields)
    compiled = tuple(_compile_one(raw, known) for raw in criteria)

    def _predicate(record: dict[str, Any]) -> bool:
        for crit in compiled:
            left = record.get(crit.field)
            if left is None:
                return False
            if not compare(left, crit.op, crit.value):
                return False
        return True

    return CompiledWhere(compiled, _predicate)
