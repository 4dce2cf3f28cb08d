from __future__ import annotations

import datetime as _dt
import json
import re
from typing import Any

from .constants import ORDER_ASC, ORDER_DESC, TIMESTAMP_FORMAT
from .errors import ParseError, QueryError

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_RECORD_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def now_timestamp() -> str:
    """Current local time as 'YYYY-MM-DD HH:MM:SS'.
"""
    return _dt.datetime.now().strftime(TIMESTAMP_FORMAT)


def is_identifier(name: str) -> bool:
    return bool(_IDENTIFIER_RE.match(name))


def is_valid_record_id(record_id: str) -> bool:
    """Record ids become file names, so path separators and dots are rejected.
"""
    return bool(_RECORD_ID_RE.match(record_id))


def is_number(value: Any) -> bool:
    # bool is a subclass of int but never counts as a number here
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def string_form(value: Any) -> str:
    """Stable text form of a JSON value used for grouping and text ordering.
"""
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False, sort_keys=True)


def split_order_spec(spec: str) -> tuple[str, bool]:
    """Parses 'field', 'field ASC' or 'field DESC' into (field, descending)."""
    parts = spec.strip().split()
    if not parts:
        raise QueryError("Empty order spec")
    if len(parts) == 2 and parts[1].upper() in {ORDER_ASC, ORDER_DESC}:
        return parts[0], parts[1].upper() == ORDER_DESC
    if len(parts) == 1:
        return parts[0], False
    raise QueryError(f"Expected 'field [ASC|DESC]', got: {spec!r}")


def parse_literal(raw: str) -> Any:
    """Parses a command line value as a JSON literal, falling back to plain text.

    Quoted input is always text: ``"42"`` stays the string ``42``.
    """
    raw = raw.strip()
    if len(raw) >= 2 and raw[0] == raw[-1] and raw[0] in {"'", '"'}:
        return raw[1:-1]
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def parse_assignment(expr: str) -> tuple[str, Any]:
    """Parses field=value and returns (field, parsed value).
"""
    if "=" not in expr:
        raise ParseError(f"Expected <field=value>, got: {expr!r}")
    field, raw = expr.split("=", 1)
    field = field.strip()
    if not is_identifier(field):
        raise ParseError(f"Invalid field name: {field!r}")
    return field, parse_literal(raw)


def parse_field_spec(spec: str) -> tuple[str, str]:
    """Parses field:type (type may hold alternatives, e.g. age:integer|null)."""
    if ":" not in spec:
        raise ParseError(f"Expected <field:type>, got: {spec!r}")
    field, type_spec = spec.split(":", 1)
    field = field.strip()
    type_spec = type_spec.strip()
    if not field or not type_spec:
        raise ParseError(f"Expected <field:type>, got: {spec!r}")
    return field, type_spec


def parse_condition(expr: str) -> list[Any]:
    """Parses one condition like 'age>=30', 'name LIKE ali' or 'id IN [1,2]'."""
    expr = expr.strip()
    for keyword in ("LIKE", "IN"):
        match = re.match(rf"^(\w+)\s+{keyword}\s+(.+)$", expr, flags=re.IGNORECASE)
        if match:
            return [match.group(1), keyword, parse_literal(match.group(2))]
    # Order matters: check longest operators first. A single "=" means "==".
    for op in (">=", "<=", "!=", "==", "="):
        if op in expr:
            field, raw = expr.split(op, 1)
            field = field.strip()
            if not field or not raw.strip():
                raise ParseError(f"Incomplete condition: {expr!r}")
            return [field, "==" if op == "=" else op, parse_literal(raw)]
    raise ParseError(f"Could not parse condition: {expr!r}")
