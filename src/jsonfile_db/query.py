"""Query pipeline over one table: where -> group/order/limit -> materialize."""

from __future__ import annotations

import functools
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Mapping, Optional, Sequence

from .constants import AGGREGATE_FUNCTIONS, ID_FIELD
from .errors import QueryError, UnknownFieldError, UnsupportedAggregateError
from .utils import is_number, split_order_spec, string_form
from .where import compile_where

if TYPE_CHECKING:
    from .table import Table


def _compare_values(left: Any, right: Any) -> int:
    if is_number(left) and is_number(right):
        return (left > right) - (left < right)
    a, b = string_form(left), string_form(right)
    return (a > b) - (a < b)


@dataclass
class _Accumulator:
    total: float = 0
    count: int = 0
    minimum: Any = None
    maximum: Any = None

    def add(self, value: Any) -> None:
        self.total += value
        self.count += 1
        if self.minimum is None or value < self.minimum:
            self.minimum = value
        if self.maximum is None or value > self.maximum:
            self.maximum = value

    def result(self, function: str) -> Any:
        if function == "sum":
            return self.total
        if function == "avg":
            return self.total / self.count if self.count else 0
        if function == "min":
            return self.minimum
        return self.maximum


@dataclass
class Query:
    """
    Cursor holding the pipeline state of one table.

    `where` always re-reads the table from disk. `get_records`,
    `count_records`, `has_records` and `group_by` consume the state: after
    them the cursor is empty again until the next `where`.
    """

    table: "Table"
    records: list[dict[str, Any]] = field(default_factory=list)
    selected_fields: list[str] = field(default_factory=list)

    def _known_fields(self) -> set[str]:
        return set(self.table.structure())

    def where(self, criteria: Sequence[Any] = ()) -> "Query":
        compiled = compile_where(criteria, self._known_fields())
        self.records = [r for r in self.table.all_records() if compiled.fn(r)]
        return self

    def select(self, fields: Sequence[str] = ()) -> "Query":
        fields = list(fields)
        if not fields or fields == ["*"]:
            self.selected_fields = []
            return self
        known = self._known_fields()
        for name in fields:
            if name != ID_FIELD and name not in known:
                raise UnknownFieldError(f"Field {name!r} does not exist in the table structure")
        self.selected_fields = fields
        return self

    def order_by(self, specs: Sequence[str]) -> "Query":
        keys = [split_order_spec(spec) for spec in specs]
        if not keys:
            return self

        def _cmp(a: dict[str, Any], b: dict[str, Any]) -> int:
            for name, descending in keys:
                left, right = a.get(name), b.get(name)
                if left is None or right is None:
                    continue
                result = _compare_values(left, right)
                if result:
                    return -result if descending else result
            return 0

        # sorted() is stable, ties keep scan order
        self.records = sorted(self.records, key=functools.cmp_to_key(_cmp))
        return self

    def limit(self, count: int, offset: int = 0) -> "Query":
        if count < 0 or offset < 0:
            raise QueryError("limit and offset must not be negative")
        self.records = self.records[offset : offset + count]
        return self

    def group_by(
        self,
        field_name: str,
        with_count: bool = False,
        aggregate: Optional[Mapping[str, str]] = None,
    ) -> list[dict[str, Any]]:
        """
        Groups the current records by the string form of `field_name`.

        Each group holds `key`, `records`, optionally `count` and one
        `<function>_<field>` entry per aggregate. Only numeric values are
        accumulated. Consumes the pipeline state.
        """
        aggregate = dict(aggregate or {})
        for agg_field, function in aggregate.items():
            if function not in AGGREGATE_FUNCTIONS:
                raise UnsupportedAggregateError(
                    f"Unsupported aggregate {function!r} for {agg_field!r}. "
                    f"Allowed: {', '.join(AGGREGATE_FUNCTIONS)}"
                )

        groups: dict[str, dict[str, Any]] = {}
        accumulators: dict[str, dict[str, _Accumulator]] = {}
        for record in self.records:
            value = record.get(field_name)
            if value is None:
                continue
            key = string_form(value)
            if key not in groups:
                groups[key] = {"key": value, "records": []}
                if with_count:
                    groups[key]["count"] = 0
                accumulators[key] = {agg_field: _Accumulator() for agg_field in aggregate}

            group = groups[key]
            group["records"].append(record)
            if with_count:
                group["count"] += 1
            for agg_field, acc in accumulators[key].items():
                agg_value = record.get(agg_field)
                if is_number(agg_value):
                    acc.add(agg_value)

        result = []
        for key, group in groups.items():
            for agg_field, function in aggregate.items():
                group[f"{function}_{agg_field}"] = accumulators[key][agg_field].result(function)
            result.append(group)

        self._clear()
        return result

    def _project(self, record: dict[str, Any]) -> dict[str, Any]:
        projected = {ID_FIELD: record.get(ID_FIELD)}
        for name in self.selected_fields:
            if name in record:
                projected[name] = record[name]
        return projected

    def get_records(self) -> list[dict[str, Any]]:
        records = self.records
        if self.selected_fields:
            records = [self._project(r) for r in records]
        self._clear()
        return records

    def count_records(self) -> int:
        count = len(self.records)
        self._clear()
        return count

    def has_records(self) -> bool:
        has = bool(self.records)
        self._clear()
        return has

    def update(self, data: dict[str, Any]) -> bool:
        """Updates every record held by the cursor; returns the last result only."""
        self.table.validator().validate(data, is_insert=False)
        result = False
        for record in self.records:
            result = self.table.update_by_id(record[ID_FIELD], data)
        return result

    def delete(self) -> bool:
        """Deletes every record held by the cursor; returns the last result only."""
        result = False
        for record in self.records:
            result = self.table.delete_by_id(record[ID_FIELD])
        return result

    def _clear(self) -> None:
        self.records = []
        self.selected_fields = []
