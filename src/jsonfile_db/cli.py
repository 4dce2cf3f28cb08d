"""Command line interface: argparse sub-commands over JsonDB, tables rendered with PrettyTable."""

from __future__ import annotations

import argparse
import json
from pathlib import Path
from typing import Any, Iterable

from prettytable import PrettyTable

from .constants import APP_NAME, ID_FIELD, METADATA_KEY, db_dir, default_db_root, log_path
from .core import JsonDB
from .decorators import handle_db_errors
from .errors import ParseError
from .utils import parse_assignment, parse_condition, parse_field_spec


def _pretty_table(headers: list[str], rows: Iterable[dict[str, Any]]) -> str:
    t = PrettyTable()
    t.field_names = headers
    for r in rows:
        t.add_row([_cell(r.get(h, "")) for h in headers])
    return t.get_string()


def _cell(value: Any) -> str:
    if isinstance(value, str):
        return value
    return json.dumps(value, ensure_ascii=False)


def _record_headers(rows: list[dict[str, Any]]) -> list[str]:
    # Stable header order: id first, then the rest alphabetical, metadata last
    headers = sorted({k for r in rows for k in r.keys()} - {ID_FIELD, METADATA_KEY})
    tail = [METADATA_KEY] if any(METADATA_KEY in r for r in rows) else []
    return [ID_FIELD, *headers, *tail]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog=APP_NAME, add_help=True)
    parser.add_argument("--root", type=Path, default=None, help="Project root (default: current directory)")
    parser.add_argument("--no-log", action="store_true", help="Do not write logs/commands.log")
    sub = parser.add_subparsers(dest="cmd", required=True)

    p_create = sub.add_parser("create-table", help="Create a table")
    p_create.add_argument("table")
    p_create.add_argument("structure", nargs="*", help="Fields as field:type[|type...]")

    p_drop = sub.add_parser("drop-table", help="Drop a table")
    p_drop.add_argument("table")

    p_truncate = sub.add_parser("truncate", help="Remove all records of a table")
    p_truncate.add_argument("table")
    p_truncate.add_argument("--yes", action="store_true", help="Confirm without asking")

    sub.add_parser("list-tables", help="List tables with their control data")

    p_insert = sub.add_parser("insert", help="Insert a record")
    p_insert.add_argument("table")
    p_insert.add_argument("pairs", nargs="*", help="Pairs field=value (values are JSON literals)")
    p_insert.add_argument("--id", default=None, help="Explicit record id (default: auto increment)")

    p_find = sub.add_parser("find", help="Show one record by id")
    p_find.add_argument("table")
    p_find.add_argument("id")

    p_select = sub.add_parser("select", help="Query records")
    p_select.add_argument("table")
    p_select.add_argument("--where", action="append", default=[], help="Condition, e.g. 'age>=18' (repeatable)")
    p_select.add_argument("--fields", default=None, help="Comma separated projection")
    p_select.add_argument("--order-by", action="append", default=[], help="'field' or 'field DESC' (repeatable)")
    p_select.add_argument("--limit", type=int, default=None)
    p_select.add_argument("--offset", type=int, default=0)
    p_select.add_argument("--count", action="store_true", help="Print only the number of matches")

    p_group = sub.add_parser("group", help="Group records and aggregate")
    p_group.add_argument("table")
    p_group.add_argument("field")
    p_group.add_argument("--where", action="append", default=[])
    p_group.add_argument("--count", action="store_true")
    p_group.add_argument("--agg", action="append", default=[], help="field:function (sum|avg|min|max)")

    p_update = sub.add_parser("update", help="Update matching records")
    p_update.add_argument("table")
    p_update.add_argument("--set", dest="set_pairs", action="append", required=True, help="field=value")
    p_update.add_argument("--where", action="append", default=[])

    p_delete = sub.add_parser("delete", help="Delete matching records")
    p_delete.add_argument("table")
    p_delete.add_argument("--where", action="append", default=[])
    p_delete.add_argument("--yes", action="store_true", help="Confirm deleting every record")

    p_export = sub.add_parser("export", help="Export the database to a JSON file")
    p_export.add_argument("path", type=Path)

    p_import = sub.add_parser("import", help="Import a database from a JSON file")
    p_import.add_argument("path", type=Path)
    p_import.add_argument("--adopt-base", action="store_true", help="Switch to the base directory stored in the file")

    return parser


@handle_db_errors
def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    root = args.root or default_db_root()
    db = JsonDB(db_dir(root), log_path=None if args.no_log else log_path(root))
    return _dispatch(db, args)


def _dispatch(db: JsonDB, args: argparse.Namespace) -> int:
    if args.cmd == "create-table":
        structure = dict(parse_field_spec(part) for part in args.structure)
        db.create_table(args.table, structure)
        print(f"Table created: {args.table}")
        return 0

    if args.cmd == "drop-table":
        if not db.drop_table(args.table):
            print(f"Table not dropped: {args.table}")
            return 1
        print(f"Table dropped: {args.table}")
        return 0

    if args.cmd == "truncate":
        if not args.yes:
            raise ParseError("truncate requires --yes")
        ok = db.select_table(args.table).truncate()
        print("Table truncated" if ok else "Truncate stopped early")
        return 0 if ok else 1

    if args.cmd == "list-tables":
        info = db.tables_info()
        if not info:
            print("No tables")
            return 0
        rows = []
        for name, control in info.items():
            structure = control.get("structure") or {}
            rows.append(
                {
                    "table": name,
                    "structure": ", ".join(f"{k}:{v}" for k, v in structure.items()),
                    "records": control.get("records_count", 0),
                    "auto_increment": control.get("auto_increment", 1),
                }
            )
        print(_pretty_table(["table", "structure", "records", "auto_increment"], rows))
        return 0

    if args.cmd == "insert":
        table = db.select_table(args.table)
        data = dict(parse_assignment(p) for p in args.pairs)
        if args.id is not None:
            if not table.insert(args.id, data):
                print(f"Record already exists: {args.id}")
                return 1
            print(f"Inserted: id={args.id}")
            return 0
        record_id = table.insert_auto(data)
        print(f"Inserted: id={record_id}")
        return 0

    if args.cmd == "find":
        record = db.select_table(args.table).find_by_id(args.id)
        if record is None:
            print("Not found")
            return 1
        print(_pretty_table(_record_headers([record]), [record]))
        return 0

    if args.cmd == "select":
        query = db.select_table(args.table).where([parse_condition(w) for w in args.where])
        if args.fields:
            query.select([f.strip() for f in args.fields.split(",") if f.strip()])
        if args.order_by:
            query.order_by(args.order_by)
        if args.limit is not None or args.offset:
            limit = args.limit if args.limit is not None else len(query.records)
            query.limit(limit, args.offset)
        if args.count:
            print(query.count_records())
            return 0
        rows = query.get_records()
        if not rows:
            print("Empty result")
            return 0
        print(_pretty_table(_record_headers(rows), rows))
        return 0

    if args.cmd == "group":
        query = db.select_table(args.table).where([parse_condition(w) for w in args.where])
        aggregate = dict(parse_field_spec(a) for a in args.agg)
        groups = query.group_by(args.field, with_count=args.count, aggregate=aggregate)
        if not groups:
            print("Empty result")
            return 0
        headers = ["key", *(["count"] if args.count else []), *(f"{fn}_{f}" for f, fn in aggregate.items())]
        print(_pretty_table(headers, groups))
        return 0

    if args.cmd == "update":
        data = dict(parse_assignment(p) for p in args.set_pairs)
        query = db.select_table(args.table).where([parse_condition(w) for w in args.where])
        matched = len(query.records)
        query.update(data)
        print(f"Updated records: {matched}")
        return 0

    if args.cmd == "delete":
        if not args.where and not args.yes:
            raise ParseError("Deleting every record requires --yes")
        query = db.select_table(args.table).where([parse_condition(w) for w in args.where])
        matched = len(query.records)
        query.delete()
        print(f"Deleted records: {matched}")
        return 0

    if args.cmd == "export":
        db.export_database(args.path)
        print(f"Exported to {args.path}")
        return 0

    if args.cmd == "import":
        if not db.import_database(args.path, adopt_base_directory=args.adopt_base):
            print(f"Nothing imported: {args.path} is missing or unreadable")
            return 1
        print(f"Imported from {args.path}")
        return 0

    raise ParseError(f"Unknown command: {args.cmd}")
