"""CLI entrypoint for salesgrid."""

import argparse
import json
import logging
import shlex
import sys
from pathlib import Path
from typing import Dict, List, Optional

from salesgrid.api.table_api import TableSnapshot, TableView
from salesgrid.config.loader import get_filter_fields, load_config
from salesgrid.query.actions import Action, ClearAction, SortAction, parse_action
from salesgrid.query.sorting import SortDirection
from salesgrid.query.state import TableState
from salesgrid.retrieval.client import FetchError
from salesgrid.utils.logging import configure_logging, get_logger

logger = get_logger(__name__)

BROWSE_HELP = """Commands:
  next | prev | first | last     move between pages
  sort FIELD                     cycle a column: none -> asc -> desc -> none
  filter NAME VALUE              set a filter value
  clear NAME                     clear a filter
  search [TEXT]                  set (or reset) the search text
  rows N                         rows per page
  refresh                        refetch the current page
  help | quit"""


def _parse_filters(values: Optional[List[str]]) -> Dict[str, str]:
    filters: Dict[str, str] = {}
    for item in values or []:
        if "=" not in item:
            raise ValueError(f"Filter must look like NAME=VALUE, got '{item}'")
        name, value = item.split("=", 1)
        filters[name.strip()] = value.strip()
    return filters


def _sort_option(value: str) -> tuple[str, str]:
    """Parse `FIELD[:asc|desc]` for `records --sort`."""
    field, _, direction = value.partition(":")
    direction = direction or SortDirection.ASC.value
    if not field or direction not in (SortDirection.ASC.value, SortDirection.DESC.value):
        raise argparse.ArgumentTypeError(f"expected FIELD[:asc|desc], got '{value}'")
    return field, direction


def _format_amount(value: Optional[float]) -> str:
    return "" if value is None else f"{value:.2f}"


def render_table(snapshot: TableSnapshot) -> str:
    """Render a snapshot as a plain-text table."""
    lines = [
        f"{'ID':<12} {'Date':<12} {'Seller':<28} {'Customer':<28} {'Total':>12}",
        "-" * 96,
    ]
    for record in snapshot.records.items:
        lines.append(
            f"{record.id:<12} {record.date or '':<12} {record.seller_label or '':<28} "
            f"{record.customer_label or '':<28} {_format_amount(record.total_amount):>12}"
        )
    if not snapshot.records.items:
        lines.append("No records.")

    pagination = snapshot.pagination
    pages = " ".join(
        f"[{p}]" if p == snapshot.state.page else str(p) for p in pagination.visible_pages
    )
    lines.append("")
    lines.append(
        f"Rows {pagination.from_row}-{pagination.to_row} of {pagination.total}"
        f"  |  Pages: {pages or '-'} (of {pagination.page_count})"
    )
    return "\n".join(lines)


def render_json(snapshot: TableSnapshot) -> str:
    return json.dumps(snapshot.model_dump(mode="json"), indent=2, ensure_ascii=False)


def _build_view(args: argparse.Namespace) -> tuple[TableView, Dict]:
    config = load_config(Path(args.config) if args.config else None)
    return TableView.from_config(config), config


def _initial_state(args: argparse.Namespace, config: Dict) -> TableState:
    table = config["table"]
    filters = {entry["name"]: "" for entry in get_filter_fields(config)}
    filters.update(_parse_filters(getattr(args, "filter", None)))
    return TableState(
        rows_per_page=getattr(args, "rows", None) or table["rows_per_page"],
        page=getattr(args, "page", None) or 1,
        filters=filters,
        search_text=getattr(args, "search", None) or "",
    )


def cmd_lookups(args: argparse.Namespace) -> None:
    """Print the reference tables."""
    view, _config = _build_view(args)
    lookups, options = view.init()

    if args.format == "json":
        print(json.dumps({"tables": lookups.tables, "filter_options": options}, indent=2, ensure_ascii=False))
        return

    for kind, table in lookups.tables.items():
        print(f"{kind} ({len(table)})")
        print("-" * 60)
        for entity_id, label in table.items():
            print(f"  {entity_id:<20} {label}")
        print()


def cmd_records(args: argparse.Namespace) -> None:
    """Fetch and print one page of records."""
    view, config = _build_view(args)
    state = _initial_state(args, config)

    if args.sort:
        field, direction = args.sort
        if not view.pipeline.sort_registry.set(field, direction):
            print(f"Warning: '{field}' is not a sortable column", file=sys.stderr)

    action: Optional[Action] = None
    if args.clear:
        action = ClearAction(field=args.clear)
    elif args.action:
        action = parse_action(args.action)

    if action is not None and not isinstance(action, ClearAction):
        # Learn the page count before navigating
        state = view.refresh(state).state

    snapshot = view.refresh(state, action, force_refresh=args.refresh)
    print(render_json(snapshot) if args.format == "json" else render_table(snapshot))


def _browse_step(state: TableState, line: str) -> tuple[Optional[TableState], Optional[Action], bool]:
    """
    Translate one browse command into (state, action, force_refresh).

    Returns a None state when the command is not understood.
    """
    try:
        parts = shlex.split(line)
    except ValueError:
        return None, None, False
    if not parts:
        return None, None, False
    command, rest = parts[0].lower(), parts[1:]

    if command in ("next", "prev", "first", "last"):
        return state, parse_action(command), False
    if command == "sort" and rest:
        return state, SortAction(field=rest[0]), False
    if command == "clear" and rest:
        return state, ClearAction(field=rest[0]), False
    if command == "filter" and len(rest) >= 2:
        filters = {**state.filters, rest[0]: " ".join(rest[1:])}
        return state.model_copy(update={"filters": filters, "page": 1}), None, False
    if command == "search":
        return state.model_copy(update={"search_text": " ".join(rest), "page": 1}), None, False
    if command == "rows" and rest and rest[0].isdigit() and int(rest[0]) > 0:
        return state.model_copy(update={"rows_per_page": int(rest[0]), "page": 1}), None, False
    if command == "refresh":
        return state, None, True
    return None, None, False


def cmd_browse(args: argparse.Namespace) -> None:
    """Interactive paging loop over the records."""
    view, config = _build_view(args)
    state = _initial_state(args, config)

    _lookups, options = view.init()
    for name, values in options.items():
        print(f"{name}: {len(values)} options")

    snapshot = view.refresh(state)
    print(render_table(snapshot))
    state = snapshot.state

    while True:
        try:
            line = input("salesgrid> ").strip()
        except EOFError:
            break
        if not line:
            continue
        if line in ("quit", "exit", "q"):
            break
        if line == "help":
            print(BROWSE_HELP)
            continue

        next_state, action, force = _browse_step(state, line)
        if next_state is None:
            print(f"Unknown command: {line} (type 'help')")
            continue

        try:
            snapshot = view.refresh(next_state, action, force_refresh=force)
        except FetchError as e:
            print(f"Error: {e}", file=sys.stderr)
            continue
        state = snapshot.state
        print(render_table(snapshot))


def main(argv: Optional[List[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="salesgrid: browse the remote sales dataset")
    parser.add_argument("--config", type=str, default=None, help="Path to config YAML (default: salesgrid.config.yaml)")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # lookups command
    lookups_parser = subparsers.add_parser("lookups", help="Show reference data (sellers, customers)")
    lookups_parser.add_argument(
        "--format",
        type=str,
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
    lookups_parser.set_defaults(func=cmd_lookups)

    # records command
    records_parser = subparsers.add_parser("records", help="Fetch one page of records")
    records_parser.add_argument("--rows", type=int, default=None, help="Rows per page (default: from config)")
    records_parser.add_argument("--page", type=int, default=None, help="Page number (default: 1)")
    records_parser.add_argument("--search", type=str, default=None, help="Search text")
    records_parser.add_argument(
        "--filter",
        action="append",
        metavar="NAME=VALUE",
        help="Filter value; may be repeated",
    )
    records_parser.add_argument("--sort", type=_sort_option, default=None, metavar="FIELD[:asc|desc]", help="Sort column")
    records_parser.add_argument(
        "--action",
        type=str,
        choices=["prev", "next", "first", "last"],
        default=None,
        help="Navigation relative to --page",
    )
    records_parser.add_argument("--clear", type=str, default=None, metavar="NAME", help="Clear a filter")
    records_parser.add_argument("--refresh", action="store_true", help="Bypass the record cache")
    records_parser.add_argument(
        "--format",
        type=str,
        choices=["table", "json"],
        default="table",
        help="Output format (default: table)",
    )
    records_parser.set_defaults(func=cmd_records)

    # browse command
    browse_parser = subparsers.add_parser("browse", help="Interactive paging loop")
    browse_parser.add_argument("--rows", type=int, default=None, help="Rows per page (default: from config)")
    browse_parser.set_defaults(func=cmd_browse)

    args = parser.parse_args(argv)
    configure_logging(logging.DEBUG if args.verbose else logging.WARNING)

    if not args.command:
        parser.print_help()
        return

    try:
        args.func(args)
    except FetchError as e:
        logger.error(f"Fetch failed during '{args.command}': {e}")
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    except Exception as e:
        logger.error(f"Error running command '{args.command}': {e}", exc_info=True)
        raise


if __name__ == "__main__":
    main()
