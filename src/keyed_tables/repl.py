"""Interactive REPL and command-line entry point for keyed tables."""

from __future__ import annotations

import argparse
import readline  # noqa: F401 - enables line editing in input()
import sys
from pathlib import Path
from typing import Any

from loguru import logger

from keyed_tables.commands import QueryResult, SelectResult
from keyed_tables.database import AnyDatabase
from keyed_tables.errors import DbError
from keyed_tables.session import ReadResult, Session, is_blank, is_exit_command, script_lines
from keyed_tables.types import KeyKind, Value

LOG_LEVELS = ("TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL")
MAX_COLUMN_WIDTH = 40


def format_value(value: Any, max_width: int = 40) -> str:
    """Format a value for display.

    Args:
        value: The value to format
        max_width: Maximum character width before truncating
    """
    if isinstance(value, Value):
        value = value.data
    if value is None:
        return "NULL"
    elif isinstance(value, bool):
        return "true" if value else "false"
    elif isinstance(value, float):
        return f"{value:.6g}"
    elif isinstance(value, str):
        if len(value) > max_width:
            return repr(value[:max_width - 3] + "...")
        return repr(value)
    else:
        s = str(value)
        if len(s) > max_width:
            return s[:max_width - 3] + "..."
        return s


def print_result(result: QueryResult) -> None:
    """Print a result: its message, then its rows as a table."""
    if result.message:
        print(result.message)
    if not result.columns:
        return

    if not result.rows:
        print("(no results)")
        return

    # Long values are truncated by format_value
    cells = [
        [format_value(row.get(col), MAX_COLUMN_WIDTH) for col in result.columns]
        for row in result.rows
    ]
    widths = [
        max([len(col)] + [len(line[i]) for line in cells])
        for i, col in enumerate(result.columns)
    ]

    header = " | ".join(col.ljust(w) for col, w in zip(result.columns, widths))
    print(header)
    print("-" * len(header))
    for line in cells:
        print(" | ".join(text.ljust(w) for text, w in zip(line, widths)))

    if isinstance(result, SelectResult):
        print(f"\n({len(result.rows)} row{'s' if len(result.rows) != 1 else ''})")


def print_error(error: DbError) -> None:
    logger.info(f"Statement failed: {error.describe()}")
    print(error.describe(), file=sys.stderr)


def echo_statement(line: str, result: QueryResult) -> None:
    """Show a statement run from a READ_FROM script, with its result."""
    print(f"FILE> {line}")
    if not isinstance(result, ReadResult):
        print_result(result)


def run_repl(session: Session) -> int:
    """Run the interactive REPL."""
    print("KTQ REPL - keyed tables")
    print(f"Key type: {session.database.key_kind.value}")
    print("Type 'help' for commands, 'exit' to quit.\n")

    # Command history
    history_file = Path.home() / ".ktq_history"
    try:
        readline.read_history_file(history_file)
    except FileNotFoundError:
        pass

    try:
        while True:
            try:
                line = input("ktq> ").strip()
            except EOFError:
                print()
                break

            if not line:
                continue

            # Handle special commands
            if is_exit_command(line):
                break
            if line.lower() == "help":
                print_help()
                continue

            try:
                result = session.execute(line)
                if result is not None:
                    print_result(result)
            except DbError as e:
                print_error(e)

            print()

    finally:
        # Save history
        try:
            readline.set_history_length(1000)
            readline.write_history_file(history_file)
        except OSError as e:
            logger.debug(f"Could not write history file {history_file}: {e}")

    return 0


def print_help() -> None:
    """Print help information."""
    print("""
KTQ - keyed tables query language (one statement per line)

TABLES:
  create table <t> (<col> <type> [primary key], ...)
                           Types: int, float, bool, string
  drop table <t>           Delete a table and its records
  describe <t>             Show a table's columns
  show tables              List all tables

RECORDS:
  insert into <t> values (<v>, ...)
  insert into <t> (<col>, ...) values (<v>, ...)
  select * | <col>, ... from <t> [where <col> <op> <v> [and|or ...]]
                           Operators: = != < <= > >=
  update <t> set <col> = <v>, ... where <key col> = <v>
  delete from <t> where <key col> = <v>

SCRIPTS:
  save_as <path>           Write the database as a script of statements
  read_from <path>         Execute the statements in a file

OTHER:
  help                     Show this help
  exit, quit               Leave the REPL

Literals: 42, -7, 3.14, true, false, "text"
Use backticks for names that clash with keywords: `key`
""")


def run_file(file_path: Path, session: Session, verbose: bool = False) -> int:
    """Execute statements from a file, stopping at the first error."""
    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeError) as e:
        print(f"Error reading file: {e}", file=sys.stderr)
        return 1

    for lineno, line in enumerate(script_lines(content), start=1):
        if is_blank(line):
            continue
        if is_exit_command(line):
            break
        if verbose:
            print(f">>> {line.strip()}")
        try:
            result = session.execute(line)
        except DbError as e:
            if e.location is None:
                e.location = f"{file_path}:{lineno}"
            print_error(e)
            return 1
        if result is not None:
            print_result(result)

    return 0


def configure_logging(level: str) -> None:
    """Send log records to stderr at the given level."""
    logger.remove()
    logger.add(sys.stderr, level=level.upper())


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    arg_parser = argparse.ArgumentParser(
        description="Interactive REPL for the keyed tables in-memory database"
    )
    arg_parser.add_argument(
        "-k", "--key-type",
        choices=[k.value for k in KeyKind],
        default=KeyKind.STRING.value,
        help="Primary-key type shared by every table (default: string)",
    )
    arg_parser.add_argument(
        "-c", "--command",
        type=str,
        help="Execute a single statement and exit",
    )
    arg_parser.add_argument(
        "-f", "--file",
        type=Path,
        help="Execute statements from a file and exit",
    )
    arg_parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print each statement before executing it, including READ_FROM scripts",
    )
    arg_parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default="WARNING",
        help="Log level for diagnostics on stderr (default: WARNING)",
    )

    args = arg_parser.parse_args(argv)
    configure_logging(args.log_level)

    # The key type is fixed here for the lifetime of the process
    database = AnyDatabase.for_key_type(args.key_type)
    session = Session(database)

    # Handle file execution
    if args.file:
        if not args.file.exists():
            print(f"Error: File not found: {args.file}", file=sys.stderr)
            return 1
        if args.verbose:
            session.on_statement = echo_statement
        return run_file(args.file, session, args.verbose)

    if args.command:
        try:
            result = session.execute(args.command)
        except DbError as e:
            print_error(e)
            return 1
        if result is not None:
            print_result(result)
        return 0

    session.on_statement = echo_statement
    return run_repl(session)


if __name__ == "__main__":
    sys.exit(main())
