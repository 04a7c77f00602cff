"""Statement execution for one database, including SAVE_AS and READ_FROM."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable

from loguru import logger

from keyed_tables.commands import QueryResult, command_for
from keyed_tables.database import AnyDatabase
from keyed_tables.dump import dump_lines
from keyed_tables.errors import CyclicIncludeError, DatabaseIOError, DbError
from keyed_tables.parsing.query_parser import QueryParser, ReadFromQuery, SaveAsQuery

EXIT_COMMANDS = frozenset({"quit", "exit"})


def is_exit_command(line: str) -> bool:
    """Return True for the loop-control words that end a session or script."""
    return line.strip().lower() in EXIT_COMMANDS


def is_blank(line: str) -> bool:
    """Return True for lines that hold no statement (empty or comment-only)."""
    text = line.strip()
    return not text or text.startswith("--")


def script_lines(content: str) -> list[str]:
    """Split a script into statement lines.

    Only "\\n" (optionally preceded by "\\r") ends a line. Other line
    boundaries such as form feed or U+2028 may appear inside text literals.
    """
    return [line[:-1] if line.endswith("\r") else line for line in content.split("\n")]


@dataclass
class SaveResult(QueryResult):
    """Result of a SAVE_AS statement."""

    path: str = ""
    statements_written: int = 0


@dataclass
class ReadResult(QueryResult):
    """Result of a READ_FROM statement."""

    path: str = ""
    statements_executed: int = 0
    results: list[QueryResult] = field(default_factory=list)


class Session:
    """Parses and executes statements against one database.

    SAVE_AS and READ_FROM are handled here; every other statement becomes
    a command run through the database selector.
    """

    def __init__(
        self,
        database: AnyDatabase,
        parser: QueryParser | None = None,
        on_statement: Callable[[str, QueryResult], None] | None = None,
    ) -> None:
        self.database = database
        self.parser = parser or QueryParser()
        # Called after each statement a READ_FROM script runs successfully
        self.on_statement = on_statement
        # Resolved paths of the scripts currently being read, innermost last
        self._read_stack: list[Path] = []

    def execute(self, line: str) -> QueryResult | None:
        """Parse and execute one line. Returns None for blank or comment lines."""
        if is_blank(line):
            return None
        query = self.parser.parse(line)
        if isinstance(query, SaveAsQuery):
            return self._save_as(query)
        if isinstance(query, ReadFromQuery):
            return self._read_from(query)
        command = command_for(query)
        logger.debug(f"Executing {type(command).__name__}: {line.strip()}")
        return self.database.execute(command)

    def _resolve(self, raw: str) -> Path:
        """Resolve a path; relative paths inside a script are relative to that script."""
        path = Path(raw)
        if not path.is_absolute() and self._read_stack:
            path = self._read_stack[-1].parent / path
        return path

    def _save_as(self, query: SaveAsQuery) -> SaveResult:
        path = self._resolve(query.path)
        lines = dump_lines(self.database.database)
        try:
            path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        except (OSError, UnicodeError) as e:
            raise DatabaseIOError(f"Cannot write {path}: {getattr(e, 'strerror', None) or e}", path=str(path)) from e
        count = len(lines) - 1
        logger.info(f"Saved snapshot to {path} ({count} statements)")
        return SaveResult(
            columns=[],
            rows=[],
            message=f"Saved to {path}",
            path=str(path),
            statements_written=count,
        )

    def _read_from(self, query: ReadFromQuery) -> ReadResult:
        path = self._resolve(query.path)
        resolved = path.resolve()
        if resolved in self._read_stack:
            raise CyclicIncludeError(str(path))
        try:
            content = path.read_text(encoding="utf-8")
        except (OSError, UnicodeError) as e:
            raise DatabaseIOError(f"Cannot read {path}: {getattr(e, 'strerror', None) or e}", path=str(path)) from e

        results: list[QueryResult] = []
        self._read_stack.append(resolved)
        try:
            for lineno, line in enumerate(script_lines(content), start=1):
                if is_exit_command(line):
                    break
                try:
                    result = self.execute(line)
                except DbError as e:
                    if e.location is None:
                        e.location = f"{path}:{lineno}"
                    raise
                if result is None:
                    continue
                results.append(result)
                if self.on_statement is not None:
                    self.on_statement(line.strip(), result)
        finally:
            self._read_stack.pop()

        count = len(results)
        logger.info(f"Read {count} statements from {path}")
        return ReadResult(
            columns=[],
            rows=[],
            message=f"Executed {path} ({count} statement{'s' if count != 1 else ''})",
            path=str(path),
            statements_executed=count,
            results=results,
        )
