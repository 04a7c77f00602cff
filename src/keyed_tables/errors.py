"""
Exceptions raised while parsing and executing keyed-tables statements.

Every failure is a DbError. The three top-level kinds are ParseError
(malformed text), DatabaseIOError (snapshot/script files) and LogicError
(a statement that is well-formed but violates the database's rules).
"""

from __future__ import annotations

from typing import Any


class DbError(Exception):
    """Base exception for all keyed-tables errors."""

    kind = "error"

    def __init__(self, message: str) -> None:
        self.message = message
        # "path:line" of the script line that raised, set by the session
        self.location: str | None = None
        super().__init__(message)

    def describe(self) -> str:
        """Return the user-facing rendering: kind, location and message."""
        where = f" at {self.location}" if self.location else ""
        return f"Error ({self.kind}){where}: {self.message}"


class ParseError(DbError):
    """Raised when a statement does not match the grammar."""

    kind = "parse"

    def __init__(self, message: str, position: int | None = None) -> None:
        self.position = position
        if position is not None:
            message = f"{message} (position {position})"
        super().__init__(message)


class DatabaseIOError(DbError):
    """Raised when a SAVE_AS or READ_FROM file cannot be read or written."""

    kind = "io"

    def __init__(self, message: str, path: str | None = None) -> None:
        self.path = path
        super().__init__(message)


class LogicError(DbError):
    """Raised when a statement violates a schema or key rule."""

    kind = "logic"


class TableNotFoundError(LogicError):
    def __init__(self, table: str) -> None:
        self.table = table
        super().__init__(f"Table '{table}' not found")


class TableExistsError(LogicError):
    def __init__(self, table: str) -> None:
        self.table = table
        super().__init__(f"Table '{table}' already exists")


class ColumnNotFoundError(LogicError):
    def __init__(self, table: str, column: str) -> None:
        self.table = table
        self.column = column
        super().__init__(f"Column '{column}' not found in table '{table}'")


class DuplicateColumnError(LogicError):
    def __init__(self, table: str, column: str) -> None:
        self.table = table
        self.column = column
        super().__init__(f"Column '{column}' given more than once for table '{table}'")


class PrimaryKeyDefinitionError(LogicError):
    """Raised when a table definition does not mark exactly one primary key."""

    def __init__(self, table: str, count: int) -> None:
        self.table = table
        self.count = count
        super().__init__(
            f"Table '{table}' must have exactly one PRIMARY KEY column, got {count}"
        )


class ArityMismatchError(LogicError):
    def __init__(self, table: str, expected: int, got: int) -> None:
        self.table = table
        self.expected = expected
        self.got = got
        super().__init__(f"Table '{table}' has {expected} columns, got {got} values")


class TypeMismatchError(LogicError):
    pass


class KeyNotFoundError(LogicError):
    def __init__(self, table: str, key: Any) -> None:
        self.table = table
        self.key = key
        super().__init__(f"Key {key!r} not found in table '{table}'")


class DuplicateKeyError(LogicError):
    def __init__(self, table: str, key: Any) -> None:
        self.table = table
        self.key = key
        super().__init__(f"Duplicate key {key!r} in table '{table}'")


class KeyTypeMismatchError(LogicError):
    """Raised when a primary-key column type disagrees with the database key type."""

    def __init__(self, table: str, column: str, column_type: str, key_type: str) -> None:
        self.table = table
        self.column = column
        super().__init__(
            f"Primary key '{column}' of table '{table}' is {column_type}, "
            f"but this database uses {key_type} keys"
        )


class NotPrimaryKeyError(LogicError):
    """Raised when UPDATE or DELETE selects a record by a non-key column."""

    def __init__(self, table: str, column: str, key_column: str) -> None:
        self.table = table
        self.column = column
        super().__init__(
            f"Column '{column}' is not the primary key of table '{table}' "
            f"(use '{key_column}')"
        )


class CyclicIncludeError(LogicError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__(f"READ_FROM cycle: '{path}' is already being read")
