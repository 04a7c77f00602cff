"""Database: a named collection of tables sharing one primary-key type."""

from __future__ import annotations

from typing import TYPE_CHECKING, Generic, Iterator

from loguru import logger

from keyed_tables.errors import KeyTypeMismatchError, TableExistsError, TableNotFoundError
from keyed_tables.table import K, Table
from keyed_tables.types import KeyKind

if TYPE_CHECKING:
    from keyed_tables.commands import Command, QueryResult


class Database(Generic[K]):
    """Tables keyed by name, all using the same key representation."""

    def __init__(self, key_kind: KeyKind) -> None:
        self.key_kind = key_kind
        self._tables: dict[str, Table[K]] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._tables

    def __iter__(self) -> Iterator[Table[K]]:
        return iter(list(self._tables.values()))

    def __len__(self) -> int:
        return len(self._tables)

    def get_table(self, name: str) -> Table[K]:
        """Get a table by name, raising if it does not exist."""
        table = self._tables.get(name)
        if table is None:
            raise TableNotFoundError(name)
        return table

    def check_key_column(self, table: Table[K]) -> None:
        """Check that a table's primary key matches this database's key type."""
        column = table.key_column
        if column.data_type is not self.key_kind.data_type:
            raise KeyTypeMismatchError(
                table.name, column.name, column.data_type.keyword, self.key_kind.value
            )

    def create_table(self, table: Table[K]) -> None:
        if table.name in self._tables:
            raise TableExistsError(table.name)
        self.check_key_column(table)
        self._tables[table.name] = table
        logger.debug(f"Created table {table.name} with {len(table.columns)} columns")

    def drop_table(self, name: str) -> Table[K]:
        table = self.get_table(name)
        del self._tables[name]
        logger.debug(f"Dropped table {name} ({table.count} records)")
        return table

    def table_names(self) -> list[str]:
        return list(self._tables)


class AnyDatabase:
    """Holds the one database of the process, with its key type fixed.

    The key type is chosen when the selector is built and never changes;
    commands run against whichever concrete database it holds.
    """

    def __init__(self, database: Database[str] | Database[int]) -> None:
        self._database = database

    @classmethod
    def for_key_type(cls, key_type: str | KeyKind) -> AnyDatabase:
        """Create an empty database for the "string" or "int" key type."""
        key_kind = KeyKind.parse(key_type)
        if key_kind is KeyKind.INT:
            return cls(Database[int](key_kind))
        return cls(Database[str](key_kind))

    @property
    def key_kind(self) -> KeyKind:
        return self._database.key_kind

    @property
    def database(self) -> Database[str] | Database[int]:
        return self._database

    def execute(self, command: Command) -> QueryResult:
        """Run a command against the held database."""
        return command.execute(self._database)
