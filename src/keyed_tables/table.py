"""In-memory table storage for keyed records."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Iterator, Sequence, TypeVar

from keyed_tables.errors import (
    ArityMismatchError,
    ColumnNotFoundError,
    DuplicateKeyError,
    KeyNotFoundError,
    TypeMismatchError,
)
from keyed_tables.types import DataType, Value

K = TypeVar("K", str, int)


@dataclass(frozen=True)
class Column:
    """A column definition: name and type."""

    name: str
    data_type: DataType


@dataclass(frozen=True)
class Record:
    """A row of values, positionally matching its table's columns."""

    values: tuple[Value, ...]

    def __getitem__(self, index: int) -> Value:
        return self.values[index]

    def __len__(self) -> int:
        return len(self.values)

    def __iter__(self) -> Iterator[Value]:
        return iter(self.values)

    def replace(self, changes: dict[int, Value]) -> Record:
        """Return a new record with the values at the given positions replaced."""
        return Record(tuple(changes.get(i, v) for i, v in enumerate(self.values)))


class Table(Generic[K]):
    """Records of one schema, keyed by the primary-key column.

    Records are kept in insertion order. Every mutating method checks its
    preconditions before touching the store.
    """

    def __init__(self, name: str, columns: Sequence[Column], primary_key: int) -> None:
        self.name = name
        self.columns: tuple[Column, ...] = tuple(columns)
        self.primary_key = primary_key
        self._records: dict[K, Record] = {}

    @property
    def key_column(self) -> Column:
        return self.columns[self.primary_key]

    @property
    def column_names(self) -> list[str]:
        return [c.name for c in self.columns]

    @property
    def count(self) -> int:
        """Return the number of records in the table."""
        return len(self._records)

    def column_index(self, name: str) -> int:
        """Return the position of a column, raising if it does not exist."""
        for i, column in enumerate(self.columns):
            if column.name == name:
                return i
        raise ColumnNotFoundError(self.name, name)

    def check_value(self, index: int, value: Value) -> None:
        """Check that a value may be stored in (or compared with) a column."""
        column = self.columns[index]
        if value.data_type is not column.data_type:
            raise TypeMismatchError(
                f"Column '{column.name}' of table '{self.name}' is "
                f"{column.data_type.keyword}, got {value.data_type.keyword} {value.render()}"
            )

    def make_record(self, values: Sequence[Value]) -> Record:
        """Build a record after checking arity and per-column types."""
        if len(values) != len(self.columns):
            raise ArityMismatchError(self.name, len(self.columns), len(values))
        for i, value in enumerate(values):
            self.check_value(i, value)
        return Record(tuple(values))

    def key_of(self, record: Record) -> K:
        return record[self.primary_key].data  # type: ignore[return-value]

    def __contains__(self, key: Any) -> bool:
        return key in self._records

    def get(self, key: K) -> Record:
        """Get a record by key."""
        try:
            return self._records[key]
        except KeyError:
            raise KeyNotFoundError(self.name, key) from None

    def insert(self, record: Record) -> K:
        """Insert a record and return its key."""
        key = self.key_of(record)
        if key in self._records:
            raise DuplicateKeyError(self.name, key)
        self._records[key] = record
        return key

    def replace(self, key: K, record: Record) -> K:
        """Replace the record stored under key, keeping its position.

        The new record may carry a different key as long as no other
        record already uses it.
        """
        if key not in self._records:
            raise KeyNotFoundError(self.name, key)
        new_key = self.key_of(record)
        if new_key == key:
            self._records[key] = record
            return key
        if new_key in self._records:
            raise DuplicateKeyError(self.name, new_key)
        self._records = {
            (new_key if k == key else k): (record if k == key else r)
            for k, r in self._records.items()
        }
        return new_key

    def delete(self, key: K) -> Record:
        """Remove and return the record stored under key."""
        if key not in self._records:
            raise KeyNotFoundError(self.name, key)
        return self._records.pop(key)

    def scan(self) -> Iterator[Record]:
        """Iterate over records in insertion order."""
        return iter(list(self._records.values()))

    def keys(self) -> list[K]:
        return list(self._records)
