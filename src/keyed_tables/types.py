"""Value and data type definitions for keyed tables."""

from __future__ import annotations

import math
import operator
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from keyed_tables.errors import TypeMismatchError

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class DataType(Enum):
    """Column types supported by the schema."""

    INTEGER = "int"
    FLOAT = "float"
    BOOLEAN = "bool"
    TEXT = "string"

    @property
    def keyword(self) -> str:
        """Return the canonical spelling used in CREATE TABLE."""
        return self.value.upper()

    @property
    def python_type(self) -> type:
        return _PYTHON_TYPES[self]

    @classmethod
    def from_keyword(cls, word: str) -> DataType:
        """Look up a type keyword (INT, INTEGER, FLOAT, BOOL, ...), case-insensitive."""
        try:
            return TYPE_KEYWORDS[word.lower()]
        except KeyError:
            raise ValueError(f"Unknown data type: {word}") from None


_PYTHON_TYPES: dict[DataType, type] = {
    DataType.INTEGER: int,
    DataType.FLOAT: float,
    DataType.BOOLEAN: bool,
    DataType.TEXT: str,
}

# Keywords accepted for each type in a column definition
TYPE_KEYWORDS: dict[str, DataType] = {
    "int": DataType.INTEGER,
    "integer": DataType.INTEGER,
    "float": DataType.FLOAT,
    "bool": DataType.BOOLEAN,
    "boolean": DataType.BOOLEAN,
    "string": DataType.TEXT,
    "text": DataType.TEXT,
}

_COMPARISONS: dict[str, Callable[[Any, Any], bool]] = {
    "=": operator.eq,
    "!=": operator.ne,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
}


@dataclass(frozen=True)
class Value:
    """A typed value: an integer, float, boolean or text.

    Values of different types are never equal and cannot be ordered
    against each other.
    """

    data_type: DataType
    data: int | float | bool | str

    def __post_init__(self) -> None:
        # bool is a subclass of int, so check the exact type
        if type(self.data) is not self.data_type.python_type:
            raise TypeError(
                f"{self.data_type.keyword} value cannot hold {type(self.data).__name__}"
            )
        if self.data_type is DataType.INTEGER and not INT64_MIN <= self.data <= INT64_MAX:
            raise OverflowError(f"Integer {self.data} does not fit in 64 bits")

    @classmethod
    def integer(cls, data: int) -> Value:
        return cls(DataType.INTEGER, data)

    @classmethod
    def float_(cls, data: float) -> Value:
        return cls(DataType.FLOAT, data)

    @classmethod
    def boolean(cls, data: bool) -> Value:
        return cls(DataType.BOOLEAN, data)

    @classmethod
    def text(cls, data: str) -> Value:
        return cls(DataType.TEXT, data)

    def compare(self, op: str, other: Value) -> bool:
        """Apply a comparison operator (=, !=, <, <=, >, >=) to two values."""
        if op not in _COMPARISONS:
            raise ValueError(f"Unknown comparison operator: {op}")
        self._check_comparable(other)
        return _COMPARISONS[op](self.data, other.data)

    def _check_comparable(self, other: Value) -> None:
        if not isinstance(other, Value):
            raise TypeError(f"Cannot compare Value with {type(other).__name__}")
        if other.data_type is not self.data_type:
            raise TypeMismatchError(
                f"Cannot compare {self.data_type.keyword} with {other.data_type.keyword}"
            )

    def __lt__(self, other: Value) -> bool:
        self._check_comparable(other)
        return self.data < other.data

    def __le__(self, other: Value) -> bool:
        self._check_comparable(other)
        return self.data <= other.data

    def __gt__(self, other: Value) -> bool:
        self._check_comparable(other)
        return self.data > other.data

    def __ge__(self, other: Value) -> bool:
        self._check_comparable(other)
        return self.data >= other.data

    def render(self) -> str:
        """Format the value as a literal the query parser accepts."""
        if self.data_type is DataType.BOOLEAN:
            return "true" if self.data else "false"
        if self.data_type is DataType.FLOAT:
            if not math.isfinite(self.data):  # type: ignore[arg-type]
                raise ValueError(f"Float {self.data} has no literal form")
            return repr(self.data)
        if self.data_type is DataType.TEXT:
            return format_text_literal(self.data)  # type: ignore[arg-type]
        return str(self.data)

    def __str__(self) -> str:
        if self.data_type is DataType.BOOLEAN:
            return "true" if self.data else "false"
        return str(self.data)


_ESCAPES = {"\\": "\\\\", '"': '\\"', "\n": "\\n", "\t": "\\t", "\r": "\\r"}
_UNESCAPES = {"\\": "\\", '"': '"', "n": "\n", "t": "\t", "r": "\r"}


def format_text_literal(value: str) -> str:
    """Format a string as a double-quoted literal with escaping."""
    escaped = "".join(_ESCAPES.get(ch, ch) for ch in value)
    return f'"{escaped}"'


def parse_text_literal(literal: str) -> str:
    """Strip the quotes from a string literal and resolve its escapes."""
    body = literal[1:-1]
    out = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch == "\\" and i + 1 < len(body):
            nxt = body[i + 1]
            out.append(_UNESCAPES.get(nxt, nxt))
            i += 2
            continue
        out.append(ch)
        i += 1
    return "".join(out)


class KeyKind(Enum):
    """Primary-key representation shared by every table of a database."""

    STRING = "string"
    INT = "int"

    @property
    def data_type(self) -> DataType:
        """Return the column type a primary key must have."""
        return DataType.TEXT if self is KeyKind.STRING else DataType.INTEGER

    @classmethod
    def parse(cls, name: str | KeyKind) -> KeyKind:
        if isinstance(name, KeyKind):
            return name
        try:
            return cls(name.lower())
        except ValueError:
            choices = ", ".join(k.value for k in cls)
            raise ValueError(f"Unknown key type '{name}' (expected one of: {choices})") from None

    def key_from_value(self, value: Value) -> Any:
        """Extract a primary key from a value of the key column type."""
        if value.data_type is not self.data_type:
            raise TypeMismatchError(
                f"Primary key must be {self.data_type.keyword}, got {value.data_type.keyword}"
            )
        return value.data
