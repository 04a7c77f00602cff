"""Keyed Tables - an in-memory tabular database driven by a line-oriented query language."""

from keyed_tables.commands import Command, QueryResult, command_for
from keyed_tables.database import AnyDatabase, Database
from keyed_tables.errors import DatabaseIOError, DbError, LogicError, ParseError
from keyed_tables.parsing import QueryParser
from keyed_tables.session import Session
from keyed_tables.table import Column, Record, Table
from keyed_tables.types import DataType, KeyKind, Value

__all__ = [
    # Main API
    "AnyDatabase",
    "Session",
    "QueryParser",
    "command_for",
    # Storage
    "Database",
    "Table",
    "Column",
    "Record",
    # Values and types
    "DataType",
    "KeyKind",
    "Value",
    # Results and errors
    "Command",
    "QueryResult",
    "DbError",
    "ParseError",
    "DatabaseIOError",
    "LogicError",
]

__version__ = "0.1.0"
