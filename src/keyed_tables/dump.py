"""Render a database as a replayable script of statements."""

from __future__ import annotations

from keyed_tables.database import Database
from keyed_tables.parsing.query_lexer import escape_if_keyword
from keyed_tables.table import Record, Table


def format_create_table(table: Table) -> str:
    """Format a table's schema as a CREATE TABLE statement."""
    parts = []
    for i, column in enumerate(table.columns):
        part = f"{escape_if_keyword(column.name)} {column.data_type.keyword}"
        if i == table.primary_key:
            part += " PRIMARY KEY"
        parts.append(part)
    return f"CREATE TABLE {escape_if_keyword(table.name)} ({', '.join(parts)})"


def format_insert(table: Table, record: Record) -> str:
    """Format a record as an INSERT statement."""
    values = ", ".join(value.render() for value in record)
    return f"INSERT INTO {escape_if_keyword(table.name)} VALUES ({values})"


def dump_lines(database: Database) -> list[str]:
    """Return the snapshot script for a database, one statement per line.

    Tables come in creation order, each followed by its records in
    iteration order.
    """
    lines = [f"-- keyed-tables snapshot (key type: {database.key_kind.value})"]
    for table in database:
        lines.append(format_create_table(table))
        for record in table.scan():
            lines.append(format_insert(table, record))
    return lines


def dump_database(database: Database) -> str:
    return "\n".join(dump_lines(database)) + "\n"
