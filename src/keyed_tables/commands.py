"""Commands that validate and apply parsed queries to a database.

Each query variant maps to exactly one command. A command's execute()
checks everything it needs before its single mutating step, so a
failing command leaves the database as it found it.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from keyed_tables.database import Database
from keyed_tables.errors import (
    ArityMismatchError,
    DuplicateColumnError,
    NotPrimaryKeyError,
    PrimaryKeyDefinitionError,
    TableExistsError,
)
from keyed_tables.parsing.query_parser import (
    Assignment,
    ColumnDef,
    CompoundCondition,
    Condition,
    CreateTableQuery,
    DeleteQuery,
    DescribeQuery,
    DropTableQuery,
    InsertQuery,
    Query,
    SelectQuery,
    ShowTablesQuery,
    UpdateQuery,
)
from keyed_tables.table import Column, Record, Table
from keyed_tables.types import Value


@dataclass
class QueryResult:
    """Result of a command execution."""

    columns: list[str]
    rows: list[dict[str, Any]]
    message: str | None = None


@dataclass
class CreateResult(QueryResult):
    """Result of a CREATE TABLE command."""

    table: str = ""


@dataclass
class DropResult(QueryResult):
    """Result of a DROP TABLE command."""

    table: str = ""
    dropped_count: int = 0


@dataclass
class InsertResult(QueryResult):
    """Result of an INSERT command."""

    table: str = ""
    key: Any = None


@dataclass
class UpdateResult(QueryResult):
    """Result of an UPDATE command."""

    table: str = ""
    key: Any = None


@dataclass
class DeleteResult(QueryResult):
    """Result of a DELETE command."""

    table: str = ""
    key: Any = None


@dataclass
class SelectResult(QueryResult):
    """Result of a SELECT command; records are the full matching rows."""

    records: list[Record] = field(default_factory=list)


@dataclass
class DescribeResult(QueryResult):
    """Result of a DESCRIBE command."""

    table: str = ""
    schema: list[Column] = field(default_factory=list)
    primary_key: str = ""


def _lookup_key(database: Database, table: Table, key: Condition) -> Any:
    """Resolve a WHERE <column> = <literal> predicate to a primary key."""
    index = table.column_index(key.column)
    if index != table.primary_key:
        raise NotPrimaryKeyError(table.name, key.column, table.key_column.name)
    table.check_value(index, key.value)
    return database.key_kind.key_from_value(key.value)


def _assignment_changes(table: Table, assignments: list[Assignment]) -> dict[int, Value]:
    changes: dict[int, Value] = {}
    for assignment in assignments:
        index = table.column_index(assignment.column)
        if index in changes:
            raise DuplicateColumnError(table.name, assignment.column)
        table.check_value(index, assignment.value)
        changes[index] = assignment.value
    return changes


def _comparisons(condition: Condition | CompoundCondition) -> Iterator[Condition]:
    """Yield the comparisons of a condition tree, left to right."""
    stack = [condition]
    while stack:
        node = stack.pop()
        if isinstance(node, CompoundCondition):
            stack.append(node.right)
            stack.append(node.left)
        else:
            yield node


def _check_condition(table: Table, condition: Condition | CompoundCondition) -> None:
    """Check that every column in a condition exists and matches its literal's type."""
    for comparison in _comparisons(condition):
        table.check_value(table.column_index(comparison.column), comparison.value)


def _matches(table: Table, record: Record, condition: Condition | CompoundCondition) -> bool:
    # Post-order walk with an explicit stack; AND/OR chains may be arbitrarily long
    results: list[bool] = []
    stack: list[tuple[Condition | CompoundCondition, bool]] = [(condition, False)]
    while stack:
        node, operands_done = stack.pop()
        if isinstance(node, Condition):
            value = record[table.column_index(node.column)]
            results.append(value.compare(node.operator, node.value))
        elif operands_done:
            right = results.pop()
            left = results.pop()
            results.append(left and right if node.operator == "and" else left or right)
        else:
            stack.append((node, True))
            stack.append((node.right, False))
            stack.append((node.left, False))
    return results[0]


@dataclass
class CreateTableCommand:
    table: str
    columns: list[ColumnDef]

    def execute(self, database: Database) -> CreateResult:
        if self.table in database:
            raise TableExistsError(self.table)
        seen: set[str] = set()
        for column in self.columns:
            if column.name in seen:
                raise DuplicateColumnError(self.table, column.name)
            seen.add(column.name)
        keys = [i for i, c in enumerate(self.columns) if c.primary_key]
        if len(keys) != 1:
            raise PrimaryKeyDefinitionError(self.table, len(keys))

        table: Table = Table(
            self.table,
            [Column(c.name, c.data_type) for c in self.columns],
            primary_key=keys[0],
        )
        database.create_table(table)
        return CreateResult(columns=[], rows=[], message=f"Created table {self.table}", table=self.table)


@dataclass
class DropTableCommand:
    table: str

    def execute(self, database: Database) -> DropResult:
        dropped = database.drop_table(self.table)
        return DropResult(
            columns=[],
            rows=[],
            message=f"Dropped table {self.table}",
            table=self.table,
            dropped_count=dropped.count,
        )


@dataclass
class InsertCommand:
    table: str
    values: list[Value]
    columns: list[str] | None = None

    def _ordered_values(self, table: Table) -> list[Value]:
        """Arrange values in schema order when an explicit column list is given."""
        if self.columns is None:
            return list(self.values)
        indices: list[int] = []
        for name in self.columns:
            index = table.column_index(name)
            if index in indices:
                raise DuplicateColumnError(table.name, name)
            indices.append(index)
        if len(indices) != len(self.values):
            raise ArityMismatchError(table.name, len(indices), len(self.values))
        if len(indices) != len(table.columns):
            raise ArityMismatchError(table.name, len(table.columns), len(indices))
        positions = dict(zip(indices, self.values))
        return [positions[i] for i in range(len(table.columns))]

    def execute(self, database: Database) -> InsertResult:
        table = database.get_table(self.table)
        record = table.make_record(self._ordered_values(table))
        key = table.insert(record)
        return InsertResult(columns=[], rows=[], message="Inserted 1 record", table=self.table, key=key)


@dataclass
class SelectCommand:
    table: str
    fields: list[str] = field(default_factory=lambda: ["*"])
    where: Condition | CompoundCondition | None = None

    def execute(self, database: Database) -> SelectResult:
        table = database.get_table(self.table)
        if self.fields == ["*"]:
            names = table.column_names
        else:
            names = list(self.fields)
        indices = [table.column_index(name) for name in names]
        if self.where is not None:
            _check_condition(table, self.where)

        records = [
            record for record in table.scan()
            if self.where is None or _matches(table, record, self.where)
        ]
        rows = [{name: record[i] for name, i in zip(names, indices)} for record in records]
        return SelectResult(columns=names, rows=rows, records=records)


@dataclass
class UpdateCommand:
    table: str
    assignments: list[Assignment]
    key: Condition

    def execute(self, database: Database) -> UpdateResult:
        table = database.get_table(self.table)
        key = _lookup_key(database, table, self.key)
        current = table.get(key)
        changes = _assignment_changes(table, self.assignments)
        record = table.make_record(current.replace(changes).values)
        new_key = table.replace(key, record)
        return UpdateResult(columns=[], rows=[], message="Updated 1 record", table=self.table, key=new_key)


@dataclass
class DeleteCommand:
    table: str
    key: Condition

    def execute(self, database: Database) -> DeleteResult:
        table = database.get_table(self.table)
        key = _lookup_key(database, table, self.key)
        table.delete(key)
        return DeleteResult(columns=[], rows=[], message="Deleted 1 record", table=self.table, key=key)


@dataclass
class DescribeCommand:
    table: str

    def execute(self, database: Database) -> DescribeResult:
        table = database.get_table(self.table)
        rows = [
            {"column": c.name, "type": c.data_type.keyword, "primary_key": i == table.primary_key}
            for i, c in enumerate(table.columns)
        ]
        return DescribeResult(
            columns=["column", "type", "primary_key"],
            rows=rows,
            table=table.name,
            schema=list(table.columns),
            primary_key=table.key_column.name,
        )


@dataclass
class ShowTablesCommand:
    def execute(self, database: Database) -> QueryResult:
        rows = [
            {"table": t.name, "columns": len(t.columns), "records": t.count}
            for t in database
        ]
        return QueryResult(columns=["table", "columns", "records"], rows=rows)


Command = CreateTableCommand | DropTableCommand | InsertCommand | SelectCommand | UpdateCommand | DeleteCommand | DescribeCommand | ShowTablesCommand


def command_for(query: Query) -> Command:
    """Build the command for a parsed query. No validation happens here."""
    if isinstance(query, CreateTableQuery):
        return CreateTableCommand(table=query.table, columns=list(query.columns))
    elif isinstance(query, DropTableQuery):
        return DropTableCommand(table=query.table)
    elif isinstance(query, InsertQuery):
        columns = list(query.columns) if query.columns is not None else None
        return InsertCommand(table=query.table, values=list(query.values), columns=columns)
    elif isinstance(query, SelectQuery):
        return SelectCommand(table=query.table, fields=list(query.fields), where=query.where)
    elif isinstance(query, UpdateQuery):
        return UpdateCommand(table=query.table, assignments=list(query.assignments), key=query.key)
    elif isinstance(query, DeleteQuery):
        return DeleteCommand(table=query.table, key=query.key)
    elif isinstance(query, DescribeQuery):
        return DescribeCommand(table=query.table)
    elif isinstance(query, ShowTablesQuery):
        return ShowTablesCommand()
    else:
        raise ValueError(f"Not a database command: {type(query).__name__}")
