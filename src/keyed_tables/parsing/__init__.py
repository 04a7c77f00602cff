"""Parsing module for the keyed-tables statement language."""

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
    QueryParser,
    ReadFromQuery,
    SaveAsQuery,
    SelectQuery,
    ShowTablesQuery,
    UpdateQuery,
)

__all__ = [
    "Assignment",
    "ColumnDef",
    "CompoundCondition",
    "Condition",
    "CreateTableQuery",
    "DeleteQuery",
    "DescribeQuery",
    "DropTableQuery",
    "InsertQuery",
    "Query",
    "QueryParser",
    "ReadFromQuery",
    "SaveAsQuery",
    "SelectQuery",
    "ShowTablesQuery",
    "UpdateQuery",
]
