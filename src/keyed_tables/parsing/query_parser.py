"""Parser for the keyed-tables query language."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import ply.yacc as yacc

from keyed_tables.errors import ParseError
from keyed_tables.parsing.query_lexer import QueryLexer
from keyed_tables.types import INT64_MAX, INT64_MIN, DataType, Value


@dataclass
class ColumnDef:
    """A column in a CREATE TABLE statement."""

    name: str
    data_type: DataType
    primary_key: bool = False


@dataclass
class Condition:
    """A comparison between a column and a literal."""

    column: str
    operator: str  # =, !=, <, <=, >, >=
    value: Value


@dataclass
class CompoundCondition:
    """A compound condition (AND/OR)."""

    left: Condition | CompoundCondition
    operator: str  # and, or
    right: Condition | CompoundCondition


@dataclass
class Assignment:
    """A column = literal pair in an UPDATE ... SET clause."""

    column: str
    value: Value


@dataclass
class CreateTableQuery:
    """A CREATE TABLE query."""

    table: str
    columns: list[ColumnDef] = field(default_factory=list)


@dataclass
class DropTableQuery:
    """A DROP TABLE query."""

    table: str


@dataclass
class InsertQuery:
    """An INSERT query.

    Without an explicit column list, values are matched to the table's
    columns positionally.
    """

    table: str
    values: list[Value] = field(default_factory=list)
    columns: list[str] | None = None


@dataclass
class SelectQuery:
    """A SELECT query."""

    table: str
    fields: list[str] = field(default_factory=lambda: ["*"])
    where: Condition | CompoundCondition | None = None


@dataclass
class UpdateQuery:
    """An UPDATE query on the record selected by its primary key."""

    table: str
    assignments: list[Assignment]
    key: Condition


@dataclass
class DeleteQuery:
    """A DELETE query on the record selected by its primary key."""

    table: str
    key: Condition


@dataclass
class DescribeQuery:
    """A DESCRIBE query."""

    table: str


@dataclass
class ShowTablesQuery:
    """A SHOW TABLES query."""

    pass


@dataclass
class SaveAsQuery:
    """A SAVE_AS query to write a snapshot script."""

    path: str


@dataclass
class ReadFromQuery:
    """A READ_FROM query to replay a script."""

    path: str


Query = CreateTableQuery | DropTableQuery | InsertQuery | SelectQuery | UpdateQuery | DeleteQuery | DescribeQuery | ShowTablesQuery | SaveAsQuery | ReadFromQuery


class QueryParser:
    """Parser for keyed-tables statements."""

    tokens = QueryLexer.tokens

    # Operator precedence
    precedence = (
        ("left", "OR"),
        ("left", "AND"),
    )

    def __init__(self) -> None:
        self.lexer = QueryLexer()
        self.lexer.build()
        self.parser: yacc.LRParser = None  # type: ignore
        self._data = ""

    def p_statement(self, p: yacc.YaccProduction) -> None:
        """statement : query"""
        p[0] = p[1]

    # --- Table definition ---

    def p_query_create_table(self, p: yacc.YaccProduction) -> None:
        """query : CREATE TABLE IDENTIFIER LPAREN column_def_list RPAREN"""
        p[0] = CreateTableQuery(table=p[3], columns=p[5])

    def p_column_def_list_single(self, p: yacc.YaccProduction) -> None:
        """column_def_list : column_def"""
        p[0] = [p[1]]

    def p_column_def_list_multiple(self, p: yacc.YaccProduction) -> None:
        """column_def_list : column_def_list COMMA column_def"""
        p[0] = p[1] + [p[3]]

    def p_column_def(self, p: yacc.YaccProduction) -> None:
        """column_def : IDENTIFIER TYPE_NAME"""
        p[0] = ColumnDef(name=p[1], data_type=DataType.from_keyword(p[2]))

    def p_column_def_primary_key(self, p: yacc.YaccProduction) -> None:
        """column_def : IDENTIFIER TYPE_NAME PRIMARY KEY"""
        p[0] = ColumnDef(name=p[1], data_type=DataType.from_keyword(p[2]), primary_key=True)

    def p_query_drop_table(self, p: yacc.YaccProduction) -> None:
        """query : DROP TABLE IDENTIFIER"""
        p[0] = DropTableQuery(table=p[3])

    # --- Row statements ---

    def p_query_insert(self, p: yacc.YaccProduction) -> None:
        """query : INSERT INTO IDENTIFIER VALUES LPAREN value_list RPAREN"""
        p[0] = InsertQuery(table=p[3], values=p[6])

    def p_query_insert_columns(self, p: yacc.YaccProduction) -> None:
        """query : INSERT INTO IDENTIFIER LPAREN identifier_list RPAREN VALUES LPAREN value_list RPAREN"""
        p[0] = InsertQuery(table=p[3], values=p[9], columns=p[5])

    def p_query_select(self, p: yacc.YaccProduction) -> None:
        """query : SELECT field_list FROM IDENTIFIER where_clause"""
        p[0] = SelectQuery(table=p[4], fields=p[2], where=p[5])

    def p_field_list_star(self, p: yacc.YaccProduction) -> None:
        """field_list : STAR"""
        p[0] = ["*"]

    def p_field_list(self, p: yacc.YaccProduction) -> None:
        """field_list : identifier_list"""
        p[0] = p[1]

    def p_query_update(self, p: yacc.YaccProduction) -> None:
        """query : UPDATE IDENTIFIER SET assignment_list WHERE key_predicate"""
        p[0] = UpdateQuery(table=p[2], assignments=p[4], key=p[6])

    def p_assignment_list_single(self, p: yacc.YaccProduction) -> None:
        """assignment_list : assignment"""
        p[0] = [p[1]]

    def p_assignment_list_multiple(self, p: yacc.YaccProduction) -> None:
        """assignment_list : assignment_list COMMA assignment"""
        p[0] = p[1] + [p[3]]

    def p_assignment(self, p: yacc.YaccProduction) -> None:
        """assignment : IDENTIFIER EQ value"""
        p[0] = Assignment(column=p[1], value=p[3])

    def p_query_delete(self, p: yacc.YaccProduction) -> None:
        """query : DELETE FROM IDENTIFIER WHERE key_predicate"""
        p[0] = DeleteQuery(table=p[3], key=p[5])

    def p_key_predicate(self, p: yacc.YaccProduction) -> None:
        """key_predicate : IDENTIFIER EQ value"""
        p[0] = Condition(column=p[1], operator="=", value=p[3])

    # --- Introspection and scripts ---

    def p_query_describe(self, p: yacc.YaccProduction) -> None:
        """query : DESCRIBE IDENTIFIER"""
        p[0] = DescribeQuery(table=p[2])

    def p_query_show_tables(self, p: yacc.YaccProduction) -> None:
        """query : SHOW TABLES"""
        p[0] = ShowTablesQuery()

    def p_query_save_as(self, p: yacc.YaccProduction) -> None:
        """query : SAVE_AS PATH"""
        p[0] = SaveAsQuery(path=p[2])

    def p_query_read_from(self, p: yacc.YaccProduction) -> None:
        """query : READ_FROM PATH"""
        p[0] = ReadFromQuery(path=p[2])

    # --- WHERE clause ---

    def p_where_clause_empty(self, p: yacc.YaccProduction) -> None:
        """where_clause : """
        p[0] = None

    def p_where_clause(self, p: yacc.YaccProduction) -> None:
        """where_clause : WHERE condition"""
        p[0] = p[2]

    def p_condition_comparison(self, p: yacc.YaccProduction) -> None:
        """condition : IDENTIFIER comparison value"""
        p[0] = Condition(column=p[1], operator=p[2], value=p[3])

    def p_condition_and(self, p: yacc.YaccProduction) -> None:
        """condition : condition AND condition"""
        p[0] = CompoundCondition(left=p[1], operator="and", right=p[3])

    def p_condition_or(self, p: yacc.YaccProduction) -> None:
        """condition : condition OR condition"""
        p[0] = CompoundCondition(left=p[1], operator="or", right=p[3])

    def p_condition_paren(self, p: yacc.YaccProduction) -> None:
        """condition : LPAREN condition RPAREN"""
        p[0] = p[2]

    def p_comparison(self, p: yacc.YaccProduction) -> None:
        """comparison : EQ
                      | NEQ
                      | LT
                      | LTE
                      | GT
                      | GTE"""
        p[0] = p[1]

    # --- Lists and literals ---

    def p_identifier_list_single(self, p: yacc.YaccProduction) -> None:
        """identifier_list : IDENTIFIER"""
        p[0] = [p[1]]

    def p_identifier_list_multiple(self, p: yacc.YaccProduction) -> None:
        """identifier_list : identifier_list COMMA IDENTIFIER"""
        p[0] = p[1] + [p[3]]

    def p_value_list_single(self, p: yacc.YaccProduction) -> None:
        """value_list : value"""
        p[0] = [p[1]]

    def p_value_list_multiple(self, p: yacc.YaccProduction) -> None:
        """value_list : value_list COMMA value"""
        p[0] = p[1] + [p[3]]

    def p_value_integer(self, p: yacc.YaccProduction) -> None:
        """value : INTEGER"""
        if p[1] > INT64_MAX:
            raise ParseError(f"Integer literal out of range: {p[1]}", p.lexpos(1))
        p[0] = Value.integer(p[1])

    def p_value_negative_integer(self, p: yacc.YaccProduction) -> None:
        """value : MINUS INTEGER"""
        if -p[2] < INT64_MIN:
            raise ParseError(f"Integer literal out of range: -{p[2]}", p.lexpos(1))
        p[0] = Value.integer(-p[2])

    def p_value_float(self, p: yacc.YaccProduction) -> None:
        """value : FLOAT"""
        p[0] = Value.float_(p[1])

    def p_value_negative_float(self, p: yacc.YaccProduction) -> None:
        """value : MINUS FLOAT"""
        p[0] = Value.float_(-p[2])

    def p_value_string(self, p: yacc.YaccProduction) -> None:
        """value : STRING"""
        p[0] = Value.text(p[1])

    def p_value_true(self, p: yacc.YaccProduction) -> None:
        """value : TRUE"""
        p[0] = Value.boolean(True)

    def p_value_false(self, p: yacc.YaccProduction) -> None:
        """value : FALSE"""
        p[0] = Value.boolean(False)

    def p_error(self, p: yacc.YaccProduction) -> None:
        if p:
            raise ParseError(f"Syntax error at '{p.value}'", p.lexpos)
        else:
            raise ParseError("Syntax error at end of input", len(self._data))

    def build(self, **kwargs: Any) -> None:
        """Build the parser."""
        self.parser = yacc.yacc(module=self, start="statement", **kwargs)

    def parse(self, data: str) -> Query:
        """Parse one statement.

        Leading and trailing whitespace is ignored; positions in errors
        are offsets into the trimmed text.
        """
        if self.parser is None:
            self.build(debug=False, write_tables=False)

        self._data = data.strip()
        if not self._data:
            raise ParseError("Empty statement", 0)
        self.lexer.input(self._data)
        return self.parser.parse(self._data, lexer=self.lexer.lexer)
