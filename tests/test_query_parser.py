"""Tests for the query lexer and parser."""

import pytest

from keyed_tables.errors import ParseError
from keyed_tables.parsing.query_lexer import QueryLexer, escape_if_keyword
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
    QueryParser,
    ReadFromQuery,
    SaveAsQuery,
    SelectQuery,
    ShowTablesQuery,
    UpdateQuery,
)
from keyed_tables.types import INT64_MIN, DataType, Value


@pytest.fixture(scope="module")
def parser():
    return QueryParser()


class TestQueryLexer:
    """Tests for the query lexer."""

    def test_tokenize_select(self):
        lexer = QueryLexer()
        lexer.build()

        tokens = lexer.tokenize('select name from users where id >= 10')
        token_types = [t.type for t in tokens]

        assert token_types == ["SELECT", "IDENTIFIER", "FROM", "IDENTIFIER", "WHERE", "IDENTIFIER", "GTE", "INTEGER"]

    def test_type_keywords(self):
        lexer = QueryLexer()
        lexer.build()

        tokens = lexer.tokenize("int INTEGER float bool Boolean string text")
        assert {t.type for t in tokens} == {"TYPE_NAME"}

    def test_literals(self):
        lexer = QueryLexer()
        lexer.build()

        tokens = lexer.tokenize('42 3.5 2e3 "a\\"b" true')
        assert [(t.type, t.value) for t in tokens] == [
            ("INTEGER", 42),
            ("FLOAT", 3.5),
            ("FLOAT", 2000.0),
            ("STRING", 'a"b'),
            ("TRUE", "true"),
        ]

    def test_path_state(self):
        lexer = QueryLexer()
        lexer.build()

        tokens = lexer.tokenize("READ_FROM ./scripts/init.ktq")
        assert [(t.type, t.value) for t in tokens] == [("READ_FROM", "READ_FROM"), ("PATH", "./scripts/init.ktq")]

    def test_comment_ignored(self):
        lexer = QueryLexer()
        lexer.build()

        tokens = lexer.tokenize("show tables -- list them")
        assert [t.type for t in tokens] == ["SHOW", "TABLES"]

    def test_escape_if_keyword(self):
        assert escape_if_keyword("key") == "`key`"
        assert escape_if_keyword("Select") == "`Select`"
        assert escape_if_keyword("name") == "name"


class TestCreateAndDrop:
    """Tests for table definition statements."""

    def test_create_table(self, parser):
        query = parser.parse("CREATE TABLE users (id INT PRIMARY KEY, name STRING)")
        assert query == CreateTableQuery(
            table="users",
            columns=[
                ColumnDef("id", DataType.INTEGER, primary_key=True),
                ColumnDef("name", DataType.TEXT),
            ],
        )

    def test_create_table_all_types(self, parser):
        query = parser.parse("create table t (a integer, b float, c boolean, d text primary key)")
        assert isinstance(query, CreateTableQuery)
        assert [c.data_type for c in query.columns] == [
            DataType.INTEGER,
            DataType.FLOAT,
            DataType.BOOLEAN,
            DataType.TEXT,
        ]
        assert [c.primary_key for c in query.columns] == [False, False, False, True]

    def test_create_table_without_key_parses(self, parser):
        """Key rules are checked when the command runs, not by the parser."""
        query = parser.parse("CREATE TABLE t (a INT, b INT)")
        assert not any(c.primary_key for c in query.columns)

    def test_drop_table(self, parser):
        assert parser.parse("DROP TABLE users") == DropTableQuery(table="users")


class TestRowStatements:
    """Tests for INSERT, SELECT, UPDATE and DELETE."""

    def test_insert(self, parser):
        query = parser.parse('INSERT INTO users VALUES (1, "Alice")')
        assert query == InsertQuery(table="users", values=[Value.integer(1), Value.text("Alice")])

    def test_insert_literals(self, parser):
        query = parser.parse('INSERT INTO t VALUES (-5, -2.5, true, false, "say \\"hi\\"", 0.0)')
        assert query.values == [
            Value.integer(-5),
            Value.float_(-2.5),
            Value.boolean(True),
            Value.boolean(False),
            Value.text('say "hi"'),
            Value.float_(0.0),
        ]

    def test_insert_with_columns(self, parser):
        query = parser.parse('INSERT INTO users (name, id) VALUES ("Bob", 2)')
        assert query == InsertQuery(
            table="users",
            values=[Value.text("Bob"), Value.integer(2)],
            columns=["name", "id"],
        )

    def test_integer_bounds(self, parser):
        query = parser.parse(f"INSERT INTO t VALUES ({INT64_MIN})")
        assert query.values == [Value.integer(INT64_MIN)]
        with pytest.raises(ParseError, match="out of range"):
            parser.parse("INSERT INTO t VALUES (9223372036854775808)")

    def test_very_long_integer(self, parser):
        """Literals far beyond 64 bits are rejected before conversion."""
        digits = "9" * 5000
        with pytest.raises(ParseError, match="out of range") as exc_info:
            parser.parse(f"INSERT INTO t VALUES ({digits})")
        assert exc_info.value.position == 22
        with pytest.raises(ParseError, match="out of range"):
            parser.parse(f"INSERT INTO t VALUES (-{digits})")

    def test_leading_zeros(self, parser):
        query = parser.parse(f"INSERT INTO t VALUES ({'0' * 30}42)")
        assert query.values == [Value.integer(42)]

    def test_float_out_of_range(self, parser):
        with pytest.raises(ParseError, match="out of range"):
            parser.parse("INSERT INTO t VALUES (1e999)")

    def test_select_star(self, parser):
        assert parser.parse("SELECT * FROM users") == SelectQuery(table="users", fields=["*"], where=None)

    def test_select_where(self, parser):
        query = parser.parse("SELECT * FROM users WHERE id=1")
        assert query.where == Condition("id", "=", Value.integer(1))

    def test_select_fields(self, parser):
        query = parser.parse('SELECT job, height FROM people WHERE sex != "male"')
        assert query.fields == ["job", "height"]
        assert query.where == Condition("sex", "!=", Value.text("male"))

    @pytest.mark.parametrize("op", ["=", "!=", "<", "<=", ">", ">="])
    def test_comparison_operators(self, parser, op):
        query = parser.parse(f"SELECT * FROM t WHERE n {op} 3")
        assert query.where.operator == op

    def test_and_binds_tighter_than_or(self, parser):
        query = parser.parse("SELECT * FROM t WHERE a = 1 OR b = 2 AND c = 3")
        assert query.where == CompoundCondition(
            left=Condition("a", "=", Value.integer(1)),
            operator="or",
            right=CompoundCondition(
                left=Condition("b", "=", Value.integer(2)),
                operator="and",
                right=Condition("c", "=", Value.integer(3)),
            ),
        )

    def test_parenthesized_condition(self, parser):
        query = parser.parse("SELECT * FROM t WHERE (a = 1 OR b = 2) AND c = 3")
        assert query.where.operator == "and"
        assert query.where.left.operator == "or"

    def test_update(self, parser):
        query = parser.parse('UPDATE users SET name = "Bob", id = 7 WHERE id = 1')
        assert query == UpdateQuery(
            table="users",
            assignments=[Assignment("name", Value.text("Bob")), Assignment("id", Value.integer(7))],
            key=Condition("id", "=", Value.integer(1)),
        )

    def test_delete(self, parser):
        query = parser.parse("DELETE FROM users WHERE id=1")
        assert query == DeleteQuery(table="users", key=Condition("id", "=", Value.integer(1)))

    def test_delete_requires_equality(self, parser):
        with pytest.raises(ParseError):
            parser.parse("DELETE FROM users WHERE id > 1")


class TestOtherStatements:
    """Tests for introspection and script statements."""

    def test_describe(self, parser):
        assert parser.parse("DESCRIBE users") == DescribeQuery(table="users")

    def test_show_tables(self, parser):
        assert parser.parse("show tables") == ShowTablesQuery()

    def test_save_as_quoted(self, parser):
        assert parser.parse('SAVE_AS "snap.txt"') == SaveAsQuery(path="snap.txt")

    def test_save_as_bare(self, parser):
        assert parser.parse("SAVE_AS backup.db") == SaveAsQuery(path="backup.db")

    def test_read_from_with_spaces(self, parser):
        assert parser.parse('read_from "my dir/init.ktq"') == ReadFromQuery(path="my dir/init.ktq")


class TestIdentifiersAndCase:
    """Tests for identifier rules and keyword case."""

    def test_keywords_case_insensitive(self, parser):
        assert parser.parse("select * FROM Users") == parser.parse("SELECT * from Users")

    def test_identifier_case_preserved(self, parser):
        assert parser.parse("DESCRIBE MyTable").table == "MyTable"

    def test_backtick_identifier(self, parser):
        query = parser.parse("CREATE TABLE t (`key` STRING PRIMARY KEY)")
        assert query.columns[0].name == "key"

    def test_keyword_as_identifier_fails(self, parser):
        with pytest.raises(ParseError):
            parser.parse("CREATE TABLE t (key STRING PRIMARY KEY)")

    def test_identifier_cannot_start_with_digit(self, parser):
        with pytest.raises(ParseError):
            parser.parse("DESCRIBE 1abc")


class TestDeterminism:
    """Parsing is deterministic and ignores surrounding whitespace."""

    def test_same_input_same_query(self, parser):
        text = 'SELECT a, b FROM t WHERE a < 3 OR b = "x"'
        assert parser.parse(text) == parser.parse(text)

    def test_surrounding_whitespace(self, parser):
        text = "INSERT INTO t VALUES (1, 2.5)"
        assert parser.parse(f"   {text}\t \n") == parser.parse(text)

    def test_inner_whitespace(self, parser):
        assert parser.parse("SELECT*FROM t WHERE a=1") == parser.parse("SELECT  *  FROM  t  WHERE  a  =  1")


class TestParseErrors:
    """Tests for malformed statements."""

    def test_syntax_error_position(self, parser):
        with pytest.raises(ParseError) as exc_info:
            parser.parse("CREATE TABLE without KEY keyword")
        assert exc_info.value.position == 21
        assert "KEY" in str(exc_info.value)

    def test_illegal_character(self, parser):
        with pytest.raises(ParseError, match="Illegal character") as exc_info:
            parser.parse("SELECT * FROM t WHERE a = @")
        assert exc_info.value.position == 26

    def test_end_of_input(self, parser):
        with pytest.raises(ParseError, match="end of input"):
            parser.parse("SELECT * FROM")

    def test_empty_statement(self, parser):
        with pytest.raises(ParseError, match="Empty"):
            parser.parse("   ")

    def test_multi_line_statement(self, parser):
        with pytest.raises(ParseError, match="single line"):
            parser.parse("SELECT * FROM t\nWHERE a = 1")

    def test_statement_terminator_rejected(self, parser):
        with pytest.raises(ParseError):
            parser.parse("SHOW TABLES;")

    def test_parser_recovers_after_error(self, parser):
        """A failed path statement does not leak lexer state into the next parse."""
        with pytest.raises(ParseError):
            parser.parse("SAVE_AS")
        assert parser.parse("SHOW TABLES") == ShowTablesQuery()

    def test_error_kind(self, parser):
        with pytest.raises(ParseError) as exc_info:
            parser.parse("SELEC * FROM t")
        assert exc_info.value.kind == "parse"
