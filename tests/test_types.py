"""Tests for values, data types and key kinds."""

import pytest

from keyed_tables.errors import TypeMismatchError
from keyed_tables.types import (
    INT64_MAX,
    INT64_MIN,
    DataType,
    KeyKind,
    Value,
    format_text_literal,
    parse_text_literal,
)


class TestDataType:
    """Tests for the DataType enum."""

    def test_keywords(self):
        assert DataType.INTEGER.keyword == "INT"
        assert DataType.FLOAT.keyword == "FLOAT"
        assert DataType.BOOLEAN.keyword == "BOOL"
        assert DataType.TEXT.keyword == "STRING"

    def test_from_keyword_aliases(self):
        """Both spellings of each type are accepted, in any case."""
        assert DataType.from_keyword("Integer") is DataType.INTEGER
        assert DataType.from_keyword("int") is DataType.INTEGER
        assert DataType.from_keyword("BOOLEAN") is DataType.BOOLEAN
        assert DataType.from_keyword("text") is DataType.TEXT
        assert DataType.from_keyword("String") is DataType.TEXT

    def test_from_keyword_unknown(self):
        with pytest.raises(ValueError, match="Unknown data type"):
            DataType.from_keyword("uuid")


class TestValue:
    """Tests for the Value tagged union."""

    def test_constructors(self):
        assert Value.integer(5).data_type is DataType.INTEGER
        assert Value.float_(1.5).data_type is DataType.FLOAT
        assert Value.boolean(False).data_type is DataType.BOOLEAN
        assert Value.text("hi").data_type is DataType.TEXT

    def test_variant_must_match_data(self):
        """A bool is not accepted as an integer, nor an int as a float."""
        with pytest.raises(TypeError):
            Value(DataType.INTEGER, True)
        with pytest.raises(TypeError):
            Value(DataType.FLOAT, 1)

    def test_integer_range(self):
        assert Value.integer(INT64_MAX).data == INT64_MAX
        assert Value.integer(INT64_MIN).data == INT64_MIN
        with pytest.raises(OverflowError):
            Value.integer(INT64_MAX + 1)

    def test_equality_is_per_variant(self):
        assert Value.integer(1) == Value.integer(1)
        assert Value.integer(1) != Value.float_(1.0)
        assert Value.integer(1) != Value.boolean(True)

    def test_hashable(self):
        assert len({Value.integer(1), Value.integer(1), Value.text("1")}) == 2

    def test_ordering_same_variant(self):
        assert Value.integer(1) < Value.integer(2)
        assert Value.text("b") >= Value.text("a")
        assert sorted([Value.float_(2.5), Value.float_(-1.0)]) == [Value.float_(-1.0), Value.float_(2.5)]

    def test_ordering_across_variants_fails(self):
        with pytest.raises(TypeMismatchError):
            Value.integer(1) < Value.float_(2.0)  # noqa: B015

    def test_compare(self):
        assert Value.integer(3).compare(">", Value.integer(2))
        assert Value.text("a").compare("!=", Value.text("b"))
        assert not Value.boolean(True).compare("=", Value.boolean(False))

    def test_compare_across_variants_fails(self):
        with pytest.raises(TypeMismatchError):
            Value.integer(1).compare("=", Value.text("1"))

    def test_compare_unknown_operator(self):
        with pytest.raises(ValueError):
            Value.integer(1).compare("~", Value.integer(1))

    def test_render(self):
        assert Value.integer(-42).render() == "-42"
        assert Value.float_(180.5).render() == "180.5"
        assert Value.float_(1e20).render() == "1e+20"
        assert Value.boolean(True).render() == "true"
        assert Value.text('say "hi"\n').render() == '"say \\"hi\\"\\n"'

    def test_str(self):
        assert str(Value.boolean(False)) == "false"
        assert str(Value.text("Alice")) == "Alice"
        assert str(Value.integer(7)) == "7"


class TestTextLiterals:
    """Tests for quoting and unquoting text literals."""

    @pytest.mark.parametrize("text", ["", "plain", 'a"b', "back\\slash", "tab\tnew\nline\r", "ünïcødé"])
    def test_round_trip(self, text):
        assert parse_text_literal(format_text_literal(text)) == text

    def test_unknown_escape_keeps_character(self):
        assert parse_text_literal('"a\\qb"') == "aqb"


class TestKeyKind:
    """Tests for the KeyKind enum."""

    def test_parse(self):
        assert KeyKind.parse("int") is KeyKind.INT
        assert KeyKind.parse("STRING") is KeyKind.STRING
        assert KeyKind.parse(KeyKind.INT) is KeyKind.INT

    def test_parse_unknown(self):
        with pytest.raises(ValueError, match="Unknown key type"):
            KeyKind.parse("uuid")

    def test_data_type(self):
        assert KeyKind.INT.data_type is DataType.INTEGER
        assert KeyKind.STRING.data_type is DataType.TEXT

    def test_key_from_value(self):
        assert KeyKind.INT.key_from_value(Value.integer(9)) == 9
        assert KeyKind.STRING.key_from_value(Value.text("k")) == "k"
        with pytest.raises(TypeMismatchError):
            KeyKind.INT.key_from_value(Value.text("9"))
