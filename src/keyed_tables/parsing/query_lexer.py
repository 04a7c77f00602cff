"""Lexer for the keyed-tables query language."""

import math

import ply.lex as lex

from keyed_tables.errors import ParseError
from keyed_tables.types import TYPE_KEYWORDS, parse_text_literal


class QueryLexer:
    """Lexer for tokenizing keyed-tables statements."""

    # Reserved keywords
    reserved = {
        "create": "CREATE",
        "table": "TABLE",
        "drop": "DROP",
        "insert": "INSERT",
        "into": "INTO",
        "values": "VALUES",
        "select": "SELECT",
        "from": "FROM",
        "where": "WHERE",
        "update": "UPDATE",
        "set": "SET",
        "delete": "DELETE",
        "describe": "DESCRIBE",
        "show": "SHOW",
        "tables": "TABLES",
        "primary": "PRIMARY",
        "key": "KEY",
        "and": "AND",
        "or": "OR",
        "true": "TRUE",
        "false": "FALSE",
        "save_as": "SAVE_AS",
        "read_from": "READ_FROM",
    }
    reserved.update({word: "TYPE_NAME" for word in TYPE_KEYWORDS})

    # Token list
    tokens = [
        "IDENTIFIER",
        "INTEGER",
        "FLOAT",
        "STRING",
        "PATH",
        "STAR",
        "COMMA",
        "LPAREN",
        "RPAREN",
        "EQ",
        "NEQ",
        "LT",
        "LTE",
        "GT",
        "GTE",
        "MINUS",
    ] + sorted(set(reserved.values()))

    # Lexer states: path state for the argument of SAVE_AS / READ_FROM
    states = (("path", "exclusive"),)

    # Simple tokens (INITIAL state)
    t_STAR = r"\*"
    t_COMMA = r","
    t_LPAREN = r"\("
    t_RPAREN = r"\)"
    t_EQ = r"="
    t_NEQ = r"!="
    t_LTE = r"<="
    t_LT = r"<"
    t_GTE = r">="
    t_GT = r">"
    t_MINUS = r"-"

    # Statements are single lines, so a newline is not ignored
    t_ignore = " \t\r"

    def __init__(self) -> None:
        self.lexer: lex.Lexer = None  # type: ignore

    def t_COMMENT(self, t: lex.LexToken) -> None:
        r"--[^\n]*"
        pass  # Ignore comments

    def t_FLOAT(self, t: lex.LexToken) -> lex.LexToken:
        r"\d+\.\d+(?:[eE][+-]?\d+)?|\d+[eE][+-]?\d+"
        value = float(t.value)
        if not math.isfinite(value):
            raise ParseError(f"Float literal out of range: {t.value}", t.lexpos)
        t.value = value
        return t

    def t_INTEGER(self, t: lex.LexToken) -> lex.LexToken:
        r"\d+"
        # More than 19 significant digits never fits in 64 bits
        if len(t.value.lstrip("0")) > 19:
            raise ParseError(f"Integer literal out of range: {t.value[:20]}...", t.lexpos)
        t.value = int(t.value)
        return t

    def t_STRING(self, t: lex.LexToken) -> lex.LexToken:
        r'"([^"\\\n]|\\.)*"'
        t.value = parse_text_literal(t.value)
        return t

    def t_BACKTICK_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"`[a-zA-Z_][a-zA-Z0-9_]*`"
        # Strip backticks; always an identifier, bypassing keyword lookup
        t.value = t.value[1:-1]
        t.type = "IDENTIFIER"
        return t

    def t_IDENTIFIER(self, t: lex.LexToken) -> lex.LexToken:
        r"[a-zA-Z_][a-zA-Z0-9_]*"
        # Check if it's a reserved word (case-insensitive)
        t.type = self.reserved.get(t.value.lower(), "IDENTIFIER")
        if t.type in ("SAVE_AS", "READ_FROM"):
            t.lexer.begin("path")
        return t

    def t_NEWLINE(self, t: lex.LexToken) -> None:
        r"\n"
        raise ParseError("Statements must fit on a single line", t.lexpos)

    def t_error(self, t: lex.LexToken) -> None:
        raise ParseError(f"Illegal character '{t.value[0]}'", t.lexpos)

    # --- Exclusive path state tokens ---

    t_path_ignore = " \t\r"

    def t_path_QUOTED_PATH(self, t: lex.LexToken) -> lex.LexToken:
        r'"([^"\\\n]|\\.)*"'
        t.value = parse_text_literal(t.value)
        t.type = "PATH"
        t.lexer.begin("INITIAL")
        return t

    def t_path_PATH(self, t: lex.LexToken) -> lex.LexToken:
        r"[^\s\"]+"
        t.lexer.begin("INITIAL")
        return t

    def t_path_error(self, t: lex.LexToken) -> None:
        t.lexer.begin("INITIAL")
        raise ParseError(f"Expected a file path, got '{t.value[0]}'", t.lexpos)

    # --- Lexer methods ---

    def build(self, **kwargs) -> None:  # type: ignore
        """Build the lexer."""
        self.lexer = lex.lex(module=self, **kwargs)

    def input(self, data: str) -> None:
        """Set the input string to tokenize."""
        self.lexer.begin("INITIAL")
        self.lexer.input(data)

    def token(self) -> lex.LexToken | None:
        """Return the next token."""
        return self.lexer.token()

    def tokenize(self, data: str) -> list[lex.LexToken]:
        """Tokenize the input and return all tokens."""
        self.input(data)
        tokens = []
        while True:
            tok = self.token()
            if tok is None:
                break
            tokens.append(tok)
        return tokens


# Module-level set of reserved keywords (lowercase) for use by other modules
RESERVED_KEYWORDS: frozenset[str] = frozenset(QueryLexer.reserved.keys())


def escape_if_keyword(name: str) -> str:
    """Wrap a name in backticks if it clashes with a reserved keyword."""
    if name.lower() in RESERVED_KEYWORDS:
        return f"`{name}`"
    return name
