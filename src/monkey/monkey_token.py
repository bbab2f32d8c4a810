"""
Token model for the Monkey programming language.

This module defines the alphabet of lexical units shared by the lexer and the parser.

Token types are plain string constants. Operator and delimiter types use their own
source text (e.g. `ASSIGN == "="`), so diagnostics read naturally:
`expected next token to be =, got INT instead`.

Exports:
    - Token: an immutable lexical unit with source position.
    - keywords: reserved words mapped to their token types.
    - token_hashmap: operator/delimiter text mapped to token types.
    - lookup_ident: classifies a scanned identifier as keyword or IDENT.
"""

from dataclasses import dataclass

# Special
ILLEGAL = "ILLEGAL"
EOF = "EOF"

# Identifiers and literals
IDENT = "IDENT"
INT = "INT"

# Operators
ASSIGN = "="
PLUS = "+"
MINUS = "-"
BANG = "!"
ASTERISK = "*"
SLASH = "/"
LT = "<"
GT = ">"
EQ = "=="
NOT_EQ = "!="

# Delimiters
COMMA = ","
SEMICOLON = ";"
LPAREN = "("
RPAREN = ")"
LBRACE = "{"
RBRACE = "}"

# Keywords
FUNCTION = "FUNCTION"
LET = "LET"
TRUE = "TRUE"
FALSE = "FALSE"
IF = "IF"
ELSE = "ELSE"
RETURN = "RETURN"

keywords: dict[str, str] = {
    "fn": FUNCTION,
    "let": LET,
    "true": TRUE,
    "false": FALSE,
    "if": IF,
    "else": ELSE,
    "return": RETURN,
}

token_hashmap: dict[str, str] = {
    "=": ASSIGN,
    "==": EQ,
    "!": BANG,
    "!=": NOT_EQ,
    "+": PLUS,
    "-": MINUS,
    "*": ASTERISK,
    "/": SLASH,
    "<": LT,
    ">": GT,
    ",": COMMA,
    ";": SEMICOLON,
    "(": LPAREN,
    ")": RPAREN,
    "{": LBRACE,
    "}": RBRACE,
}

# Longest operator spelling; bounds the lexer's lookahead.
MAX_OPERATOR_LENGTH = max(len(op) for op in token_hashmap)


@dataclass(frozen=True)
class Token:
    """Represents a single lexical token in the Monkey language.

    Attributes:
        type (str): The token type (e.g. 'IDENT', 'INT', '==', 'EOF').
        value (str): The literal source text of the token.
        line (int): The 1-based line number where the token starts.
        col (int): The 1-based column number where the token starts.
    """

    type: str
    value: str
    line: int = 0
    col: int = 0

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value})"


def lookup_ident(ident: str) -> str:
    """Return the keyword token type for `ident`, or IDENT if it is not reserved."""
    return keywords.get(ident, IDENT)


__all__ = ["Token", "keywords", "lookup_ident", "token_hashmap"]
