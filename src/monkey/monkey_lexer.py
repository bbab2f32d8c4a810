"""
Lexical analyzer for the Monkey programming language.

This module converts raw source text into a stream of tokens, one token per call:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Lexer: Converts a CharacterStream into a sequence of tokens.

Features:
    - Skips whitespace
    - Longest-match recognition of operators (`==` and `!=` before `=` and `!`)
    - Recognizes:
        * Identifiers and keywords (`fn let true false if else return`)
        * Integer literals (maximal runs of ASCII digits)
        * Operators and delimiters
    - Unknown characters become ILLEGAL tokens; the lexer never raises on input.
    - Once the input is exhausted, every call returns an EOF token.

Example:
    >>> lexer = Lexer.from_source("let five = 5;")
    >>> lexer.next_token()
    Token(LET, let)

Exports:
    - CharacterStream
    - Lexer
    - tokenize
"""

from collections.abc import Callable, Iterator

from monkey import monkey_token as tokens
from monkey.monkey_token import Token, lookup_ident, token_hashmap

WHITESPACE = " \t\r\n"


def is_letter(ch: str) -> bool:
    return ch.isascii() and (ch.isalpha() or ch == "_")


def is_digit(ch: str) -> bool:
    return "0" <= ch <= "9"


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str, position: int = 0, line: int = 1, column: int = 1):
        self.source = source
        self.position = position
        self.line = line
        self.column = column

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Raises:
            EOFError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"CharacterStreamError: Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """Returns the character `offset` places ahead without advancing, or "" if out of bounds."""
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        return self.position >= len(self.source)


class Lexer:
    """Lexical analyzer for the Monkey language.

    The lexer only moves forward: each call to `next_token` scans exactly one token
    starting at the stream's cursor.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    @classmethod
    def from_source(cls, source: str) -> "Lexer":
        return cls(CharacterStream(source))

    def __iter__(self) -> Iterator[Token]:
        """Yields tokens up to and including the first EOF token."""
        while True:
            tok = self.next_token()
            yield tok
            if tok.type == tokens.EOF:
                return

    def peek(self) -> str:
        return self.stream.peek()

    def advance(self) -> str:
        return self.stream.next()

    def skip_whitespace(self) -> None:
        while not self.stream.end_of_file() and self.peek() in WHITESPACE:
            self.advance()

    def match_operator(self) -> Token | None:
        """Attempts to match the longest operator or delimiter at the cursor.

        Returns:
            Token | None: A Token if a match is found, otherwise None.
        """
        line, col = self.stream.line, self.stream.column
        max_token = None
        candidate = ""

        for i in range(tokens.MAX_OPERATOR_LENGTH):
            ch = self.stream.peek(i)
            if ch == "":
                break
            candidate += ch
            if candidate in token_hashmap:
                max_token = candidate

        if max_token:
            for _ in range(len(max_token)):
                self.advance()
            return Token(token_hashmap[max_token], max_token, line, col)

        return None

    def read_while(self, predicate: Callable[[str], bool]) -> str:
        text = ""
        while not self.stream.end_of_file() and predicate(self.peek()):
            text += self.advance()
        return text

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Returns:
            Token: The next token. After the end of input this is always EOF.
        """
        self.skip_whitespace()

        line, col = self.stream.line, self.stream.column
        if self.stream.end_of_file():
            return Token(tokens.EOF, "", line, col)

        ch = self.peek()

        # 1. Identifier or keyword
        if is_letter(ch):
            ident = self.read_while(lambda c: is_letter(c) or is_digit(c))
            return Token(lookup_ident(ident), ident, line, col)

        # 2. Integer
        if is_digit(ch):
            return Token(tokens.INT, self.read_while(is_digit), line, col)

        # 3. Operator or delimiter
        token = self.match_operator()
        if token:
            return token

        # 4. Unknown character
        return Token(tokens.ILLEGAL, self.advance(), line, col)


def tokenize(source: str) -> list[Token]:
    """Lex `source` completely. The returned list always ends with the EOF token."""
    return list(Lexer.from_source(source))


__all__ = ["CharacterStream", "Lexer", "tokenize"]
