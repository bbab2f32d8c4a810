"""
Monkey Language Parser

Parses Monkey source tokens into an abstract syntax tree.

This module implements a Pratt (precedence-climbing) parser. Every token type that can
start an expression has a prefix parse function; every token type that can continue
one has an infix parse function and a binding precedence. Expressions are parsed by
looking up the prefix function for the current token and then folding infix operators
for as long as the next operator binds tighter than the caller's precedence, which
makes equal-precedence operators left-associative: `a - b - c` is `((a - b) - c)`.

Supported Constructs
--------------------
- Statements:
    * `let <ident> = <expr>;`
    * `return <expr>;`
    * expression statements (the trailing `;` is optional)
- Expressions:
    * identifiers, integer and boolean literals
    * prefix `!` and `-`
    * infix `+ - * / == != < >`
    * grouping with `( ... )`
    * `if (<cond>) { ... } else { ... }`
    * function literals `fn(<params>) { ... }`
    * calls `<expr>(<args>)`

Precedence (lowest to highest)
------------------------------
LOWEST < EQUALS (`== !=`) < LESSGREATER (`< >`) < SUM (`+ -`) < PRODUCT (`* /`)
< PREFIX (`-x !x`) < CALL (`f(x)`)

Parser Behavior
---------------
- Never raises on malformed input. Problems are recorded as diagnostics and the
  statement in progress is dropped; the top-level loop moves on to the next token.
- `parse_program()` returns a `ParseResult` holding the `Program` and the tuple of
  diagnostics for that call.

Entry Points
------------
- `Parser(lexer).parse_program()`
- `parse(source)`
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import IntEnum

from monkey import monkey_token as tokens
from monkey.monkey_ast import (
    BlockStatement,
    BooleanLiteral,
    CallExpression,
    Expression,
    ExpressionStatement,
    FunctionLiteral,
    Identifier,
    IfExpression,
    InfixExpression,
    IntegerLiteral,
    LetStatement,
    PrefixExpression,
    Program,
    ReturnStatement,
    Statement,
)
from monkey.monkey_lexer import Lexer
from monkey.monkey_token import Token

logger = logging.getLogger(__name__)

INT64_MAX = 2**63 - 1


class Precedence(IntEnum):
    LOWEST = 1
    EQUALS = 2
    LESSGREATER = 3
    SUM = 4
    PRODUCT = 5
    PREFIX = 6
    CALL = 7


precedences: dict[str, Precedence] = {
    tokens.EQ: Precedence.EQUALS,
    tokens.NOT_EQ: Precedence.EQUALS,
    tokens.LT: Precedence.LESSGREATER,
    tokens.GT: Precedence.LESSGREATER,
    tokens.PLUS: Precedence.SUM,
    tokens.MINUS: Precedence.SUM,
    tokens.SLASH: Precedence.PRODUCT,
    tokens.ASTERISK: Precedence.PRODUCT,
    tokens.LPAREN: Precedence.CALL,
}

PrefixParseFn = Callable[[], Expression | None]
InfixParseFn = Callable[[Expression], Expression | None]


class MonkeyParseError(ValueError):
    """Raised by callers that want an exception for a parse with diagnostics.

    The parser itself never raises it.
    """

    def __init__(self, errors: tuple[str, ...]) -> None:
        super().__init__("; ".join(errors))
        self.errors = errors


@dataclass(frozen=True)
class ParseResult:
    """The outcome of one parse call.

    Attributes:
        program (Program): The statements that parsed successfully.
        errors (tuple[str, ...]): Diagnostics in the order they were found.
    """

    program: Program
    errors: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return not self.errors


class Parser:
    """
    Monkey Parser Class

    Consumes a `Lexer` behind a two-token window (`cur_token` and `peek_token`) and
    builds a `Program`.

    Attributes
    ----------
    lexer : Lexer
        The token source.
    cur_token : Token
        The token under examination.
    peek_token : Token
        The token after `cur_token`.
    prefix_parse_fns : dict[str, PrefixParseFn]
        Token type -> parser for expressions starting with that token.
    infix_parse_fns : dict[str, InfixParseFn]
        Token type -> parser for expressions continuing with that token.
    """

    def __init__(self, lexer: Lexer) -> None:
        self.lexer = lexer
        self.errors: list[str] = []

        self.prefix_parse_fns: dict[str, PrefixParseFn] = {}
        self.infix_parse_fns: dict[str, InfixParseFn] = {}

        self.register_prefix(tokens.IDENT, self.parse_identifier)
        self.register_prefix(tokens.INT, self.parse_integer_literal)
        self.register_prefix(tokens.TRUE, self.parse_boolean)
        self.register_prefix(tokens.FALSE, self.parse_boolean)
        self.register_prefix(tokens.BANG, self.parse_prefix_expression)
        self.register_prefix(tokens.MINUS, self.parse_prefix_expression)
        self.register_prefix(tokens.LPAREN, self.parse_grouped_expression)
        self.register_prefix(tokens.IF, self.parse_if_expression)
        self.register_prefix(tokens.FUNCTION, self.parse_function_literal)

        for op in (
            tokens.PLUS,
            tokens.MINUS,
            tokens.SLASH,
            tokens.ASTERISK,
            tokens.EQ,
            tokens.NOT_EQ,
            tokens.LT,
            tokens.GT,
        ):
            self.register_infix(op, self.parse_infix_expression)
        self.register_infix(tokens.LPAREN, self.parse_call_expression)

        # Read two tokens, so cur_token and peek_token are both set
        self.cur_token: Token = self.lexer.next_token()
        self.peek_token: Token = self.lexer.next_token()

    def register_prefix(self, token_type: str, fn: PrefixParseFn) -> None:
        self.prefix_parse_fns[token_type] = fn

    def register_infix(self, token_type: str, fn: InfixParseFn) -> None:
        self.infix_parse_fns[token_type] = fn

    # Token navigation

    def next_token(self) -> None:
        self.cur_token = self.peek_token
        self.peek_token = self.lexer.next_token()

    def cur_token_is(self, token_type: str) -> bool:
        return self.cur_token.type == token_type

    def peek_token_is(self, token_type: str) -> bool:
        return self.peek_token.type == token_type

    def expect_peek(self, token_type: str) -> bool:
        """Advance if the next token has type `token_type`; otherwise record a diagnostic.

        The unexpected token is left in place.
        """
        if self.peek_token_is(token_type):
            self.next_token()
            return True
        self.peek_error(token_type)
        return False

    def peek_precedence(self) -> Precedence:
        return precedences.get(self.peek_token.type, Precedence.LOWEST)

    def cur_precedence(self) -> Precedence:
        return precedences.get(self.cur_token.type, Precedence.LOWEST)

    # Diagnostics

    def error(self, msg: str) -> None:
        logger.debug(
            "parse error at line %d, col %d: %s",
            self.cur_token.line,
            self.cur_token.col,
            msg,
        )
        self.errors.append(msg)

    def peek_error(self, token_type: str) -> None:
        self.error(
            f"expected next token to be {token_type}, got {self.peek_token.type} instead"
        )

    def no_prefix_parse_fn_error(self, token_type: str) -> None:
        self.error(f"no prefix parse function for {token_type} found")

    # Statements

    def parse_program(self) -> ParseResult:
        """Parse the whole token stream into a `ParseResult`."""
        self.errors = []
        statements: list[Statement] = []

        while not self.cur_token_is(tokens.EOF):
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
            self.next_token()

        return ParseResult(Program(tuple(statements)), tuple(self.errors))

    def parse_statement(self) -> Statement | None:
        if self.cur_token.type == tokens.LET:
            return self.parse_let_statement()
        if self.cur_token.type == tokens.RETURN:
            return self.parse_return_statement()
        return self.parse_expression_statement()

    def parse_let_statement(self) -> LetStatement | None:
        """Parse `let <ident> = <expr>[;]`."""
        tok = self.cur_token

        if not self.expect_peek(tokens.IDENT):
            return None
        name = Identifier(self.cur_token, self.cur_token.value)

        if not self.expect_peek(tokens.ASSIGN):
            return None

        self.next_token()
        value = self.parse_expression(Precedence.LOWEST)
        if value is None:
            return None

        if self.peek_token_is(tokens.SEMICOLON):
            self.next_token()

        return LetStatement(tok, name, value)

    def parse_return_statement(self) -> ReturnStatement | None:
        """Parse `return <expr>[;]`."""
        tok = self.cur_token

        self.next_token()
        return_value = self.parse_expression(Precedence.LOWEST)
        if return_value is None:
            return None

        if self.peek_token_is(tokens.SEMICOLON):
            self.next_token()

        return ReturnStatement(tok, return_value)

    def parse_expression_statement(self) -> ExpressionStatement | None:
        tok = self.cur_token

        expression = self.parse_expression(Precedence.LOWEST)
        if expression is None:
            return None

        if self.peek_token_is(tokens.SEMICOLON):
            self.next_token()

        return ExpressionStatement(tok, expression)

    def parse_block_statement(self) -> BlockStatement:
        """Parse statements up to the closing `}` (or EOF); `cur_token` is the `{`."""
        tok = self.cur_token
        statements: list[Statement] = []

        self.next_token()

        while not self.cur_token_is(tokens.RBRACE) and not self.cur_token_is(
            tokens.EOF
        ):
            stmt = self.parse_statement()
            if stmt is not None:
                statements.append(stmt)
            self.next_token()

        return BlockStatement(tok, tuple(statements))

    # Expressions

    def parse_expression(self, precedence: Precedence) -> Expression | None:
        """Parse an expression whose operators all bind tighter than `precedence`."""
        prefix = self.prefix_parse_fns.get(self.cur_token.type)
        if prefix is None:
            self.no_prefix_parse_fn_error(self.cur_token.type)
            return None
        left = prefix()

        while (
            left is not None
            and not self.peek_token_is(tokens.SEMICOLON)
            and precedence < self.peek_precedence()
        ):
            infix = self.infix_parse_fns.get(self.peek_token.type)
            if infix is None:
                return left

            self.next_token()
            left = infix(left)

        return left

    def parse_identifier(self) -> Expression:
        return Identifier(self.cur_token, self.cur_token.value)

    def parse_integer_literal(self) -> Expression | None:
        tok = self.cur_token
        value = int(tok.value)
        if value > INT64_MAX:
            self.error(f'could not parse "{tok.value}" as integer')
            return None
        return IntegerLiteral(tok, value)

    def parse_boolean(self) -> Expression:
        return BooleanLiteral(self.cur_token, self.cur_token_is(tokens.TRUE))

    def parse_prefix_expression(self) -> Expression | None:
        tok = self.cur_token

        self.next_token()
        right = self.parse_expression(Precedence.PREFIX)
        if right is None:
            return None

        return PrefixExpression(tok, tok.value, right)

    def parse_infix_expression(self, left: Expression) -> Expression | None:
        tok = self.cur_token
        precedence = self.cur_precedence()

        self.next_token()
        right = self.parse_expression(precedence)
        if right is None:
            return None

        return InfixExpression(tok, left, tok.value, right)

    def parse_grouped_expression(self) -> Expression | None:
        self.next_token()

        exp = self.parse_expression(Precedence.LOWEST)
        if exp is None or not self.expect_peek(tokens.RPAREN):
            return None

        return exp

    def parse_if_expression(self) -> Expression | None:
        """Parse `if (<cond>) { ... } [else { ... }]`."""
        tok = self.cur_token

        if not self.expect_peek(tokens.LPAREN):
            return None

        self.next_token()
        condition = self.parse_expression(Precedence.LOWEST)
        if condition is None:
            return None

        if not self.expect_peek(tokens.RPAREN):
            return None

        if not self.expect_peek(tokens.LBRACE):
            return None

        consequence = self.parse_block_statement()

        alternative = None
        if self.peek_token_is(tokens.ELSE):
            self.next_token()

            if not self.expect_peek(tokens.LBRACE):
                return None

            alternative = self.parse_block_statement()

        return IfExpression(tok, condition, consequence, alternative)

    def parse_function_literal(self) -> Expression | None:
        """Parse `fn(<params>) { ... }`."""
        tok = self.cur_token

        if not self.expect_peek(tokens.LPAREN):
            return None

        parameters = self.parse_function_parameters()
        if parameters is None:
            return None

        if not self.expect_peek(tokens.LBRACE):
            return None

        body = self.parse_block_statement()

        return FunctionLiteral(tok, parameters, body)

    def parse_function_parameters(self) -> tuple[Identifier, ...] | None:
        identifiers: list[Identifier] = []

        if self.peek_token_is(tokens.RPAREN):
            self.next_token()
            return ()

        if not self.expect_peek(tokens.IDENT):
            return None
        identifiers.append(Identifier(self.cur_token, self.cur_token.value))

        while self.peek_token_is(tokens.COMMA):
            self.next_token()
            if not self.expect_peek(tokens.IDENT):
                return None
            identifiers.append(Identifier(self.cur_token, self.cur_token.value))

        if not self.expect_peek(tokens.RPAREN):
            return None

        return tuple(identifiers)

    def parse_call_expression(self, function: Expression) -> Expression | None:
        tok = self.cur_token

        arguments = self.parse_call_arguments()
        if arguments is None:
            return None

        return CallExpression(tok, function, arguments)

    def parse_call_arguments(self) -> tuple[Expression, ...] | None:
        args: list[Expression] = []

        if self.peek_token_is(tokens.RPAREN):
            self.next_token()
            return ()

        self.next_token()
        arg = self.parse_expression(Precedence.LOWEST)
        if arg is None:
            return None
        args.append(arg)

        while self.peek_token_is(tokens.COMMA):
            self.next_token()
            self.next_token()
            arg = self.parse_expression(Precedence.LOWEST)
            if arg is None:
                return None
            args.append(arg)

        if not self.expect_peek(tokens.RPAREN):
            return None

        return tuple(args)


def parse(source: str) -> ParseResult:
    """Lex and parse `source` in one call."""
    return Parser(Lexer.from_source(source)).parse_program()


__all__ = ["MonkeyParseError", "ParseResult", "Parser", "Precedence", "parse"]
