"""
Defines the abstract syntax tree (AST) node types for the Monkey programming language.

The node set is closed: every statement is one of `LetStatement`, `ReturnStatement`,
`ExpressionStatement` or `BlockStatement`, and every expression is one of `Identifier`,
`IntegerLiteral`, `BooleanLiteral`, `PrefixExpression`, `InfixExpression`,
`IfExpression`, `FunctionLiteral` or `CallExpression`. The evaluator and any printer
pattern-match over these classes instead of relying on per-node virtual methods.

Nodes are frozen dataclasses holding tuples, so a parsed `Program` cannot be mutated.
A `Function` object keeps a reference to its `BlockStatement` body, which is safe to
share for the same reason.

Each node tracks:
    token (Token): The token the node was built from (source position, literal text).

Rendering:
    `str(node)` gives the canonical parenthesized form used by tests and the REPL's
    debug output, e.g. `(1 + (2 * 3))`.

Serialization:
    `node.to_dict()` returns an ASTDict suitable for JSON output.
"""

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, TypedDict, Union

from monkey.monkey_token import Token


class ASTDict(TypedDict, total=False):
    """
    TypedDict representation of a node used for serialization.

    Fields:
        kind (str): The node class name (e.g. "LetStatement", "InfixExpression").
        line (int): Line number of the node's token.
        col (int): Column number of the node's token.

    Node-specific fields (e.g. `operator`, `left`, `statements`) are added as-is, with
    child nodes converted recursively.
    """

    kind: str
    line: int
    col: int


def _serialize(value: Any) -> Any:
    if isinstance(value, Node):
        return value.to_dict()
    if isinstance(value, tuple):
        return [_serialize(v) for v in value]
    return value


class Node:
    """Base class of every AST node."""

    token: Token

    def token_literal(self) -> str:
        return self.token.value

    def to_dict(self) -> ASTDict:
        data: dict[str, Any] = {
            "kind": type(self).__name__,
            "line": self.token.line,
            "col": self.token.col,
        }
        for field in fields(self):  # type: ignore[arg-type]
            if field.name != "token":
                data[field.name] = _serialize(getattr(self, field.name))
        return data  # type: ignore[return-value]


# Expressions


@dataclass(frozen=True)
class Identifier(Node):
    token: Token
    value: str

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class IntegerLiteral(Node):
    token: Token
    value: int

    def __str__(self) -> str:
        return self.token.value


@dataclass(frozen=True)
class BooleanLiteral(Node):
    token: Token
    value: bool

    def __str__(self) -> str:
        return self.token.value


@dataclass(frozen=True)
class PrefixExpression(Node):
    """A unary operator applied to one operand: `!x`, `-5`."""

    token: Token
    operator: str
    right: Expression

    def __str__(self) -> str:
        return f"({self.operator}{self.right})"


@dataclass(frozen=True)
class InfixExpression(Node):
    """A binary operator between two operands: `a + b`, `x == y`."""

    token: Token
    left: Expression
    operator: str
    right: Expression

    def __str__(self) -> str:
        return f"({self.left} {self.operator} {self.right})"


@dataclass(frozen=True)
class IfExpression(Node):
    """`if (<condition>) { ... } else { ... }`; the else branch is optional."""

    token: Token
    condition: Expression
    consequence: BlockStatement
    alternative: BlockStatement | None = None

    def __str__(self) -> str:
        out = f"if{self.condition} {self.consequence}"
        if self.alternative is not None:
            out += f"else {self.alternative}"
        return out


@dataclass(frozen=True)
class FunctionLiteral(Node):
    token: Token
    parameters: tuple[Identifier, ...]
    body: BlockStatement

    def __str__(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"{self.token_literal()}({params}) {self.body}"


@dataclass(frozen=True)
class CallExpression(Node):
    """A call of any callee expression: `add(1, 2)`, `fn(x) { x }(5)`."""

    token: Token
    function: Expression
    arguments: tuple[Expression, ...]

    def __str__(self) -> str:
        args = ", ".join(str(a) for a in self.arguments)
        return f"{self.function}({args})"


# Statements


@dataclass(frozen=True)
class LetStatement(Node):
    token: Token
    name: Identifier
    value: Expression

    def __str__(self) -> str:
        return f"{self.token_literal()} {self.name} = {self.value};"


@dataclass(frozen=True)
class ReturnStatement(Node):
    token: Token
    return_value: Expression

    def __str__(self) -> str:
        return f"{self.token_literal()} {self.return_value};"


@dataclass(frozen=True)
class ExpressionStatement(Node):
    token: Token
    expression: Expression

    def __str__(self) -> str:
        return str(self.expression)


@dataclass(frozen=True)
class BlockStatement(Node):
    token: Token
    statements: tuple[Statement, ...]

    def __str__(self) -> str:
        return "".join(str(s) for s in self.statements)


@dataclass(frozen=True)
class Program:
    """The root of every parse: an ordered, immutable sequence of statements."""

    statements: tuple[Statement, ...] = ()

    def token_literal(self) -> str:
        return self.statements[0].token_literal() if self.statements else ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": "Program",
            "statements": [s.to_dict() for s in self.statements],
        }

    def __str__(self) -> str:
        return "".join(str(s) for s in self.statements)


Expression = Union[
    Identifier,
    IntegerLiteral,
    BooleanLiteral,
    PrefixExpression,
    InfixExpression,
    IfExpression,
    FunctionLiteral,
    CallExpression,
]

Statement = Union[LetStatement, ReturnStatement, ExpressionStatement, BlockStatement]

__all__ = [
    "ASTDict",
    "BlockStatement",
    "BooleanLiteral",
    "CallExpression",
    "Expression",
    "ExpressionStatement",
    "FunctionLiteral",
    "Identifier",
    "IfExpression",
    "InfixExpression",
    "IntegerLiteral",
    "LetStatement",
    "Node",
    "PrefixExpression",
    "Program",
    "ReturnStatement",
    "Statement",
]
