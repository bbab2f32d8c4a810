"""
Runtime values produced by the Monkey evaluator.

Objects:
    Integer: signed 64-bit integer.
    Boolean: `true` / `false`, always one of the two singletons TRUE and FALSE.
    Null: the absence of a value, always the singleton NULL.
    Function: parameters, body and the environment captured at creation (a closure).
    ReturnValue: wraps the value of a `return` statement while it travels up the tree.
    Error: a runtime error message travelling up the tree.

ReturnValue and Error are control-flow signals, not user-visible data. Every object
carries a `flow` tag, so each evaluation step has one of three outcomes:

    Flow.VALUE   continue with this value
    Flow.RETURN  stop and hand the ReturnValue to the enclosing call
    Flow.ERROR   stop and hand the Error to the top level

Composition points (blocks, calls, operators) check `is_signal(obj)` before using a
sub-result.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from monkey.monkey_ast import BlockStatement, Identifier
    from monkey.monkey_environment import Environment

INTEGER_OBJ = "INTEGER"
BOOLEAN_OBJ = "BOOLEAN"
NULL_OBJ = "NULL"
RETURN_VALUE_OBJ = "RETURN_VALUE"
ERROR_OBJ = "ERROR"
FUNCTION_OBJ = "FUNCTION"

INT64_MIN = -(2**63)
INT64_MASK = 2**64 - 1


def to_int64(value: int) -> int:
    """Wrap an arbitrary Python int into the signed 64-bit range."""
    value &= INT64_MASK
    return value - 2**64 if value > 2**63 - 1 else value


class Flow(Enum):
    VALUE = "value"
    RETURN = "return"
    ERROR = "error"


class Object:
    """Base class of every runtime value.

    Attributes:
        type_name (str): The object's type as shown in error messages.
        flow (Flow): How evaluation proceeds after producing this object.
    """

    type_name: ClassVar[str]
    flow: ClassVar[Flow] = Flow.VALUE

    def inspect(self) -> str:
        raise NotImplementedError


@dataclass(frozen=True)
class Integer(Object):
    type_name: ClassVar[str] = INTEGER_OBJ

    value: int

    def inspect(self) -> str:
        return str(self.value)


@dataclass(frozen=True, eq=False)
class Boolean(Object):
    type_name: ClassVar[str] = BOOLEAN_OBJ

    value: bool

    def inspect(self) -> str:
        return "true" if self.value else "false"


@dataclass(frozen=True, eq=False)
class Null(Object):
    type_name: ClassVar[str] = NULL_OBJ

    def inspect(self) -> str:
        return "null"


@dataclass(frozen=True)
class ReturnValue(Object):
    type_name: ClassVar[str] = RETURN_VALUE_OBJ
    flow: ClassVar[Flow] = Flow.RETURN

    value: Object

    def inspect(self) -> str:
        return self.value.inspect()


@dataclass(frozen=True)
class Error(Object):
    type_name: ClassVar[str] = ERROR_OBJ
    flow: ClassVar[Flow] = Flow.ERROR

    message: str

    def inspect(self) -> str:
        return f"ERROR: {self.message}"


@dataclass(eq=False)
class Function(Object):
    """A function value. `env` is shared with its creator, never copied."""

    type_name: ClassVar[str] = FUNCTION_OBJ

    parameters: tuple[Identifier, ...]
    body: BlockStatement
    env: Environment = field(repr=False)

    def inspect(self) -> str:
        params = ", ".join(str(p) for p in self.parameters)
        return f"fn({params}) {{...}}"


TRUE = Boolean(True)
FALSE = Boolean(False)
NULL = Null()


def native_bool_to_boolean(value: bool) -> Boolean:
    return TRUE if value else FALSE


def is_signal(obj: Object) -> bool:
    """True for objects that must short-circuit evaluation (ReturnValue, Error)."""
    return obj.flow is not Flow.VALUE


def is_error(obj: Object) -> bool:
    return obj.flow is Flow.ERROR


def is_truthy(obj: Object) -> bool:
    """Only `false` and `null` are falsy; every Integer, including 0, is truthy."""
    return obj is not FALSE and obj is not NULL


__all__ = [
    "Boolean",
    "Error",
    "FALSE",
    "Flow",
    "Function",
    "Integer",
    "NULL",
    "Null",
    "Object",
    "ReturnValue",
    "TRUE",
    "is_error",
    "is_signal",
    "is_truthy",
    "native_bool_to_boolean",
    "to_int64",
]
