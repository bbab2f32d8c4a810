"""
Tree-walking evaluator for the Monkey language.

`evaluate(node, env)` is a single recursive function that pattern-matches over the
closed set of AST node classes and returns an `Object`.

Control flow:
    `return` and runtime errors are ordinary objects (ReturnValue, Error) whose `flow`
    tag is not Flow.VALUE. Every composition point checks sub-results with `is_signal`
    and hands a signal straight back to its parent without evaluating anything else.
    A function call unwraps a ReturnValue at the call boundary; a Program does not, so
    a top-level `return` surfaces to the caller as a ReturnValue. Errors are never
    unwrapped: there is no language-level way to recover from one.

Scoping:
    Only a function call opens a new frame (a child of the function's captured
    environment). `if` blocks evaluate in the enclosing frame, so a `let` inside
    one stays visible after it.

Recursion:
    Each Monkey call costs about ten Python frames. Entry points call
    `raise_recursion_limit()` before parsing or evaluating; a program that still
    runs out of frames raises RecursionError.

Runtime error messages:
    identifier not found: <name>
    unknown operator: -<TYPE>
    unknown operator: <TYPE> <op> <TYPE>
    type mismatch: <TYPE> <op> <TYPE>
    division by zero
    not a function: <TYPE>
    wrong number of arguments: want=<n>, got=<m>
"""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence

from monkey.monkey_ast import (
    BlockStatement,
    BooleanLiteral,
    CallExpression,
    ExpressionStatement,
    FunctionLiteral,
    Identifier,
    IfExpression,
    InfixExpression,
    IntegerLiteral,
    LetStatement,
    Node,
    PrefixExpression,
    Program,
    ReturnStatement,
    Statement,
)
from monkey.monkey_environment import BindingNotFoundError, Environment
from monkey.monkey_object import (
    FALSE,
    NULL,
    TRUE,
    Error,
    Function,
    Integer,
    Object,
    ReturnValue,
    is_signal,
    is_truthy,
    native_bool_to_boolean,
    to_int64,
)
from monkey.monkey_parser import MonkeyParseError, parse

logger = logging.getLogger(__name__)

RECURSION_LIMIT = 10_000


def raise_recursion_limit(limit: int = RECURSION_LIMIT) -> None:
    """Let Monkey programs recurse several hundred calls deep. Never lowers the limit."""
    if sys.getrecursionlimit() < limit:
        logger.debug("raising recursion limit to %d", limit)
        sys.setrecursionlimit(limit)


def new_error(message: str) -> Error:
    logger.debug("runtime error: %s", message)
    return Error(message)


def evaluate(node: Node | Program, env: Environment) -> Object:
    """Evaluate `node` in `env` and return the resulting object or signal."""
    match node:
        # Statements
        case Program(statements=statements) | BlockStatement(statements=statements):
            return eval_statements(statements, env)

        case ExpressionStatement(expression=expression):
            return evaluate(expression, env)

        case ReturnStatement(return_value=return_value):
            val = evaluate(return_value, env)
            if is_signal(val):
                return val
            return ReturnValue(val)

        case LetStatement(name=name, value=value_node):
            val = evaluate(value_node, env)
            if is_signal(val):
                return val
            env.define(name.value, val)
            return NULL

        # Expressions
        case IntegerLiteral(value=value):
            return Integer(value)

        case BooleanLiteral(value=value):
            return native_bool_to_boolean(value)

        case Identifier(value=name):
            return eval_identifier(name, env)

        case PrefixExpression(operator=operator, right=right_node):
            right = evaluate(right_node, env)
            if is_signal(right):
                return right
            return eval_prefix_expression(operator, right)

        case InfixExpression(left=left_node, operator=operator, right=right_node):
            left = evaluate(left_node, env)
            if is_signal(left):
                return left
            right = evaluate(right_node, env)
            if is_signal(right):
                return right
            return eval_infix_expression(operator, left, right)

        case IfExpression():
            return eval_if_expression(node, env)

        case FunctionLiteral(parameters=parameters, body=body):
            return Function(parameters, body, env)

        case CallExpression(function=function_node, arguments=argument_nodes):
            function = evaluate(function_node, env)
            if is_signal(function):
                return function
            if not isinstance(function, Function):
                return new_error(f"not a function: {function.type_name}")
            args = eval_expressions(argument_nodes, env)
            if isinstance(args, Object):
                return args
            return apply_function(function, args)

    raise TypeError(f"cannot evaluate node of type {type(node).__name__}")


def eval_statements(statements: Sequence[Statement], env: Environment) -> Object:
    """Evaluate in order; stop at the first signal and return it as-is.

    Used for both programs and blocks. Neither unwraps a ReturnValue: blocks must pass
    it up to the enclosing call, and a program surfaces it to the caller.
    """
    result: Object = NULL
    for statement in statements:
        result = evaluate(statement, env)
        if is_signal(result):
            return result
    return result


def eval_identifier(name: str, env: Environment) -> Object:
    try:
        return env.resolve(name)
    except BindingNotFoundError:
        return new_error(f"identifier not found: {name}")


def eval_expressions(
    nodes: Sequence[Node], env: Environment
) -> list[Object] | Object:
    """Evaluate `nodes` left to right; return the first signal met instead of a list."""
    result: list[Object] = []
    for node in nodes:
        evaluated = evaluate(node, env)
        if is_signal(evaluated):
            return evaluated
        result.append(evaluated)
    return result


def eval_prefix_expression(operator: str, right: Object) -> Object:
    if operator == "!":
        return FALSE if is_truthy(right) else TRUE
    if operator == "-":
        if not isinstance(right, Integer):
            return new_error(f"unknown operator: -{right.type_name}")
        return Integer(to_int64(-right.value))
    return new_error(f"unknown operator: {operator}{right.type_name}")


def eval_infix_expression(operator: str, left: Object, right: Object) -> Object:
    if isinstance(left, Integer) and isinstance(right, Integer):
        return eval_integer_infix_expression(operator, left, right)
    if operator == "==":
        return native_bool_to_boolean(left is right)
    if operator == "!=":
        return native_bool_to_boolean(left is not right)
    if left.type_name != right.type_name:
        return new_error(
            f"type mismatch: {left.type_name} {operator} {right.type_name}"
        )
    return new_error(f"unknown operator: {left.type_name} {operator} {right.type_name}")


def eval_integer_infix_expression(
    operator: str, left: Integer, right: Integer
) -> Object:
    a, b = left.value, right.value
    match operator:
        case "+":
            return Integer(to_int64(a + b))
        case "-":
            return Integer(to_int64(a - b))
        case "*":
            return Integer(to_int64(a * b))
        case "/":
            if b == 0:
                return new_error("division by zero")
            quotient = abs(a) // abs(b)
            return Integer(to_int64(quotient if (a < 0) == (b < 0) else -quotient))
        case "<":
            return native_bool_to_boolean(a < b)
        case ">":
            return native_bool_to_boolean(a > b)
        case "==":
            return native_bool_to_boolean(a == b)
        case "!=":
            return native_bool_to_boolean(a != b)
    return new_error(f"unknown operator: {left.type_name} {operator} {right.type_name}")


def eval_if_expression(node: IfExpression, env: Environment) -> Object:
    condition = evaluate(node.condition, env)
    if is_signal(condition):
        return condition

    if is_truthy(condition):
        return evaluate(node.consequence, env)
    if node.alternative is not None:
        return evaluate(node.alternative, env)
    return NULL


def apply_function(function: Object, args: list[Object]) -> Object:
    """Call `function` with already-evaluated `args`, unwrapping any ReturnValue."""
    if not isinstance(function, Function):
        return new_error(f"not a function: {function.type_name}")

    if len(args) != len(function.parameters):
        return new_error(
            f"wrong number of arguments: want={len(function.parameters)}, got={len(args)}"
        )

    call_env = function.env.new_child()
    for param, arg in zip(function.parameters, args):
        call_env.define(param.value, arg)

    evaluated = evaluate(function.body, call_env)
    return unwrap_return_value(evaluated)


def unwrap_return_value(obj: Object) -> Object:
    if isinstance(obj, ReturnValue):
        return obj.value
    return obj


def evaluate_source(source: str, env: Environment | None = None) -> Object:
    """Parse and evaluate `source`.

    Args:
        source: Monkey source text.
        env: The environment to evaluate in; a fresh global one if omitted.

    Raises:
        MonkeyParseError: If parsing produced any diagnostics.
    """
    raise_recursion_limit()
    result = parse(source)
    if not result.ok:
        raise MonkeyParseError(result.errors)
    return evaluate(result.program, env if env is not None else Environment())


__all__ = ["apply_function", "evaluate", "evaluate_source", "raise_recursion_limit"]
