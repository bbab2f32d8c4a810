import logging
import sys

import pytest
from hypothesis import given
from hypothesis import strategies as st

from monkey.monkey_environment import Environment
from monkey.monkey_evaluator import (
    RECURSION_LIMIT,
    apply_function,
    evaluate,
    evaluate_source,
    raise_recursion_limit,
    unwrap_return_value,
)
from monkey.monkey_object import (
    FALSE,
    NULL,
    TRUE,
    Error,
    Function,
    Integer,
    Object,
    ReturnValue,
    to_int64,
)
from monkey.monkey_parser import MonkeyParseError

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


def run(source: str) -> Object:
    return evaluate_source(source, Environment())


@pytest.mark.parametrize(
    "source,expected",
    [
        ("5", 5),
        ("-5", -5),
        ("--5", 5),
        ("5 + 5 * 2", 15),
        ("5 + 5 + 5 + 5 - 10", 10),
        ("2 * 2 * 2 * 2 * 2", 32),
        ("-50 + 100 + -50", 0),
        ("20 + 2 * -10", 0),
        ("50 / 2 * 2 + 10", 60),
        ("2 * (5 + 10)", 30),
        ("3 * (3 * 3) + 10", 37),
        ("(5 + 10 * 2 + 15 / 3) * 2 + -10", 50),
        ("7 / 2", 3),
        ("-7 / 2", -3),
        ("7 / -2", -3),
        ("-7 / -2", 3),
    ],
)
def test_integer_expressions(source: str, expected: int) -> None:
    assert run(source) == Integer(expected)


@pytest.mark.parametrize(
    "source,expected",
    [
        ("true", TRUE),
        ("false", FALSE),
        ("1 < 2", TRUE),
        ("1 > 2", FALSE),
        ("1 < 1", FALSE),
        ("1 == 1", TRUE),
        ("1 != 1", FALSE),
        ("1 == 2", FALSE),
        ("true == true", TRUE),
        ("false == false", TRUE),
        ("true == false", FALSE),
        ("true != false", TRUE),
        ("(1 < 2) == true", TRUE),
        ("(1 > 2) == true", FALSE),
        ("1 == true", FALSE),
        ("1 != true", TRUE),
        ("if (false) { 1 } == if (false) { 2 }", TRUE),
        ("if (false) { 1 } == false", FALSE),
    ],
)
def test_boolean_expressions(source: str, expected: Object) -> None:
    assert run(source) is expected


@pytest.mark.parametrize(
    "source,expected",
    [
        ("!true", FALSE),
        ("!false", TRUE),
        ("!5", FALSE),
        ("!0", FALSE),
        ("!!true", TRUE),
        ("!!5", TRUE),
        ("!(if (false) { 1 })", TRUE),
    ],
)
def test_bang_operator(source: str, expected: Object) -> None:
    assert run(source) is expected


@pytest.mark.parametrize(
    "source,expected",
    [
        ("if (true) { 10 }", Integer(10)),
        ("if (false) { 10 }", NULL),
        ("if (0) { 10 }", Integer(10)),
        ("if (1 < 2) { 10 }", Integer(10)),
        ("if (1 > 2) { 10 }", NULL),
        ("if (1 > 2) { 10 } else { 20 }", Integer(20)),
        ("if (1 < 2) { 10 } else { 20 }", Integer(10)),
        ("if (true) {}", NULL),
    ],
)
def test_if_else_expressions(source: str, expected: Object) -> None:
    assert run(source) == expected


def test_let_statements() -> None:
    assert run("let a = 5; a;") == Integer(5)
    assert run("let a = 5 * 5; a;") == Integer(25)
    assert run("let a = 5; let b = a; b;") == Integer(5)
    assert run("let a = 5; let b = a; let c = a + b + 5; c;") == Integer(15)


def test_let_evaluates_to_null_and_binds() -> None:
    env = Environment()
    assert evaluate_source("let a = 5;", env) is NULL
    assert env.resolve("a") == Integer(5)


def test_let_does_not_bind_on_error() -> None:
    env = Environment()
    result = evaluate_source("let x = 1 / 0;", env)
    assert result == Error("division by zero")
    assert "x" not in env


def test_blocks_do_not_open_a_scope() -> None:
    assert run("if (true) { let y = 5; }; y") == Integer(5)


def test_empty_program_is_null() -> None:
    assert run("") is NULL


@pytest.mark.parametrize(
    "source,expected",
    [
        ("return 10;", 10),
        ("return 10; 9;", 10),
        ("return 2 * 5; 9;", 10),
        ("9; return 2 * 5; 9;", 10),
        ("if (10 > 1) { if (10 > 1) { return 10; } return 1; }", 10),
    ],
)
def test_top_level_return_surfaces_as_return_value(source: str, expected: int) -> None:
    result = run(source)
    assert result == ReturnValue(Integer(expected))
    assert result.inspect() == str(expected)


def test_return_is_unwrapped_at_call_boundary() -> None:
    assert run("let f = fn(x) { return x; x + 10; }; f(10);") == Integer(10)
    assert (
        run("let f = fn(x) { let result = x + 10; return result; return 10; }; f(10);")
        == Integer(20)
    )
    assert run("let f = fn() { return 1; }; f(); 2") == Integer(2)


def test_return_from_nested_block_in_function() -> None:
    source = """
let f = fn(x) {
  if (x > 1) {
    if (x > 2) { return 3; }
    return 2;
  }
  1
};
f(5) + f(2) + f(0)
"""
    assert run(source) == Integer(6)


@pytest.mark.parametrize(
    "source,message",
    [
        ("5 + true;", "type mismatch: INTEGER + BOOLEAN"),
        ("5 + true; 5;", "type mismatch: INTEGER + BOOLEAN"),
        ("-true", "unknown operator: -BOOLEAN"),
        ("true + false;", "unknown operator: BOOLEAN + BOOLEAN"),
        ("true < false;", "unknown operator: BOOLEAN < BOOLEAN"),
        ("5; true + false; 5", "unknown operator: BOOLEAN + BOOLEAN"),
        ("if (10 > 1) { true + false; }", "unknown operator: BOOLEAN + BOOLEAN"),
        (
            "if (10 > 1) { if (10 > 1) { return true + false; } return 1; }",
            "unknown operator: BOOLEAN + BOOLEAN",
        ),
        ("if (false) { 1 } < 1", "type mismatch: NULL < INTEGER"),
        ("if (false) { 1 } + if (false) { 1 }", "unknown operator: NULL + NULL"),
        ("foobar", "identifier not found: foobar"),
        ("1 / 0", "division by zero"),
        ("let z = 0; 10 / z", "division by zero"),
        ("5()", "not a function: INTEGER"),
        ("true(1)", "not a function: BOOLEAN"),
        ("fn(x) { x }(1, 2)", "wrong number of arguments: want=1, got=2"),
        ("fn(x, y) { x }(1)", "wrong number of arguments: want=2, got=1"),
        ("let f = fn() { 1 }; f() + true", "type mismatch: INTEGER + BOOLEAN"),
        ("-(1 / 0)", "division by zero"),
        ("(1 / 0) + undefined", "division by zero"),
        ("if (undefined) { 1 }", "identifier not found: undefined"),
        ("return 1 / 0;", "division by zero"),
    ],
)
def test_error_handling(source: str, message: str) -> None:
    result = run(source)
    assert result == Error(message)
    assert result.inspect() == f"ERROR: {message}"


def test_callee_is_checked_before_arguments() -> None:
    assert run("5(undefined)") == Error("not a function: INTEGER")


def test_arguments_stop_at_first_error() -> None:
    source = "let f = fn(a, b) { a }; f(1 / 0, undefined)"
    assert run(source) == Error("division by zero")


def test_error_stops_program() -> None:
    env = Environment()
    result = evaluate_source("let a = 1; undefined; let b = 2;", env)
    assert result == Error("identifier not found: undefined")
    assert "a" in env
    assert "b" not in env


def test_function_object() -> None:
    result = run("fn(x) { x + 2; };")
    assert isinstance(result, Function)
    assert [p.value for p in result.parameters] == ["x"]
    assert str(result.body) == "(x + 2)"
    assert result.inspect() == "fn(x) {...}"


@pytest.mark.parametrize(
    "source,expected",
    [
        ("let identity = fn(x) { x; }; identity(5);", 5),
        ("let identity = fn(x) { return x; }; identity(5);", 5),
        ("let double = fn(x) { x * 2; }; double(5);", 10),
        ("let add = fn(x, y) { x + y; }; add(2, 3);", 5),
        ("let add = fn(x, y) { x + y; }; add(5 + 5, add(5, 5));", 20),
        ("fn(x) { x; }(5)", 5),
        ("let f = fn() { 7 }; f()", 7),
    ],
)
def test_function_application(source: str, expected: int) -> None:
    assert run(source) == Integer(expected)


def test_empty_function_body_is_null() -> None:
    assert run("fn() {}()") is NULL


def test_closures() -> None:
    source = """
let newAdder = fn(x) {
  fn(y) { x + y };
};
let addTwo = newAdder(2);
addTwo(3);
"""
    assert run(source) == Integer(5)


def test_closure_sees_later_rebinding_in_defining_frame() -> None:
    assert run("let x = 1; let f = fn() { x }; let x = 2; f()") == Integer(2)


def test_parameters_shadow_globals() -> None:
    env = Environment()
    assert evaluate_source("let x = 10; let f = fn(x) { x * 2 }; f(3)", env) == Integer(6)
    assert env.resolve("x") == Integer(10)


def test_call_frames_do_not_leak() -> None:
    assert run("let f = fn() { let inner = 1; inner }; f(); inner") == Error(
        "identifier not found: inner"
    )


def test_recursive_fibonacci() -> None:
    source = """
let fib = fn(n) {
  if (n < 2) { return n; }
  fib(n - 1) + fib(n - 2)
};
fib(10)
"""
    assert run(source) == Integer(55)


def test_higher_order_functions() -> None:
    source = """
let twice = fn(f, x) { f(f(x)) };
let inc = fn(n) { n + 1 };
twice(inc, 5)
"""
    assert run(source) == Integer(7)


def test_functions_compare_by_identity() -> None:
    assert run("let f = fn() { 1 }; f == f") is TRUE
    assert run("fn() { 1 } == fn() { 1 }") is FALSE
    assert run("fn() { 1 } != fn() { 1 }") is TRUE


def test_global_environment_persists_between_calls() -> None:
    env = Environment()
    evaluate_source("let counter = fn(n) { n + 1 };", env)
    evaluate_source("let one = counter(0);", env)
    assert evaluate_source("counter(one)", env) == Integer(2)


COUNT_SOURCE = """
let count = fn(n) {
  if (n == 0) { 0 } else { 1 + count(n - 1) }
};
count(500)
"""


def test_bounded_recursion_several_hundred_calls_deep() -> None:
    assert run(COUNT_SOURCE) == Integer(500)


def test_raise_recursion_limit_never_lowers() -> None:
    sys.setrecursionlimit(RECURSION_LIMIT * 2)
    raise_recursion_limit()
    assert sys.getrecursionlimit() == RECURSION_LIMIT * 2

    sys.setrecursionlimit(1000)
    raise_recursion_limit()
    assert sys.getrecursionlimit() == RECURSION_LIMIT


def test_unwrap_return_value_only_unwraps_returns() -> None:
    assert unwrap_return_value(ReturnValue(Integer(3))) == Integer(3)
    assert unwrap_return_value(Error("boom")) == Error("boom")
    assert unwrap_return_value(NULL) is NULL


def test_unbounded_recursion_raises_recursion_error() -> None:
    with pytest.raises(RecursionError):
        run("let f = fn(x) { f(x) }; f(1)")


@pytest.mark.parametrize(
    "source,expected",
    [
        ("9223372036854775807 + 1", INT64_MIN),
        ("-9223372036854775807 - 1", INT64_MIN),
        ("-9223372036854775807 - 2", INT64_MAX),
        ("9223372036854775807 * 2", -2),
        ("let m = -9223372036854775807 - 1; -m", INT64_MIN),
        ("let m = -9223372036854775807 - 1; m / -1", INT64_MIN),
    ],
)
def test_integers_wrap_at_64_bits(source: str, expected: int) -> None:
    assert run(source) == Integer(expected)


def test_evaluate_source_raises_on_parse_errors() -> None:
    with pytest.raises(MonkeyParseError) as exc:
        run("let x 5;")
    assert "expected next token to be =, got INT instead" in exc.value.errors
    assert isinstance(exc.value, ValueError)


def test_evaluate_rejects_unknown_nodes() -> None:
    with pytest.raises(TypeError, match="cannot evaluate node of type object"):
        evaluate(object(), Environment())  # type: ignore[arg-type]


def test_apply_function_rejects_non_functions() -> None:
    assert apply_function(Integer(1), []) == Error("not a function: INTEGER")


def test_runtime_errors_are_logged(caplog: pytest.LogCaptureFixture) -> None:
    with caplog.at_level(logging.DEBUG, logger="monkey.monkey_evaluator"):
        run("1 / 0")
    assert "runtime error: division by zero" in caplog.text


def _truncated_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


int64s = st.integers(min_value=INT64_MIN + 1, max_value=INT64_MAX)


@given(int64s, int64s, st.sampled_from(["+", "-", "*", "/"]))  # type: ignore[misc]
def test_arithmetic_matches_wrapped_python(a: int, b: int, op: str) -> None:
    result = run(f"({a}) {op} ({b})")
    if op == "/" and b == 0:
        assert result == Error("division by zero")
        return
    expected = {
        "+": a + b,
        "-": a - b,
        "*": a * b,
        "/": _truncated_div(a, b),
    }[op]
    assert result == Integer(to_int64(expected))


@given(int64s, int64s)  # type: ignore[misc]
def test_comparisons_match_python(a: int, b: int) -> None:
    assert run(f"{a} < {b}") is (TRUE if a < b else FALSE)
    assert run(f"{a} == {b}") is (TRUE if a == b else FALSE)
    assert run(f"{a} != {b}") is (TRUE if a != b else FALSE)
