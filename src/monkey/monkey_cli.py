"""
Monkey CLI Entrypoint.

This module provides the command-line interface for running Monkey source code.
It supports evaluation, token and AST dumps, and interactive REPL mode.

Features:
    - Read source from `.monkey` files or inline strings.
    - Lex and parse, reporting parser diagnostics on stderr.
    - Print the token stream (`--tokens`) or the AST (`--ast text|json`).
    - Otherwise evaluate the program and print the result.
    - Launch an interactive REPL.

Example usage:
    monkey fib.monkey
    monkey -s "let x = 5; x * 2"
    monkey -s "1 + 2 * 3" --ast text
    monkey --repl --verbose

Exit status:
    0 on success, 1 when parsing produced diagnostics, 2 when evaluation ended in a
    runtime error, 3 when evaluation exhausted the recursion limit.

Functions:
    run_monkey(source: str, is_string: bool = False, tokens: bool = False,
               ast: str | None = None) -> int:
        Executes the Monkey pipeline (lex → parse → evaluate → output).

    main() -> None:
        Parses CLI arguments and invokes the appropriate action.
"""

import argparse
import json
import logging
import sys

from monkey.monkey_environment import Environment
from monkey.monkey_evaluator import evaluate, raise_recursion_limit
from monkey.monkey_lexer import tokenize
from monkey.monkey_object import is_error
from monkey.monkey_parser import parse

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_PARSE_ERROR = 1
EXIT_RUNTIME_ERROR = 2
EXIT_RECURSION = 3


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )


def recursion_exceeded(stage: str) -> int:
    logger.debug("recursion limit hit while %s", stage)
    print("maximum recursion depth exceeded", file=sys.stderr)
    return EXIT_RECURSION


def run_monkey(
    source: str,
    is_string: bool = False,
    tokens: bool = False,
    ast: str | None = None,
) -> int:
    """
    Run the Monkey pipeline: lex, parse, and evaluate or dump.

    Args:
        source (str): The Monkey source code or path to a `.monkey` file.
        is_string (bool): If True, treats `source` as raw code instead of a file path.
        tokens (bool): If True, prints one token per line and stops.
        ast (str | None): "text" or "json" to print the parsed program and stop.

    Returns:
        int: The process exit status.

    Raises:
        ValueError: If `is_string` is False and the source does not end with '.monkey'.
    """
    if not is_string and not source.endswith(".monkey"):
        raise ValueError("Only .monkey files are supported.")
    if not is_string:
        with open(source, encoding="utf-8") as f:
            source = f.read()

    if tokens:
        for tok in tokenize(source):
            print(f"{tok.line}:{tok.col}\t{tok.type}\t{tok.value!r}")
        return EXIT_OK

    raise_recursion_limit()
    try:
        result = parse(source)
    except RecursionError:
        return recursion_exceeded("parsing")
    if not result.ok:
        for msg in result.errors:
            print(f"parser error: {msg}", file=sys.stderr)
        return EXIT_PARSE_ERROR

    if ast == "json":
        print(json.dumps(result.program.to_dict(), indent=2))
        return EXIT_OK
    if ast == "text":
        print(result.program)
        return EXIT_OK

    try:
        evaluated = evaluate(result.program, Environment())
    except RecursionError:
        return recursion_exceeded("evaluating")

    print(evaluated.inspect())
    return EXIT_RUNTIME_ERROR if is_error(evaluated) else EXIT_OK


def main() -> None:
    """
    Entry point for the Monkey CLI.

    - Launches the REPL if no arguments are passed or `--repl` is specified.
    - Otherwise runs `run_monkey` and exits with its status.

    Supported flags:
        - `-s`, `--string`: Interpret source as a raw string instead of a file path.
        - `--tokens`: Print the token stream.
        - `--ast {text,json}`: Print the parsed program.
        - `--repl`: Launch the interactive REPL.
        - `--verbose`: DEBUG logging, and verbose REPL mode.
    """
    if len(sys.argv) == 1:
        from monkey.monkey_repl import start_repl

        start_repl()
        return
    parser = argparse.ArgumentParser(prog="monkey")
    parser.add_argument("source", nargs="?", help="Filename or raw source (with -s)")
    parser.add_argument(
        "-s", "--string", action="store_true", help="Interpret source as literal string"
    )
    parser.add_argument(
        "--tokens", action="store_true", help="Print the token stream and exit"
    )
    parser.add_argument(
        "--ast",
        choices=("text", "json"),
        default=None,
        help="Print the parsed program and exit",
    )
    parser.add_argument(
        "--repl",
        action="store_true",
        help="Launch interactive REPL",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Debug logging; verbose REPL mode"
    )

    args = parser.parse_args()
    configure_logging(args.verbose)

    if args.repl or args.source is None:
        from monkey.monkey_repl import start_repl

        start_repl(verbose=args.verbose)
    else:
        sys.exit(
            run_monkey(
                source=args.source,
                is_string=args.string,
                tokens=args.tokens,
                ast=args.ast,
            )
        )


if __name__ == "__main__" and not any("pytest" in arg for arg in sys.argv):
    main()
