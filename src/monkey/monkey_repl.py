import io
import logging
import traceback

from monkey.monkey_ast import LetStatement, Program
from monkey.monkey_environment import Environment
from monkey.monkey_evaluator import evaluate, raise_recursion_limit
from monkey.monkey_parser import parse

logger = logging.getLogger(__name__)

PROMPT = ">> "
CONTINUATION_PROMPT = ".. "

MONKEY_FACE = "\n".join(
    [
        "            __,__",
        '   .--.  .-"     "-.  .--.',
        "  / .. \\/  .-. .-.  \\/ .. \\",
        " | |  '|  /   Y   \\  |'  | |",
        " | \\   \\  \\ 0 | 0 /  /   / |",
        "  \\ '- ,\\.-" + '"' * 7 + "-./, -' /",
        "   ''-' /_   ^ ^   _\\ '-''",
        "       |  \\._   _./  |",
        "       \\   \\ '~' /   /",
        "        '._ '-=-' _.'",
        "           '-----'",
    ]
)


def print_traceback() -> None:
    buf = io.StringIO()
    traceback.print_exc(file=buf)
    print("[error] >>>")
    print(buf.getvalue())


def print_parser_errors(errors: tuple[str, ...]) -> None:
    print(MONKEY_FACE)
    print("Woops! We ran into some monkey business here!")
    print(" parser errors:")
    for msg in errors:
        print(f"\t{msg}")


def ends_with_let(program: Program) -> bool:
    return bool(program.statements) and isinstance(
        program.statements[-1], LetStatement
    )


def print_environment(env: Environment) -> None:
    names = sorted(env.names())
    if not names:
        print("[env] >>> (empty)")
        return
    for name in names:
        print(f"{name:>12} = {env.resolve(name).inspect()}")


def read_source() -> str | None:
    """Read one logical input, continuing while `{` and `}` are unbalanced.

    Returns None when the user asks to leave.
    """
    src_lines: list[str] = []
    brace_count = 0
    while True:
        line = input(PROMPT if not src_lines else CONTINUATION_PROMPT)
        if line.strip() in ("exit", "quit") and not src_lines:
            return None
        src_lines.append(line)
        brace_count += line.count("{") - line.count("}")
        if brace_count <= 0:
            return "\n".join(src_lines).strip()


def start_repl(verbose: bool = False) -> None:
    print("Monkey REPL. Type 'exit' or 'quit' to leave.")
    raise_recursion_limit()
    env = Environment()

    while True:
        try:
            src = read_source()
            if src is None:
                print("Exiting Monkey REPL.")
                return
            if not src:
                continue
            if src == "verbose-mode":
                verbose = not verbose
                print(f"[mode] >>> Verbose mode {'ON' if verbose else 'OFF'}")
                continue
            if src == ":env":
                print_environment(env)
                continue

            try:
                result = parse(src)
                if not result.ok:
                    print_parser_errors(result.errors)
                    continue
                evaluated = evaluate(result.program, env)
            except RecursionError:
                logger.debug("recursion limit hit on %r", src[:80])
                print("[error] >>> maximum recursion depth exceeded")
                continue
            except Exception:
                print_traceback()
                continue

            if not ends_with_let(result.program):
                print(evaluated.inspect())

            if verbose:
                print(f"DEBUG AST: {result.program}")

        except (KeyboardInterrupt, EOFError):
            print("\nExiting Monkey REPL.")
            break


def main() -> None:
    start_repl()


if __name__ == "__main__":
    main()
