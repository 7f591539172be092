"""Lox CLI — run a .lox file or start an interactive prompt."""

from __future__ import annotations

import sys

from .errors import Diagnostics, LoxError
from .parse import Parser
from .printer import print_program
from .runtime import DEFAULT_MAX_DEPTH, RunResult, Session
from .tokens import tokenize


USAGE: str = """\
lox [OPTIONS] [FILE]

Run a Lox program, or start an interactive prompt when no FILE is given.

Options:
  --tokens       Print the token stream and exit
  --ast          Print the parsed program and exit
  --max-depth N  Maximum call depth (default 1000)
  --help         Show this help message
"""

EXIT_USAGE = 2
EXIT_DATAERR = 65
EXIT_NOINPUT = 66
EXIT_SOFTWARE = 70


def _report(diagnostics: Diagnostics) -> None:
    for text in diagnostics.format():
        print(text, file=sys.stderr)


def _collected(errors: list[LoxError]) -> Diagnostics:
    diagnostics = Diagnostics()
    diagnostics.extend(errors)
    return diagnostics


def _read_source(filepath: str) -> str | None:
    try:
        with open(filepath, "rb") as f:
            raw = f.read()
    except FileNotFoundError:
        print("lox: " + filepath + ": No such file or directory", file=sys.stderr)
        return None
    except OSError as e:
        print("lox: " + filepath + ": " + str(e), file=sys.stderr)
        return None
    try:
        return raw.decode("utf-8")
    except ValueError:
        print("lox: " + filepath + ": invalid utf-8", file=sys.stderr)
        return None


def _dump_tokens(source: str) -> int:
    errors: list[LoxError] = []
    for tok in tokenize(source, errors):
        print(tok)
    _report(_collected(errors))
    return EXIT_DATAERR if errors else 0


def _dump_ast(source: str) -> int:
    errors: list[LoxError] = []
    stmts = Parser(tokenize(source, errors), errors).parse_program()
    if errors:
        _report(_collected(errors))
        return EXIT_DATAERR
    text = print_program(stmts)
    if text:
        print(text)
    return 0


def _prompt(session: Session) -> int:
    while True:
        try:
            line = input("> ")
        except EOFError:
            print()
            return 0
        except KeyboardInterrupt:
            print()
            continue
        result = session.run_line(line)
        _report(result.diagnostics)
        if result.value is not None:
            print(result.value)


def _finish(result: RunResult) -> int:
    _report(result.diagnostics)
    if result.had_error:
        return EXIT_DATAERR
    if result.had_runtime_error:
        return EXIT_SOFTWARE
    return 0


def main(argv: list[str] | None = None) -> int:
    args = argv if argv is not None else sys.argv[1:]
    filepath: str = ""
    mode = "run"
    max_depth = DEFAULT_MAX_DEPTH
    i = 0
    while i < len(args):
        arg = args[i]
        if arg == "--help" or arg == "-h":
            print(USAGE, end="")
            return 0
        elif arg == "--tokens":
            mode = "tokens"
            i += 1
        elif arg == "--ast":
            mode = "ast"
            i += 1
        elif arg == "--max-depth":
            if i + 1 >= len(args):
                print("lox: --max-depth needs a value", file=sys.stderr)
                return EXIT_USAGE
            try:
                max_depth = int(args[i + 1])
            except ValueError:
                print("lox: invalid --max-depth '" + args[i + 1] + "'", file=sys.stderr)
                return EXIT_USAGE
            if max_depth < 1:
                print("lox: --max-depth must be positive", file=sys.stderr)
                return EXIT_USAGE
            i += 2
        elif arg.startswith("-"):
            print("lox: unknown flag '" + arg + "'", file=sys.stderr)
            return EXIT_USAGE
        elif filepath == "":
            filepath = arg
            i += 1
        else:
            print("lox: unexpected argument '" + arg + "'", file=sys.stderr)
            return EXIT_USAGE

    if filepath == "":
        if mode != "run":
            print("lox: missing file argument", file=sys.stderr)
            return EXIT_USAGE
        return _prompt(Session(write=print, max_depth=max_depth))

    source = _read_source(filepath)
    if source is None:
        return EXIT_NOINPUT
    if mode == "tokens":
        return _dump_tokens(source)
    if mode == "ast":
        return _dump_ast(source)
    result = Session(write=print, max_depth=max_depth).run(source)
    return _finish(result)


if __name__ == "__main__":
    sys.exit(main())
