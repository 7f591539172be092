"""Lox interpreter — public API."""

from __future__ import annotations

from .ast import Expr, Stmt
from .errors import (
    Diagnostics as Diagnostics,
    LexError as LexError,
    LoxError as LoxError,
    LoxRuntimeError as LoxRuntimeError,
    ParseError as ParseError,
    ResolveError as ResolveError,
)
from .parse import Parser
from .printer import print_expr as print_expr, print_program as print_program
from .resolve import ResolveResult as ResolveResult, resolve as resolve
from .runtime import (
    Interpreter as Interpreter,
    RunResult as RunResult,
    Session as Session,
    run as run,
)
from .tokens import Token as Token, tokenize as tokenize


def parse(source: str) -> list[Stmt]:
    """Parse Lox source into statements. Raises the first error found."""
    errors: list[LoxError] = []
    tokens = tokenize(source, errors)
    stmts = Parser(tokens, errors).parse_program()
    if errors:
        raise errors[0]
    return stmts


def parse_expr(source: str) -> Expr:
    """Parse a single expression, as typed at the prompt."""
    errors: list[LoxError] = []
    tokens = tokenize(source, errors)
    parser = Parser(tokens, errors)
    expr = parser.expression()
    if not errors and not parser.at_end():
        parser.error(parser.current(), "Expect end of expression.")
    if errors:
        raise errors[0]
    return expr
