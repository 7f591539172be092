"""Error taxonomy and the per-run diagnostics collector."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .tokens import Token


class LoxError(Exception):
    """Base error for everything reported against Lox source."""

    def __init__(self, msg: str, line: int):
        self.msg: str = msg
        self.line: int = line
        super().__init__(msg + " at line " + str(line))

    def format(self) -> str:
        return "[line " + str(self.line) + "] Error: " + self.msg


class LexError(LoxError):
    """Bad character, unterminated string or comment."""


class ParseError(LoxError):
    """Grammar violation. `where` describes the offending token."""

    def __init__(self, msg: str, line: int, where: str = ""):
        super().__init__(msg, line)
        self.where: str = where

    def format(self) -> str:
        return "[line " + str(self.line) + "] Error" + self.where + ": " + self.msg


class ResolveError(ParseError):
    """Scoping, return, this or super misuse found before execution."""


class LoxRuntimeError(LoxError):
    """Failure while executing; carries the token it is blamed on."""

    def __init__(self, token: Token, msg: str):
        super().__init__(msg, token.line)
        self.token: Token = token

    def format(self) -> str:
        return self.msg + "\n[line " + str(self.line) + "]"


def where_of(token: Token) -> str:
    """Location description used in static diagnostics."""
    if token.type == "EOF":
        return " at end"
    return " at '" + token.lexeme + "'"


class Diagnostics:
    """Errors collected during one run (or one interactive session)."""

    def __init__(self) -> None:
        self.static_errors: list[LoxError] = []
        self.runtime_errors: list[LoxRuntimeError] = []

    def add(self, error: LoxError) -> None:
        if isinstance(error, LoxRuntimeError):
            self.runtime_errors.append(error)
        else:
            self.static_errors.append(error)

    def extend(self, errors: list[LoxError]) -> None:
        for error in errors:
            self.add(error)

    @property
    def had_error(self) -> bool:
        return len(self.static_errors) > 0

    @property
    def had_runtime_error(self) -> bool:
        return len(self.runtime_errors) > 0

    def errors(self) -> list[LoxError]:
        return [*self.static_errors, *self.runtime_errors]

    def format(self) -> list[str]:
        return [e.format() for e in self.errors()]
