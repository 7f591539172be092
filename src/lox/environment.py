"""Runtime frames for Lox variable storage."""

from __future__ import annotations

from .errors import LoxRuntimeError
from .tokens import Token


class Environment:
    """One frame of name → value bindings with an optional enclosing frame.

    Closures hold on to the frame they were created in, so frames are shared
    by reference and outlive the block that made them when captured.
    """

    def __init__(self, enclosing: Environment | None = None):
        self.values: dict[str, object] = {}
        self.enclosing: Environment | None = enclosing

    def define(self, name: str, value: object) -> None:
        self.values[name] = value

    def get(self, name: Token) -> object:
        env: Environment | None = self
        while env is not None:
            if name.lexeme in env.values:
                return env.values[name.lexeme]
            env = env.enclosing
        raise LoxRuntimeError(name, "Undefined variable '" + name.lexeme + "'.")

    def assign(self, name: Token, value: object) -> None:
        env: Environment | None = self
        while env is not None:
            if name.lexeme in env.values:
                env.values[name.lexeme] = value
                return
            env = env.enclosing
        raise LoxRuntimeError(name, "Undefined variable '" + name.lexeme + "'.")

    def ancestor(self, distance: int) -> Environment:
        env = self
        for _ in range(distance):
            assert env.enclosing is not None, "resolver depth exceeds frame chain"
            env = env.enclosing
        return env

    def get_at(self, distance: int, name: str) -> object:
        return self.ancestor(distance).values[name]

    def assign_at(self, distance: int, name: Token, value: object) -> None:
        self.ancestor(distance).values[name.lexeme] = value
