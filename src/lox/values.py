"""Runtime values: callables, classes, instances and their display forms."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .ast import FunctionExpr
from .environment import Environment
from .errors import LoxRuntimeError
from .tokens import Token

if TYPE_CHECKING:
    from .runtime import Interpreter


# ============================================================
# Control flow signals
# ============================================================


@dataclass
class Return:
    """Produced by a `return` statement and passed up through `execute`."""

    value: object


# ============================================================
# Callables
# ============================================================


class LoxCallable:
    """Anything that can appear as the callee of a call expression."""

    def arity(self) -> int:
        raise NotImplementedError

    def call(self, interpreter: Interpreter, arguments: list[object]) -> object:
        raise NotImplementedError

    def to_string(self) -> str:
        raise NotImplementedError


class LoxFunction(LoxCallable):
    """A user function or method closed over the frame it was declared in."""

    def __init__(
        self,
        name: str | None,
        declaration: FunctionExpr,
        closure: Environment,
        is_initializer: bool = False,
    ):
        self.name: str | None = name
        self.declaration: FunctionExpr = declaration
        self.closure: Environment = closure
        self.is_initializer: bool = is_initializer

    def bind(self, instance: LoxInstance) -> LoxFunction:
        env = Environment(self.closure)
        env.define("this", instance)
        return LoxFunction(self.name, self.declaration, env, self.is_initializer)

    def arity(self) -> int:
        return len(self.declaration.params)

    def call(self, interpreter: Interpreter, arguments: list[object]) -> object:
        env = Environment(self.closure)
        for param, arg in zip(self.declaration.params, arguments):
            env.define(param.lexeme, arg)
        signal = interpreter.execute_block(self.declaration.body, env)
        # Initializers hand back the instance even on an early bare return
        if self.is_initializer:
            return self.closure.get_at(0, "this")
        if signal is not None:
            return signal.value
        return None

    def to_string(self) -> str:
        if self.name is None:
            return "<fn>"
        return "<fn " + self.name + ">"


class Clock(LoxCallable):
    """Native `clock()`: seconds since the epoch as a number."""

    def arity(self) -> int:
        return 0

    def call(self, interpreter: Interpreter, arguments: list[object]) -> object:
        return time.time()

    def to_string(self) -> str:
        return "<native fn>"


# ============================================================
# Classes and instances
# ============================================================


class LoxClass(LoxCallable):
    def __init__(
        self,
        name: str,
        superclass: LoxClass | None,
        methods: dict[str, LoxFunction],
    ):
        self.name: str = name
        self.superclass: LoxClass | None = superclass
        self.methods: dict[str, LoxFunction] = methods

    def find_method(self, name: str) -> LoxFunction | None:
        klass: LoxClass | None = self
        while klass is not None:
            if name in klass.methods:
                return klass.methods[name]
            klass = klass.superclass
        return None

    def arity(self) -> int:
        init = self.find_method("init")
        if init is None:
            return 0
        return init.arity()

    def call(self, interpreter: Interpreter, arguments: list[object]) -> object:
        instance = LoxInstance(self)
        init = self.find_method("init")
        if init is not None:
            init.bind(instance).call(interpreter, arguments)
        return instance

    def to_string(self) -> str:
        return self.name


class LoxInstance:
    def __init__(self, klass: LoxClass):
        self.klass: LoxClass = klass
        self.fields: dict[str, object] = {}

    def get(self, name: Token) -> object:
        """Fields shadow methods; methods come back bound to this instance."""
        if name.lexeme in self.fields:
            return self.fields[name.lexeme]
        method = self.klass.find_method(name.lexeme)
        if method is not None:
            return method.bind(self)
        raise LoxRuntimeError(name, "Undefined property '" + name.lexeme + "'.")

    def set(self, name: Token, value: object) -> None:
        self.fields[name.lexeme] = value

    def to_string(self) -> str:
        return self.klass.name + " instance"


# ============================================================
# Display
# ============================================================


def format_number(value: float) -> str:
    """Render a number the way Lox prints it: integral values drop the `.0`."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


def stringify(value: object) -> str:
    if value is None:
        return "nil"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        return format_number(value)
    if isinstance(value, str):
        return value
    if isinstance(value, (LoxCallable, LoxInstance)):
        return value.to_string()
    raise TypeError("not a Lox value: " + type(value).__name__)
