"""Lox runtime — tree-walking evaluation of resolved programs."""

from __future__ import annotations

import sys
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Callable, Iterator

from .ast import (
    Assign,
    Binary,
    BlockStmt,
    Call,
    ClassStmt,
    Expr,
    ExpressionStmt,
    FunctionExpr,
    FunctionStmt,
    Get,
    Grouping,
    IfStmt,
    Literal,
    Logical,
    PrintStmt,
    ReturnStmt,
    Set,
    Stmt,
    Super,
    This,
    Unary,
    Variable,
    VarStmt,
    WhileStmt,
    first_token,
)
from .environment import Environment
from .errors import Diagnostics, LoxError, LoxRuntimeError
from .parse import Parser
from .resolve import resolve, resolve_expr
from .tokens import (
    BANG,
    BANG_EQUAL,
    EQUAL_EQUAL,
    GREATER,
    GREATER_EQUAL,
    LESS,
    LESS_EQUAL,
    MINUS,
    OR,
    PLUS,
    SLASH,
    EOF,
    STAR,
    Token,
    tokenize,
)
from .values import (
    Clock,
    LoxCallable,
    LoxClass,
    LoxFunction,
    LoxInstance,
    Return,
    stringify,
)

DEFAULT_MAX_DEPTH = 1000

# Host frames one interpreted call can use: call, execute_block, a few nested
# statements and the expressions inside them.
_FRAMES_PER_CALL = 30


@contextmanager
def _stack_room(max_depth: int) -> Iterator[None]:
    """Make sure the host stack can hold `max_depth` interpreted calls."""
    old = sys.getrecursionlimit()
    wanted = old + max_depth * _FRAMES_PER_CALL
    if old < wanted:
        sys.setrecursionlimit(wanted)
    try:
        yield
    finally:
        sys.setrecursionlimit(old)


def is_truthy(value: object) -> bool:
    if value is None:
        return False
    if isinstance(value, bool):
        return value
    return True


def is_equal(a: object, b: object) -> bool:
    if a is None and b is None:
        return True
    if a is None or b is None:
        return False
    # Python treats True == 1.0; Lox never equates booleans with numbers
    if isinstance(a, bool) or isinstance(b, bool):
        return isinstance(a, bool) and isinstance(b, bool) and a == b
    if isinstance(a, (float, str)) and isinstance(b, (float, str)):
        return type(a) is type(b) and a == b
    return a is b


# ============================================================
# Interpreter
# ============================================================


class Interpreter:
    """Executes statements against a persistent global frame.

    One interpreter can run many programs in turn (an interactive session);
    globals and resolved bindings accumulate across them.
    """

    def __init__(
        self,
        write: Callable[[str], None] | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self.write: Callable[[str], None] = write if write is not None else print
        self.max_depth: int = max_depth
        self.depth: int = 0
        self.globals: Environment = Environment()
        self.globals.define("clock", Clock())
        self.environment: Environment = self.globals
        self.locals: dict[Expr, int] = {}

    def resolve(self, locals: dict[Expr, int]) -> None:
        self.locals.update(locals)

    def interpret(
        self, program: list[Stmt] | Expr, diagnostics: Diagnostics
    ) -> str | None:
        """Run a program, or evaluate a lone expression and return its display form.

        A runtime error stops the run and lands in `diagnostics`; the
        interpreter itself stays usable for the next input.
        """
        node: Stmt | Expr | None = None
        try:
            with _stack_room(self.max_depth):
                if isinstance(program, Expr):
                    node = program
                    return stringify(self.evaluate(program))
                for node in program:
                    self.execute(node)
        except LoxRuntimeError as e:
            diagnostics.add(e)
        except RecursionError:
            # Overflow outside any call, e.g. a very long operator chain
            blame = first_token(node) if node is not None else None
            if blame is None:
                blame = Token(EOF, "", None, 1)
            diagnostics.add(LoxRuntimeError(blame, "Stack overflow."))
        finally:
            self.environment = self.globals
            self.depth = 0
        return None

    # ── Statements ───────────────────────────────────────────

    def execute(self, stmt: Stmt) -> Return | None:
        match stmt:
            case ExpressionStmt(expression=e):
                self.evaluate(e)
            case PrintStmt(expression=e):
                self.write(stringify(self.evaluate(e)))
            case VarStmt(name=name, initializer=init):
                value = None
                if init is not None:
                    value = self.evaluate(init)
                self.environment.define(name.lexeme, value)
            case BlockStmt(statements=stmts):
                return self.execute_block(stmts, Environment(self.environment))
            case IfStmt(condition=cond, then_branch=then, else_branch=other):
                if is_truthy(self.evaluate(cond)):
                    return self.execute(then)
                if other is not None:
                    return self.execute(other)
            case WhileStmt(condition=cond, body=body):
                while is_truthy(self.evaluate(cond)):
                    signal = self.execute(body)
                    if signal is not None:
                        return signal
            case FunctionStmt(name=name, function=fn):
                self.environment.define(
                    name.lexeme, LoxFunction(name.lexeme, fn, self.environment)
                )
            case ReturnStmt(value=value):
                return Return(None if value is None else self.evaluate(value))
            case ClassStmt():
                self.execute_class(stmt)
            case _:
                raise TypeError("unhandled stmt type: " + type(stmt).__name__)
        return None

    def execute_block(self, stmts: list[Stmt], env: Environment) -> Return | None:
        previous = self.environment
        try:
            self.environment = env
            for stmt in stmts:
                signal = self.execute(stmt)
                if signal is not None:
                    return signal
            return None
        finally:
            self.environment = previous

    def execute_class(self, stmt: ClassStmt) -> None:
        superclass: LoxClass | None = None
        if stmt.superclass is not None:
            value = self.evaluate(stmt.superclass)
            if not isinstance(value, LoxClass):
                raise LoxRuntimeError(stmt.superclass.name, "Superclass must be a class.")
            superclass = value

        self.environment.define(stmt.name.lexeme, None)

        enclosing = self.environment
        if superclass is not None:
            self.environment = Environment(self.environment)
            self.environment.define("super", superclass)

        methods: dict[str, LoxFunction] = {}
        for method in stmt.methods:
            name = method.name.lexeme
            methods[name] = LoxFunction(
                name, method.function, self.environment, name == "init"
            )
        klass = LoxClass(stmt.name.lexeme, superclass, methods)

        self.environment = enclosing
        self.environment.assign(stmt.name, klass)

    # ── Expressions ──────────────────────────────────────────

    def evaluate(self, expr: Expr) -> object:
        match expr:
            case Literal(value=value):
                return value
            case Grouping(expression=inner):
                return self.evaluate(inner)
            case Variable(name=name):
                return self.look_up_variable(name, expr)
            case Assign(name=name, value=value_expr):
                value = self.evaluate(value_expr)
                distance = self.locals.get(expr)
                if distance is None:
                    self.globals.assign(name, value)
                else:
                    self.environment.assign_at(distance, name, value)
                return value
            case Logical(left=left_expr, operator=op, right=right_expr):
                left = self.evaluate(left_expr)
                if op.type == OR:
                    if is_truthy(left):
                        return left
                elif not is_truthy(left):
                    return left
                return self.evaluate(right_expr)
            case Unary(operator=op, right=right_expr):
                right = self.evaluate(right_expr)
                if op.type == MINUS:
                    self.check_number(op, right)
                    return -right
                if op.type == BANG:
                    return not is_truthy(right)
                raise TypeError("unhandled unary operator: " + op.type)
            case Binary(left=left_expr, operator=op, right=right_expr):
                left = self.evaluate(left_expr)
                right = self.evaluate(right_expr)
                return self.binary(op, left, right)
            case Call():
                return self.evaluate_call(expr)
            case Get(object=obj_expr, name=name):
                obj = self.evaluate(obj_expr)
                if isinstance(obj, LoxInstance):
                    return obj.get(name)
                raise LoxRuntimeError(name, "Only instances have properties.")
            case Set(object=obj_expr, name=name, value=value_expr):
                obj = self.evaluate(obj_expr)
                if not isinstance(obj, LoxInstance):
                    raise LoxRuntimeError(name, "Only instances have fields.")
                value = self.evaluate(value_expr)
                obj.set(name, value)
                return value
            case This(keyword=keyword):
                return self.look_up_variable(keyword, expr)
            case Super(method=method):
                distance = self.locals[expr]
                superclass = self.environment.get_at(distance, "super")
                # 'this' lives in the frame just inside the one holding 'super'
                instance = self.environment.get_at(distance - 1, "this")
                assert isinstance(superclass, LoxClass)
                assert isinstance(instance, LoxInstance)
                found = superclass.find_method(method.lexeme)
                if found is None:
                    raise LoxRuntimeError(
                        method, "Undefined property '" + method.lexeme + "'."
                    )
                return found.bind(instance)
            case FunctionExpr():
                return LoxFunction(None, expr, self.environment)
            case _:
                raise TypeError("unhandled expr type: " + type(expr).__name__)

    def look_up_variable(self, name: Token, expr: Expr) -> object:
        distance = self.locals.get(expr)
        if distance is None:
            return self.globals.get(name)
        return self.environment.get_at(distance, name.lexeme)

    def binary(self, op: Token, left: object, right: object) -> object:
        if op.type == PLUS:
            if isinstance(left, float) and isinstance(right, float):
                return left + right
            if isinstance(left, (float, str)) and isinstance(right, (float, str)):
                return stringify(left) + stringify(right)
            raise LoxRuntimeError(op, "Operands must be two numbers or two strings.")
        if op.type == EQUAL_EQUAL:
            return is_equal(left, right)
        if op.type == BANG_EQUAL:
            return not is_equal(left, right)
        a, b = self.check_numbers(op, left, right)
        if op.type == MINUS:
            return a - b
        if op.type == STAR:
            return a * b
        if op.type == SLASH:
            if b == 0:
                raise LoxRuntimeError(op, "Division by zero.")
            return a / b
        if op.type == GREATER:
            return a > b
        if op.type == GREATER_EQUAL:
            return a >= b
        if op.type == LESS:
            return a < b
        if op.type == LESS_EQUAL:
            return a <= b
        raise TypeError("unhandled binary operator: " + op.type)

    def evaluate_call(self, expr: Call) -> object:
        callee = self.evaluate(expr.callee)
        arguments = [self.evaluate(arg) for arg in expr.arguments]
        if not isinstance(callee, LoxCallable):
            raise LoxRuntimeError(expr.paren, "Can only call functions and classes.")
        if len(arguments) != callee.arity():
            raise LoxRuntimeError(
                expr.paren,
                "Expected "
                + str(callee.arity())
                + " arguments but got "
                + str(len(arguments))
                + ".",
            )
        if self.depth >= self.max_depth:
            raise LoxRuntimeError(expr.paren, "Stack overflow.")
        self.depth += 1
        try:
            return callee.call(self, arguments)
        except RecursionError:
            # Host stack ran out first; blame the innermost call that can report it
            raise LoxRuntimeError(expr.paren, "Stack overflow.") from None
        finally:
            self.depth -= 1

    # ── Checks ───────────────────────────────────────────────

    def check_number(self, op: Token, operand: object) -> None:
        if not isinstance(operand, float):
            raise LoxRuntimeError(op, "Operand must be a number.")

    def check_numbers(
        self, op: Token, left: object, right: object
    ) -> tuple[float, float]:
        if not isinstance(left, float) or not isinstance(right, float):
            raise LoxRuntimeError(op, "Operands must be numbers.")
        return left, right


# ============================================================
# Running source
# ============================================================


@dataclass
class RunResult:
    """Outcome of running one piece of source."""

    output: list[str] = field(default_factory=list)
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
    # Display form of a lone expression typed at the prompt
    value: str | None = None

    @property
    def had_error(self) -> bool:
        return self.diagnostics.had_error

    @property
    def had_runtime_error(self) -> bool:
        return self.diagnostics.had_runtime_error

    @property
    def errors(self) -> list[LoxError]:
        return self.diagnostics.errors()

    @property
    def exit_code(self) -> int:
        if self.had_error:
            return 65
        if self.had_runtime_error:
            return 70
        return 0


class Session:
    """A persistent interpreter fed one source text at a time.

    Printed lines are collected into each `RunResult` and, when `write` is
    given, also passed to it as they happen.
    """

    def __init__(
        self,
        write: Callable[[str], None] | None = None,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ):
        self._write: Callable[[str], None] | None = write
        self._output: list[str] = []
        self.interpreter: Interpreter = Interpreter(
            write=self._emit, max_depth=max_depth
        )

    def _emit(self, text: str) -> None:
        self._output.append(text)
        if self._write is not None:
            self._write(text)

    def run(self, source: str) -> RunResult:
        """Run a whole program."""
        return self._run(source, repl=False)

    def run_line(self, source: str) -> RunResult:
        """Run one interactive input; a bare expression's value comes back in `value`."""
        return self._run(source, repl=True)

    def _run(self, source: str, repl: bool) -> RunResult:
        self._output = []
        result = RunResult(output=self._output)
        errors: list[LoxError] = []
        # Parsing and resolving recurse once per nesting level too
        with _stack_room(self.interpreter.max_depth):
            tokens = tokenize(source, errors)
            parser = Parser(tokens, errors)
            program = parser.parse_repl() if repl else parser.parse_program()
            result.diagnostics.extend(errors)
            if result.had_error:
                return result

            if isinstance(program, Expr):
                resolved = resolve_expr(program)
            else:
                resolved = resolve(program)
            result.diagnostics.extend(resolved.errors)
            if result.had_error:
                return result

        self.interpreter.resolve(resolved.locals)
        result.value = self.interpreter.interpret(program, result.diagnostics)
        return result


def run(
    source: str,
    *,
    write: Callable[[str], None] | None = None,
    max_depth: int = DEFAULT_MAX_DEPTH,
) -> RunResult:
    """Scan, parse, resolve and execute a Lox program in a fresh session."""
    return Session(write=write, max_depth=max_depth).run(source)
