"""Static scope analysis, run between parsing and execution.

Walks the program once, tracking block scopes, and records for every local
variable reference how many frames out its binding lives. References found in
no enclosing scope are left out of the table and looked up in globals at run
time. Misuses of return, this and super are reported here so a program that
cannot run correctly never starts.
"""

from __future__ import annotations

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
from .errors import LoxError, ResolveError, where_of
from .tokens import Token

# Kinds of function body being resolved
FN_NONE = "none"
FN_FUNCTION = "function"
FN_METHOD = "method"
FN_INITIALIZER = "initializer"

# Kinds of class body being resolved
CLASS_NONE = "none"
CLASS_CLASS = "class"
CLASS_SUBCLASS = "subclass"


class ResolveResult:
    """Binding depths plus any errors found."""

    def __init__(self) -> None:
        self.locals: dict[Expr, int] = {}
        self.errors: list[LoxError] = []

    def add_error(self, token: Token, msg: str) -> None:
        self.errors.append(ResolveError(msg, token.line, where_of(token)))

    def ok(self) -> bool:
        return len(self.errors) == 0


def resolve(stmts: list[Stmt]) -> ResolveResult:
    """Resolve a whole program."""
    r = Resolver()
    for stmt in stmts:
        try:
            r.resolve_stmt(stmt)
        except RecursionError:
            r.too_deep(stmt)
            break
    return r.result


def resolve_expr(expr: Expr) -> ResolveResult:
    """Resolve a lone expression, as typed at the interactive prompt."""
    r = Resolver()
    try:
        r.resolve_expr(expr)
    except RecursionError:
        r.too_deep(expr)
    return r.result


class Resolver:
    def __init__(self) -> None:
        self.result = ResolveResult()
        # Innermost scope last; False = declared, True = ready to read
        self.scopes: list[dict[str, bool]] = []
        self.current_function: str = FN_NONE
        self.current_class: str = CLASS_NONE

    def too_deep(self, node: Stmt | Expr) -> None:
        """Report a construct nested past what the host stack can walk."""
        token = first_token(node)
        if token is None:
            self.result.errors.append(ResolveError("Too much nesting.", 1))
        else:
            self.result.add_error(token, "Too much nesting.")

    # ── Scopes ───────────────────────────────────────────────

    def begin_scope(self) -> None:
        self.scopes.append({})

    def end_scope(self) -> None:
        self.scopes.pop()

    def declare(self, name: Token) -> None:
        if not self.scopes:
            return
        scope = self.scopes[-1]
        if name.lexeme in scope:
            self.result.add_error(name, "Already a variable with this name in this scope.")
        scope[name.lexeme] = False

    def define(self, name: Token) -> None:
        if not self.scopes:
            return
        self.scopes[-1][name.lexeme] = True

    def resolve_local(self, expr: Expr, name: Token) -> None:
        for i in range(len(self.scopes) - 1, -1, -1):
            if name.lexeme in self.scopes[i]:
                self.result.locals[expr] = len(self.scopes) - 1 - i
                return

    def resolve_function(self, fn: FunctionExpr, kind: str) -> None:
        enclosing = self.current_function
        self.current_function = kind
        self.begin_scope()
        for param in fn.params:
            self.declare(param)
            self.define(param)
        self.resolve_stmts(fn.body)
        self.end_scope()
        self.current_function = enclosing

    # ── Statements ───────────────────────────────────────────

    def resolve_stmts(self, stmts: list[Stmt]) -> None:
        for stmt in stmts:
            self.resolve_stmt(stmt)

    def resolve_stmt(self, stmt: Stmt) -> None:
        match stmt:
            case BlockStmt(statements=stmts):
                self.begin_scope()
                self.resolve_stmts(stmts)
                self.end_scope()
            case VarStmt(name=name, initializer=init):
                self.declare(name)
                if init is not None:
                    self.resolve_expr(init)
                self.define(name)
            case FunctionStmt(name=name, function=fn):
                # Defined before the body so the function can recurse
                self.declare(name)
                self.define(name)
                self.resolve_function(fn, FN_FUNCTION)
            case ClassStmt():
                self.resolve_class(stmt)
            case ExpressionStmt(expression=e) | PrintStmt(expression=e):
                self.resolve_expr(e)
            case IfStmt(condition=cond, then_branch=then, else_branch=other):
                self.resolve_expr(cond)
                self.resolve_stmt(then)
                if other is not None:
                    self.resolve_stmt(other)
            case WhileStmt(condition=cond, body=body):
                self.resolve_expr(cond)
                self.resolve_stmt(body)
            case ReturnStmt(keyword=keyword, value=value):
                if self.current_function == FN_NONE:
                    self.result.add_error(keyword, "Can't return from top-level code.")
                if value is not None:
                    if self.current_function == FN_INITIALIZER:
                        self.result.add_error(
                            keyword, "Can't return a value from an initializer."
                        )
                    self.resolve_expr(value)
            case _:
                raise TypeError("unhandled stmt type: " + type(stmt).__name__)

    def resolve_class(self, stmt: ClassStmt) -> None:
        enclosing = self.current_class
        self.current_class = CLASS_CLASS
        self.declare(stmt.name)
        self.define(stmt.name)

        superclass = stmt.superclass
        if superclass is not None:
            if superclass.name.lexeme == stmt.name.lexeme:
                self.result.add_error(
                    superclass.name, "A class can't inherit from itself."
                )
            self.current_class = CLASS_SUBCLASS
            self.resolve_expr(superclass)
            self.begin_scope()
            self.scopes[-1]["super"] = True

        self.begin_scope()
        self.scopes[-1]["this"] = True
        for method in stmt.methods:
            kind = FN_INITIALIZER if method.name.lexeme == "init" else FN_METHOD
            self.resolve_function(method.function, kind)
        self.end_scope()

        if superclass is not None:
            self.end_scope()
        self.current_class = enclosing

    # ── Expressions ──────────────────────────────────────────

    def resolve_expr(self, expr: Expr) -> None:
        match expr:
            case Variable(name=name):
                if self.scopes and self.scopes[-1].get(name.lexeme) is False:
                    self.result.add_error(
                        name, "Can't read local variable in its own initializer."
                    )
                self.resolve_local(expr, name)
            case Assign(name=name, value=value):
                self.resolve_expr(value)
                self.resolve_local(expr, name)
            case Binary(left=left, right=right) | Logical(left=left, right=right):
                self.resolve_expr(left)
                self.resolve_expr(right)
            case Unary(right=right):
                self.resolve_expr(right)
            case Grouping(expression=inner):
                self.resolve_expr(inner)
            case Call(callee=callee, arguments=arguments):
                self.resolve_expr(callee)
                for arg in arguments:
                    self.resolve_expr(arg)
            case Get(object=obj):
                self.resolve_expr(obj)
            case Set(object=obj, value=value):
                self.resolve_expr(value)
                self.resolve_expr(obj)
            case This(keyword=keyword):
                if self.current_class == CLASS_NONE:
                    self.result.add_error(keyword, "Can't use 'this' outside of a class.")
                    return
                self.resolve_local(expr, keyword)
            case Super(keyword=keyword):
                if self.current_class == CLASS_NONE:
                    self.result.add_error(keyword, "Can't use 'super' outside of a class.")
                elif self.current_class != CLASS_SUBCLASS:
                    self.result.add_error(
                        keyword, "Can't use 'super' in a class with no superclass."
                    )
                self.resolve_local(expr, keyword)
            case FunctionExpr():
                self.resolve_function(expr, FN_FUNCTION)
            case Literal():
                pass
            case _:
                raise TypeError("unhandled expr type: " + type(expr).__name__)
