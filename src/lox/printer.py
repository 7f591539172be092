"""Lox printer — renders the AST as parenthesized prefix forms.

Total over the node set in `lox/ast.py`; a new node type needs a case here.
Used by `lox --ast` and by tests to check how source was grouped.
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
)
from .tokens import Token
from .values import format_number


def print_expr(expr: Expr) -> str:
    """Render one expression, e.g. `(* (- 123) (group 45.67))`."""
    return _Printer().expr(expr)


def print_stmt(stmt: Stmt) -> str:
    return _Printer().stmt(stmt)


def print_program(stmts: list[Stmt]) -> str:
    """Render a statement list, one top-level statement per line."""
    p = _Printer()
    return "\n".join(p.stmt(s) for s in stmts)


class _Printer:
    # ── Helpers ──────────────────────────────────────────────

    def _paren(self, name: str, *parts: str) -> str:
        if not parts:
            return "(" + name + ")"
        return "(" + name + " " + " ".join(parts) + ")"

    def _params(self, params: list[Token]) -> str:
        return "(" + " ".join(p.lexeme for p in params) + ")"

    def _literal(self, value: object) -> str:
        if value is None:
            return "nil"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, float):
            return format_number(value)
        return str(value)

    # ── Expressions ──────────────────────────────────────────

    def expr(self, expr: Expr) -> str:
        match expr:
            case Literal(value=value):
                return self._literal(value)
            case Grouping(expression=inner):
                return self._paren("group", self.expr(inner))
            case Unary(operator=op, right=right):
                return self._paren(op.lexeme, self.expr(right))
            case Binary(left=left, operator=op, right=right):
                return self._paren(op.lexeme, self.expr(left), self.expr(right))
            case Logical(left=left, operator=op, right=right):
                return self._paren(op.lexeme, self.expr(left), self.expr(right))
            case Variable(name=name):
                return name.lexeme
            case Assign(name=name, value=value):
                return self._paren("=", name.lexeme, self.expr(value))
            case Call(callee=callee, arguments=arguments):
                args = [self.expr(a) for a in arguments]
                return self._paren("call", self.expr(callee), *args)
            case Get(object=obj, name=name):
                return self._paren(".", self.expr(obj), name.lexeme)
            case Set(object=obj, name=name, value=value):
                target = self._paren(".", self.expr(obj), name.lexeme)
                return self._paren("=", target, self.expr(value))
            case This():
                return "this"
            case Super(method=method):
                return self._paren("super", method.lexeme)
            case FunctionExpr(params=params, body=body):
                return self._paren(
                    "fun", self._params(params), *[self.stmt(s) for s in body]
                )
            case _:
                raise TypeError("unhandled expr type: " + type(expr).__name__)

    # ── Statements ───────────────────────────────────────────

    def stmt(self, stmt: Stmt) -> str:
        match stmt:
            case ExpressionStmt(expression=e):
                return self._paren(";", self.expr(e))
            case PrintStmt(expression=e):
                return self._paren("print", self.expr(e))
            case VarStmt(name=name, initializer=None):
                return self._paren("var", name.lexeme)
            case VarStmt(name=name, initializer=init):
                return self._paren("var", name.lexeme, "=", self.expr(init))
            case BlockStmt(statements=stmts):
                return self._paren("block", *[self.stmt(s) for s in stmts])
            case IfStmt(condition=cond, then_branch=then, else_branch=None):
                return self._paren("if", self.expr(cond), self.stmt(then))
            case IfStmt(condition=cond, then_branch=then, else_branch=other):
                return self._paren(
                    "if-else", self.expr(cond), self.stmt(then), self.stmt(other)
                )
            case WhileStmt(condition=cond, body=body):
                return self._paren("while", self.expr(cond), self.stmt(body))
            case FunctionStmt(name=name, function=fn):
                return self._paren(
                    "fun",
                    name.lexeme,
                    self._params(fn.params),
                    *[self.stmt(s) for s in fn.body],
                )
            case ReturnStmt(value=None):
                return "(return)"
            case ReturnStmt(value=value):
                return self._paren("return", self.expr(value))
            case ClassStmt(name=name, superclass=superclass, methods=methods):
                head = [name.lexeme]
                if superclass is not None:
                    head += ["<", superclass.name.lexeme]
                return self._paren("class", *head, *[self.stmt(m) for m in methods])
            case _:
                raise TypeError("unhandled stmt type: " + type(stmt).__name__)
