"""Lox AST — parse-time node definitions.

Nodes compare and hash by identity: the resolver's binding table is keyed by
the node objects themselves, so two structurally equal `Variable` nodes at
different places in the source must stay distinct.
"""

from __future__ import annotations

from dataclasses import dataclass

from .tokens import Token


# ============================================================
# EXPRESSIONS
# ============================================================


@dataclass(frozen=True, eq=False)
class Expr:
    """Base for all expressions."""


@dataclass(frozen=True, eq=False)
class Literal(Expr):
    """Number, string, true, false or nil."""

    value: object


@dataclass(frozen=True, eq=False)
class Grouping(Expr):
    """( expression )."""

    expression: Expr


@dataclass(frozen=True, eq=False)
class Unary(Expr):
    """op right."""

    operator: Token
    right: Expr


@dataclass(frozen=True, eq=False)
class Binary(Expr):
    """left op right."""

    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True, eq=False)
class Logical(Expr):
    """left and/or right, short-circuiting."""

    left: Expr
    operator: Token
    right: Expr


@dataclass(frozen=True, eq=False)
class Variable(Expr):
    """Variable reference."""

    name: Token


@dataclass(frozen=True, eq=False)
class Assign(Expr):
    """name = value."""

    name: Token
    value: Expr


@dataclass(frozen=True, eq=False)
class Call(Expr):
    """callee(arguments). paren is the closing ')' for error lines."""

    callee: Expr
    paren: Token
    arguments: list[Expr]


@dataclass(frozen=True, eq=False)
class Get(Expr):
    """object.name."""

    object: Expr
    name: Token


@dataclass(frozen=True, eq=False)
class Set(Expr):
    """object.name = value."""

    object: Expr
    name: Token
    value: Expr


@dataclass(frozen=True, eq=False)
class This(Expr):
    """this."""

    keyword: Token


@dataclass(frozen=True, eq=False)
class Super(Expr):
    """super.method."""

    keyword: Token
    method: Token


@dataclass(frozen=True, eq=False)
class FunctionExpr(Expr):
    """fun (params) { body }. Declared functions share this shape."""

    params: list[Token]
    body: list[Stmt]


# ============================================================
# STATEMENTS
# ============================================================


@dataclass(frozen=True, eq=False)
class Stmt:
    """Base for all statements."""


@dataclass(frozen=True, eq=False)
class ExpressionStmt(Stmt):
    """Bare expression as statement."""

    expression: Expr


@dataclass(frozen=True, eq=False)
class PrintStmt(Stmt):
    """print expression;"""

    expression: Expr


@dataclass(frozen=True, eq=False)
class VarStmt(Stmt):
    """var name = initializer?;"""

    name: Token
    initializer: Expr | None


@dataclass(frozen=True, eq=False)
class BlockStmt(Stmt):
    """{ statements }."""

    statements: list[Stmt]


@dataclass(frozen=True, eq=False)
class IfStmt(Stmt):
    """if (condition) then_branch else else_branch?"""

    condition: Expr
    then_branch: Stmt
    else_branch: Stmt | None


@dataclass(frozen=True, eq=False)
class WhileStmt(Stmt):
    """while (condition) body. Also the target of for-loop desugaring."""

    condition: Expr
    body: Stmt


@dataclass(frozen=True, eq=False)
class FunctionStmt(Stmt):
    """fun name(params) { body }, or a method inside a class body."""

    name: Token
    function: FunctionExpr

    @property
    def params(self) -> list[Token]:
        return self.function.params

    @property
    def body(self) -> list[Stmt]:
        return self.function.body


@dataclass(frozen=True, eq=False)
class ReturnStmt(Stmt):
    """return value?;"""

    keyword: Token
    value: Expr | None


@dataclass(frozen=True, eq=False)
class ClassStmt(Stmt):
    """class Name < Superclass { methods }."""

    name: Token
    superclass: Variable | None
    methods: list[FunctionStmt]


def first_token(node: Expr | Stmt) -> Token | None:
    """A token near the start of `node`, found without recursing.

    Used to place errors that can't name a better token, such as running out
    of host stack partway through a deeply nested statement.
    """
    current: Expr | Stmt | None = node
    while current is not None:
        match current:
            case VarStmt(name=tok) | FunctionStmt(name=tok) | ClassStmt(name=tok):
                return tok
            case ReturnStmt(keyword=tok) | This(keyword=tok) | Super(keyword=tok):
                return tok
            case Variable(name=tok) | Assign(name=tok) | Get(name=tok) | Set(name=tok):
                return tok
            case Unary(operator=tok) | Binary(operator=tok) | Logical(operator=tok):
                return tok
            case Call(paren=tok):
                return tok
            case ExpressionStmt(expression=e) | PrintStmt(expression=e):
                current = e
            case Grouping(expression=e):
                current = e
            case IfStmt(condition=e) | WhileStmt(condition=e):
                current = e
            case BlockStmt(statements=stmts):
                current = stmts[0] if stmts else None
            case FunctionExpr(params=params, body=body):
                if params:
                    return params[0]
                current = body[0] if body else None
            case _:
                current = None
    return None
