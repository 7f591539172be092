"""Lox parser — recursive descent, one method per grammar production."""

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
from .errors import LoxError, ParseError, where_of
from .tokens import (
    AND,
    BANG,
    BANG_EQUAL,
    CLASS,
    COMMA,
    DOT,
    ELSE,
    EOF,
    EQUAL,
    EQUAL_EQUAL,
    FALSE,
    FOR,
    FUN,
    GREATER,
    GREATER_EQUAL,
    IDENTIFIER,
    IF,
    LEFT_BRACE,
    LEFT_PAREN,
    LESS,
    LESS_EQUAL,
    MINUS,
    NIL,
    NUMBER,
    OR,
    PLUS,
    PRINT,
    RETURN,
    RIGHT_BRACE,
    RIGHT_PAREN,
    SEMICOLON,
    SLASH,
    STAR,
    STRING,
    SUPER,
    THIS,
    TRUE,
    VAR,
    WHILE,
    Token,
)

MAX_ARGS = 255

# Tokens that begin a declaration or statement; synchronization stops before them
SYNC_TOKENS: set[str] = {CLASS, FUN, VAR, FOR, IF, WHILE, PRINT, RETURN}


class Parser:
    """Recursive descent parser for Lox.

    Syntax errors are appended to `errors`; the parser resynchronizes at the
    next statement boundary so a single pass reports every independent error.
    """

    def __init__(self, tokens: list[Token], errors: list[LoxError] | None = None):
        self.tokens: list[Token] = tokens
        self.pos: int = 0
        self.errors: list[LoxError] = errors if errors is not None else []

    # ── Helpers ──────────────────────────────────────────────

    def current(self) -> Token:
        return self.tokens[self.pos]

    def previous(self) -> Token:
        return self.tokens[self.pos - 1]

    def peek(self, offset: int) -> Token:
        idx = self.pos + offset
        if idx >= len(self.tokens):
            return self.tokens[len(self.tokens) - 1]
        return self.tokens[idx]

    def at_end(self) -> bool:
        return self.current().type == EOF

    def at(self, type_: str) -> bool:
        if self.at_end():
            return False
        return self.current().type == type_

    def advance(self) -> Token:
        if not self.at_end():
            self.pos += 1
        return self.previous()

    def match(self, *types: str) -> bool:
        for type_ in types:
            if self.at(type_):
                self.advance()
                return True
        return False

    def expect(self, type_: str, msg: str) -> Token:
        if self.at(type_):
            return self.advance()
        raise self.error(self.current(), msg)

    def error(self, token: Token, msg: str) -> ParseError:
        """Record a syntax error and return it for the caller to raise."""
        err = ParseError(msg, token.line, where_of(token))
        self.errors.append(err)
        return err

    def synchronize(self) -> None:
        self.advance()
        while not self.at_end():
            if self.previous().type == SEMICOLON:
                return
            if self.current().type in SYNC_TOKENS:
                return
            self.advance()

    # ── Top Level ────────────────────────────────────────────

    def parse_program(self) -> list[Stmt]:
        stmts: list[Stmt] = []
        while not self.at_end():
            stmt = self.top_level()
            if stmt is not None:
                stmts.append(stmt)
        return stmts

    def top_level(self) -> Stmt | None:
        """One declaration; input nested past the host stack ends the parse."""
        try:
            return self.declaration()
        except RecursionError:
            self.error(self.current(), "Too much nesting.")
            self.pos = len(self.tokens) - 1
            return None

    def parse_repl(self) -> list[Stmt] | Expr:
        """Parse one interactive input.

        A lone expression with no trailing ';' comes back as an Expr so the
        caller can evaluate it and show the value.
        """
        stmts: list[Stmt] = []
        while not self.at_end():
            if self._starts_bare_expression():
                start = self.pos
                errors_before = len(self.errors)
                try:
                    expr = self.expression()
                except (ParseError, RecursionError):
                    expr = None
                if expr is not None and self.at_end():
                    if not stmts:
                        return expr
                    stmts.append(ExpressionStmt(expr))
                    break
                # Not a trailing expression: rewind and parse as a statement
                self.pos = start
                del self.errors[errors_before:]
            stmt = self.top_level()
            if stmt is not None:
                stmts.append(stmt)
        return stmts

    def _starts_bare_expression(self) -> bool:
        tok = self.current()
        if tok.type in SYNC_TOKENS and tok.type != FUN:
            return False
        if tok.type == FUN:
            return self.peek(1).type == LEFT_PAREN
        return tok.type != LEFT_BRACE

    # ── Declarations ─────────────────────────────────────────

    def declaration(self) -> Stmt | None:
        try:
            if self.match(CLASS):
                return self.class_declaration()
            if self.at(FUN) and self.peek(1).type == IDENTIFIER:
                self.advance()
                return self.function("function")
            if self.match(VAR):
                return self.var_declaration()
            return self.statement()
        except ParseError:
            self.synchronize()
            return None

    def class_declaration(self) -> ClassStmt:
        name = self.expect(IDENTIFIER, "Expect class name.")
        superclass: Variable | None = None
        if self.match(LESS):
            self.expect(IDENTIFIER, "Expect superclass name.")
            superclass = Variable(self.previous())
        self.expect(LEFT_BRACE, "Expect '{' before class body.")
        methods: list[FunctionStmt] = []
        while not self.at(RIGHT_BRACE) and not self.at_end():
            methods.append(self.function("method"))
        self.expect(RIGHT_BRACE, "Expect '}' after class body.")
        return ClassStmt(name, superclass, methods)

    def function(self, kind: str) -> FunctionStmt:
        name = self.expect(IDENTIFIER, "Expect " + kind + " name.")
        self.expect(LEFT_PAREN, "Expect '(' after " + kind + " name.")
        return FunctionStmt(name, self.function_body(kind))

    def function_body(self, kind: str) -> FunctionExpr:
        """Parameters and body, after the opening '(' has been consumed."""
        params: list[Token] = []
        if not self.at(RIGHT_PAREN):
            while True:
                if len(params) >= MAX_ARGS:
                    self.error(self.current(), "Can't have more than 255 parameters.")
                params.append(self.expect(IDENTIFIER, "Expect parameter name."))
                if not self.match(COMMA):
                    break
        self.expect(RIGHT_PAREN, "Expect ')' after parameters.")
        self.expect(LEFT_BRACE, "Expect '{' before " + kind + " body.")
        return FunctionExpr(params, self.block())

    def var_declaration(self) -> VarStmt:
        name = self.expect(IDENTIFIER, "Expect variable name.")
        initializer: Expr | None = None
        if self.match(EQUAL):
            initializer = self.expression()
        self.expect(SEMICOLON, "Expect ';' after variable declaration.")
        return VarStmt(name, initializer)

    # ── Statements ───────────────────────────────────────────

    def statement(self) -> Stmt:
        if self.match(FOR):
            return self.for_statement()
        if self.match(IF):
            return self.if_statement()
        if self.match(PRINT):
            return self.print_statement()
        if self.match(RETURN):
            return self.return_statement()
        if self.match(WHILE):
            return self.while_statement()
        if self.match(LEFT_BRACE):
            return BlockStmt(self.block())
        return self.expression_statement()

    def for_statement(self) -> Stmt:
        """Desugar for (init; cond; incr) body into init + while."""
        self.expect(LEFT_PAREN, "Expect '(' after 'for'.")
        initializer: Stmt | None
        if self.match(SEMICOLON):
            initializer = None
        elif self.match(VAR):
            initializer = self.var_declaration()
        else:
            initializer = self.expression_statement()

        condition: Expr | None = None
        if not self.at(SEMICOLON):
            condition = self.expression()
        self.expect(SEMICOLON, "Expect ';' after loop condition.")

        increment: Expr | None = None
        if not self.at(RIGHT_PAREN):
            increment = self.expression()
        self.expect(RIGHT_PAREN, "Expect ')' after for clauses.")

        body = self.statement()
        if increment is not None:
            body = BlockStmt([body, ExpressionStmt(increment)])
        if condition is None:
            condition = Literal(True)
        body = WhileStmt(condition, body)
        if initializer is not None:
            body = BlockStmt([initializer, body])
        return body

    def if_statement(self) -> IfStmt:
        self.expect(LEFT_PAREN, "Expect '(' after 'if'.")
        condition = self.expression()
        self.expect(RIGHT_PAREN, "Expect ')' after if condition.")
        then_branch = self.statement()
        else_branch: Stmt | None = None
        if self.match(ELSE):
            else_branch = self.statement()
        return IfStmt(condition, then_branch, else_branch)

    def print_statement(self) -> PrintStmt:
        value = self.expression()
        self.expect(SEMICOLON, "Expect ';' after value.")
        return PrintStmt(value)

    def return_statement(self) -> ReturnStmt:
        keyword = self.previous()
        value: Expr | None = None
        if not self.at(SEMICOLON):
            value = self.expression()
        self.expect(SEMICOLON, "Expect ';' after return value.")
        return ReturnStmt(keyword, value)

    def while_statement(self) -> WhileStmt:
        self.expect(LEFT_PAREN, "Expect '(' after 'while'.")
        condition = self.expression()
        self.expect(RIGHT_PAREN, "Expect ')' after condition.")
        return WhileStmt(condition, self.statement())

    def block(self) -> list[Stmt]:
        stmts: list[Stmt] = []
        while not self.at(RIGHT_BRACE) and not self.at_end():
            stmt = self.declaration()
            if stmt is not None:
                stmts.append(stmt)
        self.expect(RIGHT_BRACE, "Expect '}' after block.")
        return stmts

    def expression_statement(self) -> ExpressionStmt:
        expr = self.expression()
        self.expect(SEMICOLON, "Expect ';' after expression.")
        return ExpressionStmt(expr)

    # ── Expressions ──────────────────────────────────────────

    def expression(self) -> Expr:
        return self.assignment()

    def assignment(self) -> Expr:
        """Assignment = ( Call '.' )? IDENT '=' Assignment | Or"""
        expr = self.logic_or()
        if self.match(EQUAL):
            equals = self.previous()
            value = self.assignment()
            if isinstance(expr, Variable):
                return Assign(expr.name, value)
            if isinstance(expr, Get):
                return Set(expr.object, expr.name, value)
            # Reported but not raised: the parser is not confused
            self.error(equals, "Invalid assignment target.")
        return expr

    def logic_or(self) -> Expr:
        """Or = And ( 'or' And )*"""
        expr = self.logic_and()
        while self.match(OR):
            operator = self.previous()
            expr = Logical(expr, operator, self.logic_and())
        return expr

    def logic_and(self) -> Expr:
        """And = Equality ( 'and' Equality )*"""
        expr = self.equality()
        while self.match(AND):
            operator = self.previous()
            expr = Logical(expr, operator, self.equality())
        return expr

    def equality(self) -> Expr:
        """Equality = Comparison ( ( '!=' | '==' ) Comparison )*"""
        expr = self.comparison()
        while self.match(BANG_EQUAL, EQUAL_EQUAL):
            operator = self.previous()
            expr = Binary(expr, operator, self.comparison())
        return expr

    def comparison(self) -> Expr:
        """Comparison = Term ( ( '>' | '>=' | '<' | '<=' ) Term )*"""
        expr = self.term()
        while self.match(GREATER, GREATER_EQUAL, LESS, LESS_EQUAL):
            operator = self.previous()
            expr = Binary(expr, operator, self.term())
        return expr

    def term(self) -> Expr:
        """Term = Factor ( ( '-' | '+' ) Factor )*"""
        expr = self.factor()
        while self.match(MINUS, PLUS):
            operator = self.previous()
            expr = Binary(expr, operator, self.factor())
        return expr

    def factor(self) -> Expr:
        """Factor = Unary ( ( '/' | '*' ) Unary )*"""
        expr = self.unary()
        while self.match(SLASH, STAR):
            operator = self.previous()
            expr = Binary(expr, operator, self.unary())
        return expr

    def unary(self) -> Expr:
        """Unary = ( '!' | '-' ) Unary | Call"""
        if self.match(BANG, MINUS):
            operator = self.previous()
            return Unary(operator, self.unary())
        return self.call()

    def call(self) -> Expr:
        """Call = Primary ( '(' Arguments? ')' | '.' IDENT )*"""
        expr = self.primary()
        while True:
            if self.match(LEFT_PAREN):
                expr = self.finish_call(expr)
            elif self.match(DOT):
                name = self.expect(IDENTIFIER, "Expect property name after '.'.")
                expr = Get(expr, name)
            else:
                break
        return expr

    def finish_call(self, callee: Expr) -> Call:
        arguments: list[Expr] = []
        if not self.at(RIGHT_PAREN):
            while True:
                if len(arguments) >= MAX_ARGS:
                    self.error(self.current(), "Can't have more than 255 arguments.")
                arguments.append(self.expression())
                if not self.match(COMMA):
                    break
        paren = self.expect(RIGHT_PAREN, "Expect ')' after arguments.")
        return Call(callee, paren, arguments)

    def primary(self) -> Expr:
        """Parse a primary expression."""
        if self.match(FALSE):
            return Literal(False)
        if self.match(TRUE):
            return Literal(True)
        if self.match(NIL):
            return Literal(None)
        if self.match(NUMBER, STRING):
            return Literal(self.previous().literal)
        if self.match(SUPER):
            keyword = self.previous()
            self.expect(DOT, "Expect '.' after 'super'.")
            method = self.expect(IDENTIFIER, "Expect superclass method name.")
            return Super(keyword, method)
        if self.match(THIS):
            return This(self.previous())
        if self.match(IDENTIFIER):
            return Variable(self.previous())
        if self.match(FUN):
            self.expect(LEFT_PAREN, "Expect '(' after 'fun'.")
            return self.function_body("function")
        if self.match(LEFT_PAREN):
            expr = self.expression()
            self.expect(RIGHT_PAREN, "Expect ')' after expression.")
            return Grouping(expr)
        raise self.error(self.current(), "Expect expression.")
