"""Tests for the Lox parser."""

import pytest

from lox import ParseError, parse, print_expr, print_program, tokenize
from lox.ast import (
    Assign,
    BlockStmt,
    ClassStmt,
    Expr,
    ExpressionStmt,
    FunctionExpr,
    FunctionStmt,
    Literal,
    Set,
    VarStmt,
    WhileStmt,
)
from lox.parse import Parser


def _repl(source: str):
    errors = []
    result = Parser(tokenize(source, errors), errors).parse_repl()
    return result, errors


def _errors(source: str) -> list[str]:
    errors = []
    Parser(tokenize(source, errors), errors).parse_program()
    return [e.format() for e in errors]


def test_precedence_and_grouping():
    stmts = parse("-123 * (45.67);")
    assert isinstance(stmts[0], ExpressionStmt)
    assert print_expr(stmts[0].expression) == "(* (- 123) (group 45.67))"


def test_binary_operators_are_left_associative():
    stmts = parse("1 - 2 - 3;")
    assert print_expr(stmts[0].expression) == "(- (- 1 2) 3)"


def test_logical_precedence():
    stmts = parse("a or b and c;")
    assert print_expr(stmts[0].expression) == "(or a (and b c))"


def test_assignment_is_right_associative():
    expr = parse("a = b = 1;")[0].expression
    assert isinstance(expr, Assign)
    assert isinstance(expr.value, Assign)


def test_property_assignment_becomes_set():
    expr = parse("a.b.c = 1;")[0].expression
    assert isinstance(expr, Set)
    assert expr.name.lexeme == "c"
    assert print_expr(expr) == "(= (. (. a b) c) 1)"


def test_for_desugars_to_while_in_block():
    stmts = parse("for (var i = 0; i < 3; i = i + 1) print i;")
    assert len(stmts) == 1
    outer = stmts[0]
    assert isinstance(outer, BlockStmt)
    assert isinstance(outer.statements[0], VarStmt)
    loop = outer.statements[1]
    assert isinstance(loop, WhileStmt)
    assert isinstance(loop.body, BlockStmt)
    assert print_expr(loop.condition) == "(< i 3)"


def test_for_without_condition_loops_on_true():
    loop = parse("for (;;) print 1;")[0]
    assert isinstance(loop, WhileStmt)
    assert isinstance(loop.condition, Literal)
    assert loop.condition.value is True


def test_function_declaration_and_expression():
    stmts = parse("fun f(a, b) { return a; } var g = fun (x) { return x; };")
    decl = stmts[0]
    assert isinstance(decl, FunctionStmt)
    assert [p.lexeme for p in decl.params] == ["a", "b"]
    assert isinstance(stmts[1].initializer, FunctionExpr)


def test_class_with_superclass():
    stmt = parse("class B < A { init() {} m() {} }")[0]
    assert isinstance(stmt, ClassStmt)
    assert stmt.superclass is not None
    assert stmt.superclass.name.lexeme == "A"
    assert [m.name.lexeme for m in stmt.methods] == ["init", "m"]


def test_program_printing():
    text = print_program(parse("var a = 1; if (a) print a; else { a = 2; }"))
    assert text.split("\n") == [
        "(var a = 1)",
        "(if-else a (print a) (block (; (= a 2))))",
    ]


def test_parse_raises_first_error():
    with pytest.raises(ParseError) as exc:
        parse("print ;")
    assert exc.value.format() == "[line 1] Error at ';': Expect expression."


def test_errors_at_end():
    assert _errors("print 1") == ["[line 1] Error at end: Expect ';' after value."]


def test_recovers_and_reports_each_statement():
    errors = _errors("var 1;\nprint (;\nvar ok = 1;\nfun (;")
    assert errors == [
        "[line 1] Error at '1': Expect variable name.",
        "[line 2] Error at ';': Expect expression.",
        "[line 4] Error at ';': Expect parameter name.",
    ]


def test_invalid_assignment_target_does_not_stop_parsing():
    errors = []
    stmts = Parser(tokenize("1 = 2; print 3;", errors), errors).parse_program()
    assert [e.msg for e in errors] == ["Invalid assignment target."]
    assert len(stmts) == 2


def test_too_many_arguments():
    args = ", ".join(["1"] * 256)
    errors = _errors("f(" + args + ");")
    assert errors == ["[line 1] Error at '1': Can't have more than 255 arguments."]


def test_too_many_parameters():
    params = ", ".join("p" + str(i) for i in range(256))
    errors = _errors("fun f(" + params + ") {}")
    assert errors == ["[line 1] Error at 'p255': Can't have more than 255 parameters."]


def test_repl_lone_expression():
    result, errors = _repl("1 + 2")
    assert errors == []
    assert isinstance(result, Expr)
    assert print_expr(result) == "(+ 1 2)"


def test_repl_terminated_expression_is_a_statement():
    result, errors = _repl("1 + 2;")
    assert errors == []
    assert isinstance(result, list)
    assert isinstance(result[0], ExpressionStmt)


def test_repl_trailing_expression_after_statements():
    result, errors = _repl("var a = 1; a")
    assert errors == []
    assert isinstance(result, list)
    assert isinstance(result[0], VarStmt)
    assert isinstance(result[1], ExpressionStmt)


def test_repl_still_reports_errors():
    result, errors = _repl("print")
    assert result == []
    assert [e.format() for e in errors] == ["[line 1] Error at end: Expect expression."]


def test_nesting_past_host_stack_stops_the_parse():
    errors = []
    source = "print " + "(" * 5000 + "1" + ")" * 5000 + ";\nprint 2;"
    stmts = Parser(tokenize(source, errors), errors).parse_program()
    assert stmts == []
    assert [e.msg for e in errors] == ["Too much nesting."]
    assert errors[0].line == 1


def test_nesting_past_host_stack_at_the_prompt():
    result, errors = _repl("-" * 5000 + "1")
    assert result == []
    assert [e.msg for e in errors] == ["Too much nesting."]
