"""Tests for the canonical AST printer."""

from lox import parse, print_expr, print_program
from lox.ast import Binary, Grouping, Literal, Unary
from lox.printer import print_stmt
from lox.tokens import MINUS, STAR, Token


def _expr(source: str) -> str:
    return print_expr(parse(source + ";")[0].expression)


def test_hand_built_tree():
    expr = Binary(
        Unary(Token(MINUS, "-", None, 1), Literal(123.0)),
        Token(STAR, "*", None, 1),
        Grouping(Literal(45.67)),
    )
    assert print_expr(expr) == "(* (- 123) (group 45.67))"


def test_literals():
    assert _expr("nil") == "nil"
    assert _expr("true") == "true"
    assert _expr('"text"') == "text"
    assert _expr("2.50") == "2.5"


def test_calls_and_properties():
    assert _expr("f(1, g())") == "(call f 1 (call g))"
    assert _expr("a.b") == "(. a b)"
    assert _expr("a = 1") == "(= a 1)"


def test_function_expression():
    assert _expr("fun (a) { return a; }") == "(fun (a) (return a))"


def test_statements():
    stmts = parse(
        "var x; while (x) x = nil; fun f() { return; } print x;"
    )
    assert [print_stmt(s) for s in stmts] == [
        "(var x)",
        "(while x (; (= x nil)))",
        "(fun f () (return))",
        "(print x)",
    ]


def test_class_statement():
    text = print_program(parse("class B < A { m() { return super.m(this); } }"))
    assert text == "(class B < A (fun m () (return (call (super m) this))))"


def test_empty_program():
    assert print_program([]) == ""
