"""CLI tests for the lox entry point."""

from pathlib import Path

import pytest

from lox.cli import main


def _write(tmp_path: Path, source: str) -> str:
    path = tmp_path / "prog.lox"
    path.write_text(source)
    return str(path)


def test_runs_file(tmp_path, capsys):
    code = main([_write(tmp_path, 'print "hello"; print 1 + 2;')])
    out = capsys.readouterr()
    assert code == 0
    assert out.out == "hello\n3\n"
    assert out.err == ""


def test_static_error_exit_code(tmp_path, capsys):
    code = main([_write(tmp_path, "print ;")])
    out = capsys.readouterr()
    assert code == 65
    assert out.out == ""
    assert out.err == "[line 1] Error at ';': Expect expression.\n"


def test_runtime_error_exit_code(tmp_path, capsys):
    code = main([_write(tmp_path, 'print "before";\nprint -nil;')])
    out = capsys.readouterr()
    assert code == 70
    assert out.out == "before\n"
    assert out.err == "Operand must be a number.\n[line 2]\n"


def test_missing_file(tmp_path, capsys):
    code = main([str(tmp_path / "nope.lox")])
    assert code == 66
    assert "No such file or directory" in capsys.readouterr().err


def test_tokens_flag(tmp_path, capsys):
    code = main(["--tokens", _write(tmp_path, "var x;")])
    lines = capsys.readouterr().out.splitlines()
    assert code == 0
    assert lines == ["VAR var None", "IDENTIFIER x None", "SEMICOLON ; None", "EOF  None"]


def test_ast_flag(tmp_path, capsys):
    code = main(["--ast", _write(tmp_path, "print -123 * (45.67);")])
    assert code == 0
    assert capsys.readouterr().out == "(print (* (- 123) (group 45.67)))\n"


def test_max_depth_flag(tmp_path, capsys):
    path = _write(tmp_path, "fun f(n) { if (n > 0) f(n - 1); }\nf(30);")
    assert main(["--max-depth", "10", path]) == 70
    assert "Stack overflow." in capsys.readouterr().err
    assert main(["--max-depth", "50", path]) == 0


@pytest.mark.parametrize(
    "argv",
    [
        ["--bogus"],
        ["--max-depth"],
        ["--max-depth", "many"],
        ["--max-depth", "0"],
        ["a.lox", "b.lox"],
        ["--ast"],
    ],
)
def test_usage_errors(argv, capsys):
    assert main(argv) == 2
    assert capsys.readouterr().err.startswith("lox: ")


def test_help(capsys):
    assert main(["--help"]) == 0
    assert capsys.readouterr().out.startswith("lox [OPTIONS] [FILE]")


def test_prompt(monkeypatch, capsys):
    lines = iter(["var a = 20;", "a + 1", "print a;", "b;"])

    def fake_input(prompt: str) -> str:
        try:
            return next(lines)
        except StopIteration:
            raise EOFError from None

    monkeypatch.setattr("builtins.input", fake_input)
    assert main([]) == 0
    out = capsys.readouterr()
    assert out.out == "21\n20\n\n"
    assert out.err == "Undefined variable 'b'.\n[line 1]\n"
