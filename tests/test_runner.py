"""Program tests for the Lox interpreter.

Test cases live in lox/*.tests files. Format:

    === test name
    lox source
    ---
    expected output, one printed line per line
    error: [line N] Error at 'x': message
    runtime: [line N] message
    ---

`error:` lines are the static diagnostics in the order reported and
`runtime:` lines the runtime error that ended the run, both after any
printed output.
"""

from pathlib import Path

import pytest

from lox import LoxRuntimeError, run

TESTS_DIR = Path(__file__).parent / "lox"


# ---------------------------------------------------------------------------
# Test file parsing
# ---------------------------------------------------------------------------


def parse_tests_file(path: Path) -> list[tuple[str, str, str]]:
    """Parse a .tests file into (name, source, expected) tuples."""
    lines = path.read_text().split("\n")
    result: list[tuple[str, str, str]] = []
    i = 0
    while i < len(lines):
        line = lines[i]
        if line.startswith("=== "):
            test_name = line[4:].strip()
            i += 1
            input_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                input_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            expected_lines: list[str] = []
            while i < len(lines) and not lines[i].startswith("---"):
                expected_lines.append(lines[i])
                i += 1
            if i < len(lines) and lines[i] == "---":
                i += 1
            source = "\n".join(input_lines)
            expected = "\n".join(expected_lines).strip()
            result.append((test_name, source, expected))
        else:
            i += 1
    return result


def discover_cases(test_dir: Path) -> list[tuple[str, str, str]]:
    """Glob *.tests in test_dir, return (test_id, source, expected) tuples."""
    results = []
    for test_file in sorted(test_dir.glob("*.tests")):
        for name, source, expected in parse_tests_file(test_file):
            results.append((f"{test_file.stem}/{name}", source, expected))
    return results


def transcript(source: str) -> str:
    """Run source and render output plus diagnostics the way .tests files do."""
    result = run(source)
    lines = list(result.output)
    for err in result.errors:
        if isinstance(err, LoxRuntimeError):
            lines.append("runtime: [line " + str(err.line) + "] " + err.msg)
        else:
            lines.append("error: " + err.format())
    return "\n".join(lines).strip()


# ---------------------------------------------------------------------------
# Parametrization
# ---------------------------------------------------------------------------


def pytest_generate_tests(metafunc):
    if "lox_source" in metafunc.fixturenames:
        cases = discover_cases(TESTS_DIR)
        params = [pytest.param(src, exp, id=tid) for tid, src, exp in cases]
        metafunc.parametrize("lox_source,lox_expected", params)


# ---------------------------------------------------------------------------
# Test functions
# ---------------------------------------------------------------------------


def test_program(lox_source: str, lox_expected: str) -> None:
    actual = transcript(lox_source)
    if actual != lox_expected:
        pytest.fail(
            "Output mismatch\n"
            f"--- expected ---\n{lox_expected}\n"
            f"--- actual ---\n{actual}"
        )


def test_cases_discovered() -> None:
    assert len(discover_cases(TESTS_DIR)) > 50
