"""Lox scanner — lexes source into a flat token list."""

from __future__ import annotations

from .errors import LexError, LoxError


# Single-character tokens
LEFT_PAREN = "LEFT_PAREN"
RIGHT_PAREN = "RIGHT_PAREN"
LEFT_BRACE = "LEFT_BRACE"
RIGHT_BRACE = "RIGHT_BRACE"
COMMA = "COMMA"
DOT = "DOT"
MINUS = "MINUS"
PLUS = "PLUS"
SEMICOLON = "SEMICOLON"
SLASH = "SLASH"
STAR = "STAR"

# One or two character tokens
BANG = "BANG"
BANG_EQUAL = "BANG_EQUAL"
EQUAL = "EQUAL"
EQUAL_EQUAL = "EQUAL_EQUAL"
GREATER = "GREATER"
GREATER_EQUAL = "GREATER_EQUAL"
LESS = "LESS"
LESS_EQUAL = "LESS_EQUAL"

# Literals
IDENTIFIER = "IDENTIFIER"
STRING = "STRING"
NUMBER = "NUMBER"

# Keywords
AND = "AND"
CLASS = "CLASS"
ELSE = "ELSE"
FALSE = "FALSE"
FUN = "FUN"
FOR = "FOR"
IF = "IF"
NIL = "NIL"
OR = "OR"
PRINT = "PRINT"
RETURN = "RETURN"
SUPER = "SUPER"
THIS = "THIS"
TRUE = "TRUE"
VAR = "VAR"
WHILE = "WHILE"

EOF = "EOF"

KEYWORDS: dict[str, str] = {
    "and": AND,
    "class": CLASS,
    "else": ELSE,
    "false": FALSE,
    "for": FOR,
    "fun": FUN,
    "if": IF,
    "nil": NIL,
    "or": OR,
    "print": PRINT,
    "return": RETURN,
    "super": SUPER,
    "this": THIS,
    "true": TRUE,
    "var": VAR,
    "while": WHILE,
}

SINGLE_CHARS: dict[str, str] = {
    "(": LEFT_PAREN,
    ")": RIGHT_PAREN,
    "{": LEFT_BRACE,
    "}": RIGHT_BRACE,
    ",": COMMA,
    ".": DOT,
    "-": MINUS,
    "+": PLUS,
    ";": SEMICOLON,
    "*": STAR,
}

# Operators that may be followed by '=', with (bare, with-equal) types
EQUAL_PAIRS: dict[str, tuple[str, str]] = {
    "!": (BANG, BANG_EQUAL),
    "=": (EQUAL, EQUAL_EQUAL),
    "<": (LESS, LESS_EQUAL),
    ">": (GREATER, GREATER_EQUAL),
}


class Token:
    """A token with type, lexeme, literal payload and source line.

    Fields are read-only once set.
    """

    __slots__ = ("type", "lexeme", "literal", "line")

    def __init__(self, type_: str, lexeme: str, literal: object, line: int):
        self.type: str = type_
        self.lexeme: str = lexeme
        self.literal: object = literal
        self.line: int = line

    def __setattr__(self, name: str, value: object) -> None:
        if hasattr(self, name):
            raise AttributeError("Token." + name + " is read-only")
        object.__setattr__(self, name, value)

    def __repr__(self) -> str:
        return (
            "Token("
            + self.type
            + ", "
            + repr(self.lexeme)
            + ", "
            + repr(self.literal)
            + ", "
            + str(self.line)
            + ")"
        )

    def __str__(self) -> str:
        return self.type + " " + self.lexeme + " " + str(self.literal)


def _is_digit(c: str) -> bool:
    return c >= "0" and c <= "9"


def _is_alpha(c: str) -> bool:
    return (c >= "a" and c <= "z") or (c >= "A" and c <= "Z") or c == "_"


def _is_alnum(c: str) -> bool:
    return _is_alpha(c) or _is_digit(c)


def tokenize(source: str, errors: list[LoxError] | None = None) -> list[Token]:
    """Tokenize Lox source into a flat list ending with EOF.

    Lexical errors are appended to `errors` and scanning carries on, so one
    pass reports every bad character. Without an `errors` list the first
    lexical error is raised instead.
    """
    tokens: list[Token] = []
    pos = 0
    line = 1
    length = len(source)

    def report(msg: str, at_line: int) -> None:
        err = LexError(msg, at_line)
        if errors is None:
            raise err
        errors.append(err)

    while pos < length:
        c = source[pos]
        start = pos

        if c == "\n":
            pos += 1
            line += 1
            continue

        if c == " " or c == "\t" or c == "\r":
            pos += 1
            continue

        if c == "/":
            # Line comment
            if pos + 1 < length and source[pos + 1] == "/":
                while pos < length and source[pos] != "\n":
                    pos += 1
                continue
            # Block comment, no nesting
            if pos + 1 < length and source[pos + 1] == "*":
                pos += 2
                while pos < length and not (
                    source[pos] == "*" and pos + 1 < length and source[pos + 1] == "/"
                ):
                    if source[pos] == "\n":
                        line += 1
                    pos += 1
                if pos >= length:
                    report("Unterminated comment.", line)
                    continue
                pos += 2  # skip */
                continue
            tokens.append(Token(SLASH, "/", None, line))
            pos += 1
            continue

        if c in SINGLE_CHARS:
            tokens.append(Token(SINGLE_CHARS[c], c, None, line))
            pos += 1
            continue

        if c in EQUAL_PAIRS:
            bare, with_equal = EQUAL_PAIRS[c]
            if pos + 1 < length and source[pos + 1] == "=":
                tokens.append(Token(with_equal, source[pos : pos + 2], None, line))
                pos += 2
            else:
                tokens.append(Token(bare, c, None, line))
                pos += 1
            continue

        # String literal, may span lines
        if c == '"':
            start_line = line
            pos += 1
            while pos < length and source[pos] != '"':
                if source[pos] == "\n":
                    line += 1
                pos += 1
            if pos >= length:
                report("Unterminated string.", line)
                continue
            pos += 1  # skip closing "
            value = source[start + 1 : pos - 1]
            tokens.append(Token(STRING, source[start:pos], value, start_line))
            continue

        # Number: digits, optionally '.' followed by at least one digit
        if _is_digit(c):
            while pos < length and _is_digit(source[pos]):
                pos += 1
            if (
                pos + 1 < length
                and source[pos] == "."
                and _is_digit(source[pos + 1])
            ):
                pos += 1
                while pos < length and _is_digit(source[pos]):
                    pos += 1
            raw = source[start:pos]
            tokens.append(Token(NUMBER, raw, float(raw), line))
            continue

        # Identifier or keyword
        if _is_alpha(c):
            while pos < length and _is_alnum(source[pos]):
                pos += 1
            word = source[start:pos]
            tokens.append(Token(KEYWORDS.get(word, IDENTIFIER), word, None, line))
            continue

        report("Unexpected character.", line)
        pos += 1

    tokens.append(Token(EOF, "", None, line))
    return tokens
