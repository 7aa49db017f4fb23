"""Lexer for the query language: turns input text into tokens."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any

_DEC_DIGITS = frozenset("0123456789")
_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")
_OCT_DIGITS = frozenset("01234567")
_BIN_DIGITS = frozenset("01")
_DIGIT_SEPARATORS = frozenset("\u2009_")
_DATE_LITERAL_STOP = frozenset("#:-+ ")


class Degree(Enum):
    """Temperature scales with an offset zero point."""

    CELSIUS = "°C"
    FAHRENHEIT = "°F"
    REAUMUR = "°Ré"
    ROMER = "°Rø"
    DELISLE = "°De"
    NEWTON = "°N"

    def __str__(self) -> str:
        return self.value


class DateTokenKind(Enum):
    """Kinds of pieces inside a ``#...#`` date literal."""

    NUMBER = auto()
    LITERAL = auto()
    COLON = auto()
    DASH = auto()
    SPACE = auto()
    PLUS = auto()


@dataclass(frozen=True)
class DateToken:
    """One piece of a date literal.

    For NUMBER, *value* holds the integer digits and *frac* the digits
    after a decimal point (None when there was no point). For LITERAL,
    *value* holds the text.
    """

    kind: DateTokenKind
    value: str | None = None
    frac: str | None = None


class TokenKind(Enum):
    """Kinds of tokens produced by the lexer."""

    NEWLINE = auto()
    COMMENT = auto()
    IDENT = auto()
    DECIMAL = auto()
    HEX = auto()
    OCT = auto()
    BIN = auto()
    QUOTE = auto()
    SLASH = auto()
    PIPE = auto()
    SEMICOLON = auto()
    EQUALS = auto()
    CARET = auto()
    EOF = auto()
    LPAR = auto()
    RPAR = auto()
    PLUS = auto()
    MINUS = auto()
    ASTERISK = auto()
    DASH_ARROW = auto()
    COLON = auto()
    DATE = auto()
    COMMA = auto()
    DEGREE = auto()
    PERCENT = auto()
    ERROR = auto()


@dataclass(frozen=True)
class Token:
    """A lexed token.

    *value* depends on the kind: the number of lines for COMMENT, the
    text for IDENT, QUOTE, HEX, OCT, BIN and ERROR, an
    ``(integer, fraction, exponent)`` tuple for DECIMAL, a tuple of
    DateToken for DATE, and a Degree for DEGREE.
    """

    kind: TokenKind
    value: Any = None


_SIMPLE = {
    "\n": TokenKind.NEWLINE,
    "(": TokenKind.LPAR,
    ")": TokenKind.RPAR,
    "+": TokenKind.PLUS,
    ";": TokenKind.SEMICOLON,
    "%": TokenKind.PERCENT,
    "=": TokenKind.EQUALS,
    "^": TokenKind.CARET,
    ",": TokenKind.COMMA,
    "|": TokenKind.PIPE,
    # DIVISION SLASH, used to render tight fractions.
    "\u2215": TokenKind.PIPE,
    ":": TokenKind.COLON,
    "→": TokenKind.DASH_ARROW,
    "\u2212": TokenKind.MINUS,
}

_RADIX = {
    "x": (TokenKind.HEX, _HEX_DIGITS, "hexadecimal"),
    "o": (TokenKind.OCT, _OCT_DIGITS, "octal"),
    "b": (TokenKind.BIN, _BIN_DIGITS, "binary"),
}

_WORDS: dict[str, Token] = {}
for _names, _degree in (
    (("degC", "°C", "celsius", "℃"), Degree.CELSIUS),
    (("degF", "°F", "fahrenheit", "℉"), Degree.FAHRENHEIT),
    (("degRé", "°Ré", "degRe", "°Re", "réaumur", "reaumur"), Degree.REAUMUR),
    (("degRø", "°Rø", "degRo", "°Ro", "rømer", "romer"), Degree.ROMER),
    (("degDe", "°De", "delisle"), Degree.DELISLE),
    (("degN", "°N", "degnewton"), Degree.NEWTON),
):
    for _name in _names:
        _WORDS[_name] = Token(TokenKind.DEGREE, _degree)
_WORDS["per"] = Token(TokenKind.SLASH)
_WORDS["to"] = Token(TokenKind.DASH_ARROW)
_WORDS["in"] = Token(TokenKind.DASH_ARROW)

_DESCRIPTIONS = {
    TokenKind.NEWLINE: "\\n",
    TokenKind.COMMENT: "\\n",
    TokenKind.IDENT: "ident",
    TokenKind.DECIMAL: "number",
    TokenKind.HEX: "hex",
    TokenKind.OCT: "octal",
    TokenKind.BIN: "binary",
    TokenKind.QUOTE: "quote",
    TokenKind.SLASH: "`/`",
    TokenKind.PIPE: "`|`",
    TokenKind.SEMICOLON: "`;`",
    TokenKind.EQUALS: "`=`",
    TokenKind.CARET: "`^`",
    TokenKind.EOF: "eof",
    TokenKind.LPAR: "`(`",
    TokenKind.RPAR: "`)`",
    TokenKind.PLUS: "`+`",
    TokenKind.MINUS: "`-`",
    TokenKind.ASTERISK: "`*`",
    TokenKind.DASH_ARROW: "`->`",
    TokenKind.COLON: "`:`",
    TokenKind.DATE: "date literal",
    TokenKind.COMMA: "`,`",
    TokenKind.PERCENT: "%",
}


def describe(token: Token) -> str:
    """A short description of *token* for use in error messages."""
    if token.kind is TokenKind.DEGREE:
        return f"`{token.value}`"
    if token.kind is TokenKind.ERROR:
        return f"<{token.value}>"
    return _DESCRIPTIONS[token.kind]


def _error(message: str) -> Token:
    return Token(TokenKind.ERROR, message)


class TokenIterator:
    """Lazily lexes a string; yields EOF tokens forever once the input is used up."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0
        self._peeked: Token | None = None

    def __iter__(self) -> TokenIterator:
        return self

    def __next__(self) -> Token:
        if self._peeked is not None:
            token, self._peeked = self._peeked, None
            return token
        return self._lex()

    def __copy__(self) -> TokenIterator:
        clone = TokenIterator(self._text)
        clone._pos = self._pos
        clone._peeked = self._peeked
        return clone

    def copy(self) -> TokenIterator:
        """An independent iterator at the same position."""
        return copy.copy(self)

    def peek(self) -> Token:
        """The next token, without consuming it."""
        if self._peeked is None:
            self._peeked = self._lex()
        return self._peeked

    def _peek_char(self) -> str | None:
        return self._text[self._pos] if self._pos < len(self._text) else None

    def _next_char(self) -> str | None:
        char = self._peek_char()
        if char is not None:
            self._pos += 1
        return char

    def _take_digits(self, allowed: frozenset[str]) -> str:
        digits = []
        while (char := self._peek_char()) is not None:
            if char in allowed:
                digits.append(char)
            elif char not in _DIGIT_SEPARATORS:
                break
            self._pos += 1
        return "".join(digits)

    def _lex(self) -> Token:
        while True:
            char = self._next_char()
            if char is None:
                return Token(TokenKind.EOF)
            if char not in (" ", "\t"):
                break

        simple = _SIMPLE.get(char)
        if simple is not None:
            return Token(simple)
        if char == "*":
            if self._peek_char() == "*":
                self._pos += 1
                return Token(TokenKind.CARET)
            return Token(TokenKind.ASTERISK)
        if char == "-":
            if self._peek_char() == ">":
                self._pos += 1
                return Token(TokenKind.DASH_ARROW)
            return Token(TokenKind.MINUS)
        if char == "/":
            return self._lex_slash()
        if char in _DEC_DIGITS or char == ".":
            return self._lex_number(char)
        if char == "\\":
            return self._lex_escape()
        if char == "'":
            return self._lex_quote()
        if char == "#":
            return self._lex_date()
        if char == '"':
            return self._lex_quoted_ident()
        return self._lex_word(char)

    def _lex_slash(self) -> Token:
        nxt = self._peek_char()
        if nxt == "/":
            while self._next_char() not in (None, "\n"):
                pass
            return Token(TokenKind.COMMENT, 1)
        if nxt == "*":
            lines = 0
            while True:
                if self._peek_char() == "\n":
                    lines += 1
                if self._next_char() == "*" and self._peek_char() == "/":
                    self._pos += 1
                    return Token(TokenKind.COMMENT, lines)
                if self._peek_char() is None:
                    return _error("Expected `*/`, got EOF")
        return Token(TokenKind.SLASH)

    def _lex_number(self, first: str) -> Token:
        if first == "0" and self._peek_char() in _RADIX:
            prefix = self._next_char()
            kind, allowed, name = _RADIX[prefix]
            digits = self._take_digits(allowed)
            if not digits:
                return _error(f"Malformed {name} literal: No digits after 0{prefix}")
            return Token(kind, digits)

        if first != ".":
            integer = first + self._take_digits(_DEC_DIGITS)
        else:
            integer = "0"

        frac = None
        if first == "." or self._peek_char() == ".":
            if first != ".":
                self._pos += 1
            frac = self._take_digits(_DEC_DIGITS)
            if not frac:
                return _error("Malformed number literal: No digits after decimal point")

        exp = None
        if self._peek_char() in ("e", "E"):
            self._pos += 1
            if self._peek_char() in ("e", "E"):
                self._pos += 1
            sign = ""
            if self._peek_char() == "-":
                sign = "-"
                self._pos += 1
            elif self._peek_char() == "+":
                self._pos += 1
            exp = sign + self._take_digits(_DEC_DIGITS)
            if not exp:
                return _error("Malformed number literal: No digits after exponent")

        return Token(TokenKind.DECIMAL, (integer, frac, exp))

    def _lex_escape(self) -> Token:
        if self._next_char() != "u":
            return _error("Unexpected \\")
        digits = []
        while (char := self._peek_char()) is not None and char in _HEX_DIGITS:
            digits.append(char)
            self._pos += 1
        if not digits:
            return _error("Expected hex digits after \\u")
        value = int("".join(digits), 16)
        if value > 0x10FFFF or 0xD800 <= value <= 0xDFFF:
            return _error(f"Invalid unicode scalar: {value:x}")
        return Token(TokenKind.IDENT, chr(value))

    def _lex_quote(self) -> Token:
        escapes = {"'": "'", "n": "\n", "t": "\t"}
        buf = []
        while True:
            char = self._next_char()
            if char is None or char == "\n":
                return _error("Unexpected newline or EOF")
            if char == "\\":
                escaped = self._next_char()
                if escaped is None:
                    return _error("Unexpected EOF")
                if escaped not in escapes:
                    return _error(f"Invalid escape sequence \\{escaped}")
                buf.append(escapes[escaped])
            elif char == "'":
                return Token(TokenKind.QUOTE, "".join(buf))
            else:
                buf.append(char)

    def _take_plain_digits(self) -> str:
        digits = []
        while (char := self._peek_char()) is not None and char in _DEC_DIGITS:
            digits.append(char)
            self._pos += 1
        return "".join(digits)

    def _lex_date(self) -> Token:
        pieces: list[DateToken] = []
        punctuation = {
            ":": DateTokenKind.COLON,
            "-": DateTokenKind.DASH,
            "+": DateTokenKind.PLUS,
        }
        while (char := self._next_char()) is not None:
            if char == "#":
                break
            if char in punctuation:
                pieces.append(DateToken(punctuation[char]))
            elif char.isspace():
                while (nxt := self._peek_char()) is not None and nxt.isspace():
                    self._pos += 1
                pieces.append(DateToken(DateTokenKind.SPACE))
            elif char in _DEC_DIGITS:
                integer = char + self._take_plain_digits()
                frac = None
                if self._peek_char() == ".":
                    self._pos += 1
                    frac = self._take_plain_digits()
                pieces.append(DateToken(DateTokenKind.NUMBER, integer, frac))
            else:
                buf = [char]
                while (
                    (nxt := self._peek_char()) is not None
                    and nxt not in _DATE_LITERAL_STOP
                    and nxt not in _DEC_DIGITS
                ):
                    buf.append(nxt)
                    self._pos += 1
                pieces.append(DateToken(DateTokenKind.LITERAL, "".join(buf)))
        if pieces and pieces[0].kind is DateTokenKind.SPACE:
            pieces.pop(0)
        if pieces and pieces[-1].kind is DateTokenKind.SPACE:
            pieces.pop()
        return Token(TokenKind.DATE, tuple(pieces))

    def _lex_quoted_ident(self) -> Token:
        buf = []
        while (char := self._next_char()) is not None:
            if char == "\\":
                escaped = self._next_char()
                if escaped is not None:
                    buf.append(escaped)
            elif char == '"':
                break
            else:
                buf.append(char)
        return Token(TokenKind.IDENT, "".join(buf))

    def _lex_word(self, first: str) -> Token:
        buf = [first]
        while (char := self._peek_char()) is not None and (
            char.isalnum() or char in ("_", "$")
        ):
            buf.append(char)
            self._pos += 1
        word = "".join(buf)
        return _WORDS.get(word, Token(TokenKind.IDENT, word))


def tokenize(text: str) -> list[Token]:
    """All tokens of *text*, ending with a single EOF token."""
    tokens = []
    for token in TokenIterator(text):
        tokens.append(token)
        if token.kind is TokenKind.EOF:
            return tokens
    return tokens