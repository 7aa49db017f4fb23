"""Pieces of the query grammar that follow a conversion arrow or stand alone."""

from __future__ import annotations

from .tokens import Token, TokenIterator, TokenKind, describe

FULL_INT = "full"
"""Returned by parse_digits() for a bare ``digits``: show every integer digit."""

_U64_MAX = 2**64 - 1

_ATTRIBUTES = {
    "int": "int",
    "international": "int",
    "UKSJJ": "UKSJJ",
    "UKB": "UKB",
    "UKC": "UKC",
    "UKK": "UKK",
    "imperial": "br",
    "british": "br",
    "UK": "br",
    "survey": "survey",
    "geodetic": "survey",
    "irish": "irish",
    "aust": "aust",
    "australian": "aust",
    "roman": "roman",
    "egyptian": "egyptian",
    "greek": "greek",
    "olympic": "olympic",
}

_BASE_WORDS = {
    "hex": 16,
    "hexadecimal": 16,
    "base16": 16,
    "oct": 8,
    "octal": 8,
    "base8": 8,
    "bin": 2,
    "binary": 2,
    "base2": 2,
}

_LIST_SEPARATORS = (TokenKind.COMMA, TokenKind.SEMICOLON)
_LIST_ENDS = (TokenKind.EOF, TokenKind.NEWLINE, TokenKind.COMMENT)


def attr_from_name(name: str) -> str | None:
    """The unit-name prefix for an attribute word such as ``imperial``, or None."""
    return _ATTRIBUTES.get(name)


def _plain_integer(token: Token) -> str | None:
    """The digits of a decimal token with no fraction or exponent, else None."""
    if token.kind is TokenKind.DECIMAL:
        integer, frac, exp = token.value
        if frac is None and exp is None:
            return integer
    return None


def _parse_u64(digits: str) -> int:
    value = int(digits)
    if value > _U64_MAX:
        raise ValueError("number too large to fit in target type")
    return value


def parse_unitlist(tokens: TokenIterator) -> list[str] | None:
    """Parse a list of two or more unit names separated by ``,`` or ``;``.

    Consumes tokens as it goes; pass a copy when the caller must be able
    to back off. Returns None when the input is not such a list.
    """
    expecting_term = True
    names: list[str] = []
    while True:
        token = next(tokens)
        if token.kind is TokenKind.IDENT and expecting_term:
            names.append(token.value)
            expecting_term = False
        elif token.kind in _LIST_SEPARATORS and not expecting_term:
            expecting_term = True
        elif token.kind in _LIST_ENDS and not expecting_term:
            break
        else:
            return None
    return names if len(names) > 1 else None


def parse_offset(tokens: TokenIterator) -> int | None:
    """Parse a UTC offset like ``+05:30`` into seconds; None if it is not one."""
    token = next(tokens)
    if token.kind is TokenKind.PLUS:
        sign = 1
    elif token.kind is TokenKind.MINUS:
        sign = -1
    else:
        return None
    hour = _plain_integer(next(tokens))
    if hour is None or len(hour) != 2:
        return None
    if next(tokens).kind is not TokenKind.COLON:
        return None
    minute = _plain_integer(next(tokens))
    if minute is None or len(minute) != 2:
        return None
    return sign * (int(hour) * 3600 + int(minute) * 60)


def parse_digits(tokens: TokenIterator) -> int | str | None:
    """Parse an optional ``digits [n]`` clause.

    Returns None when the clause is absent (nothing is consumed), the
    requested count when a number follows, or FULL_INT for a bare
    ``digits``. Raises ValueError when the count does not fit.
    """
    token = tokens.peek()
    if token.kind is not TokenKind.IDENT or token.value != "digits":
        return None
    next(tokens)
    digits = _plain_integer(tokens.peek())
    if digits is None:
        return FULL_INT
    next(tokens)
    try:
        return _parse_u64(digits)
    except ValueError as exc:
        raise ValueError(f"Failed to parse digits: {exc}") from exc


def parse_base(tokens: TokenIterator) -> int | None:
    """Parse an optional output base such as ``hex`` or ``base 7``.

    Returns None when there is no base clause (nothing is consumed).
    Raises ValueError for a malformed or unsupported base.
    """
    token = tokens.peek()
    if token.kind is not TokenKind.IDENT:
        return None
    if token.value in _BASE_WORDS:
        next(tokens)
        return _BASE_WORDS[token.value]
    if token.value != "base":
        return None
    next(tokens)
    argument = next(tokens)
    digits = _plain_integer(argument)
    if digits is None:
        raise ValueError(f"Expected decimal base, got {describe(argument)}")
    try:
        base = _parse_u64(digits)
    except ValueError as exc:
        raise ValueError(f"Failed to parse base: {exc}") from exc
    if not 2 <= base <= 36:
        raise ValueError(f"Unsupported base {base}, must be from 2 to 36")
    return base