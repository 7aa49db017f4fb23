import copy

import pytest

from rinktools.tokens import (
    DateToken,
    DateTokenKind,
    Degree,
    Token,
    TokenIterator,
    TokenKind,
    describe,
    tokenize,
)

EOF = Token(TokenKind.EOF)


def ident(text):
    return Token(TokenKind.IDENT, text)


def dec(integer, frac=None, exp=None):
    return Token(TokenKind.DECIMAL, (integer, frac, exp))


def err(message):
    return Token(TokenKind.ERROR, message)


def test_malformed_exponent():
    tokens = tokenize("1e")
    assert tokens == [err("Malformed number literal: No digits after exponent"), EOF]
    assert describe(tokens[0]) == "<Malformed number literal: No digits after exponent>"


def test_malformed_decimal_point():
    tokens = tokenize("1.")
    assert tokens == [err("Malformed number literal: No digits after decimal point"), EOF]
    assert (
        describe(tokens[0])
        == "<Malformed number literal: No digits after decimal point>"
    )


def test_lone_minus():
    tokens = tokenize("-")
    assert tokens == [Token(TokenKind.MINUS), EOF]
    assert describe(tokens[1]) == "eof"


def test_additive_expression():
    assert tokenize("a + b - c") == [
        ident("a"),
        Token(TokenKind.PLUS),
        ident("b"),
        Token(TokenKind.MINUS),
        ident("c"),
        EOF,
    ]


def test_degree_suffixes():
    assert tokenize("a b °C + x y °F") == [
        ident("a"),
        ident("b"),
        Token(TokenKind.DEGREE, Degree.CELSIUS),
        Token(TokenKind.PLUS),
        ident("x"),
        ident("y"),
        Token(TokenKind.DEGREE, Degree.FAHRENHEIT),
        EOF,
    ]


def test_conversion_arrow():
    assert tokenize("foo -> bar") == [
        ident("foo"),
        Token(TokenKind.DASH_ARROW),
        ident("bar"),
        EOF,
    ]


def test_conversion_words():
    assert tokenize("3 feet to meters") == [
        dec("3"),
        ident("feet"),
        Token(TokenKind.DASH_ARROW),
        ident("meters"),
        EOF,
    ]


def test_of_expression():
    assert tokenize("foo of 1 abc def / 12") == [
        ident("foo"),
        ident("of"),
        dec("1"),
        ident("abc"),
        ident("def"),
        Token(TokenKind.SLASH),
        dec("12"),
        EOF,
    ]


def test_pipe_fraction():
    assert tokenize("a|b c") == [
        ident("a"),
        Token(TokenKind.PIPE),
        ident("b"),
        ident("c"),
        EOF,
    ]


@pytest.mark.parametrize(
    "text, kind",
    [
        ("(", TokenKind.LPAR),
        (")", TokenKind.RPAR),
        (";", TokenKind.SEMICOLON),
        ("%", TokenKind.PERCENT),
        ("=", TokenKind.EQUALS),
        ("^", TokenKind.CARET),
        ("**", TokenKind.CARET),
        ("*", TokenKind.ASTERISK),
        (",", TokenKind.COMMA),
        (":", TokenKind.COLON),
        ("\n", TokenKind.NEWLINE),
        ("→", TokenKind.DASH_ARROW),
        ("\u2212", TokenKind.MINUS),
        ("\u2215", TokenKind.PIPE),
        ("per", TokenKind.SLASH),
        ("in", TokenKind.DASH_ARROW),
        ("to", TokenKind.DASH_ARROW),
    ],
)
def test_single_tokens(text, kind):
    assert tokenize(text) == [Token(kind), EOF]


@pytest.mark.parametrize(
    "text, degree",
    [
        ("celsius", Degree.CELSIUS),
        ("℃", Degree.CELSIUS),
        ("degF", Degree.FAHRENHEIT),
        ("reaumur", Degree.REAUMUR),
        ("°Ré", Degree.REAUMUR),
        ("degRø", Degree.ROMER),
        ("romer", Degree.ROMER),
        ("delisle", Degree.DELISLE),
        ("degnewton", Degree.NEWTON),
    ],
)
def test_degree_names(text, degree):
    assert tokenize(text) == [Token(TokenKind.DEGREE, degree), EOF]


@pytest.mark.parametrize(
    "text, expected",
    [
        ("1.5e-3", dec("1", "5", "-3")),
        (".5", dec("0", "5")),
        ("1e+5", dec("1", None, "5")),
        ("1E5", dec("1", None, "5")),
        ("1_000", dec("1000")),
        ("1\u2009000.25", dec("1000", "25")),
        ("42", dec("42")),
    ],
)
def test_decimal_literals(text, expected):
    assert tokenize(text) == [expected, EOF]


@pytest.mark.parametrize(
    "text, expected",
    [
        ("0xFF_ff", Token(TokenKind.HEX, "FFff")),
        ("0o17", Token(TokenKind.OCT, "17")),
        ("0b1_01", Token(TokenKind.BIN, "101")),
        ("0x", err("Malformed hexadecimal literal: No digits after 0x")),
        ("0o", err("Malformed octal literal: No digits after 0o")),
        ("0b", err("Malformed binary literal: No digits after 0b")),
    ],
)
def test_radix_literals(text, expected):
    assert tokenize(text) == [expected, EOF]


def test_octal_stops_at_invalid_digit():
    assert tokenize("0o78") == [Token(TokenKind.OCT, "7"), dec("8"), EOF]


def test_line_comment():
    assert tokenize("// hi\n1") == [Token(TokenKind.COMMENT, 1), dec("1"), EOF]


def test_block_comment_counts_lines():
    assert tokenize("/* a\nb */ x") == [Token(TokenKind.COMMENT, 1), ident("x"), EOF]


def test_unterminated_block_comment():
    assert tokenize("/* abc") == [err("Expected `*/`, got EOF"), EOF]


def test_quotes():
    assert tokenize("'it\\'s\\n'") == [Token(TokenKind.QUOTE, "it's\n"), EOF]
    assert tokenize("'abc") == [err("Unexpected newline or EOF"), EOF]
    assert tokenize("'\\x'")[0] == err("Invalid escape sequence \\x")


def test_double_quoted_ident():
    assert tokenize('"foo \\"bar"') == [ident('foo "bar'), EOF]


def test_unicode_escape():
    assert tokenize("\\u3bc") == [ident("\u03bc"), EOF]
    assert tokenize("\\ud800")[0] == err("Invalid unicode scalar: d800")
    assert tokenize("\\q")[0] == err("Unexpected \\")


def test_date_literal():
    tokens = tokenize("# 2020-01-02  10:30.5 jan #")
    assert tokens == [
        Token(
            TokenKind.DATE,
            (
                DateToken(DateTokenKind.NUMBER, "2020"),
                DateToken(DateTokenKind.DASH),
                DateToken(DateTokenKind.NUMBER, "01"),
                DateToken(DateTokenKind.DASH),
                DateToken(DateTokenKind.NUMBER, "02"),
                DateToken(DateTokenKind.SPACE),
                DateToken(DateTokenKind.NUMBER, "10"),
                DateToken(DateTokenKind.COLON),
                DateToken(DateTokenKind.NUMBER, "30", "5"),
                DateToken(DateTokenKind.SPACE),
                DateToken(DateTokenKind.LITERAL, "jan"),
            ),
        ),
        EOF,
    ]
    assert describe(tokens[0]) == "date literal"


def test_date_literal_with_offset():
    assert tokenize("#+05#") == [
        Token(
            TokenKind.DATE,
            (DateToken(DateTokenKind.PLUS), DateToken(DateTokenKind.NUMBER, "05")),
        ),
        EOF,
    ]


def test_identifier_characters():
    assert tokenize("us$ a_b x2") == [ident("us$"), ident("a_b"), ident("x2"), EOF]


def test_peek_does_not_consume():
    tokens = TokenIterator("a b")
    assert tokens.peek() == ident("a")
    assert tokens.peek() == ident("a")
    assert next(tokens) == ident("a")
    assert next(tokens) == ident("b")


def test_eof_repeats():
    tokens = TokenIterator("x")
    assert next(tokens) == ident("x")
    assert [next(tokens) for _ in range(3)] == [EOF, EOF, EOF]


def test_copy_is_independent():
    tokens = TokenIterator("a b c")
    next(tokens)
    clone = copy.copy(tokens)
    assert next(clone) == ident("b")
    assert next(clone) == ident("c")
    assert next(tokens) == ident("b")
    assert tokens.copy().peek() == ident("c")


@pytest.mark.parametrize(
    "token, text",
    [
        (Token(TokenKind.NEWLINE), "\\n"),
        (Token(TokenKind.COMMENT, 2), "\\n"),
        (ident("x"), "ident"),
        (dec("1"), "number"),
        (Token(TokenKind.HEX, "f"), "hex"),
        (Token(TokenKind.QUOTE, "q"), "quote"),
        (Token(TokenKind.DASH_ARROW), "`->`"),
        (Token(TokenKind.PERCENT), "%"),
        (Token(TokenKind.DEGREE, Degree.CELSIUS), "`°C`"),
        (err("boom"), "<boom>"),
    ],
)
def test_describe(token, text):
    assert describe(token) == text