"""Token stream for theme source, backed by the grammar's Lark lexer."""

from __future__ import annotations

import functools
from dataclasses import dataclass
from pathlib import Path

from lark import Lark, UnexpectedCharacters, UnexpectedInput, UnexpectedToken
from lark import Token as LarkToken
from lark.lexer import PatternStr

from themeweave.errors import (
    InvalidCharacterError,
    LexError,
    Position,
    ThemeError,
    UnexpectedTokenError,
    UnterminatedStringError,
)

GRAMMAR_PATH = Path(__file__).parent / "grammar.lark"

# Token kinds exposed by :func:`tokenize`, keyed by grammar terminal name.
_KINDS: dict[str, str] = {
    "IDENT": "identifier",
    "VARIABLE": "variable",
    "STRING": "string",
    "NUMBER": "number",
    "HASH": "hash",
}

# How named terminals read in error messages.
_DESCRIPTIONS: dict[str, str] = {
    "IDENT": "identifier",
    "VARIABLE": "variable",
    "STRING": "string",
    "NUMBER": "number",
    "HASH": "'#' color or name",
    "$END": "end of input",
}


@dataclass(frozen=True)
class Token:
    kind: str  # identifier, variable, string, number, hash, punctuation
    text: str
    position: Position

    def __str__(self) -> str:
        return f"{self.position} {self.kind} {self.text!r}"


@functools.lru_cache(maxsize=1)
def theme_parser() -> Lark:
    """The shared LALR parser built from ``grammar.lark``."""
    return Lark(
        GRAMMAR_PATH.read_text(encoding="utf-8"),
        parser="lalr",
        lexer="basic",
        start=["start", "value"],
        propagate_positions=True,
    )


def position_of(token: LarkToken) -> Position:
    return Position(
        line=token.line or 1,
        column=token.column or 1,
        offset=token.start_pos or 0,
    )


def _describe_terminal(name: str) -> str:
    if name in _DESCRIPTIONS:
        return _DESCRIPTIONS[name]
    try:
        pattern = theme_parser().get_terminal(name).pattern
    except KeyError:
        return name
    if isinstance(pattern, PatternStr):
        return repr(pattern.value)
    return name


def _describe_token(token: LarkToken) -> str:
    if token.type == "$END":
        return "end of input"
    if token.type in _KINDS:
        return f"{_DESCRIPTIONS[token.type]} {str(token)!r}"
    return repr(str(token))


def translate_error(exc: UnexpectedInput, source: str) -> ThemeError:
    """Map a Lark exception onto the theme error taxonomy."""
    if isinstance(exc, UnexpectedCharacters):
        position = Position(exc.line, exc.column, exc.pos_in_stream or 0)
        char = source[exc.pos_in_stream] if exc.pos_in_stream is not None else exc.char
        if char == '"':
            return UnterminatedStringError(position=position)
        return InvalidCharacterError(char, position=position)
    if isinstance(exc, UnexpectedToken):
        expected = sorted({_describe_terminal(name) for name in exc.expected})
        return UnexpectedTokenError(
            expected=expected,
            found=_describe_token(exc.token),
            position=position_of(exc.token),
        )
    # UnexpectedEOF and anything else Lark may add later.
    expected = sorted({_describe_terminal(name) for name in getattr(exc, "expected", [])})
    line = exc.line if exc.line and exc.line > 0 else None
    position = Position(line, exc.column) if line else None
    return UnexpectedTokenError(expected=expected, found="end of input", position=position)


def tokenize(source: str) -> list[Token]:
    """Split *source* into tokens, skipping whitespace and comments.

    Raises :class:`LexError` on the first character that starts no token.
    """
    tokens: list[Token] = []
    try:
        for tok in theme_parser().lex(source):
            kind = _KINDS.get(tok.type, "punctuation")
            tokens.append(Token(kind=kind, text=str(tok), position=position_of(tok)))
    except UnexpectedInput as exc:
        error = translate_error(exc, source)
        if isinstance(error, LexError):
            raise error from None
        raise
    return tokens
