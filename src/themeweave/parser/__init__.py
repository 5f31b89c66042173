from themeweave.errors import (
    InvalidCharacterError,
    InvalidHexColorError,
    LexError,
    ParseError,
    UnexpectedTokenError,
    UnknownUnitError,
    UnterminatedStringError,
)
from themeweave.parser.lexer import Token, tokenize
from themeweave.parser.transformer import STATE_KEYWORDS, parse_stylesheet, parse_value

__all__ = [
    "InvalidCharacterError",
    "InvalidHexColorError",
    "LexError",
    "ParseError",
    "STATE_KEYWORDS",
    "Token",
    "UnexpectedTokenError",
    "UnknownUnitError",
    "UnterminatedStringError",
    "parse_stylesheet",
    "parse_value",
    "tokenize",
]
