"""themeweave: a cascading theme language for UI widgets."""

from themeweave.config import ThemeConfig
from themeweave.errors import (
    CyclicVariableError,
    InvalidCharacterError,
    InvalidHexColorError,
    LexError,
    ParseError,
    Position,
    ResolutionError,
    ThemeError,
    ThemeFileError,
    UnexpectedTokenError,
    UnknownUnitError,
    UnterminatedStringError,
    VariableNotFoundError,
)
from themeweave.loader import load
from themeweave.parser import parse_stylesheet, tokenize
from themeweave.tree import ThemeTree, build
from themeweave.watcher import ThemeSnapshot, Watcher, watch

__version__ = "0.1.0"

__all__ = [
    "CyclicVariableError",
    "InvalidCharacterError",
    "InvalidHexColorError",
    "LexError",
    "ParseError",
    "Position",
    "ResolutionError",
    "ThemeConfig",
    "ThemeError",
    "ThemeFileError",
    "ThemeSnapshot",
    "ThemeTree",
    "UnexpectedTokenError",
    "UnknownUnitError",
    "UnterminatedStringError",
    "VariableNotFoundError",
    "Watcher",
    "build",
    "load",
    "parse_stylesheet",
    "tokenize",
    "watch",
    "__version__",
]
