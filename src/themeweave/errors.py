"""Error hierarchy for theme lexing, parsing, building and loading."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Position:
    """A location in theme source: 1-based line/column, 0-based offset."""

    line: int
    column: int
    offset: int = 0

    def __str__(self) -> str:
        return f"{self.line}:{self.column}"


class ThemeError(Exception):
    """Base error for everything that can go wrong producing a theme."""

    def __init__(self, message: str, *, position: Position | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.position = position
        self.source: str | None = None

    @property
    def line(self) -> int | None:
        return self.position.line if self.position else None

    @property
    def column(self) -> int | None:
        return self.position.column if self.position else None

    def __str__(self) -> str:
        where = ""
        if self.source and self.position:
            where = f"{self.source}:{self.position}: "
        elif self.source:
            where = f"{self.source}: "
        elif self.position:
            where = f"line {self.position.line}, column {self.position.column}: "
        return f"{where}{self.message}"


# ---------------------------------------------------------------------------
# Lexing
# ---------------------------------------------------------------------------


class LexError(ThemeError):
    """Raised when source text cannot be split into tokens."""

    def __init__(self, message: str, *, position: Position) -> None:
        super().__init__(message, position=position)


class InvalidCharacterError(LexError):
    """A character that starts no known token."""

    def __init__(self, char: str, *, position: Position) -> None:
        super().__init__(f"Invalid character {char!r}", position=position)
        self.char = char


class UnterminatedStringError(LexError):
    """A string literal with no closing quote."""

    def __init__(self, *, position: Position) -> None:
        super().__init__("Unterminated string literal", position=position)


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------


class ParseError(ThemeError):
    """Raised when a token stream does not form a valid stylesheet."""


class UnexpectedTokenError(ParseError):
    """The parser met a token it has no production for."""

    def __init__(
        self,
        *,
        expected: list[str],
        found: str,
        position: Position | None,
    ) -> None:
        if expected:
            wanted = ", ".join(expected)
            message = f"Unexpected {found}, expected one of: {wanted}"
        else:
            message = f"Unexpected {found}"
        super().__init__(message, position=position)
        self.expected = expected
        self.found = found


class InvalidHexColorError(ParseError):
    """A ``#`` color literal with a bad digit count or non-hex digits."""

    def __init__(self, raw: str, *, position: Position | None = None) -> None:
        super().__init__(f"Invalid hex color: {raw}", position=position)
        self.raw = raw


class UnknownUnitError(ParseError):
    """A number followed by a unit suffix that is not px, %, em or mm."""

    def __init__(self, raw: str, *, position: Position | None = None) -> None:
        super().__init__(f"Unknown unit: {raw}", position=position)
        self.raw = raw


# ---------------------------------------------------------------------------
# Tree building
# ---------------------------------------------------------------------------


class ResolutionError(ThemeError):
    """Raised when merged stylesheets cannot be turned into a theme tree."""


class CyclicVariableError(ResolutionError):
    """A variable refers back to itself, directly or transitively."""

    def __init__(self, name: str, *, chain: list[str] | None = None) -> None:
        self.name = name
        self.chain = list(chain or [])
        if self.chain:
            path = " -> ".join(f"@{n}" for n in [*self.chain, name])
            message = f"Cyclic variable reference: {path}"
        else:
            message = f"Cyclic variable reference: @{name}"
        super().__init__(message)


class VariableNotFoundError(ResolutionError):
    """A reference to a variable no stylesheet declares."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Undefined variable: @{name}")
        self.name = name


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


class ThemeFileError(ThemeError):
    """A theme file could not be read or is not valid UTF-8."""

    def __init__(self, path: str, cause: OSError | UnicodeDecodeError) -> None:
        reason = getattr(cause, "strerror", None) or cause
        super().__init__(f"Cannot read theme file {path}: {reason}")
        self.path = path
        self.cause = cause
