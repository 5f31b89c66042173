"""Typed theme values: colors, unit-bearing distances, rects, keywords, lists.

``Value`` is a closed union of frozen dataclasses. Code that consumes values
dispatches with ``isinstance`` over exactly these kinds:

    Color, Distance, Rect, Keyword, Text, ValueList, VariableRef, Image
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Union

from themeweave.errors import InvalidHexColorError, UnknownUnitError


# ---------------------------------------------------------------------------
# Color
# ---------------------------------------------------------------------------


_HEX_RE = re.compile(r"#([0-9a-fA-F]+)")


@dataclass(frozen=True)
class Color:
    """RGBA color with every channel in ``[0.0, 1.0]``."""

    r: float
    g: float
    b: float
    a: float = 1.0

    def __post_init__(self) -> None:
        for channel in ("r", "g", "b", "a"):
            value = getattr(self, channel)
            if not 0.0 <= value <= 1.0:
                raise ValueError(f"Color channel {channel}={value} outside [0, 1]")

    @classmethod
    def from_rgba8(cls, r: int, g: int, b: int, a: int = 255) -> Color:
        """Build a color from 0-255 channels, clamping out-of-range input."""
        return cls(*(min(max(c, 0), 255) / 255.0 for c in (r, g, b, a)))

    @classmethod
    def from_hex(cls, text: str) -> Color:
        """Parse ``#RGB``, ``#RGBA``, ``#RRGGBB`` or ``#RRGGBBAA``."""
        match = _HEX_RE.fullmatch(text.strip())
        if not match:
            raise InvalidHexColorError(text)
        digits = match.group(1)
        if len(digits) in (3, 4):
            channels = [int(d, 16) * 17 for d in digits]
        elif len(digits) in (6, 8):
            channels = [int(digits[i : i + 2], 16) for i in range(0, len(digits), 2)]
        else:
            raise InvalidHexColorError(text)
        return cls.from_rgba8(*channels)

    @classmethod
    def from_name(cls, name: str) -> Color | None:
        """Look up a basic CSS color name; ``None`` when unknown."""
        rgba = NAMED_COLORS.get(name.lower())
        if rgba is None:
            return None
        return cls.from_rgba8(*rgba)

    def to_rgba8(self) -> tuple[int, int, int, int]:
        return tuple(round(c * 255) for c in (self.r, self.g, self.b, self.a))  # type: ignore[return-value]

    def to_hex(self) -> str:
        """Serialize as ``#rrggbb``, or ``#rrggbbaa`` when not fully opaque."""
        r, g, b, a = self.to_rgba8()
        if a == 255:
            return f"#{r:02x}{g:02x}{b:02x}"
        return f"#{r:02x}{g:02x}{b:02x}{a:02x}"

    def to_argb32(self) -> int:
        """Pack into a 32-bit ``0xAARRGGBB`` integer."""
        r, g, b, a = self.to_rgba8()
        return (a << 24) | (r << 16) | (g << 8) | b

    def __str__(self) -> str:
        return self.to_hex()


NAMED_COLORS: dict[str, tuple[int, int, int, int]] = {
    "black": (0, 0, 0, 255),
    "white": (255, 255, 255, 255),
    "red": (255, 0, 0, 255),
    "green": (0, 255, 0, 255),
    "blue": (0, 0, 255, 255),
    "transparent": (0, 0, 0, 0),
    "gray": (128, 128, 128, 255),
    "grey": (128, 128, 128, 255),
    "silver": (192, 192, 192, 255),
    "maroon": (128, 0, 0, 255),
    "yellow": (255, 255, 0, 255),
    "olive": (128, 128, 0, 255),
    "lime": (0, 255, 0, 255),
    "aqua": (0, 255, 255, 255),
    "cyan": (0, 255, 255, 255),
    "teal": (0, 128, 128, 255),
    "navy": (0, 0, 128, 255),
    "fuchsia": (255, 0, 255, 255),
    "magenta": (255, 0, 255, 255),
    "purple": (128, 0, 128, 255),
    "orange": (255, 165, 0, 255),
    "pink": (255, 192, 203, 255),
    "brown": (165, 42, 42, 255),
}


# ---------------------------------------------------------------------------
# Distances
# ---------------------------------------------------------------------------


class Unit(Enum):
    """Distance unit. Resolution to pixels is deferred to query time."""

    PIXELS = "px"
    PERCENT = "%"
    EM = "em"
    MM = "mm"


_NUMBER_RE = re.compile(r"(-?[0-9]+(?:\.[0-9]+)?)([A-Za-z%]*)")


@dataclass(frozen=True)
class ResolutionContext:
    """Everything needed to turn a relative distance into pixels."""

    parent_dimension: float = 100.0
    font_size: float = 16.0
    dpi: float = 96.0


@dataclass(frozen=True)
class Distance:
    magnitude: float
    unit: Unit = Unit.PIXELS

    @classmethod
    def parse(cls, text: str) -> Distance:
        """Parse ``12``, ``12px``, ``50%``, ``1.5em`` or ``3mm``.

        A bare number is in pixels. Any other suffix raises
        :class:`UnknownUnitError`.
        """
        match = _NUMBER_RE.fullmatch(text.strip())
        if not match:
            raise UnknownUnitError(text)
        number, suffix = match.groups()
        if not suffix:
            return cls(float(number))
        try:
            unit = Unit(suffix.lower())
        except ValueError:
            raise UnknownUnitError(text) from None
        return cls(float(number), unit)

    @classmethod
    def px(cls, magnitude: float) -> Distance:
        return cls(float(magnitude), Unit.PIXELS)

    def resolve(self, ctx: ResolutionContext) -> float:
        """Convert to pixels using *ctx*."""
        if self.unit is Unit.PIXELS:
            return self.magnitude
        if self.unit is Unit.PERCENT:
            return self.magnitude / 100.0 * ctx.parent_dimension
        if self.unit is Unit.EM:
            return self.magnitude * ctx.font_size
        return self.magnitude * ctx.dpi / 25.4

    def __str__(self) -> str:
        number = f"{self.magnitude:g}"
        return number if self.unit is Unit.PIXELS else f"{number}{self.unit.value}"


@dataclass(frozen=True)
class ResolvedRect:
    top: float
    right: float
    bottom: float
    left: float


@dataclass(frozen=True)
class Rect:
    """Four-sided distances, CSS order: top, right, bottom, left."""

    top: Distance
    right: Distance
    bottom: Distance
    left: Distance

    @classmethod
    def uniform(cls, d: Distance) -> Rect:
        return cls(d, d, d, d)

    @classmethod
    def from_sides(cls, sides: list[Distance]) -> Rect:
        """Expand the 1-4 value shorthand the way CSS ``padding`` does."""
        if len(sides) == 1:
            return cls.uniform(sides[0])
        if len(sides) == 2:
            vertical, horizontal = sides
            return cls(vertical, horizontal, vertical, horizontal)
        if len(sides) == 3:
            top, horizontal, bottom = sides
            return cls(top, horizontal, bottom, horizontal)
        if len(sides) == 4:
            return cls(*sides)
        raise ValueError(f"Rect takes 1 to 4 distances, got {len(sides)}")

    def resolve(self, ctx: ResolutionContext) -> ResolvedRect:
        return ResolvedRect(
            top=self.top.resolve(ctx),
            right=self.right.resolve(ctx),
            bottom=self.bottom.resolve(ctx),
            left=self.left.resolve(ctx),
        )

    def __str__(self) -> str:
        return f"{self.top} {self.right} {self.bottom} {self.left}"


# ---------------------------------------------------------------------------
# Everything else
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Keyword:
    """A bare identifier such as ``bold``, ``true`` or ``inherit``."""

    name: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True)
class Text:
    """A quoted string."""

    text: str

    def __str__(self) -> str:
        escaped = self.text.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'


@dataclass(frozen=True)
class ValueList:
    items: tuple[Value, ...] = ()

    def __str__(self) -> str:
        return "[" + ", ".join(str(v) for v in self.items) + "]"


@dataclass(frozen=True)
class VariableRef:
    name: str

    def __str__(self) -> str:
        return f"@{self.name}"


class Orientation(Enum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


class ImageScale(Enum):
    NONE = "none"
    WIDTH = "width"
    HEIGHT = "height"
    BOTH = "both"


@dataclass(frozen=True)
class Image:
    """An image reference from ``url("path", scale)``."""

    path: str
    scale: ImageScale = ImageScale.NONE

    def __str__(self) -> str:
        if self.scale is ImageScale.NONE:
            return f'url("{self.path}")'
        return f'url("{self.path}", {self.scale.value})'


Value = Union[Color, Distance, Rect, Keyword, Text, ValueList, VariableRef, Image]

VALUE_TYPES: tuple[type, ...] = (
    Color,
    Distance,
    Rect,
    Keyword,
    Text,
    ValueList,
    VariableRef,
    Image,
)


# ---------------------------------------------------------------------------
# Coercion helpers used by typed lookups
# ---------------------------------------------------------------------------


def as_color(value: Value) -> Color | None:
    if isinstance(value, Color):
        return value
    if isinstance(value, Keyword):
        return Color.from_name(value.name)
    return None


def as_distance(value: Value) -> Distance | None:
    return value if isinstance(value, Distance) else None


def as_rect(value: Value) -> Rect | None:
    if isinstance(value, Rect):
        return value
    if isinstance(value, Distance):
        return Rect.uniform(value)
    return None


def as_text(value: Value) -> str | None:
    if isinstance(value, Text):
        return value.text
    if isinstance(value, Keyword):
        return value.name
    return None


def as_number(value: Value) -> float | None:
    if isinstance(value, Distance):
        return value.magnitude
    return None


def as_bool(value: Value) -> bool | None:
    if isinstance(value, Keyword):
        if value.name == "true":
            return True
        if value.name == "false":
            return False
    return None


def as_strings(value: Value) -> list[str] | None:
    """A list whose items are all strings or keywords, as plain strings."""
    if not isinstance(value, ValueList):
        return None
    strings = [as_text(item) for item in value.items]
    if any(s is None for s in strings):
        return None
    return strings  # type: ignore[return-value]


def as_image(value: Value) -> Image | None:
    return value if isinstance(value, Image) else None


def as_orientation(value: Value) -> Orientation | None:
    """``horizontal`` or ``vertical``, as a keyword or a string, any case."""
    name = as_text(value)
    if name is None:
        return None
    try:
        return Orientation(name.lower())
    except ValueError:
        return None
