"""Lark Transformer that converts a theme parse tree into a Stylesheet."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from lark import Token, Transformer, UnexpectedInput, v_args
from lark.exceptions import VisitError

from themeweave.errors import (
    InvalidHexColorError,
    Position,
    ThemeError,
    UnexpectedTokenError,
    UnknownUnitError,
)
from themeweave.model.stylesheet import (
    Property,
    Rule,
    Selector,
    Stylesheet,
    VariableDeclaration,
)
from themeweave.model.values import (
    Color,
    Distance,
    Image,
    ImageScale,
    Keyword,
    Rect,
    Text,
    Unit,
    Value,
    ValueList,
    VariableRef,
)
from themeweave.parser.lexer import position_of, theme_parser, translate_error

# A second identifier after the widget type names a state only when it is
# one of these; otherwise it names an instance.
STATE_KEYWORDS: frozenset[str] = frozenset(
    {
        "normal",
        "selected",
        "hover",
        "focused",
        "active",
        "pressed",
        "disabled",
        "checked",
        "urgent",
        "alternate",
    }
)

_ESCAPE_RE = re.compile(r"\\(.)")
_ESCAPES = {"n": "\n", "t": "\t"}


@dataclass(frozen=True)
class _Term:
    """A value still attached to where it was written."""

    value: Value
    position: Position | None


@dataclass(frozen=True)
class _State:
    name: str
    dotted: bool
    position: Position


def _unquote(raw: str) -> str:
    return _ESCAPE_RE.sub(lambda m: _ESCAPES.get(m.group(1), m.group(1)), raw[1:-1])


def _channel(term: _Term, *, alpha: bool = False) -> float | None:
    """A ``rgb()`` argument as a 0-255 channel (or 0-1 alpha); None if invalid."""
    value = term.value
    if not isinstance(value, Distance):
        return None
    if value.unit is Unit.PERCENT:
        fraction = value.magnitude / 100.0
    elif value.unit is Unit.PIXELS:
        fraction = value.magnitude if alpha else value.magnitude / 255.0
    else:
        return None
    return min(max(fraction, 0.0), 1.0) * 255.0


class StylesheetTransformer(Transformer):  # type: ignore[type-arg]
    """Transform a Lark parse tree into model objects."""

    def __init__(self, state_keywords: frozenset[str] = STATE_KEYWORDS) -> None:
        super().__init__()
        self.state_keywords = state_keywords

    # ---- terms ----

    def color(self, items: list[Token]) -> _Term:
        token = items[0]
        try:
            return _Term(Color.from_hex(str(token)), position_of(token))
        except InvalidHexColorError:
            raise InvalidHexColorError(str(token), position=position_of(token)) from None

    def number(self, items: list[Token]) -> _Term:
        token = items[0]
        try:
            return _Term(Distance.parse(str(token)), position_of(token))
        except UnknownUnitError:
            raise UnknownUnitError(str(token), position=position_of(token)) from None

    def string(self, items: list[Token]) -> _Term:
        return _Term(Text(_unquote(str(items[0]))), position_of(items[0]))

    def var_ref(self, items: list[Token]) -> _Term:
        return _Term(VariableRef(str(items[0])[1:]), position_of(items[0]))

    def keyword(self, items: list[Token]) -> _Term:
        return _Term(Keyword(str(items[0])), position_of(items[0]))

    def list_value(self, items: list[_Term | None]) -> _Term:
        terms = [t for t in items if t is not None]
        position = terms[0].position if terms else None
        return _Term(ValueList(tuple(t.value for t in terms)), position)

    def call(self, items: list[object]) -> _Term:
        name_token = items[0]
        assert isinstance(name_token, Token)
        args = [t for t in items[1:] if isinstance(t, _Term)]
        name = str(name_token).lower()
        position = position_of(name_token)
        if name in ("rgb", "rgba"):
            return _Term(self._rgb(name, args, position), position)
        if name == "url":
            return _Term(self._url(args, position), position)
        raise UnexpectedTokenError(
            expected=["'rgb'", "'rgba'", "'url'"],
            found=f"function {str(name_token)!r}",
            position=position,
        )

    @staticmethod
    def _rgb(name: str, args: list[_Term], position: Position) -> Color:
        arity = 3 if name == "rgb" else 4
        if len(args) != arity:
            raise UnexpectedTokenError(
                expected=[f"{arity} arguments"],
                found=f"{len(args)} arguments to {name}()",
                position=position,
            )
        channels = [_channel(t) for t in args[:3]]
        if arity == 4:
            channels.append(_channel(args[3], alpha=True))
        for term, channel in zip(args, channels):
            if channel is None:
                raise UnexpectedTokenError(
                    expected=["number", "percentage"],
                    found=str(term.value),
                    position=term.position or position,
                )
        return Color.from_rgba8(*channels)  # type: ignore[arg-type]

    @staticmethod
    def _url(args: list[_Term], position: Position) -> Image:
        if not args or len(args) > 2 or not isinstance(args[0].value, Text):
            raise UnexpectedTokenError(
                expected=["string path"],
                found="malformed url()",
                position=position,
            )
        scale = ImageScale.NONE
        if len(args) == 2:
            raw = args[1].value
            try:
                scale = ImageScale(raw.name if isinstance(raw, Keyword) else "")
            except ValueError:
                raise UnexpectedTokenError(
                    expected=[repr(s.value) for s in ImageScale],
                    found=str(raw),
                    position=args[1].position or position,
                ) from None
        return Image(args[0].value.text, scale)

    def value(self, items: list[_Term]) -> _Term:
        if len(items) == 1:
            return items[0]
        for term in items:
            if not isinstance(term.value, Distance):
                raise UnexpectedTokenError(
                    expected=["distance"],
                    found=str(term.value),
                    position=term.position,
                )
        if len(items) > 4:
            raise UnexpectedTokenError(
                expected=["';'"],
                found=str(items[4].value),
                position=items[4].position,
            )
        rect = Rect.from_sides([t.value for t in items])  # type: ignore[misc]
        return _Term(rect, items[0].position)

    # ---- selectors ----

    def dotted_state(self, items: list[Token]) -> _State:
        return _State(str(items[0]), dotted=True, position=position_of(items[0]))

    def bare_state(self, items: list[Token]) -> _State:
        return _State(str(items[0]), dotted=False, position=position_of(items[0]))

    def _split(self, state: _State | None, instance: str | None) -> tuple[str | None, str | None]:
        """Decide whether a bare trailing identifier is a state or an instance."""
        if state is None:
            return instance, None
        if state.dotted or state.name in self.state_keywords:
            return instance, state.name
        if instance is None:
            return state.name, None
        raise UnexpectedTokenError(
            expected=sorted(self.state_keywords),
            found=f"identifier {state.name!r}",
            position=state.position,
        )

    def universal_selector(self, items: list[_State | None]) -> Selector:
        instance, state = self._split(items[0] if items else None, None)
        return Selector(instance_name=instance, state=state)

    def widget_selector(self, items: list[object]) -> Selector:
        hash_token = items[1] if len(items) > 1 else None
        state = items[2] if len(items) > 2 else None
        instance, state_name = self._split(
            state if isinstance(state, _State) else None,
            str(hash_token)[1:] if hash_token is not None else None,
        )
        return Selector(widget_type=str(items[0]), instance_name=instance, state=state_name)

    def instance_selector(self, items: list[object]) -> Selector:
        state = items[1] if len(items) > 1 else None
        instance, state_name = self._split(
            state if isinstance(state, _State) else None,
            str(items[0])[1:],
        )
        return Selector(instance_name=instance, state=state_name)

    def selector_list(self, items: list[Selector]) -> tuple[Selector, ...]:
        return tuple(items)

    # ---- structure ----

    def declaration(self, items: list[object]) -> Property:
        term = items[1]
        assert isinstance(term, _Term)
        return Property(name=str(items[0]), value=term.value)

    def declarations(self, items: list[Property | None]) -> tuple[Property, ...]:
        return tuple(p for p in items if isinstance(p, Property))

    @v_args(meta=True)
    def rule(self, meta, items: list[object]) -> Rule:
        selectors = items[0]
        properties = items[1] if len(items) > 1 and items[1] is not None else ()
        line = None if meta.empty else meta.line
        return Rule(selectors=selectors, properties=properties, line=line)  # type: ignore[arg-type]

    def variable_decl(self, items: list[object]) -> VariableDeclaration:
        token, term = items[0], items[1]
        assert isinstance(token, Token) and isinstance(term, _Term)
        return VariableDeclaration(name=str(token)[1:], value=term.value, line=token.line)

    def start(self, items: list[object]) -> tuple[object, ...]:
        return tuple(items)


def parse_stylesheet(
    source: str,
    *,
    source_name: str | None = None,
    state_keywords: frozenset[str] = STATE_KEYWORDS,
    logger: logging.Logger | None = None,
) -> Stylesheet:
    """Parse theme *source* into a :class:`Stylesheet`.

    The first lexical or syntax error aborts the parse; no partial
    stylesheet is ever returned.
    """
    log = logger or logging.getLogger("themeweave")
    try:
        tree = theme_parser().parse(source, start="start")
    except UnexpectedInput as exc:
        error = translate_error(exc, source)
        error.source = source_name
        raise error from None
    try:
        statements = StylesheetTransformer(state_keywords).transform(tree)
    except VisitError as exc:
        if isinstance(exc.orig_exc, ThemeError):
            exc.orig_exc.source = source_name
            raise exc.orig_exc from None
        raise
    sheet = Stylesheet(statements=statements, source=source_name)
    log.debug(
        "Parsed %s: %d rule(s), %d variable(s)",
        source_name or "<string>",
        len(sheet.rules),
        len(sheet.variables),
    )
    return sheet


def parse_value(text: str) -> Value:
    """Parse a single property value, e.g. ``#ff0000`` or ``4px 8px``."""
    try:
        tree = theme_parser().parse(text, start="value")
    except UnexpectedInput as exc:
        raise translate_error(exc, text) from None
    try:
        term = StylesheetTransformer().transform(tree)
    except VisitError as exc:
        if isinstance(exc.orig_exc, ThemeError):
            raise exc.orig_exc from None
        raise
    return term.value
