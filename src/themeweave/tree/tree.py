"""ThemeTree: immutable, indexed rules answering cascade queries."""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Callable, Mapping, TypeVar

from themeweave.model.stylesheet import Selector
from themeweave.model.values import (
    Color,
    Distance,
    Image,
    Keyword,
    Orientation,
    Rect,
    Value,
    as_bool,
    as_color,
    as_distance,
    as_image,
    as_number,
    as_orientation,
    as_rect,
    as_strings,
    as_text,
)

T = TypeVar("T")

INHERIT = Keyword("inherit")

BucketKey = tuple[str | None, str | None]


@dataclass(frozen=True)
class IndexedRule:
    """One selector of one rule, with its score and substituted properties."""

    selector: Selector
    specificity: int
    order: int
    properties: Mapping[str, Value]


class ThemeTree:
    """The result of building one or more stylesheets.

    Rules are grouped into buckets keyed by ``(widget_type, state)``. Each
    bucket already holds every rule that can apply to that pair (including
    universal and state-less rules), sorted by descending specificity and
    then by descending declaration order, so a query walks a single bucket
    and stops at the first rule that defines the property.

    Instances are never mutated after construction and are safe to share
    between threads without locking.
    """

    def __init__(
        self,
        buckets: Mapping[BucketKey, tuple[IndexedRule, ...]],
        variables: Mapping[str, Value],
        rule_count: int = 0,
    ) -> None:
        self._buckets = MappingProxyType(dict(buckets))
        self._variables = MappingProxyType(dict(variables))
        self._widget_types = frozenset(w for w, _ in self._buckets if w is not None)
        self._states = frozenset(s for _, s in self._buckets if s is not None)
        self._rule_count = rule_count

    # --- introspection -------------------------------------------------------

    @property
    def variables(self) -> Mapping[str, Value]:
        """Variables after substitution, by name."""
        return self._variables

    @property
    def buckets(self) -> Mapping[BucketKey, tuple[IndexedRule, ...]]:
        return self._buckets

    @property
    def widget_types(self) -> frozenset[str]:
        return self._widget_types

    @property
    def rule_count(self) -> int:
        return self._rule_count

    def rules_for(self, widget_type: str, state: str | None = None) -> tuple[IndexedRule, ...]:
        """Every rule that can apply to ``(widget_type, state)``, best first."""
        key = (
            widget_type if widget_type in self._widget_types else None,
            state if state in self._states else None,
        )
        return self._buckets.get(key, ())

    # --- queries -------------------------------------------------------------

    def lookup(
        self,
        widget_type: str,
        instance_name: str | None,
        state: str | None,
        property: str,
    ) -> Value | None:
        """The winning value for *property*, or ``None`` when nothing sets it."""
        for rule in self.rules_for(widget_type, state):
            if rule.selector.instance_name is not None and rule.selector.instance_name != instance_name:
                continue
            value = rule.properties.get(property)
            if value is None or value == INHERIT:
                continue
            return value
        return None

    def resolve(
        self,
        widget_type: str,
        instance_name: str | None,
        state: str | None,
        property: str,
        default: Value,
    ) -> Value:
        """Resolve *property* for a widget, returning *default* when unset.

        Never raises: an unknown widget, state or property simply yields the
        default, unchanged.
        """
        value = self.lookup(widget_type, instance_name, state, property)
        return default if value is None else value

    # --- typed getters ---------------------------------------------------------

    def _typed(
        self,
        coerce: Callable[[Value], T | None],
        widget_type: str,
        state: str | None,
        property: str,
        default: T,
        instance_name: str | None,
    ) -> T:
        value = self.lookup(widget_type, instance_name, state, property)
        if value is None:
            return default
        coerced = coerce(value)
        return default if coerced is None else coerced

    def get_color(
        self,
        widget_type: str,
        state: str | None,
        property: str,
        default: Color,
        *,
        instance_name: str | None = None,
    ) -> Color:
        return self._typed(as_color, widget_type, state, property, default, instance_name)

    def get_distance(
        self,
        widget_type: str,
        state: str | None,
        property: str,
        default: Distance,
        *,
        instance_name: str | None = None,
    ) -> Distance:
        return self._typed(as_distance, widget_type, state, property, default, instance_name)

    def get_rect(
        self,
        widget_type: str,
        state: str | None,
        property: str,
        default: Rect,
        *,
        instance_name: str | None = None,
    ) -> Rect:
        return self._typed(as_rect, widget_type, state, property, default, instance_name)

    def get_string(
        self,
        widget_type: str,
        state: str | None,
        property: str,
        default: str,
        *,
        instance_name: str | None = None,
    ) -> str:
        return self._typed(as_text, widget_type, state, property, default, instance_name)

    def get_number(
        self,
        widget_type: str,
        state: str | None,
        property: str,
        default: float,
        *,
        instance_name: str | None = None,
    ) -> float:
        return self._typed(as_number, widget_type, state, property, default, instance_name)

    def get_bool(
        self,
        widget_type: str,
        state: str | None,
        property: str,
        default: bool,
        *,
        instance_name: str | None = None,
    ) -> bool:
        return self._typed(as_bool, widget_type, state, property, default, instance_name)

    def get_image(
        self,
        widget_type: str,
        state: str | None,
        property: str,
        *,
        instance_name: str | None = None,
    ) -> Image | None:
        return self._typed(as_image, widget_type, state, property, None, instance_name)

    def get_children(self, widget_type: str, *, instance_name: str | None = None) -> list[str]:
        """Names listed in the widget's ``children`` property."""
        return self._typed(as_strings, widget_type, None, "children", [], instance_name)

    def get_orientation(
        self, widget_type: str, default: Orientation, *, instance_name: str | None = None
    ) -> Orientation:
        """How a container lays out its children, from ``orientation``."""
        return self._typed(as_orientation, widget_type, None, "orientation", default, instance_name)

    def get_expand(self, widget_type: str, default: bool, *, instance_name: str | None = None) -> bool:
        """Whether the widget grows to fill spare space in its container."""
        return self.get_bool(widget_type, None, "expand", default, instance_name=instance_name)

    def get_spacing(
        self, widget_type: str, default: Distance, *, instance_name: str | None = None
    ) -> Distance:
        """Gap between a container's children."""
        return self.get_distance(widget_type, None, "spacing", default, instance_name=instance_name)

    def __repr__(self) -> str:
        return (
            f"ThemeTree(rules={self._rule_count}, buckets={len(self._buckets)}, "
            f"variables={len(self._variables)})"
        )
