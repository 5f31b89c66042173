"""Tree builder: merge stylesheets, substitute variables, index the cascade."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import Iterable, Iterator

from themeweave.errors import CyclicVariableError, VariableNotFoundError
from themeweave.model.stylesheet import Rule, Stylesheet, VariableDeclaration
from themeweave.model.values import Value, ValueList, VariableRef
from themeweave.tree.tree import BucketKey, IndexedRule, ThemeTree

MAX_VARIABLE_DEPTH = 16


def _references(value: Value) -> Iterator[str]:
    if isinstance(value, VariableRef):
        yield value.name
    elif isinstance(value, ValueList):
        for item in value.items:
            yield from _references(item)


class VariableResolver:
    """Substitutes ``@name`` references using a merged declaration table.

    Each substitution chain tracks the names it has passed through; a name
    seen twice on one chain is a cycle, and so is a chain longer than
    *max_depth*. Resolved names remember how deep their own chain went, so
    the bound holds whichever name is resolved first.
    """

    def __init__(self, declarations: dict[str, Value], max_depth: int = MAX_VARIABLE_DEPTH) -> None:
        self._declarations = declarations
        self._max_depth = max_depth
        self._resolved: dict[str, Value] = {}
        self._depths: dict[str, int] = {}

    def resolve_name(self, name: str, chain: tuple[str, ...] = ()) -> Value:
        if name in self._resolved:
            if len(chain) + self._depths[name] > self._max_depth:
                raise CyclicVariableError(name, chain=list(chain))
            return self._resolved[name]
        if name in chain or len(chain) >= self._max_depth:
            raise CyclicVariableError(name, chain=list(chain))
        if name not in self._declarations:
            raise VariableNotFoundError(name)
        declared = self._declarations[name]
        value = self.substitute(declared, (*chain, name))
        self._resolved[name] = value
        self._depths[name] = 1 + max((self._depths[ref] for ref in _references(declared)), default=0)
        return value

    def substitute(self, value: Value, chain: tuple[str, ...] = ()) -> Value:
        """Return *value* with every reference replaced, recursively."""
        if isinstance(value, VariableRef):
            return self.resolve_name(value.name, chain)
        if isinstance(value, ValueList):
            return ValueList(tuple(self.substitute(item, chain) for item in value.items))
        return value

    def resolve_all(self) -> dict[str, Value]:
        return {name: self.resolve_name(name) for name in self._declarations}


def merge_variables(sheets: Iterable[Stylesheet]) -> dict[str, Value]:
    """Collect declarations from every sheet; later declarations win by name."""
    merged: dict[str, Value] = {}
    for sheet in sheets:
        for statement in sheet.statements:
            if isinstance(statement, VariableDeclaration):
                merged[statement.name] = statement.value
    return merged


def _sort_key(rule: IndexedRule) -> tuple[int, int]:
    return (-rule.specificity, -rule.order)


def build(
    sheets: Iterable[Stylesheet],
    *,
    max_depth: int = MAX_VARIABLE_DEPTH,
    logger: logging.Logger | None = None,
) -> ThemeTree:
    """Build a :class:`ThemeTree` from stylesheets in precedence order.

    Later sheets override earlier ones: their variables replace same-named
    ones, and their rules win specificity ties. Raises
    :class:`~themeweave.errors.ResolutionError` on an undefined or cyclic
    variable; nothing is built in that case.
    """
    log = logger or logging.getLogger("themeweave")
    sheets = list(sheets)

    resolver = VariableResolver(merge_variables(sheets), max_depth=max_depth)
    variables = resolver.resolve_all()

    indexed: list[IndexedRule] = []
    order = 0
    for sheet in sheets:
        for statement in sheet.statements:
            if not isinstance(statement, Rule):
                continue
            properties: dict[str, Value] = {}
            for prop in statement.properties:
                properties[prop.name] = resolver.substitute(prop.value)
            frozen = MappingProxyType(properties)
            for selector in statement.selectors:
                indexed.append(
                    IndexedRule(
                        selector=selector,
                        specificity=selector.specificity,
                        order=order,
                        properties=frozen,
                    )
                )
            order += 1

    widget_types: list[str | None] = [None]
    states: list[str | None] = [None]
    for rule in indexed:
        if rule.selector.widget_type not in widget_types:
            widget_types.append(rule.selector.widget_type)
        if rule.selector.state not in states:
            states.append(rule.selector.state)

    # Every (widget, state) combination gets a bucket, even an empty one, so
    # the tree can tell a known widget type from an unknown one.
    buckets: dict[BucketKey, tuple[IndexedRule, ...]] = {}
    for widget in widget_types:
        for state in states:
            applicable = [
                rule
                for rule in indexed
                if rule.selector.widget_type in (None, widget)
                and rule.selector.state in (None, state)
            ]
            applicable.sort(key=_sort_key)
            buckets[(widget, state)] = tuple(applicable)

    tree = ThemeTree(buckets, variables, rule_count=order)
    log.debug(
        "Built theme tree from %d sheet(s): %d rule(s), %d selector(s), %d variable(s), %d bucket(s)",
        len(sheets),
        order,
        len(indexed),
        len(variables),
        len(buckets),
    )
    return tree
