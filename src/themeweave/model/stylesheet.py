"""Stylesheet model: Selector, Rule, VariableDeclaration and Stylesheet."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from themeweave.model.values import Value

# Specificity weights. Scores are additive: ``button#ok selected`` scores 7.
INSTANCE_WEIGHT = 4
STATE_WEIGHT = 2
WIDGET_WEIGHT = 1


@dataclass(frozen=True)
class Selector:
    """A ``(widget_type, instance_name, state)`` pattern.

    ``None`` in any slot means "any". The universal selector ``*`` leaves
    both widget_type and instance_name empty.
    """

    widget_type: str | None = None
    instance_name: str | None = None
    state: str | None = None

    @property
    def is_universal(self) -> bool:
        return self.widget_type is None and self.instance_name is None

    @property
    def specificity(self) -> int:
        score = 0
        if self.instance_name is not None:
            score += INSTANCE_WEIGHT
        if self.state is not None:
            score += STATE_WEIGHT
        if self.widget_type is not None:
            score += WIDGET_WEIGHT
        return score

    def matches(
        self, widget_type: str, instance_name: str | None, state: str | None
    ) -> bool:
        if self.widget_type is not None and self.widget_type != widget_type:
            return False
        if self.instance_name is not None and self.instance_name != instance_name:
            return False
        if self.state is not None and self.state != state:
            return False
        return True

    def __str__(self) -> str:
        text = self.widget_type or ("" if self.instance_name else "*")
        if self.instance_name is not None:
            text += f"#{self.instance_name}"
        if self.state is not None:
            text += f".{self.state}"
        return text


@dataclass(frozen=True)
class Property:
    name: str
    value: Value


@dataclass(frozen=True)
class Rule:
    """One block: a selector list and its declarations in source order."""

    selectors: tuple[Selector, ...]
    properties: tuple[Property, ...]
    line: int | None = None


@dataclass(frozen=True)
class VariableDeclaration:
    """A top-level ``@name: value;`` declaration."""

    name: str
    value: Value
    line: int | None = None


Statement = Union[Rule, VariableDeclaration]


@dataclass(frozen=True)
class Stylesheet:
    """A parsed theme source. Statement order is significant."""

    statements: tuple[Statement, ...] = ()
    source: str | None = None

    @property
    def rules(self) -> list[Rule]:
        return [s for s in self.statements if isinstance(s, Rule)]

    @property
    def variables(self) -> list[VariableDeclaration]:
        return [s for s in self.statements if isinstance(s, VariableDeclaration)]
