"""Snapshot handle: the currently published ThemeTree."""

from __future__ import annotations

import threading
from dataclasses import dataclass

from themeweave.model.values import Value
from themeweave.tree.tree import ThemeTree


@dataclass(frozen=True)
class Published:
    version: int
    tree: ThemeTree


class ThemeSnapshot:
    """Handle on the active theme, passed to whatever needs to query it.

    The published ``(version, tree)`` pair lives in one attribute and is
    replaced with a single assignment, so readers never lock and never see
    a half-updated theme. Holding on to a tree from :attr:`tree` keeps it
    valid after a newer one is published.
    """

    def __init__(self, tree: ThemeTree) -> None:
        self._published = Published(version=1, tree=tree)
        self._write_lock = threading.Lock()

    @property
    def tree(self) -> ThemeTree:
        return self._published.tree

    @property
    def version(self) -> int:
        return self._published.version

    def get(self) -> Published:
        """The current version and tree, read together."""
        return self._published

    def publish(self, tree: ThemeTree) -> int:
        """Make *tree* the active theme and return its version."""
        with self._write_lock:
            published = Published(version=self._published.version + 1, tree=tree)
            self._published = published
        return published.version

    def resolve(
        self,
        widget_type: str,
        instance_name: str | None,
        state: str | None,
        property: str,
        default: Value,
    ) -> Value:
        return self._published.tree.resolve(widget_type, instance_name, state, property, default)

    def __repr__(self) -> str:
        published = self._published
        return f"ThemeSnapshot(version={published.version}, tree={published.tree!r})"
