"""Loading theme files from disk into a ThemeTree."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable

from themeweave.config import ThemeConfig
from themeweave.errors import ThemeError, ThemeFileError
from themeweave.model.stylesheet import Stylesheet
from themeweave.parser.transformer import parse_stylesheet
from themeweave.tree.builder import build
from themeweave.tree.tree import ThemeTree

DEFAULT_THEME_PATH = Path(__file__).parent / "data" / "default.rasi"

PathLike = str | os.PathLike[str]


def read_stylesheet(
    path: PathLike,
    *,
    config: ThemeConfig | None = None,
    logger: logging.Logger | None = None,
) -> Stylesheet:
    """Read and parse one theme file. Errors carry the file path."""
    config = config or ThemeConfig()
    name = os.fspath(path)
    try:
        source = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ThemeFileError(name, exc) from exc
    return parse_stylesheet(
        source,
        source_name=name,
        state_keywords=config.state_keywords,
        logger=logger,
    )


def default_stylesheet(*, logger: logging.Logger | None = None) -> Stylesheet:
    """The built-in theme every user theme can be layered over."""
    return read_stylesheet(DEFAULT_THEME_PATH, logger=logger)


def load(
    paths: Iterable[PathLike],
    *,
    config: ThemeConfig | None = None,
    include_defaults: bool | None = None,
    logger: logging.Logger | None = None,
) -> ThemeTree:
    """Parse *paths* in precedence order and build one theme tree.

    The first path is the base theme; each later path overrides the ones
    before it at equal specificity. With *include_defaults* the packaged
    default theme is layered underneath all of them.
    """
    config = config or ThemeConfig()
    log = logger or logging.getLogger("themeweave")
    if include_defaults is None:
        include_defaults = config.include_defaults

    sources = [os.fspath(p) for p in paths]
    if include_defaults:
        sources.insert(0, os.fspath(DEFAULT_THEME_PATH))
    if not sources:
        raise ValueError("load() needs at least one theme path")

    sheets = [read_stylesheet(p, config=config, logger=log) for p in sources]
    try:
        tree = build(sheets, max_depth=config.max_variable_depth, logger=log)
    except ThemeError as exc:
        exc.source = exc.source or ", ".join(sources)
        raise
    log.debug("Loaded theme from %s", ", ".join(sources))
    return tree
