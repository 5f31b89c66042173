"""Event types emitted while watching theme files."""

from dataclasses import dataclass

from themeweave.errors import ThemeError


@dataclass(frozen=True)
class ThemeReloaded:
    version: int
    paths: tuple[str, ...]


@dataclass(frozen=True)
class ThemeReloadFailed:
    version: int  # the version that stays published
    paths: tuple[str, ...]
    error: ThemeError


@dataclass(frozen=True)
class ThemeFilesChanged:
    paths: tuple[str, ...]
