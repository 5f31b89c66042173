"""Event system: bus and event types for theme reloads."""

from themeweave.events.bus import EventBus
from themeweave.events.types import ThemeFilesChanged, ThemeReloaded, ThemeReloadFailed

__all__ = [
    "EventBus",
    "ThemeFilesChanged",
    "ThemeReloaded",
    "ThemeReloadFailed",
]
