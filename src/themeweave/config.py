from __future__ import annotations

from dataclasses import dataclass, field

from themeweave.parser.transformer import STATE_KEYWORDS
from themeweave.tree.builder import MAX_VARIABLE_DEPTH


@dataclass(frozen=True)
class ThemeConfig:
    include_defaults: bool = False
    debounce: float = 0.15  # seconds of quiet before a rebuild
    poll_interval: float = 0.1  # seconds between file checks
    max_variable_depth: int = MAX_VARIABLE_DEPTH
    state_keywords: frozenset[str] = field(default=STATE_KEYWORDS)

    def __post_init__(self) -> None:
        if self.debounce < 0:
            raise ValueError("debounce must be >= 0")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be > 0")
        if self.max_variable_depth < 1:
            raise ValueError("max_variable_depth must be >= 1")
