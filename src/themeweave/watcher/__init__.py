from themeweave.watcher.snapshot import Published, ThemeSnapshot
from themeweave.watcher.stream import ChangeStream
from themeweave.watcher.watcher import Watcher, file_signature, watch

__all__ = [
    "ChangeStream",
    "Published",
    "ThemeSnapshot",
    "Watcher",
    "file_signature",
    "watch",
]
