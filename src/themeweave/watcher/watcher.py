"""Watcher: polls theme files, debounces changes, republishes the tree."""

from __future__ import annotations

import functools
import logging
import os
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from typing import Callable, Iterable, Sequence

from themeweave.config import ThemeConfig
from themeweave.errors import ThemeError
from themeweave.events.bus import EventBus
from themeweave.events.types import ThemeFilesChanged, ThemeReloaded, ThemeReloadFailed
from themeweave.loader import PathLike, load
from themeweave.tree.tree import ThemeTree
from themeweave.watcher.snapshot import ThemeSnapshot
from themeweave.watcher.stream import ChangeStream

Builder = Callable[[Sequence[str]], ThemeTree]
Signature = tuple[int, int] | None


def file_signature(path: str) -> Signature:
    """``(mtime_ns, size)`` of *path*, or ``None`` when it cannot be stat'ed."""
    try:
        st = os.stat(path)
    except OSError:
        return None
    return (st.st_mtime_ns, st.st_size)


class Watcher:
    """Keeps a :class:`ThemeSnapshot` in sync with the files it was built from.

    A polling thread compares file signatures every ``config.poll_interval``
    seconds. Each change restarts the debounce window; once the files have
    been quiet for ``config.debounce`` seconds a single rebuild is queued.

    Rebuilds run one at a time on a dedicated worker. Every request bumps a
    generation counter, and a rebuild whose generation is no longer the
    latest is skipped (if it has not started) or has its result dropped (if
    it has). A failed rebuild is logged and reported through
    :class:`ThemeReloadFailed`; the published tree stays as it was.
    """

    def __init__(
        self,
        paths: Iterable[PathLike],
        *,
        snapshot: ThemeSnapshot | None = None,
        config: ThemeConfig | None = None,
        event_bus: EventBus | None = None,
        logger: logging.Logger | None = None,
        builder: Builder | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.paths: tuple[str, ...] = tuple(os.fspath(p) for p in paths)
        self.config = config or ThemeConfig()
        self.event_bus = event_bus or EventBus()
        self._log = logger or logging.getLogger("themeweave")
        self._builder: Builder = builder or functools.partial(
            load, config=self.config, logger=self._log
        )
        self._clock = clock

        self._signatures = {p: file_signature(p) for p in self.paths}
        # The initial build is allowed to fail loudly: there is nothing to keep.
        self.snapshot = snapshot or ThemeSnapshot(self._builder(self.paths))

        self._generation = 0
        self._generation_lock = threading.Lock()
        self._changed_at: float | None = None
        self._executor: ThreadPoolExecutor | None = None
        self._thread: threading.Thread | None = None
        self._stop = threading.Event()

    # --- lifecycle ---------------------------------------------------------------

    def start(self) -> Watcher:
        """Start the polling thread. Returns ``self`` for chaining."""
        if self._thread is not None:
            return self
        self._stop.clear()
        self._thread = threading.Thread(
            target=self._poll_loop, name="themeweave-watcher", daemon=True
        )
        self._thread.start()
        self._log.debug("Watching %s", ", ".join(self.paths))
        return self

    def stop(self) -> None:
        """Stop polling and wait for any in-flight rebuild to finish."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join()
            self._thread = None
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None

    @property
    def running(self) -> bool:
        return self._thread is not None

    def __enter__(self) -> Watcher:
        return self.start()

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    # --- subscriptions -----------------------------------------------------------

    def subscribe(self, callback: Callable[[ThemeReloaded], None]) -> None:
        """Call *callback* after every successful reload."""
        self.event_bus.subscribe(ThemeReloaded, callback)

    def on_failure(self, callback: Callable[[ThemeReloadFailed], None]) -> None:
        self.event_bus.subscribe(ThemeReloadFailed, callback)

    def changes(self, *, include_failures: bool = False) -> ChangeStream:
        return ChangeStream(self.event_bus, include_failures=include_failures)

    # --- polling -----------------------------------------------------------------

    def _poll_loop(self) -> None:
        while not self._stop.wait(self.config.poll_interval):
            self.poll()

    def poll(self) -> Future[bool] | None:
        """Check the files once; queue a rebuild if a debounced change is due."""
        now = self._clock()
        changed = []
        for path in self.paths:
            signature = file_signature(path)
            if signature != self._signatures[path]:
                self._signatures[path] = signature
                changed.append(path)
        if changed:
            self._changed_at = now
            self._log.debug("Theme file(s) changed: %s", ", ".join(changed))
            self.event_bus.emit(ThemeFilesChanged(tuple(changed)))
            if self.config.debounce > 0:
                return None
        if self._changed_at is None or now - self._changed_at < self.config.debounce:
            return None
        self._changed_at = None
        return self.request_reload()

    # --- rebuilding --------------------------------------------------------------

    def _worker(self) -> ThreadPoolExecutor:
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=1, thread_name_prefix="themeweave-rebuild"
            )
        return self._executor

    def request_reload(self) -> Future[bool]:
        """Queue a rebuild that supersedes every earlier request."""
        with self._generation_lock:
            self._generation += 1
            generation = self._generation
        return self._worker().submit(self._rebuild, generation)

    def reload(self) -> bool:
        """Rebuild now and wait for the result. True when a tree was published."""
        return self.request_reload().result()

    def _is_stale(self, generation: int) -> bool:
        with self._generation_lock:
            return generation != self._generation

    def _rebuild(self, generation: int) -> bool:
        if self._is_stale(generation):
            self._log.debug("Skipping superseded rebuild #%d", generation)
            return False
        try:
            tree = self._builder(self.paths)
        except ThemeError as exc:
            return self._report_failure(generation, exc)
        except Exception as exc:
            self._log.exception("Unexpected error rebuilding theme from %s", ", ".join(self.paths))
            error = ThemeError(f"Unexpected error during rebuild: {exc}")
            error.__cause__ = exc
            return self._report_failure(generation, error)
        if self._is_stale(generation):
            self._log.debug("Discarding result of superseded rebuild #%d", generation)
            return False
        version = self.snapshot.publish(tree)
        self._log.info("Published theme version %d (%d rules)", version, tree.rule_count)
        self.event_bus.emit(ThemeReloaded(version=version, paths=self.paths))
        return True

    def _report_failure(self, generation: int, error: ThemeError) -> bool:
        if self._is_stale(generation):
            return False
        version = self.snapshot.version
        self._log.warning("Theme reload failed, keeping version %d: %s", version, error)
        self.event_bus.emit(ThemeReloadFailed(version=version, paths=self.paths, error=error))
        return False


def watch(
    paths: Iterable[PathLike],
    *,
    config: ThemeConfig | None = None,
    event_bus: EventBus | None = None,
    logger: logging.Logger | None = None,
) -> Watcher:
    """Load *paths*, publish the result and start watching for edits.

    Raises the usual :class:`ThemeError` if the initial theme is invalid.
    """
    return Watcher(paths, config=config, event_bus=event_bus, logger=logger).start()
