"""ChangeStream: pull-style access to reload notifications."""

from __future__ import annotations

import queue
from typing import Iterator, Union

from themeweave.events.bus import EventBus
from themeweave.events.types import ThemeReloaded, ThemeReloadFailed

ReloadEvent = Union[ThemeReloaded, ThemeReloadFailed]

_CLOSED = object()


class ChangeStream:
    """Queue fed by the event bus; iterate it from any consumer thread.

    Only successful reloads are delivered unless *include_failures* is set.
    Iteration ends after :meth:`close`.
    """

    def __init__(self, event_bus: EventBus, *, include_failures: bool = False) -> None:
        self._queue: queue.Queue[object] = queue.Queue()
        self._bus = event_bus
        self._closed = False
        event_bus.subscribe(ThemeReloaded, self._put)
        if include_failures:
            event_bus.subscribe(ThemeReloadFailed, self._put)

    def _put(self, event: ReloadEvent) -> None:
        self._queue.put(event)

    def get(self, timeout: float | None = None) -> ReloadEvent | None:
        """Next event, or ``None`` on timeout or once the stream is closed."""
        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None
        if item is _CLOSED:
            self._queue.put(_CLOSED)
            return None
        return item  # type: ignore[return-value]

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._bus.unsubscribe(self._put)
        self._queue.put(_CLOSED)

    def __iter__(self) -> Iterator[ReloadEvent]:
        while True:
            event = self.get()
            if event is None:
                return
            yield event

    def __enter__(self) -> ChangeStream:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
