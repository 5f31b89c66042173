"""Tests for the snapshot handle and the file watcher."""

from __future__ import annotations

import logging
import threading
from pathlib import Path

import pytest

from themeweave import ThemeConfig, watch
from themeweave.errors import ThemeError, ThemeFileError, UnexpectedTokenError
from themeweave.events import EventBus, ThemeFilesChanged, ThemeReloaded, ThemeReloadFailed
from themeweave.model import Color
from themeweave.parser import parse_stylesheet
from themeweave.tree import ThemeTree, build
from themeweave.watcher import ThemeSnapshot, Watcher, file_signature

BLACK = Color.from_hex("#000000")
RED = "window { background-color: #ff0000; }\n"
GREEN = "window { background-color: #00ff00; }\n/* longer */\n"
BLUE = "window { background-color: #0000ff; }\n/* even longer */\n"
BROKEN = "window { background-color #ff0000; }\n"


def _tree(source: str) -> ThemeTree:
    return build([parse_stylesheet(source)])


def _bg(tree: ThemeTree) -> str:
    return tree.get_color("window", None, "background-color", BLACK).to_hex()


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture()
def theme(tmp_path: Path) -> Path:
    path = tmp_path / "theme.rasi"
    path.write_text(RED)
    return path


# ---------------------------------------------------------------------------
# ThemeSnapshot
# ---------------------------------------------------------------------------


class TestSnapshot:
    def test_initial_version(self):
        snapshot = ThemeSnapshot(_tree(RED))
        assert snapshot.version == 1
        assert _bg(snapshot.tree) == "#ff0000"

    def test_publish_bumps_version(self):
        snapshot = ThemeSnapshot(_tree(RED))
        assert snapshot.publish(_tree(GREEN)) == 2
        assert snapshot.version == 2
        assert _bg(snapshot.tree) == "#00ff00"

    def test_old_tree_stays_usable(self):
        snapshot = ThemeSnapshot(_tree(RED))
        held = snapshot.tree
        snapshot.publish(_tree(GREEN))
        assert _bg(held) == "#ff0000"

    def test_get_reads_version_and_tree_together(self):
        green = _tree(GREEN)
        snapshot = ThemeSnapshot(_tree(RED))
        snapshot.publish(green)
        published = snapshot.get()
        assert published.version == 2
        assert published.tree is green

    def test_resolve_delegates(self):
        snapshot = ThemeSnapshot(_tree(RED))
        assert snapshot.resolve("window", None, None, "background-color", BLACK) == Color(1.0, 0.0, 0.0)

    def test_readers_never_see_partial_state(self):
        trees = {"#ff0000": _tree(RED), "#00ff00": _tree(GREEN)}
        snapshot = ThemeSnapshot(trees["#ff0000"])
        seen: set[str] = set()
        stop = threading.Event()

        def reader() -> None:
            while not stop.is_set():
                seen.add(_bg(snapshot.tree))

        readers = [threading.Thread(target=reader) for _ in range(4)]
        for t in readers:
            t.start()
        for i in range(200):
            snapshot.publish(trees["#00ff00" if i % 2 == 0 else "#ff0000"])
        stop.set()
        for t in readers:
            t.join()
        assert seen <= set(trees)
        assert snapshot.version == 201


# ---------------------------------------------------------------------------
# Synchronous reloads
# ---------------------------------------------------------------------------


class TestReload:
    def test_initial_build(self, theme: Path):
        watcher = Watcher([theme])
        assert watcher.snapshot.version == 1
        assert _bg(watcher.snapshot.tree) == "#ff0000"

    def test_initial_build_failure_raises(self, tmp_path: Path):
        path = tmp_path / "broken.rasi"
        path.write_text(BROKEN)
        with pytest.raises(UnexpectedTokenError):
            Watcher([path])

    def test_reload_publishes(self, theme: Path):
        watcher = Watcher([theme])
        theme.write_text(GREEN)
        try:
            assert watcher.reload() is True
        finally:
            watcher.stop()
        assert watcher.snapshot.version == 2
        assert _bg(watcher.snapshot.tree) == "#00ff00"

    def test_reload_notifies_subscribers(self, theme: Path):
        watcher = Watcher([theme])
        received: list[ThemeReloaded] = []
        watcher.subscribe(received.append)
        theme.write_text(GREEN)
        watcher.reload()
        watcher.stop()
        assert received == [ThemeReloaded(version=2, paths=(str(theme),))]

    def test_failed_reload_keeps_previous_tree(self, theme: Path):
        watcher = Watcher([theme])
        before = watcher.snapshot.tree
        theme.write_text(BROKEN)
        assert watcher.reload() is False
        watcher.stop()
        assert watcher.snapshot.version == 1
        assert watcher.snapshot.tree is before

    def test_failed_reload_reports_error(self, theme: Path, caplog: pytest.LogCaptureFixture):
        watcher = Watcher([theme])
        failures: list[ThemeReloadFailed] = []
        watcher.on_failure(failures.append)
        theme.write_text(BROKEN)
        with caplog.at_level(logging.WARNING, logger="themeweave"):
            watcher.reload()
        watcher.stop()
        assert len(failures) == 1
        assert failures[0].version == 1
        assert isinstance(failures[0].error, UnexpectedTokenError)
        assert failures[0].error.line == 1
        assert any("keeping version 1" in r.message for r in caplog.records)

    def test_deleted_file_is_a_failed_reload(self, theme: Path):
        watcher = Watcher([theme])
        failures: list[ThemeReloadFailed] = []
        watcher.on_failure(failures.append)
        theme.unlink()
        assert watcher.reload() is False
        watcher.stop()
        assert isinstance(failures[0].error, ThemeFileError)

    def test_invalid_utf8_is_a_failed_reload(self, theme: Path, caplog: pytest.LogCaptureFixture):
        watcher = Watcher([theme])
        failures: list[ThemeReloadFailed] = []
        watcher.on_failure(failures.append)
        theme.write_bytes(b"\xff")
        with caplog.at_level(logging.WARNING, logger="themeweave"):
            assert watcher.reload() is False
        watcher.stop()
        assert watcher.snapshot.version == 1
        assert isinstance(failures[0].error, ThemeFileError)
        assert isinstance(failures[0].error.cause, UnicodeDecodeError)
        assert any("keeping version 1" in r.message for r in caplog.records)

    def test_unexpected_builder_error_is_reported(self, caplog: pytest.LogCaptureFixture):
        def builder(paths):
            raise RuntimeError("disk on fire")

        watcher = Watcher(["unused.rasi"], snapshot=ThemeSnapshot(_tree(RED)), builder=builder)
        failures: list[ThemeReloadFailed] = []
        watcher.on_failure(failures.append)
        with caplog.at_level(logging.WARNING, logger="themeweave"):
            assert watcher.reload() is False
        watcher.stop()
        assert len(failures) == 1
        assert isinstance(failures[0].error, ThemeError)
        assert isinstance(failures[0].error.__cause__, RuntimeError)
        assert "disk on fire" in str(failures[0].error)
        assert any(r.levelno == logging.ERROR for r in caplog.records)
        assert _bg(watcher.snapshot.tree) == "#ff0000"

    def test_recovers_after_failure(self, theme: Path):
        watcher = Watcher([theme])
        theme.write_text(BROKEN)
        watcher.reload()
        theme.write_text(BLUE)
        assert watcher.reload() is True
        watcher.stop()
        assert watcher.snapshot.version == 2
        assert _bg(watcher.snapshot.tree) == "#0000ff"

    def test_shared_event_bus(self, theme: Path):
        bus = EventBus()
        events: list[object] = []
        bus.on_all(events.append)
        watcher = Watcher([theme], event_bus=bus)
        watcher.reload()
        watcher.stop()
        assert events == [ThemeReloaded(version=2, paths=(str(theme),))]


# ---------------------------------------------------------------------------
# Latest-wins
# ---------------------------------------------------------------------------


class TestLatestWins:
    def test_superseded_rebuild_is_dropped(self):
        started = threading.Event()
        release = threading.Event()
        built: list[ThemeTree] = []
        sources = iter([GREEN, BLUE])

        def slow_builder(paths):
            tree = _tree(next(sources))
            if not built:
                started.set()
                release.wait(timeout=5)
            built.append(tree)
            return tree

        snapshot = ThemeSnapshot(_tree(RED))
        watcher = Watcher(["unused.rasi"], snapshot=snapshot, builder=slow_builder)
        first = watcher.request_reload()
        assert started.wait(timeout=5)
        second = watcher.request_reload()
        release.set()
        assert first.result(timeout=5) is False
        assert second.result(timeout=5) is True
        watcher.stop()
        assert snapshot.version == 2
        assert snapshot.tree is built[-1]

    def test_stale_failure_is_not_reported(self):
        started = threading.Event()
        release = threading.Event()
        calls: list[int] = []

        def builder(paths):
            calls.append(1)
            if len(calls) == 1:
                started.set()
                release.wait(timeout=5)
                raise ThemeError("first build fails")
            return _tree(GREEN)

        watcher = Watcher(["unused.rasi"], snapshot=ThemeSnapshot(_tree(RED)), builder=builder)
        failures: list[ThemeReloadFailed] = []
        watcher.on_failure(failures.append)
        first = watcher.request_reload()
        assert started.wait(timeout=5)
        second = watcher.request_reload()
        release.set()
        first.result(timeout=5)
        assert second.result(timeout=5) is True
        watcher.stop()
        assert failures == []
        assert watcher.snapshot.version == 2


# ---------------------------------------------------------------------------
# Polling and debounce
# ---------------------------------------------------------------------------


class TestPolling:
    def test_file_signature(self, theme: Path, tmp_path: Path):
        assert file_signature(str(theme)) is not None
        assert file_signature(str(tmp_path / "missing.rasi")) is None

    def test_no_change_no_reload(self, theme: Path):
        watcher = Watcher([theme], clock=FakeClock())
        assert watcher.poll() is None

    def test_change_waits_for_debounce(self, theme: Path):
        clock = FakeClock()
        watcher = Watcher([theme], config=ThemeConfig(debounce=0.5), clock=clock)
        theme.write_text(GREEN)
        assert watcher.poll() is None
        clock.now = 0.3
        assert watcher.poll() is None
        clock.now = 0.6
        future = watcher.poll()
        assert future is not None
        assert future.result(timeout=5) is True
        watcher.stop()
        assert _bg(watcher.snapshot.tree) == "#00ff00"

    def test_burst_of_changes_rebuilds_once(self, theme: Path):
        clock = FakeClock()
        watcher = Watcher([theme], config=ThemeConfig(debounce=0.5), clock=clock)
        reloads: list[ThemeReloaded] = []
        watcher.subscribe(reloads.append)

        theme.write_text(GREEN)
        watcher.poll()
        clock.now = 0.4
        theme.write_text(BLUE)
        assert watcher.poll() is None
        clock.now = 0.7
        assert watcher.poll() is None  # window restarted at 0.4
        clock.now = 1.0
        future = watcher.poll()
        assert future is not None
        future.result(timeout=5)
        clock.now = 2.0
        assert watcher.poll() is None
        watcher.stop()

        assert len(reloads) == 1
        assert _bg(watcher.snapshot.tree) == "#0000ff"

    def test_zero_debounce_rebuilds_immediately(self, theme: Path):
        watcher = Watcher([theme], config=ThemeConfig(debounce=0), clock=FakeClock())
        theme.write_text(GREEN)
        future = watcher.poll()
        assert future is not None
        assert future.result(timeout=5) is True
        watcher.stop()

    def test_change_event(self, theme: Path):
        watcher = Watcher([theme], clock=FakeClock())
        changed: list[ThemeFilesChanged] = []
        watcher.event_bus.subscribe(ThemeFilesChanged, changed.append)
        theme.write_text(GREEN)
        watcher.poll()
        assert changed == [ThemeFilesChanged(paths=(str(theme),))]


# ---------------------------------------------------------------------------
# Background thread and change stream
# ---------------------------------------------------------------------------


class TestBackground:
    def test_stream_receives_reload(self, theme: Path):
        config = ThemeConfig(debounce=0.05, poll_interval=0.01)
        with Watcher([theme], config=config) as watcher:
            assert watcher.running
            with watcher.changes() as stream:
                theme.write_text(GREEN)
                event = stream.get(timeout=5)
        assert not watcher.running
        assert isinstance(event, ThemeReloaded)
        assert event.version == 2
        assert _bg(watcher.snapshot.tree) == "#00ff00"

    def test_stream_with_failures(self, theme: Path):
        watcher = Watcher([theme])
        stream = watcher.changes(include_failures=True)
        theme.write_text(BROKEN)
        watcher.reload()
        watcher.stop()
        assert isinstance(stream.get(timeout=1), ThemeReloadFailed)
        stream.close()

    def test_closed_stream_stops_iteration(self, theme: Path):
        watcher = Watcher([theme])
        stream = watcher.changes()
        watcher.reload()
        watcher.stop()
        stream.close()
        assert [e.version for e in stream] == [2]

    def test_closed_stream_unsubscribes(self, theme: Path):
        watcher = Watcher([theme])
        stream = watcher.changes()
        stream.close()
        watcher.reload()
        watcher.stop()
        assert stream.get(timeout=0.1) is None

    def test_watch_starts_watcher(self, theme: Path):
        watcher = watch([theme], config=ThemeConfig(poll_interval=0.01))
        try:
            assert watcher.running
        finally:
            watcher.stop()
        assert not watcher.running
