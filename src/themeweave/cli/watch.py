"""CLI command: themeweave watch -- report theme reloads as files change."""

from __future__ import annotations

import sys
import time

import click

from themeweave.config import ThemeConfig
from themeweave.errors import ThemeError
from themeweave.events.types import ThemeFilesChanged, ThemeReloaded, ThemeReloadFailed
from themeweave.watcher import Watcher


@click.command()
@click.argument("themes", nargs=-1, required=True, type=click.Path(dir_okay=False))
@click.option("--debounce", default=0.15, show_default=True, help="Seconds of quiet before rebuilding")
@click.option("--poll-interval", default=0.1, show_default=True, help="Seconds between file checks")
@click.option("--defaults/--no-defaults", default=False, help="Layer the built-in theme underneath")
def watch(themes: tuple[str, ...], debounce: float, poll_interval: float, defaults: bool) -> None:
    """Watch THEMES and print a line for every reload until interrupted."""
    config = ThemeConfig(
        include_defaults=defaults, debounce=debounce, poll_interval=poll_interval
    )
    try:
        watcher = Watcher(themes, config=config)
    except ThemeError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    def report(event: object) -> None:
        if isinstance(event, ThemeFilesChanged):
            click.echo(f"changed: {', '.join(event.paths)}")
        elif isinstance(event, ThemeReloaded):
            click.echo(f"reloaded: version {event.version}")
        elif isinstance(event, ThemeReloadFailed):
            click.echo(f"failed: {event.error} (keeping version {event.version})", err=True)

    watcher.event_bus.on_all(report)
    click.echo(f"Watching {', '.join(themes)} (version {watcher.snapshot.version})")
    with watcher:
        try:
            while True:
                time.sleep(1.0)
        except KeyboardInterrupt:
            click.echo("Stopped.")
