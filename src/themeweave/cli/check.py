"""CLI command: themeweave check -- parse and build theme files."""

from __future__ import annotations

import sys

import click

from themeweave.config import ThemeConfig
from themeweave.errors import ThemeError
from themeweave.loader import load


@click.command()
@click.argument("themes", nargs=-1, required=True, type=click.Path(dir_okay=False))
@click.option("--defaults/--no-defaults", default=False, help="Layer the built-in theme underneath")
def check(themes: tuple[str, ...], defaults: bool) -> None:
    """Lex, parse and build THEMES (base first, overrides after).

    Exits with code 0 when the theme builds cleanly, 1 otherwise.
    """
    config = ThemeConfig(include_defaults=defaults)
    try:
        tree = load(themes, config=config)
    except ThemeError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    click.echo(
        f"OK: {len(themes)} file(s), {tree.rule_count} rule(s), "
        f"{len(tree.variables)} variable(s)"
    )
