"""CLI command: themeweave inspect -- display the built cascade."""

from __future__ import annotations

import sys

import click

from themeweave.config import ThemeConfig
from themeweave.errors import ThemeError
from themeweave.loader import load


@click.command()
@click.argument("themes", nargs=-1, required=True, type=click.Path(dir_okay=False))
@click.option("--defaults/--no-defaults", default=False, help="Layer the built-in theme underneath")
def inspect(themes: tuple[str, ...], defaults: bool) -> None:
    """Build THEMES and show variables and the rules in every bucket.

    Rules are listed best first: higher specificity, then later declaration.
    """
    try:
        tree = load(themes, config=ThemeConfig(include_defaults=defaults))
    except ThemeError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    click.echo(f"Rules: {tree.rule_count}")
    click.echo(f"Variables: {len(tree.variables)}")
    for name, value in sorted(tree.variables.items()):
        click.echo(f"  @{name} = {value}")
    click.echo()

    click.echo("Buckets:")
    for (widget, state), rules in sorted(
        tree.buckets.items(), key=lambda kv: (kv[0][0] or "", kv[0][1] or "")
    ):
        if not rules:
            continue
        click.echo(f"  {widget or '*'}{'.' + state if state else ''}:")
        for rule in rules:
            props = ", ".join(f"{k}={v}" for k, v in rule.properties.items())
            click.echo(
                f"    [{rule.specificity}] #{rule.order} {rule.selector}  {props}"
            )
