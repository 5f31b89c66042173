"""CLI command: themeweave query -- resolve one property."""

from __future__ import annotations

import sys

import click

from themeweave.config import ThemeConfig
from themeweave.errors import ThemeError
from themeweave.loader import load
from themeweave.parser import parse_value
from themeweave.tree.builder import VariableResolver


@click.command()
@click.argument("themes", nargs=-1, required=True, type=click.Path(dir_okay=False))
@click.option("--widget", "-w", required=True, help="Widget type, e.g. textbox")
@click.option("--property", "-p", "prop", required=True, help="Property name")
@click.option("--instance", "-i", default=None, help="Widget instance name")
@click.option("--state", "-s", default=None, help="Widget state, e.g. selected")
@click.option("--default", "-d", "default_text", default=None, help="Value to print when unset")
@click.option("--defaults/--no-defaults", default=False, help="Layer the built-in theme underneath")
def query(
    themes: tuple[str, ...],
    widget: str,
    prop: str,
    instance: str | None,
    state: str | None,
    default_text: str | None,
    defaults: bool,
) -> None:
    """Print the value THEMES give PROPERTY on one widget.

    Exits with code 1 when the property is unset and no --default is given.
    """
    try:
        tree = load(themes, config=ThemeConfig(include_defaults=defaults))
        default = None
        if default_text is not None:
            default = VariableResolver(dict(tree.variables)).substitute(parse_value(default_text))
    except ThemeError as exc:
        click.echo(f"Error: {exc}", err=True)
        sys.exit(1)

    value = tree.lookup(widget, instance, state, prop)
    if value is None and default is None:
        click.echo("(unset)")
        sys.exit(1)
    click.echo(str(tree.resolve(widget, instance, state, prop, default)))
