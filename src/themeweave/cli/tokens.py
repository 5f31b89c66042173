"""CLI command: themeweave tokens -- dump the token stream of a theme file."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from themeweave.errors import LexError, ThemeFileError
from themeweave.parser import tokenize


@click.command()
@click.argument("theme", type=click.Path(exists=True, dir_okay=False))
def tokens(theme: str) -> None:
    """Print every token in THEME with its line and column."""
    try:
        source = Path(theme).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        click.echo(f"Error: {ThemeFileError(theme, exc)}", err=True)
        sys.exit(1)
    try:
        stream = tokenize(source)
    except LexError as exc:
        exc.source = theme
        click.echo(f"Lex error: {exc}", err=True)
        sys.exit(1)

    for token in stream:
        click.echo(f"{token.position.line:>4}:{token.position.column:<4} {token.kind:<12} {token.text}")
    click.echo(f"\n{len(stream)} token(s)")
