"""themeweave CLI entry point: Click group with subcommands."""

import logging

import click

from themeweave import __version__


@click.group()
@click.version_option(version=__version__, prog_name="themeweave")
@click.option("-v", "--verbose", is_flag=True, help="Enable debug logging")
def cli(verbose: bool) -> None:
    """themeweave - cascading theme files for UI widgets."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Import and register subcommands
from themeweave.cli.check import check  # noqa: E402
from themeweave.cli.inspect import inspect  # noqa: E402
from themeweave.cli.query import query  # noqa: E402
from themeweave.cli.tokens import tokens  # noqa: E402
from themeweave.cli.watch import watch  # noqa: E402

cli.add_command(check)
cli.add_command(inspect)
cli.add_command(query)
cli.add_command(tokens)
cli.add_command(watch)
