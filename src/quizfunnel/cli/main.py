"""quizfunnel CLI entry point: Click group with subcommands."""

import logging

import click

from quizfunnel import __version__


@click.group()
@click.version_option(version=__version__, prog_name="quizfunnel")
@click.option("-v", "--verbose", is_flag=True, help="Log engine activity to stderr")
def cli(verbose: bool) -> None:
    """quizfunnel - run branching lead-capture quiz funnels."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


# Import and register subcommands
from quizfunnel.cli.validate import validate  # noqa: E402
from quizfunnel.cli.inspect import inspect  # noqa: E402
from quizfunnel.cli.importer import import_quiz  # noqa: E402
from quizfunnel.cli.play import play  # noqa: E402

cli.add_command(validate)
cli.add_command(inspect)
cli.add_command(import_quiz)
cli.add_command(play)
