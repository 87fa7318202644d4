"""CLI command: quizfunnel validate -- check a quiz definition."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from quizfunnel.cli import load_quiz_file
from quizfunnel.model.diagnostic import Severity
from quizfunnel.validation import count_by_severity
from quizfunnel.validation import validate as run_validate


@click.command()
@click.argument("quiz_file", type=click.Path(exists=True, dir_okay=False))
def validate(quiz_file: str) -> None:
    """Validate a quiz definition file.

    Prints diagnostics, errors first and in element order, and exits with
    code 0 if no errors are found, or code 1 if there are errors.
    """
    quiz = load_quiz_file(quiz_file)
    diagnostics = run_validate(quiz)

    if not diagnostics:
        click.echo(f"OK: {Path(quiz_file).name} is valid (0 diagnostics)")
        sys.exit(0)

    for diag in diagnostics:
        click.echo(str(diag))

    counts = count_by_severity(diagnostics)
    click.echo()
    click.echo(
        f"Summary: {counts[Severity.ERROR]} error(s), {counts[Severity.WARNING]} warning(s)"
    )
    sys.exit(1 if counts[Severity.ERROR] else 0)
