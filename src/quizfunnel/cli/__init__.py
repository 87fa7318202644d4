"""Command-line interface for quizfunnel."""

from __future__ import annotations

import sys
from pathlib import Path

import click

from quizfunnel.errors import DefinitionError
from quizfunnel.model.quiz import Quiz
from quizfunnel.validation import ValidationError, validate_or_raise


def load_quiz_file(path: str) -> Quiz:
    """Read a quiz definition from a JSON file, exiting with code 1 on bad input."""
    try:
        return Quiz.from_json(Path(path).read_text(encoding="utf-8"))
    except DefinitionError as exc:
        click.echo(f"Invalid quiz file: {exc}", err=True)
        sys.exit(1)


def require_valid(quiz: Quiz) -> None:
    """Refuse to store or run *quiz* while it has ERROR diagnostics."""
    try:
        validate_or_raise(quiz)
    except ValidationError as exc:
        click.echo(f"Quiz {quiz.id} is invalid:", err=True)
        for diag in exc.diagnostics:
            click.echo(f"  {diag}", err=True)
        sys.exit(1)
