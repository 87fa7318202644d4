"""CLI command: quizfunnel import -- store a quiz in the sqlite database."""

from __future__ import annotations

import dataclasses

import click

from quizfunnel.cli import load_quiz_file, require_valid
from quizfunnel.config import FunnelConfig
from quizfunnel.store import Database, QuizRepository, run_migrations


@click.command(name="import")
@click.argument("quiz_file", type=click.Path(exists=True, dir_okay=False))
@click.option("--db", "db_path", default=FunnelConfig.db_path, show_default=True,
              help="SQLite database file")
@click.option("--publish/--draft", default=True, help="Store as published or as a draft")
def import_quiz(quiz_file: str, db_path: str, publish: bool) -> None:
    """Store a quiz definition so it can be played by slug."""
    quiz = dataclasses.replace(load_quiz_file(quiz_file), is_published=publish)
    require_valid(quiz)

    db = Database(db_path)
    db.connect()
    try:
        run_migrations(db)
        QuizRepository(db).save(quiz)
    finally:
        db.close()

    state = "published" if publish else "draft"
    click.echo(f"Imported {quiz.id} as '{quiz.slug or quiz.id}' ({state}) into {db_path}")
