"""CLI command: quizfunnel inspect -- display quiz structure."""

from __future__ import annotations

import click

from quizfunnel.cli import load_quiz_file
from quizfunnel.model.quiz import ScoreCondition


@click.command()
@click.argument("quiz_file", type=click.Path(exists=True, dir_okay=False))
def inspect(quiz_file: str) -> None:
    """Display a quiz's elements, branches and result rules."""
    quiz = load_quiz_file(quiz_file)

    click.echo(f"Quiz:     {quiz.title} ({quiz.id})")
    if quiz.slug:
        click.echo(f"Slug:     {quiz.slug}")
    click.echo(f"Elements: {len(quiz.elements)}")
    click.echo(f"Rules:    {len(quiz.result_rules)}")
    if quiz.tracking.webhook_url:
        click.echo(f"Webhook:  {quiz.tracking.webhook_url}")
    click.echo()

    click.echo("Elements:")
    for i, element in enumerate(quiz.elements):
        parts = [f"  {i:>2}. {element.id}", f"[{element.kind.value}]"]
        if element.title:
            parts.append(f'"{element.title}"')
        if element.required:
            parts.append("required")
        if element.next_element_id:
            parts.append(f"-> {element.next_element_id}")
        click.echo("  ".join(parts))
        for option in element.options:
            line = f"        - {option.id}: {option.text} ({option.points} pts)"
            if option.tags:
                line += f" tags={','.join(option.tags)}"
            if option.next_element_id:
                line += f" -> {option.next_element_id}"
            click.echo(line)
    click.echo()

    click.echo("Result rules (first match wins):")
    for rule in quiz.result_rules:
        if isinstance(rule.condition, ScoreCondition):
            cond = f"score {rule.condition.min_score:g}-{rule.condition.max_score:g}"
        else:
            cond = f"tags {','.join(sorted(rule.condition.required_tags))}"
        line = f"  {rule.id}: {cond} => {rule.profile}"
        if rule.redirect_url:
            line += f" (redirect {rule.redirect_url})"
        click.echo(line)
