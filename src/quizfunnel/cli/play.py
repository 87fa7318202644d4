"""CLI command: quizfunnel play -- run a quiz session in the terminal."""

from __future__ import annotations

import json
import random
import sys
import time
from pathlib import Path
from typing import Any

import click

from quizfunnel.adapters.effects import FunnelEffects
from quizfunnel.adapters.memory import InMemoryQuizStore
from quizfunnel.adapters.webhook import HttpWebhookDispatcher
from quizfunnel.cli import load_quiz_file, require_valid
from quizfunnel.config import FunnelConfig
from quizfunnel.engine.clock import ThreadingScheduler, VirtualScheduler
from quizfunnel.engine.session import QuizSession, SessionState
from quizfunnel.events.bus import EventBus
from quizfunnel.events.types import AnalysisProgressed, SideEffectFailed
from quizfunnel.model.element import Element, ElementKind
from quizfunnel.model.lead import UtmParams
from quizfunnel.model.quiz import Quiz
from quizfunnel.store import Database, SqliteCollaborators, run_migrations

# Backward jumps can loop forever with a scripted answer file.
MAX_STEPS = 500


@click.command()
@click.argument("quiz_file", required=False, type=click.Path(exists=True, dir_okay=False))
@click.option("--slug", default=None, help="Load a published quiz from the database by slug")
@click.option("--db", "db_path", default=None, help="SQLite database for quizzes, leads and analytics")
@click.option("--answers", "answers_file", type=click.Path(exists=True, dir_okay=False),
              default=None, help="JSON object of element id -> answer; skips prompts")
@click.option("--name", default=None, help="Lead form name")
@click.option("--email", default=None, help="Lead form email")
@click.option("--whatsapp", default=None, help="Lead form WhatsApp number")
@click.option("--query", default="", help='Landing page query string, e.g. "utm_source=ads"')
@click.option("--instant/--realtime", default=True,
              help="Run the analysis animation instantly or on the wall clock")
@click.option("--preview", is_flag=True, help="Suppress tracking, lead writes and webhooks")
@click.option("--seed", type=int, default=None, help="Seed for the progress animation")
def play(
    quiz_file: str | None,
    slug: str | None,
    db_path: str | None,
    answers_file: str | None,
    name: str | None,
    email: str | None,
    whatsapp: str | None,
    query: str,
    instant: bool,
    preview: bool,
    seed: int | None,
) -> None:
    """Play a quiz from QUIZ_FILE, or from the database with --slug."""
    if quiz_file is None and slug is None:
        click.echo("Give a QUIZ_FILE or --slug", err=True)
        sys.exit(2)
    if slug is not None and db_path is None:
        click.echo("--slug needs --db", err=True)
        sys.exit(2)

    config = FunnelConfig()
    scripted = _load_answers(answers_file) if answers_file else None

    db: Database | None = None
    if db_path is not None:
        db = Database(db_path)
        db.connect()
        run_migrations(db)
        collaborators: Any = SqliteCollaborators(db)
    else:
        collaborators = InMemoryQuizStore()

    webhooks: HttpWebhookDispatcher | None = None
    try:
        quiz = _resolve_quiz(quiz_file, slug, collaborators)
        bus = EventBus()
        webhooks = (
            HttpWebhookDispatcher(timeout=config.webhook_timeout_seconds)
            if quiz.tracking.webhook_url and not preview
            else None
        )
        effects = FunnelEffects(collaborators, collaborators, webhooks, event_bus=bus)
        scheduler = VirtualScheduler() if instant else ThreadingScheduler()
        session = QuizSession(
            effects,
            scheduler=scheduler,
            config=config,
            event_bus=bus,
            rng=random.Random(seed),
            utm_provider=lambda: UtmParams.from_query_string(query),
            preview=preview,
        )
        _attach_output(bus)

        redirect = _run(session, quiz, scheduler, scripted, (name, email, whatsapp))
        _print_result(session, redirect)
    finally:
        if webhooks is not None:
            webhooks.close()
        if db is not None:
            db.close()


# ---------------------------------------------------------------------------
# Setup helpers
# ---------------------------------------------------------------------------


def _load_answers(path: str) -> dict[str, Any]:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        click.echo(f"Invalid answers file: {exc}", err=True)
        sys.exit(1)
    if not isinstance(data, dict):
        click.echo("Answers file must hold a JSON object", err=True)
        sys.exit(1)
    return data


def _resolve_quiz(quiz_file: str | None, slug: str | None, collaborators: Any) -> Quiz:
    if quiz_file is not None:
        quiz = load_quiz_file(quiz_file)
        require_valid(quiz)
        if isinstance(collaborators, SqliteCollaborators):
            # leads and counters reference the stored quiz
            collaborators.quizzes.save(quiz)
        return quiz
    quiz = collaborators.load_quiz_by_slug(slug)
    if quiz is None:
        click.echo(f"No published quiz with slug '{slug}'", err=True)
        sys.exit(1)
    require_valid(quiz)
    return quiz


def _attach_output(bus: EventBus) -> None:
    last = {"percent": -1}

    def on_progress(event: AnalysisProgressed) -> None:
        if event.percent == last["percent"]:
            return
        last["percent"] = event.percent
        click.echo(f"\r  Analysing your answers... {event.percent:3d}%", nl=event.percent >= 100)

    def on_failure(event: SideEffectFailed) -> None:
        click.echo(f"  (warning: {event.operation} failed: {event.error})", err=True)

    bus.subscribe(AnalysisProgressed, on_progress)
    bus.subscribe(SideEffectFailed, on_failure)


# ---------------------------------------------------------------------------
# Session loop
# ---------------------------------------------------------------------------


def _run(
    session: QuizSession,
    quiz: Quiz,
    scheduler: VirtualScheduler | ThreadingScheduler,
    scripted: dict[str, Any] | None,
    contact: tuple[str | None, str | None, str | None],
) -> str | None:
    session.start(quiz)
    for _ in range(MAX_STEPS):
        element = session.current_element
        if element is None:
            return None
        _show(element)

        if element.kind is ElementKind.RESULT:
            return session.advance()

        _collect(session, element, scripted, contact)
        if not session.can_advance():
            click.echo("  An answer is required to continue.", err=True)
            if scripted is not None:
                sys.exit(1)
            continue

        before = (session.current_index, session.state)
        redirect = session.advance()
        if session.state is SessionState.ANALYZING:
            _wait_for_analysis(session, scheduler)
        if redirect is not None:
            return redirect
        if session.state is SessionState.RESULT and session.current_element is element:
            return None
        if (session.current_index, session.state) == before:
            # lead form as the last element: nothing left to show
            return None
    click.echo(f"Stopped after {MAX_STEPS} steps", err=True)
    sys.exit(1)


def _wait_for_analysis(
    session: QuizSession, scheduler: VirtualScheduler | ThreadingScheduler
) -> None:
    if isinstance(scheduler, VirtualScheduler):
        scheduler.run_until_idle()
        return
    while session.state is SessionState.ANALYZING:
        time.sleep(0.05)


def _show(element: Element) -> None:
    click.echo()
    header = element.title or element.result_title or element.id
    click.echo(click.style(header, bold=True))
    description = element.description or element.result_description
    if description:
        click.echo(f"  {description}")


def _collect(
    session: QuizSession,
    element: Element,
    scripted: dict[str, Any] | None,
    contact: tuple[str | None, str | None, str | None],
) -> None:
    if element.kind is ElementKind.LEAD_FORM:
        _collect_contact(session, element, contact, interactive=scripted is None)
        return

    if scripted is not None:
        if element.id in scripted:
            session.set_answer(element.id, scripted[element.id])
        return

    if element.is_choice:
        for i, option in enumerate(element.options, start=1):
            click.echo(f"  {i}) {option.text or option.id}")
        choice = click.prompt("  Your choice", type=click.IntRange(1, len(element.options)))
        session.set_answer(element.id, element.options[choice - 1].id)
    elif element.kind is ElementKind.RANGE_SLIDER:
        value = click.prompt(
            f"  Value ({element.min:g}-{element.max:g})",
            type=click.FloatRange(element.min, element.max),
        )
        session.set_answer(element.id, value)
    elif element.kind is ElementKind.TEXT_INPUT:
        text = click.prompt("  Answer", default="", show_default=False)
        if text:
            session.set_answer(element.id, text)
    elif element.kind is not ElementKind.FAKE_LOADING:
        click.pause("  Press any key to continue...")


def _collect_contact(
    session: QuizSession,
    element: Element,
    contact: tuple[str | None, str | None, str | None],
    *,
    interactive: bool,
) -> None:
    values = dict(zip(("name", "email", "whatsapp"), contact))
    for field_name in element.fields:
        if values.get(field_name) is None and interactive:
            values[field_name] = click.prompt(f"  {field_name.capitalize()}")
    session.set_contact(
        name=values.get("name") or "",
        email=values.get("email") or "",
        whatsapp=values.get("whatsapp") or "",
    )


def _print_result(session: QuizSession, redirect: str | None) -> None:
    result = session.result()
    click.echo()
    click.echo(f"Score:   {result.score:g}")
    click.echo(f"Tags:    {', '.join(result.tags) or '-'}")
    click.echo(f"Profile: {result.profile}")
    if redirect:
        click.echo(f"Redirect: {redirect}")
    if session.lead_id and not session.preview:
        click.echo(f"Lead:    {session.lead_id}")
