from __future__ import annotations

import dataclasses
import random

import pytest

from quizfunnel.adapters.effects import FunnelEffects
from quizfunnel.engine.clock import VirtualScheduler
from quizfunnel.engine.session import QuizSession
from quizfunnel.errors import LeadWriteError
from quizfunnel.model.lead import Lead
from quizfunnel.model.quiz import Quiz
from quizfunnel.store import (
    AnalyticsRepository,
    Database,
    LeadRepository,
    QuizRepository,
    SqliteCollaborators,
    run_migrations,
)


@pytest.fixture
def db() -> Database:
    database = Database(":memory:")
    database.connect()
    run_migrations(database)
    yield database
    database.close()


def _lead(lead_id: str = "l1", **overrides) -> Lead:
    fields = dict(
        id=lead_id,
        quiz_id="quiz-1",
        answers={"q1": "optB"},
        score=30,
        tags=("y",),
        profile="Partial",
        name="Ana",
        email="ana@example.com",
        whatsapp="+5511",
        utm_source="ads",
        drop_off_element="lead",
        created_at="2024-05-01T12:00:00+00:00",
    )
    fields.update(overrides)
    return Lead(**fields)


# ---------------------------------------------------------------------------
# Quizzes
# ---------------------------------------------------------------------------

class TestQuizRepository:
    def test_save_and_get(self, db: Database, funnel_quiz: Quiz) -> None:
        repo = QuizRepository(db)
        repo.save(funnel_quiz)
        assert repo.get("quiz-1") == funnel_quiz
        assert repo.get("missing") is None

    def test_load_by_slug_published_only(self, db: Database, funnel_quiz: Quiz) -> None:
        repo = QuizRepository(db)
        repo.save(dataclasses.replace(funnel_quiz, is_published=False))
        assert repo.load_quiz_by_slug("marketing-maturity") is None
        repo.save(funnel_quiz)
        assert repo.load_quiz_by_slug("marketing-maturity") == funnel_quiz

    def test_save_replaces(self, db: Database, funnel_quiz: Quiz) -> None:
        repo = QuizRepository(db)
        repo.save(funnel_quiz)
        repo.save(dataclasses.replace(funnel_quiz, title="Renamed"))
        assert repo.get("quiz-1").title == "Renamed"
        assert len(repo.list_all()) == 1


# ---------------------------------------------------------------------------
# Leads
# ---------------------------------------------------------------------------

class TestLeadRepository:
    def test_round_trip(self, db: Database, funnel_quiz: Quiz) -> None:
        QuizRepository(db).save(funnel_quiz)
        repo = LeadRepository(db)
        repo.save_lead(_lead())
        assert repo.get("l1") == _lead()

    def test_upsert_keeps_one_row_and_created_at(self, db: Database, funnel_quiz: Quiz) -> None:
        QuizRepository(db).save(funnel_quiz)
        repo = LeadRepository(db)
        repo.save_lead(_lead())
        repo.save_lead(
            _lead(profile="High", completed=True, drop_off_element=None, created_at="later")
        )
        (stored,) = repo.list_by_quiz("quiz-1")
        assert stored.completed
        assert stored.profile == "High"
        assert stored.drop_off_element is None
        assert stored.created_at == "2024-05-01T12:00:00+00:00"

    def test_list_by_completion(self, db: Database, funnel_quiz: Quiz) -> None:
        QuizRepository(db).save(funnel_quiz)
        repo = LeadRepository(db)
        repo.save_lead(_lead("a"))
        repo.save_lead(_lead("b", completed=True))
        assert [lead.id for lead in repo.list_by_quiz("quiz-1", completed=True)] == ["b"]
        assert [lead.id for lead in repo.list_by_quiz("quiz-1", completed=False)] == ["a"]

    def test_unknown_quiz_raises_lead_write_error(self, db: Database) -> None:
        with pytest.raises(LeadWriteError):
            LeadRepository(db).save_lead(_lead(quiz_id="ghost"))


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------

class TestAnalyticsRepository:
    def test_counters(self, db: Database, funnel_quiz: Quiz) -> None:
        QuizRepository(db).save(funnel_quiz)
        repo = AnalyticsRepository(db)
        for _ in range(4):
            repo.record_impression("quiz-1")
        repo.record_completion("quiz-1")
        repo.record_drop_off("quiz-1", "lead")
        repo.record_drop_off("quiz-1", "lead")
        stats = repo.stats("quiz-1")
        assert stats.views == 4
        assert stats.completions == 1
        assert stats.drop_offs == {"lead": 2}
        assert stats.conversion_rate == 25.0

    def test_empty_stats(self, db: Database) -> None:
        stats = AnalyticsRepository(db).stats("nothing")
        assert stats.views == 0
        assert stats.conversion_rate == 0.0


# ---------------------------------------------------------------------------
# Session against sqlite
# ---------------------------------------------------------------------------

class TestSqliteCollaborators:
    def test_full_run(self, db: Database, funnel_quiz: Quiz) -> None:
        collab = SqliteCollaborators(db)
        collab.quizzes.save(funnel_quiz)
        quiz = collab.load_quiz_by_slug("marketing-maturity")
        scheduler = VirtualScheduler()
        session = QuizSession(
            FunnelEffects(collab, collab), scheduler=scheduler, rng=random.Random(5)
        )
        session.start(quiz)
        session.advance()
        session.set_answer("q1", "optB")
        session.advance()
        session.set_contact(name="Ana", email="ana@example.com", whatsapp="+5511")
        session.advance()
        assert collab.leads.get(session.lead_id).completed is False
        session.advance()
        scheduler.run_until_idle()

        lead = collab.leads.get(session.lead_id)
        assert lead.completed
        assert lead.profile == "High"
        assert lead.score == 30
        stats = collab.analytics.stats("quiz-1")
        assert (stats.views, stats.completions) == (1, 1)
