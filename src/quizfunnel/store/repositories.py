from __future__ import annotations

import json
import sqlite3
from dataclasses import dataclass
from datetime import datetime, timezone

from quizfunnel.errors import LeadWriteError
from quizfunnel.model.lead import Lead
from quizfunnel.model.quiz import Quiz
from quizfunnel.store.db import Database


class QuizRepository:
    """Repository for quiz definitions, stored as JSON documents."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def save(self, quiz: Quiz) -> None:
        """Insert or replace a quiz."""
        self._db.execute(
            """INSERT INTO quizzes (id, slug, title, is_published, definition, updated_at)
               VALUES (?, ?, ?, ?, ?, ?)
               ON CONFLICT(id) DO UPDATE SET
                   slug = excluded.slug,
                   title = excluded.title,
                   is_published = excluded.is_published,
                   definition = excluded.definition,
                   updated_at = excluded.updated_at""",
            (
                quiz.id,
                quiz.slug or quiz.id,
                quiz.title,
                int(quiz.is_published),
                json.dumps(quiz.to_dict(), ensure_ascii=False),
                datetime.now(timezone.utc).isoformat(),
            ),
        )
        self._db.commit()

    def get(self, quiz_id: str) -> Quiz | None:
        """Retrieve a quiz by ID, published or not."""
        row = self._db.fetch_one("SELECT * FROM quizzes WHERE id = ?", (quiz_id,))
        if row is None:
            return None
        return _row_to_quiz(row)

    def load_quiz_by_slug(self, slug: str) -> Quiz | None:
        """Retrieve a published quiz by slug, or None."""
        row = self._db.fetch_one(
            "SELECT * FROM quizzes WHERE slug = ? AND is_published = 1", (slug,)
        )
        if row is None:
            return None
        return _row_to_quiz(row)

    def list_all(self) -> tuple[Quiz, ...]:
        rows = self._db.fetch_all("SELECT * FROM quizzes ORDER BY updated_at DESC")
        return tuple(_row_to_quiz(r) for r in rows)


class LeadRepository:
    """Repository for captured leads."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def save_lead(self, lead: Lead) -> None:
        """Insert a lead, or overwrite the one with the same ID.

        The creation time of the first write is kept.
        """
        try:
            self._db.execute(
                """INSERT INTO leads
                   (id, quiz_id, name, email, whatsapp, answers, score, tags, profile,
                    completed, utm_source, utm_medium, utm_campaign, drop_off_element, created_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
                   ON CONFLICT(id) DO UPDATE SET
                       name = excluded.name,
                       email = excluded.email,
                       whatsapp = excluded.whatsapp,
                       answers = excluded.answers,
                       score = excluded.score,
                       tags = excluded.tags,
                       profile = excluded.profile,
                       completed = excluded.completed,
                       utm_source = excluded.utm_source,
                       utm_medium = excluded.utm_medium,
                       utm_campaign = excluded.utm_campaign,
                       drop_off_element = excluded.drop_off_element""",
                (
                    lead.id,
                    lead.quiz_id,
                    lead.name,
                    lead.email,
                    lead.whatsapp,
                    json.dumps(lead.answers),
                    lead.score,
                    json.dumps(list(lead.tags)),
                    lead.profile,
                    int(lead.completed),
                    lead.utm_source,
                    lead.utm_medium,
                    lead.utm_campaign,
                    lead.drop_off_element,
                    lead.created_at,
                ),
            )
            self._db.commit()
        except sqlite3.Error as exc:
            raise LeadWriteError(f"Could not save lead {lead.id}: {exc}", cause=exc) from exc

    def get(self, lead_id: str) -> Lead | None:
        row = self._db.fetch_one("SELECT * FROM leads WHERE id = ?", (lead_id,))
        if row is None:
            return None
        return _row_to_lead(row)

    def list_by_quiz(self, quiz_id: str, completed: bool | None = None) -> tuple[Lead, ...]:
        """List leads for a quiz, newest first, optionally filtered by completion."""
        if completed is None:
            rows = self._db.fetch_all(
                "SELECT * FROM leads WHERE quiz_id = ? ORDER BY created_at DESC", (quiz_id,)
            )
        else:
            rows = self._db.fetch_all(
                "SELECT * FROM leads WHERE quiz_id = ? AND completed = ? ORDER BY created_at DESC",
                (quiz_id, int(completed)),
            )
        return tuple(_row_to_lead(r) for r in rows)


@dataclass(frozen=True)
class QuizStats:
    views: int = 0
    completions: int = 0
    drop_offs: dict[str, int] | None = None

    @property
    def conversion_rate(self) -> float:
        """Completions per view, as a percentage."""
        return round(self.completions / self.views * 100, 1) if self.views else 0.0


class AnalyticsRepository:
    """Repository for funnel counters."""

    def __init__(self, db: Database) -> None:
        self._db = db

    def record_impression(self, quiz_id: str) -> None:
        self._db.execute(
            """INSERT INTO quiz_analytics (quiz_id, views) VALUES (?, 1)
               ON CONFLICT(quiz_id) DO UPDATE SET views = views + 1""",
            (quiz_id,),
        )
        self._db.commit()

    def record_completion(self, quiz_id: str) -> None:
        self._db.execute(
            """INSERT INTO quiz_analytics (quiz_id, completions) VALUES (?, 1)
               ON CONFLICT(quiz_id) DO UPDATE SET completions = completions + 1""",
            (quiz_id,),
        )
        self._db.commit()

    def record_drop_off(self, quiz_id: str, element_id: str) -> None:
        self._db.execute(
            """INSERT INTO drop_offs (quiz_id, element_id, count) VALUES (?, ?, 1)
               ON CONFLICT(quiz_id, element_id) DO UPDATE SET count = count + 1""",
            (quiz_id, element_id),
        )
        self._db.commit()

    def stats(self, quiz_id: str) -> QuizStats:
        row = self._db.fetch_one("SELECT * FROM quiz_analytics WHERE quiz_id = ?", (quiz_id,))
        drops = self._db.fetch_all(
            "SELECT element_id, count FROM drop_offs WHERE quiz_id = ?", (quiz_id,)
        )
        return QuizStats(
            views=row["views"] if row else 0,
            completions=row["completions"] if row else 0,
            drop_offs={r["element_id"]: r["count"] for r in drops},
        )


class SqliteCollaborators:
    """Bundles the repositories behind the session's collaborator protocols."""

    def __init__(self, db: Database) -> None:
        self.quizzes = QuizRepository(db)
        self.leads = LeadRepository(db)
        self.analytics = AnalyticsRepository(db)

    def load_quiz_by_slug(self, slug: str) -> Quiz | None:
        return self.quizzes.load_quiz_by_slug(slug)

    def record_impression(self, quiz_id: str) -> None:
        self.analytics.record_impression(quiz_id)

    def record_completion(self, quiz_id: str) -> None:
        self.analytics.record_completion(quiz_id)

    def record_drop_off(self, quiz_id: str, element_id: str) -> None:
        self.analytics.record_drop_off(quiz_id, element_id)

    def save_lead(self, lead: Lead) -> None:
        self.leads.save_lead(lead)


# ---------------------------------------------------------------------------
# Row conversion helpers
# ---------------------------------------------------------------------------


def _row_to_quiz(row: sqlite3.Row) -> Quiz:
    return Quiz.from_json(row["definition"])


def _row_to_lead(row: sqlite3.Row) -> Lead:
    return Lead(
        id=row["id"],
        quiz_id=row["quiz_id"],
        name=row["name"],
        email=row["email"],
        whatsapp=row["whatsapp"],
        answers=json.loads(row["answers"]),
        score=row["score"],
        tags=tuple(json.loads(row["tags"])),
        profile=row["profile"],
        completed=bool(row["completed"]),
        utm_source=row["utm_source"],
        utm_medium=row["utm_medium"],
        utm_campaign=row["utm_campaign"],
        drop_off_element=row["drop_off_element"],
        created_at=row["created_at"],
    )
