from __future__ import annotations

from quizfunnel.store.db import Database
from quizfunnel.store.migrations import run_migrations
from quizfunnel.store.repositories import (
    AnalyticsRepository,
    LeadRepository,
    QuizRepository,
    QuizStats,
    SqliteCollaborators,
)

__all__ = [
    "Database",
    "run_migrations",
    "QuizRepository",
    "LeadRepository",
    "AnalyticsRepository",
    "QuizStats",
    "SqliteCollaborators",
]
