from __future__ import annotations

from quizfunnel.store.db import Database

SCHEMA = """
CREATE TABLE IF NOT EXISTS quizzes (
    id TEXT PRIMARY KEY,
    slug TEXT NOT NULL UNIQUE,
    title TEXT NOT NULL,
    is_published INTEGER NOT NULL DEFAULT 0,
    definition TEXT NOT NULL,
    updated_at TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS leads (
    id TEXT PRIMARY KEY,
    quiz_id TEXT NOT NULL,
    name TEXT NOT NULL DEFAULT '',
    email TEXT NOT NULL DEFAULT '',
    whatsapp TEXT NOT NULL DEFAULT '',
    answers TEXT NOT NULL DEFAULT '{}',
    score REAL NOT NULL DEFAULT 0,
    tags TEXT NOT NULL DEFAULT '[]',
    profile TEXT NOT NULL DEFAULT '',
    completed INTEGER NOT NULL DEFAULT 0,
    utm_source TEXT,
    utm_medium TEXT,
    utm_campaign TEXT,
    drop_off_element TEXT,
    created_at TEXT NOT NULL DEFAULT '',
    FOREIGN KEY (quiz_id) REFERENCES quizzes(id)
);

CREATE TABLE IF NOT EXISTS quiz_analytics (
    quiz_id TEXT PRIMARY KEY,
    views INTEGER NOT NULL DEFAULT 0,
    completions INTEGER NOT NULL DEFAULT 0,
    FOREIGN KEY (quiz_id) REFERENCES quizzes(id)
);

CREATE TABLE IF NOT EXISTS drop_offs (
    quiz_id TEXT NOT NULL,
    element_id TEXT NOT NULL,
    count INTEGER NOT NULL DEFAULT 0,
    PRIMARY KEY (quiz_id, element_id),
    FOREIGN KEY (quiz_id) REFERENCES quizzes(id)
);

CREATE INDEX IF NOT EXISTS idx_leads_quiz ON leads(quiz_id);
"""


def run_migrations(db: Database) -> None:
    """Create all tables."""
    db.connection.executescript(SCHEMA)
    db.commit()
