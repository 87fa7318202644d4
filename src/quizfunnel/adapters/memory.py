"""In-memory collaborators for tests, previews and the CLI."""

from __future__ import annotations

import threading
from collections import Counter
from dataclasses import dataclass, field
from typing import Any

from quizfunnel.model.lead import Lead
from quizfunnel.model.quiz import Quiz


class InMemoryQuizStore:
    """Quiz loader, analytics tracker and lead writer backed by dicts."""

    def __init__(self, quizzes: list[Quiz] | None = None) -> None:
        self._lock = threading.Lock()
        self._quizzes: dict[str, Quiz] = {}
        self.leads: dict[str, Lead] = {}
        self.lead_writes: list[Lead] = []
        self.impressions: Counter[str] = Counter()
        self.completions: Counter[str] = Counter()
        self.drop_offs: Counter[tuple[str, str]] = Counter()
        for quiz in quizzes or ():
            self.add_quiz(quiz)

    def add_quiz(self, quiz: Quiz) -> None:
        self._quizzes[quiz.slug or quiz.id] = quiz

    # --- QuizLoader -----------------------------------------------------------

    def load_quiz_by_slug(self, slug: str) -> Quiz | None:
        quiz = self._quizzes.get(slug)
        if quiz is None or not quiz.is_published:
            return None
        return quiz

    # --- AnalyticsTracker -----------------------------------------------------

    def record_impression(self, quiz_id: str) -> None:
        with self._lock:
            self.impressions[quiz_id] += 1

    def record_completion(self, quiz_id: str) -> None:
        with self._lock:
            self.completions[quiz_id] += 1

    def record_drop_off(self, quiz_id: str, element_id: str) -> None:
        with self._lock:
            self.drop_offs[(quiz_id, element_id)] += 1

    # --- LeadWriter -----------------------------------------------------------

    def save_lead(self, lead: Lead) -> None:
        with self._lock:
            self.leads[lead.id] = lead
            self.lead_writes.append(lead)

    def leads_for(self, quiz_id: str) -> list[Lead]:
        return [lead for lead in self.leads.values() if lead.quiz_id == quiz_id]


@dataclass
class RecordingWebhookDispatcher:
    """Keeps every dispatched payload instead of sending it."""

    sent: list[tuple[str, dict[str, Any]]] = field(default_factory=list)

    def dispatch(self, url: str, payload: dict[str, Any]) -> None:
        self.sent.append((url, payload))
