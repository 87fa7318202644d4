"""Collaborator protocols consumed by the quiz session.

Concrete implementations live in :mod:`quizfunnel.adapters.memory`,
:mod:`quizfunnel.adapters.webhook` and :mod:`quizfunnel.store`.
"""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from quizfunnel.model.lead import Lead
from quizfunnel.model.quiz import Quiz


@runtime_checkable
class QuizLoader(Protocol):
    def load_quiz_by_slug(self, slug: str) -> Quiz | None:
        """Return the published quiz for *slug*, or None."""
        ...


@runtime_checkable
class AnalyticsTracker(Protocol):
    """Fire-and-forget counters for the funnel analytics dashboard."""

    def record_impression(self, quiz_id: str) -> None: ...

    def record_completion(self, quiz_id: str) -> None: ...

    def record_drop_off(self, quiz_id: str, element_id: str) -> None: ...


@runtime_checkable
class LeadWriter(Protocol):
    def save_lead(self, lead: Lead) -> None:
        """Insert *lead*, or replace the stored lead with the same id."""
        ...


@runtime_checkable
class WebhookDispatcher(Protocol):
    def dispatch(self, url: str, payload: dict[str, Any]) -> None:
        """POST *payload* as JSON to *url*. Raises on failure."""
        ...
