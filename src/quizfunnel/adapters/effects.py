"""Side-effect adapter injected into :class:`~quizfunnel.engine.session.QuizSession`.

Every collaborator call goes through :class:`FunnelEffects`. A failing
collaborator is logged and reported as a ``SideEffectFailed`` event; the
exception never reaches the session, so the respondent always gets to the
result screen.
"""

from __future__ import annotations

import logging
from typing import Any, Callable

from quizfunnel.adapters.base import AnalyticsTracker, LeadWriter, WebhookDispatcher
from quizfunnel.events.bus import EventBus
from quizfunnel.events.types import SideEffectFailed
from quizfunnel.model.lead import Lead

logger = logging.getLogger(__name__)


class FunnelEffects:
    """Best-effort wrapper around the tracker, lead writer and webhook dispatcher.

    Any collaborator may be None, in which case the matching effect is
    skipped. ``enabled=False`` turns every effect into a no-op (preview
    mode).
    """

    def __init__(
        self,
        tracker: AnalyticsTracker | None = None,
        leads: LeadWriter | None = None,
        webhooks: WebhookDispatcher | None = None,
        *,
        event_bus: EventBus | None = None,
        enabled: bool = True,
    ) -> None:
        self.tracker = tracker
        self.leads = leads
        self.webhooks = webhooks
        self.event_bus = event_bus
        self.enabled = enabled

    @classmethod
    def disabled(cls) -> FunnelEffects:
        """Effects for preview runs: nothing is tracked, stored or sent."""
        return cls(enabled=False)

    # ------------------------------------------------------------------
    # Effects
    # ------------------------------------------------------------------

    def record_impression(self, quiz_id: str) -> bool:
        if self.tracker is None:
            return self._skip("record_impression")
        return self._run("record_impression", lambda: self.tracker.record_impression(quiz_id))

    def record_completion(self, quiz_id: str) -> bool:
        if self.tracker is None:
            return self._skip("record_completion")
        return self._run("record_completion", lambda: self.tracker.record_completion(quiz_id))

    def record_drop_off(self, quiz_id: str, element_id: str) -> bool:
        if self.tracker is None:
            return self._skip("record_drop_off")
        return self._run(
            "record_drop_off", lambda: self.tracker.record_drop_off(quiz_id, element_id)
        )

    def save_lead(self, lead: Lead) -> bool:
        if self.leads is None:
            return self._skip("save_lead")
        return self._run("save_lead", lambda: self.leads.save_lead(lead))

    def dispatch_webhook(self, url: str, payload: dict[str, Any]) -> bool:
        if not url or self.webhooks is None:
            return self._skip("dispatch_webhook")
        return self._run("dispatch_webhook", lambda: self.webhooks.dispatch(url, payload))

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _skip(self, operation: str) -> bool:
        logger.debug("%s skipped: no collaborator configured", operation)
        return False

    def _run(self, operation: str, call: Callable[[], None]) -> bool:
        """Run *call*; return True on success, False if skipped or failed."""
        if not self.enabled:
            return False
        try:
            call()
        except Exception as exc:
            logger.warning("%s failed: %s", operation, exc)
            if self.event_bus is not None:
                self.event_bus.emit(SideEffectFailed(operation=operation, error=str(exc)))
            return False
        return True
