"""Tests for the best-effort side-effect adapter."""

import logging

from quizfunnel.adapters.effects import FunnelEffects
from quizfunnel.adapters.memory import InMemoryQuizStore, RecordingWebhookDispatcher
from quizfunnel.events.bus import EventBus
from quizfunnel.events.types import SideEffectFailed
from quizfunnel.model.lead import Lead


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

class _FailingTracker:
    def record_impression(self, quiz_id):
        raise ConnectionError("analytics offline")

    def record_completion(self, quiz_id):
        raise ConnectionError("analytics offline")

    def record_drop_off(self, quiz_id, element_id):
        raise ConnectionError("analytics offline")


def _lead() -> Lead:
    return Lead(id="l1", quiz_id="q")


# ---------------------------------------------------------------------------
# Success path
# ---------------------------------------------------------------------------

class TestDelegation:
    def test_calls_collaborators(self):
        store = InMemoryQuizStore()
        hooks = RecordingWebhookDispatcher()
        effects = FunnelEffects(store, store, hooks)
        assert effects.record_impression("q")
        assert effects.record_completion("q")
        assert effects.record_drop_off("q", "e1")
        assert effects.save_lead(_lead())
        assert effects.dispatch_webhook("https://hooks.example.com", {"a": 1})
        assert store.impressions["q"] == 1
        assert store.completions["q"] == 1
        assert store.drop_offs[("q", "e1")] == 1
        assert "l1" in store.leads
        assert hooks.sent == [("https://hooks.example.com", {"a": 1})]

    def test_missing_collaborators_are_skipped(self):
        effects = FunnelEffects()
        assert not effects.record_impression("q")
        assert not effects.save_lead(_lead())
        assert not effects.dispatch_webhook("https://hooks.example.com", {})

    def test_empty_webhook_url_skipped(self):
        hooks = RecordingWebhookDispatcher()
        assert not FunnelEffects(webhooks=hooks).dispatch_webhook("", {})
        assert hooks.sent == []


# ---------------------------------------------------------------------------
# Failures
# ---------------------------------------------------------------------------

class TestFailures:
    def test_failure_is_swallowed_and_logged(self, caplog):
        effects = FunnelEffects(tracker=_FailingTracker())
        with caplog.at_level(logging.WARNING, logger="quizfunnel.adapters.effects"):
            assert effects.record_impression("q") is False
        assert "record_impression failed: analytics offline" in caplog.text

    def test_failure_emits_event(self):
        bus = EventBus()
        seen = []
        bus.subscribe(SideEffectFailed, seen.append)
        effects = FunnelEffects(tracker=_FailingTracker(), event_bus=bus)
        effects.record_completion("q")
        assert seen == [SideEffectFailed(operation="record_completion", error="analytics offline")]


# ---------------------------------------------------------------------------
# Preview
# ---------------------------------------------------------------------------

class TestDisabled:
    def test_disabled_has_no_collaborators(self):
        effects = FunnelEffects.disabled()
        assert effects.enabled is False
        assert not effects.record_impression("q")

    def test_disabled_never_calls(self):
        store = InMemoryQuizStore()
        effects = FunnelEffects(store, store, enabled=False)
        assert not effects.record_impression("q")
        assert not effects.save_lead(_lead())
        assert store.impressions["q"] == 0
        assert store.leads == {}
