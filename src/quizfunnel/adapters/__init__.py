"""Collaborator protocols and implementations for quiz side effects."""

from quizfunnel.adapters.base import (
    AnalyticsTracker,
    LeadWriter,
    QuizLoader,
    WebhookDispatcher,
)
from quizfunnel.adapters.effects import FunnelEffects
from quizfunnel.adapters.memory import InMemoryQuizStore, RecordingWebhookDispatcher
from quizfunnel.adapters.payload import build_webhook_payload
from quizfunnel.adapters.webhook import HttpWebhookDispatcher

__all__ = [
    "AnalyticsTracker",
    "LeadWriter",
    "QuizLoader",
    "WebhookDispatcher",
    "FunnelEffects",
    "InMemoryQuizStore",
    "RecordingWebhookDispatcher",
    "build_webhook_payload",
    "HttpWebhookDispatcher",
]
