"""Event system: bus and event types for the quiz session lifecycle."""

from quizfunnel.events.bus import EventBus
from quizfunnel.events.types import (
    AnalysisCompleted,
    AnalysisProgressed,
    AnswerRecorded,
    ElementEntered,
    LeadCaptured,
    ResultReached,
    SessionAbandoned,
    SessionStarted,
    SideEffectFailed,
)

__all__ = [
    "EventBus",
    "AnalysisCompleted",
    "AnalysisProgressed",
    "AnswerRecorded",
    "ElementEntered",
    "LeadCaptured",
    "ResultReached",
    "SessionAbandoned",
    "SessionStarted",
    "SideEffectFailed",
]
