"""Event types emitted while a respondent runs through a quiz."""

from dataclasses import dataclass

from quizfunnel.model.lead import AnswerValue
from quizfunnel.model.result import FinalResult


@dataclass(frozen=True)
class SessionStarted:
    quiz_id: str
    lead_id: str


@dataclass(frozen=True)
class AnswerRecorded:
    element_id: str
    value: AnswerValue
    score: float


@dataclass(frozen=True)
class ElementEntered:
    index: int
    element_id: str


@dataclass(frozen=True)
class LeadCaptured:
    lead_id: str
    completed: bool


@dataclass(frozen=True)
class AnalysisProgressed:
    percent: int
    phase: str


@dataclass(frozen=True)
class AnalysisCompleted:
    result: FinalResult


@dataclass(frozen=True)
class ResultReached:
    result: FinalResult


@dataclass(frozen=True)
class SideEffectFailed:
    operation: str
    error: str


@dataclass(frozen=True)
class SessionAbandoned:
    quiz_id: str
    element_id: str
