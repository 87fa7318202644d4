"""Quiz execution engine: scoring, flow, results, progress and the session."""

from quizfunnel.engine.clock import Scheduler, ThreadingScheduler, VirtualScheduler
from quizfunnel.engine.flow import resolve_next
from quizfunnel.engine.progress import Phase, ProgressSimulator
from quizfunnel.engine.results import evaluate, first_match
from quizfunnel.engine.scoring import ScoreContribution, apply_answer
from quizfunnel.engine.session import QuizSession, SessionState

__all__ = [
    "Scheduler",
    "ThreadingScheduler",
    "VirtualScheduler",
    "resolve_next",
    "Phase",
    "ProgressSimulator",
    "evaluate",
    "first_match",
    "ScoreContribution",
    "apply_answer",
    "QuizSession",
    "SessionState",
]
