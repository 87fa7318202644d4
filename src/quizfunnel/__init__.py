"""quizfunnel: execution engine for branching lead-capture quiz funnels."""

__version__ = "0.1.0"

from quizfunnel.config import FunnelConfig, ProfileThresholds, ProgressConfig
from quizfunnel.engine.session import QuizSession, SessionState
from quizfunnel.model.quiz import Quiz

__all__ = [
    "__version__",
    "FunnelConfig",
    "ProfileThresholds",
    "ProgressConfig",
    "Quiz",
    "QuizSession",
    "SessionState",
]
