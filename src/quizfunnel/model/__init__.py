"""quizfunnel model layer -- public type re-exports."""

from quizfunnel.model.diagnostic import Diagnostic, Severity
from quizfunnel.model.element import CHOICE_KINDS, Element, ElementKind, Option
from quizfunnel.model.lead import AnswerValue, Lead, LeadContact, UtmParams
from quizfunnel.model.quiz import (
    Condition,
    Quiz,
    ResultRule,
    ScoreCondition,
    TagsCondition,
    TrackingConfig,
)
from quizfunnel.model.result import FinalResult
from quizfunnel.model.snapshot import ProgressSnapshot

__all__ = [
    # element
    "ElementKind",
    "Element",
    "Option",
    "CHOICE_KINDS",
    # quiz
    "Quiz",
    "ResultRule",
    "Condition",
    "ScoreCondition",
    "TagsCondition",
    "TrackingConfig",
    # lead
    "AnswerValue",
    "Lead",
    "LeadContact",
    "UtmParams",
    # result
    "FinalResult",
    # snapshot
    "ProgressSnapshot",
    # diagnostic
    "Severity",
    "Diagnostic",
]
