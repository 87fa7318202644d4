"""Run the validation rules over a quiz and order what they find."""

from __future__ import annotations

from collections import Counter
from typing import Callable

from quizfunnel.errors import FunnelError
from quizfunnel.model.diagnostic import Diagnostic, Severity
from quizfunnel.model.quiz import Quiz
from quizfunnel.validation.rules import ALL_RULES

RuleFunc = Callable[[Quiz], list[Diagnostic]]


class ValidationError(FunnelError):
    """A quiz has ERROR diagnostics and must not be stored or played."""

    def __init__(self, quiz_id: str, diagnostics: list[Diagnostic]) -> None:
        errors = [d for d in diagnostics if d.is_error]
        super().__init__(
            f"Quiz {quiz_id!r} has {len(errors)} error(s): "
            + "; ".join(str(d) for d in errors)
        )
        self.quiz_id = quiz_id
        self.diagnostics = errors


def validate(quiz: Quiz, extra_rules: list[RuleFunc] | None = None) -> list[Diagnostic]:
    """Run every rule against *quiz*.

    Diagnostics come back errors first, then warnings, then info. Within a
    severity they follow the quiz: quiz-wide findings, then elements in list
    order, then result rules in evaluation order.
    """
    rules: list[RuleFunc] = [*ALL_RULES, *(extra_rules or ())]
    diagnostics = [d for rule in rules for d in rule(quiz)]
    position = _positions(quiz)
    return sorted(diagnostics, key=lambda d: (d.severity.rank, position(d)))


def validate_or_raise(
    quiz: Quiz, extra_rules: list[RuleFunc] | None = None
) -> list[Diagnostic]:
    """Like :func:`validate`, but raise :class:`ValidationError` on any ERROR.

    Returns the remaining warnings and info diagnostics.
    """
    diagnostics = validate(quiz, extra_rules=extra_rules)
    if any(d.is_error for d in diagnostics):
        raise ValidationError(quiz.id, diagnostics)
    return diagnostics


def count_by_severity(diagnostics: list[Diagnostic]) -> Counter[Severity]:
    return Counter(d.severity for d in diagnostics)


def _positions(quiz: Quiz) -> Callable[[Diagnostic], int]:
    element_index = {}
    for i, element in enumerate(quiz.elements):
        element_index.setdefault(element.id, i)
    rule_index = {}
    for i, rule in enumerate(quiz.result_rules):
        rule_index.setdefault(rule.id, i)
    offset = len(quiz.elements)

    def position(diagnostic: Diagnostic) -> int:
        if diagnostic.element_id in element_index:
            return element_index[diagnostic.element_id]
        if diagnostic.rule_id in rule_index:
            return offset + rule_index[diagnostic.rule_id]
        return -1

    return position
