"""Result evaluation: ordered, first-match-wins rule matching."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from quizfunnel.config import DEFAULT_THRESHOLDS, ProfileThresholds
from quizfunnel.model.quiz import ResultRule
from quizfunnel.model.result import FinalResult

__all__ = ["evaluate", "first_match"]


def first_match(
    score: float, tags: Iterable[str], rules: Sequence[ResultRule]
) -> ResultRule | None:
    """Return the first rule, in list order, whose condition holds.

    A later rule is never preferred over an earlier one, even if its
    range is narrower.
    """
    tag_set = frozenset(tags)
    for rule in rules:
        if rule.condition.matches(score, tag_set):
            return rule
    return None


def evaluate(
    score: float,
    tags: Iterable[str],
    rules: Sequence[ResultRule],
    thresholds: ProfileThresholds = DEFAULT_THRESHOLDS,
) -> FinalResult:
    """Evaluate *rules* against the accumulated score and tags.

    Falls back to the threshold profile (no redirect) when no rule matches.
    """
    tag_tuple = tuple(tags)
    rule = first_match(score, tag_tuple, rules)
    if rule is not None:
        return FinalResult(
            score=score,
            tags=tag_tuple,
            profile=rule.profile,
            redirect_url=rule.redirect_url or None,
            rule_id=rule.id,
        )
    return FinalResult(
        score=score,
        tags=tag_tuple,
        profile=thresholds.profile_for(score),
        redirect_url=None,
    )
