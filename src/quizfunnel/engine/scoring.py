"""Scoring model: maps one answer to a score delta and a tag set."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from quizfunnel.model.element import Element, ElementKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreContribution:
    """What a single answer adds to the session totals."""

    delta: float = 0
    tags: tuple[str, ...] = ()


NO_CONTRIBUTION = ScoreContribution()


def apply_answer(element: Element, value: Any) -> ScoreContribution:
    """Compute the contribution of *value* given as answer to *element*.

    - choice elements: the chosen option's points and tags
    - range slider: ``value * score_weight``
    - every other kind contributes nothing

    Never raises: an unknown option id or a non-numeric slider value
    contributes nothing.
    """
    if element.is_choice:
        option = element.option(value)
        if option is None:
            logger.debug("No option %r on element %s; scoring as zero", value, element.id)
            return NO_CONTRIBUTION
        return ScoreContribution(delta=option.points, tags=option.tags)

    if element.kind is ElementKind.RANGE_SLIDER:
        if isinstance(value, bool):
            return NO_CONTRIBUTION
        try:
            return ScoreContribution(delta=float(value) * element.score_weight)
        except (TypeError, ValueError):
            logger.debug("Non-numeric slider value %r on element %s", value, element.id)
            return NO_CONTRIBUTION

    return NO_CONTRIBUTION
