"""Flow resolution: picks the element that follows the current one.

Priority, first hit wins:

1. Option jump - the selected option of a choice element names a target
2. Element jump - the element itself names a default target
3. Sequential - the next element in list order, or None at the end

A jump target that does not name an element of the quiz is ignored and
resolution falls through to the next step.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence

from quizfunnel.model.element import Element
from quizfunnel.model.lead import AnswerValue

logger = logging.getLogger(__name__)


def resolve_next(
    current_index: int,
    answers: Mapping[str, AnswerValue],
    elements: Sequence[Element],
) -> int | None:
    """Return the index of the element to show after *current_index*.

    Returns None when the current element is the last one and no jump
    applies; the caller must not advance.
    """
    if not 0 <= current_index < len(elements):
        return None
    current = elements[current_index]

    # Step 1: option-level jump
    if current.is_choice:
        option = current.option(answers.get(current.id))
        if option is not None and option.next_element_id:
            target = _index_of(option.next_element_id, elements)
            if target is not None:
                return target
            logger.debug(
                "Option %s on %s jumps to unknown element %r; ignoring",
                option.id, current.id, option.next_element_id,
            )

    # Step 2: element-level jump
    if current.next_element_id:
        target = _index_of(current.next_element_id, elements)
        if target is not None:
            return target
        logger.debug(
            "Element %s jumps to unknown element %r; ignoring",
            current.id, current.next_element_id,
        )

    # Step 3: sequential
    if current_index + 1 < len(elements):
        return current_index + 1
    return None


def _index_of(element_id: str, elements: Sequence[Element]) -> int | None:
    for i, element in enumerate(elements):
        if element.id == element_id:
            return i
    return None
