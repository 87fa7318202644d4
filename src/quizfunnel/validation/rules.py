"""Validation rules for quiz definitions.

Each rule is a function taking a Quiz and returning a list of Diagnostic
objects describing any issues found. The engine tolerates everything
reported here at run time; the rules exist so authors find problems before
respondents do.
"""

from __future__ import annotations

from collections import Counter

from quizfunnel.model.diagnostic import Diagnostic, Severity
from quizfunnel.model.element import ElementKind
from quizfunnel.model.quiz import Quiz, ScoreCondition, TagsCondition


# ---------------------------------------------------------------------------
# Structural rules (ERROR severity)
# ---------------------------------------------------------------------------


def check_not_empty(quiz: Quiz) -> list[Diagnostic]:
    """A quiz needs at least one element."""
    if quiz.elements:
        return []
    return [
        Diagnostic(
            rule="check_not_empty",
            severity=Severity.ERROR,
            message="Quiz has no elements.",
            fix="Add at least a welcome and a result element.",
        )
    ]


def check_unique_element_ids(quiz: Quiz) -> list[Diagnostic]:
    counts = Counter(e.id for e in quiz.elements)
    return [
        Diagnostic(
            rule="check_unique_element_ids",
            severity=Severity.ERROR,
            message=f"Element id '{element_id}' is used {n} times.",
            element_id=element_id,
            fix="Give every element its own id.",
        )
        for element_id, n in counts.items()
        if n > 1
    ]


def check_unique_option_ids(quiz: Quiz) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for element in quiz.elements:
        counts = Counter(o.id for o in element.options)
        for option_id, n in counts.items():
            if n > 1:
                diagnostics.append(
                    Diagnostic(
                        rule="check_unique_option_ids",
                        severity=Severity.ERROR,
                        message=f"Option id '{option_id}' is used {n} times.",
                        element_id=element.id,
                        option_id=option_id,
                        fix="Give every option of this element its own id.",
                    )
                )
    return diagnostics


def check_choice_has_options(quiz: Quiz) -> list[Diagnostic]:
    """Multiple-choice and image-selection elements need something to pick."""
    return [
        Diagnostic(
            rule="check_choice_has_options",
            severity=Severity.ERROR,
            message=f"Element '{e.id}' ({e.kind.value}) has no options.",
            element_id=e.id,
            fix="Add at least one option.",
        )
        for e in quiz.elements
        if e.is_choice and not e.options
    ]


def check_slider_range(quiz: Quiz) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for e in quiz.elements:
        if e.kind is not ElementKind.RANGE_SLIDER:
            continue
        if e.min >= e.max:
            diagnostics.append(
                Diagnostic(
                    rule="check_slider_range",
                    severity=Severity.ERROR,
                    message=f"Slider min ({e.min:g}) must be below max ({e.max:g}).",
                    element_id=e.id,
                )
            )
        if e.step <= 0:
            diagnostics.append(
                Diagnostic(
                    rule="check_slider_range",
                    severity=Severity.ERROR,
                    message=f"Slider step must be positive, got {e.step:g}.",
                    element_id=e.id,
                )
            )
    return diagnostics


def check_pause_at(quiz: Quiz) -> list[Diagnostic]:
    return [
        Diagnostic(
            rule="check_pause_at",
            severity=Severity.ERROR,
            message=f"pauseAt must be between 1 and 100, got {e.pause_at}.",
            element_id=e.id,
        )
        for e in quiz.elements
        if e.kind is ElementKind.FAKE_LOADING and not 1 <= e.pause_at <= 100
    ]


def check_score_rule_bounds(quiz: Quiz) -> list[Diagnostic]:
    return [
        Diagnostic(
            rule="check_score_rule_bounds",
            severity=Severity.ERROR,
            message=(
                f"Score range {r.condition.min_score:g}-{r.condition.max_score:g} is empty."
            ),
            rule_id=r.id,
            fix="Swap minScore and maxScore.",
        )
        for r in quiz.result_rules
        if isinstance(r.condition, ScoreCondition)
        and r.condition.min_score > r.condition.max_score
    ]


# ---------------------------------------------------------------------------
# Flow rules (WARNING severity)
# ---------------------------------------------------------------------------


def check_jump_targets_exist(quiz: Quiz) -> list[Diagnostic]:
    """Jump targets should name an element; dangling ones fall back to list order."""
    ids = {e.id for e in quiz.elements}
    diagnostics: list[Diagnostic] = []
    for e in quiz.elements:
        if e.next_element_id and e.next_element_id not in ids:
            diagnostics.append(
                Diagnostic(
                    rule="check_jump_targets_exist",
                    severity=Severity.WARNING,
                    message=f"Jumps to unknown element '{e.next_element_id}'.",
                    element_id=e.id,
                    fix="Point the jump at an existing element or clear it.",
                )
            )
        for o in e.options:
            if o.next_element_id and o.next_element_id not in ids:
                diagnostics.append(
                    Diagnostic(
                        rule="check_jump_targets_exist",
                        severity=Severity.WARNING,
                        message=f"Option '{o.id}' jumps to unknown element '{o.next_element_id}'.",
                        element_id=e.id,
                        option_id=o.id,
                        fix="Point the jump at an existing element or clear it.",
                    )
                )
    return diagnostics


def check_self_jumps(quiz: Quiz) -> list[Diagnostic]:
    diagnostics: list[Diagnostic] = []
    for e in quiz.elements:
        targets = [e.next_element_id] + [o.next_element_id for o in e.options]
        if e.id in targets:
            diagnostics.append(
                Diagnostic(
                    rule="check_self_jumps",
                    severity=Severity.WARNING,
                    message=f"Element '{e.id}' jumps to itself.",
                    element_id=e.id,
                )
            )
    return diagnostics


def check_ends_with_result(quiz: Quiz) -> list[Diagnostic]:
    if not quiz.elements or quiz.elements[-1].kind is ElementKind.RESULT:
        return []
    return [
        Diagnostic(
            rule="check_ends_with_result",
            severity=Severity.WARNING,
            message="Quiz does not end with a result element.",
            element_id=quiz.elements[-1].id,
            fix="Add a result element at the end.",
        )
    ]


def check_reachability(quiz: Quiz) -> list[Diagnostic]:
    """Every element should be reachable from the first one."""
    if not quiz.elements:
        return []
    seen = {0}
    queue = [0]
    while queue:
        i = queue.pop()
        for j in _successors(quiz, i):
            if j not in seen:
                seen.add(j)
                queue.append(j)
    return [
        Diagnostic(
            rule="check_reachability",
            severity=Severity.WARNING,
            message=f"Element '{e.id}' can never be reached.",
            element_id=e.id,
        )
        for i, e in enumerate(quiz.elements)
        if i not in seen
    ]


def check_tag_rules_not_empty(quiz: Quiz) -> list[Diagnostic]:
    """A tag rule with no required tags matches every respondent."""
    return [
        Diagnostic(
            rule="check_tag_rules_not_empty",
            severity=Severity.WARNING,
            message="Tag rule has no required tags and always matches.",
            rule_id=r.id,
        )
        for r in quiz.result_rules
        if isinstance(r.condition, TagsCondition) and not r.condition.required_tags
    ]


def _successors(quiz: Quiz, index: int) -> set[int]:
    element = quiz.elements[index]
    fallback: set[int] = set()
    target = quiz.index_of(element.next_element_id)
    if target is not None:
        fallback.add(target)
    elif index + 1 < len(quiz.elements):
        fallback.add(index + 1)

    if not element.is_choice or not element.options:
        return fallback
    result: set[int] = set()
    for option in element.options:
        option_target = quiz.index_of(option.next_element_id)
        if option_target is not None:
            result.add(option_target)
        else:
            result |= fallback
    return result


ALL_RULES = [
    check_not_empty,
    check_unique_element_ids,
    check_unique_option_ids,
    check_choice_has_options,
    check_slider_range,
    check_pause_at,
    check_score_rule_bounds,
    check_jump_targets_exist,
    check_self_jumps,
    check_ends_with_result,
    check_reachability,
    check_tag_rules_not_empty,
]
