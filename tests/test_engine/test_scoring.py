"""Tests for per-answer score contributions."""

import pytest

from quizfunnel.engine.scoring import NO_CONTRIBUTION, apply_answer
from quizfunnel.model.element import Element, ElementKind, Option


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _choice(kind: ElementKind = ElementKind.MULTIPLE_CHOICE) -> Element:
    return Element(
        id="q1",
        kind=kind,
        options=(
            Option(id="a", points=20, tags=("hot", "vip")),
            Option(id="b", points=0),
        ),
    )


def _slider(weight: float = 1) -> Element:
    return Element(id="s", kind=ElementKind.RANGE_SLIDER, score_weight=weight)


# ---------------------------------------------------------------------------
# Choice elements
# ---------------------------------------------------------------------------

class TestChoiceScoring:
    def test_option_points_and_tags(self):
        contribution = apply_answer(_choice(), "a")
        assert contribution.delta == 20
        assert contribution.tags == ("hot", "vip")

    def test_points_independent_of_tags(self):
        assert apply_answer(_choice(), "b").delta == 0
        assert apply_answer(_choice(), "a").delta == 20

    def test_image_selection_scores_like_multiple_choice(self):
        assert apply_answer(_choice(ElementKind.IMAGE_SELECTION), "a").delta == 20

    def test_unknown_option_contributes_nothing(self):
        assert apply_answer(_choice(), "gone") == NO_CONTRIBUTION


# ---------------------------------------------------------------------------
# Range slider
# ---------------------------------------------------------------------------

class TestSliderScoring:
    def test_value_times_weight(self):
        assert apply_answer(_slider(0.5), 40).delta == 20

    def test_default_weight(self):
        assert apply_answer(_slider(), 73).delta == 73

    def test_numeric_string(self):
        assert apply_answer(_slider(2), "15").delta == 30

    def test_non_numeric_is_zero(self):
        assert apply_answer(_slider(), "lots") == NO_CONTRIBUTION

    def test_bool_is_not_a_number(self):
        assert apply_answer(_slider(), True) == NO_CONTRIBUTION

    def test_slider_has_no_tags(self):
        assert apply_answer(_slider(), 10).tags == ()


# ---------------------------------------------------------------------------
# Everything else
# ---------------------------------------------------------------------------

class TestNonScoringKinds:
    @pytest.mark.parametrize(
        "kind",
        [
            ElementKind.WELCOME,
            ElementKind.TEXT_INPUT,
            ElementKind.LEAD_FORM,
            ElementKind.VIDEO_ASK,
            ElementKind.COUNTDOWN,
            ElementKind.RESULT,
        ],
    )
    def test_contributes_nothing(self, kind):
        assert apply_answer(Element(id="e", kind=kind), "anything") == NO_CONTRIBUTION
