"""Tests for element and option decoding."""

import pytest

from quizfunnel.errors import DefinitionError
from quizfunnel.model.element import LEAD_FIELDS, Element, ElementKind, Option


class TestOptionFromDict:
    def test_camel_case_fields(self):
        opt = Option.from_dict(
            {"id": "a", "text": "Yes", "points": 20, "tags": ["hot"], "nextElementId": "q9"}
        )
        assert opt.points == 20
        assert opt.tags == ("hot",)
        assert opt.next_element_id == "q9"

    def test_missing_points_is_zero(self):
        assert Option.from_dict({"id": "a"}).points == 0

    def test_missing_id_raises(self):
        with pytest.raises(DefinitionError):
            Option.from_dict({"text": "no id"})


class TestElementFromDict:
    def test_kind_from_wire_value(self):
        el = Element.from_dict({"id": "e", "type": "image-selection"})
        assert el.kind is ElementKind.IMAGE_SELECTION
        assert el.is_choice

    def test_unknown_kind_raises(self):
        with pytest.raises(DefinitionError):
            Element.from_dict({"id": "e", "type": "hologram"})

    def test_slider_defaults(self):
        el = Element.from_dict({"id": "s", "type": "range-slider"})
        assert (el.min, el.max, el.step, el.score_weight) == (0, 100, 1, 1)

    def test_zero_score_weight_means_default(self):
        el = Element.from_dict({"id": "s", "type": "range-slider", "scoreWeight": 0})
        assert el.score_weight == 1

    def test_fractional_score_weight(self):
        el = Element.from_dict({"id": "s", "type": "range-slider", "scoreWeight": 0.5})
        assert el.score_weight == 0.5

    def test_fake_loading_defaults(self):
        el = Element.from_dict({"id": "l", "type": "fake-loading"})
        assert el.pause_at == 90
        assert el.duration is None

    def test_lead_form_fields_default(self):
        el = Element.from_dict({"id": "f", "type": "lead-form"})
        assert el.fields == LEAD_FIELDS

    def test_to_dict_keeps_branching(self):
        data = {
            "id": "q",
            "type": "multiple-choice",
            "title": "Q",
            "required": True,
            "nextElementId": "end",
            "options": [{"id": "a", "text": "A", "points": 5, "nextElementId": "x"}],
        }
        again = Element.from_dict(Element.from_dict(data).to_dict())
        assert again.next_element_id == "end"
        assert again.options[0].next_element_id == "x"
        assert again.required


class TestElementHelpers:
    def test_option_lookup(self):
        el = Element(
            id="q",
            kind=ElementKind.MULTIPLE_CHOICE,
            options=(Option(id="a"), Option(id="b", points=3)),
        )
        assert el.option("b").points == 3
        assert el.option("zzz") is None
        assert el.option(None) is None

    @pytest.mark.parametrize(
        "kind", [ElementKind.WELCOME, ElementKind.FAKE_LOADING, ElementKind.RESULT]
    )
    def test_always_satisfied_kinds(self, kind):
        assert Element(id="e", kind=kind).always_satisfied

    def test_question_not_always_satisfied(self):
        assert not Element(id="e", kind=ElementKind.TEXT_INPUT).always_satisfied

    def test_empty_id_rejected(self):
        with pytest.raises(ValueError):
            Element(id="", kind=ElementKind.WELCOME)
