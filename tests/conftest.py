"""Shared quiz definitions for the test suite."""

import copy

import pytest

from quizfunnel.model.quiz import Quiz

FUNNEL = {
    "id": "quiz-1",
    "title": "Marketing maturity",
    "slug": "marketing-maturity",
    "isPublished": True,
    "elements": [
        {"id": "welcome", "type": "welcome", "title": "Welcome"},
        {
            "id": "q1",
            "type": "multiple-choice",
            "title": "How do you run campaigns?",
            "required": True,
            "options": [
                {"id": "optA", "text": "Ad hoc", "points": 10, "tags": ["x"]},
                {"id": "optB", "text": "With a plan", "points": 30, "tags": ["y"]},
            ],
        },
        {
            "id": "lead",
            "type": "lead-form",
            "title": "Where do we send your result?",
            "required": True,
            "fields": ["name", "email", "whatsapp"],
        },
        {"id": "load", "type": "fake-loading", "title": "Analysing", "pauseAt": 85},
        {"id": "res", "type": "result", "title": "Your result"},
    ],
    "resultRules": [
        {
            "id": "r-low",
            "condition": {"type": "score", "minScore": 0, "maxScore": 20},
            "profile": "Low",
        },
        {
            "id": "r-high",
            "condition": {"type": "score", "minScore": 21, "maxScore": 100},
            "profile": "High",
        },
    ],
    "tracking": {},
}


@pytest.fixture
def funnel_data() -> dict:
    return copy.deepcopy(FUNNEL)


@pytest.fixture
def funnel_quiz(funnel_data) -> Quiz:
    return Quiz.from_dict(funnel_data)
