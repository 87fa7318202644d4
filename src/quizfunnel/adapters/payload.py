"""Webhook payload builder."""

from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from typing import Any

from quizfunnel.model.lead import AnswerValue, LeadContact, UtmParams
from quizfunnel.model.quiz import Quiz
from quizfunnel.model.result import FinalResult


def build_webhook_payload(
    quiz: Quiz,
    contact: LeadContact,
    result: FinalResult,
    answers: Mapping[str, AnswerValue],
    utm: UtmParams,
    timestamp: datetime | None = None,
) -> dict[str, Any]:
    """Build the JSON body posted to the quiz's webhook URL.

    Absent UTM values are sent as ``null``.
    """
    stamp = timestamp or datetime.now(timezone.utc)
    return {
        "quizId": quiz.id,
        "quizTitle": quiz.title,
        "lead": {
            "name": contact.name,
            "email": contact.email,
            "whatsapp": contact.whatsapp,
            "score": result.score,
            "tags": list(result.tags),
            "profile": result.profile,
        },
        "answers": dict(answers),
        "timestamp": stamp.isoformat(),
        "utm": utm.to_dict(),
    }
