"""Progress snapshot: serialisable in-progress session state for resume support."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from quizfunnel.model.lead import AnswerValue, LeadContact


@dataclass
class ProgressSnapshot:
    """Where a respondent stopped, so the run can be resumed later.

    Score and tags are not stored; they are recomputed from ``answers``
    when the snapshot is restored.
    """

    quiz_id: str
    timestamp: str
    current_index: int = 0
    answers: dict[str, AnswerValue] = field(default_factory=dict)
    contact: LeadContact = field(default_factory=LeadContact)

    def is_expired(self, max_age_seconds: float, now: datetime | None = None) -> bool:
        now = now or datetime.now(timezone.utc)
        taken = datetime.fromisoformat(self.timestamp)
        return (now - taken).total_seconds() > max_age_seconds

    # --- persistence ----------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        return {
            "quiz_id": self.quiz_id,
            "timestamp": self.timestamp,
            "current_index": self.current_index,
            "answers": self.answers,
            "contact": self.contact.to_dict(),
        }

    def save(self, path: Path) -> None:
        """Serialise to JSON and write to *path*."""
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(self.to_dict(), indent=2), encoding="utf-8")

    @classmethod
    def load(cls, path: Path) -> ProgressSnapshot:
        """Deserialise a snapshot from a JSON file at *path*."""
        data = json.loads(path.read_text(encoding="utf-8"))
        return cls(
            quiz_id=data["quiz_id"],
            timestamp=data["timestamp"],
            current_index=data.get("current_index", 0),
            answers=data.get("answers", {}),
            contact=LeadContact(**data.get("contact", {})),
        )

    # --- factory --------------------------------------------------------------

    @classmethod
    def create_now(
        cls,
        quiz_id: str,
        current_index: int = 0,
        answers: dict[str, AnswerValue] | None = None,
        contact: LeadContact | None = None,
    ) -> ProgressSnapshot:
        """Create a snapshot stamped with the current UTC time."""
        return cls(
            quiz_id=quiz_id,
            timestamp=datetime.now(timezone.utc).isoformat(),
            current_index=current_index,
            answers=dict(answers or {}),
            contact=contact or LeadContact(),
        )
