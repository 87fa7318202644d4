"""Lead model: respondent contact data, attribution and computed outcome."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qs, urlsplit

AnswerValue = str | int | float


@dataclass(frozen=True)
class UtmParams:
    """Campaign attribution read from the landing page query string."""

    source: str | None = None
    medium: str | None = None
    campaign: str | None = None

    @classmethod
    def from_query_string(cls, query: str) -> UtmParams:
        params = parse_qs(query.lstrip("?"))

        def first(key: str) -> str | None:
            values = params.get(key)
            return values[0] if values else None

        return cls(
            source=first("utm_source"),
            medium=first("utm_medium"),
            campaign=first("utm_campaign"),
        )

    @classmethod
    def from_url(cls, url: str) -> UtmParams:
        return cls.from_query_string(urlsplit(url).query)

    def to_dict(self) -> dict[str, str | None]:
        return {"source": self.source, "medium": self.medium, "campaign": self.campaign}


@dataclass(frozen=True)
class LeadContact:
    name: str = ""
    email: str = ""
    whatsapp: str = ""

    def is_complete(self, fields: tuple[str, ...]) -> bool:
        """True when every field listed in *fields* is filled in."""
        return all(str(getattr(self, f, "") or "").strip() for f in fields)

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "email": self.email, "whatsapp": self.whatsapp}


@dataclass(frozen=True)
class Lead:
    """A captured respondent, partial (shadow capture) or completed."""

    id: str
    quiz_id: str
    answers: dict[str, AnswerValue] = field(default_factory=dict, hash=False, compare=False)
    score: float = 0
    tags: tuple[str, ...] = ()
    profile: str = ""
    completed: bool = False
    name: str = ""
    email: str = ""
    whatsapp: str = ""
    utm_source: str | None = None
    utm_medium: str | None = None
    utm_campaign: str | None = None
    drop_off_element: str | None = None
    created_at: str = ""  # ISO 8601

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "quizId": self.quiz_id,
            "name": self.name,
            "email": self.email,
            "whatsapp": self.whatsapp,
            "answers": dict(self.answers),
            "score": self.score,
            "tags": list(self.tags),
            "profile": self.profile,
            "completed": self.completed,
            "utmSource": self.utm_source,
            "utmMedium": self.utm_medium,
            "utmCampaign": self.utm_campaign,
            "dropOffElement": self.drop_off_element,
            "createdAt": self.created_at,
        }
