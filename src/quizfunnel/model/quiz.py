"""Quiz model: the element list, ordered result rules and tracking config."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Union

from quizfunnel.errors import DefinitionError
from quizfunnel.model.element import Element


# ---------------------------------------------------------------------------
# Result rules
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScoreCondition:
    """Matches when ``min_score <= score <= max_score`` (both ends inclusive)."""

    min_score: float = 0
    max_score: float = 100

    def matches(self, score: float, tags: frozenset[str]) -> bool:
        return self.min_score <= score <= self.max_score


@dataclass(frozen=True)
class TagsCondition:
    """Matches when every required tag is present in the accumulated tags."""

    required_tags: frozenset[str] = frozenset()

    def matches(self, score: float, tags: frozenset[str]) -> bool:
        return self.required_tags <= tags


Condition = Union[ScoreCondition, TagsCondition]


@dataclass(frozen=True)
class ResultRule:
    id: str
    condition: Condition
    profile: str
    title: str = ""
    description: str = ""
    redirect_url: str | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ResultRule:
        try:
            cond = data["condition"]
            kind = cond.get("type") or cond.get("kind")
            condition: Condition
            if kind == "score":
                min_score = cond.get("minScore")
                max_score = cond.get("maxScore")
                condition = ScoreCondition(
                    min_score=0 if min_score is None else float(min_score),
                    max_score=100 if max_score is None else float(max_score),
                )
            elif kind == "tags":
                condition = TagsCondition(frozenset(cond.get("requiredTags") or ()))
            else:
                raise ValueError(f"unknown condition type {kind!r}")
            return cls(
                id=str(data.get("id", "")),
                condition=condition,
                profile=data["profile"],
                title=data.get("title", ""),
                description=data.get("description", ""),
                redirect_url=data.get("redirectUrl") or None,
            )
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise DefinitionError(f"Invalid result rule: {data!r}", cause=exc) from exc

    def to_dict(self) -> dict[str, Any]:
        if isinstance(self.condition, ScoreCondition):
            cond: dict[str, Any] = {
                "type": "score",
                "minScore": self.condition.min_score,
                "maxScore": self.condition.max_score,
            }
        else:
            cond = {"type": "tags", "requiredTags": sorted(self.condition.required_tags)}
        data: dict[str, Any] = {
            "id": self.id,
            "condition": cond,
            "profile": self.profile,
            "title": self.title,
            "description": self.description,
        }
        if self.redirect_url:
            data["redirectUrl"] = self.redirect_url
        return data


# ---------------------------------------------------------------------------
# Tracking
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class TrackingConfig:
    webhook_url: str = ""
    facebook_pixel_id: str = ""
    tiktok_pixel_id: str = ""
    gtm_id: str = ""
    events: tuple[dict[str, str], ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> TrackingConfig:
        data = data or {}
        return cls(
            webhook_url=data.get("webhookUrl") or "",
            facebook_pixel_id=data.get("facebookPixelId") or "",
            tiktok_pixel_id=data.get("tiktokPixelId") or "",
            gtm_id=data.get("gtmId") or "",
            events=tuple(dict(e) for e in data.get("events") or ()),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"events": [dict(e) for e in self.events]}
        if self.webhook_url:
            data["webhookUrl"] = self.webhook_url
        if self.facebook_pixel_id:
            data["facebookPixelId"] = self.facebook_pixel_id
        if self.tiktok_pixel_id:
            data["tiktokPixelId"] = self.tiktok_pixel_id
        if self.gtm_id:
            data["gtmId"] = self.gtm_id
        return data


# ---------------------------------------------------------------------------
# Quiz
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Quiz:
    """A published funnel definition. Read-only input to a session."""

    id: str
    title: str
    elements: tuple[Element, ...] = ()
    result_rules: tuple[ResultRule, ...] = ()
    tracking: TrackingConfig = field(default_factory=TrackingConfig)
    slug: str = ""
    description: str = ""
    is_published: bool = False

    def index_of(self, element_id: str) -> int | None:
        """Return the position of *element_id*, or None for unknown ids."""
        if not element_id:
            return None
        for i, element in enumerate(self.elements):
            if element.id == element_id:
                return i
        return None

    def element(self, element_id: str) -> Element | None:
        idx = self.index_of(element_id)
        return None if idx is None else self.elements[idx]

    def element_at(self, index: int) -> Element | None:
        if 0 <= index < len(self.elements):
            return self.elements[index]
        return None

    @property
    def last_index(self) -> int:
        return len(self.elements) - 1

    # --- serialisation --------------------------------------------------------

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Quiz:
        """Decode a quiz from its stored representation.

        Raises :class:`DefinitionError` if the structure is malformed.
        """
        if not isinstance(data, dict):
            raise DefinitionError(f"Quiz definition must be an object, got {type(data).__name__}")
        try:
            return cls(
                id=str(data["id"]),
                title=data.get("title", ""),
                elements=tuple(Element.from_dict(e) for e in data.get("elements") or ()),
                result_rules=tuple(ResultRule.from_dict(r) for r in data.get("resultRules") or ()),
                tracking=TrackingConfig.from_dict(data.get("tracking")),
                slug=data.get("slug", ""),
                description=data.get("description", ""),
                is_published=bool(data.get("isPublished", False)),
            )
        except DefinitionError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            raise DefinitionError(f"Invalid quiz definition: {exc}", cause=exc) from exc

    @classmethod
    def from_json(cls, text: str) -> Quiz:
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise DefinitionError(f"Quiz definition is not valid JSON: {exc}", cause=exc) from exc
        return cls.from_dict(data)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "slug": self.slug,
            "isPublished": self.is_published,
            "elements": [e.to_dict() for e in self.elements],
            "resultRules": [r.to_dict() for r in self.result_rules],
            "tracking": self.tracking.to_dict(),
        }

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), indent=2, ensure_ascii=False)
