"""Element model: one step of a quiz funnel and its answer options."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any

from quizfunnel.errors import DefinitionError


class ElementKind(StrEnum):
    """The closed set of element variants a funnel can contain."""

    WELCOME = "welcome"
    VIDEO_ASK = "video-ask"
    MULTIPLE_CHOICE = "multiple-choice"
    IMAGE_SELECTION = "image-selection"
    RANGE_SLIDER = "range-slider"
    TEXT_INPUT = "text-input"
    LEAD_FORM = "lead-form"
    COUNTDOWN = "countdown"
    FAKE_LOADING = "fake-loading"
    RESULT = "result"


CHOICE_KINDS = frozenset({ElementKind.MULTIPLE_CHOICE, ElementKind.IMAGE_SELECTION})

# Kinds that never block advancing, whatever their ``required`` flag says.
ALWAYS_SATISFIED_KINDS = frozenset(
    {ElementKind.WELCOME, ElementKind.FAKE_LOADING, ElementKind.RESULT}
)

LEAD_FIELDS = ("name", "email", "whatsapp")


@dataclass(frozen=True)
class Option:
    """A selectable answer of a multiple-choice or image-selection element."""

    id: str
    text: str = ""
    points: int = 0
    tags: tuple[str, ...] = ()
    next_element_id: str = ""
    image_url: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Option:
        try:
            return cls(
                id=str(data["id"]),
                text=data.get("text", ""),
                points=int(data.get("points") or 0),
                tags=tuple(data.get("tags") or ()),
                next_element_id=data.get("nextElementId") or "",
                image_url=data.get("imageUrl") or "",
            )
        except (KeyError, TypeError, ValueError) as exc:
            raise DefinitionError(f"Invalid option: {data!r}", cause=exc) from exc

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"id": self.id, "text": self.text, "points": self.points}
        if self.tags:
            data["tags"] = list(self.tags)
        if self.next_element_id:
            data["nextElementId"] = self.next_element_id
        if self.image_url:
            data["imageUrl"] = self.image_url
        return data


@dataclass(frozen=True)
class Element:
    """A single screen in the funnel.

    Only the attributes relevant to ``kind`` are meaningful; the rest keep
    their defaults (slider 0..100 step 1 weight 1, fake-loading pause at 90).
    """

    id: str
    kind: ElementKind
    title: str = ""
    description: str = ""
    required: bool = False
    options: tuple[Option, ...] = ()
    # range slider
    min: float = 0
    max: float = 100
    step: float = 1
    score_weight: float = 1
    # fake loading / countdown
    pause_at: int = 90
    duration: int | None = None
    loading_text: str = ""
    # lead form
    fields: tuple[str, ...] = LEAD_FIELDS
    # video ask
    video_url: str = ""
    # result
    result_title: str = ""
    result_description: str = ""
    redirect_url: str = ""
    # branching / tracking
    next_element_id: str = ""
    pixel_event: str = ""
    style: dict[str, Any] = field(default_factory=dict, hash=False, compare=False)

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError("Element id must be a non-empty string")

    @property
    def is_choice(self) -> bool:
        return self.kind in CHOICE_KINDS

    @property
    def always_satisfied(self) -> bool:
        return self.kind in ALWAYS_SATISFIED_KINDS

    def option(self, option_id: Any) -> Option | None:
        """Return the option with *option_id*, or None if there is none."""
        for opt in self.options:
            if opt.id == option_id:
                return opt
        return None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Element:
        """Decode an element from its stored (camelCase) representation."""
        try:
            kind = ElementKind(data["type"])
            return cls(
                id=str(data["id"]),
                kind=kind,
                title=data.get("title", ""),
                description=data.get("description") or "",
                required=bool(data.get("required", False)),
                options=tuple(Option.from_dict(o) for o in data.get("options") or ()),
                min=_number(data.get("min"), 0),
                max=_number(data.get("max"), 100),
                step=_number(data.get("step"), 1),
                # zero weight means unset
                score_weight=_number(data.get("scoreWeight") or None, 1),
                pause_at=int(data.get("pauseAt") or 90),
                duration=int(data["duration"]) if data.get("duration") else None,
                loading_text=data.get("loadingText") or "",
                fields=tuple(data.get("fields") or LEAD_FIELDS),
                video_url=data.get("videoUrl") or "",
                result_title=data.get("resultTitle") or "",
                result_description=data.get("resultDescription") or "",
                redirect_url=data.get("redirectUrl") or "",
                next_element_id=data.get("nextElementId") or "",
                pixel_event=data.get("pixelEvent") or "",
                style=dict(data.get("style") or {}),
            )
        except DefinitionError:
            raise
        except (KeyError, TypeError, ValueError) as exc:
            raise DefinitionError(f"Invalid element: {data.get('id', data)!r}", cause=exc) from exc

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "type": self.kind.value,
            "title": self.title,
            "required": self.required,
        }
        if self.description:
            data["description"] = self.description
        if self.options:
            data["options"] = [o.to_dict() for o in self.options]
        if self.kind is ElementKind.RANGE_SLIDER:
            data.update(min=self.min, max=self.max, step=self.step, scoreWeight=self.score_weight)
        if self.kind is ElementKind.FAKE_LOADING:
            data["pauseAt"] = self.pause_at
            if self.loading_text:
                data["loadingText"] = self.loading_text
        if self.duration is not None:
            data["duration"] = self.duration
        if self.kind is ElementKind.LEAD_FORM:
            data["fields"] = list(self.fields)
        if self.video_url:
            data["videoUrl"] = self.video_url
        if self.result_title:
            data["resultTitle"] = self.result_title
        if self.result_description:
            data["resultDescription"] = self.result_description
        if self.redirect_url:
            data["redirectUrl"] = self.redirect_url
        if self.next_element_id:
            data["nextElementId"] = self.next_element_id
        if self.pixel_event:
            data["pixelEvent"] = self.pixel_event
        if self.style:
            data["style"] = dict(self.style)
        return data


def _number(value: Any, default: float) -> float:
    if value is None or value == "":
        return default
    return float(value)
