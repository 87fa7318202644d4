"""Findings reported by quiz validation, located on an element, option or result rule."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Severity(StrEnum):
    # ERROR blocks import and play; the rest only inform the author
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"

    @property
    def rank(self) -> int:
        return _RANKS[self]


_RANKS = {Severity.ERROR: 0, Severity.WARNING: 1, Severity.INFO: 2}


@dataclass(frozen=True)
class Diagnostic:
    """One problem in a quiz definition.

    ``element_id`` and ``option_id`` point into the element list, ``rule_id``
    into the result rules. A diagnostic with none of them concerns the quiz
    as a whole. ``fix`` is a hint for the author and is printed after the
    message.
    """

    rule: str
    severity: Severity
    message: str
    element_id: str | None = None
    option_id: str | None = None
    rule_id: str | None = None
    fix: str | None = None

    @property
    def is_error(self) -> bool:
        return self.severity is Severity.ERROR

    @property
    def is_warning(self) -> bool:
        return self.severity is Severity.WARNING

    @property
    def location(self) -> str:
        if self.element_id and self.option_id:
            return f"element {self.element_id}, option {self.option_id}"
        if self.element_id:
            return f"element {self.element_id}"
        if self.rule_id:
            return f"result rule {self.rule_id}"
        return "quiz"

    def __str__(self) -> str:
        text = f"{self.severity.upper()} {self.location}: {self.message}"
        if self.fix:
            text += f" Fix: {self.fix}"
        return text
