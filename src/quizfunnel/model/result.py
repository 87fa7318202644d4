"""Final result of a quiz run."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class FinalResult:
    """Profile and redirect computed from the accumulated score and tags.

    ``rule_id`` is None when no result rule matched and the fallback
    profile thresholds were applied.
    """

    score: float
    tags: tuple[str, ...]
    profile: str
    redirect_url: str | None = None
    rule_id: str | None = None

    @property
    def is_fallback(self) -> bool:
        return self.rule_id is None
