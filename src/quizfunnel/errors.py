"""Error hierarchy for quizfunnel."""
from __future__ import annotations


class FunnelError(Exception):
    """Base error for all quizfunnel errors."""

    def __init__(self, message: str, *, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class DefinitionError(FunnelError):
    """A quiz definition could not be decoded."""


class QuizNotFoundError(FunnelError):
    """No published quiz exists for the requested slug."""

    def __init__(self, slug: str) -> None:
        super().__init__(f"No published quiz with slug {slug!r}")
        self.slug = slug


# ---------------------------------------------------------------------------
# Collaborator failures
# ---------------------------------------------------------------------------


class CollaboratorError(FunnelError):
    """An external collaborator (store, tracker, webhook) failed."""


class LeadWriteError(CollaboratorError):
    """A lead record could not be persisted."""


class WebhookError(CollaboratorError):
    """Webhook delivery failed (transport error or non-2xx response)."""

    def __init__(
        self,
        message: str,
        *,
        url: str = "",
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(message, cause=cause)
        self.url = url
        self.status_code = status_code
