"""Webhook delivery over HTTP with httpx."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from quizfunnel.errors import WebhookError

logger = logging.getLogger(__name__)


class HttpWebhookDispatcher:
    """POSTs webhook payloads as JSON with a bounded timeout.

    Raises :class:`~quizfunnel.errors.WebhookError` on transport failure or
    a non-2xx response. Callers that must not fail go through
    :class:`~quizfunnel.adapters.effects.FunnelEffects`.
    """

    def __init__(
        self,
        timeout: float = 5.0,
        *,
        headers: dict[str, str] | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            headers={"Content-Type": "application/json", **(headers or {})},
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    def dispatch(self, url: str, payload: dict[str, Any]) -> None:
        try:
            resp = self._client.post(url, json=payload)
        except httpx.TimeoutException as exc:
            raise WebhookError(f"Webhook timed out: {exc}", url=url, cause=exc) from exc
        except httpx.HTTPError as exc:
            raise WebhookError(f"Webhook request failed: {exc}", url=url, cause=exc) from exc

        if resp.status_code >= 300:
            raise WebhookError(
                f"Webhook returned HTTP {resp.status_code}",
                url=url,
                status_code=resp.status_code,
            )
        logger.debug("Webhook delivered to %s (HTTP %d)", url, resp.status_code)

    def close(self) -> None:
        """Close the underlying httpx client."""
        self._client.close()

    def __enter__(self) -> HttpWebhookDispatcher:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
