"""Outbound Slack webhook client."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from httpx import AsyncClient, HTTPError, InvalidURL, Timeout

from .config import DEFAULT_TIMEOUT_SECONDS
from .protocol import SlackMessage

logger = logging.getLogger(__name__)

# Upstream bodies are only logged; keep the log line bounded.
MAX_LOGGED_BODY_CHARS = 500


class UpstreamError(Exception):
    """The webhook target did not accept the message."""

    def __init__(self, reason: str, *, status_code: int | None = None, body: str | None = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.status_code = status_code
        self.body = body


@dataclass(frozen=True)
class RelayResult:
    """Outcome of a single forward attempt.

    ``upstream_status`` and ``upstream_body`` are diagnostics for the log
    line; they are never sent back to the inbound caller.
    """

    success: bool
    reason: str | None = None
    upstream_status: int | None = None
    upstream_body: str | None = None

    @classmethod
    def ok(cls) -> RelayResult:
        return cls(success=True)

    @classmethod
    def failed(
        cls,
        reason: str,
        *,
        upstream_status: int | None = None,
        upstream_body: str | None = None,
    ) -> RelayResult:
        return cls(
            success=False,
            reason=reason,
            upstream_status=upstream_status,
            upstream_body=upstream_body,
        )


def create_http_client(timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> AsyncClient:
    return AsyncClient(timeout=Timeout(timeout_seconds))


def _describe(exc: Exception) -> str:
    return str(exc) or exc.__class__.__name__


class SlackWebhookClient:
    """Post messages to a single Slack incoming webhook."""

    def __init__(self, webhook_url: str, *, client: AsyncClient) -> None:
        self._webhook_url = webhook_url
        self._client = client

    async def send(self, message: SlackMessage) -> None:
        """Send one message; raise UpstreamError unless Slack answers 2xx."""

        try:
            response = await self._client.post(self._webhook_url, json=message.to_payload())
        except (HTTPError, InvalidURL) as exc:
            raise UpstreamError(_describe(exc)) from exc

        if not response.is_success:
            raise UpstreamError(
                f"Request failed with status code {response.status_code}",
                status_code=response.status_code,
                body=response.text[:MAX_LOGGED_BODY_CHARS],
            )

    async def relay(self, message: SlackMessage) -> RelayResult:
        """Forward a message and report the outcome without raising."""

        try:
            logger.info("Forwarding message to Slack (%d chars)", len(message.text))
            await self.send(message)
        except UpstreamError as exc:
            result = RelayResult.failed(
                exc.reason,
                upstream_status=exc.status_code,
                upstream_body=exc.body,
            )
            logger.error(
                "Error sending to Slack: %s (status=%s, body=%r)",
                result.reason,
                result.upstream_status,
                result.upstream_body,
            )
            return result
        except Exception as exc:
            logger.exception("Unexpected error sending to Slack: %s", exc)
            return RelayResult.failed(_describe(exc))

        logger.info("Message accepted by Slack")
        return RelayResult.ok()
