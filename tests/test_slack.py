from __future__ import annotations

import json
import logging
from typing import Callable

import httpx
import pytest
from unittest.mock import AsyncMock, Mock

from slack_relay_proxy.protocol import SlackMessage
from slack_relay_proxy.slack import (
    RelayResult,
    SlackWebhookClient,
    UpstreamError,
    create_http_client,
)

WEBHOOK_URL = "https://hooks.example.test/services/T000/B000/XXXX"


def _make_client(
    handler: Callable[[httpx.Request], httpx.Response],
) -> tuple[SlackWebhookClient, list[httpx.Request]]:
    calls: list[httpx.Request] = []

    def record(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return handler(request)

    http = httpx.AsyncClient(transport=httpx.MockTransport(record))
    return SlackWebhookClient(WEBHOOK_URL, client=http), calls


@pytest.mark.asyncio
async def test_send_posts_text_as_json() -> None:
    client, calls = _make_client(lambda request: httpx.Response(200, text="ok"))

    await client.send(SlackMessage(text="Standup done"))

    assert len(calls) == 1
    request = calls[0]
    assert request.method == "POST"
    assert str(request.url) == WEBHOOK_URL
    assert request.headers["content-type"] == "application/json"
    assert json.loads(request.content) == {"text": "Standup done"}
    assert "authorization" not in request.headers


@pytest.mark.asyncio
async def test_send_accepts_any_2xx() -> None:
    client, _ = _make_client(lambda request: httpx.Response(204))
    await client.send(SlackMessage(text="hi"))


@pytest.mark.parametrize(("status_code", "body"), [(400, "invalid_payload"), (404, "no_service"), (500, "oops")])
@pytest.mark.asyncio
async def test_send_raises_on_non_2xx(status_code: int, body: str) -> None:
    client, _ = _make_client(lambda request: httpx.Response(status_code, text=body))

    with pytest.raises(UpstreamError) as exc_info:
        await client.send(SlackMessage(text="hi"))

    assert exc_info.value.status_code == status_code
    assert exc_info.value.body == body
    assert str(exc_info.value) == f"Request failed with status code {status_code}"


@pytest.mark.asyncio
async def test_send_raises_on_connect_error() -> None:
    def refuse(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    client, _ = _make_client(refuse)

    with pytest.raises(UpstreamError, match="connection refused") as exc_info:
        await client.send(SlackMessage(text="hi"))

    assert exc_info.value.status_code is None
    assert isinstance(exc_info.value.__cause__, httpx.ConnectError)


@pytest.mark.asyncio
async def test_send_raises_on_timeout() -> None:
    def hang(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("timed out", request=request)

    client, _ = _make_client(hang)

    with pytest.raises(UpstreamError, match="timed out"):
        await client.send(SlackMessage(text="hi"))


@pytest.mark.asyncio
async def test_send_raises_on_url_without_scheme() -> None:
    async with httpx.AsyncClient() as http:
        client = SlackWebhookClient("not-a-url", client=http)
        with pytest.raises(UpstreamError) as exc_info:
            await client.send(SlackMessage(text="hi"))
    assert str(exc_info.value)


@pytest.mark.asyncio
async def test_relay_success() -> None:
    client, calls = _make_client(lambda request: httpx.Response(200, text="ok"))

    result = await client.relay(SlackMessage(text="hi"))

    assert result == RelayResult.ok()
    assert result.success is True
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_relay_failure_keeps_upstream_details(caplog: pytest.LogCaptureFixture) -> None:
    client, calls = _make_client(lambda request: httpx.Response(403, text="invalid_token"))

    with caplog.at_level(logging.ERROR):
        result = await client.relay(SlackMessage(text="hi"))

    assert result.success is False
    assert result.reason == "Request failed with status code 403"
    assert result.upstream_status == 403
    assert result.upstream_body == "invalid_token"
    assert len(calls) == 1
    assert "status=403" in caplog.text
    assert "invalid_token" in caplog.text


@pytest.mark.asyncio
async def test_relay_does_not_retry() -> None:
    client, calls = _make_client(lambda request: httpx.Response(503, text="unavailable"))

    result = await client.relay(SlackMessage(text="hi"))

    assert result.success is False
    assert len(calls) == 1


@pytest.mark.asyncio
async def test_relay_unexpected_error_becomes_failure() -> None:
    http = Mock(spec=httpx.AsyncClient)
    http.post = AsyncMock(side_effect=RuntimeError("boom"))
    client = SlackWebhookClient(WEBHOOK_URL, client=http)

    result = await client.relay(SlackMessage(text="hi"))

    assert result == RelayResult.failed("boom")
    http.post.assert_awaited_once_with(WEBHOOK_URL, json={"text": "hi"})


@pytest.mark.asyncio
async def test_relay_truncates_logged_body() -> None:
    client, _ = _make_client(lambda request: httpx.Response(500, text="x" * 5000))

    result = await client.relay(SlackMessage(text="hi"))

    assert result.upstream_body is not None
    assert len(result.upstream_body) == 500


@pytest.mark.asyncio
async def test_create_http_client_applies_timeout() -> None:
    http = create_http_client(3.0)
    try:
        assert http.timeout == httpx.Timeout(3.0)
    finally:
        await http.aclose()
