"""FastAPI application exposing the Slack relay endpoints."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from httpx import AsyncClient

from .config import RelayConfig
from .protocol import (
    MessageValidationError,
    SlackMessage,
    failure_message,
    parse_body,
    status_message,
    success_message,
    validation_error_message,
)
from .slack import RelayResult, SlackWebhookClient, create_http_client

logger = logging.getLogger(__name__)

SEND_PATH = "/api/slack/send"


class SlackRelay:
    """Register the relay routes on an app and hold its outbound client.

    An injected httpx client is used as-is and never closed. Otherwise a
    client is opened for each ``session`` (one per server lifespan); requests
    handled outside a session use a short-lived client of their own.
    """

    def __init__(self, config: RelayConfig, *, client: AsyncClient | None = None) -> None:
        self._config = config
        self._injected = client
        self._slack: SlackWebhookClient | None = None
        if client is not None:
            self._slack = SlackWebhookClient(config.webhook_url, client=client)

    @property
    def config(self) -> RelayConfig:
        return self._config

    @asynccontextmanager
    async def session(self) -> AsyncIterator[None]:
        """Keep one outbound client open while the server runs."""

        if self._injected is not None:
            yield
            return

        async with create_http_client(self._config.timeout_seconds) as client:
            self._slack = SlackWebhookClient(self._config.webhook_url, client=client)
            try:
                yield
            finally:
                self._slack = None

    def install(self, app: FastAPI, *, send_path: str = SEND_PATH) -> None:
        """Register the status and send endpoints.

        Endpoints:

        - `/` (GET) reports that the service is up
        - `{send_path}` (POST) forwards `{"text": ...}` to the webhook
        """
        self._register_status_route(app)
        self._register_send_route(app, send_path)

    def _register_status_route(self, app: FastAPI) -> None:
        @app.get("/")
        async def relay_status() -> dict[str, str]:
            return status_message(self._config.service_name)

    def _register_send_route(self, app: FastAPI, send_path: str) -> None:
        @app.post(send_path)
        async def relay_send(request: Request) -> JSONResponse:
            return await self.handle_send(request)

    async def handle_send(self, request: Request) -> JSONResponse:
        """Validate the inbound body, forward it once and map the outcome."""

        try:
            message = parse_body(await request.body())
        except MessageValidationError as exc:
            logger.warning("Rejected relay request: %s", exc)
            return JSONResponse(
                validation_error_message(exc),
                status_code=status.HTTP_400_BAD_REQUEST,
            )

        result = await self._relay(message)
        if result.success:
            return JSONResponse(success_message(), status_code=status.HTTP_200_OK)
        return JSONResponse(
            failure_message(result.reason or ""),
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    async def _relay(self, message: SlackMessage) -> RelayResult:
        slack = self._slack
        if slack is not None:
            return await slack.relay(message)
        async with create_http_client(self._config.timeout_seconds) as client:
            return await SlackWebhookClient(self._config.webhook_url, client=client).relay(message)


def create_app(config: RelayConfig, *, client: AsyncClient | None = None) -> FastAPI:
    """Build the relay application for the given configuration."""

    relay = SlackRelay(config, client=client)

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        async with relay.session():
            yield

    app = FastAPI(title=config.service_name, lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_methods=["*"],
        allow_headers=["*"],
    )
    relay.install(app)
    app.state.relay = relay
    return app
