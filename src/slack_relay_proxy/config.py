"""Configuration defaults and environment resolution for the relay."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from typing import Callable, Mapping

logger = logging.getLogger(__name__)

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000
DEFAULT_TIMEOUT_SECONDS = 10.0
DEFAULT_SERVICE_NAME = "AutoStand proxy server"
DEFAULT_CORS_ORIGINS = ("*",)

# Not a working webhook; every forward fails until SLACK_WEBHOOK_URL is set.
PLACEHOLDER_WEBHOOK_URL = "https://hooks.slack.com/services/YOUR/WEBHOOK/URL"

WEBHOOK_URL_ENV_VAR = "SLACK_WEBHOOK_URL"
PORT_ENV_VAR = "PORT"
HOST_ENV_VAR = "HOST"
TIMEOUT_ENV_VAR = "SLACK_TIMEOUT_SECONDS"
SERVICE_NAME_ENV_VAR = "SERVICE_NAME"
CORS_ORIGINS_ENV_VAR = "CORS_ORIGINS"


@dataclass(frozen=True)
class RelayConfig:
    """Process-wide relay settings, resolved once at startup."""

    webhook_url: str = PLACEHOLDER_WEBHOOK_URL
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    service_name: str = DEFAULT_SERVICE_NAME
    cors_origins: tuple[str, ...] = field(default=DEFAULT_CORS_ORIGINS)

    @property
    def uses_placeholder(self) -> bool:
        return self.webhook_url == PLACEHOLDER_WEBHOOK_URL

    def with_overrides(self, **changes: object) -> RelayConfig:
        """Return a copy with every non-None override applied."""
        applied = {key: value for key, value in changes.items() if value is not None}
        return replace(self, **applied)


def _parse_number(
    environ: Mapping[str, str], name: str, default: float, cast: Callable[[str], float]
) -> float:
    raw = environ.get(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}.") from exc


def parse_origins(value: str | None) -> tuple[str, ...]:
    """Split a comma-separated origin list; empty input means any origin."""
    if not value:
        return DEFAULT_CORS_ORIGINS
    origins = tuple(part.strip() for part in value.split(",") if part.strip())
    return origins or DEFAULT_CORS_ORIGINS


def load_config(environ: Mapping[str, str] | None = None) -> RelayConfig:
    """Build a RelayConfig from environment variables."""

    if environ is None:
        environ = os.environ

    webhook_url = environ.get(WEBHOOK_URL_ENV_VAR) or PLACEHOLDER_WEBHOOK_URL
    config = RelayConfig(
        webhook_url=webhook_url,
        host=environ.get(HOST_ENV_VAR) or DEFAULT_HOST,
        port=int(_parse_number(environ, PORT_ENV_VAR, DEFAULT_PORT, int)),
        timeout_seconds=float(
            _parse_number(environ, TIMEOUT_ENV_VAR, DEFAULT_TIMEOUT_SECONDS, float)
        ),
        service_name=environ.get(SERVICE_NAME_ENV_VAR) or DEFAULT_SERVICE_NAME,
        cors_origins=parse_origins(environ.get(CORS_ORIGINS_ENV_VAR)),
    )
    if config.uses_placeholder:
        logger.warning(
            "%s is not set; using placeholder webhook, messages will not be delivered",
            WEBHOOK_URL_ENV_VAR,
        )
    return config
