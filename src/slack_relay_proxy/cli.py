"""Command-line entry point for the Slack relay server."""

from __future__ import annotations

import argparse
import logging

import uvicorn
from dotenv import load_dotenv

from .config import RelayConfig, load_config
from .server import create_app

logger = logging.getLogger(__name__)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Relay chat messages to a Slack incoming webhook.")
    parser.add_argument("--host", help="Address to listen on (default: $HOST or 0.0.0.0).")
    parser.add_argument("--port", type=int, help="Port to listen on (default: $PORT or 3000).")
    parser.add_argument(
        "--webhook-url",
        help="Slack incoming webhook URL (default: $SLACK_WEBHOOK_URL).",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        help="Timeout in seconds for the outbound Slack request.",
    )
    parser.add_argument(
        "--env-file",
        default=".env",
        help="Dotenv file to load before reading the environment (default: .env).",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level.",
    )
    return parser


def resolve_config(args: argparse.Namespace) -> RelayConfig:
    """Load configuration from the environment, then apply CLI overrides."""

    load_dotenv(args.env_file, override=False)
    return load_config().with_overrides(
        host=args.host,
        port=args.port,
        webhook_url=args.webhook_url,
        timeout_seconds=args.timeout,
    )


def main(argv: list[str] | None = None) -> None:  # pragma: no cover
    parser = _build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(level=args.log_level, format="%(asctime)s %(levelname)s %(name)s %(message)s")
    try:
        config = resolve_config(args)
    except ValueError as exc:
        parser.error(str(exc))

    app = create_app(config)
    logger.info("%s running on port %s", config.service_name, config.port)
    logger.info("CORS enabled for %s", ", ".join(config.cors_origins))
    uvicorn.run(app, host=config.host, port=config.port, log_level=args.log_level.lower())


if __name__ == "__main__":  # pragma: no cover
    main()
