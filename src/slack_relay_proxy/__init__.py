"""Slack webhook relay package."""

from .config import RelayConfig, load_config
from .server import SlackRelay, create_app

__all__ = ["RelayConfig", "SlackRelay", "create_app", "load_config"]
