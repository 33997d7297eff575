"""Message shapes exchanged by the relay endpoints."""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, TypedDict

MISSING_TEXT_ERROR = "Message text is required"
SEND_SUCCESS_MESSAGE = "Message sent to Slack"
SEND_FAILURE_ERROR = "Failed to send message to Slack"


class SendMessageBody(TypedDict):
    text: str


class StatusMessage(TypedDict):
    status: str


class SendSuccessMessage(TypedDict):
    success: bool
    message: str


class ValidationErrorMessage(TypedDict):
    error: str


class SendFailureMessage(TypedDict):
    success: bool
    error: str
    details: str


class MessageValidationError(ValueError):
    """Inbound payload does not carry a usable message text."""

    def __init__(self, message: str = MISSING_TEXT_ERROR) -> None:
        super().__init__(message)


@dataclass(frozen=True)
class SlackMessage:
    """A validated message ready to forward."""

    text: str

    def to_payload(self) -> SendMessageBody:
        return {"text": self.text}


def parse_message(payload: Any) -> SlackMessage:
    """Validate a decoded JSON body and return the message it carries."""

    if not isinstance(payload, dict):
        raise MessageValidationError()
    text = payload.get("text")
    if not isinstance(text, str) or not text:
        raise MessageValidationError()
    return SlackMessage(text=text)


def parse_body(body: bytes) -> SlackMessage:
    """Decode a raw request body and validate it."""

    if not body:
        raise MessageValidationError()
    try:
        payload = json.loads(body)
    except (json.JSONDecodeError, UnicodeDecodeError, RecursionError) as exc:
        raise MessageValidationError() from exc
    return parse_message(payload)


def status_message(service_name: str) -> StatusMessage:
    return {"status": f"{service_name} is running"}


def success_message() -> SendSuccessMessage:
    return {"success": True, "message": SEND_SUCCESS_MESSAGE}


def validation_error_message(error: MessageValidationError) -> ValidationErrorMessage:
    return {"error": str(error)}


def failure_message(details: str) -> SendFailureMessage:
    return {
        "success": False,
        "error": SEND_FAILURE_ERROR,
        "details": details or SEND_FAILURE_ERROR,
    }
