# core/errors.py
from __future__ import annotations

from typing import Any, Optional

GENERIC_ERROR = "Something went wrong. Please try again."
UNEXPECTED_RESPONSE = "Unexpected response from service"


class ServiceError(Exception):
    """A failed call to the remote collection service.

    ``message`` is the human-readable text the service sent back (a structured
    ``message`` field or a plain-text body), or None when it sent nothing usable.
    """

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None):
        super().__init__(message or f"service error (status={status_code})")
        self.message = message
        self.status_code = status_code


def message_from_payload(payload: Any) -> Optional[str]:
    """Pull a displayable message out of a failure body (dict or raw string)."""
    if isinstance(payload, dict):
        msg = payload.get("message")
        if isinstance(msg, str) and msg.strip():
            return msg.strip()
        return None
    if isinstance(payload, str):
        text = payload.strip()
        # HTML error pages are a technical payload, not a message
        if text and not text.startswith("<"):
            return text
    return None


def error_message(exc: BaseException, fallback: str = GENERIC_ERROR) -> str:
    if isinstance(exc, ServiceError) and exc.message:
        return exc.message
    return fallback
