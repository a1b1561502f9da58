# core/session.py
from __future__ import annotations

import logging
from typing import Optional

log = logging.getLogger(__name__)


class SessionContext:
    """Holds the credential for one console session.

    Constructed once when the session starts and handed to whoever needs it.
    Only the login/logout actions write to it; everybody else reads.
    """

    def __init__(self) -> None:
        self._token: Optional[str] = None

    @property
    def token(self) -> Optional[str]:
        return self._token

    def is_authenticated(self) -> bool:
        return self._token is not None

    def set_credential(self, token: str) -> None:
        if not token or not str(token).strip():
            raise ValueError("credential must be a non-empty token")
        self._token = str(token)
        log.info("Session credential set")

    def clear_credential(self) -> None:
        if self._token is not None:
            log.info("Session credential cleared")
        self._token = None
