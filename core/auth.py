# core/auth.py
from __future__ import annotations

import logging
from typing import Optional

from core.api import CollectionService
from core.errors import ServiceError, error_message
from core.policy import LOGIN, STUDENTS, Redirect
from core.session import SessionContext
from core.validation import LOGIN_FIELDS, FormValidator

log = logging.getLogger(__name__)


class LoginController:
    def __init__(self, service: CollectionService, session: SessionContext):
        self.service = service
        self.session = session
        self.username = ""
        self.password = ""
        self.validator = FormValidator(LOGIN_FIELDS)
        self.error: Optional[str] = None
        self.submitting = False
        self.mounted = True

    @property
    def errors(self):
        return self.validator.errors

    def unmount(self) -> None:
        self.mounted = False

    def on_change(self, name: str, value: str) -> None:
        self.validator.on_change(name, value)
        setattr(self, name, value)

    async def login(self) -> Optional[Redirect]:
        self.error = None
        values = {"username": self.username, "password": self.password}
        if not self.validator.on_submit(values):
            return None
        self.submitting = True
        try:
            token = await self.service.login(self.username.strip(), self.password)
        except ServiceError as e:
            self.error = error_message(e, "Login failed")
            log.warning("Login for %r failed: %s", self.username, e)
            return None
        finally:
            self.submitting = False
        self.session.set_credential(token)
        self.password = ""
        log.info("User %r logged in", self.username)
        return Redirect(STUDENTS, replace=True)


def logout(session: SessionContext) -> Redirect:
    session.clear_credential()
    return Redirect(LOGIN, replace=True)
