# core/policy.py
from __future__ import annotations

import functools
from dataclasses import dataclass
from typing import Callable, Optional

from core.session import SessionContext

LOGIN = "login"
STUDENTS = "students"
STUDENT_FORM = "student_form"
CLASSES = "classes"

PROTECTED_ROUTES = {STUDENTS, STUDENT_FORM, CLASSES}


@dataclass(frozen=True)
class Redirect:
    """Navigation signal. ``replace`` means the current history entry is overwritten."""
    target: str
    replace: bool = True
    params: Optional[dict] = None


def gate(session: SessionContext) -> Optional[Redirect]:
    if session.is_authenticated():
        return None
    return Redirect(LOGIN, replace=True)


def require_session(fn: Callable):
    """Protect a screen renderer whose first argument is the SessionContext.

    When the session has no credential the renderer is never called and a
    history-replacing redirect to the login screen is returned instead.
    """
    @functools.wraps(fn)
    def _inner(session: SessionContext, *args, **kwargs):
        redirect = gate(session)
        if redirect is not None:
            return redirect
        return fn(session, *args, **kwargs)
    return _inner


def resolve_route(route: Optional[str]) -> str:
    """Unknown routes fall through to the login screen."""
    if route in PROTECTED_ROUTES or route == LOGIN:
        return route
    return LOGIN
