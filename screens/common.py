# screens/common.py
from __future__ import annotations

import asyncio
import io
import csv
import logging
from typing import Any, Callable, Coroutine, Dict, Optional, Tuple

import pandas as pd
import streamlit as st

from core.api import CollectionService
from core.errors import GENERIC_ERROR
from core.policy import LOGIN, Redirect, resolve_route
from core.session import SessionContext
from core.settings import load_settings

logger = logging.getLogger(__name__)

_SESSION = "session"
_ROUTE = "route"
_PARAMS = "route_params"
_MOUNTED = "mounted_controllers"


def _k(ns: str, s: str) -> str:
    """Per-screen key namespace so widgets never collide across screens."""
    return f"{ns}__{s}"


def _handle_error(e: Exception, user_message: str = GENERIC_ERROR):
    logger.error(user_message, exc_info=e)
    st.error(user_message)


def run(coro: Coroutine) -> Any:
    """Drive one controller coroutine to completion inside this rerun."""
    return asyncio.run(coro)


# ────────────────────────────────────────────────────────────────────────────────
# Session / service
# ────────────────────────────────────────────────────────────────────────────────

def get_session() -> SessionContext:
    if _SESSION not in st.session_state:
        st.session_state[_SESSION] = SessionContext()
    return st.session_state[_SESSION]


def get_service(session: SessionContext) -> CollectionService:
    return CollectionService.from_settings(load_settings(), session)


# ────────────────────────────────────────────────────────────────────────────────
# Routing
# ────────────────────────────────────────────────────────────────────────────────

def current_route() -> Tuple[str, Dict[str, Any]]:
    route = resolve_route(st.session_state.get(_ROUTE, LOGIN))
    return route, dict(st.session_state.get(_PARAMS) or {})


def set_route(target: str, params: Optional[Dict[str, Any]] = None) -> None:
    st.session_state[_ROUTE] = resolve_route(target)
    st.session_state[_PARAMS] = dict(params or {})


def navigate(redirect: Redirect) -> None:
    """Switch screens. Routing lives in session state, so there is no
    browser history entry to go back to either way."""
    set_route(redirect.target, redirect.params)
    st.rerun()


# ────────────────────────────────────────────────────────────────────────────────
# Controller ownership
# ────────────────────────────────────────────────────────────────────────────────

def mount(route: str, key: str, factory: Callable[[], Any]) -> Any:
    """Return the controller a screen owns, creating it on first render.

    A screen owns one controller at a time; asking for a different key (the
    form opened for another student, say) tears the previous one down.
    """
    mounted = st.session_state.setdefault(_MOUNTED, {})
    entry = mounted.get(route)
    if entry is not None and entry[0] != key:
        entry[1].unmount()
        entry = None
    if entry is None:
        entry = (key, factory())
        mounted[route] = entry
        logger.debug("Mounted %s", key)
    return entry[1]


def unmount_except(route: str) -> None:
    """Tear down controllers of every screen other than ``route``."""
    mounted = st.session_state.setdefault(_MOUNTED, {})
    for owner in list(mounted):
        if owner != route:
            key, ctrl = mounted.pop(owner)
            ctrl.unmount()
            logger.debug("Unmounted %s", key)


def unmount_all() -> None:
    mounted = st.session_state.setdefault(_MOUNTED, {})
    for _, ctrl in mounted.values():
        ctrl.unmount()
    mounted.clear()


def field_error(message: Optional[str]) -> None:
    if message:
        st.caption(f":red[{message}]")


def _df_to_csv(df: pd.DataFrame) -> bytes:
    with io.StringIO() as buffer:
        df.to_csv(buffer, index=False, quoting=csv.QUOTE_ALL)
        return buffer.getvalue().encode("utf-8")
