# tests/test_session.py
from __future__ import annotations

import asyncio

import pytest

from conftest import FakeService
from core.auth import LoginController, logout
from core.policy import LOGIN, STUDENTS, Redirect, gate, require_session, resolve_route
from core.session import SessionContext


def test_session_lifecycle():
    session = SessionContext()
    assert not session.is_authenticated()
    session.set_credential("abc")
    assert session.is_authenticated()
    assert session.token == "abc"
    session.clear_credential()
    assert not session.is_authenticated()
    assert session.token is None


@pytest.mark.parametrize("token", ["", "   ", None])
def test_blank_credentials_are_refused(token):
    session = SessionContext()
    with pytest.raises(ValueError):
        session.set_credential(token)
    assert not session.is_authenticated()


def test_protected_render_is_skipped_without_credential():
    rendered = []

    @require_session
    def render(session, label):
        rendered.append(label)
        return "ok"

    session = SessionContext()
    result = render(session, "students")
    assert result == Redirect(LOGIN, replace=True)
    assert rendered == []

    session.set_credential("abc")
    assert render(session, "students") == "ok"
    assert rendered == ["students"]


def test_gate():
    session = SessionContext()
    assert gate(session) == Redirect(LOGIN, replace=True)
    session.set_credential("t")
    assert gate(session) is None


def test_unknown_routes_go_to_login():
    assert resolve_route("students") == "students"
    assert resolve_route("admin") == LOGIN
    assert resolve_route(None) == LOGIN


def test_logout_clears_and_redirects():
    session = SessionContext()
    session.set_credential("abc")
    assert logout(session) == Redirect(LOGIN, replace=True)
    assert not session.is_authenticated()


def test_login_success_stores_token():
    session = SessionContext()
    service = FakeService()
    ctrl = LoginController(service, session)
    ctrl.on_change("username", " admin ")
    ctrl.on_change("password", "secret")
    redirect = asyncio.run(ctrl.login())
    assert redirect == Redirect(STUDENTS, replace=True)
    assert session.token == "tok-123"
    assert service.calls == [("login", "admin", "secret")]
    assert ctrl.password == ""


def test_login_validation_blocks_request():
    session = SessionContext()
    service = FakeService()
    ctrl = LoginController(service, session)
    ctrl.on_change("username", "admin")
    ctrl.on_change("password", "ab")
    assert ctrl.errors == {"password": "Password must be at least 3 characters"}
    assert asyncio.run(ctrl.login()) is None
    assert service.calls == []
    assert not session.is_authenticated()


def test_login_failure_shows_message():
    session = SessionContext()
    service = FakeService()
    service.fail("login", "Invalid credentials")
    ctrl = LoginController(service, session)
    ctrl.on_change("username", "admin")
    ctrl.on_change("password", "wrong")
    assert asyncio.run(ctrl.login()) is None
    assert ctrl.error == "Invalid credentials"
    assert not session.is_authenticated()

    service.fail("login")
    asyncio.run(ctrl.login())
    assert ctrl.error == "Login failed"
