# screens/login.py
from __future__ import annotations

import streamlit as st

from core.auth import LoginController
from core.policy import LOGIN
from core.session import SessionContext
from screens.common import _k, field_error, get_service, mount, navigate, run

NS = "login"


def render(session: SessionContext) -> None:
    ctrl: LoginController = mount(
        LOGIN, NS, lambda: LoginController(get_service(session), session)
    )

    _, mid, _ = st.columns([1, 2, 1])
    with mid:
        st.title("Login")
        if ctrl.error:
            st.error(ctrl.error)

        def _changed(name: str):
            ctrl.on_change(name, st.session_state[_k(NS, name)])

        st.text_input(
            "Username", key=_k(NS, "username"), placeholder="Username",
            on_change=_changed, args=("username",),
        )
        field_error(ctrl.validator.error_for("username"))
        st.text_input(
            "Password", type="password", key=_k(NS, "password"), placeholder="Password",
            on_change=_changed, args=("password",),
        )
        field_error(ctrl.validator.error_for("password"))

        if st.button("Login", type="primary", use_container_width=True, key=_k(NS, "submit")):
            with st.spinner("Signing in..."):
                redirect = run(ctrl.login())
            if redirect is not None:
                navigate(redirect)
            st.rerun()
