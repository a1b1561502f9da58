# screens/navbar.py
from __future__ import annotations

import streamlit as st

from core.auth import logout
from core.policy import CLASSES, STUDENT_FORM, STUDENTS, Redirect
from core.session import SessionContext
from screens.common import _k, navigate, unmount_all

NS = "navbar"

LINKS = (("Students", STUDENTS), ("Classes", CLASSES))


def _is_active(route: str, target: str) -> bool:
    # the form lives under the students section
    return route == target or (target == STUDENTS and route == STUDENT_FORM)


def render(session: SessionContext, route: str) -> None:
    with st.sidebar:
        st.markdown("### Navigation")
        for label, target in LINKS:
            active = _is_active(route, target)
            if st.button(
                label,
                key=_k(NS, target),
                type="primary" if active else "secondary",
                use_container_width=True,
            ) and not active:
                navigate(Redirect(target, replace=False))

        st.divider()
        if st.button("Logout", key=_k(NS, "logout"), use_container_width=True):
            unmount_all()
            navigate(logout(session))
