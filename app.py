# app.py
# Run with:  streamlit run app.py
from __future__ import annotations

import logging

import streamlit as st

from core.logs import configure_logging
from core.policy import CLASSES, LOGIN, STUDENT_FORM, STUDENTS, Redirect, gate
from core.settings import load_settings
from screens import login, navbar
from screens.classes import page as classes_page
from screens.common import current_route, get_session, navigate, unmount_except
from screens.students import form as student_form
from screens.students import page as students_page

log = logging.getLogger(__name__)

settings = load_settings()
configure_logging(settings.log_level)

st.set_page_config(page_title=settings.app_title, layout="wide")


def _student_id(params: dict):
    raw = params.get("id")
    return int(raw) if raw is not None else None


def main() -> None:
    session = get_session()
    route, params = current_route()

    if route == LOGIN and session.is_authenticated():
        navigate(Redirect(STUDENTS, replace=True))

    unmount_except(route)

    if route == LOGIN:
        login.render(session)
        return

    # Every other screen is protected; bounce before any chrome is drawn.
    redirect = gate(session)
    if redirect is not None:
        navigate(redirect)

    navbar.render(session, route)

    screens = {
        STUDENTS: lambda: students_page.render(session),
        STUDENT_FORM: lambda: student_form.render(session, _student_id(params)),
        CLASSES: lambda: classes_page.render(session),
    }
    try:
        result = screens[route]()
    except Exception:
        # st.rerun/st.stop raise BaseException subclasses and pass through here
        log.error("Rendering %s failed", route, exc_info=True)
        st.error(f"An unexpected error occurred while rendering the {route} page.")
        return
    if isinstance(result, Redirect):
        navigate(result)


main()
