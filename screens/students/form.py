# screens/students/form.py
from __future__ import annotations

from typing import Optional

import streamlit as st

from core.editor import EditMode, StudentEditController
from core.policy import STUDENT_FORM, STUDENTS, Redirect, require_session
from core.session import SessionContext
from core.validation import LABELS
from screens.common import _k, field_error, get_service, mount, navigate, run

PLACEHOLDERS = {
    "firstName": "First Name",
    "lastName": "Last Name",
    "emailId": "Email",
    "phoneNumber": "Phone Number",
}


def _ns(student_id: Optional[int]) -> str:
    return f"student_form_{student_id if student_id is not None else 'new'}"


def _text_field(ctrl: StudentEditController, ns: str, name: str) -> None:
    key = _k(ns, name)
    if key not in st.session_state:
        st.session_state[key] = ctrl.draft.get(name)

    def _changed():
        # the stored value may differ (phone input is coerced); echo it back
        st.session_state[key] = ctrl.on_change(name, st.session_state[key])

    st.text_input(
        LABELS[name],
        key=key,
        placeholder=PLACEHOLDERS[name],
        max_chars=10 if name == "phoneNumber" else None,
        on_change=_changed,
        disabled=not ctrl.can_submit,
    )
    field_error(ctrl.validator.error_for(name))


def _class_picker(ctrl: StudentEditController, ns: str) -> None:
    key = _k(ns, "classIds")
    options = [c.id for c in ctrl.classes]
    if key not in st.session_state:
        st.session_state[key] = [c.id for c in ctrl.selected_classes()]
    names = {c.id: c.name for c in ctrl.classes}
    st.multiselect(
        "Classes",
        options=options,
        key=key,
        format_func=lambda i: names.get(i, str(i)),
        on_change=lambda: ctrl.set_class_ids(st.session_state[key]),
        disabled=not ctrl.can_submit,
    )
    if ctrl.classes_error:
        st.warning(f"Classes could not be loaded: {ctrl.classes_error}")


@require_session
def render(session: SessionContext, student_id: Optional[int] = None):
    ns = _ns(student_id)
    ctrl: StudentEditController = mount(
        STUDENT_FORM, ns, lambda: StudentEditController(get_service(session), student_id)
    )

    if not ctrl.loaded and ctrl.load_error is None and not ctrl.loading:
        with st.spinner("Loading..."):
            run(ctrl.load())

    _, mid, _ = st.columns([1, 2, 1])
    with mid:
        st.title("Edit Student" if ctrl.mode == EditMode.EDITING else "Add Student")

        if ctrl.load_error:
            st.error(ctrl.load_error)
            c1, c2, _ = st.columns([1, 1, 2])
            if c1.button("Retry", key=_k(ns, "retry")):
                with st.spinner("Loading..."):
                    run(ctrl.load())
                st.rerun()
            if c2.button("Back", key=_k(ns, "back_failed")):
                navigate(Redirect(STUDENTS, replace=False))
            return

        if ctrl.submit_error:
            st.error(ctrl.submit_error)

        for name in PLACEHOLDERS:
            _text_field(ctrl, ns, name)
        _class_picker(ctrl, ns)

        label = "Update" if ctrl.mode == EditMode.EDITING else "Create"
        c1, c2 = st.columns([3, 1])
        if c1.button(label, type="primary", key=_k(ns, "submit"),
                     disabled=not ctrl.can_submit, use_container_width=True):
            with st.spinner("Saving..."):
                redirect = run(ctrl.submit())
            if redirect is not None:
                navigate(redirect)
            st.rerun()
        if c2.button("Cancel", key=_k(ns, "cancel"), use_container_width=True):
            navigate(Redirect(STUDENTS, replace=False))
