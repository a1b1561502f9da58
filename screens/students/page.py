# screens/students/page.py
from __future__ import annotations

from typing import List

import pandas as pd
import streamlit as st

from core.collection import CollectionViewController, ViewState
from core.models import Student
from core.policy import STUDENT_FORM, STUDENTS, Redirect, require_session
from core.session import SessionContext
from core.sorting import STUDENT_SORT_KEYS, Direction, SortKey
from screens.common import _df_to_csv, _k, get_service, mount, navigate, run

NS = "students"

# table header -> sort key; the first column shows the derived full name
COLUMNS = (
    ("Name", SortKey.FULL_NAME, 3),
    ("Email", SortKey.EMAIL, 3),
    ("Phone", SortKey.PHONE, 2),
    ("Classes", SortKey.CLASSES, 3),
)


def _controller(session: SessionContext) -> CollectionViewController:
    service = get_service(session)
    return CollectionViewController(
        fetch=service.list_students,
        delete=service.delete_student,
        display=lambda s: s.full_name,
        sort_keys=STUDENT_SORT_KEYS,
        noun="students",
        item="student",
    )


def students_frame(rows: List[Student]) -> pd.DataFrame:
    data = [
        {
            "id": s.id,
            "name": s.full_name,
            "email": s.email_id,
            "phone": s.phone_number,
            "classes": ", ".join(s.class_names) or "-",
        }
        for s in rows
    ]
    return pd.DataFrame(data, columns=["id", "name", "email", "phone", "classes"])


def _header(ctrl: CollectionViewController) -> None:
    cols = st.columns([w for _, _, w in COLUMNS] + [2])
    for col, (label, key, _) in zip(cols, COLUMNS):
        arrow = ""
        if ctrl.sort is not None and ctrl.sort.key == key:
            arrow = " ▲" if ctrl.sort.direction == Direction.ASC else " ▼"
        col.button(f"{label}{arrow}", key=_k(NS, f"sort_{key.value}"), on_click=ctrl.set_sort, args=(key,))
    cols[-1].markdown("**Actions**")


def _row(ctrl: CollectionViewController, s: Student) -> None:
    cols = st.columns([w for _, _, w in COLUMNS] + [1, 1])
    cols[0].write(s.full_name)
    cols[1].write(s.email_id)
    cols[2].write(s.phone_number)
    cols[3].write(", ".join(s.class_names) or "-")
    if cols[4].button("Edit", key=_k(NS, f"edit_{s.id}"), disabled=not ctrl.can_mutate):
        navigate(Redirect(STUDENT_FORM, replace=False, params={"id": s.id}))
    cols[5].button(
        "Delete", key=_k(NS, f"delete_{s.id}"),
        disabled=not ctrl.can_mutate,
        on_click=ctrl.request_delete, args=(s.id,),
    )


def _confirm_panel(ctrl: CollectionViewController) -> None:
    target = ctrl.pending_row()
    if target is None:
        ctrl.cancel_delete()
        return
    with st.container(border=True):
        st.warning(f"Delete **{target.full_name}**? This cannot be undone.")
        c1, c2, _ = st.columns([1, 1, 4])
        if c1.button("Yes, delete", type="primary", key=_k(NS, "confirm_delete")):
            with st.spinner("Deleting..."):
                run(ctrl.confirm_delete())
            st.rerun()
        c2.button("Cancel", key=_k(NS, "cancel_delete"), on_click=ctrl.cancel_delete)


@require_session
def render(session: SessionContext):
    ctrl: CollectionViewController = mount(STUDENTS, NS, lambda: _controller(session))

    st.title("Students")
    if ctrl.state == ViewState.IDLE:
        with st.spinner("Loading..."):
            run(ctrl.fetch_all())

    if ctrl.state == ViewState.FAILED:
        st.error(f"Error: {ctrl.error}")
        if st.button("Retry", key=_k(NS, "retry")):
            with st.spinner("Loading..."):
                run(ctrl.fetch_all())
            st.rerun()
        return

    top_left, top_right = st.columns([3, 1])
    with top_left:
        st.text_input(
            "Search",
            key=_k(NS, "search"),
            placeholder="Search by name...",
            label_visibility="collapsed",
            on_change=lambda: ctrl.set_search_term(st.session_state[_k(NS, "search")]),
        )
    with top_right:
        if st.button("Add Student", type="primary", key=_k(NS, "add"), use_container_width=True):
            navigate(Redirect(STUDENT_FORM, replace=False, params={"id": None}))

    if ctrl.delete_error:
        st.error(ctrl.delete_error)
    if ctrl.pending_delete is not None:
        _confirm_panel(ctrl)

    rows = ctrl.visible_rows()
    if not ctrl.rows:
        st.info("No students yet. Use **Add Student** to create one.")
        return

    _header(ctrl)
    if not rows:
        st.caption("No students match your search.")
    for s in rows:
        _row(ctrl, s)

    st.download_button(
        label=f"Export {len(rows)} student(s) (CSV)",
        data=_df_to_csv(students_frame(rows)),
        file_name="students_export.csv",
        mime="text/csv",
        key=_k(NS, "export"),
    )
