# screens/classes/page.py
from __future__ import annotations

import logging
from typing import List

import pandas as pd
import streamlit as st

from core.collection import CollectionViewController, ViewState
from core.errors import ServiceError, error_message
from core.models import SchoolClass
from core.policy import CLASSES, require_session
from core.session import SessionContext
from core.sorting import CLASS_SORT_KEYS, Direction, SortKey
from screens.common import _handle_error, _k, get_service, mount, run

log = logging.getLogger(__name__)

NS = "classes"

SORT_LABELS = {SortKey.NAME: "Name", SortKey.DESCRIPTION: "Description", SortKey.ID: "ID"}


def _controller(session: SessionContext) -> CollectionViewController:
    service = get_service(session)
    return CollectionViewController(
        fetch=service.list_classes,
        display=lambda c: c.name,
        sort_keys=CLASS_SORT_KEYS,
        noun="classes",
        item="class",
    )


def classes_frame(rows: List[SchoolClass]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"Name": c.name, "Description": c.description} for c in rows],
        columns=["Name", "Description"],
    )


def _import_section(session: SessionContext, ctrl: CollectionViewController) -> None:
    upload_key = _k(NS, "upload")
    upload = st.file_uploader("Import classes (CSV)", type=["csv"], key=upload_key)
    if st.button("Upload CSV", key=_k(NS, "upload_btn"), disabled=upload is None):
        try:
            with st.spinner("Uploading..."):
                run(get_service(session).import_classes(upload.name, upload.getvalue()))
        except ServiceError as e:
            log.warning("Class import failed: %s", e)
            st.error(error_message(e, "Import failed"))
            return
        except Exception as e:
            _handle_error(e, "Import failed")
            return
        st.success("Classes imported successfully!")
        with st.spinner("Loading..."):
            run(ctrl.fetch_all())


@require_session
def render(session: SessionContext):
    ctrl: CollectionViewController = mount(CLASSES, NS, lambda: _controller(session))

    st.title("Classes")
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

    _import_section(session, ctrl)

    st.text_input(
        "Search",
        key=_k(NS, "search"),
        placeholder="Search by name...",
        label_visibility="collapsed",
        on_change=lambda: ctrl.set_search_term(st.session_state[_k(NS, "search")]),
    )
    st.caption("Sort by")
    sort_cols = st.columns(len(SORT_LABELS))
    for col, (key, label) in zip(sort_cols, SORT_LABELS.items()):
        arrow = ""
        if ctrl.sort is not None and ctrl.sort.key == key:
            arrow = " ▲" if ctrl.sort.direction == Direction.ASC else " ▼"
        col.button(f"{label}{arrow}", key=_k(NS, f"sort_{key.value}"),
                   on_click=ctrl.set_sort, args=(key,), use_container_width=True)

    rows = ctrl.visible_rows()
    if not ctrl.rows:
        st.info("No classes yet. Import a CSV to add some.")
        return
    st.dataframe(classes_frame(rows), use_container_width=True, hide_index=True)
