# core/collection.py
from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Awaitable, Callable, Iterable, List, Optional

from core.errors import ServiceError, error_message
from core.sorting import SortKey, SortState, sort_rows

log = logging.getLogger(__name__)


class ViewState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    FAILED = "failed"


class CollectionViewController:
    """Fetch, filter, sort and delete for one remote collection.

    The controller owns its rows; nothing else writes to them. Results that
    come back after ``unmount()``, or after a newer fetch was started, are
    dropped.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[Iterable[Any]]],
        display: Callable[[Any], str],
        sort_keys: Iterable[SortKey],
        delete: Optional[Callable[[int], Awaitable[Any]]] = None,
        noun: str = "records",
        item: str = "record",
    ):
        self._fetch = fetch
        self._delete = delete
        self._display = display
        self.sort_keys = tuple(sort_keys)
        self.noun = noun
        self.item = item

        self.state = ViewState.IDLE
        self.rows: List[Any] = []
        self.error: Optional[str] = None
        self.search_term = ""
        self.sort: Optional[SortState] = None

        self.pending_delete: Optional[int] = None
        self.deleting = False
        self.delete_error: Optional[str] = None

        self.mounted = True
        self._generation = 0

    # ── lifecycle ─────────────────────────────────────────────────────────
    @property
    def loading(self) -> bool:
        return self.state == ViewState.LOADING

    @property
    def can_delete(self) -> bool:
        return self._delete is not None

    @property
    def can_mutate(self) -> bool:
        return self.state == ViewState.READY and not self.deleting

    def unmount(self) -> None:
        self.mounted = False

    def _current(self, ticket: int) -> bool:
        return self.mounted and ticket == self._generation

    async def fetch_all(self) -> None:
        self._generation += 1
        ticket = self._generation
        self.state = ViewState.LOADING
        self.error = None
        try:
            rows = await self._fetch()
        except Exception as e:
            if not self._current(ticket):
                log.debug("Dropping stale %s fetch failure", self.noun)
                return
            # the view always leaves LOADING, whatever the fetch raised
            self.error = error_message(e, f"Failed to load {self.noun}")
            self.state = ViewState.FAILED
            if isinstance(e, ServiceError):
                log.warning("Loading %s failed: %s", self.noun, e)
            else:
                log.error("Loading %s failed", self.noun, exc_info=True)
            return
        if not self._current(ticket):
            log.debug("Dropping stale %s fetch result", self.noun)
            return
        self.rows = list(rows)
        self.state = ViewState.READY
        log.info("Loaded %d %s", len(self.rows), self.noun)

    # ── derived view ──────────────────────────────────────────────────────
    def set_search_term(self, text: Optional[str]) -> None:
        self.search_term = text or ""

    def set_sort(self, key: SortKey) -> SortState:
        if key not in self.sort_keys:
            raise ValueError(f"{key!r} is not sortable for {self.noun}")
        self.sort = self.sort.toggle(key) if self.sort else SortState(key)
        return self.sort

    def filtered_rows(self) -> List[Any]:
        needle = self.search_term.casefold()
        if not needle:
            return list(self.rows)
        return [r for r in self.rows if needle in self._display(r).casefold()]

    def visible_rows(self) -> List[Any]:
        """Rows to render: search first, then sort what is left."""
        rows = self.filtered_rows()
        if self.sort is None:
            return rows
        return sort_rows(rows, self.sort.key, self.sort.direction)

    # ── delete ────────────────────────────────────────────────────────────
    def request_delete(self, row_id: int) -> None:
        """First step of a delete: remember the row and wait for confirmation."""
        if not self.can_delete:
            raise RuntimeError(f"{self.noun} cannot be deleted from this view")
        if not self.can_mutate:
            raise RuntimeError(f"{self.noun} are not ready for changes")
        self.pending_delete = row_id

    def cancel_delete(self) -> None:
        self.pending_delete = None

    def pending_row(self) -> Optional[Any]:
        if self.pending_delete is None:
            return None
        return next((r for r in self.rows if r.id == self.pending_delete), None)

    async def confirm_delete(self) -> bool:
        """Issue the confirmed delete. The row leaves local state only once the service agrees."""
        row_id = self.pending_delete
        if row_id is None or not self.can_mutate:
            return False
        self.pending_delete = None
        self.deleting = True
        try:
            await self._delete(row_id)
        except ServiceError as e:
            if self.mounted:
                self.delete_error = error_message(e, f"Failed to delete {self.item}")
            log.warning("Deleting %s %s failed: %s", self.item, row_id, e)
            return False
        finally:
            self.deleting = False
        if not self.mounted:
            return False
        self.rows = [r for r in self.rows if r.id != row_id]
        self.delete_error = None
        log.info("Deleted %s %s", self.item, row_id)
        return True
