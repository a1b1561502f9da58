# core/api.py
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional, TypeVar

import httpx

from core.errors import UNEXPECTED_RESPONSE, ServiceError, message_from_payload
from core.models import SchoolClass, Student, StudentDraft
from core.session import SessionContext
from core.settings import Settings

log = logging.getLogger(__name__)

T = TypeVar("T")


class CollectionService:
    """HTTP client for the remote students/classes service.

    Every call opens a short-lived ``httpx.AsyncClient`` so the service can be
    driven from a fresh event loop on each Streamlit rerun. The bearer token is
    read from the session at call time.
    """

    def __init__(
        self,
        base_url: str,
        session: Optional[SessionContext] = None,
        timeout: float = 15.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.session = session
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(cls, settings: Settings, session: SessionContext) -> "CollectionService":
        return cls(settings.api.base_url, session=session, timeout=settings.api.timeout)

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        token = self.session.token if self.session is not None else None
        if token:
            headers["Authorization"] = f"Bearer {token}"
        return headers

    async def _request(self, method: str, path: str, **kwargs) -> Any:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers=self._headers(),
                transport=self._transport,
            ) as client:
                resp = await client.request(method, path, **kwargs)
        except httpx.HTTPError as e:
            log.warning("%s %s failed: %s", method, path, e)
            raise ServiceError(None) from e

        if resp.is_error:
            raise ServiceError(_failure_message(resp), status_code=resp.status_code)
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError:
            return resp.text

    # ── auth ──────────────────────────────────────────────────────────────
    async def login(self, username: str, password: str) -> str:
        data = await self._request("POST", "/auth/login", json={"username": username, "password": password})
        token = data.get("token") if isinstance(data, dict) else None
        if not token:
            raise ServiceError("Login response did not include a token")
        return str(token)

    # ── students ──────────────────────────────────────────────────────────
    async def list_students(self) -> List[Student]:
        data = await self._request("GET", "/students")
        return _parse_rows(data, Student.from_payload, "students")

    async def get_student(self, student_id: int) -> Dict[str, Any]:
        """Raw record: callers reconcile the association shape themselves."""
        data = await self._request("GET", f"/students/{student_id}")
        if not isinstance(data, dict):
            raise ServiceError(UNEXPECTED_RESPONSE)
        return data

    async def create_student(self, draft: StudentDraft) -> Any:
        return await self._request("POST", "/students", json=draft.to_payload())

    async def update_student(self, student_id: int, draft: StudentDraft) -> Any:
        return await self._request("PUT", f"/students/{student_id}", json=draft.to_payload())

    async def delete_student(self, student_id: int) -> None:
        await self._request("DELETE", f"/students/{student_id}")

    # ── classes ───────────────────────────────────────────────────────────
    async def list_classes(self) -> List[SchoolClass]:
        data = await self._request("GET", "/classes")
        return _parse_rows(data, SchoolClass.from_payload, "classes")

    async def import_classes(self, filename: str, content: bytes) -> Any:
        files = {"file": (filename, content, "text/csv")}
        return await self._request("POST", "/classes/import", files=files)


def _failure_message(resp: httpx.Response) -> Optional[str]:
    try:
        payload = resp.json()
    except ValueError:
        payload = resp.text
    return message_from_payload(payload)


def _parse_rows(data: Any, parse: Callable[[Dict[str, Any]], T], what: str) -> List[T]:
    if data is None:
        return []
    if not isinstance(data, list):
        log.warning("Expected a list of %s, got %s", what, type(data).__name__)
        raise ServiceError(UNEXPECTED_RESPONSE)
    try:
        return [parse(row) for row in data]
    except (KeyError, TypeError, ValueError, AttributeError) as e:
        log.warning("Malformed %s payload: %r", what, e)
        raise ServiceError(UNEXPECTED_RESPONSE) from e
