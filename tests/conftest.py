# tests/conftest.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

import pytest

from core.errors import ServiceError
from core.models import SchoolClass, Student

MATH = SchoolClass(1, "Math", "Algebra and geometry")
ART = SchoolClass(2, "Art", "Drawing")
BIOLOGY = SchoolClass(3, "biology", "Cells")


def make_student(id: int, first: str, last: str, classes=(), email: str = "", phone: str = "") -> Student:
    return Student(
        id=id,
        first_name=first,
        last_name=last,
        email_id=email or f"{first.lower()}@example.com",
        phone_number=phone or "5550000000",
        classes=tuple(classes),
    )


class FakeService:
    """In-memory stand-in for CollectionService that records every call."""

    def __init__(self, students=None, classes=None, records: Optional[Dict[int, Dict[str, Any]]] = None):
        self.students: List[Student] = list(students or [])
        self.classes: List[SchoolClass] = list(classes or [])
        self.records = dict(records or {})
        self.calls: List[tuple] = []
        self.failures: Dict[str, ServiceError] = {}
        self.token = "tok-123"

    def fail(self, op: str, message: Optional[str] = None) -> None:
        self.failures[op] = ServiceError(message, status_code=500)

    def _record(self, op: str, *args) -> None:
        self.calls.append((op, *args))
        if op in self.failures:
            raise self.failures[op]

    def ops(self) -> List[str]:
        return [c[0] for c in self.calls]

    async def login(self, username, password):
        self._record("login", username, password)
        return self.token

    async def list_students(self):
        self._record("list_students")
        return list(self.students)

    async def get_student(self, student_id):
        self._record("get_student", student_id)
        return self.records[student_id]

    async def create_student(self, draft):
        self._record("create_student", draft.to_payload())
        return {"id": 99, **draft.to_payload()}

    async def update_student(self, student_id, draft):
        self._record("update_student", student_id, draft.to_payload())
        return {"id": student_id, **draft.to_payload()}

    async def delete_student(self, student_id):
        self._record("delete_student", student_id)

    async def list_classes(self):
        self._record("list_classes")
        return list(self.classes)


@pytest.fixture
def students():
    return [
        make_student(1, "Bob", "Stone", [MATH, ART]),
        make_student(2, "alice", "Zed", [ART]),
        make_student(3, "Carol", "bobbins"),
        make_student(4, "bob", "stone", [BIOLOGY]),
    ]


@pytest.fixture
def service(students):
    return FakeService(students=students, classes=[MATH, ART, BIOLOGY])
